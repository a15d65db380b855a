"""Application settings loading."""

from .app import NetSettings, get_settings


__all__ = ["NetSettings", "get_settings"]
