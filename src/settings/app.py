"""Application settings powered by Pydantic BaseSettings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class NetSettings(BaseSettings):
    """Environment configuration for the request orchestration layer."""

    model_config = SettingsConfigDict(
        env_prefix="NET_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    http_timeout: float = Field(default=30.0, gt=0.0)
    prefix: str = ""
    origin: str = "http://localhost"
    json_logs: bool = True


def get_settings() -> NetSettings:
    """Get a settings instance."""
    return NetSettings()
