"""Configuration models for the request orchestration layer."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.net.constants import DEFAULT_HTTP_TIMEOUT_SECONDS, DEFAULT_ORIGIN
from src.settings.app import NetSettings, get_settings


class TimeoutConfig(BaseModel):
    """Timeouts, in seconds."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    http: Annotated[float, Field(gt=0.0, le=3600.0)] = DEFAULT_HTTP_TIMEOUT_SECONDS


class NetConfig(BaseModel):
    """Configuration shared by every call made through one client.

    Injected into ``NetClient``; there is no process-wide mutable copy.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    prefix: str = Field(default="", description="Prefix for relative URLs")
    origin: str = Field(
        default=DEFAULT_ORIGIN,
        description="Fallback base when neither base nor prefix applies",
    )
    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        "net-orchestrator/1.0"
    )

    @field_validator("origin")
    @classmethod
    def validate_origin(cls, v: str) -> str:
        """Ensure the origin is an absolute http(s) URL."""
        if not v.startswith(("http://", "https://")):
            msg = f"Origin must be an absolute http(s) URL, got '{v}'"
            raise ValueError(msg)
        return v

    @classmethod
    def from_settings(cls, settings: NetSettings | None = None) -> "NetConfig":
        """Build configuration from environment settings.

        Args:
            settings: Settings instance; read from the environment when None.

        Returns:
            Network configuration.
        """
        settings = settings or get_settings()
        return cls(
            timeouts=TimeoutConfig(http=settings.http_timeout),
            prefix=settings.prefix,
            origin=settings.origin,
        )

    @property
    def timeout_seconds(self) -> float:
        """HTTP deadline in seconds."""
        return self.timeouts.http
