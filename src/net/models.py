"""Data models for the request orchestration layer."""

import asyncio
from dataclasses import dataclass
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field

from src.net.constants import (
    DEFAULT_CREDENTIALS,
    DEFAULT_METHOD,
    DEFAULT_MODE,
    DEFAULT_RETRIES,
    HTTP_STATUS_NO_RESPONSE,
    MESSAGE_TIMED_OUT,
    SEVERITY_ERROR,
)


class RequestOptions(BaseModel):
    """Per-call request options.

    Immutable. Overrides are applied with ``model_copy(update=...)`` so the
    caller's instance is never modified.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    method: str | None = Field(default=None, description="HTTP method")
    body: Any = Field(default=None, description="Request body")
    headers: dict[str, str] = Field(default_factory=dict)
    mode: str | None = Field(default=DEFAULT_MODE, description="Request mode")
    retries: Annotated[int, Field(ge=0)] = DEFAULT_RETRIES
    base: str | None = Field(default=None, description="Explicit URL base")

    clear: bool = Field(default=False, description="Clear prior feedback")
    feedback: bool | None = Field(
        default=None, description="If False, never emit feedback"
    )
    log: bool | None = Field(
        default=None,
        description="True traces request and response, False silences error logs",
    )
    progress: bool = Field(default=False, description="Emit start/stop")
    raw: bool = Field(default=False, description="Return the full envelope")
    throw: bool = Field(default=True, description="Raise NetError on errors")
    noparse: bool = Field(default=False, description="Do not parse JSON bodies")
    nologout: bool = Field(default=False, description="Do not logout on 401")
    noprefix: bool = Field(default=False, description="Do not apply the prefix")
    nobase: bool = Field(default=False, description="Alias of noprefix")

    @property
    def attempts(self) -> int:
        """Number of transport attempts (zero retries still means one try)."""
        return self.retries or DEFAULT_RETRIES

    @property
    def skip_prefix(self) -> bool:
        """Check if the configured prefix is suppressed."""
        return self.noprefix or self.nobase


class RequestDescriptor(BaseModel):
    """Request description handed to the transport primitive."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    method: str = DEFAULT_METHOD
    body: Any = None
    headers: dict[str, str] = Field(default_factory=dict)
    mode: str = DEFAULT_MODE
    credentials: str = DEFAULT_CREDENTIALS

    @classmethod
    def from_options(cls, options: RequestOptions) -> "RequestDescriptor":
        """Build a descriptor, filling in method and mode defaults.

        Args:
            options: Per-call request options.

        Returns:
            Descriptor with credentials forced to ``include``.
        """
        return cls(
            method=(options.method or DEFAULT_METHOD).upper(),
            body=options.body,
            headers=dict(options.headers),
            mode=options.mode or DEFAULT_MODE,
            credentials=DEFAULT_CREDENTIALS,
        )


@dataclass
class RequestState:
    """Mutable state of a single in-flight call.

    Attributes:
        url: Resolved request URL.
        timed_out: Set once by the deadline timer when it fires.
        timeout_handle: Scheduled timer callback, cancelled after the race.
    """

    url: str
    timed_out: bool = False
    timeout_handle: asyncio.TimerHandle | None = None


@dataclass(frozen=True)
class TimeoutOutcome:
    """Synthetic outcome produced when the deadline elapses."""

    status: int = HTTP_STATUS_NO_RESPONSE
    error: bool = True
    message: str = MESSAGE_TIMED_OUT
    severity: str = SEVERITY_ERROR


class ResultEnvelope(BaseModel):
    """Normalized result of one request.

    Keys of a JSON object body are merged into the envelope, so fields such
    as ``schema``, ``count`` or ``feedback`` are reachable via ``extra()``.
    """

    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True)

    url: str
    data: Any = None
    error: bool | None = None
    message: str | None = None
    severity: str | None = None
    response: Any = Field(default=None, exclude=True)

    def extra(self, key: str) -> Any:
        """Get a body field that is not part of the declared envelope.

        Args:
            key: Field name from the JSON body.

        Returns:
            The value, or None if absent.
        """
        return (self.model_extra or {}).get(key)


class AnnotatedList(list):  # type: ignore[type-arg]
    """List payload carrying ``_schema_`` / ``_count_`` metadata."""

    _schema_: Any = None
    _count_: Any = None


class AnnotatedDict(dict):  # type: ignore[type-arg]
    """Dict payload carrying ``_schema_`` / ``_count_`` metadata."""

    _schema_: Any = None
    _count_: Any = None


class AnnotatedStr(str):
    """String payload carrying ``_schema_`` / ``_count_`` metadata."""

    _schema_: Any = None
    _count_: Any = None


_ANNOTATABLE: dict[type, type] = {
    list: AnnotatedList,
    dict: AnnotatedDict,
    str: AnnotatedStr,
}


def annotate_data(data: Any, schema: Any, count: Any) -> Any:
    """Attach schema/count metadata to a payload without changing its contents.

    Args:
        data: Parsed payload.
        schema: Schema value from the envelope, if any.
        count: Count value from the envelope, if any.

    Returns:
        An annotated copy for list/dict/str payloads, the payload otherwise.
    """
    if not schema and not count:
        return data
    wrapper = _ANNOTATABLE.get(type(data))
    if wrapper is None:
        return data
    annotated = wrapper(data)
    if schema:
        annotated._schema_ = schema
    if count:
        annotated._count_ = count
    return annotated
