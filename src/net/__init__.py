"""Request orchestration over an HTTP transport primitive.

This module makes single HTTP requests safe and predictable with:
- A hard wall-clock deadline per call
- Bounded retries on transport failure
- Uniform normalization of status, JSON and plain bodies
- Lifecycle notifications (clear, start, stop, feedback, logout, login)
"""

from src.net.client import NetClient
from src.net.config import NetConfig, TimeoutConfig
from src.net.constants import (
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    HTTP_STATUS_NO_RESPONSE,
    HTTP_STATUS_OK,
    HTTP_STATUS_UNAUTHORIZED,
    MESSAGE_COMMUNICATION_FAILED,
    MESSAGE_OPERATION_FAILED,
    MESSAGE_TIMED_OUT,
)
from src.net.errors import NetError, NetErrorClass
from src.net.metrics import NetMetrics
from src.net.models import (
    RequestDescriptor,
    RequestOptions,
    RequestState,
    ResultEnvelope,
    TimeoutOutcome,
)
from src.net.normalizer import NormalizedResult, ResponseNormalizer
from src.net.notify import Notifier, NotifyReason
from src.net.race import DeadlineTimer, fetch_with_retry, race_outcome
from src.net.redact import redact_headers, redact_url_credentials
from src.net.transport import HttpxResponse, HttpxTransport, Transport


__all__ = [
    # Client
    "NetClient",
    # Config
    "NetConfig",
    "TimeoutConfig",
    # Models
    "RequestDescriptor",
    "RequestOptions",
    "RequestState",
    "ResultEnvelope",
    "TimeoutOutcome",
    "NormalizedResult",
    # Errors
    "NetError",
    "NetErrorClass",
    # Orchestration
    "DeadlineTimer",
    "fetch_with_retry",
    "race_outcome",
    "ResponseNormalizer",
    "Notifier",
    "NotifyReason",
    # Transport
    "Transport",
    "HttpxTransport",
    "HttpxResponse",
    # Constants
    "DEFAULT_HTTP_TIMEOUT_SECONDS",
    "HTTP_STATUS_OK",
    "HTTP_STATUS_UNAUTHORIZED",
    "HTTP_STATUS_NO_RESPONSE",
    "MESSAGE_TIMED_OUT",
    "MESSAGE_COMMUNICATION_FAILED",
    "MESSAGE_OPERATION_FAILED",
    # Metrics
    "NetMetrics",
    # Redaction
    "redact_headers",
    "redact_url_credentials",
]
