"""Error types for the request orchestration layer."""

from enum import Enum

from src.net.constants import (
    HTTP_STATUS_NO_RESPONSE,
    HTTP_STATUS_OK,
    HTTP_STATUS_UNAUTHORIZED,
    MESSAGE_OPERATION_FAILED,
)
from src.net.models import ResultEnvelope, TimeoutOutcome


class NetErrorClass(str, Enum):
    """Classification of failed requests.

    - TIMEOUT: Deadline elapsed before any response
    - TRANSPORT_FAILURE: No response after exhausting retries
    - AUTH: 401 Unauthorized
    - HTTP_STATUS: Any other non-200 status
    - APPLICATION: 200 response whose body reported an error
    """

    TIMEOUT = "TIMEOUT"
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"
    AUTH = "AUTH"
    HTTP_STATUS = "HTTP_STATUS"
    APPLICATION = "APPLICATION"


def classify_outcome(status: int, outcome: object) -> NetErrorClass:
    """Classify a failed request from its resolved status.

    Args:
        status: Resolved HTTP status (444 when no response).
        outcome: The raw outcome that produced the status.

    Returns:
        Error classification.
    """
    if isinstance(outcome, TimeoutOutcome):
        return NetErrorClass.TIMEOUT
    if status == HTTP_STATUS_NO_RESPONSE and outcome is None:
        return NetErrorClass.TRANSPORT_FAILURE
    if status == HTTP_STATUS_UNAUTHORIZED:
        return NetErrorClass.AUTH
    if status != HTTP_STATUS_OK:
        return NetErrorClass.HTTP_STATUS
    return NetErrorClass.APPLICATION


class NetError(Exception):
    """Raised when a request fails and the caller did not pass ``throw=False``.

    Carries the full normalized envelope as payload.
    """

    def __init__(
        self,
        message: str | None,
        envelope: ResultEnvelope,
        status: int,
        error_class: NetErrorClass,
    ) -> None:
        """Initialize the error.

        Args:
            message: Error message; a generic message is used when empty.
            envelope: Normalized result of the failed request.
            status: Resolved HTTP status.
            error_class: Classification of the failure.
        """
        self.message = message or MESSAGE_OPERATION_FAILED
        self.envelope = envelope
        self.status = status
        self.error_class = error_class
        super().__init__(self.message)

    @property
    def url(self) -> str:
        """URL of the failed request."""
        return self.envelope.url
