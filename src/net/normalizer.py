"""Turns a raw outcome into a normalized result envelope."""

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import structlog

from src.net.constants import (
    HTTP_STATUS_NO_RESPONSE,
    HTTP_STATUS_OK,
    HTTP_STATUS_UNAUTHORIZED,
    JSON_CONTENT_TYPE,
    MESSAGE_COMMUNICATION_FAILED,
    SEVERITY_ERROR,
)
from src.net.errors import NetError, classify_outcome
from src.net.models import (
    RequestOptions,
    ResultEnvelope,
    TimeoutOutcome,
    annotate_data,
)
from src.net.notify import Notifier, NotifyReason
from src.net.race import RawOutcome


DecodeHook = Callable[[dict[str, Any]], Any]


@dataclass
class NormalizedResult:
    """Outcome of normalization.

    Attributes:
        envelope: Normalized result envelope.
        status: Resolved HTTP status (444 when there was no response).
        error: Error to raise, when the request failed and throwing is enabled.
    """

    envelope: ResultEnvelope
    status: int
    error: NetError | None = None

    @property
    def failed(self) -> bool:
        """Check if the envelope is flagged as an error."""
        return bool(self.envelope.error)

    def value(self, options: RequestOptions) -> Any:
        """Get what the caller receives when no error is raised.

        Args:
            options: Request options (``raw`` selects the full envelope).

        Returns:
            The envelope when ``raw``, otherwise the annotated data payload.
        """
        if options.raw:
            return self.envelope
        data = self.envelope.data
        if data:
            return annotate_data(
                data,
                schema=self.envelope.extra("schema"),
                count=self.envelope.extra("count"),
            )
        return data


class ResponseNormalizer:
    """Normalizes raw outcomes and classifies failures.

    Emits the ``logout`` and ``feedback`` notifications that depend on the
    response. Never raises for request failures; the caller decides whether
    to raise the returned error.
    """

    def __init__(
        self,
        notifier: Notifier,
        decode_hook: DecodeHook | None = None,
    ) -> None:
        """Initialize the normalizer.

        Args:
            notifier: Notification emitter.
            decode_hook: ``object_hook`` passed to ``json.loads``.
        """
        self._notifier = notifier
        self._decode_hook = decode_hook

    async def normalize(
        self,
        url: str,
        outcome: RawOutcome,
        options: RequestOptions,
        log: structlog.stdlib.BoundLogger,
    ) -> NormalizedResult:
        """Normalize a raw outcome.

        Args:
            url: Resolved request URL.
            outcome: Response, timeout marker, or None.
            options: Request options.
            log: Bound logger.

        Returns:
            NormalizedResult with envelope, status and optional error.
        """
        if outcome is None:
            status = HTTP_STATUS_NO_RESPONSE
            envelope = ResultEnvelope(url=url)
        elif isinstance(outcome, TimeoutOutcome):
            status = outcome.status
            envelope = ResultEnvelope(
                url=url,
                error=outcome.error,
                message=outcome.message,
                severity=outcome.severity,
            )
        else:
            status = outcome.status
            envelope = await self._read_body(url, outcome, options, log)
            envelope.response = outcome

        if status == HTTP_STATUS_UNAUTHORIZED:
            if not options.nologout:
                self._notifier.emit(NotifyReason.LOGOUT, envelope)
        elif status != HTTP_STATUS_OK and not isinstance(outcome, TimeoutOutcome):
            envelope.error = True
            envelope.message = MESSAGE_COMMUNICATION_FAILED
            envelope.severity = SEVERITY_ERROR

        if options.feedback is not False and (
            status != HTTP_STATUS_OK or envelope.error
        ):
            self._notifier.emit(NotifyReason.FEEDBACK, envelope)

        if envelope.error and options.log is not False:
            envelope.message = envelope.message or _feedback_error(envelope)
            if status != HTTP_STATUS_UNAUTHORIZED:
                log.error("request_failed", status=status, message=envelope.message)

        error: NetError | None = None
        if envelope.error and options.throw is not False:
            error = NetError(
                envelope.message,
                envelope=envelope,
                status=status,
                error_class=classify_outcome(status, outcome),
            )

        return NormalizedResult(envelope=envelope, status=status, error=error)

    async def _read_body(
        self,
        url: str,
        response: Any,
        options: RequestOptions,
        log: structlog.stdlib.BoundLogger,
    ) -> ResultEnvelope:
        """Read the body and merge it into a new envelope.

        A JSON object body becomes the envelope's fields. Any other JSON value
        becomes ``data``. Undecodable JSON leaves ``data`` unset.
        """
        text = await response.text()
        content_type = response.headers.get("Content-Type") or ""

        is_json = content_type.startswith(JSON_CONTENT_TYPE)
        if not (text and is_json and not options.noparse):
            return ResultEnvelope(url=url, data=text)

        try:
            parsed = json.loads(text, object_hook=self._decode_hook)
        except (ValueError, TypeError, RecursionError) as e:
            log.warning(
                "json_decode_failed",
                error=str(e),
                body_preview=text[:200],
            )
            return ResultEnvelope(url=url)

        if isinstance(parsed, dict):
            return ResultEnvelope(url=url, **_envelope_fields(parsed))
        return ResultEnvelope(url=url, data=parsed)


def _envelope_fields(body: dict[str, Any]) -> dict[str, Any]:
    """Coerce body keys that collide with typed envelope fields."""
    fields = {
        str(k): v for k, v in body.items() if k not in ("url", "response")
    }
    if fields.get("error") is not None:
        fields["error"] = bool(fields["error"])
    for key in ("message", "severity"):
        if fields.get(key) is not None:
            fields[key] = str(fields[key])
    return fields


def _feedback_error(envelope: ResultEnvelope) -> str | None:
    """Get ``feedback.error`` from a body that reported one."""
    feedback = envelope.extra("feedback")
    if isinstance(feedback, dict):
        error = feedback.get("error")
        return str(error) if error else None
    return None
