"""Lifecycle notifications delivered to a caller-supplied callback."""

from collections.abc import Callable
from enum import Enum
from typing import Any

import structlog

from src.net.constants import COMPONENT_NET
from src.net.metrics import NetMetrics


logger = structlog.get_logger()


class NotifyReason(str, Enum):
    """Lifecycle points at which the callback fires."""

    CLEAR = "clear"
    START = "start"
    STOP = "stop"
    FEEDBACK = "feedback"
    LOGOUT = "logout"
    LOGIN = "login"


NotifyCallback = Callable[[str, Any], object]


class Notifier:
    """Fires the notification callback, isolating the caller from its failures."""

    def __init__(self, callback: NotifyCallback | None = None) -> None:
        """Initialize the notifier.

        Args:
            callback: Called as ``callback(reason, args)``; None disables.
        """
        self._callback = callback
        self._metrics = NetMetrics.get_instance()
        self._log = logger.bind(component=COMPONENT_NET)

    @property
    def enabled(self) -> bool:
        """Check if a callback is installed."""
        return self._callback is not None

    def emit(self, reason: NotifyReason, args: Any = None) -> None:
        """Invoke the callback.

        Exceptions raised by the callback are logged and counted, never
        propagated.

        Args:
            reason: Lifecycle point.
            args: Result envelope for feedback/logout, None otherwise.
        """
        if self._callback is None:
            return
        try:
            self._callback(reason.value, args)
        except Exception:  # noqa: BLE001
            self._metrics.record_notify_failure()
            self._log.warning(
                "notify_callback_failed",
                reason=reason.value,
                exc_info=True,
            )
