"""Deadline timer, retry driver and the race between them.

The retry driver and the deadline timer run concurrently for each call.
Whichever produces a value first decides the call's raw outcome. The
timer wins ties. A retry driver that loses keeps running in the background
and checks ``RequestState.timed_out`` so a late reply never resolves the
call a second time.
"""

import asyncio

import structlog

from src.net.metrics import NetMetrics
from src.net.models import (
    RequestDescriptor,
    RequestOptions,
    RequestState,
    TimeoutOutcome,
)
from src.net.transport import Transport, TransportResponse


RawOutcome = TransportResponse | TimeoutOutcome | None


class DeadlineTimer:
    """Resolves to a synthetic timeout outcome after a delay."""

    def __init__(self, state: RequestState, delay_seconds: float) -> None:
        """Initialize the timer.

        Args:
            state: Per-call state; receives the handle and the fired flag.
            delay_seconds: Delay before the deadline fires.
        """
        self._state = state
        self._delay = delay_seconds
        self._future: asyncio.Future[TimeoutOutcome] | None = None

    def start(self) -> "asyncio.Future[TimeoutOutcome]":
        """Schedule the deadline on the running loop.

        Returns:
            Future resolved with TimeoutOutcome when the deadline fires.
        """
        loop = asyncio.get_running_loop()
        self._future = loop.create_future()
        self._state.timeout_handle = loop.call_later(self._delay, self._fire)
        return self._future

    def _fire(self) -> None:
        self._state.timed_out = True
        if self._future is not None and not self._future.done():
            self._future.set_result(TimeoutOutcome())

    def cancel(self) -> None:
        """Cancel the pending deadline. Safe to call repeatedly or after firing."""
        cancel_deadline(self._state)
        if self._future is not None and not self._future.done():
            self._future.cancel()


def cancel_deadline(state: RequestState) -> None:
    """Clear the scheduled deadline callback of a call, if any.

    Args:
        state: Per-call state holding the timer handle.
    """
    if state.timeout_handle is not None:
        state.timeout_handle.cancel()


async def fetch_with_retry(
    transport: Transport,
    state: RequestState,
    options: RequestOptions,
    log: structlog.stdlib.BoundLogger,
) -> TransportResponse | None:
    """Attempt the transport until it returns a response.

    Any returned response ends the loop, whatever its status. Raised
    exceptions and None returns count as transport failures and are retried
    while attempts remain, unless the deadline has already fired.

    Args:
        transport: Transport primitive.
        state: Per-call state.
        options: Request options (method, body, retries).
        log: Bound logger.

    Returns:
        The first response, or None when every attempt failed or the
        deadline fired during a failing attempt.
    """
    metrics = NetMetrics.get_instance()
    descriptor = RequestDescriptor.from_options(options)
    attempts = options.attempts

    for attempt in range(attempts):
        if attempt > 0:
            metrics.record_retry()
            log.warning("retry_attempt", attempt=attempt, max_attempts=attempts)

        error: str | None = None
        try:
            response = await transport(state.url, descriptor)
        except Exception as e:  # noqa: BLE001
            response = None
            error = f"{type(e).__name__}: {e}"

        if response is not None:
            return response

        if state.timed_out:
            # The deadline already resolved this call
            log.debug("retry_abandoned", attempt=attempt)
            return None

        log.info(
            "transport_attempt_failed",
            attempt=attempt,
            error=error or "No response",
        )

    return None


async def race_outcome(
    transport: Transport,
    state: RequestState,
    options: RequestOptions,
    timeout_seconds: float,
    log: structlog.stdlib.BoundLogger,
    background: set["asyncio.Task[TransportResponse | None]"],
) -> RawOutcome:
    """Race the retry driver against the deadline timer.

    Args:
        transport: Transport primitive.
        state: Per-call state.
        options: Request options.
        timeout_seconds: Deadline in seconds.
        log: Bound logger.
        background: Holds retry tasks that lost the race until they finish.

    Returns:
        TimeoutOutcome if the deadline fired first, otherwise the retry
        driver's response (None if it never got one).
    """
    timer = DeadlineTimer(state, timeout_seconds)
    deadline = timer.start()
    attempt = asyncio.ensure_future(fetch_with_retry(transport, state, options, log))

    try:
        await asyncio.wait({attempt, deadline}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        attempt.cancel()
        raise
    finally:
        timed_out = deadline.done() and not deadline.cancelled()
        timer.cancel()

    if timed_out:
        if not attempt.done():
            background.add(attempt)
            attempt.add_done_callback(background.discard)
        log.warning("request_timed_out", timeout_seconds=timeout_seconds)
        return deadline.result()

    return attempt.result()
