"""Request facade: deadline, retries, normalization and notifications."""

import asyncio
import time
from types import TracebackType
from typing import Any

import structlog

from src.net.config import NetConfig
from src.net.constants import COMPONENT_NET, HTTP_STATUS_UNAUTHORIZED
from src.net.errors import classify_outcome
from src.net.metrics import NetMetrics
from src.net.models import RequestDescriptor, RequestOptions, RequestState
from src.net.normalizer import DecodeHook, NormalizedResult, ResponseNormalizer
from src.net.notify import Notifier, NotifyCallback, NotifyReason
from src.net.race import cancel_deadline, race_outcome
from src.net.redact import redact_headers, redact_url_credentials
from src.net.transport import HttpxTransport, Transport, TransportResponse


logger = structlog.get_logger()


class NetClient:
    """Orchestrates requests over a transport primitive.

    Each call gets:
    - A hard deadline (``config.timeouts.http`` seconds)
    - Bounded retries on transport failure (never on HTTP status)
    - A normalized result: data, envelope, or a raised NetError
    - Lifecycle notifications (clear, start, stop, feedback, logout, login)

    Example:
        async with NetClient(NetConfig(prefix="https://api.example.com")) as net:
            items = await net.get("items")
    """

    def __init__(
        self,
        config: NetConfig | None = None,
        notify: NotifyCallback | None = None,
        transport: Transport | None = None,
        decode_hook: DecodeHook | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Network configuration; defaults apply when None.
            notify: Notification callback ``(reason, args)``.
            transport: Transport primitive; an httpx transport when None.
            decode_hook: ``object_hook`` used when parsing JSON bodies.
        """
        self._config = config or NetConfig()
        self._owned_transport: HttpxTransport | None = None
        if transport is None:
            self._owned_transport = HttpxTransport(self._config)
            transport = self._owned_transport
        self._transport = transport
        self._notifier = Notifier(notify)
        self._normalizer = ResponseNormalizer(self._notifier, decode_hook)
        self._metrics = NetMetrics.get_instance()
        self._background: set[asyncio.Task[TransportResponse | None]] = set()
        self._log = logger.bind(component=COMPONENT_NET)

    @property
    def config(self) -> NetConfig:
        """Get the client configuration."""
        return self._config

    async def __aenter__(self) -> "NetClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if self._owned_transport is not None:
            await self._owned_transport.aclose()

    def resolve_url(self, url: str, options: RequestOptions) -> str:
        """Resolve a request URL.

        Absolute URLs pass through. Relative URLs are joined to the explicit
        ``base`` option, else the configured prefix (unless suppressed),
        else the configured origin.

        Args:
            url: Absolute or relative URL.
            options: Request options.

        Returns:
            Absolute URL.
        """
        if url.startswith("http"):
            return url
        if options.base:
            base = options.base
        elif not options.skip_prefix and self._config.prefix:
            base = self._config.prefix
        else:
            base = self._config.origin
        return base.rstrip("/") + "/" + url.lstrip("/")

    async def fetch(
        self,
        url: str,
        options: RequestOptions | None = None,
        **overrides: Any,
    ) -> Any:
        """Issue a request.

        Args:
            url: Absolute or relative URL.
            options: Request options.
            **overrides: Option fields applied over ``options``.

        Returns:
            The data payload, or the full envelope when ``raw`` is set.

        Raises:
            NetError: If the request failed and ``throw`` is not False.
        """
        options = _merge_options(options, overrides)
        start_time_ns = time.perf_counter_ns()

        if options.clear:
            self._notifier.emit(NotifyReason.CLEAR)

        state = RequestState(url=self.resolve_url(url, options))
        log = self._log.bind(
            url=redact_url_credentials(state.url),
            method=RequestDescriptor.from_options(options).method,
        )

        if options.progress:
            self._notifier.emit(NotifyReason.START)
        if options.log:
            log.info(
                "fetch_request",
                headers=redact_headers(options.headers),
                retries=options.retries,
                timeout_seconds=self._config.timeout_seconds,
            )

        try:
            outcome = await race_outcome(
                self._transport,
                state,
                options,
                self._config.timeout_seconds,
                log,
                self._background,
            )
            result = await self._normalizer.normalize(state.url, outcome, options, log)
        finally:
            cancel_deadline(state)

        if options.progress:
            self._notifier.emit(NotifyReason.STOP)

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        self._record(result, outcome, duration_ms)

        if options.log:
            log.info(
                "fetch_response",
                status=result.status,
                error=result.envelope.error,
                message=result.envelope.message,
                duration_ms=round(duration_ms, 2),
            )

        if result.error is not None:
            if result.error.status == HTTP_STATUS_UNAUTHORIZED:
                self._notifier.emit(NotifyReason.LOGIN)
            raise result.error

        return result.value(options)

    async def get(
        self,
        url: str,
        options: RequestOptions | None = None,
        **overrides: Any,
    ) -> Any:
        """Issue a GET request. See ``fetch``."""
        overrides["method"] = "GET"
        return await self.fetch(url, options, **overrides)

    async def post(
        self,
        url: str,
        options: RequestOptions | None = None,
        **overrides: Any,
    ) -> Any:
        """Issue a POST request. See ``fetch``."""
        overrides["method"] = "POST"
        return await self.fetch(url, options, **overrides)

    def _record(
        self,
        result: NormalizedResult,
        outcome: object,
        duration_ms: float,
    ) -> None:
        self._metrics.record_request(result.status, duration_ms)
        if result.failed:
            self._metrics.record_failure(classify_outcome(result.status, outcome))


def _merge_options(
    options: RequestOptions | None, overrides: dict[str, Any]
) -> RequestOptions:
    """Apply keyword overrides without touching the caller's options."""
    if options is None:
        return RequestOptions(**overrides)
    if not overrides:
        return options
    return RequestOptions.model_validate(
        {**options.model_dump(exclude_unset=True), **overrides}
    )
