"""Transport primitive: one HTTP request in, one response (or failure) out."""

from typing import Protocol

import httpx
import structlog

from src.net.config import NetConfig
from src.net.constants import COMPONENT_NET
from src.net.models import RequestDescriptor


logger = structlog.get_logger()


class HeadersLike(Protocol):
    """Case-insensitive header lookup."""

    def get(self, name: str, default: str | None = None) -> str | None:
        """Return a header value, or the default when absent."""
        ...


class TransportResponse(Protocol):
    """Response returned by a transport primitive."""

    @property
    def status(self) -> int:
        """HTTP status code."""
        ...

    @property
    def headers(self) -> HeadersLike:
        """Response headers."""
        ...

    async def text(self) -> str:
        """Read the response body as text."""
        ...


class Transport(Protocol):
    """Issues a single HTTP request.

    Failure is signalled by raising, or by returning None.
    """

    async def __call__(
        self, url: str, descriptor: RequestDescriptor
    ) -> TransportResponse | None:
        """Issue one request."""
        ...


class HttpxResponse:
    """Adapts an ``httpx.Response`` to the TransportResponse protocol."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    @property
    def status(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def raw(self) -> httpx.Response:
        """Underlying httpx response."""
        return self._response

    async def text(self) -> str:
        await self._response.aread()
        return self._response.text

    def __repr__(self) -> str:
        return f"HttpxResponse(status={self.status})"


class HttpxTransport:
    """Default transport backed by ``httpx.AsyncClient``.

    Redirects are followed. The ``mode`` and ``credentials`` fields of the
    descriptor have no httpx equivalent and are ignored. An owned client uses
    the configured HTTP timeout so an attempt that lost the race still ends.
    """

    def __init__(
        self,
        config: NetConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            config: Network configuration (user agent).
            client: Existing client to use; one is created and owned otherwise.
        """
        self._config = config or NetConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            follow_redirects=True,
            timeout=httpx.Timeout(self._config.timeout_seconds),
            headers={"User-Agent": self._config.user_agent},
        )
        self._log = logger.bind(component=COMPONENT_NET)

    async def __call__(
        self, url: str, descriptor: RequestDescriptor
    ) -> HttpxResponse:
        """Issue one request.

        Args:
            url: Absolute request URL.
            descriptor: Method, body and headers.

        Returns:
            Adapted response for any status code.

        Raises:
            httpx.HTTPError: On connection or protocol failure.
        """
        kwargs: dict[str, object] = {"headers": descriptor.headers}
        body = descriptor.body
        if isinstance(body, (dict, list)):
            kwargs["json"] = body
        elif isinstance(body, (str, bytes)):
            kwargs["content"] = body
        elif body is not None:
            kwargs["content"] = str(body)

        response = await self._client.request(descriptor.method, url, **kwargs)
        return HttpxResponse(response)

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()
