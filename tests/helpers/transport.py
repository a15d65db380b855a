"""Scripted transport primitive for orchestration tests."""

import asyncio
import json
from typing import Any

import httpx

from src.net.models import RequestDescriptor


class FakeResponse:
    """Transport response with a fixed status, headers and body."""

    def __init__(
        self,
        status: int = 200,
        body: str = "",
        headers: dict[str, str] | None = None,
    ) -> None:
        self.status = status
        self.headers = httpx.Headers(headers or {})
        self._body = body
        self.reads = 0

    async def text(self) -> str:
        self.reads += 1
        return self._body


class BrokenBodyResponse(FakeResponse):
    """Response whose body read fails."""

    async def text(self) -> str:
        msg = "connection reset while reading body"
        raise RuntimeError(msg)


def json_response(
    body: Any,
    status: int = 200,
    content_type: str = "application/json; charset=utf-8",
) -> FakeResponse:
    """Build a JSON response."""
    return FakeResponse(
        status=status,
        body=json.dumps(body),
        headers={"Content-Type": content_type},
    )


def text_response(body: str, status: int = 200) -> FakeResponse:
    """Build a plain text response."""
    return FakeResponse(
        status=status,
        body=body,
        headers={"Content-Type": "text/plain"},
    )


class ScriptedTransport:
    """Transport that plays back a script of outcomes.

    Each step is a response, an exception instance to raise, or None for
    "no response". The last step repeats once the script is exhausted.
    """

    def __init__(self, *steps: Any, delay: float = 0.0) -> None:
        self._steps = list(steps)
        self._delay = delay
        self.calls: list[tuple[str, RequestDescriptor]] = []

    @property
    def attempts(self) -> int:
        """Number of times the transport was invoked."""
        return len(self.calls)

    async def __call__(self, url: str, descriptor: RequestDescriptor) -> Any:
        self.calls.append((url, descriptor))
        step = self._steps[min(len(self.calls), len(self._steps)) - 1]
        if self._delay:
            await asyncio.sleep(self._delay)
        if isinstance(step, BaseException):
            raise step
        return step


class Recorder:
    """Notification callback that records every call."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    def __call__(self, reason: str, args: Any = None) -> None:
        self.events.append((reason, args))

    @property
    def reasons(self) -> list[str]:
        """Reasons in the order they were emitted."""
        return [reason for reason, _ in self.events]
