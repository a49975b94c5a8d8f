"""Shared helpers for tests that drive the client through httpx.MockTransport."""

import asyncio
from collections.abc import Callable

import httpx
import pytest

STREAM_URL = "http://stream.test/events"


def event_stream_response(
    chunks: list[str],
    *,
    hold_open: bool = False,
    fail_with: Exception | None = None,
    status_code: int = 200,
    content_type: str = "text/event-stream",
) -> httpx.Response:
    """Build a streaming response whose body yields ``chunks`` one by one.

    ``hold_open`` keeps the body blocked after the last chunk, the way a live
    server would; ``fail_with`` raises after the last chunk instead.
    """
    async def body():
        for chunk in chunks:
            yield chunk.encode("utf-8")
        if fail_with is not None:
            raise fail_with
        if hold_open:
            await asyncio.Event().wait()

    return httpx.Response(
        status_code,
        headers={"content-type": content_type, "cache-control": "no-cache"},
        content=body(),
    )


def mock_http_client(
    handler: Callable[[httpx.Request], httpx.Response],
) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def stream_url() -> str:
    return STREAM_URL
