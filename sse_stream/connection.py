"""
HTTP request/response lifecycle for a streaming connection.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager

import httpx
from structlog.stdlib import BoundLogger

from .exceptions import ConnectError, RequestBuildError
from .logging_utils import as_structlog, classify_error, operation_context
from .models import EVENT_STREAM_CONTENT_TYPE, StreamRequest
from .signals import Signal

DEFAULT_HEADERS = {
    "Accept": EVENT_STREAM_CONTENT_TYPE,
    "Cache-Control": "no-cache",
}

# Streams are long-lived, so reads (including the wait for response headers)
# have no timeout. Only shutdown ends a handshake stuck on a silent peer.
DEFAULT_TIMEOUT = httpx.Timeout(10.0, read=None)

ALLOWED_SCHEMES = ("http", "https")


class ConnectionManager:
    """
    Builds, sends and validates the streaming GET request.

    A successful ``connect()`` returns (and ``open()`` yields) the response
    with its body still unread, so callers consume it incrementally as bytes
    arrive. The readiness signal fires only after status and content type
    have been checked.

    ``logger`` is a structlog logger; a stdlib ``logging.Logger`` is wrapped
    so that keyword fields still work.
    """

    def __init__(
        self,
        url: str,
        ready: Signal,
        logger: BoundLogger | logging.Logger | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: httpx.Timeout | None = None,
        default_headers: Mapping[str, str] | None = None,
    ):
        self.url = url
        self._ready = ready
        self._logger = as_structlog(logger, __name__, url=url)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout or DEFAULT_TIMEOUT
        )
        self._default_headers = {**DEFAULT_HEADERS, **(default_headers or {})}

    def build_request(self, headers: Mapping[str, str] | None = None) -> httpx.Request:
        """
        Build the GET request with caller headers layered over the defaults.

        Raises:
            RequestBuildError: If the URL or headers cannot form a request.
        """
        try:
            stream_request = StreamRequest(url=self.url, headers=dict(headers or {}))
            url = httpx.URL(stream_request.url)
            if url.scheme not in ALLOWED_SCHEMES or not url.host:
                raise ValueError(f"Unsupported stream URL: {self.url!r}")
            return self._client.build_request(
                "GET",
                url,
                headers={**self._default_headers, **stream_request.headers},
            )
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            self._logger.error(
                "Could not build streaming request",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise RequestBuildError(url=self.url) from e

    @asynccontextmanager
    async def open(self, request: httpx.Request) -> AsyncIterator[httpx.Response]:
        """
        Send ``request`` and yield the validated streaming response.

        The response is closed when the context exits, which also aborts any
        read still pending on it.

        Raises:
            ConnectError: On transport failure, non-success status or a
                response that is not an event stream.
        """
        response = await self.connect(request)
        try:
            yield response
        finally:
            await response.aclose()

    async def connect(self, request: httpx.Request) -> httpx.Response:
        """
        Send ``request`` and return the validated, still unread response.

        The caller owns the response and must close it. Cancelling this
        coroutine abandons the request, including a peer that never answers.

        Raises:
            ConnectError: On transport failure, non-success status or a
                response that is not an event stream.
        """
        url = str(request.url)
        async with operation_context("sse_connect", context={"url": url}):
            try:
                response = await self._client.send(request, stream=True)
            except httpx.HTTPError as e:
                category = classify_error(e)
                self._logger.error(
                    "Could not connect to streaming endpoint",
                    error_category=category,
                    error_message=str(e),
                )
                raise ConnectError(url=url, reason=category) from e

            try:
                self._validate(response)
            except ConnectError:
                await response.aclose()
                raise

        self._ready.fire()
        self._logger.info("Streaming connection established", status=response.status_code)
        return response

    def _validate(self, response: httpx.Response) -> None:
        url = str(response.request.url)
        if not response.is_success:
            self._logger.error(
                "Streaming endpoint returned an error status",
                status=response.status_code,
            )
            raise ConnectError(
                url=url,
                status_code=response.status_code,
                reason="http_status_error",
            )

        content_type = response.headers.get("content-type", "")
        media_type = content_type.split(";", 1)[0].strip().lower()
        if media_type != EVENT_STREAM_CONTENT_TYPE:
            self._logger.error(
                "Streaming endpoint did not return an event stream",
                content_type=content_type,
            )
            raise ConnectError(
                url=url,
                status_code=response.status_code,
                reason="unexpected_content_type",
            )

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this manager created it."""
        if self._owns_client:
            await self._client.aclose()
