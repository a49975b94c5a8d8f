"""
Streaming client: connects, parses and dispatches SSE events until the
stream ends or shutdown is requested.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping

import httpx
from structlog.stdlib import BoundLogger

from .connection import ConnectionManager
from .logging_utils import as_structlog, log_operation
from .models import ConnectionState, StreamEvent
from .parser import EventParser
from .signals import Signal

EventHandler = Callable[[StreamEvent], Awaitable[None] | None]

_ACTIVE_STATES = frozenset({
    ConnectionState.CONNECTING,
    ConnectionState.STREAMING,
    ConnectionState.SHUTTING_DOWN,
})


class SSEClient:
    """
    Long-lived SSE client bound to one URL and one shutdown signal.

    ``do()`` occupies the awaiting task for the life of the connection. Inside
    it, a reader task parses the body and calls the handler while a watcher
    task waits on the shutdown signal; when the signal fires the reader is
    cancelled and the response closed, so a read blocked on the peer returns
    immediately. The handshake is raced against the same signal, so a peer
    that accepts the request and never answers does not pin ``do()``.

    ``logger`` is a structlog logger; a stdlib ``logging.Logger`` is wrapped
    so that keyword fields still work.

    The shutdown signal belongs to the owner and can be shared by several
    collaborating components. One instance serves one ``do()`` call at a time.
    """

    def __init__(
        self,
        url: str,
        shutdown_signal: Signal,
        logger: BoundLogger | logging.Logger | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: httpx.Timeout | None = None,
        default_headers: Mapping[str, str] | None = None,
    ):
        self.url = url
        self.ready = Signal("sse-ready")
        self._shutdown = shutdown_signal
        self._logger = as_structlog(logger, __name__, url=url)
        self._state = ConnectionState.IDLE
        self._connection = ConnectionManager(
            url,
            self.ready,
            self._logger,
            http_client=http_client,
            timeout=timeout,
            default_headers=default_headers,
        )
        self._parser = EventParser(self._logger)

    @property
    def state(self) -> ConnectionState:
        return self._state

    def get_stats(self) -> dict[str, int]:
        """Parser statistics accumulated over every call on this instance."""
        return self._parser.get_stats()

    @log_operation("sse_stream")
    async def do(
        self,
        headers: Mapping[str, str] | None,
        handler: EventHandler,
    ) -> None:
        """
        Stream events to ``handler`` until the stream ends or shutdown.

        Events are delivered one at a time in wire order; the next event is
        not processed until the handler (and any awaitable it returns) has
        finished. Faults after the handshake end the call without an error.

        Raises:
            RequestBuildError: The request could not be built.
            ConnectError: The connection could not be established.
            RuntimeError: Another call on this instance is still active.
        """
        if self._state in _ACTIVE_STATES:
            raise RuntimeError(f"SSEClient is already {self._state.value}")

        self._state = ConnectionState.CONNECTING
        try:
            request = self._connection.build_request(headers)
            if self._shutdown.is_set():
                self._logger.info("Shutdown already requested, not connecting")
                return

            response = await self._connect(request)
            if response is None:
                return

            try:
                self._state = ConnectionState.STREAMING
                await self._run(response, handler)
            finally:
                await response.aclose()
        finally:
            self._close()

    def shutdown(self) -> None:
        """
        Request termination of the current (or next) streaming call.

        Idempotent and non-blocking; safe to call from any thread. Does not
        wait for ``do()`` to return.
        """
        if self._shutdown.fire():
            self._logger.info("Shutdown requested")

    async def _connect(self, request: httpx.Request) -> httpx.Response | None:
        """Race the handshake against shutdown; None means shutdown won."""
        connect = asyncio.create_task(self._connection.connect(request))
        watcher = asyncio.create_task(self._shutdown.wait())
        try:
            await asyncio.wait(
                {connect, watcher}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (connect, watcher):
                if not task.done():
                    task.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await task

        if connect.cancelled():
            self._state = ConnectionState.SHUTTING_DOWN
            self._logger.info("Shutdown observed during handshake, abandoning request")
            return None
        # A handshake that finished alongside shutdown is handed to _run,
        # which sees the fired signal and closes it.
        return connect.result()

    async def _run(self, response: httpx.Response, handler: EventHandler) -> None:
        reader = asyncio.create_task(self._consume(response, handler))
        watcher = asyncio.create_task(self._shutdown.wait())
        try:
            done, _ = await asyncio.wait(
                {reader, watcher}, return_when=asyncio.FIRST_COMPLETED
            )
            if reader not in done:
                self._state = ConnectionState.SHUTTING_DOWN
                self._logger.info("Shutdown observed, closing stream")
        finally:
            for task in (reader, watcher):
                if not task.done():
                    task.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await task

        if reader.done() and not reader.cancelled():
            # Re-raise handler errors; read faults were handled in _consume.
            reader.result()

    async def _consume(self, response: httpx.Response, handler: EventHandler) -> None:
        events = self._parser.parse_stream(response.aiter_text())
        try:
            async with contextlib.aclosing(events):
                async for event in events:
                    if self._shutdown.is_set():
                        break
                    result = handler(event)
                    if inspect.isawaitable(result):
                        await result
        except (httpx.HTTPError, httpx.StreamError) as e:
            self._logger.warning(
                "Stream interrupted",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return

        self._logger.info("Stream ended", **self._parser.get_stats())

    def _close(self) -> None:
        if self._state is ConnectionState.CLOSED:
            return
        self._state = ConnectionState.CLOSED
        self._logger.debug("Streaming call closed")

    async def aclose(self) -> None:
        """Release the HTTP client if this instance created it."""
        await self._connection.aclose()

    async def __aenter__(self) -> SSEClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
