"""
One-shot, thread-safe notification used for shutdown and readiness.
"""

from __future__ import annotations

import asyncio
import contextlib
import threading


def _resolve(future: asyncio.Future[None]) -> None:
    if not future.done():
        future.set_result(None)


class Signal:
    """
    A notification that fires at most once and stays fired.

    ``fire()`` may be called from any thread, any number of times. Waiters on
    any event loop are woken through ``call_soon_threadsafe``, and plain
    threads can block on ``wait_blocking()``.
    """

    def __init__(self, name: str = "signal"):
        self.name = name
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._waiters: list[tuple[asyncio.AbstractEventLoop, asyncio.Future[None]]] = []

    def fire(self) -> bool:
        """Fire the signal. Returns True only for the call that fired it."""
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
            waiters, self._waiters = self._waiters, []

        for loop, future in waiters:
            if loop.is_closed():
                continue
            # The loop may close between the check and the call.
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(_resolve, future)
        return True

    def is_set(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        """Suspend the current task until the signal fires."""
        loop = asyncio.get_running_loop()
        with self._lock:
            if self._event.is_set():
                return
            future: asyncio.Future[None] = loop.create_future()
            entry = (loop, future)
            self._waiters.append(entry)

        try:
            await future
        finally:
            with self._lock:
                if entry in self._waiters:
                    self._waiters.remove(entry)

    def wait_blocking(self, timeout: float | None = None) -> bool:
        """Block the calling thread until the signal fires or ``timeout`` passes."""
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        state = "fired" if self.is_set() else "pending"
        return f"<Signal {self.name!r} {state}>"
