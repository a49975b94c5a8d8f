"""
Incremental SSE parser producing decoded JSON object events.

Only the ``data:`` field is interpreted. Every other field and comment line
is skipped, so streams that also carry ``id:``, ``event:`` or ``retry:``
parse without complaint.
"""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator, AsyncIterable, Iterable, Iterator
from typing import Any

from .exceptions import MalformedEventError
from .logging_utils import as_structlog
from .models import ParserStats, StreamEvent

DATA_FIELD = "data:"
COMMENT_PREFIX = ":"


class EventParser:
    """SSE parser with partial-line buffering and malformed-event recovery."""

    def __init__(self, logger: Any | None = None):
        self._logger = as_structlog(logger, __name__)
        self._partial = ""
        self._data: list[str] = []
        self.stats = ParserStats()

    def feed(self, text: str) -> list[StreamEvent]:
        """
        Feed a chunk of decoded text and return the events it completes.

        The chunk may end in the middle of a line; the remainder is kept
        until the next call.
        """
        if not text:
            return []

        lines = (self._partial + text).split("\n")
        self._partial = lines.pop()

        events = []
        for line in lines:
            event = self.feed_line(line)
            if event is not None:
                events.append(event)
        return events

    def feed_line(self, line: str) -> StreamEvent | None:
        """Process one line (without its ``\\n``) and return a completed event, if any."""
        if line.endswith("\r"):
            line = line[:-1]

        if not line:
            return self._dispatch()

        if line.startswith(DATA_FIELD):
            value = line[len(DATA_FIELD):]
            if value.startswith(" "):
                value = value[1:]
            self._data.append(value)
            return None

        # Comments, id:, event:, retry: and unknown fields
        self.stats.ignored_lines += 1
        if not line.startswith(COMMENT_PREFIX):
            self._logger.debug("Ignoring SSE line", line=line[:80])
        return None

    def finish(self) -> None:
        """Mark end of input, discarding any incomplete line or event."""
        if self._partial or self._data:
            self._logger.debug(
                "Discarding incomplete event at end of stream",
                partial_line=bool(self._partial),
                data_lines=len(self._data),
            )
        self._partial = ""
        self._data = []

    def parse_lines(self, lines: Iterable[str]) -> Iterator[StreamEvent]:
        """Parse an already line-split stream."""
        try:
            for line in lines:
                event = self.feed_line(line.rstrip("\n"))
                if event is not None:
                    yield event
        finally:
            self.finish()

    async def parse_stream(
        self, chunks: AsyncIterable[str]
    ) -> AsyncGenerator[StreamEvent]:
        """
        Parse an async text stream into events, in arrival order.

        The generator ends when ``chunks`` is exhausted. Buffers are reset
        first, so a single parser can serve consecutive connections.
        """
        self.reset()
        try:
            async for chunk in chunks:
                for event in self.feed(chunk):
                    yield event
        finally:
            self.finish()

    def _dispatch(self) -> StreamEvent | None:
        if not self._data:
            return None

        payload = "\n".join(self._data)
        self._data = []

        if not payload.strip():
            self.stats.heartbeats += 1
            return None

        try:
            event = self._decode(payload)
        except MalformedEventError as e:
            self.stats.malformed_events += 1
            self._logger.warning(
                "Dropping malformed SSE event",
                error=str(e),
                payload=payload[:200],
            )
            return None

        self.stats.total_events += 1
        return event

    @staticmethod
    def _decode(payload: str) -> StreamEvent:
        try:
            decoded = json.loads(payload)
        except json.JSONDecodeError as e:
            raise MalformedEventError(
                f"JSON decode error: {e}", payload=payload
            ) from e

        if not isinstance(decoded, dict):
            raise MalformedEventError(
                f"Expected a JSON object, got {type(decoded).__name__}",
                payload=payload,
            )
        return decoded

    def get_stats(self) -> dict[str, int]:
        """Get parser statistics for monitoring."""
        return self.stats.as_dict()

    def reset_stats(self) -> None:
        """Reset statistics counters."""
        self.stats = ParserStats()

    def reset(self) -> None:
        """Clear buffered input for a new connection. Statistics are kept."""
        self._partial = ""
        self._data = []
