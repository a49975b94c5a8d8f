"""
Data types shared by the parser, the connection manager and the client.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# One decoded ``data:`` payload. Handlers must copy anything they keep.
StreamEvent = dict[str, Any]

EVENT_STREAM_CONTENT_TYPE = "text/event-stream"


class ConnectionState(Enum):
    """Lifecycle of a single ``SSEClient.do`` call."""
    IDLE = "idle"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    SHUTTING_DOWN = "shutting_down"
    CLOSED = "closed"


class StreamRequest(BaseModel):
    """
    Immutable description of one streaming request.

    The headers mapping is copied during validation, so later changes to the
    caller's dict do not leak into a call that has already started.
    """
    model_config = ConfigDict(frozen=True)

    url: str
    headers: dict[str, str] = Field(default_factory=dict)


@dataclass
class ParserStats:
    """Counters kept by the event parser."""
    total_events: int = 0
    malformed_events: int = 0
    heartbeats: int = 0
    ignored_lines: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "total_events": self.total_events,
            "malformed_events": self.malformed_events,
            "heartbeats": self.heartbeats,
            "ignored_lines": self.ignored_lines,
        }
