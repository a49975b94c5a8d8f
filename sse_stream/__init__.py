"""
Server-Sent-Events streaming client.

This package provides a long-lived SSE client with:
- Incremental parsing of ``data:`` events into JSON objects
- Connection validation and a readiness signal
- Cooperative, thread-safe shutdown that aborts blocked reads
"""

from __future__ import annotations

from .client import EventHandler, SSEClient
from .connection import ConnectionManager
from .exceptions import ConnectError, MalformedEventError, RequestBuildError, SSEError
from .models import ConnectionState, StreamEvent, StreamRequest
from .parser import EventParser
from .signals import Signal

__all__ = [
    "ConnectError",
    "ConnectionManager",
    "ConnectionState",
    "EventHandler",
    "EventParser",
    "MalformedEventError",
    "RequestBuildError",
    "SSEClient",
    "SSEError",
    "Signal",
    "StreamEvent",
    "StreamRequest",
]
