"""
Error taxonomy for the SSE streaming client.

Only handshake-phase failures ever leave ``SSEClient.do``:
- RequestBuildError: the request could not be constructed (local, pre-network)
- ConnectError: transport failure, non-success status or a non-streaming body
- MalformedEventError: raised and handled inside the parser, never surfaced
"""

from __future__ import annotations


class SSEError(Exception):
    """Base streaming error with request context."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class RequestBuildError(SSEError):
    """The request could not be built (e.g. malformed URL)."""

    def __init__(self, message: str = "Could not perform request", **kwargs):
        super().__init__(message, **kwargs)


class ConnectError(SSEError):
    """The streaming connection could not be established."""

    def __init__(
        self,
        message: str = "Could not connect to streaming",
        reason: str | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.reason = reason


class MalformedEventError(SSEError):
    """A ``data:`` payload that does not decode to a JSON object."""

    def __init__(self, message: str, payload: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.payload = payload
