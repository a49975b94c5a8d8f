"""
Centralized logging utilities for the SSE streaming client.

This module provides the structlog setup and a few helpers used to keep
connection diagnostics consistent across the codebase:
- Structured logging with contextual information
- Transport error classification for log categories
- Operation timing for the handshake and for whole streaming calls
"""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, ParamSpec, TypeVar

import httpx
import structlog

# Type variables for generic decorators
P = ParamSpec("P")
T = TypeVar("T")
AsyncCallable = Callable[P, Awaitable[T]]


def configure_logging(level: str | int = "INFO", *, colors: bool = True) -> None:
    """
    Configure structlog on top of the stdlib logging module.

    Args:
        level: Minimum level name or number for emitted records
        colors: Whether the console renderer should use ANSI colors
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(level=level, format="%(message)s")

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=colors),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None, **context: Any) -> Any:
    """Return a structlog logger, optionally bound with context."""
    bound = structlog.get_logger(name)
    if context:
        bound = bound.bind(**context)
    return bound


def as_structlog(
    candidate: Any | None, name: str | None = None, **context: Any
) -> Any:
    """
    Return a structlog logger for ``candidate``.

    ``None`` gives a module logger, a stdlib ``logging.Logger`` is wrapped in a
    stdlib ``BoundLogger`` so keyword fields are rendered rather than passed
    to ``Logger.info``, and anything else is assumed to be structlog already.
    """
    if candidate is None:
        return get_logger(name, **context)
    if isinstance(candidate, logging.Logger):
        return structlog.wrap_logger(
            candidate,
            wrapper_class=structlog.stdlib.BoundLogger,
            **context,
        )
    return candidate


logger = get_logger(__name__)


def classify_error(error: BaseException) -> str:
    """
    Classify a transport-level error into a log category.

    Args:
        error: The exception to classify

    Returns:
        Category name used in structured log records
    """
    if isinstance(error, httpx.TimeoutException | TimeoutError):
        return "timeout_error"
    if isinstance(error, httpx.HTTPStatusError):
        return "http_status_error"
    if isinstance(error, httpx.NetworkError | ConnectionError | OSError):
        return "connection_error"
    if isinstance(error, httpx.RemoteProtocolError | httpx.LocalProtocolError):
        return "protocol_error"
    if isinstance(error, httpx.HTTPError):
        return "http_error"
    return "unknown_error"


def log_operation(
    operation: str,
    *,
    log_timing: bool = True,
    context: dict[str, Any] | None = None,
) -> Callable[[AsyncCallable[P, T]], AsyncCallable[P, T]]:
    """
    Decorator for logging async operations with structured context.

    Args:
        operation: Description of the operation being performed
        log_timing: Whether to log execution timing
        context: Additional context to include in logs

    Returns:
        Decorated function with logging
    """
    def decorator(func: AsyncCallable[P, T]) -> AsyncCallable[P, T]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            operation_logger = logger.bind(
                operation=operation,
                function=func.__name__,
                **(context or {}),
            )
            operation_logger.debug("Operation started")

            start_time = time.perf_counter() if log_timing else None

            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                error_log_data: dict[str, Any] = {
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                }
                if start_time is not None:
                    duration = round((time.perf_counter() - start_time) * 1000, 2)
                    error_log_data["duration_ms"] = duration

                operation_logger.error("Operation failed", **error_log_data)
                raise

            end_log_data: dict[str, Any] = {}
            if start_time is not None:
                duration = round((time.perf_counter() - start_time) * 1000, 2)
                end_log_data["duration_ms"] = duration

            operation_logger.debug("Operation completed", **end_log_data)
            return result

        return wrapper
    return decorator


@asynccontextmanager
async def operation_context(
    operation: str,
    *,
    context: dict[str, Any] | None = None,
    log_timing: bool = True,
):
    """
    Async context manager for operation logging.

    Args:
        operation: Description of the operation
        context: Additional context for logging
        log_timing: Whether to log operation timing

    Yields:
        Bound logger for the operation
    """
    operation_logger = logger.bind(
        operation=operation,
        **(context or {}),
    )

    operation_logger.debug("Operation started")
    start_time = time.perf_counter() if log_timing else None

    try:
        yield operation_logger
    except Exception as e:
        error_log_data: dict[str, Any] = {
            "error_type": type(e).__name__,
            "error_message": str(e),
        }
        if start_time is not None:
            duration = round((time.perf_counter() - start_time) * 1000, 2)
            error_log_data["duration_ms"] = duration

        operation_logger.warning("Operation failed", **error_log_data)
        raise

    log_data: dict[str, Any] = {}
    if start_time is not None:
        duration = round((time.perf_counter() - start_time) * 1000, 2)
        log_data["duration_ms"] = duration

    operation_logger.info("Operation completed successfully", **log_data)
