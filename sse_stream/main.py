"""
Command-line runner: stream events from an SSE endpoint to stdout.

Usage:
    python -m sse_stream.main [URL]
"""

from __future__ import annotations

import asyncio
import json
import signal
import sys

from .client import SSEClient
from .config import Configuration
from .exceptions import SSEError
from .logging_utils import configure_logging, get_logger
from .models import StreamEvent
from .signals import Signal

logger = get_logger(__name__)


def print_event(event: StreamEvent) -> None:
    """Write one event to stdout as a JSON line."""
    print(json.dumps(event, ensure_ascii=False), flush=True)


async def run(url: str, config: Configuration) -> int:
    """Stream until the peer closes or a termination signal arrives."""
    shutdown_signal = Signal("shutdown")

    async with SSEClient(
        url,
        shutdown_signal,
        timeout=config.get_timeout(),
        default_headers=config.get_default_headers(),
    ) as client:

        def signal_handler() -> None:
            """Handle shutdown signals gracefully."""
            logger.info("Received shutdown signal, initiating graceful shutdown")
            client.shutdown()

        if sys.platform != "win32":
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGTERM, signal.SIGINT):
                loop.add_signal_handler(sig, signal_handler)

        try:
            await client.do({}, print_event)
        except SSEError as e:
            logger.error("Streaming failed", error=str(e), url=e.url)
            return 1

    logger.info("Streaming finished", **client.get_stats())
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``sse-stream`` console script."""
    argv = sys.argv[1:] if argv is None else argv
    config = Configuration()

    logging_config = config.get_logging_config()
    configure_logging(
        logging_config.get("level", "INFO"),
        colors=logging_config.get("colors", True),
    )

    url = argv[0] if argv else config.stream_url
    return asyncio.run(run(url, config))


if __name__ == "__main__":
    sys.exit(main())
