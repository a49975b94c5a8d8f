#!/usr/bin/env python3
"""
Test script for logging utilities.

This validates that error classification and operation logging work correctly.
"""

from unittest.mock import Mock, patch

import httpx
import pytest

from sse_stream.logging_utils import (
    classify_error,
    configure_logging,
    log_operation,
    operation_context,
)


class TestClassifyError:
    """Test transport error classification."""

    def test_timeout(self):
        assert classify_error(httpx.ConnectTimeout("slow")) == "timeout_error"
        assert classify_error(TimeoutError("slow")) == "timeout_error"

    def test_connection(self):
        assert classify_error(httpx.ConnectError("refused")) == "connection_error"
        assert classify_error(ConnectionResetError("reset")) == "connection_error"

    def test_protocol(self):
        assert classify_error(httpx.RemoteProtocolError("bad frame")) == "protocol_error"

    def test_generic_http_error(self):
        assert classify_error(httpx.UnsupportedProtocol("gopher")) == "http_error"

    def test_unknown(self):
        assert classify_error(ValueError("nope")) == "unknown_error"


class TestLogOperation:
    """Test the log_operation decorator."""

    @pytest.mark.asyncio
    async def test_log_operation_success(self):
        """Test log_operation decorator with successful function."""

        @log_operation("test_operation", log_timing=True)
        async def successful_function():
            return "success"

        assert await successful_function() == "success"

    @pytest.mark.asyncio
    async def test_log_operation_with_error(self):
        """Test log_operation decorator with function that raises error."""

        @log_operation("test_operation")
        async def failing_function():
            raise ValueError("Test error")

        with patch("sse_stream.logging_utils.logger") as mock_logger:
            bound = Mock()
            mock_logger.bind.return_value = bound
            with pytest.raises(ValueError, match="Test error"):
                await failing_function()

        bound.error.assert_called_once()
        assert bound.error.call_args.kwargs["error_type"] == "ValueError"
        assert "duration_ms" in bound.error.call_args.kwargs


class TestOperationContext:
    """Test the operation_context async context manager."""

    @pytest.mark.asyncio
    async def test_success(self):
        with patch("sse_stream.logging_utils.logger") as mock_logger:
            bound = Mock()
            mock_logger.bind.return_value = bound
            async with operation_context("connect", context={"url": "http://x"}) as log:
                assert log is bound

        mock_logger.bind.assert_called_once_with(operation="connect", url="http://x")
        bound.info.assert_called_once()

    @pytest.mark.asyncio
    async def test_failure_reraises(self):
        with patch("sse_stream.logging_utils.logger") as mock_logger:
            bound = Mock()
            mock_logger.bind.return_value = bound
            with pytest.raises(RuntimeError):
                async with operation_context("connect"):
                    raise RuntimeError("boom")

        bound.warning.assert_called_once()
        bound.info.assert_not_called()


def test_configure_logging_accepts_level_names():
    """Level names are resolved without touching the global logging setup."""
    with patch("sse_stream.logging_utils.logging.basicConfig") as basic_config, \
            patch("sse_stream.logging_utils.structlog.configure") as configure:
        configure_logging("debug", colors=False)
        configure_logging("INFO")

    assert [c.kwargs["level"] for c in basic_config.call_args_list] == [10, 20]
    assert configure.call_count == 2
