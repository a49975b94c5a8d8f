#!/usr/bin/env python3
"""
Tests for the command-line runner.
"""

import json

import pytest

from sse_stream import main as runner
from sse_stream.main import main, print_event


@pytest.fixture
def logging_calls(monkeypatch):
    """Record configure_logging calls instead of reconfiguring global logging."""
    calls = []
    monkeypatch.setattr(
        runner, "configure_logging", lambda *args, **kwargs: calls.append((args, kwargs))
    )
    return calls


def test_print_event(capsys):
    print_event({"id": "YCh53QfLxO:0:0", "data": "some"})
    line = capsys.readouterr().out.strip()
    assert json.loads(line) == {"id": "YCh53QfLxO:0:0", "data": "some"}


def test_bad_url_exits_non_zero(monkeypatch, logging_calls):
    """A handshake error is reported through the exit code."""
    monkeypatch.delenv("SSE_AUTH_TOKEN", raising=False)
    assert main(["not a url"]) == 1
    assert len(logging_calls) == 1
