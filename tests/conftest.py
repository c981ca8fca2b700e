"""
tests.conftest

Shared fixtures for the logging pipeline tests.

Responsibilities:
- Provide in-memory sinks and a helper to decode emitted JSON lines.
- Reset global structlog/stdlib logging state between tests.
"""

from __future__ import annotations

import io
import json
import logging
import re
from typing import Any

import pytest
import structlog

from gcp_trace_logging.observability.stdlib import TraceLoggingHandler
from gcp_trace_logging.settings import get_settings
from gcp_trace_logging.sink import StreamSink

TIME_RE = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z")


class MemorySink(StreamSink):
    def __init__(self) -> None:
        self.buffer = io.BytesIO()
        self.fallback = io.StringIO()
        super().__init__(self.buffer, fallback=self.fallback)

    def raw(self) -> bytes:
        return self.buffer.getvalue()

    def entries(self) -> list[dict[str, Any]]:
        return [json.loads(line) for line in self.raw().splitlines()]


@pytest.fixture
def sink() -> MemorySink:
    return MemorySink()


@pytest.fixture(autouse=True)
def _reset_logging_state():
    root = logging.getLogger()
    level = root.level
    structlog.contextvars.clear_contextvars()
    get_settings.cache_clear()
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    for handler in root.handlers[:]:
        if isinstance(handler, TraceLoggingHandler):
            root.removeHandler(handler)
    root.setLevel(level)
    get_settings.cache_clear()


# --- Module Notes -----------------------------------------------------------
# Only our own handlers are removed on teardown; pytest's capture handlers are left alone.
