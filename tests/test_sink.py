"""
tests.test_sink

Stream sink: atomic lines under concurrency, failure reporting without raising.
"""

from __future__ import annotations

import io
import threading

from conftest import MemorySink
from gcp_trace_logging.context.ambient import trace_scope
from gcp_trace_logging.encoder import TRACE_KEY
from gcp_trace_logging.observability.logging import build_logger
from gcp_trace_logging.sink import StreamSink, sink_from_name


class FlakyStream(io.BytesIO):
    def __init__(self, failures: int) -> None:
        super().__init__()
        self.remaining_failures = failures

    def write(self, data) -> int:
        if self.remaining_failures:
            self.remaining_failures -= 1
            raise OSError("disk full")
        return super().write(data)


class ShortStream(io.BytesIO):
    def write(self, data) -> int:
        return super().write(data[:1])


def test_write_returns_true_and_flushes(sink: MemorySink) -> None:
    assert sink.write(b'{"a":1}\n') is True
    assert sink.raw() == b'{"a":1}\n'
    assert sink.failures == 0


def test_failed_write_is_reported_once_and_logging_continues() -> None:
    fallback = io.StringIO()
    stream = FlakyStream(failures=1)
    sink = StreamSink(stream, fallback=fallback)
    log = build_logger(project_id="p", sink=sink)

    log.info("lost")
    assert sink.failures == 1
    assert fallback.getvalue().count("sink write failed") == 1
    assert "disk full" in fallback.getvalue()

    log.info("kept")
    assert b'"message":"kept"' in stream.getvalue()
    assert sink.failures == 1


def test_short_write_is_a_failure() -> None:
    fallback = io.StringIO()
    sink = StreamSink(ShortStream(), fallback=fallback)
    assert sink.write(b"abcdef\n") is False
    assert "short write: 1 of 7 bytes" in fallback.getvalue()


def test_closed_stream_does_not_raise() -> None:
    stream = io.BytesIO()
    stream.close()
    fallback = io.StringIO()
    sink = StreamSink(stream, fallback=fallback)
    assert sink.write(b"x\n") is False
    assert sink.failures == 1


def test_broken_fallback_is_tolerated() -> None:
    fallback = io.StringIO()
    fallback.close()
    sink = StreamSink(FlakyStream(failures=1), fallback=fallback)
    assert sink.write(b"x\n") is False


def test_concurrent_writers_never_interleave(sink: MemorySink) -> None:
    log = build_logger(project_id="p", sink=sink)
    payload = "x" * 2000

    def writer(trace_id: str) -> None:
        with trace_scope(trace_id):
            for i in range(100):
                log.info(payload, n=i)

    threads = [threading.Thread(target=writer, args=(str(t),)) for t in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    entries = sink.entries()
    assert len(entries) == 800
    per_trace: dict[str, list[int]] = {}
    for entry in entries:
        assert entry["message"] == payload
        per_trace.setdefault(entry[TRACE_KEY], []).append(entry["n"])
    # Within one thread lines appear in call order.
    assert all(ns == list(range(100)) for ns in per_trace.values())
    assert len(per_trace) == 8


def test_sink_from_name() -> None:
    assert isinstance(sink_from_name("stderr"), StreamSink)
    assert isinstance(sink_from_name("stdout"), StreamSink)


# --- Module Notes -----------------------------------------------------------
# pytest's capture replaces sys.stderr with an object exposing `.buffer`, so the
# named sinks can be constructed here without writing anything.
