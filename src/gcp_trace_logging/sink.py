"""
gcp_trace_logging.sink

Byte-stream sink for encoded log lines.

Responsibilities:
- Write each finished line atomically (no interleaving between concurrent writers).
- Report write failures on a fallback channel instead of raising into callers.
- Expose the method surface structlog expects from a wrapped logger.
"""

from __future__ import annotations

import sys
import threading
from typing import BinaryIO, Literal, TextIO

from gcp_trace_logging.errors import SinkWriteFailure

SinkName = Literal["stderr", "stdout"]


class StreamSink:
    def __init__(self, stream: BinaryIO, *, fallback: TextIO | None = None) -> None:
        self._stream = stream
        self._fallback = fallback if fallback is not None else sys.__stderr__
        self._lock = threading.Lock()
        self.failures = 0

    def __repr__(self) -> str:
        return f"<StreamSink(stream={self._stream!r})>"

    def write(self, line: bytes) -> bool:
        """
        Write one encoded line. Returns False if the stream rejected it.
        """

        with self._lock:
            try:
                self._write_locked(line)
            except SinkWriteFailure as e:
                self._report(e)
                return False
        return True

    def _write_locked(self, line: bytes) -> None:
        try:
            written = self._stream.write(line)
            self._stream.flush()
        except (OSError, ValueError) as e:
            # ValueError: write to a closed file.
            raise SinkWriteFailure(f"{type(e).__name__}: {e}") from e
        if written is not None and written < len(line):
            raise SinkWriteFailure(f"short write: {written} of {len(line)} bytes")

    def _report(self, error: SinkWriteFailure) -> None:
        self.failures += 1
        if self._fallback is None:
            return
        try:
            self._fallback.write(f"gcp-trace-logging: sink write failed: {error}\n")
            self._fallback.flush()
        except (OSError, ValueError):
            # Nowhere left to report to.
            pass

    # structlog calls `getattr(logger, method_name)(rendered)` on the wrapped logger.
    msg = debug = info = warn = warning = error = exception = critical = fatal = write


def stderr_sink() -> StreamSink:
    return StreamSink(sys.stderr.buffer)


def stdout_sink() -> StreamSink:
    return StreamSink(sys.stdout.buffer)


def sink_from_name(name: SinkName) -> StreamSink:
    if name == "stderr":
        return stderr_sink()
    if name == "stdout":
        return stdout_sink()
    raise ValueError(f"unknown sink: {name!r}")


# --- Module Notes -----------------------------------------------------------
# One lock per sink mirrors structlog's own per-file write locks; a single line is
# never split across two writers.
