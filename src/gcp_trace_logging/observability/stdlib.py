"""
gcp_trace_logging.observability.stdlib

Bridge from the standard library `logging` module into the same encoder and sink.

Responsibilities:
- Render third-party/stdlib log records as Cloud Logging JSON lines.
- Tag them with the trace active at the call site, exactly like structlog events.
"""

from __future__ import annotations

import logging

from gcp_trace_logging.context.carriers import TraceCarrier
from gcp_trace_logging.encoder import GcpJsonEncoder
from gcp_trace_logging.records import Record, Severity
from gcp_trace_logging.sink import StreamSink

SOURCE_LOCATION_KEY = "logging.googleapis.com/sourceLocation"


class TraceLoggingHandler(logging.Handler):
    def __init__(
        self,
        *,
        encoder: GcpJsonEncoder,
        carrier: TraceCarrier,
        sink: StreamSink,
        level: int = logging.NOTSET,
    ) -> None:
        super().__init__(level)
        self.encoder = encoder
        self.carrier = carrier
        self.sink = sink
        self._exc_formatter = logging.Formatter()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            # emit() runs in the logging thread/task, so the carrier sees the caller's trace.
            ctx = self.carrier.current()
            line = self.encoder.encode(self._to_record(record), ctx)
            self.sink.write(line)
        except Exception:  # noqa: BLE001
            self.handleError(record)

    def _to_record(self, record: logging.LogRecord) -> Record:
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self._exc_formatter.formatException(record.exc_info)}"
        if record.stack_info:
            message = f"{message}\n{record.stack_info}"
        return Record(
            severity=Severity.from_level(record.levelno),
            message=message,
            fields={
                "logger": record.name,
                SOURCE_LOCATION_KEY: {
                    "file": record.pathname,
                    "line": str(record.lineno),
                    "function": record.funcName,
                },
            },
        )


def install_stdlib_bridge(handler: TraceLoggingHandler, *, level: Severity) -> None:
    # force=True drops previously installed root handlers (re-configuration in tests).
    logging.basicConfig(handlers=[handler], level=int(level), force=True)


# --- Module Notes -----------------------------------------------------------
# Handler.handleError prints to stderr only when logging.raiseExceptions is set and never
# re-raises, so a bad record cannot abort the calling code.
