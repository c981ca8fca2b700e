"""
gcp_trace_logging.errors

Exception taxonomy for the logging pipeline.

Responsibilities:
- Separate startup failures (fatal) from runtime failures (always contained).
"""

from __future__ import annotations


class TraceLoggingError(Exception):
    pass


class ConfigurationError(TraceLoggingError):
    """
    Invalid or missing configuration (e.g. project id).
    Raised at initialization and never retried.
    """


class EncodingFailure(TraceLoggingError):
    """
    A record could not be serialized.
    The encoder catches this and emits a fallback line instead.
    """


class SinkWriteFailure(TraceLoggingError):
    """
    The output stream rejected or partially accepted a line.
    The sink reports it on its fallback channel and keeps going.
    """


# --- Module Notes -----------------------------------------------------------
# Looking up the trace context outside any scope is not an error and has no class here:
# it is the "no trace" state and yields None.
