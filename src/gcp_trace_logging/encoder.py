"""
gcp_trace_logging.encoder

Google Cloud Logging structured-JSON encoder.

Responsibilities:
- Turn a `Record` plus the resolved `TraceContext` into one compact JSON line.
- Emit the `logging.googleapis.com/trace` field only when a trace id is active.
- Never raise on a bad record: fall back to a clearly marked diagnostic line.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from gcp_trace_logging.errors import ConfigurationError, EncodingFailure
from gcp_trace_logging.records import Record, Severity, TraceContext

TRACE_KEY = "logging.googleapis.com/trace"
LABELS_KEY = "logging.googleapis.com/labels"
FALLBACK_LABEL = "log_encoding_failure"


def encode_time(ts: datetime) -> str:
    # RFC 3339, millisecond precision, explicit Z; naive values are taken as UTC.
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _last_resort_line() -> bytes:
    # Used only if even the fallback line cannot be built.
    return (
        '{"severity":"error","message":"log encoding failed","time":"%s",'
        '"logging.googleapis.com/labels":{"log_encoding_failure":"unknown"}}\n'
        % encode_time(datetime.now(tz=UTC))
    ).encode("ascii")


def trace_resource(project_id: str, trace_id: str) -> str:
    return f"projects/{project_id}/traces/{trace_id}"


def validate_project_id(project_id: Any) -> str:
    if not isinstance(project_id, str) or not project_id.strip():
        raise ConfigurationError("project_id must be a non-empty string")
    if project_id != project_id.strip() or any(c.isspace() or c == "/" for c in project_id):
        raise ConfigurationError(f"project_id contains whitespace or '/': {project_id!r}")
    return project_id


class GcpJsonEncoder:
    """
    Encodes records into the Cloud Logging structured format:

        {"severity":"info","message":"...","time":"2024-01-01T00:00:00.000Z",
         "logging.googleapis.com/trace":"projects/<project>/traces/<trace>"}
    """

    def __init__(self, project_id: str) -> None:
        self.project_id = validate_project_id(project_id)

    def __repr__(self) -> str:
        return f"GcpJsonEncoder(project_id={self.project_id!r})"

    def encode(self, record: Record, ctx: TraceContext = TraceContext.EMPTY) -> bytes:
        try:
            time = encode_time(record.timestamp or datetime.now(tz=UTC))
            return self._serialize(self._entry(record, ctx, time))
        except Exception as e:  # noqa: BLE001 - encoding never raises into the caller
            return self.encode_failure(record, ctx, e)

    def _entry(self, record: Record, ctx: TraceContext, time: str) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "severity": record.severity.wire_name,
            "message": record.message,
            "time": time,
        }
        if ctx.trace_id is not None:
            entry[TRACE_KEY] = trace_resource(self.project_id, ctx.trace_id)
        for key, value in record.fields.items():
            entry.setdefault(key, value)
        return entry

    @staticmethod
    def _serialize(entry: dict[str, Any]) -> bytes:
        try:
            text = json.dumps(entry, ensure_ascii=False, separators=(",", ":"), default=str)
            return text.encode("utf-8") + b"\n"
        except Exception as e:
            # Lone surrogates, cycles, and fields whose __str__ raises under default=str.
            raise EncodingFailure(f"{type(e).__name__}: {e!r}") from e

    def encode_failure(self, record: Record, ctx: TraceContext, error: BaseException) -> bytes:
        """
        Marked diagnostic line for a record that could not be encoded or rendered.

        Stamped with the current time; keeps the trace field so the failure stays correlated.
        """

        if isinstance(error, EncodingFailure) and error.__cause__ is not None:
            error = error.__cause__
        cause = type(error).__name__
        try:
            severity = getattr(record.severity, "wire_name", "error")
            entry: dict[str, Any] = {
                "severity": "error",
                # repr() + ensure_ascii keep arbitrary message content representable.
                "message": f"log encoding failed ({cause}) for {severity} record: {record.message!r:.500}",
                "time": encode_time(datetime.now(tz=UTC)),
                LABELS_KEY: {FALLBACK_LABEL: cause},
            }
            if ctx.trace_id is not None:
                entry[TRACE_KEY] = trace_resource(self.project_id, ctx.trace_id)
            return json.dumps(entry, ensure_ascii=True, separators=(",", ":")).encode("ascii") + b"\n"
        except Exception:  # noqa: BLE001
            return _last_resort_line()


def severity_for(method_name: str) -> Severity:
    """
    Map a structlog method name ("warning", "exception", ...) to a `Severity`.
    """

    try:
        return Severity.parse(method_name)
    except ValueError:
        return Severity.INFO


# --- Module Notes -----------------------------------------------------------
# Field order is not significant to Cloud Logging. Caller fields are merged with
# setdefault so they can never shadow severity/message/time/trace.
