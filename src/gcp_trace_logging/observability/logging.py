"""
gcp_trace_logging.observability.logging

Structured logging configuration (the call-site facade).

Responsibilities:
- Configure `structlog` so every event is tagged with the active trace and rendered as a
  Cloud Logging JSON line.
- Gate on a minimum severity before any processor, carrier lookup or formatting runs.
- Keep failures inside logging: bad format arguments or a failing processor still
  produce a line, never an exception at the call site.
- Provide a small wrapper for obtaining bound loggers.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import structlog
from structlog.typing import EventDict, FilteringBoundLogger, Processor

from gcp_trace_logging.context.carriers import AmbientCarrier, TraceCarrier, build_carrier
from gcp_trace_logging.encoder import GcpJsonEncoder, severity_for
from gcp_trace_logging.observability.stdlib import TraceLoggingHandler, install_stdlib_bridge
from gcp_trace_logging.records import Record, Severity, TraceContext
from gcp_trace_logging.settings import Settings
from gcp_trace_logging.sink import StreamSink, sink_from_name, stderr_sink

# Private event_dict key; popped by the renderer before encoding.
_TRACE_CONTEXT_KEY = "_trace_context"


def add_trace_context(carrier: TraceCarrier) -> Processor:
    # Runs synchronously inside the log call, so the trace seen is the caller's.
    def processor(_: Any, __: str, event_dict: EventDict) -> EventDict:
        event_dict[_TRACE_CONTEXT_KEY] = carrier.current()
        return event_dict

    return processor


class GcpRenderer:
    """
    Final processor: builds the `Record` and returns the encoded bytes for the sink.
    """

    def __init__(self, encoder: GcpJsonEncoder) -> None:
        self._encoder = encoder

    def __call__(self, _: Any, method_name: str, event_dict: EventDict) -> bytes:
        ctx = event_dict.pop(_TRACE_CONTEXT_KEY, TraceContext.EMPTY)
        message = _to_text(event_dict.pop("event", ""))
        record = Record(severity=severity_for(method_name), message=message, fields=event_dict)
        return self._encoder.encode(record, ctx)


def _to_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    try:
        return str(value)
    except Exception:  # noqa: BLE001 - a broken __str__ must not break the caller
        return f"<unprintable {type(value).__name__}>"


def _safe_repr(value: Any) -> str:
    try:
        return repr(value)
    except Exception:  # noqa: BLE001
        return f"<unprintable {type(value).__name__}>"


# Level methods structlog formats with `event % args`, and the name each one reports
# to processors. `exception` delegates to `error`.
_FORMATTING_METHODS = {
    "debug": "debug",
    "info": "info",
    "msg": "info",
    "warning": "warning",
    "warn": "warning",
    "error": "error",
    "critical": "critical",
    "fatal": "critical",
}


def _formatting_method(name: str) -> Any:
    def meth(self: Any, event: Any, *args: Any, **kw: Any) -> Any:
        if args:
            # A single non-empty mapping is used for %(name)s interpolation.
            values = args[0] if len(args) == 1 and isinstance(args[0], Mapping) and args[0] else args
            try:
                event = event % values
            except Exception as e:  # noqa: BLE001
                # Keep the unformatted template and say what went wrong.
                kw.setdefault("log_format_error", f"{type(e).__name__}: {_to_text(e)}")
                kw.setdefault("log_format_args", _safe_repr(args))
        return self._proxy_to_logger(name, event, **kw)

    meth.__name__ = name
    return meth


def make_guarded_bound_logger(
    level: Severity, *, encoder: GcpJsonEncoder, carrier: TraceCarrier
) -> type[FilteringBoundLogger]:
    """
    structlog's filtering bound logger, made unable to raise into the caller.

    Methods below `level` stay structlog's no-ops. Enabled methods survive `%` mismatches,
    and a failure anywhere in the processor chain becomes the encoder's fallback line.
    """

    # structlog has no level below DEBUG; TRACE enables everything.
    base = structlog.make_filtering_bound_logger(int(level) if level >= Severity.DEBUG else 0)

    def _proxy_to_logger(self: Any, method_name: str, event: Any = None, **event_kw: Any) -> Any:
        try:
            return base._proxy_to_logger(self, method_name, event, **event_kw)
        except Exception as e:  # noqa: BLE001 - logging failures stay inside logging
            try:
                ctx = carrier.current()
            except Exception:  # noqa: BLE001 - the carrier may be what failed
                ctx = TraceContext.EMPTY
            record = Record(severity=severity_for(method_name), message=_to_text(event))
            return getattr(self._logger, method_name)(encoder.encode_failure(record, ctx, e))

    methods: dict[str, Any] = {"_proxy_to_logger": _proxy_to_logger}
    for attr, name in _FORMATTING_METHODS.items():
        if severity_for(name) >= level:
            methods[attr] = _formatting_method(name)
    return type(base.__name__, (base,), methods)


def build_processors(*, encoder: GcpJsonEncoder, carrier: TraceCarrier) -> list[Processor]:
    # Keep this list focused and stable; the renderer must stay last.
    return [
        structlog.contextvars.merge_contextvars,
        add_trace_context(carrier),
        structlog.processors.dict_tracebacks,
        GcpRenderer(encoder),
    ]


def build_logger(
    *,
    project_id: str,
    carrier: TraceCarrier | None = None,
    sink: StreamSink | None = None,
    level: Severity | str = Severity.INFO,
) -> FilteringBoundLogger:
    """
    Standalone logger (no global structlog state), e.g. for libraries and tests.
    """

    if isinstance(level, str):
        level = Severity.parse(level)
    encoder = GcpJsonEncoder(project_id)
    carrier = carrier or AmbientCarrier()
    return structlog.wrap_logger(
        sink or stderr_sink(),
        processors=build_processors(encoder=encoder, carrier=carrier),
        wrapper_class=make_guarded_bound_logger(level, encoder=encoder, carrier=carrier),
    )


@dataclass(frozen=True, slots=True)
class LoggingPipeline:
    encoder: GcpJsonEncoder
    carrier: TraceCarrier
    sink: StreamSink


def configure_logging(
    *,
    settings: Settings,
    carrier: TraceCarrier | None = None,
    sink: StreamSink | None = None,
) -> LoggingPipeline:
    """
    Process-wide setup: structlog loggers and stdlib `logging` share one encoder/sink.
    """

    pipeline = LoggingPipeline(
        encoder=GcpJsonEncoder(settings.project_id),
        carrier=carrier or build_carrier(settings.carrier),
        sink=sink or sink_from_name(settings.sink),
    )
    level = settings.min_severity

    structlog.configure(
        processors=build_processors(encoder=pipeline.encoder, carrier=pipeline.carrier),
        logger_factory=lambda *_: pipeline.sink,
        wrapper_class=make_guarded_bound_logger(
            level, encoder=pipeline.encoder, carrier=pipeline.carrier
        ),
        # Reconfiguration (app factory, tests) must reach module-level loggers too.
        cache_logger_on_first_use=False,
    )
    install_stdlib_bridge(
        TraceLoggingHandler(encoder=pipeline.encoder, carrier=pipeline.carrier, sink=pipeline.sink),
        level=level,
    )
    return pipeline


def get_logger(name: str | None = None) -> FilteringBoundLogger:
    return structlog.get_logger(name)


# --- Module Notes -----------------------------------------------------------
# Filtered levels resolve to structlog's no-op methods: `log.debug("x %s", arg)` below the
# floor neither formats `arg` nor reads the carrier. Pass arguments positionally to benefit.
# The async variants (`ainfo`, ...) and `log(level, ...)` keep structlog's own formatting;
# only the processor-chain guard in `_proxy_to_logger` covers them.
