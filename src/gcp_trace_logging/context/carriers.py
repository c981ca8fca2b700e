"""
gcp_trace_logging.context.carriers

Common interface over the two trace context strategies.

Responsibilities:
- Define the `TraceCarrier` protocol the logging facade reads from.
- Adapt the ambient and call-tree modules to it.
- Select a carrier at composition time.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Literal, Protocol

from gcp_trace_logging.context import ambient
from gcp_trace_logging.context.call_tree import TRACE_ID_ATTRIBUTE, SpanRegistry, default_registry
from gcp_trace_logging.records import TraceContext

CarrierKind = Literal["ambient", "call_tree"]


class TraceCarrier(Protocol):
    def current(self) -> TraceContext: ...

    def scope(self, trace_id: str | None) -> AbstractContextManager[object]: ...


class AmbientCarrier:
    def current(self) -> TraceContext:
        trace_id = ambient.current()
        if trace_id is None:
            return TraceContext.EMPTY
        return TraceContext(trace_id=trace_id)

    def scope(self, trace_id: str | None) -> AbstractContextManager[object]:
        return ambient.trace_scope(trace_id)


class CallTreeCarrier:
    def __init__(self, registry: SpanRegistry | None = None) -> None:
        self.registry = registry or default_registry

    def current(self) -> TraceContext:
        trace_id = self.registry.resolve_trace_id(self.registry.current_span())
        if trace_id is None:
            return TraceContext.EMPTY
        return TraceContext(trace_id=trace_id)

    @contextmanager
    def scope(self, trace_id: str | None) -> Iterator[object]:
        # A span without a trace_id attribute simply inherits from its ancestors.
        attributes = {TRACE_ID_ATTRIBUTE: trace_id} if trace_id is not None else {}
        with self.registry.span(**attributes) as span:
            yield span


def build_carrier(kind: CarrierKind) -> TraceCarrier:
    if kind == "ambient":
        return AmbientCarrier()
    if kind == "call_tree":
        return CallTreeCarrier()
    raise ValueError(f"unknown carrier kind: {kind!r}")


# --- Module Notes -----------------------------------------------------------
# Ambient `scope(None)` masks an outer trace; a call-tree span without a trace_id
# inherits the one from its parent.
