"""
gcp_trace_logging.context.call_tree

Call-tree trace carrier: spans with attributes, arranged parent -> child.

Responsibilities:
- Index live span data by integer id; ancestry is a walk over parent ids (no cycles).
- Capture the parent at creation time so the tree shape never changes afterwards.
- Resolve a span's trace id by walking toward the root (nearest `trace_id` wins).
- Keep node data alive exactly as long as a handle, a task context or a descendant
  can still reach it.
"""

from __future__ import annotations

import contextvars
import itertools
import threading
import weakref
from collections.abc import Awaitable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, TypeVar

T = TypeVar("T")

TRACE_ID_ATTRIBUTE = "trace_id"


@dataclass(slots=True, weakref_slot=True, eq=False)
class _SpanNode:
    id: int
    parent_id: int | None
    attributes: dict[str, str]
    # Owning link only: a live child keeps its whole ancestry in the index.
    parent: _SpanNode | None = field(default=None, repr=False)
    closed: bool = False


@dataclass(frozen=True, slots=True)
class Span:
    """
    Handle to a node in a `SpanRegistry`.

    A handle owns its node: whoever holds it (a caller, or a task context that had the
    span attached) can always resolve it. Ids are never reused.
    """

    id: int
    registry: SpanRegistry = field(repr=False, compare=False)
    _node: _SpanNode = field(repr=False, compare=False)

    @property
    def closed(self) -> bool:
        return self._node.closed

    def resolve_trace_id(self) -> str | None:
        return self.registry.resolve_trace_id(self)

    def close(self) -> None:
        self.registry.close(self)


class _Unset:
    pass


_UNSET: Any = _Unset()

# Shared across registries; each registry only honours spans it owns.
_current_span: contextvars.ContextVar[Span | None] = contextvars.ContextVar(
    "gcp_current_span", default=None
)


class SpanRegistry:
    def __init__(self) -> None:
        # Weak index: the registry never extends a node's life.
        self._nodes: weakref.WeakValueDictionary[int, _SpanNode] = weakref.WeakValueDictionary()
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._nodes)

    def __contains__(self, span: object) -> bool:
        if not isinstance(span, Span) or span.registry is not self:
            return False
        with self._lock:
            return span.id in self._nodes

    def get(self, span_id: int) -> Span | None:
        """
        Handle for a still-reachable span id, or None once its node is gone.
        """

        with self._lock:
            node = self._nodes.get(span_id)
        if node is None:
            return None
        return Span(id=node.id, registry=self, _node=node)

    def create_span(
        self,
        attributes: Mapping[str, Any] | None = None,
        *,
        parent: Span | None = _UNSET,
    ) -> Span:
        """
        Allocate a span. Unless `parent` is given, the span attached for the current
        logical task (if any) becomes the parent; `parent=None` forces a root span.

        An implicit parent is accepted even when already closed: a task may outlive
        the scope that spawned it. An explicit parent must be open.
        """

        if parent is _UNSET:
            parent = self.current_span()
        elif parent is not None:
            if parent.registry is not self:
                raise ValueError("parent span belongs to another registry")
            if parent.closed:
                raise ValueError(f"parent span {parent.id} is closed")
        attrs = {str(k): str(v) for k, v in (attributes or {}).items()}

        with self._lock:
            node = _SpanNode(
                id=next(self._ids),
                parent_id=parent.id if parent is not None else None,
                attributes=attrs,
                parent=parent._node if parent is not None else None,
            )
            self._nodes[node.id] = node
        return Span(id=node.id, registry=self, _node=node)

    def current_span(self) -> Span | None:
        span = _current_span.get()
        if span is None or span.registry is not self:
            return None
        return span

    @contextmanager
    def attach_current(self, span: Span) -> Iterator[Span]:
        if span.registry is not self:
            raise ValueError(f"span {span.id} belongs to another registry")
        if span.closed:
            raise ValueError(f"span {span.id} is closed")
        token = _current_span.set(span)
        try:
            yield span
        finally:
            _current_span.reset(token)

    def resolve_trace_id(self, span: Span | None) -> str | None:
        if span is None or span.registry is not self:
            return None
        with self._lock:
            node_id: int | None = span.id
            while node_id is not None:
                node = self._nodes.get(node_id)
                if node is None:
                    return None
                value = node.attributes.get(TRACE_ID_ATTRIBUTE)
                if value is not None:
                    return value
                node_id = node.parent_id
        return None

    def close(self, span: Span) -> None:
        # Idempotent. Closing only ends the span's own use; copies of task contexts
        # and live children keep resolving through it until they are gone too.
        span._node.closed = True

    @contextmanager
    def span(self, **attributes: Any) -> Iterator[Span]:
        new_span = self.create_span(attributes)
        try:
            with self.attach_current(new_span):
                yield new_span
        finally:
            self.close(new_span)

    async def instrument(self, span: Span, body: Awaitable[T]) -> T:
        with self.attach_current(span):
            return await body


default_registry = SpanRegistry()


def create_span(attributes: Mapping[str, Any] | None = None, *, parent: Span | None = _UNSET) -> Span:
    return default_registry.create_span(attributes, parent=parent)


def attach_current(span: Span):
    return span.registry.attach_current(span)


def current_span() -> Span | None:
    return default_registry.current_span()


def resolve_trace_id(span: Span | None) -> str | None:
    if span is None:
        return None
    return span.registry.resolve_trace_id(span)


def span(**attributes: Any):
    return default_registry.span(**attributes)


# --- Module Notes -----------------------------------------------------------
# asyncio copies the context into every new task, so the `_current_span` value is shared
# by contexts the registry cannot see. Node lifetime therefore follows Python references:
# handles and context values own nodes, nodes own their parents, the registry holds none.
# Every id reached while walking from a live span is therefore still in the index.
