"""
gcp_trace_logging.context.ambient

Ambient trace id carrier backed by `contextvars`.

Responsibilities:
- Store the current trace id per logical task (asyncio task or thread context).
- Push a value for the extent of a block and restore the previous one on every exit path.
"""

from __future__ import annotations

import contextvars
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from typing import ParamSpec, TypeVar

T = TypeVar("T")
P = ParamSpec("P")

# asyncio copies the current context into each new Task, so the value follows the
# logical task across suspension points rather than the worker thread.
_current_trace_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "gcp_trace_id", default=None
)


def current() -> str | None:
    return _current_trace_id.get()


@contextmanager
def trace_scope(trace_id: str | None) -> Iterator[str | None]:
    """
    Make `trace_id` the active trace for the enclosed block.

    Works in plain functions and inside coroutines (a `with` body may contain `await`).
    Passing None explicitly masks an outer trace for the block.
    """

    token = _current_trace_id.set(trace_id)
    try:
        yield trace_id
    finally:
        # Token reset restores exactly the value seen on entry, so nested scopes unwind in order.
        _current_trace_id.reset(token)


async def enter_scope(trace_id: str | None, body: Awaitable[T]) -> T:
    with trace_scope(trace_id):
        return await body


def run_in_scope(
    trace_id: str | None, fn: Callable[P, T], *args: P.args, **kwargs: P.kwargs
) -> T:
    with trace_scope(trace_id):
        return fn(*args, **kwargs)


# --- Module Notes -----------------------------------------------------------
# Worker threads do not inherit contextvars by default. Use `asyncio.to_thread` or
# `contextvars.copy_context().run` when handing traced work to a thread pool.
