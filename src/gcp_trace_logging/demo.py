"""
gcp_trace_logging.demo

Sample traced workload shared by the CLI demo and the demo HTTP service.

Responsibilities:
- Log from nested async code that never receives a trace id explicitly.
- Run the workload with trace 456, without a trace, and with trace 789.
"""

from __future__ import annotations

import asyncio
from typing import TextIO

from gcp_trace_logging.context.carriers import TraceCarrier
from gcp_trace_logging.observability.logging import get_logger

log = get_logger(__name__)


async def do_something() -> None:
    log.info("Doing something")
    # Suspension point: the trace must survive the task being parked and resumed.
    await asyncio.sleep(0)
    log.info("Done doing something")


DEMO_RUNS: tuple[tuple[str, str | None], ...] = (
    ("With trace_id=456", "456"),
    ("Without a trace_id:", None),
    ("With trace_id=789", "789"),
)


async def run_demo(carrier: TraceCarrier, *, out: TextIO) -> None:
    for label, trace_id in DEMO_RUNS:
        out.write(f"{label}\n")
        out.flush()
        if trace_id is None:
            await do_something()
            continue
        with carrier.scope(trace_id):
            await do_something()


# --- Module Notes -----------------------------------------------------------
# Banners go to `out` (stdout) while log lines go to the sink (stderr by default).
