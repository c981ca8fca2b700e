"""
gcp_trace_logging.api.routers.work

Demo endpoint that logs from inside the request's trace scope.

Responsibilities:
- Run the shared demo workload; its log lines carry the request's trace id.
"""

from __future__ import annotations

from fastapi import APIRouter, Request

from gcp_trace_logging.demo import do_something

router = APIRouter()


@router.get("/work")
async def work(request: Request) -> dict[str, str | None]:
    await do_something()
    # The pipeline is stashed on app.state by `api.app.create_app`.
    carrier = request.app.state.logging.carrier
    return {"status": "done", "trace_id": carrier.current().trace_id}


# --- Module Notes -----------------------------------------------------------
# The handler receives no trace parameter: correlation comes from the middleware scope.
