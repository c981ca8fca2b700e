"""
tests.test_api

Demo service: request-scoped trace correlation through the middleware.

Responsibilities:
- Ensure the FastAPI app boots and logs with the incoming trace header.
"""

from __future__ import annotations

import httpx
import pytest

from conftest import MemorySink
from gcp_trace_logging.api.app import create_app
from gcp_trace_logging.encoder import TRACE_KEY
from gcp_trace_logging.observability.middleware import (
    extract_trace_id,
    parse_cloud_trace_header,
    parse_traceparent,
)
from gcp_trace_logging.settings import Settings


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("105445aa7843bc8bf206b12000100000/1;o=1", "105445aa7843bc8bf206b12000100000"),
        ("abc123/1;o=1", "abc123"),
        ("abc123", "abc123"),
        ("abc123/456", "abc123"),
        ("", None),
        (None, None),
        ("/1;o=1", None),
        ("bad value/1", None),
    ],
)
def test_parse_cloud_trace_header(value: str | None, expected: str | None) -> None:
    assert parse_cloud_trace_header(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("00-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01", "4bf92f3577b34da6a3ce929d0e0e4736"),
        ("ff-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01", None),
        ("00-00000000000000000000000000000000-00f067aa0ba902b7-01", None),
        ("00-4bf92f-00f067aa0ba902b7-01", None),
        (None, None),
    ],
)
def test_parse_traceparent(value: str | None, expected: str | None) -> None:
    assert parse_traceparent(value) == expected


def test_cloud_trace_header_wins_over_traceparent() -> None:
    headers = {
        "x-cloud-trace-context": "abc/1;o=1",
        "traceparent": "00-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01",
    }
    assert extract_trace_id(headers) == "abc"
    assert extract_trace_id({"traceparent": headers["traceparent"]}) == "4bf92f3577b34da6a3ce929d0e0e4736"
    assert extract_trace_id({}) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("carrier", ["ambient", "call_tree"])
async def test_work_endpoint_logs_with_request_trace(sink: MemorySink, carrier: str) -> None:
    app = create_app(settings=Settings(project_id="proj-x", carrier=carrier), sink=sink)

    # httpx ASGITransport does not manage lifespan; drive it explicitly.
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            r = await client.get("/healthz")
            assert r.status_code == 200
            assert r.json()["status"] == "ok"

            r = await client.get("/work", headers={"X-Cloud-Trace-Context": "abc123/1;o=1"})
            assert r.status_code == 200
            assert r.json() == {"status": "done", "trace_id": "abc123"}
            assert r.headers["x-cloud-trace-context"] == "abc123"

            r = await client.get("/work")
            assert r.json() == {"status": "done", "trace_id": None}
            assert "x-cloud-trace-context" not in r.headers

    work_lines = [e for e in sink.entries() if e["message"].startswith("Do")]
    assert [e.get(TRACE_KEY) for e in work_lines] == [
        "projects/proj-x/traces/abc123",
        "projects/proj-x/traces/abc123",
        None,
        None,
    ]
    startup = next(e for e in sink.entries() if e["message"] == "startup")
    assert startup["carrier"] == carrier
    assert TRACE_KEY not in startup


# --- Module Notes -----------------------------------------------------------
# Other log lines (uvicorn/httpx via the stdlib bridge) may also appear; assertions
# filter on the demo workload messages.
