"""
gcp_trace_logging.observability.middleware

HTTP middleware for request-scoped trace context.

Responsibilities:
- Extract the trace id from `X-Cloud-Trace-Context` (or W3C `traceparent`).
- Run the request inside a carrier scope so every log line it produces is correlated.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from gcp_trace_logging.context.carriers import AmbientCarrier, TraceCarrier

CLOUD_TRACE_HEADER = "x-cloud-trace-context"
TRACEPARENT_HEADER = "traceparent"

# TRACE_ID[/SPAN_ID][;o=OPTIONS]
_CLOUD_TRACE_RE = re.compile(r"^\s*([0-9A-Za-z-]+)(?:/[0-9]*)?(?:;o=[0-9]+)?\s*$")
# version-traceid-parentid-flags
_TRACEPARENT_RE = re.compile(r"^\s*([0-9a-f]{2})-([0-9a-f]{32})-([0-9a-f]{16})-([0-9a-f]{2})\s*$")


def parse_cloud_trace_header(value: str | None) -> str | None:
    if not value:
        return None
    m = _CLOUD_TRACE_RE.match(value)
    return m.group(1) if m else None


def parse_traceparent(value: str | None) -> str | None:
    if not value:
        return None
    m = _TRACEPARENT_RE.match(value)
    if m is None:
        return None
    version, trace_id, _, _ = m.groups()
    if version == "ff" or trace_id == "0" * 32:
        return None
    return trace_id


def extract_trace_id(headers: Mapping[str, str]) -> str | None:
    # Google front ends set X-Cloud-Trace-Context; prefer it when both are present.
    return parse_cloud_trace_header(headers.get(CLOUD_TRACE_HEADER)) or parse_traceparent(
        headers.get(TRACEPARENT_HEADER)
    )


class TraceContextMiddleware(BaseHTTPMiddleware):
    """
    - Scopes each request to the incoming trace id (or to "no trace")
    - Echoes the trace id back so callers can find the request's logs
    """

    header_name = "X-Cloud-Trace-Context"

    def __init__(self, app: ASGIApp, carrier: TraceCarrier | None = None) -> None:
        super().__init__(app)
        self._carrier = carrier or AmbientCarrier()

    async def dispatch(self, request: Request, call_next) -> Response:
        trace_id = extract_trace_id(request.headers)
        # The scope resets on every exit path, so nothing leaks into the next request.
        with self._carrier.scope(trace_id):
            response: Response = await call_next(request)

        if trace_id is not None:
            response.headers[self.header_name] = trace_id
        return response


# --- Module Notes -----------------------------------------------------------
# Malformed trace headers are treated as "no trace" rather than rejected: logging
# correlation is best-effort and must not change request handling.
