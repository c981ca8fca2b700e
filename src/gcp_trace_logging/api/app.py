"""
gcp_trace_logging.api.app

FastAPI app factory for the demo service.

Responsibilities:
- Configure the trace-correlated logging pipeline once at startup.
- Register the trace context middleware and routers.
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from gcp_trace_logging import __version__
from gcp_trace_logging.api.routers.health import router as health_router
from gcp_trace_logging.api.routers.work import router as work_router
from gcp_trace_logging.observability.logging import configure_logging, get_logger
from gcp_trace_logging.observability.middleware import TraceContextMiddleware
from gcp_trace_logging.settings import Settings
from gcp_trace_logging.sink import StreamSink

log = get_logger(__name__)


def create_app(*, settings: Settings, sink: StreamSink | None = None) -> FastAPI:
    # Configure structured logging before the app serves requests.
    pipeline = configure_logging(settings=settings, sink=sink)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        log.info("startup", service=settings.service_name, carrier=settings.carrier)
        yield
        log.info("shutdown")

    app = FastAPI(
        title=settings.service_name,
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.logging = pipeline

    # The middleware opens scopes on the same carrier the loggers read from.
    app.add_middleware(TraceContextMiddleware, carrier=pipeline.carrier)
    app.include_router(health_router, tags=["health"])
    app.include_router(work_router, tags=["demo"])

    return app


# --- Module Notes -----------------------------------------------------------
# Business endpoints never see trace ids; they only log.
