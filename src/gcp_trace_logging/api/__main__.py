"""
gcp_trace_logging.api.__main__

Entrypoint for running the demo service via `python -m gcp_trace_logging.api`.

Responsibilities:
- Load settings.
- Create the app.
- Start uvicorn with logging left to our stdlib bridge.
"""

from __future__ import annotations

import uvicorn

from gcp_trace_logging.api.app import create_app
from gcp_trace_logging.settings import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # uvicorn loggers propagate to the root TraceLoggingHandler
    )


if __name__ == "__main__":
    main()


# --- Module Notes -----------------------------------------------------------
# On Cloud Run, stderr JSON lines are picked up by the logging agent and the trace field
# links them to the request in Cloud Trace.
