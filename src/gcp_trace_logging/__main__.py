"""
gcp_trace_logging.__main__

Entrypoint for `python -m gcp_trace_logging`.

Responsibilities:
- Load settings (fails fast without a project id).
- Configure logging and run the traced demo workload.
"""

from __future__ import annotations

import asyncio
import sys

from gcp_trace_logging.demo import run_demo
from gcp_trace_logging.errors import ConfigurationError
from gcp_trace_logging.observability.logging import configure_logging
from gcp_trace_logging.settings import get_settings


def main() -> int:
    try:
        settings = get_settings()
    except ConfigurationError as e:
        print(f"gcp-trace-logging: {e}", file=sys.stderr)
        return 2

    pipeline = configure_logging(settings=settings)
    asyncio.run(run_demo(pipeline.carrier, out=sys.stdout))
    return 0


if __name__ == "__main__":
    sys.exit(main())


# --- Module Notes -----------------------------------------------------------
# Example: TRACELOG_PROJECT_ID=PROJECT_ID_123 python -m gcp_trace_logging 2>logs.jsonl
