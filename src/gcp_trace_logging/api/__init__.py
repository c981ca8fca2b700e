"""
gcp_trace_logging.api

Demo HTTP service showing request-scoped trace correlation.

Responsibilities:
- FastAPI app factory and router modules.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer stays thin: it opens trace scopes and delegates to `gcp_trace_logging.demo`.
