"""
gcp_trace_logging.observability

Observability package.

Responsibilities:
- Structured logging configuration (structlog facade + stdlib bridge).
- Request trace context propagation for consistent log correlation.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Carriers live in `gcp_trace_logging.context`; this package only wires them into logging.
