"""
gcp_trace_logging.context

Trace context carriers.

Responsibilities:
- Hold "which trace is active right now" for the executing logical task.
- Offer two interchangeable strategies: ambient (contextvar) and call-tree (spans).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The logging facade depends on `context.carriers.TraceCarrier`, not on either strategy directly.
