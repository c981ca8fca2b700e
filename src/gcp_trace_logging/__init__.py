"""
gcp_trace_logging

Top-level package for trace-correlated structured logging on Google Cloud.

Responsibilities:
- Expose package version metadata.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"


# --- Module Notes -----------------------------------------------------------
# Keep this file minimal to avoid import-time side effects across the codebase.
# Public entry points live in `observability.logging` and `context.*`.
