"""
gcp_trace_logging.records

Value types flowing through the logging pipeline.

Responsibilities:
- Define the severity scale and its wire names.
- Define the immutable `Record` snapshot and the `TraceContext` lookup result.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar


class Severity(enum.IntEnum):
    # Numeric values line up with stdlib `logging` / structlog levels; TRACE sits below DEBUG.
    TRACE = 5
    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40
    CRITICAL = 50

    @property
    def wire_name(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, name: str) -> Severity:
        """
        Accepts member names case-insensitively plus the common stdlib/structlog aliases.
        """

        key = name.strip().lower()
        key = _ALIASES.get(key, key)
        try:
            return cls[key.upper()]
        except KeyError:
            raise ValueError(f"unknown severity: {name!r}") from None

    @classmethod
    def from_level(cls, level: int) -> Severity:
        # Bucket arbitrary stdlib levels (e.g. custom 25) down to the nearest member.
        for member in sorted(cls, reverse=True):
            if level >= member:
                return member
        return cls.TRACE


_ALIASES = {
    "warning": "warn",
    "fatal": "critical",
    "exception": "error",
    "msg": "info",
    "notset": "trace",
}


@dataclass(frozen=True, slots=True)
class Record:
    """
    Snapshot of one log occurrence, consumed once by the encoder.

    `timestamp` is normally left unset so the encoder stamps encode time.
    """

    severity: Severity
    message: str
    timestamp: datetime | None = None
    fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class TraceContext:
    trace_id: str | None = None

    EMPTY: ClassVar[TraceContext]

    @property
    def is_traced(self) -> bool:
        return self.trace_id is not None


TraceContext.EMPTY = TraceContext()


# --- Module Notes -----------------------------------------------------------
# Records are never buffered; the facade builds one, hands it to the encoder and drops it.
