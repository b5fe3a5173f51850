"""Logging utilities for the census service.

Wraps the shared observability helpers and adds a parse summary audit event.
Census text contains patient identifiers, so only counts and the sort order
are ever logged.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterator, Sequence

import structlog

from shared.observability.logger import (
    configure_logging as _base_configure_logging,
    generate_request_id,
    get_logger as _get_logger,
    get_request_id,
    request_context,
)

__all__ = [
    "ParseSummary",
    "census_logging_context",
    "configure_logging",
    "get_logger",
    "record_parse_summary",
]

_AUDIT_LOGGER = _get_logger("census.audit")


def configure_logging(
    *, service_name: str, level: str | int = "INFO", json_logs: bool = True
) -> None:
    """Configure structured logging for the census service."""

    _base_configure_logging(service_name=service_name, level=level, json_logs=json_logs)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return _get_logger(name)


@dataclass(frozen=True, slots=True)
class ParseSummary:
    """Counts describing one parse-and-arrange cycle."""

    profile: str
    lines: int
    parsed: int
    rejected: int
    marked: int
    sort_keys: Sequence[str]
    prioritized: bool
    correlation_id: str
    timestamp: str = field(
        default_factory=lambda: datetime.now(tz=timezone.utc).isoformat()
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "profile": self.profile,
            "lines": self.lines,
            "parsed": self.parsed,
            "rejected": self.rejected,
            "marked": self.marked,
            "sortKeys": list(self.sort_keys),
            "prioritized": self.prioritized,
            "correlationId": self.correlation_id,
            "timestamp": self.timestamp,
        }


@contextmanager
def census_logging_context(
    *, profile: str | None = None, correlation_id: str | None = None, **extra: Any
) -> Iterator[str]:
    """Bind census specific context for the duration of a request."""

    context = dict(extra)
    if profile:
        context.setdefault("profile", profile)

    with request_context(request_id=correlation_id or get_request_id(), **context) as bound_id:
        yield bound_id


def record_parse_summary(
    *,
    profile: str,
    lines: int,
    parsed: int,
    rejected: int,
    marked: int,
    sort_keys: Sequence[str],
    prioritized: bool,
    correlation_id: str | None = None,
) -> ParseSummary:
    """Emit a ``census_parse_summary`` audit entry and return it."""

    summary = ParseSummary(
        profile=profile,
        lines=lines,
        parsed=parsed,
        rejected=rejected,
        marked=marked,
        sort_keys=tuple(sort_keys),
        prioritized=prioritized,
        correlation_id=correlation_id or get_request_id() or generate_request_id(),
    )
    _AUDIT_LOGGER.info("census_parse_summary", **summary.to_dict())
    return summary
