"""Logging setup and the per-run log returned to the trigger caller."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Literal

import structlog

Level = Literal["info", "error"]


def configure_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Configure structlog. Called once per process before any log statements."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if fmt == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


@dataclass
class RunLog:
    """Ordered record of one rebuild run.

    Each entry is also emitted through structlog; the entries themselves are
    handed back to whoever triggered the run so it always gets a report.
    """

    logger: Any = field(default_factory=structlog.get_logger)
    entries: list[dict[str, Any]] = field(default_factory=list)

    def _add(self, level: Level, event: str, fields: dict[str, Any]) -> None:
        getattr(self.logger, level)(event, **fields)
        self.entries.append({"level": level, "event": event, **fields})

    def info(self, event: str, **fields: Any) -> None:
        self._add("info", event, fields)

    def error(self, event: str, **fields: Any) -> None:
        self._add("error", event, fields)

    @property
    def errors(self) -> list[dict[str, Any]]:
        return [e for e in self.entries if e["level"] == "error"]
