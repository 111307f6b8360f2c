"""structlog setup for crater-report.

Every event carries a short correlation id for the CLI invocation and the
report request being built, so the interleaved log lines of a weekly report
(two comparisons built concurrently) can be told apart.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any, TextIO

import structlog

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

# Libraries that log through the stdlib and would otherwise bypass structlog
QUIET_LOGGERS = ("httpx", "httpcore")

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")
_report: ContextVar[tuple[str, str]] = ContextVar("report", default=("", ""))


def get_correlation_id() -> str:
    """Correlation id of this invocation, created on first use."""
    cid = _correlation_id.get()
    if not cid:
        cid = uuid.uuid4().hex[:8]
        _correlation_id.set(cid)
    return cid


def set_report_context(kind: str, target: str = "") -> None:
    """Tag subsequent events with the report being built, e.g. ("comparison", "stable..beta")."""
    _, current_target = _report.get()
    _report.set((kind, target or current_target))


def add_report_context(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    cid = _correlation_id.get()
    if cid:
        event_dict.setdefault("correlation_id", cid)

    kind, target = _report.get()
    if kind:
        event_dict.setdefault("report_kind", kind)
    if target:
        event_dict.setdefault("report_target", target)
    return event_dict


def _renderer(format_type: str) -> structlog.types.Processor:
    if format_type == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(
    level: str = "info",
    format_type: str = "json",
    stream: TextIO | None = None,
) -> None:
    """
    Configure structlog for the process.

    Args:
        level: debug, info, warn or error
        format_type: 'json' for one JSON object per line, 'text' for console output
        stream: Destination (default: sys.stderr, so report output on stdout stays clean)
    """
    stream = stream or sys.stderr
    log_level = LEVELS.get(level.lower(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=stream, level=log_level, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            add_report_context,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(format_type),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(stream),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.types.FilteringBoundLogger:
    """Module logger, bound to ``logger_name`` when a name is given."""
    logger = structlog.get_logger()
    return logger.bind(logger_name=name) if name else logger


configure_logging()
