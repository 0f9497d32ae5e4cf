"""Structured logging configuration using structlog.

The engine stays silent until the host configures structlog, either through
``setup_logging`` / ``configure_from_env`` or its own ``structlog.configure``
call. Until then every event is dropped, so nothing reaches stdout.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from changeset.config import load_config


def setup_logging(level: str = "info") -> None:
    """Configure structlog for JSON output to stderr."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def configure_from_env() -> None:
    """Configure logging from CHANGESET_LOG_LEVEL."""
    setup_logging(load_config().log.level)


def _drop(*args: Any, **kwargs: Any) -> None:
    return None


class _EngineLogger:
    """Resolves the component logger on each call; drops events while structlog is unconfigured."""

    def __init__(self, component: str) -> None:
        self._component = component

    def __getattr__(self, name: str) -> Any:
        if not structlog.is_configured():
            return _drop
        return getattr(structlog.get_logger(component=self._component), name)


def get_logger(component: str) -> Any:
    """Get a logger bound with a component name."""
    return _EngineLogger(component)
