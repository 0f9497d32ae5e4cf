"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from changeset.models.config import ChangesetConfig, LogConfig


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"CHANGESET_{key}", default)


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> ChangesetConfig:
    """Load configuration from CHANGESET_* environment variables."""
    return ChangesetConfig(
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
