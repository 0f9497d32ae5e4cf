"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class ChangesetConfig:
    """Top-level changeset engine configuration."""

    log: LogConfig = field(default_factory=LogConfig)
