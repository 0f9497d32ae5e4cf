"""Input extraction: whitelist raw input down to declared field names."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any

from changeset.observability.logging import get_logger

_logger = get_logger("extract")


def to_mapping(raw: Any) -> dict[Any, Any]:
    """Convert raw input to a plain dict without touching the original.

    Handles mappings (including werkzeug ``MultiDict``, a dict subclass, which
    keeps the first value of a repeated key), non-mapping parameter wrappers
    exposing ``to_dict()``, pydantic models (``model_dump()``) and iterables
    of key/value pairs. Anything else yields an empty dict.
    """
    if raw is None:
        return {}
    if isinstance(raw, Mapping):
        return dict(raw)
    to_dict = getattr(raw, "to_dict", None)
    if callable(to_dict):
        return dict(to_dict())
    model_dump = getattr(raw, "model_dump", None)
    if callable(model_dump):
        return dict(model_dump())
    if isinstance(raw, Iterable) and not isinstance(raw, (str, bytes)):
        try:
            return dict(raw)
        except (TypeError, ValueError):
            _logger.debug("raw_input_not_pairs", input_type=type(raw).__name__)
            return {}
    _logger.debug("raw_input_unsupported", input_type=type(raw).__name__)
    return {}


def safe_key(key: Any) -> str | None:
    """Return the identifier form of ``key``, or None when it has none."""
    if isinstance(key, Enum):
        key = key.value
    if isinstance(key, str):
        return key
    if isinstance(key, bytes):
        try:
            return key.decode("utf-8")
        except UnicodeDecodeError:
            return None
    return None


def snapshot(raw: Any) -> Mapping[Any, Any]:
    """Read-only view over a shallow copy of the raw input."""
    return MappingProxyType(to_mapping(raw))


def extract_declared(raw: Any, declared: Iterable[str]) -> dict[str, Any]:
    """Keep only entries whose key names a declared field.

    Undeclared keys and keys without an identifier form are dropped silently.
    Declared fields missing from ``raw`` are omitted, not defaulted.
    """
    allowed = set(declared)
    extracted: dict[str, Any] = {}
    for key, value in to_mapping(raw).items():
        name = safe_key(key)
        if name is not None and name in allowed:
            extracted[name] = value
    return extracted
