"""Named value normalizers.

A normalizer is a pure ``value -> value`` function applied after type casting
and before any diff or validation logic observes the value. String
normalizers leave non-string values untouched.

Built-in ids:
    strip        -- trim leading/trailing whitespace
    squish       -- collapse whitespace runs to one space and trim
    downcase     -- lower-case
    upcase       -- upper-case
    blank_to_nil -- map None, "" and whitespace-only strings to None
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from changeset.errors import ConfigurationError

Normalizer = Callable[[Any], Any]


def strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def squish(value: Any) -> Any:
    return " ".join(value.split()) if isinstance(value, str) else value


def downcase(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def upcase(value: Any) -> Any:
    return value.upper() if isinstance(value, str) else value


def blank_to_nil(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


_REGISTRY: dict[str, Normalizer] = {
    "strip": strip,
    "squish": squish,
    "downcase": downcase,
    "upcase": upcase,
    "blank_to_nil": blank_to_nil,
}


def register_normalizer(name: str, fn: Normalizer) -> None:
    """Register a custom normalizer under ``name``.

    Registration must happen before any changeset that references the id is
    defined, since ids are checked at definition time.
    """
    if not isinstance(name, str) or not name:
        raise ConfigurationError(f"normalizer id must be a non-empty string, got {name!r}")
    if not callable(fn):
        raise ConfigurationError(f"normalizer {name!r} is not callable")
    _REGISTRY[name] = fn


def available_normalizers() -> tuple[str, ...]:
    return tuple(_REGISTRY)


def get_normalizer(name: str) -> Normalizer:
    try:
        return _REGISTRY[name]
    except KeyError:
        raise ConfigurationError(f"unknown normalizer: {name!r}") from None


def resolve_normalizers(declaration: str | Iterable[str] | None) -> tuple[str, ...]:
    """Turn a ``normalize=`` declaration into an ordered tuple of known ids.

    Accepts ``None`` (no normalizers), a single id, or an ordered sequence of
    ids. ``None`` entries and unknown ids raise ConfigurationError.
    """
    if declaration is None:
        return ()
    if isinstance(declaration, str):
        ids: list[Any] = [declaration]
    else:
        ids = list(declaration)

    for name in ids:
        if name is None:
            raise ConfigurationError("normalizer id must not be None")
        if not isinstance(name, str) or name not in _REGISTRY:
            raise ConfigurationError(
                f"unknown normalizer: {name!r}. Available: {', '.join(available_normalizers())}"
            )
    return tuple(ids)


def run_pipeline(value: Any, ids: Iterable[str]) -> Any:
    """Apply normalizers in order, each consuming the previous output."""
    for name in ids:
        value = get_normalizer(name)(value)
    return value
