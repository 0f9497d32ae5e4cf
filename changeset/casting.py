"""Type casting of raw input values to declared field types.

Casting is total for ``None``: a missing value stays ``None`` whatever the
target type. Blank text is treated as missing for every non-string type.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from changeset.errors import CastError, ConfigurationError
from changeset.models.schema import TypeTag

Caster = Callable[[Any], Any]

_INTEGER_RE = re.compile(r"^[+-]?\d+$")

# same bound as the interpreter's default int string conversion limit
_MAX_INTEGER_DIGITS = 4300

_FALSE_VALUES = frozenset({"0", "f", "F", "false", "FALSE", "off", "OFF"})


def _is_blank_text(value: Any) -> bool:
    return isinstance(value, str) and not value.strip()


def _cast_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8")
    if isinstance(value, bool):
        return "t" if value else "f"
    return str(value)


def _truncate(number: Decimal) -> int:
    if not number.is_finite():
        raise ValueError(f"not a finite number: {number}")
    if number.adjusted() >= _MAX_INTEGER_DIGITS:
        raise ValueError("integer value is too large")
    if number.adjusted() < 0:
        return 0
    return int(number)


def _cast_integer(value: Any) -> int | None:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, Decimal):
        return _truncate(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if _INTEGER_RE.match(text):
            if len(text.lstrip("+-")) > _MAX_INTEGER_DIGITS:
                raise ValueError("integer text is too long")
            return int(text)
        # "30.0" and "1e3" are numeric text; truncate like numeric input
        return _truncate(Decimal(text))
    raise TypeError(f"unsupported value for integer: {type(value).__name__}")


def _cast_float(value: Any) -> float | None:
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    if isinstance(value, str):
        if not value.strip():
            return None
        number = float(value)
        if not math.isfinite(number):
            raise ValueError(f"not a finite number: {value!r}")
        return number
    raise TypeError(f"unsupported value for float: {type(value).__name__}")


def _cast_decimal(value: Any) -> Decimal | None:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        number = Decimal(text)
        if not number.is_finite():
            raise ValueError(f"not a finite number: {text!r}")
        return number
    raise TypeError(f"unsupported value for decimal: {type(value).__name__}")


def _cast_boolean(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if _is_blank_text(value):
        return None
    if isinstance(value, str):
        return value not in _FALSE_VALUES
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    return True


def _cast_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        return date.fromisoformat(text)
    raise TypeError(f"unsupported value for date: {type(value).__name__}")


def _cast_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        return datetime.fromisoformat(text)
    raise TypeError(f"unsupported value for datetime: {type(value).__name__}")


_CASTERS: dict[str, Caster] = {
    TypeTag.STRING: _cast_string,
    TypeTag.INTEGER: _cast_integer,
    TypeTag.FLOAT: _cast_float,
    TypeTag.DECIMAL: _cast_decimal,
    TypeTag.BOOLEAN: _cast_boolean,
    TypeTag.DATE: _cast_date,
    TypeTag.DATETIME: _cast_datetime,
}


def register_type(tag: str, caster: Caster) -> None:
    """Register a caster for a custom type tag.

    The caster receives a non-None raw value and returns the cast value. It
    signals failure by raising ValueError, TypeError or ArithmeticError.
    """
    if not isinstance(tag, str) or not tag:
        raise ConfigurationError(f"type tag must be a non-empty string, got {tag!r}")
    if not callable(caster):
        raise ConfigurationError(f"caster for {tag!r} is not callable")
    _CASTERS[tag] = caster


def known_types() -> tuple[str, ...]:
    return tuple(str(tag) for tag in _CASTERS)


def get_caster(type_tag: str) -> Caster:
    try:
        return _CASTERS[type_tag]
    except KeyError:
        raise ConfigurationError(
            f"unknown type: {type_tag!r}. Known types: {', '.join(known_types())}"
        ) from None


def cast_value(field: str, value: Any, type_tag: str) -> Any:
    """Cast ``value`` to ``type_tag`` for ``field``.

    Raises:
        ConfigurationError: the type tag is not registered.
        CastError: the value cannot be converted.
    """
    caster = get_caster(type_tag)
    if value is None:
        return None
    try:
        return caster(value)
    except (ValueError, TypeError, ArithmeticError, InvalidOperation) as exc:
        raise CastError(field, value, str(type_tag)) from exc
