"""Built-in validation rules.

A rule inspects the changeset's current (cast and normalized) values and adds
messages to an Errors collection. Anything with a ``validate(changeset,
errors)`` method, or a plain callable with that signature, can be listed in a
changeset's ``validators``.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Collection, Container, Iterable
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from changeset.errors import ConfigurationError
from changeset.validation.errors import Errors

if TYPE_CHECKING:
    from changeset.base import Changeset


@runtime_checkable
class Validator(Protocol):
    def validate(self, changeset: Changeset, errors: Errors) -> None: ...


if TYPE_CHECKING:
    ValidatorLike = Validator | Callable[[Changeset, Errors], None]


def is_blank(value: Any) -> bool:
    """None, whitespace-only strings and empty collections are blank."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set, frozenset)):
        return len(value) == 0
    return False


def check_validator(validator: Any, declared: Container[str] = ()) -> None:
    """Reject validators that are not callable or name undeclared fields."""
    if isinstance(validator, FieldRule):
        unknown = [field for field in validator.fields if field not in declared]
        if unknown:
            raise ConfigurationError(f"{validator!r} names undeclared fields: {', '.join(unknown)}")
        return
    if isinstance(validator, Validator) or callable(validator):
        return
    raise ConfigurationError(f"validator must define validate() or be callable, got {validator!r}")


def run_validators(validators: Iterable[ValidatorLike], changeset: Changeset, errors: Errors) -> None:
    for validator in validators:
        if isinstance(validator, Validator):
            validator.validate(changeset, errors)
        else:
            validator(changeset, errors)


class FieldRule:
    """Base for rules that check one or more named fields."""

    default_message = "is invalid"

    def __init__(self, *fields: str, allow_none: bool = False, message: str | None = None) -> None:
        if not fields:
            raise ConfigurationError(f"{type(self).__name__} needs at least one field")
        self.fields = fields
        self.allow_none = allow_none
        self.message = message

    def validate(self, changeset: Changeset, errors: Errors) -> None:
        for field in self.fields:
            value = changeset.get(field)
            if value is None and self.allow_none:
                continue
            self.check(field, value, errors)

    def check(self, field: str, value: Any, errors: Errors) -> None:
        raise NotImplementedError

    def _message(self, default: str) -> str:
        return self.message or default

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(self.fields)})"


class Presence(FieldRule):
    def check(self, field: str, value: Any, errors: Errors) -> None:
        if is_blank(value):
            errors.add(field, self._message("can't be blank"))


def _as_number(value: Any) -> Decimal | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation:
            return None
    return None


class Numericality(FieldRule):
    """Numeric checks. Messages follow ActiveModel's English defaults."""

    _COMPARISONS: tuple[tuple[str, Callable[[Decimal, Decimal], bool], str], ...] = (
        ("greater_than", lambda v, n: v > n, "must be greater than {count}"),
        ("greater_than_or_equal_to", lambda v, n: v >= n, "must be greater than or equal to {count}"),
        ("equal_to", lambda v, n: v == n, "must be equal to {count}"),
        ("less_than", lambda v, n: v < n, "must be less than {count}"),
        ("less_than_or_equal_to", lambda v, n: v <= n, "must be less than or equal to {count}"),
        ("other_than", lambda v, n: v != n, "must be other than {count}"),
    )

    def __init__(
        self,
        *fields: str,
        only_integer: bool = False,
        greater_than: float | None = None,
        greater_than_or_equal_to: float | None = None,
        equal_to: float | None = None,
        less_than: float | None = None,
        less_than_or_equal_to: float | None = None,
        other_than: float | None = None,
        allow_none: bool = False,
        message: str | None = None,
    ) -> None:
        super().__init__(*fields, allow_none=allow_none, message=message)
        self.only_integer = only_integer
        self.bounds: dict[str, Decimal] = {}
        requested = {
            "greater_than": greater_than,
            "greater_than_or_equal_to": greater_than_or_equal_to,
            "equal_to": equal_to,
            "less_than": less_than,
            "less_than_or_equal_to": less_than_or_equal_to,
            "other_than": other_than,
        }
        for option, bound in requested.items():
            if bound is None:
                continue
            number = _as_number(bound)
            if number is None:
                raise ConfigurationError(f"{option} must be a number, got {bound!r}")
            self.bounds[option] = number

    def check(self, field: str, value: Any, errors: Errors) -> None:
        number = _as_number(value)
        if number is None or not number.is_finite():
            errors.add(field, self._message("is not a number"))
            return
        if self.only_integer and number != number.to_integral_value():
            errors.add(field, self._message("must be an integer"))
            return
        for option, passes, template in self._COMPARISONS:
            bound = self.bounds.get(option)
            if bound is None:
                continue
            if not passes(number, bound):
                errors.add(field, self._message(template.format(count=bound)))


class Format(FieldRule):
    def __init__(
        self,
        *fields: str,
        pattern: str | re.Pattern[str],
        allow_none: bool = False,
        message: str | None = None,
    ) -> None:
        super().__init__(*fields, allow_none=allow_none, message=message)
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern

    def check(self, field: str, value: Any, errors: Errors) -> None:
        text = "" if value is None else str(value)
        if not self.pattern.search(text):
            errors.add(field, self._message("is invalid"))


def _characters(count: int) -> str:
    return f"{count} character" if count == 1 else f"{count} characters"


class Length(FieldRule):
    def __init__(
        self,
        *fields: str,
        minimum: int | None = None,
        maximum: int | None = None,
        exactly: int | None = None,
        allow_none: bool = False,
        message: str | None = None,
    ) -> None:
        super().__init__(*fields, allow_none=allow_none, message=message)
        if minimum is None and maximum is None and exactly is None:
            raise ConfigurationError("Length needs minimum, maximum or exactly")
        self.minimum = minimum
        self.maximum = maximum
        self.exactly = exactly

    def check(self, field: str, value: Any, errors: Errors) -> None:
        size = len(value) if isinstance(value, (str, Collection)) else 0
        if self.exactly is not None and size != self.exactly:
            errors.add(field, self._message(f"is the wrong length (should be {_characters(self.exactly)})"))
        if self.minimum is not None and size < self.minimum:
            errors.add(field, self._message(f"is too short (minimum is {_characters(self.minimum)})"))
        if self.maximum is not None and size > self.maximum:
            errors.add(field, self._message(f"is too long (maximum is {_characters(self.maximum)})"))


class Inclusion(FieldRule):
    def __init__(
        self,
        *fields: str,
        choices: Collection[Any],
        allow_none: bool = False,
        message: str | None = None,
    ) -> None:
        super().__init__(*fields, allow_none=allow_none, message=message)
        self.choices = choices

    def check(self, field: str, value: Any, errors: Errors) -> None:
        if value not in self.choices:
            errors.add(field, self._message("is not included in the list"))
