"""Changeset definitions and instances.

A changeset turns raw, untyped input into cast and normalized values for a
declared set of fields, diffs them against an existing record and applies
the difference through the record's own update operation.

Example::

    class UserChangeset(Changeset):
        model = User
        fields = [
            FieldSpec("name", normalize=["strip", "squish"]),
            FieldSpec("email", normalize=["strip", "downcase"]),
            FieldSpec("age", TypeTag.INTEGER),
        ]
        validators = [Presence("name", "email")]

    changeset = UserChangeset(user, params)
    if changeset.apply():
        ...

Applying a valid changeset always calls the record's update, even when
nothing changed; the payload is then empty and the record is expected to
treat it as a no-op.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any, ClassVar

from changeset.casting import cast_value
from changeset.errors import CastError, ConfigurationError, ValidationFailed
from changeset.extract import extract_declared, snapshot
from changeset.models.schema import AttributeSchema, FieldSpec
from changeset.normalizers import run_pipeline
from changeset.observability.logging import get_logger
from changeset.record import read_field
from changeset.validation.errors import Errors
from changeset.validation.rules import check_validator, run_validators

_logger = get_logger("changeset")


def _differs(old: Any, new: Any) -> bool:
    # 1 == True in Python, but a boolean replacing a number is still a change
    if isinstance(old, bool) != isinstance(new, bool):
        return True
    return old != new


class Changeset:
    """Base class for changeset definitions.

    Subclasses declare ``fields`` (FieldSpec entries), optional ``validators``
    and an optional ``model`` hint. The schema is compiled once, when the
    subclass is defined, and extends the parent's schema. Fields whose names
    collide with changeset methods (``model``, ``errors``, ...) are still
    reachable through ``get()``.
    """

    model: ClassVar[type | None] = None
    fields: ClassVar[Sequence[FieldSpec]] = ()
    validators: ClassVar[Sequence[Any]] = ()
    include_nil_on_apply: ClassVar[bool] = False

    schema: ClassVar[AttributeSchema] = AttributeSchema().freeze()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        parent_cls = next(
            base for base in cls.__mro__[1:] if isinstance(base.__dict__.get("schema"), AttributeSchema)
        )
        parent = parent_cls.schema

        schema = parent.copy(model=cls.model)
        own_fields = cls.__dict__.get("fields", ())
        if isinstance(own_fields, (str, FieldSpec)):
            raise ConfigurationError(f"{cls.__name__}.fields must be a sequence of FieldSpec")
        for spec in own_fields:
            if not isinstance(spec, FieldSpec):
                raise ConfigurationError(f"{cls.__name__}.fields entries must be FieldSpec, got {spec!r}")
            schema.declare(spec)
        cls.schema = schema.freeze()

        # validators accumulate along the class hierarchy
        inherited = parent_cls._all_validators
        own_validators = tuple(cls.__dict__.get("validators", ()))
        for validator in own_validators:
            check_validator(validator, cls.schema)
        cls._all_validators = inherited + own_validators

    _all_validators: ClassVar[tuple[Any, ...]] = ()

    @classmethod
    def declared_field_names(cls) -> tuple[str, ...]:
        return cls.schema.field_names()

    @classmethod
    def normalizers(cls) -> dict[str, tuple[str, ...]]:
        """Normalizer ids per field, for fields that declare any."""
        return {
            definition.name: definition.normalizers
            for definition in cls.schema
            if definition.normalizers
        }

    def __init__(self, record: Any, raw_input: Any = None) -> None:
        object.__setattr__(self, "_record", record)
        object.__setattr__(self, "_raw_input", snapshot(raw_input))
        object.__setattr__(self, "_cast_errors", {})
        object.__setattr__(self, "_errors", None)

        extracted = extract_declared(self._raw_input, self.schema.field_names())
        values: dict[str, Any] = {}
        for definition in self.schema:
            raw = extracted.get(definition.name)
            try:
                value = cast_value(definition.name, raw, definition.type)
            except CastError as exc:
                _logger.debug(
                    "cast_failed",
                    changeset=type(self).__name__,
                    field=exc.field,
                    type=exc.type_tag,
                )
                self._cast_errors[definition.name] = exc
                value = None
            values[definition.name] = run_pipeline(value, definition.normalizers)
        object.__setattr__(self, "_values", values)

    # -- read access -------------------------------------------------------

    @property
    def record(self) -> Any:
        return self._record

    @property
    def raw_input(self) -> Mapping[Any, Any]:
        return self._raw_input

    @property
    def values(self) -> Mapping[str, Any]:
        return MappingProxyType(self._values)

    @property
    def cast_errors(self) -> Mapping[str, CastError]:
        return MappingProxyType(self._cast_errors)

    def get(self, name: str) -> Any:
        try:
            return self._values[name]
        except KeyError:
            raise KeyError(f"{type(self).__name__} has no field {name!r}") from None

    def to_dict(self) -> dict[str, Any]:
        return dict(self._values)

    def __getattr__(self, name: str) -> Any:
        values = self.__dict__.get("_values")
        if values is not None and name in values:
            return values[name]
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        if name in self.schema:
            raise AttributeError(f"field {name!r} is read-only after construction")
        object.__setattr__(self, name, value)

    # -- diff --------------------------------------------------------------

    def _is_changed(self, name: str) -> bool:
        return _differs(read_field(self._record, name), self._values[name])

    def changed_fields(self) -> list[str]:
        """Declared fields whose value differs from the record, in declaration order."""
        return [name for name in self.schema.field_names() if self._is_changed(name)]

    def is_changed(self) -> bool:
        return any(self._is_changed(name) for name in self.schema.field_names())

    def changes(self) -> dict[str, tuple[Any, Any]]:
        """``{field: (old, new)}`` for changed fields; old is read from the record now."""
        result: dict[str, tuple[Any, Any]] = {}
        for name in self.schema.field_names():
            old = read_field(self._record, name)
            new = self._values[name]
            if _differs(old, new):
                result[name] = (old, new)
        return result

    def patch_payload(self, include_nil: bool = False) -> dict[str, Any]:
        """Changed fields and their new values.

        Fields whose new value is None are left out unless ``include_nil``.
        """
        payload: dict[str, Any] = {}
        for name in self.changed_fields():
            value = self._values[name]
            if value is None and not include_nil:
                continue
            payload[name] = value
        return payload

    # -- validation --------------------------------------------------------

    def validate(self) -> bool:
        """Run cast checks and validators, replacing any cached result."""
        errors = Errors()
        for name, exc in self._cast_errors.items():
            errors.add(name, f"is not a valid {exc.type_tag}")
        run_validators(self._all_validators, self, errors)
        object.__setattr__(self, "_errors", errors)
        return not errors

    def is_valid(self) -> bool:
        if self._errors is None:
            return self.validate()
        return not self._errors

    @property
    def errors(self) -> Errors:
        if self._errors is None:
            self.validate()
        return self._errors

    # -- apply -------------------------------------------------------------

    def apply(self) -> Any:
        """Update the record when valid.

        Returns False without touching the record when invalid; otherwise
        returns whatever ``record.update`` returns.
        """
        if not self.is_valid():
            _logger.debug("apply_skipped", changeset=type(self).__name__, errors=self.errors.to_dict())
            return False
        payload = self.patch_payload(include_nil=self.include_nil_on_apply)
        _logger.debug("apply", changeset=type(self).__name__, fields=sorted(payload))
        return self._record.update(payload)

    def apply_or_raise(self) -> Any:
        """Update the record when valid, raising ValidationFailed otherwise.

        Errors raised by ``record.update_or_raise`` propagate unchanged.
        """
        if not self.is_valid():
            raise ValidationFailed(self.errors, self)
        payload = self.patch_payload(include_nil=self.include_nil_on_apply)
        _logger.debug("apply_or_raise", changeset=type(self).__name__, fields=sorted(payload))
        return self._record.update_or_raise(payload)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values!r})"
