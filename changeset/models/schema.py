"""Attribute schema data structures.

The schema is owned by a changeset definition and shared by every instance of
that definition. It records, in declaration order, each field's type tag and
its normalizer pipeline.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType

from changeset.errors import ConfigurationError
from changeset.normalizers import resolve_normalizers


class TypeTag(StrEnum):
    """Built-in type tags understood by the type caster."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"


@dataclass(frozen=True)
class FieldSpec:
    """A field declaration as written in a changeset class body.

    ``normalize`` may be a single normalizer id or an ordered sequence of ids.
    """

    name: str
    type: str = TypeTag.STRING
    normalize: str | tuple[str, ...] | list[str] | None = None


@dataclass(frozen=True)
class FieldDefinition:
    """A compiled field: name, type tag and resolved normalizer ids."""

    name: str
    type: str = TypeTag.STRING
    normalizers: tuple[str, ...] = field(default_factory=tuple)


class AttributeSchema:
    """Ordered registry of declared fields.

    Re-declaring a name overwrites its type and normalizers but keeps its
    original position. Once frozen, the schema rejects further declarations.
    Type tags are not checked here; an unknown tag fails when casting.
    """

    def __init__(self, model: type | None = None) -> None:
        self.model = model
        self._fields: dict[str, FieldDefinition] = {}
        self._frozen = False

    def declare_field(
        self,
        name: str,
        type: str = TypeTag.STRING,
        normalize: str | Iterable[str] | None = None,
    ) -> FieldDefinition:
        if self._frozen:
            raise ConfigurationError(f"schema is frozen; cannot declare {name!r}")
        if not isinstance(name, str) or not name.isidentifier():
            raise ConfigurationError(f"field name must be a valid identifier, got {name!r}")
        if not isinstance(type, str) or not type:
            raise ConfigurationError(f"type tag for {name!r} must be a non-empty string")

        definition = FieldDefinition(
            name=name,
            type=str(type),
            normalizers=resolve_normalizers(normalize),
        )
        self._fields[name] = definition
        return definition

    def declare(self, spec: FieldSpec) -> FieldDefinition:
        return self.declare_field(spec.name, spec.type, spec.normalize)

    def field_names(self) -> tuple[str, ...]:
        return tuple(self._fields)

    def normalizers_for(self, name: str) -> tuple[str, ...]:
        definition = self._fields.get(name)
        return definition.normalizers if definition else ()

    def type_for(self, name: str) -> str:
        return self._fields[name].type

    @property
    def fields(self) -> Mapping[str, FieldDefinition]:
        return MappingProxyType(self._fields)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> AttributeSchema:
        self._frozen = True
        return self

    def copy(self, model: type | None = None) -> AttributeSchema:
        """Return an unfrozen copy, used when a definition extends another."""
        clone = AttributeSchema(model=model if model is not None else self.model)
        clone._fields = dict(self._fields)
        return clone

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[FieldDefinition]:
        return iter(self._fields.values())

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"AttributeSchema(fields={list(self._fields)!r})"
