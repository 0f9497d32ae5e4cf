"""Declarative changesets: whitelist, cast, normalize, diff and apply input.

Exports:
    Changeset          -- base class for changeset definitions.
    FieldSpec, TypeTag -- field declarations used in changeset class bodies.
    AttributeSchema    -- compiled, ordered field registry.
    Errors             -- field-keyed validation messages.
    CastError, ConfigurationError, ValidationFailed -- error kinds.
    register_normalizer, register_type -- extension points.
"""

from changeset.base import Changeset
from changeset.casting import cast_value, register_type
from changeset.errors import CastError, ChangesetError, ConfigurationError, ValidationFailed
from changeset.models.schema import AttributeSchema, FieldDefinition, FieldSpec, TypeTag
from changeset.normalizers import register_normalizer
from changeset.record import DictRecord, RaisingRecord, Record, read_field
from changeset.validation import Errors, Format, Inclusion, Length, Numericality, Presence, Validator

__version__ = "0.1.0"

__all__ = [
    "AttributeSchema",
    "CastError",
    "Changeset",
    "ChangesetError",
    "ConfigurationError",
    "DictRecord",
    "Errors",
    "FieldDefinition",
    "FieldSpec",
    "Format",
    "Inclusion",
    "Length",
    "Numericality",
    "Presence",
    "RaisingRecord",
    "Record",
    "TypeTag",
    "ValidationFailed",
    "Validator",
    "__version__",
    "cast_value",
    "read_field",
    "register_normalizer",
    "register_type",
]
