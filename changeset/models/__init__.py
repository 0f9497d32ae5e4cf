"""Core data structures for the changeset engine."""

from changeset.models.config import ChangesetConfig, LogConfig
from changeset.models.schema import AttributeSchema, FieldDefinition, FieldSpec, TypeTag

__all__ = [
    "AttributeSchema",
    "ChangesetConfig",
    "FieldDefinition",
    "FieldSpec",
    "LogConfig",
    "TypeTag",
]
