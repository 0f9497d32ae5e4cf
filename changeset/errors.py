"""Error kinds raised by the changeset engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from changeset.base import Changeset
    from changeset.validation.errors import Errors


class ChangesetError(Exception):
    """Base error for this package."""


class ConfigurationError(ChangesetError):
    """Raised when a changeset definition is malformed.

    Unknown normalizer ids, invalid field names and unknown type tags are
    programmer errors and surface as soon as they are detected.
    """


class CastError(ChangesetError):
    """Raised when a raw value cannot be converted to a declared type."""

    def __init__(self, field: str, value: Any, type_tag: str) -> None:
        self.field = field
        self.value = value
        self.type_tag = type_tag
        super().__init__(f"cannot cast {value!r} to {type_tag} for field {field!r}")


class ValidationFailed(ChangesetError):
    """Raised by ``Changeset.apply_or_raise`` when the changeset is invalid."""

    def __init__(self, errors: Errors, changeset: Changeset | None = None) -> None:
        self.errors = errors
        self.changeset = changeset
        messages = ", ".join(errors.full_messages())
        super().__init__(f"Validation failed: {messages}")
