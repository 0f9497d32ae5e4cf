"""Validation contract for changesets.

Exports:
    Errors       -- field-keyed error messages collected during validation.
    Validator    -- protocol every rule satisfies.
    Presence, Numericality, Format, Length, Inclusion -- built-in rules.
"""

from changeset.validation.errors import Errors
from changeset.validation.rules import (
    Format,
    Inclusion,
    Length,
    Numericality,
    Presence,
    Validator,
    is_blank,
    run_validators,
)

__all__ = [
    "Errors",
    "Format",
    "Inclusion",
    "Length",
    "Numericality",
    "Presence",
    "Validator",
    "is_blank",
    "run_validators",
]
