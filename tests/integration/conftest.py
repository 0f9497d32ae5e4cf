"""Shared fixtures for changeset integration tests.

Provides changeset definitions and in-memory records wired together so the
tests can exercise construction, diffing and the apply protocol end to end.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from changeset import Changeset, FieldSpec, Numericality, Presence, TypeTag

# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass
class MockRecord:
    """Stands in for an ORM model: plain attributes plus update operations."""

    name: str | None = None
    email: str | None = None
    age: int | None = None
    bio: str | None = None
    update_calls: list[dict[str, Any]] = field(default_factory=list)

    def update(self, patch: dict[str, Any]) -> bool:
        self.update_calls.append(dict(patch))
        for key, value in patch.items():
            setattr(self, key, value)
        return True

    def update_or_raise(self, patch: dict[str, Any]) -> bool:
        return self.update(patch)


@dataclass
class FailingRecord(MockRecord):
    """A record whose update operations always fail."""

    def update(self, patch: dict[str, Any]) -> bool:
        self.update_calls.append(dict(patch))
        return False

    def update_or_raise(self, patch: dict[str, Any]) -> bool:
        self.update_calls.append(dict(patch))
        raise RuntimeError("Validation failed")


# ---------------------------------------------------------------------------
# Changeset definitions
# ---------------------------------------------------------------------------


class UserChangeset(Changeset):
    model = MockRecord
    fields = [
        FieldSpec("name", normalize=["strip", "squish"]),
        FieldSpec("email", normalize=["strip", "downcase"]),
        FieldSpec("age", TypeTag.INTEGER),
        FieldSpec("bio", normalize="blank_to_nil"),
    ]
    validators = [
        Presence("name", "email"),
        Numericality("age", greater_than=0, allow_none=True),
    ]


class SimpleChangeset(Changeset):
    fields = [
        FieldSpec("name"),
        FieldSpec("value", TypeTag.INTEGER),
    ]


# ---------------------------------------------------------------------------
# Factories and fixtures
# ---------------------------------------------------------------------------


def make_record(**kwargs: Any) -> MockRecord:
    """Create a MockRecord with the defaults used across scenarios."""
    defaults: dict[str, Any] = {
        "name": "Original",
        "email": "original@example.com",
        "age": 30,
    }
    defaults.update(kwargs)
    return MockRecord(**defaults)


@pytest.fixture
def record() -> MockRecord:
    return make_record()


@pytest.fixture
def failing_record() -> FailingRecord:
    return FailingRecord(name="Original")
