"""The record capability set the changeset reads from and writes to.

Any object works as a record: dataclasses, ORM models, plain mappings. The
changeset reads fields for diffing and calls ``update`` or
``update_or_raise`` only from the apply protocol.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Record(Protocol):
    """A record supporting the non-raising update."""

    def update(self, patch: Mapping[str, Any]) -> bool: ...


@runtime_checkable
class RaisingRecord(Protocol):
    """A record supporting the raising update."""

    def update_or_raise(self, patch: Mapping[str, Any]) -> Any: ...


def read_field(record: Any, name: str) -> Any:
    """Current value of ``name`` on ``record``; None when it is not exposed."""
    if record is None:
        return None
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


class DictRecord:
    """In-memory record backed by a dict.

    ``update`` always succeeds; ``update_or_raise`` delegates to it.
    """

    def __init__(self, **attributes: Any) -> None:
        self._attributes: dict[str, Any] = dict(attributes)
        self.updates: list[dict[str, Any]] = []

    def __getattr__(self, name: str) -> Any:
        attributes = self.__dict__.get("_attributes", {})
        if name in attributes:
            return attributes[name]
        raise AttributeError(name)

    def update(self, patch: Mapping[str, Any]) -> bool:
        self.updates.append(dict(patch))
        self._attributes.update(patch)
        return True

    def update_or_raise(self, patch: Mapping[str, Any]) -> bool:
        return self.update(patch)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._attributes)

    def __repr__(self) -> str:
        return f"DictRecord({self._attributes!r})"
