"""Field-keyed error collection."""

from __future__ import annotations

from collections.abc import Iterator, Mapping


class Errors:
    """Mapping of field name to a list of messages.

    Looking up a field with no errors returns an empty list.
    """

    def __init__(self) -> None:
        self._messages: dict[str, list[str]] = {}

    def add(self, field: str, message: str) -> None:
        messages = self._messages.setdefault(field, [])
        if message not in messages:
            messages.append(message)

    def merge(self, other: Errors | Mapping[str, list[str]]) -> None:
        items = other.to_dict() if isinstance(other, Errors) else other
        for field, messages in items.items():
            for message in messages:
                self.add(field, message)

    def clear(self) -> None:
        self._messages.clear()

    def full_messages(self) -> list[str]:
        return [
            f"{field} {message}"
            for field, messages in self._messages.items()
            for message in messages
        ]

    def to_dict(self) -> dict[str, list[str]]:
        return {field: list(messages) for field, messages in self._messages.items()}

    def __getitem__(self, field: str) -> list[str]:
        return list(self._messages.get(field, []))

    def __contains__(self, field: object) -> bool:
        return field in self._messages

    def __iter__(self) -> Iterator[str]:
        return iter(self._messages)

    def __len__(self) -> int:
        return sum(len(messages) for messages in self._messages.values())

    def __bool__(self) -> bool:
        return bool(self._messages)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Errors):
            return self._messages == other._messages
        if isinstance(other, Mapping):
            return self.to_dict() == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Errors({self._messages!r})"
