"""Single-consumer mailbox drained exactly once per tick."""

from __future__ import annotations

from typing import Any, Iterable


class Mailbox:
    """FIFO queue owned by the orchestrator.

    Producers ``post``; the owning tick ``drain``s everything in one call,
    which returns the items in arrival order and leaves the box empty.
    """

    def __init__(self, name: str):
        self.name = name
        self._items: list[Any] = []

    def post(self, item: Any) -> None:
        self._items.append(item)

    def post_many(self, items: Iterable[Any]) -> None:
        self._items.extend(items)

    def drain(self) -> list[Any]:
        items, self._items = self._items, []
        return items

    def peek(self) -> list[Any]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Mailbox(name={self.name!r}, pending={len(self._items)})"
