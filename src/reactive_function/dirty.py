"""Dirty set — node ids changed since the last digest.

Insertion order is kept so that seeds reach the topological sort in the
order the changes happened.
"""

from __future__ import annotations

from typing import Iterable, Iterator


class DirtySet:
    __slots__ = ("_ids",)

    def __init__(self) -> None:
        self._ids: dict[int, None] = {}

    def add(self, node_id: int) -> None:
        self._ids[node_id] = None

    def update(self, node_ids: Iterable[int]) -> None:
        for node_id in node_ids:
            self._ids[node_id] = None

    def clear(self) -> None:
        """Empty the set. Never done partially."""
        self._ids = {}

    def snapshot(self) -> list[int]:
        return list(self._ids)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._ids

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._ids))

    def __len__(self) -> int:
        return len(self._ids)

    def __bool__(self) -> bool:
        return bool(self._ids)

    def __repr__(self) -> str:
        return f"DirtySet({list(self._ids)!r})"
