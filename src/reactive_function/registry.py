"""Identity registry — stable integer ids for graph nodes.

Ids start at 1, increase strictly and are never reused within a registry.
The registry only holds weak references: it never keeps a cell alive.
"""

from __future__ import annotations

import itertools
import weakref
from typing import Iterator

from reactive_function._errors import NodeNotFoundError


class IdentityRegistry:
    """Assigns ids on first encounter and maps them back to nodes."""

    def __init__(self) -> None:
        # itertools.count is atomic under the GIL
        self._counter = itertools.count(1)
        self._ids: weakref.WeakKeyDictionary[object, int] = weakref.WeakKeyDictionary()
        self._nodes: weakref.WeakValueDictionary[int, object] = weakref.WeakValueDictionary()

    def assign_id(self, node: object) -> int:
        """Return the node's id, assigning the next one if it has none."""
        node_id = self._ids.get(node)
        if node_id is None:
            node_id = next(self._counter)
            self._ids[node] = node_id
            self._nodes[node_id] = node
        return node_id

    def id_of(self, node: object) -> int | None:
        return self._ids.get(node)

    def lookup(self, node_id: int) -> object:
        """Return the node registered under node_id.

        A miss means edge or teardown bookkeeping went wrong; it is raised
        as NodeNotFoundError and should not be caught.
        """
        try:
            return self._nodes[node_id]
        except KeyError:
            raise NodeNotFoundError(node_id) from None

    def items(self) -> Iterator[tuple[int, object]]:
        """Live (id, node) pairs in registration order."""
        return iter(list(self._nodes.items()))

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)
