"""Dependency graph over node ids.

An edge (u, v) means "v depends on u". At most one edge is stored per
ordered pair. Adjacency lists keep insertion order, which makes traversal
and therefore the topological order deterministic.

Cycles are tolerated. The depth-first traversal marks nodes as visiting
and visited; reaching a node that is still visiting is a back-edge, which
is skipped. The traversal order, and so the edge insertion order, decides
which direction of a cycle is honored in a given pass.
"""

from __future__ import annotations

import logging
from typing import Iterable

logger = logging.getLogger("reactive_function.graph")

_VISITING = 1
_VISITED = 2


class DependencyGraph:
    """Directed graph with insertion-ordered adjacency."""

    def __init__(self) -> None:
        self._adjacency: dict[int, list[int]] = {}
        self._edges: set[tuple[int, int]] = set()

    def add_node(self, node: int) -> None:
        self._adjacency.setdefault(node, [])

    def add_edge(self, u: int, v: int) -> None:
        """Record u -> v, adding either node if absent. Idempotent."""
        self.add_node(u)
        self.add_node(v)
        if (u, v) not in self._edges:
            self._edges.add((u, v))
            self._adjacency[u].append(v)

    def remove_edge(self, u: int, v: int) -> None:
        """Drop u -> v if present. The nodes themselves stay."""
        if (u, v) in self._edges:
            self._edges.discard((u, v))
            self._adjacency[u].remove(v)

    def has_edge(self, u: int, v: int) -> bool:
        return (u, v) in self._edges

    def adjacent(self, node: int) -> list[int]:
        """Nodes that depend directly on node."""
        return list(self._adjacency.get(node, ()))

    def edges(self) -> list[tuple[int, int]]:
        """All edges in adjacency insertion order."""
        return [(u, v) for u, targets in self._adjacency.items() for v in targets]

    def descendants(self, node: int) -> set[int]:
        """Every node reachable from node through one or more edges.

        node itself is included only if it sits on a cycle.
        """
        seen: set[int] = set()
        stack = self.adjacent(node)
        while stack:
            current = stack.pop()
            if current not in seen:
                seen.add(current)
                stack.extend(self._adjacency.get(current, ()))
        return seen

    def has_path(self, u: int, v: int) -> bool:
        return v in self.descendants(u)

    def depth_first_search(self, seeds: Iterable[int]) -> list[int]:
        """Post-order of the subgraph reachable from seeds, seeds included."""
        state: dict[int, int] = {}
        order: list[int] = []

        for root in seeds:
            if root in state:
                continue
            state[root] = _VISITING
            stack = [(root, iter(self.adjacent(root)))]
            while stack:
                node, children = stack[-1]
                for child in children:
                    mark = state.get(child)
                    if mark is None:
                        state[child] = _VISITING
                        stack.append((child, iter(self.adjacent(child))))
                        break
                    if mark == _VISITING:
                        logger.debug("Back-edge %d -> %d skipped (cycle)", node, child)
                else:
                    stack.pop()
                    state[node] = _VISITED
                    order.append(node)
        return order

    def topological_sort(self, seeds: Iterable[int]) -> list[int]:
        """Order the reachable subgraph so every u precedes v for u -> v.

        Edges skipped as back-edges during traversal are the only
        exception, which only happens on cycles.

        Usage:
            g = DependencyGraph()
            g.add_edge(1, 2)
            g.add_edge(2, 3)
            g.add_edge(1, 3)
            g.topological_sort([1])  # [1, 2, 3]
        """
        order = self.depth_first_search(seeds)
        order.reverse()
        return order

    def __len__(self) -> int:
        return len(self._adjacency)

    def __repr__(self) -> str:
        return f"DependencyGraph(nodes={len(self._adjacency)}, edges={len(self._edges)})"
