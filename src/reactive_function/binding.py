"""Bindings — computation nodes wiring input cells to an output.

A binding reads its inputs in order, calls its callback with their values
and writes the result to its output. It is evaluated by the engine during
digest, in dependency order.

Bindings hold subscriptions and graph edges, so they must be torn down
explicitly with destroy(); garbage collection is not enough.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Sequence

from reactive_function.cell import UNDEFINED, Cell
from reactive_function.computed import Computed

if TYPE_CHECKING:
    from reactive_function.engine import Engine

logger = logging.getLogger("reactive_function.binding")

Input = Cell | Computed


class _Sentinel:
    """Graph anchor for a binding without an output."""

    __slots__ = ("label", "__weakref__")

    def __init__(self, label: str | None) -> None:
        self.label = label

    def __repr__(self) -> str:
        return f"_Sentinel({self.label!r})"


class Binding:
    """A live computation node. Call destroy() to stop it."""

    __slots__ = (
        "_engine",
        "_inputs",
        "_callback",
        "_output",
        "_node",
        "_node_id",
        "_input_ids",
        "_subscriptions",
        "_destroyed",
        "label",
    )

    def __init__(
        self,
        engine: Engine,
        inputs: Sequence[Input],
        callback: Callable[..., Any],
        output: Cell | Computed | None = None,
        *,
        label: str | None = None,
    ) -> None:
        self._engine = engine
        self._inputs = tuple(inputs)
        self._callback = callback
        self._output = output
        self._node = output if output is not None else _Sentinel(label)
        self._destroyed = False
        self.label = label

        registry = engine.registry
        self._node_id = registry.assign_id(self._node)
        self._input_ids = tuple(registry.assign_id(node) for node in self._inputs)
        engine._check_acyclic(self._input_ids, self._node_id)

        for input_id in self._input_ids:
            engine._acquire_edge(input_id, self._node_id)

        # Computed inputs never notify; edges alone carry their changes.
        self._subscriptions: list[tuple[Cell, int]] = [
            (node, node.subscribe(engine._listener(input_id)))
            for node, input_id in zip(self._inputs, self._input_ids)
            if isinstance(node, Cell)
        ]

        engine._install(self)

    @property
    def node_id(self) -> int:
        return self._node_id

    @property
    def input_ids(self) -> tuple[int, ...]:
        return self._input_ids

    @property
    def output(self) -> Cell | Computed | None:
        return self._output

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def evaluate(self) -> None:
        """Recompute the output from the current input values.

        Skipped while any input is UNDEFINED; None counts as a value.
        A callback returning UNDEFINED leaves the output untouched.
        """
        if self._destroyed:
            return
        values = [node.get() for node in self._inputs]
        if any(value is UNDEFINED for value in values):
            logger.debug("Skipping node %d: undefined input", self._node_id)
            return

        result = self._callback(*values)
        if self._output is None or result is UNDEFINED:
            return
        if isinstance(self._output, Computed):
            self._output._assign(result)
        else:
            self._output.set(result)

    def destroy(self) -> None:
        """Remove every listener, edge and evaluator this binding installed."""
        if self._destroyed:
            return
        self._destroyed = True

        for cell, token in self._subscriptions:
            cell.unsubscribe(token)
        self._subscriptions.clear()

        for input_id in self._input_ids:
            self._engine._release_edge(input_id, self._node_id)

        self._engine._uninstall(self)
        logger.debug("Destroyed binding on node %d", self._node_id)

    def __repr__(self) -> str:
        state = "destroyed" if self._destroyed else "live"
        name = getattr(self._callback, "__name__", repr(self._callback))
        return f"Binding({name}, node={self._node_id}, {state})"
