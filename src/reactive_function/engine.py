"""Engine — graph maintenance and change propagation.

The engine owns the identity registry, the dependency graph, the dirty set
and the scheduler. Cells notify the engine when they change; the engine
marks them dirty and asks the scheduler for a pass. A pass (digest) sorts
the dirty subgraph topologically and evaluates each binding in order.

Usage:
    engine = Engine()
    a, b, c = Cell(5), Cell(10), Cell()
    engine.bind([a, b], lambda a, b: a + b, c)
    engine.digest()
    c()  # 15

Pass rules:
- A dirty node is evaluated only if it is the output of a binding that no
  pass has evaluated yet, or if another dirty node reaches it. A value
  written from outside is kept; its dependents are updated.
- Notifications for nodes the current pass has not finished evaluating are
  absorbed by it. Any other notification is carried into the next pass, as
  are the marks of a binding created during the pass.
- A failing callback aborts the pass with PropagationError and leaves the
  dirty set as it was, so the next digest retries. Remaining nodes of the
  failed pass are not evaluated.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from typing import Any, Callable

from reactive_function._errors import (
    CycleError,
    GraphInvariantError,
    InvalidBindingError,
    NotASetterError,
    PropagationError,
)
from reactive_function.binding import Binding, Input
from reactive_function.cell import Cell
from reactive_function.computed import Computed
from reactive_function.config import EngineConfig
from reactive_function.dirty import DirtySet
from reactive_function.graph import DependencyGraph
from reactive_function.registry import IdentityRegistry
from reactive_function.scheduler import ManualScheduler, Scheduler

logger = logging.getLogger("reactive_function.engine")


def _identity(value: Any) -> Any:
    return value


def _validate(inputs: object, callback: object, output: object) -> None:
    if isinstance(inputs, (str, bytes)) or not isinstance(inputs, Sequence):
        raise InvalidBindingError(f"inputs must be a sequence of cells, got {type(inputs).__name__}")
    for position, node in enumerate(inputs):
        if not isinstance(node, (Cell, Computed)):
            raise InvalidBindingError(f"inputs[{position}] is not a Cell or Computed: {node!r}")
    if not callable(callback):
        raise InvalidBindingError(f"callback must be callable, got {type(callback).__name__}")
    if isinstance(output, Computed):
        raise NotASetterError("A Computed is written only by its own binding; it cannot be an output.")
    if output is not None and not isinstance(output, Cell):
        raise InvalidBindingError(f"output must be a Cell, got {type(output).__name__}")


class Engine:
    """An independent reactive graph with its own scheduler.

    The default scheduler is a ManualScheduler: changes are only marked
    dirty and requested passes wait for digest() or scheduler.flush().
    For an automatic digest on the next tick, pass AsyncioScheduler() when
    running inside an asyncio loop, or TimerScheduler() otherwise.
    """

    def __init__(self, scheduler: Scheduler | None = None, *, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()
        self.scheduler = scheduler if scheduler is not None else ManualScheduler()
        self.registry = IdentityRegistry()
        self.graph = DependencyGraph()
        self.dirty = DirtySet()
        self._evaluators: dict[int, list[Binding]] = {}
        self._edge_refs: Counter[tuple[int, int]] = Counter()
        # Bindings that have not been evaluated by a successful pass yet.
        self._fresh: set[Binding] = set()
        # Set while a pass runs: ids the pass has yet to finish evaluating.
        self._pass_ids: set[int] | None = None
        self._carry = DirtySet()

    # ─── Binding API ──────────────────────────────────────────────────────

    def bind(
        self,
        inputs: Sequence[Input],
        callback: Callable[..., Any],
        output: Cell | None = None,
        *,
        label: str | None = None,
    ) -> Binding:
        """Wire inputs through callback into output.

        Without an output the callback runs for its side effects only.
        Arguments are validated here; nothing is evaluated until digest.
        """
        _validate(inputs, callback, output)
        return Binding(self, inputs, callback, output, label=label)

    def link(self, source: Input, target: Cell, *, label: str | None = None) -> Binding:
        """Copy source's value onto target on every change of source."""
        return self.bind([source], _identity, target, label=label)

    def computed(
        self,
        inputs: Sequence[Input],
        callback: Callable[..., Any],
        *,
        label: str | None = None,
    ) -> Computed:
        """Bind inputs to a new read-only Computed and return it.

        Usage:
            total = engine.computed([a, b], lambda a, b: a + b)
            engine.digest()
            total()    # a + b
            total(1)   # raises NotASetterError
        """
        _validate(inputs, callback, None)
        output: Computed = Computed(label=label)
        output._binding = Binding(self, inputs, callback, output, label=label)
        return output

    # ─── Propagation ──────────────────────────────────────────────────────

    def request_pass(self) -> None:
        """Ask the scheduler for a pass. Repeated requests coalesce."""
        self.scheduler.request_pass(self.digest)

    def digest(self) -> None:
        """Propagate all pending changes now, in dependency order."""
        if self._pass_ids is not None:
            logger.debug("digest() called during a pass; deferred to the scheduler")
            self.request_pass()
            return

        seeds = self.dirty.snapshot()
        if not seeds:
            return
        order = self._evaluation_order(seeds)
        logger.debug("Digest: %d dirty, %d to evaluate", len(seeds), len(order))

        self._pass_ids = set(order)
        self._carry = DirtySet()
        evaluated: list[Binding] = []
        try:
            for node_id in order:
                for binding in list(self._evaluators.get(node_id, ())):
                    self._evaluate(node_id, binding)
                    evaluated.append(binding)
                self._pass_ids.discard(node_id)
        finally:
            self._pass_ids = None

        carried, self._carry = self._carry, DirtySet()
        self.dirty.clear()
        self.dirty.update(carried)
        self._fresh.difference_update(evaluated)
        logger.debug("Digest done: %d evaluated, %d carried", len(evaluated), len(carried))
        if not self.dirty:
            self.scheduler.cancel()

    def _evaluation_order(self, seeds: list[int]) -> list[int]:
        seed_set = set(seeds)
        fresh = {binding.node_id for binding in self._fresh}
        downstream: set[int] = set()
        for seed in seeds:
            downstream.update(self.graph.descendants(seed) - {seed})
        return [
            node_id
            for node_id in self.graph.topological_sort(seeds)
            if node_id not in seed_set or node_id in fresh or node_id in downstream
        ]

    def _evaluate(self, node_id: int, binding: Binding) -> None:
        try:
            binding.evaluate()
        except GraphInvariantError:
            raise
        except Exception as exc:
            label = binding.label or getattr(binding.output, "label", None)
            raise PropagationError(node_id, label) from exc

    # ─── Introspection ────────────────────────────────────────────────────

    def has_evaluator(self, node: object) -> bool:
        """Whether a live binding writes to node."""
        node_id = self.registry.id_of(node)
        return node_id is not None and node_id in self._evaluators

    def is_dirty(self, node: object) -> bool:
        node_id = self.registry.id_of(node)
        return node_id is not None and node_id in self.dirty

    def pending_count(self) -> int:
        """Number of dirty nodes waiting for a pass. Useful for testing."""
        return len(self.dirty)

    def node(self, node_id: int) -> object:
        return self.registry.lookup(node_id)

    def serialize_graph(self) -> dict[str, list[dict[str, Any]]]:
        """Debug export of registered nodes and current edges.

        Returns {"nodes": [{"id", "label"?}], "links": [{"source", "target"}]}
        in registration and adjacency order. Diagnostic only.
        """
        nodes = []
        for node_id, node in self.registry.items():
            entry: dict[str, Any] = {"id": node_id}
            label = getattr(node, "label", None)
            if label:
                entry["label"] = label
            nodes.append(entry)

        links = []
        for source, target in self.graph.edges():
            self.registry.lookup(source)
            self.registry.lookup(target)
            links.append({"source": source, "target": target})
        return {"nodes": nodes, "links": links}

    # ─── Binding bookkeeping (called by Binding) ──────────────────────────

    def _listener(self, node_id: int) -> Callable[[Any], None]:
        def on_change(_value: Any) -> None:
            self._mark_dirty(node_id)

        return on_change

    def _mark_dirty(self, node_id: int, *, absorb: bool = True) -> None:
        self.dirty.add(node_id)
        if self._pass_ids is not None:
            if absorb and node_id in self._pass_ids:
                return  # dependents are still ahead in this pass
            self._carry.add(node_id)
        if self.config.auto_digest:
            self.request_pass()

    def _check_acyclic(self, input_ids: Sequence[int], node_id: int) -> None:
        if self.config.allow_cycles:
            return
        for input_id in input_ids:
            if input_id == node_id or self.graph.has_path(node_id, input_id):
                raise CycleError(f"Edge {input_id} -> {node_id} would close a cycle")

    def _acquire_edge(self, source: int, target: int) -> None:
        self._edge_refs[(source, target)] += 1
        self.graph.add_edge(source, target)

    def _release_edge(self, source: int, target: int) -> None:
        key = (source, target)
        if key not in self._edge_refs:
            raise GraphInvariantError(f"Releasing untracked edge {source} -> {target}")
        self._edge_refs[key] -= 1
        if self._edge_refs[key] == 0:
            del self._edge_refs[key]
            self.graph.remove_edge(source, target)

    def _install(self, binding: Binding) -> None:
        self._evaluators.setdefault(binding.node_id, []).append(binding)
        self._fresh.add(binding)
        # Never absorbed: a running pass was ordered before these edges existed.
        for input_id in binding.input_ids:
            self._mark_dirty(input_id, absorb=False)
        self._mark_dirty(binding.node_id, absorb=False)

    def _uninstall(self, binding: Binding) -> None:
        bindings = self._evaluators.get(binding.node_id)
        if bindings is None or binding not in bindings:
            raise GraphInvariantError(f"No evaluator installed for node {binding.node_id}")
        bindings.remove(binding)
        self._fresh.discard(binding)
        if not bindings:
            del self._evaluators[binding.node_id]

    def __repr__(self) -> str:
        return (
            f"Engine(nodes={len(self.registry)}, bindings="
            f"{sum(len(b) for b in self._evaluators.values())}, dirty={len(self.dirty)})"
        )
