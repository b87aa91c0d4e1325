"""Error hierarchy for reactive_function.

All errors raised by the engine inherit from ReactiveFunctionError.
"""

from __future__ import annotations


class ReactiveFunctionError(Exception):
    """Base error for all reactive_function operations."""


class InvalidBindingError(ReactiveFunctionError, ValueError):
    """Malformed bind() arguments. Raised at bind time, never during digest."""


class CycleError(InvalidBindingError):
    """A binding would close a cycle while cycles are disallowed."""


class NotASetterError(ReactiveFunctionError, TypeError):
    """A computed output was used as a setter."""

    def __init__(self, message: str = "You cannot set the value of a computed output directly.") -> None:
        super().__init__(message)


class PropagationError(ReactiveFunctionError):
    """A binding callback raised during a digest pass.

    The remainder of the pass is aborted and the dirty set is left intact.
    The original exception is chained as ``__cause__``.
    """

    def __init__(self, node_id: int, label: str | None = None) -> None:
        self.node_id = node_id
        self.label = label
        name = f"{label!r} " if label else ""
        super().__init__(f"Evaluation of node {name}(id={node_id}) failed")


class GraphInvariantError(ReactiveFunctionError):
    """Edge or teardown bookkeeping is inconsistent. Not recoverable."""


class NodeNotFoundError(GraphInvariantError, LookupError):
    """No node is registered under the requested identity."""

    def __init__(self, node_id: int) -> None:
        self.node_id = node_id
        super().__init__(f"No node registered with id {node_id}")
