"""reactive_function: dependency-driven propagation of cell values."""

from importlib.metadata import version as _version

__version__ = _version("reactive-function")

from reactive_function._errors import (
    CycleError,
    GraphInvariantError,
    InvalidBindingError,
    NodeNotFoundError,
    NotASetterError,
    PropagationError,
    ReactiveFunctionError,
)
from reactive_function.cell import UNDEFINED, Cell
from reactive_function.computed import Computed
from reactive_function.binding import Binding
from reactive_function.graph import DependencyGraph
from reactive_function.registry import IdentityRegistry
from reactive_function.dirty import DirtySet
from reactive_function.scheduler import AsyncioScheduler, ManualScheduler, Scheduler, TimerScheduler
from reactive_function.config import EngineConfig
from reactive_function.engine import Engine

__all__ = [
    "Engine",
    "EngineConfig",
    "Cell",
    "UNDEFINED",
    "Computed",
    "Binding",
    "DependencyGraph",
    "IdentityRegistry",
    "DirtySet",
    "Scheduler",
    "ManualScheduler",
    "AsyncioScheduler",
    "TimerScheduler",
    "ReactiveFunctionError",
    "InvalidBindingError",
    "CycleError",
    "NotASetterError",
    "PropagationError",
    "GraphInvariantError",
    "NodeNotFoundError",
]
