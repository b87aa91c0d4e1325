"""Engine configuration.

EngineConfig is frozen after creation; use dataclasses.replace() to derive
a variant.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Configuration for an Engine.

    Attributes:
        allow_cycles: Accept bindings that close a cycle. Cycles are ordered
            by edge insertion; the most recently wired direction wins the
            first pass. When False, such a binding raises CycleError.
        auto_digest: Request a scheduled pass on every change notification.
            When False, changes only mark nodes dirty and passes run on
            explicit digest() calls.

    """

    allow_cycles: bool = True
    auto_digest: bool = True
