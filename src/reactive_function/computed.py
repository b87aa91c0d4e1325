"""Computed outputs — read-only values derived by a binding.

A Computed is the getter form of a binding: calling it returns the latest
value produced by its callback. It cannot be written from outside;
calling it with an argument raises NotASetterError.

A Computed may be used as an input to further bindings. It never emits
change notifications; its dependents are reached through graph edges
within the same digest pass.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Generic, TypeVar

from reactive_function._errors import NotASetterError
from reactive_function.cell import UNDEFINED

if TYPE_CHECKING:
    from reactive_function.binding import Binding

T = TypeVar("T")


class Computed(Generic[T]):
    """A derived value that is recalculated during digest."""

    __slots__ = ("_value", "_binding", "label", "__weakref__")

    def __init__(self, *, label: str | None = None) -> None:
        self._value: T = UNDEFINED
        self._binding: Binding | None = None
        self.label = label

    def __call__(self, *args: object) -> T:
        if args:
            raise NotASetterError()
        return self._value

    def get(self) -> T:
        """Read the latest value. UNDEFINED until the first evaluation."""
        return self._value

    @property
    def defined(self) -> bool:
        return self._value is not UNDEFINED

    @property
    def binding(self) -> Binding | None:
        return self._binding

    def destroy(self) -> None:
        """Tear down the binding that feeds this value. The last value is kept."""
        if self._binding is not None:
            self._binding.destroy()

    def _assign(self, value: T) -> None:
        self._value = value

    def __repr__(self) -> str:
        name = f"{self.label}, " if self.label else ""
        state = "destroyed" if self._binding is None or self._binding.destroyed else "live"
        return f"Computed({name}{self._value!r}, {state})"
