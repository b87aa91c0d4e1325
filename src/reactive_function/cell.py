"""Cells — mutable value slots with change notification.

A Cell is read and written through a single call-style accessor:

    a = Cell(5)
    a()      # 5
    a(20)    # write, notifies subscribers

A cell constructed without a value holds UNDEFINED, which is distinct from
holding None. Bindings do not fire while any input is UNDEFINED.

Listeners run synchronously, after the new value is stored, and only when
the value actually changes.
"""

from __future__ import annotations

import itertools
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")

Listener = Callable[[Any], None]


class _Undefined:
    """Marker for a cell that has no value yet."""

    __slots__ = ()
    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNDEFINED"


UNDEFINED: Any = _Undefined()

# Subscription tokens are unique across all cells.
_token_counter = itertools.count(1)


class Cell(Generic[T]):
    """A mutable value slot. Call with no arguments to read, one to write."""

    __slots__ = ("_value", "_listeners", "label", "__weakref__")

    def __init__(self, value: T = UNDEFINED, *, label: str | None = None) -> None:
        self._value = value
        self._listeners: dict[int, Listener] = {}
        self.label = label

    def __call__(self, *args: T) -> T | None:
        if not args:
            return self._value
        if len(args) > 1:
            raise TypeError(f"Cell accepts at most one value, got {len(args)}")
        self.set(args[0])
        return None

    def get(self) -> T:
        """Read the value. Returns UNDEFINED if the cell has no value yet."""
        return self._value

    def set(self, value: T) -> None:
        """Write a new value. Subscribers are notified only on change.

        Change is tested with `is not` then `!=`, so values whose comparison
        has no single truth value (numpy arrays, for one) raise here. Wrap
        such values in an object that compares by identity.
        """
        old = self._value
        if old is not value and old != value:
            self._value = value
            self._notify()

    @property
    def defined(self) -> bool:
        return self._value is not UNDEFINED

    def subscribe(self, listener: Listener) -> int:
        """Register a listener. Returns a token for unsubscribe()."""
        token = next(_token_counter)
        self._listeners[token] = listener
        return token

    def unsubscribe(self, token: int) -> None:
        """Remove a listener. Unknown tokens are ignored."""
        self._listeners.pop(token, None)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _notify(self) -> None:
        for listener in list(self._listeners.values()):
            listener(self._value)

    def __repr__(self) -> str:
        name = f"{self.label}=" if self.label else ""
        return f"Cell({name}{self._value!r})"
