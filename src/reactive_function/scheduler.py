"""Schedulers — coalesce many pass requests into one deferred digest.

The engine calls request_pass(callback) on every change notification.
Each request cancels the previously armed one and re-arms, so all requests
made before the deferred callback fires collapse into a single call.

    ManualScheduler   nothing runs until flush(); used in tests and as default
    AsyncioScheduler  next turn of an asyncio event loop (loop.call_soon)
    TimerScheduler    daemon threading.Timer after a delay

Errors raised by a scheduled pass are logged and re-raised so the host
(loop exception handler, threading.excepthook) can observe them.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable

logger = logging.getLogger("reactive_function.scheduler")

PassCallback = Callable[[], None]


def _run_pass(callback: PassCallback) -> None:
    try:
        callback()
    except Exception:
        logger.exception("Scheduled digest failed")
        raise


class Scheduler(ABC):
    """Deferred-execution primitive injected into an Engine."""

    @abstractmethod
    def request_pass(self, callback: PassCallback) -> None:
        """Arm callback to run once at the next idle point, replacing any armed one."""

    @abstractmethod
    def cancel(self) -> None:
        """Disarm a pending pass, if any."""

    @property
    @abstractmethod
    def pending(self) -> bool:
        """Whether a pass is armed and has not run yet."""


class ManualScheduler(Scheduler):
    """Holds the pending pass until flush() is called.

    Usage:
        scheduler = ManualScheduler()
        engine = Engine(scheduler)
        a(20)
        scheduler.flush()  # runs the coalesced digest
    """

    def __init__(self) -> None:
        self._callback: PassCallback | None = None
        self.requests = 0

    def request_pass(self, callback: PassCallback) -> None:
        self._callback = callback
        self.requests += 1

    def cancel(self) -> None:
        self._callback = None

    @property
    def pending(self) -> bool:
        return self._callback is not None

    def flush(self) -> bool:
        """Run the pending pass. Returns False if nothing was armed."""
        callback, self._callback = self._callback, None
        if callback is None:
            return False
        _run_pass(callback)
        return True


class AsyncioScheduler(Scheduler):
    """Runs the pass on the next iteration of an asyncio event loop.

    If no loop is given, the running loop is looked up on each request,
    so requests must come from inside the loop's thread.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._handle: asyncio.Handle | None = None

    def request_pass(self, callback: PassCallback) -> None:
        loop = self._loop or asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._handle = loop.call_soon(self._fire, callback)

    def _fire(self, callback: PassCallback) -> None:
        self._handle = None
        _run_pass(callback)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    @property
    def pending(self) -> bool:
        return self._handle is not None


class TimerScheduler(Scheduler):
    """Runs the pass on a daemon threading.Timer after delay seconds.

    Each request cancels the armed timer, so only the last request in a
    burst fires. The pass runs on the timer thread: the host must not
    mutate cells from another thread while it runs.
    """

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None

    def request_pass(self, callback: PassCallback) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            timer = threading.Timer(self.delay, self._fire, args=[callback])
            timer.daemon = True
            self._timer = timer
            timer.start()

    def _fire(self, callback: PassCallback) -> None:
        with self._lock:
            if self._timer is not threading.current_thread():
                return  # superseded by a later request
            self._timer = None
        _run_pass(callback)

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    @property
    def pending(self) -> bool:
        return self._timer is not None
