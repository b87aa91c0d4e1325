"""Shared test fixtures for reactive_function."""

import pytest

from reactive_function import Engine, ManualScheduler


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def engine(scheduler: ManualScheduler) -> Engine:
    """A fresh engine per test, so ids and dirty state never leak."""
    return Engine(scheduler)
