"""Tests for the error hierarchy."""

import pytest

from reactive_function import (
    CycleError,
    GraphInvariantError,
    InvalidBindingError,
    NodeNotFoundError,
    NotASetterError,
    PropagationError,
    ReactiveFunctionError,
)


@pytest.mark.parametrize(
    "error",
    [InvalidBindingError, CycleError, NotASetterError, PropagationError, GraphInvariantError, NodeNotFoundError],
)
def test_all_errors_share_base(error):
    assert issubclass(error, ReactiveFunctionError)


def test_builtin_bases():
    assert issubclass(InvalidBindingError, ValueError)
    assert issubclass(NotASetterError, TypeError)
    assert issubclass(NodeNotFoundError, LookupError)


def test_propagation_error_message():
    assert str(PropagationError(3, "total")) == "Evaluation of node 'total' (id=3) failed"
    assert str(PropagationError(3)) == "Evaluation of node (id=3) failed"


def test_not_a_setter_default_message():
    assert "cannot set" in str(NotASetterError())


def test_engine_lookup_miss(engine):
    with pytest.raises(NodeNotFoundError):
        engine.node(42)
