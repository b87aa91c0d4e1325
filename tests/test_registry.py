"""Tests for IdentityRegistry and DirtySet."""

import gc

import pytest

from reactive_function import Cell, DirtySet, IdentityRegistry, NodeNotFoundError


class TestIdentityRegistry:
    def test_ids_start_at_one_and_increase(self):
        registry = IdentityRegistry()
        ids = [registry.assign_id(Cell()) for _ in range(3)]
        assert ids == [1, 2, 3]

    def test_assign_is_idempotent(self):
        registry = IdentityRegistry()
        c = Cell()
        assert registry.assign_id(c) == registry.assign_id(c)
        assert len(registry) == 1

    def test_lookup(self):
        registry = IdentityRegistry()
        c = Cell()
        node_id = registry.assign_id(c)
        assert registry.lookup(node_id) is c
        assert node_id in registry

    def test_lookup_miss_raises(self):
        registry = IdentityRegistry()
        with pytest.raises(NodeNotFoundError) as exc_info:
            registry.lookup(99)
        assert exc_info.value.node_id == 99

    def test_does_not_keep_nodes_alive(self):
        registry = IdentityRegistry()
        node_id = registry.assign_id(Cell())
        gc.collect()
        assert node_id not in registry

    def test_ids_never_reused(self):
        registry = IdentityRegistry()
        first = registry.assign_id(Cell())
        gc.collect()
        assert registry.assign_id(Cell()) == first + 1

    def test_independent_registries(self):
        """The same cell gets its own id in each registry."""
        one, two = IdentityRegistry(), IdentityRegistry()
        two.assign_id(Cell())
        c = Cell()
        assert one.assign_id(c) == 1
        assert two.assign_id(c) == 2

    def test_items_in_registration_order(self):
        registry = IdentityRegistry()
        a, b = Cell(label="a"), Cell(label="b")
        registry.assign_id(a)
        registry.assign_id(b)
        assert [node.label for _, node in registry.items()] == ["a", "b"]


class TestDirtySet:
    def test_keeps_insertion_order(self):
        dirty = DirtySet()
        dirty.update([3, 1, 2, 1])
        assert dirty.snapshot() == [3, 1, 2]

    def test_clear(self):
        dirty = DirtySet()
        dirty.add(1)
        assert dirty
        dirty.clear()
        assert not dirty
        assert len(dirty) == 0

    def test_membership(self):
        dirty = DirtySet()
        dirty.add(5)
        assert 5 in dirty
        assert 6 not in dirty
