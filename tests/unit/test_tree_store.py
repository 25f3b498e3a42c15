"""
Unit tests for tree/store.py

Tests node registration, orphans, duplicate handling and lookups.
"""

import logging

import pytest

from settree.tree.node import DuplicateNodeError, InvalidLevelError, SettingNode
from settree.tree.store import DUPLICATE_REJECT, NodeStore


def _store_with_chain():
    store = NodeStore()
    store.add_node(SettingNode("A", "Alpha", level=1))
    store.add_node(SettingNode("B", "Bravo", level=2, parent_id="A"))
    store.add_node(SettingNode("C", "Charlie", level=3, parent_id="B"))
    store.add_node(SettingNode("D", "Delta", level=2, parent_id="A"))
    return store


class TestSettingNode:
    """Test SettingNode dataclass."""

    def test_defaults(self):
        """New nodes are enabled roots with no children."""
        node = SettingNode("x", "X")
        assert node.enabled is True
        assert node.level == 1
        assert node.parent_id is None
        assert node.children == []
        assert node.is_root

    def test_to_dict(self):
        """Test node serialization."""
        node = SettingNode("x", "X", "desc", level=2, parent_id="p", enabled=False)
        data = node.to_dict()
        assert data["id"] == "x"
        assert data["parent_id"] == "p"
        assert data["enabled"] is False
        assert data["children"] == []


class TestRegistration:
    """Test NodeStore.add_node."""

    def test_root_node_added_to_roots(self):
        """Nodes without parent become roots."""
        store = NodeStore()
        store.add_node(SettingNode("A", "Alpha"))
        assert [n.id for n in store.get_root_nodes()] == ["A"]

    def test_child_appended_to_parent(self):
        """Children keep insertion order under their parent."""
        store = _store_with_chain()
        assert [n.id for n in store.get_children("A")] == ["B", "D"]
        assert [n.id for n in store.get_children("B")] == ["C"]
        assert [n.id for n in store.get_root_nodes()] == ["A"]

    def test_same_instance_not_inserted_twice(self):
        """Adding the exact same node twice does not duplicate links."""
        store = NodeStore()
        root = SettingNode("A", "Alpha")
        child = SettingNode("B", "Bravo", level=2, parent_id="A")
        store.add_node(root)
        store.add_node(child)
        store.add_node(child)
        store.add_node(root)
        assert root.children == ["B"]
        assert len(store.get_root_nodes()) == 1

    def test_orphan_on_missing_parent(self, caplog):
        """A node whose parent is unknown is stored but unreachable."""
        store = NodeStore()
        with caplog.at_level(logging.WARNING):
            store.add_node(SettingNode("x", "X", level=2, parent_id="missing"))

        assert store.get_node("x") is not None
        assert store.get_root_nodes() == []
        assert store.get_children("missing") == []
        assert "missing" in caplog.text

    def test_orphan_not_adopted_by_late_parent(self):
        """Orphans stay orphans when the parent is registered afterwards."""
        store = NodeStore()
        store.add_node(SettingNode("x", "X", level=2, parent_id="p"))
        store.add_node(SettingNode("p", "P", level=1))
        assert store.get_children("p") == []

    def test_level_out_of_range_rejected(self):
        """Levels outside 1..3 are refused."""
        store = NodeStore()
        with pytest.raises(InvalidLevelError):
            store.add_node(SettingNode("x", "X", level=4))
        with pytest.raises(InvalidLevelError):
            store.add_node(SettingNode("y", "Y", level=0))
        assert len(store) == 0

    def test_root_must_be_level_one(self):
        """A node without parent must be level 1."""
        store = NodeStore()
        with pytest.raises(InvalidLevelError) as exc:
            store.add_node(SettingNode("x", "X", level=2))
        assert exc.value.expected == 1

    def test_child_level_must_follow_parent(self):
        """A child must be exactly one level below its parent."""
        store = NodeStore()
        store.add_node(SettingNode("A", "Alpha"))
        with pytest.raises(InvalidLevelError):
            store.add_node(SettingNode("C", "Charlie", level=3, parent_id="A"))
        assert store.get_node("C") is None
        assert store.get_children("A") == []


class TestDuplicates:
    """Test duplicate id handling."""

    def test_relink_replaces_and_keeps_slot(self, caplog):
        """Replacement takes over the old node's position and children."""
        store = _store_with_chain()
        old = store.get_node("B")
        new = SettingNode("B", "Bravo 2", level=2, parent_id="A", enabled=False)

        with caplog.at_level(logging.WARNING):
            store.add_node(new)

        assert store.get_node("B") is new
        assert store.get_node("B") is not old
        assert [n.id for n in store.get_children("A")] == ["B", "D"]
        assert [n.id for n in store.get_children("B")] == ["C"]
        assert "already exists" in caplog.text

    def test_relink_moves_to_new_parent(self):
        """A replacement declaring another parent is moved there."""
        store = _store_with_chain()
        store.add_node(SettingNode("C", "Charlie", level=3, parent_id="D"))
        assert [n.id for n in store.get_children("B")] == []
        assert [n.id for n in store.get_children("D")] == ["C"]

    def test_relink_root_to_root(self):
        """Replacing a root keeps a single root entry."""
        store = _store_with_chain()
        store.add_node(SettingNode("A", "Alpha 2"))
        assert [n.id for n in store.get_root_nodes()] == ["A"]
        assert store.get_node("A").name == "Alpha 2"
        assert store.get_node("A").children == ["B", "D"]

    def test_relink_refuses_level_change_with_children(self):
        """A replacement cannot change level while it has children."""
        store = _store_with_chain()
        with pytest.raises(InvalidLevelError):
            store.add_node(SettingNode("B", "Bravo", level=1))
        assert store.get_node("B").level == 2

    def test_reject_policy(self):
        """Duplicate ids raise under the reject policy."""
        store = NodeStore(duplicate_policy=DUPLICATE_REJECT)
        original = SettingNode("A", "Alpha")
        store.add_node(original)
        with pytest.raises(DuplicateNodeError) as exc:
            store.add_node(SettingNode("A", "Other"))
        assert exc.value.node_id == "A"
        assert store.get_node("A") is original

    def test_unknown_policy(self):
        """Unknown policies are refused at construction."""
        with pytest.raises(ValueError):
            NodeStore(duplicate_policy="merge")


class TestLookup:
    """Test read queries."""

    def test_get_node_unknown(self):
        """Unknown ids return None."""
        assert NodeStore().get_node("nope") is None

    def test_get_children_unknown(self):
        """Unknown ids give an empty list."""
        assert NodeStore().get_children("nope") == []

    def test_get_nodes_by_level(self):
        """Nodes are grouped by level in registration order."""
        store = _store_with_chain()
        assert [n.id for n in store.get_nodes_by_level(1)] == ["A"]
        assert [n.id for n in store.get_nodes_by_level(2)] == ["B", "D"]
        assert [n.id for n in store.get_nodes_by_level(3)] == ["C"]

    def test_get_all_nodes_includes_orphans(self):
        """Orphans are listed by get_all_nodes."""
        store = _store_with_chain()
        store.add_node(SettingNode("x", "X", level=2, parent_id="missing"))
        assert "x" in [n.id for n in store.get_all_nodes()]
        assert "x" in store

    def test_ancestors_nearest_first(self):
        """Ancestors are walked from the parent upwards."""
        store = _store_with_chain()
        assert [n.id for n in store.iter_ancestors("C")] == ["B", "A"]
        assert list(store.iter_ancestors("A")) == []

    def test_descendants_depth_first(self):
        """Descendants are walked in depth-first pre-order."""
        store = _store_with_chain()
        assert [n.id for n in store.iter_descendants("A")] == ["B", "C", "D"]

    def test_depth_first_walk(self):
        """The full walk reports depth relative to the roots."""
        store = _store_with_chain()
        walk = [(depth, n.id) for depth, n in store.iter_depth_first()]
        assert walk == [(0, "A"), (1, "B"), (2, "C"), (1, "D")]

    def test_clear(self):
        """Clear drops every node and root."""
        store = _store_with_chain()
        store.clear()
        assert len(store) == 0
        assert store.get_root_nodes() == []
        assert store.get_node("A") is None
