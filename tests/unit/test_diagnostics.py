"""
Unit tests for tree/diagnostics.py

Tests structure dump formatting, orphan detection and invariant checks.
"""

import logging

from settree.tree import SettingNode, SettingsTree
from settree.tree.diagnostics import (
    InvariantViolation,
    ViolationKind,
    dump_structure,
    find_orphans,
    format_node,
    validate,
)


class TestFormatting:
    """Tests for node and tree formatting."""

    def test_format_enabled_root(self):
        """Roots have no indentation."""
        node = SettingNode("A", "Alpha")
        assert format_node(node) == "✓ [1] Alpha (A)"

    def test_format_disabled_nested(self):
        """Depth adds two spaces per level."""
        node = SettingNode("C", "Charlie", level=3, parent_id="B", enabled=False)
        assert format_node(node, 2) == "    ✗ [3] Charlie (C)"

    def test_dump_reference_tree(self, enabled_tree):
        """Dump follows depth-first pre-order over insertion order."""
        assert dump_structure(enabled_tree.store) == (
            "✓ [1] Alpha (A)\n"
            "  ✓ [2] Bravo (B)\n"
            "    ✓ [3] Charlie (C)\n"
            "  ✓ [2] Delta (D)"
        )

    def test_dump_empty(self):
        """An empty tree dumps to an empty string."""
        assert dump_structure(SettingsTree().store) == ""

    def test_log_header_and_footer(self, enabled_tree, caplog):
        """The logged dump is wrapped in header and footer lines."""
        with caplog.at_level(logging.INFO, logger="settree.tree.diagnostics"):
            enabled_tree.log_tree_structure()

        messages = [r.getMessage() for r in caplog.records]
        assert messages[0] == "=== Settings Tree Structure ==="
        assert messages[1] == "✓ [1] Alpha (A)"
        assert messages[-1].startswith("====")
        assert len(messages) == 6


class TestOrphans:
    """Tests for find_orphans."""

    def test_no_orphans(self, wide_tree):
        """A well-formed tree has none."""
        assert find_orphans(wide_tree.store) == []

    def test_orphan_detected(self, enabled_tree):
        """A node with an unknown parent is reported."""
        enabled_tree.add_node(SettingNode("X", "Lost", level=3, parent_id="ghost"))
        assert [n.id for n in find_orphans(enabled_tree.store)] == ["X"]

    def test_orphan_not_adopted_later(self):
        """Registering the missing parent afterwards does not link the orphan."""
        tree = SettingsTree()
        tree.add_node(SettingNode("B", "Bravo", level=2, parent_id="A"))
        tree.add_node(SettingNode("A", "Alpha"))

        assert tree.get_children("A") == []
        assert find_orphans(tree.store) == []


class TestValidate:
    """Tests for validate on coherent and corrupted trees."""

    def test_coherent_tree(self, enabled_tree, disabled_tree):
        """Trees built through the API have no violations."""
        assert validate(enabled_tree.store) == []
        assert validate(disabled_tree.store) == []

    def test_upward_violation(self, enabled_tree, caplog):
        """An enabled node below a disabled ancestor is flagged."""
        enabled_tree.get_node("A").enabled = False
        enabled_tree.get_node("D").enabled = False

        with caplog.at_level(logging.WARNING):
            violations = validate(enabled_tree.store)

        upward = [v for v in violations if v.kind == ViolationKind.UPWARD]
        assert {v.node_id for v in upward} == {"B", "C"}
        assert "invariant violations" in caplog.text

    def test_downward_violation(self, enabled_tree):
        """A disabled node with an enabled descendant is flagged."""
        enabled_tree.get_node("B").enabled = False

        violations = validate(enabled_tree.store)

        kinds = {(v.kind, v.node_id) for v in violations}
        assert (ViolationKind.DOWNWARD, "B") in kinds
        assert (ViolationKind.UPWARD, "C") in kinds

    def test_level_violation(self, enabled_tree):
        """A level changed after registration is flagged."""
        enabled_tree.get_node("C").level = 2

        violations = validate(enabled_tree.store)

        assert violations[0].kind == ViolationKind.LEVEL
        assert violations[0].node_id == "C"

    def test_violation_to_dict(self):
        """Violations serialize with the kind value."""
        violation = InvariantViolation(ViolationKind.UPWARD, "C", "msg")
        assert violation.to_dict() == {"kind": "upward", "node_id": "C", "message": "msg"}
