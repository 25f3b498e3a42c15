"""
SettingsTree Diagnostics

Read-only helpers for troubleshooting: structure dump, orphan listing and
invariant checks. Nothing here mutates the tree.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, TYPE_CHECKING
import logging

if TYPE_CHECKING:
    from .node import SettingNode
    from .store import NodeStore

logger = logging.getLogger(__name__)


ENABLED_GLYPH = "✓"
DISABLED_GLYPH = "✗"
INDENT = "  "


class ViolationKind(Enum):
    """Which structural rule a node breaks."""
    LEVEL = "level"          # level is not parent level + 1
    UPWARD = "upward"        # enabled under a disabled ancestor
    DOWNWARD = "downward"    # disabled with an enabled descendant


@dataclass(frozen=True)
class InvariantViolation:
    kind: ViolationKind
    node_id: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "node_id": self.node_id, "message": self.message}


def format_node(node: "SettingNode", depth: int = 0) -> str:
    glyph = ENABLED_GLYPH if node.enabled else DISABLED_GLYPH
    return f"{INDENT * depth}{glyph} [{node.level}] {node.name} ({node.id})"


def dump_structure(store: "NodeStore") -> str:
    """Indented depth-first dump of every node reachable from the roots."""
    return "\n".join(format_node(node, depth) for depth, node in store.iter_depth_first())


def log_tree_structure(store: "NodeStore") -> None:
    logger.info("=== Settings Tree Structure ===")
    for depth, node in store.iter_depth_first():
        logger.info(format_node(node, depth))
    logger.info("===============================")


def find_orphans(store: "NodeStore") -> List["SettingNode"]:
    """Nodes whose declared parent id does not resolve."""
    return [
        n for n in store.get_all_nodes()
        if n.parent_id and not store.has_node(n.parent_id)
    ]


def validate(store: "NodeStore") -> List[InvariantViolation]:
    """Check level consistency and upward/downward coherence."""
    violations: List[InvariantViolation] = []

    for node in store.get_all_nodes():
        parent = store.get_parent(node.id)
        if parent is not None and node.level != parent.level + 1:
            violations.append(InvariantViolation(
                ViolationKind.LEVEL,
                node.id,
                f"level {node.level} under {parent.id} at level {parent.level}",
            ))

        if node.enabled:
            for ancestor in store.iter_ancestors(node.id):
                if not ancestor.enabled:
                    violations.append(InvariantViolation(
                        ViolationKind.UPWARD,
                        node.id,
                        f"enabled while ancestor {ancestor.id} is disabled",
                    ))
                    break
        else:
            for descendant in store.iter_descendants(node.id):
                if descendant.enabled:
                    violations.append(InvariantViolation(
                        ViolationKind.DOWNWARD,
                        node.id,
                        f"disabled while descendant {descendant.id} is enabled",
                    ))
                    break

    if violations:
        logger.warning(f"Settings tree has {len(violations)} invariant violations")

    return violations
