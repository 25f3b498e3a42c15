"""
SettingsTree Change Tracker

Captures every node's enabled flag before a mutation so that nodes merely
visited by a cascade can be told apart from nodes that really transitioned.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .node import SettingNode
    from .store import NodeStore


@dataclass(frozen=True)
class StateSnapshot:
    """Enabled flags of all registered nodes at one point in time."""
    states: Dict[str, bool] = field(default_factory=dict)

    def get(self, node_id: str, default: Optional[bool] = None) -> Optional[bool]:
        return self.states.get(node_id, default)

    def has_changed(self, node: "SettingNode") -> bool:
        """Nodes missing from the snapshot count as unchanged."""
        before = self.states.get(node.id)
        return before is not None and before != node.enabled

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.states

    def __len__(self) -> int:
        return len(self.states)


class ChangeTracker:
    """Snapshot/compare helper around a NodeStore."""

    def __init__(self, store: "NodeStore"):
        self._store = store

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            states={node.id: node.enabled for node in self._store.get_all_nodes()}
        )

    @staticmethod
    def classify(
        snapshot: StateSnapshot,
        nodes: Iterable["SettingNode"],
    ) -> Tuple[List["SettingNode"], List["SettingNode"]]:
        """Split nodes into (changed, unchanged), preserving order."""
        changed: List["SettingNode"] = []
        unchanged: List["SettingNode"] = []
        for node in nodes:
            if snapshot.has_changed(node):
                changed.append(node)
            else:
                unchanged.append(node)
        return changed, unchanged
