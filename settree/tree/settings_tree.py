"""
SettingsTree

Public entry point for the hierarchical settings tree. Wires the node store,
cascade engine, change tracker and notification dispatcher together.

A set_enabled call runs fully synchronously:
    snapshot -> cascade -> affected set -> notify changed nodes -> return

The tree performs no locking; callers confine it to one thread or serialize
access themselves.
"""

from __future__ import annotations
from typing import Dict, List, Optional, TYPE_CHECKING
import logging

from .cascade import CascadeEngine
from .diagnostics import (
    InvariantViolation,
    dump_structure,
    find_orphans,
    log_tree_structure,
    validate,
)
from .dispatcher import EventCallback, NotificationDispatcher, ToggleCallback, ToggleEvent
from .node import SettingNode
from .store import DUPLICATE_RELINK, NodeStore
from .tracker import ChangeTracker

if TYPE_CHECKING:
    from settree.bootstrap.config import TreeConfig

logger = logging.getLogger(__name__)


class SettingsTree:
    """
    Three-level tree of toggleable settings kept coherent on every change.

    Usage:
        tree = SettingsTree()
        tree.add_node(SettingNode("work", "Work", level=1))
        tree.add_node(SettingNode("work-schedules", "Schedules", level=2, parent_id="work"))
        tree.on_toggle("work-schedules", lambda enabled: ...)

        affected = tree.set_enabled("work", False)
    """

    def __init__(
        self,
        config: Optional["TreeConfig"] = None,
        duplicate_policy: Optional[str] = None,
        max_history: Optional[int] = None,
    ):
        if duplicate_policy is None:
            duplicate_policy = config.duplicate_policy if config else DUPLICATE_RELINK
        if max_history is None:
            max_history = (
                config.max_history if config else NotificationDispatcher.DEFAULT_MAX_HISTORY
            )

        self._store = NodeStore(duplicate_policy=duplicate_policy)
        self._cascade = CascadeEngine(self._store)
        self._tracker = ChangeTracker(self._store)
        self._dispatcher = NotificationDispatcher(max_history=max_history)

    @property
    def store(self) -> NodeStore:
        return self._store

    @property
    def dispatcher(self) -> NotificationDispatcher:
        return self._dispatcher

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def add_node(
        self,
        node: SettingNode,
        on_toggle: Optional[ToggleCallback] = None,
    ) -> SettingNode:
        """
        Register a node, optionally subscribing a toggle callback for it.

        A node added in a state that contradicts its ancestors is settled
        immediately (a disabled ancestor wins). No callbacks fire.
        """
        self._store.add_node(node)
        self._cascade.settle(node.id)
        if on_toggle is not None:
            self._dispatcher.subscribe(node.id, on_toggle)
        return node

    def clear(self) -> None:
        """Drop all nodes. Subscriptions and history are kept."""
        self._store.clear()

    def normalize(self) -> List[str]:
        """Restore coherence after bulk loading. Returns ids that were changed."""
        flipped = self._cascade.normalize()
        if flipped:
            logger.info(f"Normalized settings tree: {len(flipped)} nodes disabled")
        return flipped

    # -------------------------------------------------------------------------
    # Toggling
    # -------------------------------------------------------------------------

    def set_enabled(self, node_id: str, enabled: bool) -> List[SettingNode]:
        """
        Set a node's state and cascade it through the tree.

        Args:
            node_id: Node to change
            enabled: Desired state

        Returns:
            Affected nodes (start node, ancestors, descendants), including
            the ones whose state did not change. Empty for unknown ids.
        """
        start = self._store.get_node(node_id)
        if start is None:
            logger.warning(f"SettingsTree: Node {node_id} not found, ignoring set_enabled")
            return []

        snapshot = self._tracker.snapshot()

        if enabled:
            self._cascade.enable_subtree(node_id)
        else:
            self._cascade.disable_subtree(node_id)

        affected = self.collect_affected(node_id)
        event = self._dispatcher.dispatch(node_id, enabled, affected, snapshot)

        logger.debug(
            f"set_enabled({node_id}, {enabled}): {len(affected)} affected, "
            f"{len(event.changed)} changed"
        )
        return affected

    def collect_affected(self, node_id: str) -> List[SettingNode]:
        """Start node, then ancestors nearest first, then descendants depth-first."""
        start = self._store.get_node(node_id)
        if start is None:
            return []

        affected = [start]
        seen = {start.id}
        for node in self._store.iter_ancestors(node_id):
            if node.id not in seen:
                seen.add(node.id)
                affected.append(node)
        for node in self._store.iter_descendants(node_id):
            if node.id not in seen:
                seen.add(node.id)
                affected.append(node)
        return affected

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def on_toggle(self, node_id: str, callback: ToggleCallback) -> bool:
        """Register a callback invoked with the node's new state on each transition."""
        return self._dispatcher.subscribe(node_id, callback)

    def remove_on_toggle(self, node_id: str, callback: ToggleCallback) -> bool:
        return self._dispatcher.unsubscribe(node_id, callback)

    def on_any_toggle(self, callback: EventCallback) -> bool:
        """Register a callback receiving the ToggleEvent of every set_enabled call."""
        return self._dispatcher.subscribe_all(callback)

    def get_events(self, limit: int = 100) -> List[ToggleEvent]:
        return self._dispatcher.get_events(limit)

    @property
    def last_event(self) -> Optional[ToggleEvent]:
        return self._dispatcher.last_event

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_node(self, node_id: str) -> Optional[SettingNode]:
        return self._store.get_node(node_id)

    def get_root_nodes(self) -> List[SettingNode]:
        return self._store.get_root_nodes()

    def get_children(self, node_id: str) -> List[SettingNode]:
        return self._store.get_children(node_id)

    def get_nodes_by_level(self, level: int) -> List[SettingNode]:
        return self._store.get_nodes_by_level(level)

    def get_all_nodes(self) -> List[SettingNode]:
        return self._store.get_all_nodes()

    def is_enabled(self, node_id: str) -> bool:
        node = self._store.get_node(node_id)
        return node is not None and node.enabled

    def export_state(self) -> Dict[str, bool]:
        """Current enabled flag of every node, keyed by id."""
        return {node.id: node.enabled for node in self._store.get_all_nodes()}

    # -------------------------------------------------------------------------
    # Diagnostics
    # -------------------------------------------------------------------------

    def dump_structure(self) -> str:
        return dump_structure(self._store)

    def log_tree_structure(self) -> None:
        log_tree_structure(self._store)

    def find_orphans(self) -> List[SettingNode]:
        return find_orphans(self._store)

    def validate(self) -> List[InvariantViolation]:
        return validate(self._store)

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._store
