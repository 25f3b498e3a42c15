"""
SettingsTree Node Store

Owns the id -> node map and the ordered root list.

Registration rules:
- A node whose parent resolves is appended to that parent's children
- A node with no parent is appended to the root list
- A node whose parent does not resolve is kept as an orphan: reachable by
  id lookup only, never through root/children traversal
- A duplicate id replaces the previous node and takes over its links
  ("relink"), or is refused ("reject")
"""

from __future__ import annotations
from typing import Dict, Iterator, List, Optional
import logging

from .node import (
    MAX_LEVEL,
    MIN_LEVEL,
    ROOT_LEVEL,
    DuplicateNodeError,
    InvalidLevelError,
    SettingNode,
)

logger = logging.getLogger(__name__)


DUPLICATE_RELINK = "relink"
DUPLICATE_REJECT = "reject"
DUPLICATE_POLICIES = (DUPLICATE_RELINK, DUPLICATE_REJECT)


class NodeStore:
    """Flat storage for tree nodes with parent/child links kept as ids."""

    def __init__(self, duplicate_policy: str = DUPLICATE_RELINK):
        if duplicate_policy not in DUPLICATE_POLICIES:
            raise ValueError(f"Unknown duplicate policy: {duplicate_policy}")
        self._duplicate_policy = duplicate_policy
        self._nodes: Dict[str, SettingNode] = {}
        self._root_ids: List[str] = []

    @property
    def duplicate_policy(self) -> str:
        return self._duplicate_policy

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def add_node(self, node: SettingNode) -> SettingNode:
        """
        Register a node under its id.

        Raises:
            InvalidLevelError: level outside 1..3 or not parent level + 1
            DuplicateNodeError: id already registered and policy is "reject"
        """
        existing = self._nodes.get(node.id)

        if existing is node:
            logger.warning(f"NodeStore: Node {node.id} already registered, ignoring")
            return node

        if existing is not None and self._duplicate_policy == DUPLICATE_REJECT:
            raise DuplicateNodeError(node.id)

        parent = self._nodes.get(node.parent_id) if node.parent_id else None
        self._check_level(node, parent, existing)

        if existing is not None:
            logger.warning(f"NodeStore: Node {node.id} already exists, replacing")
            self._relink(existing, node)
        else:
            self._nodes[node.id] = node
            self._attach(node)

        return node

    def _check_level(
        self,
        node: SettingNode,
        parent: Optional[SettingNode],
        existing: Optional[SettingNode],
    ) -> None:
        if not MIN_LEVEL <= node.level <= MAX_LEVEL:
            raise InvalidLevelError(node.id, node.level)

        if not node.parent_id:
            if node.level != ROOT_LEVEL:
                raise InvalidLevelError(node.id, node.level, ROOT_LEVEL)
        elif parent is not None and node.level != parent.level + 1:
            raise InvalidLevelError(node.id, node.level, parent.level + 1)

        # Adopted children must still sit one level below
        if existing is not None and existing.children and node.level != existing.level:
            raise InvalidLevelError(node.id, node.level, existing.level)

    def _attach(self, node: SettingNode) -> None:
        """Link a freshly stored node to its parent or to the root list."""
        if node.parent_id:
            parent = self._nodes.get(node.parent_id)
            if parent is None:
                logger.warning(
                    f"NodeStore: Parent {node.parent_id} not found for node {node.id}"
                )
                return
            if node.id not in parent.children:
                parent.children.append(node.id)
        elif node.id not in self._root_ids:
            self._root_ids.append(node.id)

    def _detach(self, node: SettingNode) -> None:
        if node.parent_id:
            parent = self._nodes.get(node.parent_id)
            if parent is not None and node.id in parent.children:
                parent.children.remove(node.id)
        elif node.id in self._root_ids:
            self._root_ids.remove(node.id)

    def _relink(self, old: SettingNode, new: SettingNode) -> None:
        """Replace old with new, keeping its slot and adopting its children."""
        for child_id in old.children:
            if child_id not in new.children:
                new.children.append(child_id)

        same_slot = (old.parent_id or None) == (new.parent_id or None)
        if not same_slot:
            self._detach(old)

        self._nodes[new.id] = new

        if not same_slot:
            self._attach(new)

    def clear(self) -> None:
        """Drop every node and root. No callbacks are involved."""
        self._nodes.clear()
        self._root_ids.clear()

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get_node(self, node_id: str) -> Optional[SettingNode]:
        return self._nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def get_all_nodes(self) -> List[SettingNode]:
        return list(self._nodes.values())

    def get_root_nodes(self) -> List[SettingNode]:
        return [self._nodes[rid] for rid in self._root_ids if rid in self._nodes]

    def get_nodes_by_level(self, level: int) -> List[SettingNode]:
        return [n for n in self._nodes.values() if n.level == level]

    def get_children(self, node_id: str) -> List[SettingNode]:
        """Direct children in insertion order; unknown ids give []."""
        node = self._nodes.get(node_id)
        if node is None:
            return []
        return [self._nodes[cid] for cid in node.children if cid in self._nodes]

    def get_parent(self, node_id: str) -> Optional[SettingNode]:
        node = self._nodes.get(node_id)
        if node is None or not node.parent_id:
            return None
        return self._nodes.get(node.parent_id)

    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------

    def iter_ancestors(self, node_id: str) -> Iterator[SettingNode]:
        """Walk parent links nearest first, stopping at the first unresolved id."""
        seen = {node_id}
        node = self._nodes.get(node_id)
        while node is not None and node.parent_id and node.parent_id not in seen:
            node = self._nodes.get(node.parent_id)
            if node is None:
                break
            seen.add(node.id)
            yield node

    def iter_descendants(self, node_id: str) -> Iterator[SettingNode]:
        """Depth-first pre-order walk below a node, each node at most once."""
        node = self._nodes.get(node_id)
        if node is None:
            return
        seen = {node_id}
        stack = list(reversed(node.children))
        while stack:
            current_id = stack.pop()
            if current_id in seen:
                continue
            current = self._nodes.get(current_id)
            if current is None:
                continue
            seen.add(current_id)
            yield current
            stack.extend(reversed(current.children))

    def iter_depth_first(self) -> Iterator[tuple]:
        """Yield (depth, node) for every reachable node, roots first."""
        seen = set()
        stack = [(0, rid) for rid in reversed(self._root_ids)]
        while stack:
            depth, current_id = stack.pop()
            current = self._nodes.get(current_id)
            if current is None or current_id in seen:
                continue
            seen.add(current_id)
            yield depth, current
            stack.extend((depth + 1, cid) for cid in reversed(current.children))

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes
