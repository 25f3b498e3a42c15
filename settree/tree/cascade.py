"""
SettingsTree Cascade Engine

Restores tree coherence after a single node's state is requested to change:
- Enabling a node enables its ancestor chain and its whole subtree
- Disabling a node disables its subtree; ancestors stay as they are, since a
  sibling branch may legitimately remain enabled

These are the only writers of SettingNode.enabled once a node is registered.
Both walks use an explicit worklist and stop at nodes already in the target
state, which keeps them idempotent and safe on malformed (cyclic) links.
No callbacks run here.
"""

from __future__ import annotations
from typing import List, TYPE_CHECKING
import logging

if TYPE_CHECKING:
    from .store import NodeStore

logger = logging.getLogger(__name__)


class CascadeEngine:
    """Structural enable/disable propagation over a NodeStore."""

    def __init__(self, store: "NodeStore"):
        self._store = store

    def enable_subtree(self, node_id: str) -> List[str]:
        """
        Enable a node, every ancestor and every descendant.

        Returns:
            Ids whose flag was flipped, in visit order
        """
        node = self._store.get_node(node_id)
        if node is None:
            logger.warning(f"CascadeEngine: Node {node_id} not found for enabling")
            return []

        if node.enabled:
            return []

        flipped = [self._set(node, True)]

        # Parent chain only: siblings of the start node and of its ancestors
        # keep their state and stay outside the affected set
        current = node
        seen = {node.id}
        while current.parent_id and current.parent_id not in seen:
            parent = self._store.get_node(current.parent_id)
            if parent is None:
                logger.warning(
                    f"CascadeEngine: Parent {current.parent_id} not found for enabling"
                )
                break
            if parent.enabled:
                break
            seen.add(parent.id)
            flipped.append(self._set(parent, True))
            current = parent

        to_process = list(reversed(node.children))
        while to_process:
            current_id = to_process.pop()
            child = self._store.get_node(current_id)
            if child is None:
                logger.warning(f"CascadeEngine: Node {current_id} not found for enabling")
                continue
            if child.enabled:
                continue
            flipped.append(self._set(child, True))
            to_process.extend(reversed(child.children))

        return flipped

    def disable_subtree(self, node_id: str) -> List[str]:
        """
        Disable a node and every descendant. Ancestors are left untouched.

        Returns:
            Ids whose flag was flipped, in visit order
        """
        flipped: List[str] = []
        to_process = [node_id]

        while to_process:
            current_id = to_process.pop()
            node = self._store.get_node(current_id)
            if node is None:
                logger.warning(f"CascadeEngine: Node {current_id} not found for disabling")
                continue

            if not node.enabled:
                continue

            flipped.append(self._set(node, False))
            to_process.extend(reversed(node.children))

        return flipped

    def _set(self, node, enabled: bool) -> str:
        node.enabled = enabled
        logger.debug(
            f"CascadeEngine: {'Enabled' if enabled else 'Disabled'} {node.id} ({node.name})"
        )
        return node.id

    def settle(self, node_id: str) -> List[str]:
        """
        Make a single node coherent with its surroundings after registration
        or bulk loading. A disabled ancestor wins over an enabled node, and a
        disabled node forces its descendants off.
        """
        node = self._store.get_node(node_id)
        if node is None:
            return []

        if node.enabled and any(not a.enabled for a in self._store.iter_ancestors(node_id)):
            return self.disable_subtree(node_id)

        flipped: List[str] = []
        if not node.enabled:
            for child_id in node.children:
                flipped.extend(self.disable_subtree(child_id))
        return flipped

    def normalize(self) -> List[str]:
        """Settle every reachable node top-down. Returns flipped ids."""
        flipped: List[str] = []
        for _, node in list(self._store.iter_depth_first()):
            flipped.extend(self.settle(node.id))
        return flipped
