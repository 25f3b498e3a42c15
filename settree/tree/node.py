"""
SettingsTree Node Model

Defines the setting node record and the structural exceptions raised
while registering nodes.

Relations are stored as id references so the owning map in NodeStore is
the single owner of every node.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# =============================================================================
# LEVELS
# =============================================================================

MIN_LEVEL = 1
MAX_LEVEL = 3
ROOT_LEVEL = MIN_LEVEL


# =============================================================================
# EXCEPTIONS
# =============================================================================

class SettingsTreeError(Exception):
    """Base exception for settings tree errors."""
    pass


class DuplicateNodeError(SettingsTreeError):
    """Raised when a node id is registered twice under the reject policy."""

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Node already registered: {node_id}")


class InvalidLevelError(SettingsTreeError):
    """Raised when a node's level does not fit its position in the tree."""

    def __init__(self, node_id: str, level: int, expected: Optional[int] = None):
        self.node_id = node_id
        self.level = level
        self.expected = expected
        if expected is None:
            message = (
                f"Node {node_id} has level {level}, "
                f"must be between {MIN_LEVEL} and {MAX_LEVEL}"
            )
        else:
            message = f"Node {node_id} has level {level}, expected {expected}"
        super().__init__(message)


class TreeNotInitializedError(SettingsTreeError):
    """Raised when the default tree handle is read before initialization."""
    pass


# =============================================================================
# SETTING NODE
# =============================================================================

@dataclass
class SettingNode:
    """A single toggleable entry in the settings tree."""
    id: str
    name: str
    description: str = ""
    level: int = ROOT_LEVEL
    parent_id: Optional[str] = None

    # Child ids, insertion order drives notification and display order
    children: List[str] = field(default_factory=list)

    enabled: bool = True

    @property
    def is_root(self) -> bool:
        return not self.parent_id

    def __hash__(self):
        return hash(self.id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "level": self.level,
            "parent_id": self.parent_id,
            "children": list(self.children),
            "enabled": self.enabled,
        }
