"""
SettingsTree Propagation Engine

Provides:
- NodeStore: id -> node map with root list
- CascadeEngine: enable/disable propagation
- ChangeTracker: before/after state comparison
- NotificationDispatcher: per-node and wildcard toggle callbacks
- SettingsTree: public entry point tying them together
"""

from .node import (
    SettingNode,
    SettingsTreeError,
    DuplicateNodeError,
    InvalidLevelError,
    TreeNotInitializedError,
    MIN_LEVEL,
    MAX_LEVEL,
)
from .store import (
    NodeStore,
    DUPLICATE_RELINK,
    DUPLICATE_REJECT,
    DUPLICATE_POLICIES,
)
from .cascade import CascadeEngine
from .tracker import ChangeTracker, StateSnapshot
from .dispatcher import NotificationDispatcher, ToggleEvent
from .diagnostics import InvariantViolation, ViolationKind
from .settings_tree import SettingsTree

__all__ = [
    # Node
    "SettingNode",
    "SettingsTreeError",
    "DuplicateNodeError",
    "InvalidLevelError",
    "TreeNotInitializedError",
    "MIN_LEVEL",
    "MAX_LEVEL",
    # Store
    "NodeStore",
    "DUPLICATE_RELINK",
    "DUPLICATE_REJECT",
    "DUPLICATE_POLICIES",
    # Cascade
    "CascadeEngine",
    # Tracking
    "ChangeTracker",
    "StateSnapshot",
    # Notification
    "NotificationDispatcher",
    "ToggleEvent",
    # Diagnostics
    "InvariantViolation",
    "ViolationKind",
    # Facade
    "SettingsTree",
]
