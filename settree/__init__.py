"""
settree - Hierarchical settings propagation engine

A three-level tree of toggleable settings where enabling a node enables its
ancestors and subtree, and disabling a node disables its subtree, with
change-detected toggle notifications.
"""

__version__ = "1.0.0"

from .tree import (
    SettingNode,
    SettingsTree,
    SettingsTreeError,
    DuplicateNodeError,
    InvalidLevelError,
    TreeNotInitializedError,
    ToggleEvent,
    InvariantViolation,
    ViolationKind,
)
from .definitions import (
    NodeDefinition,
    TreeDefinition,
    DefinitionError,
    DEFAULT_DEFINITIONS,
    load_definitions,
    build_tree,
    export_flat,
    init_default_tree,
    get_default_tree,
    reset_default_tree,
)

__all__ = [
    "__version__",
    # Tree
    "SettingNode",
    "SettingsTree",
    "SettingsTreeError",
    "DuplicateNodeError",
    "InvalidLevelError",
    "TreeNotInitializedError",
    "ToggleEvent",
    "InvariantViolation",
    "ViolationKind",
    # Definitions
    "NodeDefinition",
    "TreeDefinition",
    "DefinitionError",
    "DEFAULT_DEFINITIONS",
    "load_definitions",
    "build_tree",
    "export_flat",
    "init_default_tree",
    "get_default_tree",
    "reset_default_tree",
]
