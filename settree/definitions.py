"""
settree/definitions.py - Declarative tree definitions

Defines the node definition schema, the built-in automation settings tree,
and the bridge between the tree and flat persisted boolean fields:
- build_tree: definitions + flat values -> coherent SettingsTree
- export_flat: SettingsTree -> {field: enabled}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, TYPE_CHECKING

from pydantic import BaseModel, Field, ValidationError

from .tree.node import (
    MAX_LEVEL,
    MIN_LEVEL,
    DuplicateNodeError,
    InvalidLevelError,
    SettingNode,
    SettingsTreeError,
    TreeNotInitializedError,
)
from .tree.settings_tree import SettingsTree

if TYPE_CHECKING:
    from .bootstrap.config import TreeConfig

logger = logging.getLogger(__name__)


class DefinitionError(SettingsTreeError):
    """Raised when node definitions cannot be read or validated."""
    pass


# =============================================================================
# Schemas
# =============================================================================


class NodeDefinition(BaseModel):
    """One node of a settings tree definition."""

    id: str = Field(..., min_length=1, description="Unique node id")
    name: str = Field(..., description="Display name")
    description: str = Field(default="", description="Display description")
    level: int = Field(default=MIN_LEVEL, ge=MIN_LEVEL, le=MAX_LEVEL)
    parent_id: Optional[str] = Field(None, description="Parent node id, None for roots")
    default: bool = Field(default=True, description="State when no flat value is stored")
    field: Optional[str] = Field(None, description="Flat persisted field name")

    @property
    def field_name(self) -> str:
        return self.field or self.id

    def to_node(self, enabled: Optional[bool] = None) -> SettingNode:
        return SettingNode(
            id=self.id,
            name=self.name,
            description=self.description,
            level=self.level,
            parent_id=self.parent_id or None,
            enabled=self.default if enabled is None else enabled,
        )


class TreeDefinition(BaseModel):
    """Ordered node definitions; parents must precede their children."""

    nodes: List[NodeDefinition] = Field(default_factory=list)


# =============================================================================
# Built-in automation tree
# =============================================================================


def _node(id, name, description, level=1, parent_id=None, field=None, default=True):
    return NodeDefinition(
        id=id,
        name=name,
        description=description,
        level=level,
        parent_id=parent_id,
        field=field,
        default=default,
    )


DEFAULT_DEFINITIONS: List[NodeDefinition] = [
    # Level 1: automation categories
    _node("building", "Building", "Automatic construction", field="building_enabled"),
    _node("work", "Work", "Work assignment", field="work_enabled"),
    _node("farming", "Farming", "Crops and animals", field="farming_enabled"),
    _node("defense", "Defense", "Drafting and equipment", field="defense_enabled", default=False),
    _node("medical", "Medical", "Treatment and rescue", field="medical_enabled", default=False),

    # Level 2: building
    _node("building-beds", "Beds", "Place and manage beds", 2, "building", "build_beds"),
    _node("building-rooms", "Rooms", "Build walled rooms with doors", 2, "building", "build_rooms"),
    _node("building-power", "Power", "Generators and conduits", 2, "building", "build_power"),

    # Level 3: beds
    _node("beds-relocate", "Relocate outdoor beds", "Move beds indoors", 3, "building-beds",
          "auto_relocate_outdoor_beds"),
    _node("beds-install", "Install stored beds", "Install beds from storage", 3, "building-beds",
          "auto_install_stored_beds"),

    # Level 3: rooms
    _node("rooms-bedrooms", "Bedrooms", "Private bedrooms", 3, "building-rooms", "build_bedrooms"),
    _node("rooms-kitchen", "Kitchen", "Kitchen rooms", 3, "building-rooms", "build_kitchens"),
    _node("rooms-storage", "Storage", "Storage rooms", 3, "building-rooms", "build_storage_rooms"),
    _node("rooms-freezer", "Freezer", "Refrigerated storage", 3, "building-rooms", "build_freezer"),

    # Level 2: work
    _node("work-priorities", "Manual priorities", "Numeric work priorities", 2, "work",
          "use_manual_priorities"),
    _node("work-schedules", "Schedules", "Adaptive daily schedules", 2, "work",
          "use_emergency_schedules"),
    _node("work-dynamic", "Dynamic priorities", "Adjust priorities to colony needs", 2, "work",
          "use_dynamic_work_priorities"),

    # Level 3: schedules
    _node("schedules-nightowl", "Night owl", "Night shifts for night owls", 3, "work-schedules",
          "use_night_owl_schedules"),
    _node("schedules-emergency", "Emergency", "Emergency schedules", 3, "work-schedules",
          "use_emergency_schedule_type"),
    _node("schedules-mood", "Mood based", "Extra recreation for low mood", 3, "work-schedules",
          "use_mood_based_schedule_type"),

    # Level 2: defense
    _node("defense-draft", "Auto draft", "Draft colonists on threats", 2, "defense",
          "auto_draft_colonists"),
    _node("defense-weapons", "Weapons", "Equip better weapons", 2, "defense", "auto_equip_weapons"),
    _node("defense-armor", "Armor", "Equip better apparel", 2, "defense", "auto_equip_armor"),

    # Level 3: armor
    _node("armor-smart", "Smart apparel", "Pick apparel by situation", 3, "defense-armor",
          "use_smart_apparel_mode"),
    _node("armor-policies", "Outfit policies", "Maintain outfit policies", 3, "defense-armor",
          "use_auto_outfit_policies"),
    _node("armor-combat", "Combat clothing", "Combat vs civilian clothing", 3, "defense-armor",
          "use_combat_vs_civilian_clothing"),
]


# =============================================================================
# Loading
# =============================================================================


def load_definitions(filepath: str) -> List[NodeDefinition]:
    """
    Load node definitions from a JSON file.

    Accepts either {"nodes": [...]} or a bare list of node objects.

    Raises:
        DefinitionError: file missing, not JSON, or failing validation
    """
    path = Path(filepath)
    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise DefinitionError(f"Cannot read definitions from {filepath}: {e}") from e

    if isinstance(data, list):
        data = {"nodes": data}

    try:
        definition = TreeDefinition.model_validate(data)
    except ValidationError as e:
        raise DefinitionError(f"Invalid definitions in {filepath}: {e}") from e

    logger.info(f"Loaded {len(definition.nodes)} node definitions from {filepath}")
    return definition.nodes


# =============================================================================
# Tree <-> flat fields
# =============================================================================


def build_tree(
    definitions: Optional[Sequence[NodeDefinition]] = None,
    flat_values: Optional[Dict[str, bool]] = None,
    tree: Optional[SettingsTree] = None,
    config: Optional["TreeConfig"] = None,
) -> SettingsTree:
    """
    Clear and (re)build a tree from definitions.

    Args:
        definitions: Node definitions, parents first (default: built-in tree)
        flat_values: Stored flat values keyed by field name
        tree: Tree to rebuild in place; a new one is created if None
        config: Tree configuration for a newly created tree

    Returns:
        The built tree, normalized so a disabled parent disables its subtree

    Raises:
        DefinitionError: a definition breaks the level rules, or repeats an
            id under the reject policy
    """
    if definitions is None:
        definitions = DEFAULT_DEFINITIONS
    flat_values = flat_values or {}

    if tree is None:
        tree = SettingsTree(config=config)
    tree.clear()

    for definition in definitions:
        enabled = flat_values.get(definition.field_name)
        try:
            tree.add_node(definition.to_node(None if enabled is None else bool(enabled)))
        except (DuplicateNodeError, InvalidLevelError) as e:
            raise DefinitionError(f"Invalid tree structure: {e}") from e

    tree.normalize()

    logger.info(
        f"Settings tree built: {len(tree)} nodes, {len(tree.get_root_nodes())} roots"
    )
    return tree


def export_flat(
    tree: SettingsTree,
    definitions: Optional[Sequence[NodeDefinition]] = None,
) -> Dict[str, bool]:
    """Map the tree's current state back to flat field values."""
    if definitions is None:
        definitions = DEFAULT_DEFINITIONS

    values: Dict[str, bool] = {}
    for definition in definitions:
        node = tree.get_node(definition.id)
        if node is not None:
            values[definition.field_name] = node.enabled
    logger.debug(f"Synced {len(values)} tree nodes to flat values")
    return values


# =============================================================================
# Default tree handle
# =============================================================================

_default_tree: Optional[SettingsTree] = None


def init_default_tree(
    definitions: Optional[Sequence[NodeDefinition]] = None,
    flat_values: Optional[Dict[str, bool]] = None,
    config: Optional["TreeConfig"] = None,
) -> SettingsTree:
    """
    Clear and rebuild the process-wide default tree.

    Without a config the existing tree is rebuilt in place and keeps its
    subscriptions. A config creates a fresh tree with that duplicate policy
    and history size; subscriptions on the previous tree are not carried over.
    """
    global _default_tree
    if _default_tree is None or config is not None:
        _default_tree = SettingsTree(config=config)
    return build_tree(definitions, flat_values, tree=_default_tree)


def get_default_tree() -> SettingsTree:
    """Get the default tree. It is never built implicitly."""
    if _default_tree is None:
        raise TreeNotInitializedError("Default settings tree not initialized")
    return _default_tree


def reset_default_tree() -> None:
    """Discard the default tree handle."""
    global _default_tree
    _default_tree = None
