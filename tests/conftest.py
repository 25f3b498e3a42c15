"""
settree test configuration and fixtures

Provides small hand-built trees shared by the unit tests.
"""

import pytest

from settree.tree import SettingNode, SettingsTree


def build_chain_tree(enabled: bool = True, **kwargs) -> SettingsTree:
    """
    Build the reference tree:

        A (L1)
        +-- B (L2)
        |   +-- C (L3)
        +-- D (L2)
    """
    tree = SettingsTree(**kwargs)
    tree.add_node(SettingNode("A", "Alpha", level=1, enabled=enabled))
    tree.add_node(SettingNode("B", "Bravo", level=2, parent_id="A", enabled=enabled))
    tree.add_node(SettingNode("C", "Charlie", level=3, parent_id="B", enabled=enabled))
    tree.add_node(SettingNode("D", "Delta", level=2, parent_id="A", enabled=enabled))
    return tree


@pytest.fixture
def enabled_tree():
    """Reference tree with every node enabled."""
    return build_chain_tree(enabled=True)


@pytest.fixture
def disabled_tree():
    """Reference tree with every node disabled."""
    return build_chain_tree(enabled=False)


@pytest.fixture
def wide_tree():
    """Two roots with several level 2 and level 3 nodes, all enabled."""
    tree = SettingsTree()
    tree.add_node(SettingNode("work", "Work", level=1))
    tree.add_node(SettingNode("work-priorities", "Priorities", level=2, parent_id="work"))
    tree.add_node(SettingNode("work-schedules", "Schedules", level=2, parent_id="work"))
    tree.add_node(SettingNode("schedules-nightowl", "Night owl", level=3, parent_id="work-schedules"))
    tree.add_node(SettingNode("schedules-mood", "Mood", level=3, parent_id="work-schedules"))
    tree.add_node(SettingNode("defense", "Defense", level=1))
    tree.add_node(SettingNode("defense-armor", "Armor", level=2, parent_id="defense"))
    tree.add_node(SettingNode("armor-smart", "Smart", level=3, parent_id="defense-armor"))
    return tree
