"""
Generation module - Procedural content generation.

Contains:
- Map generation (column-based node graph with connectivity repair)
- Difficulty scaling (depth and performance)
- Encounter spawning (combatants and environment for a node)
"""

from .map import (
    MapGenerator,
    MapConfig,
    MapNode,
    MapColumns,
    NodeType,
    BiomeType,
    get_valid_connection_targets,
    validate_map_connectivity,
    ensure_map_connectivity,
    find_all_paths,
    get_available_nodes,
    visit_node,
    map_to_string,
    map_to_dict,
    map_from_dict,
)
from .difficulty import DifficultyScaler, DifficultyConfig, ScalingFactors
from .encounters import (
    tier_for_node,
    create_player_combatant,
    create_adversary_combatant,
    pick_enemy_for_node,
    roll_environment,
    apply_passive_traits,
)

__all__ = [
    "MapGenerator",
    "MapConfig",
    "MapNode",
    "MapColumns",
    "NodeType",
    "BiomeType",
    "get_valid_connection_targets",
    "validate_map_connectivity",
    "ensure_map_connectivity",
    "find_all_paths",
    "get_available_nodes",
    "visit_node",
    "map_to_string",
    "map_to_dict",
    "map_from_dict",
    "DifficultyScaler",
    "DifficultyConfig",
    "ScalingFactors",
    "tier_for_node",
    "create_player_combatant",
    "create_adversary_combatant",
    "pick_enemy_for_node",
    "roll_environment",
    "apply_passive_traits",
]
