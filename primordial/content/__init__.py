"""
Game content: abilities, traits, dinosaurs, enemies and adversary AI.
"""

from .abilities import Ability, ActionKind, StatusApplication, ABILITIES, BASIC_ACTIONS
from .traits import Trait, TraitEffect, TraitType, TraitRarity, TRAITS
from .dinosaurs import DinosaurData, DinosaurRole, DINOSAURS
from .enemies import EnemyData, ENEMIES, enemies_by_tier
from .enemies_ai import (
    AIBehaviorNode,
    AIContext,
    AIDecision,
    AIHistoryEntry,
    NodeKind,
    BASIC_AI,
    ELITE_AI,
    BOSS_AI,
    create_enemy_ai,
    execute_ai,
)
from .tables import ContentTables, load_default_tables, load_tables_from_json

__all__ = [
    "Ability",
    "ActionKind",
    "StatusApplication",
    "ABILITIES",
    "BASIC_ACTIONS",
    "Trait",
    "TraitEffect",
    "TraitType",
    "TraitRarity",
    "TRAITS",
    "DinosaurData",
    "DinosaurRole",
    "DINOSAURS",
    "EnemyData",
    "ENEMIES",
    "enemies_by_tier",
    "AIBehaviorNode",
    "AIContext",
    "AIDecision",
    "AIHistoryEntry",
    "NodeKind",
    "BASIC_AI",
    "ELITE_AI",
    "BOSS_AI",
    "create_enemy_ai",
    "execute_ai",
    "ContentTables",
    "load_default_tables",
    "load_tables_from_json",
]
