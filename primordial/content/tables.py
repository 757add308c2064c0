"""
Content Tables - The four id-keyed registries bundled and validated together.

Referential integrity is checked at load time: every ability and passive a
dinosaur lists, every ability and trait an enemy lists, every basic action
and every action the behavior trees can choose must exist. The first
dangling reference raises LookupFailure.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, Union

from ..errors import InvalidArgumentError, LookupFailure
from .abilities import ABILITIES, BASIC_ACTIONS, Ability
from .dinosaurs import DINOSAURS, DinosaurData
from .enemies import ENEMIES, EnemyData
from .enemies_ai import BOSS_AI, AIBehaviorNode, NodeKind
from .traits import BASE_STATS, DERIVED_STATS, TRAITS, Trait

logger = logging.getLogger(__name__)

__all__ = [
    "ContentTables",
    "load_default_tables",
    "load_tables_from_json",
    "tree_actions",
]


def tree_actions(root: AIBehaviorNode) -> Iterator[str]:
    """Every action id reachable in a behavior tree."""
    if root.kind == NodeKind.ACTION and root.action:
        yield root.action
    for child in root.children:
        yield from tree_actions(child)


@dataclass
class ContentTables:
    dinosaurs: Dict[str, DinosaurData] = field(default_factory=dict)
    enemies: Dict[str, EnemyData] = field(default_factory=dict)
    abilities: Dict[str, Ability] = field(default_factory=dict)
    traits: Dict[str, Trait] = field(default_factory=dict)

    # ============ ACCESSORS ============

    def get_dinosaur(self, dinosaur_id: str) -> DinosaurData:
        if dinosaur_id not in self.dinosaurs:
            raise LookupFailure("dinosaur", dinosaur_id)
        return self.dinosaurs[dinosaur_id]

    def get_enemy(self, enemy_id: str) -> EnemyData:
        if enemy_id not in self.enemies:
            raise LookupFailure("enemy", enemy_id)
        return self.enemies[enemy_id]

    def get_ability(self, ability_id: str) -> Ability:
        if ability_id not in self.abilities:
            raise LookupFailure("ability", ability_id)
        return self.abilities[ability_id]

    def get_trait(self, trait_id: str) -> Trait:
        if trait_id not in self.traits:
            raise LookupFailure("trait", trait_id)
        return self.traits[trait_id]

    # ============ VALIDATION ============

    def _require(self, table: dict, kind: str, key: str, context: str) -> None:
        if key not in table:
            raise LookupFailure(kind, key, context)

    def validate(self) -> "ContentTables":
        """Check every cross-reference. Returns self for chaining."""
        for action_id in BASIC_ACTIONS:
            self._require(self.abilities, "ability", action_id, "basic actions")
        # BOSS_AI embeds the elite and basic trees
        for action_id in sorted(set(tree_actions(BOSS_AI))):
            self._require(self.abilities, "ability", action_id, "adversary behavior tree")

        for dino in self.dinosaurs.values():
            for ability_id in dino.abilities:
                self._require(self.abilities, "ability", ability_id, f"dinosaur {dino.id}")
            for trait_id in dino.passives:
                self._require(self.traits, "trait", trait_id, f"dinosaur {dino.id}")

        for enemy in self.enemies.values():
            for ability_id in enemy.abilities:
                self._require(self.abilities, "ability", ability_id, f"enemy {enemy.id}")
            for trait_id in enemy.traits:
                self._require(self.traits, "trait", trait_id, f"enemy {enemy.id}")

        for trait in self.traits.values():
            for effect in trait.effects:
                if effect.stat is not None and effect.stat not in BASE_STATS + DERIVED_STATS:
                    raise InvalidArgumentError(f"Trait {trait.id} modifies unknown stat {effect.stat!r}")

        return self

    # ============ SERIALIZATION ============

    def to_dict(self) -> dict:
        return {
            "dinosaurs": [d.to_dict() for d in self.dinosaurs.values()],
            "enemies": [e.to_dict() for e in self.enemies.values()],
            "abilities": [a.to_dict() for a in self.abilities.values()],
            "traits": [t.to_dict() for t in self.traits.values()],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ContentTables":
        return cls(
            dinosaurs={d["id"]: DinosaurData.from_dict(d) for d in data.get("dinosaurs", [])},
            enemies={e["id"]: EnemyData.from_dict(e) for e in data.get("enemies", [])},
            abilities={a["id"]: Ability.from_dict(a) for a in data.get("abilities", [])},
            traits={t["id"]: Trait.from_dict(t) for t in data.get("traits", [])},
        )


def load_default_tables() -> ContentTables:
    """Built-in content, validated."""
    return ContentTables(
        dinosaurs=dict(DINOSAURS),
        enemies=dict(ENEMIES),
        abilities=dict(ABILITIES),
        traits=dict(TRAITS),
    ).validate()


def load_tables_from_json(path: Union[str, Path]) -> ContentTables:
    """
    Load tables from a JSON file shaped like ContentTables.to_dict().

    Raises LookupFailure on dangling references.
    """
    path = Path(path)
    with path.open() as f:
        data = json.load(f)
    tables = ContentTables.from_dict(data).validate()
    logger.info(
        "Loaded content from %s: %d dinosaurs, %d enemies, %d abilities, %d traits",
        path, len(tables.dinosaurs), len(tables.enemies), len(tables.abilities), len(tables.traits),
    )
    return tables
