"""
Trait definitions.

Trigger types:
- PASSIVE_STAT: folded into base stats when the combatant is created
- COMBAT_START: fires once when the encounter begins
- ON_HIT: fires each time the owner lands an attack
- TURN_START: fires at the start of each of the owner's turns
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..state.combat import StatusEffectType


class TraitType(Enum):
    PASSIVE_STAT = "passive_stat"
    COMBAT_START = "combat_start"
    ON_HIT = "on_hit"
    TURN_START = "turn_start"


class TraitRarity(Enum):
    COMMON = "common"
    RARE = "rare"
    LEGENDARY = "legendary"


# Stats a TraitEffect may touch. Derived stats are addressed by field name.
BASE_STATS = ("health", "max_health", "attack", "defense", "speed", "stamina", "max_stamina")
DERIVED_STATS = (
    "critical_chance", "critical_damage", "evasion", "accuracy", "armor_penetration",
    "damage_reduction", "block_chance", "counter_chance", "life_steal", "thorns",
    "health_regen", "stamina_regen",
)


@dataclass(frozen=True)
class TraitEffect:
    """
    One effect of a trait.

    Stat effects add `value` then apply `multiplier`. Status effects roll
    `chance` (0-1) and land on the owner or, with on_self False, the opponent.
    """
    stat: Optional[str] = None
    value: float = 0
    multiplier: float = 1.0
    status_effect: Optional[StatusEffectType] = None
    chance: float = 1.0
    duration: int = 2
    on_self: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stat": self.stat,
            "value": self.value,
            "multiplier": self.multiplier,
            "status_effect": self.status_effect.value if self.status_effect else None,
            "chance": self.chance,
            "duration": self.duration,
            "on_self": self.on_self,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TraitEffect":
        status = data.get("status_effect")
        return cls(
            stat=data.get("stat"),
            value=data.get("value", 0),
            multiplier=data.get("multiplier", 1.0),
            status_effect=StatusEffectType(status) if status else None,
            chance=data.get("chance", 1.0),
            duration=data.get("duration", 2),
            on_self=data.get("on_self", True),
        )


@dataclass(frozen=True)
class Trait:
    id: str
    name: str
    trait_type: TraitType
    effects: Tuple[TraitEffect, ...] = ()
    rarity: TraitRarity = TraitRarity.COMMON
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "trait_type": self.trait_type.value,
            "effects": [e.to_dict() for e in self.effects],
            "rarity": self.rarity.value,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Trait":
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            trait_type=TraitType(data["trait_type"]),
            effects=tuple(TraitEffect.from_dict(e) for e in data.get("effects", [])),
            rarity=TraitRarity(data.get("rarity", "common")),
            description=data.get("description", ""),
        )


# =============================================================================
# TRAITS
# =============================================================================

THICK_HIDE = Trait(
    "thick_hide", "Thick Hide", TraitType.PASSIVE_STAT,
    effects=(TraitEffect(stat="defense", value=3),),
    description="+3 defense.",
)
KEEN_EYES = Trait(
    "keen_eyes", "Keen Eyes", TraitType.PASSIVE_STAT,
    effects=(TraitEffect(stat="accuracy", value=10), TraitEffect(stat="critical_chance", value=5)),
    description="+10 accuracy, +5% critical chance.",
)
PACK_HUNTER = Trait(
    "pack_hunter", "Pack Hunter", TraitType.PASSIVE_STAT,
    effects=(TraitEffect(stat="attack", multiplier=1.1),),
    description="+10% attack.",
)
FLEET_FOOTED = Trait(
    "fleet_footed", "Fleet Footed", TraitType.PASSIVE_STAT,
    effects=(TraitEffect(stat="speed", value=3), TraitEffect(stat="evasion", value=5)),
    description="+3 speed, +5 evasion.",
)
BONY_PLATES = Trait(
    "bony_plates", "Bony Plates", TraitType.PASSIVE_STAT,
    effects=(TraitEffect(stat="block_chance", value=15), TraitEffect(stat="thorns", value=2)),
    rarity=TraitRarity.RARE,
    description="15% block chance; attackers take 2 damage.",
)
BONE_CRUSHER = Trait(
    "bone_crusher", "Bone Crusher", TraitType.PASSIVE_STAT,
    effects=(TraitEffect(stat="armor_penetration", value=30),),
    rarity=TraitRarity.RARE,
    description="Ignore 30% of the target's defense.",
)
BLOODTHIRST = Trait(
    "bloodthirst", "Bloodthirst", TraitType.PASSIVE_STAT,
    effects=(TraitEffect(stat="life_steal", value=15),),
    rarity=TraitRarity.RARE,
    description="Heal for 15% of damage dealt.",
)
AMBUSH = Trait(
    "ambush", "Ambush", TraitType.COMBAT_START,
    effects=(TraitEffect(status_effect=StatusEffectType.HIDDEN, duration=2),),
    description="Start each fight hidden.",
)
INTIMIDATE = Trait(
    "intimidate", "Intimidate", TraitType.COMBAT_START,
    effects=(TraitEffect(status_effect=StatusEffectType.EXHAUSTED, duration=2, chance=0.5, on_self=False),),
    description="50% chance the opponent starts exhausted.",
)
SERRATED_TEETH = Trait(
    "serrated_teeth", "Serrated Teeth", TraitType.ON_HIT,
    effects=(TraitEffect(status_effect=StatusEffectType.BLEEDING, duration=2, chance=0.25, on_self=False),),
    description="25% chance on hit to cause bleeding.",
)
SEPTIC_BITE = Trait(
    "septic_bite", "Septic Bite", TraitType.ON_HIT,
    effects=(TraitEffect(status_effect=StatusEffectType.POISONED, duration=3, chance=0.3, on_self=False),),
    description="30% chance on hit to poison.",
)
FAST_METABOLISM = Trait(
    "fast_metabolism", "Fast Metabolism", TraitType.TURN_START,
    effects=(TraitEffect(stat="health", value=2), TraitEffect(stat="stamina", value=5)),
    description="Recover 2 health and 5 stamina each turn.",
)
APEX_PRESENCE = Trait(
    "apex_presence", "Apex Presence", TraitType.COMBAT_START,
    effects=(TraitEffect(status_effect=StatusEffectType.FORTIFIED, duration=3),),
    rarity=TraitRarity.LEGENDARY,
    description="Start each fight fortified.",
)

TRAITS: Dict[str, Trait] = {
    t.id: t for t in (
        THICK_HIDE, KEEN_EYES, PACK_HUNTER, FLEET_FOOTED, BONY_PLATES, BONE_CRUSHER,
        BLOODTHIRST, AMBUSH, INTIMIDATE, SERRATED_TEETH, SEPTIC_BITE,
        FAST_METABOLISM, APEX_PRESENCE,
    )
}
