"""
Ability definitions.

Every action a combatant can take is an Ability, including the plain
attack/defend/heal/flee actions and the adversary-only moves the behavior
trees choose from (counter, heavy_attack, enrage_attack, summon_adds,
ultimate_attack). Dinosaur signature abilities follow.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..state.combat import BodyPart, DamageType, StatusEffectType


class ActionKind(Enum):
    ATTACK = "attack"
    DEFEND = "defend"
    HEAL = "heal"
    FLEE = "flee"
    BUFF = "buff"


@dataclass(frozen=True)
class StatusApplication:
    """A status effect an ability may inflict."""
    effect: StatusEffectType
    duration: int = 2
    chance: float = 1.0  # 0-1
    stackable: bool = False
    max_stacks: int = 3
    on_self: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "effect": self.effect.value,
            "duration": self.duration,
            "chance": self.chance,
            "stackable": self.stackable,
            "max_stacks": self.max_stacks,
            "on_self": self.on_self,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StatusApplication":
        return cls(
            effect=StatusEffectType(data["effect"]),
            duration=data.get("duration", 2),
            chance=data.get("chance", 1.0),
            stackable=data.get("stackable", False),
            max_stacks=data.get("max_stacks", 3),
            on_self=data.get("on_self", False),
        )


@dataclass(frozen=True)
class Ability:
    """An action definition."""
    id: str
    name: str
    kind: ActionKind = ActionKind.ATTACK
    damage_multiplier: float = 1.0
    damage_type: DamageType = DamageType.PHYSICAL
    stamina_cost: int = 0
    cooldown: int = 0
    hits: int = 1
    status_effects: Tuple[StatusApplication, ...] = ()
    heal_fraction: float = 0.0
    target_body_part: Optional[BodyPart] = None
    description: str = ""

    @property
    def is_attack(self) -> bool:
        return self.kind == ActionKind.ATTACK

    @property
    def expected_multiplier(self) -> float:
        return self.damage_multiplier * self.hits if self.is_attack else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind.value,
            "damage_multiplier": self.damage_multiplier,
            "damage_type": self.damage_type.value,
            "stamina_cost": self.stamina_cost,
            "cooldown": self.cooldown,
            "hits": self.hits,
            "status_effects": [s.to_dict() for s in self.status_effects],
            "heal_fraction": self.heal_fraction,
            "target_body_part": self.target_body_part.value if self.target_body_part else None,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ability":
        part = data.get("target_body_part")
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            kind=ActionKind(data.get("kind", "attack")),
            damage_multiplier=data.get("damage_multiplier", 1.0),
            damage_type=DamageType(data.get("damage_type", "physical")),
            stamina_cost=data.get("stamina_cost", 0),
            cooldown=data.get("cooldown", 0),
            hits=data.get("hits", 1),
            status_effects=tuple(StatusApplication.from_dict(s) for s in data.get("status_effects", [])),
            heal_fraction=data.get("heal_fraction", 0.0),
            target_body_part=BodyPart(part) if part else None,
            description=data.get("description", ""),
        )


# =============================================================================
# BASIC ACTIONS (both sides)
# =============================================================================

ATTACK = Ability("attack", "Attack", description="A plain strike.")
DEFEND = Ability(
    "defend", "Defend", ActionKind.DEFEND,
    description="Brace: incoming damage is halved until your next turn.",
)
HEAL = Ability(
    "heal", "Recover", ActionKind.HEAL, stamina_cost=15, cooldown=3, heal_fraction=0.2,
    description="Restore 20% of max health.",
)
FLEE = Ability("flee", "Flee", ActionKind.FLEE, description="Try to escape the fight.")
SPECIAL_ATTACK = Ability(
    "special_attack", "Special Attack", damage_multiplier=1.5, stamina_cost=15, cooldown=2,
    description="A committed strike for 150% damage.",
)

# =============================================================================
# ADVERSARY MOVES
# =============================================================================

COUNTER = Ability(
    "counter", "Counter", damage_multiplier=1.2, stamina_cost=10,
    status_effects=(StatusApplication(StatusEffectType.FORTIFIED, duration=2, on_self=True),),
    description="Read the attacker and strike back from a braced stance.",
)
HEAVY_ATTACK = Ability(
    "heavy_attack", "Heavy Attack", damage_multiplier=2.0, damage_type=DamageType.CRUSHING,
    stamina_cost=20,
    description="A slow crushing blow, best against a helpless target.",
)
ENRAGE_ATTACK = Ability(
    "enrage_attack", "Enraged Attack", damage_multiplier=1.3, stamina_cost=10,
    status_effects=(StatusApplication(StatusEffectType.ENRAGED, duration=3, on_self=True),),
    description="Attack and fly into a rage (+25% attack).",
)
SUMMON_ADDS = Ability(
    "summon_adds", "Call the Pack", damage_multiplier=0.4, damage_type=DamageType.PIERCING,
    stamina_cost=15, cooldown=3, hits=3,
    description="Lesser pack members harry the target three times.",
)
ULTIMATE_ATTACK = Ability(
    "ultimate_attack", "Apex Strike", damage_multiplier=2.5, damage_type=DamageType.CRUSHING,
    stamina_cost=25, cooldown=2,
    status_effects=(StatusApplication(StatusEffectType.STUNNED, duration=1, chance=0.3),),
    description="A devastating blow that may stun.",
)

# =============================================================================
# DINOSAUR SIGNATURE ABILITIES
# =============================================================================

SICKLE_CLAW = Ability(
    "sickle_claw", "Sickle Claw", damage_multiplier=1.2, damage_type=DamageType.SLASHING,
    stamina_cost=10,
    status_effects=(StatusApplication(StatusEffectType.BLEEDING, duration=3, chance=0.6, stackable=True),),
    description="Raking claw that opens bleeding wounds.",
)
POUNCE = Ability(
    "pounce", "Pounce", damage_multiplier=0.7, damage_type=DamageType.PIERCING,
    stamina_cost=15, cooldown=2, hits=2,
    description="Leap and strike twice.",
)
TAIL_CLUB = Ability(
    "tail_club", "Tail Club", damage_multiplier=1.6, damage_type=DamageType.CRUSHING,
    stamina_cost=20, cooldown=2, target_body_part=BodyPart.LEGS,
    status_effects=(StatusApplication(StatusEffectType.STUNNED, duration=1, chance=0.35),),
    description="Swing the tail club at the legs; may stun.",
)
ARMOR_UP = Ability(
    "armor_up", "Armor Up", ActionKind.BUFF, stamina_cost=10, cooldown=3,
    status_effects=(StatusApplication(StatusEffectType.FORTIFIED, duration=3, on_self=True),),
    description="Hunker behind osteoderms (+50% defense).",
)
DIVE_BOMB = Ability(
    "dive_bomb", "Dive Bomb", damage_multiplier=1.4, damage_type=DamageType.PIERCING,
    stamina_cost=15, target_body_part=BodyPart.HEAD,
    description="Stoop from above, beak first.",
)
SCREECH = Ability(
    "screech", "Screech", damage_multiplier=0.5, damage_type=DamageType.SONIC,
    stamina_cost=10, cooldown=3,
    status_effects=(StatusApplication(StatusEffectType.CONFUSED, duration=2, chance=0.7),),
    description="A piercing cry that disorients.",
)
BONE_CRUSH = Ability(
    "bone_crush", "Bone Crush", damage_multiplier=1.8, damage_type=DamageType.CRUSHING,
    stamina_cost=20, cooldown=1, target_body_part=BodyPart.NECK,
    description="The bite that breaks bones.",
)
ROAR = Ability(
    "roar", "Roar", ActionKind.BUFF, stamina_cost=10, cooldown=4,
    status_effects=(
        StatusApplication(StatusEffectType.ENRAGED, duration=3, on_self=True),
        StatusApplication(StatusEffectType.EXHAUSTED, duration=2, chance=0.5),
    ),
    description="Work up a fury; the target may falter.",
)
HEAD_BUTT = Ability(
    "head_butt", "Head Butt", damage_multiplier=1.3, damage_type=DamageType.CRUSHING,
    stamina_cost=15, target_body_part=BodyPart.HEAD,
    status_effects=(StatusApplication(StatusEffectType.STUNNED, duration=1, chance=0.4),),
    description="Dome-first charge; may stun.",
)
SWARM = Ability(
    "swarm", "Swarm", damage_multiplier=0.35, damage_type=DamageType.PIERCING,
    stamina_cost=10, hits=4,
    description="Many small bites.",
)
VENOM_BITE = Ability(
    "venom_bite", "Venom Bite", damage_multiplier=0.6, damage_type=DamageType.POISON,
    stamina_cost=10,
    status_effects=(StatusApplication(StatusEffectType.POISONED, duration=3, stackable=True),),
    description="Septic saliva poisons the wound.",
)
HIDE = Ability(
    "hide", "Hide", ActionKind.BUFF, stamina_cost=5, cooldown=3,
    status_effects=(StatusApplication(StatusEffectType.HIDDEN, duration=2, on_self=True),),
    description="Slip out of sight (+25 evasion).",
)


BASIC_ACTIONS = ("attack", "defend", "flee")

ABILITIES: Dict[str, Ability] = {
    a.id: a for a in (
        ATTACK, DEFEND, HEAL, FLEE, SPECIAL_ATTACK,
        COUNTER, HEAVY_ATTACK, ENRAGE_ATTACK, SUMMON_ADDS, ULTIMATE_ATTACK,
        SICKLE_CLAW, POUNCE, TAIL_CLUB, ARMOR_UP, DIVE_BOMB, SCREECH,
        BONE_CRUSH, ROAR, HEAD_BUTT, SWARM, VENOM_BITE, HIDE,
    )
}
