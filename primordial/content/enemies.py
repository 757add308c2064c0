"""
Adversary definitions.

Each enemy belongs to one AdversaryTier, which selects its behavior tree.
Every enemy can use the basic actions; `abilities` lists the extra moves
its tree may pick. Moves the tree picks that are not listed fall back to a
plain attack.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from ..state.combat import AdversaryTier, BodyPart, DamageType


@dataclass(frozen=True)
class EnemyData:
    id: str
    name: str
    tier: AdversaryTier
    health: int
    attack: int
    defense: int
    speed: int
    stamina: int = 50
    abilities: Tuple[str, ...] = ()
    traits: Tuple[str, ...] = ()
    derived: Dict[str, float] = field(default_factory=dict)
    resistances: Dict[DamageType, float] = field(default_factory=dict)
    vulnerabilities: Dict[DamageType, float] = field(default_factory=dict)
    body_part_weaknesses: Dict[BodyPart, float] = field(default_factory=dict)
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "tier": self.tier.value,
            "health": self.health,
            "attack": self.attack,
            "defense": self.defense,
            "speed": self.speed,
            "stamina": self.stamina,
            "abilities": list(self.abilities),
            "traits": list(self.traits),
            "derived": dict(self.derived),
            "resistances": {k.value: v for k, v in self.resistances.items()},
            "vulnerabilities": {k.value: v for k, v in self.vulnerabilities.items()},
            "body_part_weaknesses": {k.value: v for k, v in self.body_part_weaknesses.items()},
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EnemyData":
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            tier=AdversaryTier.parse(data.get("tier", "basic")),
            health=data["health"],
            attack=data["attack"],
            defense=data["defense"],
            speed=data["speed"],
            stamina=data.get("stamina", 50),
            abilities=tuple(data.get("abilities", [])),
            traits=tuple(data.get("traits", [])),
            derived=dict(data.get("derived", {})),
            resistances={DamageType(k): v for k, v in data.get("resistances", {}).items()},
            vulnerabilities={DamageType(k): v for k, v in data.get("vulnerabilities", {}).items()},
            body_part_weaknesses={BodyPart(k): v for k, v in data.get("body_part_weaknesses", {}).items()},
            description=data.get("description", ""),
        )


# ============ BASIC ============

MICRORAPTOR = EnemyData(
    "microraptor", "Microraptor", AdversaryTier.BASIC,
    health=40, attack=9, defense=3, speed=15,
    abilities=("heal", "special_attack"),
    derived={"evasion": 10},
    body_part_weaknesses={BodyPart.WINGS: 0.5},
)
DILOPHOSAURUS = EnemyData(
    "dilophosaurus", "Dilophosaurus", AdversaryTier.BASIC,
    health=55, attack=11, defense=5, speed=12,
    abilities=("heal", "special_attack"),
    traits=("septic_bite",),
    resistances={DamageType.POISON: 0.5},
)
PROTOCERATOPS = EnemyData(
    "protoceratops", "Protoceratops", AdversaryTier.BASIC,
    health=65, attack=10, defense=9, speed=7,
    abilities=("heal", "special_attack"),
    resistances={DamageType.CRUSHING: 0.2},
    body_part_weaknesses={BodyPart.UNDERBELLY: 0.25},
)
SARCOSUCHUS = EnemyData(
    "sarcosuchus", "Sarcosuchus", AdversaryTier.BASIC,
    health=70, attack=12, defense=10, speed=6,
    abilities=("heal", "special_attack"),
    vulnerabilities={DamageType.FIRE: 0.25},
)

# ============ ELITE ============

UTAHRAPTOR = EnemyData(
    "utahraptor", "Utahraptor", AdversaryTier.ELITE,
    health=95, attack=15, defense=8, speed=14,
    abilities=("heal", "special_attack", "counter", "heavy_attack"),
    traits=("serrated_teeth",),
    derived={"critical_chance": 12},
)
CARNOTAURUS = EnemyData(
    "carnotaurus", "Carnotaurus", AdversaryTier.ELITE,
    health=110, attack=17, defense=9, speed=13,
    abilities=("heal", "special_attack", "counter", "heavy_attack"),
    traits=("intimidate",),
    body_part_weaknesses={BodyPart.NECK: 0.3},
)
TRICERATOPS = EnemyData(
    "triceratops", "Triceratops", AdversaryTier.ELITE,
    health=130, attack=14, defense=14, speed=8,
    abilities=("heal", "special_attack", "counter", "heavy_attack"),
    traits=("thick_hide",),
    derived={"block_chance": 10},
    body_part_weaknesses={BodyPart.LEGS: 0.25},
)

# ============ BOSS ============

SPINOSAURUS = EnemyData(
    "spinosaurus", "Spinosaurus", AdversaryTier.BOSS,
    health=200, attack=19, defense=12, speed=10,
    stamina=80,
    abilities=(
        "heal", "special_attack", "counter", "heavy_attack",
        "enrage_attack", "summon_adds", "ultimate_attack",
    ),
    traits=("apex_presence",),
    resistances={DamageType.FIRE: 0.2},
    vulnerabilities={DamageType.SONIC: 0.2},
    body_part_weaknesses={BodyPart.UNDERBELLY: 0.25},
)
GIGANOTOSAURUS = EnemyData(
    "giganotosaurus", "Giganotosaurus", AdversaryTier.BOSS,
    health=230, attack=21, defense=11, speed=9,
    stamina=80,
    abilities=(
        "heal", "special_attack", "counter", "heavy_attack",
        "enrage_attack", "summon_adds", "ultimate_attack",
    ),
    traits=("intimidate", "serrated_teeth"),
    derived={"critical_chance": 10, "armor_penetration": 15},
    body_part_weaknesses={BodyPart.HEAD: 0.2},
)

ENEMIES: Dict[str, EnemyData] = {
    e.id: e for e in (
        MICRORAPTOR, DILOPHOSAURUS, PROTOCERATOPS, SARCOSUCHUS,
        UTAHRAPTOR, CARNOTAURUS, TRICERATOPS,
        SPINOSAURUS, GIGANOTOSAURUS,
    )
}


def enemies_by_tier(enemies: Dict[str, EnemyData], tier: AdversaryTier) -> List[EnemyData]:
    """Enemies of one tier, in table order."""
    return [e for e in enemies.values() if e.tier == tier]
