"""
Playable dinosaur definitions.

Base stats here are pre-trait; create_player_combatant() folds in passives
and run state.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple

from ..state.combat import DamageType


class DinosaurRole(Enum):
    HUNTER = "hunter"
    TANK = "tank"
    SCOUT = "scout"
    POWERHOUSE = "powerhouse"
    SPECIALIST = "specialist"
    SWARM = "swarm"


@dataclass(frozen=True)
class DinosaurData:
    id: str
    name: str
    species: str
    role: DinosaurRole
    health: int
    attack: int
    defense: int
    speed: int
    stamina: int = 50
    abilities: Tuple[str, ...] = ()
    passives: Tuple[str, ...] = ()
    derived: Dict[str, float] = field(default_factory=dict)
    resistances: Dict[DamageType, float] = field(default_factory=dict)
    vulnerabilities: Dict[DamageType, float] = field(default_factory=dict)
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "species": self.species,
            "role": self.role.value,
            "health": self.health,
            "attack": self.attack,
            "defense": self.defense,
            "speed": self.speed,
            "stamina": self.stamina,
            "abilities": list(self.abilities),
            "passives": list(self.passives),
            "derived": dict(self.derived),
            "resistances": {k.value: v for k, v in self.resistances.items()},
            "vulnerabilities": {k.value: v for k, v in self.vulnerabilities.items()},
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DinosaurData":
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            species=data.get("species", ""),
            role=DinosaurRole(data.get("role", "hunter")),
            health=data["health"],
            attack=data["attack"],
            defense=data["defense"],
            speed=data["speed"],
            stamina=data.get("stamina", 50),
            abilities=tuple(data.get("abilities", [])),
            passives=tuple(data.get("passives", [])),
            derived=dict(data.get("derived", {})),
            resistances={DamageType(k): v for k, v in data.get("resistances", {}).items()},
            vulnerabilities={DamageType(k): v for k, v in data.get("vulnerabilities", {}).items()},
            description=data.get("description", ""),
        )


DEINONYCHUS = DinosaurData(
    "deinonychus", "Deinonychus", "Deinonychus antirrhopus", DinosaurRole.HUNTER,
    health=90, attack=16, defense=6, speed=14,
    abilities=("sickle_claw", "pounce", "special_attack"),
    passives=("pack_hunter",),
    derived={"critical_chance": 10},
    description="Agile pack hunter with a killing claw.",
)
ANKYLOSAURUS = DinosaurData(
    "ankylosaurus", "Ankylosaurus", "Ankylosaurus magniventris", DinosaurRole.TANK,
    health=140, attack=12, defense=16, speed=6,
    abilities=("tail_club", "armor_up", "heal"),
    passives=("bony_plates",),
    resistances={DamageType.SLASHING: 0.3, DamageType.PIERCING: 0.2},
    vulnerabilities={DamageType.ACID: 0.25},
    description="Armored tank with a bone-shattering club.",
)
PTERANODON = DinosaurData(
    "pteranodon", "Pteranodon", "Pteranodon longiceps", DinosaurRole.SCOUT,
    health=75, attack=13, defense=5, speed=17,
    abilities=("dive_bomb", "screech", "special_attack"),
    passives=("fleet_footed",),
    derived={"evasion": 10},
    vulnerabilities={DamageType.SONIC: 0.2},
    description="Soaring scout that strikes from above.",
)
TYRANNOSAURUS = DinosaurData(
    "tyrannosaurus", "Tyrannosaurus", "Tyrannosaurus rex", DinosaurRole.POWERHOUSE,
    health=130, attack=22, defense=10, speed=8,
    abilities=("bone_crush", "roar", "special_attack"),
    passives=("bone_crusher",),
    stamina=60,
    description="Apex predator with the strongest bite.",
)
PACHYCEPHALOSAURUS = DinosaurData(
    "pachycephalosaurus", "Pachycephalosaurus", "Pachycephalosaurus wyomingensis",
    DinosaurRole.SPECIALIST,
    health=100, attack=14, defense=11, speed=11,
    abilities=("head_butt", "heal", "special_attack"),
    passives=("thick_hide",),
    resistances={DamageType.CRUSHING: 0.25},
    description="Dome-headed brawler that stuns with a charge.",
)
COMPSOGNATHUS = DinosaurData(
    "compsognathus", "Compsognathus", "Compsognathus longipes", DinosaurRole.SWARM,
    health=60, attack=10, defense=4, speed=18,
    abilities=("swarm", "venom_bite", "hide"),
    passives=("septic_bite",),
    derived={"evasion": 15},
    description="Tiny, quick and never alone.",
)

DINOSAURS: Dict[str, DinosaurData] = {
    d.id: d for d in (
        DEINONYCHUS, ANKYLOSAURUS, PTERANODON, TYRANNOSAURUS,
        PACHYCEPHALOSAURUS, COMPSOGNATHUS,
    )
}
