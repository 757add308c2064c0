"""
Combat State - Data model shared by the resolver, the AI and the turn loop.

Designed for:
1. Cheap copying (one session owns its combatants, copies go to simulations)
2. Plain-data serialization (enums carry lowercase string values)
3. Read-only environment for the duration of an encounter
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Set

from ..errors import InvalidArgumentError


# =============================================================================
# Enumerations
# =============================================================================


class DamageType(Enum):
    """Damage channels; resistances and vulnerabilities are keyed by these."""
    PHYSICAL = "physical"
    SLASHING = "slashing"
    PIERCING = "piercing"
    CRUSHING = "crushing"
    FIRE = "fire"
    POISON = "poison"
    SONIC = "sonic"
    ACID = "acid"


class StatusEffectType(Enum):
    BLEEDING = "bleeding"
    STUNNED = "stunned"
    POISONED = "poisoned"
    EXHAUSTED = "exhausted"
    FORTIFIED = "fortified"
    ENRAGED = "enraged"
    HIDDEN = "hidden"
    BLINDED = "blinded"
    CONFUSED = "confused"
    FROZEN = "frozen"
    BURNING = "burning"
    REGENERATING = "regenerating"


class BodyPart(Enum):
    HEAD = "head"
    NECK = "neck"
    BODY = "body"
    LEGS = "legs"
    TAIL = "tail"
    WINGS = "wings"
    UNDERBELLY = "underbelly"


class WeatherType(Enum):
    CLEAR = "clear"
    RAIN = "rain"
    STORM = "storm"
    FOG = "fog"
    VOLCANIC_ASH = "volcanic_ash"
    HEAT_WAVE = "heat_wave"
    COLD_SNAP = "cold_snap"
    METEOR_SHOWER = "meteor_shower"


class TerrainType(Enum):
    OPEN_GROUND = "open_ground"
    DENSE_VEGETATION = "dense_vegetation"
    SHALLOW_WATER = "shallow_water"
    DEEP_WATER = "deep_water"
    MUD = "mud"
    TAR_PIT = "tar_pit"
    ROCKY = "rocky"
    VOLCANIC = "volcanic"
    NESTING_GROUND = "nesting_ground"
    CLIFF = "cliff"


class TimeOfDay(Enum):
    DAWN = "dawn"
    DAY = "day"
    DUSK = "dusk"
    NIGHT = "night"


class AdversaryTier(Enum):
    """AI sophistication class. Each tier embeds the previous as fallback."""
    BASIC = "basic"
    ELITE = "elite"
    BOSS = "boss"

    @classmethod
    def parse(cls, value) -> AdversaryTier:
        """Accept an AdversaryTier or its string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidArgumentError(f"Unknown adversary tier: {value!r}") from None


# =============================================================================
# Combatant State
# =============================================================================


@dataclass
class DerivedCombatStats:
    """
    Secondary stats derived from base stats, traits and gear.

    Percent values are on a 0-100 scale (critical_damage 200 = double damage).
    """
    critical_chance: float = 5.0
    critical_damage: float = 200.0
    evasion: float = 0.0
    accuracy: float = 90.0
    armor_penetration: float = 0.0
    damage_reduction: float = 0.0
    block_chance: float = 0.0
    counter_chance: float = 0.0
    life_steal: float = 0.0
    thorns: float = 0.0
    health_regen: float = 0.0
    stamina_regen: float = 0.0


@dataclass
class CombatantStats:
    """Everything the resolver needs to know about one side of a fight."""

    name: str
    attack: int
    defense: int
    speed: int
    health: int
    max_health: int
    stamina: int = 50
    max_stamina: int = 50
    derived: DerivedCombatStats = field(default_factory=DerivedCombatStats)
    resistances: Dict[DamageType, float] = field(default_factory=dict)
    vulnerabilities: Dict[DamageType, float] = field(default_factory=dict)
    active_status_effects: Set[StatusEffectType] = field(default_factory=set)
    traits: List[str] = field(default_factory=list)
    body_part_weaknesses: Dict[BodyPart, float] = field(default_factory=dict)
    abilities: List[str] = field(default_factory=list)

    @property
    def is_dead(self) -> bool:
        return self.health <= 0

    @property
    def health_fraction(self) -> float:
        if self.max_health <= 0:
            return 0.0
        return self.health / self.max_health

    def has_status(self, effect: StatusEffectType) -> bool:
        return effect in self.active_status_effects

    def take_damage(self, amount: int) -> int:
        """Lose health (floored at 0). Returns the health actually lost."""
        lost = min(self.health, max(0, amount))
        self.health -= lost
        return lost

    def heal(self, amount: int) -> int:
        """Gain health (capped at max). Returns the health actually gained."""
        gained = min(self.max_health - self.health, max(0, amount))
        self.health += gained
        return gained

    def copy(self) -> CombatantStats:
        """Independent copy with copied containers."""
        return replace(
            self,
            derived=replace(self.derived),
            resistances=dict(self.resistances),
            vulnerabilities=dict(self.vulnerabilities),
            active_status_effects=set(self.active_status_effects),
            traits=list(self.traits),
            body_part_weaknesses=dict(self.body_part_weaknesses),
            abilities=list(self.abilities),
        )


@dataclass(frozen=True)
class CombatEnvironment:
    """Weather, terrain and light for one encounter. Read-only."""

    weather: WeatherType = WeatherType.CLEAR
    terrain: TerrainType = TerrainType.OPEN_GROUND
    time_of_day: TimeOfDay = TimeOfDay.DAY
    visibility: int = 100

    def __post_init__(self):
        if not 0 <= self.visibility <= 100:
            raise InvalidArgumentError(f"visibility must be in [0, 100], got {self.visibility}")


@dataclass
class StatusEffectInstance:
    """One active status effect. Removed from its mapping when duration hits 0."""

    effect_type: StatusEffectType
    stacks: int = 1
    duration: int = 1


StatusEffects = Dict[StatusEffectType, StatusEffectInstance]


# =============================================================================
# Resolution Results
# =============================================================================


@dataclass(frozen=True)
class HitModifier:
    """A named contribution to effective accuracy."""

    source: str
    value: float
    kind: str = "flat"


@dataclass
class HitDetectionResult:
    """
    Outcome of one accuracy check.

    hit is True only if the attack connected and was not blocked; critical
    only if hit. evaded is a flavor flag on misses.
    """

    hit: bool
    critical: bool
    evaded: bool
    blocked: bool
    body_part_hit: Optional[BodyPart]
    accuracy_roll: float
    effective_accuracy: float
    modifiers: List[HitModifier] = field(default_factory=list)


@dataclass
class DamageBreakdown:
    """Every step of a damage calculation, for UI/debug display."""

    base: float
    attack_stat: float
    ability_multiplier: float
    body_part: float
    critical: float
    defense: float
    resistance: float
    environmental: float
    final: int


@dataclass
class DamageCalculationResult:
    base_damage: float
    final_damage: int
    damage_type: DamageType
    critical_multiplier: float
    resistance_reduction: float
    defense_reduction: float
    environmental_modifier: float
    body_part_multiplier: float
    overkill: int
    breakdown: DamageBreakdown
