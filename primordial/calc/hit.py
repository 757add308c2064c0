"""
Hit Detection - Accuracy, evasion, block and critical rolls.

Calculation order:
1. Base accuracy (90)
2. Flat modifiers, each recorded with its source:
   attacker accuracy (vs 90 baseline), weather, terrain, time of day,
   targeted body part, attacker's accuracy-degrading statuses
3. Subtract defender evasion
4. Clamp to [5, 100]
5. Roll [0, 100): hit if roll <= effective accuracy
6. Miss: evasion roll sets the evaded flavor flag
7. Hit: block roll; a blocked hit is reported as not hit
8. Hit and not blocked: critical roll

All rolls come from the SeededRandom passed in.
"""

from typing import Dict, List, Optional

from ..state.rng import SeededRandom
from ..state.combat import (
    BodyPart, CombatantStats, CombatEnvironment, HitDetectionResult, HitModifier,
    StatusEffectType, TerrainType, TimeOfDay, WeatherType,
)

__all__ = [
    "calculate_hit_detection",
    "calculate_flee_chance",
    "BASE_ACCURACY",
    "MIN_ACCURACY",
    "MAX_ACCURACY",
    "DEFAULT_CRIT_CHANCE",
    "WEATHER_ACCURACY",
    "TERRAIN_ACCURACY",
    "TIME_OF_DAY_ACCURACY",
    "BODY_PART_ACCURACY",
    "STATUS_ACCURACY",
]


# =============================================================================
# CONSTANTS
# =============================================================================

BASE_ACCURACY = 90
MIN_ACCURACY = 5
MAX_ACCURACY = 100
DEFAULT_CRIT_CHANCE = 5

WEATHER_ACCURACY: Dict[WeatherType, int] = {
    WeatherType.CLEAR: 0,
    WeatherType.RAIN: -10,
    WeatherType.STORM: -20,
    WeatherType.FOG: -30,
    WeatherType.VOLCANIC_ASH: -15,
    WeatherType.HEAT_WAVE: -5,
    WeatherType.COLD_SNAP: -10,
    WeatherType.METEOR_SHOWER: -25,
}

TERRAIN_ACCURACY: Dict[TerrainType, int] = {
    TerrainType.OPEN_GROUND: 0,
    TerrainType.DENSE_VEGETATION: -15,
    TerrainType.SHALLOW_WATER: -5,
    TerrainType.DEEP_WATER: -20,
    TerrainType.MUD: -10,
    TerrainType.TAR_PIT: -25,
    TerrainType.ROCKY: -5,
    TerrainType.VOLCANIC: -10,
    TerrainType.NESTING_GROUND: 0,
    TerrainType.CLIFF: -15,
}

TIME_OF_DAY_ACCURACY: Dict[TimeOfDay, int] = {
    TimeOfDay.DAWN: 0,
    TimeOfDay.DAY: 0,
    TimeOfDay.DUSK: -5,
    TimeOfDay.NIGHT: -20,
}

BODY_PART_ACCURACY: Dict[BodyPart, int] = {
    BodyPart.HEAD: -20,
    BodyPart.NECK: -15,
    BodyPart.BODY: 0,
    BodyPart.LEGS: -10,
    BodyPart.TAIL: -10,
    BodyPart.WINGS: -15,
    BodyPart.UNDERBELLY: -25,
}

# Frozen/stunned attackers effectively cannot land a blow
STATUS_ACCURACY: Dict[StatusEffectType, int] = {
    StatusEffectType.BLINDED: -50,
    StatusEffectType.CONFUSED: -20,
    StatusEffectType.EXHAUSTED: -15,
    StatusEffectType.FROZEN: -100,
    StatusEffectType.STUNNED: -100,
}

# Terrain effect on escaping
FLEE_BASE_CHANCE = 50
FLEE_SPEED_BONUS = 5
FLEE_MIN_CHANCE = 10
FLEE_MAX_CHANCE = 90

FLEE_TERRAIN: Dict[TerrainType, int] = {
    TerrainType.DENSE_VEGETATION: 10,
    TerrainType.MUD: -20,
    TerrainType.TAR_PIT: -20,
    TerrainType.OPEN_GROUND: -10,
}


# =============================================================================
# HIT DETECTION
# =============================================================================

def calculate_hit_detection(
    attacker: CombatantStats,
    defender: CombatantStats,
    environment: CombatEnvironment,
    rng: SeededRandom,
    target_body_part: Optional[BodyPart] = None,
) -> HitDetectionResult:
    """
    Roll one attack's accuracy check.

    Args:
        attacker: Attacker stats (its active_status_effects are consulted)
        defender: Defender stats (evasion, block chance)
        environment: Weather/terrain/time of day for the encounter
        rng: Generator for the hit, evasion, block and critical rolls
        target_body_part: Aimed body part, or None for an untargeted attack

    Returns:
        HitDetectionResult with the roll, effective accuracy and the ordered
        list of modifiers that produced it
    """
    modifiers: List[HitModifier] = []
    accuracy = float(BASE_ACCURACY)

    def add(source: str, value: float) -> None:
        nonlocal accuracy
        if value == 0:
            return
        modifiers.append(HitModifier(source=source, value=value))
        accuracy += value

    derived_accuracy = attacker.derived.accuracy
    if derived_accuracy:
        add("Attacker Accuracy", derived_accuracy - BASE_ACCURACY)

    add(f"Weather ({environment.weather.value})", WEATHER_ACCURACY.get(environment.weather, 0))
    add(f"Terrain ({environment.terrain.value})", TERRAIN_ACCURACY.get(environment.terrain, 0))
    add(
        f"Time of Day ({environment.time_of_day.value})",
        TIME_OF_DAY_ACCURACY.get(environment.time_of_day, 0),
    )

    if target_body_part is not None:
        add(f"Target ({target_body_part.value})", BODY_PART_ACCURACY.get(target_body_part, 0))

    # Sorted for a stable modifier order regardless of set iteration
    for effect in sorted(attacker.active_status_effects, key=lambda e: e.value):
        if effect in STATUS_ACCURACY:
            add(f"Status ({effect.value})", STATUS_ACCURACY[effect])

    evasion = defender.derived.evasion
    if evasion > 0:
        add("Defender Evasion", -evasion)

    accuracy = max(MIN_ACCURACY, min(MAX_ACCURACY, accuracy))

    accuracy_roll = rng.next() * 100
    connected = accuracy_roll <= accuracy

    evaded = False
    if not connected and evasion > 0:
        evaded = rng.next() * 100 <= evasion

    blocked = False
    if connected and defender.derived.block_chance > 0:
        blocked = rng.next() * 100 <= defender.derived.block_chance

    critical = False
    if connected and not blocked:
        crit_chance = attacker.derived.critical_chance or DEFAULT_CRIT_CHANCE
        critical = rng.next() * 100 <= crit_chance

    return HitDetectionResult(
        hit=connected and not blocked,
        critical=critical,
        evaded=evaded,
        blocked=blocked,
        body_part_hit=(target_body_part or BodyPart.BODY) if connected else None,
        accuracy_roll=accuracy_roll,
        effective_accuracy=accuracy,
        modifiers=modifiers,
    )


# =============================================================================
# FLEE CHANCE
# =============================================================================

def calculate_flee_chance(fleeing_speed: float, pursuer_speed: float, terrain: TerrainType) -> float:
    """
    Percent chance to escape, clamped to [10, 90].

    50 base, +5 per point of speed advantage, plus a terrain modifier
    (cover helps, mud and tar hinder, open ground favors the pursuer).
    """
    chance = FLEE_BASE_CHANCE + (fleeing_speed - pursuer_speed) * FLEE_SPEED_BONUS
    chance += FLEE_TERRAIN.get(terrain, 0)
    return max(FLEE_MIN_CHANCE, min(FLEE_MAX_CHANCE, chance))
