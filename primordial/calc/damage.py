"""
Damage Calculator - Pure damage pipeline for one landed attack.

Calculation order:
1. Base damage = attack * ability multiplier
2. Body part multiplier (x (1 + weakness) if the defender declares one)
3. Critical multiplier (critical_damage / 100, default 200 -> 2.0)
4. Subtract effective defense (defense reduced by armor penetration), min 1
5. Resistance / vulnerability for the damage type
6. Environmental multiplier, looked up by (weather, damage type)
7. Floor to int, min 1

Every step is kept in the returned breakdown.
"""

import math
from typing import Dict, Mapping, Tuple

from ..state.combat import (
    BodyPart, CombatantStats, CombatEnvironment, DamageBreakdown,
    DamageCalculationResult, DamageType, HitDetectionResult, WeatherType,
)

__all__ = [
    "calculate_damage",
    "environmental_multiplier",
    # Constants
    "BODY_PART_DAMAGE",
    "ENVIRONMENTAL_DAMAGE_MODIFIERS",
    "DEFAULT_CRIT_DAMAGE",
    "MIN_DAMAGE",
]


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_CRIT_DAMAGE = 200.0
MIN_DAMAGE = 1

BODY_PART_DAMAGE: Dict[BodyPart, float] = {
    BodyPart.HEAD: 1.5,
    BodyPart.NECK: 1.3,
    BodyPart.BODY: 1.0,
    BodyPart.LEGS: 0.75,
    BodyPart.TAIL: 0.8,
    BodyPart.WINGS: 0.9,
    BodyPart.UNDERBELLY: 2.0,
}

# Rain douses fire, storms carry sound
ENVIRONMENTAL_DAMAGE_MODIFIERS: Dict[Tuple[WeatherType, DamageType], float] = {
    (WeatherType.RAIN, DamageType.FIRE): 0.5,
    (WeatherType.STORM, DamageType.SONIC): 1.2,
}


# =============================================================================
# DAMAGE CALCULATION
# =============================================================================

def environmental_multiplier(
    weather: WeatherType,
    damage_type: DamageType,
    modifiers: Mapping[Tuple[WeatherType, DamageType], float] = ENVIRONMENTAL_DAMAGE_MODIFIERS,
) -> float:
    """Weather x damage type multiplier, 1.0 when no entry exists."""
    return modifiers.get((weather, damage_type), 1.0)


def calculate_damage(
    attacker: CombatantStats,
    defender: CombatantStats,
    ability_multiplier: float,
    damage_type: DamageType,
    hit_result: HitDetectionResult,
    environment: CombatEnvironment,
    environmental_modifiers: Mapping[Tuple[WeatherType, DamageType], float] = ENVIRONMENTAL_DAMAGE_MODIFIERS,
) -> DamageCalculationResult:
    """
    Calculate final damage for an attack that landed.

    Args:
        attacker: Attacking combatant (attack, critical damage, armor penetration)
        defender: Defending combatant (defense, resistances, weaknesses, health)
        ability_multiplier: Multiplier from the ability used (1.0 for a basic attack)
        damage_type: Channel for resistance/vulnerability and weather lookups
        hit_result: Output of calculate_hit_detection for this attack
        environment: Encounter environment (weather is consulted)
        environmental_modifiers: (weather, damage type) -> multiplier table

    Returns:
        DamageCalculationResult; final_damage is always >= 1
    """
    base_damage = attacker.attack * ability_multiplier

    body_part_mod = 1.0
    if hit_result.body_part_hit is not None:
        body_part_mod = BODY_PART_DAMAGE.get(hit_result.body_part_hit, 1.0)
        weakness = defender.body_part_weaknesses.get(hit_result.body_part_hit, 0.0)
        if weakness:
            body_part_mod *= 1 + weakness

    critical_multiplier = 1.0
    if hit_result.critical:
        critical_multiplier = (attacker.derived.critical_damage or DEFAULT_CRIT_DAMAGE) / 100

    armor_pen = attacker.derived.armor_penetration or 0.0
    defense_reduction = defender.defense * (1 - armor_pen / 100)

    resistance_modifier = 1.0
    resistance = defender.resistances.get(damage_type, 0.0)
    if resistance:
        resistance_modifier *= 1 - resistance
    vulnerability = defender.vulnerabilities.get(damage_type, 0.0)
    if vulnerability:
        resistance_modifier *= 1 + vulnerability

    env_modifier = environmental_multiplier(environment.weather, damage_type, environmental_modifiers)

    damage = base_damage * body_part_mod * critical_multiplier
    damage = max(MIN_DAMAGE, damage - defense_reduction)
    damage *= resistance_modifier
    damage *= env_modifier
    final_damage = max(MIN_DAMAGE, math.floor(damage))

    overkill = max(0, final_damage - defender.health)

    return DamageCalculationResult(
        base_damage=base_damage,
        final_damage=final_damage,
        damage_type=damage_type,
        critical_multiplier=critical_multiplier,
        resistance_reduction=1 - resistance_modifier,
        defense_reduction=defense_reduction,
        environmental_modifier=env_modifier,
        body_part_multiplier=body_part_mod,
        overkill=overkill,
        breakdown=DamageBreakdown(
            base=base_damage,
            attack_stat=attacker.attack,
            ability_multiplier=ability_multiplier,
            body_part=body_part_mod,
            critical=critical_multiplier,
            defense=defense_reduction,
            resistance=resistance_modifier,
            environmental=env_modifier,
            final=final_damage,
        ),
    )
