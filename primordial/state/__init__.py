"""
State module - RNG, combatant stats and run state.

Contains:
- Seeded RNG (Mulberry32 over a djb2 string hash)
- Combat value types (stats, environment, hit/damage results)
- Run state snapshot
"""

# RNG System
from .rng import (
    SeededRandom,
    hash_seed,
    generate_daily_seed,
    generate_run_seed,
    is_daily_seed,
    get_date_from_daily_seed,
    sample_sequence,
)

# Combat Types
from .combat import (
    DamageType,
    StatusEffectType,
    BodyPart,
    WeatherType,
    TerrainType,
    TimeOfDay,
    AdversaryTier,
    DerivedCombatStats,
    CombatantStats,
    CombatEnvironment,
    StatusEffectInstance,
    StatusEffects,
    HitModifier,
    HitDetectionResult,
    DamageBreakdown,
    DamageCalculationResult,
)

# Run State (imports generation.map, so it loads last)
from .run import RunState

__all__ = [
    "SeededRandom",
    "hash_seed",
    "generate_daily_seed",
    "generate_run_seed",
    "is_daily_seed",
    "get_date_from_daily_seed",
    "sample_sequence",
    "DamageType",
    "StatusEffectType",
    "BodyPart",
    "WeatherType",
    "TerrainType",
    "TimeOfDay",
    "AdversaryTier",
    "DerivedCombatStats",
    "CombatantStats",
    "CombatEnvironment",
    "StatusEffectInstance",
    "StatusEffects",
    "HitModifier",
    "HitDetectionResult",
    "DamageBreakdown",
    "DamageCalculationResult",
    "RunState",
]
