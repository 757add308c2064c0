"""
Primordial Engine

Deterministic combat and run generation for a dinosaur roguelite. Every
random draw flows through a seeded Mulberry32 generator, so a seed string
reproduces maps, encounters and whole fights exactly.

Core subsystems:
- state: Seeded RNG, combatant stats, run state
- calc: Hit detection, damage, status effects, flee chance
- content: Abilities, traits, dinosaurs, enemies, adversary behavior trees
- generation: Map, difficulty scaling, encounter spawning
- handlers: Combat turn loop
- simulation: Seeded batch simulation

Usage:
    from primordial import MapGenerator, BiomeType

    columns = MapGenerator("SEED123").generate_map(BiomeType.FERN_PRAIRIES)

    from primordial import CombatRunner, SeededRandom, load_default_tables
    tables = load_default_tables()
    player = create_player_combatant("deinonychus", tables)
    adversary = create_adversary_combatant("utahraptor", tables)
    runner = CombatRunner(player, adversary, CombatEnvironment(), "elite",
                          SeededRandom("SEED123"), tables)
    result = runner.run(greedy_policy)
"""

__version__ = "0.1.0"

# State first: state.run pulls in generation.map
from .errors import (
    PrimordialError,
    InvalidArgumentError,
    EmptyInputError,
    LookupFailure,
    ConnectivityViolation,
)
from .state import (
    SeededRandom,
    hash_seed,
    generate_daily_seed,
    generate_run_seed,
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
    HitDetectionResult,
    DamageCalculationResult,
    RunState,
)

# Calculation
from .calc import (
    calculate_hit_detection,
    calculate_flee_chance,
    calculate_damage,
    apply_status_effect,
    process_status_effects,
    apply_status_modifiers,
)

# Content
from .content import (
    ContentTables,
    load_default_tables,
    load_tables_from_json,
    create_enemy_ai,
    execute_ai,
    AIContext,
    AIDecision,
)

# Generation
from .generation import (
    MapGenerator,
    MapConfig,
    MapNode,
    NodeType,
    BiomeType,
    DifficultyScaler,
    ScalingFactors,
    create_player_combatant,
    create_adversary_combatant,
    pick_enemy_for_node,
    roll_environment,
)

# Combat
from .handlers import CombatRunner, CombatResult, CombatOutcome, CombatConfig, greedy_policy
from .simulation import simulate_batch, BatchSummary

__all__ = [
    "PrimordialError",
    "InvalidArgumentError",
    "EmptyInputError",
    "LookupFailure",
    "ConnectivityViolation",
    "SeededRandom",
    "hash_seed",
    "generate_daily_seed",
    "generate_run_seed",
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
    "HitDetectionResult",
    "DamageCalculationResult",
    "RunState",
    "calculate_hit_detection",
    "calculate_flee_chance",
    "calculate_damage",
    "apply_status_effect",
    "process_status_effects",
    "apply_status_modifiers",
    "ContentTables",
    "load_default_tables",
    "load_tables_from_json",
    "create_enemy_ai",
    "execute_ai",
    "AIContext",
    "AIDecision",
    "MapGenerator",
    "MapConfig",
    "MapNode",
    "NodeType",
    "BiomeType",
    "DifficultyScaler",
    "ScalingFactors",
    "create_player_combatant",
    "create_adversary_combatant",
    "pick_enemy_for_node",
    "roll_environment",
    "CombatRunner",
    "CombatResult",
    "CombatOutcome",
    "CombatConfig",
    "greedy_policy",
    "simulate_batch",
    "BatchSummary",
]
