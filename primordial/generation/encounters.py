"""
Encounter Spawning - Build the two combatants for a combat node.

Player combatants come from a DinosaurData plus passive-stat traits and the
run's carried-over health. Adversaries come from an EnemyData scaled by the
encounter's ScalingFactors. Node types map to adversary tiers:
COMBAT -> basic, ELITE -> elite, BOSS -> boss.
"""

import logging
import math
from dataclasses import replace
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple

from ..errors import InvalidArgumentError, LookupFailure
from ..content.enemies import enemies_by_tier
from ..content.tables import ContentTables
from ..content.traits import BASE_STATS, Trait, TraitType
from ..state.combat import (
    AdversaryTier, CombatantStats, CombatEnvironment, DerivedCombatStats,
    TerrainType, TimeOfDay, WeatherType,
)
from ..state.rng import SeededRandom
from .difficulty import DifficultyScaler, ScalingFactors
from .map import BiomeType, NodeType

if TYPE_CHECKING:
    from ..state.run import RunState

logger = logging.getLogger(__name__)

__all__ = [
    "tier_for_node",
    "create_player_combatant",
    "create_adversary_combatant",
    "pick_enemy_for_node",
    "roll_environment",
    "apply_passive_traits",
    "BIOME_TERRAIN",
    "BIOME_WEATHER",
]


NODE_TIERS: Dict[NodeType, AdversaryTier] = {
    NodeType.COMBAT: AdversaryTier.BASIC,
    NodeType.ELITE: AdversaryTier.ELITE,
    NodeType.BOSS: AdversaryTier.BOSS,
}

# (value, weight) tables per biome
BIOME_TERRAIN: Dict[BiomeType, Tuple[Tuple[TerrainType, float], ...]] = {
    BiomeType.COASTAL_WETLANDS: (
        (TerrainType.SHALLOW_WATER, 40), (TerrainType.MUD, 25),
        (TerrainType.DEEP_WATER, 15), (TerrainType.OPEN_GROUND, 20),
    ),
    BiomeType.FERN_PRAIRIES: (
        (TerrainType.OPEN_GROUND, 45), (TerrainType.DENSE_VEGETATION, 35),
        (TerrainType.NESTING_GROUND, 20),
    ),
    BiomeType.VOLCANIC_HIGHLANDS: (
        (TerrainType.VOLCANIC, 40), (TerrainType.ROCKY, 35), (TerrainType.CLIFF, 25),
    ),
    BiomeType.TAR_PITS: (
        (TerrainType.TAR_PIT, 40), (TerrainType.MUD, 30), (TerrainType.OPEN_GROUND, 30),
    ),
}

BIOME_WEATHER: Dict[BiomeType, Tuple[Tuple[WeatherType, float], ...]] = {
    BiomeType.COASTAL_WETLANDS: (
        (WeatherType.CLEAR, 40), (WeatherType.RAIN, 35), (WeatherType.STORM, 15), (WeatherType.FOG, 10),
    ),
    BiomeType.FERN_PRAIRIES: (
        (WeatherType.CLEAR, 60), (WeatherType.RAIN, 20), (WeatherType.HEAT_WAVE, 20),
    ),
    BiomeType.VOLCANIC_HIGHLANDS: (
        (WeatherType.CLEAR, 30), (WeatherType.VOLCANIC_ASH, 45), (WeatherType.METEOR_SHOWER, 25),
    ),
    BiomeType.TAR_PITS: (
        (WeatherType.CLEAR, 45), (WeatherType.HEAT_WAVE, 30), (WeatherType.COLD_SNAP, 25),
    ),
}

VISIBILITY = {
    WeatherType.FOG: 40,
    WeatherType.VOLCANIC_ASH: 60,
    WeatherType.STORM: 70,
}


def tier_for_node(node_type: NodeType) -> AdversaryTier:
    """Adversary tier for a combat-bearing node type."""
    if node_type not in NODE_TIERS:
        raise InvalidArgumentError(f"Node type {node_type.value} has no combat encounter")
    return NODE_TIERS[node_type]


# =============================================================================
# TRAITS
# =============================================================================

def _scaled(current: int, effect) -> int:
    return math.floor((current + effect.value) * effect.multiplier)


def apply_passive_traits(stats: CombatantStats, traits: Iterable[Trait]) -> CombatantStats:
    """
    Fold PASSIVE_STAT trait effects into a copy of stats.

    Each effect adds its value, then applies its multiplier. Raising health
    or max_health raises both, so a fresh combatant starts at full health.
    """
    result = stats.copy()
    for trait in traits:
        if trait.trait_type != TraitType.PASSIVE_STAT:
            continue
        for effect in trait.effects:
            if effect.stat is None:
                continue
            if effect.stat in ("health", "max_health"):
                result.max_health = result.health = _scaled(result.max_health, effect)
            elif effect.stat in ("stamina", "max_stamina"):
                result.max_stamina = result.stamina = _scaled(result.max_stamina, effect)
            elif effect.stat in BASE_STATS:
                setattr(result, effect.stat, _scaled(getattr(result, effect.stat), effect))
            else:
                current = getattr(result.derived, effect.stat)
                result.derived = replace(
                    result.derived, **{effect.stat: (current + effect.value) * effect.multiplier}
                )
    return result


def _resolve_traits(tables: ContentTables, trait_ids: Iterable[str], owner: str) -> List[Trait]:
    traits = []
    for trait_id in trait_ids:
        if trait_id not in tables.traits:
            raise LookupFailure("trait", trait_id, owner)
        traits.append(tables.traits[trait_id])
    return traits


# =============================================================================
# COMBATANTS
# =============================================================================

def create_player_combatant(
    dinosaur_id: str,
    tables: ContentTables,
    traits: Iterable[str] = (),
    run_state: Optional["RunState"] = None,
) -> CombatantStats:
    """
    Player combatant for a dinosaur.

    Passives plus any extra trait ids (and the run's acquired traits) are
    attached; PASSIVE_STAT effects are folded in. With a run_state, current
    health and stamina carry over, capped at the combatant's maximums.
    """
    dino = tables.get_dinosaur(dinosaur_id)

    trait_ids: List[str] = list(dino.passives)
    for trait_id in list(traits) + (list(run_state.traits) if run_state else []):
        if trait_id not in trait_ids:
            trait_ids.append(trait_id)
    resolved = _resolve_traits(tables, trait_ids, f"dinosaur {dino.id}")

    base = CombatantStats(
        name=dino.name,
        attack=dino.attack,
        defense=dino.defense,
        speed=dino.speed,
        health=dino.health,
        max_health=dino.health,
        stamina=dino.stamina,
        max_stamina=dino.stamina,
        derived=replace(DerivedCombatStats(), **dino.derived),
        resistances=dict(dino.resistances),
        vulnerabilities=dict(dino.vulnerabilities),
        traits=trait_ids,
        abilities=list(dino.abilities),
    )
    stats = apply_passive_traits(base, resolved)

    if run_state is not None:
        stats.health = max(0, min(run_state.health, stats.max_health))
        stats.stamina = max(0, min(run_state.stamina, stats.max_stamina))

    return stats


def create_adversary_combatant(
    enemy_id: str,
    tables: ContentTables,
    scaling: Optional[ScalingFactors] = None,
) -> CombatantStats:
    """Adversary combatant for an enemy, scaled for the encounter."""
    enemy = tables.get_enemy(enemy_id)
    resolved = _resolve_traits(tables, enemy.traits, f"enemy {enemy.id}")

    base = CombatantStats(
        name=enemy.name,
        attack=enemy.attack,
        defense=enemy.defense,
        speed=enemy.speed,
        health=enemy.health,
        max_health=enemy.health,
        stamina=enemy.stamina,
        max_stamina=enemy.stamina,
        derived=replace(DerivedCombatStats(), **enemy.derived),
        resistances=dict(enemy.resistances),
        vulnerabilities=dict(enemy.vulnerabilities),
        traits=list(enemy.traits),
        body_part_weaknesses=dict(enemy.body_part_weaknesses),
        abilities=list(enemy.abilities),
    )
    stats = apply_passive_traits(base, resolved)
    if scaling is not None:
        stats = DifficultyScaler().scale_enemy_stats(stats, scaling)
    return stats


def pick_enemy_for_node(node_type: NodeType, tables: ContentTables, rng: SeededRandom) -> str:
    """Enemy id of the node's tier, drawn uniformly in table order."""
    tier = tier_for_node(node_type)
    candidates = enemies_by_tier(tables.enemies, tier)
    if not candidates:
        raise LookupFailure("enemy tier", tier.value, f"{node_type.value} node")
    enemy = rng.pick(candidates)
    logger.debug("Spawned %s (%s) for %s node", enemy.id, tier.value, node_type.value)
    return enemy.id


def roll_environment(biome: BiomeType, rng: SeededRandom) -> CombatEnvironment:
    """Weather, terrain and time of day for an encounter in a biome."""
    terrains, terrain_weights = zip(*BIOME_TERRAIN[biome])
    weathers, weather_weights = zip(*BIOME_WEATHER[biome])
    terrain = rng.weighted_pick(terrains, terrain_weights)
    weather = rng.weighted_pick(weathers, weather_weights)
    time_of_day = rng.pick(list(TimeOfDay))
    return CombatEnvironment(
        weather=weather,
        terrain=terrain,
        time_of_day=time_of_day,
        visibility=VISIBILITY.get(weather, 100),
    )
