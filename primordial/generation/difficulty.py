"""
Difficulty Scaling - Encounter multipliers from run depth and performance.

coefficient = clamp(1.0, max_scaling,
                    (base + depth * depth_multiplier)
                    * (1 + (performance - 0.5) * performance_weight))

Multipliers grow from the coefficient's excess over 1.0 at fixed rates:
health 50%, attack 30%, defense 20%, speed 10%, rewards 40%, xp 30%.
Elite chance is depth-only: min(0.3, 0.05 + 0.03 * depth).

Performance in [0, 1] blends current health (40%), combats won per node
visited (40%) and fossils vs. 10 per depth level (20%).
"""

import math
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Optional

from ..errors import InvalidArgumentError
from ..state.combat import CombatantStats
from ..state.rng import SeededRandom

if TYPE_CHECKING:
    from ..state.run import RunState

__all__ = [
    "DifficultyConfig",
    "ScalingFactors",
    "DifficultyScaler",
    "DIFFICULTY_BANDS",
]


# =============================================================================
# CONSTANTS
# =============================================================================

HEALTH_SENSITIVITY = 0.5
ATTACK_SENSITIVITY = 0.3
DEFENSE_SENSITIVITY = 0.2
SPEED_SENSITIVITY = 0.1
REWARD_SENSITIVITY = 0.4
XP_SENSITIVITY = 0.3
ENEMY_COUNT_STEP = 0.5

ELITE_BASE_CHANCE = 0.05
ELITE_CHANCE_PER_DEPTH = 0.03
ELITE_MAX_CHANCE = 0.3

PERF_HEALTH_WEIGHT = 0.4
PERF_COMBAT_WEIGHT = 0.4
PERF_RESOURCE_WEIGHT = 0.2
EXPECTED_FOSSILS_PER_DEPTH = 10

# (upper bound exclusive, description, RGB color)
DIFFICULTY_BANDS = (
    (1.1, "Normal", 0x4A9D5F),
    (1.3, "Challenging", 0xE8A735),
    (1.6, "Hard", 0xE88035),
    (2.0, "Very Hard", 0xD94A3D),
    (2.5, "Extreme", 0x9D4AD9),
    (math.inf, "Nightmare", 0x4A4A4A),
)


@dataclass
class DifficultyConfig:
    base_coefficient: float = 1.0
    depth_multiplier: float = 0.1
    performance_weight: float = 0.15
    max_scaling: float = 3.0

    def __post_init__(self):
        if self.max_scaling < 1.0:
            raise InvalidArgumentError(f"max_scaling must be at least 1.0, got {self.max_scaling}")


@dataclass(frozen=True)
class ScalingFactors:
    coefficient: float
    enemy_health_mult: float
    enemy_attack_mult: float
    enemy_defense_mult: float
    enemy_speed_mult: float
    enemy_count_mod: int
    reward_mult: float
    elite_chance: float
    xp_mult: float

    @classmethod
    def from_coefficient(cls, coefficient: float, depth: int) -> "ScalingFactors":
        excess = coefficient - 1.0
        return cls(
            coefficient=coefficient,
            enemy_health_mult=1.0 + excess * HEALTH_SENSITIVITY,
            enemy_attack_mult=1.0 + excess * ATTACK_SENSITIVITY,
            enemy_defense_mult=1.0 + excess * DEFENSE_SENSITIVITY,
            enemy_speed_mult=1.0 + excess * SPEED_SENSITIVITY,
            enemy_count_mod=math.floor(excess / ENEMY_COUNT_STEP),
            reward_mult=1.0 + excess * REWARD_SENSITIVITY,
            elite_chance=min(ELITE_MAX_CHANCE, ELITE_BASE_CHANCE + depth * ELITE_CHANCE_PER_DEPTH),
            xp_mult=1.0 + excess * XP_SENSITIVITY,
        )

    @classmethod
    def neutral(cls) -> "ScalingFactors":
        """No scaling (depth 0, coefficient 1.0)."""
        return cls.from_coefficient(1.0, 0)


class DifficultyScaler:
    """
    Derives ScalingFactors for an encounter.

    Usage:
        scaler = DifficultyScaler()
        scaling = scaler.calculate_scaling(run_state)
        enemy = scaler.scale_enemy_stats(base_enemy, scaling)
    """

    def __init__(self, config: Optional[DifficultyConfig] = None):
        self.config = config or DifficultyConfig()

    def calculate_scaling(self, run_state: "RunState") -> ScalingFactors:
        performance = self.calculate_performance(run_state)
        coefficient = self.calculate_coefficient(run_state.depth, performance)
        return ScalingFactors.from_coefficient(coefficient, run_state.depth)

    def calculate_performance(self, run_state: "RunState") -> float:
        """Player performance score in [0, 1]; higher means doing well."""
        health = min(1.0, max(0.0, run_state.health_fraction))

        nodes_visited = max(1, len(run_state.nodes_visited))
        combat_efficiency = min(1.0, run_state.combats_won / nodes_visited)

        expected_fossils = (run_state.depth + 1) * EXPECTED_FOSSILS_PER_DEPTH
        resource_efficiency = min(1.0, run_state.fossils_collected / max(1, expected_fossils))

        return (
            health * PERF_HEALTH_WEIGHT
            + combat_efficiency * PERF_COMBAT_WEIGHT
            + resource_efficiency * PERF_RESOURCE_WEIGHT
        )

    def calculate_coefficient(self, depth: int, performance: float) -> float:
        depth_factor = self.config.base_coefficient + depth * self.config.depth_multiplier
        performance_factor = 1.0 + (performance - 0.5) * self.config.performance_weight
        return min(self.config.max_scaling, max(1.0, depth_factor * performance_factor))

    def get_current_coefficient(self, run_state: "RunState") -> float:
        return self.calculate_coefficient(run_state.depth, self.calculate_performance(run_state))

    # ============ APPLYING SCALING ============

    def scale_enemy_stats(self, stats: CombatantStats, scaling: ScalingFactors) -> CombatantStats:
        """Copy of stats with health, attack, defense and speed scaled (floored)."""
        return replace(
            stats.copy(),
            health=math.floor(stats.health * scaling.enemy_health_mult),
            max_health=math.floor(stats.max_health * scaling.enemy_health_mult),
            attack=math.floor(stats.attack * scaling.enemy_attack_mult),
            defense=math.floor(stats.defense * scaling.enemy_defense_mult),
            speed=math.floor(stats.speed * scaling.enemy_speed_mult),
        )

    def scale_reward(self, base_reward: int, scaling: ScalingFactors) -> int:
        return math.floor(base_reward * scaling.reward_mult)

    def scale_xp(self, base_xp: int, scaling: ScalingFactors) -> int:
        return math.floor(base_xp * scaling.xp_mult)

    def calculate_enemy_count(self, base_count: int, scaling: ScalingFactors) -> int:
        return max(1, base_count + scaling.enemy_count_mod)

    def should_spawn_elite(self, scaling: ScalingFactors, rng: SeededRandom) -> bool:
        return rng.next() < scaling.elite_chance

    # ============ DISPLAY ============

    @staticmethod
    def get_difficulty_description(coefficient: float) -> str:
        for upper, description, _ in DIFFICULTY_BANDS:
            if coefficient < upper:
                return description
        return DIFFICULTY_BANDS[-1][1]

    @staticmethod
    def get_difficulty_color(coefficient: float) -> int:
        for upper, _, color in DIFFICULTY_BANDS:
            if coefficient < upper:
                return color
        return DIFFICULTY_BANDS[-1][2]
