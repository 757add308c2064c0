"""
Batch simulation - play many seeded combats of one matchup and summarize.

Combat i uses SeededRandom(f"{base_seed}-{i}"), so a batch is reproducible
and any single combat can be replayed from its index.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from ..errors import InvalidArgumentError
from ..content.tables import ContentTables, load_default_tables
from ..handlers.combat import CombatOutcome, CombatResult, CombatRunner, Policy
from ..generation.encounters import create_adversary_combatant, create_player_combatant
from ..state.combat import CombatEnvironment
from ..state.rng import SeededRandom

logger = logging.getLogger(__name__)

__all__ = ["BatchSummary", "simulate_batch", "combat_seed"]


def combat_seed(base_seed: str, index: int) -> str:
    return f"{base_seed}-{index}"


@dataclass
class BatchSummary:
    dinosaur: str
    enemy: str
    count: int
    victories: int
    defeats: int
    fled: int
    mean_turns: float
    median_turns: float
    p90_turns: float
    mean_damage_dealt: float
    mean_damage_taken: float
    mean_health_remaining: float
    results: List[CombatResult] = field(default_factory=list, repr=False)

    @property
    def win_rate(self) -> float:
        return self.victories / self.count if self.count else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dinosaur": self.dinosaur,
            "enemy": self.enemy,
            "count": self.count,
            "victories": self.victories,
            "defeats": self.defeats,
            "fled": self.fled,
            "win_rate": round(self.win_rate, 4),
            "mean_turns": round(self.mean_turns, 2),
            "median_turns": round(self.median_turns, 2),
            "p90_turns": round(self.p90_turns, 2),
            "mean_damage_dealt": round(self.mean_damage_dealt, 2),
            "mean_damage_taken": round(self.mean_damage_taken, 2),
            "mean_health_remaining": round(self.mean_health_remaining, 4),
        }


def simulate_batch(
    dinosaur_id: str,
    enemy_id: str,
    count: int,
    base_seed: str = "batch",
    environment: Optional[CombatEnvironment] = None,
    tables: Optional[ContentTables] = None,
    policy: Optional[Policy] = None,
) -> BatchSummary:
    """Run `count` combats of dinosaur vs enemy and aggregate the outcomes."""
    if count < 1:
        raise InvalidArgumentError(f"count must be at least 1, got {count}")

    tables = tables or load_default_tables()
    environment = environment or CombatEnvironment()
    tier = tables.get_enemy(enemy_id).tier

    player = create_player_combatant(dinosaur_id, tables)
    adversary = create_adversary_combatant(enemy_id, tables)

    results: List[CombatResult] = []
    for i in range(count):
        rng = SeededRandom(combat_seed(base_seed, i))
        runner = CombatRunner(player, adversary, environment, tier, rng, tables)
        results.append(runner.run(policy))

    outcomes = np.array([r.outcome.value for r in results])
    turns = np.array([r.turns for r in results], dtype=float)
    dealt = np.array([r.damage_dealt for r in results], dtype=float)
    taken = np.array([r.damage_taken for r in results], dtype=float)
    remaining = np.array([r.health_fraction_remaining for r in results], dtype=float)

    summary = BatchSummary(
        dinosaur=dinosaur_id,
        enemy=enemy_id,
        count=count,
        victories=int(np.sum(outcomes == CombatOutcome.VICTORY.value)),
        defeats=int(np.sum(outcomes == CombatOutcome.DEFEAT.value)),
        fled=int(np.sum(outcomes == CombatOutcome.FLED.value)),
        mean_turns=float(np.mean(turns)),
        median_turns=float(np.median(turns)),
        p90_turns=float(np.percentile(turns, 90)),
        mean_damage_dealt=float(np.mean(dealt)),
        mean_damage_taken=float(np.mean(taken)),
        mean_health_remaining=float(np.mean(remaining)),
        results=results,
    )
    logger.info(
        "Batch %s vs %s: %d combats, win rate %.1f%%, mean %.1f turns",
        dinosaur_id, enemy_id, count, summary.win_rate * 100, summary.mean_turns,
    )
    return summary
