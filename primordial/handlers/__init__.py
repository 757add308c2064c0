"""
Handlers for running encounters.

Combat Handlers:
- CombatRunner: Runs one combat turn by turn
- CombatResult: Result of combat
- greedy_policy: Default player policy for automated runs
"""

from .combat import (
    CombatRunner,
    CombatResult,
    CombatOutcome,
    CombatConfig,
    ActionResult,
    greedy_policy,
)

__all__ = [
    "CombatRunner",
    "CombatResult",
    "CombatOutcome",
    "CombatConfig",
    "ActionResult",
    "greedy_policy",
]
