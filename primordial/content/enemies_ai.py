"""
Adversary AI - Behavior trees for basic, elite and boss adversaries.

A tree is a nest of immutable AIBehaviorNode values tagged by NodeKind:
- CONDITION: succeeds iff its predicate over AIContext holds; no action
- ACTION: always succeeds and yields its action id
- SEQUENCE: children in order; any failure fails the sequence, the first
  child that yields an action short-circuits
- SELECTOR: first child that succeeds wins
- RANDOM: weighted draw of exactly one child (weight defaults to 1)

Tier composition (each tier embeds the one below as its last branch):
- BASIC_AI: critical health flee/defend, low health defend/attack/heal,
  finish a weak target with a special attack, else attack/defend
- ELITE_AI: counter a player who attacked three turns running, heavy attack
  a stunned target, else BASIC_AI
- BOSS_AI: desperation below 25% health, enraged below 50%, else ELITE_AI

Trees are built once at import and shared by every adversary of the tier.
All random draws come from the SeededRandom passed to execute_ai().
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple, Union

from ..state.rng import SeededRandom
from ..state.combat import (
    AdversaryTier, BodyPart, CombatEnvironment, StatusEffectType,
)

logger = logging.getLogger(__name__)

__all__ = [
    "NodeKind",
    "AIBehaviorNode",
    "AIContext",
    "AIHistoryEntry",
    "AIDecision",
    "condition",
    "action",
    "sequence",
    "selector",
    "weighted",
    "create_enemy_ai",
    "execute_ai",
    "BASIC_AI",
    "ELITE_AI",
    "BOSS_AI",
    "DEFAULT_ACTION",
]


DEFAULT_ACTION = "attack"
DEFAULT_REASONING = "Default action"
DEFAULT_CONFIDENCE = 0.5
ACTION_CONFIDENCE = 0.8


# =============================================================================
# TREE NODES
# =============================================================================

class NodeKind(Enum):
    CONDITION = "condition"
    ACTION = "action"
    SEQUENCE = "sequence"
    SELECTOR = "selector"
    RANDOM = "random"


@dataclass(frozen=True)
class AIHistoryEntry:
    """One player turn, as remembered by the adversary."""
    turn: int
    player_action: str
    result: str  # "hit", "miss" or "critical"
    damage: int


@dataclass
class AIContext:
    """Snapshot of the fight from the adversary's point of view."""
    self_health: int
    self_max_health: int
    target_health: int
    target_max_health: int
    self_stamina: int = 0
    self_status_effects: FrozenSet[StatusEffectType] = frozenset()
    target_status_effects: FrozenSet[StatusEffectType] = frozenset()
    turn_number: int = 1
    environment: CombatEnvironment = field(default_factory=CombatEnvironment)
    available_abilities: Tuple[str, ...] = ()
    ability_cooldowns: Dict[str, int] = field(default_factory=dict)
    combat_history: List[AIHistoryEntry] = field(default_factory=list)

    @property
    def self_health_fraction(self) -> float:
        return self.self_health / self.self_max_health if self.self_max_health > 0 else 0.0

    @property
    def target_health_fraction(self) -> float:
        return self.target_health / self.target_max_health if self.target_max_health > 0 else 0.0


@dataclass(frozen=True)
class AIBehaviorNode:
    kind: NodeKind
    predicate: Optional[Callable[[AIContext], bool]] = None
    label: str = ""
    action: Optional[str] = None
    children: Tuple["AIBehaviorNode", ...] = ()
    weight: float = 1.0


@dataclass
class AIDecision:
    action: str
    reasoning: str
    confidence: float
    target_body_part: Optional[BodyPart] = None


# ============ NODE BUILDERS ============

def condition(predicate: Callable[[AIContext], bool], label: str = "") -> AIBehaviorNode:
    return AIBehaviorNode(kind=NodeKind.CONDITION, predicate=predicate, label=label)


def action(name: str, weight: float = 1.0) -> AIBehaviorNode:
    return AIBehaviorNode(kind=NodeKind.ACTION, action=name, weight=weight, label=name)


def sequence(*children: AIBehaviorNode, weight: float = 1.0) -> AIBehaviorNode:
    return AIBehaviorNode(kind=NodeKind.SEQUENCE, children=tuple(children), weight=weight)


def selector(*children: AIBehaviorNode, weight: float = 1.0) -> AIBehaviorNode:
    return AIBehaviorNode(kind=NodeKind.SELECTOR, children=tuple(children), weight=weight)


def weighted(*children: AIBehaviorNode, weight: float = 1.0) -> AIBehaviorNode:
    """RANDOM node: one child drawn by its weight."""
    return AIBehaviorNode(kind=NodeKind.RANDOM, children=tuple(children), weight=weight)


# =============================================================================
# PREDICATES
# =============================================================================

def self_health_below(threshold: float) -> Callable[[AIContext], bool]:
    def check(ctx: AIContext) -> bool:
        return ctx.self_health_fraction < threshold
    return check


def target_health_below(threshold: float) -> Callable[[AIContext], bool]:
    def check(ctx: AIContext) -> bool:
        return ctx.target_health_fraction < threshold
    return check


def player_repeated(action_id: str, turns: int) -> Callable[[AIContext], bool]:
    """Last `turns` history entries are all `action_id`."""
    def check(ctx: AIContext) -> bool:
        recent = ctx.combat_history[-turns:]
        return len(recent) == turns and all(h.player_action == action_id for h in recent)
    return check


def target_has(effect: StatusEffectType) -> Callable[[AIContext], bool]:
    def check(ctx: AIContext) -> bool:
        return effect in ctx.target_status_effects
    return check


# =============================================================================
# TIER TREES
# =============================================================================

BASIC_AI = selector(
    # Critical health: try to escape
    sequence(
        condition(self_health_below(0.15), "self health < 15%"),
        weighted(action("flee", 60), action("defend", 40)),
    ),
    # Low health: defensive
    sequence(
        condition(self_health_below(0.30), "self health < 30%"),
        weighted(action("defend", 50), action("attack", 30), action("heal", 20)),
    ),
    # Target nearly down: finish it
    sequence(
        condition(target_health_below(0.30), "target health < 30%"),
        action("special_attack"),
    ),
    weighted(action("attack", 70), action("defend", 30)),
)

ELITE_AI = selector(
    sequence(
        condition(player_repeated("attack", 3), "player attacked 3 turns running"),
        action("counter"),
    ),
    sequence(
        condition(target_has(StatusEffectType.STUNNED), "target stunned"),
        action("heavy_attack"),
    ),
    BASIC_AI,
)

# Desperation is checked first; below 25% is also below 50%
BOSS_AI = selector(
    sequence(
        condition(self_health_below(0.25), "desperation phase (< 25%)"),
        weighted(action("ultimate_attack", 50), action("heal", 30), action("enrage_attack", 20)),
    ),
    sequence(
        condition(self_health_below(0.50), "enraged phase (< 50%)"),
        weighted(action("enrage_attack", 40), action("special_attack", 40), action("summon_adds", 20)),
    ),
    ELITE_AI,
)

_TREES = {
    AdversaryTier.BASIC: BASIC_AI,
    AdversaryTier.ELITE: ELITE_AI,
    AdversaryTier.BOSS: BOSS_AI,
}


def create_enemy_ai(tier: Union[AdversaryTier, str]) -> AIBehaviorNode:
    """
    Behavior tree for a tier.

    Returns the shared module-level tree; raises InvalidArgumentError for an
    unknown tier string.
    """
    return _TREES[AdversaryTier.parse(tier)]


# =============================================================================
# EVALUATION
# =============================================================================

@dataclass
class _NodeResult:
    success: bool
    action: Optional[str] = None
    reasoning: Optional[str] = None
    confidence: Optional[float] = None


_FAILURE = _NodeResult(success=False)


def _evaluate(node: AIBehaviorNode, ctx: AIContext, rng: SeededRandom) -> _NodeResult:
    if node.kind == NodeKind.CONDITION:
        passed = node.predicate is not None and node.predicate(ctx)
        if passed and node.label:
            logger.debug("AI condition passed: %s", node.label)
        return _NodeResult(success=True) if passed else _FAILURE

    if node.kind == NodeKind.ACTION:
        return _NodeResult(
            success=True,
            action=node.action,
            reasoning=f"Selected action: {node.action}",
            confidence=ACTION_CONFIDENCE,
        )

    if node.kind == NodeKind.SEQUENCE:
        for child in node.children:
            result = _evaluate(child, ctx, rng)
            if not result.success:
                return _FAILURE
            if result.action:
                return result
        return _NodeResult(success=True)

    if node.kind == NodeKind.SELECTOR:
        for child in node.children:
            result = _evaluate(child, ctx, rng)
            if result.success:
                return result
        return _FAILURE

    if node.kind == NodeKind.RANDOM:
        if not node.children:
            return _FAILURE
        chosen = rng.weighted_pick(node.children, [c.weight for c in node.children])
        return _evaluate(chosen, ctx, rng)

    return _FAILURE


def execute_ai(root: AIBehaviorNode, context: AIContext, rng: SeededRandom) -> AIDecision:
    """
    Walk a behavior tree and return the adversary's decision.

    A tree that yields no action falls back to a plain attack.
    """
    result = _evaluate(root, context, rng)
    decision = AIDecision(
        action=result.action or DEFAULT_ACTION,
        reasoning=result.reasoning or DEFAULT_REASONING,
        confidence=result.confidence or DEFAULT_CONFIDENCE,
    )
    logger.debug(
        "AI turn %d (self %.0f%%, target %.0f%%): %s",
        context.turn_number,
        context.self_health_fraction * 100,
        context.target_health_fraction * 100,
        decision.action,
    )
    return decision
