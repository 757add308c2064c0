"""
Combat Execution - Runs one encounter between the player and an adversary.

Combat Flow:
1. Copy both combatants (the runner owns its copies), resolve traits,
   fire COMBAT_START traits
2. Each round the player acts first; the adversary answers if the fight is
   still on
3. Each turn:
   - start: tick status effects, regenerate stamina/health, TURN_START traits
   - skipped turn if stunned/frozen
   - resolve the chosen action (player choice or behavior tree decision)
   - end: cooldowns tick down, the used ability's cooldown is set
4. After every turn, check victory/defeat/flee
5. Past max_turns the encounter disengages as FLED

Attack resolution per hit: hit detection -> damage -> defend halving ->
damage reduction -> life steal -> thorns -> status applications -> ON_HIT
traits.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from ..errors import InvalidArgumentError
from ..calc.damage import calculate_damage
from ..calc.hit import calculate_flee_chance, calculate_hit_detection
from ..calc.status import apply_status_effect, apply_status_modifiers, process_status_effects
from ..content.abilities import BASIC_ACTIONS, Ability, ActionKind, StatusApplication
from ..content.enemies_ai import AIContext, AIHistoryEntry, create_enemy_ai, execute_ai
from ..content.tables import ContentTables
from ..content.traits import Trait, TraitType
from ..state.combat import (
    AdversaryTier, BodyPart, CombatantStats, CombatEnvironment,
    StatusEffectInstance, StatusEffects, StatusEffectType,
)
from ..state.rng import SeededRandom

logger = logging.getLogger(__name__)

__all__ = [
    "CombatOutcome",
    "CombatConfig",
    "ActionResult",
    "CombatResult",
    "CombatRunner",
    "greedy_policy",
    "Policy",
]


# =============================================================================
# Results and Config
# =============================================================================

class CombatOutcome(Enum):
    VICTORY = "victory"
    DEFEAT = "defeat"
    FLED = "fled"


@dataclass
class CombatConfig:
    """Turn loop tuning."""
    max_turns: int = 100
    stamina_regen: int = 10
    history_window: int = 5
    defend_damage_factor: float = 0.5
    heal_fraction: float = 0.2

    def __post_init__(self):
        if self.max_turns < 1:
            raise InvalidArgumentError(f"max_turns must be at least 1, got {self.max_turns}")
        if self.history_window < 1:
            raise InvalidArgumentError(f"history_window must be at least 1, got {self.history_window}")
        if not 0 <= self.defend_damage_factor <= 1:
            raise InvalidArgumentError(
                f"defend_damage_factor must be in [0, 1], got {self.defend_damage_factor}"
            )


@dataclass
class ActionResult:
    """What happened on one combatant's turn."""
    actor: str
    action: str
    damage: int = 0
    healing: int = 0
    status_effects_applied: List[StatusEffectType] = field(default_factory=list)
    critical: bool = False
    missed: bool = False
    blocked: bool = False
    evaded: bool = False
    skipped: bool = False
    fled: bool = False
    messages: List[str] = field(default_factory=list)


@dataclass
class CombatResult:
    """Result of a completed combat."""
    outcome: CombatOutcome
    turns: int
    player_health: int
    player_max_health: int
    adversary_health: int
    damage_dealt: int = 0
    damage_taken: int = 0
    log: List[ActionResult] = field(default_factory=list)
    adversary_fled: bool = False

    @property
    def victory(self) -> bool:
        return self.outcome == CombatOutcome.VICTORY

    @property
    def health_fraction_remaining(self) -> float:
        return self.player_health / self.player_max_health if self.player_max_health > 0 else 0.0


PLAYER = "player"
ADVERSARY = "adversary"

Policy = Callable[["CombatRunner"], Union[str, Tuple[str, Optional[BodyPart]]]]


@dataclass
class _Combatant:
    side: str
    stats: CombatantStats
    effects: StatusEffects
    traits: List[Trait]
    cooldowns: Dict[str, int] = field(default_factory=dict)
    defending: bool = False

    def traits_of(self, trait_type: TraitType) -> List[Trait]:
        return [t for t in self.traits if t.trait_type == trait_type]


# =============================================================================
# Combat Runner
# =============================================================================

class CombatRunner:
    """
    Runs one encounter turn by turn.

    Usage:
        runner = CombatRunner(player, adversary, environment, "elite", rng, tables)
        result = runner.run(greedy_policy)

    Or round by round:
        while not runner.is_over:
            runner.play_round(runner.available_actions()[0])
        result = runner.result()
    """

    def __init__(
        self,
        player: CombatantStats,
        adversary: CombatantStats,
        environment: CombatEnvironment,
        tier: Union[AdversaryTier, str],
        rng: SeededRandom,
        tables: ContentTables,
        config: Optional[CombatConfig] = None,
    ):
        self.environment = environment
        self.tier = AdversaryTier.parse(tier)
        self.tree = create_enemy_ai(self.tier)
        self.rng = rng
        self.tables = tables
        self.config = config or CombatConfig()

        self.player = self._enter(PLAYER, player)
        self.adversary = self._enter(ADVERSARY, adversary)

        self.turn = 0
        self.outcome: Optional[CombatOutcome] = None
        self.adversary_fled = False
        self.damage_dealt = 0
        self.damage_taken = 0
        self.log: List[ActionResult] = []
        self.history: List[AIHistoryEntry] = []

        for owner, opponent in ((self.player, self.adversary), (self.adversary, self.player)):
            for trait in owner.traits_of(TraitType.COMBAT_START):
                messages = self._apply_trait(trait, owner, opponent)
                for message in messages:
                    logger.debug("%s: %s", owner.stats.name, message)

    def _enter(self, side: str, stats: CombatantStats) -> _Combatant:
        own = stats.copy()
        traits = [self.tables.get_trait(trait_id) for trait_id in own.traits]
        effects: StatusEffects = {
            effect: StatusEffectInstance(effect_type=effect)
            for effect in sorted(own.active_status_effects, key=lambda e: e.value)
        }
        return _Combatant(side=side, stats=own, effects=effects, traits=traits)

    # ============ QUERIES ============

    @property
    def is_over(self) -> bool:
        return self.outcome is not None

    def effective_stats(self, combatant: _Combatant) -> CombatantStats:
        """Stats with active status modifiers applied."""
        return apply_status_modifiers(combatant.stats, combatant.effects)

    def _known_actions(self, combatant: _Combatant) -> List[str]:
        actions = list(BASIC_ACTIONS)
        for ability_id in combatant.stats.abilities:
            if ability_id not in actions:
                actions.append(ability_id)
        return actions

    def _can_use(self, combatant: _Combatant, ability: Ability) -> bool:
        return (
            combatant.stats.stamina >= ability.stamina_cost
            and combatant.cooldowns.get(ability.id, 0) <= 0
        )

    def available_actions(self) -> List[str]:
        """Player action ids that are affordable and off cooldown."""
        return [
            action_id for action_id in self._known_actions(self.player)
            if self._can_use(self.player, self.tables.get_ability(action_id))
        ]

    def _adversary_usable(self) -> List[str]:
        return [
            action_id for action_id in self._known_actions(self.adversary)
            if self._can_use(self.adversary, self.tables.get_ability(action_id))
        ]

    def ai_context(self) -> AIContext:
        """The adversary's view of the fight."""
        own = self.effective_stats(self.adversary)
        target = self.effective_stats(self.player)
        return AIContext(
            self_health=own.health,
            self_max_health=own.max_health,
            target_health=target.health,
            target_max_health=target.max_health,
            self_stamina=own.stamina,
            self_status_effects=frozenset(self.adversary.effects),
            target_status_effects=frozenset(self.player.effects),
            turn_number=max(1, self.turn),
            environment=self.environment,
            available_abilities=tuple(self._adversary_usable()),
            ability_cooldowns=dict(self.adversary.cooldowns),
            combat_history=list(self.history),
        )

    # ============ TURNS ============

    def _ensure_active(self) -> None:
        if self.outcome is not None:
            raise InvalidArgumentError(f"Combat is already over ({self.outcome.value})")

    def player_turn(self, action_id: str, target_body_part: Optional[BodyPart] = None) -> ActionResult:
        """Resolve the player's turn with the chosen action."""
        self._ensure_active()
        if action_id not in self.available_actions():
            raise InvalidArgumentError(
                f"Action {action_id!r} is not available (choices: {', '.join(self.available_actions())})"
            )

        result = self._take_turn(self.player, self.adversary, action_id, target_body_part)

        if result.skipped:
            entry_result = "miss"
        elif result.critical:
            entry_result = "critical"
        elif result.damage > 0:
            entry_result = "hit"
        else:
            entry_result = "miss"
        self.history.append(AIHistoryEntry(
            turn=max(1, self.turn),
            player_action="skipped" if result.skipped else action_id,
            result=entry_result,
            damage=result.damage,
        ))
        del self.history[:-self.config.history_window]
        return result

    def adversary_turn(self) -> ActionResult:
        """Resolve the adversary's turn; its behavior tree picks the action."""
        self._ensure_active()
        return self._take_turn(self.adversary, self.player, None, None)

    def _take_turn(
        self,
        actor: _Combatant,
        target: _Combatant,
        action_id: Optional[str],
        target_body_part: Optional[BodyPart],
    ) -> ActionResult:
        result = ActionResult(actor=actor.side, action=action_id or "")
        skipped = self._start_turn(actor, target, result)

        if actor.stats.is_dead:
            result.skipped = True
        elif skipped:
            result.skipped = True
        else:
            if action_id is None:
                action_id = self._decide(result)
                result.action = action_id
            ability = self.tables.get_ability(action_id)
            self._execute(actor, target, ability, target_body_part, result)
            actor.stats.stamina -= ability.stamina_cost

        self._end_turn(actor, None if result.skipped else result.action)
        self._check_outcome()

        self.log.append(result)
        logger.debug(
            "Turn %d %s %s: dmg=%d heal=%d%s%s",
            self.turn, actor.side, result.action or "-", result.damage, result.healing,
            " skipped" if result.skipped else "", " crit" if result.critical else "",
        )
        return result

    def _decide(self, result: ActionResult) -> str:
        decision = execute_ai(self.tree, self.ai_context(), self.rng)
        usable = self._adversary_usable()
        if decision.action in usable:
            return decision.action
        result.messages.append(f"{self.adversary.stats.name} cannot {decision.action}; attacks instead")
        return "attack"

    def _start_turn(self, actor: _Combatant, opponent: _Combatant, result: ActionResult) -> bool:
        """Turn-start upkeep. Returns True if the turn is forfeit."""
        actor.defending = False

        tick = process_status_effects(actor.effects)
        result.messages.extend(tick.messages)
        if tick.damage:
            self._damage(actor, tick.damage)
        if tick.healing:
            actor.stats.heal(tick.healing)

        regen = self.config.stamina_regen + int(actor.stats.derived.stamina_regen)
        actor.stats.stamina = min(actor.stats.max_stamina, actor.stats.stamina + regen)
        if actor.stats.derived.health_regen:
            actor.stats.heal(int(actor.stats.derived.health_regen))

        for trait in actor.traits_of(TraitType.TURN_START):
            result.messages.extend(self._apply_trait(trait, actor, opponent))

        actor.stats.active_status_effects = set(actor.effects)
        return tick.skipped

    def _end_turn(self, actor: _Combatant, used: Optional[str]) -> None:
        for ability_id in list(actor.cooldowns):
            actor.cooldowns[ability_id] -= 1
            if actor.cooldowns[ability_id] <= 0:
                del actor.cooldowns[ability_id]
        if used is not None:
            cooldown = self.tables.get_ability(used).cooldown
            if cooldown > 0:
                actor.cooldowns[used] = cooldown
        actor.stats.active_status_effects = set(actor.effects)

    # ============ ACTIONS ============

    def _execute(
        self,
        actor: _Combatant,
        target: _Combatant,
        ability: Ability,
        target_body_part: Optional[BodyPart],
        result: ActionResult,
    ) -> None:
        if ability.kind == ActionKind.ATTACK:
            self._attack(actor, target, ability, target_body_part, result)
        elif ability.kind == ActionKind.DEFEND:
            actor.defending = True
            result.messages.append(f"{actor.stats.name} braces for impact")
        elif ability.kind == ActionKind.HEAL:
            fraction = ability.heal_fraction or self.config.heal_fraction
            result.healing = actor.stats.heal(math.floor(actor.stats.max_health * fraction))
            result.messages.append(f"{actor.stats.name} recovers {result.healing} health")
        elif ability.kind == ActionKind.BUFF:
            self._apply_statuses(ability.status_effects, actor, target, result)
        elif ability.kind == ActionKind.FLEE:
            self._flee(actor, target, result)

    def _attack(
        self,
        actor: _Combatant,
        target: _Combatant,
        ability: Ability,
        target_body_part: Optional[BodyPart],
        result: ActionResult,
    ) -> None:
        part = target_body_part or ability.target_body_part
        landed = 0

        for _ in range(ability.hits):
            if target.stats.is_dead:
                break
            attacker = self.effective_stats(actor)
            defender = self.effective_stats(target)

            hit = calculate_hit_detection(attacker, defender, self.environment, self.rng, part)
            if not hit.hit:
                result.blocked = result.blocked or hit.blocked
                result.evaded = result.evaded or hit.evaded
                if hit.blocked:
                    result.messages.append(f"{target.stats.name} blocks {ability.name}")
                else:
                    result.messages.append(f"{ability.name} misses")
                continue

            landed += 1
            damage = calculate_damage(
                attacker, defender, ability.damage_multiplier, ability.damage_type,
                hit, self.environment,
            )
            amount = damage.final_damage
            if target.defending:
                amount = max(1, math.floor(amount * self.config.defend_damage_factor))
            reduction = defender.derived.damage_reduction
            if reduction:
                amount = max(1, math.floor(amount * (1 - reduction / 100)))

            lost = self._damage(target, amount)
            result.damage += lost
            result.critical = result.critical or hit.critical
            result.messages.append(
                f"{ability.name} hits {hit.body_part_hit.value} for {lost}"
                + (" (critical)" if hit.critical else "")
            )

            if attacker.derived.life_steal and lost:
                stolen = actor.stats.heal(math.floor(lost * attacker.derived.life_steal / 100))
                result.healing += stolen
            if defender.derived.thorns > 0:
                self._damage(actor, int(defender.derived.thorns))
                result.messages.append(f"{actor.stats.name} takes {int(defender.derived.thorns)} thorns damage")

            self._apply_statuses(
                [s for s in ability.status_effects if not s.on_self], actor, target, result,
            )
            for trait in actor.traits_of(TraitType.ON_HIT):
                result.messages.extend(self._apply_trait(trait, actor, target))

        result.missed = landed == 0
        self._apply_statuses([s for s in ability.status_effects if s.on_self], actor, target, result)

    def _flee(self, actor: _Combatant, target: _Combatant, result: ActionResult) -> None:
        chance = calculate_flee_chance(
            self.effective_stats(actor).speed,
            self.effective_stats(target).speed,
            self.environment.terrain,
        )
        if self.rng.next() * 100 < chance:
            result.fled = True
            result.messages.append(f"{actor.stats.name} escapes ({chance:.0f}% chance)")
            if actor.side == PLAYER:
                self.outcome = CombatOutcome.FLED
            else:
                self.adversary_fled = True
                self.outcome = CombatOutcome.VICTORY
        else:
            result.messages.append(f"{actor.stats.name} fails to escape ({chance:.0f}% chance)")

    # ============ EFFECTS ============

    def _damage(self, combatant: _Combatant, amount: int) -> int:
        lost = combatant.stats.take_damage(amount)
        if combatant.side == PLAYER:
            self.damage_taken += lost
        else:
            self.damage_dealt += lost
        return lost

    def _apply_statuses(
        self,
        applications: Iterable[StatusApplication],
        actor: _Combatant,
        target: _Combatant,
        result: ActionResult,
    ) -> None:
        for app in applications:
            if app.chance < 1 and not self.rng.chance(app.chance):
                continue
            recipient = actor if app.on_self else target
            apply_status_effect(recipient.effects, app.effect, app.duration, app.stackable, app.max_stacks)
            recipient.stats.active_status_effects = set(recipient.effects)
            result.status_effects_applied.append(app.effect)
            result.messages.append(f"{recipient.stats.name} is {app.effect.value}")

    def _apply_trait(self, trait: Trait, owner: _Combatant, opponent: _Combatant) -> List[str]:
        """Apply a triggered trait's effects. Returns log messages."""
        messages = []
        for effect in trait.effects:
            if effect.status_effect is not None:
                if effect.chance < 1 and not self.rng.chance(effect.chance):
                    continue
                recipient = owner if effect.on_self else opponent
                apply_status_effect(recipient.effects, effect.status_effect, effect.duration)
                recipient.stats.active_status_effects = set(recipient.effects)
                messages.append(f"{trait.name}: {recipient.stats.name} is {effect.status_effect.value}")
            elif effect.stat == "health":
                gained = owner.stats.heal(int(effect.value))
                if gained:
                    messages.append(f"{trait.name}: {owner.stats.name} recovers {gained} health")
            elif effect.stat == "stamina":
                owner.stats.stamina = min(owner.stats.max_stamina, owner.stats.stamina + int(effect.value))
        return messages

    # ============ OUTCOME ============

    def _check_outcome(self) -> None:
        if self.outcome is not None:
            return
        if self.adversary.stats.is_dead:
            self.outcome = CombatOutcome.VICTORY
        elif self.player.stats.is_dead:
            self.outcome = CombatOutcome.DEFEAT

    def play_round(self, action_id: str, target_body_part: Optional[BodyPart] = None) -> List[ActionResult]:
        """One round: the player acts, then the adversary if the fight goes on."""
        self._ensure_active()
        if action_id not in self.available_actions():
            raise InvalidArgumentError(f"Action {action_id!r} is not available")

        self.turn += 1
        results = [self.player_turn(action_id, target_body_part)]
        if self.outcome is None:
            results.append(self.adversary_turn())

        if self.outcome is None and self.turn >= self.config.max_turns:
            logger.info("Combat hit the %d turn limit; disengaging", self.config.max_turns)
            self.outcome = CombatOutcome.FLED
        if self.outcome is not None:
            logger.info(
                "Combat over after %d turns: %s (player %d/%d, adversary %d/%d)",
                self.turn, self.outcome.value,
                self.player.stats.health, self.player.stats.max_health,
                self.adversary.stats.health, self.adversary.stats.max_health,
            )
        return results

    def run(self, policy: Optional[Policy] = None) -> CombatResult:
        """Play rounds until the combat ends."""
        policy = policy or greedy_policy
        while self.outcome is None:
            choice = policy(self)
            if isinstance(choice, tuple):
                action_id, part = choice
            else:
                action_id, part = choice, None
            self.play_round(action_id, part)
        return self.result()

    def result(self) -> CombatResult:
        if self.outcome is None:
            raise InvalidArgumentError("Combat is still in progress")
        return CombatResult(
            outcome=self.outcome,
            turns=self.turn,
            player_health=self.player.stats.health,
            player_max_health=self.player.stats.max_health,
            adversary_health=self.adversary.stats.health,
            damage_dealt=self.damage_dealt,
            damage_taken=self.damage_taken,
            log=list(self.log),
            adversary_fled=self.adversary_fled,
        )


# =============================================================================
# Policies
# =============================================================================

LOW_HEALTH_THRESHOLD = 0.3


def greedy_policy(runner: CombatRunner) -> str:
    """
    Heal when low, otherwise the attack with the highest expected damage.

    Never flees.
    """
    available = runner.available_actions()
    if runner.player.stats.health_fraction < LOW_HEALTH_THRESHOLD and "heal" in available:
        return "heal"

    best_id = "attack"
    best_value = runner.tables.get_ability("attack").expected_multiplier
    for action_id in available:
        value = runner.tables.get_ability(action_id).expected_multiplier
        if value > best_value:
            best_id, best_value = action_id, value
    return best_id
