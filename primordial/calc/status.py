"""
Status Effects - Application, stacking and per-turn ticking.

Effects live in a mapping of StatusEffectType -> StatusEffectInstance owned
by the combatant's session. Both operations mutate that mapping in place.

Tick table (per stack):
- bleeding: 5 damage
- poisoned: 3 damage
- burning: 4 damage
- regenerating: 5 healing
- stunned / frozen: turn is skipped
"""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Mapping

from ..errors import InvalidArgumentError
from ..state.combat import (
    CombatantStats, StatusEffectInstance, StatusEffects, StatusEffectType,
)

__all__ = [
    "StatusTickResult",
    "apply_status_effect",
    "process_status_effects",
    "apply_status_modifiers",
    "TICK_DAMAGE",
    "TICK_HEALING",
    "SKIP_TURN_EFFECTS",
    "STATUS_STAT_MODIFIERS",
    "DEFAULT_MAX_STACKS",
]


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_MAX_STACKS = 3

TICK_DAMAGE: Dict[StatusEffectType, int] = {
    StatusEffectType.BLEEDING: 5,
    StatusEffectType.POISONED: 3,
    StatusEffectType.BURNING: 4,
}

TICK_HEALING: Dict[StatusEffectType, int] = {
    StatusEffectType.REGENERATING: 5,
}

SKIP_TURN_EFFECTS = frozenset({StatusEffectType.STUNNED, StatusEffectType.FROZEN})

# effect -> (stat, operation, amount); "mult" multiplies, "add" adds
STATUS_STAT_MODIFIERS: Dict[StatusEffectType, tuple] = {
    StatusEffectType.ENRAGED: ("attack", "mult", 1.25),
    StatusEffectType.FORTIFIED: ("defense", "mult", 1.5),
    StatusEffectType.HIDDEN: ("evasion", "add", 25),
    StatusEffectType.EXHAUSTED: ("speed", "mult", 0.75),
}

_TICK_VERBS = {
    StatusEffectType.BLEEDING: "Bleeding",
    StatusEffectType.POISONED: "Poisoned",
    StatusEffectType.BURNING: "Burning",
}


@dataclass
class StatusTickResult:
    """Net effect of one turn-start tick."""
    damage: int = 0
    healing: int = 0
    skipped: bool = False
    messages: List[str] = field(default_factory=list)


# =============================================================================
# APPLICATION
# =============================================================================

def apply_status_effect(
    effects: StatusEffects,
    effect: StatusEffectType,
    duration: int,
    stackable: bool = False,
    max_stacks: int = DEFAULT_MAX_STACKS,
) -> StatusEffectInstance:
    """
    Add or refresh an effect in place.

    Existing stackable effects gain a stack (up to max_stacks); every existing
    effect takes the longer of its current and the new duration. New effects
    start at one stack. Returns the instance now in the mapping.
    """
    if duration <= 0:
        raise InvalidArgumentError(f"Status duration must be positive, got {duration}")
    if max_stacks < 1:
        raise InvalidArgumentError(f"max_stacks must be at least 1, got {max_stacks}")

    existing = effects.get(effect)
    if existing is not None:
        if stackable and existing.stacks < max_stacks:
            existing.stacks += 1
        existing.duration = max(existing.duration, duration)
        return existing

    instance = StatusEffectInstance(effect_type=effect, stacks=1, duration=duration)
    effects[effect] = instance
    return instance


# =============================================================================
# TICKING
# =============================================================================

def process_status_effects(effects: StatusEffects) -> StatusTickResult:
    """
    Tick every effect once, in insertion order.

    Call once per combatant per turn, before it acts. Durations drop by one;
    effects reaching 0 are removed from the mapping in this same call.
    """
    result = StatusTickResult()
    expired: List[StatusEffectType] = []

    for effect, data in effects.items():
        if effect in TICK_DAMAGE:
            amount = TICK_DAMAGE[effect] * data.stacks
            result.damage += amount
            result.messages.append(f"{_TICK_VERBS[effect]} for {amount} damage")
        elif effect in TICK_HEALING:
            amount = TICK_HEALING[effect] * data.stacks
            result.healing += amount
            result.messages.append(f"Regenerating {amount} HP")
        elif effect in SKIP_TURN_EFFECTS:
            result.skipped = True
            result.messages.append(f"{effect.value}! Cannot act this turn.")

        data.duration -= 1
        if data.duration <= 0:
            expired.append(effect)
            result.messages.append(f"{effect.value} wore off")

    for effect in expired:
        del effects[effect]

    return result


# =============================================================================
# STAT MODIFIERS
# =============================================================================

def apply_status_modifiers(stats: CombatantStats, effects: Mapping[StatusEffectType, StatusEffectInstance]) -> CombatantStats:
    """
    Copy of stats with status-driven stat changes applied.

    active_status_effects on the copy is synchronized with the mapping.
    Integer stats are floored after multiplying.
    """
    modified = stats.copy()
    modified.active_status_effects = set(effects)

    for effect in effects:
        if effect not in STATUS_STAT_MODIFIERS:
            continue
        stat, op, amount = STATUS_STAT_MODIFIERS[effect]
        if stat == "evasion":
            current = modified.derived.evasion
            value = current * amount if op == "mult" else current + amount
            modified.derived = replace(modified.derived, evasion=value)
        else:
            current = getattr(modified, stat)
            value = current * amount if op == "mult" else current + amount
            setattr(modified, stat, int(value))

    return modified
