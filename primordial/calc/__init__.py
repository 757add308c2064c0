"""
Calculation utilities for combat resolution.

Contains:
- Hit detection and flee chance
- Damage calculation (pure functions, no side effects)
- Status effect application and ticking
"""

from .hit import calculate_hit_detection, calculate_flee_chance
from .damage import calculate_damage, environmental_multiplier, ENVIRONMENTAL_DAMAGE_MODIFIERS
from .status import (
    apply_status_effect,
    process_status_effects,
    apply_status_modifiers,
    StatusTickResult,
)

__all__ = [
    "calculate_hit_detection",
    "calculate_flee_chance",
    "calculate_damage",
    "environmental_multiplier",
    "ENVIRONMENTAL_DAMAGE_MODIFIERS",
    "apply_status_effect",
    "process_status_effects",
    "apply_status_modifiers",
    "StatusTickResult",
]
