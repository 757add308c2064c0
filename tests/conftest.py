"""
Shared pytest fixtures for the Primordial engine test suite.

This module provides reusable fixtures for:
- RNG with known seeds, and a scripted RNG for exact roll control
- Combatant stats
- Environments
- Content tables
"""

from typing import Iterable, List

import pytest

from primordial.content.tables import load_default_tables
from primordial.state.combat import (
    CombatantStats, CombatEnvironment, DerivedCombatStats,
    TerrainType, TimeOfDay, WeatherType,
)
from primordial.state.rng import SeededRandom


class ScriptedRandom(SeededRandom):
    """SeededRandom whose next() replays a fixed list of values."""

    def __init__(self, values: Iterable[float]):
        super().__init__(0)
        self.values: List[float] = list(values)
        self.calls = 0

    def next(self) -> float:
        if self.calls >= len(self.values):
            raise AssertionError(f"ScriptedRandom exhausted after {self.calls} draws")
        value = self.values[self.calls]
        self.calls += 1
        return value


# =============================================================================
# RNG Fixtures
# =============================================================================


@pytest.fixture
def rng_seed_42():
    """RNG initialized with seed 42 for deterministic tests."""
    return SeededRandom(42)


@pytest.fixture
def rng_abc():
    """RNG seeded with the string 'ABC' - a common test seed."""
    return SeededRandom("ABC")


@pytest.fixture
def scripted():
    """Factory for ScriptedRandom instances."""
    return ScriptedRandom


# =============================================================================
# Combatant Fixtures
# =============================================================================


def make_stats(**overrides) -> CombatantStats:
    derived = overrides.pop("derived", None) or DerivedCombatStats()
    values = dict(
        name="Test",
        attack=20,
        defense=5,
        speed=10,
        health=100,
        max_health=100,
        derived=derived,
    )
    values.update(overrides)
    return CombatantStats(**values)


@pytest.fixture
def attacker():
    """Plain attacker: attack 20, defaults everywhere else."""
    return make_stats(name="Attacker")


@pytest.fixture
def defender():
    """Plain defender: defense 5, 100 health."""
    return make_stats(name="Defender")


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture
def clear_day():
    return CombatEnvironment()


@pytest.fixture
def foggy_night():
    return CombatEnvironment(
        weather=WeatherType.FOG,
        terrain=TerrainType.DENSE_VEGETATION,
        time_of_day=TimeOfDay.NIGHT,
        visibility=40,
    )


# =============================================================================
# Content Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def tables():
    """Built-in content tables (validated)."""
    return load_default_tables()


@pytest.fixture
def make_combatant():
    """Factory for CombatantStats with keyword overrides."""
    return make_stats
