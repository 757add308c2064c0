"""
Difficulty Scaling Tests

Performance score, coefficient clamping, derived multipliers and the
display bands.
"""

import pytest

from primordial.errors import InvalidArgumentError
from primordial.generation.difficulty import DifficultyConfig, DifficultyScaler, ScalingFactors
from primordial.state.run import RunState


def run_state(**overrides) -> RunState:
    values = dict(seed="TEST", dinosaur="deinonychus")
    values.update(overrides)
    return RunState(**values)


@pytest.fixture
def scaler():
    return DifficultyScaler()


class TestPerformance:

    def test_fresh_run(self, scaler):
        # full health only: 1.0 * 0.4
        assert scaler.calculate_performance(run_state()) == pytest.approx(0.4)

    def test_perfect_run(self, scaler):
        state = run_state(
            depth=2,
            nodes_visited=["a", "b", "c"],
            combats_won=3,
            fossils_collected=30,
        )
        assert scaler.calculate_performance(state) == pytest.approx(1.0)

    def test_components_capped(self, scaler):
        state = run_state(health=150, max_health=100, nodes_visited=["a"], combats_won=5, fossils_collected=999)
        assert scaler.calculate_performance(state) == pytest.approx(1.0)

    def test_dead_run(self, scaler):
        assert scaler.calculate_performance(run_state(health=0)) == pytest.approx(0.0)


class TestCoefficient:

    def test_floor_at_one(self, scaler):
        assert scaler.calculate_coefficient(0, 0.0) == 1.0
        assert scaler.get_current_coefficient(run_state()) == 1.0

    def test_depth_and_performance(self, scaler):
        # (1 + 10 * 0.1) * (1 + 0.5 * 0.15)
        assert scaler.calculate_coefficient(10, 1.0) == pytest.approx(2.15)

    def test_average_performance_is_neutral(self, scaler):
        assert scaler.calculate_coefficient(5, 0.5) == pytest.approx(1.5)

    def test_capped_at_max_scaling(self, scaler):
        assert scaler.calculate_coefficient(50, 1.0) == 3.0

    def test_custom_config(self):
        scaler = DifficultyScaler(DifficultyConfig(depth_multiplier=0.2, max_scaling=2.0))
        assert scaler.calculate_coefficient(3, 0.5) == pytest.approx(1.6)
        assert scaler.calculate_coefficient(20, 0.5) == 2.0

    def test_max_scaling_below_one_rejected(self):
        with pytest.raises(InvalidArgumentError):
            DifficultyConfig(max_scaling=0.5)


class TestScalingFactors:

    def test_neutral(self):
        factors = ScalingFactors.neutral()
        assert factors.coefficient == 1.0
        assert factors.enemy_health_mult == 1.0
        assert factors.enemy_attack_mult == 1.0
        assert factors.enemy_count_mod == 0
        assert factors.elite_chance == pytest.approx(0.05)

    def test_sensitivities(self):
        factors = ScalingFactors.from_coefficient(2.0, 0)
        assert factors.enemy_health_mult == pytest.approx(1.5)
        assert factors.enemy_attack_mult == pytest.approx(1.3)
        assert factors.enemy_defense_mult == pytest.approx(1.2)
        assert factors.enemy_speed_mult == pytest.approx(1.1)
        assert factors.reward_mult == pytest.approx(1.4)
        assert factors.xp_mult == pytest.approx(1.3)
        assert factors.enemy_count_mod == 2

    def test_elite_chance_depth_only(self):
        assert ScalingFactors.from_coefficient(1.0, 5).elite_chance == pytest.approx(0.2)
        assert ScalingFactors.from_coefficient(3.0, 5).elite_chance == pytest.approx(0.2)
        assert ScalingFactors.from_coefficient(1.0, 20).elite_chance == pytest.approx(0.3)

    def test_calculate_scaling_from_run(self, scaler):
        state = run_state(depth=10, nodes_visited=["a"] * 10, combats_won=10, fossils_collected=110)
        factors = scaler.calculate_scaling(state)
        assert factors.coefficient == pytest.approx(2.15)
        assert factors.enemy_health_mult == pytest.approx(1.575)
        assert factors.elite_chance == pytest.approx(0.3)


class TestApplyingScaling:

    def test_scale_enemy_stats_floors(self, scaler, make_combatant):
        base = make_combatant(attack=20, defense=10, speed=10, health=100, max_health=100)
        scaled = scaler.scale_enemy_stats(base, ScalingFactors.from_coefficient(2.0, 0))
        assert (scaled.health, scaled.max_health) == (150, 150)
        assert scaled.attack == 26
        assert scaled.defense == 12
        assert scaled.speed == 11

    def test_scale_enemy_stats_copies(self, scaler, make_combatant):
        base = make_combatant(health=100, max_health=100)
        scaler.scale_enemy_stats(base, ScalingFactors.from_coefficient(2.0, 0))
        assert base.health == 100

    def test_neutral_scaling_is_identity(self, scaler, make_combatant):
        base = make_combatant()
        scaled = scaler.scale_enemy_stats(base, ScalingFactors.neutral())
        assert (scaled.health, scaled.attack, scaled.defense, scaled.speed) == (
            base.health, base.attack, base.defense, base.speed
        )

    def test_rewards(self, scaler):
        assert scaler.scale_reward(100, ScalingFactors.neutral()) == 100
        assert scaler.scale_reward(100, ScalingFactors.from_coefficient(3.0, 0)) == 180
        assert scaler.scale_xp(50, ScalingFactors.neutral()) == 50

    def test_enemy_count(self, scaler):
        assert scaler.calculate_enemy_count(1, ScalingFactors.neutral()) == 1
        assert scaler.calculate_enemy_count(3, ScalingFactors.from_coefficient(2.0, 0)) == 5
        assert scaler.calculate_enemy_count(0, ScalingFactors.neutral()) == 1

    def test_should_spawn_elite(self, scaler, scripted):
        factors = ScalingFactors.neutral()
        assert scaler.should_spawn_elite(factors, scripted([0.04]))
        assert not scaler.should_spawn_elite(factors, scripted([0.06]))


class TestDisplay:

    @pytest.mark.parametrize("coefficient,description", [
        (1.0, "Normal"),
        (1.2, "Challenging"),
        (1.5, "Hard"),
        (1.9, "Very Hard"),
        (2.2, "Extreme"),
        (3.0, "Nightmare"),
    ])
    def test_descriptions(self, coefficient, description):
        assert DifficultyScaler.get_difficulty_description(coefficient) == description

    def test_colors(self):
        assert DifficultyScaler.get_difficulty_color(1.0) == 0x4A9D5F
        assert DifficultyScaler.get_difficulty_color(2.9) == 0x4A4A4A
