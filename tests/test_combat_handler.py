"""
Combat runner tests.

Tests cover:
1. Turn order and victory/defeat/flee outcomes
2. Defend halving, damage reduction, life steal and thorns
3. Cooldowns, stamina and action availability
4. Status ticks and skipped turns
5. COMBAT_START and ON_HIT traits
6. Adversary decisions, including the attack fallback
7. The greedy policy and full seeded runs

Draws are scripted. An untargeted attack with no block chance takes two
draws (hit roll, critical roll): 0.1 hits, 0.99 does not crit, 0.95 misses
(95 > 90 base accuracy).
"""

import pytest

from primordial.errors import InvalidArgumentError
from primordial.generation.encounters import create_adversary_combatant, create_player_combatant
from primordial.handlers.combat import (
    CombatConfig, CombatOutcome, CombatRunner, greedy_policy,
)
from primordial.state.combat import (
    BodyPart, CombatEnvironment, DerivedCombatStats, StatusEffectType, TerrainType,
)
from primordial.state.rng import SeededRandom

HIT = [0.1, 0.99]


@pytest.fixture
def fight(tables, make_combatant, scripted):
    """Build a runner: fight(draws, player={...}, adversary={...}, tier=..., config=...)."""
    def build(draws, player=None, adversary=None, tier="basic", environment=None, config=None):
        player_stats = make_combatant(**dict({"name": "Player"}, **(player or {})))
        adversary_stats = make_combatant(**dict({"name": "Adversary", "speed": 5}, **(adversary or {})))
        return CombatRunner(
            player_stats, adversary_stats, environment or CombatEnvironment(),
            tier, scripted(draws), tables, config,
        )
    return build


class TestOutcomes:

    def test_player_kills_adversary(self, fight):
        runner = fight(HIT, adversary={"health": 5})
        results = runner.play_round("attack")
        assert len(results) == 1
        result = runner.result()
        assert result.outcome == CombatOutcome.VICTORY
        assert result.victory
        assert result.turns == 1
        assert result.damage_dealt == 5
        assert result.adversary_health == 0
        assert runner.history[-1].result == "hit"
        assert runner.rng.calls == 2

    def test_adversary_answers_after_player(self, fight):
        # target below 30%: the finisher needs no decision draw; 25 halved to 12
        runner = fight(
            HIT,
            player={"health": 5},
            adversary={"speed": 15, "abilities": ["special_attack"]},
        )
        results = runner.play_round("defend")
        assert [r.actor for r in results] == ["player", "adversary"]
        assert results[1].action == "special_attack"
        result = runner.result()
        assert result.outcome == CombatOutcome.DEFEAT
        assert result.damage_taken == 5
        assert result.health_fraction_remaining == 0.0
        assert runner.adversary.stats.stamina == 35
        assert runner.adversary.cooldowns == {"special_attack": 2}

    def test_player_acts_first_regardless_of_speed(self, fight):
        runner = fight(HIT, player={"speed": 5}, adversary={"health": 5, "speed": 20})
        results = runner.play_round("attack")
        assert [r.actor for r in results] == ["player"]
        assert runner.result().outcome == CombatOutcome.VICTORY
        assert runner.rng.calls == 2

    def test_faster_adversary_cannot_preempt(self, fight):
        # player at 5 health would die to a first strike; it kills first instead
        runner = fight(
            HIT,
            player={"health": 5, "speed": 5},
            adversary={"health": 5, "speed": 20, "abilities": ["special_attack"]},
        )
        runner.play_round("attack")
        result = runner.result()
        assert result.outcome == CombatOutcome.VICTORY
        assert result.player_health == 5
        assert result.damage_taken == 0

    def test_bleeding_tick_kills(self, fight):
        runner = fight([], adversary={"health": 3, "active_status_effects": {StatusEffectType.BLEEDING}})
        results = runner.play_round("defend")
        assert results[1].skipped
        assert "Bleeding for 5 damage" in results[1].messages
        result = runner.result()
        assert result.outcome == CombatOutcome.VICTORY
        assert result.damage_dealt == 3

    def test_turn_limit_disengages(self, fight):
        # adversary draws 90: defend
        runner = fight([0.9], config=CombatConfig(max_turns=1))
        runner.play_round("defend")
        assert runner.result().outcome == CombatOutcome.FLED
        assert not runner.result().adversary_fled

    def test_result_while_in_progress(self, fight):
        runner = fight([])
        with pytest.raises(InvalidArgumentError):
            runner.result()

    def test_acting_after_end(self, fight):
        runner = fight(HIT, adversary={"health": 5})
        runner.play_round("attack")
        with pytest.raises(InvalidArgumentError):
            runner.play_round("attack")
        with pytest.raises(InvalidArgumentError):
            runner.adversary_turn()


class TestFlee:

    def test_player_escapes(self, fight):
        # speed tie on open ground: 40%
        runner = fight([0.0], adversary={"speed": 10})
        results = runner.play_round("flee")
        assert results[0].fled
        assert runner.result().outcome == CombatOutcome.FLED

    def test_player_fails_to_escape(self, fight):
        runner = fight([0.5], adversary={"speed": 10})
        result = runner.player_turn("flee")
        assert not result.fled
        assert not runner.is_over
        assert "Player fails to escape (40% chance)" in result.messages

    def test_adversary_escape_is_victory(self, fight):
        # player defends; 10% health: draw 0.1 picks flee; 50 + 25 - 10 = 65% to escape
        runner = fight([0.1, 0.0], adversary={"health": 10, "speed": 15})
        results = runner.play_round("defend")
        assert [r.action for r in results] == ["defend", "flee"]
        result = runner.result()
        assert result.outcome == CombatOutcome.VICTORY
        assert result.adversary_fled
        assert result.adversary_health == 10

    def test_dense_cover_helps(self, fight):
        env = CombatEnvironment(terrain=TerrainType.DENSE_VEGETATION)
        runner = fight([0.59], adversary={"speed": 10}, environment=env)
        assert runner.player_turn("flee").fled


class TestDamageModifiers:

    def test_defend_halves(self, fight):
        # player defends; adversary draws 10 -> attack, hits for 15, halved to 7
        runner = fight([0.1] + HIT)
        runner.play_round("defend")
        assert runner.player.stats.health == 93
        assert runner.damage_taken == 7

    def test_defending_resets_next_turn(self, fight):
        runner = fight([0.1] + HIT + HIT + [0.1] + HIT)
        runner.play_round("defend")
        assert runner.player.defending
        runner.play_round("attack")
        assert not runner.player.defending
        assert runner.player.stats.health == 93 - 15

    def test_damage_reduction(self, fight):
        # floor(15 * 0.5)
        runner = fight(HIT, adversary={"derived": DerivedCombatStats(damage_reduction=50)})
        assert runner.player_turn("attack").damage == 7

    def test_life_steal(self, fight):
        runner = fight(HIT, player={"health": 50, "derived": DerivedCombatStats(life_steal=50)})
        result = runner.player_turn("attack")
        assert result.damage == 15
        assert result.healing == 7
        assert runner.player.stats.health == 57

    def test_thorns(self, fight):
        runner = fight(HIT, adversary={"derived": DerivedCombatStats(thorns=3)})
        result = runner.player_turn("attack")
        assert runner.player.stats.health == 97
        assert runner.damage_taken == 3
        assert "Player takes 3 thorns damage" in result.messages

    def test_counter_chance_is_inert(self, fight):
        runner = fight(HIT, adversary={"derived": DerivedCombatStats(counter_chance=100)})
        result = runner.player_turn("attack")
        assert result.damage == 15
        assert runner.player.stats.health == 100
        assert runner.damage_taken == 0
        assert runner.rng.calls == 2

    def test_block(self, fight):
        runner = fight([0.1, 0.2], adversary={"derived": DerivedCombatStats(block_chance=50)})
        result = runner.player_turn("attack")
        assert result.blocked
        assert result.missed
        assert result.damage == 0
        assert runner.history[-1].result == "miss"
        assert runner.rng.calls == 2

    def test_multi_hit(self, fight):
        # floor(30 * 0.35 - 5) = 5 per hit
        runner = fight(HIT * 4, player={"attack": 30, "abilities": ["swarm"]})
        result = runner.player_turn("swarm")
        assert result.damage == 20
        assert runner.adversary.stats.health == 80

    def test_aimed_body_part(self, fight):
        # head: 90 - 20 = 70 accuracy, 20 * 1.5 - 5 = 25
        runner = fight(HIT)
        result = runner.player_turn("attack", BodyPart.HEAD)
        assert result.damage == 25
        assert "Attack hits head for 25" in result.messages


class TestAbilities:

    def test_unavailable_action(self, fight):
        runner = fight([])
        with pytest.raises(InvalidArgumentError):
            runner.play_round("heal")
        runner = fight([], player={"stamina": 10, "abilities": ["special_attack"]})
        assert "special_attack" not in runner.available_actions()
        with pytest.raises(InvalidArgumentError):
            runner.player_turn("special_attack")

    def test_cooldown(self, fight):
        runner = fight(HIT * 2, player={"abilities": ["special_attack"]}, adversary={"health": 1000, "max_health": 1000})
        runner.player_turn("special_attack")
        assert "special_attack" not in runner.available_actions()
        runner.player_turn("attack")
        assert "special_attack" not in runner.available_actions()
        runner.player_turn("defend")
        assert "special_attack" in runner.available_actions()

    def test_stamina_cost_and_regen(self, fight):
        runner = fight(HIT, player={"abilities": ["special_attack"]}, adversary={"health": 1000, "max_health": 1000})
        runner.player_turn("special_attack")
        assert runner.player.stats.stamina == 35
        runner.player_turn("defend")
        assert runner.player.stats.stamina == 45

    def test_bleeding_application(self, fight):
        # 20 * 1.2 - 5 = 19, then 50 < 60 lands the bleed
        runner = fight(HIT + [0.5], player={"abilities": ["sickle_claw"]})
        result = runner.player_turn("sickle_claw")
        assert result.damage == 19
        assert result.status_effects_applied == [StatusEffectType.BLEEDING]
        bleed = runner.adversary.effects[StatusEffectType.BLEEDING]
        assert (bleed.stacks, bleed.duration) == (1, 3)

    def test_bleed_roll_fails(self, fight):
        runner = fight(HIT + [0.7], player={"abilities": ["sickle_claw"]})
        result = runner.player_turn("sickle_claw")
        assert result.status_effects_applied == []
        assert StatusEffectType.BLEEDING not in runner.adversary.effects

    def test_heal(self, fight):
        runner = fight([], player={"health": 50, "abilities": ["heal"]})
        result = runner.player_turn("heal")
        assert result.healing == 20
        assert runner.player.stats.health == 70

    def test_buff_on_self(self, fight):
        runner = fight([], player={"abilities": ["armor_up"]})
        runner.player_turn("armor_up")
        assert StatusEffectType.FORTIFIED in runner.player.effects
        # floor(5 * 1.5)
        assert runner.effective_stats(runner.player).defense == 7


class TestStatusTurns:

    def test_stunned_player_skips(self, fight):
        # adversary draws 90: defend
        runner = fight([0.9], player={"active_status_effects": {StatusEffectType.STUNNED}})
        results = runner.play_round("attack")
        assert results[0].skipped
        assert "stunned! Cannot act this turn." in results[0].messages
        assert runner.history[-1].player_action == "skipped"
        assert runner.history[-1].result == "miss"
        assert StatusEffectType.STUNNED not in runner.player.effects
        assert runner.adversary.stats.health == 100

    def test_history_window(self, fight):
        runner = fight([])
        for _ in range(7):
            runner.player_turn("defend")
        assert len(runner.history) == 5


class TestTraits:

    def test_ambush_hides_at_start(self, tables, make_combatant, scripted):
        rng = scripted([])
        runner = CombatRunner(
            make_combatant(traits=["ambush"]), make_combatant(), CombatEnvironment(), "basic", rng, tables,
        )
        assert runner.player.effects[StatusEffectType.HIDDEN].duration == 2
        assert runner.effective_stats(runner.player).derived.evasion == 25
        assert rng.calls == 0

    @pytest.mark.parametrize("draw,exhausted", [(0.1, True), (0.9, False)])
    def test_intimidate(self, tables, make_combatant, scripted, draw, exhausted):
        runner = CombatRunner(
            make_combatant(speed=12), make_combatant(traits=["intimidate"]),
            CombatEnvironment(), "basic", scripted([draw]), tables,
        )
        assert (StatusEffectType.EXHAUSTED in runner.player.effects) == exhausted
        if exhausted:
            # int(12 * 0.75)
            assert runner.effective_stats(runner.player).speed == 9

    def test_caller_stats_untouched(self, tables, make_combatant, scripted):
        player = make_combatant(traits=["ambush"])
        adversary = make_combatant(health=5)
        runner = CombatRunner(player, adversary, CombatEnvironment(), "basic", scripted(HIT), tables)
        runner.play_round("attack")
        assert adversary.health == 5
        assert player.active_status_effects == set()


class TestAdversaryDecisions:

    def test_elite_counters_repeated_attacks(self, fight):
        runner = fight(
            [0.95, 0.95, 0.95] + HIT,
            adversary={"abilities": ["counter"]},
            tier="elite",
        )
        for _ in range(3):
            assert runner.player_turn("attack").missed
        result = runner.adversary_turn()
        assert result.action == "counter"
        # 20 * 1.2 - 5
        assert result.damage == 19
        assert StatusEffectType.FORTIFIED in runner.adversary.effects

    def test_unlisted_move_falls_back_to_attack(self, fight):
        runner = fight(HIT, player={"health": 20}, adversary={"speed": 15})
        result = runner.adversary_turn()
        assert result.action == "attack"
        assert "Adversary cannot special_attack; attacks instead" in result.messages
        assert runner.player.stats.health == 5

    def test_ai_context(self, fight):
        runner = fight([], player={"health": 40}, adversary={"abilities": ["heal"]})
        ctx = runner.ai_context()
        assert ctx.target_health_fraction == 0.4
        assert "heal" in ctx.available_abilities
        assert ctx.turn_number == 1


class TestPolicies:

    def test_greedy_prefers_best_multiplier(self, tables, make_combatant, scripted):
        player = create_player_combatant("deinonychus", tables)
        runner = CombatRunner(player, make_combatant(), CombatEnvironment(), "basic", scripted([]), tables)
        assert greedy_policy(runner) == "special_attack"

    def test_greedy_heals_when_low(self, fight):
        runner = fight([], player={"health": 20, "abilities": ["heal", "special_attack"]})
        assert greedy_policy(runner) == "heal"

    def test_greedy_plain_attack(self, fight):
        assert greedy_policy(fight([])) == "attack"


class TestSeededRuns:

    def run_once(self, tables, seed):
        player = create_player_combatant("deinonychus", tables)
        adversary = create_adversary_combatant("microraptor", tables)
        runner = CombatRunner(player, adversary, CombatEnvironment(), "basic", SeededRandom(seed), tables)
        return runner.run(), player

    def test_terminates_and_reproduces(self, tables):
        first, player = self.run_once(tables, "fight-1")
        second, _ = self.run_once(tables, "fight-1")
        assert first.outcome in CombatOutcome
        assert 1 <= first.turns <= 100
        assert (first.outcome, first.turns, first.damage_dealt, first.damage_taken) == (
            second.outcome, second.turns, second.damage_dealt, second.damage_taken,
        )
        assert player.health == player.max_health

    def test_policy_tuple(self, tables):
        player = create_player_combatant("tyrannosaurus", tables)
        adversary = create_adversary_combatant("protoceratops", tables)
        runner = CombatRunner(player, adversary, CombatEnvironment(), "basic", SeededRandom("aim"), tables)
        result = runner.run(lambda r: ("attack", BodyPart.BODY))
        assert result.outcome in CombatOutcome
        assert result.log
