#!/usr/bin/env python3
"""
Primordial Engine - Command Line Interface

CLI for inspecting seeded maps, RNG sequences, difficulty scaling and combats.

Usage:
    python cli.py map --seed ABC123 --biome fern_prairies --depth 2
    python cli.py rng --seed ABC123 --count 20
    python cli.py difficulty --depth 4 --health 60 --combats-won 3 --nodes-visited 5
    python cli.py fight --seed ABC123 --dinosaur deinonychus --enemy utahraptor
    python cli.py batch --seed ABC123 --dinosaur tyrannosaurus --enemy spinosaurus --count 200
"""

import argparse
import json
import logging
import sys
from typing import List

from primordial import (
    BiomeType,
    CombatEnvironment,
    CombatRunner,
    DifficultyScaler,
    MapGenerator,
    PrimordialError,
    RunState,
    SeededRandom,
    TerrainType,
    TimeOfDay,
    WeatherType,
    create_adversary_combatant,
    create_player_combatant,
    greedy_policy,
    hash_seed,
    load_default_tables,
    load_tables_from_json,
    simulate_batch,
)
from primordial.generation.map import find_all_paths, map_to_dict, map_to_string
from primordial.handlers.combat import ActionResult

logger = logging.getLogger("primordial.cli")


# =============================================================================
# OUTPUT FORMATTING
# =============================================================================

def format_seed_info(seed_string: str) -> str:
    """Format seed information header."""
    return f"Seed: {seed_string} (hash: {hash_seed(seed_string)})"


def format_action(result: ActionResult) -> str:
    if result.skipped:
        summary = "skipped"
    elif result.missed and result.damage == 0 and result.action not in ("defend", "heal", "flee"):
        summary = "missed"
    else:
        parts = []
        if result.damage:
            parts.append(f"{result.damage} dmg")
        if result.healing:
            parts.append(f"+{result.healing} hp")
        if result.critical:
            parts.append("crit")
        if result.fled:
            parts.append("fled")
        summary = ", ".join(parts) or "ok"
    return f"{result.actor:>9} {result.action or '-':<16} {summary}"


def _load_tables(args):
    if getattr(args, "tables", None):
        return load_tables_from_json(args.tables)
    return load_default_tables()


def _environment(args) -> CombatEnvironment:
    return CombatEnvironment(
        weather=WeatherType(args.weather),
        terrain=TerrainType(args.terrain),
        time_of_day=TimeOfDay(args.time),
        visibility=args.visibility,
    )


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_map(args) -> int:
    """Generate and display a map."""
    columns = MapGenerator(args.seed).generate_map(BiomeType(args.biome), depth=args.depth)

    if args.json:
        print(json.dumps({"seed": args.seed, "biome": args.biome, "depth": args.depth,
                          "columns": map_to_dict(columns)}, indent=2))
        return 0

    print(format_seed_info(args.seed))
    print(f"Biome: {args.biome}  Depth: {args.depth}")
    print()
    print(map_to_string(columns))
    print()
    print(f"Columns: {len(columns)}  Nodes: {sum(len(c) for c in columns)}  "
          f"Paths: {len(find_all_paths(columns))}")
    return 0


def cmd_rng(args) -> int:
    """Display RNG sequence for verification."""
    rng = SeededRandom(args.seed)
    values = [rng.next() for _ in range(args.count)]

    if args.json:
        print(json.dumps({"seed": args.seed, "hash": hash_seed(args.seed), "values": values}, indent=2))
        return 0

    print(format_seed_info(args.seed))
    print()
    for i, value in enumerate(values):
        print(f"  {i:3d}: {value:.10f}")
    return 0


def cmd_difficulty(args) -> int:
    """Show the scaling a run state would produce."""
    run_state = RunState(
        seed=args.seed,
        dinosaur="",
        nodes_visited=[f"node_{i}" for i in range(args.nodes_visited)],
        health=args.health,
        max_health=args.max_health,
        depth=args.depth,
        fossils_collected=args.fossils,
        combats_won=args.combats_won,
    )
    scaler = DifficultyScaler()
    performance = scaler.calculate_performance(run_state)
    scaling = scaler.calculate_scaling(run_state)

    data = {
        "performance": round(performance, 4),
        "description": scaler.get_difficulty_description(scaling.coefficient),
        "color": f"#{scaler.get_difficulty_color(scaling.coefficient):06X}",
        "scaling": {k: (round(v, 4) if isinstance(v, float) else v) for k, v in vars(scaling).items()},
    }
    if args.json:
        print(json.dumps(data, indent=2))
        return 0

    print(f"Depth {args.depth}, performance {performance:.3f}")
    print(f"Coefficient {scaling.coefficient:.3f} ({data['description']}, {data['color']})")
    for key, value in data["scaling"].items():
        print(f"  {key:<20} {value}")
    return 0


def cmd_fight(args) -> int:
    """Run one seeded combat and print the turn log."""
    tables = _load_tables(args).validate()
    environment = _environment(args)
    enemy = tables.get_enemy(args.enemy)

    run_state = RunState(seed=args.seed, dinosaur=args.dinosaur, depth=args.depth)
    scaling = DifficultyScaler().calculate_scaling(run_state) if args.depth else None

    player = create_player_combatant(args.dinosaur, tables)
    adversary = create_adversary_combatant(args.enemy, tables, scaling)
    runner = CombatRunner(player, adversary, environment, enemy.tier, SeededRandom(args.seed), tables)
    result = runner.run(greedy_policy)

    if args.json:
        print(json.dumps({
            "seed": args.seed,
            "outcome": result.outcome.value,
            "turns": result.turns,
            "player_health": result.player_health,
            "adversary_health": result.adversary_health,
            "damage_dealt": result.damage_dealt,
            "damage_taken": result.damage_taken,
            "adversary_fled": result.adversary_fled,
            "log": [
                {"actor": r.actor, "action": r.action, "damage": r.damage, "healing": r.healing,
                 "critical": r.critical, "skipped": r.skipped, "messages": r.messages}
                for r in result.log
            ],
        }, indent=2))
        return 0

    print(format_seed_info(args.seed))
    print(f"{player.name} vs {adversary.name} ({enemy.tier.value})  "
          f"[{environment.weather.value}, {environment.terrain.value}, {environment.time_of_day.value}]")
    print()
    for entry in result.log:
        print(format_action(entry))
    print()
    print(f"Outcome: {result.outcome.value} after {result.turns} turns")
    print(f"Player {result.player_health}/{result.player_max_health}, adversary {result.adversary_health}")
    return 0


def cmd_batch(args) -> int:
    """Simulate many seeded combats of one matchup."""
    tables = _load_tables(args).validate()
    summary = simulate_batch(
        args.dinosaur, args.enemy, args.count, base_seed=args.seed,
        environment=_environment(args), tables=tables,
    )
    data = summary.to_dict()

    if args.json:
        print(json.dumps(data, indent=2))
        return 0

    for key, value in data.items():
        print(f"  {key:<22} {value}")
    return 0


# =============================================================================
# MAIN
# =============================================================================

def _add_environment_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--weather", default="clear", choices=[w.value for w in WeatherType])
    parser.add_argument("--terrain", default="open_ground", choices=[t.value for t in TerrainType])
    parser.add_argument("--time", default="day", choices=[t.value for t in TimeOfDay])
    parser.add_argument("--visibility", type=int, default=100, help="Visibility (0-100)")
    parser.add_argument("--tables", help="Content tables JSON file (default: built-in tables)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Primordial Engine - CLI for seeded maps, difficulty and combat",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s map --seed ABC123 --biome tar_pits
  %(prog)s rng --seed ABC123 --count 20
  %(prog)s difficulty --depth 5 --health 40
  %(prog)s fight --seed ABC123 --dinosaur ankylosaurus --enemy carnotaurus
  %(prog)s batch --seed ABC123 --dinosaur pteranodon --enemy microraptor --count 500
        """
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Map command
    map_parser = subparsers.add_parser("map", help="Generate and display a map")
    map_parser.add_argument("--seed", "-s", required=True, help="Map seed")
    map_parser.add_argument("--biome", "-b", default="fern_prairies", choices=[b.value for b in BiomeType])
    map_parser.add_argument("--depth", "-d", type=int, default=0, help="Run depth")
    map_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    # RNG command
    rng_parser = subparsers.add_parser("rng", help="Show an RNG sequence")
    rng_parser.add_argument("--seed", "-s", required=True, help="Seed string")
    rng_parser.add_argument("--count", "-n", type=int, default=20, help="Number of values to show")
    rng_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    # Difficulty command
    diff_parser = subparsers.add_parser("difficulty", help="Show difficulty scaling for a run state")
    diff_parser.add_argument("--seed", "-s", default="", help="Run seed")
    diff_parser.add_argument("--depth", "-d", type=int, default=0)
    diff_parser.add_argument("--health", type=int, default=100)
    diff_parser.add_argument("--max-health", type=int, default=100)
    diff_parser.add_argument("--combats-won", type=int, default=0)
    diff_parser.add_argument("--nodes-visited", type=int, default=0)
    diff_parser.add_argument("--fossils", type=int, default=0)
    diff_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    # Fight command
    fight_parser = subparsers.add_parser("fight", help="Run one seeded combat")
    fight_parser.add_argument("--seed", "-s", required=True, help="Combat seed")
    fight_parser.add_argument("--dinosaur", required=True, help="Player dinosaur id")
    fight_parser.add_argument("--enemy", required=True, help="Enemy id")
    fight_parser.add_argument("--depth", "-d", type=int, default=0, help="Scale the enemy for this depth")
    fight_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")
    _add_environment_args(fight_parser)

    # Batch command
    batch_parser = subparsers.add_parser("batch", help="Simulate many seeded combats")
    batch_parser.add_argument("--seed", "-s", default="batch", help="Base seed")
    batch_parser.add_argument("--dinosaur", required=True, help="Player dinosaur id")
    batch_parser.add_argument("--enemy", required=True, help="Enemy id")
    batch_parser.add_argument("--count", "-n", type=int, default=100, help="Number of combats")
    batch_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")
    _add_environment_args(batch_parser)

    return parser


def main(argv: List[str] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    # Dispatch to command handler
    commands = {
        "map": cmd_map,
        "rng": cmd_rng,
        "difficulty": cmd_difficulty,
        "fight": cmd_fight,
        "batch": cmd_batch,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1
    try:
        return handler(args)
    except PrimordialError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
