"""
Map Generation Tests

Structure, determinism, connectivity, node typing, traversal and the
ASCII/dict renderings of generated maps.
"""

import pytest

from primordial.errors import ConnectivityViolation, InvalidArgumentError, LookupFailure
from primordial.generation.map import (
    BiomeType, MapConfig, MapGenerator, MapNode, NodeType,
    ensure_map_connectivity, find_all_paths, get_available_nodes,
    get_valid_connection_targets, map_from_dict, map_to_dict, map_to_string,
    validate_map_connectivity, visit_node,
)
from primordial.state.rng import SeededRandom

SEEDS = ["ABC", "DAILY-2024-03-15", "RUN-1700000000000-abc1234", "x", "1", "zzzzzz"]


def node(node_id, node_type=NodeType.COMBAT, connections=(), depth=None):
    return MapNode(
        id=node_id,
        node_type=node_type,
        position=(0.0, 0.5),
        depth=int(node_id.split("-")[0]) if depth is None else depth,
        biome=BiomeType.FERN_PRAIRIES,
        connections=list(connections),
        available=node_id == "0-0",
    )


@pytest.fixture
def broken_map():
    """1-1 has no incoming edge."""
    return [
        [node("0-0", NodeType.REST, ["1-0"])],
        [node("1-0", connections=["2-0"]), node("1-1", connections=["2-0"])],
        [node("2-0", NodeType.BOSS)],
    ]


class TestStructure:

    def test_start_and_boss_columns(self):
        columns = MapGenerator("ABC").generate_map(BiomeType.FERN_PRAIRIES)
        assert len(columns) == 12
        assert [n.id for n in columns[0]] == ["0-0"]
        assert columns[0][0].node_type == NodeType.REST
        assert columns[0][0].available
        assert len(columns[-1]) == 1
        assert columns[-1][0].node_type == NodeType.BOSS
        assert columns[-1][0].id == "11-0"

    @pytest.mark.parametrize("seed", SEEDS)
    def test_column_sizes(self, seed):
        columns = MapGenerator(seed).generate_map(BiomeType.TAR_PITS)
        for column in columns[1:-1]:
            assert 2 <= len(column) <= 4

    def test_node_ids_and_depths(self):
        columns = MapGenerator("ABC").generate_map(BiomeType.COASTAL_WETLANDS)
        for col, column in enumerate(columns):
            for row, n in enumerate(column):
                assert n.id == f"{col}-{row}"
                assert n.depth == col
                assert n.biome == BiomeType.COASTAL_WETLANDS

    def test_only_start_available(self):
        columns = MapGenerator("ABC").generate_map(BiomeType.FERN_PRAIRIES)
        assert [n.id for n in get_available_nodes(columns)] == ["0-0"]

    def test_elite_columns_forced(self):
        columns = MapGenerator("ABC").generate_map(BiomeType.FERN_PRAIRIES)
        for col in (5, 10):
            assert all(n.node_type == NodeType.ELITE for n in columns[col])

    def test_no_elites_or_bosses_early(self):
        for seed in SEEDS:
            columns = MapGenerator(seed).generate_map(BiomeType.FERN_PRAIRIES)
            for column in columns[1:4]:
                assert all(n.node_type not in (NodeType.ELITE, NodeType.BOSS) for n in column)

    def test_depth_grows_map(self):
        columns = MapGenerator("ABC").generate_map(BiomeType.FERN_PRAIRIES, depth=4)
        assert len(columns) == 14
        for column in columns[1:-1]:
            assert 3 <= len(column) <= 5


class TestDeterminism:

    @pytest.mark.parametrize("seed", SEEDS)
    def test_same_seed_same_map(self, seed):
        a = MapGenerator(seed).generate_map(BiomeType.VOLCANIC_HIGHLANDS, depth=2)
        b = MapGenerator(seed).generate_map(BiomeType.VOLCANIC_HIGHLANDS, depth=2)
        assert map_to_dict(a) == map_to_dict(b)

    def test_different_seeds_differ(self):
        maps = {map_to_string(MapGenerator(seed).generate_map(BiomeType.FERN_PRAIRIES)) for seed in SEEDS}
        assert len(maps) > 1

    def test_accepts_seeded_random(self):
        a = MapGenerator(SeededRandom("ABC")).generate_map(BiomeType.FERN_PRAIRIES)
        b = MapGenerator("ABC").generate_map(BiomeType.FERN_PRAIRIES)
        assert map_to_dict(a) == map_to_dict(b)

    def test_reset(self):
        generator = MapGenerator("ABC")
        first = map_to_dict(generator.generate_map(BiomeType.FERN_PRAIRIES))
        generator.reset()
        assert map_to_dict(generator.generate_map(BiomeType.FERN_PRAIRIES)) == first


class TestConnectivity:

    @pytest.mark.parametrize("seed", SEEDS)
    @pytest.mark.parametrize("depth", [0, 3, 8])
    def test_every_node_reachable(self, seed, depth):
        columns = MapGenerator(seed).generate_map(BiomeType.FERN_PRAIRIES, depth=depth)
        assert validate_map_connectivity(columns)
        ensure_map_connectivity(columns)

    @pytest.mark.parametrize("seed", SEEDS)
    def test_edges_go_to_next_column(self, seed):
        columns = MapGenerator(seed).generate_map(BiomeType.FERN_PRAIRIES)
        for col, column in enumerate(columns[:-1]):
            next_ids = {n.id for n in columns[col + 1]}
            for n in column:
                assert n.connections, f"{n.id} has no outgoing edge"
                assert set(n.connections) <= next_ids
                assert len(n.connections) == len(set(n.connections))
        assert columns[-1][0].connections == []

    def test_broken_map_detected(self, broken_map):
        assert not validate_map_connectivity(broken_map)
        with pytest.raises(ConnectivityViolation) as exc_info:
            ensure_map_connectivity(broken_map)
        assert exc_info.value.unreachable == ["1-1"]

    def test_empty_map_invalid(self):
        assert not validate_map_connectivity([])
        with pytest.raises(ConnectivityViolation):
            ensure_map_connectivity([])


class TestConnectionWindow:

    @pytest.mark.parametrize("source_index,source_size,target_size,expected", [
        (0, 1, 3, [0, 1, 2]),
        (0, 3, 4, [0, 1]),
        (2, 3, 4, [2, 3]),
        (1, 3, 4, [1, 2, 3]),   # 1.5 rounds half up to 2
        (0, 2, 1, [0]),
        (1, 2, 1, [0]),
    ])
    def test_window(self, source_index, source_size, target_size, expected):
        assert get_valid_connection_targets(source_index, source_size, target_size) == expected


class TestNodeTypes:

    def test_elite_column_draws_nothing(self, scripted):
        rng = scripted([])
        assert MapGenerator(rng).pick_node_type(5) == NodeType.ELITE
        assert rng.calls == 0

    def test_column_three_never_elite(self, scripted):
        config = MapConfig(elite_interval=3)
        # roll 10 of 100 lands on combat
        assert MapGenerator(scripted([0.1]), config).pick_node_type(3) == NodeType.COMBAT

    def test_rest_column(self, scripted):
        assert MapGenerator(scripted([0.1])).pick_node_type(4) == NodeType.REST

    def test_rest_column_falls_through(self, scripted):
        assert MapGenerator(scripted([0.9, 0.1])).pick_node_type(4) == NodeType.COMBAT

    def test_weighted_types(self, scripted):
        # 45 / 25 / 20 / 10
        assert MapGenerator(scripted([0.5])).pick_node_type(2) == NodeType.RESOURCE
        assert MapGenerator(scripted([0.8])).pick_node_type(2) == NodeType.EVENT
        assert MapGenerator(scripted([0.95])).pick_node_type(2) == NodeType.SPECIAL


class TestConfig:

    def test_adjusted_for_depth(self):
        config = MapConfig().adjusted_for_depth(6)
        assert config.column_count == 15
        assert config.max_nodes_per_column == 5
        assert config.min_nodes_per_column == 3
        assert config.combat_weight == 33
        assert config.event_weight == 26
        assert config.special_weight == 13

    def test_combat_weight_floor(self):
        assert MapConfig().adjusted_for_depth(40).combat_weight == 30

    def test_negative_depth(self):
        with pytest.raises(InvalidArgumentError):
            MapConfig().adjusted_for_depth(-1)

    @pytest.mark.parametrize("kwargs", [
        {"column_count": 2},
        {"min_nodes_per_column": 0},
        {"min_nodes_per_column": 4, "max_nodes_per_column": 3},
        {"combat_weight": -1},
        {"combat_weight": 0, "resource_weight": 0, "event_weight": 0, "special_weight": 0},
        {"elite_interval": 0},
    ])
    def test_invalid_config(self, kwargs):
        with pytest.raises(InvalidArgumentError):
            MapConfig(**kwargs)


class TestTraversal:

    def test_visit_opens_connections(self):
        columns = MapGenerator("ABC").generate_map(BiomeType.FERN_PRAIRIES)
        start = visit_node(columns, "0-0")
        assert start.visited
        assert not start.available
        assert sorted(n.id for n in get_available_nodes(columns)) == sorted(start.connections)

    def test_visit_closes_siblings(self):
        columns = MapGenerator("ABC").generate_map(BiomeType.FERN_PRAIRIES)
        visit_node(columns, "0-0")
        first_choice = columns[0][0].connections[0]
        chosen = visit_node(columns, first_choice)
        available = {n.id for n in get_available_nodes(columns)}
        assert available == set(chosen.connections)

    def test_visit_unavailable(self):
        columns = MapGenerator("ABC").generate_map(BiomeType.FERN_PRAIRIES)
        with pytest.raises(InvalidArgumentError):
            visit_node(columns, "11-0")

    def test_visit_unknown(self):
        columns = MapGenerator("ABC").generate_map(BiomeType.FERN_PRAIRIES)
        with pytest.raises(LookupFailure):
            visit_node(columns, "99-9")

    def test_walk_to_boss(self):
        columns = MapGenerator("ABC").generate_map(BiomeType.FERN_PRAIRIES)
        current = visit_node(columns, "0-0")
        while current.connections:
            current = visit_node(columns, current.connections[0])
        assert current.node_type == NodeType.BOSS
        assert get_available_nodes(columns) == []


class TestPaths:

    def test_broken_map_paths(self, broken_map):
        assert find_all_paths(broken_map) == [["0-0", "1-0", "2-0"]]

    def test_generated_paths_span_map(self):
        columns = MapGenerator("ABC").generate_map(BiomeType.FERN_PRAIRIES)
        paths = find_all_paths(columns)
        assert paths
        for path in paths:
            assert path[0] == "0-0"
            assert path[-1] == "11-0"
            assert len(path) == 12


class TestRendering:

    def test_map_to_string(self):
        columns = MapGenerator("ABC").generate_map(BiomeType.FERN_PRAIRIES)
        lines = map_to_string(columns).splitlines()
        assert len(lines) == 12
        assert lines[0].startswith("00 | *R(0-0)->")
        assert lines[-1] == "11 | B(11-0)"

    def test_visited_bracketed(self):
        columns = MapGenerator("ABC").generate_map(BiomeType.FERN_PRAIRIES)
        visit_node(columns, "0-0")
        assert map_to_string(columns).startswith("00 | [R(0-0)]->")

    def test_dict_form(self):
        columns = MapGenerator("ABC").generate_map(BiomeType.FERN_PRAIRIES)
        data = map_to_dict(columns)
        assert data[0][0]["type"] == "rest"
        assert data[0][0]["position"] == {"x": 0.0, "y": 0.5}
        assert map_from_dict(data) == columns
