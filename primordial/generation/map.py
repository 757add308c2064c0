"""
Map Generation - Seeded column-structured DAG of encounter nodes.

Layout:
- column 0: a single REST node ("0-0"), the run entry point
- columns 1..n-2: min..max nodes each, typed by pick_node_type()
- column n-1: a single BOSS node

Edges only go from column c to column c+1. Each source connects to 1-3
targets inside a +-1 window around its proportional position in the next
column, which keeps edges from crossing far over each other. A second pass
gives every target with no incoming edge one from a valid source, so every
node is reachable from the start.

All randomness comes from one SeededRandom seeded with the run seed; the map
(node counts, types and edges) is a pure function of (seed, config, biome,
depth).
"""

import logging
from collections import deque
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from ..errors import ConnectivityViolation, InvalidArgumentError, LookupFailure
from ..state.rng import SeededRandom

logger = logging.getLogger(__name__)

__all__ = [
    "NodeType",
    "BiomeType",
    "MapNode",
    "MapConfig",
    "MapGenerator",
    "MapColumns",
    "validate_map_connectivity",
    "ensure_map_connectivity",
    "find_all_paths",
    "build_node_lookup",
    "get_available_nodes",
    "visit_node",
    "map_to_string",
    "map_to_dict",
    "map_from_dict",
]


class NodeType(Enum):
    COMBAT = "combat"
    RESOURCE = "resource"
    EVENT = "event"
    SPECIAL = "special"
    ELITE = "elite"
    BOSS = "boss"
    REST = "rest"


class BiomeType(Enum):
    COASTAL_WETLANDS = "coastal_wetlands"
    FERN_PRAIRIES = "fern_prairies"
    VOLCANIC_HIGHLANDS = "volcanic_highlands"
    TAR_PITS = "tar_pits"


NODE_SYMBOLS = {
    NodeType.COMBAT: "C",
    NodeType.RESOURCE: "$",
    NodeType.EVENT: "?",
    NodeType.SPECIAL: "*",
    NodeType.ELITE: "E",
    NodeType.BOSS: "B",
    NodeType.REST: "R",
}


@dataclass
class MapNode:
    """A node on the run map. Connections are outgoing node ids."""
    id: str
    node_type: NodeType
    position: Tuple[float, float]
    depth: int
    biome: BiomeType
    connections: List[str] = field(default_factory=list)
    visited: bool = False
    available: bool = False

    def get_symbol(self) -> str:
        return NODE_SYMBOLS[self.node_type]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.node_type.value,
            "position": {"x": self.position[0], "y": self.position[1]},
            "depth": self.depth,
            "biome": self.biome.value,
            "connections": list(self.connections),
            "visited": self.visited,
            "available": self.available,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MapNode":
        return cls(
            id=data["id"],
            node_type=NodeType(data["type"]),
            position=(data["position"]["x"], data["position"]["y"]),
            depth=data["depth"],
            biome=BiomeType(data["biome"]),
            connections=list(data.get("connections", [])),
            visited=data.get("visited", False),
            available=data.get("available", False),
        )


MapColumns = List[List[MapNode]]


# Constants
MIN_COLUMN_COUNT = 3
MAX_NODES_CAP = 5
MIN_COMBAT_WEIGHT = 30
ELITE_START_COLUMN = 3
REST_CHANCE = 0.4
MAX_CONNECTIONS = 3


@dataclass
class MapConfig:
    """Configuration for map generation."""
    column_count: int = 12
    min_nodes_per_column: int = 2
    max_nodes_per_column: int = 4

    # Node type weights for ordinary columns
    combat_weight: float = 45
    resource_weight: float = 25
    event_weight: float = 20
    special_weight: float = 10

    elite_interval: int = 5
    rest_interval: int = 4

    def __post_init__(self):
        if self.column_count < MIN_COLUMN_COUNT:
            raise InvalidArgumentError(
                f"column_count must be at least {MIN_COLUMN_COUNT}, got {self.column_count}"
            )
        if self.min_nodes_per_column < 1:
            raise InvalidArgumentError(
                f"min_nodes_per_column must be at least 1, got {self.min_nodes_per_column}"
            )
        if self.max_nodes_per_column < self.min_nodes_per_column:
            raise InvalidArgumentError(
                f"max_nodes_per_column ({self.max_nodes_per_column}) is below "
                f"min_nodes_per_column ({self.min_nodes_per_column})"
            )
        if self.elite_interval < 1 or self.rest_interval < 1:
            raise InvalidArgumentError("elite_interval and rest_interval must be at least 1")
        weights = (self.combat_weight, self.resource_weight, self.event_weight, self.special_weight)
        if any(w < 0 for w in weights):
            raise InvalidArgumentError(f"node type weights must be non-negative, got {weights}")
        if sum(weights) <= 0:
            raise InvalidArgumentError("at least one node type weight must be positive")

    def adjusted_for_depth(self, depth: int) -> "MapConfig":
        """
        Deeper runs get longer, wider maps with fewer plain combats.
        """
        if depth < 0:
            raise InvalidArgumentError(f"depth must be non-negative, got {depth}")
        max_nodes = min(MAX_NODES_CAP, self.max_nodes_per_column + depth // 3)
        return replace(
            self,
            column_count=self.column_count + depth // 2,
            max_nodes_per_column=max_nodes,
            min_nodes_per_column=min(max_nodes, self.min_nodes_per_column + depth // 4),
            combat_weight=max(MIN_COMBAT_WEIGHT, self.combat_weight - depth * 2),
            event_weight=self.event_weight + depth,
            special_weight=self.special_weight + depth // 2,
        )


class MapGenerator:
    """
    Generates run maps.

    Usage:
        generator = MapGenerator("DAILY-2024-03-15")
        columns = generator.generate_map(BiomeType.FERN_PRAIRIES, depth=0)
    """

    def __init__(self, seed: Union[str, int, SeededRandom], config: Optional[MapConfig] = None):
        self.rng = seed if isinstance(seed, SeededRandom) else SeededRandom(seed)
        self.config = config or MapConfig()

    def generate_map(self, biome: BiomeType, depth: int = 0) -> MapColumns:
        """
        Generate a complete map.

        Returns:
            Columns of MapNode, start column first, boss column last
        """
        config = self.config.adjusted_for_depth(depth)
        last = config.column_count - 1

        columns: MapColumns = [[self._create_node("0-0", NodeType.REST, 0, biome, (0.0, 0.5))]]

        for col in range(1, last):
            node_count = self.rng.next_int(config.min_nodes_per_column, config.max_nodes_per_column)
            column = []
            for row in range(node_count):
                node_type = self.pick_node_type(col, config)
                position = (col / last, 0.5 if node_count == 1 else row / (node_count - 1))
                column.append(self._create_node(f"{col}-{row}", node_type, col, biome, position))
            columns.append(column)

        columns.append([self._create_node(f"{last}-0", NodeType.BOSS, last, biome, (1.0, 0.5))])

        self.connect_nodes(columns)

        logger.debug(
            "Generated %s map at depth %d: %d columns, %d nodes",
            biome.value, depth, len(columns), sum(len(c) for c in columns),
        )
        return columns

    def pick_node_type(self, column: int, config: Optional[MapConfig] = None) -> NodeType:
        """
        Type for a node in an ordinary column.

        Elite columns are forced; rest-interval columns have a 40% rest chance;
        otherwise a weighted pick among combat/resource/event/special.
        """
        config = config or self.config

        if column > ELITE_START_COLUMN and column % config.elite_interval == 0:
            return NodeType.ELITE

        if column > 0 and column % config.rest_interval == 0:
            if self.rng.chance(REST_CHANCE):
                return NodeType.REST

        types = [NodeType.COMBAT, NodeType.RESOURCE, NodeType.EVENT, NodeType.SPECIAL]
        weights = [config.combat_weight, config.resource_weight, config.event_weight, config.special_weight]
        return self.rng.weighted_pick(types, weights)

    def _create_node(
        self,
        node_id: str,
        node_type: NodeType,
        depth: int,
        biome: BiomeType,
        position: Tuple[float, float],
    ) -> MapNode:
        return MapNode(
            id=node_id,
            node_type=node_type,
            position=position,
            depth=depth,
            biome=biome,
            available=depth == 0,
        )

    def connect_nodes(self, columns: MapColumns) -> None:
        """Add edges between every adjacent column pair, in place."""
        for col in range(len(columns) - 1):
            current = columns[col]
            nxt = columns[col + 1]

            # Forward pass: every source gets 1-3 targets
            for index, node in enumerate(current):
                valid = get_valid_connection_targets(index, len(current), len(nxt))
                count = self.rng.next_int(1, min(MAX_CONNECTIONS, len(valid)))
                shuffled = self.rng.shuffle(list(valid))
                for target_index in shuffled[:count]:
                    target_id = nxt[target_index].id
                    if target_id not in node.connections:
                        node.connections.append(target_id)

            # Reachability pass: every target gets an incoming edge
            for target_index, target in enumerate(nxt):
                if any(target.id in node.connections for node in current):
                    continue
                sources = [
                    node for source_index, node in enumerate(current)
                    if target_index in get_valid_connection_targets(source_index, len(current), len(nxt))
                ]
                if sources:
                    source = self.rng.pick(sources)
                else:
                    source = current[min(target_index, len(current) - 1)]
                source.connections.append(target.id)
                logger.debug("Forced edge %s -> %s", source.id, target.id)

    def reset(self) -> None:
        """Restart the generator's sequence from its seed."""
        self.rng.reset()


def get_valid_connection_targets(source_index: int, source_size: int, target_size: int) -> List[int]:
    """
    Target indices a source may connect to.

    The source's relative position maps to a center index in the target
    column; the window is center +-1, clipped to the column.
    """
    ratio = 0.5 if source_size == 1 else source_index / (source_size - 1)
    # floor(x + 0.5) rounds half up; round() would round half to even
    center = int(ratio * (target_size - 1) + 0.5)
    return list(range(max(0, center - 1), min(target_size - 1, center + 1) + 1))


# =============================================================================
# GRAPH QUERIES
# =============================================================================

def build_node_lookup(columns: MapColumns) -> Dict[str, MapNode]:
    return {node.id: node for column in columns for node in column}


def _reachable_ids(columns: MapColumns) -> set:
    lookup = build_node_lookup(columns)
    start = columns[0][0].id
    reachable = {start}
    queue = deque([start])
    while queue:
        node = lookup.get(queue.popleft())
        if node is None:
            continue
        for conn in node.connections:
            if conn not in reachable:
                reachable.add(conn)
                queue.append(conn)
    return reachable


def validate_map_connectivity(columns: MapColumns) -> bool:
    """True iff a BFS from the start node reaches every node."""
    if not columns or not columns[0]:
        return False
    reachable = _reachable_ids(columns)
    return all(node.id in reachable for column in columns for node in column)


def ensure_map_connectivity(columns: MapColumns) -> None:
    """Raise ConnectivityViolation listing every node the start cannot reach."""
    if not columns or not columns[0]:
        raise ConnectivityViolation([])
    reachable = _reachable_ids(columns)
    unreachable = [node.id for column in columns for node in column if node.id not in reachable]
    if unreachable:
        raise ConnectivityViolation(unreachable)


def find_all_paths(columns: MapColumns) -> List[List[str]]:
    """Every start-to-last-column path, by exhaustive DFS."""
    if not columns or not columns[0]:
        return []

    lookup = build_node_lookup(columns)
    end_ids = {node.id for node in columns[-1]}
    paths: List[List[str]] = []
    current: List[str] = []

    def dfs(node_id: str) -> None:
        current.append(node_id)
        if node_id in end_ids:
            paths.append(list(current))
        else:
            node = lookup.get(node_id)
            if node is not None:
                for conn in node.connections:
                    dfs(conn)
        current.pop()

    dfs(columns[0][0].id)
    return paths


def get_available_nodes(columns: MapColumns) -> List[MapNode]:
    return [node for column in columns for node in column if node.available]


def visit_node(columns: MapColumns, node_id: str) -> MapNode:
    """
    Move onto an available node.

    Marks it visited, closes every other node, and opens its connections.
    """
    lookup = build_node_lookup(columns)
    if node_id not in lookup:
        raise LookupFailure("map node", node_id)
    node = lookup[node_id]
    if not node.available:
        raise InvalidArgumentError(f"Map node {node_id} is not available")

    for other in lookup.values():
        other.available = False
    node.visited = True
    for conn in node.connections:
        if conn in lookup:
            lookup[conn].available = True
    return node


# =============================================================================
# RENDERING / SERIALIZATION
# =============================================================================

def map_to_string(columns: MapColumns) -> str:
    """
    ASCII rendering, one line per column.

    Visited nodes are bracketed, available nodes starred:
        03 | C(3-0)->3-0,4-1  [E(3-1)]->4-1  *?(3-2)->4-2
    """
    lines = []
    for column in columns:
        if not column:
            continue
        parts = []
        for node in column:
            label = f"{node.get_symbol()}({node.id})"
            if node.visited:
                label = f"[{label}]"
            elif node.available:
                label = f"*{label}"
            if node.connections:
                label += "->" + ",".join(node.connections)
            parts.append(label)
        lines.append(f"{column[0].depth:02d} | " + "  ".join(parts))
    return "\n".join(lines)


def map_to_dict(columns: MapColumns) -> List[List[dict]]:
    return [[node.to_dict() for node in column] for column in columns]


def map_from_dict(data: List[List[dict]]) -> MapColumns:
    return [[MapNode.from_dict(node) for node in column] for column in data]
