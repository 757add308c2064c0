"""
Run State - Snapshot of a run in progress.

Holds what the difficulty scaler and encounter spawner read (depth, health,
combats won, fossils) and what a caller needs to resume a run (seed, map,
position). Persistence is the caller's concern; to_dict()/from_dict() give a
JSON-compatible form of the snapshot.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..generation.map import BiomeType, MapColumns, map_from_dict, map_to_dict

DEFAULT_MAX_HEALTH = 100
DEFAULT_STAMINA = 50


@dataclass
class RunState:
    seed: str
    dinosaur: str
    current_node_id: Optional[str] = None
    nodes_visited: List[str] = field(default_factory=list)
    map_nodes: MapColumns = field(default_factory=list)
    health: int = DEFAULT_MAX_HEALTH
    max_health: int = DEFAULT_MAX_HEALTH
    stamina: int = DEFAULT_STAMINA
    traits: List[str] = field(default_factory=list)
    inventory: Dict[str, int] = field(default_factory=dict)
    biome: BiomeType = BiomeType.FERN_PRAIRIES
    depth: int = 0
    fossils_collected: int = 0
    combats_won: int = 0

    @property
    def health_fraction(self) -> float:
        if self.max_health <= 0:
            return 0.0
        return self.health / self.max_health

    @property
    def is_dead(self) -> bool:
        return self.health <= 0

    def record_visit(self, node_id: str) -> None:
        self.current_node_id = node_id
        self.nodes_visited.append(node_id)

    def to_dict(self) -> dict:
        """Serialize to a plain dict."""
        return {
            "seed": self.seed,
            "dinosaur": self.dinosaur,
            "current_node_id": self.current_node_id,
            "nodes_visited": list(self.nodes_visited),
            "map": map_to_dict(self.map_nodes),
            "health": self.health,
            "max_health": self.max_health,
            "stamina": self.stamina,
            "traits": list(self.traits),
            "inventory": dict(self.inventory),
            "biome": self.biome.value,
            "depth": self.depth,
            "fossils_collected": self.fossils_collected,
            "combats_won": self.combats_won,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RunState":
        """Deserialize from a dict produced by to_dict()."""
        return cls(
            seed=data["seed"],
            dinosaur=data["dinosaur"],
            current_node_id=data.get("current_node_id"),
            nodes_visited=list(data.get("nodes_visited", [])),
            map_nodes=map_from_dict(data.get("map", [])),
            health=data.get("health", DEFAULT_MAX_HEALTH),
            max_health=data.get("max_health", DEFAULT_MAX_HEALTH),
            stamina=data.get("stamina", DEFAULT_STAMINA),
            traits=list(data.get("traits", [])),
            inventory=dict(data.get("inventory", {})),
            biome=BiomeType(data.get("biome", BiomeType.FERN_PRAIRIES.value)),
            depth=data.get("depth", 0),
            fossils_collected=data.get("fossils_collected", 0),
            combats_won=data.get("combats_won", 0),
        )
