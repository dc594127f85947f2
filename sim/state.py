from __future__ import annotations

"""The live world container."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import numpy as np

from sim.entities import (
    Agent,
    IdSequence,
    Road,
    Settlement,
    Structure,
    WorkItem,
)
from sim.terrain import ROAD, TerrainGrid
from systems import config_village as cfg


@dataclass
class World:
    """Aggregate root for everything a snapshot captures.

    Exactly one ``World`` is live per engine; loading swaps its contents
    wholesale via :meth:`replace_with`.
    """

    terrain: TerrainGrid
    money: float = cfg.STARTING_MONEY
    resources: Dict[str, float] = field(default_factory=lambda: dict(cfg.STARTING_RESOURCES))
    game_speed: float = cfg.TIME_NORMAL_SPEED

    settlements: List[Settlement] = field(default_factory=list)
    structures: List[Structure] = field(default_factory=list)
    work_items: List[WorkItem] = field(default_factory=list)
    agents: List[Agent] = field(default_factory=list)
    roads: List[Road] = field(default_factory=list)

    ids: IdSequence = field(default_factory=IdSequence, compare=False)
    # settlement_id -> work items, highest priority first; derived, never saved
    work_order: Dict[Optional[int], List[WorkItem]] = field(default_factory=dict, compare=False)

    @classmethod
    def empty(cls, width: int = 1, height: int = 1, tile_size: int = cfg.TILE_SIZE) -> "World":
        return cls(terrain=TerrainGrid.filled(width, height, tile_size))

    @property
    def tile_size(self) -> int:
        return self.terrain.tile_size

    # -- lookups -------------------------------------------------------------
    def get_settlement(self, settlement_id: Optional[int]) -> Optional[Settlement]:
        for s in self.settlements:
            if s.id == settlement_id:
                return s
        return None

    def can_upgrade(self, structure: Structure) -> bool:
        """Orphaned structures (settlement gone) stay on the map but cannot be upgraded."""
        return self.get_settlement(structure.settlement_id) is not None

    def occupied_tiles(self) -> set:
        ts = self.tile_size
        tiles = {b.tile(ts) for b in self.structures}
        tiles.update((w.tile_x, w.tile_y) for w in self.work_items if not w.is_road)
        return tiles

    # -- work ordering -------------------------------------------------------
    def rebuild_work_order(self) -> None:
        """Group work items by settlement, highest priority first (stable for ties)."""
        grouped: Dict[Optional[int], List[WorkItem]] = {}
        for item in self.work_items:
            grouped.setdefault(item.settlement_id, []).append(item)
        for items in grouped.values():
            items.sort(key=lambda w: w.priority, reverse=True)
        self.work_order = grouped

    def next_work_item(self, settlement_id: Optional[int]) -> Optional[WorkItem]:
        items = self.work_order.get(settlement_id)
        return items[0] if items else None

    def add_work_item(self, item: WorkItem) -> None:
        self.work_items.append(item)
        self.rebuild_work_order()

    def remove_work_items(self, done: Iterable[WorkItem]) -> None:
        done_ids = {id(w) for w in done}
        self.work_items = [w for w in self.work_items if id(w) not in done_ids]
        self.rebuild_work_order()

    # -- wholesale replacement ----------------------------------------------
    def max_entity_id(self) -> int:
        ids = [0]
        ids.extend(s.id for s in self.settlements)
        ids.extend(b.id for b in self.structures)
        ids.extend(a.id for a in self.agents)
        ids.extend(r.id for r in self.roads)
        ids.extend(w.id for w in self.work_items)
        return max(ids)

    def replace_with(self, other: "World") -> None:
        """Adopt every field of ``other`` (used to commit a finished load)."""
        self.terrain = other.terrain
        self.money = other.money
        self.resources = other.resources
        self.game_speed = other.game_speed
        self.settlements = other.settlements
        self.structures = other.structures
        self.work_items = other.work_items
        self.agents = other.agents
        self.roads = other.roads
        self.work_order = other.work_order
        # ids stay process-unique: never step backwards
        self.ids.reserve_past(max(other.ids.peek - 1, other.max_entity_id()))

    def summary(self) -> Dict:
        return {
            "money": self.money,
            "resources": dict(self.resources),
            "game_speed": self.game_speed,
            "width": self.terrain.width,
            "height": self.terrain.height,
            "tile_size": self.terrain.tile_size,
            "settlements": {s.id: s.name for s in self.settlements},
            "structures": len(self.structures),
            "work_items": len(self.work_items),
            "agents": len(self.agents),
            "roads": len(self.roads),
            "road_tiles": int(np.count_nonzero(self.terrain.tiles == ROAD)),
        }
