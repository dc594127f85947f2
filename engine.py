from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union
import logging
import random

import numpy as np

from errors import VillageError
from persistence import CatalogEntry, TilesetLoader, list_snapshots, load_snapshot, save_snapshot
from sim.construction import advance_construction
from sim.entities import Agent, Coord, Settlement, Structure, WorkItem
from sim.placement import GridPlacementFinder, PlacementFinder
from sim.state import World
from sim.terrain import generate_terrain, load_default_tileset
from systems import config_village as cfg
from systems.build_queue import BuildQueueManager, PlannedPlacement
from systems.roads import plan_road

logger = logging.getLogger(__name__)


@dataclass
class OperationResult:
    """Outcome of a shell-facing operation: ``ok`` plus a message to display."""

    ok: bool
    message: str
    error: Optional[VillageError] = None
    path: Optional[Path] = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def failure(cls, exc: VillageError) -> "OperationResult":
        return cls(ok=False, message=exc.message, error=exc,
                   path=Path(exc.path) if exc.path else None)


# =============================== ENGINE =======================================

class VillageEngine:
    """Shell-facing API: owns the live world and the build queues.

    Everything runs on the caller's thread; the shell should pause
    simulation ticks while :meth:`load` runs.
    """

    def __init__(self, save_dir: Union[str, Path] = cfg.SAVE_DIR,
                 placement_finder: Optional[PlacementFinder] = None,
                 tileset_loader: Optional[TilesetLoader] = None,
                 width: int = cfg.MAP_WIDTH, height: int = cfg.MAP_HEIGHT,
                 seed: int = 12345, tile_size: int = cfg.TILE_SIZE):
        self.save_dir = Path(save_dir)
        self.tileset_loader = tileset_loader or load_default_tileset
        self.world = World.empty(width, height, tile_size)
        self.rng = random.Random(seed)
        if placement_finder is None:
            placement_finder = GridPlacementFinder(lambda: self.world, self._reserved_tiles)
        self.queues = BuildQueueManager(placement_finder)
        self.new_game(width=width, height=height, seed=seed, tile_size=tile_size)

    def _reserved_tiles(self) -> List[Coord]:
        return self.queues.reserved_tiles()

    # ----------------------------- World setup ---------------------------------

    def new_game(self, width: int = cfg.MAP_WIDTH, height: int = cfg.MAP_HEIGHT,
                 seed: int = 12345, tile_size: int = cfg.TILE_SIZE,
                 generate: bool = True) -> World:
        """Discard the current world and queues and start fresh."""
        if generate:
            terrain = generate_terrain(width, height, np.random.default_rng(seed), tile_size)
        else:
            terrain = World.empty(width, height, tile_size).terrain
        terrain.tileset = self.tileset_loader()
        fresh = World(terrain=terrain)
        self.world.replace_with(fresh)
        self.rng = random.Random(seed)
        self.queues.clear()
        return self.world

    def found_settlement(self, x: float, y: float, name: Optional[str] = None) -> Settlement:
        w = self.world
        if name is None:
            used = {s.name for s in w.settlements}
            free = [n for n in cfg.SETTLEMENT_NAMES if n not in used]
            name = self.rng.choice(free) if free else f"Settlement {len(w.settlements) + 1}"
        settlement = Settlement.new(w.ids, x, y, name, w.tile_size)
        w.settlements.append(settlement)
        return settlement

    def add_structure(self, settlement_id: Optional[int], tile: Coord, structure_type: str) -> Structure:
        x, y = self.world.terrain.tile_to_world(*tile)
        structure = Structure.new(self.world.ids, x, y, structure_type, settlement_id,
                                  self.world.tile_size)
        self.world.structures.append(structure)
        return structure

    def add_agent(self, settlement_id: Optional[int], x: float, y: float,
                  structure_id: Optional[int] = None) -> Agent:
        agent = Agent.new(self.world.ids, x, y, settlement_id, structure_id, self.world.tile_size)
        self.world.agents.append(agent)
        return agent

    def plan_road(self, settlement_id: int, start: Coord, end: Coord) -> List[WorkItem]:
        """Add a road entity and queue work for each tile not yet paved."""
        w = self.world
        road, items = plan_road(w.ids, w.terrain, settlement_id, start, end)
        w.roads.append(road)
        w.work_items.extend(items)
        w.rebuild_work_order()
        return items

    # ----------------------------- Build queue ---------------------------------

    def enqueue(self, settlement_id: Optional[int], structure_type: str) -> OperationResult:
        settlement = self.world.get_settlement(settlement_id)
        if settlement is None:
            return OperationResult(False, "No settlement selected")
        try:
            placement = self.queues.enqueue(settlement, structure_type, self.world.tile_size)
        except ValueError as exc:
            return OperationResult(False, str(exc))
        except VillageError as exc:
            logger.info("enqueue rejected: %s", exc.message)
            return OperationResult.failure(exc)
        return OperationResult(True, f"Queued {structure_type} at tile {placement.tile}")

    def dequeue_next(self, settlement_id: int, structure_type: str) -> Optional[PlannedPlacement]:
        return self.queues.dequeue_next(settlement_id, structure_type)

    def decrement(self, settlement_id: int, structure_type: str) -> bool:
        return self.queues.decrement(settlement_id, structure_type)

    def has_pending(self, settlement_id: int) -> bool:
        return self.queues.has_pending(settlement_id)

    def peek_next(self, settlement_id: int) -> Optional[str]:
        return self.queues.peek_next(settlement_id)

    def pending_count(self, settlement_id: int, structure_type: str) -> int:
        return self.queues.count(settlement_id, structure_type)

    def planned_placements(self, settlement_id: int) -> List[PlannedPlacement]:
        return self.queues.planned(settlement_id)

    def dispatch_construction(self, settlement_id: int) -> Optional[WorkItem]:
        return self.queues.dispatch_next(self.world, settlement_id)

    def advance(self, work: float) -> List[Structure]:
        """Advance construction by ``work`` units scaled by game speed."""
        return advance_construction(self.world, work * self.world.game_speed)

    # ----------------------------- Summary/Save/Load ---------------------------

    def summary(self) -> Dict:
        out = self.world.summary()
        out["queues"] = {
            s.id: {t: n for t, n in self.queues.queue_for(s.id).counts.items() if n}
            for s in self.world.settlements
            if self.queues.has_pending(s.id)
        }
        return out

    def list_snapshots(self) -> List[CatalogEntry]:
        return list_snapshots(self.save_dir)

    def save(self, name: Optional[str] = None, now: Optional[datetime] = None) -> OperationResult:
        try:
            path = save_snapshot(self.world, self.save_dir, name, now)
        except VillageError as exc:
            logger.warning("save failed: %s", exc.message)
            return OperationResult.failure(exc)
        return OperationResult(True, f"Game saved to {path.name}", path=path)

    def load(self, path: Union[str, Path]) -> OperationResult:
        """Replace the live world with a snapshot; on failure nothing changes.

        Build queues are not part of snapshots and are emptied on success.
        """
        try:
            load_snapshot(self.world, path, self.tileset_loader)
        except VillageError as exc:
            logger.warning("load failed: %s", exc.message)
            return OperationResult.failure(exc)
        self.queues.clear()
        return OperationResult(True, "Game loaded successfully!", path=Path(path))

