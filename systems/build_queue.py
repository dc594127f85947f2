"""Per-settlement build queues.

A build queue records player intent: how many structures of each type a
settlement wants, and where each one will go.  Placements are validated
when the order is queued so the builder never walks to an impossible
site.  Queues are owned by a :class:`BuildQueueManager` instance held by
the engine; they are not part of the world and are never saved.

Typical flow::

    queues.enqueue(settlement, "house")      # player presses "+"
    queues.dispatch_next(world, settlement.id)  # a builder picks it up
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Dict, List, Optional

from errors import PlacementUnavailable
from sim.entities import Coord, Settlement, WorkItem
from sim.placement import PlacementFinder
from sim.state import World
from systems import config_village as cfg

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data classes


@dataclass
class PlannedPlacement:
    """A reserved site for one queued structure."""

    x: float
    y: float
    tile_x: int
    tile_y: int
    type: str

    @property
    def tile(self) -> Coord:
        return (self.tile_x, self.tile_y)


@dataclass
class BuildQueue:
    """Pending counts per structure type plus placements in insertion order."""

    counts: Dict[str, int] = field(default_factory=dict)
    planned: List[PlannedPlacement] = field(default_factory=list)

    def count(self, structure_type: str) -> int:
        return self.counts.get(structure_type, 0)

    def placements_of(self, structure_type: str) -> List[PlannedPlacement]:
        return [p for p in self.planned if p.type == structure_type]


def can_afford(resources: Dict[str, float], cost: Dict[str, float]) -> bool:
    return all(resources.get(name, 0) >= amount for name, amount in cost.items())


def deduct(resources: Dict[str, float], cost: Dict[str, float]) -> None:
    for name, amount in cost.items():
        resources[name] = resources.get(name, 0) - amount


# ---------------------------------------------------------------------------
# Main queue manager


class BuildQueueManager:
    """Own every settlement's build queue.

    Queues are created lazily; asking about a settlement that never queued
    anything behaves like an all-zero queue.
    """

    def __init__(self, placement_finder: PlacementFinder) -> None:
        self.placement_finder = placement_finder
        self._queues: Dict[int, BuildQueue] = {}

    # -- queue access ---------------------------------------------------------
    def queue_for(self, settlement_id: int) -> BuildQueue:
        queue = self._queues.get(settlement_id)
        if queue is None:
            queue = BuildQueue(counts={t: 0 for t in cfg.BUILDING_TYPES})
            self._queues[settlement_id] = queue
        return queue

    def clear(self) -> None:
        """Forget all intent, e.g. after a load replaced the world."""
        self._queues.clear()

    def count(self, settlement_id: int, structure_type: str) -> int:
        queue = self._queues.get(settlement_id)
        return queue.count(structure_type) if queue else 0

    def planned(self, settlement_id: int) -> List[PlannedPlacement]:
        queue = self._queues.get(settlement_id)
        return list(queue.planned) if queue else []

    def reserved_tiles(self) -> List[Coord]:
        """Tiles promised to planned placements across every settlement."""
        return [p.tile for q in self._queues.values() for p in q.planned]

    # -- mutations ------------------------------------------------------------
    def enqueue(self, settlement: Settlement, structure_type: str,
                tile_size: int = cfg.TILE_SIZE) -> PlannedPlacement:
        """Queue one structure and reserve its tile.

        Raises :class:`PlacementUnavailable` when the finder has no site;
        the queue is left unchanged in that case.
        """
        if structure_type not in cfg.BUILDING_TYPES:
            raise ValueError(f"unknown structure type {structure_type!r}")
        tile = self.placement_finder(settlement, structure_type)
        if tile is None:
            raise PlacementUnavailable(
                f"Cannot find a suitable location for a {structure_type} near {settlement.name}!"
            )
        tx, ty = int(tile[0]), int(tile[1])
        placement = PlannedPlacement(x=float(tx * tile_size), y=float(ty * tile_size),
                                     tile_x=tx, tile_y=ty, type=structure_type)
        queue = self.queue_for(settlement.id)
        queue.planned.append(placement)
        queue.counts[structure_type] = queue.count(structure_type) + 1
        logger.debug("queued %s for settlement %s at %s", structure_type, settlement.id, placement.tile)
        return placement

    def dequeue_next(self, settlement_id: int, structure_type: str) -> Optional[PlannedPlacement]:
        """A builder started the oldest order of ``structure_type``; pop its placement."""
        queue = self._queues.get(settlement_id)
        if queue is None or queue.count(structure_type) <= 0:
            return None
        queue.counts[structure_type] -= 1
        for i, placement in enumerate(queue.planned):
            if placement.type == structure_type:
                return queue.planned.pop(i)
        return None

    def decrement(self, settlement_id: int, structure_type: str) -> bool:
        """Cancel one order; a no-op at zero. Releases the newest placement of that type."""
        queue = self._queues.get(settlement_id)
        if queue is None or queue.count(structure_type) <= 0:
            return False
        queue.counts[structure_type] -= 1
        for i in range(len(queue.planned) - 1, -1, -1):
            if queue.planned[i].type == structure_type:
                del queue.planned[i]
                break
        return True

    # -- queries --------------------------------------------------------------
    def has_pending(self, settlement_id: int) -> bool:
        queue = self._queues.get(settlement_id)
        if queue is None:
            return False
        return any(isinstance(n, int) and n > 0 for n in queue.counts.values())

    def peek_next(self, settlement_id: int) -> Optional[str]:
        """Some structure type with a pending order, or ``None``.

        Which type wins when several are pending is unspecified; ordering
        among work lives on the work items' priority.
        """
        queue = self._queues.get(settlement_id)
        if queue is None:
            return None
        for structure_type, n in queue.counts.items():
            if isinstance(n, int) and n > 0:
                return structure_type
        return None

    # -- builder --------------------------------------------------------------
    def dispatch_next(self, world: World, settlement_id: int) -> Optional[WorkItem]:
        """Turn the next queued order into a work item if the stockpile covers it."""
        structure_type = self.peek_next(settlement_id)
        if structure_type is None:
            return None
        info = cfg.BUILDING_TYPES[structure_type]
        cost = info.get("cost", {})
        if not can_afford(world.resources, cost):
            logger.info("settlement %s cannot afford %s yet", settlement_id, structure_type)
            return None
        placement = self.dequeue_next(settlement_id, structure_type)
        if placement is None:
            return None
        deduct(world.resources, cost)
        item = WorkItem.new(
            world.ids,
            placement.x,
            placement.y,
            placement.tile,
            structure_type,
            settlement_id,
            total_work=float(info.get("build_time", 1.0)),
            priority=int(info.get("priority", 0)),
        )
        world.add_work_item(item)
        return item
