from __future__ import annotations

"""Live world entities: settlements, structures, villagers, work items, roads.

Entities reference each other by id (``settlement_id``, ``structure_id``)
rather than by containment, so a structure can outlive the settlement it
belonged to.  Fields marked transient are never written to snapshots.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
import math

from systems import config_village as cfg

Coord = Tuple[int, int]


class IdSequence:
    """Hands out increasing integer ids; owned by a :class:`sim.state.World`."""

    def __init__(self, start: int = 1) -> None:
        self._next = start

    def next(self) -> int:
        ident = self._next
        self._next += 1
        return ident

    def reserve_past(self, ident: int) -> None:
        """Make sure ``ident`` is never handed out again."""
        if ident >= self._next:
            self._next = ident + 1

    @property
    def peek(self) -> int:
        return self._next


class AgentState(str, Enum):
    IDLE = "idle"
    SEEKING_WORK = "seeking_work"
    MOVING = "moving"
    WORKING = "working"
    BUILDING = "building"
    TRANSPORTING = "transporting"
    RETURNING_HOME = "returning_home"

    @classmethod
    def parse(cls, value: Any, default: Optional["AgentState"] = None) -> "AgentState":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value))
        except ValueError:
            return default if default is not None else cls.IDLE


def snap(value: float, tile_size: int) -> int:
    """Tile index containing world coordinate ``value``."""
    return int(math.floor(value / tile_size))


class GridPlaced:
    """Mixin for entities that keep an authoritative tile next to their position.

    ``tile_x``/``tile_y`` are set on placement and by :meth:`move_to`; direct
    edits of ``x``/``y`` (drift, mid-motion saves) leave the tile alone.
    """

    def tile(self, tile_size: int) -> Coord:
        if self.tile_x is not None and self.tile_y is not None:
            return (self.tile_x, self.tile_y)
        return (snap(self.x, tile_size), snap(self.y, tile_size))

    def move_to(self, x: float, y: float, tile_size: int) -> None:
        self.x = float(x)
        self.y = float(y)
        self.tile_x = snap(self.x, tile_size)
        self.tile_y = snap(self.y, tile_size)

    def _place(self, tile_size: Optional[int]) -> None:
        if tile_size:
            self.tile_x = snap(self.x, tile_size)
            self.tile_y = snap(self.y, tile_size)


# =============================== ENTITIES =====================================

@dataclass
class Settlement(GridPlaced):
    id: int
    x: float
    y: float
    name: str
    population: int = 0
    max_population: int = cfg.BASE_POPULATION_CAPACITY
    resources: Dict[str, float] = field(default_factory=dict)
    tier: int = 0
    tile_x: Optional[int] = None
    tile_y: Optional[int] = None

    @classmethod
    def new(cls, ids: IdSequence, x: float, y: float, name: str,
            tile_size: Optional[int] = None) -> "Settlement":
        s = cls(id=ids.next(), x=float(x), y=float(y), name=name)
        s._place(tile_size)
        return s


@dataclass
class Structure(GridPlaced):
    id: int
    settlement_id: Optional[int]
    x: float
    y: float
    type: str
    health: float = 100.0
    max_health: float = 100.0
    current_occupants: int = 0
    occupant_capacity: int = 0
    production_timer: float = 0.0
    production_time: float = 0.0
    tile_x: Optional[int] = None
    tile_y: Optional[int] = None

    @classmethod
    def new(cls, ids: IdSequence, x: float, y: float, structure_type: str,
            settlement_id: Optional[int], tile_size: Optional[int] = None) -> "Structure":
        info = cfg.BUILDING_TYPES.get(structure_type, {})
        capacity = info.get("villager_capacity", info.get("work_capacity", 0))
        max_health = float(info.get("max_health", 100.0))
        production_time = float(info.get("production_time", 0.0))
        b = cls(
            id=ids.next(),
            settlement_id=settlement_id,
            x=float(x),
            y=float(y),
            type=structure_type,
            health=max_health,
            max_health=max_health,
            occupant_capacity=int(capacity),
            production_timer=production_time,
            production_time=production_time,
        )
        b._place(tile_size)
        return b


@dataclass
class Agent(GridPlaced):
    id: int
    settlement_id: Optional[int]
    x: float
    y: float
    target_x: Optional[float] = None
    target_y: Optional[float] = None
    state: AgentState = AgentState.SEEKING_WORK
    structure_id: Optional[int] = None
    resource_type: Optional[str] = None
    resource_amount: float = 0.0
    tile_x: Optional[int] = None
    tile_y: Optional[int] = None
    # transient
    path: Optional[List[Coord]] = field(default=None, compare=False)
    build_task: Optional["WorkItem"] = field(default=None, compare=False)
    build_progress: float = field(default=0.0, compare=False)

    @classmethod
    def new(cls, ids: IdSequence, x: float, y: float, settlement_id: Optional[int],
            structure_id: Optional[int] = None, tile_size: Optional[int] = None) -> "Agent":
        a = cls(id=ids.next(), settlement_id=settlement_id, x=float(x), y=float(y),
                structure_id=structure_id)
        a._place(tile_size)
        return a


@dataclass
class WorkItem:
    """Unfinished construction of a structure or a road tile."""

    x: float
    y: float
    tile_x: int
    tile_y: int
    type: str
    settlement_id: Optional[int]
    total_work: float
    progress: float = 0.0
    priority: int = 0
    # runtime handle; not persisted
    id: int = field(default=0, compare=False)

    @classmethod
    def new(cls, ids: IdSequence, x: float, y: float, tile: Coord, work_type: str,
            settlement_id: Optional[int], total_work: float, priority: int = 0) -> "WorkItem":
        return cls(x=float(x), y=float(y), tile_x=int(tile[0]), tile_y=int(tile[1]),
                   type=work_type, settlement_id=settlement_id,
                   total_work=float(total_work), priority=int(priority), id=ids.next())

    @property
    def is_road(self) -> bool:
        return self.type == "road"

    @property
    def complete(self) -> bool:
        return self.progress >= self.total_work


@dataclass
class Road:
    id: int
    settlement_id: Optional[int]
    start_x: float
    start_y: float
    end_x: float
    end_y: float
    nodes: List[Coord] = field(default_factory=list)

    @classmethod
    def new(cls, ids: IdSequence, start_x: float, start_y: float, end_x: float,
            end_y: float, settlement_id: Optional[int]) -> "Road":
        return cls(id=ids.next(), settlement_id=settlement_id, start_x=float(start_x),
                   start_y=float(start_y), end_x=float(end_x), end_y=float(end_y))

    def start_tile(self, tile_size: int) -> Coord:
        return (snap(self.start_x, tile_size), snap(self.start_y, tile_size))

    def end_tile(self, tile_size: int) -> Coord:
        return (snap(self.end_x, tile_size), snap(self.end_y, tile_size))
