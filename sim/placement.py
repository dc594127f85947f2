from __future__ import annotations

"""Default placement search for queued structures."""

from typing import Callable, Iterable, Iterator, Optional, Tuple
import math

from sim.entities import Coord, Settlement
from sim.state import World
from systems import config_village as cfg

PlacementFinder = Callable[[Settlement, str], Optional[Coord]]


def _rings(cx: int, cy: int, radius: int) -> Iterator[Coord]:
    """Yield tiles in square rings around ``(cx, cy)``, nearest ring first."""
    for r in range(1, radius + 1):
        for dx in range(-r, r + 1):
            yield (cx + dx, cy - r)
        for dy in range(-r + 1, r + 1):
            yield (cx + r, cy + dy)
        for dx in range(r - 1, -r - 1, -1):
            yield (cx + dx, cy + r)
        for dy in range(r - 1, -r, -1):
            yield (cx - r, cy + dy)


class GridPlacementFinder:
    """Find a free, buildable tile near a settlement.

    ``world`` is a callable so the finder keeps working after a load swaps
    the live world. ``reserved`` returns tiles already promised to planned
    placements of any settlement.
    """

    def __init__(self, world: Callable[[], World],
                 reserved: Optional[Callable[[], Iterable[Coord]]] = None,
                 max_distance: float = cfg.MAX_BUILD_DISTANCE) -> None:
        self._world = world
        self._reserved = reserved
        self.max_distance = max_distance

    def __call__(self, settlement: Settlement, structure_type: str) -> Optional[Coord]:
        world = self._world()
        terrain = world.terrain
        ts = terrain.tile_size
        home = settlement.tile(ts)
        radius = max(1, int(math.ceil(self.max_distance / ts)))

        blocked = world.occupied_tiles()
        blocked.add(home)
        for other in world.settlements:
            blocked.add(other.tile(ts))
        if self._reserved is not None:
            blocked.update(tuple(t) for t in self._reserved())

        needs_water = bool(cfg.BUILDING_TYPES.get(structure_type, {}).get("needs_water"))
        for tx, ty in _rings(home[0], home[1], radius):
            if (tx, ty) in blocked or not terrain.can_build_at(tx, ty):
                continue
            if math.hypot(tx - home[0], ty - home[1]) * ts > self.max_distance:
                continue
            if needs_water and not terrain.is_adjacent_to_water(tx, ty):
                continue
            return (tx, ty)
        return None
