"""Road tiles.

Road entities are the source of truth; the ``ROAD`` marker on the terrain
grid is a cache rebuilt from them.
"""

from __future__ import annotations

from typing import Iterable, List

from sim.entities import Coord, IdSequence, Road, WorkItem
from sim.terrain import GRASS, ROAD, TerrainGrid
from systems import config_village as cfg


def trace_road_nodes(start: Coord, end: Coord) -> List[Coord]:
    """Tiles strictly between ``start`` and ``end`` on a straight line (Bresenham)."""
    x0, y0 = start
    x1, y1 = end
    dx, dy = abs(x1 - x0), -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    out: List[Coord] = []
    x, y = x0, y0
    while (x, y) != (x1, y1):
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x += sx
        if e2 <= dx:
            err += dx
            y += sy
        if (x, y) != (x1, y1):
            out.append((x, y))
    return out


def road_tiles(road: Road, tile_size: int) -> List[Coord]:
    """Every tile a road covers, endpoints included, in order."""
    tiles = [road.start_tile(tile_size)]
    tiles.extend(tuple(n) for n in road.nodes)
    end = road.end_tile(tile_size)
    if end != tiles[-1]:
        tiles.append(end)
    return tiles


def rebuild_road_tiles(roads: Iterable[Road], terrain: TerrainGrid,
                       unpaved: Iterable[Coord] = ()) -> int:
    """Drop stale road markers, then mark every tile of every road. Returns tiles marked.

    Tiles in ``unpaved`` still have road work pending and stay unmarked.
    """
    terrain.clear_roads(GRASS)
    pending = set(unpaved)
    marked = set()
    for road in roads:
        for tx, ty in road_tiles(road, terrain.tile_size):
            if terrain.in_bounds(tx, ty) and (tx, ty) not in pending:
                terrain.set(tx, ty, ROAD)
                marked.add((tx, ty))
    return len(marked)


def plan_road(ids: IdSequence, terrain: TerrainGrid, settlement_id: int,
              start: Coord, end: Coord) -> tuple[Road, List[WorkItem]]:
    """Create a road entity plus one work item per tile still to be paved."""
    ts = terrain.tile_size
    sx, sy = terrain.tile_to_world(*start)
    ex, ey = terrain.tile_to_world(*end)
    road = Road.new(ids, sx, sy, ex, ey, settlement_id)
    road.nodes = trace_road_nodes(start, end)
    items = []
    for tx, ty in road_tiles(road, ts):
        if terrain.get(tx, ty) == int(ROAD):
            continue
        wx, wy = terrain.tile_to_world(tx, ty)
        items.append(WorkItem.new(ids, wx, wy, (tx, ty), "road", settlement_id,
                                  total_work=cfg.ROAD_WORK_PER_TILE, priority=cfg.ROAD_PRIORITY))
    return road, items
