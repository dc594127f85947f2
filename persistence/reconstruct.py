from __future__ import annotations

"""Rebuild a live world from a parsed snapshot.

Each entity is created through its normal ``new`` constructor so derived
defaults are in place, then overwritten with the persisted fields.  Grid
positions are re-derived from the saved tile coordinates, and state that
does not survive a reload (path plans, build tasks) is reset.

Nothing is assigned to the target world until every section has been
read, so a snapshot that fails validation leaves the world untouched.
"""

import logging
from typing import Callable, List, Optional, Tuple

import numpy as np

from errors import CorruptSnapshot
from persistence.values import MappingValue, SequenceValue
from sim.entities import (
    Agent,
    AgentState,
    Coord,
    IdSequence,
    Road,
    Settlement,
    Structure,
    WorkItem,
)
from sim.state import World
from sim.terrain import GRASS, VALID_TILES, TerrainGrid, TileSet, load_default_tileset
from systems import config_village as cfg
from systems.roads import rebuild_road_tiles

logger = logging.getLogger(__name__)

TilesetLoader = Callable[[], TileSet]

ENTITY_SECTIONS = ("settlements", "structures", "agents", "roads")


# -----------------------------------------------------------------------------
# Helpers


def _tile_of(rec: MappingValue, prefix: str, pos_x: float, pos_y: float, ts: int) -> Coord:
    """Saved tile coordinate, or the tile containing the saved position."""
    tx = rec.get_optional_int(f"{prefix}tile_x")
    ty = rec.get_optional_int(f"{prefix}tile_y")
    if tx is None:
        tx = int(np.floor(pos_x / ts))
    if ty is None:
        ty = int(np.floor(pos_y / ts))
    return tx, ty


def _max_persisted_id(data: MappingValue) -> int:
    best = 0
    for section in ENTITY_SECTIONS:
        for rec in data.get_sequence(section).mappings():
            ident = rec.get_optional_int("id")
            if ident is not None and ident > best:
                best = ident
    return best


def _restore_terrain(data: MappingValue, current: TerrainGrid,
                     tileset_loader: Optional[TilesetLoader]) -> TerrainGrid:
    tileset = current.tileset
    if tileset is None:
        tileset = (tileset_loader or load_default_tileset)()

    tile_size = data.get_int("tile_size", tileset.tile_size)
    if tile_size <= 0:
        logger.warning("snapshot tile_size %r invalid, using %d", tile_size, tileset.tile_size)
        tile_size = tileset.tile_size

    if "map_tiles" not in data:
        terrain = TerrainGrid(current.width, current.height, tile_size,
                              current.tiles.copy(), tileset)
        return terrain

    width = data.get_int("map_width", -1)
    height = data.get_int("map_height", -1)
    rows = data.fields["map_tiles"]
    if not isinstance(rows, SequenceValue):
        raise CorruptSnapshot("map tiles are not a grid")
    if height < 0:
        height = len(rows)
    if len(rows) != height:
        raise CorruptSnapshot(f"map has {len(rows)} rows, expected {height}")

    # shape is checked against the rows before anything is allocated
    for r, row in enumerate(rows):
        if not isinstance(row, SequenceValue):
            raise CorruptSnapshot(f"map row {r} is not a sequence")
        if width < 0:
            width = len(row)
        if len(row) != width:
            raise CorruptSnapshot(f"map row {r} has {len(row)} tiles, expected {width}")
    if width < 0:
        width = 0
    if height == 0 and width != 0:
        raise CorruptSnapshot(f"map has no rows but width {width}")

    tiles = np.full((height, width), GRASS, dtype=np.uint8)
    replaced = 0
    for r, row in enumerate(rows):
        for c, cell in enumerate(row):
            value = cell.to_python()
            if isinstance(value, int) and not isinstance(value, bool) and value in VALID_TILES:
                tiles[r, c] = value
            else:
                replaced += 1
    if replaced:
        logger.warning("replaced %d unknown map tiles with grass", replaced)
    return TerrainGrid(width, height, tile_size, tiles, tileset)


# -----------------------------------------------------------------------------
# Entities


def _settlement(rec: MappingValue, ids: IdSequence, ts: int) -> Settlement:
    x = rec.get_float("x")
    y = rec.get_float("y")
    if "tile_x" in rec or "tile_y" in rec:
        tx, ty = _tile_of(rec, "", x, y, ts)
        x, y = float(tx * ts), float(ty * ts)
    s = Settlement.new(ids, x, y, rec.get_str("name", "Unnamed"), ts)
    s.id = rec.get_int("id", s.id)
    s.population = rec.get_int("population", s.population)
    s.max_population = rec.get_int("max_population", s.max_population)
    resources = rec.number_map("resources")
    if resources is not None:
        s.resources = resources
    s.tier = rec.get_int("tier", s.tier)
    return s


def _structure(rec: MappingValue, ids: IdSequence, ts: int) -> Optional[Structure]:
    structure_type = rec.get_optional_str("type")
    if not structure_type:
        logger.warning("skipping structure without a type: %r", rec.to_python())
        return None
    tx, ty = _tile_of(rec, "", rec.get_float("x"), rec.get_float("y"), ts)
    b = Structure.new(ids, tx * ts, ty * ts, structure_type,
                      rec.get_optional_int("settlement_id"), tile_size=ts)
    b.id = rec.get_int("id", b.id)
    b.health = rec.get_float("health", b.health)
    b.max_health = rec.get_float("max_health", b.max_health)
    b.current_occupants = rec.get_int("current_occupants", b.current_occupants)
    b.occupant_capacity = rec.get_int("occupant_capacity", b.occupant_capacity)
    b.production_timer = rec.get_float("production_timer", b.production_timer)
    b.production_time = rec.get_float("production_time", b.production_time)
    return b


def _agent(rec: MappingValue, ids: IdSequence, ts: int) -> Agent:
    tx, ty = _tile_of(rec, "", rec.get_float("x"), rec.get_float("y"), ts)
    a = Agent.new(ids, tx * ts, ty * ts, rec.get_optional_int("settlement_id"), tile_size=ts)
    a.id = rec.get_int("id", a.id)
    a.target_x = rec.get_optional_float("target_x")
    a.target_y = rec.get_optional_float("target_y")
    a.state = AgentState.parse(rec.get_optional_str("state"), AgentState.IDLE)
    a.structure_id = rec.get_optional_int("structure_id")
    a.resource_type = rec.get_optional_str("resource_type")
    a.resource_amount = rec.get_float("resource_amount", a.resource_amount)

    # Build links point at queue state that was never saved.
    a.path = None
    a.build_task = None
    a.build_progress = 0.0
    if a.state is AgentState.BUILDING:
        a.state = AgentState.IDLE
    if a.target_x is None:
        a.target_x = a.x
    if a.target_y is None:
        a.target_y = a.y
    return a


def _nodes(seq: SequenceValue) -> List[Coord]:
    out: List[Coord] = []
    for node in seq:
        pair = node.to_python()
        if (isinstance(pair, list) and len(pair) == 2
                and all(isinstance(v, int) and not isinstance(v, bool) for v in pair)):
            out.append((pair[0], pair[1]))
        else:
            logger.warning("dropping malformed road node %r", pair)
    return out


def _road(rec: MappingValue, ids: IdSequence, ts: int) -> Road:
    sx, sy = _tile_of(rec, "start_", rec.get_float("start_x"), rec.get_float("start_y"), ts)
    ex, ey = _tile_of(rec, "end_", rec.get_float("end_x"), rec.get_float("end_y"), ts)
    r = Road.new(ids, sx * ts, sy * ts, ex * ts, ey * ts, rec.get_optional_int("settlement_id"))
    r.id = rec.get_int("id", r.id)
    r.nodes = _nodes(rec.get_sequence("nodes"))
    return r


def _work_item(rec: MappingValue, ids: IdSequence, ts: int) -> Optional[WorkItem]:
    work_type = rec.get_optional_str("type")
    if not work_type:
        logger.warning("skipping work item without a type: %r", rec.to_python())
        return None
    x = rec.get_float("x")
    y = rec.get_float("y")
    tile = _tile_of(rec, "", x, y, ts)
    default_work = cfg.BUILDING_TYPES.get(work_type, {}).get("build_time", cfg.ROAD_WORK_PER_TILE)
    item = WorkItem.new(ids, x, y, tile, work_type, rec.get_optional_int("settlement_id"),
                        total_work=rec.get_float("total_work", default_work))
    item.progress = rec.get_float("progress", 0.0)
    item.priority = rec.get_int("priority", 0)
    return item


def _collect(data: MappingValue, section: str, build, ids: IdSequence, ts: int) -> list:
    out = []
    seq = data.get_sequence(section)
    for rec in seq.mappings():
        entity = build(rec, ids, ts)
        if entity is not None:
            out.append(entity)
    skipped = len(seq) - sum(1 for _ in seq.mappings())
    if skipped:
        logger.warning("skipped %d malformed %s entries", skipped, section)
    return out


# -----------------------------------------------------------------------------
# Public API


def reconstruct_world(data: MappingValue, world: World,
                      tileset_loader: Optional[TilesetLoader] = None) -> World:
    """Populate ``world`` from ``data`` and return it.

    Raises :class:`CorruptSnapshot` for structural problems (bad map grid)
    before touching ``world``.  Malformed individual entities are skipped
    with a warning.
    """
    money = data.get_float("money", cfg.STARTING_MONEY)
    resources = data.number_map("resources")
    if resources is None:
        resources = dict(cfg.STARTING_RESOURCES)
    game_speed = data.get_float("game_speed", cfg.TIME_NORMAL_SPEED)

    terrain = _restore_terrain(data, world.terrain, tileset_loader)
    ts = terrain.tile_size

    ids = IdSequence(world.ids.peek)
    ids.reserve_past(_max_persisted_id(data))

    settlements = _collect(data, "settlements", _settlement, ids, ts)
    structures = _collect(data, "structures", _structure, ids, ts)
    work_items = _collect(data, "work_items", _work_item, ids, ts)
    agents = _collect(data, "agents", _agent, ids, ts)
    roads = _collect(data, "roads", _road, ids, ts)

    # commit
    world.money = money
    world.resources = resources
    world.game_speed = game_speed
    world.terrain = terrain
    world.settlements = settlements
    world.structures = structures
    world.work_items = work_items
    world.agents = agents
    world.roads = roads
    world.ids.reserve_past(ids.peek - 1)

    world.rebuild_work_order()
    unpaved = {(w.tile_x, w.tile_y) for w in world.work_items if w.is_road}
    rebuild_road_tiles(world.roads, world.terrain, unpaved)
    logger.info(
        "reconstructed world: %d settlements, %d structures, %d work items, %d agents, %d roads",
        len(settlements), len(structures), len(work_items), len(agents), len(roads),
    )
    return world
