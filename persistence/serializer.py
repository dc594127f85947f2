from __future__ import annotations

"""World -> snapshot bytes.

A snapshot is one header line followed by a JSON document::

    -- SaveInfo: 2024-05-01 18:22:03 - Villages: 3
    {"format_version": 1, "money": 100, ...}

Only persistent fields are written; path plans, build tasks and other
in-flight state are rebuilt after loading.
"""

from datetime import datetime
import json
from typing import Any, Dict, Optional

from errors import SerializationFailure
from sim.entities import Agent, Road, Settlement, Structure, WorkItem
from sim.state import World
from systems import config_village as cfg


def _settlement(s: Settlement, ts: int) -> Dict[str, Any]:
    tx, ty = s.tile(ts)
    return {
        "id": s.id,
        "x": s.x,
        "y": s.y,
        "tile_x": tx,
        "tile_y": ty,
        "name": s.name,
        "population": s.population,
        "max_population": s.max_population,
        "resources": dict(s.resources),
        "tier": s.tier,
    }


def _structure(b: Structure, ts: int) -> Dict[str, Any]:
    tx, ty = b.tile(ts)
    return {
        "id": b.id,
        "settlement_id": b.settlement_id,
        "x": b.x,
        "y": b.y,
        "tile_x": tx,
        "tile_y": ty,
        "type": b.type,
        "health": b.health,
        "max_health": b.max_health,
        "current_occupants": b.current_occupants,
        "occupant_capacity": b.occupant_capacity,
        "production_timer": b.production_timer,
        "production_time": b.production_time,
    }


def _work_item(w: WorkItem) -> Dict[str, Any]:
    return {
        "x": w.x,
        "y": w.y,
        "tile_x": w.tile_x,
        "tile_y": w.tile_y,
        "type": w.type,
        "settlement_id": w.settlement_id,
        "progress": w.progress,
        "total_work": w.total_work,
        "priority": w.priority,
    }


def _agent(a: Agent, ts: int) -> Dict[str, Any]:
    tx, ty = a.tile(ts)
    return {
        "id": a.id,
        "settlement_id": a.settlement_id,
        "x": a.x,
        "y": a.y,
        "tile_x": tx,
        "tile_y": ty,
        "target_x": a.target_x,
        "target_y": a.target_y,
        "state": a.state.value,
        "structure_id": a.structure_id,
        "resource_type": a.resource_type,
        "resource_amount": a.resource_amount,
    }


def _road(r: Road, ts: int) -> Dict[str, Any]:
    sx, sy = r.start_tile(ts)
    ex, ey = r.end_tile(ts)
    return {
        "id": r.id,
        "settlement_id": r.settlement_id,
        "start_x": r.start_x,
        "start_y": r.start_y,
        "end_x": r.end_x,
        "end_y": r.end_y,
        "start_tile_x": sx,
        "start_tile_y": sy,
        "end_tile_x": ex,
        "end_tile_y": ey,
        "nodes": [[int(nx), int(ny)] for nx, ny in r.nodes],
    }


def build_payload(world: World) -> Dict[str, Any]:
    """Return the snapshot body as plain Python data."""
    ts = world.tile_size
    terrain = world.terrain
    return {
        "format_version": cfg.SAVE_FORMAT_VERSION,
        "money": world.money,
        "resources": dict(world.resources),
        "game_speed": world.game_speed,
        "map_width": terrain.width,
        "map_height": terrain.height,
        "tile_size": terrain.tile_size,
        "map_tiles": terrain.tiles.tolist(),
        "settlements": [_settlement(s, ts) for s in world.settlements],
        "structures": [_structure(b, ts) for b in world.structures],
        "work_items": [_work_item(w) for w in world.work_items],
        "agents": [_agent(a, ts) for a in world.agents],
        "roads": [_road(r, ts) for r in world.roads],
    }


def header_line(world: World, now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    return f"{cfg.SAVE_HEADER_MARKER} {stamp} - Villages: {len(world.settlements)}"


def serialize_world(world: World, now: Optional[datetime] = None) -> bytes:
    """Encode ``world`` as snapshot bytes.

    Raises :class:`SerializationFailure` if any field cannot be encoded
    (non-finite numbers included); nothing is written in that case.
    """
    try:
        body = json.dumps(build_payload(world), allow_nan=False, separators=(",", ":"))
    except (TypeError, ValueError, OverflowError) as exc:
        raise SerializationFailure(f"Error serializing game data: {exc}") from exc
    return (header_line(world, now) + "\n" + body).encode("utf-8")
