from __future__ import annotations

"""Progress pending work items and complete them."""

import logging
from typing import List

from sim.entities import Structure
from sim.state import World
from sim.terrain import ROAD

logger = logging.getLogger(__name__)


def advance_construction(world: World, work: float) -> List[Structure]:
    """Add ``work`` to every pending item; finished items leave the world.

    Building items become :class:`Structure` instances on their tile, road
    items pave their tile. Returns the structures created this call.
    """
    if work <= 0:
        return []
    done = []
    built: List[Structure] = []
    for item in world.work_items:
        item.progress = min(item.total_work, item.progress + work)
        if not item.complete:
            continue
        done.append(item)
        if item.is_road:
            world.terrain.set(item.tile_x, item.tile_y, ROAD)
            continue
        x, y = world.terrain.tile_to_world(item.tile_x, item.tile_y)
        structure = Structure.new(world.ids, x, y, item.type, item.settlement_id, world.tile_size)
        world.structures.append(structure)
        built.append(structure)
        logger.info("completed %s for settlement %s", item.type, item.settlement_id)
    if done:
        world.remove_work_items(done)
    return built
