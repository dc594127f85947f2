"""
Persistence package: snapshot save/load, catalog listing.
"""

from __future__ import annotations

from datetime import datetime
import logging
from pathlib import Path
from typing import Optional, Union

from errors import CorruptSnapshot
from sim.entities import IdSequence
from sim.state import World
from sim.terrain import TerrainGrid

from .catalog import CatalogEntry, list_snapshots, read_summary
from .deserializer import parse_snapshot, split_header
from .reconstruct import TilesetLoader, reconstruct_world
from .serializer import build_payload, header_line, serialize_world
from .store import read_snapshot, snapshot_filename, timestamped_filename, write_snapshot
from .values import MappingValue, ScalarValue, SequenceValue, from_python

logger = logging.getLogger(__name__)


def save_snapshot(world: World, directory: Union[str, Path], name: Optional[str] = None,
                  now: Optional[datetime] = None) -> Path:
    """Serialize ``world`` and write it as a new file; returns the written path."""
    filename = snapshot_filename(name, now)
    data = serialize_world(world, now)
    return write_snapshot(directory, filename, data)


def load_snapshot(world: World, path: Union[str, Path],
                  tileset_loader: Optional[TilesetLoader] = None) -> World:
    """Replace the contents of ``world`` with the snapshot at ``path``.

    The snapshot is parsed and rebuilt into a staging world first; ``world``
    only changes once that has fully succeeded.
    """
    data = parse_snapshot(read_snapshot(path))
    current = world.terrain
    staging = World(
        terrain=TerrainGrid(current.width, current.height, current.tile_size,
                            current.tiles.copy(), current.tileset),
        ids=IdSequence(world.ids.peek),
    )
    try:
        reconstruct_world(data, staging, tileset_loader)
    except (ValueError, TypeError, OverflowError, RecursionError) as exc:
        raise CorruptSnapshot(f"Error restoring save file: {exc}", path=str(path)) from exc
    world.replace_with(staging)
    logger.info("loaded snapshot %s", path)
    return world


__all__ = [
    "CatalogEntry",
    "MappingValue",
    "ScalarValue",
    "SequenceValue",
    "TilesetLoader",
    "build_payload",
    "from_python",
    "header_line",
    "list_snapshots",
    "load_snapshot",
    "parse_snapshot",
    "read_snapshot",
    "read_summary",
    "reconstruct_world",
    "save_snapshot",
    "serialize_world",
    "snapshot_filename",
    "split_header",
    "timestamped_filename",
    "write_snapshot",
]
