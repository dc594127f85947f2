from __future__ import annotations

"""Terrain grid and tile helpers."""

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple
import math

import numpy as np

from systems import config_village as cfg

# Tile identifiers (uint8)
# These constants are stable and used for serialization.
MOUNTAIN: np.uint8 = np.uint8(1)
FOREST: np.uint8 = np.uint8(2)
GRASS: np.uint8 = np.uint8(3)
ROAD: np.uint8 = np.uint8(4)
WATER: np.uint8 = np.uint8(5)

VALID_TILES = frozenset(int(t) for t in (MOUNTAIN, FOREST, GRASS, ROAD, WATER))

# Stable default generation probabilities
DEFAULT_P: Dict[str, float] = {
    "forest": 0.18,
    "mountain": 0.06,
    "water": 0.06,
}

TileCoord = Tuple[int, int]


@dataclass
class TileSet:
    """Tile atlas metadata; loaded lazily before terrain is restored."""

    image_width: int
    image_height: int
    tile_count: int = cfg.TILESET_TILE_COUNT

    @property
    def tile_size(self) -> int:
        return self.image_width // self.tile_count


def load_default_tileset() -> TileSet:
    """Describe the built-in tile strip (one square per tile type)."""
    size = cfg.TILE_SIZE
    return TileSet(image_width=size * cfg.TILESET_TILE_COUNT, image_height=size)


@dataclass
class TerrainGrid:
    """Rectangular tile map. ``tiles`` is indexed ``[row, col]`` i.e. ``[y, x]``."""

    width: int
    height: int
    tile_size: int
    tiles: np.ndarray
    tileset: Optional[TileSet] = None

    def __post_init__(self) -> None:
        expected = (self.height, self.width)
        if self.tiles.shape != expected:
            raise ValueError(f"tiles shape {self.tiles.shape} != {expected}")
        if self.tiles.dtype != np.uint8:
            raise ValueError(f"tiles dtype {self.tiles.dtype} != uint8")
        if self.tile_size <= 0:
            raise ValueError("tile_size must be positive")

    @classmethod
    def filled(cls, width: int, height: int, tile_size: int = cfg.TILE_SIZE,
               tile: np.uint8 = GRASS) -> "TerrainGrid":
        return cls(width, height, tile_size, np.full((height, width), tile, dtype=np.uint8))

    # -- coordinates ---------------------------------------------------------
    def world_to_tile(self, x: float, y: float) -> TileCoord:
        return (int(math.floor(x / self.tile_size)), int(math.floor(y / self.tile_size)))

    def tile_to_world(self, tx: int, ty: int) -> Tuple[float, float]:
        """Top-left world position of a tile; the grid-aligned position used on reload."""
        return (float(tx * self.tile_size), float(ty * self.tile_size))

    def in_bounds(self, tx: int, ty: int) -> bool:
        return 0 <= tx < self.width and 0 <= ty < self.height

    # -- tile access ---------------------------------------------------------
    def get(self, tx: int, ty: int) -> int:
        """Tile type at ``(tx, ty)``; out of bounds reads as grass."""
        if not self.in_bounds(tx, ty):
            return int(GRASS)
        return int(self.tiles[ty, tx])

    def set(self, tx: int, ty: int, tile: int) -> None:
        if self.in_bounds(tx, ty):
            self.tiles[ty, tx] = tile

    def can_build_at(self, tx: int, ty: int) -> bool:
        if not self.in_bounds(tx, ty):
            return False
        return self.get(tx, ty) not in (int(WATER), int(MOUNTAIN), int(ROAD))

    def is_adjacent_to_water(self, tx: int, ty: int) -> bool:
        if not self.in_bounds(tx, ty) or self.get(tx, ty) == int(WATER):
            return False
        for nx, ny in self.neighbors8(tx, ty):
            if self.get(nx, ny) == int(WATER):
                return True
        return False

    def neighbors8(self, tx: int, ty: int) -> Iterator[TileCoord]:
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                if dx == 0 and dy == 0:
                    continue
                nx, ny = tx + dx, ty + dy
                if self.in_bounds(nx, ny):
                    yield (nx, ny)

    def clear_roads(self, replacement: np.uint8 = GRASS) -> None:
        self.tiles[self.tiles == ROAD] = replacement

    def count(self, tile: int) -> int:
        return int((self.tiles == tile).sum())


def _rand_mask(rng: np.random.Generator, shape: tuple[int, int], prob: float) -> np.ndarray:
    """Boolean mask drawn with probability ``prob`` (clamped to ``[0, 1]``)."""
    prob = float(np.clip(prob, 0.0, 1.0))
    if prob <= 0.0:
        return np.zeros(shape, dtype=bool)
    if prob >= 1.0:
        return np.ones(shape, dtype=bool)
    return rng.random(shape) < prob


def generate_terrain(
    width: int,
    height: int,
    rng: np.random.Generator,
    tile_size: int = cfg.TILE_SIZE,
    p: Dict[str, float] | None = None,
) -> TerrainGrid:
    """Scatter forest, mountain and water over a grass map.

    Terrain shaping proper lives outside this package; this gives new games
    and tests a deterministic, buildable map for a given ``rng``.
    """
    probs = dict(DEFAULT_P)
    if p:
        probs.update(p)
    shape = (height, width)
    tiles = np.full(shape, GRASS, dtype=np.uint8)
    tiles[_rand_mask(rng, shape, probs["forest"])] = FOREST
    tiles[_rand_mask(rng, shape, probs["mountain"])] = MOUNTAIN
    tiles[_rand_mask(rng, shape, probs["water"])] = WATER
    return TerrainGrid(width, height, tile_size, tiles)
