from sim.entities import Settlement, Structure
from sim.placement import GridPlacementFinder
from sim.state import World
from sim.terrain import MOUNTAIN, WATER, TerrainGrid


def _world(width=10, height=10):
    return World.empty(width, height, 32)


def test_nearest_free_tile_first():
    w = _world()
    s = Settlement.new(w.ids, 5 * 32, 5 * 32, "Aldwick", 32)
    w.settlements.append(s)
    finder = GridPlacementFinder(lambda: w)
    assert finder(s, "house") == (4, 4)

    w.structures.append(Structure.new(w.ids, 4 * 32, 4 * 32, "house", s.id, 32))
    assert finder(s, "house") == (5, 4)


def test_reserved_tiles_are_skipped():
    w = _world()
    s = Settlement.new(w.ids, 5 * 32, 5 * 32, "Aldwick", 32)
    w.settlements.append(s)
    finder = GridPlacementFinder(lambda: w, lambda: [(4, 4), (5, 4)])
    assert finder(s, "farm") == (6, 4)


def test_water_structures_need_a_shore():
    w = _world()
    w.terrain.set(8, 5, WATER)
    s = Settlement.new(w.ids, 5 * 32, 5 * 32, "Aldwick", 32)
    w.settlements.append(s)
    tile = GridPlacementFinder(lambda: w)(s, "fishing_hut")
    assert tile is not None
    assert w.terrain.is_adjacent_to_water(*tile)


def test_no_site_returns_none():
    w = _world()
    w.terrain = TerrainGrid.filled(10, 10, 32, MOUNTAIN)
    s = Settlement.new(w.ids, 5 * 32, 5 * 32, "Aldwick", 32)
    assert GridPlacementFinder(lambda: w)(s, "house") is None


def test_respects_max_distance():
    w = _world()
    s = Settlement.new(w.ids, 5 * 32, 5 * 32, "Aldwick", 32)
    finder = GridPlacementFinder(lambda: w, max_distance=40.0)
    # only the four orthogonal neighbours are within range
    assert finder(s, "house") == (5, 4)


def test_orphaned_structure_cannot_upgrade():
    w = _world()
    s = Settlement.new(w.ids, 5 * 32, 5 * 32, "Aldwick", 32)
    w.settlements.append(s)
    b = Structure.new(w.ids, 4 * 32, 4 * 32, "farm", s.id, 32)
    assert w.can_upgrade(b)
    w.settlements.remove(s)
    assert not w.can_upgrade(b)
    # orphans still occupy their tile
    w.structures.append(b)
    assert (4, 4) in w.occupied_tiles()


def test_tile_follows_moves_not_drift():
    w = _world()
    s = Settlement.new(w.ids, 4 * 32, 7 * 32, "Aldwick", 32)
    s.x, s.y = 131.0, 223.0
    assert s.tile(32) == (4, 7)
    s.move_to(200.0, 40.0, 32)
    assert s.tile(32) == (6, 1)
