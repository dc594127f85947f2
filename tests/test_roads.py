from sim.entities import IdSequence, Road
from sim.terrain import GRASS, ROAD, TerrainGrid
from systems.roads import plan_road, rebuild_road_tiles, road_tiles, trace_road_nodes


def test_trace_excludes_endpoints():
    assert trace_road_nodes((0, 0), (3, 0)) == [(1, 0), (2, 0)]
    assert trace_road_nodes((0, 0), (2, 2)) == [(1, 1)]
    assert trace_road_nodes((2, 2), (2, 2)) == []
    assert trace_road_nodes((0, 3), (0, 0)) == [(0, 2), (0, 1)]


def test_road_tiles_include_endpoints():
    road = Road.new(IdSequence(), 0, 0, 96, 0, settlement_id=1)
    road.nodes = [(1, 0), (2, 0)]
    assert road_tiles(road, 32) == [(0, 0), (1, 0), (2, 0), (3, 0)]


def test_rebuild_clears_stale_markers():
    terrain = TerrainGrid.filled(5, 3, 32)
    terrain.set(4, 2, ROAD)
    road = Road.new(IdSequence(), 0, 32, 64, 32, settlement_id=1)
    road.nodes = [(1, 1)]

    assert rebuild_road_tiles([road], terrain) == 3
    assert terrain.get(4, 2) == int(GRASS)
    assert terrain.count(int(ROAD)) == 3


def test_plan_road_skips_paved_tiles():
    terrain = TerrainGrid.filled(6, 2, 32)
    terrain.set(2, 0, ROAD)
    road, items = plan_road(IdSequence(), terrain, 1, (0, 0), (4, 0))
    assert road.nodes == [(1, 0), (2, 0), (3, 0)]
    assert [(i.tile_x, i.tile_y) for i in items] == [(0, 0), (1, 0), (3, 0), (4, 0)]
    assert all(i.is_road and i.priority == 0 for i in items)


def test_rebuild_leaves_pending_tiles_unpaved():
    terrain = TerrainGrid.filled(5, 2, 32)
    road = Road.new(IdSequence(), 0, 0, 96, 0, settlement_id=1)
    road.nodes = [(1, 0), (2, 0)]

    assert rebuild_road_tiles([road], terrain, unpaved=[(2, 0), (3, 0)]) == 2
    assert [terrain.get(x, 0) for x in range(4)] == [int(ROAD), int(ROAD), int(GRASS), int(GRASS)]
