import pytest

from engine import VillageEngine
from errors import PlacementUnavailable
from sim.entities import IdSequence, Settlement
from systems.build_queue import BuildQueueManager


def _engine(tmp_path, **kw):
    eng = VillageEngine(save_dir=tmp_path, width=10, height=10, tile_size=32, **kw)
    eng.new_game(width=10, height=10, tile_size=32, generate=False)
    return eng


def test_three_houses_then_cancel(tmp_path):
    eng = _engine(tmp_path)
    s = eng.found_settlement(5 * 32, 5 * 32, name="Aldwick")

    for _ in range(3):
        assert eng.enqueue(s.id, "house").ok

    assert eng.pending_count(s.id, "house") == 3
    tiles = [p.tile for p in eng.planned_placements(s.id)]
    assert len(set(tiles)) == 3
    assert (5, 5) not in tiles

    for _ in range(3):
        assert eng.decrement(s.id, "house")
    assert eng.pending_count(s.id, "house") == 0
    assert eng.planned_placements(s.id) == []

    # cancelling an empty queue is a no-op
    assert eng.decrement(s.id, "house") is False
    assert eng.pending_count(s.id, "house") == 0
    assert not eng.has_pending(s.id)


def test_counts_match_planned_placements(tmp_path):
    eng = _engine(tmp_path)
    s = eng.found_settlement(5 * 32, 5 * 32)
    eng.enqueue(s.id, "farm")
    eng.enqueue(s.id, "house")
    eng.enqueue(s.id, "farm")
    eng.decrement(s.id, "farm")

    planned = eng.planned_placements(s.id)
    assert [p.type for p in planned] == ["farm", "house"]
    assert eng.pending_count(s.id, "farm") == 1
    assert eng.pending_count(s.id, "house") == 1


def test_dequeue_is_fifo_per_type(tmp_path):
    eng = _engine(tmp_path)
    s = eng.found_settlement(5 * 32, 5 * 32)
    eng.enqueue(s.id, "house")
    first = eng.planned_placements(s.id)[0]
    eng.enqueue(s.id, "farm")
    eng.enqueue(s.id, "house")

    got = eng.dequeue_next(s.id, "house")
    assert got == first
    assert eng.pending_count(s.id, "house") == 1
    assert eng.dequeue_next(s.id, "mine") is None


def test_unknown_settlement_queue_is_empty():
    queues = BuildQueueManager(lambda s, t: (0, 0))
    assert queues.count(42, "house") == 0
    assert not queues.has_pending(42)
    assert queues.peek_next(42) is None
    assert queues.dequeue_next(42, "house") is None
    assert queues.decrement(42, "house") is False
    assert queues.planned(42) == []


def test_enqueue_without_site_is_rejected(tmp_path):
    eng = _engine(tmp_path, placement_finder=lambda s, t: None)
    s = eng.found_settlement(5 * 32, 5 * 32, name="Bramford")

    result = eng.enqueue(s.id, "house")
    assert not result
    assert isinstance(result.error, PlacementUnavailable)
    assert result.error.kind == "placement_unavailable"
    assert "Bramford" in result.message
    assert eng.pending_count(s.id, "house") == 0
    assert eng.planned_placements(s.id) == []


def test_manager_raises_placement_unavailable():
    queues = BuildQueueManager(lambda s, t: None)
    s = Settlement.new(IdSequence(), 0, 0, "Colbury")
    with pytest.raises(PlacementUnavailable):
        queues.enqueue(s, "farm")
    with pytest.raises(ValueError):
        queues.enqueue(s, "castle")


def test_enqueue_needs_selected_settlement(tmp_path):
    eng = _engine(tmp_path)
    result = eng.enqueue(None, "house")
    assert not result.ok
    assert result.message == "No settlement selected"


def test_peek_next_reports_a_pending_type(tmp_path):
    eng = _engine(tmp_path)
    s = eng.found_settlement(5 * 32, 5 * 32)
    assert eng.peek_next(s.id) is None
    eng.enqueue(s.id, "mine")
    assert eng.peek_next(s.id) == "mine"
    assert eng.has_pending(s.id)


def test_dispatch_and_build(tmp_path):
    eng = _engine(tmp_path)
    s = eng.found_settlement(5 * 32, 5 * 32)
    eng.enqueue(s.id, "house")
    tile = eng.planned_placements(s.id)[0].tile

    item = eng.dispatch_construction(s.id)
    assert item is not None
    assert (item.tile_x, item.tile_y) == tile
    assert item.priority == 2
    assert eng.world.resources["wood"] == 35
    assert eng.world.resources["stone"] == 25
    assert not eng.has_pending(s.id)
    assert eng.world.next_work_item(s.id) is item

    assert eng.advance(1.0) == []
    built = eng.advance(1.0)
    assert len(built) == 1
    house = built[0]
    assert house.type == "house"
    assert house.settlement_id == s.id
    assert house.tile(32) == tile
    assert (house.x, house.y) == (tile[0] * 32.0, tile[1] * 32.0)
    assert eng.world.work_items == []


def test_dispatch_waits_for_resources(tmp_path):
    eng = _engine(tmp_path)
    s = eng.found_settlement(5 * 32, 5 * 32)
    eng.world.resources = {"wood": 0, "stone": 0, "food": 0}
    eng.enqueue(s.id, "mine")

    assert eng.dispatch_construction(s.id) is None
    assert eng.pending_count(s.id, "mine") == 1
    assert eng.world.work_items == []


def test_placement_skips_tiles_already_reserved(tmp_path):
    eng = _engine(tmp_path)
    a = eng.found_settlement(5 * 32, 5 * 32)
    b = eng.found_settlement(6 * 32, 5 * 32)
    eng.enqueue(a.id, "house")
    eng.enqueue(b.id, "house")
    tiles = [p.tile for p in eng.planned_placements(a.id) + eng.planned_placements(b.id)]
    assert len(set(tiles)) == 2
    assert (5, 5) not in tiles and (6, 5) not in tiles


def test_dequeue_twice_leaves_last_house(tmp_path):
    eng = _engine(tmp_path)
    s = eng.found_settlement(5 * 32, 5 * 32)
    for _ in range(3):
        eng.enqueue(s.id, "house")
    third = eng.planned_placements(s.id)[2]

    eng.dequeue_next(s.id, "house")
    eng.dequeue_next(s.id, "house")
    assert eng.pending_count(s.id, "house") == 1
    assert eng.planned_placements(s.id) == [third]

    eng.dequeue_next(s.id, "house")
    assert eng.dequeue_next(s.id, "house") is None
    assert eng.pending_count(s.id, "house") == 0
