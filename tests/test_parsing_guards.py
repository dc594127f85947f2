from persistence import from_python
from sim.entities import AgentState, snap
from sim.safe_parse import to_float, to_int, to_optional_float, to_optional_int, to_str


def test_safe_parse_helpers():
    assert to_int("7") == 7
    assert to_int("-3") == -3
    assert to_int("bad", default=3) == 3
    assert to_int(True, default=9) == 9
    assert to_int(4.9) == 4
    assert to_float("1.5") == 1.5
    assert to_float("nan", default=2.5) == 2.5
    assert to_float(float("inf"), default=1.0) == 1.0
    assert to_optional_int(None) is None
    assert to_optional_int("x") is None
    assert to_optional_float("-0.25") == -0.25
    assert to_str(12) == "12"
    assert to_str([1], default="d") == "d"


def test_mapping_getters_fall_back_to_defaults():
    rec = from_python({"pop": "12", "owner": "NA", "speed": [1], "name": 7, "target": None})
    assert rec.get_int("pop") == 12
    assert rec.get_int("owner", 0) == 0
    assert rec.get_float("speed", 1.0) == 1.0
    assert rec.get_str("name") == "7"
    assert rec.get_optional_float("target") is None
    assert rec.get_optional_int("missing") is None
    assert rec.get_sequence("pop").to_python() == []
    assert rec.get_mapping("pop").to_python() == {}
    assert rec.number_map("missing") is None


def test_agent_state_parse():
    assert AgentState.parse("moving") is AgentState.MOVING
    assert AgentState.parse("flying") is AgentState.IDLE
    assert AgentState.parse(None, AgentState.WORKING) is AgentState.WORKING


def test_snap_floors_negative_coordinates():
    assert snap(-1.0, 32) == -1
    assert snap(31.9, 32) == 0
    assert snap(32.0, 32) == 1
