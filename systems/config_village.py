"""
Village tuning knobs and snapshot constants.
Safe to tweak without touching system code.
"""

from typing import Dict

# Starting economy (also the fallbacks for snapshots missing these fields)
STARTING_MONEY: int = 100
STARTING_RESOURCES: Dict[str, float] = {"wood": 50, "stone": 30, "food": 40}
TIME_NORMAL_SPEED: float = 1.0

# Map
TILE_SIZE: int = 40
TILESET_TILE_COUNT: int = 5  # mountain, forest, grass, road, water
MAP_WIDTH: int = 75
MAP_HEIGHT: int = 75
MAX_BUILD_DISTANCE: float = 150.0  # world units from the settlement centre

# Settlements
BASE_POPULATION_CAPACITY: int = 5
SETTLEMENT_NAMES = (
    "Aldwick", "Bramford", "Colbury", "Dunholme", "Elmstead", "Fenwick",
    "Glenridge", "Harrowgate", "Ivybridge", "Kingsbury", "Lindholm",
    "Marlow", "Northwold", "Oakhurst", "Pembury", "Redcliffe",
)

# Structures. ``priority`` is copied onto the work item that builds it;
# houses jump ahead so population can keep growing.
BUILDING_TYPES: Dict[str, Dict] = {
    "farm": {
        "cost": {"wood": 15, "stone": 10},
        "build_time": 3.0,
        "work_capacity": 3,
        "production_time": 5.0,
        "resource": "food",
        "max_health": 100.0,
        "priority": 1,
    },
    "mine": {
        "cost": {"wood": 10, "stone": 25},
        "build_time": 5.0,
        "work_capacity": 2,
        "production_time": 5.0,
        "resource": "stone",
        "max_health": 150.0,
        "priority": 1,
    },
    "lumberyard": {
        "cost": {"wood": 10, "stone": 10},
        "build_time": 4.0,
        "work_capacity": 2,
        "production_time": 5.0,
        "resource": "wood",
        "max_health": 100.0,
        "priority": 1,
    },
    "house": {
        "cost": {"wood": 15, "stone": 5},
        "build_time": 2.0,
        "villager_capacity": 3,
        "production_time": 8.0,  # villager spawn interval
        "max_health": 80.0,
        "priority": 2,
    },
    "fishing_hut": {
        "cost": {"wood": 25, "stone": 5},
        "build_time": 4.0,
        "work_capacity": 2,
        "production_time": 5.0,
        "resource": "food",
        "max_health": 60.0,
        "priority": 1,
        "needs_water": True,
    },
}

# Roads
ROAD_WORK_PER_TILE: float = 1.0
ROAD_PRIORITY: int = 0

# Snapshots
SAVE_DIR: str = "saves"
SAVE_EXTENSION: str = ".save"
SAVE_PREFIX: str = "village"
SAVE_HEADER_MARKER: str = "-- SaveInfo:"
SAVE_FORMAT_VERSION: int = 1
