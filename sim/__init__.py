"""
Simulation package: world model, terrain, placement and construction.
Re-exports the engine types implemented in engine.py for convenience.
"""
from typing import Any

__all__ = ["VillageEngine", "World", "OperationResult"]


def __getattr__(name: str) -> Any:
    # Lazy import to avoid circular dependency during package import.
    if name in __all__:
        from engine import VillageEngine, World, OperationResult  # local import
        globals().update({
            "VillageEngine": VillageEngine,
            "World": World,
            "OperationResult": OperationResult,
        })
        return globals()[name]
    raise AttributeError(f"module 'sim' has no attribute {name!r}")
