"""Error taxonomy shared by the build queue and snapshot persistence.

Every error here is recoverable: the engine catches them at the operation
boundary and turns them into an :class:`engine.OperationResult` so the
calling shell can show the message and let the player retry.
"""

from __future__ import annotations

from typing import Optional


class VillageError(Exception):
    """Base class for recoverable village-core failures."""

    kind = "error"

    def __init__(self, message: str, *, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path


class PlacementUnavailable(VillageError):
    """No collision-free tile was found for a queued structure."""

    kind = "placement_unavailable"


class SerializationFailure(VillageError):
    """The world could not be encoded; nothing was written."""

    kind = "serialization_failure"


class WriteFailure(VillageError):
    """Storage refused the snapshot; any previous file is untouched."""

    kind = "write_failure"


class CorruptSnapshot(VillageError):
    """Snapshot text is malformed or is not a composite value."""

    kind = "corrupt_snapshot"


class MissingFile(VillageError):
    """The snapshot selected for loading does not exist."""

    kind = "missing_file"
