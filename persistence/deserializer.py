from __future__ import annotations

"""Snapshot bytes -> typed value."""

import json
import logging
from typing import Tuple

from errors import CorruptSnapshot
from persistence.values import MappingValue, from_python
from systems import config_village as cfg

logger = logging.getLogger(__name__)


def _reject_constant(name: str) -> float:
    raise ValueError(f"non-finite number {name} in snapshot")


def split_header(data: bytes) -> Tuple[str, str]:
    """Return ``(header, body)``; the header line must carry the snapshot marker."""
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CorruptSnapshot(f"Error parsing save file: {exc}") from exc
    header, sep, body = text.partition("\n")
    if not header.startswith(cfg.SAVE_HEADER_MARKER):
        raise CorruptSnapshot("Error parsing save file: missing header line")
    if not sep:
        raise CorruptSnapshot("Error parsing save file: no data after header")
    return header.rstrip("\r"), body


def parse_snapshot(data: bytes) -> MappingValue:
    """Parse snapshot bytes into a :class:`MappingValue`.

    Malformed text and a top-level value that is not a mapping both raise
    :class:`CorruptSnapshot`.
    """
    _, body = split_header(data)
    try:
        decoded = json.loads(body, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:  # JSONDecodeError is a ValueError
        raise CorruptSnapshot(f"Error parsing save file: {exc}") from exc
    if not isinstance(decoded, dict):
        raise CorruptSnapshot("Error parsing save file: snapshot is not a table")
    try:
        value = from_python(decoded)
    except RecursionError as exc:
        raise CorruptSnapshot("Error parsing save file: nesting too deep") from exc
    logger.debug("parsed snapshot with %d top-level fields", len(value.fields))
    return value
