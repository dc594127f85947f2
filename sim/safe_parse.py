from __future__ import annotations
"""Helpers for coercing loosely-typed snapshot fields.

Snapshot files can be hand edited or written by older builds, so every
scalar is coerced rather than trusted.  The helpers fall back to a caller
supplied default when a value cannot be interpreted, logging a warning so
malformed saves can be diagnosed without aborting the load.
"""

from typing import Any, Optional
import math
import logging

logger = logging.getLogger(__name__)


def to_int(value: Any, default: int = 0) -> int:
    """Coerce ``value`` to ``int``.

    Finite floats are truncated, integer-looking strings are parsed.
    ``None`` silently yields ``default``; anything else logs a warning.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    if isinstance(value, str):
        s = value.strip()
        if s and (s.isdigit() or (s[0] in {"+", "-"} and s[1:].isdigit())):
            return int(s)
    if value is None:
        return default
    logger.warning("to_int: coercing %r to default %r", value, default)
    return default


def to_float(value: Any, default: float = 0.0) -> float:
    """Coerce ``value`` to a finite ``float``."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        f = float(value)
        if math.isfinite(f):
            return f
    if isinstance(value, str):
        try:
            f = float(value.strip())
        except ValueError:
            logger.warning("to_float: coercing %r to default %r", value, default)
            return default
        if math.isfinite(f):
            return f
    if value is None:
        return default
    logger.warning("to_float: coercing %r to default %r", value, default)
    return default


def to_optional_int(value: Any) -> Optional[int]:
    """Like :func:`to_int` but keeps ``None`` (and bad values) as ``None``."""
    if value is None:
        return None
    sentinel = object()
    out = to_int(value, default=sentinel)  # type: ignore[arg-type]
    return None if out is sentinel else out


def to_optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    sentinel = object()
    out = to_float(value, default=sentinel)  # type: ignore[arg-type]
    return None if out is sentinel else out


def to_str(value: Any, default: str = "") -> str:
    """Return ``value`` as text; numbers are formatted, containers rejected."""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if value is None:
        return default
    logger.warning("to_str: coercing %r to default %r", value, default)
    return default
