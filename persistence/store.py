from __future__ import annotations

"""Snapshot files on disk."""

from datetime import datetime
import logging
import os
from pathlib import Path
import tempfile
from typing import Optional, Union

from errors import MissingFile, WriteFailure
from systems import config_village as cfg

logger = logging.getLogger(__name__)


def timestamped_filename(now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y-%m-%d_%H-%M-%S")
    return f"{cfg.SAVE_PREFIX}_{stamp}{cfg.SAVE_EXTENSION}"


def snapshot_filename(name: Optional[str] = None, now: Optional[datetime] = None) -> str:
    """Caller-supplied name (extension added if missing) or a timestamped default."""
    if not name:
        return timestamped_filename(now)
    if Path(name).name != name or name in {".", ".."}:
        raise WriteFailure(f"Invalid save name: {name!r}")
    if not name.endswith(cfg.SAVE_EXTENSION):
        name += cfg.SAVE_EXTENSION
    return name


def write_snapshot(directory: Union[str, Path], filename: str, data: bytes) -> Path:
    """Write ``data`` to ``directory/filename`` as a whole new file.

    Bytes go to a temporary file that replaces the target only once fully
    written, so a failed save leaves any previous snapshot intact.
    """
    root = Path(directory)
    target = root / filename
    tmp_name = None
    try:
        root.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".tmp-", suffix=".part", dir=root)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, target)
        tmp_name = None
    except OSError as exc:
        raise WriteFailure(f"Error saving game: {exc}", path=str(target)) from exc
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                logger.warning("could not remove temporary file %s", tmp_name)
    logger.info("wrote %d bytes to %s", len(data), target)
    return target


def read_snapshot(path: Union[str, Path]) -> bytes:
    p = Path(path)
    if not p.is_file():
        raise MissingFile(f"Save file not found: {p}", path=str(p))
    try:
        return p.read_bytes()
    except OSError as exc:
        raise MissingFile(f"Error reading save file: {exc}", path=str(p)) from exc
