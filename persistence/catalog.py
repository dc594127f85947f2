from __future__ import annotations

"""List snapshots in a save directory without parsing them."""

from dataclasses import dataclass
from datetime import datetime
import logging
from pathlib import Path
from typing import List, Optional, Union

from systems import config_village as cfg

logger = logging.getLogger(__name__)

# Header lines are short; never read more than this looking for one.
_HEADER_LIMIT = 4096


@dataclass
class CatalogEntry:
    filename: str
    path: Path
    modified: Optional[float] = None  # unix timestamp
    summary: Optional[str] = None

    @property
    def date_label(self) -> str:
        if self.modified is None:
            return "Unknown date"
        return datetime.fromtimestamp(self.modified).strftime("%Y-%m-%d %H:%M:%S")

    @property
    def summary_label(self) -> str:
        return self.summary if self.summary else "No summary"


def read_summary(path: Path) -> Optional[str]:
    """Text after the header marker on the first line, or ``None``."""
    try:
        with path.open("rb") as f:
            first = f.readline(_HEADER_LIMIT)
    except OSError as exc:
        logger.warning("cannot read %s: %s", path, exc)
        return None
    try:
        line = first.decode("utf-8").rstrip("\r\n")
    except UnicodeDecodeError:
        return None
    if not line.startswith(cfg.SAVE_HEADER_MARKER):
        return None
    return line[len(cfg.SAVE_HEADER_MARKER):].strip() or None


def list_snapshots(directory: Union[str, Path]) -> List[CatalogEntry]:
    """Snapshots in ``directory``, newest first.

    The directory is created if missing. Files with unreadable metadata
    are still listed, just without a date or summary.
    """
    root = Path(directory)
    root.mkdir(parents=True, exist_ok=True)
    entries: List[CatalogEntry] = []
    for path in root.iterdir():
        if path.suffix != cfg.SAVE_EXTENSION or not path.is_file():
            continue
        try:
            modified: Optional[float] = path.stat().st_mtime
        except OSError:
            modified = None
        entries.append(CatalogEntry(path.name, path, modified, read_summary(path)))
    # newest first; name breaks ties so the order is stable
    entries.sort(key=lambda e: e.filename)
    entries.sort(key=lambda e: e.modified if e.modified is not None else 0.0, reverse=True)
    return entries
