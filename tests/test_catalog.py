from datetime import datetime
import os

from persistence import list_snapshots, read_summary, save_snapshot
from sim.entities import Settlement
from sim.state import World


def test_missing_directory_is_created_and_empty(tmp_path):
    root = tmp_path / "saves"
    assert list_snapshots(root) == []
    assert root.is_dir()


def test_newest_first_with_summaries(tmp_path):
    w = World.empty(2, 2, 32)
    w.settlements.append(Settlement.new(w.ids, 0, 0, "Aldwick", 32))
    old = save_snapshot(w, tmp_path, "old", now=datetime(2024, 1, 1, 9, 0, 0))
    new = save_snapshot(w, tmp_path, "new", now=datetime(2024, 1, 2, 9, 0, 0))
    os.utime(old, (1_000_000, 1_000_000))
    os.utime(new, (2_000_000, 2_000_000))
    (tmp_path / "notes.txt").write_text("not a save")

    entries = list_snapshots(tmp_path)
    assert [e.filename for e in entries] == ["new.save", "old.save"]
    assert entries[0].summary == "2024-01-02 09:00:00 - Villages: 1"
    assert entries[0].modified == 2_000_000
    assert entries[1].summary_label == "2024-01-01 09:00:00 - Villages: 1"


def test_files_without_header_are_still_listed(tmp_path):
    junk = tmp_path / "junk.save"
    junk.write_bytes(b"\x00\x01garbage")
    entries = list_snapshots(tmp_path)
    assert len(entries) == 1
    assert entries[0].summary is None
    assert entries[0].summary_label == "No summary"
    assert entries[0].date_label != "Unknown date"
    assert read_summary(junk) is None


def test_same_mtime_sorted_by_name(tmp_path):
    for name in ("b.save", "a.save"):
        p = tmp_path / name
        p.write_text("-- SaveInfo: x\n{}")
        os.utime(p, (1_500_000, 1_500_000))
    assert [e.filename for e in list_snapshots(tmp_path)] == ["a.save", "b.save"]
