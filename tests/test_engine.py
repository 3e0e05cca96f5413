"""Tests for the parallel scan engine."""

from __future__ import annotations

import asyncio
import threading
import time
from dataclasses import dataclass
from pathlib import Path

import pytest

from quickclean.core.engine import QuickCleanEngine, ScanSummary
from quickclean.models.scanner import Scanner


@dataclass
class FakeEntry:
    path: Path
    size: int

    def to_dict(self) -> dict:
        return {"path": str(self.path), "size": self.size}


class FakeScanner(Scanner[FakeEntry]):
    """Test scanner that doesn't touch the filesystem."""

    def __init__(self, scanner_id: str = "fake", *, layout, fail: bool = False, scan_delay: float = 0, size: int = 1024):
        super().__init__(layout)
        self._id = scanner_id
        self._fail = fail
        self._scan_delay = scan_delay
        self._size = size
        self.threads: list[str] = []

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return f"Fake Scanner ({self._id})"

    @property
    def description(self) -> str:
        return "A fake scanner for testing"

    def scan_default(self) -> list[FakeEntry]:
        self.threads.append(threading.current_thread().name)
        if self._scan_delay:
            time.sleep(self._scan_delay)
        if self._fail:
            raise RuntimeError("scan failed")
        return self._store([FakeEntry(Path(f"/tmp/{self._id}"), self._size)])


@pytest.fixture
def engine(mac_layout):
    return QuickCleanEngine([
        FakeScanner("alpha", layout=mac_layout),
        FakeScanner("beta", layout=mac_layout, size=4096),
    ])


class TestQuickCleanEngine:
    def test_quick_scan_runs_every_scanner(self, engine):
        summaries = engine.quick_scan()
        assert set(summaries) == {"alpha", "beta"}
        assert summaries["alpha"].total_bytes == 1024
        assert summaries["beta"].total_bytes == 4096
        assert engine.total_reclaimable(summaries) == 5120

    def test_lookup(self, engine):
        assert engine.get("alpha").id == "alpha"
        assert engine.get("missing") is None
        assert engine["beta"].id == "beta"
        with pytest.raises(KeyError):
            engine["missing"]

    def test_duplicate_ids_are_skipped(self, mac_layout):
        engine = QuickCleanEngine([FakeScanner("a", layout=mac_layout), FakeScanner("a", layout=mac_layout)])
        assert len(engine.scanners) == 1

    def test_failure_is_isolated(self, mac_layout):
        engine = QuickCleanEngine([
            FakeScanner("good", layout=mac_layout),
            FakeScanner("bad", layout=mac_layout, fail=True),
        ])
        summaries = engine.quick_scan()
        assert summaries["good"].error == ""
        assert summaries["good"].total_bytes == 1024
        assert summaries["bad"].error == "scan failed"
        assert summaries["bad"].entries == []
        assert summaries["bad"].total_bytes == 0

    def test_progress_callback(self, engine):
        events: list[tuple[str, str]] = []
        lock = threading.Lock()

        def record(sid: str, status: str) -> None:
            with lock:
                events.append((sid, status))

        engine.quick_scan(on_progress=record)
        assert ("alpha", "scanning") in events
        assert ("alpha", "done") in events
        assert ("beta", "done") in events

    def test_progress_reports_errors(self, mac_layout):
        engine = QuickCleanEngine([FakeScanner("bad", layout=mac_layout, fail=True)])
        events: list[tuple[str, str]] = []
        engine.quick_scan(on_progress=lambda sid, status: events.append((sid, status)))
        assert events == [("bad", "scanning"), ("bad", "error")]

    def test_scanners_run_concurrently(self, mac_layout):
        delay = 0.2
        count = 5
        engine = QuickCleanEngine([FakeScanner(f"slow_{i}", layout=mac_layout, scan_delay=delay) for i in range(count)])

        start = time.monotonic()
        summaries = engine.quick_scan()
        elapsed = time.monotonic() - start

        assert len(summaries) == count
        assert elapsed < delay * count * 0.75

    def test_empty_engine(self):
        assert QuickCleanEngine([]).quick_scan() == {}

    def test_quick_scan_async(self, engine):
        summaries = asyncio.run(engine.quick_scan_async())
        assert {sid: s.total_bytes for sid, s in summaries.items()} == {"alpha": 1024, "beta": 4096}

    def test_summary_to_dict(self):
        summary = ScanSummary("x", "X", entries=[FakeEntry(Path("/a"), 3)], total_bytes=3)
        assert summary.to_dict() == {
            "scanner_id": "x",
            "scanner_name": "X",
            "total_bytes": 3,
            "count": 1,
            "error": "",
            "entries": [{"path": "/a", "size": 3}],
        }


class TestCreate:
    def test_builds_five_scanners(self, mac_layout):
        engine = QuickCleanEngine.create(mac_layout)
        assert [s.id for s in engine.scanners] == ["caches", "developer", "orphans", "large_files", "duplicates"]
        assert all(s.layout is mac_layout for s in engine.scanners)

    def test_thresholds_and_trash(self, mac_layout):
        engine = QuickCleanEngine.create(
            mac_layout, use_trash=False, large_file_min_size=10, duplicate_min_size=0,
        )
        assert engine["large_files"].min_size == 10
        assert engine["duplicates"].min_size == 0
        assert not any(s.use_trash for s in engine.scanners)

    def test_quick_scan_on_empty_home(self, mac_layout):
        summaries = QuickCleanEngine.create(mac_layout).quick_scan()
        assert len(summaries) == 5
        assert all(not s.error for s in summaries.values())
        # Developer entries for missing tools are listed with size 0.
        assert QuickCleanEngine.total_reclaimable(summaries) == 0

    def test_quick_scan_finds_real_files(self, mac_layout, make_file):
        make_file(mac_layout.home / "Library" / "Caches" / "com.example.app" / "blob", 8192)
        make_file(mac_layout.home / ".npm" / "_cacache" / "x", 4096)
        summaries = QuickCleanEngine.create(mac_layout).quick_scan()
        assert summaries["caches"].total_bytes > 0
        assert summaries["developer"].total_bytes > 0

    def test_disk_usage_uses_home_volume(self, mac_layout):
        engine = QuickCleanEngine.create(mac_layout)
        assert engine.layout is mac_layout
        usage = engine.disk_usage()
        assert usage.total_bytes > 0
        assert 0 <= usage.free_percentage <= 100

    def test_layout_taken_from_scanners(self, engine, mac_layout):
        assert engine.layout is mac_layout
