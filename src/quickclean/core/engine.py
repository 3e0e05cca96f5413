"""Runs the scanners together and aggregates their totals."""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable

from quickclean.core import fileops
from quickclean.layout import Layout
from quickclean.models.entries import DiskUsage
from quickclean.models.scanner import Scanner
from quickclean.scanners import CacheScanner, DeveloperScanner, DuplicateScanner, LargeFileScanner, OrphanScanner
from quickclean.scanners.duplicates import DEFAULT_MIN_SIZE as DEFAULT_DUPLICATE_MIN
from quickclean.scanners.large_files import DEFAULT_MIN_SIZE as DEFAULT_LARGE_MIN

log = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str], None]  # (scanner_id, status)


@dataclass(slots=True)
class ScanSummary:
    """Outcome of one scanner within a quick scan."""

    scanner_id: str
    scanner_name: str
    entries: list[Any] = field(default_factory=list)
    total_bytes: int = 0
    error: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "scanner_id": self.scanner_id,
            "scanner_name": self.scanner_name,
            "total_bytes": self.total_bytes,
            "count": len(self.entries),
            "error": self.error,
            "entries": [e.to_dict() for e in self.entries],
        }


class QuickCleanEngine:
    """Owns one instance of each scanner."""

    def __init__(self, scanners: list[Scanner], layout: Layout | None = None) -> None:
        if layout is None:
            layout = scanners[0].layout if scanners else Layout.current()
        self.layout = layout
        self._scanners: dict[str, Scanner] = {}
        for scanner in scanners:
            if scanner.id in self._scanners:
                log.warning("Scanner '%s' already registered, skipping duplicate", scanner.id)
                continue
            self._scanners[scanner.id] = scanner

    @classmethod
    def create(
        cls,
        layout: Layout | None = None,
        *,
        use_trash: bool = True,
        large_file_min_size: int | None = None,
        duplicate_min_size: int | None = None,
    ) -> QuickCleanEngine:
        """Build an engine with the five built-in scanners sharing one layout."""
        layout = layout or Layout.current()
        large = LargeFileScanner(
            layout, use_trash=use_trash, min_size=DEFAULT_LARGE_MIN if large_file_min_size is None else large_file_min_size,
        )
        dupes = DuplicateScanner(
            layout, use_trash=use_trash, min_size=DEFAULT_DUPLICATE_MIN if duplicate_min_size is None else duplicate_min_size,
        )
        return cls(
            [
                CacheScanner(layout, use_trash=use_trash),
                DeveloperScanner(layout, use_trash=use_trash),
                OrphanScanner(layout, use_trash=use_trash),
                large,
                dupes,
            ],
            layout,
        )

    @property
    def scanners(self) -> list[Scanner]:
        return list(self._scanners.values())

    def get(self, scanner_id: str) -> Scanner | None:
        return self._scanners.get(scanner_id)

    def __getitem__(self, scanner_id: str) -> Scanner:
        return self._scanners[scanner_id]

    def _run_one(self, scanner: Scanner, on_progress: ProgressCallback | None) -> ScanSummary:
        if on_progress:
            on_progress(scanner.id, "scanning")
        try:
            entries = scanner.scan_default()
        except Exception as exc:
            log.exception("Scanner '%s' failed", scanner.id)
            if on_progress:
                on_progress(scanner.id, "error")
            return ScanSummary(scanner.id, scanner.name, error=str(exc))
        if on_progress:
            on_progress(scanner.id, "done")
        return ScanSummary(scanner.id, scanner.name, entries=entries, total_bytes=scanner.total_size())

    def quick_scan(self, on_progress: ProgressCallback | None = None) -> dict[str, ScanSummary]:
        """Run every scanner at once and wait for all of them.

        Each scanner gets its own worker and its own result slot; a failing
        scanner is reported through ``error`` and does not affect the others.
        """
        scanners = self.scanners
        if not scanners:
            return {}
        with ThreadPoolExecutor(max_workers=len(scanners)) as executor:
            futures = {s.id: executor.submit(self._run_one, s, on_progress) for s in scanners}
            return {sid: future.result() for sid, future in futures.items()}

    async def quick_scan_async(self, on_progress: ProgressCallback | None = None) -> dict[str, ScanSummary]:
        scanners = self.scanners
        summaries = await asyncio.gather(*(asyncio.to_thread(self._run_one, s, on_progress) for s in scanners))
        return {s.id: summary for s, summary in zip(scanners, summaries)}

    def disk_usage(self) -> DiskUsage:
        """Capacity of the volume holding the home directory."""
        return fileops.disk_usage(self.layout.home)

    @staticmethod
    def total_reclaimable(summaries: dict[str, ScanSummary]) -> int:
        return sum(s.total_bytes for s in summaries.values())
