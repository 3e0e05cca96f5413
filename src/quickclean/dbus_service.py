"""D-Bus service for GUI communication.

D-Bus methods use PascalCase per D-Bus convention, and type signatures
like "as" and "(ss)" are D-Bus protocol types, not Python syntax.
"""

from __future__ import annotations

import asyncio
import json
import logging

from dbus_next.aio import MessageBus
from dbus_next.service import ServiceInterface, method, signal
from dbus_next import BusType

from quickclean.core import fileops
from quickclean.core.engine import QuickCleanEngine
from quickclean.core.errors import CleanerError
from quickclean.scanners import DeveloperScanner
from quickclean.settings import Settings
from quickclean.utils import mib

log = logging.getLogger(__name__)

_BUS_NAME = "io.github.quickclean"
_OBJECT_PATH = "/io/github/quickclean"
_INTERFACE = "io.github.quickclean.Manager"


# noinspection PyPep8Naming
class QuickCleanDBusService(ServiceInterface):
    """D-Bus service interface for quickclean."""

    def __init__(self, engine: QuickCleanEngine | None = None) -> None:
        super().__init__(_INTERFACE)
        if engine is None:
            settings = Settings()
            engine = QuickCleanEngine.create(
                use_trash=settings.use_trash,
                large_file_min_size=mib(settings.large_file_min_size_mb),
                duplicate_min_size=mib(settings.duplicate_min_size_mb),
            )
        self._engine = engine

    @method()
    async def QuickScan(self) -> "s":  # type: ignore[override]
        """Run all scanners in parallel, returning summaries as JSON."""
        loop = asyncio.get_running_loop()

        # Called from scanner threads; signals must be emitted on the bus loop.
        def progress(scanner_id: str, status: str) -> None:
            loop.call_soon_threadsafe(self.ScanProgress, scanner_id, status)

        summaries = await self._engine.quick_scan_async(on_progress=progress)
        return json.dumps({sid: s.to_dict() for sid, s in summaries.items()})

    @method()
    async def Scan(self, scanner_id: "s") -> "s":  # type: ignore[override]
        """Run one scanner with its default locations."""
        scanner = self._engine.get(scanner_id)
        if scanner is None:
            return json.dumps({"error": f"Scanner '{scanner_id}' not found"})
        self.ScanProgress(scanner_id, "scanning")
        entries = await scanner.scan_default_async()
        self.ScanProgress(scanner_id, "done")
        return json.dumps({
            "scanner_id": scanner_id,
            "total_bytes": scanner.total_size(),
            "entries": [e.to_dict() for e in entries],
        })

    @method()
    async def Delete(self, scanner_id: "s", paths: "as") -> "s":  # type: ignore[override]
        """Delete entries found by a scanner, one by one."""
        scanner = self._engine.get(scanner_id)
        if scanner is None:
            return json.dumps({"error": f"Scanner '{scanner_id}' not found"})
        result = await scanner.delete_many_async(paths)
        self.DeleteProgress(scanner_id, result.freed_bytes, result.files_removed)
        return json.dumps(result.to_dict())

    @method()
    async def CleanDeveloperCache(self, path: "s") -> "s":  # type: ignore[override]
        """Empty a developer cache directory."""
        scanner = self._engine.get("developer")
        if not isinstance(scanner, DeveloperScanner):
            return json.dumps({"error": "Developer scanner not available"})
        try:
            freed = await asyncio.to_thread(scanner.clean_cache, path)
        except CleanerError as exc:
            return json.dumps({"error": str(exc), "kind": type(exc).__name__})
        self.DeleteProgress("developer", freed, 1)
        return json.dumps({"freed_bytes": freed})

    @method()
    def GetDiskUsage(self) -> "s":  # type: ignore[override]
        """Capacity of the volume holding the home directory."""
        return json.dumps(self._engine.disk_usage().to_dict())

    @method()
    def Reveal(self, path: "s"):  # type: ignore[override]
        """Show a path in the desktop file browser."""
        fileops.reveal(path)

    @signal()
    def ScanProgress(self, scanner_id: str, status: str) -> "(ss)":  # type: ignore[override]
        return [scanner_id, status]

    @signal()
    def DeleteProgress(self, scanner_id: str, bytes_freed: int, files_done: int) -> "(sti)":  # type: ignore[override]
        return [scanner_id, bytes_freed, files_done]


async def run_service() -> None:
    """Start the D-Bus service."""
    bus = await MessageBus(bus_type=BusType.SESSION).connect()
    service = QuickCleanDBusService()
    bus.export(_OBJECT_PATH, service)
    await bus.request_name(_BUS_NAME)
    log.info("D-Bus service started on %s", _BUS_NAME)
    await bus.wait_for_disconnect()


def start_service() -> None:
    """Entry point to start the D-Bus service."""
    asyncio.run(run_service())
