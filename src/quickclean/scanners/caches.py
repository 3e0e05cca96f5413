"""Scanner for user and system cache directories."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from quickclean.core import fileops
from quickclean.core.errors import OperationNotAllowed
from quickclean.models.entries import CacheEntry, CacheType
from quickclean.models.scanner import Scanner, serialized

log = logging.getLogger(__name__)

_BROWSER_KEYWORDS = ("safari", "chrome", "chromium", "firefox", "mozilla", "edge", "brave", "opera", "webkit")
_DEVELOPER_TYPE_KEYWORDS = ("xcode", "npm", "cargo", "gradle", "cocoapods", "homebrew", "pip", "composer")
# Wider than the type keywords: anything a developer tool leaves behind.
_DEVELOPER_KEYWORDS = _DEVELOPER_TYPE_KEYWORDS + ("maven", "android", "llvm", "clang", "swift")
_UNSAFE_KEYWORDS = ("apple", "system", "kernel")

_DESCRIPTIONS = {
    CacheType.BROWSER: "Browser cache and temporary files",
    CacheType.SYSTEM: "System cache files",
    CacheType.DEVELOPER: "Developer tool cache",
    CacheType.APPLICATION: "Application cache files",
    CacheType.UNKNOWN: "Cache files",
}


def classify(name: str, *, is_system: bool) -> CacheType:
    """Cache type for a top-level cache item name."""
    lower = name.lower()
    if any(k in lower for k in _BROWSER_KEYWORDS):
        return CacheType.BROWSER
    if any(k in lower for k in _DEVELOPER_TYPE_KEYWORDS):
        return CacheType.DEVELOPER
    return CacheType.SYSTEM if is_system else CacheType.APPLICATION


def is_developer_related(name: str) -> bool:
    lower = name.lower()
    return any(k in lower for k in _DEVELOPER_KEYWORDS)


def is_safe_to_delete(name: str) -> bool:
    """Caches named after OS components are left alone."""
    lower = name.lower()
    return not any(k in lower for k in _UNSAFE_KEYWORDS)


class CacheScanner(Scanner[CacheEntry]):
    """Lists every top-level item in the user and system cache roots."""

    id = "caches"
    name = "Caches"
    description = "Application, browser and system caches that are rebuilt on demand"

    @serialized
    def scan(self) -> list[CacheEntry]:
        entries = self._scan_root(self.layout.user_cache_root, is_system=False)
        entries += self._scan_root(self.layout.system_cache_root, is_system=True)
        entries.sort(key=lambda e: e.size, reverse=True)
        log.info("Found %d cache entries totaling %d bytes", len(entries), sum(e.size for e in entries))
        return self._store(entries)

    def scan_default(self) -> list[CacheEntry]:
        return self.scan()

    def _scan_root(self, root: Path, *, is_system: bool) -> list[CacheEntry]:
        try:
            with os.scandir(root) as it:
                items = sorted(e.name for e in it if not fileops.is_hidden(e.name))
        except OSError:
            log.debug("Cannot read cache directory: %s", root)
            return []

        entries: list[CacheEntry] = []
        for name in items:
            cache_type = classify(name, is_system=is_system)
            entries.append(
                CacheEntry(
                    path=root / name,
                    name=name,
                    size=fileops.allocated_size(root / name),
                    cache_type=cache_type,
                    is_developer_related=is_developer_related(name),
                    is_safe_to_delete=is_safe_to_delete(name),
                    description=_DESCRIPTIONS[cache_type],
                )
            )
        return entries

    def _check_deletable(self, path: Path) -> None:
        if not is_safe_to_delete(path.name):
            raise OperationNotAllowed(path, "Refusing to remove a system-critical cache")
