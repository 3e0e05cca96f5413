"""Scanner for developer tool caches at well-known locations."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from quickclean.core import fileops
from quickclean.core.errors import OperationNotAllowed, PathNotFound, from_os_error
from quickclean.models.entries import DeveloperCache, DeveloperCacheLocation
from quickclean.models.scanner import Scanner, serialized

log = logging.getLogger(__name__)


class DeveloperScanner(Scanner[DeveloperCache]):
    """Probes package manager and build tool caches under the home directory.

    Every catalog location is reported, present or not.  The Docker Desktop
    data directory is listed when present but can never be cleaned here.
    """

    id = "developer"
    name = "Developer Tools"
    description = "Package manager and build tool caches"

    def _probe(self, location: DeveloperCacheLocation) -> DeveloperCache:
        path = location.resolve(self.layout.home)
        present = fileops.exists(path)
        return DeveloperCache(
            name=location.name,
            path=path,
            size=fileops.allocated_size(path) if present else 0,
            description=location.description,
            exists=present,
            safe_to_clean=location.safe_to_clean,
        )

    @serialized
    def scan(self) -> list[DeveloperCache]:
        caches = [self._probe(loc) for loc in self.layout.developer_catalog]

        guarded = self.layout.guarded_location
        guarded_path = self.layout.guarded_path
        if fileops.exists(guarded_path):
            caches.append(
                DeveloperCache(
                    name=guarded.name,
                    path=guarded_path,
                    size=fileops.allocated_size(guarded_path),
                    description=guarded.description,
                    exists=True,
                    safe_to_clean=False,
                )
            )

        caches.sort(key=lambda c: c.size, reverse=True)
        log.info("Probed %d developer cache locations, %d present", len(caches), sum(c.exists for c in caches))
        return self._store(caches)

    def scan_default(self) -> list[DeveloperCache]:
        return self.scan()

    def is_guarded(self, path: Path | str) -> bool:
        """Whether *path* is the guarded location or lies inside it."""
        return Path(path) == self.layout.guarded_path or self.layout.guarded_path in Path(path).parents

    def _check_deletable(self, path: Path) -> None:
        if self.is_guarded(path):
            raise OperationNotAllowed(path, self.layout.guarded_location.description)

    @serialized
    def clean_cache(self, path: Path | str) -> int:
        """Empty a cache directory, keeping the directory itself.

        Returns the allocated size before cleaning.

        Raises:
            OperationNotAllowed: *path* is the guarded location.
            PathNotFound: *path* does not exist.
            AccessDenied, IOFailure: a child could not be removed.  Children
                removed before the failure stay removed.
        """
        path = Path(path)
        self._check_deletable(path)
        if not fileops.exists(path):
            raise PathNotFound(path)

        size_before = fileops.allocated_size(path)
        try:
            with os.scandir(path) as it:
                children = list(it)
        except OSError as exc:
            raise from_os_error(path, exc) from exc

        for child in children:
            try:
                if child.is_dir(follow_symlinks=False):
                    shutil.rmtree(child.path)
                else:
                    os.unlink(child.path)
            except FileNotFoundError:
                continue
            except OSError as exc:
                raise from_os_error(child.path, exc) from exc

        self._results = [c.emptied() if c.path == path else c for c in self._results]
        log.info("Cleaned %s, freed %d bytes", path, size_before)
        return size_before

    def total_size(self) -> int:
        """Bytes held by existing caches; scans first if nothing was scanned yet."""
        caches = self.results or self.scan()
        return sum(c.size for c in caches if c.exists)

    def is_developer_environment_detected(self) -> bool:
        return any(fileops.exists(p) for p in self.layout.developer_indicators)
