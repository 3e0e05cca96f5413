"""Base scanner interface."""

from __future__ import annotations

import asyncio
import functools
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Generic, Iterable, TypeVar

from quickclean.core.errors import CleanerError
from quickclean.models.clean_result import CleanResult

if TYPE_CHECKING:
    from quickclean.layout import Layout

log = logging.getLogger(__name__)

EntryT = TypeVar("EntryT")
F = TypeVar("F", bound=Callable[..., Any])


def serialized(method: F) -> F:
    """Run a scanner method while holding the scanner's lock.

    Only one scan or delete touches a scanner's stored results at a time.
    The lock is re-entrant so serialized methods may call each other.
    """

    @functools.wraps(method)
    def wrapper(self: Scanner, *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


class Scanner(ABC, Generic[EntryT]):
    """Base class for the five scanners.

    A scanner reads the filesystem in :meth:`scan`, keeps the last result
    list, and removes entries through :meth:`delete`.  Scanning MUST NOT
    modify the filesystem.
    """

    def __init__(self, layout: Layout | None = None, *, use_trash: bool = True) -> None:
        if layout is None:
            from quickclean.layout import Layout

            layout = Layout.current()
        self.layout = layout
        self.use_trash = use_trash
        self._lock = threading.RLock()
        self._results: list[EntryT] = []

    @property
    @abstractmethod
    def id(self) -> str:
        """Unique identifier, e.g. 'caches'."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name, e.g. 'Caches'."""

    @property
    @abstractmethod
    def description(self) -> str:
        """What this scanner looks for."""

    @abstractmethod
    def scan_default(self) -> list[EntryT]:
        """Scan the scanner's default locations with default parameters."""

    @property
    def results(self) -> list[EntryT]:
        """Copy of the entries from the last scan, minus deleted ones."""
        with self._lock:
            return list(self._results)

    def total_size(self) -> int:
        """Reclaimable bytes in the last scan."""
        return sum(e.size for e in self.results)  # type: ignore[attr-defined]

    def _store(self, entries: list[EntryT]) -> list[EntryT]:
        with self._lock:
            self._results = entries
        return list(entries)

    # -- deletion -----------------------------------------------------------

    def _check_deletable(self, path: Path) -> None:
        """Raise OperationNotAllowed for entries this scanner refuses to remove."""

    def _size_of(self, path: Path) -> int:
        for entry in self._results:
            if entry.path == path:  # type: ignore[attr-defined]
                return entry.size  # type: ignore[attr-defined]
        return 0

    def _forget(self, path: Path) -> None:
        self._results = [e for e in self._results if e.path != path]  # type: ignore[attr-defined]

    @serialized
    def delete(self, path: Path | str, *, use_trash: bool | None = None) -> int:
        """Remove *path* and drop it from the stored results.

        Returns the size recorded for it by the last scan.  Deleting a path
        that no longer exists succeeds, even where the scanner would refuse
        to remove it.
        """
        from quickclean.core import fileops

        path = Path(path)
        if fileops.exists(path):
            self._check_deletable(path)
        freed = self._size_of(path)
        fileops.remove(path, use_trash=self.use_trash if use_trash is None else use_trash)
        self._forget(path)
        return freed

    @serialized
    def delete_many(self, paths: Iterable[Path | str], *, use_trash: bool | None = None) -> CleanResult:
        """Delete several paths one by one, collecting failures.

        Earlier deletions stay done when a later one fails.
        """
        result = CleanResult(scanner_id=self.id)
        for raw in paths:
            path = Path(raw)
            try:
                result.freed_bytes += self.delete(path, use_trash=use_trash)
            except CleanerError as exc:
                log.warning("%s: failed to delete %s: %s", self.id, path, exc)
                result.errors.append(str(exc))
                continue
            result.files_removed += 1
            result.removed.append(path)
        return result

    # -- async entry points ---------------------------------------------------

    async def scan_default_async(self) -> list[EntryT]:
        return await asyncio.to_thread(self.scan_default)

    async def delete_async(self, path: Path | str, *, use_trash: bool | None = None) -> int:
        return await asyncio.to_thread(self.delete, path, use_trash=use_trash)

    async def delete_many_async(self, paths: Iterable[Path | str], *, use_trash: bool | None = None) -> CleanResult:
        return await asyncio.to_thread(self.delete_many, list(paths), use_trash=use_trash)
