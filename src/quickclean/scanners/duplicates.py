"""Scanner for duplicate files.

Files are first bucketed by exact size, which rules out most candidates
without reading them.  Within each size bucket the files are bucketed again
by :func:`~quickclean.core.hasher.quick_hash`.  The quick hash only covers
the length, the first and the last 64 KB, so two files differing only in
their middle are reported as duplicates.  No full-content verification is
done before a group is reported.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from quickclean.core import fileops
from quickclean.core.hasher import quick_hash
from quickclean.models.entries import DuplicateFile, DuplicateGroup
from quickclean.models.scanner import Scanner, serialized
from quickclean.utils import mib

log = logging.getLogger(__name__)

DEFAULT_MIN_SIZE = mib(1)


def group_by_size(roots: Iterable[Path | str], min_size: int) -> dict[int, list[Path]]:
    """Bucket regular files of at least *min_size* bytes by size, dropping singletons."""
    by_size: dict[int, list[Path]] = {}
    seen: set[Path] = set()
    for root in roots:
        for path, st in fileops.walk_files(root):
            if st.st_size < min_size or path in seen:
                continue
            seen.add(path)
            by_size.setdefault(st.st_size, []).append(path)
    return {size: paths for size, paths in by_size.items() if len(paths) > 1}


def find_duplicates(roots: Iterable[Path | str], min_size: int = DEFAULT_MIN_SIZE) -> list[DuplicateGroup]:
    """Group files under *roots* that share size and quick hash.

    Groups keep enumeration order, so the first file of each group is the
    one found first.  The result is ordered by wasted space, largest first.
    """
    groups: list[DuplicateGroup] = []

    for size, paths in group_by_size(roots, min_size).items():
        by_hash: dict[str, list[Path]] = {}
        for path in paths:
            digest = quick_hash(path)
            if digest is not None:
                by_hash.setdefault(digest, []).append(path)

        for digest, dupes in by_hash.items():
            if len(dupes) < 2:
                continue
            groups.append(
                DuplicateGroup(
                    hash=digest,
                    files=tuple(DuplicateFile.from_path(p) for p in dupes),
                    file_size=size,
                )
            )

    groups.sort(key=lambda g: g.total_wasted, reverse=True)
    return groups


class DuplicateScanner(Scanner[DuplicateGroup]):
    """Finds files with identical size and quick hash."""

    id = "duplicates"
    name = "Duplicate Files"
    description = "Copies of the same file in your folders"

    def __init__(self, *args, min_size: int = DEFAULT_MIN_SIZE, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.min_size = min_size

    @serialized
    def scan(self, directory: Path | str, min_size: int | None = None) -> list[DuplicateGroup]:
        return self.scan_many([directory], min_size)

    @serialized
    def scan_many(self, directories: Iterable[Path | str], min_size: int | None = None) -> list[DuplicateGroup]:
        """Scan several roots in one pass so duplicates across them form one group."""
        groups = find_duplicates(directories, self.min_size if min_size is None else min_size)
        log.info(
            "Found %d duplicate groups wasting %d bytes",
            len(groups),
            sum(g.total_wasted for g in groups),
        )
        return self._store(groups)

    @serialized
    def scan_common(self, min_size: int | None = None) -> list[DuplicateGroup]:
        """Scan Downloads, Documents, Desktop and Pictures together."""
        return self.scan_many([d for d in self.layout.duplicate_dirs if d.is_dir()], min_size)

    def scan_default(self) -> list[DuplicateGroup]:
        return self.scan_common()

    def total_size(self) -> int:
        return sum(g.total_wasted for g in self.results)

    total_wasted = total_size

    def _size_of(self, path: Path) -> int:
        for group in self._results:
            if group.contains(path):
                return group.file_size
        return 0

    def _forget(self, path: Path) -> None:
        """Drop *path* from its group, and the group once it has one file left."""
        remaining: list[DuplicateGroup] = []
        for group in self._results:
            if group.contains(path):
                group = group.without(path)
                if group is None:
                    continue
            remaining.append(group)
        self._results = remaining
