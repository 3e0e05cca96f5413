"""Scanner for large files in user directories."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable

from quickclean.core import fileops
from quickclean.models.entries import FileCategory, LargeFile
from quickclean.models.scanner import Scanner, serialized
from quickclean.utils import mib

log = logging.getLogger(__name__)

DEFAULT_MIN_SIZE = mib(100)


def find_large_files(
    directory: Path | str,
    min_size: int = DEFAULT_MIN_SIZE,
    categories: Iterable[FileCategory] | None = None,
) -> list[LargeFile]:
    """Regular files of at least *min_size* bytes below *directory*, largest first."""
    allowed = set(categories) if categories is not None else None
    found: list[LargeFile] = []

    for path, st in fileops.walk_files(directory):
        if st.st_size < min_size:
            continue
        extension = path.suffix[1:]
        category = FileCategory.for_extension(extension)
        if allowed is not None and category not in allowed:
            continue
        found.append(
            LargeFile(
                path=path,
                name=path.name,
                size=st.st_size,
                category=category,
                extension=extension,
                last_modified=datetime.fromtimestamp(st.st_mtime),
            )
        )

    found.sort(key=lambda f: f.size, reverse=True)
    return found


class LargeFileScanner(Scanner[LargeFile]):
    """Finds big files, classified by extension."""

    id = "large_files"
    name = "Large Files"
    description = "Big videos, archives, disk images and other files in your folders"

    def __init__(self, *args, min_size: int = DEFAULT_MIN_SIZE, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.min_size = min_size

    @serialized
    def scan(
        self,
        directory: Path | str,
        min_size: int | None = None,
        categories: Iterable[FileCategory] | None = None,
    ) -> list[LargeFile]:
        files = find_large_files(directory, self.min_size if min_size is None else min_size, categories)
        log.info("Found %d large files in %s", len(files), directory)
        return self._store(files)

    @serialized
    def scan_common(
        self,
        min_size: int | None = None,
        categories: Iterable[FileCategory] | None = None,
    ) -> list[LargeFile]:
        """Scan Downloads, Documents, Desktop, Movies, Music and Pictures."""
        threshold = self.min_size if min_size is None else min_size
        allowed = list(categories) if categories is not None else None
        by_path: dict[Path, LargeFile] = {}
        for directory in self.layout.large_file_dirs:
            if not directory.is_dir():
                continue
            for f in find_large_files(directory, threshold, allowed):
                by_path.setdefault(f.path, f)

        files = sorted(by_path.values(), key=lambda f: f.size, reverse=True)
        log.info("Found %d large files in common directories", len(files))
        return self._store(files)

    def scan_default(self) -> list[LargeFile]:
        return self.scan_common()
