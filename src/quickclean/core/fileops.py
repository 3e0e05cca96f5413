"""Filesystem primitives: size accounting, walking, trash and delete.

Every function here is stateless and safe to call from several scanner
threads at once.  Read-side helpers never raise; mutating helpers raise
:class:`~quickclean.core.errors.CleanerError` subclasses.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import subprocess
import sys
from pathlib import Path
from typing import Iterator

from send2trash import send2trash

from quickclean.core.errors import from_os_error
from quickclean.models.entries import DiskUsage
from quickclean.utils import has_command

log = logging.getLogger(__name__)

# Directories that behave as a single document and are never descended into.
PACKAGE_SUFFIXES = frozenset({
    ".app",
    ".bundle",
    ".framework",
    ".kext",
    ".photoslibrary",
    ".plugin",
    ".xcarchive",
    ".xcodeproj",
    ".xcworkspace",
})

_BLOCK_UNIT = 512


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def is_package(path: Path | str) -> bool:
    """Whether *path* looks like a bundle directory (``Foo.app`` etc.)."""
    return os.path.splitext(str(path))[1].lower() in PACKAGE_SUFFIXES


def file_allocated_size(st: os.stat_result) -> int:
    """Bytes a regular file occupies on disk.

    Prefers the block count reported by the platform, which is accurate for
    sparse files.  Without it, the logical size is rounded up to the
    filesystem block size, and as a last resort the logical size is used.
    """
    blocks = getattr(st, "st_blocks", None)
    if blocks is not None:
        return blocks * _BLOCK_UNIT
    blksize = getattr(st, "st_blksize", None)
    if blksize:
        return -(-st.st_size // blksize) * blksize
    return st.st_size


def allocated_size(path: Path | str) -> int:
    """Total allocated size of a file or directory tree.

    Hidden descendants are skipped and symlinks are neither followed nor
    counted.  Returns 0 for missing or unreadable paths.
    """
    try:
        st = os.stat(path, follow_symlinks=False)
    except OSError:
        log.debug("Cannot stat: %s", path)
        return 0

    if stat.S_ISREG(st.st_mode):
        return file_allocated_size(st)
    if not stat.S_ISDIR(st.st_mode):
        return 0

    total = 0
    stack: list[Path | str] = [path]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                for entry in it:
                    if is_hidden(entry.name):
                        continue
                    try:
                        if entry.is_file(follow_symlinks=False):
                            total += file_allocated_size(entry.stat(follow_symlinks=False))
                        elif entry.is_dir(follow_symlinks=False):
                            stack.append(entry.path)
                    except OSError:
                        log.debug("Cannot access: %s", entry.path)
        except OSError:
            log.debug("Cannot read directory: %s", current)
    return total


def walk_files(root: Path | str, *, skip_packages: bool = True) -> Iterator[tuple[Path, os.stat_result]]:
    """Yield ``(path, stat)`` for every regular file below *root*.

    Hidden entries are skipped, symlinks are not followed and, with
    *skip_packages*, bundle directories are not descended into.  Entries are
    visited depth-first in name order so repeated walks of an unchanged tree
    produce the same sequence.
    """
    stack: list[str] = [str(root)]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError:
            log.debug("Cannot read directory: %s", current)
            continue

        subdirs: list[str] = []
        for entry in entries:
            if is_hidden(entry.name):
                continue
            try:
                if entry.is_file(follow_symlinks=False):
                    yield Path(entry.path), entry.stat(follow_symlinks=False)
                elif entry.is_dir(follow_symlinks=False):
                    if skip_packages and is_package(entry.name):
                        continue
                    subdirs.append(entry.path)
            except OSError:
                log.debug("Cannot access: %s", entry.path)
        # Reversed so the stack pops subdirectories in name order.
        stack.extend(reversed(subdirs))


def exists(path: Path | str) -> bool:
    """Whether anything (including a dangling symlink) exists at *path*."""
    return os.path.lexists(path)


def disk_usage(path: Path | str) -> DiskUsage:
    """Total, free and used bytes of the volume holding *path*.

    All zero when the volume cannot be queried.
    """
    try:
        usage = shutil.disk_usage(path)
    except OSError:
        log.debug("Cannot query disk usage: %s", path)
        return DiskUsage(0, 0, 0)
    used = usage.total - usage.free if usage.total > usage.free else 0
    return DiskUsage(total_bytes=usage.total, free_bytes=usage.free, used_bytes=used)


def move_to_trash(path: Path | str) -> None:
    """Move *path* to the desktop trash.

    A path that is already gone counts as success.  A dangling symlink is
    unlinked instead, since the trash refuses links whose target is missing.
    """
    if not exists(path):
        log.debug("Already gone, nothing to trash: %s", path)
        return
    if os.path.islink(path) and not os.path.exists(path):
        permanently_delete(path)
        return
    try:
        send2trash(os.fspath(path))
    except OSError as exc:
        if not exists(path):
            return
        raise from_os_error(path, exc) from exc
    log.info("Moved to trash: %s", path)


def permanently_delete(path: Path | str) -> None:
    """Remove *path* recursively without going through the trash.

    A path that is already gone counts as success.
    """
    if not exists(path):
        log.debug("Already gone, nothing to delete: %s", path)
        return
    try:
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            os.unlink(path)
    except FileNotFoundError:
        return
    except OSError as exc:
        raise from_os_error(path, exc) from exc
    log.info("Deleted: %s", path)


def remove(path: Path | str, *, use_trash: bool = True) -> None:
    """Trash or permanently delete *path*."""
    if use_trash:
        move_to_trash(path)
    else:
        permanently_delete(path)


def reveal(path: Path | str) -> None:
    """Ask the desktop file browser to show *path*.  Fire and forget."""
    target = Path(path)
    if sys.platform == "darwin":
        cmd = ["open", "-R", str(target)]
    else:
        cmd = ["xdg-open", str(target if target.is_dir() else target.parent)]
    if not has_command(cmd[0]):
        log.warning("Cannot reveal %s: %s not found", target, cmd[0])
        return
    try:
        subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except OSError:
        log.warning("Could not reveal %s with %s", target, cmd[0])
