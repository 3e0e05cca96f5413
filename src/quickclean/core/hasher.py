"""Content fingerprints for duplicate detection."""

from __future__ import annotations

import hashlib
import logging
import os
import struct
from pathlib import Path

log = logging.getLogger(__name__)

CHUNK_SIZE = 65_536  # 64 KB


def quick_hash(path: Path | str) -> str | None:
    """SHA-256 of the file length, its first 64 KB and, above 128 KB, its last 64 KB.

    This is a fingerprint rather than proof of equality: two files that agree
    in length, head and tail hash identically even if their middles differ.
    Returns None when the file cannot be read.
    """
    try:
        with open(path, "rb") as f:
            size = os.fstat(f.fileno()).st_size
            h = hashlib.sha256(struct.pack("<Q", size))
            h.update(f.read(CHUNK_SIZE))
            if size > CHUNK_SIZE * 2:
                f.seek(size - CHUNK_SIZE)
                h.update(f.read(CHUNK_SIZE))
    except OSError:
        log.debug("Cannot hash: %s", path)
        return None
    return h.hexdigest()


def full_hash(path: Path | str) -> str | None:
    """SHA-256 of the whole file using chunked reads, or None if unreadable."""
    h = hashlib.sha256()
    try:
        with open(path, "rb") as f:
            while chunk := f.read(CHUNK_SIZE):
                h.update(chunk)
    except OSError:
        log.debug("Cannot hash: %s", path)
        return None
    return h.hexdigest()
