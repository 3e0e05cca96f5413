"""Batch deletion result dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(slots=True)
class CleanResult:
    """Result of deleting a batch of entries.

    Deletions are independent steps: ``removed`` lists the paths that are
    gone even when ``errors`` is not empty.
    """

    scanner_id: str
    freed_bytes: int = 0
    files_removed: int = 0
    errors: list[str] = field(default_factory=list)
    removed: list[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "scanner_id": self.scanner_id,
            "freed_bytes": self.freed_bytes,
            "files_removed": self.files_removed,
            "errors": list(self.errors),
            "removed": [str(p) for p in self.removed],
        }
