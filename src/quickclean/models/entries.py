"""Scanned entry types and their classification enums."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, replace
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any


class CacheType(str, Enum):
    BROWSER = "browser"
    SYSTEM = "system"
    APPLICATION = "application"
    DEVELOPER = "developer"
    UNKNOWN = "unknown"


class OrphanType(str, Enum):
    APP_SUPPORT = "app_support"
    PREFERENCES = "preferences"
    CONTAINERS = "containers"
    CACHES = "caches"
    LOGS = "logs"
    OTHER = "other"


class FileCategory(str, Enum):
    VIDEO = "video"
    IMAGE = "image"
    AUDIO = "audio"
    ARCHIVE = "archive"
    DOCUMENT = "document"
    APPLICATION = "application"
    DISK_IMAGE = "disk_image"
    OTHER = "other"

    @classmethod
    def for_extension(cls, extension: str) -> FileCategory:
        """Category for a file extension, with or without the leading dot.

        Matching is case-insensitive; unknown extensions map to OTHER.
        """
        return _EXTENSION_CATEGORIES.get(extension.lower().lstrip("."), cls.OTHER)


_EXTENSION_CATEGORIES: dict[str, FileCategory] = {
    **dict.fromkeys(("mp4", "mov", "avi", "mkv", "wmv", "flv", "webm", "m4v"), FileCategory.VIDEO),
    **dict.fromkeys(
        ("jpg", "jpeg", "png", "gif", "bmp", "tiff", "heic", "webp", "raw", "psd"), FileCategory.IMAGE
    ),
    **dict.fromkeys(("mp3", "wav", "aac", "flac", "m4a", "ogg", "wma"), FileCategory.AUDIO),
    **dict.fromkeys(("zip", "rar", "7z", "tar", "gz", "bz2", "xz"), FileCategory.ARCHIVE),
    **dict.fromkeys(
        ("pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "txt", "rtf"), FileCategory.DOCUMENT
    ),
    **dict.fromkeys(("app", "pkg", "ipa", "deb", "rpm", "appimage", "flatpak"), FileCategory.APPLICATION),
    **dict.fromkeys(("dmg", "iso", "img"), FileCategory.DISK_IMAGE),
}


def _jsonable(value: Any) -> Any:
    if isinstance(value, os.PathLike):
        return os.fspath(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


class _Serializable:
    def to_dict(self) -> dict[str, Any]:
        """Plain-JSON representation (paths and enums as strings)."""
        return _jsonable(asdict(self))  # type: ignore[call-overload]


@dataclass(frozen=True, slots=True)
class CacheEntry(_Serializable):
    """Top-level item inside a cache directory."""

    path: Path
    name: str
    size: int
    cache_type: CacheType
    is_developer_related: bool
    is_safe_to_delete: bool
    description: str


@dataclass(frozen=True, slots=True)
class DeveloperCacheLocation:
    """Catalog entry for a developer tool cache, relative to the home directory."""

    name: str
    relative_path: str
    description: str
    safe_to_clean: bool = True

    def resolve(self, home: Path) -> Path:
        return home / self.relative_path


@dataclass(frozen=True, slots=True)
class DeveloperCache(_Serializable):
    """A catalog location probed on this machine. Missing locations have size 0."""

    name: str
    path: Path
    size: int
    description: str
    exists: bool
    safe_to_clean: bool

    def emptied(self) -> DeveloperCache:
        return replace(self, size=0)


@dataclass(frozen=True, slots=True)
class OrphanFile(_Serializable):
    """Leftover item of an application that no longer seems installed."""

    path: Path
    name: str
    size: int
    orphan_type: OrphanType
    possible_app_name: str


@dataclass(frozen=True, slots=True)
class LargeFile(_Serializable):
    path: Path
    name: str
    size: int
    category: FileCategory
    extension: str
    last_modified: datetime | None = None


@dataclass(frozen=True, slots=True)
class DuplicateFile(_Serializable):
    path: Path
    name: str

    @classmethod
    def from_path(cls, path: Path) -> DuplicateFile:
        return cls(path=path, name=path.name)


@dataclass(frozen=True, slots=True)
class DuplicateGroup(_Serializable):
    """Files sharing size and quick hash.

    The first file is treated as the original; the rest count as wasted
    space.
    """

    hash: str
    files: tuple[DuplicateFile, ...]
    file_size: int

    @property
    def duplicate_count(self) -> int:
        return max(0, len(self.files) - 1)

    @property
    def total_wasted(self) -> int:
        return self.file_size * self.duplicate_count

    @property
    def original(self) -> DuplicateFile:
        return self.files[0]

    def contains(self, path: Path) -> bool:
        return any(f.path == path for f in self.files)

    def without(self, path: Path) -> DuplicateGroup | None:
        """This group minus *path*, or None if it would no longer hold duplicates."""
        remaining = tuple(f for f in self.files if f.path != path)
        if len(remaining) <= 1:
            return None
        return replace(self, files=remaining)

    def to_dict(self) -> dict[str, Any]:
        data = _jsonable(asdict(self))
        data["duplicate_count"] = self.duplicate_count
        data["total_wasted"] = self.total_wasted
        return data


@dataclass(frozen=True, slots=True)
class DiskUsage(_Serializable):
    """Capacity of the volume holding the home directory."""

    total_bytes: int
    free_bytes: int
    used_bytes: int

    @property
    def used_percentage(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        return self.used_bytes / self.total_bytes * 100.0

    @property
    def free_percentage(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        return self.free_bytes / self.total_bytes * 100.0

    def to_dict(self) -> dict[str, Any]:
        data = _jsonable(asdict(self))
        data["used_percentage"] = self.used_percentage
        data["free_percentage"] = self.free_percentage
        return data
