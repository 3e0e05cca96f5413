"""quickclean data models."""

from quickclean.models.clean_result import CleanResult
from quickclean.models.entries import (
    CacheEntry,
    CacheType,
    DeveloperCache,
    DeveloperCacheLocation,
    DiskUsage,
    DuplicateFile,
    DuplicateGroup,
    FileCategory,
    LargeFile,
    OrphanFile,
    OrphanType,
)
from quickclean.models.scanner import Scanner

__all__ = [
    "CacheEntry",
    "CacheType",
    "CleanResult",
    "DeveloperCache",
    "DeveloperCacheLocation",
    "DiskUsage",
    "DuplicateFile",
    "DuplicateGroup",
    "FileCategory",
    "LargeFile",
    "OrphanFile",
    "OrphanType",
    "Scanner",
]
