"""Built-in scanners."""

from quickclean.scanners.caches import CacheScanner
from quickclean.scanners.developer import DeveloperScanner
from quickclean.scanners.duplicates import DuplicateScanner
from quickclean.scanners.large_files import LargeFileScanner
from quickclean.scanners.orphans import OrphanScanner

__all__ = [
    "CacheScanner",
    "DeveloperScanner",
    "DuplicateScanner",
    "LargeFileScanner",
    "OrphanScanner",
]
