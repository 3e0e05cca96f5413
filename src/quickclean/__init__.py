"""Find and reclaim disk space: caches, developer caches, leftovers, large files and duplicates."""

__version__ = "0.1.0"
