"""
Directory cleanup engine.

Provides:
- Recursive scanning for empty dirs, large files and cache dirs
- Duplicate detection by size, name+size or content hash
- Cleanup plans and safe, deepest-first deletion
"""

from .walker import (
    CleanupItem,
    CleanupOptions,
    CleanupType,
    WalkResult,
    DEFAULT_CACHE_DIRS,
    directory_size,
    walk_directory,
)
from .duplicates import DuplicateStrategy, MAX_HASH_BYTES, hash_file, resolve_duplicates
from .planner import CleanupPlan, CleanupResult, scan_cleanup, apply_cleanup

__all__ = [
    "CleanupItem",
    "CleanupOptions",
    "CleanupType",
    "WalkResult",
    "DEFAULT_CACHE_DIRS",
    "directory_size",
    "walk_directory",
    "DuplicateStrategy",
    "MAX_HASH_BYTES",
    "hash_file",
    "resolve_duplicates",
    "CleanupPlan",
    "CleanupResult",
    "scan_cleanup",
    "apply_cleanup",
]
