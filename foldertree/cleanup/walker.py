"""
Directory walking for cleanup scans.

Recursively collects cleanup candidates (empty directories, large files,
cache directories) and buckets every file by exact byte size so that the
duplicate resolver only compares files that could possibly match.
"""

import logging
import os
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIRS = (
    "node_modules", ".cache", "dist", "build", ".next", ".turbo", ".parcel-cache", ".pytest_cache",
)
DEFAULT_LARGE_MB = 50
MB = 1024 * 1024


class CleanupType(Enum):
    EMPTY_DIR = "emptyDir"
    LARGE_FILE = "largeFile"
    DUPLICATE = "duplicate"
    CACHE_DIR = "cacheDir"

    @property
    def is_directory(self) -> bool:
        return self in (CleanupType.EMPTY_DIR, CleanupType.CACHE_DIR)


@dataclass
class CleanupItem:
    type: CleanupType
    path: str
    size: int
    reason: str

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "path": self.path,
            "size": self.size,
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CleanupItem":
        return cls(
            type=CleanupType(data["type"]),
            path=data["path"],
            size=int(data.get("size", 0)),
            reason=data.get("reason", ""),
        )


@dataclass
class CleanupOptions:
    """
    What a cleanup scan looks for and how far it walks.

    max_depth=None means unlimited. hash_duplicates is the older switch for
    selecting the hash strategy when duplicate_strategy is not given.
    """
    include_empty_dirs: bool = True
    include_large_files: bool = True
    include_duplicates: bool = True
    include_caches: bool = True
    max_file_size_mb: float = DEFAULT_LARGE_MB
    duplicate_strategy: str | None = None
    hash_duplicates: bool = False
    cache_dir_names: tuple[str, ...] = DEFAULT_CACHE_DIRS
    max_depth: int | None = None
    exclude_names: tuple[str, ...] = ()
    follow_symlinks: bool = False

    @property
    def large_file_bytes(self) -> int:
        return int((self.max_file_size_mb or DEFAULT_LARGE_MB) * MB)

    @property
    def strategy(self) -> str:
        if self.duplicate_strategy:
            return self.duplicate_strategy
        return "hash" if self.hash_duplicates else "size"

    @classmethod
    def from_dict(cls, data: dict) -> "CleanupOptions":
        """Create options from camelCase or snake_case keys."""
        def pick(*keys, default=None):
            for key in keys:
                if data.get(key) is not None:
                    return data[key]
            return default

        return cls(
            include_empty_dirs=pick("includeEmptyDirs", "include_empty_dirs", default=True),
            include_large_files=pick("includeLargeFiles", "include_large_files", default=True),
            include_duplicates=pick("includeDuplicates", "include_duplicates", default=True),
            include_caches=pick("includeCaches", "include_caches", default=True),
            max_file_size_mb=pick("maxFileSizeMB", "max_file_size_mb", default=DEFAULT_LARGE_MB),
            duplicate_strategy=pick("duplicateStrategy", "duplicate_strategy"),
            hash_duplicates=pick("hashDuplicates", "hash_duplicates", default=False),
            cache_dir_names=tuple(pick("cacheDirNames", "cache_dir_names", default=DEFAULT_CACHE_DIRS)),
            max_depth=pick("maxDepth", "max_depth"),
            exclude_names=tuple(pick("excludeNames", "exclude_names", default=())),
            follow_symlinks=pick("followSymlinks", "follow_symlinks", default=False),
        )


@dataclass
class WalkResult:
    items: list[CleanupItem] = field(default_factory=list)
    child_count: int = 0


def new_size_buckets() -> dict[int, list[str]]:
    return defaultdict(list)


def directory_size(path: str) -> int:
    """Total size in bytes of every file below path. Symlinks are not followed."""
    total = 0
    try:
        with os.scandir(path) as it:
            entries = list(it)
    except OSError as e:
        logger.warning("Cannot list %s: %s", path, e)
        return 0

    for entry in entries:
        try:
            if entry.is_dir(follow_symlinks=False):
                total += directory_size(entry.path)
            elif entry.is_file(follow_symlinks=False):
                total += entry.stat(follow_symlinks=False).st_size
        except OSError:
            continue
    return total


def _sorted_entries(path: str) -> list[os.DirEntry]:
    with os.scandir(path) as it:
        return sorted(it, key=lambda e: e.name)


def walk_directory(
    root: str,
    options: CleanupOptions,
    size_buckets: dict[int, list[str]],
    depth: int = 0,
) -> WalkResult:
    """
    Walk one directory level and recurse into subdirectories.

    Entries are visited in name order so that the traversal, and therefore
    which duplicate is kept, is the same on every platform.

    Args:
        root: Directory to walk.
        options: Scan options.
        size_buckets: Mapping of file size -> paths, filled in place.
        depth: Current recursion depth (0 for the scan root).

    Returns:
        WalkResult with the cleanup items found below root and the number of
        direct children root has. Excluded and skipped entries don't count,
        and neither do subdirectories that turned out to be empty.
    """
    result = WalkResult()
    cache_names = set(options.cache_dir_names or DEFAULT_CACHE_DIRS)
    excluded = set(options.exclude_names or ())

    for entry in _sorted_entries(root):
        # 1. Exclusions win over everything else
        if entry.name in excluded:
            continue

        # 2. Symlinks
        if entry.is_symlink() and not options.follow_symlinks:
            continue

        try:
            is_dir = entry.is_dir(follow_symlinks=options.follow_symlinks)
            is_file = not is_dir and entry.is_file(follow_symlinks=options.follow_symlinks)
        except OSError:
            continue

        if is_dir:
            # Depth limit: still a child of its parent, but not entered
            if options.max_depth is not None and depth >= options.max_depth:
                result.child_count += 1
                continue

            # 3. Cache dirs are reported whole and never entered
            if options.include_caches and entry.name in cache_names:
                result.items.append(CleanupItem(
                    type=CleanupType.CACHE_DIR,
                    path=entry.path,
                    size=directory_size(entry.path),
                    reason="cache directory",
                ))
                result.child_count += 1
                continue

            try:
                sub = walk_directory(entry.path, options, size_buckets, depth + 1)
            except OSError as e:
                logger.warning("Skipping unreadable directory %s: %s", entry.path, e)
                result.child_count += 1
                continue

            result.items.extend(sub.items)

            # A subtree holding nothing but empty directories is empty too
            if sub.child_count > 0:
                result.child_count += 1
            elif options.include_empty_dirs:
                result.items.append(CleanupItem(
                    type=CleanupType.EMPTY_DIR,
                    path=entry.path,
                    size=0,
                    reason="empty directory",
                ))

        elif is_file:
            try:
                size = entry.stat(follow_symlinks=options.follow_symlinks).st_size
            except OSError:
                continue
            result.child_count += 1

            if options.include_large_files and size >= options.large_file_bytes:
                result.items.append(CleanupItem(
                    type=CleanupType.LARGE_FILE,
                    path=entry.path,
                    size=size,
                    reason="exceeds size threshold",
                ))

            if options.include_duplicates:
                size_buckets[size].append(entry.path)

    return result
