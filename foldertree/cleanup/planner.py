"""
Cleanup planning and execution.

A scan produces an immutable CleanupPlan. Applying it re-checks every item
just before removing it, so items deleted by hand in the meantime are simply
skipped.
"""

import logging
import os
import shutil
from dataclasses import dataclass, field

from tqdm import tqdm

from ..errors import FileOperationError, ValidationError
from ..pathguard import validate_path_exists
from ..structure.plan import path_depth
from .duplicates import resolve_duplicates
from .walker import (
    CleanupItem,
    CleanupOptions,
    CleanupType,
    new_size_buckets,
    walk_directory,
)

logger = logging.getLogger(__name__)


def summarize(items: list[CleanupItem]) -> dict:
    summary = {
        "emptyDirs": 0,
        "largeFiles": 0,
        "duplicates": 0,
        "cacheDirs": 0,
        "estimatedBytes": 0,
    }
    keys = {
        CleanupType.EMPTY_DIR: "emptyDirs",
        CleanupType.LARGE_FILE: "largeFiles",
        CleanupType.DUPLICATE: "duplicates",
        CleanupType.CACHE_DIR: "cacheDirs",
    }
    for item in items:
        summary[keys[item.type]] += 1
        summary["estimatedBytes"] += item.size
    return summary


@dataclass
class CleanupPlan:
    root: str
    items: list[CleanupItem] = field(default_factory=list)
    summary: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "root": self.root,
            "items": [item.to_dict() for item in self.items],
            "summary": dict(self.summary),
        }

    @classmethod
    def from_dict(cls, data) -> "CleanupPlan":
        if not isinstance(data, dict):
            raise ValidationError("plan is required")
        root = data.get("root")
        if not isinstance(root, str) or not root:
            raise ValidationError("plan root is required")
        try:
            items = [CleanupItem.from_dict(i) for i in data.get("items", [])]
        except (KeyError, ValueError, TypeError) as e:
            raise ValidationError(f"Invalid cleanup item: {e}")
        return cls(root=root, items=items, summary=data.get("summary") or summarize(items))


@dataclass
class CleanupResult:
    deleted: int = 0
    freed_bytes: int = 0

    def to_dict(self) -> dict:
        return {"deleted": self.deleted, "freedBytes": self.freed_bytes}


def scan_cleanup(root: str, options: CleanupOptions | None = None, progress: bool = False) -> CleanupPlan:
    """
    Scan a directory for cleanup candidates.

    Args:
        root: Existing directory to scan.
        options: What to look for. Defaults to everything.
        progress: Show a progress bar while resolving duplicates.

    Returns:
        CleanupPlan with walker items first, then duplicates.

    Raises:
        ValidationError: If root is empty.
        PathNotFoundError / InvalidPathTypeError: If root is not a directory.
    """
    if not root:
        raise ValidationError("root is required")
    validate_path_exists(root, "dir")
    options = options or CleanupOptions()

    buckets = new_size_buckets()
    walked = walk_directory(root, options, buckets, 0)

    duplicate_items = []
    if options.include_duplicates:
        duplicate_items = resolve_duplicates(buckets, options.strategy, progress=progress)

    items = walked.items + duplicate_items
    return CleanupPlan(root=root, items=items, summary=summarize(items))


def apply_cleanup(
    plan: CleanupPlan,
    selection: list[str] | None = None,
    progress: bool = False,
) -> CleanupResult:
    """
    Delete plan items from disk.

    Files go first; then empty/cache directories, deepest first, so that a
    parent is never removed before its children.

    Args:
        plan: Plan from scan_cleanup().
        selection: Paths to delete. None or empty means every plan item.
        progress: Show a progress bar.

    Returns:
        CleanupResult counting only deletions that actually happened.

    Raises:
        FileOperationError: If a removal fails.
    """
    if plan is None:
        raise ValidationError("plan is required")

    if selection:
        wanted = set(selection)
        selected = [item for item in plan.items if item.path in wanted]
    else:
        selected = list(plan.items)

    files = [i for i in selected if not i.type.is_directory]
    dirs = sorted(
        (i for i in selected if i.type.is_directory),
        key=lambda i: path_depth(i.path),
        reverse=True,
    )

    result = CleanupResult()
    for item in tqdm(files + dirs, unit="item", disable=not progress):
        try:
            if item.type.is_directory:
                if not os.path.isdir(item.path) or os.path.islink(item.path):
                    continue
                shutil.rmtree(item.path)
            else:
                if not os.path.isfile(item.path) and not os.path.islink(item.path):
                    continue
                os.unlink(item.path)
        except FileNotFoundError:
            # Removed by someone else between the check and the delete
            continue
        except OSError as e:
            raise FileOperationError(f"Failed to delete {item.path}: {e}", path=item.path) from e

        result.deleted += 1
        result.freed_bytes += item.size

    logger.info("Cleanup removed %d items, freed %d bytes", result.deleted, result.freed_bytes)
    return result
