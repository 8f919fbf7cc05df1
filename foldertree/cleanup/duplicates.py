"""
Duplicate detection.

Works on the size buckets collected by the walker. Files of different size
can never be duplicates, so each bucket is resolved on its own. In every
strategy the first file of a group (in traversal order) is the one kept.
"""

import hashlib
import logging
import os
from collections import defaultdict
from enum import Enum

from tqdm import tqdm

from ..errors import ValidationError
from .walker import CleanupItem, CleanupType

logger = logging.getLogger(__name__)

# Files larger than this are grouped by size only, to bound hashing I/O
MAX_HASH_BYTES = 20 * 1024 * 1024
HASH_CHUNK_SIZE = 1024 * 1024


class DuplicateStrategy(Enum):
    SIZE = "size"
    NAME_SIZE = "nameSize"
    HASH = "hash"

    @classmethod
    def parse(cls, value) -> "DuplicateStrategy":
        if isinstance(value, cls):
            return value
        try:
            return cls(value or "size")
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            raise ValidationError(f"duplicateStrategy must be one of: {valid}")


def hash_file(path: str) -> str:
    """MD5 hex digest of a file, read in chunks."""
    digest = hashlib.md5()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(HASH_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def _file_size(path: str) -> int | None:
    try:
        return os.stat(path).st_size
    except OSError:
        logger.warning("File vanished during duplicate check: %s", path)
        return None


def _report_group(paths: list[str], reason: str, items: list[CleanupItem]) -> None:
    """All but the first path of a group of 2+ are duplicates."""
    if len(paths) < 2:
        return
    for p in paths[1:]:
        size = _file_size(p)
        if size is None:
            continue
        items.append(CleanupItem(type=CleanupType.DUPLICATE, path=p, size=size, reason=reason))


def _resolve_bucket(size: int, paths: list[str], strategy: DuplicateStrategy, items: list[CleanupItem]) -> None:
    if strategy is DuplicateStrategy.SIZE:
        _report_group(paths, "same file size group", items)
        return

    if strategy is DuplicateStrategy.NAME_SIZE:
        groups: dict[tuple[str, int], list[str]] = defaultdict(list)
        for p in paths:
            groups[(os.path.basename(p), size)].append(p)
        for group in groups.values():
            _report_group(group, "same name and size", items)
        return

    # Hash confirmation. Keys are digests, or "size:<n>" for files past the cap.
    groups: dict[str, list[str]] = defaultdict(list)
    for p in paths:
        if size > MAX_HASH_BYTES:
            groups[f"size:{size}"].append(p)
            continue
        try:
            groups[hash_file(p)].append(p)
        except OSError as e:
            logger.warning("Cannot hash %s: %s", p, e)

    for key, group in groups.items():
        reason = "same file size group" if key.startswith("size:") else "hash match"
        _report_group(group, reason, items)


def resolve_duplicates(
    size_buckets: dict[int, list[str]],
    strategy: DuplicateStrategy | str = DuplicateStrategy.SIZE,
    progress: bool = False,
) -> list[CleanupItem]:
    """
    Decide which files in each size bucket are duplicates.

    Args:
        size_buckets: Mapping of exact byte size -> paths in traversal order.
        strategy: "size", "nameSize" or "hash".
        progress: Show a progress bar over the candidate buckets.

    Returns:
        One "duplicate" CleanupItem per file to remove. The first file of
        each group is never reported.
    """
    strategy = DuplicateStrategy.parse(strategy)
    candidates = [(size, paths) for size, paths in size_buckets.items() if len(paths) >= 2]

    items: list[CleanupItem] = []
    for size, paths in tqdm(candidates, unit="group", disable=not progress):
        _resolve_bucket(size, paths, strategy, items)

    logger.debug("Resolved %d duplicate candidates with strategy %s", len(items), strategy.value)
    return items
