"""
Reorganization planning and execution.

Turns the semantic-type buckets of an analysis into folder creations and
moves, then applies them. Each step is checked against the disk right before
it runs; a source that no longer exists is skipped.
"""

import logging
import os
import shutil
from dataclasses import dataclass, field

from tqdm import tqdm

from ..errors import FileOperationError, PathOutOfBoundsError, ValidationError
from ..pathguard import is_within_base, sanitize_filename
from .analyzer import OrganizeResult

logger = logging.getLogger(__name__)

GROUP_BY_FALLBACK = {
    "semantic": "misc",
    "language": "language",
    "framework": "framework",
}


@dataclass
class Move:
    from_path: str
    to_path: str
    reason: str

    def to_dict(self) -> dict:
        return {"from": self.from_path, "to": self.to_path, "reason": self.reason}


@dataclass
class ReorganizePlan:
    moves: list[Move] = field(default_factory=list)
    creates: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "moves": [m.to_dict() for m in self.moves],
            "creates": list(self.creates),
        }

    @classmethod
    def from_dict(cls, data) -> "ReorganizePlan":
        if not isinstance(data, dict):
            raise ValidationError("plan is required to apply reorganization")
        moves = []
        for m in data.get("moves") or []:
            if not isinstance(m, dict) or not m.get("from") or not m.get("to"):
                raise ValidationError(f"Invalid move: {m!r}")
            moves.append(Move(m["from"], m["to"], m.get("reason", "")))
        creates = list(dict.fromkeys(data.get("creates") or []))
        return cls(moves=moves, creates=creates)


@dataclass
class ReorganizeResult:
    moved: int = 0
    created: int = 0

    def to_dict(self) -> dict:
        return {"moved": self.moved, "created": self.created}


def generate_reorganize_plan(analysis: OrganizeResult, group_by: str = "semantic") -> ReorganizePlan:
    """
    Propose moves that gather each bucket into its own folder under the root.

    Args:
        analysis: Result of analyze_directory().
        group_by: "semantic", "language" or "framework". Picks the folder
            name used for a bucket with an empty key.

    Returns:
        ReorganizePlan. The same analysis always yields the same plan.
    """
    if group_by not in GROUP_BY_FALLBACK:
        raise ValidationError(f"groupBy must be one of: {', '.join(GROUP_BY_FALLBACK)}")

    moves = []
    creates: dict[str, None] = {}  # insertion-ordered set

    for key, bucket in analysis.suggestions.items():
        dir_name = sanitize_filename(key) if key else GROUP_BY_FALLBACK[group_by]
        target_dir = os.path.join(analysis.root, dir_name)
        creates[target_dir] = None

        for item in bucket:
            target_path = os.path.join(target_dir, item.name)
            if item.path != target_path:
                moves.append(Move(
                    from_path=item.path,
                    to_path=target_path,
                    reason=f"Move to {dir_name} category",
                ))

    return ReorganizePlan(moves=moves, creates=list(creates))


def _check_bounds(path: str, allowed_base: str | None) -> None:
    if allowed_base and not is_within_base(path, allowed_base):
        raise PathOutOfBoundsError("Path is outside allowed directory", path=path)


def apply_reorganize_plan(
    plan: ReorganizePlan,
    allowed_base: str | None = None,
    progress: bool = False,
) -> ReorganizeResult:
    """
    Create the planned folders, then perform the moves.

    Missing sources, occupied destinations and moves of a directory into
    itself are skipped without failing the batch.

    Args:
        plan: Plan from generate_reorganize_plan().
        allowed_base: If set, every path in the plan must be inside it.
        progress: Show a progress bar over the moves.

    Returns:
        ReorganizeResult with the number of folders created and items moved.

    Raises:
        PathOutOfBoundsError: Before anything changes, if a path escapes
            allowed_base.
        FileOperationError: If a create or move fails.
    """
    for path in plan.creates:
        _check_bounds(path, allowed_base)
    for move in plan.moves:
        _check_bounds(move.from_path, allowed_base)
        _check_bounds(move.to_path, allowed_base)

    result = ReorganizeResult()

    for dir_path in plan.creates:
        if os.path.exists(dir_path):
            continue
        try:
            os.makedirs(dir_path, exist_ok=True)
        except OSError as e:
            raise FileOperationError(f"Failed to create {dir_path}: {e}", path=dir_path) from e
        result.created += 1

    for move in tqdm(plan.moves, unit="item", disable=not progress):
        if not os.path.exists(move.from_path):
            continue
        if os.path.exists(move.to_path):
            logger.debug("Destination exists, skipping: %s", move.to_path)
            continue
        if is_within_base(move.to_path, move.from_path):
            logger.debug("Cannot move a directory into itself: %s", move.from_path)
            continue

        try:
            os.makedirs(os.path.dirname(move.to_path), exist_ok=True)
            shutil.move(move.from_path, move.to_path)
        except OSError as e:
            raise FileOperationError(
                f"Failed to move {move.from_path} -> {move.to_path}: {e}", path=move.from_path
            ) from e
        result.moved += 1

    logger.info("Reorganization moved %d items, created %d folders", result.moved, result.created)
    return result
