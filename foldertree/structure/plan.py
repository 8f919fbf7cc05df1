"""
Dry-run planning.

Annotates each operation with what is on disk right now, without changing
anything. The result is a point-in-time preview: running it again after the
disk changes gives a different answer.
"""

import os
from dataclasses import dataclass, field

from .operations import Operation, OpKind, ParsedTextTree, to_operations
from .parser import parse_text

ROLLBACK_NOTE = (
    "Rollback deletes only newly created items. "
    "Overwritten files are not automatically restored."
)


@dataclass
class PlanOperation:
    kind: OpKind
    path: str
    exists: bool
    will_overwrite: bool
    bytes: int

    def to_dict(self) -> dict:
        return {
            "op": self.kind.value,
            "path": self.path,
            "exists": self.exists,
            "willOverwrite": self.will_overwrite,
            "bytes": self.bytes,
        }


@dataclass
class PlanResult:
    output_dir: str
    operations: list[PlanOperation] = field(default_factory=list)
    stats: dict = field(default_factory=dict)
    delete_paths: list[str] = field(default_factory=list)
    note: str = ROLLBACK_NOTE

    def to_dict(self) -> dict:
        return {
            "outputDir": self.output_dir,
            "operations": [op.to_dict() for op in self.operations],
            "stats": dict(self.stats),
            "rollback": {
                "deletePaths": list(self.delete_paths),
                "note": self.note,
            },
        }


def path_depth(path: str) -> int:
    """Number of path segments, used to order deletions deepest-first."""
    return len(os.path.normpath(path).split(os.sep))


def build_plan(operations: list[Operation], output_dir: str) -> PlanResult:
    """
    Build an execution plan with collision awareness and rollback hints.

    Args:
        operations: Output of to_operations().
        output_dir: Directory the operations target (reported back as-is).

    Returns:
        PlanResult with per-operation disk facts, aggregate stats and the
        list of paths a caller could delete to undo the apply step.
    """
    planned = []
    for op in operations:
        exists = os.path.exists(op.path)
        planned.append(PlanOperation(
            kind=op.kind,
            path=op.path,
            exists=exists,
            will_overwrite=op.kind is OpKind.WRITE_FILE and exists,
            bytes=op.bytes,
        ))

    stats = {
        "total": 0,
        "dirs": 0,
        "files": 0,
        "overwriteCount": 0,
        "estimatedBytes": 0,
    }
    for op in planned:
        stats["total"] += 1
        if op.kind is OpKind.MKDIR:
            stats["dirs"] += 1
        else:
            stats["files"] += 1
            stats["estimatedBytes"] += op.bytes
        if op.will_overwrite:
            stats["overwriteCount"] += 1

    # Only paths that apply would newly create; deeper paths first
    delete_paths = sorted(
        (op.path for op in planned if not op.exists),
        key=path_depth,
        reverse=True,
    )

    return PlanResult(
        output_dir=output_dir,
        operations=planned,
        stats=stats,
        delete_paths=delete_paths,
    )


def build_plan_from_text(text: str, output_dir: str) -> PlanResult:
    """Parse tree text and plan it against output_dir."""
    ops = to_operations(ParsedTextTree(parse_text(text)), output_dir)
    return build_plan(ops, output_dir)
