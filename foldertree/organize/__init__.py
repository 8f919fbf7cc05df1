"""
Classification-driven reorganization.

Provides:
- Directory analysis with per-entry classification
- Reorganize plans (folders to create, moves to make)
- Plan execution
"""

from .analyzer import FileItem, OrganizeResult, DEFAULT_EXCLUDES, analyze_directory
from .reorganize import (
    Move,
    ReorganizePlan,
    ReorganizeResult,
    generate_reorganize_plan,
    apply_reorganize_plan,
)

__all__ = [
    "FileItem",
    "OrganizeResult",
    "DEFAULT_EXCLUDES",
    "analyze_directory",
    "Move",
    "ReorganizePlan",
    "ReorganizeResult",
    "generate_reorganize_plan",
    "apply_reorganize_plan",
]
