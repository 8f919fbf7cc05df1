"""
Tree-to-filesystem engine.

Provides:
- Text parsing (indented or markdown) into a TreeNode hierarchy
- Flattening trees into ordered mkdir/writeFile operations
- Dry-run plans with overwrite accounting and rollback hints
- Applying operations to disk
"""

from .parser import TreeNode, NodeKind, normalize_tree_text, parse_tree_structure, parse_text
from .operations import (
    Operation,
    OpKind,
    ParsedTextTree,
    InternalTree,
    TreeSource,
    to_operations,
)
from .plan import PlanOperation, PlanResult, build_plan, build_plan_from_text
from .executor import apply_operations

__all__ = [
    "TreeNode",
    "NodeKind",
    "normalize_tree_text",
    "parse_tree_structure",
    "parse_text",
    "Operation",
    "OpKind",
    "ParsedTextTree",
    "InternalTree",
    "TreeSource",
    "to_operations",
    "PlanOperation",
    "PlanResult",
    "build_plan",
    "build_plan_from_text",
    "apply_operations",
]
