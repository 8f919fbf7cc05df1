"""
Operation planning.

Flattens a tree into an ordered list of primitive filesystem operations.
A directory's mkdir always comes before anything inside it (pre-order).

Two kinds of tree are accepted through the same entry point:
- ParsedTextTree: the TreeNode produced by the text parser
- InternalTree: the id-addressed tree sent by an interactive editor, e.g.

    {
      "rootId": "root",
      "items": {
        "root": {"data": {"title": "app"}, "children": ["a"]},
        "a": {"data": {"title": "main.py", "content": "print()"}}
      }
    }
"""

import os
from dataclasses import dataclass
from enum import Enum

from ..errors import ValidationError
from ..pathguard import is_likely_file
from .parser import TreeNode


class OpKind(Enum):
    MKDIR = "mkdir"
    WRITE_FILE = "writeFile"


@dataclass
class Operation:
    """One primitive filesystem operation."""
    kind: OpKind
    path: str
    content: str | None = None

    @property
    def bytes(self) -> int:
        if self.kind is not OpKind.WRITE_FILE or not self.content:
            return 0
        return len(self.content.encode("utf-8"))

    def to_dict(self) -> dict:
        data = {"op": self.kind.value, "path": self.path}
        if self.kind is OpKind.WRITE_FILE:
            data["bytes"] = self.bytes
            data["content"] = self.content or ""
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Operation":
        try:
            kind = OpKind(data.get("op"))
        except ValueError:
            raise ValidationError(f"Unknown operation: {data.get('op')!r}")
        path = data.get("path")
        if not isinstance(path, str) or not path:
            raise ValidationError("Operation path must be a non-empty string")
        return cls(kind=kind, path=path, content=data.get("content"))


@dataclass
class ParsedTextTree:
    root: TreeNode


@dataclass
class InternalTree:
    items: dict
    root_id: str

    @classmethod
    def from_dict(cls, tree) -> "InternalTree":
        """
        Validate the editor payload shape.

        Raises:
            ValidationError: If tree is not a mapping with an "items" mapping
                and a "rootId" string.
        """
        if not isinstance(tree, dict):
            raise ValidationError("Tree must be an object")
        if not isinstance(tree.get("items"), dict):
            raise ValidationError("Tree must have items object")
        root_id = tree.get("rootId")
        if not isinstance(root_id, str) or not root_id:
            raise ValidationError("Tree must have rootId string")
        return cls(items=tree["items"], root_id=root_id)


TreeSource = ParsedTextTree | InternalTree


def _walk_parsed(node: TreeNode, current_path: str, ops: list[Operation]) -> None:
    for child in node.children:
        child_path = os.path.join(current_path, child.name)
        if child.is_file:
            ops.append(Operation(OpKind.WRITE_FILE, child_path, child.content or ""))
        else:
            ops.append(Operation(OpKind.MKDIR, child_path))
            _walk_parsed(child, child_path, ops)


def _walk_internal(tree: InternalTree, node_id: str, current_path: str, ops: list[Operation]) -> None:
    item = tree.items.get(node_id)
    if not isinstance(item, dict):
        return

    data = item.get("data") or {}
    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ValidationError(f"Tree item {node_id!r} has no title")

    title = title.strip()
    item_path = os.path.join(current_path, title)

    if is_likely_file(title):
        # Children listed under a file are ignored
        ops.append(Operation(OpKind.WRITE_FILE, item_path, data.get("content") or ""))
        return

    ops.append(Operation(OpKind.MKDIR, item_path))
    for child_id in item.get("children") or []:
        _walk_internal(tree, child_id, item_path, ops)


def to_operations(source: TreeSource | TreeNode, base_path: str) -> list[Operation]:
    """
    Convert a tree into ordered filesystem operations under base_path.

    Args:
        source: ParsedTextTree, InternalTree, or a bare TreeNode root.
        base_path: Directory the tree is created in.

    Returns:
        Operations in pre-order (parents before children).
    """
    ops: list[Operation] = []

    if isinstance(source, TreeNode):
        source = ParsedTextTree(source)

    if isinstance(source, ParsedTextTree):
        # The parser's synthetic root is not emitted
        _walk_parsed(source.root, base_path, ops)
    elif isinstance(source, InternalTree):
        _walk_internal(source, source.root_id, base_path, ops)
    else:
        raise ValidationError(f"Unsupported tree source: {type(source).__name__}")

    return ops
