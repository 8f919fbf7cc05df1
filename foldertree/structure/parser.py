"""
Text-to-tree parsing.

Turns a pasted, hand-written or AI-generated folder layout into a TreeNode
hierarchy. Two input styles are accepted:

    project                 - project
      src                     - src
        main.py                 - main.py
      README.md               - README.md

Indentation is read as two spaces per level. No disk I/O happens here.
"""

import re
from dataclasses import dataclass, field
from enum import Enum

from ..errors import ValidationError
from ..pathguard import is_likely_file

ROOT_NAME = "__root__"

MARKDOWN_BULLET = re.compile(r"^(\s*)-\s+(.*)$")
INDENT_WIDTH = 2


class NodeKind(Enum):
    FILE = "file"
    DIRECTORY = "dir"


@dataclass
class TreeNode:
    """A single entry in a parsed layout. Files never have children."""
    name: str
    kind: NodeKind = NodeKind.DIRECTORY
    children: list["TreeNode"] = field(default_factory=list)
    content: str | None = None

    @property
    def is_file(self) -> bool:
        return self.kind is NodeKind.FILE

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "type": self.kind.value,
            "children": [c.to_dict() for c in self.children],
        }
        if self.content is not None:
            data["content"] = self.content
        return data


def normalize_tree_text(text: str) -> list[str]:
    """
    Clean up raw tree text into indentation-based lines.

    - Tabs become two spaces
    - Trailing whitespace is stripped and blank lines are dropped
    - If any line is a markdown bullet ("- name"), the whole input is treated
      as markdown and every bullet is rewritten as indentation

    Args:
        text: Raw text, possibly with CRLF line endings.

    Returns:
        List of non-empty lines using space indentation.
    """
    lines = [
        line.rstrip()
        for line in (text or "").replace("\t", "  ").splitlines()
    ]
    lines = [line for line in lines if line.strip()]

    is_markdown = any(MARKDOWN_BULLET.match(line) for line in lines)
    if not is_markdown:
        return lines

    converted = []
    for line in lines:
        m = MARKDOWN_BULLET.match(line)
        if not m:
            # Non-bullet lines pass through untouched
            converted.append(line)
            continue
        depth = len(m.group(1)) // INDENT_WIDTH
        converted.append("  " * depth + m.group(2))
    return converted


def _leading_spaces(line: str) -> int:
    return len(line) - len(line.lstrip())


def parse_tree_structure(lines: list[str]) -> TreeNode:
    """
    Build a TreeNode hierarchy from indentation-based lines.

    The level of a line is floor(leading_spaces / 2). Odd indentation (e.g. 3
    spaces) is not rejected; it nests under the nearest shallower level.

    A deeper line below a file still nests under that file. Files are never
    walked by to_operations(), so such lines produce no operation.

    Args:
        lines: Output of normalize_tree_text().

    Returns:
        A synthetic root node (name "__root__") holding the top-level entries.
    """
    root = TreeNode(name=ROOT_NAME, kind=NodeKind.DIRECTORY)
    stack: list[tuple[int, TreeNode]] = [(-1, root)]

    for line in lines:
        name = line.strip()
        if not name:
            continue

        level = _leading_spaces(line) // INDENT_WIDTH
        kind = NodeKind.FILE if is_likely_file(name) else NodeKind.DIRECTORY

        # Never pop the sentinel root
        while len(stack) > 1 and stack[-1][0] >= level:
            stack.pop()

        parent = stack[-1][1]

        node = TreeNode(name=name, kind=kind)
        parent.children.append(node)
        stack.append((level, node))

    return root


def parse_text(text: str) -> TreeNode:
    """Validate, normalize and parse tree text in one step."""
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("text must be provided to build plan")
    return parse_tree_structure(normalize_tree_text(text))
