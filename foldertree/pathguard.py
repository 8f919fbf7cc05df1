"""
Path validation helpers.

Every operation that touches disk goes through these checks first. They are
pure string functions except for validate_path_exists and resolve_root,
which stat the target.
"""

import os
import re

from .config import DEFAULT_OUTPUT_DIR
from .errors import (
    InvalidPathTypeError,
    PathNotFoundError,
    PathOutOfBoundsError,
    PathTraversalError,
    ValidationError,
)

FILE_NAME_PATTERN = re.compile(r"\.[A-Za-z0-9]+$")


def is_likely_file(name: str) -> bool:
    """Check if a name looks like a file (ends with an extension)."""
    return bool(FILE_NAME_PATTERN.search(name))


def is_within_base(path: str, base: str) -> bool:
    """
    Check whether path equals base or lies below it.

    Compares whole path components, so "/base-evil" is not inside "/base".
    """
    resolved_base = os.path.abspath(base)
    resolved = os.path.abspath(path)
    if resolved == resolved_base:
        return True
    prefix = resolved_base if resolved_base.endswith(os.sep) else resolved_base + os.sep
    return resolved.startswith(prefix)


def secure_path(input_path: str, allowed_base: str | None = None) -> str:
    """
    Normalize a path and make sure it cannot escape its allowed area.

    Args:
        input_path: A relative or absolute path supplied by the caller.
        allowed_base: If set, input_path is resolved against it and must stay
            inside it.

    Returns:
        The absolute, normalized path.

    Raises:
        ValidationError: If input_path is not a non-empty string.
        PathTraversalError: If ".." survives normalization or "~" is used.
        PathOutOfBoundsError: If the result is outside allowed_base.
    """
    if not isinstance(input_path, str) or not input_path.strip():
        raise ValidationError("Path must be a non-empty string")

    normalized = os.path.normpath(input_path)
    parts = normalized.replace("\\", "/").split("/")

    if ".." in parts or normalized.startswith("~"):
        raise PathTraversalError(
            "Invalid path: directory traversal not allowed", path=input_path
        )

    if allowed_base:
        resolved_base = os.path.abspath(allowed_base)
        resolved = os.path.abspath(os.path.join(resolved_base, normalized))
        if not is_within_base(resolved, resolved_base):
            raise PathOutOfBoundsError(
                "Path is outside allowed directory", path=resolved
            )
        return resolved

    return os.path.abspath(normalized)


def validate_path_exists(path: str, expected: str = "any") -> None:
    """
    Make sure a path exists and has the expected type.

    Args:
        path: Path to check.
        expected: "file", "dir" or "any".

    Raises:
        PathNotFoundError: If nothing exists at path.
        InvalidPathTypeError: If the type does not match.
    """
    if not os.path.exists(path):
        raise PathNotFoundError(f"Path does not exist: {path}", path=path)

    if expected == "file" and not os.path.isfile(path):
        raise InvalidPathTypeError(f"Expected file but got directory: {path}", path=path)

    if expected == "dir" and not os.path.isdir(path):
        raise InvalidPathTypeError(f"Expected directory but got file: {path}", path=path)


def resolve_output_dir(raw_dir: str | None, settings) -> str:
    """Pick the output directory for tree creation and confine it."""
    base_dir = raw_dir or settings.default_output_dir or DEFAULT_OUTPUT_DIR
    if settings.allowed_output_base:
        return secure_path(base_dir, settings.allowed_output_base)
    return os.path.abspath(base_dir)


def resolve_root(raw_root: str | None, settings) -> str:
    """
    Resolve a scan/cleanup/organize root that must already exist.

    Falls back to the default output directory, then to the current
    working directory.
    """
    base_dir = raw_root or settings.default_output_dir or os.getcwd()
    if settings.allowed_output_base:
        resolved = secure_path(base_dir, settings.allowed_output_base)
    else:
        resolved = os.path.abspath(base_dir)
    validate_path_exists(resolved, "dir")
    return resolved


def sanitize_filename(filename: str) -> str:
    """Replace characters that are invalid in file names and cap the length."""
    cleaned = re.sub(r'[<>:"|?*]', "_", filename)
    cleaned = re.sub(r"\s+", "_", cleaned)
    return cleaned[:255]

