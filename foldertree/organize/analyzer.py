"""
Directory analysis for reorganization.

Walks a tree, classifies every entry name and buckets entries by semantic
type (code, tests, docs, ...). Classification is a best-effort enrichment:
when the classifier fails for an entry, that entry is kept without one.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Callable

from ..config import Settings, load_settings
from ..errors import ValidationError
from ..llm.classifier import ClassifyResult, classify_item
from ..pathguard import validate_path_exists

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDES = (".git", "node_modules", ".venv", "__pycache__", "dist", "build")
DEFAULT_MAX_DEPTH = 3


@dataclass
class FileItem:
    path: str
    name: str
    type: str  # "file" or "dir"
    size: int | None = None
    classification: ClassifyResult | None = None

    def to_dict(self) -> dict:
        data = {"path": self.path, "name": self.name, "type": self.type}
        if self.size is not None:
            data["size"] = self.size
        if self.classification is not None:
            data["classification"] = self.classification.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "FileItem":
        classification = data.get("classification")
        return cls(
            path=data["path"],
            name=data.get("name") or os.path.basename(data["path"]),
            type=data.get("type", "file"),
            size=data.get("size"),
            classification=ClassifyResult.from_dict(classification) if classification else None,
        )


@dataclass
class OrganizeResult:
    root: str
    items: list[FileItem] = field(default_factory=list)
    suggestions: dict[str, list[FileItem]] = field(default_factory=dict)
    stats: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "root": self.root,
            "items": [item.to_dict() for item in self.items],
            "suggestions": {
                key: [item.to_dict() for item in bucket]
                for key, bucket in self.suggestions.items()
            },
            "stats": self.stats,
        }

    @classmethod
    def from_dict(cls, data) -> "OrganizeResult":
        if not isinstance(data, dict) or not data.get("root"):
            raise ValidationError("analysis with a root is required")
        try:
            return cls(
                root=data["root"],
                items=[FileItem.from_dict(i) for i in data.get("items", [])],
                suggestions={
                    key: [FileItem.from_dict(i) for i in bucket]
                    for key, bucket in (data.get("suggestions") or {}).items()
                },
                stats=data.get("stats") or {},
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid analysis: {e}")


def walk_entries(root: str, max_depth: int, exclude_names: set[str], depth: int = 0) -> list[FileItem]:
    """List files and directories below root, down to max_depth levels."""
    if depth >= max_depth:
        return []

    items = []
    with os.scandir(root) as it:
        entries = sorted(it, key=lambda e: e.name)

    for entry in entries:
        if entry.name in exclude_names:
            continue

        # Symlinks are neither followed nor listed
        if entry.is_dir(follow_symlinks=False):
            items.append(FileItem(path=entry.path, name=entry.name, type="dir"))
            try:
                items.extend(walk_entries(entry.path, max_depth, exclude_names, depth + 1))
            except OSError as e:
                logger.warning("Skipping unreadable directory %s: %s", entry.path, e)
        elif entry.is_file(follow_symlinks=False):
            try:
                size = entry.stat(follow_symlinks=False).st_size
            except OSError:
                continue
            items.append(FileItem(path=entry.path, name=entry.name, type="file", size=size))

    return items


def _as_result(value) -> ClassifyResult | None:
    if value is None or isinstance(value, ClassifyResult):
        return value
    if isinstance(value, dict):
        return ClassifyResult.from_dict(value)
    raise TypeError(f"Unexpected classifier result: {type(value).__name__}")


def analyze_directory(
    root: str,
    max_depth: int | None = DEFAULT_MAX_DEPTH,
    classify: bool = True,
    exclude_names=(),
    classifier: Callable[[str], ClassifyResult | dict] | None = None,
    settings: Settings | None = None,
) -> OrganizeResult:
    """
    Analyze a directory and group its entries by semantic type.

    Args:
        root: Existing directory to analyze.
        max_depth: How many levels to list (default 3).
        classify: Run the classifier on every entry name.
        exclude_names: Extra names to skip, on top of DEFAULT_EXCLUDES.
        classifier: Callable name -> ClassifyResult (or dict). Defaults to
            classify_item with the configured provider.
        settings: Settings for the default classifier.

    Returns:
        OrganizeResult with items, semantic-type buckets and counts.
    """
    if not root:
        raise ValidationError("rootPath is required")
    validate_path_exists(root, "dir")

    max_depth = max_depth or DEFAULT_MAX_DEPTH
    excludes = set(DEFAULT_EXCLUDES) | set(exclude_names or ())
    items = walk_entries(root, max_depth, excludes)

    if classify:
        if classifier is None:
            settings = settings or load_settings()
            classifier = lambda name: classify_item(name, settings=settings)  # noqa: E731

        failures = 0
        for item in items:
            try:
                item.classification = _as_result(classifier(item.name))
            except Exception as e:
                failures += 1
                logger.debug("Classification failed for %s: %s", item.name, e)
        if failures:
            logger.warning("%d entries left unclassified", failures)

    suggestions: dict[str, list[FileItem]] = {}
    languages: dict[str, int] = {}
    semantic_types: dict[str, int] = {}
    total_files = 0
    total_dirs = 0

    for item in items:
        if item.type == "file":
            total_files += 1
        else:
            total_dirs += 1

        c = item.classification
        if c is None:
            continue
        if c.language:
            languages[c.language] = languages.get(c.language, 0) + 1
        if c.semantic_type:
            semantic_types[c.semantic_type] = semantic_types.get(c.semantic_type, 0) + 1
            suggestions.setdefault(c.semantic_type, []).append(item)

    return OrganizeResult(
        root=root,
        items=items,
        suggestions=suggestions,
        stats={
            "totalFiles": total_files,
            "totalDirs": total_dirs,
            "languages": languages,
            "semanticTypes": semantic_types,
        },
    )
