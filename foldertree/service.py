"""
Request-level entry points.

FolderTreeService is what an outer surface (the CLI, a web adapter) calls.
Every method resolves and confines paths using Settings, checks the optional
caller against the rate limiter, runs the core operation and returns a
structured result:

    {"success": True, "data": {...}}
    {"success": False, "error": "...", "code": "PATH_TRAVERSAL"}

No error escapes as an exception from here. Unexpected failures are logged
with their traceback and reported as FILE_OP_ERROR.
"""

import logging
import os
from typing import Any, Callable

from .cleanup import CleanupOptions, CleanupPlan, DuplicateStrategy, apply_cleanup, scan_cleanup
from .config import Settings, load_settings
from .errors import FileOperationError, FolderTreeError, PathOutOfBoundsError, ValidationError
from .llm import ClassifyResult, classify_item, generate_structure
from .organize import (
    OrganizeResult,
    ReorganizePlan,
    analyze_directory,
    apply_reorganize_plan,
    generate_reorganize_plan,
)
from .pathguard import is_within_base, resolve_output_dir, resolve_root
from .ratelimit import RateLimiter
from .structure import (
    InternalTree,
    ParsedTextTree,
    apply_operations,
    build_plan,
    normalize_tree_text,
    parse_tree_structure,
    to_operations,
)

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 100000
MAX_ROOT_LENGTH = 500

Generator = Callable[[str, str | None, str | None], str]
Classifier = Callable[[str, str | None], ClassifyResult]


def _validate_string(value, field: str, min_length: int = 1, max_length: int = MAX_TEXT_LENGTH) -> str:
    if not isinstance(value, str) or len(value) < min_length:
        raise ValidationError(f"{field} must be at least {min_length} characters")
    if len(value) > max_length:
        raise ValidationError(f"{field} must not exceed {max_length} characters")
    return value


def _confine(ops, output_dir: str):
    """Reject trees whose entry names climb out of the output directory."""
    for op in ops:
        if not is_within_base(op.path, output_dir):
            raise PathOutOfBoundsError("Tree entry escapes the output directory", path=op.path)
    return ops


class FolderTreeService:
    """
    High-level operations with path confinement and structured results.

    Args:
        settings: Settings to use. Loaded from the environment if omitted.
        rate_limiter: Checked for every call that passes a caller identity.
        generator: (prompt, provider, model) -> tree text. Defaults to
            generate_structure().
        classifier: (name, provider) -> ClassifyResult. Defaults to
            classify_item().
    """

    def __init__(
        self,
        settings: Settings | None = None,
        rate_limiter: RateLimiter | None = None,
        generator: Generator | None = None,
        classifier: Classifier | None = None,
    ):
        self.settings = settings or load_settings()
        self.rate_limiter = rate_limiter
        self.generator = generator or self._default_generator
        self.classifier = classifier or self._default_classifier

    def _default_generator(self, prompt: str, provider: str | None, model: str | None) -> str:
        return generate_structure(prompt, provider=provider, model=model, settings=self.settings)

    def _default_classifier(self, name: str, provider: str | None) -> ClassifyResult:
        return classify_item(name, provider=provider, settings=self.settings)

    def _run(self, action: str, caller: str | None, fn: Callable[[], Any]) -> dict:
        try:
            if caller is not None and self.rate_limiter is not None:
                self.rate_limiter.hit(caller)
            data = fn()
        except FolderTreeError as e:
            logger.error("%s failed: %s", action, e.message)
            return e.to_dict()
        except OSError as e:
            logger.error("%s failed: %s", action, e)
            return FileOperationError(str(e), path=getattr(e, "filename", None)).to_dict()
        except Exception as e:
            logger.exception("%s failed unexpectedly", action)
            return FileOperationError(f"{action} failed: {e}").to_dict()
        return {"success": True, "data": data}

    def _output_dir(self, output_dir: str | None) -> str:
        return resolve_output_dir(output_dir, self.settings)

    def _root(self, root: str | None) -> str:
        if root:
            _validate_string(root, "root", 1, MAX_ROOT_LENGTH)
        return resolve_root(root, self.settings)

    # ------------------------------------------------------------------
    # Tree to filesystem
    # ------------------------------------------------------------------

    def preview(self, text: str, output_dir: str | None = None, caller: str | None = None) -> dict:
        """List the operations a text tree would produce."""
        def run():
            lines = normalize_tree_text(_validate_string(text, "text"))
            tree = parse_tree_structure(lines)
            out = self._output_dir(output_dir)
            ops = _confine(to_operations(ParsedTextTree(tree), out), out)
            logger.info("Preview generated: %d lines, %d operations", len(lines), len(ops))
            return {"outputDir": out, "ops": [op.to_dict() for op in ops], "count": len(ops)}

        return self._run("Preview", caller, run)

    def plan_text(self, text: str, output_dir: str | None = None, caller: str | None = None) -> dict:
        """Dry-run plan for a text tree."""
        def run():
            tree = parse_tree_structure(normalize_tree_text(_validate_string(text, "text")))
            out = self._output_dir(output_dir)
            plan = build_plan(_confine(to_operations(ParsedTextTree(tree), out), out), out)
            logger.info("Plan built: %d operations, %d overwrites",
                        plan.stats["total"], plan.stats["overwriteCount"])
            return {"plan": plan.to_dict()}

        return self._run("Plan text", caller, run)

    def plan_prompt(
        self,
        prompt: str,
        provider: str | None = None,
        model: str | None = None,
        output_dir: str | None = None,
        caller: str | None = None,
    ) -> dict:
        """Generate a tree from a prompt and plan it."""
        def run():
            text = self.generator(_validate_string(prompt, "prompt", 10, 5000), provider, model)
            out = self._output_dir(output_dir)
            tree = parse_tree_structure(normalize_tree_text(text))
            plan = build_plan(_confine(to_operations(ParsedTextTree(tree), out), out), out)
            logger.info("Prompt plan built: %d operations", plan.stats["total"])
            return {"plan": plan.to_dict(), "text": text}

        return self._run("Plan prompt", caller, run)

    def apply(
        self,
        text: str,
        output_dir: str | None = None,
        overwrite_files: bool = False,
        dry_run: bool = False,
        caller: str | None = None,
    ) -> dict:
        """Create a text tree on disk, or only plan it when dry_run is set."""
        def run():
            tree = parse_tree_structure(normalize_tree_text(_validate_string(text, "text")))
            out = self._output_dir(output_dir)
            ops = _confine(to_operations(ParsedTextTree(tree), out), out)
            plan = build_plan(ops, out)

            if dry_run:
                logger.info("Dry-run plan: %d operations, %d overwrites in %s",
                            plan.stats["total"], plan.stats["overwriteCount"], out)
                return {"dryRun": True, "plan": plan.to_dict()}

            created = apply_operations(ops, overwrite_files=bool(overwrite_files))
            logger.info("Tree applied: %d operations, %d created in %s", len(ops), created, out)
            return {"outputDir": out, "created": created, "plan": plan.to_dict()}

        return self._run("Apply", caller, run)

    def create_from_tree(self, tree: dict, overwrite_files: bool = False, caller: str | None = None) -> dict:
        """Create an editor tree ({"items": ..., "rootId": ...}) in the default output directory."""
        def run():
            source = InternalTree.from_dict(tree)
            out = self._output_dir(None)
            ops = _confine(to_operations(source, out), out)
            created = apply_operations(ops, overwrite_files=bool(overwrite_files))
            logger.info("Tree created: %d operations, %d created in %s", len(ops), created, out)
            return {"output": out, "created": created}

        return self._run("Create from tree", caller, run)

    def generate(
        self,
        prompt: str,
        provider: str | None = None,
        model: str | None = None,
        caller: str | None = None,
    ) -> dict:
        """Generate tree text from a prompt without planning it."""
        def run():
            text = self.generator(_validate_string(prompt, "prompt", 10, 5000), provider, model)
            logger.info("Structure generated by %s: %d chars",
                        provider or self.settings.ai_provider, len(text))
            return {"text": text}

        return self._run("Generate", caller, run)

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def _cleanup_options(self, options: dict) -> CleanupOptions:
        options = dict(options)
        options.setdefault("maxFileSizeMB", self.settings.large_file_mb)
        options.setdefault("maxDepth", self.settings.max_scan_depth)
        options.setdefault("followSymlinks", self.settings.follow_symlinks)
        has_strategy = options.get("duplicateStrategy") or options.get("duplicate_strategy")
        has_legacy = options.get("hashDuplicates") or options.get("hash_duplicates")
        if not has_strategy and not has_legacy:
            options["duplicateStrategy"] = self.settings.duplicate_strategy

        parsed = CleanupOptions.from_dict(options)
        DuplicateStrategy.parse(parsed.strategy)
        return parsed

    def cleanup_scan(self, root: str | None = None, caller: str | None = None, **options) -> dict:
        """
        Scan root for cleanup candidates.

        Keyword options use the names of CleanupOptions, in camelCase or
        snake_case (includeEmptyDirs, maxFileSizeMB, duplicateStrategy, ...).
        """
        def run():
            resolved = self._root(root)
            plan = scan_cleanup(resolved, self._cleanup_options(options))
            logger.info("Cleanup scan of %s: %s", resolved, plan.summary)
            return {"plan": plan.to_dict()}

        return self._run("Cleanup scan", caller, run)

    def cleanup_apply(self, plan, paths: list[str] | None = None, caller: str | None = None) -> dict:
        """Delete the selected items of a plan (all items when paths is empty)."""
        def run():
            if plan is None:
                raise ValidationError("plan is required to apply cleanup")
            parsed = plan if isinstance(plan, CleanupPlan) else CleanupPlan.from_dict(plan)
            resolved = self._root(parsed.root)
            if os.path.abspath(parsed.root) != resolved:
                raise ValidationError("plan root mismatch", path=parsed.root)

            selection = list(paths) if isinstance(paths, (list, tuple)) else None
            result = apply_cleanup(parsed, selection)
            logger.info("Cleanup applied in %s: %d deleted, %d bytes freed",
                        resolved, result.deleted, result.freed_bytes)
            return result.to_dict()

        return self._run("Cleanup apply", caller, run)

    # ------------------------------------------------------------------
    # Organize
    # ------------------------------------------------------------------

    def _analyze(self, root, max_depth, classify=True, exclude_names=()) -> OrganizeResult:
        resolved = self._root(root)
        return analyze_directory(
            resolved,
            max_depth=max_depth or 3,
            classify=classify,
            exclude_names=exclude_names or (),
            classifier=lambda name: self.classifier(name, None),
        )

    def organize_analyze(
        self,
        root: str | None = None,
        max_depth: int | None = None,
        classify: bool = True,
        exclude_names: list[str] | None = None,
        caller: str | None = None,
    ) -> dict:
        def run():
            analysis = self._analyze(
                root, max_depth, classify=classify is not False, exclude_names=exclude_names
            )
            logger.info("Analysis of %s: %s", analysis.root, analysis.stats)
            return {"analysis": analysis.to_dict()}

        return self._run("Organize analyze", caller, run)

    def organize_plan(
        self,
        root: str | None = None,
        max_depth: int | None = None,
        exclude_names: list[str] | None = None,
        group_by: str | None = None,
        caller: str | None = None,
    ) -> dict:
        def run():
            analysis = self._analyze(root, max_depth, exclude_names=exclude_names)
            plan = generate_reorganize_plan(analysis, group_by or "semantic")
            logger.info("Reorganize plan for %s: %d moves, %d creates",
                        analysis.root, len(plan.moves), len(plan.creates))
            return {"plan": plan.to_dict(), "analysis": analysis.to_dict()}

        return self._run("Organize plan", caller, run)

    def organize_apply(self, plan, caller: str | None = None) -> dict:
        def run():
            parsed = plan if isinstance(plan, ReorganizePlan) else ReorganizePlan.from_dict(plan)
            result = apply_reorganize_plan(parsed, allowed_base=self.settings.allowed_output_base)
            logger.info("Reorganize applied: %d moved, %d created", result.moved, result.created)
            return result.to_dict()

        return self._run("Organize apply", caller, run)

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def classify(self, name: str, provider: str | None = None, caller: str | None = None) -> dict:
        def run():
            title = _validate_string(name, "title", 1, 500)
            if not title.strip():
                raise ValidationError("Title must be a non-empty string")
            result = self.classifier(title, provider)
            logger.info("Classified %s as %s (%s)", title, result.category, result.source)
            return result.to_dict()

        return self._run("Classify", caller, run)
