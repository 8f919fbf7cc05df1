#!/usr/bin/env python3
"""
FolderTree - CLI Entry Point
============================

Usage:
    python -m foldertree preview layout.txt -o ./generated
    python -m foldertree apply layout.txt -o ./generated --dry-run
    python -m foldertree generate "A Flask API with tests and docs" --plan
    python -m foldertree scan ~/projects/site --strategy hash -o cleanup.json
    python -m foldertree clean cleanup.json --yes
    python -m foldertree organize ./downloads --group-by semantic
    python -m foldertree classify UserController.ts
"""

import argparse
import sys
from pathlib import Path

from .config import load_settings
from .errors import ValidationError
from .llm import PROVIDERS
from .organize import DEFAULT_EXCLUDES
from .service import FolderTreeService
from .structure import parse_text
from .utils import (
    console,
    load_json,
    print_cleanup_table,
    print_error,
    print_header,
    print_plan_table,
    print_reorganize_plan,
    print_structure_tree,
    print_success,
    print_warning,
    save_json,
    setup_logging,
)

PROVIDER_CHOICES = list(PROVIDERS) + ["local"]


def unwrap(result: dict):
    """Return the data of a successful service result, or print the failure."""
    if result.get("success"):
        return result["data"]
    print_error(f"{result.get('error')} ({result.get('code')})")
    return None


def confirm(question: str, assume_yes: bool) -> bool:
    """Ask before a destructive step. Non-interactive runs need --yes."""
    if assume_yes:
        return True

    console.print(f"\n[bold yellow]{question} \\[y]es / \\[n]o[/bold yellow]")

    if not sys.stdin.isatty():
        print_warning("Non-interactive mode detected. Re-run with --yes to proceed.")
        return False

    while True:
        choice = input("Choice: ").strip().lower()
        if choice in ['y', 'yes']:
            return True
        elif choice in ['n', 'no', '']:
            console.print("[bold red]Cancelled[/bold red]")
            return False
        else:
            console.print("Invalid choice. Enter y or n")


def read_text(path: Path) -> str | None:
    if not path.exists():
        print_error(f"File not found: {path}")
        return None
    return path.read_text(encoding="utf-8")


# =============================================================================
# Subcommands
# =============================================================================

def cmd_preview(service: FolderTreeService, args) -> int:
    """Preview command - show the layout and the operations it produces."""
    text = read_text(args.file)
    if text is None:
        return 1

    data = unwrap(service.preview(text, args.output_dir))
    if data is None:
        return 1

    print_structure_tree(parse_text(text), title=str(args.file))
    console.print(f"[INFO] {data['count']} operations in {data['outputDir']}", markup=False)
    return 0


def cmd_plan(service: FolderTreeService, args) -> int:
    """Plan command - dry-run a layout file against the output directory."""
    text = read_text(args.file)
    if text is None:
        return 1

    data = unwrap(service.plan_text(text, args.output_dir))
    if data is None:
        return 1

    print_plan_table(data["plan"])
    if args.out:
        save_json(data["plan"], args.out)
    return 0


def cmd_apply(service: FolderTreeService, args) -> int:
    """Apply command - create a layout on disk."""
    text = read_text(args.file)
    if text is None:
        return 1

    data = unwrap(service.apply(
        text,
        args.output_dir,
        overwrite_files=args.overwrite,
        dry_run=args.dry_run,
    ))
    if data is None:
        return 1

    print_plan_table(data["plan"])
    if args.report_out:
        save_json(data, args.report_out)

    if args.dry_run:
        print_warning("This was a DRY-RUN. Nothing was created.")
        console.print("       Run without --dry-run to apply changes.")
    else:
        print_success(f"Created {data['created']} items in {data['outputDir']}")
    return 0


def cmd_create(service: FolderTreeService, args) -> int:
    """Create command - build an editor tree JSON ({items, rootId})."""
    if not args.tree.exists():
        print_error(f"Tree file not found: {args.tree}")
        return 1

    payload = load_json(args.tree)
    tree = payload.get("tree", payload) if isinstance(payload, dict) else payload

    data = unwrap(service.create_from_tree(tree, overwrite_files=args.overwrite))
    if data is None:
        return 1

    print_success(f"Created {data['created']} items in {data['output']}")
    return 0


def cmd_generate(service: FolderTreeService, args) -> int:
    """Generate command - ask an AI provider for a layout."""
    if args.plan:
        data = unwrap(service.plan_prompt(args.prompt, args.provider, args.model, args.output_dir))
    else:
        data = unwrap(service.generate(args.prompt, args.provider, args.model))
    if data is None:
        return 1

    console.print(data["text"], markup=False, highlight=False)
    if args.save:
        args.save.write_text(data["text"], encoding="utf-8")
        console.print(f"[INFO] Saved: {args.save}", markup=False)
    if args.plan:
        print_plan_table(data["plan"])
    return 0


def cmd_scan(service: FolderTreeService, args) -> int:
    """Scan command - find cleanup candidates."""
    options = {
        "includeEmptyDirs": not args.no_empty_dirs,
        "includeLargeFiles": not args.no_large_files,
        "includeDuplicates": not args.no_duplicates,
        "includeCaches": not args.no_caches,
        "excludeNames": args.exclude or [],
    }
    if args.max_file_size_mb is not None:
        options["maxFileSizeMB"] = args.max_file_size_mb
    if args.strategy:
        options["duplicateStrategy"] = args.strategy
    if args.max_depth is not None:
        options["maxDepth"] = args.max_depth
    if args.follow_symlinks:
        options["followSymlinks"] = True

    console.print(f"[SCAN] Scanning {args.root or 'default directory'}...", markup=False)
    data = unwrap(service.cleanup_scan(args.root, **options))
    if data is None:
        return 1

    print_cleanup_table(data["plan"])
    save_json(data["plan"], args.output)
    return 0


def cmd_clean(service: FolderTreeService, args) -> int:
    """Clean command - delete items from a saved cleanup plan."""
    if not args.plan.exists():
        print_error(f"Plan file not found: {args.plan}")
        return 1

    plan = load_json(args.plan)
    print_cleanup_table(plan)

    count = len(args.path) if args.path else len(plan.get("items", []))
    if not confirm(f"Delete {count} items?", args.yes):
        return 1

    data = unwrap(service.cleanup_apply(plan, args.path))
    if data is None:
        return 1

    print_success(f"Deleted {data['deleted']} items, freed {data['freedBytes']} bytes")
    return 0


def cmd_analyze(service: FolderTreeService, args) -> int:
    """Analyze command - classify a directory's entries."""
    data = unwrap(service.organize_analyze(
        args.root, args.max_depth, classify=not args.no_classify, exclude_names=args.exclude
    ))
    if data is None:
        return 1

    stats = data["analysis"]["stats"]
    console.print(f"[INFO] {stats['totalFiles']} files, {stats['totalDirs']} directories", markup=False)
    for semantic_type, count in sorted(stats["semanticTypes"].items()):
        console.print(f"  [cyan]{semantic_type}[/cyan]: {count}")
    for language, count in sorted(stats["languages"].items()):
        console.print(f"  [magenta]{language}[/magenta]: {count}")

    if args.output:
        save_json(data["analysis"], args.output)
    return 0


def cmd_organize(service: FolderTreeService, args) -> int:
    """Organize command - plan (and optionally apply) a reorganization."""
    if args.plan_in:
        if not args.plan_in.exists():
            print_error(f"Plan file not found: {args.plan_in}")
            return 1
        plan = load_json(args.plan_in)
    else:
        data = unwrap(service.organize_plan(args.root, args.max_depth, args.exclude, args.group_by))
        if data is None:
            return 1
        plan = data["plan"]
        if args.output:
            save_json(plan, args.output)

    print_reorganize_plan(plan)

    if not args.apply:
        return 0
    if not confirm("Apply this reorganization?", args.yes):
        return 1

    result = unwrap(service.organize_apply(plan))
    if result is None:
        return 1

    print_success(f"Moved {result['moved']} items, created {result['created']} folders")
    return 0


def cmd_classify(service: FolderTreeService, args) -> int:
    """Classify command - categorize a single file or folder name."""
    data = unwrap(service.classify(args.name, args.provider))
    if data is None:
        return 1

    console.print(f"[bold]{args.name}[/bold] -> [green]{data['category']}[/green] "
                  f"({data['confidence']:.2f}, {data['source']})")
    for key in ("language", "semanticType", "framework"):
        if data.get(key):
            console.print(f"  {key}: {data[key]}")
    return 0


# =============================================================================
# Main
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="FolderTree - Create, clean up and organize directory trees",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- PREVIEW command ---
    preview_parser = subparsers.add_parser("preview", help="Show operations for a layout file")
    preview_parser.add_argument("file", type=Path, help="Indented or markdown layout file")
    preview_parser.add_argument("-o", "--output-dir", type=str, help="Target directory")
    preview_parser.set_defaults(func=cmd_preview)

    # --- PLAN command ---
    plan_parser = subparsers.add_parser("plan", help="Dry-run a layout file")
    plan_parser.add_argument("file", type=Path, help="Indented or markdown layout file")
    plan_parser.add_argument("-o", "--output-dir", type=str, help="Target directory")
    plan_parser.add_argument("--out", type=Path, help="Save the plan as JSON")
    plan_parser.set_defaults(func=cmd_plan)

    # --- APPLY command ---
    apply_parser = subparsers.add_parser("apply", help="Create a layout on disk")
    apply_parser.add_argument("file", type=Path, help="Indented or markdown layout file")
    apply_parser.add_argument("-o", "--output-dir", type=str, help="Target directory")
    apply_parser.add_argument("--overwrite", action="store_true", help="Replace existing files")
    apply_parser.add_argument("--dry-run", action="store_true", help="Plan only, change nothing")
    apply_parser.add_argument("--report-out", type=Path, help="Save the result as JSON")
    apply_parser.set_defaults(func=cmd_apply)

    # --- CREATE command ---
    create_parser = subparsers.add_parser("create", help="Create an editor tree JSON")
    create_parser.add_argument("tree", type=Path, help="JSON file with items and rootId")
    create_parser.add_argument("--overwrite", action="store_true", help="Replace existing files")
    create_parser.set_defaults(func=cmd_create)

    # --- GENERATE command ---
    generate_parser = subparsers.add_parser("generate", help="Generate a layout with AI")
    generate_parser.add_argument("prompt", type=str, help="Description of the project")
    generate_parser.add_argument("--provider", choices=list(PROVIDERS), help="AI provider")
    generate_parser.add_argument("--model", type=str, help="Provider model name")
    generate_parser.add_argument("--save", type=Path, help="Save the layout text")
    generate_parser.add_argument("--plan", action="store_true", help="Also dry-run the layout")
    generate_parser.add_argument("-o", "--output-dir", type=str, help="Target directory for --plan")
    generate_parser.set_defaults(func=cmd_generate)

    # --- SCAN command ---
    scan_parser = subparsers.add_parser("scan", help="Find cleanup candidates")
    scan_parser.add_argument("root", type=str, nargs="?", help="Directory to scan")
    scan_parser.add_argument("-o", "--output", type=Path, default=Path("cleanup.json"),
                             help="Output plan file (default: cleanup.json)")
    scan_parser.add_argument("--no-empty-dirs", action="store_true", help="Skip empty directories")
    scan_parser.add_argument("--no-large-files", action="store_true", help="Skip large files")
    scan_parser.add_argument("--no-duplicates", action="store_true", help="Skip duplicates")
    scan_parser.add_argument("--no-caches", action="store_true", help="Skip cache directories")
    scan_parser.add_argument("--max-file-size-mb", type=float, metavar="MB",
                             help="Large file threshold")
    scan_parser.add_argument("--strategy", choices=["size", "nameSize", "hash"],
                             help="Duplicate detection strategy")
    scan_parser.add_argument("--max-depth", type=int, help="Levels to descend")
    scan_parser.add_argument("--exclude", action="append", metavar="NAME",
                             help="Entry name to skip (repeatable)")
    scan_parser.add_argument("--follow-symlinks", action="store_true", help="Follow symlinks")
    scan_parser.set_defaults(func=cmd_scan)

    # --- CLEAN command ---
    clean_parser = subparsers.add_parser("clean", help="Delete items from a cleanup plan")
    clean_parser.add_argument("plan", type=Path, help="Plan file from scan")
    clean_parser.add_argument("--path", action="append", metavar="PATH",
                              help="Only delete this item (repeatable)")
    clean_parser.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
    clean_parser.set_defaults(func=cmd_clean)

    # --- ANALYZE command ---
    analyze_parser = subparsers.add_parser("analyze", help="Classify a directory's entries")
    analyze_parser.add_argument("root", type=str, nargs="?", help="Directory to analyze")
    analyze_parser.add_argument("--max-depth", type=int, default=3, help="Levels to list (default: 3)")
    analyze_parser.add_argument("--no-classify", action="store_true", help="Only list entries")
    analyze_parser.add_argument("--exclude", action="append", metavar="NAME",
                                help=f"Name to skip besides {', '.join(DEFAULT_EXCLUDES)}")
    analyze_parser.add_argument("-o", "--output", type=Path, help="Save the analysis as JSON")
    analyze_parser.set_defaults(func=cmd_analyze)

    # --- ORGANIZE command ---
    organize_parser = subparsers.add_parser("organize", help="Group a directory by category")
    organize_parser.add_argument("root", type=str, nargs="?", help="Directory to organize")
    organize_parser.add_argument("--max-depth", type=int, default=3, help="Levels to list (default: 3)")
    organize_parser.add_argument("--exclude", action="append", metavar="NAME",
                                 help=f"Name to skip besides {', '.join(DEFAULT_EXCLUDES)}")
    organize_parser.add_argument("--group-by", choices=["semantic", "language", "framework"],
                                 default="semantic", help="Grouping (default: semantic)")
    organize_parser.add_argument("-o", "--output", type=Path, help="Save the plan as JSON")
    organize_parser.add_argument("--plan-in", type=Path, help="Use a saved plan instead of analyzing")
    organize_parser.add_argument("--apply", action="store_true", help="Perform the moves")
    organize_parser.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
    organize_parser.set_defaults(func=cmd_organize)

    # --- CLASSIFY command ---
    classify_parser = subparsers.add_parser("classify", help="Categorize a file or folder name")
    classify_parser.add_argument("name", type=str, help="File or folder name")
    classify_parser.add_argument("--provider", choices=PROVIDER_CHOICES, help="Classifier backend")
    classify_parser.set_defaults(func=cmd_classify)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        settings = load_settings()
    except ValidationError as e:
        print_error(e.message)
        return 1

    setup_logging("DEBUG" if args.verbose else settings.log_level)
    if args.command in ("generate", "classify"):
        print_header("FolderTree", f"Provider: {getattr(args, 'provider', None) or settings.ai_provider}")

    service = FolderTreeService(settings)

    try:
        return args.func(service, args)
    except KeyboardInterrupt:
        console.print("\n[ABORT] Operation cancelled by user", markup=False)
        return 130
    except Exception as e:
        print_error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
