"""
Utility functions for the FolderTree tool.

Includes:
- JSON save/load helpers
- Logging setup
- UI helpers (rich tables and trees for plans)
"""

import json
import logging
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from .structure import TreeNode

# Global console instance
console = Console()

SAMPLE_SIZE = 10


def setup_logging(level: str = "INFO") -> None:
    """Send library log records to the shared rich console."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=False, show_path=False)],
        force=True,
    )


def print_header(title: str, subtitle: str = ""):
    """Print a styled header."""
    console.print(Panel(f"[bold blue]{title}[/bold blue]\n[italic]{subtitle}[/italic]", expand=False))


def print_error(msg: str):
    console.print(f"[bold red]ERROR:[/bold red] {msg}")


def print_warning(msg: str):
    console.print(f"[bold yellow]WARNING:[/bold yellow] {msg}")


def print_success(msg: str):
    console.print(f"[bold green]SUCCESS:[/bold green] {msg}")


def format_bytes(size: int) -> str:
    """Human-readable byte count, e.g. 1536 -> '1.5 KB'."""
    if size < 1024:
        return f"{size} B"
    value = size / 1024
    for unit in ("KB", "MB", "GB"):
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} TB"


def _more(tree: Tree, total: int) -> None:
    if total > SAMPLE_SIZE:
        tree.add(f"[italic]... and {total - SAMPLE_SIZE} more[/italic]")


def print_structure_tree(root: TreeNode, title: str = "Structure"):
    """Render a parsed layout as a rich tree."""
    def add(branch: Tree, node: TreeNode):
        for child in node.children:
            if child.is_file:
                branch.add(f"[cyan]{child.name}[/cyan]")
            else:
                add(branch.add(f"[bold blue]{child.name}/[/bold blue]"), child)

    tree = Tree(f"[bold green]{title}[/bold green]")
    add(tree, root)
    console.print(tree)


def print_plan_table(plan: dict):
    """Print a summary table of a tree creation plan."""
    stats = plan.get("stats", {})

    table = Table(title="Plan Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="magenta")

    table.add_row("Operations", str(stats.get("total", 0)))
    table.add_row("Directories", str(stats.get("dirs", 0)))
    table.add_row("Files", str(stats.get("files", 0)))
    table.add_row("Overwrites", str(stats.get("overwriteCount", 0)))
    table.add_row("Estimated size", format_bytes(stats.get("estimatedBytes", 0)))

    console.print(table)

    operations = plan.get("operations", [])
    if operations:
        tree = Tree(f"[bold green]Operations in {plan.get('outputDir', '')}[/bold green]")
        for op in operations[:SAMPLE_SIZE]:
            marker = " [red](overwrite)[/red]" if op.get("willOverwrite") else ""
            tree.add(f"[yellow]{op['op']}[/yellow] {op['path']}{marker}")
        _more(tree, len(operations))
        console.print(tree)


def print_cleanup_table(plan: dict):
    """Print a summary table of a cleanup plan."""
    summary = plan.get("summary", {})

    table = Table(title=f"Cleanup: {plan.get('root', '')}")
    table.add_column("Kind", style="cyan")
    table.add_column("Count", style="magenta")

    table.add_row("Empty directories", str(summary.get("emptyDirs", 0)))
    table.add_row("Large files", str(summary.get("largeFiles", 0)))
    table.add_row("Duplicates", str(summary.get("duplicates", 0)))
    table.add_row("Cache directories", str(summary.get("cacheDirs", 0)))
    table.add_row("Reclaimable", format_bytes(summary.get("estimatedBytes", 0)))

    console.print(table)

    items = plan.get("items", [])
    if items:
        tree = Tree("[bold green]Sample Items[/bold green]")
        for item in items[:SAMPLE_SIZE]:
            reason = f" ({item['reason']})" if item.get("reason") else ""
            tree.add(f"[yellow]{item['type']}[/yellow] {item['path']} "
                     f"[blue]{format_bytes(item.get('size', 0))}[/blue]{reason}")
        _more(tree, len(items))
        console.print(tree)


def print_reorganize_plan(plan: dict):
    """Print a summary of a reorganize plan."""
    moves = plan.get("moves", [])
    creates = plan.get("creates", [])

    table = Table(title="Reorganize Plan")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="magenta")

    table.add_row("Moves", str(len(moves)))
    table.add_row("New Folders", str(len(creates)))

    console.print(table)

    if moves:
        tree = Tree("[bold green]Sample Moves[/bold green]")
        for move in moves[:SAMPLE_SIZE]:
            tree.add(f"[yellow]{move['from']}[/yellow] -> [blue]{move['to']}[/blue]")
        _more(tree, len(moves))
        console.print(tree)


def save_json(data: Any, path: Path) -> None:
    """
    Save data to a JSON file with pretty formatting.

    Args:
        data: The data to serialize.
        path: The output file path.
    """
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    console.print(f"[INFO] Saved: {path}", markup=False)


def load_json(path: Path) -> Any:
    """
    Load data from a JSON file.

    Args:
        path: The input file path.

    Returns:
        The deserialized data.
    """
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)
