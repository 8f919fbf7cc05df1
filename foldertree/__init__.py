"""
FolderTree
==========

Turns indented or markdown folder layouts into directories and files, scans
directories for cleanup candidates (empty dirs, large files, duplicates,
caches) and regroups a directory by classified category. Layouts can be
written by hand or generated with Ollama, OpenAI or Gemini.
"""

__version__ = "1.0.0"

from .config import Settings, load_settings
from .errors import FolderTreeError, ErrorKind
from .structure import parse_text, to_operations, build_plan, build_plan_from_text, apply_operations
from .cleanup import CleanupOptions, scan_cleanup, apply_cleanup
from .organize import analyze_directory, generate_reorganize_plan, apply_reorganize_plan
from .llm import classify_item, generate_structure
from .ratelimit import RateLimiter
from .service import FolderTreeService

__all__ = [
    "Settings",
    "load_settings",
    "FolderTreeError",
    "ErrorKind",
    "parse_text",
    "to_operations",
    "build_plan",
    "build_plan_from_text",
    "apply_operations",
    "CleanupOptions",
    "scan_cleanup",
    "apply_cleanup",
    "analyze_directory",
    "generate_reorganize_plan",
    "apply_reorganize_plan",
    "classify_item",
    "generate_structure",
    "RateLimiter",
    "FolderTreeService",
]
