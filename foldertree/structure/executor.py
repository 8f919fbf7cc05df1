"""
Operation execution.

Applies planned operations to disk. Without overwrite, applying the same
batch twice leaves the disk unchanged the second time.
"""

import logging
import os

from tqdm import tqdm

from ..errors import FileOperationError
from .operations import Operation, OpKind

logger = logging.getLogger(__name__)


def apply_operations(
    operations: list[Operation],
    overwrite_files: bool = False,
    progress: bool = False,
) -> int:
    """
    Apply operations in order.

    Directories are always ensured (and counted). Files are skipped silently
    when they already exist and overwrite_files is False.

    Args:
        operations: Ordered operations from to_operations().
        overwrite_files: Replace the content of existing files.
        progress: Show a progress bar.

    Returns:
        Number of directories ensured plus files written.

    Raises:
        FileOperationError: On the first I/O failure. Operations already
            applied are left in place.
    """
    created = 0
    skipped = 0

    for op in tqdm(operations, unit="op", disable=not progress):
        try:
            if op.kind is OpKind.MKDIR:
                os.makedirs(op.path, exist_ok=True)
                created += 1
                continue

            # Parent chain may not have its own mkdir op
            os.makedirs(os.path.dirname(op.path) or ".", exist_ok=True)

            if not overwrite_files and os.path.exists(op.path):
                skipped += 1
                continue

            with open(op.path, "w", encoding="utf-8") as f:
                f.write(op.content or "")
            created += 1
        except OSError as e:
            raise FileOperationError(
                f"Failed to apply operation on {op.path}: {e}", path=op.path
            ) from e

    logger.debug("Applied %d operations (%d created, %d skipped)", len(operations), created, skipped)
    return created
