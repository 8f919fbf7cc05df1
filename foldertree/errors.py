"""
Error kinds for the FolderTree tool.

Every failure the core can report is one of a closed set of kinds. Each kind
carries a machine-readable code and a status-equivalent severity so that an
outer layer (CLI, HTTP adapter) can map it without inspecting messages.
"""

from enum import Enum


class ErrorKind(Enum):
    """Closed set of error variants: (code, status)."""

    VALIDATION = ("VALIDATION_ERROR", 400)
    PATH_TRAVERSAL = ("PATH_TRAVERSAL", 400)
    PATH_OUT_OF_BOUNDS = ("PATH_OUT_OF_BOUNDS", 403)
    PATH_NOT_FOUND = ("PATH_NOT_FOUND", 404)
    INVALID_PATH_TYPE = ("INVALID_PATH_TYPE", 400)
    FILE_OPERATION = ("FILE_OP_ERROR", 500)
    PROVIDER = ("PROVIDER_ERROR", 502)
    RATE_LIMIT = ("RATE_LIMIT_EXCEEDED", 429)

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def status(self) -> int:
        return self.value[1]


class FolderTreeError(Exception):
    """Base class for every error raised by the core."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.message = message
        self.path = path

    @property
    def code(self) -> str:
        return self.kind.code

    @property
    def status(self) -> int:
        return self.kind.status

    def to_dict(self) -> dict:
        """Structured failure result (no stack trace)."""
        result = {
            "success": False,
            "error": self.message,
            "code": self.code,
        }
        if self.path:
            result["path"] = self.path
        return result


class ValidationError(FolderTreeError):
    """Malformed input: missing text, empty title, wrong tree shape."""

    kind = ErrorKind.VALIDATION


class PathTraversalError(FolderTreeError):
    kind = ErrorKind.PATH_TRAVERSAL


class PathOutOfBoundsError(FolderTreeError):
    kind = ErrorKind.PATH_OUT_OF_BOUNDS


class PathNotFoundError(FolderTreeError):
    kind = ErrorKind.PATH_NOT_FOUND


class InvalidPathTypeError(FolderTreeError):
    kind = ErrorKind.INVALID_PATH_TYPE


class FileOperationError(FolderTreeError):
    """An I/O failure while applying operations. The batch stops here."""

    kind = ErrorKind.FILE_OPERATION


class ProviderError(FolderTreeError):
    """The text generator or an AI classifier backend failed."""

    kind = ErrorKind.PROVIDER


class RateLimitError(FolderTreeError):
    kind = ErrorKind.RATE_LIMIT

    def __init__(self, message: str, reset_at: float | None = None):
        super().__init__(message)
        self.reset_at = reset_at
