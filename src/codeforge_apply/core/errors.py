"""Custom exceptions for Codeforge Apply.

This module defines typed exceptions used by the apply engine and its
boundary helpers. I/O failures are not wrapped: the builtin ``OSError``
family is caught per operation and reported as a failed result.
"""

from pathlib import Path
from typing import Any


class CodeforgeError(Exception):
    """Base exception for all Codeforge Apply errors.

    All custom exceptions should inherit from this base class to allow
    for broad exception handling when needed.
    """

    pass


class ShapeError(CodeforgeError):
    """Raised when an operation envelope or payload is malformed.

    Attributes:
        reason: Human-readable description of what was wrong
        index: Position of the offending operation, if known
    """

    def __init__(self, reason: str, index: int | None = None) -> None:
        self.reason = reason
        self.index = index

        message = f"Invalid operation shape: {reason}"
        if index is not None:
            message = f"Invalid operation shape at index {index}: {reason}"

        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for JSON output."""
        result: dict[str, Any] = {"error": "invalid_shape", "reason": self.reason}
        if self.index is not None:
            result["index"] = self.index
        return result


class PathEscapeError(CodeforgeError):
    """Raised when an operation path resolves outside the project root.

    Attributes:
        path: The path exactly as supplied by the caller
        root: The project root it was resolved against
    """

    def __init__(self, path: str, root: Path) -> None:
        self.path = path
        self.root = root
        super().__init__(f"Path escapes project root: {path}")

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for JSON output."""
        return {
            "error": "path_escape",
            "path": self.path,
            "root": str(self.root),
        }

    def __repr__(self) -> str:
        return f"PathEscapeError(path={self.path!r}, root={str(self.root)!r})"


class RollbackError(CodeforgeError):
    """A single rollback step could not be completed.

    Rollback never raises this to callers; each instance is converted into a
    report diagnostic and the walk moves on to the next record.

    Attributes:
        path: Relative path of the operation being reverted
        step: Which step failed ('remove_created' or 'restore_backup')
        cause: The underlying exception
    """

    def __init__(self, path: str, step: str, cause: BaseException) -> None:
        self.path = path
        self.step = step
        self.cause = cause
        super().__init__(f"Rollback step '{step}' failed for {path}: {cause}")

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for JSON output."""
        return {
            "error": "rollback_failed",
            "path": self.path,
            "step": self.step,
            "reason": str(self.cause),
        }
