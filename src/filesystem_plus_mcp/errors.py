"""Structured error handling — denial exceptions, error categories, and tool error model."""

from __future__ import annotations

import errno
from enum import Enum

from pydantic import BaseModel


class ErrorCategory(str, Enum):
    """Categories of errors for diagnostics.

    The first four are the gate's reason codes; the rest come from the I/O
    layer and must stay distinguishable from permission decisions.
    """

    OUTSIDE_SANDBOX = "OUTSIDE_SANDBOX"
    READ_ONLY_VIOLATION = "READ_ONLY_VIOLATION"
    SYSTEM_PATH_BLOCKED = "SYSTEM_PATH_BLOCKED"
    INVALID_PATH = "INVALID_PATH"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    NOT_EMPTY = "NOT_EMPTY"
    NOT_A_DIRECTORY = "NOT_A_DIRECTORY"
    IS_A_DIRECTORY = "IS_A_DIRECTORY"
    OS_PERMISSION_DENIED = "OS_PERMISSION_DENIED"
    EDIT_NO_MATCH = "EDIT_NO_MATCH"
    UNSUPPORTED_ENCODING = "UNSUPPORTED_ENCODING"
    UNKNOWN = "UNKNOWN"


class AccessDenied(Exception):
    """Raised by the gate when an operation may not proceed.

    ``path`` is the path as the client supplied it. Canonical paths are kept
    out of the message so a denial never reveals where a symlink points.
    """

    reason_code = ErrorCategory.INVALID_PATH

    def __init__(
        self,
        message: str,
        *,
        path: str = "",
        rule: str = "",
        operation: str = "",
        allowed_roots: list[str] | None = None,
    ) -> None:
        self.path = path
        self.rule = rule
        self.operation = operation
        self.allowed_roots = list(allowed_roots or [])
        super().__init__(message)


class InvalidPathError(AccessDenied):
    """The path could not be resolved (bad input, missing parent, unreadable)."""

    reason_code = ErrorCategory.INVALID_PATH


class OutsideSandboxError(AccessDenied):
    """The resolved path is not inside any allowed root."""

    reason_code = ErrorCategory.OUTSIDE_SANDBOX


class ReadOnlyViolationError(AccessDenied):
    """A write-class operation targeted a read-only root."""

    reason_code = ErrorCategory.READ_ONLY_VIOLATION


class SystemPathBlockedError(AccessDenied):
    """Deletion of a protected system path was refused."""

    reason_code = ErrorCategory.SYSTEM_PATH_BLOCKED


class EditMismatchError(ValueError):
    """An edit's ``old_text`` does not occur in the file."""


class ToolError(BaseModel):
    """Structured error returned from any tool."""

    error: str
    category: str
    hint: str
    retryable: bool = False
    operation: str | None = None
    denied_path: str | None = None
    rule: str | None = None
    allowed_roots: list[str] | None = None


_DENIAL_HINTS: dict[ErrorCategory, str] = {
    ErrorCategory.OUTSIDE_SANDBOX: (
        "Path is outside every allowed directory — call list_allowed_directories "
        "and retry with a path inside one of them"
    ),
    ErrorCategory.READ_ONLY_VIOLATION: (
        "Target directory is read-only — files there can be read but not modified; "
        "choose a read-write directory"
    ),
    ErrorCategory.SYSTEM_PATH_BLOCKED: (
        "Deleting system directories is never allowed, regardless of configuration"
    ),
    ErrorCategory.INVALID_PATH: (
        "Path could not be resolved — check that it exists or that its parent directory exists"
    ),
}


def categorize_error(error: Exception) -> tuple[ErrorCategory, str]:
    """Map an exception to an ErrorCategory + human-readable hint."""
    if isinstance(error, AccessDenied):
        return error.reason_code, _DENIAL_HINTS[error.reason_code]
    if isinstance(error, EditMismatchError):
        return (
            ErrorCategory.EDIT_NO_MATCH,
            "old_text must match the file exactly, including whitespace — re-read the file first",
        )
    if isinstance(error, UnicodeDecodeError):
        return (
            ErrorCategory.UNSUPPORTED_ENCODING,
            "File is not valid UTF-8 text — use get_file_info to inspect it instead",
        )
    if isinstance(error, FileNotFoundError):
        return (
            ErrorCategory.NOT_FOUND,
            "File or directory does not exist — check the path with list_directory",
        )
    if isinstance(error, FileExistsError):
        return (
            ErrorCategory.ALREADY_EXISTS,
            "Destination already exists — choose another name or delete it first",
        )
    if isinstance(error, NotADirectoryError):
        return (
            ErrorCategory.NOT_A_DIRECTORY,
            "Path is a file, not a directory",
        )
    if isinstance(error, IsADirectoryError):
        return (
            ErrorCategory.IS_A_DIRECTORY,
            "Path is a directory — use list_directory or directory_tree",
        )
    if isinstance(error, OSError) and error.errno == errno.ENOTEMPTY:
        return (
            ErrorCategory.NOT_EMPTY,
            "Directory not empty — remove its contents first",
        )
    if isinstance(error, PermissionError):
        return (
            ErrorCategory.OS_PERMISSION_DENIED,
            "The operating system refused access — check file permissions",
        )

    return (ErrorCategory.UNKNOWN, str(error))


def make_tool_error(error: Exception) -> dict:
    """Create a serialisable ToolError dict from an exception.

    Nothing here is retryable: denials are policy decisions and I/O
    failures reflect the state of the filesystem, not a transient fault.
    """
    cat, hint = categorize_error(error)
    tool_error = ToolError(error=str(error), category=cat.value, hint=hint)
    if isinstance(error, AccessDenied):
        tool_error.operation = error.operation or None
        tool_error.denied_path = error.path
        tool_error.rule = error.rule or None
        tool_error.allowed_roots = error.allowed_roots
    return tool_error.model_dump(mode="json")
