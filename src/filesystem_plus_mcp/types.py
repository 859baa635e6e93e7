"""Shared type aliases for tool parameters."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

from .models.filesystem import EditOperation

# ── Annotated aliases ────────────────────────────────────────────────────────

PathParam = Annotated[str, Field(
    min_length=1,
    description="Path to a file or directory inside an allowed directory (absolute, relative, or ~-prefixed)",
)]
SourcePath = Annotated[str, Field(min_length=1, description="Existing file or directory to move or copy")]
DestinationPath = Annotated[str, Field(min_length=1, description="Target path; must not exist yet")]
PathList = Annotated[list[str], Field(min_length=1, description="Paths of the files to read")]
FileContentParam = Annotated[str, Field(description="Full text content to write (UTF-8)")]
EditList = Annotated[list[EditOperation], Field(
    min_length=1,
    description="Replacements applied in order; each old_text must match exactly",
)]
DryRun = Annotated[bool, Field(description="Preview changes as a git-style diff without writing")]
GlobPattern = Annotated[str, Field(
    min_length=1,
    description="Case-insensitive glob matched against entry names (plain text matches substrings)",
)]
ExcludePatterns = Annotated[list[str] | None, Field(description="Glob patterns for names or paths to skip")]
