"""Filesystem tool models — inputs for edits and outputs for every tool."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

EntryType = Literal["file", "directory"]


class EditOperation(BaseModel):
    """A single exact-text replacement."""

    old_text: str = Field(min_length=1, description="Text to search for - must match exactly")
    new_text: str = Field(description="Text to replace with")


class FileContent(BaseModel):
    """Result of reading one file."""

    path: str
    content: str = ""
    error: str | None = None


class MultiReadResult(BaseModel):
    """Result of read_multiple_files — failures are reported per file."""

    files: list[FileContent] = Field(default_factory=list)
    succeeded: int = 0
    failed: int = 0
    text: str = ""


class WriteResult(BaseModel):
    """Result of a mutating operation (write, mkdir, move, copy, delete)."""

    path: str
    message: str
    created: bool = False
    destination: str | None = None


class EditResult(BaseModel):
    """Result of edit_file, including the unified diff."""

    path: str
    diff: str
    dry_run: bool = False
    edits_applied: int = 0
    message: str = ""


class DirectoryEntry(BaseModel):
    """One entry of a directory listing."""

    name: str
    type: EntryType

    def render(self) -> str:
        prefix = "[DIR]" if self.type == "directory" else "[FILE]"
        return f"{prefix} {self.name}"


class DirectoryListing(BaseModel):
    """Result of list_directory."""

    path: str
    entries: list[DirectoryEntry] = Field(default_factory=list)
    text: str = ""


class TreeNode(BaseModel):
    """Recursive directory tree node. Files carry no ``children`` key."""

    name: str
    type: EntryType
    children: list[TreeNode] | None = None


class SearchHit(BaseModel):
    """A path matching a search pattern."""

    type: EntryType
    path: str


class SearchResult(BaseModel):
    """Result of search_files."""

    path: str
    pattern: str
    matches: list[SearchHit] = Field(default_factory=list)
    total: int = 0
    text: str = ""


class FileInfo(BaseModel):
    """Metadata for a file or directory."""

    path: str
    name: str
    type: EntryType
    size: int
    created: str
    modified: str
    accessed: str
    permissions: str


class RootsListing(BaseModel):
    """Result of list_allowed_directories."""

    roots: list[dict[str, str]] = Field(default_factory=list)
    text: str = ""
