"""Filesystem tools — bound to a gate on a sub-server mounted by the app."""

from .filesystem import FilesystemTools, build_filesystem_server

__all__ = ["FilesystemTools", "build_filesystem_server"]
