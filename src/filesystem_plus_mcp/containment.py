"""Containment checks against the directory registry."""

from __future__ import annotations

from .errors import InvalidPathError, OutsideSandboxError
from .paths import is_within
from .registry import AllowedRoot, DirectoryRegistry, Tier
from .resolver import ResolvedPath


def matching_roots(resolved: ResolvedPath, registry: DirectoryRegistry) -> list[AllowedRoot]:
    """All roots containing the canonical path of *resolved*, in registry order."""
    key = registry.key_of(resolved.canonical_path)
    return [root for root in registry.roots() if is_within(key, root.key)]


def governing_root(resolved: ResolvedPath, registry: DirectoryRegistry) -> AllowedRoot:
    """Return the most specific root containing *resolved*.

    The longest matching root wins, so a read-only subdirectory can be carved
    out of a read-write root and vice versa. When the same directory is
    configured twice with different tiers, the read-only entry wins.

    Raises:
        OutsideSandboxError: No root contains the path.
    """
    matches = matching_roots(resolved, registry)
    if not matches:
        raise OutsideSandboxError(
            f"Access denied - path outside allowed directories: {resolved.raw_path}",
            path=resolved.raw_path,
            rule="outside_allowed_directories",
            allowed_roots=registry.summary(),
        )
    return max(matches, key=lambda root: (len(root.key), root.tier is Tier.READ_ONLY))


def check_new_path_parent(resolved: ResolvedPath, registry: DirectoryRegistry) -> None:
    """Require the parent of a not-yet-existing path to lie inside a root.

    A new file can only be created in a directory the server may access;
    anything else is treated as an unresolvable path rather than an
    attempt to reach outside the sandbox. Applies equally to a dangling
    symlink whose target sits outside every root.

    Raises:
        InvalidPathError: The parent directory is outside all roots.
    """
    if resolved.existed:
        return
    parent_key = registry.key_of(resolved.canonical_path.parent)
    if not any(is_within(parent_key, root.key) for root in registry.roots()):
        raise InvalidPathError(
            f"Parent directory does not exist: {resolved.raw_path}",
            path=resolved.raw_path,
            rule="parent_outside_allowed_directories",
            allowed_roots=registry.summary(),
        )


def tier_of(resolved: ResolvedPath, registry: DirectoryRegistry) -> Tier:
    """Tier of the most specific root containing *resolved*."""
    return governing_root(resolved, registry).tier
