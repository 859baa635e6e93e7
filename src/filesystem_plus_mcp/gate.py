"""Operation gate — every tool call passes through here before any I/O.

For each request the gate resolves every path argument (off the event loop),
applies the deletion denylist, requires new paths to have a parent inside
a root, checks containment, then applies the tier policy. Approval yields a
:class:`Clearance` carrying canonical paths; the I/O layer only ever sees
those, never the client's raw strings. Any failure along the way, expected
or not, ends in a denial.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .containment import check_new_path_parent, governing_root
from .errors import (
    AccessDenied,
    ErrorCategory,
    InvalidPathError,
    ReadOnlyViolationError,
    SystemPathBlockedError,
)
from .policy import PATH_SLOTS, OperationKind, evaluate
from .protected_paths import SystemPathGuard
from .registry import AllowedRoot, DirectoryRegistry
from .resolver import ResolvedPath, resolve_path

logger = logging.getLogger(__name__)

DEFAULT_RESOLVE_TIMEOUT = 10.0

_READ_ONLY_MESSAGES = {
    "path": "Permission denied: cannot {op} in a read-only directory: {path}",
    "source": "Permission denied: cannot {op} from a read-only directory: {path}",
    "destination": "Permission denied: cannot {op} into a read-only directory: {path}",
}


@dataclass(frozen=True)
class Clearance:
    """Approved request: canonical paths and the roots that govern them."""

    kind: OperationKind
    paths: Mapping[str, ResolvedPath]
    roots: Mapping[str, AllowedRoot]

    def path(self, slot: str = "path") -> Path:
        """Canonical path for *slot*, ready for I/O."""
        return self.paths[slot].canonical_path


class Gate:
    """Resolve, contain and authorize path arguments against a registry.

    Args:
        registry: Immutable registry built at startup.
        guard: Deletion denylist; defaults to the built-in system paths.
        resolve_timeout: Seconds allowed for resolving a request's paths.
            Exceeding it denies the request.
    """

    def __init__(
        self,
        registry: DirectoryRegistry,
        *,
        guard: SystemPathGuard | None = None,
        resolve_timeout: float = DEFAULT_RESOLVE_TIMEOUT,
    ) -> None:
        self._registry = registry
        self._guard = guard or SystemPathGuard()
        self._resolve_timeout = resolve_timeout

    @property
    def registry(self) -> DirectoryRegistry:
        return self._registry

    def list_roots(self) -> str:
        return self._registry.describe()

    async def authorize(self, kind: OperationKind, **paths: str) -> Clearance:
        """Authorize *kind* on the given path slots.

        Args:
            kind: Requested operation.
            **paths: One keyword per path slot of *kind* (``path``, or
                ``source`` and ``destination``), as supplied by the client.

        Returns:
            Clearance with canonical paths for every slot.

        Raises:
            AccessDenied: ``InvalidPathError``, ``OutsideSandboxError``,
                ``ReadOnlyViolationError`` or ``SystemPathBlockedError``.
        """
        try:
            clearance = await self._authorize(kind, paths)
        except AccessDenied as exc:
            exc.operation = exc.operation or kind.value
            exc.allowed_roots = exc.allowed_roots or self._registry.summary()
            logger.warning(
                "Denied %s on %r: %s (%s)",
                kind.value, exc.path, exc.reason_code.value, exc.rule,
            )
            raise
        except Exception as exc:
            logger.exception("Permission evaluation failed for %s", kind.value)
            raise InvalidPathError(
                f"Permission evaluation failed; {kind.value} denied",
                path=next(iter(paths.values()), ""),
                rule="evaluation_failed",
                operation=kind.value,
                allowed_roots=self._registry.summary(),
            ) from exc

        logger.debug(
            "Cleared %s: %s", kind.value,
            ", ".join(f"{slot}={rp.canonical_path}" for slot, rp in clearance.paths.items()),
        )
        return clearance

    async def _authorize(self, kind: OperationKind, paths: Mapping[str, str]) -> Clearance:
        expected = PATH_SLOTS[kind]
        if set(paths) != set(expected):
            raise InvalidPathError(
                f"{kind.value} takes path arguments {list(expected)}, got {sorted(paths)}",
                path=next(iter(paths.values()), ""),
                rule="bad_path_arguments",
            )

        # Deleting a symlink removes the link, so judge the link itself.
        resolved = await self._resolve_all(paths, follow_symlink=kind is not OperationKind.DELETE)

        if kind is OperationKind.DELETE:
            for rp in resolved.values():
                if self._guard.is_protected(rp.canonical_path):
                    raise SystemPathBlockedError(
                        f"Deletion blocked: path is a protected system directory: {rp.raw_path}",
                        path=rp.raw_path,
                        rule="system_path_denylist",
                    )

        for rp in resolved.values():
            check_new_path_parent(rp, self._registry)

        roots = {slot: governing_root(rp, self._registry) for slot, rp in resolved.items()}

        decision = evaluate(kind, roots)
        if not decision.allowed:
            raw = paths.get(decision.slot, "")
            if decision.reason_code is ErrorCategory.READ_ONLY_VIOLATION:
                template = _READ_ONLY_MESSAGES.get(decision.slot, _READ_ONLY_MESSAGES["path"])
                raise ReadOnlyViolationError(
                    template.format(op=kind.value, path=raw),
                    path=raw,
                    rule=decision.rule,
                )
            raise InvalidPathError(
                f"{kind.value} denied: {decision.rule}", path=raw, rule=decision.rule,
            )

        return Clearance(kind=kind, paths=resolved, roots=roots)

    async def _resolve_all(
        self, paths: Mapping[str, str], *, follow_symlink: bool = True,
    ) -> dict[str, ResolvedPath]:
        slots = list(paths)
        try:
            results = await asyncio.wait_for(
                asyncio.gather(*(
                    asyncio.to_thread(resolve_path, paths[s], follow_symlink=follow_symlink)
                    for s in slots
                )),
                timeout=self._resolve_timeout,
            )
        except asyncio.TimeoutError:
            raw = paths[slots[0]] if slots else ""
            raise InvalidPathError(
                f"Path resolution timed out after {self._resolve_timeout}s; operation denied",
                path=raw,
                rule="resolution_timeout",
            ) from None
        return dict(zip(slots, results))
