"""Directory registry — the validated, immutable set of allowed roots.

Built once at startup from ``(raw_path, tier)`` candidates. Candidates that
do not exist, are not directories, or cannot be stat'ed are rejected with a
warning rather than failing startup. The resulting registry is a frozen
value handed to the gate; nothing mutates it afterwards.
"""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .paths import CasePolicy, PathKey, absolute, path_key

logger = logging.getLogger(__name__)


class Tier(str, Enum):
    """Permission tier attached to an allowed root."""

    READ_WRITE = "read-write"
    READ_ONLY = "read-only"

    @property
    def label(self) -> str:
        return "Read-Write" if self is Tier.READ_WRITE else "Read-Only"


@dataclass(frozen=True)
class AllowedRoot:
    """A configured directory, in canonical form, with its tier."""

    canonical_path: Path
    tier: Tier
    raw_path: str
    key: PathKey

    def display(self) -> str:
        return f"{self.canonical_path} ({self.tier.label})"


@dataclass(frozen=True)
class RejectedDirectory:
    """A configured directory that was skipped during startup validation."""

    raw_path: str
    tier: Tier
    reason: str


@dataclass(frozen=True)
class DirectoryRegistry:
    """Ordered, immutable collection of allowed roots."""

    _roots: tuple[AllowedRoot, ...] = ()
    case_policy: CasePolicy = CasePolicy.AUTO

    @classmethod
    def build(
        cls,
        candidates: Iterable[tuple[str, Tier]],
        *,
        case_policy: CasePolicy = CasePolicy.AUTO,
    ) -> RegistryBuild:
        """Validate *candidates* and freeze the accepted ones into a registry.

        Args:
            candidates: ``(raw_path, tier)`` pairs in configured order. Paths
                may be relative, start with ``~``, or carry trailing separators.
            case_policy: Comparison policy used for every path key.

        Returns:
            RegistryBuild with the registry and the rejected directories.
        """
        roots: list[AllowedRoot] = []
        rejected: list[RejectedDirectory] = []

        for raw_path, tier in candidates:
            raw = raw_path.strip()
            if not raw:
                continue
            candidate = absolute(raw)
            reason = _rejection_reason(candidate)
            if reason:
                logger.warning("Skipping %s directory %s: %s", tier.value, raw, reason)
                rejected.append(RejectedDirectory(raw_path=raw, tier=Tier(tier), reason=reason))
                continue
            canonical = Path(os.path.realpath(candidate))
            roots.append(AllowedRoot(
                canonical_path=canonical,
                tier=Tier(tier),
                raw_path=raw,
                key=path_key(canonical, case_policy),
            ))

        registry = cls(_roots=tuple(roots), case_policy=case_policy)
        return RegistryBuild(registry=registry, rejected=rejected)

    def roots(self) -> tuple[AllowedRoot, ...]:
        return self._roots

    def __len__(self) -> int:
        return len(self._roots)

    def key_of(self, path: str | Path) -> PathKey:
        """Comparison key for *path* under this registry's case policy."""
        return path_key(path, self.case_policy)

    def summary(self) -> list[str]:
        """One ``"<path> (Tier)"`` line per root, read-write roots first."""
        ordered = [r for r in self._roots if r.tier is Tier.READ_WRITE]
        ordered += [r for r in self._roots if r.tier is Tier.READ_ONLY]
        return [r.display() for r in ordered]

    def describe(self) -> str:
        """Human-readable listing for ``list_allowed_directories``."""
        lines = self.summary()
        if not lines:
            return "No directories configured."
        return "Allowed directories:\n" + "\n".join(lines)


@dataclass(frozen=True)
class RegistryBuild:
    """Outcome of :meth:`DirectoryRegistry.build`."""

    registry: DirectoryRegistry
    rejected: list[RejectedDirectory] = field(default_factory=list)


def _rejection_reason(candidate: Path) -> str:
    """Return why *candidate* cannot be a root, or ``""`` when it can."""
    try:
        mode = os.stat(candidate).st_mode
    except PermissionError:
        return "access denied"
    except (FileNotFoundError, NotADirectoryError):
        return "not found"
    except OSError:
        return "access denied"
    if not stat.S_ISDIR(mode):
        return "not a directory"
    return ""
