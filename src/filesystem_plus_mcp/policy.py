"""Permission evaluator — operation kinds and the tier policy table.

``evaluate`` is a pure function over already-resolved, already-contained
paths: it never touches the filesystem. Containment and the deletion
denylist are enforced by the gate before it gets here.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from .errors import ErrorCategory
from .registry import AllowedRoot, Tier


class OperationKind(str, Enum):
    """Every operation the server can perform."""

    READ = "read"
    READ_MULTI = "read_multi"
    WRITE = "write"
    EDIT = "edit"
    CREATE_DIR = "create_dir"
    LIST_DIR = "list_dir"
    TREE = "tree"
    MOVE = "move"
    COPY = "copy"
    SEARCH = "search"
    GET_INFO = "get_info"
    DELETE = "delete"
    LIST_ROOTS = "list_roots"


_SINGLE = ("path",)
_PAIR = ("source", "destination")

# Path arguments each kind carries.
PATH_SLOTS: dict[OperationKind, tuple[str, ...]] = {
    OperationKind.READ: _SINGLE,
    OperationKind.READ_MULTI: _SINGLE,
    OperationKind.WRITE: _SINGLE,
    OperationKind.EDIT: _SINGLE,
    OperationKind.CREATE_DIR: _SINGLE,
    OperationKind.LIST_DIR: _SINGLE,
    OperationKind.TREE: _SINGLE,
    OperationKind.MOVE: _PAIR,
    OperationKind.COPY: _PAIR,
    OperationKind.SEARCH: _SINGLE,
    OperationKind.GET_INFO: _SINGLE,
    OperationKind.DELETE: _SINGLE,
    OperationKind.LIST_ROOTS: (),
}

# Slots that must not land in a read-only root. Copy only checks the
# destination: the source is left untouched.
TIER_CHECKED_SLOTS: dict[OperationKind, tuple[str, ...]] = {
    OperationKind.READ: (),
    OperationKind.READ_MULTI: (),
    OperationKind.WRITE: _SINGLE,
    OperationKind.EDIT: _SINGLE,
    OperationKind.CREATE_DIR: _SINGLE,
    OperationKind.LIST_DIR: (),
    OperationKind.TREE: (),
    OperationKind.MOVE: _PAIR,
    OperationKind.COPY: ("destination",),
    OperationKind.SEARCH: (),
    OperationKind.GET_INFO: (),
    OperationKind.DELETE: _SINGLE,
    OperationKind.LIST_ROOTS: (),
}

WRITE_CLASS: frozenset[OperationKind] = frozenset(
    kind for kind, slots in TIER_CHECKED_SLOTS.items() if slots
)


def _check_tables() -> None:
    for table_name, table in (("PATH_SLOTS", PATH_SLOTS), ("TIER_CHECKED_SLOTS", TIER_CHECKED_SLOTS)):
        missing = set(OperationKind) - set(table)
        if missing:
            names = ", ".join(sorted(k.value for k in missing))
            raise RuntimeError(f"{table_name} has no policy for: {names}")
    for kind, checked in TIER_CHECKED_SLOTS.items():
        unknown = set(checked) - set(PATH_SLOTS[kind])
        if unknown:
            raise RuntimeError(f"{kind.value} checks unknown slots: {sorted(unknown)}")


_check_tables()


@dataclass(frozen=True)
class Decision:
    """Result of :func:`evaluate`."""

    allowed: bool
    reason_code: ErrorCategory | None = None
    slot: str = ""
    rule: str = ""


ALLOW = Decision(allowed=True)


def evaluate(kind: OperationKind, roots: Mapping[str, AllowedRoot]) -> Decision:
    """Apply the tier policy for *kind* to the governing root of each slot.

    Args:
        kind: The requested operation.
        roots: Slot name → most specific root containing that slot's path.

    Returns:
        ``ALLOW``, or a denial naming the first offending slot. A checked slot
        with no root denies rather than allows.
    """
    for slot in TIER_CHECKED_SLOTS[kind]:
        root = roots.get(slot)
        if root is None:
            return Decision(
                allowed=False,
                reason_code=ErrorCategory.INVALID_PATH,
                slot=slot,
                rule="missing_path_argument",
            )
        if root.tier is Tier.READ_ONLY:
            return Decision(
                allowed=False,
                reason_code=ErrorCategory.READ_ONLY_VIOLATION,
                slot=slot,
                rule=f"read_only_{slot}",
            )
    return ALLOW
