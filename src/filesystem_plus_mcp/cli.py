"""Command-line parsing for configured directories.

Accepted forms (mixable, flags repeatable)::

    filesystem-plus-mcp --readwrite ~/projects,/tmp/scratch --readonly /srv/archive
    filesystem-plus-mcp ~/projects /tmp/scratch            # bare dirs are read-write

Comma-separated values are split and trimmed, as desktop extension UIs pass
several directories in one argument.
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from .registry import Tier


def split_dirs(values: Sequence[str]) -> list[str]:
    """Flatten comma-separated directory arguments, dropping blanks."""
    dirs: list[str] = []
    for value in values:
        dirs.extend(part.strip() for part in value.split(",") if part.strip())
    return dirs


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="filesystem-plus-mcp",
        description="MCP filesystem server with read-write and read-only directories.",
    )
    parser.add_argument(
        "--readwrite",
        action="extend",
        nargs="+",
        default=[],
        metavar="DIR",
        help="Directories the client may read and modify (comma-separated allowed)",
    )
    parser.add_argument(
        "--readonly",
        action="extend",
        nargs="+",
        default=[],
        metavar="DIR",
        help="Directories the client may only read (comma-separated allowed)",
    )
    parser.add_argument(
        "directories",
        nargs="*",
        default=[],
        metavar="DIR",
        help="Legacy form: bare directories are read-write",
    )
    return parser


def parse_directory_args(argv: Sequence[str] | None = None) -> list[tuple[str, Tier]]:
    """Parse *argv* into ``(directory, tier)`` pairs, read-write first."""
    args = build_parser().parse_intermixed_args(argv)
    readwrite = split_dirs([*args.directories, *args.readwrite])
    readonly = split_dirs(args.readonly)
    return [(d, Tier.READ_WRITE) for d in readwrite] + [(d, Tier.READ_ONLY) for d in readonly]
