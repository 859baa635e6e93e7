"""Main FastMCP server — builds the registry and gate once, then serves tools."""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from contextlib import asynccontextmanager

from fastmcp import FastMCP

from .cli import parse_directory_args
from .config import ServerConfig, get_config
from .gate import Gate
from .protected_paths import SystemPathGuard
from .registry import DirectoryRegistry, Tier
from .tools import FilesystemTools, build_filesystem_server

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Filesystem access limited to configured directories. Read-write directories "
    "allow every operation; read-only directories allow reading, listing, searching "
    "and copying out, but refuse writes, edits, moves and deletions. Call "
    "list_allowed_directories first to see which directories are available."
)


def build_gate(cfg: ServerConfig, cli_dirs: list[tuple[str, Tier]] | None = None) -> Gate:
    """Validate configured directories and wrap the frozen registry in a gate."""
    build = DirectoryRegistry.build(
        cfg.directory_candidates(cli_dirs), case_policy=cfg.case_policy,
    )
    registry = build.registry

    if build.rejected:
        logger.warning("%d configured director(ies) skipped:", len(build.rejected))
        for rejected in build.rejected:
            logger.warning("  - %s (%s): %s", rejected.raw_path, rejected.tier.label, rejected.reason)

    if not len(registry):
        logger.warning("No valid directories configured — server starts with no filesystem access")
    else:
        rw = [str(r.canonical_path) for r in registry.roots() if r.tier is Tier.READ_WRITE]
        ro = [str(r.canonical_path) for r in registry.roots() if r.tier is Tier.READ_ONLY]
        logger.info("Read-Write directories: %s", ", ".join(rw) or "none")
        logger.info("Read-Only directories: %s", ", ".join(ro) or "none")

    return Gate(
        registry,
        guard=SystemPathGuard(cfg.protected_paths),
        resolve_timeout=cfg.resolve_timeout,
    )


def create_server(gate: Gate, cfg: ServerConfig | None = None) -> FastMCP:
    """Create the FastMCP app with every filesystem tool bound to *gate*."""
    cfg = cfg or get_config()

    @asynccontextmanager
    async def _lifespan(server: FastMCP):
        """Startup/shutdown hook."""
        logger.info("Filesystem Plus serving %d root(s)", len(gate.registry))
        yield {}
        logger.info("Lifespan shutdown: filesystem-plus-mcp")

    app = FastMCP("filesystem-plus", instructions=INSTRUCTIONS, lifespan=_lifespan)
    tools = FilesystemTools(
        gate,
        tree_max_depth=cfg.tree_max_depth,
        search_max_depth=cfg.search_max_depth,
    )
    app.mount(build_filesystem_server(tools))
    return app


def main(argv: Sequence[str] | None = None) -> None:
    """Entry-point for ``filesystem-plus-mcp`` console script."""
    cli_dirs = parse_directory_args(argv)
    cfg = get_config()
    # stdout carries the stdio transport; logs go to stderr.
    logging.basicConfig(
        level=cfg.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    gate = build_gate(cfg, cli_dirs)
    create_server(gate, cfg).run()


if __name__ == "__main__":
    main()
