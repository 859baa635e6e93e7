"""Filesystem Plus MCP server — tiered read-write / read-only filesystem access."""

__version__ = "0.3.0"
