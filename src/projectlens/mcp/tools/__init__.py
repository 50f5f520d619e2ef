"""MCP tool handlers."""

from projectlens.mcp.tools import (
    architecture,
    constraints,
    context,
    files,
    index,
    primer,
    symbols,
    variables,
)

__all__ = [
    "architecture",
    "constraints",
    "context",
    "files",
    "index",
    "primer",
    "symbols",
    "variables",
]
