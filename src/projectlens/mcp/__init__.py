"""MCP surface: tool registry, dispatcher and FastMCP server."""

from projectlens.mcp.context import AppContext, RequestContext
from projectlens.mcp.dispatcher import QueryDispatcher
from projectlens.mcp.registry import ToolRegistry, ToolSpec, registry

__all__ = [
    "AppContext",
    "QueryDispatcher",
    "RequestContext",
    "ToolRegistry",
    "ToolSpec",
    "registry",
]
