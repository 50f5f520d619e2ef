"""Index MCP tools - reload_index handler."""

import asyncio
from typing import TYPE_CHECKING, Any

from projectlens.mcp.registry import registry
from projectlens.mcp.tools.base import BaseParams

if TYPE_CHECKING:
    from projectlens.mcp.context import RequestContext


class ReloadIndexParams(BaseParams):
    """Parameters for reload_index."""


@registry.register(
    "reload_index",
    "Re-read the index and variables documents from disk and swap them in atomically. "
    "On failure the current index stays live.",
    ReloadIndexParams,
)
async def reload_index(ctx: "RequestContext", params: ReloadIndexParams) -> dict[str, Any]:  # noqa: ARG001
    previous = ctx.snapshot
    snapshot = await asyncio.to_thread(ctx.app.store.reload_from_disk)
    return {
        "generation": snapshot.generation,
        "previous_generation": previous.generation,
        "files": len(snapshot.index.files),
        "symbols": len(snapshot.index.symbols),
        "changed": snapshot.index != previous.index,
        "summary": f"generation {previous.generation} -> {snapshot.generation}",
    }
