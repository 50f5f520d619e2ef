"""Symbol MCP tools - get_symbol_context, get_hotpaths handlers."""

from typing import TYPE_CHECKING, Any, Literal

from pydantic import Field

from projectlens.analysis.hotpaths import HotpathAnalyzer
from projectlens.config.constants import HOTPATHS_MAX, NEIGHBOR_DEPTH_MAX
from projectlens.core.errors import NotFoundError
from projectlens.mcp.registry import registry
from projectlens.mcp.tools.base import BaseParams

if TYPE_CHECKING:
    from projectlens.mcp.context import RequestContext


# =============================================================================
# Parameter Models
# =============================================================================


class GetSymbolContextParams(BaseParams):
    """Parameters for get_symbol_context."""

    identifier: str = Field(..., min_length=1, description="Qualified symbol identifier")
    # Non-positive depths reach the graph, which rejects them itself.
    depth: int = Field(
        1, le=NEIGHBOR_DEPTH_MAX, description=f"Call-graph hops to expand (1-{NEIGHBOR_DEPTH_MAX})"
    )
    direction: Literal["callers", "callees", "both"] = Field(
        "both", description="Which edges to follow"
    )


class GetHotpathsParams(BaseParams):
    """Parameters for get_hotpaths."""

    n: int | None = Field(
        None, ge=1, description=f"How many to return (default from config, at most {HOTPATHS_MAX})"
    )
    scope: str | None = Field(
        None, description="Restrict to 'domain:<name>', 'file:<path>', or a bare domain/file name"
    )
    kind: Literal["symbols", "files"] = Field("symbols", description="Rank symbols or files")


# =============================================================================
# Tool Handlers
# =============================================================================


@registry.register(
    "get_symbol_context",
    "A symbol with its direct callers/callees and the call-graph neighborhood up to 'depth' hops.",
    GetSymbolContextParams,
)
async def get_symbol_context(ctx: "RequestContext", params: GetSymbolContextParams) -> dict[str, Any]:
    index, graph = ctx.index, ctx.graph
    symbol = index.symbols.get(params.identifier)
    if symbol is None:
        raise NotFoundError.missing("symbol", params.identifier)

    neighbors = graph.neighbors(symbol.id, params.direction, params.depth)
    return {
        "symbol": symbol.to_dict(),
        "callers": [{"id": c, "external": graph.is_external(c)} for c in graph.callers(symbol.id)],
        "callees": [{"id": c, "external": graph.is_external(c)} for c in graph.callees(symbol.id)],
        "neighbors": [n.to_dict() for n in neighbors],
        "fan_in": graph.fan_in(symbol.id),
        "fan_out": graph.fan_out(symbol.id),
        "score": round(graph.score(symbol.id), 6),
        "summary": f"{symbol.id}: {len(neighbors)} symbols within {params.depth} hop(s)",
    }


@registry.register(
    "get_hotpaths",
    "Most structurally critical symbols (or files), ranked by call-graph centrality.",
    GetHotpathsParams,
)
async def get_hotpaths(ctx: "RequestContext", params: GetHotpathsParams) -> dict[str, Any]:
    analyzer = HotpathAnalyzer(ctx.graph)
    n = min(params.n or ctx.config.analysis.hotpaths_default, HOTPATHS_MAX)
    scope = analyzer.resolve_scope(params.scope).to_dict() if params.scope else None

    if params.kind == "files":
        hotpaths = [
            {"path": f.path, "domain": f.domain, "score": round(score, 6), "symbols": len(f.symbols)}
            for f, score in analyzer.top_files(n, params.scope)
        ]
    else:
        graph = ctx.graph
        hotpaths = [
            {
                "id": s.id,
                "kind": s.kind,
                "file": s.file,
                "score": round(score, 6),
                "fan_in": graph.fan_in(s.id),
                "fan_out": graph.fan_out(s.id),
            }
            for s, score in analyzer.top_symbols(n, params.scope)
        ]
    return {
        "kind": params.kind,
        "scope": scope,
        "hotpaths": hotpaths,
        "count": len(hotpaths),
        "summary": f"top {len(hotpaths)} {params.kind}",
    }
