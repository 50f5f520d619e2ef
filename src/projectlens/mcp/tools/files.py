"""File MCP tools - get_file_context handler."""

from typing import TYPE_CHECKING, Any

from pydantic import Field

from projectlens.analysis.constraints import ConstraintEngine
from projectlens.core.errors import NotFoundError
from projectlens.mcp.registry import registry
from projectlens.mcp.tools.base import BaseParams

if TYPE_CHECKING:
    from projectlens.mcp.context import RequestContext


class GetFileContextParams(BaseParams):
    """Parameters for get_file_context."""

    path: str = Field(..., min_length=1, description="File path as recorded in the index")


@registry.register(
    "get_file_context",
    "Everything known about one file: domain, symbols, imports, importers and applicable constraints.",
    GetFileContextParams,
)
async def get_file_context(ctx: "RequestContext", params: GetFileContextParams) -> dict[str, Any]:
    index = ctx.index
    file = index.files.get(params.path)
    if file is None:
        raise NotFoundError.missing("file", params.path)

    symbols = [index.symbols[sid].to_dict() for sid in file.symbols]
    imports = [{"path": p, "external": p not in index.files} for p in file.imports]
    importers = list(index.imported_by.get(file.path, ()))
    constraints = [r.to_dict() for r in ConstraintEngine(index).for_file(file.path)]

    return {
        "file": file.to_dict(),
        "symbols": symbols,
        "imports": imports,
        "imported_by": importers,
        "constraints": constraints,
        "summary": f"{file.path}: {len(symbols)} symbols, {len(importers)} importers",
    }
