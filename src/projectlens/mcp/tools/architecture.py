"""Architecture MCP tools - get_architecture, get_domain_files handlers."""

from collections import Counter
from typing import TYPE_CHECKING, Any

from pydantic import Field

from projectlens.core.errors import NotFoundError
from projectlens.mcp.registry import registry
from projectlens.mcp.tools.base import BaseParams

if TYPE_CHECKING:
    from projectlens.mcp.context import RequestContext


# =============================================================================
# Parameter Models
# =============================================================================


class GetArchitectureParams(BaseParams):
    """Parameters for get_architecture."""


class GetDomainFilesParams(BaseParams):
    """Parameters for get_domain_files."""

    domain: str = Field(..., min_length=1, description="Domain name")


# =============================================================================
# Tool Handlers
# =============================================================================


@registry.register(
    "get_architecture",
    "Project overview: domains with file counts, languages, layers and totals. Call this first.",
    GetArchitectureParams,
)
async def get_architecture(ctx: "RequestContext", params: GetArchitectureParams) -> dict[str, Any]:  # noqa: ARG001
    index = ctx.index
    domains = [index.domains[name].to_dict() for name in sorted(index.domains)]
    layers = Counter(f.layer for f in index.files.values() if f.layer)
    unassigned = sum(1 for f in index.files.values() if not f.domain)
    return {
        "project": index.project,
        "schema_version": index.version,
        "generated_at": index.generated_at,
        "total_files": len(index.files),
        "total_symbols": len(index.symbols),
        "total_lines": index.total_lines,
        "languages": index.languages,
        "layers": dict(sorted(layers.items())),
        "domains": domains,
        "files_without_domain": unassigned,
        "constraint_count": len(index.constraints),
        "summary": f"{len(index.files)} files, {len(index.symbols)} symbols, {len(domains)} domains",
    }


@registry.register(
    "get_domain_files",
    "List the files that belong to a domain.",
    GetDomainFilesParams,
)
async def get_domain_files(ctx: "RequestContext", params: GetDomainFilesParams) -> dict[str, Any]:
    index = ctx.index
    domain = index.domains.get(params.domain)
    if domain is None:
        raise NotFoundError.missing("domain", params.domain)
    files = [
        {
            "path": path,
            "language": index.files[path].language,
            "lines": index.files[path].lines,
            "symbols": len(index.files[path].symbols),
        }
        for path in domain.members
    ]
    return {
        "domain": domain.name,
        "description": domain.description,
        "files": files,
        "count": len(files),
        "summary": f"{len(files)} files in {domain.name}",
    }
