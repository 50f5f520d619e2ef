"""Variable MCP tools - expand_variable handler."""

from typing import TYPE_CHECKING, Any

from pydantic import Field

from projectlens.analysis.variables import VariableResolver
from projectlens.mcp.registry import registry
from projectlens.mcp.tools.base import BaseParams

if TYPE_CHECKING:
    from projectlens.mcp.context import RequestContext


class ExpandVariableParams(BaseParams):
    """Parameters for expand_variable."""

    name: str = Field(..., min_length=1, description="Variable name, without the leading '$'")


@registry.register(
    "expand_variable",
    "Resolve a variable to its literal value, following $name references.",
    ExpandVariableParams,
)
async def expand_variable(ctx: "RequestContext", params: ExpandVariableParams) -> dict[str, Any]:
    resolver = VariableResolver(ctx.index, max_depth=ctx.config.analysis.variable_max_depth)
    name = params.name.removeprefix("$")
    resolution = resolver.resolve(name)
    variable = ctx.index.variables[name]
    return {
        "name": name,
        "value": resolution.value,
        "raw": variable.value,
        "references": resolver.references(name),
        "chain": list(resolution.chain),
        "refers_to": resolver.refers_to(resolution.value),
        "description": variable.description,
        "source": variable.source,
        "summary": f"${name} = {resolution.value}",
    }
