"""Primer MCP tools - generate_primer handler."""

import asyncio
from typing import TYPE_CHECKING, Any, Literal

from pydantic import Field

from projectlens.config.constants import HOTPATHS_MAX, PRIMER_BUDGET_MAX
from projectlens.mcp.registry import registry
from projectlens.mcp.tools.base import BaseParams
from projectlens.primer.generator import PrimerGenerator

if TYPE_CHECKING:
    from projectlens.mcp.context import RequestContext


class GeneratePrimerParams(BaseParams):
    """Parameters for generate_primer."""

    budget: int = Field(4000, gt=0, le=PRIMER_BUDGET_MAX, description="Size limit in 'unit'")
    focus: str | None = Field(None, description="Symbol whose call-graph neighborhood to include")
    format: Literal["markdown", "compact", "json"] | None = Field(None, description="Output format")
    preset: Literal["safe", "efficient", "accurate", "balanced"] | None = Field(
        None, description="Weighting of constraints, hotpaths and focus content"
    )
    unit: Literal["tokens", "bytes"] | None = Field(None, description="Budget unit")
    max_symbols: int | None = Field(
        None, ge=1, description=f"Hotpath symbols to consider (at most {HOTPATHS_MAX})"
    )
    sections: list[Literal["architecture", "hotpaths", "constraints", "focus"]] | None = Field(
        None, description="Sections eligible for selection (architecture is always included)"
    )
    force_include: list[str] = Field(
        default_factory=list,
        description="Section ids or item keys like 'hotpaths:<symbol>' to take before ranking, if they fit",
    )


@registry.register(
    "generate_primer",
    "Build a compact project digest (architecture, hotpaths, blocking violations, optional focus) "
    "that fits the given budget. Fails instead of truncating if the architecture summary cannot fit.",
    GeneratePrimerParams,
)
async def generate_primer(ctx: "RequestContext", params: GeneratePrimerParams) -> dict[str, Any]:
    generator = PrimerGenerator(ctx.snapshot, ctx.config.primer)
    document = await asyncio.to_thread(
        generator.generate,
        params.budget,
        params.focus,
        format=params.format,
        preset=params.preset,
        unit=params.unit,
        max_symbols=min(params.max_symbols, HOTPATHS_MAX) if params.max_symbols else None,
        sections=params.sections,
        force_include=params.force_include,
    )
    result = document.to_dict()
    result["summary"] = f"{document.used}/{document.budget} {document.unit}, {document.included} items"
    return result
