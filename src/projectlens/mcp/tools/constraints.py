"""Constraint MCP tools - check_constraints handler."""

import asyncio
from collections import Counter
from typing import TYPE_CHECKING, Any

from pydantic import Field

from projectlens.analysis.constraints import ConstraintEngine, ConstraintResult
from projectlens.core.errors import ArgumentError
from projectlens.index.models import ProjectIndex
from projectlens.mcp.registry import registry
from projectlens.mcp.tools.base import BaseParams

if TYPE_CHECKING:
    from projectlens.mcp.context import RequestContext


class CheckConstraintsParams(BaseParams):
    """Parameters for check_constraints."""

    constraint_id: str | None = Field(
        None, description="Constraint to evaluate; omit or pass 'all' for every constraint"
    )
    path: str | None = Field(
        None, description="Only constraints that cover this file, with its violations"
    )


def _evaluate(index: ProjectIndex, params: CheckConstraintsParams) -> list[ConstraintResult]:
    engine = ConstraintEngine(index)
    if params.path is not None:
        return engine.for_file(params.path)
    return engine.evaluate(params.constraint_id)


@registry.register(
    "check_constraints",
    "Evaluate dependency and lock constraints. Each result is satisfied, violated (with the "
    "offending imports) or unevaluable (with a reason).",
    CheckConstraintsParams,
)
async def check_constraints(ctx: "RequestContext", params: CheckConstraintsParams) -> dict[str, Any]:
    if params.path is not None and params.constraint_id not in (None, "all"):
        raise ArgumentError.invalid("path", "omitted when constraint_id is given", "pass one or the other")

    results = await asyncio.to_thread(_evaluate, ctx.index, params)
    counts = Counter(r.status for r in results)
    blocking = sum(1 for r in results if r.blocking_violation)
    return {
        "results": [r.to_dict() for r in results],
        "satisfied": counts["satisfied"],
        "violated": counts["violated"],
        "unevaluable": counts["unevaluable"],
        "blocking_violations": blocking,
        "summary": (
            f"{len(results)} constraints: {counts['violated']} violated, "
            f"{counts['unevaluable']} unevaluable"
        ),
    }
