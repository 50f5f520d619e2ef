"""FastMCP server creation and wiring.

Every registered tool is exposed with a flat parameter schema and wrapped so
that a call always ends in a ToolResponse envelope:
- Two-phase tool logging: tool_start with params, tool_complete with summary
- Categorized exception logging: typed errors as warnings, internal faults as
  errors with the traceback at DEBUG
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import BaseModel, Field

from projectlens.core.errors import InternalFault, ProjectLensError
from projectlens.core.logging import clear_request_id, set_request_id

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from projectlens.mcp.context import AppContext
    from projectlens.mcp.dispatcher import QueryDispatcher
    from projectlens.mcp.registry import ToolSpec

log = structlog.get_logger(__name__)

INSTRUCTIONS = (
    "ProjectLens answers structured questions about a pre-indexed project. "
    "Call get_architecture first, then drill into files, symbols, domains and "
    "constraints, or call generate_primer for a budgeted digest."
)


class ToolResponse(BaseModel):
    """Standardized tool response envelope."""

    result: Any = None
    meta: dict[str, Any] = Field(default_factory=dict)

    success: bool
    error: str | None = None


def _extract_log_params(kwargs: dict[str, Any]) -> dict[str, Any]:
    """Extract relevant parameters for logging.

    Limits long values so a single call cannot flood the log.
    """
    params: dict[str, Any] = {}
    for key, value in kwargs.items():
        if isinstance(value, str) and len(value) > 50:
            params[key] = value[:50] + "..."
        elif isinstance(value, list) and len(value) > 3:
            params[key] = f"[{len(value)} items]"
        elif value is not None:
            params[key] = value
    return params


def _extract_result_summary(result: dict[str, Any]) -> dict[str, Any]:
    """Extract summary metrics from tool result for logging."""
    summary: dict[str, Any] = {}
    if "count" in result:
        summary["count"] = result["count"]
    for key in ("results", "hotpaths", "neighbors", "files"):
        if isinstance(result.get(key), list):
            summary[key] = len(result[key])
    if "used" in result:
        summary["used"] = result["used"]
    if "violated" in result:
        summary["violated"] = result["violated"]
    return summary


async def call_tool(dispatcher: QueryDispatcher, tool_name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    """Dispatch one call and wrap the outcome in a ToolResponse dict.

    Never raises for tool-level failures: typed errors become
    ``success=False`` with the error dict under ``meta.error``.
    """
    request_id = set_request_id()
    start_time = time.perf_counter()
    log.info("tool_start", tool=tool_name, **_extract_log_params(arguments))

    try:
        result_data = await dispatcher.dispatch(tool_name, arguments)
        elapsed_ms = int((time.perf_counter() - start_time) * 1000)
        log.info("tool_complete", tool=tool_name, elapsed_ms=elapsed_ms, **_extract_result_summary(result_data))
        return ToolResponse(
            success=True,
            result=result_data,
            meta={
                "request_id": request_id,
                "timestamp": int(time.time() * 1000),
                "elapsed_ms": elapsed_ms,
            },
        ).model_dump()

    except ProjectLensError as e:
        elapsed_ms = int((time.perf_counter() - start_time) * 1000)
        if isinstance(e, InternalFault):
            # Console-friendly summary; full traceback only at DEBUG
            log.error("tool_internal_error", tool=tool_name, error=str(e), elapsed_ms=elapsed_ms)
            log.debug("tool_internal_error_traceback", tool=tool_name, exc_info=True)
        else:
            # Expected error - log warning, no traceback
            log.warning(
                "tool_error",
                tool=tool_name,
                error_code=e.code.value,
                error=e.message,
                elapsed_ms=elapsed_ms,
            )
        return ToolResponse(
            success=False,
            result=None,
            error=e.message,
            meta={
                "request_id": request_id,
                "timestamp": int(time.time() * 1000),
                "error": e.to_dict(),
            },
        ).model_dump()

    finally:
        clear_request_id()


def create_mcp_server(context: AppContext) -> FastMCP:
    """Create FastMCP server with all tools wired to context.

    Args:
        context: AppContext holding the loaded index store

    Returns:
        Configured FastMCP server ready to run
    """
    from fastmcp import FastMCP

    from projectlens.mcp.dispatcher import QueryDispatcher

    dispatcher = QueryDispatcher(context)
    log.info("mcp_server_creating", root=str(context.root))

    mcp = FastMCP(context.config.server.name, instructions=INSTRUCTIONS)

    tool_count = 0
    for name in dispatcher.tool_names():
        _wire_tool(mcp, dispatcher.lookup(name), dispatcher)
        tool_count += 1

    log.info("mcp_server_created", tool_count=tool_count)
    return mcp


def _wire_tool(mcp: FastMCP, spec: ToolSpec, dispatcher: QueryDispatcher) -> None:
    """Wire a single tool spec to FastMCP.

    The handler takes the params model's fields as direct keyword
    parameters, so FastMCP advertises a flat schema that every MCP client
    accepts. Validation happens once, in the dispatcher.
    """
    from fastmcp.tools.function_tool import FunctionTool

    tool_name = spec.name

    async def handler(**kwargs: Any) -> dict[str, Any]:
        return await call_tool(dispatcher, tool_name, kwargs)

    tool = FunctionTool(
        name=spec.name,
        description=spec.description,
        parameters=spec.input_schema,
        fn=handler,
    )
    mcp.add_tool(tool)


def run_server(context: AppContext) -> None:
    """Create and run the MCP server over stdio until the client disconnects."""
    mcp = create_mcp_server(context)
    log.info("mcp_server_running", transport="stdio")
    mcp.run()
