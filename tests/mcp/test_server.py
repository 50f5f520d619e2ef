"""Tests for mcp/server.py module.

Covers:
- ToolResponse model
- _extract_log_params() and _extract_result_summary()
- call_tool() envelopes for success and failure
- create_mcp_server() and _wire_tool()
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from pydantic import Field

from projectlens.core.logging import get_request_id
from projectlens.mcp.context import AppContext
from projectlens.mcp.dispatcher import QueryDispatcher
from projectlens.mcp.registry import ToolSpec
from projectlens.mcp.server import (
    ToolResponse,
    _extract_log_params,
    _extract_result_summary,
    _wire_tool,
    call_tool,
    create_mcp_server,
)
from projectlens.mcp.tools.base import BaseParams


class TestToolResponse:
    """Tests for ToolResponse model."""

    def test_create_success_response(self) -> None:
        response = ToolResponse(success=True, result={"data": "value"})
        assert response.success is True
        assert response.result == {"data": "value"}
        assert response.error is None
        assert response.meta == {}

    def test_create_error_response(self) -> None:
        response = ToolResponse(success=False, error="Something failed")
        assert response.success is False
        assert response.result is None
        assert response.error == "Something failed"

    def test_model_dump(self) -> None:
        data = ToolResponse(success=True, result={"key": "val"}).model_dump()
        assert data == {"result": {"key": "val"}, "meta": {}, "success": True, "error": None}


class TestExtractLogParams:
    """Tests for _extract_log_params function."""

    def test_passes_short_values(self) -> None:
        assert _extract_log_params({"path": "a.py", "depth": 2}) == {"path": "a.py", "depth": 2}

    def test_truncates_long_strings(self) -> None:
        params = _extract_log_params({"focus": "x" * 80})
        assert params["focus"] == "x" * 50 + "..."

    def test_summarizes_long_lists(self) -> None:
        params = _extract_log_params({"ids": ["a", "b", "c", "d"], "few": ["a", "b"]})
        assert params["ids"] == "[4 items]"
        assert params["few"] == ["a", "b"]

    def test_drops_none(self) -> None:
        assert _extract_log_params({"scope": None, "n": 3}) == {"n": 3}


class TestExtractResultSummary:
    """Tests for _extract_result_summary function."""

    def test_counts_lists(self) -> None:
        summary = _extract_result_summary({"count": 2, "hotpaths": [{}, {}], "other": "x"})
        assert summary == {"count": 2, "hotpaths": 2}

    def test_primer_and_constraints(self) -> None:
        summary = _extract_result_summary({"used": 120, "violated": 1, "results": [1, 2, 3]})
        assert summary == {"used": 120, "violated": 1, "results": 3}

    def test_empty(self) -> None:
        assert _extract_result_summary({}) == {}


class TestCallTool:
    """call_tool always returns an envelope."""

    @pytest.mark.asyncio
    async def test_success_envelope(self, dispatcher: QueryDispatcher) -> None:
        envelope = await call_tool(dispatcher, "get_architecture", {})
        assert envelope["success"] is True
        assert envelope["error"] is None
        assert envelope["result"]["project"] == "shop"
        assert set(envelope["meta"]) == {"request_id", "timestamp", "elapsed_ms"}
        assert len(envelope["meta"]["request_id"]) == 12

    @pytest.mark.asyncio
    async def test_error_envelope(self, dispatcher: QueryDispatcher) -> None:
        envelope = await call_tool(dispatcher, "get_domain_files", {"domain": "billing"})
        assert envelope["success"] is False
        assert envelope["result"] is None
        assert envelope["error"] == "Domain not found: billing"
        error = envelope["meta"]["error"]
        assert error["code"] == 4003
        assert error["error"] == "NOT_FOUND"
        assert error["retryable"] is False
        assert error["details"] == {"kind": "domain", "key": "billing"}

    @pytest.mark.asyncio
    async def test_unknown_tool_envelope(self, dispatcher: QueryDispatcher) -> None:
        envelope = await call_tool(dispatcher, "nope", {})
        assert envelope["success"] is False
        assert "get_architecture" in envelope["meta"]["error"]["details"]["available_tools"]

    @pytest.mark.asyncio
    async def test_request_id_cleared(self, dispatcher: QueryDispatcher) -> None:
        await call_tool(dispatcher, "get_architecture", {})
        assert get_request_id() is None
        await call_tool(dispatcher, "nope", {})
        assert get_request_id() is None


class TestCreateMcpServer:
    """Tests for create_mcp_server function."""

    def test_creates_named_server(self, app_context: AppContext) -> None:
        with patch("projectlens.mcp.server._wire_tool") as mock_wire:
            mcp = create_mcp_server(app_context)
        assert mcp.name == "projectlens"
        assert mock_wire.call_count == len(QueryDispatcher(app_context).tool_names())

    def test_wires_every_registered_tool(self, app_context: AppContext) -> None:
        with patch("projectlens.mcp.server._wire_tool") as mock_wire:
            create_mcp_server(app_context)
        wired = {call.args[1].name for call in mock_wire.call_args_list}
        assert {"get_architecture", "generate_primer", "reload_index"} <= wired


class TestWireTool:
    """Tests for _wire_tool function."""

    def test_flat_schema(self, dispatcher: QueryDispatcher) -> None:
        class Nested(BaseParams):
            value: int

        class WithNested(BaseParams):
            name: str = Field(description="The name")
            inner: Nested | None = None

        spec = ToolSpec(name="nested_tool", description="Nested", params_model=WithNested, handler=MagicMock())
        mcp = MagicMock()
        _wire_tool(mcp, spec, dispatcher)

        mcp.add_tool.assert_called_once()
        tool = mcp.add_tool.call_args.args[0]
        assert tool.name == "nested_tool"
        assert tool.description == "Nested"
        assert "$defs" not in tool.parameters
        assert tool.parameters["properties"]["name"]["description"] == "The name"
