"""Single entry point for tool calls.

``dispatch`` looks the tool up, validates arguments against its params
model, pins one index snapshot, and runs the handler. It returns the
handler's dict or raises exactly one ProjectLensError.
"""

from __future__ import annotations

import asyncio
import types
import typing
from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import BaseModel, ValidationError

from projectlens.core.errors import (
    ArgumentError,
    DeadlineExceededError,
    InternalFault,
    ProjectLensError,
    UnknownToolError,
)
from projectlens.mcp.context import AppContext, RequestContext
from projectlens.mcp.registry import ToolRegistry, ToolSpec, registry

log = structlog.get_logger(__name__)


def _type_name(annotation: Any) -> str:
    if annotation is None or annotation is type(None):
        return "null"
    args = typing.get_args(annotation)
    origin = typing.get_origin(annotation)
    if origin is typing.Literal:
        return "one of " + ", ".join(repr(a) for a in args)
    if origin is typing.Union or origin is types.UnionType:
        return " | ".join(_type_name(a) for a in args)
    return getattr(annotation, "__name__", str(annotation))


def argument_error(model: type[BaseModel], error: ValidationError) -> ArgumentError:
    """First validation failure as an ArgumentError naming field and expected type."""
    err = error.errors()[0]
    loc = [str(part) for part in err["loc"]]
    field = ".".join(loc) or "arguments"
    if err["type"] == "extra_forbidden":
        expected = "no such argument"
    elif loc and loc[0] in model.model_fields:
        expected = _type_name(model.model_fields[loc[0]].annotation)
    else:
        expected = "object"
    return ArgumentError.invalid(field, expected, err["msg"])


class QueryDispatcher:
    """Routes tool calls to registered handlers over a pinned snapshot."""

    def __init__(self, app: AppContext, tools: ToolRegistry | None = None) -> None:
        if tools is None:
            # Import tools to trigger registration
            import projectlens.mcp.tools  # noqa: F401

            tools = registry
        self._app = app
        self._tools = tools

    @property
    def app(self) -> AppContext:
        return self._app

    def tool_names(self) -> list[str]:
        return self._tools.names()

    def lookup(self, tool_name: str) -> ToolSpec:
        spec = self._tools.get(tool_name)
        if spec is None:
            raise UnknownToolError.named(tool_name, self._tools.names())
        return spec

    async def dispatch(self, tool_name: str, arguments: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Run one tool call.

        Raises:
            UnknownToolError: No tool is registered under ``tool_name``.
            ArgumentError: Arguments fail validation.
            ProjectLensError: Whatever typed error the handler raises.
            DeadlineExceededError: The handler ran past server.request_timeout_sec.
            InternalFault: Any other exception.
        """
        spec = self.lookup(tool_name)
        try:
            params = spec.params_model.model_validate(dict(arguments or {}))
        except ValidationError as e:
            raise argument_error(spec.params_model, e) from e

        ctx = RequestContext(app=self._app, snapshot=self._app.store.snapshot)
        timeout = self._app.config.server.request_timeout_sec
        try:
            if timeout is None:
                return await spec.handler(ctx, params)
            return await asyncio.wait_for(spec.handler(ctx, params), timeout)
        except ProjectLensError:
            raise
        except asyncio.TimeoutError as e:
            raise DeadlineExceededError.after(tool_name, timeout or 0) from e
        except Exception as e:
            raise InternalFault.unexpected(str(e) or type(e).__name__, tool=tool_name) from e
