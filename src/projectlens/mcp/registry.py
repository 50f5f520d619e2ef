"""Closed set of query tools.

Each tool module registers its handler together with the pydantic model that
defines its argument shape. The dispatcher resolves names here; the server
advertises ``ToolSpec.input_schema`` to MCP clients.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog
from fastmcp.utilities.json_schema import dereference_refs
from pydantic import BaseModel

if TYPE_CHECKING:
    from projectlens.mcp.context import RequestContext

log = structlog.get_logger(__name__)

# (pinned request context, validated params) -> JSON-serialisable dict
HandlerFn = Callable[["RequestContext", Any], Awaitable[dict[str, Any]]]


@dataclass(frozen=True)
class ToolSpec:
    """One query tool: its name, argument model and handler."""

    name: str
    description: str
    params_model: type[BaseModel]
    handler: HandlerFn

    @property
    def input_schema(self) -> dict[str, Any]:
        # Inline $refs; several MCP clients reject $defs
        return dereference_refs(self.params_model.model_json_schema())


class ToolRegistry:
    """Process-wide tool table, filled at import time by ``register``."""

    _instance: ToolRegistry | None = None
    _tools: dict[str, ToolSpec]

    def __new__(cls) -> ToolRegistry:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._tools = {}
        return cls._instance

    def register(
        self,
        name: str,
        description: str,
        params_model: type[BaseModel],
    ) -> Callable[[HandlerFn], HandlerFn]:
        """Decorator adding a handler under ``name``.

        Usage:
            @registry.register("expand_variable", "Resolve a variable", ExpandVariableParams)
            async def expand_variable(ctx: RequestContext, params: ExpandVariableParams) -> dict:
                ...
        """

        def decorator(fn: HandlerFn) -> HandlerFn:
            if name in self._tools:
                log.debug("tool_reregistered", tool=name)
            self._tools[name] = ToolSpec(name, description, params_model, fn)
            return fn

        return decorator

    def get(self, name: str) -> ToolSpec | None:
        return self._tools.get(name)

    def get_all(self) -> list[ToolSpec]:
        """Specs in name order."""
        return [self._tools[name] for name in self.names()]

    def names(self) -> list[str]:
        return sorted(self._tools)

    def clear(self) -> None:
        """Drop every registration. Tests only."""
        self._tools.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolSpec]:
        return iter(self.get_all())

    def __len__(self) -> int:
        return len(self._tools)


registry = ToolRegistry()
