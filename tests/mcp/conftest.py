"""Shared fixtures for MCP tests."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest

# Import tools to trigger registration
import projectlens.mcp.tools  # noqa: F401
from projectlens.config.models import ProjectLensConfig
from projectlens.index.store import IndexStore
from projectlens.mcp.context import AppContext, RequestContext
from projectlens.mcp.dispatcher import QueryDispatcher
from projectlens.mcp.registry import ToolRegistry, registry


@pytest.fixture
def clean_registry() -> Generator[ToolRegistry, None, None]:
    """Clear and yield the global registry, restore after test."""
    # Store existing registrations
    original_tools = dict(registry._tools)
    registry.clear()
    yield registry
    # Restore
    registry._tools = original_tools


@pytest.fixture
def app_context(tmp_path: Path, sample_store: IndexStore) -> AppContext:
    return AppContext(root=tmp_path, config=ProjectLensConfig(), store=sample_store)


@pytest.fixture
def request_context(app_context: AppContext) -> RequestContext:
    return RequestContext(app=app_context, snapshot=app_context.store.snapshot)


@pytest.fixture
def dispatcher(app_context: AppContext) -> QueryDispatcher:
    return QueryDispatcher(app_context)


@pytest.fixture
def disk_context(project_dir: Path) -> AppContext:
    """AppContext whose store was loaded from .projectlens/index.json."""
    context = AppContext.create(project_dir)
    lens_dir = project_dir / ".projectlens"
    context.store.load_paths(lens_dir / "index.json", lens_dir / "vars.json")
    return context
