"""Application and per-request context for MCP handlers."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from projectlens.config.models import ProjectLensConfig
from projectlens.index.graph import SymbolGraph
from projectlens.index.models import ProjectIndex
from projectlens.index.store import IndexSnapshot, IndexStore


@dataclass
class AppContext:
    """Process-wide state shared by every tool call."""

    root: Path
    config: ProjectLensConfig
    store: IndexStore

    @classmethod
    def create(cls, root: Path, config: ProjectLensConfig | None = None) -> AppContext:
        """Context with an empty store built from ``config.analysis``."""
        config = config or ProjectLensConfig()
        return cls(root=root, config=config, store=IndexStore(config.analysis))


@dataclass(frozen=True)
class RequestContext:
    """What a handler sees: the app plus the snapshot pinned for this call.

    Handlers must read the index only through ``snapshot`` so one call never
    mixes two generations.
    """

    app: AppContext
    snapshot: IndexSnapshot

    @property
    def index(self) -> ProjectIndex:
        return self.snapshot.index

    @property
    def graph(self) -> SymbolGraph:
        return self.snapshot.graph

    @property
    def config(self) -> ProjectLensConfig:
        return self.app.config
