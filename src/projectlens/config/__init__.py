"""Config module exports."""

from projectlens.config.loader import get_index_paths, load_config, resolve_root
from projectlens.config.models import (
    AnalysisConfig,
    IndexConfig,
    LoggingConfig,
    PrimerConfig,
    ProjectLensConfig,
    ServerConfig,
)

__all__ = [
    "load_config",
    "resolve_root",
    "get_index_paths",
    "ProjectLensConfig",
    "ServerConfig",
    "IndexConfig",
    "AnalysisConfig",
    "PrimerConfig",
    "LoggingConfig",
]
