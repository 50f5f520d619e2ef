"""Configuration constants.

This module contains truly constant values that should NOT be user-configurable.
These are protocol constraints, API stability limits, and implementation details.

For configurable values, see models.py (AnalysisConfig, PrimerConfig, etc.).
"""

# =============================================================================
# On-disk layout
# =============================================================================

PROJECTLENS_DIR = ".projectlens"
"""Per-project directory holding the index, variables and config documents."""

INDEX_FILENAME = "index.json"
VARIABLES_FILENAME = "vars.json"
CONFIG_FILENAME = "config.yaml"

# =============================================================================
# Index schema
# =============================================================================

SUPPORTED_SCHEMA_MAJOR = 1
"""Index documents must declare a schema version with this major number."""

# =============================================================================
# MCP Tool Argument Maximums
# =============================================================================
# Hard caps for API stability. Users can configure defaults below these.
# Counts above a cap are clamped to it; depths and budgets above one are rejected.

HOTPATHS_MAX = 500
"""Maximum symbols or files returned by a hotpath query; larger requests are clamped."""

NEIGHBOR_DEPTH_MAX = 10
"""Maximum traversal depth for symbol neighborhoods."""

PRIMER_BUDGET_MAX = 1_000_000
"""Maximum primer budget, in either unit."""

KEY_FILES_MAX = 10
"""Number of most-imported files listed by the explore context."""

DEBUG_HOTPATHS_MAX = 5
"""Number of hot symbols listed by the debug context."""

# =============================================================================
# Protocol/Validation Constants
# =============================================================================

VARIABLE_DEPTH_MIN = 1
VARIABLE_DEPTH_MAX = 1024
"""Valid range for the variable resolution depth bound."""
