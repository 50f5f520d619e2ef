"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (PROJECTLENS__SECTION__KEY)
3. Repo YAML (.projectlens/config.yaml)
4. Global YAML (~/.config/projectlens/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    PROJECTLENS__<SECTION>__<KEY>=<VALUE>

Examples:
    PROJECTLENS__LOGGING__LEVEL=DEBUG
    PROJECTLENS__SERVER__REQUEST_TIMEOUT_SEC=10
    PROJECTLENS__ANALYSIS__FAN_IN_WEIGHT=0.5
    PROJECTLENS__PRIMER__UNIT=bytes
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from projectlens.config.constants import VARIABLE_DEPTH_MAX, VARIABLE_DEPTH_MIN

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
BudgetUnit = Literal["tokens", "bytes"]
PrimerFormat = Literal["markdown", "compact", "json"]
PrimerPreset = Literal["safe", "efficient", "accurate", "balanced"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        PROJECTLENS__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every tool call with its arguments.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ServerConfig(BaseModel):
    """MCP server configuration.

    Env vars:
        PROJECTLENS__SERVER__NAME: Server name announced to MCP clients
        PROJECTLENS__SERVER__REQUEST_TIMEOUT_SEC: Per-call deadline (unset disables)
    """

    name: str = Field(
        default="projectlens",
        description="Server name announced during the MCP handshake.",
    )
    request_timeout_sec: float | None = Field(
        default=30.0,
        description="Deadline for a single tool call. None disables the deadline.",
    )

    @field_validator("request_timeout_sec")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError(f"request_timeout_sec must be positive, got {v}")
        return v


class IndexConfig(BaseModel):
    """Index document location.

    Env vars:
        PROJECTLENS__INDEX__ROOT: Project root override
        PROJECTLENS__INDEX__INDEX_PATH: Override index document location
        PROJECTLENS__INDEX__VARIABLES_PATH: Override variables document location
    """

    root: str | None = Field(
        default=None,
        description="Project root. Default: the directory the server was started for.",
    )
    index_path: str | None = Field(
        default=None,
        description="Index document path. Default: .projectlens/index.json under the root.",
    )
    variables_path: str | None = Field(
        default=None,
        description="Variables document path. Default: .projectlens/vars.json under the root.",
    )


class AnalysisConfig(BaseModel):
    """Call-graph scoring and variable resolution.

    Env vars:
        PROJECTLENS__ANALYSIS__FAN_IN_WEIGHT: Weight of normalized fan-in
        PROJECTLENS__ANALYSIS__FAN_OUT_WEIGHT: Weight of normalized fan-out
        PROJECTLENS__ANALYSIS__VARIABLE_MAX_DEPTH: Variable resolution depth bound
        PROJECTLENS__ANALYSIS__HOTPATHS_DEFAULT: Default hotpath count
    """

    fan_in_weight: float = Field(
        default=0.7,
        description="Weight of normalized fan-in (callers) in the centrality score.",
    )
    fan_out_weight: float = Field(
        default=0.3,
        description="Weight of normalized fan-out (callees) in the centrality score.",
    )
    variable_max_depth: int = Field(
        default=32,
        description="Maximum nesting of variable references before resolution fails.",
    )
    hotpaths_default: int = Field(
        default=10,
        description="Number of hotpaths returned when a caller does not ask for a count.",
    )

    @field_validator("fan_in_weight", "fan_out_weight")
    @classmethod
    def validate_weight(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"Score weights must be non-negative, got {v}")
        return v

    @field_validator("variable_max_depth")
    @classmethod
    def validate_depth(cls, v: int) -> int:
        if not (VARIABLE_DEPTH_MIN <= v <= VARIABLE_DEPTH_MAX):
            raise ValueError(
                f"variable_max_depth must be {VARIABLE_DEPTH_MIN}-{VARIABLE_DEPTH_MAX}, got {v}"
            )
        return v


class PrimerConfig(BaseModel):
    """Primer generation defaults.

    Env vars:
        PROJECTLENS__PRIMER__UNIT: Budget unit (tokens or bytes)
        PROJECTLENS__PRIMER__CHARS_PER_TOKEN: Token estimate divisor
        PROJECTLENS__PRIMER__MAX_HOTPATHS: Hotpath candidates considered
        PROJECTLENS__PRIMER__FOCUS_DEPTH: Neighborhood depth around the focus symbol
    """

    unit: BudgetUnit = Field(
        default="tokens",
        description="Unit the primer budget is measured in.",
    )
    chars_per_token: int = Field(
        default=4,
        description="Characters per estimated token. Lower is more conservative.",
    )
    max_hotpaths: int = Field(
        default=10,
        description="Hotpath symbols offered to the primer selector.",
    )
    focus_depth: int = Field(
        default=2,
        description="Call-graph hops included around the focus symbol.",
    )
    default_format: PrimerFormat = "markdown"
    default_preset: PrimerPreset = "balanced"

    @field_validator("chars_per_token", "max_hotpaths", "focus_depth")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"Must be positive, got {v}")
        return v


class ProjectLensConfig(BaseModel):
    """Root configuration for ProjectLens.

    All settings can be configured via:
    1. Environment variables: PROJECTLENS__SECTION__KEY
    2. YAML config files (repo or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    primer: PrimerConfig = Field(default_factory=PrimerConfig)
