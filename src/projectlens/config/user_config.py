"""Minimal user-facing configuration.

This module defines only the config fields that users should care about.
Everything else uses opinionated defaults.

User config is stored in .projectlens/config.yaml
"""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from projectlens.core.errors import ConfigError

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_LOG_LEVEL: LogLevel = "INFO"


class UserConfig(BaseModel):
    """User-facing configuration options.

    Only the project root override and log verbosity are recognized.
    """

    model_config = ConfigDict(extra="forbid")

    root: str | None = Field(
        default=None,
        description="Project root override. Relative paths resolve against the config's project.",
    )
    log_level: LogLevel = Field(
        default=DEFAULT_LOG_LEVEL,
        description="Log level. DEBUG is very verbose.",
    )


def load_user_config(path: Path) -> UserConfig:
    """Load user config from YAML file. A missing file yields defaults.

    Raises:
        ConfigError: On invalid YAML or unrecognized/invalid options.
    """
    if not path.exists():
        return UserConfig()
    try:
        with path.open() as f:
            data: Any = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    try:
        return UserConfig(**data)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
