"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (PROJECTLENS__SECTION__KEY)
3. User config (.projectlens/config.yaml) - minimal user-facing options
4. Global config (~/.config/projectlens/config.yaml) - full internal structure
5. Built-in defaults (lowest priority)

User-facing config (config.yaml) only contains:
- root: Project root override
- log_level: Logging verbosity

Everything else uses opinionated defaults that shouldn't need changing.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from projectlens.config.constants import (
    CONFIG_FILENAME,
    INDEX_FILENAME,
    PROJECTLENS_DIR,
    VARIABLES_FILENAME,
)
from projectlens.config.models import (
    AnalysisConfig,
    IndexConfig,
    LoggingConfig,
    PrimerConfig,
    ProjectLensConfig,
    ServerConfig,
)
from projectlens.config.user_config import load_user_config
from projectlens.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/projectlens/config.yaml").expanduser()


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with instance-based YAML source (thread-safe)."""

    class ProjectLensSettings(BaseSettings):
        """Root config. Env vars: PROJECTLENS__LOGGING__LEVEL, PROJECTLENS__PRIMER__UNIT, etc."""

        model_config = SettingsConfigDict(
            env_prefix="PROJECTLENS__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        server: ServerConfig = ServerConfig()
        index: IndexConfig = IndexConfig()
        analysis: AnalysisConfig = AnalysisConfig()
        primer: PrimerConfig = PrimerConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml files
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return ProjectLensSettings


def load_config(repo_root: Path | None = None, **kwargs: Any) -> ProjectLensConfig:
    """Load config: defaults < global config < user config < env vars < kwargs.

    Args:
        repo_root: Project root to load config from.
                   Defaults to current working directory.
        **kwargs: Override values (highest precedence).

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On invalid YAML syntax or validation errors.
    """
    repo_root = repo_root or Path.cwd()

    user_config = load_user_config(repo_root / PROJECTLENS_DIR / CONFIG_FILENAME)

    # Map user config fields to internal config structure. Only options the
    # user actually set take part, so defaults never mask the global config.
    user_fields = user_config.model_dump(exclude_unset=True)
    yaml_config: dict[str, Any] = {}
    if "log_level" in user_fields:
        yaml_config["logging"] = {"level": user_fields["log_level"]}
    if user_fields.get("root") is not None:
        yaml_config["index"] = {"root": str((repo_root / user_fields["root"]).resolve())}

    global_config = _load_yaml(GLOBAL_CONFIG_PATH)
    if global_config:
        yaml_config = _deep_merge(global_config, yaml_config)

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**kwargs)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
    return ProjectLensConfig.model_validate(settings.model_dump())


def resolve_root(config: ProjectLensConfig, repo_root: Path) -> Path:
    """Project root: the configured override, else the given directory."""
    if config.index.root:
        return Path(config.index.root).expanduser().resolve()
    return repo_root.resolve()


def get_index_paths(config: ProjectLensConfig, root: Path) -> tuple[Path, Path]:
    """Get index and variables document paths, respecting config overrides."""
    lens_dir = root / PROJECTLENS_DIR
    index_path = Path(config.index.index_path) if config.index.index_path else lens_dir / INDEX_FILENAME
    vars_path = (
        Path(config.index.variables_path)
        if config.index.variables_path
        else lens_dir / VARIABLES_FILENAME
    )
    if not index_path.is_absolute():
        index_path = root / index_path
    if not vars_path.is_absolute():
        vars_path = root / vars_path
    return index_path, vars_path
