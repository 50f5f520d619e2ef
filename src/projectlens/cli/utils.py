"""CLI utilities: exit codes and context bootstrapping shared by commands."""

from pathlib import Path

import click
import structlog

from projectlens.config.loader import get_index_paths, load_config, resolve_root
from projectlens.core.errors import ConfigError, IndexLoadError
from projectlens.core.logging import configure_logging
from projectlens.mcp.context import AppContext

log = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_INTERNAL_FAULT = 1
EXIT_INDEX_LOAD_FAILURE = 3
EXIT_CONFIG_ERROR = 4
EXIT_QUERY_ERROR = 5


def parse_assignments(pairs: tuple[str, ...]) -> dict[str, str]:
    """Parse ``key=value`` pairs from repeated CLI options.

    Raises:
        click.BadParameter: A pair has no ``=``.
    """
    result: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {pair!r}", param_hint="-a/--arg")
        result[key.strip()] = value
    return result


def bootstrap(
    path: Path,
    *,
    index_file: Path | None = None,
    vars_file: Path | None = None,
    verbose: bool = False,
) -> AppContext:
    """Load config, configure logging and load the index.

    Exits with EXIT_CONFIG_ERROR or EXIT_INDEX_LOAD_FAILURE on failure.
    """
    repo_root = path.resolve()
    overrides = {"logging": {"level": "DEBUG"}} if verbose else {}
    try:
        config = load_config(repo_root, **overrides)
    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        raise SystemExit(EXIT_CONFIG_ERROR) from e

    configure_logging(config=config.logging)

    root = resolve_root(config, repo_root)
    default_index, default_vars = get_index_paths(config, root)
    index_path = index_file.resolve() if index_file else default_index
    vars_path = vars_file.resolve() if vars_file else default_vars

    context = AppContext.create(root, config)
    try:
        context.store.load_paths(index_path, vars_path)
    except (IndexLoadError, OSError) as e:
        log.error("index_load_failed", path=str(index_path), error=str(e))
        click.echo(f"Failed to load index: {e}", err=True)
        raise SystemExit(EXIT_INDEX_LOAD_FAILURE) from e
    return context
