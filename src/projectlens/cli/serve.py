"""plens serve command - run the MCP server over stdio."""

from pathlib import Path

import click
import structlog

from projectlens.cli.utils import EXIT_INTERNAL_FAULT, bootstrap
from projectlens.core.logging import get_log_file_path
from projectlens.mcp.server import run_server

log = structlog.get_logger(__name__)


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "--index",
    "index_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Index document (default: .projectlens/index.json)",
)
@click.option(
    "--vars",
    "vars_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Variables document (default: .projectlens/vars.json, optional)",
)
@click.pass_context
def serve_command(ctx: click.Context, path: Path, index_file: Path | None, vars_file: Path | None) -> None:
    """Serve project queries over MCP on stdin/stdout.

    PATH is the project root (default: current directory).
    """
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    context = bootstrap(path, index_file=index_file, vars_file=vars_file, verbose=verbose)

    try:
        run_server(context)
    except KeyboardInterrupt:
        log.info("mcp_server_interrupted")
    except Exception as e:
        log.error("mcp_server_crashed", error=str(e))
        log.debug("mcp_server_crashed_traceback", exc_info=True)
        click.echo(f"Server stopped: {e}", err=True)
        if (log_file := get_log_file_path()) is not None:
            click.echo(f"Details in {log_file}", err=True)
        raise SystemExit(EXIT_INTERNAL_FAULT) from e
    log.info("mcp_server_stopped")
