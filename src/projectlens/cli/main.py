"""ProjectLens CLI - plens command."""

import click

from projectlens.cli.query import query_command
from projectlens.cli.serve import serve_command
from projectlens.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="plens")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """ProjectLens - structured project understanding for AI clients over MCP."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "INFO")


cli.add_command(serve_command, name="serve")
cli.add_command(query_command, name="query")


if __name__ == "__main__":
    cli()
