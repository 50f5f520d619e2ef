"""plens query command - run one tool call and print the response envelope."""

import asyncio
import json
from pathlib import Path
from typing import Any

import click
from rich.console import Console

from projectlens.cli.utils import EXIT_INTERNAL_FAULT, EXIT_QUERY_ERROR, bootstrap, parse_assignments
from projectlens.core.errors import ErrorCode
from projectlens.mcp.dispatcher import QueryDispatcher
from projectlens.mcp.server import call_tool


def _coerce(value: str) -> Any:
    """JSON scalars and arrays pass through typed; anything else stays a string."""
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def _exit_code(error_code: int) -> int:
    """Typed query errors and internal faults (9xxx) exit differently."""
    return EXIT_INTERNAL_FAULT if error_code >= ErrorCode.INTERNAL_ERROR else EXIT_QUERY_ERROR


@click.command()
@click.argument("tool")
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("-a", "--arg", "args", multiple=True, help="Tool argument as key=value (repeatable)")
@click.option("--index", "index_file", type=click.Path(dir_okay=False, path_type=Path), help="Index document")
@click.option("--vars", "vars_file", type=click.Path(dir_okay=False, path_type=Path), help="Variables document")
@click.pass_context
def query_command(
    ctx: click.Context,
    tool: str,
    path: Path,
    args: tuple[str, ...],
    index_file: Path | None,
    vars_file: Path | None,
) -> None:
    """Run TOOL once against the index and print the JSON response.

    \b
    Examples:
        plens query get_architecture
        plens query get_hotpaths -a n=5 -a scope=domain:core
        plens query expand_variable -a name=API_ROOT ./my-project
    """
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    arguments = {key: _coerce(value) for key, value in parse_assignments(args).items()}
    context = bootstrap(path, index_file=index_file, vars_file=vars_file, verbose=verbose)

    dispatcher = QueryDispatcher(context)
    response = asyncio.run(call_tool(dispatcher, tool, arguments))

    console = Console()
    console.print_json(json.dumps(response, default=str))
    if not response["success"]:
        raise SystemExit(_exit_code(response["meta"]["error"]["code"]))
