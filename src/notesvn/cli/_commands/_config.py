# pyright: reportUnusedCallResult=false, reportUnusedFunction=false
"""Config commands for viewing notesvn configuration."""

from typing import Annotated

from cyclopts import App, Parameter
from rich.table import Table

from notesvn.cli._context import CLIContext
from notesvn.cli._shared import ExitCode, exit_with_error, format_json, get_console

app = App(name="config", help="View notesvn configuration.")


@app.command(name="show")
def _show(
    key: Annotated[
        str | None, Parameter(help="Dot-notation key, e.g. cache.freshness_window")
    ] = None,
) -> None:
    """Print the merged configuration, or one value

    Args:
        key: Print only this key.
    """
    ctx = CLIContext.get_current()
    console = get_console()
    if key is None:
        console.print_json(format_json(ctx.config.to_dict()))
        return

    missing = object()
    value = ctx.config.get(key, missing)
    if value is missing:
        exit_with_error(f"Unknown key: {key}", ExitCode.USAGE_ERROR)
    if isinstance(value, dict):
        console.print_json(format_json(value))
    else:
        console.print(str(value), markup=False, highlight=False)


@app.command(name="sources")
def _sources() -> None:
    """List configuration sources, highest precedence first"""
    ctx = CLIContext.get_current()
    console = get_console()
    if ctx.config_error:
        console.print(f"[yellow]Warning:[/yellow] {ctx.config_error}")

    table = Table()
    table.add_column("Source", style="bold")
    table.add_column("Path")
    table.add_column("Active")
    for source in ctx.config.sources:
        table.add_row(
            source.name.value,
            str(source.path) if source.path is not None else "",
            "yes" if source.exists else "no",
        )
    console.print(table)
