# pyright: reportExplicitAny=false
"""Shared CLI utilities for commands.

Exit codes, output formatting, and the bridge from synchronous cyclopts
commands into the async sync layer.
"""

import os
from collections.abc import Awaitable, Callable
from datetime import datetime
from enum import IntEnum
from typing import Any, Never

import anyio
from rich.console import Console

from notesvn.exceptions import (
    ClientNotFoundError,
    CommandExecutionError,
    ConfigError,
    ConfigurationError,
    ConflictError,
    NotInTrackedTreeError,
)
from notesvn.svn import DataAggregator, OperationResult

from ._context import CLIContext

__all__ = [
    "ExitCode",
    "build_aggregator",
    "exit_with_error",
    "format_json",
    "get_console",
    "get_error_console",
    "print_result",
    "resolve_cli_path",
    "run_with_aggregator",
]


class ExitCode(IntEnum):
    """Standard exit codes for notesvn CLI commands."""

    SUCCESS = 0
    CONFIG_ERROR = 1
    USAGE_ERROR = 2
    NOT_IN_TREE = 3
    COMMAND_FAILED = 4
    CONFLICT = 5
    CLIENT_NOT_FOUND = 6


def _json_default(value: object) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError


def format_json(data: Any, *, indent: bool = True) -> str:
    """Format data (including dataclasses and datetimes) as JSON."""
    import orjson  # noqa: PLC0415

    options = orjson.OPT_INDENT_2 if indent else 0
    return orjson.dumps(data, default=_json_default, option=options).decode("utf-8")


def get_console() -> Console:
    """Get a Rich console for standard output honouring --no-color."""
    return Console(no_color=CLIContext.get_current().no_color)


def get_error_console() -> Console:
    """Get a Rich console configured for error output to stderr."""
    return Console(stderr=True, no_color=CLIContext.get_current().no_color)


def exit_with_error(
    message: str,
    code: ExitCode = ExitCode.COMMAND_FAILED,
    *,
    console: Console | None = None,
) -> Never:
    """Print an error message and exit with ``code``.

    Raises:
        SystemExit: Always raised with the specified exit code.
    """
    if console is None:
        console = get_error_console()
    console.print(f"[red]Error:[/red] {message}", markup=True, highlight=False)
    raise SystemExit(code)


def resolve_cli_path(path: str) -> str:
    """Resolve a command-line path against the current directory."""
    return os.path.abspath(os.path.expanduser(path))


def build_aggregator() -> DataAggregator:
    """Build a DataAggregator from the current CLI context."""
    ctx = CLIContext.get_current()
    return DataAggregator.from_config(ctx.config, logger=ctx.logger)


def run_with_aggregator[T](func: Callable[[DataAggregator], Awaitable[T]]) -> T:
    """Run ``func`` with a fresh aggregator, mapping errors to exit codes."""

    async def runner() -> T:
        aggregator = build_aggregator()
        try:
            return await func(aggregator)
        finally:
            aggregator.close()

    ctx = CLIContext.get_current()
    try:
        return anyio.run(runner)
    except NotInTrackedTreeError as e:
        exit_with_error(f"{e.path} is not inside a tracked tree", ExitCode.NOT_IN_TREE)
    except ConflictError as e:
        exit_with_error(f"conflicts in: {', '.join(e.paths)}", ExitCode.CONFLICT)
    except ClientNotFoundError as e:
        exit_with_error(str(e), ExitCode.CLIENT_NOT_FOUND)
    except CommandExecutionError as e:
        if ctx.logger is not None:
            ctx.logger.warning("cli_command_failed", argv=list(e.argv), exit_code=e.exit_code)
        exit_with_error(e.stderr.strip() or str(e), ExitCode.COMMAND_FAILED)
    except (ConfigurationError, ConfigError) as e:
        exit_with_error(str(e), ExitCode.CONFIG_ERROR)
    except ValueError as e:
        exit_with_error(str(e), ExitCode.USAGE_ERROR)


def print_result(result: OperationResult, *, action: str, console: Console | None = None) -> None:
    """Report a mutation outcome and exit non-zero if it failed."""
    if console is None:
        console = get_console()
    ctx = CLIContext.get_current()

    if result.conflicts:
        exit_with_error(f"{action}: conflicts in {', '.join(result.conflicts)}", ExitCode.CONFLICT)
    if not result.success:
        exit_with_error(result.message or f"{action} failed")
    if ctx.quiet:
        return
    if result.skipped:
        console.print(f"[dim]{action} skipped: {result.message or 'nothing to do'}[/dim]")
        return

    suffix = f" (revision {result.revision})" if result.revision is not None else ""
    console.print(f"[green]{action} succeeded{suffix}[/green]")
    if ctx.verbose and result.output.strip():
        console.print(result.output.rstrip(), markup=False, highlight=False)
