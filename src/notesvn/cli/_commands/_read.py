# pyright: reportUnusedCallResult=false, reportUnusedFunction=false
# ruff: noqa: FBT002
"""Read-only commands: status, info, log, diff, blame."""

from typing import Annotated

from cyclopts import Parameter
from rich.syntax import Syntax
from rich.table import Table

from notesvn.cli._shared import (
    format_json,
    get_console,
    resolve_cli_path,
    run_with_aggregator,
)
from notesvn.svn import (
    BlameEntry,
    DataAggregator,
    FileSnapshot,
    InfoRecord,
    LoadOptions,
    LogEntry,
    StatusCode,
)

JsonFlag = Annotated[bool, Parameter(name="--json", help="Print JSON instead of a table")]

_STATUS_STYLES: dict[StatusCode, str] = {
    StatusCode.MODIFIED: "yellow",
    StatusCode.ADDED: "green",
    StatusCode.DELETED: "red",
    StatusCode.REPLACED: "magenta",
    StatusCode.CONFLICTED: "bold red",
    StatusCode.UNVERSIONED: "cyan",
    StatusCode.MISSING: "red",
}


def _format_date(entry: LogEntry | BlameEntry) -> str:
    return entry.timestamp.strftime("%Y-%m-%d %H:%M") if entry.timestamp else ""


def _format_size(size: int | None) -> str:
    if size is None:
        return ""
    if size < 1024:  # noqa: PLR2004
        return f"{size} B"
    value = size / 1024
    for unit in ("KiB", "MiB"):
        if value < 1024:  # noqa: PLR2004
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GiB"


def status(
    path: str = ".",
    *,
    json: JsonFlag = False,
) -> None:
    """Show version-control status for a file or directory

    Args:
        path: File or directory inside a tracked tree.
        json: Print the snapshot as JSON.
    """
    target = resolve_cli_path(path)

    async def load(aggregator: DataAggregator) -> FileSnapshot:
        return await aggregator.load(target, LoadOptions(include_history=False))

    snapshot = run_with_aggregator(load)
    console = get_console()
    if json:
        console.print_json(format_json(snapshot))
        return

    if not snapshot.is_in_tracked_tree:
        console.print(f"[dim]{path} is not inside a tracked tree[/dim]")
        return

    state = "tracked" if snapshot.is_tracked else "untracked"
    revision = snapshot.current_revision
    header = f"[bold]{path}[/bold] ({state}"
    header += f", r{revision})" if revision is not None else ")"
    console.print(header)
    if snapshot.error:
        console.print(f"[yellow]Warning:[/yellow] {snapshot.error}")

    if not snapshot.status:
        console.print("[dim]No local changes[/dim]")
        return
    for entry in snapshot.status:
        style = _STATUS_STYLES.get(entry.status_code, "default")
        console.print(f"  [{style}]{entry.status_code.value}[/{style}] {entry.path}")


def info(path: str, *, json: JsonFlag = False) -> None:
    """Show working-copy information for a path

    Args:
        path: Tracked file or directory.
        json: Print the record as JSON.
    """
    target = resolve_cli_path(path)

    async def lookup(aggregator: DataAggregator) -> InfoRecord | None:
        return await aggregator.get_operations().get_info(target)

    record = run_with_aggregator(lookup)
    console = get_console()
    if json:
        console.print_json(format_json(record))
        return
    if record is None:
        console.print(f"[dim]{path} is not under version control[/dim]")
        return

    table = Table(show_header=False, box=None)
    table.add_column(style="bold")
    table.add_column()
    table.add_row("URL", record.url)
    table.add_row("Repository root", record.repository_root_url)
    table.add_row("Repository UUID", record.repository_uuid)
    table.add_row("Revision", str(record.working_revision or ""))
    table.add_row("Last changed rev", str(record.last_changed_revision or ""))
    table.add_row("Last changed author", record.last_changed_author)
    table.add_row(
        "Last changed date",
        record.last_changed_date.isoformat() if record.last_changed_date else "",
    )
    console.print(table)


def log(
    path: str,
    *,
    limit: Annotated[int | None, Parameter(help="Maximum number of entries")] = None,
    json: JsonFlag = False,
) -> None:
    """Show the revision history of a path

    Args:
        path: Tracked file or directory.
        limit: Maximum number of entries (defaults to history.limit).
        json: Print the entries as JSON.
    """
    target = resolve_cli_path(path)

    async def lookup(aggregator: DataAggregator) -> list[LogEntry]:
        return await aggregator.get_operations().get_log(target, limit)

    entries = run_with_aggregator(lookup)
    console = get_console()
    if json:
        console.print_json(format_json(entries))
        return
    if not entries:
        console.print("[dim]No history[/dim]")
        return

    table = Table()
    table.add_column("Rev", justify="right", style="cyan")
    table.add_column("Author")
    table.add_column("Date")
    table.add_column("Size", justify="right")
    table.add_column("Message", overflow="fold")
    for entry in entries:
        table.add_row(
            str(entry.revision),
            entry.author,
            _format_date(entry),
            _format_size(entry.file_size_bytes),
            entry.message.strip(),
        )
    console.print(table)


def diff(
    path: str,
    *,
    revision: Annotated[int | None, Parameter(name=["--revision", "-r"])] = None,
    to: Annotated[int | None, Parameter(help="Second revision of the range")] = None,
) -> None:
    """Show local changes, or changes between revisions

    Args:
        path: Tracked file.
        revision: Compare against this revision.
        to: End of the revision range (requires --revision).
    """
    target = resolve_cli_path(path)

    async def lookup(aggregator: DataAggregator) -> str:
        return await aggregator.get_operations().get_diff(target, revision, to)

    text = run_with_aggregator(lookup)
    console = get_console()
    if not text.strip():
        console.print("[dim]No differences[/dim]")
        return
    console.print(Syntax(text, "diff", theme="ansi_dark", background_color="default"))


def blame(
    path: str,
    *,
    revision: Annotated[int | None, Parameter(name=["--revision", "-r"])] = None,
    json: JsonFlag = False,
) -> None:
    """Show the revision and author of each line

    Args:
        path: Tracked file.
        revision: Annotate the file as of this revision.
        json: Print the entries as JSON.
    """
    target = resolve_cli_path(path)

    async def lookup(aggregator: DataAggregator) -> list[BlameEntry]:
        return await aggregator.get_operations().get_blame(target, revision)

    entries = run_with_aggregator(lookup)
    console = get_console()
    if json:
        console.print_json(format_json(entries))
        return

    table = Table()
    table.add_column("Line", justify="right", style="dim")
    table.add_column("Rev", justify="right", style="cyan")
    table.add_column("Author")
    table.add_column("Date")
    for entry in entries:
        table.add_row(
            str(entry.line_number),
            str(entry.revision),
            entry.author,
            _format_date(entry),
        )
    console.print(table)
