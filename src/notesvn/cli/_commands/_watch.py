# pyright: reportUnusedCallResult=false, reportUnusedFunction=false
"""Watch command: keep snapshots current while files change."""

from typing import Annotated

import anyio
from cyclopts import Parameter

from notesvn.cli._shared import get_console, resolve_cli_path, run_with_aggregator
from notesvn.svn import DataAggregator, FileSnapshot
from notesvn.watch import watch_tree


def _describe(snapshot: FileSnapshot) -> str:
    if snapshot.is_loading:
        return f"[dim]{snapshot.path}: loading[/dim]"
    if snapshot.error:
        return f"[yellow]{snapshot.path}: {snapshot.error}[/yellow]"
    if not snapshot.is_in_tracked_tree:
        return f"[dim]{snapshot.path}: outside tracked tree[/dim]"
    codes = "".join(sorted({entry.status_code.value for entry in snapshot.status})).strip()
    state = "tracked" if snapshot.is_tracked else "untracked"
    changes = f", changes [{codes}]" if codes else ""
    return f"{snapshot.path}: {state}{changes}"


def watch(
    *paths: str,
    root: Annotated[str | None, Parameter(help="Directory to watch")] = None,
    ignore: Annotated[
        tuple[str, ...], Parameter(help="Extra gitignore-style patterns to skip")
    ] = (),
) -> None:
    """Watch a tracked tree and print snapshot updates for paths

    Args:
        paths: Paths whose snapshots are printed as they change.
        root: Directory to watch (defaults to tree.root).
        ignore: Additional ignore patterns.
    """
    console = get_console()
    targets = [resolve_cli_path(path) for path in paths]
    watch_root = resolve_cli_path(root) if root is not None else None

    async def run(aggregator: DataAggregator) -> None:
        for target in targets:
            aggregator.subscribe(target, lambda snapshot: console.print(_describe(snapshot)))
        async with anyio.create_task_group() as tg:
            for target in targets:
                tg.start_soon(aggregator.load, target)
        await watch_tree(aggregator, watch_root, ignore_patterns=ignore)

    try:
        run_with_aggregator(run)
    except KeyboardInterrupt:
        console.print("[dim]Stopped watching[/dim]")
