"""Tree watcher that turns filesystem changes into cache invalidations.

Changes under a tracked tree invalidate the cached results for the changed
path and its ancestors, then refresh every subscribed path that the change
touches so subscribers receive a new snapshot without polling.
"""

import os
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import TYPE_CHECKING

import anyio

from notesvn.svn import DataAggregator, is_same_or_descendant, normalize_path
from notesvn.utils._ignore import collect_patterns, create_pathspec, matches_any
from notesvn.utils._logging import create_null_logger

if TYPE_CHECKING:
    from pathspec import PathSpec
    from structlog.typing import FilteringBoundLogger
    from watchfiles import Change


type WatchFilter = Callable[["Change", str], bool]


def format_change(change: "Change", path: str) -> str:  # noqa: UP037
    """Format a file change event as ``"<kind>: <path>"``."""
    from watchfiles import Change as WatchChange  # noqa: PLC0415

    change_names = {
        WatchChange.added: "added",
        WatchChange.modified: "modified",
        WatchChange.deleted: "deleted",
    }
    return f"{change_names.get(change, 'unknown')}: {path}"


def build_watch_filter(root: Path | str, pathspec: "PathSpec") -> WatchFilter:  # noqa: UP037
    """Create a watchfiles filter rejecting paths matched by ``pathspec``.

    Paths are matched relative to ``root``; paths outside it are matched as
    given.
    """
    base = normalize_path(root)

    def should_watch(_change: "Change", changed_path: str) -> bool:  # noqa: UP037
        absolute = normalize_path(changed_path)
        if is_same_or_descendant(absolute, base):
            relative = os.path.relpath(absolute, base)
            if relative == ".":
                return True
            # Directory patterns ("x/") only match with a trailing separator.
            if os.path.isdir(absolute):
                relative += "/"
            return not matches_any(pathspec, relative)
        return not matches_any(pathspec, changed_path)

    return should_watch


def affected_subscriptions(changed: Iterable[str], subscribed: Iterable[str]) -> list[str]:
    """Return subscribed paths at, above or beneath any changed path."""
    changed_paths = [normalize_path(path) for path in changed]
    return [
        path
        for path in subscribed
        if any(
            is_same_or_descendant(path, change) or is_same_or_descendant(change, path)
            for change in changed_paths
        )
    ]


async def apply_changes(
    aggregator: DataAggregator,
    changed_paths: Iterable[str],
    *,
    logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
) -> list[str]:
    """Invalidate caches for ``changed_paths`` and refresh affected subscribers.

    Paths outside any tracked tree are ignored.

    Returns:
        The subscribed paths that were refreshed.
    """
    log = logger if logger is not None else create_null_logger()
    operations = aggregator.get_operations()

    relevant: list[str] = []
    for path in dict.fromkeys(normalize_path(p) for p in changed_paths):
        if operations.is_in_tracked_tree(path):
            operations.invalidate_path(path)
            relevant.append(path)
    if not relevant:
        return []

    targets = affected_subscriptions(relevant, aggregator.subscribed_paths())
    log.debug("watch_changes_applied", changed=len(relevant), refreshing=len(targets))

    async with anyio.create_task_group() as tg:
        for target in targets:
            tg.start_soon(aggregator.refresh, target)
    return targets


async def watch_tree(
    aggregator: DataAggregator,
    root: Path | str | None = None,
    *,
    ignore_patterns: Iterable[str] = (),
    pathspec: "PathSpec | None" = None,  # noqa: UP037
    stop_event: anyio.Event | None = None,
    logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
) -> None:
    """Watch a tracked tree until ``stop_event`` is set or the task is cancelled.

    Args:
        aggregator: Aggregator whose caches and subscribers are kept current.
        root: Directory to watch. Defaults to the configured tree root.
        ignore_patterns: Extra gitignore-style patterns to skip.
        pathspec: A prebuilt PathSpec; replaces the collected patterns.
        stop_event: Event that ends the watch when set.
        logger: Logger for watch events.

    Raises:
        ValueError: If no root is given and none is configured.
        FileNotFoundError: If the root does not exist.
    """
    from watchfiles import awatch  # noqa: PLC0415

    log = logger if logger is not None else create_null_logger()
    resolver = aggregator.get_operations().resolver
    watch_root = root if root is not None else resolver.root
    if watch_root is None:
        msg = "No directory to watch: pass a root or configure tree.root"
        raise ValueError(msg)
    watch_root = Path(watch_root)
    if not watch_root.is_dir():
        raise FileNotFoundError(str(watch_root))

    if pathspec is None:
        pathspec = create_pathspec(
            collect_patterns(watch_root, marker=resolver.marker, extra_patterns=ignore_patterns)
        )

    log.info("watch_started", root=str(watch_root))
    try:
        async for changes in awatch(
            watch_root,
            watch_filter=build_watch_filter(watch_root, pathspec),
            stop_event=stop_event,
        ):
            for change, changed_path in changes:
                log.debug("watch_change", change=format_change(change, changed_path))
            _ = await apply_changes(
                aggregator, (changed_path for _, changed_path in changes), logger=log
            )
    finally:
        log.info("watch_stopped", root=str(watch_root))
