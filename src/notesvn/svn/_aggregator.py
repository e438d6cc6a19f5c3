"""Per-file snapshot aggregation.

The DataAggregator is the consumer-facing API. It composes several
operation lookups into one FileSnapshot per path, shares a single in-flight
load between concurrent callers, throttles repeated refreshes, and notifies
per-path subscribers every time a snapshot is published.

Snapshots are keyed by canonical absolute path. Every snapshot carries a
stamp from a per-instance clock that never repeats or goes backwards, so a
snapshot published after a clear or invalidation always compares newer.
"""

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Self, final

import anyio

from notesvn.config import Config
from notesvn.utils._logging import create_null_logger

from ._cache import CacheManager, InvalidationEvent, InvalidationKind, InvalidationListener
from ._executor import CommandExecutor
from ._models import FileSnapshot, InfoRecord, LoadOptions, LogEntry, OperationResult, StatusEntry
from ._operations import OperationManager
from ._paths import PathResolver, is_same_or_descendant
from ._protocol import CommandExecutorProtocol

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger


type SnapshotCallback = Callable[[FileSnapshot], None]


@dataclass(slots=True)
class _PendingLoad:
    """A load in flight, awaited by every caller for the same path."""

    event: anyio.Event = field(default_factory=anyio.Event)
    snapshot: FileSnapshot | None = None

    def resolve(self, snapshot: FileSnapshot) -> None:
        if self.snapshot is None:
            self.snapshot = snapshot
            self.event.set()

    async def wait(self) -> FileSnapshot:
        await self.event.wait()
        if self.snapshot is None:
            msg = "Pending load finished without a snapshot"
            raise RuntimeError(msg)
        return self.snapshot


def _describe(error: BaseException) -> str:
    return str(error) or type(error).__name__


@final
class DataAggregator:
    """Publishes combined version-control snapshots per file.

    Args:
        operations: Operation manager used for every lookup and mutation.
        freshness_window: Seconds a loaded snapshot satisfies ``load``.
        refresh_throttle: Seconds within which a repeated ``refresh`` is
            answered from the previous or in-flight result.
        logger: Logger for load lifecycle events.
    """

    def __init__(
        self,
        operations: OperationManager,
        *,
        freshness_window: float = 2.0,
        refresh_throttle: float = 0.2,
        logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
    ) -> None:
        self.operations = operations
        self.freshness_window = freshness_window
        self.refresh_throttle = refresh_throttle
        self._logger = logger if logger is not None else create_null_logger()

        self._snapshots: dict[str, FileSnapshot] = {}
        self._load_started: dict[str, float] = {}
        self._pending: dict[str, _PendingLoad] = {}
        self._subscribers: dict[str, list[SnapshotCallback]] = {}
        self._last_refresh: dict[str, float] = {}
        self._invalidated_at: dict[str, float] = {}
        self._last_clear: float = 0.0
        self._last_stamp: float = 0.0

        self._detach = operations.cache.subscribe(self._on_invalidation)

    @classmethod
    def from_config(
        cls,
        config: Config,
        *,
        executor: CommandExecutorProtocol | None = None,
        logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
    ) -> Self:
        """Wire resolver, executor, cache and operations from ``config``."""
        resolver = PathResolver(config.tree.root_path, config.tree.marker)
        if executor is None:
            executor = CommandExecutor(
                default_timeout=config.client.command_timeout, logger=logger
            )
        operations = OperationManager(
            resolver,
            executor,
            CacheManager(logger=logger),
            client=config.client,
            history_limit=config.history.limit,
            enrich_sizes=config.history.enrich_sizes,
            logger=logger,
        )
        return cls(
            operations,
            freshness_window=config.cache.freshness_window,
            refresh_throttle=config.cache.refresh_throttle,
            logger=logger,
        )

    def close(self) -> None:
        """Stop listening for cache invalidations."""
        self._detach()

    def get_operations(self) -> OperationManager:
        """Return the operation manager for detail queries (diff, blame...)."""
        return self.operations

    # -------------------------------------------------------------------------
    # Bookkeeping
    # -------------------------------------------------------------------------

    def _stamp(self) -> float:
        self._last_stamp = max(time.time(), self._last_stamp + 1e-6)
        return self._last_stamp

    def _key(self, path: Path | str) -> str:
        return self.operations.resolver.resolve_absolute_path(path)

    def _is_fresh(self, key: str) -> bool:
        snapshot = self._snapshots.get(key)
        if snapshot is None or snapshot.is_loading:
            return False
        started = self._load_started.get(key, 0.0)
        if started <= self._last_clear or started <= self._invalidated_at.get(key, 0.0):
            return False
        return time.time() - snapshot.last_update_time <= self.freshness_window

    def _on_invalidation(self, event: InvalidationEvent) -> None:
        stamp = self._stamp()
        if event.kind is InvalidationKind.ALL or event.path is None:
            self._last_clear = stamp
            self._snapshots.clear()
            self._load_started.clear()
            # Loads already running may have read pre-clear state; later
            # callers must not join them.
            self._pending.clear()
            self._logger.debug("snapshots_cleared")
            return

        changed = event.path
        related = [
            key
            for key in self._snapshots.keys() | self._pending.keys()
            if is_same_or_descendant(key, changed) or is_same_or_descendant(changed, key)
        ]
        for key in related:
            self._invalidated_at[key] = stamp
            _ = self._snapshots.pop(key, None)
            _ = self._pending.pop(key, None)
        if related:
            self._logger.debug("snapshots_invalidated", path=changed, count=len(related))

    def _publish(self, key: str, snapshot: FileSnapshot) -> None:
        self._snapshots[key] = snapshot
        for callback in list(self._subscribers.get(key, ())):
            try:
                callback(snapshot)
            except Exception:
                self._logger.exception("subscriber_failed", path=key)

    # -------------------------------------------------------------------------
    # Consumer API
    # -------------------------------------------------------------------------

    def subscribe(self, path: Path | str, callback: SnapshotCallback) -> Callable[[], None]:
        """Call ``callback`` with every snapshot published for ``path``.

        Returns:
            A callable that removes the subscription.
        """
        key = self._key(path)
        self._subscribers.setdefault(key, []).append(callback)

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(key)
            if callbacks and callback in callbacks:
                callbacks.remove(callback)
                if not callbacks:
                    del self._subscribers[key]

        return unsubscribe

    def subscribe_invalidations(self, listener: InvalidationListener) -> Callable[[], None]:
        """Receive every cache invalidation event, including force clears."""
        return self.operations.cache.subscribe(listener)

    def subscribed_paths(self) -> list[str]:
        """Return the canonical paths that currently have subscribers."""
        return list(self._subscribers)

    def get_cached(self, path: Path | str) -> FileSnapshot | None:
        """Return the latest published snapshot for ``path``, if any."""
        return self._snapshots.get(self._key(path))

    async def load(self, path: Path | str, options: LoadOptions | None = None) -> FileSnapshot:
        """Return a fresh snapshot, the in-flight result, or a new load."""
        key = self._key(path)
        if self._is_fresh(key):
            self._logger.debug("snapshot_cache_hit", path=key)
            return self._snapshots[key]
        pending = self._pending.get(key)
        if pending is not None:
            self._logger.debug("load_joined", path=key)
            return await pending.wait()
        return await self._start_load(key, path, options or LoadOptions())

    async def refresh(self, path: Path | str, options: LoadOptions | None = None) -> FileSnapshot:
        """Reload ``path`` bypassing caches, at most once per throttle window."""
        key = self._key(path)
        now = time.monotonic()
        last = self._last_refresh.get(key)
        pending = self._pending.get(key)

        if last is not None and now - last < self.refresh_throttle:
            if pending is not None:
                self._logger.debug("refresh_throttled", path=key, source="pending")
                return await pending.wait()
            snapshot = self._snapshots.get(key)
            if snapshot is not None and not snapshot.is_loading:
                self._logger.debug("refresh_throttled", path=key, source="snapshot")
                return snapshot

        self._last_refresh[key] = now
        if pending is not None:
            return await pending.wait()

        self.operations.invalidate_path(key)
        return await self._start_load(key, path, options or LoadOptions())

    def force_clear(self) -> None:
        """Empty every cache and stamp a clear.

        Invalidation listeners receive exactly one event.
        """
        self._last_refresh.clear()
        self.operations.cache.clear_all()
        self._logger.info("force_cleared")

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def _start_load(
        self, key: str, path: Path | str, options: LoadOptions
    ) -> FileSnapshot:
        pending = _PendingLoad()
        self._pending[key] = pending
        started = self._stamp()
        self._publish(key, FileSnapshot(path=str(path), last_update_time=started, is_loading=True))
        self._logger.debug("load_started", path=key)

        try:
            try:
                snapshot = await self._build_snapshot(key, str(path), options)
            except Exception as e:
                self._logger.exception("load_failed", path=key)
                snapshot = FileSnapshot(
                    path=str(path), last_update_time=self._stamp(), error=_describe(e)
                )
            if self._pending.get(key) is pending:
                self._load_started[key] = started
                self._publish(key, snapshot)
            else:
                self._logger.debug("load_superseded", path=key)
            pending.resolve(snapshot)
            self._logger.debug(
                "load_finished",
                path=key,
                tracked=snapshot.is_tracked,
                statuses=len(snapshot.status),
                history=len(snapshot.history),
                error=snapshot.error,
            )
            return snapshot
        finally:
            # Waiters are released even if this task is cancelled.
            pending.resolve(
                FileSnapshot(path=str(path), last_update_time=self._stamp(), error="Load cancelled")
            )
            if self._pending.get(key) is pending:
                del self._pending[key]

    async def _build_snapshot(self, key: str, path: str, options: LoadOptions) -> FileSnapshot:
        ops = self.operations
        errors: list[str] = []
        results: dict[str, Any] = {}

        async def guarded(name: str, func: Callable[[], Any], default: Any) -> None:
            try:
                results[name] = await func()
            except Exception as e:
                self._logger.warning("lookup_failed", path=key, lookup=name, error=_describe(e))
                errors.append(f"{name}: {_describe(e)}")
                results[name] = default

        async def in_tree() -> bool:
            return await anyio.to_thread.run_sync(ops.is_in_tracked_tree, key)

        async with anyio.create_task_group() as tg:
            tg.start_soon(guarded, "in_tree", in_tree, False)
            tg.start_soon(guarded, "tracked", lambda: ops.is_tracked(key), False)

        if not results["in_tree"]:
            return FileSnapshot(
                path=path,
                last_update_time=self._stamp(),
                is_in_tracked_tree=False,
                error="; ".join(errors) or None,
            )

        tracked: bool = results["tracked"]
        limit = options.history_limit
        results.update(status=[], info=None, history=[])
        async with anyio.create_task_group() as tg:
            if options.include_status:
                tg.start_soon(guarded, "status", lambda: ops.get_status(key), [])
            if tracked and options.include_info:
                tg.start_soon(guarded, "info", lambda: ops.get_info(key), None)
            if tracked and options.include_history:
                tg.start_soon(guarded, "history", lambda: ops.get_log(key, limit), [])

        status: list[StatusEntry] = results["status"]
        info: InfoRecord | None = results["info"]
        history: list[LogEntry] = results["history"]

        if not status and info is None:
            await guarded("tracked", lambda: ops.is_tracked(key, recheck=True), tracked)
            tracked = results["tracked"]

        return FileSnapshot(
            path=path,
            last_update_time=self._stamp(),
            is_in_tracked_tree=True,
            is_tracked=tracked,
            status=tuple(status),
            info=info,
            history=tuple(history),
            error="; ".join(errors) or None,
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def add(
        self, paths: Sequence[Path | str], *, add_parents: bool = False
    ) -> OperationResult:
        """Schedule paths for addition."""
        return await self.operations.add(paths, add_parents=add_parents)

    async def remove(
        self, paths: Sequence[Path | str], *, keep_local: bool = False
    ) -> OperationResult:
        """Schedule paths for deletion."""
        return await self.operations.remove(paths, keep_local=keep_local)

    async def move(
        self, source: Path | str, destination: Path | str, *, force: bool = False
    ) -> OperationResult:
        """Move a path under version control (skipped outside a tree)."""
        return await self.operations.move(source, destination, force=force)

    async def commit(self, paths: Sequence[Path | str], message: str) -> OperationResult:
        """Commit paths, adding and committing parents as needed."""
        return await self.operations.commit(paths, message)

    async def update(self, paths: Sequence[Path | str]) -> OperationResult:
        """Update paths to HEAD."""
        return await self.operations.update(paths)

    async def update_to_revision(self, path: Path | str, revision: int | str) -> OperationResult:
        """Update a path to a revision, reporting conflicts."""
        return await self.operations.update_to_revision(path, revision)

    async def revert(self, paths: Sequence[Path | str]) -> OperationResult:
        """Discard local edits."""
        return await self.operations.revert(paths)

    async def checkout_revision(self, path: Path | str, revision: int | str) -> OperationResult:
        """Revert, then update a path to a revision."""
        return await self.operations.checkout_revision(path, revision)

    async def create_repository(self, name: str) -> OperationResult:
        """Create a repository beside the tracked tree."""
        return await self.operations.create_repository(name)
