"""Keyed result cache with path-aware invalidation.

Entries are immutable values stored under a composite CacheKey. Every
mutation of the store (other than ``set``) is announced on an
InvalidationChannel so downstream holders of derived state, such as the
data aggregator's snapshots, can drop what they hold.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any, final

from notesvn.utils._logging import create_null_logger

from ._models import CacheCategory, CacheKey
from ._paths import ancestors_until, is_same_or_descendant

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger


class InvalidationKind(StrEnum):
    """Which invalidation rule produced an event."""

    EXACT = "exact"
    PREFIX = "prefix"
    PATH = "path"
    ALL = "all"


@dataclass(frozen=True, slots=True)
class InvalidationEvent:
    """Announcement that cached state was discarded.

    Attributes:
        kind: The rule that ran.
        path: The affected path, or None when everything was cleared.
    """

    kind: InvalidationKind
    path: str | None = None


type InvalidationListener = Callable[[InvalidationEvent], None]


@final
class InvalidationChannel:
    """Publish/subscribe channel for invalidation events.

    Listeners run synchronously in subscription order. A listener that
    raises is logged and does not stop delivery to the others.
    """

    __slots__ = ("_listeners", "_logger")

    def __init__(self, logger: "FilteringBoundLogger | None" = None) -> None:  # noqa: UP037
        self._listeners: list[InvalidationListener] = []
        self._logger = logger if logger is not None else create_null_logger()

    def subscribe(self, listener: InvalidationListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: InvalidationEvent) -> None:
        """Deliver ``event`` to every current listener."""
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                self._logger.exception(
                    "invalidation_listener_failed", kind=event.kind, path=event.path
                )

    def __len__(self) -> int:
        return len(self._listeners)


@final
class CacheManager:
    """Stores parsed operation results per category.

    Each instance owns its own maps and channel; nothing is shared between
    instances.

    Args:
        logger: Logger for invalidation events.
        channel: Channel to announce on (a new one by default).
    """

    __slots__ = (
        "_cleared_at",
        "_entries",
        "_generation",
        "_key_marks",
        "_logger",
        "_prefix_marks",
        "_tracked_marks",
        "channel",
    )

    def __init__(
        self,
        *,
        logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
        channel: InvalidationChannel | None = None,
    ) -> None:
        self._logger = logger if logger is not None else create_null_logger()
        self.channel = channel if channel is not None else InvalidationChannel(self._logger)
        self._entries: dict[CacheCategory, dict[CacheKey, Any]] = {
            category: {} for category in CacheCategory
        }
        # Generation of the most recent invalidation touching each scope.
        self._generation: int = 0
        self._cleared_at: int = 0
        self._key_marks: dict[CacheKey, int] = {}
        self._tracked_marks: dict[str, int] = {}
        self._prefix_marks: dict[CacheCategory, dict[str, int]] = {
            category: {} for category in CacheCategory
        }

    def get(self, key: CacheKey) -> Any:  # pyright: ignore[reportExplicitAny]
        """Return the cached value for ``key``, or None on a miss."""
        return self._entries[key.category].get(key)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, CacheKey) and key in self._entries[key.category]

    @property
    def generation(self) -> int:
        """Counter advanced by every invalidation.

        Capture it before computing a value and pass it to ``set`` as
        ``since`` so a result computed across an invalidation is dropped.
        """
        return self._generation

    def is_stale(self, key: CacheKey, since: int) -> bool:
        """Return True if an invalidation covering ``key`` ran after ``since``."""
        if self._cleared_at > since or self._key_marks.get(key, 0) > since:
            return True
        if key.category is CacheCategory.TRACKED and self._tracked_marks.get(key.path, 0) > since:
            return True
        marks = self._prefix_marks[key.category]
        return any(
            marks.get(ancestor, 0) > since for ancestor in ancestors_until(key.path, None)
        )

    def set(
        self,
        key: CacheKey,
        value: Any,  # pyright: ignore[reportExplicitAny]
        *,
        since: int | None = None,
    ) -> bool:
        """Store ``value`` under ``key``, replacing any previous entry.

        Args:
            key: Entry key.
            value: Immutable value to store.
            since: Generation captured before ``value`` was computed. When an
                invalidation covering ``key`` has run since, nothing is stored.

        Returns:
            True if the value was stored.
        """
        if since is not None and self.is_stale(key, since):
            self._logger.debug(
                "cache_write_dropped", category=key.category, path=key.path, since=since
            )
            return False
        entries = self._entries[key.category]
        entries.pop(key, None)
        entries[key] = value
        return True

    def keys(self, category: CacheCategory) -> list[CacheKey]:
        """Return the keys currently cached in ``category``."""
        return list(self._entries[category])

    def size(self) -> int:
        """Return the total number of cached entries."""
        return sum(len(entries) for entries in self._entries.values())

    def subscribe(self, listener: InvalidationListener) -> Callable[[], None]:
        """Shortcut for ``channel.subscribe``."""
        return self.channel.subscribe(listener)

    # -------------------------------------------------------------------------
    # Invalidation
    # -------------------------------------------------------------------------

    def _advance(self) -> int:
        self._generation += 1
        return self._generation

    def invalidate_exact(self, key: CacheKey) -> bool:
        """Remove one entry.

        Returns:
            True if an entry was removed. The event fires only in that case.
        """
        self._key_marks[key] = self._advance()
        entries = self._entries[key.category]
        removed = key in entries
        if removed:
            del entries[key]
            self._logger.debug(
                "cache_invalidated_exact", category=key.category, path=key.path
            )
            self.channel.publish(InvalidationEvent(InvalidationKind.EXACT, key.path))
        return removed

    def _remove_matching(
        self, category: CacheCategory, predicate: Callable[[CacheKey], bool]
    ) -> int:
        entries = self._entries[category]
        doomed = [key for key in entries if predicate(key)]
        for key in doomed:
            del entries[key]
        return len(doomed)

    def invalidate_by_prefix(
        self, path_prefix: str, category: CacheCategory = CacheCategory.STATUS
    ) -> int:
        """Remove every entry in ``category`` at or beneath ``path_prefix``.

        Returns:
            Number of entries removed. The event fires only if any were.
        """
        self._prefix_marks[category][str(Path(path_prefix))] = self._advance()
        removed = self._remove_matching(
            category, lambda key: is_same_or_descendant(key.path, path_prefix)
        )
        if removed:
            self._logger.debug(
                "cache_invalidated_prefix",
                category=category,
                path=path_prefix,
                count=removed,
            )
            self.channel.publish(InvalidationEvent(InvalidationKind.PREFIX, path_prefix))
        return removed

    def invalidate_for_path(self, path: str, tree_root_bound: str | None) -> int:
        """Apply the mutation cascade for ``path``.

        Removes tracked-flag entries for the path and each ancestor up to and
        including ``tree_root_bound``, and log and status entries at or
        beneath the path. Always fires exactly one event.

        Returns:
            Number of entries removed.
        """
        chain = set(ancestors_until(path, tree_root_bound))
        mark = self._advance()
        for ancestor in chain:
            self._tracked_marks[ancestor] = mark
        self._prefix_marks[CacheCategory.LOG][str(Path(path))] = mark
        self._prefix_marks[CacheCategory.STATUS][str(Path(path))] = mark
        removed = self._remove_matching(CacheCategory.TRACKED, lambda key: key.path in chain)
        removed += self._remove_matching(
            CacheCategory.LOG, lambda key: is_same_or_descendant(key.path, path)
        )
        removed += self._remove_matching(
            CacheCategory.STATUS, lambda key: is_same_or_descendant(key.path, path)
        )
        self._logger.debug(
            "cache_invalidated_path", path=path, bound=tree_root_bound, count=removed
        )
        self.channel.publish(InvalidationEvent(InvalidationKind.PATH, path))
        return removed

    def clear_all(self) -> None:
        """Empty every category and fire one event."""
        count = self.size()
        for entries in self._entries.values():
            entries.clear()
        # Older marks are subsumed by the clear.
        self._cleared_at = self._advance()
        self._key_marks.clear()
        self._tracked_marks.clear()
        for marks in self._prefix_marks.values():
            marks.clear()
        self._logger.debug("cache_cleared", count=count)
        self.channel.publish(InvalidationEvent(InvalidationKind.ALL))
