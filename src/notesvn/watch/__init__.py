"""Filesystem watching for tracked trees."""

from ._watcher import (
    WatchFilter,
    affected_subscriptions,
    apply_changes,
    build_watch_filter,
    format_change,
    watch_tree,
)

__all__ = [
    "WatchFilter",
    "affected_subscriptions",
    "apply_changes",
    "build_watch_filter",
    "format_change",
    "watch_tree",
]
