"""Path resolution for tracked trees.

A tracked tree is a directory containing a reserved control marker
directory (``.svn`` by default). Nothing here is cached; callers cache what
they derive from it.
"""

import os
from pathlib import Path

from notesvn.exceptions import ConfigurationError

DEFAULT_MARKER = ".svn"


def normalize_path(path: Path | str) -> str:
    """Return a canonical absolute string form of ``path``.

    Symlinks are not resolved, only ``.``/``..`` segments are collapsed.
    """
    return os.path.normpath(os.path.abspath(path))


def is_same_or_descendant(path: str, prefix: str) -> bool:
    """Whether ``path`` equals ``prefix`` or lies beneath it.

    Matching is segment-aware: ``/v/a`` matches ``/v/a/x`` but not ``/v/ab``.
    """
    if path == prefix:
        return True
    base = prefix if prefix.endswith(os.sep) else prefix + os.sep
    return path.startswith(base)


def ancestors_until(path: str, bound: str | None) -> list[str]:
    """Return ``path`` and its ancestors, nearest first.

    The walk stops after ``bound`` (inclusive). With no bound, or a bound
    that is not an ancestor, it runs to the filesystem root.
    """
    chain = [path]
    current = Path(path)
    if bound is not None and current == Path(bound):
        return chain
    for parent in current.parents:
        chain.append(str(parent))
        if bound is not None and str(parent) == bound:
            break
    return chain


class PathResolver:
    """Resolves note paths and locates enclosing tracked-tree roots.

    Args:
        root: Directory relative paths resolve against, or None when
            unconfigured.
        marker: Name of the control directory identifying a tree root.
    """

    __slots__ = ("marker", "root")

    def __init__(self, root: Path | str | None = None, marker: str = DEFAULT_MARKER) -> None:
        self.root: str | None = normalize_path(root) if root else None
        self.marker: str = marker

    def resolve_absolute_path(self, path: Path | str) -> str:
        """Resolve a tree-relative path to a canonical absolute path.

        Absolute inputs are normalized and returned without consulting the
        configured root.

        Raises:
            ConfigurationError: If ``path`` is relative and no root is
                configured.
        """
        if os.path.isabs(path):
            return normalize_path(path)
        if self.root is None:
            msg = f"Cannot resolve relative path {str(path)!r}: no tree root configured"
            raise ConfigurationError(msg)
        return normalize_path(os.path.join(self.root, path))

    def find_tracked_tree_root(self, path: Path | str) -> str | None:
        """Find the nearest ancestor directory containing the marker.

        The search starts at ``path`` itself when it is an existing directory
        and at its parent otherwise, then moves up one level at a time.

        Returns:
            The root directory, or None if the filesystem root is reached.
        """
        current = Path(self.resolve_absolute_path(path))
        if not current.is_dir():
            current = current.parent

        while True:
            if (current / self.marker).is_dir():
                return str(current)
            if current.parent == current:
                return None
            current = current.parent

    def is_in_tracked_tree(self, path: Path | str) -> bool:
        """Whether any ancestor of ``path`` is a tracked-tree root."""
        return self.find_tracked_tree_root(path) is not None
