"""Gitignore-style pattern matching using pathspec.

Patterns decide which file changes inside a tracked tree are worth a cache
invalidation. Control directories and editor scratch files never are.
"""

from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathspec import PathSpec


DEFAULT_IGNORE_PATTERNS: frozenset[str] = frozenset(
    {
        ".svn/",
        ".git/",
        ".trash/",
        "*.swp",
        "*.tmp",
        "*~",
        ".DS_Store",
    }
)
"""Patterns ignored when watching a tree, regardless of ignore files."""

IGNORE_FILE_NAME = ".notesvnignore"


def load_gitignore_patterns(path: Path) -> list[str]:
    """Load patterns from a gitignore-format file.

    Comments (lines starting with #) and empty lines are filtered out.

    Returns:
        The patterns, or an empty list if the file doesn't exist.
    """
    if not path.is_file():
        return []

    patterns: list[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        patterns.append(stripped)
    return patterns


def collect_patterns(
    root: Path,
    *,
    marker: str = ".svn",
    include_defaults: bool = True,
    extra_patterns: Iterable[str] = (),
) -> list[str]:
    """Collect ignore patterns for a tracked tree.

    Gathers, in order: the defaults, the control marker directory, the
    tree's ``.notesvnignore``, and ``extra_patterns``. Duplicates are dropped
    while preserving order.
    """
    patterns: list[str] = []
    seen: set[str] = set()

    def add_patterns(new_patterns: Iterable[str]) -> None:
        for pattern in new_patterns:
            if pattern not in seen:
                seen.add(pattern)
                patterns.append(pattern)

    if include_defaults:
        add_patterns(sorted(DEFAULT_IGNORE_PATTERNS))
    add_patterns([f"{marker.strip('/')}/"])
    add_patterns(load_gitignore_patterns(root / IGNORE_FILE_NAME))
    add_patterns(extra_patterns)
    return patterns


def create_pathspec(patterns: Iterable[str]) -> "PathSpec":  # noqa: UP037
    """Create a gitignore-style PathSpec from ``patterns``."""
    from pathspec import PathSpec as PathSpecClass  # noqa: PLC0415
    from pathspec.patterns.gitwildmatch import GitWildMatchPattern  # noqa: PLC0415

    return PathSpecClass.from_lines(GitWildMatchPattern, patterns)


def matches_any(spec: "PathSpec", path: Path | str) -> bool:  # noqa: UP037
    """Whether ``path`` (relative to the watched root) is ignored."""
    return spec.match_file(str(path))
