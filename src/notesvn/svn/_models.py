# ruff: noqa: TC003  # datetime needed at runtime for dataclass fields
"""Data models for the version-control core.

This module defines the immutable records produced by the output parser,
the composite cache key, operation outcomes, and the per-file snapshot
published by the data aggregator.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Self

from notesvn.exceptions import ConflictError


class StatusCode(StrEnum):
    """Status of a path relative to the last synchronized revision.

    Values are the single characters the client prints in the first
    status column.
    """

    MODIFIED = "M"
    ADDED = "A"
    DELETED = "D"
    REPLACED = "R"
    CONFLICTED = "C"
    UNVERSIONED = "?"
    MISSING = "!"
    IGNORED = "I"
    EXTERNAL = "X"
    NORMAL = " "

    @classmethod
    def from_char(cls, char: str) -> Self:
        """Map a status column character to a code.

        Unknown characters map to UNVERSIONED.
        """
        try:
            return cls(char)
        except ValueError:
            return cls.UNVERSIONED

    @property
    def is_local_change(self) -> bool:
        """Whether this code represents an uncommitted change."""
        return self in _LOCAL_CHANGE_CODES


_LOCAL_CHANGE_CODES = frozenset(
    {
        StatusCode.MODIFIED,
        StatusCode.ADDED,
        StatusCode.DELETED,
        StatusCode.REPLACED,
        StatusCode.CONFLICTED,
    }
)


class CacheCategory(StrEnum):
    """Categories of cached operation results."""

    STATUS = "status"
    TRACKED = "tracked"
    LOG = "log"


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """One line of status output.

    Attributes:
        path: Path exactly as printed by the client.
        status_code: Content status from the first column.
    """

    path: str
    status_code: StatusCode


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One revision in a path's history.

    Attributes:
        revision: Revision number.
        author: Committer name (empty when the client omits it).
        timestamp: Commit time, or None if absent or unparseable.
        message: Commit message.
        file_size_bytes: Size of the file at this revision, if looked up.
        repository_storage_bytes: Repository storage used by this
            revision, if looked up.
    """

    revision: int
    author: str = ""
    timestamp: datetime | None = None
    message: str = ""
    file_size_bytes: int | None = None
    repository_storage_bytes: int | None = None


@dataclass(frozen=True, slots=True)
class InfoRecord:
    """Working-copy information for one path.

    Attributes:
        url: Repository URL of the path.
        repository_root_url: Root URL of the repository.
        repository_uuid: Repository UUID.
        working_revision: Revision of the working copy node.
        last_changed_revision: Last revision in which the node changed.
        last_changed_author: Author of that revision.
        last_changed_date: Date of that revision.
    """

    url: str
    repository_root_url: str = ""
    repository_uuid: str = ""
    working_revision: int | None = None
    last_changed_revision: int | None = None
    last_changed_author: str = ""
    last_changed_date: datetime | None = None


@dataclass(frozen=True, slots=True)
class BlameEntry:
    """Authorship of one line.

    Attributes:
        line_number: 1-based line number.
        revision: Revision that last changed the line.
        author: Author of that revision.
        timestamp: Date of that revision.
    """

    line_number: int
    revision: int
    author: str = ""
    timestamp: datetime | None = None


@dataclass(frozen=True, slots=True)
class CommandOutput:
    """Captured output from one client invocation."""

    stdout: str
    stderr: str = ""
    exit_code: int = 0


@dataclass(frozen=True, slots=True)
class CacheKey:
    """Composite cache key.

    Options are stored as a sorted tuple of (name, value) pairs so two keys
    built from the same options in a different order compare equal.

    Attributes:
        category: Operation kind the entry belongs to.
        path: Canonical absolute path.
        options: Canonical option set.
    """

    category: CacheCategory
    path: str
    options: tuple[tuple[str, str], ...] = ()

    @classmethod
    def build(
        cls, category: CacheCategory, path: str, **options: object
    ) -> Self:
        """Build a key, canonicalizing the option set.

        Options whose value is None are dropped.
        """
        canonical = tuple(
            sorted((name, str(value)) for name, value in options.items() if value is not None)
        )
        return cls(category=category, path=path, options=canonical)


@dataclass(frozen=True, slots=True)
class OperationResult:
    """Outcome of a mutating operation.

    Attributes:
        success: Whether the operation completed.
        output: Combined client output.
        skipped: True when nothing was done (e.g. move outside a tree).
        message: Human-readable note for the caller.
        conflicts: Paths reported as conflicted.
        revision: Revision produced or reached, when the client reports one.
    """

    success: bool
    output: str = ""
    skipped: bool = False
    message: str | None = None
    conflicts: tuple[str, ...] = ()
    revision: int | None = None

    def raise_for_conflicts(self) -> Self:
        """Raise ConflictError if conflicts were reported.

        Returns:
            This result when there are no conflicts.

        Raises:
            ConflictError: If any path is conflicted.
        """
        if self.conflicts:
            raise ConflictError(self.conflicts, self.output)
        return self


@dataclass(frozen=True, slots=True)
class LoadOptions:
    """Which facts a snapshot load should gather.

    Attributes:
        include_status: Run a status lookup.
        include_info: Run an info lookup (tracked files only).
        include_history: Run a log lookup (tracked files only).
        history_limit: Maximum log entries; None uses the configured limit.
    """

    include_status: bool = True
    include_info: bool = True
    include_history: bool = True
    history_limit: int | None = None


@dataclass(frozen=True, slots=True)
class FileSnapshot:
    """Aggregated version-control view of one file at a point in time.

    Snapshots are replaced wholesale, never mutated after publication.

    Attributes:
        path: The path as requested by the caller.
        is_in_tracked_tree: Whether a tracked-tree root encloses the path.
        is_tracked: Whether the path itself is under version control.
        status: Status entries for the path.
        info: Working-copy info, if available.
        history: Revision history, newest first as the client reports it.
        last_update_time: Stamp taken when the snapshot was produced.
        is_loading: True for the placeholder published while loading.
        error: Error message if the load failed.
    """

    path: str
    last_update_time: float
    is_in_tracked_tree: bool = False
    is_tracked: bool = False
    status: tuple[StatusEntry, ...] = ()
    info: InfoRecord | None = None
    history: tuple[LogEntry, ...] = field(default=())
    is_loading: bool = False
    error: str | None = None

    @property
    def has_local_changes(self) -> bool:
        """Whether any status entry carries an uncommitted-change code."""
        return any(entry.status_code.is_local_change for entry in self.status)

    @property
    def current_revision(self) -> int | None:
        """Working revision from info, if known."""
        return self.info.working_revision if self.info is not None else None
