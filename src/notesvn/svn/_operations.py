"""Logical version-control operations.

Each read follows resolve -> cache lookup -> execute on miss -> parse ->
cache. Each write executes, then applies the invalidation cascade for every
path it touched. Business-rule sequencing (parents before children, update
before a retried commit) is expressed as plain sequential awaits.
"""

import dataclasses
import os
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, final
from urllib.parse import unquote, urlparse

import anyio

from notesvn.config import ClientConfig
from notesvn.exceptions import (
    CommandExecutionError,
    CommandTimeoutError,
    ConfigurationError,
    ConflictError,
    NotInTrackedTreeError,
)
from notesvn.utils._logging import create_null_logger

from ._cache import CacheManager
from ._models import (
    BlameEntry,
    CacheCategory,
    CacheKey,
    CommandOutput,
    InfoRecord,
    LogEntry,
    OperationResult,
    StatusCode,
    StatusEntry,
)
from ._parser import (
    has_conflict_markers,
    parse_blame_xml,
    parse_committed_revision,
    parse_info_xml,
    parse_list_size_xml,
    parse_log_xml,
    parse_properties_xml,
    parse_rev_size,
    parse_status_lines,
    parse_update_conflicts,
    parse_updated_revision,
    parse_verbose_status_lines,
)
from ._paths import PathResolver, ancestors_until, is_same_or_descendant, normalize_path
from ._protocol import CommandExecutorProtocol

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

# =============================================================================
# stderr classification
# =============================================================================

_SOFT_FAILURE_MARKERS = (
    "node not found",
    "W155010",
    "E155010",
    "not under version control",
    "E200005",
    "path not found",
    "E160013",
    "E200009",
    "was not found",
)

_OUT_OF_DATE_MARKERS = (
    "out of date",
    "out-of-date",
    "E155011",
    "E160028",
    "E160024",
    "E170004",
)

_ALREADY_VERSIONED_MARKERS = (
    "already under version control",
    "E150002",
    "W150002",
)


def _contains_any(text: str, markers: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(marker.lower() in lowered for marker in markers)


def is_soft_failure(stderr: str) -> bool:
    """Whether stderr means "nothing here" rather than a real failure."""
    return _contains_any(stderr, _SOFT_FAILURE_MARKERS)


def is_out_of_date(stderr: str) -> bool:
    """Whether stderr reports a commit rejected as out of date."""
    return _contains_any(stderr, _OUT_OF_DATE_MARKERS)


def is_already_versioned(stderr: str) -> bool:
    """Whether stderr reports an add of an already versioned path."""
    return _contains_any(stderr, _ALREADY_VERSIONED_MARKERS)


def _soft(error: CommandExecutionError) -> bool:
    return not isinstance(error, CommandTimeoutError) and is_soft_failure(error.stderr)


def _update_conflicts(stdout: str, targets: Sequence[str]) -> list[str]:
    """Return conflicted paths from update output.

    When the summary reports conflicts the per-path lines do not name, every
    target is treated as conflicted.
    """
    conflicts = parse_update_conflicts(stdout)
    if not conflicts and has_conflict_markers(stdout):
        return list(targets)
    return conflicts


def repository_path_from_url(url: str) -> str | None:
    """Return the local repository directory for a ``file://`` root URL."""
    parsed = urlparse(url)
    if parsed.scheme != "file":
        return None
    path = unquote(parsed.path)
    # file:///C:/repo -> C:/repo
    if len(path) > 2 and path[0] == "/" and path[2] == ":":
        path = path[1:]
    return os.path.normpath(path) if path else None


def validate_repository_name(name: str) -> str:
    """Return the bare repository name, without leading dots.

    Raises:
        ValueError: If the name is empty or contains a path separator.
    """
    bare = name.strip().lstrip(".")
    if not bare:
        msg = "Repository name must not be empty"
        raise ValueError(msg)
    if "/" in bare or "\\" in bare or os.sep in bare:
        msg = f"Repository name {name!r} must not contain path separators"
        raise ValueError(msg)
    return bare


@final
class OperationManager:
    """Façade over resolver, cache, executor and parser.

    Args:
        resolver: Path resolver for the configured tree.
        executor: Runs client commands.
        cache: Result cache shared with the data aggregator.
        client: Client binaries and lookup timeouts.
        history_limit: Default log entry limit.
        enrich_sizes: Whether log entries get size lookups.
        logger: Logger for operation events.
    """

    __slots__ = (
        "_logger",
        "cache",
        "client",
        "enrich_sizes",
        "executor",
        "history_limit",
        "resolver",
    )

    def __init__(
        self,
        resolver: PathResolver,
        executor: CommandExecutorProtocol,
        cache: CacheManager,
        *,
        client: ClientConfig | None = None,
        history_limit: int = 50,
        enrich_sizes: bool = True,
        logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
    ) -> None:
        self.resolver = resolver
        self.executor = executor
        self.cache = cache
        self.client = client if client is not None else ClientConfig()
        self.history_limit = history_limit
        self.enrich_sizes = enrich_sizes
        self._logger = logger if logger is not None else create_null_logger()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _argv(self, subcommand: str, *args: str) -> list[str]:
        return [self.client.binary, subcommand, "--non-interactive", *args]

    async def _run(
        self, argv: Sequence[str], cwd: str | None, timeout: float | None = None
    ) -> CommandOutput:
        return await self.executor.run(argv, cwd=cwd, timeout=timeout)

    def _require_root(self, absolute_path: str) -> str:
        root = self.resolver.find_tracked_tree_root(absolute_path)
        if root is None:
            raise NotInTrackedTreeError(absolute_path)
        return root

    @staticmethod
    def _entry_for(
        entries: Sequence[StatusEntry], absolute_path: str, root: str
    ) -> StatusEntry | None:
        for entry in entries:
            if normalize_path(os.path.join(root, entry.path)) == absolute_path:
                return entry
        return entries[0] if len(entries) == 1 else None

    def _parent_chain(self, absolute_path: str, root: str) -> list[str]:
        """Directories strictly between ``root`` and the path, parent-first."""
        parent = os.path.dirname(absolute_path)
        if parent == root or not is_same_or_descendant(parent, root):
            return []
        chain = ancestors_until(parent, root)
        return [directory for directory in reversed(chain) if directory != root]

    def invalidate_path(self, path: Path | str) -> None:
        """Apply the invalidation cascade for ``path`` within its tree."""
        absolute = self.resolver.resolve_absolute_path(path)
        bound = self.resolver.find_tracked_tree_root(absolute) or self.resolver.root
        _ = self.cache.invalidate_for_path(absolute, bound)

    def _invalidate_with_parent(self, absolute_path: str) -> None:
        self.invalidate_path(absolute_path)
        parent = os.path.dirname(absolute_path)
        if parent and parent != absolute_path:
            self.invalidate_path(parent)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def is_in_tracked_tree(self, path: Path | str) -> bool:
        """Whether a tracked-tree root encloses ``path``."""
        return self.resolver.is_in_tracked_tree(path)

    async def get_status(
        self,
        path: Path | str | None = None,
        *,
        depth: str | None = None,
        verbose: bool = False,
        refresh: bool = False,
    ) -> list[StatusEntry]:
        """Return status entries for ``path`` (the configured root if None).

        "Not found" style failures yield an empty list. With ``refresh`` the
        cached value is ignored and replaced.

        Raises:
            ConfigurationError: If no path is given and no root is configured.
            NotInTrackedTreeError: If the path is outside any tracked tree.
            CommandExecutionError: On any other client failure.
        """
        if path is None:
            if self.resolver.root is None:
                msg = "No tree root configured"
                raise ConfigurationError(msg)
            path = self.resolver.root
        absolute = self.resolver.resolve_absolute_path(path)
        key = CacheKey.build(CacheCategory.STATUS, absolute, depth=depth, verbose=verbose or None)

        cached: tuple[StatusEntry, ...] | None = None if refresh else self.cache.get(key)
        if cached is not None:
            self._logger.debug("status_cache_hit", path=absolute)
            return list(cached)

        generation = self.cache.generation
        root = self._require_root(absolute)
        args = [f"--depth={depth}"] if depth else []
        if verbose:
            args.append("--verbose")
        try:
            output = await self._run(self._argv("status", *args, absolute), root)
        except CommandExecutionError as e:
            if not _soft(e):
                raise
            self._logger.debug("status_soft_failure", path=absolute, stderr=e.stderr.strip())
            entries: tuple[StatusEntry, ...] = ()
        else:
            parse = parse_verbose_status_lines if verbose else parse_status_lines
            entries = tuple(parse(output.stdout))

        self.cache.set(key, entries, since=generation)
        self._logger.debug("status_fetched", path=absolute, count=len(entries))
        return list(entries)

    async def get_info(self, path: Path | str) -> InfoRecord | None:
        """Return working-copy info, or None if the path is not versioned.

        Raises:
            CommandExecutionError: On failures other than "not found".
        """
        absolute = self.resolver.resolve_absolute_path(path)
        root = self.resolver.find_tracked_tree_root(absolute)
        if root is None:
            return None
        try:
            output = await self._run(self._argv("info", "--xml", absolute), root)
        except CommandExecutionError as e:
            if not _soft(e):
                raise
            self._logger.debug("info_soft_failure", path=absolute)
            return None
        return parse_info_xml(output.stdout)

    async def get_head_revision(self, path: Path | str) -> int | None:
        """Return the repository HEAD revision for the tree holding ``path``.

        Failures are logged and yield None.
        """
        absolute = self.resolver.resolve_absolute_path(path)
        root = self.resolver.find_tracked_tree_root(absolute)
        if root is None:
            return None
        try:
            output = await self._run(self._argv("info", "--xml", "-r", "HEAD", root), root)
        except CommandExecutionError as e:
            self._logger.debug("head_revision_failed", root=root, error=str(e))
            return None
        info = parse_info_xml(output.stdout)
        return info.working_revision if info is not None else None

    async def is_tracked(self, path: Path | str, *, recheck: bool = False) -> bool:
        """Whether ``path`` itself is under version control.

        A populated info URL decides. Otherwise a status entry with any code
        but unversioned means tracked. When both are empty, one verbose
        depth-empty status settles the answer. The result is cached.

        Args:
            path: Path to test.
            recheck: Ignore any cached answer and overwrite it.
        """
        absolute = self.resolver.resolve_absolute_path(path)
        key = CacheKey.build(CacheCategory.TRACKED, absolute)
        if not recheck:
            cached: bool | None = self.cache.get(key)
            if cached is not None:
                return cached

        root = self.resolver.find_tracked_tree_root(absolute)
        if root is None:
            self.cache.set(key, False)
            return False

        generation = self.cache.generation
        tracked = await self._derive_tracked(absolute, root, fresh=recheck)
        self.cache.set(key, tracked, since=generation)
        self._logger.debug("tracked_resolved", path=absolute, tracked=tracked, recheck=recheck)
        return tracked

    async def _derive_tracked(self, absolute: str, root: str, *, fresh: bool) -> bool:
        try:
            info = await self.get_info(absolute)
        except CommandExecutionError as e:
            self._logger.debug("tracked_info_failed", path=absolute, error=str(e))
            info = None
        if info is not None and info.url:
            return True

        try:
            entries = await self.get_status(absolute, refresh=fresh)
        except CommandExecutionError as e:
            self._logger.debug("tracked_status_failed", path=absolute, error=str(e))
            entries = []
        entry = self._entry_for(entries, absolute, root)
        if entry is not None:
            return entry.status_code != StatusCode.UNVERSIONED

        # Ambiguous: no info and no status line. Plain status prints nothing
        # for unmodified files, verbose status lists them.
        self._logger.debug("tracked_ambiguous_recheck", path=absolute)
        try:
            output = await self._run(
                self._argv("status", "--verbose", "--depth=empty", absolute), root
            )
        except CommandExecutionError as e:
            if not _soft(e):
                self._logger.debug("tracked_recheck_failed", path=absolute, error=str(e))
            return False
        entry = self._entry_for(parse_verbose_status_lines(output.stdout), absolute, root)
        return entry is not None and entry.status_code != StatusCode.UNVERSIONED

    async def get_log(self, path: Path | str, limit: int | None = None) -> list[LogEntry]:
        """Return revision history for ``path``, newest first.

        When the working copy sits at a revision older than HEAD the limit
        is ignored and the full range is fetched. Entries are then enriched
        with size figures; failed or slow lookups leave those fields None.

        Raises:
            NotInTrackedTreeError: If the path is outside any tracked tree.
            CommandExecutionError: On failures other than "not found".
        """
        absolute = self.resolver.resolve_absolute_path(path)
        root = self._require_root(absolute)
        effective_limit = limit if limit is not None else self.history_limit
        generation = self.cache.generation

        info = await self.get_info(absolute)
        head = await self.get_head_revision(root)
        working = info.working_revision if info is not None else None
        pinned = working is not None and head is not None and working < head

        key = CacheKey.build(
            CacheCategory.LOG,
            absolute,
            limit=None if pinned else effective_limit,
            pinned=pinned,
        )
        cached: tuple[LogEntry, ...] | None = self.cache.get(key)
        if cached is not None:
            self._logger.debug("log_cache_hit", path=absolute)
            return list(cached)

        args = ["--xml", "--verbose"]
        if pinned:
            self._logger.info("log_full_range", path=absolute, working=working, head=head)
            args += ["-r", "HEAD:1"]
        elif effective_limit > 0:
            args += ["--limit", str(effective_limit)]

        try:
            output = await self._run(self._argv("log", *args, absolute), root)
        except CommandExecutionError as e:
            if not _soft(e):
                raise
            self._logger.debug("log_soft_failure", path=absolute)
            return []

        entries = parse_log_xml(output.stdout)
        if self.enrich_sizes and entries:
            repository = (
                repository_path_from_url(info.repository_root_url)
                if info is not None and info.repository_root_url
                else None
            )
            entries = await self._enrich_sizes(entries, absolute, root, repository)

        self.cache.set(key, tuple(entries), since=generation)
        self._logger.debug("log_fetched", path=absolute, count=len(entries), pinned=pinned)
        return entries

    async def _enrich_sizes(
        self,
        entries: list[LogEntry],
        absolute: str,
        root: str,
        repository: str | None,
    ) -> list[LogEntry]:
        file_sizes: dict[int, int] = {}
        repo_sizes: dict[int, int] = {}
        limiter = anyio.CapacityLimiter(self.client.max_parallel_lookups)

        async def file_size(revision: int) -> None:
            async with limiter:
                try:
                    output = await self._run(
                        self._argv("list", "--xml", "-r", str(revision), absolute),
                        root,
                        timeout=self.client.lookup_timeout,
                    )
                except CommandExecutionError as e:
                    self._logger.debug("file_size_lookup_failed", revision=revision, error=str(e))
                    return
            size = parse_list_size_xml(output.stdout)
            if size is not None:
                file_sizes[revision] = size

        async def repo_size(revision: int, repository_path: str) -> None:
            async with limiter:
                try:
                    output = await self._run(
                        [
                            self.client.admin_binary,
                            "rev-size",
                            repository_path,
                            "-r",
                            str(revision),
                            "-q",
                        ],
                        None,
                        timeout=self.client.repo_size_timeout,
                    )
                except CommandExecutionError as e:
                    self._logger.debug("repo_size_lookup_failed", revision=revision, error=str(e))
                    return
            size = parse_rev_size(output.stdout)
            if size is not None:
                repo_sizes[revision] = size

        async with anyio.create_task_group() as tg:
            for entry in entries:
                tg.start_soon(file_size, entry.revision)
                if repository is not None:
                    tg.start_soon(repo_size, entry.revision, repository)

        self._logger.debug(
            "log_enriched",
            path=absolute,
            count=len(entries),
            file_sizes=len(file_sizes),
            repo_sizes=len(repo_sizes),
        )
        return [
            dataclasses.replace(
                entry,
                file_size_bytes=file_sizes.get(entry.revision),
                repository_storage_bytes=repo_sizes.get(entry.revision),
            )
            for entry in entries
        ]

    async def get_diff(
        self,
        path: Path | str,
        revision: int | str | None = None,
        revision_to: int | str | None = None,
    ) -> str:
        """Return unified diff text for ``path``.

        With no revisions, diffs local edits against BASE. With one, diffs
        against that revision. With both, diffs the range.
        """
        absolute = self.resolver.resolve_absolute_path(path)
        root = self._require_root(absolute)
        args: list[str] = []
        if revision is not None and revision_to is not None:
            args += ["-r", f"{revision}:{revision_to}"]
        elif revision is not None:
            args += ["-r", str(revision)]
        output = await self._run(self._argv("diff", *args, absolute), root)
        return output.stdout

    async def get_blame(
        self, path: Path | str, revision: int | str | None = None
    ) -> list[BlameEntry]:
        """Return per-line authorship for ``path``."""
        absolute = self.resolver.resolve_absolute_path(path)
        root = self._require_root(absolute)
        args = ["--xml"]
        if revision is not None:
            args += ["-r", str(revision)]
        output = await self._run(self._argv("blame", *args, absolute), root)
        return parse_blame_xml(output.stdout)

    async def get_properties(self, path: Path | str) -> dict[str, str]:
        """Return versioned properties for ``path``.

        Any failure is logged and yields an empty mapping.
        """
        absolute = self.resolver.resolve_absolute_path(path)
        root = self.resolver.find_tracked_tree_root(absolute)
        if root is None:
            return {}
        try:
            output = await self._run(
                self._argv("proplist", "--verbose", "--xml", absolute), root
            )
        except CommandExecutionError as e:
            self._logger.warning("properties_lookup_failed", path=absolute, error=str(e))
            return {}
        return parse_properties_xml(output.stdout)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def _resolve_all(self, paths: Iterable[Path | str]) -> tuple[list[str], str]:
        absolute = [self.resolver.resolve_absolute_path(path) for path in paths]
        if not absolute:
            msg = "At least one path is required"
            raise ValueError(msg)
        roots = [self._require_root(path) for path in absolute]
        return absolute, roots[0]

    async def _add_directory(self, directory: str, root: str) -> str:
        try:
            output = await self._run(self._argv("add", "--depth=empty", directory), root)
        except CommandExecutionError as e:
            if not is_already_versioned(e.stderr):
                raise
            return e.stderr
        finally:
            self.invalidate_path(directory)
        self._logger.info("parent_directory_added", path=directory)
        return output.stdout

    async def add(
        self, paths: Sequence[Path | str], *, add_parents: bool = False
    ) -> OperationResult:
        """Schedule ``paths`` for addition.

        With ``add_parents``, each untracked ancestor directory (tested with
        an info call) is first added non-recursively, parent-first.
        Already-versioned targets are not an error.
        """
        absolute, root = self._resolve_all(paths)
        outputs: list[str] = []

        if add_parents:
            added: set[str] = set()
            for target in absolute:
                target_root = self._require_root(target)
                for directory in self._parent_chain(target, target_root):
                    if directory in added:
                        continue
                    try:
                        info = await self.get_info(directory)
                    except CommandExecutionError:
                        info = None
                    if info is None:
                        outputs.append(await self._add_directory(directory, target_root))
                    added.add(directory)

        try:
            output = await self._run(self._argv("add", *absolute), root)
            outputs.append(output.stdout)
        except CommandExecutionError as e:
            if not is_already_versioned(e.stderr):
                raise
            outputs.append(e.stderr)
        finally:
            for target in absolute:
                self._invalidate_with_parent(target)

        self._logger.info("paths_added", count=len(absolute))
        return OperationResult(success=True, output="".join(outputs))

    async def remove(
        self, paths: Sequence[Path | str], *, keep_local: bool = False
    ) -> OperationResult:
        """Schedule ``paths`` for deletion.

        Caches are invalidated whether or not the client succeeds.
        """
        absolute, root = self._resolve_all(paths)
        args = ["--keep-local", *absolute] if keep_local else absolute
        try:
            output = await self._run(self._argv("delete", *args), root)
        finally:
            for target in absolute:
                self._invalidate_with_parent(target)
        self._logger.info("paths_removed", count=len(absolute), keep_local=keep_local)
        return OperationResult(success=True, output=output.stdout)

    async def move(
        self, source: Path | str, destination: Path | str, *, force: bool = False
    ) -> OperationResult:
        """Move ``source`` to ``destination`` under version control.

        Returns a skipped outcome, without running anything, when the source
        is outside every tracked tree. Source, destination and both parent
        directories are invalidated whether or not the client succeeds.
        """
        source_abs = self.resolver.resolve_absolute_path(source)
        dest_abs = self.resolver.resolve_absolute_path(destination)
        root = self.resolver.find_tracked_tree_root(source_abs)
        if root is None:
            self._logger.info("move_skipped", source=source_abs)
            return OperationResult(
                success=False,
                skipped=True,
                message=f"Source {source_abs} is not in a tracked tree",
            )

        args = ["--force"] if force else []
        try:
            output = await self._run(
                self._argv("move", *args, "--parents", source_abs, dest_abs), root
            )
        finally:
            for target in dict.fromkeys(
                (source_abs, dest_abs, os.path.dirname(source_abs), os.path.dirname(dest_abs))
            ):
                self.invalidate_path(target)
        self._logger.info("path_moved", source=source_abs, destination=dest_abs)
        return OperationResult(success=True, output=output.stdout)

    async def _pending_parents(self, target: str, root: str) -> list[str]:
        """Ancestors that must be committed before ``target``, parent-first.

        Unversioned ancestors are added on the way.
        """
        pending: list[str] = []
        for directory in self._parent_chain(target, root):
            entries = await self.get_status(directory, depth="empty")
            entry = self._entry_for(entries, directory, root)
            if entry is not None and entry.status_code == StatusCode.ADDED:
                pending.append(directory)
            elif entry is not None and entry.status_code == StatusCode.UNVERSIONED:
                _ = await self._add_directory(directory, root)
                pending.append(directory)
            elif entry is None:
                try:
                    info = await self.get_info(directory)
                except CommandExecutionError:
                    info = None
                if info is None:
                    _ = await self._add_directory(directory, root)
                    pending.append(directory)
        return pending

    async def _commit_once(self, targets: Sequence[str], message: str, root: str) -> str:
        output = await self._run(self._argv("commit", "-m", message, *targets), root)
        return output.stdout

    async def commit(self, paths: Sequence[Path | str], message: str) -> OperationResult:
        """Commit ``paths`` with ``message``.

        Sequence: add untracked targets (already-added is fine), commit
        pending ancestor directories parent-first, commit the targets. An
        out-of-date rejection triggers exactly one update and one retry;
        if the update leaves a conflict the retry is abandoned.

        Raises:
            ConflictError: If the post-update status shows a conflict.
            CommandExecutionError: If the commit (or its retry) fails.
        """
        if not paths:
            return OperationResult(success=False, skipped=True, message="Nothing to commit")
        targets, root = self._resolve_all(paths)

        pending: dict[str, None] = {}
        for target in targets:
            for directory in await self._pending_parents(target, self._require_root(target)):
                pending.setdefault(directory)

        for target in targets:
            if not await self.is_tracked(target):
                try:
                    _ = await self._run(self._argv("add", target), root)
                except CommandExecutionError as e:
                    if not is_already_versioned(e.stderr):
                        raise
                self.invalidate_path(target)

        for directory in pending:
            _ = await self._run(
                self._argv("commit", "--depth=empty", "-m", message, directory), root
            )
            self.invalidate_path(directory)
            self._logger.info("parent_directory_committed", path=directory)

        try:
            try:
                output = await self._commit_once(targets, message, root)
            except CommandExecutionError as e:
                if not is_out_of_date(e.stderr):
                    raise
                self._logger.info("commit_out_of_date", paths=targets)
                output = await self._update_then_retry(targets, message, root)
        finally:
            for target in targets:
                self._invalidate_with_parent(target)

        revision = parse_committed_revision(output)
        self._logger.info("commit_succeeded", paths=targets, revision=revision)
        return OperationResult(success=True, output=output, revision=revision)

    async def _update_then_retry(self, targets: Sequence[str], message: str, root: str) -> str:
        update = await self._run(self._argv("update", "--accept", "postpone", *targets), root)
        for target in targets:
            self.invalidate_path(target)

        conflicts = _update_conflicts(update.stdout, targets)
        for target in targets:
            entry = self._entry_for(await self.get_status(target), target, root)
            if entry is not None and entry.status_code == StatusCode.CONFLICTED:
                conflicts.append(target)
        if conflicts:
            self._logger.warning("commit_aborted_conflict", paths=conflicts)
            raise ConflictError(list(dict.fromkeys(conflicts)), update.stdout)

        self._logger.info("commit_retry_after_update", paths=list(targets))
        return await self._commit_once(targets, message, root)

    async def update(self, paths: Sequence[Path | str]) -> OperationResult:
        """Update ``paths`` to HEAD, postponing conflicts.

        Conflicts are reported on the outcome, not raised.
        """
        absolute, root = self._resolve_all(paths)
        try:
            output = await self._run(self._argv("update", "--accept", "postpone", *absolute), root)
        finally:
            for target in absolute:
                self.invalidate_path(target)
        conflicts = tuple(_update_conflicts(output.stdout, absolute))
        if conflicts:
            self._logger.warning("update_conflicts", paths=list(conflicts))
        return OperationResult(
            success=True,
            output=output.stdout,
            conflicts=conflicts,
            revision=parse_updated_revision(output.stdout),
        )

    async def update_to_revision(self, path: Path | str, revision: int | str) -> OperationResult:
        """Update ``path`` to ``revision``, postponing conflicts.

        Conflicts are reported on the outcome, not raised.
        """
        absolute = self.resolver.resolve_absolute_path(path)
        root = self._require_root(absolute)
        try:
            output = await self._run(
                self._argv("update", "-r", str(revision), "--accept", "postpone", absolute),
                root,
            )
        finally:
            self.invalidate_path(absolute)
        conflicts = tuple(_update_conflicts(output.stdout, [absolute]))
        if conflicts:
            self._logger.warning("update_conflicts", paths=list(conflicts), revision=str(revision))
        self._logger.info("updated_to_revision", path=absolute, revision=str(revision))
        return OperationResult(
            success=True,
            output=output.stdout,
            conflicts=conflicts,
            revision=parse_updated_revision(output.stdout),
        )

    async def revert(self, paths: Sequence[Path | str]) -> OperationResult:
        """Discard local edits to ``paths``."""
        absolute, root = self._resolve_all(paths)
        try:
            output = await self._run(self._argv("revert", *absolute), root)
        finally:
            for target in absolute:
                self.invalidate_path(target)
        self._logger.info("paths_reverted", count=len(absolute))
        return OperationResult(success=True, output=output.stdout)

    async def checkout_revision(self, path: Path | str, revision: int | str) -> OperationResult:
        """Revert local edits to ``path``, then update it to ``revision``.

        Raises:
            ConflictError: If the update reports conflicts.
        """
        _ = await self.revert([path])
        return (await self.update_to_revision(path, revision)).raise_for_conflicts()

    async def create_repository(self, name: str) -> OperationResult:
        """Create a repository at ``<root>/.<name>``.

        An existing directory is a successful, skipped outcome.

        Raises:
            ValueError: If the name is invalid.
            ConfigurationError: If no tree root is configured.
        """
        bare = validate_repository_name(name)
        if self.resolver.root is None:
            msg = "No tree root configured; cannot create a repository"
            raise ConfigurationError(msg)
        repository = Path(self.resolver.root) / f".{bare}"
        if repository.exists():
            self._logger.warning("repository_exists", path=str(repository))
            return OperationResult(
                success=True,
                skipped=True,
                message=f"Repository .{bare} already exists",
            )
        output = await self._run([self.client.admin_binary, "create", str(repository)], None)
        self._logger.info("repository_created", path=str(repository))
        return OperationResult(success=True, output=output.stdout or output.stderr)
