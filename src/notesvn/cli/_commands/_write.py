# pyright: reportUnusedCallResult=false, reportUnusedFunction=false
# ruff: noqa: FBT002
"""Mutating commands: add, remove, move, commit, update, revert, checkout, create-repo."""

from typing import Annotated

from cyclopts import Parameter

from notesvn.cli._shared import print_result, resolve_cli_path, run_with_aggregator
from notesvn.svn import DataAggregator, OperationResult


def _resolve(paths: list[str]) -> list[str]:
    return [resolve_cli_path(path) for path in paths]


def add(
    *paths: str,
    parents: Annotated[bool, Parameter(help="Also add unversioned parent directories")] = False,
) -> None:
    """Schedule files for addition

    Args:
        paths: Files or directories to add.
        parents: Add unversioned parent directories first.
    """
    targets = _resolve(list(paths))

    async def run(aggregator: DataAggregator) -> OperationResult:
        return await aggregator.add(targets, add_parents=parents)

    print_result(run_with_aggregator(run), action="add")


def remove(
    *paths: str,
    keep_local: Annotated[bool, Parameter(help="Keep the working file on disk")] = False,
) -> None:
    """Schedule files for deletion

    Args:
        paths: Files or directories to remove.
        keep_local: Stop tracking without deleting the working file.
    """
    targets = _resolve(list(paths))

    async def run(aggregator: DataAggregator) -> OperationResult:
        return await aggregator.remove(targets, keep_local=keep_local)

    print_result(run_with_aggregator(run), action="remove")


def move(
    source: str,
    destination: str,
    *,
    force: Annotated[bool, Parameter(help="Move even with local modifications")] = False,
) -> None:
    """Move or rename a file under version control

    Args:
        source: Existing path.
        destination: New path.
        force: Pass --force to the client.
    """
    src, dst = resolve_cli_path(source), resolve_cli_path(destination)

    async def run(aggregator: DataAggregator) -> OperationResult:
        return await aggregator.move(src, dst, force=force)

    print_result(run_with_aggregator(run), action="move")


def commit(
    *paths: str,
    message: Annotated[str, Parameter(name=["--message", "-m"])],
) -> None:
    """Commit files, adding them and their parents when needed

    Args:
        paths: Files or directories to commit.
        message: Commit message.
    """
    targets = _resolve(list(paths))

    async def run(aggregator: DataAggregator) -> OperationResult:
        return await aggregator.commit(targets, message)

    print_result(run_with_aggregator(run), action="commit")


def update(
    *paths: str,
    revision: Annotated[int | None, Parameter(name=["--revision", "-r"])] = None,
) -> None:
    """Update files to HEAD or to a revision

    Args:
        paths: Files or directories to update.
        revision: Update a single path to this revision instead of HEAD.
    """
    targets = _resolve(list(paths) or ["."])

    async def run(aggregator: DataAggregator) -> OperationResult:
        if revision is None:
            return await aggregator.update(targets)
        if len(targets) != 1:
            msg = "--revision takes exactly one path"
            raise ValueError(msg)
        return await aggregator.update_to_revision(targets[0], revision)

    print_result(run_with_aggregator(run), action="update")


def revert(*paths: str) -> None:
    """Discard local changes

    Args:
        paths: Files or directories to revert.
    """
    targets = _resolve(list(paths))

    async def run(aggregator: DataAggregator) -> OperationResult:
        return await aggregator.revert(targets)

    print_result(run_with_aggregator(run), action="revert")


def checkout(
    path: str,
    *,
    revision: Annotated[int, Parameter(name=["--revision", "-r"])],
) -> None:
    """Discard local changes and bring a file to a revision

    Args:
        path: Tracked file.
        revision: Revision to check out.
    """
    target = resolve_cli_path(path)

    async def run(aggregator: DataAggregator) -> OperationResult:
        return await aggregator.checkout_revision(target, revision)

    print_result(run_with_aggregator(run), action="checkout")


def create_repo(name: str) -> None:
    """Create a repository beside the tracked tree

    Args:
        name: Repository name; created as a hidden directory under the root.
    """

    async def run(aggregator: DataAggregator) -> OperationResult:
        return await aggregator.create_repository(name)

    print_result(run_with_aggregator(run), action="create-repo")
