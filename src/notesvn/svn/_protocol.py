"""Command executor protocol."""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ._models import CommandOutput


@runtime_checkable
class CommandExecutorProtocol(Protocol):
    """Runs one external client invocation per call.

    Implementations raise CommandExecutionError (or a subclass) on non-zero
    exit, timeout, or a missing binary, and never pool processes.
    """

    async def run(
        self,
        argv: Sequence[str],
        cwd: str | None = None,
        timeout: float | None = None,
    ) -> CommandOutput:
        """Run ``argv`` in ``cwd`` and return its captured output."""
        ...
