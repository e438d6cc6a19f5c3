"""Fake command executor for testing.

This module provides a FakeCommandExecutor that implements
CommandExecutorProtocol with scripted responses, so operations and the
aggregator can be exercised without a client binary installed.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Self

import anyio

from notesvn.exceptions import CommandExecutionError

from ._models import CommandOutput


@dataclass(frozen=True, slots=True)
class FakeResponse:
    """One scripted reply.

    Attributes:
        stdout: Standard output to return.
        stderr: Standard error to return (or carry on the raised error).
        exit_code: Non-zero raises CommandExecutionError.
        contains: Only match calls whose joined argv contains this text.
        once: Discard the response after its first match.
    """

    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    contains: str | None = None
    once: bool = False

    def matches(self, command: str) -> bool:
        return self.contains is None or self.contains in command


@dataclass(slots=True)
class FakeCommandExecutor:
    """Scripted stand-in for the client.

    Responses are registered per subcommand (the second argv element) and
    tried in registration order; the first match wins. Calls with no
    matching response succeed with empty output. Every call is recorded.

    Example:
        >>> fake = FakeCommandExecutor()
        >>> _ = fake.respond("status", "M       notes/a.md")
        >>> _ = fake.respond("commit", stderr="E155011: out of date", exit_code=1, once=True)
        >>> fake.count("commit")
        0
    """

    latency: float = 0.0
    responses: dict[str, list[FakeResponse]] = field(default_factory=dict)
    calls: list[tuple[str, ...]] = field(default_factory=list)

    def respond(
        self,
        subcommand: str,
        stdout: str = "",
        *,
        stderr: str = "",
        exit_code: int = 0,
        contains: str | None = None,
        once: bool = False,
    ) -> Self:
        """Register a response for ``subcommand``."""
        self.responses.setdefault(subcommand, []).append(
            FakeResponse(
                stdout=stdout,
                stderr=stderr,
                exit_code=exit_code,
                contains=contains,
                once=once,
            )
        )
        return self

    def reset(self, subcommand: str | None = None) -> None:
        """Drop scripted responses for one subcommand, or all of them."""
        if subcommand is None:
            self.responses.clear()
        else:
            _ = self.responses.pop(subcommand, None)

    def calls_for(self, subcommand: str) -> list[tuple[str, ...]]:
        """Return recorded calls for ``subcommand``."""
        return [call for call in self.calls if len(call) > 1 and call[1] == subcommand]

    def count(self, subcommand: str | None = None) -> int:
        """Return how many calls were made, optionally for one subcommand."""
        if subcommand is None:
            return len(self.calls)
        return len(self.calls_for(subcommand))

    async def run(
        self,
        argv: Sequence[str],
        cwd: str | None = None,
        timeout: float | None = None,
    ) -> CommandOutput:
        """Record the call and return the first matching scripted response.

        Raises:
            CommandExecutionError: If the matched response has a non-zero
                exit code.
        """
        del cwd, timeout
        call = tuple(argv)
        self.calls.append(call)
        await anyio.sleep(self.latency)

        subcommand = call[1] if len(call) > 1 else ""
        command = " ".join(call)
        candidates = self.responses.get(subcommand, [])
        response = next((r for r in candidates if r.matches(command)), FakeResponse())
        if response.once and response in candidates:
            candidates.remove(response)

        if response.exit_code != 0:
            raise CommandExecutionError(call, response.exit_code, response.stderr)
        return CommandOutput(
            stdout=response.stdout, stderr=response.stderr, exit_code=0
        )
