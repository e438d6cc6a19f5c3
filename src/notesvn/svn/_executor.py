"""Subprocess execution for the external client.

Every call spawns one process; there is no pooling or reuse. Output is
decoded as UTF-8 with replacement so undecodable bytes never abort a parse.
"""

import os
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING, final

import anyio

from notesvn.exceptions import (
    ClientNotFoundError,
    CommandExecutionError,
    CommandTimeoutError,
)
from notesvn.utils._logging import create_null_logger

from ._models import CommandOutput

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

DEFAULT_COMMAND_TIMEOUT: float = 120.0


@final
class CommandExecutor:
    """Runs the external client with anyio subprocesses.

    Args:
        default_timeout: Seconds allowed when a call passes no timeout.
            Zero or None disables the timeout.
        logger: Logger for command lifecycle events.
    """

    __slots__ = ("_env", "_logger", "default_timeout")

    def __init__(
        self,
        *,
        default_timeout: float | None = DEFAULT_COMMAND_TIMEOUT,
        logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
    ) -> None:
        self.default_timeout = default_timeout
        self._logger = logger if logger is not None else create_null_logger()
        # Untranslated messages keep stderr classification stable.
        self._env = {**os.environ, "LC_MESSAGES": "C"}

    async def run(
        self,
        argv: Sequence[str],
        cwd: str | None = None,
        timeout: float | None = None,
    ) -> CommandOutput:
        """Run ``argv`` and capture its output.

        Args:
            argv: Full argument vector, binary first.
            cwd: Working directory (the tracked-tree root).
            timeout: Seconds before the process is killed; falls back to
                ``default_timeout``.

        Returns:
            Decoded stdout and stderr with the exit code.

        Raises:
            ClientNotFoundError: If the binary cannot be executed.
            CommandTimeoutError: If the timeout expires.
            CommandExecutionError: If the process exits non-zero.
        """
        effective_timeout = timeout if timeout is not None else self.default_timeout
        command = list(argv)
        started = time.monotonic()
        self._logger.debug("command_started", argv=command, cwd=cwd)

        try:
            with anyio.fail_after(effective_timeout or None):
                completed = await anyio.run_process(
                    command, cwd=cwd, env=self._env, check=False
                )
        except TimeoutError as e:
            self._logger.warning(
                "command_timed_out", argv=command, timeout=effective_timeout
            )
            raise CommandTimeoutError(command, effective_timeout or 0.0) from e
        except FileNotFoundError as e:
            self._logger.error("client_not_found", argv=command, error=str(e))
            raise ClientNotFoundError(command, str(e)) from e
        except OSError as e:
            self._logger.error("command_spawn_failed", argv=command, error=str(e))
            raise CommandExecutionError(command, None, str(e)) from e

        stdout = completed.stdout.decode("utf-8", errors="replace")
        stderr = completed.stderr.decode("utf-8", errors="replace")
        elapsed_ms = round((time.monotonic() - started) * 1000, 1)

        if completed.returncode != 0:
            self._logger.debug(
                "command_failed",
                argv=command,
                exit_code=completed.returncode,
                stderr=stderr.strip()[:500],
                elapsed_ms=elapsed_ms,
            )
            raise CommandExecutionError(command, completed.returncode, stderr)

        self._logger.debug(
            "command_finished", argv=command, exit_code=0, elapsed_ms=elapsed_ms
        )
        return CommandOutput(stdout=stdout, stderr=stderr, exit_code=0)
