"""notesvn exceptions."""

from collections.abc import Sequence
from pathlib import Path
from typing import Any


class NoteSvnError(Exception):
    """Base exception for notesvn errors."""


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(NoteSvnError):
    """Raised when no tracked-tree root is configured for a relative path."""


class ConfigError(NoteSvnError):
    """Base exception for configuration file errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # pyright: ignore[reportAny,reportExplicitAny]
        expected: str,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value  # pyright: ignore[reportExplicitAny]
        self.expected: str = expected


# =============================================================================
# Tracked Tree Exceptions
# =============================================================================


class NotInTrackedTreeError(NoteSvnError):
    """Operation attempted on a path outside any tracked tree."""

    def __init__(self, path: Path | str) -> None:
        """Initialize with the offending path."""
        super().__init__(f"The path {str(path)!r} is not inside a tracked tree")
        self.path: str = str(path)


class CommandExecutionError(NoteSvnError):
    """The external client exited non-zero or could not be run.

    Attributes:
        argv: The argument vector that was executed.
        exit_code: Process exit code, or None if the process never ran.
        stderr: Captured standard error (or the OS error message).
    """

    def __init__(
        self,
        argv: Sequence[str],
        exit_code: int | None,
        stderr: str,
        *,
        message: str | None = None,
    ) -> None:
        """Initialize with the command context."""
        self.argv: tuple[str, ...] = tuple(argv)
        self.exit_code: int | None = exit_code
        self.stderr: str = stderr
        if message is None:
            command = " ".join(self.argv)
            if len(command) > 200:
                command = command[:200] + "..."
            message = f"Command failed ({exit_code}): {command}"
            if stderr.strip():
                message += f": {stderr.strip()}"
        super().__init__(message)


class CommandTimeoutError(CommandExecutionError):
    """The external client did not finish within its timeout."""

    def __init__(self, argv: Sequence[str], timeout: float) -> None:
        """Initialize with the command and the timeout that expired."""
        super().__init__(
            argv,
            None,
            "",
            message=f"Command timed out after {timeout}s: {' '.join(argv)}",
        )
        self.timeout: float = timeout


class ClientNotFoundError(CommandExecutionError):
    """The client binary could not be found on this system."""

    def __init__(self, argv: Sequence[str], reason: str) -> None:
        """Initialize with the command and the OS error message."""
        binary = argv[0] if argv else "<empty>"
        super().__init__(
            argv,
            None,
            reason,
            message=(
                f"Client binary {binary!r} not found. Install it or set "
                "client.binary in the configuration."
            ),
        )


class ConflictError(NoteSvnError):
    """Conflict markers were detected after an update or checkout.

    Attributes:
        paths: Paths reported as conflicted.
        output: Raw client output that contained the markers.
    """

    def __init__(self, paths: Sequence[str], output: str = "") -> None:
        """Initialize with the conflicted paths."""
        self.paths: tuple[str, ...] = tuple(paths)
        self.output: str = output
        listed = ", ".join(self.paths) if self.paths else "<unknown>"
        super().__init__(f"Conflicts detected in: {listed}")
