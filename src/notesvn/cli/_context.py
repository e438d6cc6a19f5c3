# pyright: reportUnusedCallResult=false
# ruff: noqa: TC003  # Path needed at runtime for dataclass field
"""CLI context for global state management.

The CLIContext is set once at CLI startup and made available to all
commands via contextvars.
"""

import contextvars
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from notesvn.config import Config

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger


_current_cli_context: contextvars.ContextVar["CLIContext | None"] = contextvars.ContextVar(
    "cli_context", default=None
)


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Global CLI context with configuration and options.

    Attributes:
        config: Loaded configuration object.
        verbose: Enable verbose output with additional details.
        quiet: Suppress non-essential output.
        no_color: Disable colored output.
        config_error: Error message if config loading failed.
        logger: Structured logger for commands (writes to file only).
    """

    config: Config = field(repr=False)
    verbose: bool = False
    quiet: bool = False
    no_color: bool = False
    config_error: str | None = None
    logger: "FilteringBoundLogger | None" = field(default=None, repr=False)  # noqa: UP037

    @classmethod
    def get_current(cls) -> "CLIContext":  # noqa: UP037
        """Get the active CLIContext, or a default one if none is set."""
        ctx = _current_cli_context.get()
        if ctx is not None:
            return ctx
        return cls(config=Config.from_dict({}))

    @classmethod
    def set_current(cls, ctx: "CLIContext") -> None:  # noqa: UP037
        """Set the current active CLIContext."""
        _current_cli_context.set(ctx)

    @classmethod
    def reset(cls) -> None:
        """Reset to default context."""
        _current_cli_context.set(None)


def load_config_safely(
    *,
    config_path: Path | None = None,
    root: Path | None = None,
    overrides: dict[str, object] | None = None,
) -> tuple[Config, str | None]:
    """Load configuration with error handling.

    With NOTESVN_STRICT_CONFIG=1 a broken configuration exits with status 1;
    otherwise a warning goes to stderr and built-in defaults are used.

    Args:
        config_path: Explicit user config file (--config flag). Must exist.
        root: Tracked-tree root whose ``.notesvn.toml`` is read.
        overrides: Highest-precedence values from CLI flags.

    Returns:
        Tuple of (Config, error_message). On success, error_message is None.
    """
    from notesvn.exceptions import ConfigError  # noqa: PLC0415

    strict_mode = os.environ.get("NOTESVN_STRICT_CONFIG", "0") == "1"

    if config_path is not None and not config_path.is_file():
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    try:
        config = Config.load(root=root, user_config=config_path, overrides=overrides)
    except (ConfigError, OSError) as e:
        error_msg = str(e)
        if strict_mode:
            print(f"Error: {error_msg}", file=sys.stderr)  # noqa: T201
            sys.exit(1)
        print(f"Warning: Failed to load config: {error_msg}", file=sys.stderr)  # noqa: T201
        fallback = {"tree": {"root": str(root)}} if root is not None else {}
        return Config.from_dict(fallback), error_msg
    return config, None
