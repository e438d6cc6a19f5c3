"""structlog logger factories for the sync layer.

Loggers are built with ``structlog.wrap_logger`` and never touch the global
structlog configuration, so several differently-configured instances can
coexist in one process.
"""

import logging
from os import getenv
from pathlib import Path
from typing import TYPE_CHECKING, Literal, cast

import structlog

from ._paths import get_log_file

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger, Processor

LogFormatType = Literal["json", "text"]


def resolve_log_level(level: str | None = None) -> int:
    """Pick the effective level.

    NOTESVN_DEBUG wins, then ``level``, then NOTESVN_LOG_LEVEL. Unknown
    names fall back to INFO.
    """
    if getenv("NOTESVN_DEBUG"):
        return logging.DEBUG
    name = level if level is not None else getenv("NOTESVN_LOG_LEVEL", "info")
    return logging.getLevelNamesMapping().get(name.upper(), logging.INFO)


def _renderers(log_format: LogFormatType) -> list["Processor"]:
    if log_format == "json":
        return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    # timestamp [level] event key=value ...
    return [structlog.dev.ConsoleRenderer(colors=False)]


def _create_logger(
    log_file_path: str,
    *,
    log_level: int | None = None,
    log_format: LogFormatType = "json",
) -> "FilteringBoundLogger":  # noqa: UP037
    """Build a logger appending to ``log_file_path``.

    Args:
        log_file_path: Log file; missing parent directories are created.
        log_level: Minimum level, or None to resolve it from the environment.
        log_format: "json" for one object per line, "text" for console style.
    """
    log_path = Path(log_file_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    effective_level = log_level if log_level is not None else resolve_log_level()

    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            structlog.WriteLogger(log_path.open("a")),
            processors=[
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                *_renderers(log_format),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(effective_level),
            context_class=dict,
        ),
    )


def create_sync_logger(
    *,
    level: str | None = None,
    log_format: LogFormatType = "json",
    log_file: str = "",
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create the logger used by the CLI and the sync components.

    Args:
        level: Configured level name; NOTESVN_DEBUG still overrides it.
        log_format: Output format, either "json" or "text".
        log_file: Target file, or empty for notesvn.log in the per-user log
            directory.
    """
    return _create_logger(
        log_file or str(get_log_file()),
        log_level=resolve_log_level(level),
        log_format=log_format,
    )


def create_null_logger() -> "FilteringBoundLogger":  # noqa: UP037
    """Create a logger that discards every event."""
    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            structlog.ReturnLogger(),
            processors=[],
            wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL),
            context_class=dict,
        ),
    )
