"""The command-line interface for notesvn."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console

from notesvn.svn import PathResolver
from notesvn.utils._logging import create_sync_logger

from ._commands import register_commands
from ._context import CLIContext, load_config_safely

_HELP = "Inspect and synchronise notes tracked by a Subversion working copy."


def _discover_root(explicit: Path | None) -> Path | None:
    if explicit is not None:
        return explicit.expanduser().resolve()
    found = PathResolver().find_tracked_tree_root(Path.cwd())
    return Path(found) if found is not None else None


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    if console is None:
        console = Console()
    if error_console is None:
        error_console = Console(stderr=True)
    app = App(
        name="notesvn",
        help=_HELP,
        help_on_error=True,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )

    @app.meta.default
    def _default(  # pyright: ignore[reportUnusedFunction]
        *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
        verbose: Annotated[bool, Parameter(help="Enable verbose output")] = False,
        quiet: Annotated[bool, Parameter(help="Suppress non-essential output")] = False,
        no_color: Annotated[
            bool, Parameter(name="--no-color", help="Disable colored output")
        ] = False,
        config: Annotated[
            Path | None, Parameter(name="--config", help="Path to user config file")
        ] = None,
        root: Annotated[
            Path | None, Parameter(name="--root", help="Tracked tree root")
        ] = None,
    ) -> None:
        """Launch notesvn with global options.

        Args:
            tokens: Command tokens to pass to subcommands.
            verbose: Enable verbose output with additional details.
            quiet: Suppress non-essential output.
            no_color: Disable colored output.
            config: Explicit path to user config file.
            root: Tracked tree root (discovered from the current directory
                when omitted).
        """
        overrides: dict[str, object] | None = None
        if verbose:
            overrides = {"logging": {"level": "debug"}}

        loaded_config, config_error = load_config_safely(
            config_path=config,
            root=_discover_root(root),
            overrides=overrides,
        )

        logger = create_sync_logger(
            level=loaded_config.logging.level.value,
            log_format=loaded_config.logging.format.value,  # type: ignore[arg-type]
            log_file=loaded_config.logging.file,
        )

        ctx = CLIContext(
            config=loaded_config,
            verbose=verbose,
            quiet=quiet,
            no_color=no_color,
            config_error=config_error,
            logger=logger,
        )
        CLIContext.set_current(ctx)

        try:
            app(tokens)
        finally:
            CLIContext.reset()

    register_commands(app)
    return app


def main() -> None:
    """Default entrypoint for the `notesvn` CLI."""
    app = create_app()
    app.meta()


if __name__ == "__main__":
    main()
