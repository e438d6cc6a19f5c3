"""Command-line interface for notesvn."""

from ._app import create_app, main
from ._context import CLIContext, load_config_safely

__all__ = ["CLIContext", "create_app", "load_config_safely", "main"]
