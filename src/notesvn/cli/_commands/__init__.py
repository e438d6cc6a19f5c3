"""notesvn CLI commands."""
# pyright: reportUnusedCallResult=false

from typing import TYPE_CHECKING

from ._config import app as config_app
from ._read import blame, diff, info, log, status
from ._watch import watch
from ._write import add, checkout, commit, create_repo, move, remove, revert, update

if TYPE_CHECKING:
    from cyclopts import App

__all__ = ["config_app", "register_commands"]


def register_commands(app: "App") -> None:  # noqa: UP037
    app.command(status)
    app.command(info)
    app.command(log)
    app.command(diff)
    app.command(blame)
    app.command(add)
    app.command(remove)
    app.command(move)
    app.command(commit)
    app.command(update)
    app.command(revert)
    app.command(checkout)
    app.command(create_repo, name="create-repo")
    app.command(watch)
    app.command(config_app)
