"""opensrc CLI commands."""

from typing import TYPE_CHECKING

from ._clean import app as clean_app
from ._context import CLIContext
from ._fetch import app as fetch_app
from ._list import app as list_app
from ._remove import app as remove_app
from ._shared import ExitCode, exit_with_error, format_json, get_error_console

if TYPE_CHECKING:
    from cyclopts import App

__all__ = [
    "CLIContext",
    "ExitCode",
    "clean_app",
    "exit_with_error",
    "fetch_app",
    "format_json",
    "get_error_console",
    "list_app",
    "register_commands",
    "remove_app",
]


def register_commands(app: "App") -> None:  # noqa: UP037
    app.command(fetch_app)
    app.command(list_app)
    app.command(remove_app)
    app.command(clean_app)
