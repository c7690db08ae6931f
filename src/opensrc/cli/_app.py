"""The command-line interface for opensrc."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console

from opensrc.config import safe_load_config
from opensrc.utils import create_cli_logger

from ._commands import register_commands
from ._commands._context import CLIContext

APP_HELP = "Fetch dependency source code so coding agents can read it."


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
        name="opensrc",
        help=APP_HELP,
        help_on_error=True,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )

    @app.meta.default
    def _default(  # pyright: ignore[reportUnusedFunction]
        *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
        cwd: Annotated[
            Path | None,
            Parameter(name="--cwd", help="Project root (defaults to the current directory)"),
        ] = None,
        config: Annotated[
            Path | None, Parameter(name="--config", help="Path to config file")
        ] = None,
        verbose: Annotated[bool, Parameter(help="Enable debug logging")] = False,
        quiet: Annotated[bool, Parameter(help="Suppress non-essential output")] = False,
    ) -> None:
        """Launch opensrc with global options.

        Args:
            tokens: Command tokens to pass to subcommands.
            cwd: Project root whose opensrc/ directory is used.
            config: Explicit path to config file.
            verbose: Log at debug level.
            quiet: Suppress non-essential output.
        """
        project_root = (cwd or Path.cwd()).resolve()

        cli_overrides: dict[str, object] | None = None
        if verbose:
            cli_overrides = {"logging": {"level": "debug"}}

        loaded_config, config_error = safe_load_config(
            project_root=project_root,
            config_path=config,
            cli_overrides=cli_overrides,
        )

        cli_logger = create_cli_logger(
            level=loaded_config.logging.level.value,
            log_format=loaded_config.logging.format.value,  # type: ignore[arg-type]
            log_file=loaded_config.logging.file,
        )

        ctx = CLIContext(
            config=loaded_config,
            project_root=project_root,
            verbose=verbose,
            quiet=quiet,
            config_error=config_error,
            logger=cli_logger,
        )
        CLIContext.set_current(ctx)

        try:
            app(tokens)
        finally:
            CLIContext.reset()

    register_commands(app)
    return app


def main() -> None:
    """Default entrypoint for the `opensrc` CLI."""
    app = create_app()
    app.meta()
