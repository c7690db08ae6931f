# pyright: reportUnusedCallResult=false
"""Remove command: delete fetched sources."""

from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console
from rich.markup import escape

from opensrc.cache import CacheStore
from opensrc.enums import InputType
from opensrc.exceptions import OpensrcError
from opensrc.specs import detect_input_type, parse_package_spec, parse_repo_spec

from ._context import CLIContext
from ._shared import ExitCode, exit_with_error, get_error_console

app = App(name="remove", help="Remove fetched sources.", help_on_error=True)


def _remove_one(store: CacheStore, raw_spec: str) -> tuple[str, bool]:
    """Remove one specifier, returning its display name and whether it existed."""
    if detect_input_type(raw_spec) is InputType.REPO:
        repo = parse_repo_spec(raw_spec)
        return repo.identity, store.remove_repo_source(repo.identity)

    package = parse_package_spec(raw_spec)
    label = f"{package.ecosystem}:{package.name}"
    return label, store.remove_package_source(package.name, package.ecosystem)


@app.default
def remove(
    *specs: Annotated[
        str,
        Parameter(help="Packages or repositories to remove; versions are ignored."),
    ],
) -> None:
    """Remove sources and their records.

    Exits with status 3 if none of the given sources were present.
    """
    ctx = CLIContext.get_current()
    error_console = get_error_console()

    if not specs:
        exit_with_error(
            "Specify at least one package or repository",
            ExitCode.VALIDATION_ERROR,
            console=error_console,
        )

    store = CacheStore(ctx.project_root, logger=ctx.get_logger("remove"))
    console = Console()
    removed = 0

    for raw_spec in specs:
        try:
            label, existed = _remove_one(store, raw_spec)
        except OpensrcError as e:
            error_console.print(f"[red]✗[/red] {escape(raw_spec)}: {escape(str(e))}")
            continue

        if existed:
            removed += 1
            if not ctx.quiet:
                console.print(f"[green]✓[/green] Removed {escape(label)}")
        else:
            error_console.print(f"[yellow]![/yellow] {escape(label)} is not fetched")

    if removed == 0:
        raise SystemExit(ExitCode.NOT_FOUND)
