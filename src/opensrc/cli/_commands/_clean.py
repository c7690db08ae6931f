# pyright: reportUnusedCallResult=false
"""Clean command: bulk removal of fetched sources."""

from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console

from opensrc.cache import CacheStore
from opensrc.enums import Ecosystem
from opensrc.exceptions import CacheError

from ._context import CLIContext
from ._shared import ExitCode, exit_with_error, get_error_console

app = App(name="clean", help="Remove all fetched sources.", help_on_error=True)


@app.default
def clean(
    *,
    packages: Annotated[bool, Parameter(help="Remove only packages.")] = False,
    repos: Annotated[bool, Parameter(help="Remove only repositories.")] = False,
    npm: Annotated[bool, Parameter(help="Remove only npm packages.")] = False,
    pypi: Annotated[bool, Parameter(help="Remove only PyPI packages.")] = False,
    crates: Annotated[bool, Parameter(help="Remove only crates.")] = False,
) -> None:
    """Remove fetched sources in bulk.

    With no flags everything is removed. Ecosystem flags limit package
    removal to those ecosystems and leave repositories alone unless
    --repos is also given.
    """
    ctx = CLIContext.get_current()
    store = CacheStore(ctx.project_root, logger=ctx.get_logger("clean"))

    ecosystems = [
        ecosystem
        for ecosystem, selected in (
            (Ecosystem.NPM, npm),
            (Ecosystem.PYPI, pypi),
            (Ecosystem.CRATES, crates),
        )
        if selected
    ]

    if not (packages or repos or ecosystems):
        packages = repos = True

    removed = 0
    try:
        if ecosystems:
            for ecosystem in ecosystems:
                removed += store.clean(packages=True, repos=False, ecosystem=ecosystem)
            if repos:
                removed += store.clean(packages=False, repos=True)
        else:
            removed += store.clean(packages=packages, repos=repos)
    except CacheError as e:
        exit_with_error(str(e), ExitCode.IO_ERROR, console=get_error_console())

    if not ctx.quiet:
        Console().print(f"Removed {removed} source(s)")
