# pyright: reportUnusedCallResult=false
"""List command: show fetched sources."""

from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console
from rich.table import Table

from opensrc.cache import CacheStore, SourcesListing

from ._context import CLIContext
from ._shared import format_json

app = App(name="list", help="List fetched sources.", help_on_error=True)


def _build_table(listing: SourcesListing) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Type")
    table.add_column("Name")
    table.add_column("Version")
    table.add_column("Path")
    table.add_column("Fetched")

    for ecosystem, packages in listing.packages.items():
        for package in packages:
            table.add_row(
                str(ecosystem),
                package.name,
                package.version,
                package.record.path,
                package.record.fetched_at,
            )
    for record in listing.repos:
        table.add_row("repo", record.name, record.version, record.path, record.fetched_at)

    return table


@app.default
def list_sources(
    *,
    json: Annotated[bool, Parameter(help="Output as JSON.")] = False,
) -> None:
    """List packages and repositories recorded in opensrc/sources.json."""
    ctx = CLIContext.get_current()
    listing = CacheStore(ctx.project_root, logger=ctx.get_logger("list")).list_sources()
    console = Console()

    if json:
        print(format_json(listing.to_dict()))  # noqa: T201
        return

    if listing.is_empty:
        console.print("[dim]No sources fetched yet.[/dim]")
        return

    console.print(_build_table(listing))
