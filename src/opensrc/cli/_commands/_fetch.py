# pyright: reportUnusedCallResult=false
# ruff: noqa: TC003  # Path needed at runtime for annotations
"""Fetch command: download package and repository sources."""

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

from cyclopts import App, Parameter
from rich.console import Console
from rich.markup import escape

from opensrc.fetch import SourceFetcher
from opensrc.git import DulwichGit
from opensrc.registry import RegistryClient

from ._context import CLIContext
from ._shared import ExitCode, exit_with_error, get_error_console

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from opensrc.fetch import FetchOutcome, FetchResult
    from opensrc.git import GitProtocol
    from opensrc.registry import RegistryProtocol

app = App(
    name="fetch",
    help="Fetch package or repository sources into ./opensrc.",
    help_on_error=True,
)


def _create_registry(ctx: CLIContext, logger: "FilteringBoundLogger") -> "RegistryProtocol":
    registries = ctx.config.registries
    return RegistryClient(
        npm_url=registries.npm,
        pypi_url=registries.pypi,
        crates_url=registries.crates,
        timeout=registries.timeout,
        logger=logger,
    )


def _create_git(logger: "FilteringBoundLogger") -> "GitProtocol":
    return DulwichGit(logger=logger)


def _describe(result: "FetchResult", project_root: Path) -> str:
    try:
        location = result.path.relative_to(project_root).as_posix()
    except ValueError:
        location = str(result.path)
    label = f"{result.name}@{result.version}"
    if result.ref != result.version:
        label += f" (ref {result.ref})"
    return f"{label} -> {location}"


def _print_outcome(
    outcome: "FetchOutcome",
    *,
    console: Console,
    error_console: Console,
    project_root: Path,
    quiet: bool,
) -> None:
    if outcome.result is None:
        error_console.print(
            f"[red]✗[/red] {escape(outcome.spec)}: {escape(str(outcome.error))}"
        )
        return

    for warning in outcome.result.warnings:
        error_console.print(f"[yellow]![/yellow] {escape(str(warning))}")
    if not quiet:
        console.print(f"[green]✓[/green] {escape(_describe(outcome.result, project_root))}")


@app.default
def fetch(
    *specs: Annotated[
        str,
        Parameter(
            help="Packages (zod, pypi:requests==2.31.0, cargo:serde) "
            "or repositories (vercel/ai, github:owner/repo@v1.0.0)."
        ),
    ],
    concurrency: Annotated[
        int | None,
        Parameter(help="Maximum fetches in parallel (default from config)."),
    ] = None,
) -> None:
    """Fetch sources and record them in opensrc/sources.json.

    Versions default to the one in the project's lockfile, then the
    registry's latest. Exits with status 1 if any specifier fails.
    """
    ctx = CLIContext.get_current()
    error_console = get_error_console()

    if not specs:
        exit_with_error(
            "Specify at least one package or repository",
            ExitCode.VALIDATION_ERROR,
            console=error_console,
        )

    logger = ctx.get_logger("fetch")
    max_workers = concurrency if concurrency is not None else ctx.config.fetch.concurrency

    registry = _create_registry(ctx, logger)
    try:
        fetcher = SourceFetcher(
            ctx.project_root,
            registry=registry,
            git=_create_git(logger),
            clone_depth=ctx.config.fetch.clone_depth,
            logger=logger,
        )
        report = fetcher.fetch_many(specs, max_workers=max_workers)
    finally:
        registry.close()

    console = Console()
    for outcome in report.outcomes:
        _print_outcome(
            outcome,
            console=console,
            error_console=error_console,
            project_root=ctx.project_root,
            quiet=ctx.quiet,
        )

    if report.failed:
        raise SystemExit(ExitCode.FETCH_FAILED)
