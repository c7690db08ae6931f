from collections.abc import Callable
from pathlib import Path

import pytest
from pytest_mock import MockerFixture
from rich.console import Console

from opensrc.cli import create_app
from opensrc.git import FakeGit
from opensrc.registry import FakeRegistry


@pytest.fixture
def fake_backends(
    mocker: MockerFixture, fake_registry: FakeRegistry, fake_git: FakeGit
) -> tuple[FakeRegistry, FakeGit]:
    """Route the fetch command to in-memory registry and git fakes."""
    mocker.patch(
        "opensrc.cli._commands._fetch._create_registry",
        return_value=fake_registry,
    )
    mocker.patch("opensrc.cli._commands._fetch._create_git", return_value=fake_git)
    return fake_registry, fake_git


@pytest.fixture
def opensrc_cli(console: Console, project_root: Path) -> Callable[..., int]:
    """Run the CLI against project_root and return the exit code.

    Global options are parsed, so ``--cwd`` is always passed first.
    """
    app = create_app(console=console, error_console=console)

    def _run(*args: str) -> int:
        try:
            app.meta(["--cwd", str(project_root), *args])
        except SystemExit as e:
            if e.code is None:
                return 0
            return e.code if isinstance(e.code, int) else 1
        else:
            return 0

    return _run
