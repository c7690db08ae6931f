"""Shared test fixtures for opensrc tests."""

from pathlib import Path

import pytest
from rich.console import Console

from opensrc.enums import Ecosystem
from opensrc.git import FakeGit
from opensrc.registry import FakeRegistry
from opensrc.specs import RepoSpec


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep logs and user config out of the real home directory."""
    log_dir = tmp_path_factory.mktemp("logs")
    monkeypatch.setenv("OPENSRC_LOG_FILE", str(log_dir / "cli.log"))
    monkeypatch.setattr(
        "opensrc.config._discovery.get_user_config_path",
        lambda: log_dir / "missing-config.toml",
    )
    for key in ("OPENSRC_DEBUG", "OPENSRC_LOG_LEVEL", "OPENSRC_STRICT_CONFIG"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def fake_registry() -> FakeRegistry:
    """Registry with zod (npm), requests (pypi) and serde (crates)."""
    registry = FakeRegistry()
    registry.add(Ecosystem.NPM, "zod", "3.22.4", RepoSpec("github.com", "colinhacks", "zod"))
    registry.add(
        Ecosystem.NPM, "@babel/core", "7.23.0", RepoSpec("github.com", "babel", "babel")
    )
    registry.add(Ecosystem.PYPI, "requests", "2.31.0", RepoSpec("github.com", "psf", "requests"))
    registry.add(Ecosystem.CRATES, "serde", "1.0.193", RepoSpec("github.com", "serde-rs", "serde"))
    return registry


@pytest.fixture
def fake_git() -> FakeGit:
    """Git remotes matching fake_registry, each with a release tag."""
    git = FakeGit()
    git.add_remote("https://github.com/colinhacks/zod.git", tags={"v3.22.4", "v3.21.0"})
    git.add_remote("https://github.com/babel/babel.git", tags={"v7.23.0"})
    git.add_remote("https://github.com/psf/requests.git", tags={"v2.31.0"})
    git.add_remote("https://github.com/serde-rs/serde.git", tags={"v1.0.193"})
    git.add_remote("https://github.com/vercel/ai.git", tags={"ai@5.0.0"})
    return git


@pytest.fixture
def console() -> Console:
    return Console(
        width=70,
        force_terminal=True,
        highlight=False,
        color_system=None,
        legacy_windows=False,
    )
