from pathlib import Path

import pytest
from dulwich import porcelain
from dulwich.repo import Repo


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)


def commit_file(repo_path: Path, name: str, content: str, message: str) -> bytes:
    """Write a file into a repository and commit it."""
    (repo_path / name).write_text(content)
    porcelain.add(str(repo_path), paths=[str(repo_path / name)])
    return porcelain.commit(
        str(repo_path),
        message=message.encode(),
        author=b"Test User <test@example.com>",
        committer=b"Test User <test@example.com>",
    )


@pytest.fixture
def upstream_repo(tmp_path: Path) -> Path:
    """Create a local repository with two tagged releases.

    History:
        1.0.0: VERSION contains "1.0.0" (tagged v1.0.0)
        2.0.0: VERSION contains "2.0.0" (tagged v2.0.0, HEAD of main)
    """
    repo_path = tmp_path / "upstream"
    repo_path.mkdir()
    with Repo.init(str(repo_path)) as repo:
        repo.refs.set_symbolic_ref(b"HEAD", b"refs/heads/main")

    _ = commit_file(repo_path, "VERSION", "1.0.0\n", "Release 1.0.0")
    porcelain.tag_create(str(repo_path), b"v1.0.0")
    _ = commit_file(repo_path, "VERSION", "2.0.0\n", "Release 2.0.0")
    porcelain.tag_create(str(repo_path), b"v2.0.0")
    return repo_path
