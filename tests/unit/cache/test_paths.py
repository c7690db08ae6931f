from pathlib import Path

from opensrc.cache import (
    get_index_path,
    get_package_path,
    get_package_relative_path,
    get_packages_dir,
    get_repo_path,
    get_repo_relative_path,
    get_repos_dir,
)
from opensrc.enums import Ecosystem

ROOT = Path("/project")


class TestLayout:
    def test_index_path(self) -> None:
        assert get_index_path(ROOT) == Path("/project/opensrc/sources.json")

    def test_packages_dir(self) -> None:
        assert get_packages_dir(ROOT) == Path("/project/opensrc/packages")
        assert get_packages_dir(ROOT, Ecosystem.PYPI) == Path("/project/opensrc/packages/pypi")

    def test_repos_dir(self) -> None:
        assert get_repos_dir(ROOT) == Path("/project/opensrc/repos")


class TestPackagePaths:
    def test_defaults_to_npm(self) -> None:
        assert get_package_relative_path("zod") == "packages/npm/zod"

    def test_scoped_name_nests(self) -> None:
        assert get_package_path(ROOT, "@babel/core") == Path(
            "/project/opensrc/packages/npm/@babel/core"
        )

    def test_ecosystem_bucket(self) -> None:
        assert get_package_relative_path("serde", Ecosystem.CRATES) == "packages/crates/serde"
        assert get_package_path(ROOT, "requests", Ecosystem.PYPI) == Path(
            "/project/opensrc/packages/pypi/requests"
        )


class TestRepoPaths:
    def test_relative_path(self) -> None:
        assert get_repo_relative_path("github.com/vercel/ai") == "repos/github.com/vercel/ai"

    def test_absolute_path(self) -> None:
        assert get_repo_path(ROOT, "gitlab.com/owner/tool") == Path(
            "/project/opensrc/repos/gitlab.com/owner/tool"
        )
