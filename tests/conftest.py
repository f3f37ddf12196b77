"""Shared pytest fixtures and test helpers for bldctl tests."""

from __future__ import annotations

import json
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from bldctl.config.settings import BldSettings
from bldctl.domain.version import RepositoryState

PROJECT = "org.example/app"


@pytest.fixture(autouse=True)
def _no_ambient_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's BLDCTL_* environment out of the tests."""
    monkeypatch.delenv("BLDCTL_CONFIG", raising=False)
    monkeypatch.delenv("BLDCTL_PIPELINE__DEV_REPOSITORY", raising=False)
    monkeypatch.delenv("BLDCTL_RESOLVING", raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Committed git repository holding a minimal release-version project.

    This is the single source of truth for the project layout. The
    ``bldctl.toml`` next to the descriptor disables every external pipeline
    command so builds run without packaging tools.
    """
    root = tmp_path / "app"
    root.mkdir()
    init_repo(root)
    write_descriptor(root)
    write_config(root)
    commit_all(root)
    return root


@pytest.fixture
def _isolated_project(project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the temp project so the CLI discovers it.

    Use via ``@pytest.mark.usefixtures("_isolated_project")`` on command test
    classes.
    """
    monkeypatch.chdir(project_root)


@pytest.fixture
def settings(project_root: Path) -> BldSettings:
    """Settings for the committed project, loaded the way the CLI loads them."""
    return BldSettings.from_cli(project_root=project_root)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def git(cwd: Path, *args: str) -> str:
    """Run git in *cwd*, failing the test on a non-zero exit."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def init_repo(path: Path) -> Path:
    """Initialize a git repository on branch ``main`` with a test identity."""
    path.mkdir(parents=True, exist_ok=True)
    git(path, "init", "-q")
    git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    git(path, "config", "user.email", "test@example.com")
    git(path, "config", "user.name", "Test")
    git(path, "config", "commit.gpgsign", "false")
    return path


def commit_all(path: Path, message: str = "commit") -> str:
    """Stage everything and commit; return the new HEAD hash."""
    git(path, "add", "-A")
    git(path, "commit", "-q", "--allow-empty", "-m", message)
    return git(path, "rev-parse", "HEAD")


def render_descriptor(
    *,
    project: str = PROJECT,
    version: tuple[int, int, int] = (1, 2, 3),
    qualifier: str | None = None,
    deps: Sequence[Sequence[Any]] = (),
    paths: Sequence[str] = (),
    description: str = "",
) -> str:
    """Render ``project.toml`` text using the compact dependency form.

    JSON arrays of strings are valid TOML inline arrays, so each dep is
    written with ``json.dumps``.
    """
    lines = [f"project = {json.dumps(project)}"]
    if description:
        lines.append(f"description = {json.dumps(description)}")
    lines.append("deps = [")
    lines.extend(f"    {json.dumps(list(dep))}," for dep in deps)
    lines.append("]")
    if paths:
        lines.append(f"paths = {json.dumps(list(paths))}")
    major, minor, patch = version
    lines += ["", "[version]", f"major = {major}", f"minor = {minor}", f"patch = {patch}"]
    if qualifier is not None:
        lines.append(f"qualifier = {json.dumps(qualifier)}")
    return "\n".join(lines) + "\n"


def write_descriptor(directory: Path, **kwargs: Any) -> Path:
    """Write ``project.toml`` into *directory* (created if needed)."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "project.toml"
    path.write_text(render_descriptor(**kwargs), encoding="utf-8")
    return path


def write_config(
    directory: Path,
    *,
    nested_build_command: Sequence[str] | None = None,
    package_command: Sequence[str] = (),
    extra: str = "",
) -> Path:
    """Write a ``bldctl.toml`` with the packaging commands switched off."""
    nested = list(nested_build_command or [sys.executable, "-m", "bldctl", "build"])
    text = (
        "[pipeline]\n"
        f"nested_build_command = {json.dumps(nested)}\n"
        f"package_command = {json.dumps(list(package_command))}\n"
        "install_command = []\n"
        "publish_command = []\n"
        "\n"
        "[plugins]\n"
        "entry_points = false\n"
    )
    path = directory / "bldctl.toml"
    path.write_text(text + extra, encoding="utf-8")
    return path


def report_version_command(version_file: str = "VERSION") -> list[str]:
    """Nested build stand-in: prints the contents of *version_file*."""
    script = (
        "import pathlib; "
        f"print('Installed Version: ' + pathlib.Path({version_file!r}).read_text().strip())"
    )
    return [sys.executable, "-c", script]


class FakeRepository:
    """In-memory stand-in for GitProbe.

    Counts queries so tests can assert the repository is re-read on every
    synthesis and never touched for release versions.
    """

    def __init__(
        self,
        *,
        branch: str = "main",
        count: int = 7,
        short: str = "abc123",
        status: str = "",
    ) -> None:
        self.branch = branch
        self.count = count
        self.short = short
        self.porcelain = status
        self.calls: list[str] = []
        self.checkouts: list[tuple[str, str, Path]] = []

    def status(self, directory: Path | str) -> str:
        self.calls.append("status")
        return self.porcelain

    def is_clean(self, directory: Path | str) -> bool:
        return not self.status(directory).strip()

    def current_branch(self, directory: Path | str) -> str:
        self.calls.append("current_branch")
        return self.branch

    def commit_count(self, directory: Path | str) -> int:
        self.calls.append("commit_count")
        return self.count

    def short_hash(self, directory: Path | str) -> str:
        self.calls.append("short_hash")
        return self.short

    def state(self, directory: Path | str) -> RepositoryState:
        return RepositoryState(
            clean=self.is_clean(directory),
            branch=self.current_branch(directory),
            commit_count=self.commit_count(directory),
            short_hash=self.short_hash(directory),
        )

    def ensure_checkout(
        self,
        repository: str,
        ref: str,
        clone_dir: Path,
        *,
        deps_root: Path | None = None,
    ) -> Path:
        self.checkouts.append((repository, ref, clone_dir))
        clone_dir.mkdir(parents=True, exist_ok=True)
        return clone_dir
