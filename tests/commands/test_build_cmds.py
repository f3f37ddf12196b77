"""Tests for build and deploy-dev."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest
from click.testing import CliRunner

from bldctl.cli import cli
from tests.conftest import commit_all, git, write_config, write_descriptor


@pytest.mark.usefixtures("_isolated_project")
class TestBuild:
    def test_reports_installed_version(self, cli_runner: CliRunner, project_root: Path) -> None:
        result = cli_runner.invoke(cli, ["build"])
        assert result.exit_code == 0, result.output
        assert result.output.strip().splitlines()[-1] == "Installed Version: 1.2.3"
        recorded = json.loads((project_root / ".bldctl" / "build-result.json").read_text())
        assert recorded["version"] == "1.2.3"

    def test_repeatable(self, cli_runner: CliRunner, project_root: Path) -> None:
        assert cli_runner.invoke(cli, ["build"]).exit_code == 0
        assert git(project_root, "status", "--porcelain") == ""
        assert cli_runner.invoke(cli, ["build"]).exit_code == 0

    def test_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "build"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)["data"]
        assert data["checks"] == ["no_local_dependencies", "clean_repository"]
        assert data["artifact"] is None

    def test_dirty_tree_refused(self, cli_runner: CliRunner, project_root: Path) -> None:
        (project_root / "project.toml").write_text(
            (project_root / "project.toml").read_text() + "# edited\n"
        )
        result = cli_runner.invoke(cli, ["--json", "build"])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "DIRTY_REPOSITORY"
        assert not (project_root / ".bldctl").exists()

    def test_local_dependency_refused(self, cli_runner: CliRunner, project_root: Path) -> None:
        write_descriptor(project_root, deps=[["org.example/lib", "../lib"]])
        commit_all(project_root, "sibling")
        result = cli_runner.invoke(cli, ["-q", "build"])
        assert result.exit_code == 1
        assert result.output.startswith("ERROR: build — Cannot build")

    def test_package_command_runs(self, cli_runner: CliRunner, project_root: Path) -> None:
        script = (
            "import os, pathlib; d = pathlib.Path('dist'); d.mkdir(exist_ok=True); "
            "(d / ('app-' + os.environ['BLDCTL_VERSION'] + '.txt')).write_text('')"
        )
        write_config(project_root, package_command=[sys.executable, "-c", script])
        (project_root / ".gitignore").write_text("dist/\n")
        commit_all(project_root, "package with a script")
        result = cli_runner.invoke(cli, ["--json", "build"])
        assert result.exit_code == 0, result.output
        artifact = json.loads(result.output)["data"]["artifact"]
        assert Path(artifact).name == "app-1.2.3.txt"


class TestMissingDescriptor:
    def test_build_outside_project(
        self, cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        result = cli_runner.invoke(cli, ["--json", "build"])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "MISSING_DESCRIPTOR"


@pytest.mark.usefixtures("_isolated_project")
class TestDeployDev:
    def test_release_refused(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "deploy-dev"])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "WRONG_QUALIFIER"

    def test_dev_version_published(
        self,
        cli_runner: CliRunner,
        project_root: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("BLDCTL_PIPELINE__DEV_REPOSITORY", "https://pypi.example/dev")
        write_descriptor(project_root, qualifier="dev")
        commit_all(project_root, "dev")
        short = git(project_root, "rev-parse", "--short", "HEAD")
        result = cli_runner.invoke(cli, ["deploy-dev"])
        assert result.exit_code == 0, result.output
        assert "https://pypi.example/dev" in result.output
        assert result.output.strip().splitlines()[-1] == (
            f"Installed Version: 1.2.3-main-0002-{short}"
        )
