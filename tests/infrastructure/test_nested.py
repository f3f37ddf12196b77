"""Tests for the nested-build exchange format."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from bldctl.domain.errors import CommandError, PipelineError
from bldctl.infrastructure.nested import (
    BUILD_RESULT_FILENAME,
    format_installed_version,
    inherited_lineage,
    parse_installed_version,
    read_build_result,
    run_nested_build,
    write_build_result,
)


def _python(script: str) -> list[str]:
    return [sys.executable, "-c", script]


class TestInstalledVersionLine:
    def test_format(self) -> None:
        assert format_installed_version("1.2.3") == "Installed Version: 1.2.3"

    def test_parse_among_other_output(self) -> None:
        stdout = "Compiling...\nInstalled Version: 1.2.3-main-0004-abc\nDone\n"
        assert parse_installed_version(stdout) == "1.2.3-main-0004-abc"

    def test_parse_requires_line_start(self) -> None:
        assert parse_installed_version("  Installed Version: 1.0\n") is None

    def test_parse_first_wins(self) -> None:
        stdout = "Installed Version: 1.0\nInstalled Version: 2.0\n"
        assert parse_installed_version(stdout) == "1.0"

    def test_parse_missing(self) -> None:
        assert parse_installed_version("nothing here") is None
        assert parse_installed_version("Installed Version:   \n") is None


class TestBuildResultFile:
    def test_round_trip(self, tmp_path: Path) -> None:
        path = write_build_result(tmp_path / ".bldctl", "x/y", "1.0.0")
        assert path.name == BUILD_RESULT_FILENAME
        assert read_build_result(tmp_path / ".bldctl") == "1.0.0"

    def test_missing(self, tmp_path: Path) -> None:
        assert read_build_result(tmp_path) is None

    def test_unreadable_is_ignored(self, tmp_path: Path) -> None:
        (tmp_path / BUILD_RESULT_FILENAME).write_text("{not json")
        assert read_build_result(tmp_path) is None


class TestRunNestedBuild:
    def test_scrapes_stdout(self, tmp_path: Path) -> None:
        command = _python("print('building'); print('Installed Version: 9.9.9')")
        assert run_nested_build(command, tmp_path, ".bldctl") == "9.9.9"

    def test_prefers_result_file(self, tmp_path: Path) -> None:
        script = (
            "import json, pathlib; "
            "d = pathlib.Path('.bldctl'); d.mkdir(exist_ok=True); "
            "(d / 'build-result.json').write_text(json.dumps({'version': '2.0.0'})); "
            "print('Installed Version: 1.0.0')"
        )
        assert run_nested_build(_python(script), tmp_path, ".bldctl") == "2.0.0"

    def test_stale_result_file_is_discarded(self, tmp_path: Path) -> None:
        write_build_result(tmp_path / ".bldctl", "x/y", "0.0.1")
        command = _python("print('Installed Version: 0.0.2')")
        assert run_nested_build(command, tmp_path, ".bldctl") == "0.0.2"

    def test_no_version_reported(self, tmp_path: Path) -> None:
        with pytest.raises(PipelineError) as exc_info:
            run_nested_build(_python("print('done')"), tmp_path, ".bldctl")
        assert exc_info.value.detail["stdout"].strip() == "done"

    def test_failed_build(self, tmp_path: Path) -> None:
        with pytest.raises(CommandError) as exc_info:
            run_nested_build(_python("import sys; sys.exit(3)"), tmp_path, ".bldctl")
        assert exc_info.value.returncode == 3

    def test_config_discovery_pinned_to_checkout(self, tmp_path: Path) -> None:
        checkout = tmp_path / "checkout"
        checkout.mkdir()
        command = _python("import os; print('Installed Version: ' + os.environ['BLDCTL_CONFIG'])")
        assert run_nested_build(command, checkout, ".bldctl") == str(checkout / "bldctl.toml")

    def test_lineage_handed_down(self, tmp_path: Path) -> None:
        script = "import os; print('Installed Version: ' + os.environ['BLDCTL_RESOLVING'])"
        lineage = ["org.example/app", "org.example/lib"]
        version = run_nested_build(_python(script), tmp_path, ".bldctl", lineage)
        assert version == "org.example/app,org.example/lib"


class TestInheritedLineage:
    def test_empty_by_default(self) -> None:
        assert inherited_lineage() == ()

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BLDCTL_RESOLVING", "a/a,b/b")
        assert inherited_lineage() == ("a/a", "b/b")
