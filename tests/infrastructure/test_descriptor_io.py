"""Tests for reading project.toml from disk."""

from __future__ import annotations

from pathlib import Path

import pytest

from bldctl.domain.errors import DescriptorError, MissingDescriptorError
from bldctl.domain.types import DependencyKind
from bldctl.infrastructure.descriptor import load_descriptor, parse_descriptor
from tests.conftest import write_descriptor


class TestLoadDescriptor:
    def test_loads_compact_deps(self, tmp_path: Path) -> None:
        write_descriptor(
            tmp_path,
            deps=[
                ["org.example/core", "1.0.0"],
                ["org.example/lib", "../lib"],
                ["org.example/fork", ["https://host/fork.git", "v2"]],
                ["org.example/check", "0.1.0", "scope", "test"],
            ],
            paths=["extra"],
        )
        descriptor = load_descriptor(tmp_path)
        assert descriptor.project == "org.example/app"
        assert descriptor.version.base == "1.2.3"
        assert [d.kind for d in descriptor.deps] == [
            DependencyKind.PLAIN,
            DependencyKind.LOCAL,
            DependencyKind.VCS,
            DependencyKind.PLAIN,
        ]
        assert descriptor.deps[3].scope == "test"
        assert descriptor.paths == ("extra",)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(MissingDescriptorError) as exc_info:
            load_descriptor(tmp_path)
        assert exc_info.value.path == (tmp_path / "project.toml").resolve()
        assert "Could not find file project.toml" in exc_info.value.message

    def test_custom_filename(self, tmp_path: Path) -> None:
        (tmp_path / "build.toml").write_text(
            'project = "x/y"\n[version]\nmajor = 0\nminor = 1\npatch = 0\n'
        )
        assert load_descriptor(tmp_path, "build.toml").project == "x/y"

    def test_reads_fresh_each_time(self, tmp_path: Path) -> None:
        write_descriptor(tmp_path, version=(1, 0, 0))
        assert load_descriptor(tmp_path).version.base == "1.0.0"
        write_descriptor(tmp_path, version=(1, 1, 0))
        assert load_descriptor(tmp_path).version.base == "1.1.0"


class TestParseDescriptor:
    def test_invalid_toml(self) -> None:
        with pytest.raises(DescriptorError, match="Invalid TOML"):
            parse_descriptor("project = [")

    def test_missing_version_table(self) -> None:
        with pytest.raises(DescriptorError) as exc_info:
            parse_descriptor('project = "x/y"\n')
        assert exc_info.value.code == "INVALID_DESCRIPTOR"
        assert exc_info.value.detail["errors"][0]["loc"] == "version"

    def test_bad_dependency_location(self) -> None:
        raw = (
            'project = "x/y"\n'
            'deps = [["a/b", "1.0", "scope"]]\n'
            "[version]\nmajor = 1\nminor = 0\npatch = 0\n"
        )
        with pytest.raises(DescriptorError) as exc_info:
            parse_descriptor(raw, source=Path("project.toml"))
        assert exc_info.value.detail["errors"][0]["loc"].startswith("deps.0")
        assert "project.toml" in exc_info.value.message
