"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, ``bldctl.toml`` only contains
overrides. A project with no ``bldctl.toml`` at all builds with
``python -m build`` and installs with ``pip``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- bldctl.toml sections ---


class DescriptorConfig(BaseModel):
    """[descriptor] section."""

    model_config = {"frozen": True}

    filename: str = "project.toml"
    metadata_dir: str = ".bldctl"


class GitConfig(BaseModel):
    """[git] section."""

    model_config = {"frozen": True}

    executable: str = "git"
    deps_dir: str = ".git-deps"


class ResolverConfig(BaseModel):
    """[resolver] section."""

    model_config = {"frozen": True}

    tooling_coordinate: str = "bldctl"
    default_resource_paths: list[str] = Field(default_factory=lambda: ["src", "resources"])
    source_paths: list[str] = Field(default_factory=lambda: ["test", "dev"])


class PipelineConfig(BaseModel):
    """[pipeline] section.

    Commands are argv lists. ``{project}``, ``{version}``, ``{artifact}``,
    ``{artifact_dir}`` and ``{repository}`` are substituted before running.
    An empty list skips the step.
    """

    model_config = {"frozen": True}

    nested_build_command: list[str] = Field(default_factory=lambda: ["bldctl", "build"])
    package_command: list[str] = Field(
        default_factory=lambda: ["python", "-m", "build", "--outdir", "{artifact_dir}"]
    )
    install_command: list[str] = Field(
        default_factory=lambda: ["python", "-m", "pip", "install", "--no-deps", "{artifact}"]
    )
    publish_command: list[str] = Field(
        default_factory=lambda: [
            "python",
            "-m",
            "twine",
            "upload",
            "--repository-url",
            "{repository}",
            "{artifact}",
        ]
    )
    artifact_dir: str = "dist"
    dev_repository: str = "https://test.pypi.org/legacy/"


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    entry_points: bool = True
