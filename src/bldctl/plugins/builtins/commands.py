"""Built-in pipeline plugin that shells out to configured commands.

Each step runs its ``[pipeline]`` argv in the project root after
substituting ``{project}``, ``{version}``, ``{artifact}``,
``{artifact_dir}`` and ``{repository}``. ``BLDCTL_PROJECT`` and
``BLDCTL_VERSION`` are exported so packagers can stamp the synthesized
version. An empty command list skips the step, which is how a project
hands a step over to a third-party plugin.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import pluggy

from bldctl.config.models import PipelineConfig
from bldctl.domain.descriptor import BuildEnvironment, BuildMetadata
from bldctl.domain.errors import CommandError, PipelineError
from bldctl.infrastructure.process import run_command

hookimpl = pluggy.HookimplMarker("bldctl")

logger = logging.getLogger(__name__)


def render_command(argv: Sequence[str], values: dict[str, str]) -> list[str]:
    """Substitute ``{placeholders}`` in each argument.

    Arguments referencing an empty value are dropped.
    """
    rendered: list[str] = []
    for arg in argv:
        try:
            value = arg.format_map(values)
        except KeyError as exc:
            msg = f"Unknown placeholder {exc} in pipeline command {list(argv)!r}"
            raise PipelineError(msg, command=list(argv)) from exc
        if value or not arg:
            rendered.append(value)
    return rendered


class CommandPipelinePlugin:
    """Runs ``package``/``install``/``publish`` as external commands."""

    def __init__(self, config: PipelineConfig | None = None) -> None:
        self._config = config or PipelineConfig()

    @hookimpl
    def bldctl_package(
        self,
        environment: BuildEnvironment,
        metadata: BuildMetadata,
        metadata_path: Path,
    ) -> str | None:
        """Run the package command and return the newest artifact it produced."""
        if not self._config.package_command:
            return None
        artifact_dir = environment.root / self._config.artifact_dir
        before = self._artifacts(artifact_dir)
        self._run("package", self._config.package_command, environment, metadata)
        after = self._artifacts(artifact_dir)
        # Rebuilding the same version rewrites the artifact in place.
        produced = [p for p, stamp in after.items() if before.get(p) != stamp]
        if not produced:
            logger.debug("package step wrote nothing to %s", artifact_dir)
            return None
        newest = max(produced, key=lambda p: after[p])
        return str(newest)

    @hookimpl
    def bldctl_install(
        self,
        environment: BuildEnvironment,
        metadata: BuildMetadata,
        artifact: str | None,
    ) -> None:
        """Install the artifact locally."""
        if self._config.install_command:
            self._run("install", self._config.install_command, environment, metadata, artifact)

    @hookimpl
    def bldctl_publish(
        self,
        environment: BuildEnvironment,
        metadata: BuildMetadata,
        artifact: str | None,
        repository: str,
    ) -> None:
        """Upload the artifact to *repository*."""
        if self._config.publish_command:
            self._run(
                "publish",
                self._config.publish_command,
                environment,
                metadata,
                artifact,
                repository=repository,
            )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _run(
        self,
        step: str,
        argv: Sequence[str],
        environment: BuildEnvironment,
        metadata: BuildMetadata,
        artifact: str | None = None,
        *,
        repository: str = "",
    ) -> None:
        values = {
            "project": metadata.project,
            "version": metadata.version,
            "artifact": artifact or "",
            "artifact_dir": self._config.artifact_dir,
            "repository": repository,
        }
        command = render_command(argv, values)
        logger.debug("%s step: %s", step, " ".join(command))
        try:
            run_command(
                command,
                cwd=environment.root,
                env={"BLDCTL_PROJECT": metadata.project, "BLDCTL_VERSION": metadata.version},
            )
        except CommandError as exc:
            msg = f"{step} step failed: {exc.message}"
            raise PipelineError(msg, step=step, **exc.detail) from exc

    @staticmethod
    def _artifacts(directory: Path) -> dict[Path, int]:
        """Modification time (ns) of every file in *directory*."""
        if not directory.is_dir():
            return {}
        return {p: p.stat().st_mtime_ns for p in directory.iterdir() if p.is_file()}
