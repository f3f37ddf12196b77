"""BuildPlanner — preconditions and packaging pipelines.

Pipelines:
  build:      CHECK → RESOLVE → VERSION → METADATA → PACKAGE → INSTALL → REPORT
  deploy_dev: CHECK(+dev) → RESOLVE → VERSION → METADATA → PACKAGE → PUBLISH → REPORT

Preconditions, in order, each fatal:
  1. no local (sibling path) dependencies
  2. clean working tree at the project root
  3. (deploy_dev only) the ``dev`` qualifier

Packaging mechanics live in pluggy plugins; see
:mod:`bldctl.plugins.hookspecs`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import TYPE_CHECKING, Any

from bldctl.domain.descriptor import BuildEnvironment, BuildMetadata, ProjectDescriptor
from bldctl.domain.errors import (
    BuildToolError,
    DirtyRepositoryError,
    LocalDependencyError,
    PipelineError,
    WrongQualifierError,
)
from bldctl.domain.types import Qualifier
from bldctl.domain.version import synthesize
from bldctl.infrastructure.git import GitProbe, ignore_directory
from bldctl.infrastructure.nested import write_build_result
from bldctl.plugins.builtins.commands import CommandPipelinePlugin
from bldctl.plugins.manager import PluginManager
from bldctl.services.base import BaseService
from bldctl.services.resolver import DependencyResolver
from bldctl.services.result import ServiceResult

if TYPE_CHECKING:
    from bldctl.config.settings import BldSettings

logger = logging.getLogger(__name__)

METADATA_FILENAME = "metadata.json"


class BuildPlanner(BaseService):
    """Validates preconditions and drives the packaging pipelines."""

    def __init__(
        self,
        settings: BldSettings,
        *,
        probe: GitProbe | None = None,
        plugins: PluginManager | None = None,
    ) -> None:
        super().__init__(settings, probe=probe)
        self._plugins = plugins
        self._resolver = DependencyResolver(settings, self._probe)

    @property
    def resolver(self) -> DependencyResolver:
        return self._resolver

    @property
    def plugins(self) -> PluginManager:
        """Plugin manager, built on first use with the built-in command plugin."""
        if self._plugins is None:
            pm = PluginManager()
            pm.register_plugin(CommandPipelinePlugin(self._settings.pipeline), name="commands")
            if self._settings.plugins.entry_points:
                pm.discover()
            self._plugins = pm
        return self._plugins

    # ------------------------------------------------------------------
    # Core operations (raise BuildToolError)
    # ------------------------------------------------------------------

    def check_preconditions(
        self,
        descriptor: ProjectDescriptor,
        *,
        require_dev: bool = False,
    ) -> list[str]:
        """Raise on the first failed precondition; return the names of those passed."""
        local = descriptor.local_deps
        if local:
            raise LocalDependencyError(local[0].name, str(local[0].path))
        root = self._settings.project_root
        status = self._probe.status(root)
        if status.strip():
            raise DirtyRepositoryError(root, status)
        passed = ["no_local_dependencies", "clean_repository"]
        if require_dev:
            if not descriptor.version.is_dev:
                raise WrongQualifierError(Qualifier.DEV, descriptor.version.qualifier)
            passed.append("dev_qualifier")
        return passed

    def version_for(self, descriptor: ProjectDescriptor) -> str:
        """Synthesize the version string from live repository state."""
        return synthesize(descriptor.version, self._probe, self._settings.project_root)

    # ------------------------------------------------------------------
    # Service operations (return ServiceResult)
    # ------------------------------------------------------------------

    def check(self, *, require_dev: bool = False) -> ServiceResult:
        """Run the build preconditions without building."""
        op = "check"
        try:
            descriptor = self._load_descriptor()
            passed = self.check_preconditions(descriptor, require_dev=require_dev)
        except BuildToolError as exc:
            return self._failure(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={"project": descriptor.project, "checks": passed},
        )

    def resolve(self) -> ServiceResult:
        """Resolve dependencies and paths into a build environment."""
        op = "resolve"
        try:
            descriptor = self._load_descriptor()
            environment = self._resolver.build_environment(descriptor, self._settings.project_root)
        except BuildToolError as exc:
            return self._failure(op, exc)
        warnings = [
            f"Local dependency {spec.name} ({spec.path}) blocks publishing builds"
            for spec in descriptor.local_deps
        ]
        return ServiceResult(
            ok=True,
            op=op,
            data=_environment_data(environment),
            warnings=warnings,
        )

    def resource_paths(self) -> ServiceResult:
        """Source/resource paths only; never clones or builds anything."""
        op = "resource_paths"
        try:
            descriptor = self._load_descriptor()
            paths = self._resolver.resource_paths(descriptor, self._settings.project_root)
        except BuildToolError as exc:
            return self._failure(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={"project": descriptor.project, "resource_paths": list(paths)},
        )

    def print_version(self) -> ServiceResult:
        """Report the version a build would produce right now."""
        op = "print_version"
        try:
            descriptor = self._load_descriptor()
            version = self.version_for(descriptor)
        except BuildToolError as exc:
            return self._failure(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={"project": descriptor.project, "version": version},
        )

    def status(self) -> ServiceResult:
        """Snapshot of the project's working tree."""
        op = "status"
        root = self._settings.project_root
        try:
            state = self._probe.state(root)
        except BuildToolError as exc:
            return self._failure(op, exc)
        return ServiceResult(ok=True, op=op, data={"root": str(root), **asdict(state)})

    def build(self) -> ServiceResult:
        """Build the project and install it locally."""
        return self._pipeline("build", publish_to=None)

    def deploy_dev(self) -> ServiceResult:
        """Build a dev version and publish it to the dev repository."""
        return self._pipeline("deploy_dev", publish_to=self._settings.pipeline.dev_repository)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _pipeline(self, op: str, *, publish_to: str | None) -> ServiceResult:
        try:
            descriptor = self._load_descriptor()
            checks = self.check_preconditions(descriptor, require_dev=publish_to is not None)
            environment = self._resolver.build_environment(descriptor, self._settings.project_root)
            version = self.version_for(descriptor)
            metadata = BuildMetadata.from_environment(environment, version)
            metadata_path = self._write_metadata(metadata)
            artifact = self._run_hooks(environment, metadata, metadata_path, publish_to)
            write_build_result(self._settings.metadata_dir, metadata.project, version)
        except BuildToolError as exc:
            return self._failure(op, exc)

        logger.debug("%s finished: %s %s", op, metadata.project, version)
        data: dict[str, Any] = {
            "project": metadata.project,
            "version": version,
            "artifact": artifact,
            "checks": checks,
            "dependencies": [d.model_dump() for d in metadata.dependencies],
        }
        if publish_to is not None:
            data["repository"] = publish_to
        return ServiceResult(ok=True, op=op, data=data)

    def _run_hooks(
        self,
        environment: BuildEnvironment,
        metadata: BuildMetadata,
        metadata_path: Path,
        publish_to: str | None,
    ) -> str | None:
        hook = self.plugins.hook
        try:
            artifact = hook.bldctl_package(
                environment=environment,
                metadata=metadata,
                metadata_path=metadata_path,
            )
            if publish_to is None:
                hook.bldctl_install(environment=environment, metadata=metadata, artifact=artifact)
            else:
                hook.bldctl_publish(
                    environment=environment,
                    metadata=metadata,
                    artifact=artifact,
                    repository=publish_to,
                )
            hook.bldctl_post_build(environment=environment, metadata=metadata, artifact=artifact)
        except BuildToolError:
            raise
        except Exception as exc:
            msg = f"Pipeline plugin failed: {exc}"
            raise PipelineError(msg, exception=type(exc).__name__) from exc
        return artifact

    def _write_metadata(self, metadata: BuildMetadata) -> Path:
        metadata_dir = self._settings.metadata_dir
        ignore_directory(metadata_dir)
        path = metadata_dir / METADATA_FILENAME
        path.write_text(json.dumps(metadata.model_dump(mode="json"), indent=2) + "\n")
        return path


def _environment_data(environment: BuildEnvironment) -> dict[str, Any]:
    return {
        "project": environment.descriptor.project,
        "count": len(environment.dependencies),
        "dependencies": [d.model_dump() for d in environment.dependencies],
        "resource_paths": list(environment.resource_paths),
        "source_paths": list(environment.source_paths),
    }
