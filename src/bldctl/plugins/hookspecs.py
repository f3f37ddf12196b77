"""Pluggy hook specifications for the packaging pipeline.

The planner owns ordering and preconditions; plugins own the mechanics of
turning a resolved :class:`BuildEnvironment` into an artifact and moving it
somewhere. Hooks run synchronously and any exception aborts the pipeline.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from bldctl.domain.descriptor import BuildEnvironment, BuildMetadata

hookspec = pluggy.HookspecMarker("bldctl")


class BldctlHookSpec:
    """Hook specifications for the bldctl plugin system."""

    @hookspec(firstresult=True)
    def bldctl_package(
        self,
        environment: BuildEnvironment,
        metadata: BuildMetadata,
        metadata_path: Path,
    ) -> str | None:
        """Produce an artifact. Return its path, or None if nothing was built."""

    @hookspec
    def bldctl_install(
        self,
        environment: BuildEnvironment,
        metadata: BuildMetadata,
        artifact: str | None,
    ) -> None:
        """Install the artifact into the local environment/repository."""

    @hookspec
    def bldctl_publish(
        self,
        environment: BuildEnvironment,
        metadata: BuildMetadata,
        artifact: str | None,
        repository: str,
    ) -> None:
        """Publish the artifact to a remote repository."""

    @hookspec
    def bldctl_post_build(
        self,
        environment: BuildEnvironment,
        metadata: BuildMetadata,
        artifact: str | None,
    ) -> None:
        """Called after a pipeline finished successfully."""
