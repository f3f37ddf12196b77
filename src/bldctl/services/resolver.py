"""DependencyResolver — descriptor deps to a canonical, installable list.

Per dependency, in declaration order:

- plain: passed through.
- local: the sibling's descriptor is loaded and its unscoped deps are
  resolved recursively; the results replace the local entry. The sibling
  itself contributes nothing directly.
- vcs: cloned/fetched under ``<root>/<git.deps_dir>/<name>``, checked out at
  the ref, built there, and replaced by the version that build installed.

Afterwards the project's own coordinate and the tooling coordinate are
dropped and duplicates collapse to their last occurrence.

Local recursion carries the chain of project directories currently being
resolved. Re-entering one raises :class:`CyclicDependencyError`. Diamonds
are not cycles; shared siblings are simply resolved once per path. Git
dependencies are built in separate processes, so their guard is the
lineage of coordinates handed down through ``BLDCTL_RESOLVING``.

Unlike the service classes, the resolver raises instead of returning a
``ServiceResult``. :class:`~bldctl.services.planner.BuildPlanner` owns the
boundary.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from bldctl.domain.descriptor import (
    BuildEnvironment,
    DependencySpec,
    ProjectDescriptor,
    ResolvedDependency,
)
from bldctl.domain.errors import BuildToolError, CyclicDependencyError, ResolutionError
from bldctl.domain.types import DependencyKind
from bldctl.infrastructure.descriptor import load_descriptor
from bldctl.infrastructure.git import GitProbe
from bldctl.infrastructure.nested import inherited_lineage, run_nested_build

if TYPE_CHECKING:
    from bldctl.config.settings import BldSettings

logger = logging.getLogger(__name__)

Chain = tuple[Path, ...]


def canonical_dependencies(
    entries: Iterable[ResolvedDependency],
    *,
    exclude: Iterable[str] = (),
) -> list[ResolvedDependency]:
    """Drop excluded coordinates and keep only the last occurrence of each.

    ``[A 1.0, B 1.0, A 2.0]`` becomes ``[B 1.0, A 2.0]``: later entries
    override earlier ones, and survivors keep their relative order.
    """
    excluded = set(exclude)
    seen: set[str] = set()
    kept: list[ResolvedDependency] = []
    for dep in reversed(list(entries)):
        if dep.name in excluded or dep.name in seen:
            continue
        seen.add(dep.name)
        kept.append(dep)
    kept.reverse()
    return kept


class DependencyResolver:
    """Resolves dependency specs relative to a project root."""

    def __init__(self, settings: BldSettings, probe: GitProbe | None = None) -> None:
        self._settings = settings
        self._probe = probe or GitProbe(settings.git)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(
        self,
        specs: Sequence[DependencySpec],
        self_coordinate: str,
        *,
        root: Path | None = None,
    ) -> list[ResolvedDependency]:
        """Resolve *specs* declared by the project at *root*.

        Raises:
            ResolutionError: on the first failure; nothing partial is returned.
        """
        root = (root or self._settings.project_root).resolve()
        lineage = (*inherited_lineage(), self_coordinate)
        entries = self._resolve_all(specs, root, root, (root,), lineage)
        exclude = {self_coordinate, self._settings.resolver.tooling_coordinate}
        resolved = canonical_dependencies(entries, exclude=exclude)
        logger.debug("Resolved %d dependencies for %s", len(resolved), self_coordinate)
        return resolved

    def resource_paths(self, descriptor: ProjectDescriptor, root: Path | None = None) -> tuple[str, ...]:
        """Source/resource paths for *descriptor*, including those of local siblings.

        Sibling paths are expressed relative to *root*
        (``../sibling/src``).
        """
        root = (root or self._settings.project_root).resolve()
        paths = self._collect_paths(descriptor, root, Path("."), (root,))
        return tuple(sorted(paths))

    def build_environment(self, descriptor: ProjectDescriptor, root: Path | None = None) -> BuildEnvironment:
        root = (root or self._settings.project_root).resolve()
        return BuildEnvironment(
            root=root,
            descriptor=descriptor,
            dependencies=tuple(self.resolve(descriptor.deps, descriptor.project, root=root)),
            resource_paths=self.resource_paths(descriptor, root),
            source_paths=tuple(self._settings.resolver.source_paths),
        )

    # ------------------------------------------------------------------
    # Dependency recursion
    # ------------------------------------------------------------------

    def _resolve_all(
        self,
        specs: Iterable[DependencySpec],
        base_dir: Path,
        root: Path,
        chain: Chain,
        lineage: tuple[str, ...],
    ) -> list[ResolvedDependency]:
        entries: list[ResolvedDependency] = []
        for spec in specs:
            entries.extend(self._resolve_one(spec, base_dir, root, chain, lineage))
        return entries

    def _resolve_one(
        self,
        spec: DependencySpec,
        base_dir: Path,
        root: Path,
        chain: Chain,
        lineage: tuple[str, ...],
    ) -> list[ResolvedDependency]:
        try:
            if spec.kind is DependencyKind.LOCAL:
                return self._resolve_local(spec, base_dir, root, chain, lineage)
            if spec.kind is DependencyKind.VCS:
                return [self._resolve_vcs(spec, root, lineage)]
            return [ResolvedDependency(name=spec.name, version=str(spec.version), scope=spec.scope)]
        except ResolutionError:
            raise
        except BuildToolError as exc:
            msg = f"Could not resolve {spec.name} ({spec.reference}): {exc.message}"
            raise ResolutionError(msg, spec=spec, cause=exc) from exc

    def _resolve_local(
        self,
        spec: DependencySpec,
        base_dir: Path,
        root: Path,
        chain: Chain,
        lineage: tuple[str, ...],
    ) -> list[ResolvedDependency]:
        directory = self._enter(spec, base_dir, chain)
        sibling = load_descriptor(directory, self._settings.descriptor.filename)
        logger.debug("Splicing transitive deps of %s from %s", sibling.project, directory)
        entries = self._resolve_all(
            sibling.transitive_deps, directory, root, (*chain, directory), lineage
        )
        if spec.scope is not None:
            entries = [e.model_copy(update={"scope": spec.scope}) for e in entries]
        return entries

    def _resolve_vcs(
        self,
        spec: DependencySpec,
        root: Path,
        lineage: tuple[str, ...],
    ) -> ResolvedDependency:
        assert spec.git is not None and spec.ref is not None
        if spec.name in lineage:
            raise CyclicDependencyError([*lineage, spec.name], spec=spec)
        deps_root = root / self._settings.git.deps_dir
        clone_dir = deps_root / spec.name
        self._probe.ensure_checkout(spec.git, spec.ref, clone_dir, deps_root=deps_root)
        version = run_nested_build(
            self._settings.pipeline.nested_build_command,
            clone_dir,
            self._settings.descriptor.metadata_dir,
            lineage,
        )
        return ResolvedDependency(name=spec.name, version=version, scope=spec.scope)

    # ------------------------------------------------------------------
    # Resource path recursion
    # ------------------------------------------------------------------

    def _collect_paths(
        self,
        descriptor: ProjectDescriptor,
        directory: Path,
        location: Path,
        chain: Chain,
    ) -> set[str]:
        own = [*self._settings.resolver.default_resource_paths, *descriptor.paths]
        paths = {_relative(location / p) for p in own}
        for spec in descriptor.local_deps:
            assert spec.path is not None
            try:
                sibling_dir = self._enter(spec, directory, chain)
                sibling = load_descriptor(sibling_dir, self._settings.descriptor.filename)
            except ResolutionError:
                raise
            except BuildToolError as exc:
                msg = f"Could not read paths of {spec.name} ({spec.path}): {exc.message}"
                raise ResolutionError(msg, spec=spec, cause=exc) from exc
            paths |= self._collect_paths(
                sibling,
                sibling_dir,
                location / spec.path,
                (*chain, sibling_dir),
            )
        return paths

    @staticmethod
    def _enter(spec: DependencySpec, base_dir: Path, chain: Chain) -> Path:
        """Resolve a local spec's directory, refusing to revisit the chain."""
        assert spec.path is not None
        directory = (base_dir / spec.path).resolve()
        if directory in chain:
            raise CyclicDependencyError([*chain, directory], spec=spec)
        return directory


def _relative(path: Path) -> str:
    return Path(os.path.normpath(path)).as_posix()
