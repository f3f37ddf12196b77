"""Project descriptor models and the values derived from them.

A descriptor is the declarative ``project.toml`` record: identity, version,
and an ordered list of dependency specs. Dependencies come in three kinds:

- plain:  ``["org.example/core", "1.0.0"]``
- local:  ``["org.example/sibling", "../sibling"]``
- vcs:    ``["org.example/forked", ["https://host/repo.git", "v2"]]``

The compact list form is normalized into the table form
(``{name = ..., version = ...}``) before validation. Trailing key/value
pairs in the compact form (``"scope", "test"``) become fields.

All models are frozen. Resolution produces a :class:`BuildEnvironment`
which is handed explicitly to the packaging pipeline.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, model_validator

from bldctl.domain.types import TEST_SCOPE, DependencyKind, Qualifier

_VERSION_LIKE = re.compile(r"^[0-9]+\..+")


def looks_like_local_path(value: Any) -> bool:
    """Return True if a compact-form version string is really a sibling path."""
    return isinstance(value, str) and _VERSION_LIKE.match(value) is None


class VersionDescriptor(BaseModel):
    """``[version]`` table of the descriptor."""

    model_config = {"frozen": True, "extra": "forbid"}

    major: int = Field(ge=0)
    minor: int = Field(ge=0)
    patch: int = Field(ge=0)
    qualifier: str | None = None

    @property
    def base(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def is_release(self) -> bool:
        return not self.qualifier or self.qualifier == Qualifier.RELEASE

    @property
    def is_dev(self) -> bool:
        return self.qualifier == Qualifier.DEV


class DependencySpec(BaseModel):
    """One entry of the descriptor's ``deps`` list.

    Exactly one of ``version``, ``git``/``ref``, or ``path`` is set.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    name: str = Field(min_length=1)
    version: str | None = None
    git: str | None = None
    ref: str | None = None
    path: str | None = None
    scope: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _expand_compact_form(cls, data: Any) -> Any:
        if not isinstance(data, (list, tuple)):
            return data
        if len(data) < 2 or len(data) % 2 != 0:
            msg = f"Dependency {list(data)!r} must be [name, version] plus key/value pairs"
            raise ValueError(msg)
        name, reference, *options = data
        fields: dict[str, Any] = {"name": name}
        if isinstance(reference, (list, tuple)):
            if len(reference) != 2:
                msg = f"Git dependency {name!r} must be [repository, ref]"
                raise ValueError(msg)
            fields["git"], fields["ref"] = reference
        elif looks_like_local_path(reference):
            fields["path"] = reference
        else:
            fields["version"] = reference
        for key, value in zip(options[::2], options[1::2], strict=True):
            fields[str(key).lstrip(":")] = value
        return fields

    @model_validator(mode="after")
    def _exactly_one_kind(self) -> DependencySpec:
        kinds = [
            self.version is not None,
            self.git is not None or self.ref is not None,
            self.path is not None,
        ]
        if sum(kinds) != 1:
            msg = f"Dependency {self.name!r} must set exactly one of version, git/ref, or path"
            raise ValueError(msg)
        if (self.git is None) != (self.ref is None):
            msg = f"Git dependency {self.name!r} needs both a repository and a ref"
            raise ValueError(msg)
        return self

    @property
    def kind(self) -> DependencyKind:
        if self.path is not None:
            return DependencyKind.LOCAL
        if self.git is not None:
            return DependencyKind.VCS
        return DependencyKind.PLAIN

    @property
    def is_test_scoped(self) -> bool:
        return self.scope == TEST_SCOPE

    @property
    def reference(self) -> str:
        """Human-readable form of whatever this spec points at."""
        if self.kind is DependencyKind.VCS:
            return f"{self.git}@{self.ref}"
        return self.path if self.path is not None else str(self.version)


class ProjectDescriptor(BaseModel):
    """The parsed ``project.toml``."""

    model_config = {"frozen": True, "extra": "forbid"}

    project: str = Field(min_length=1)
    version: VersionDescriptor
    description: str = ""
    license: str | dict[str, str] | None = None
    deps: tuple[DependencySpec, ...] = ()
    paths: tuple[str, ...] = ()

    @property
    def local_deps(self) -> list[DependencySpec]:
        return [d for d in self.deps if d.kind is DependencyKind.LOCAL]

    @property
    def transitive_deps(self) -> list[DependencySpec]:
        """Deps a consuming project inherits: everything not scoped."""
        return [d for d in self.deps if d.scope is None]


class ResolvedDependency(BaseModel):
    """A concrete, installable coordinate. Only the resolver creates these."""

    model_config = {"frozen": True}

    name: str
    version: str
    scope: str | None = None

    @property
    def is_test_scoped(self) -> bool:
        return self.scope == TEST_SCOPE


class BuildEnvironment(BaseModel):
    """Everything a build needs, resolved once and passed along explicitly."""

    model_config = {"frozen": True}

    root: Path
    descriptor: ProjectDescriptor
    dependencies: tuple[ResolvedDependency, ...] = ()
    resource_paths: tuple[str, ...] = ()
    source_paths: tuple[str, ...] = ()

    @property
    def runtime_dependencies(self) -> tuple[ResolvedDependency, ...]:
        return tuple(d for d in self.dependencies if not d.is_test_scoped)

    @property
    def test_dependencies(self) -> tuple[ResolvedDependency, ...]:
        return tuple(d for d in self.dependencies if d.is_test_scoped)


class BuildMetadata(BaseModel):
    """Artifact metadata handed to packagers (the pom-equivalent record)."""

    model_config = {"frozen": True}

    project: str
    version: str
    description: str = ""
    license: str | dict[str, str] | None = None
    dependencies: tuple[ResolvedDependency, ...] = ()

    @classmethod
    def from_environment(cls, environment: BuildEnvironment, version: str) -> BuildMetadata:
        descriptor = environment.descriptor
        return cls(
            project=descriptor.project,
            version=version,
            description=descriptor.description,
            license=descriptor.license,
            dependencies=environment.runtime_dependencies,
        )
