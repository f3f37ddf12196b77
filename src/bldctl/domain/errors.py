"""Error taxonomy for bldctl.

Every failure is fatal at the point raised. Each error carries a stable
``code`` so tooling can branch on the kind, and a ``detail`` dict with the
structured cause. The service layer converts these into
:class:`~bldctl.services.result.ServiceError` payloads.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bldctl.domain.descriptor import DependencySpec


class BuildToolError(Exception):
    """Base class for all bldctl failures."""

    code: str = "BUILD_ERROR"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = detail


class MissingDescriptorError(BuildToolError):
    """The project descriptor file does not exist."""

    code = "MISSING_DESCRIPTOR"

    def __init__(self, path: Path) -> None:
        msg = f"Could not find file {path.name} in project directory ({path.parent})"
        super().__init__(msg, path=str(path))
        self.path = path


class DescriptorError(BuildToolError):
    """The project descriptor exists but cannot be parsed or validated."""

    code = "INVALID_DESCRIPTOR"


class CommandError(BuildToolError):
    """A subprocess exited non-zero (or could not be started)."""

    code = "COMMAND_FAILED"

    def __init__(
        self,
        args: list[str],
        *,
        cwd: Path | None = None,
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
        message: str | None = None,
    ) -> None:
        msg = message or f"Command '{' '.join(args)}' returned a non-zero exit code ({returncode})"
        super().__init__(
            msg,
            args=list(args),
            cwd=str(cwd) if cwd is not None else None,
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
        )
        self.argv = list(args)
        self.cwd = cwd
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class RepositoryError(CommandError):
    """A VCS query failed, returned nothing, or the directory is not a repository."""

    code = "REPOSITORY_ERROR"


class ResolutionError(BuildToolError):
    """Dependency resolution aborted on the first underlying failure."""

    code = "RESOLUTION_FAILED"

    def __init__(
        self,
        message: str,
        *,
        spec: DependencySpec | None = None,
        cause: BuildToolError | None = None,
        **detail: Any,
    ) -> None:
        if spec is not None:
            detail["spec"] = spec.model_dump(mode="json", exclude_none=True)
        if cause is not None:
            detail["cause"] = {"code": cause.code, "message": cause.message, **cause.detail}
        super().__init__(message, **detail)
        self.spec = spec
        self.cause = cause


class CyclicDependencyError(ResolutionError):
    """A dependency loops back onto a project already being resolved.

    The chain holds project directories for local references and
    coordinates for git dependencies built in nested fashion.
    """

    code = "CYCLIC_DEPENDENCY"

    def __init__(self, chain: Sequence[Path | str], *, spec: DependencySpec | None = None) -> None:
        rendered = " -> ".join(str(p) for p in chain)
        super().__init__(
            f"Cyclic dependency: {rendered}",
            spec=spec,
            chain=[str(p) for p in chain],
        )
        self.chain = list(chain)


class LocalDependencyError(BuildToolError):
    """A publishable build declares a dependency on unpublished sibling sources."""

    code = "LOCAL_DEPENDENCY"

    def __init__(self, name: str, path: str) -> None:
        msg = f"Cannot build: project descriptor has a local dependency, [{name} {path}]"
        super().__init__(msg, dep_name=name, dep_path=path)
        self.name = name
        self.path = path


class DirtyRepositoryError(BuildToolError):
    """The working tree has uncommitted changes or untracked files."""

    code = "DIRTY_REPOSITORY"

    def __init__(self, directory: Path, status: str = "") -> None:
        msg = "Cannot build: git repository has uncommitted changes"
        super().__init__(msg, directory=str(directory), status=status)
        self.directory = directory


class WrongQualifierError(BuildToolError):
    """The version qualifier does not match what the pipeline requires."""

    code = "WRONG_QUALIFIER"

    def __init__(self, expected: str, actual: str | None) -> None:
        msg = f"Cannot deploy: version qualifier must be '{expected}', found '{actual or 'release'}'"
        super().__init__(msg, expected=expected, actual=actual)
        self.expected = expected
        self.actual = actual


class PipelineError(BuildToolError):
    """A packaging, install, or publish step failed or reported nothing."""

    code = "PIPELINE_FAILED"
