"""Git access: working-tree probes and dependency checkouts.

Unlike a best-effort integration, every call here is load-bearing for the
version string or the dependency set, so failures are never swallowed. A
non-zero exit, a missing binary, or blank output raises
:class:`~bldctl.domain.errors.RepositoryError`.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from bldctl.config.models import GitConfig
from bldctl.domain.errors import RepositoryError
from bldctl.domain.version import RepositoryState
from bldctl.infrastructure.process import run_command

logger = logging.getLogger(__name__)

# A .gitignore that ignores its own directory, itself included.
_SELF_IGNORE = "# generated by bldctl\n*\n"


def ignore_directory(directory: Path) -> None:
    """Keep bldctl's working directories out of ``git status``.

    Without this, metadata and dependency clones would make the next
    build's clean-tree check fail.
    """
    directory.mkdir(parents=True, exist_ok=True)
    gitignore = directory / ".gitignore"
    if not gitignore.exists():
        gitignore.write_text(_SELF_IGNORE, encoding="utf-8")


class GitProbe:
    """Queries a working tree. Satisfies ``RepositoryStateProvider``."""

    def __init__(self, config: GitConfig | None = None) -> None:
        self._config = config or GitConfig()

    # ------------------------------------------------------------------
    # Probes
    # ------------------------------------------------------------------

    def status(self, directory: Path | str) -> str:
        """Raw ``git status --porcelain`` output (blank when clean)."""
        return self._run_git(directory, "status", "--porcelain").stdout

    def is_clean(self, directory: Path | str) -> bool:
        """True iff nothing is staged, modified, or untracked."""
        return not self.status(directory).strip()

    def current_branch(self, directory: Path | str) -> str:
        """Symbolic name of HEAD, or ``"HEAD"`` when detached."""
        return self._query(directory, "rev-parse", "--symbolic-full-name", "--abbrev-ref", "HEAD")

    def commit_count(self, directory: Path | str) -> int:
        """Number of commits reachable from HEAD."""
        raw = self._query(directory, "rev-list", "HEAD", "--count")
        try:
            return int(raw)
        except ValueError as exc:
            raise RepositoryError(
                [self._config.executable, "rev-list", "HEAD", "--count"],
                cwd=Path(directory),
                stdout=raw,
                message=f"Unexpected commit count {raw!r} in {Path(directory).resolve()}",
            ) from exc

    def short_hash(self, directory: Path | str) -> str:
        """Shortest unambiguous hash of HEAD.

        git widens the abbreviation on collision, so the value is unique
        within the repository but has no fixed width.
        """
        return self._query(directory, "rev-parse", "--short", "HEAD")

    def state(self, directory: Path | str) -> RepositoryState:
        """Fresh snapshot of all four probes."""
        return RepositoryState(
            clean=self.is_clean(directory),
            branch=self.current_branch(directory),
            commit_count=self.commit_count(directory),
            short_hash=self.short_hash(directory),
        )

    # ------------------------------------------------------------------
    # Checkouts
    # ------------------------------------------------------------------

    def ensure_checkout(
        self,
        repository: str,
        ref: str,
        clone_dir: Path,
        *,
        deps_root: Path | None = None,
    ) -> Path:
        """Clone *repository* into *clone_dir* (or refresh it) and check out *ref*.

        Safe to repeat: an existing clone gets its origin URL reset and is
        fetched before the checkout. A branch *ref* is reset to the fetched
        ``origin/<ref>`` so it follows upstream; tags and commits are checked
        out as they are. *deps_root*, when given, is the shared clone
        directory to hide from the enclosing repository.
        """
        if clone_dir.exists():
            logger.debug("Updating %s in %s", repository, clone_dir)
            self._run_git(clone_dir, "remote", "set-url", "origin", repository)
            self._run_git(clone_dir, "fetch")
        else:
            logger.debug("Cloning %s into %s", repository, clone_dir)
            clone_dir.parent.mkdir(parents=True, exist_ok=True)
            if deps_root is not None:
                ignore_directory(deps_root)
            self._run_git(clone_dir.parent, "clone", repository, str(clone_dir))
        if self._has_ref(clone_dir, f"refs/remotes/origin/{ref}"):
            self._run_git(clone_dir, "checkout", "-q", "-B", ref, f"origin/{ref}")
        else:
            self._run_git(clone_dir, "checkout", "-q", ref)
        return clone_dir

    # ------------------------------------------------------------------
    # Git subprocess helpers
    # ------------------------------------------------------------------

    def _run_git(self, directory: Path | str, *args: str) -> subprocess.CompletedProcess[str]:
        """Run a git command in *directory*. Raises RepositoryError on failure."""
        return run_command(
            [self._config.executable, *args],
            cwd=Path(directory),
            error_cls=RepositoryError,
        )

    def _has_ref(self, directory: Path | str, refname: str) -> bool:
        """True iff *refname* (a full ``refs/...`` name) exists."""
        listed = self._run_git(directory, "for-each-ref", "--format=%(refname)", refname).stdout
        return refname in listed.splitlines()

    def _query(self, directory: Path | str, *args: str) -> str:
        """Run a query command whose output must be non-blank."""
        result = self._run_git(directory, *args)
        value = result.stdout.strip()
        if not value:
            path = Path(directory).resolve()
            raise RepositoryError(
                [self._config.executable, *args],
                cwd=path,
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
                message=f"Could not find git repository at {path}",
            )
        return value
