"""Version string synthesis from a descriptor and live repository state.

Release builds get ``major.minor.patch``. Labelled builds append the label.
Dev builds append ``-{branch}-{commit count, 4-wide}-{short hash}`` so every
commit on every branch yields a distinct, sortable-per-branch version.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from bldctl.domain.descriptor import VersionDescriptor

COUNT_WIDTH = 4


@dataclass(frozen=True)
class RepositoryState:
    """Snapshot of a working tree. Never cached; always queried fresh."""

    clean: bool
    branch: str
    commit_count: int
    short_hash: str


class RepositoryStateProvider(Protocol):
    """Anything that can answer the three queries a dev version needs."""

    def current_branch(self, directory: Path | str) -> str: ...

    def commit_count(self, directory: Path | str) -> int: ...

    def short_hash(self, directory: Path | str) -> str: ...


def synthesize(
    version: VersionDescriptor,
    provider: RepositoryStateProvider,
    directory: Path | str = ".",
) -> str:
    """Return the final version string for *version*.

    Only dev builds touch the repository; each call re-queries it.
    """
    if version.is_dev:
        branch = provider.current_branch(directory)
        count = provider.commit_count(directory)
        short = provider.short_hash(directory)
        return f"{version.base}-{branch}-{count:0{COUNT_WIDTH}d}-{short}"
    if version.is_release:
        return version.base
    return f"{version.base}-{version.qualifier}"
