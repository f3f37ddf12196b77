"""Classification enums for dependency specs and version qualifiers."""

from __future__ import annotations

from enum import StrEnum


class DependencyKind(StrEnum):
    """The three mutually exclusive ways a dependency can be referenced."""

    PLAIN = "plain"
    VCS = "vcs"
    LOCAL = "local"


class Qualifier(StrEnum):
    """Qualifiers with special meaning. Any other string is a free-form label."""

    RELEASE = "release"
    DEV = "dev"


# Scope marking dependencies that only matter for tests.
TEST_SCOPE = "test"

# Sentinel returned by git for a detached HEAD.
DETACHED_HEAD = "HEAD"
