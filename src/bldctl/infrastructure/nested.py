"""Exchange format between a build and whoever ran it.

A finished build reports its installed version two ways:

- a stdout line ``Installed Version: <version>`` (the long-standing textual
  contract, which other build tools speaking it rely on), and
- ``<metadata_dir>/build-result.json`` with ``{"project", "version"}``.

Readers prefer the file and fall back to scraping stdout.

Nested builds also inherit ``BLDCTL_RESOLVING``, the comma-separated
coordinates of the builds that spawned them, so a git dependency that leads
back to one of its dependents fails instead of recursing forever.
"""

from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Sequence
from pathlib import Path

from bldctl.config.discovery import CONFIG_ENV_VAR, CONFIG_FILENAME
from bldctl.domain.errors import PipelineError
from bldctl.infrastructure.process import run_command

INSTALLED_VERSION_PREFIX = "Installed Version:"
BUILD_RESULT_FILENAME = "build-result.json"
RESOLVING_ENV_VAR = "BLDCTL_RESOLVING"

_INSTALLED_VERSION_RE = re.compile(r"(?m)^Installed Version:[ \t]*(.*)$")

logger = logging.getLogger(__name__)


def format_installed_version(version: str) -> str:
    return f"{INSTALLED_VERSION_PREFIX} {version}"


def parse_installed_version(stdout: str) -> str | None:
    """Return the version from the first ``Installed Version:`` line, if any."""
    match = _INSTALLED_VERSION_RE.search(stdout)
    if match is None:
        return None
    return match.group(1).strip() or None


def write_build_result(metadata_dir: Path, project: str, version: str) -> Path:
    metadata_dir.mkdir(parents=True, exist_ok=True)
    path = metadata_dir / BUILD_RESULT_FILENAME
    path.write_text(json.dumps({"project": project, "version": version}, indent=2) + "\n")
    return path


def read_build_result(metadata_dir: Path) -> str | None:
    """Version recorded by the last build in *metadata_dir*, or None."""
    path = metadata_dir / BUILD_RESULT_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError:
        logger.warning("Ignoring unreadable build result %s", path)
        return None
    version = data.get("version") if isinstance(data, dict) else None
    return str(version) if version else None


def inherited_lineage() -> tuple[str, ...]:
    """Coordinates of the enclosing builds, outermost first."""
    raw = os.environ.get(RESOLVING_ENV_VAR, "")
    return tuple(c for c in raw.split(",") if c)


def run_nested_build(
    command: Sequence[str],
    directory: Path,
    metadata_dir_name: str,
    lineage: Sequence[str] = (),
) -> str:
    """Run a build in *directory* and return the version it installed.

    Any stale result file is removed first so a build that silently skips
    writing one cannot report an old version. Config discovery is pinned to
    *directory*: a checkout without its own ``bldctl.toml`` must not pick up
    the enclosing project's. *lineage* is handed down as ``BLDCTL_RESOLVING``.
    """
    metadata_dir = directory / metadata_dir_name
    (metadata_dir / BUILD_RESULT_FILENAME).unlink(missing_ok=True)
    env = {
        CONFIG_ENV_VAR: str(directory / CONFIG_FILENAME),
        RESOLVING_ENV_VAR: ",".join(lineage),
    }
    completed = run_command(command, cwd=directory, env=env)
    version = read_build_result(metadata_dir) or parse_installed_version(completed.stdout)
    if version is None:
        msg = f"Build in {directory} did not report an installed version"
        raise PipelineError(
            msg,
            args=list(command),
            cwd=str(directory),
            stdout=completed.stdout,
            stderr=completed.stderr,
        )
    logger.debug("Nested build in %s installed %s", directory, version)
    return version
