"""Synchronous subprocess execution.

Every external command (git, nested builds, packagers) goes through
:func:`run_command`. There are no retries and no timeouts beyond the OS: a
non-zero exit becomes a :class:`~bldctl.domain.errors.CommandError` carrying
the argv, working directory, and captured output.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

from bldctl.domain.errors import CommandError

logger = logging.getLogger(__name__)


def run_command(
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    error_cls: type[CommandError] = CommandError,
) -> subprocess.CompletedProcess[str]:
    """Run *args* to completion, raising *error_cls* on failure.

    *env* entries are layered over the current environment.
    """
    argv = [str(a) for a in args]
    logger.debug("exec %s (cwd=%s)", " ".join(argv), cwd)
    merged_env = {**os.environ, **env} if env else None
    try:
        result = subprocess.run(
            argv,
            cwd=cwd,
            env=merged_env,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise error_cls(
            argv,
            cwd=cwd,
            stderr=str(exc),
            message=f"Command '{' '.join(argv)}' could not be started: {exc}",
        ) from exc
    if result.returncode != 0:
        logger.debug("exec failed (%d): %s", result.returncode, result.stderr.strip())
        raise error_cls(
            argv,
            cwd=cwd,
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
    return result
