"""Config file discovery.

``bldctl.toml`` is found by walking up from the working directory, the way
git finds ``.git/``. Its parent directory becomes the project root. The
BLDCTL_CONFIG env var short-circuits the search.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "bldctl.toml"
CONFIG_ENV_VAR = "BLDCTL_CONFIG"


def _walk_up(start: Path, filename: str) -> Path | None:
    current = start.resolve()
    while True:
        candidate = current / filename
        if candidate.is_file():
            return candidate
        if current.parent == current:
            return None
        current = current.parent


def find_config(start: Path | None = None) -> Path | None:
    """Return the governing bldctl.toml for *start* (default: cwd), or None.

    An env var pointing at a missing file disables discovery entirely.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None
    return _walk_up(start or Path.cwd(), CONFIG_FILENAME)
