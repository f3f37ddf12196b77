"""Reading ``project.toml`` descriptors from disk.

Each call reads the file afresh. Nothing is cached between resolutions, so
sibling projects edited mid-session are always seen as they are on disk.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

from pydantic import ValidationError

from bldctl.domain.descriptor import ProjectDescriptor
from bldctl.domain.errors import DescriptorError, MissingDescriptorError

DESCRIPTOR_FILENAME = "project.toml"

logger = logging.getLogger(__name__)


def parse_descriptor(raw: str, *, source: Path | None = None) -> ProjectDescriptor:
    """Parse descriptor TOML text. *source* is only used in error messages."""
    where = str(source) if source is not None else "<string>"
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {where}: {exc}"
        raise DescriptorError(msg, path=where) from exc
    try:
        return ProjectDescriptor.model_validate(data)
    except ValidationError as exc:
        errors = [
            {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
            for err in exc.errors()
        ]
        msg = f"Invalid project descriptor {where}: {errors[0]['loc']}: {errors[0]['msg']}"
        raise DescriptorError(msg, path=where, errors=errors) from exc


def load_descriptor(
    directory: Path,
    filename: str = DESCRIPTOR_FILENAME,
) -> ProjectDescriptor:
    """Load the descriptor of the project rooted at *directory*."""
    path = directory / filename
    if not path.is_file():
        raise MissingDescriptorError(path.resolve())
    logger.debug("Loading descriptor %s", path)
    return parse_descriptor(path.read_text(encoding="utf-8"), source=path)
