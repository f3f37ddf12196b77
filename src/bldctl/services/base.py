"""BaseService — shared wiring for bldctl services.

Every service is built from a :class:`~bldctl.config.settings.BldSettings`.
The git probe is injectable so tests can substitute a fake repository.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from bldctl.infrastructure.descriptor import load_descriptor
from bldctl.infrastructure.git import GitProbe
from bldctl.services.result import ServiceResult

if TYPE_CHECKING:
    from bldctl.config.settings import BldSettings
    from bldctl.domain.descriptor import ProjectDescriptor
    from bldctl.domain.errors import BuildToolError

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class PlannerService(BaseService):
            def build(self) -> ServiceResult:
                try:
                    descriptor = self._load_descriptor()
                    ...
                except BuildToolError as exc:
                    return self._failure("build", exc)
    """

    def __init__(self, settings: BldSettings, *, probe: GitProbe | None = None) -> None:
        self._settings = settings
        self._probe = probe or GitProbe(settings.git)

    @property
    def settings(self) -> BldSettings:
        return self._settings

    @property
    def probe(self) -> GitProbe:
        return self._probe

    def _load_descriptor(self) -> ProjectDescriptor:
        return load_descriptor(self._settings.project_root, self._settings.descriptor.filename)

    def _failure(self, op: str, exc: BuildToolError) -> ServiceResult:
        logger.debug("%s failed: [%s] %s", op, exc.code, exc.message)
        return ServiceResult.failure(op, exc)
