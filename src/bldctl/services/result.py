"""ServiceResult and ServiceError — what every service operation returns.

Domain code raises :class:`~bldctl.domain.errors.BuildToolError`; services
catch it at their boundary and return ``ok=False`` with the error's code and
structured detail, so the CLI (and anything else) can branch on
``error.code`` without parsing messages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from bldctl.domain.errors import BuildToolError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: BuildToolError) -> ServiceError:
        return cls(code=exc.code, message=exc.message, detail=exc.detail)


class ServiceResult(BaseModel):
    """Universal return type for service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"build"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @classmethod
    def failure(cls, op: str, exc: BuildToolError) -> ServiceResult:
        """Wrap a domain error raised while running *op*."""
        return cls(ok=False, op=op, error=ServiceError.from_exception(exc))

    @property
    def exit_code(self) -> int:
        """Process exit status for the CLI: 0 on success, 1 otherwise."""
        return 0 if self.ok else 1
