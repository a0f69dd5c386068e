"""ServiceResult and ServiceError — what every service operation returns.

The CLI consumes only this type: ``ok`` picks stdout vs stderr and the
exit code, ``data`` carries the operation payload.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Return type for service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (``"crawl"``, ``"lookup"``).
        data: Operation-specific payload.
        warnings: Non-fatal issues, e.g. a crawl that stopped early.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (telemetry span tree).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None
