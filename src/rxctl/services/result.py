"""ServiceResult and ServiceError — what every service call returns.

Services never raise for business failures (unknown ids, short stock,
stale refills); they return ``ok=False`` with an :class:`ErrorCode`.
The CLI maps ``ok`` to the exit status and renders ``data`` by ``op``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(StrEnum):
    """Stable failure codes carried in ``ServiceError.code``."""

    NOT_FOUND = "NOT_FOUND"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    OUT_OF_ORDER = "OUT_OF_ORDER"
    NOT_CURRENT = "NOT_CURRENT"
    DUPLICATE = "DUPLICATE"
    TRANSACTION_FAILED = "TRANSACTION_FAILED"
    CHAIN_INTEGRITY = "CHAIN_INTEGRITY"


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: ErrorCode
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Operation name (``"fill"``, ``"due_list"``, ...); selects the renderer.
        data: Operation-specific payload on success.
        warnings: Non-fatal issues (chain anomalies, exhausted refills).
        error: Set when ``ok`` is False.
        meta: Query context such as the reference date or limits.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(
        cls,
        op: str,
        code: ErrorCode | str,
        message: str,
        **detail: Any,
    ) -> ServiceResult:
        """Build a failed result; keyword arguments become ``error.detail``."""
        return cls(ok=False, op=op, error=ServiceError(code=code, message=message, detail=detail))
