"""AuditService — read-only view over the audit log."""

from __future__ import annotations

from sqlalchemy import select

from rxctl.infrastructure.database.schema import audit_log
from rxctl.services.base import BaseService
from rxctl.services.result import ServiceResult

DEFAULT_LIMIT = 50


class AuditService(BaseService):
    """Lists audit entries, newest first."""

    def list_entries(self, *, limit: int = DEFAULT_LIMIT) -> ServiceResult:
        op = "audit_log"
        if limit <= 0:
            return ServiceResult.failure(
                op, "VALIDATION_FAILED", f"limit must be positive, got {limit}"
            )

        stmt = select(audit_log).order_by(audit_log.c.id.desc()).limit(limit)
        with self._store.engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()

        items = [
            {
                "id": row["id"],
                "user": row["username"],
                "action": row["action"],
                "details": row["details"],
                "timestamp": row["timestamp"],
            }
            for row in rows
        ]
        return ServiceResult(
            ok=True,
            op=op,
            data={"items": items, "count": len(items)},
            meta={"limit": limit},
        )
