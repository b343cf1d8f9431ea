"""InitService — prepare a data root and optionally load demo data."""

from __future__ import annotations

from typing import Any

from rxctl.infrastructure.database.engine import DB_DIRNAME, DB_FILENAME
from rxctl.infrastructure.seed import seed_database
from rxctl.services.base import BaseService
from rxctl.services.result import ServiceResult


class InitService(BaseService):
    """Creates the database (the Store does this on open) and seeds on request."""

    def init_store(self, *, seed: bool = False) -> ServiceResult:
        db_path = self._store.root / DB_DIRNAME / DB_FILENAME
        data: dict[str, Any] = {
            "data_root": str(self._store.root),
            "database": str(db_path),
            "seeded": {"patients": 0, "medications": 0},
        }
        warnings: list[str] = []
        if seed:
            counts = seed_database(self._store.engine)
            data["seeded"] = counts
            if not any(counts.values()):
                warnings.append("Database already holds data; nothing was seeded")
        return ServiceResult(ok=True, op="init", data=data, warnings=warnings)
