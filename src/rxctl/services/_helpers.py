"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import UTC, date, datetime

from pydantic import ValidationError


def today() -> date:
    """Today's calendar date (UTC). Only the CLI edge should call this."""
    return datetime.now(UTC).date()


def now_iso() -> str:
    """Current UTC time as standard ISO 8601 (for audit trails)."""
    return datetime.now(UTC).isoformat()


def validation_message(exc: ValidationError) -> str:
    """Flatten a pydantic ValidationError into ``field: message; ...``."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)
