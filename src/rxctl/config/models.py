"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, rxctl.toml only contains overrides.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class PharmacyConfig(BaseModel):
    """[pharmacy] section."""

    model_config = {"frozen": True}

    name: str = "my-pharmacy"


class DashboardConfig(BaseModel):
    """[dashboard] section."""

    model_config = {"frozen": True}

    low_stock_threshold: int = Field(default=100, ge=0)
    due_soon_days: int = Field(default=7, ge=0)
    upcoming_limit: int = Field(default=5, ge=0)


class AuditConfig(BaseModel):
    """[audit] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    max_workers: int = Field(default=2, ge=1)


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True}

    busy_timeout_seconds: float = Field(default=5.0, gt=0)
