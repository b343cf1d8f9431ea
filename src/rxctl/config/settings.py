"""RxSettings — the one frozen settings object a CLI invocation runs with.

Sources, first match wins:
  1. Global CLI flags (``--user``, ``--sync``, ...); a flag left unset is skipped
  2. ``RXCTL_*`` environment variables, ``__`` between section and key
  3. ``rxctl.toml`` (``--config``, ``RXCTL_CONFIG``, or walk-up from the data root)
  4. Defaults on the section models in :mod:`rxctl.config.models`
"""

from __future__ import annotations

import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from rxctl.config.discovery import find_config
from rxctl.config.models import AuditConfig, DashboardConfig, DatabaseConfig, PharmacyConfig

# rxctl.toml chosen by the from_cli() call currently constructing settings.
_active_toml: ContextVar[Path | None] = ContextVar("rxctl_active_toml", default=None)


def read_toml(path: Path | None) -> dict[str, Any]:
    """Parse *path* into section tables; a missing file reads as empty."""
    if path is None or not path.is_file():
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Feeds the ``[pharmacy]``, ``[dashboard]``, ``[audit]`` and ``[database]`` tables."""

    def __init__(self, settings_cls: type[BaseSettings], tables: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._tables = tables

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._tables.get(field_name), field_name, field_name in self._tables

    def __call__(self) -> dict[str, Any]:
        return self._tables


def resolve_paths(
    config_path: str | None,
    data_root: Path | None,
) -> tuple[Path | None, Path]:
    """Pick the config file in effect and the data root it implies.

    An explicit *config_path* that does not exist means "no config"
    rather than falling back to discovery. Without an explicit
    *data_root*, the database lives beside the config file, or in the
    working directory when there is none.
    """
    if config_path:
        explicit = Path(config_path)
        toml_path = explicit if explicit.is_file() else None
    else:
        toml_path = find_config(data_root)

    if data_root is None:
        data_root = toml_path.parent if toml_path else Path.cwd()
    return toml_path, data_root


class RxSettings(BaseSettings):
    """Pharmacy, dashboard, audit and database settings plus global CLI flags.

    Attributes:
        data_root: Directory holding ``.rxctl/rxctl.db``.
        config_path: The ``rxctl.toml`` that was read, if any.
        user: Pharmacist recorded as the actor in the audit log.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "RXCTL_",
        "env_nested_delimiter": "__",
    }

    data_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    sync: bool = False
    user: str = "system"

    pharmacy: PharmacyConfig = Field(default_factory=PharmacyConfig)
    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # dotenv and secrets-dir sources are not read.
        tables = read_toml(_active_toml.get())
        return (init_settings, env_settings, TomlSettingsSource(settings_cls, tables))

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        data_root: Path | None = None,
        **cli_flags: Any,
    ) -> RxSettings:
        """Build settings for one invocation from the root group's options.

        Flags Click passed as None were not given on the command line and
        are left for env vars or rxctl.toml to fill.
        """
        toml_path, root = resolve_paths(config_path, data_root)
        given = {name: value for name, value in cli_flags.items() if value is not None}

        token = _active_toml.set(toml_path)
        try:
            return cls(data_root=root, config_path=toml_path, **given)
        finally:
            _active_toml.reset(token)
