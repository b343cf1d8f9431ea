"""structlog configuration for rxctl.

All log output goes to stderr so it never mixes with command output.
``--log-json`` switches the console renderer for JSON lines. Patient
identifiers that may ride along in event fields are masked before
rendering.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

MASKED_FIELDS = frozenset(
    {
        "phone",
        "email",
        "address",
        "birth_date",
        "health_card_num",
        "insurance_id",
    }
)


def mask_patient_fields(
    _logger: Any, _method: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """Replace contact and health-card values with ``***``."""
    for key in MASKED_FIELDS.intersection(event_dict):
        if event_dict[key] is not None:
            event_dict[key] = "***"
    return event_dict


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        mask_patient_fields,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    actor: str | None = None,
) -> None:
    """Route structlog and stdlib logging through one stderr handler.

    Args:
        verbose: DEBUG for ``rxctl`` loggers instead of WARNING.
        log_json: JSON lines instead of the console renderer.
        actor: Bound into the context so every event names who acted.
    """
    pre_chain = _pre_chain()
    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("rxctl").setLevel(logging.DEBUG if verbose else logging.WARNING)
    # Engine echo would otherwise log every statement under -v.
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)

    structlog.contextvars.clear_contextvars()
    if actor:
        structlog.contextvars.bind_contextvars(actor=actor)
