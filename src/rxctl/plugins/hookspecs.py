"""Pluggy hook specifications for rxctl lifecycle events.

All hooks fire after the originating transaction has committed, and
are dispatched off the request path by :class:`rxctl.plugins.EventBus`.
"""

from __future__ import annotations

from typing import Any

import pluggy

hookspec = pluggy.HookspecMarker("rxctl")


class RxctlHookSpec:
    """Hook specifications for the rxctl plugin system."""

    @hookspec
    def post_fill(
        self,
        actor: str,
        fill_id: int,
        patient_id: int,
        medication_id: int,
        quantity: int,
        stock_remaining: int,
        refill_of: int | None,
    ) -> None:
        """Called after a prescription fill (or refill) commits."""

    @hookspec
    def post_patient_add(self, actor: str, patient_id: int, name: str) -> None:
        """Called after a patient record is created."""

    @hookspec
    def post_medication_add(self, actor: str, medication_id: int, name: str, din: str) -> None:
        """Called after a medication is added to the formulary."""

    @hookspec
    def post_medication_update(
        self,
        actor: str,
        medication_id: int,
        changes: dict[str, Any],
    ) -> None:
        """Called after an explicit stock/price/description update."""
