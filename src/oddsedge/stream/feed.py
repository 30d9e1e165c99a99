"""Caller-side holder for the previous snapshot and pin state.

The reconciler itself keeps no state. ``SnapshotFeed`` is the piece a
polling loop or push subscriber keeps between snapshots: it applies
snapshots in strictly increasing timestamp order, remembers which rows the
user pinned, and carries stale pinned rows forward until they are dismissed.
"""

import logging
from datetime import datetime

from oddsedge.config import get_config
from oddsedge.odds.edge import Opportunity, Snapshot
from oddsedge.stream.reconcile import ReconciliationResult, reconcile

logger = logging.getLogger(__name__)


class SnapshotFeed:
    """Applies snapshots one after another and tracks user focus."""

    def __init__(self, ev_tolerance: float | None = None):
        if ev_tolerance is None:
            ev_tolerance = get_config().ev_change_tolerance
        self.ev_tolerance = ev_tolerance
        self._rows: tuple[Opportunity, ...] | None = None
        self._last_applied: datetime | None = None
        self._pins: dict[str, int] = {}
        self._dismissed: set[str] = set()
        self.last_result: ReconciliationResult | None = None

    @property
    def rows(self) -> tuple[Opportunity, ...]:
        return self._rows or ()

    @property
    def pins(self) -> dict[str, int]:
        return dict(self._pins)

    @property
    def last_applied(self) -> datetime | None:
        return self._last_applied

    def pin(self, opportunity_id: str, index: int | None = None) -> None:
        """Pin a displayed row, by default at the index it is shown at now."""
        ids = [o.id for o in self.rows]
        if opportunity_id not in ids:
            raise KeyError(f"{opportunity_id!r} is not displayed")
        self._pins[opportunity_id] = ids.index(opportunity_id) if index is None else index

    def unpin(self, opportunity_id: str) -> None:
        self._pins.pop(opportunity_id, None)

    def dismiss(self, opportunity_id: str) -> None:
        """Acknowledge a stale row; it is dropped on the next apply."""
        self._dismissed.add(opportunity_id)
        self._pins.pop(opportunity_id, None)

    def apply(self, snapshot: Snapshot) -> ReconciliationResult | None:
        """Reconcile ``snapshot`` against the current rows.

        Returns:
            The reconciliation, or None if the snapshot is not newer than the
            last one applied (it is dropped)
        """
        if self._last_applied is not None and snapshot.fetched_at <= self._last_applied:
            logger.warning(
                f"Dropping out-of-order snapshot from {snapshot.fetched_at.isoformat()} "
                f"(last applied {self._last_applied.isoformat()})"
            )
            return None

        result = reconcile(
            self._rows,
            snapshot,
            self._pins,
            self._dismissed,
            ev_tolerance=self.ev_tolerance,
        )

        self._rows = result.rows
        self._last_applied = snapshot.fetched_at
        self._dismissed.clear()
        displayed = set(result.ids)
        self._pins = {i: idx for i, idx in self._pins.items() if i in displayed}
        self.last_result = result
        return result
