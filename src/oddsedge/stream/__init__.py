"""Snapshot reconciliation for live-updating opportunity lists."""

from oddsedge.stream.feed import SnapshotFeed
from oddsedge.stream.reconcile import (
    ChangeKind,
    Direction,
    PinState,
    ReconciliationResult,
    classify_change,
    reconcile,
)

__all__ = [
    "ChangeKind",
    "Direction",
    "PinState",
    "ReconciliationResult",
    "SnapshotFeed",
    "classify_change",
    "reconcile",
]
