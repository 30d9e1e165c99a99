"""Snapshot reconciliation.

Compares two consecutive snapshots of opportunities and reports what was
added, what changed (price up/down, line moved, EV up/down) and what went
stale. Rows come back in the new snapshot's order except that pinned ids
keep their recorded index; stale pinned rows keep rendering their last-known
value until the caller dismisses them.

``reconcile`` is a pure function of its inputs: the caller owns the previous
snapshot and the pin state and passes both in on every call.
"""

import logging
from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from oddsedge.errors import InvariantError
from oddsedge.odds.edge import Opportunity, Snapshot

logger = logging.getLogger(__name__)

EV_CHANGE_TOLERANCE = 0.01

# id -> row index the caller wants that row rendered at
PinState = Mapping[str, int]


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class ChangeKind:
    """Per-field change classification for one id."""

    price: Direction | None = None
    line_changed: bool = False
    ev: Direction | None = None


@dataclass(frozen=True)
class ReconciliationResult:
    added: frozenset[str]
    changed: Mapping[str, ChangeKind]
    stale: frozenset[str]
    rows: tuple[Opportunity, ...] = field(default_factory=tuple)

    @property
    def ids(self) -> list[str]:
        return [o.id for o in self.rows]

    def is_stale(self, opportunity_id: str) -> bool:
        return opportunity_id in self.stale


def _index(opportunities: Iterable[Opportunity], label: str) -> dict[str, Opportunity]:
    by_id: dict[str, Opportunity] = {}
    for opp in opportunities:
        if opp.id in by_id:
            raise InvariantError(f"Duplicate id {opp.id!r} in {label} snapshot")
        by_id[opp.id] = opp
    return by_id


def _direction(old: float, new: float, tolerance: float = 0.0) -> Direction | None:
    if new - old > tolerance:
        return Direction.UP
    if old - new > tolerance:
        return Direction.DOWN
    return None


def classify_change(
    old: Opportunity,
    new: Opportunity,
    ev_tolerance: float = EV_CHANGE_TOLERANCE,
) -> ChangeKind | None:
    """Compare two values of the same id; None when nothing observable moved.

    A higher American price is an improvement for the bettor and reads as up.
    """
    kind = ChangeKind(
        price=_direction(old.best.price, new.best.price),
        line_changed=old.best.line != new.best.line,
        ev=_direction(old.ev.ev_display, new.ev.ev_display, ev_tolerance),
    )
    if kind == ChangeKind():
        return None
    return kind


def _place(
    flowing: list[Opportunity],
    pinned: list[tuple[int, Opportunity]],
) -> tuple[Opportunity, ...]:
    size = len(flowing) + len(pinned)
    slots: list[Opportunity | None] = [None] * size

    for index, opp in sorted(pinned, key=lambda p: (p[0], p[1].id)):
        target = min(max(index, 0), size - 1)
        free_after = [i for i in range(target, size) if slots[i] is None]
        pos = free_after[0] if free_after else max(i for i in range(target) if slots[i] is None)
        slots[pos] = opp

    rest = iter(flowing)
    return tuple(slot if slot is not None else next(rest) for slot in slots)


def reconcile(
    previous: Snapshot | Iterable[Opportunity] | None,
    next_snapshot: Snapshot | Iterable[Opportunity],
    pins: PinState | None = None,
    dismissed: Collection[str] = frozenset(),
    *,
    ev_tolerance: float = EV_CHANGE_TOLERANCE,
) -> ReconciliationResult:
    """Diff ``next_snapshot`` against ``previous``.

    Args:
        previous: Last applied snapshot (or rows); None on the first load
        next_snapshot: Newly fetched snapshot
        pins: id -> index for rows the caller has pinned/expanded
        dismissed: Stale ids the caller has acknowledged; they are dropped
        ev_tolerance: EV% movement reported as an EV change

    Returns:
        ReconciliationResult. Stale ids are always reported; only pinned,
        undismissed stale ids stay in ``rows``.

    Raises:
        InvariantError: If an id appears twice within either snapshot
    """
    pins = pins or {}
    prev_by_id = _index(previous or (), "previous")
    next_by_id = _index(next_snapshot, "next")

    added = frozenset(i for i in next_by_id if i not in prev_by_id)
    stale = frozenset(i for i in prev_by_id if i not in next_by_id and i not in dismissed)

    changed: dict[str, ChangeKind] = {}
    for opp_id, new in next_by_id.items():
        old = prev_by_id.get(opp_id)
        if old is None:
            continue
        kind = classify_change(old, new, ev_tolerance)
        if kind is not None:
            changed[opp_id] = kind

    kept_stale = [opp for opp_id, opp in prev_by_id.items() if opp_id in stale and opp_id in pins]
    pinned = [(pins[o.id], o) for o in next_by_id.values() if o.id in pins]
    pinned.extend((pins[o.id], o) for o in kept_stale)
    flowing = [o for o in next_by_id.values() if o.id not in pins]

    rows = _place(flowing, pinned)

    logger.debug(f"Reconciled snapshot: +{len(added)} ~{len(changed)} -{len(stale)}")

    return ReconciliationResult(
        added=added,
        changed=changed,
        stale=stale,
        rows=rows,
    )
