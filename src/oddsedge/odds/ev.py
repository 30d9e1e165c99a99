"""Expected value per devig method and the worst/best summary across methods.

EV% = (fair_prob * decimal_odds - 1) * 100. The displayed figure defaults to
the worst (minimum) EV across whichever methods were run, so the summary
never overstates an edge when methods disagree. Because it depends on the
requested method set, two sessions with different methods can show
different ``ev_display`` values for the same price.
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from oddsedge.errors import DomainError
from oddsedge.models import Side
from oddsedge.odds.convert import american_to_decimal
from oddsedge.odds.devig import ALL_METHODS, DevigMethod, DevigResult
from oddsedge.odds.kelly import full_kelly_percent


@dataclass(frozen=True)
class EVResult:
    """EV of one offered price under one devig method."""

    method: DevigMethod
    fair_prob: float
    ev_percent: float
    kelly_percent: float  # full Kelly % of bankroll, floored at 0


@dataclass(frozen=True)
class EVSummary:
    """Aggregate over per-method EV results."""

    ev_worst: float
    ev_best: float
    ev_display: float
    kelly_worst: float


def compute_ev(fair_prob: float, offered_price: int) -> float:
    """Expected value of a bet in percent.

    Raises:
        DomainError: If ``fair_prob`` is outside (0, 1) or the price is invalid

    Example:
        >>> round(compute_ev(0.55, -110), 2)
        5.0
    """
    if not math.isfinite(fair_prob) or fair_prob <= 0.0 or fair_prob >= 1.0:
        raise DomainError(f"Fair probability must be in (0, 1), got {fair_prob!r}")
    return (fair_prob * american_to_decimal(offered_price) - 1.0) * 100.0


def evaluate(
    devig_results: Mapping[DevigMethod, DevigResult] | Iterable[DevigResult],
    side: Side,
    offered_price: int,
) -> list[EVResult]:
    """Compute EV of ``offered_price`` on ``side`` for every devig result given.

    Results come back in canonical method order regardless of input order.
    """
    if isinstance(devig_results, Mapping):
        devig_results = devig_results.values()
    by_method = {r.method: r for r in devig_results}
    decimal_odds = american_to_decimal(offered_price)

    results = []
    for method in ALL_METHODS:
        devigged = by_method.get(method)
        if devigged is None:
            continue
        fair_prob = devigged.fair_prob(side)
        ev_percent = compute_ev(fair_prob, offered_price)
        results.append(
            EVResult(
                method=method,
                fair_prob=fair_prob,
                ev_percent=ev_percent,
                kelly_percent=max(0.0, full_kelly_percent(ev_percent, decimal_odds)),
            )
        )
    return results


def _canonical(results: Iterable[EVResult]) -> list[EVResult]:
    order = {m: i for i, m in enumerate(ALL_METHODS)}
    return sorted(results, key=lambda r: order[r.method])


def aggregate(results: Iterable[EVResult]) -> EVSummary | None:
    """Summarize per-method results; None when no method produced a result.

    Ties resolve to the first method in canonical order
    (power, multiplicative, additive, probit).
    """
    ordered = _canonical(results)
    if not ordered:
        return None
    worst = min(ordered, key=lambda r: r.ev_percent)
    best = max(ordered, key=lambda r: r.ev_percent)
    return EVSummary(
        ev_worst=worst.ev_percent,
        ev_best=best.ev_percent,
        ev_display=worst.ev_percent,
        kelly_worst=min(r.kelly_percent for r in ordered),
    )


def worst_method(results: Iterable[EVResult]) -> DevigMethod | None:
    """Method that produced the worst EV, re-derived from ``results``."""
    ordered = _canonical(results)
    if not ordered:
        return None
    return min(ordered, key=lambda r: r.ev_percent).method


def is_positive_ev(summary: EVSummary | None, min_ev: float = 0.0) -> bool:
    """True when the conservative (worst-case) EV clears ``min_ev``."""
    return summary is not None and summary.ev_worst > min_ev


def format_ev(ev_percent: float) -> str:
    """Format an EV percent for display: 5.23 -> '+5.2%'."""
    sign = "+" if ev_percent >= 0 else ""
    return f"{sign}{ev_percent:.1f}%"
