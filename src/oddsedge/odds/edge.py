"""Opportunity and snapshot materialization.

Runs the full pipeline for a two-sided market: sharp reference, devig, best
price across eligible books, per-method EV, worst/best summary, fractional
Kelly stake and consensus average. A method that fails to compute is omitted
from the EV summary rather than aborting the market.
"""

import logging
from collections.abc import Collection, Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime, timezone

from oddsedge.config import get_config
from oddsedge.errors import ComputationError, DomainError, InvariantError
from oddsedge.models import EventInfo, MarketQuotes, Quote, SharpReference, Side, SideQuotes
from oddsedge.odds.average import AverageOdds, average_odds
from oddsedge.odds.best_line import BestOdds, eligible_quotes, select_best_odds
from oddsedge.odds.convert import implied_probability
from oddsedge.odds.devig import DevigMethod, DevigResult, devig_method, normalize_methods
from oddsedge.odds.ev import EVResult, EVSummary, aggregate, evaluate
from oddsedge.odds.kelly import KellyStake, kelly_stake
from oddsedge.odds.sharp import SharpPreset, build_sharp_reference, get_preset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Opportunity:
    """One side of one selection, evaluated against a sharp reference.

    Recomputed on every snapshot; a changed opportunity is a new value with
    the same ``id``.
    """

    id: str
    sport: str
    event: EventInfo
    market: str
    side: Side
    line: float | None
    player: str | None
    best: BestOdds
    quotes: SideQuotes
    opposite_quotes: SideQuotes
    sharp: SharpReference
    ev_results: tuple[EVResult, ...]
    ev: EVSummary
    average: AverageOdds | None = None
    kelly: KellyStake | None = None

    @property
    def best_price(self) -> int:
        return self.best.price

    @property
    def ev_display(self) -> float:
        return self.ev.ev_display


@dataclass(frozen=True)
class Snapshot:
    """Ordered opportunities from one fetch, tagged with the fetch time."""

    fetched_at: datetime
    opportunities: tuple[Opportunity, ...] = ()

    def __iter__(self) -> Iterator[Opportunity]:
        return iter(self.opportunities)

    def __len__(self) -> int:
        return len(self.opportunities)

    @property
    def ids(self) -> list[str]:
        return [o.id for o in self.opportunities]


def opportunity_id(
    event_id: str,
    market: str,
    line: float | None,
    side: Side,
    player: str | None = None,
) -> str:
    """Stable identity key: event, market, line, side and player."""
    line_part = "" if line is None else f"{line:g}"
    return ":".join([event_id, market, line_part, side.value, player or ""])


def _devig_all(
    market_key: str,
    sharp: SharpReference,
    methods: tuple[DevigMethod, ...],
    max_iterations: int,
    tolerance: float,
) -> dict[DevigMethod, DevigResult]:
    p_over = implied_probability(sharp.over_odds)
    p_under = implied_probability(sharp.under_odds)

    results: dict[DevigMethod, DevigResult] = {}
    for method in methods:
        try:
            results[method] = devig_method(
                method, p_over, p_under, max_iterations=max_iterations, tolerance=tolerance
            )
        except ComputationError as e:
            logger.warning(f"Omitting {method.value} devig for {market_key}: {e}")
    return results


def _at_line(quotes: SideQuotes, line: float | None) -> dict[str, Quote]:
    # Quotes without a line are price-only and always comparable
    if line is None:
        return dict(quotes)
    return {b: q for b, q in quotes.items() if q.line is None or q.line == line}


def build_opportunities(
    market: MarketQuotes,
    *,
    preset: SharpPreset | str | None = None,
    methods: Iterable[DevigMethod | str] | None = None,
    eligible_books: Collection[str] = (),
    bankroll: float | None = None,
    kelly_fraction: float | None = None,
    min_books_per_side: int | None = None,
    max_iterations: int | None = None,
    tolerance: float | None = None,
) -> list[Opportunity]:
    """Evaluate both sides of a market.

    Args:
        market: Quotes for both sides at one line
        preset: Sharp preset (defaults to config)
        methods: Devig methods to run (defaults to config)
        eligible_books: Books allowed to supply best/average prices; empty = all
        bankroll: Bankroll for Kelly stakes (defaults to config)
        kelly_fraction: Fractional Kelly multiplier (defaults to config)
        min_books_per_side: Minimum eligible books before a side is evaluated
        max_iterations: Power-method iteration cap (defaults to config)
        tolerance: Power-method tolerance (defaults to config)

    Returns:
        Zero, one or two opportunities

    Notes:
        - No sharp reference (a side missing at the sharp book) skips the market
        - A sharp reference without vig skips the market with a warning
        - Books belonging to the sharp preset never supply the best price,
          except for the market-average preset; ``quotes`` and
          ``opposite_quotes`` still carry every book
        - The consensus average only uses quotes at the market's line
        - A side with no eligible quote is skipped
    """
    config = get_config()
    preset = get_preset(preset if preset is not None else config.sharp_preset)
    requested = normalize_methods(methods if methods is not None else config.devig_methods)
    bankroll = bankroll if bankroll is not None else config.kelly_bankroll
    kelly_fraction = kelly_fraction if kelly_fraction is not None else config.kelly_fraction
    if min_books_per_side is None:
        min_books_per_side = config.min_books_per_side
    max_iterations = max_iterations if max_iterations is not None else config.power_max_iterations
    tolerance = tolerance if tolerance is not None else config.power_tolerance

    market_key = opportunity_id(
        market.event.event_id, market.market, market.line, market.sides[0], market.player
    )

    sharp = build_sharp_reference(market.over, market.under, preset, market.line)
    if sharp is None:
        logger.debug(f"No {preset.preset_id} reference for {market_key}")
        return []

    try:
        devig_results = _devig_all(market_key, sharp, requested, max_iterations, tolerance)
    except DomainError as e:
        logger.warning(f"Cannot devig {market_key}: {e}")
        return []

    if not devig_results:
        logger.warning(f"Every devig method failed for {market_key}")
        return []

    opportunities = []
    for side in market.sides:
        own = {b: q for b, q in market.quotes_for(side).items() if b not in preset.book_ids}
        if len(eligible_quotes(own, eligible_books)) < min_books_per_side:
            continue

        best = select_best_odds(own, side, eligible_books)
        if best is None:
            continue
        ev_results = evaluate(devig_results, side, best.price)
        summary = aggregate(ev_results)

        opportunities.append(
            Opportunity(
                id=opportunity_id(
                    market.event.event_id, market.market, market.line, side, market.player
                ),
                sport=market.sport,
                event=market.event,
                market=market.market,
                side=side,
                line=market.line,
                player=market.player,
                best=best,
                quotes=dict(market.quotes_for(side)),
                opposite_quotes=dict(market.quotes_for(side.opposite)),
                sharp=sharp,
                ev_results=tuple(ev_results),
                ev=summary,
                average=average_odds(_at_line(own, market.line), eligible_books),
                kelly=kelly_stake(summary.ev_display, best.decimal_odds, bankroll, kelly_fraction),
            )
        )

    return opportunities


def build_snapshot(
    markets: Iterable[MarketQuotes],
    fetched_at: datetime | None = None,
    *,
    min_ev: float | None = None,
    max_ev: float | None = None,
    **kwargs,
) -> Snapshot:
    """Evaluate many markets into one snapshot.

    Keeps opportunities with ``min_ev <= ev_worst <= max_ev`` and orders them
    by worst-case EV, highest first. Extra keyword arguments are passed to
    :func:`build_opportunities`.

    Raises:
        InvariantError: If two markets produce the same opportunity id
    """
    config = get_config()
    min_ev = min_ev if min_ev is not None else config.min_ev
    max_ev = max_ev if max_ev is not None else config.max_ev
    fetched_at = fetched_at or datetime.now(timezone.utc)

    kept: list[Opportunity] = []
    seen: set[str] = set()
    for market in markets:
        for opp in build_opportunities(market, **kwargs):
            if opp.id in seen:
                raise InvariantError(f"Duplicate opportunity id {opp.id!r} in snapshot")
            seen.add(opp.id)
            if min_ev <= opp.ev.ev_worst <= max_ev:
                kept.append(opp)

    kept.sort(key=lambda o: o.ev.ev_worst, reverse=True)
    logger.info(f"Built snapshot at {fetched_at.isoformat()}: {len(kept)} opportunities")
    return Snapshot(fetched_at=fetched_at, opportunities=tuple(kept))
