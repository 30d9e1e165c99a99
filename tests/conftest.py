"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from oddsedge.config import reset_config
from oddsedge.models import EventInfo, MarketQuotes, Quote, SharpReference, Side, side_quotes
from oddsedge.odds.best_line import BestOdds
from oddsedge.odds.edge import Opportunity, Snapshot
from oddsedge.odds.ev import EVSummary

CONFIG_ENV_VARS = [
    "ENV",
    "LOG_LEVEL",
    "DEVIG_METHODS",
    "SHARP_PRESET",
    "KELLY_FRACTION",
    "KELLY_BANKROLL",
    "MIN_EV",
    "MAX_EV",
    "MIN_BOOKS_PER_SIDE",
    "POWER_MAX_ITERATIONS",
    "POWER_TOLERANCE",
    "EV_CHANGE_TOLERANCE",
]

T0 = datetime(2026, 10, 18, 19, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate every test from engine env vars and the cached config."""
    for var in CONFIG_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def points_market() -> MarketQuotes:
    """
    Player points market at 24.5 with a Pinnacle reference at -110/-110.

    Over: DraftKings +105 is best. Under: FanDuel -120 is best.
    """
    return MarketQuotes(
        sport="basketball_nba",
        event=EventInfo("evt-1", start_time=T0, home_team="LAL", away_team="BOS"),
        market="player_points",
        line=24.5,
        over=side_quotes(
            Quote("pinnacle", -110, 24.5),
            Quote("draftkings", 105, 24.5),
            Quote("fanduel", 100, 24.5),
        ),
        under=side_quotes(
            Quote("pinnacle", -110, 24.5),
            Quote("draftkings", -125, 24.5),
            Quote("fanduel", -120, 24.5),
        ),
        player="LeBron James",
    )


@pytest.fixture
def make_opportunity():
    """Factory for minimal opportunities keyed by id."""

    def _make(opp_id: str, price: int = -110, line: float | None = 24.5, ev: float = 1.0):
        quote = Quote("draftkings", price, line)
        return Opportunity(
            id=opp_id,
            sport="basketball_nba",
            event=EventInfo("evt-1"),
            market="player_points",
            side=Side.OVER,
            line=line,
            player=None,
            best=BestOdds(price=price, line=line, books=("draftkings",), quote=quote),
            quotes={"draftkings": quote},
            opposite_quotes={},
            sharp=SharpReference(-110, -110, "pinnacle"),
            ev_results=(),
            ev=EVSummary(ev_worst=ev, ev_best=ev, ev_display=ev, kelly_worst=0.0),
        )

    return _make


@pytest.fixture
def make_snapshot(make_opportunity):
    """Factory for snapshots from ids, offset in seconds from a fixed time."""

    def _make(*ids: str, seconds: int = 0, **overrides):
        opps = tuple(make_opportunity(i, **overrides.get(i, {})) for i in ids)
        return Snapshot(fetched_at=T0 + timedelta(seconds=seconds), opportunities=opps)

    return _make
