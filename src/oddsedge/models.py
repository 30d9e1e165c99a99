"""Value types shared across the engine.

Everything here is immutable: a new observation of a price is a new value,
never an in-place update.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from oddsedge.errors import DomainError


class Side(str, Enum):
    """Side of a two-way selection."""

    OVER = "over"
    UNDER = "under"
    YES = "yes"
    NO = "no"

    @property
    def opposite(self) -> "Side":
        return _OPPOSITES[self]

    @property
    def is_line_bearing(self) -> bool:
        """True for sides whose price depends on a line (totals, props)."""
        return self in (Side.OVER, Side.UNDER)


_OPPOSITES = {
    Side.OVER: Side.UNDER,
    Side.UNDER: Side.OVER,
    Side.YES: Side.NO,
    Side.NO: Side.YES,
}


@dataclass(frozen=True)
class Quote:
    """One book's offer for one side of one selection."""

    book_id: str
    price: int  # American odds, |price| >= 100
    line: float | None = None  # None for price-only markets (moneylines)
    link: str | None = None

    def __post_init__(self) -> None:
        if abs(self.price) < 100:
            raise DomainError(
                f"Invalid American price {self.price} from {self.book_id}: magnitude must be >= 100"
            )


# bookId -> Quote for one side; keys unique, order irrelevant
SideQuotes = Mapping[str, Quote]


def side_quotes(*quotes: Quote) -> dict[str, Quote]:
    """Key quotes by book id. A later quote from the same book replaces an earlier one."""
    return {q.book_id: q for q in quotes}


@dataclass(frozen=True)
class EventInfo:
    """Descriptive metadata for the event a selection belongs to."""

    event_id: str
    start_time: datetime | None = None
    home_team: str | None = None
    away_team: str | None = None


@dataclass(frozen=True)
class SharpReference:
    """Two-sided reference prices used as devig input."""

    over_odds: int
    under_odds: int
    source: str
    blended_from: tuple[str, ...] = ()


@dataclass(frozen=True)
class MarketQuotes:
    """Raw quotes for both sides of one market at one line.

    ``over`` holds the first side (over / yes) and ``under`` the second
    (under / no). Either mapping may be empty.
    """

    sport: str
    event: EventInfo
    market: str
    line: float | None
    over: SideQuotes = field(default_factory=dict)
    under: SideQuotes = field(default_factory=dict)
    player: str | None = None
    yes_no: bool = False

    @property
    def sides(self) -> tuple[Side, Side]:
        if self.yes_no:
            return (Side.YES, Side.NO)
        return (Side.OVER, Side.UNDER)

    def quotes_for(self, side: Side) -> SideQuotes:
        first, _ = self.sides
        return self.over if side == first else self.under
