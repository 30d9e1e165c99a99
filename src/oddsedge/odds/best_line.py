"""Best-price selection across sportsbooks.

For American odds the larger signed integer is always the better price for
the bettor, across both positive and negative ranges (+100 beats -105 beats
-110). Line-bearing sides rank by line first and price second: the lower
line wins for an over, the higher line wins for an under.
"""

from collections.abc import Collection
from dataclasses import dataclass

from oddsedge.models import Quote, Side, SideQuotes
from oddsedge.odds.convert import american_to_decimal


@dataclass(frozen=True)
class BestOdds:
    """Best available price for one side across eligible books."""

    price: int  # American odds
    line: float | None
    books: tuple[str, ...]  # every book tied for best, sorted
    quote: Quote  # representative quote from the first tied book

    @property
    def book_count(self) -> int:
        return len(self.books)

    @property
    def decimal_odds(self) -> float:
        return american_to_decimal(self.price)


def eligible_quotes(quotes: SideQuotes, eligible_books: Collection[str] = ()) -> list[Quote]:
    """Quotes from ``eligible_books``; an empty collection means every book is eligible."""
    if not eligible_books:
        return list(quotes.values())
    return [q for book, q in quotes.items() if book in eligible_books]


def _is_line_bearing(side: Side, quotes: list[Quote]) -> bool:
    # Lines are compared only when every candidate carries one
    return side.is_line_bearing and all(q.line is not None for q in quotes)


def _rank(quote: Quote, side: Side, line_bearing: bool) -> tuple[float, ...]:
    if not line_bearing:
        return (quote.price,)
    line_score = -quote.line if side == Side.OVER else quote.line
    return (line_score, quote.price)


def select_best_odds(
    quotes: SideQuotes,
    side: Side,
    eligible_books: Collection[str] = (),
) -> BestOdds | None:
    """Select the best quote for ``side`` among eligible books.

    Args:
        quotes: bookId -> Quote for one side
        side: Side the quotes belong to
        eligible_books: Book ids allowed to compete; empty means all books

    Returns:
        BestOdds with every tied book, or None when no eligible quote exists

    Example:
        >>> q = side_quotes(Quote("a", -105), Quote("b", 100), Quote("c", -110))
        >>> select_best_odds(q, Side.YES).books
        ('b',)
    """
    candidates = eligible_quotes(quotes, eligible_books)
    if not candidates:
        return None

    line_bearing = _is_line_bearing(side, candidates)
    top = max(_rank(q, side, line_bearing) for q in candidates)
    tied = sorted(
        (q for q in candidates if _rank(q, side, line_bearing) == top),
        key=lambda q: q.book_id,
    )
    best = tied[0]

    return BestOdds(
        price=best.price,
        line=best.line,
        books=tuple(q.book_id for q in tied),
        quote=best,
    )
