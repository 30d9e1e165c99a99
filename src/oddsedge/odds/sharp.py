"""Sharp reference presets and SharpReference construction.

A preset names one or more weighted reference books. Single-book presets use
that book's two-sided prices directly; multi-book presets blend each side in
probability space. ``market_average`` treats the consensus of every book as
the reference.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from oddsedge.errors import DomainError
from oddsedge.models import Quote, SharpReference, SideQuotes
from oddsedge.odds.average import average_odds, blend_sharp_odds

MARKET_AVERAGE = "market_average"


@dataclass(frozen=True)
class SharpBookWeight:
    book_id: str
    weight: float


@dataclass(frozen=True)
class SharpPreset:
    """A named set of weighted reference books."""

    preset_id: str
    label: str
    books: tuple[SharpBookWeight, ...] = ()

    @property
    def book_ids(self) -> frozenset[str]:
        return frozenset(b.book_id for b in self.books)

    @property
    def is_market_average(self) -> bool:
        return self.preset_id == MARKET_AVERAGE


def _single(book_id: str, label: str) -> SharpPreset:
    return SharpPreset(book_id, label, (SharpBookWeight(book_id, 1.0),))


SHARP_PRESETS: dict[str, SharpPreset] = {
    "pinnacle": _single("pinnacle", "Pinnacle"),
    "circa": _single("circa", "Circa"),
    "prophetx": _single("prophetx", "ProphetX"),
    "hardrock": _single("hardrock", "Hard Rock"),
    "pinnacle_circa": SharpPreset(
        "pinnacle_circa",
        "Pinnacle + Circa",
        (SharpBookWeight("pinnacle", 0.5), SharpBookWeight("circa", 0.5)),
    ),
    "hardrock_thescore": SharpPreset(
        "hardrock_thescore",
        "Hard Rock + theScore",
        (SharpBookWeight("hardrock", 0.5), SharpBookWeight("thescore", 0.5)),
    ),
    MARKET_AVERAGE: SharpPreset(MARKET_AVERAGE, "Market Average"),
}


def get_preset(preset: SharpPreset | str) -> SharpPreset:
    """Resolve a preset id to its definition.

    Raises:
        DomainError: If the id is unknown
    """
    if isinstance(preset, SharpPreset):
        return preset
    try:
        return SHARP_PRESETS[preset]
    except KeyError:
        raise DomainError(
            f"Unknown sharp preset {preset!r}; expected one of {sorted(SHARP_PRESETS)}"
        ) from None


def custom_preset(weights: Mapping[str, float]) -> SharpPreset:
    """Build a user-defined blend of sharp books.

    Raises:
        DomainError: If no books are given or any weight is negative
    """
    if not weights:
        raise DomainError("Custom sharp preset needs at least one book")
    if any(w < 0 for w in weights.values()):
        raise DomainError(f"Sharp book weights must be non-negative, got {dict(weights)}")
    books = tuple(SharpBookWeight(book, float(w)) for book, w in sorted(weights.items()))
    return SharpPreset("custom", "Custom", books)


def _matches_line(quote: Quote, line: float | None) -> bool:
    return line is None or quote.line is None or quote.line == line


def build_sharp_reference(
    over: SideQuotes,
    under: SideQuotes,
    preset: SharpPreset | str,
    line: float | None = None,
) -> SharpReference | None:
    """Form the two-sided devig input for one market.

    Only books quoting both sides at ``line`` contribute. Returns None when
    no reference can be formed; that is an expected state, not an error.
    """
    preset = get_preset(preset)
    over = {b: q for b, q in over.items() if _matches_line(q, line)}
    under = {b: q for b, q in under.items() if _matches_line(q, line)}

    if preset.is_market_average:
        books = sorted(set(over) & set(under))
        if not books:
            return None
        over_avg = average_odds(over, books)
        under_avg = average_odds(under, books)
        return SharpReference(
            over_odds=over_avg.price,
            under_odds=under_avg.price,
            source=MARKET_AVERAGE,
            blended_from=tuple(books),
        )

    present = [b for b in preset.books if b.book_id in over and b.book_id in under]
    if not present:
        return None

    if len(present) == 1:
        book_id = present[0].book_id
        return SharpReference(
            over_odds=over[book_id].price,
            under_odds=under[book_id].price,
            source=book_id,
        )

    over_odds = blend_sharp_odds((over[b.book_id].price, b.weight) for b in present)
    under_odds = blend_sharp_odds((under[b.book_id].price, b.weight) for b in present)
    if over_odds is None or under_odds is None:
        return None

    return SharpReference(
        over_odds=over_odds,
        under_odds=under_odds,
        source=preset.preset_id,
        blended_from=tuple(b.book_id for b in present),
    )
