"""Consensus pricing across books.

Prices are averaged in probability space and converted back to American
odds. Arithmetic means of American prices are never taken: +100 and -120
average to about -110, not -10.
"""

from collections.abc import Collection, Iterable
from dataclasses import dataclass

import numpy as np

from oddsedge.errors import DomainError
from oddsedge.models import SideQuotes
from oddsedge.odds.best_line import eligible_quotes
from oddsedge.odds.convert import implied_probability, to_american_odds, to_american_odds_or_none


@dataclass(frozen=True)
class AverageOdds:
    """Consensus price for one side."""

    price: int  # American odds of the mean implied probability
    mean_probability: float
    line: float | None  # plain mean of quoted lines, one decimal place
    sample_size: int  # number of quotes included


def average_odds(
    quotes: SideQuotes,
    eligible_books: Collection[str] = (),
) -> AverageOdds | None:
    """Average the eligible quotes for one side.

    Returns:
        AverageOdds, or None when no eligible quote exists
    """
    included = eligible_quotes(quotes, eligible_books)
    if not included:
        return None

    probs = np.array([implied_probability(q.price) for q in included], dtype=np.float64)
    mean_prob = float(np.mean(probs))

    # Lines are not probability-bearing, so a plain mean is correct
    lines = [q.line for q in included if q.line is not None]
    line = round(float(np.mean(lines)), 1) if lines else None

    return AverageOdds(
        price=to_american_odds(mean_prob),
        mean_probability=mean_prob,
        line=line,
        sample_size=len(included),
    )


def blend_sharp_odds(weighted_prices: Iterable[tuple[int, float]]) -> int | None:
    """Blend (price, weight) pairs from several sharp books into one price.

    Implied probabilities are weight-averaged and converted back.

    Returns:
        Blended American price, or None when there is nothing to blend or
        the weights sum to zero

    Raises:
        DomainError: If any weight is negative
    """
    pairs = list(weighted_prices)
    if not pairs:
        return None
    if len(pairs) == 1:
        return pairs[0][0]

    probs = np.array([implied_probability(price) for price, _ in pairs], dtype=np.float64)
    weights = np.array([weight for _, weight in pairs], dtype=np.float64)
    if np.any(weights < 0.0):
        raise DomainError(f"Sharp book weights must be non-negative, got {weights.tolist()}")
    if weights.sum() <= 0.0:
        return None

    return to_american_odds_or_none(float(np.average(probs, weights=weights)))
