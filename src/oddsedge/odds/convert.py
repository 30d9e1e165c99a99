"""Conversions between American odds, decimal odds and implied probability.

Pure functions with no logging. American prices are integers with
``|price| >= 100``; probabilities are floats strictly inside (0, 1).
"""

import math

from oddsedge.errors import DomainError

# American odds never take values strictly between -100 and +100
MIN_ODDS_MAGNITUDE = 100


def _check_price(price: int) -> None:
    if abs(price) < MIN_ODDS_MAGNITUDE:
        raise DomainError(
            f"Invalid American odds {price!r}: magnitude must be >= {MIN_ODDS_MAGNITUDE}"
        )


def implied_probability(price: int) -> float:
    """Convert American odds to implied (vig-inclusive) probability.

    Args:
        price: American odds (e.g., -110, +150)

    Returns:
        Implied probability in (0, 1)

    Raises:
        DomainError: If ``-100 < price < 100``

    Example:
        >>> implied_probability(-110)
        0.5238095238095238
        >>> implied_probability(150)
        0.4
    """
    _check_price(price)
    if price >= MIN_ODDS_MAGNITUDE:
        return 100.0 / (price + 100.0)
    return abs(price) / (abs(price) + 100.0)


def to_american_odds(prob: float) -> int:
    """Convert a probability to the nearest American price.

    Probabilities of 0.5 and above map to negative (favorite) prices, so even
    money comes back as -100. Exact halves round to even, so a price may sit
    one unit from a round-half-up conversion.

    Raises:
        DomainError: If ``prob`` is not strictly inside (0, 1)
    """
    if not math.isfinite(prob) or prob <= 0.0 or prob >= 1.0:
        raise DomainError(f"Probability must be in (0, 1), got {prob!r}")
    if prob >= 0.5:
        return round(-100.0 * prob / (1.0 - prob))
    return round(100.0 * (1.0 - prob) / prob)


def to_american_odds_or_none(prob: float) -> int | None:
    """Like :func:`to_american_odds` but returns ``None`` ("no line") instead of raising."""
    try:
        return to_american_odds(prob)
    except DomainError:
        return None


def american_to_decimal(price: int) -> float:
    """Convert American odds to a decimal payout multiplier. +150 -> 2.5, -200 -> 1.5."""
    _check_price(price)
    if price > 0:
        return 1.0 + price / 100.0
    return 1.0 + 100.0 / abs(price)


def decimal_to_american(decimal_odds: float) -> int:
    """Convert decimal odds to the nearest American price. 2.5 -> +150, 1.5 -> -200.

    Exact halves round to even: 2.125 -> +112.
    """
    if not math.isfinite(decimal_odds) or decimal_odds <= 1.0:
        raise DomainError(f"Decimal odds must be > 1.0, got {decimal_odds!r}")
    if decimal_odds >= 2.0:
        return round((decimal_odds - 1.0) * 100.0)
    return round(-100.0 / (decimal_odds - 1.0))


def calculate_margin(p_over: float, p_under: float) -> float:
    """Overround of a two-way market, e.g. 0.0476 for -110/-110."""
    return p_over + p_under - 1.0


def format_american_odds(price: int) -> str:
    """Format American odds with an explicit sign: 150 -> '+150'."""
    if price > 0:
        return f"+{price}"
    return str(price)
