"""Fractional Kelly stake sizing.

Full Kelly for a bet with payout b = decimal_odds - 1 is EV / b. The
recommended stake scales that by a fractional multiplier (0.25 = quarter
Kelly) against the caller's bankroll. Bankroll is never stored here.
"""

import math
from dataclasses import dataclass

from oddsedge.errors import DomainError

DEFAULT_KELLY_FRACTION = 0.25


@dataclass(frozen=True)
class KellyStake:
    """Recommended stake for one bet."""

    full_kelly_percent: float  # % of bankroll at full Kelly
    kelly_fraction: float  # multiplier applied, in (0, 1]
    stake_percent: float  # full_kelly_percent * kelly_fraction
    stake: float  # currency units


def full_kelly_percent(ev_percent: float, decimal_odds: float) -> float:
    """Full Kelly as a percent of bankroll: (EV / 100) / (decimal_odds - 1) * 100.

    Negative when EV is negative; callers decide whether to floor it.

    Raises:
        DomainError: If ``decimal_odds <= 1`` (no payout)
    """
    if not decimal_odds > 1.0:
        raise DomainError(f"Decimal odds must be > 1.0 for Kelly sizing, got {decimal_odds!r}")
    return (ev_percent / 100.0) / (decimal_odds - 1.0) * 100.0


def kelly_stake(
    ev_percent: float,
    decimal_odds: float,
    bankroll: float,
    kelly_fraction: float = DEFAULT_KELLY_FRACTION,
) -> KellyStake | None:
    """Size a fractional Kelly stake.

    Args:
        ev_percent: Expected value of the bet in percent (5.0 = 5%)
        decimal_odds: Decimal payout multiplier of the offered price
        bankroll: Bankroll to size against (>= 0)
        kelly_fraction: Fraction of full Kelly to stake, in (0, 1]

    Returns:
        KellyStake, or None ("no stake") when EV <= 0, decimal_odds <= 1 or
        the computed stake is non-finite

    Raises:
        DomainError: If ``kelly_fraction`` is outside (0, 1] or ``bankroll``
            is negative or non-finite

    Example:
        >>> kelly_stake(5.0, 2.0, 1000.0, 0.25).stake
        12.5
    """
    if not (0.0 < kelly_fraction <= 1.0):
        raise DomainError(f"kelly_fraction must be in (0, 1], got {kelly_fraction!r}")
    if not math.isfinite(bankroll) or bankroll < 0.0:
        raise DomainError(f"bankroll must be a finite non-negative amount, got {bankroll!r}")

    if not math.isfinite(ev_percent) or ev_percent <= 0.0:
        return None
    if not math.isfinite(decimal_odds) or decimal_odds <= 1.0:
        return None

    full = full_kelly_percent(ev_percent, decimal_odds)
    stake = bankroll * full / 100.0 * kelly_fraction
    if not math.isfinite(stake):
        return None

    return KellyStake(
        full_kelly_percent=full,
        kelly_fraction=kelly_fraction,
        stake_percent=full * kelly_fraction,
        stake=stake,
    )
