"""Odds conversion, devig, EV, best/average pricing and Kelly sizing."""

from oddsedge.odds.average import AverageOdds, average_odds, blend_sharp_odds
from oddsedge.odds.best_line import BestOdds, eligible_quotes, select_best_odds
from oddsedge.odds.convert import (
    american_to_decimal,
    calculate_margin,
    decimal_to_american,
    format_american_odds,
    implied_probability,
    to_american_odds,
    to_american_odds_or_none,
)
from oddsedge.odds.devig import (
    ALL_METHODS,
    DEFAULT_METHODS,
    DevigMethod,
    DevigResult,
    devig,
    devig_additive,
    devig_method,
    devig_multiplicative,
    devig_power,
    devig_probit,
    devig_sharp,
    proportional_devig,
)
from oddsedge.odds.ev import (
    EVResult,
    EVSummary,
    aggregate,
    compute_ev,
    evaluate,
    format_ev,
    is_positive_ev,
    worst_method,
)
from oddsedge.odds.kelly import KellyStake, full_kelly_percent, kelly_stake
from oddsedge.odds.sharp import SHARP_PRESETS, SharpPreset, build_sharp_reference, custom_preset

__all__ = [
    "AverageOdds",
    "average_odds",
    "blend_sharp_odds",
    "BestOdds",
    "eligible_quotes",
    "select_best_odds",
    "american_to_decimal",
    "calculate_margin",
    "decimal_to_american",
    "format_american_odds",
    "implied_probability",
    "to_american_odds",
    "to_american_odds_or_none",
    "ALL_METHODS",
    "DEFAULT_METHODS",
    "DevigMethod",
    "DevigResult",
    "devig",
    "devig_additive",
    "devig_method",
    "devig_multiplicative",
    "devig_power",
    "devig_probit",
    "devig_sharp",
    "proportional_devig",
    "EVResult",
    "EVSummary",
    "aggregate",
    "compute_ev",
    "evaluate",
    "format_ev",
    "is_positive_ev",
    "worst_method",
    "KellyStake",
    "full_kelly_percent",
    "kelly_stake",
    "SHARP_PRESETS",
    "SharpPreset",
    "build_sharp_reference",
    "custom_preset",
]
