"""Tests for the devig methods and the inverse normal CDF."""

import math
from statistics import NormalDist

import pytest

from oddsedge.errors import ComputationError, DomainError
from oddsedge.models import SharpReference, Side
from oddsedge.odds.convert import implied_probability
from oddsedge.odds.devig import (
    ALL_METHODS,
    DevigMethod,
    _acklam,
    devig,
    devig_additive,
    devig_method,
    devig_multiplicative,
    devig_power,
    devig_probit,
    devig_sharp,
    normal_cdf,
    normal_ppf,
    normalize_methods,
    proportional_devig,
)

PRICE_PAIRS = [
    (-110, -110),
    (120, -150),
    (-300, 250),
    (-1000, 600),
    (150, -180),
    (-105, -115),
]


def _probs(over: int, under: int) -> tuple[float, float]:
    return implied_probability(over), implied_probability(under)


class TestSumInvariant:
    """Test fair probabilities sum to 1 for every method."""

    @pytest.mark.parametrize("method", ALL_METHODS)
    @pytest.mark.parametrize("prices", PRICE_PAIRS)
    def test_sums_to_one(self, method, prices):
        """Test fair_over + fair_under == 1 within 1e-6."""
        result = devig_method(method, *_probs(*prices))
        assert result.method == method
        assert abs(result.fair_prob_over + result.fair_prob_under - 1.0) < 1e-6
        assert 0.0 < result.fair_prob_over < 1.0
        assert 0.0 < result.fair_prob_under < 1.0

    @pytest.mark.parametrize("method", ALL_METHODS)
    def test_favorite_stays_favorite(self, method):
        """Test devig never flips the favorite."""
        result = devig_method(method, *_probs(-300, 250))
        assert result.fair_prob_over > 0.5 > result.fair_prob_under


class TestMultiplicative:
    """Test proportional rescaling."""

    def test_standard_juice(self):
        """Test -110/-110 -> exactly 0.5/0.5."""
        result = devig_multiplicative(*_probs(-110, -110))
        assert abs(result.fair_prob_over - 0.5) < 1e-12
        assert abs(result.fair_prob_under - 0.5) < 1e-12
        assert abs(result.margin - 0.047619) < 1e-6

    def test_fair_prob_by_side(self):
        """Test over/yes read the first slot and under/no the second."""
        result = devig_multiplicative(*_probs(-150, 120))
        assert result.fair_prob(Side.OVER) == result.fair_prob(Side.YES) == result.fair_prob_over
        assert result.fair_prob(Side.UNDER) == result.fair_prob(Side.NO) == result.fair_prob_under


class TestPower:
    """Test the power method bisection."""

    def test_converges_on_plus_120_minus_150(self):
        """Test +120/-150 converges and the exponent reproduces the result."""
        p_over, p_under = _probs(120, -150)
        result = devig_power(p_over, p_under)

        assert abs(result.fair_prob_over + result.fair_prob_under - 1.0) < 1e-6
        k = math.log(result.fair_prob_over) / math.log(p_over)
        assert k > 1.0
        assert abs(p_under**k - result.fair_prob_under) < 1e-9

    def test_shades_longshot_more_than_multiplicative(self):
        """Test the power method assigns the longshot less than proportional scaling."""
        p_over, p_under = _probs(120, -150)
        power = devig_power(p_over, p_under)
        mult = devig_multiplicative(p_over, p_under)
        assert power.fair_prob_over < mult.fair_prob_over

    def test_symmetric_market(self):
        """Test -110/-110 -> 0.5/0.5."""
        result = devig_power(*_probs(-110, -110))
        assert abs(result.fair_prob_over - 0.5) < 1e-6

    def test_iteration_cap_raises(self):
        """Test too few iterations raises ComputationError instead of returning a guess."""
        with pytest.raises(ComputationError, match="did not converge"):
            devig_power(*_probs(120, -150), max_iterations=3)

    def test_root_out_of_range_raises(self):
        """Test a root beyond the exponent bound raises ComputationError."""
        with pytest.raises(ComputationError):
            devig_power(0.99, 0.99)

    def test_zero_iterations_rejected(self):
        """Test max_iterations < 1 is a domain error."""
        with pytest.raises(DomainError):
            devig_power(*_probs(-110, -110), max_iterations=0)


class TestAdditive:
    """Test equal subtraction of the margin."""

    def test_standard_juice(self):
        """Test -110/-110 -> 0.5/0.5."""
        result = devig_additive(*_probs(-110, -110))
        assert abs(result.fair_prob_over - 0.5) < 1e-12

    def test_subtracts_half_margin(self):
        """Test each side loses half the overround."""
        p_over, p_under = _probs(-150, 130)
        margin = p_over + p_under - 1.0
        result = devig_additive(p_over, p_under)
        assert abs(result.fair_prob_over - (p_over - margin / 2)) < 1e-9
        assert abs(result.fair_prob_under - (p_under - margin / 2)) < 1e-9


class TestProbit:
    """Test the z-space shift method."""

    def test_standard_juice(self):
        """Test -110/-110 -> 0.5/0.5."""
        result = devig_probit(*_probs(-110, -110))
        assert abs(result.fair_prob_over - 0.5) < 1e-9

    def test_shifted_z_scores_are_symmetric(self):
        """Test the shifted z-scores are negatives of each other."""
        p_over, p_under = _probs(-200, 170)
        result = devig_probit(p_over, p_under)
        z_over = normal_ppf(result.fair_prob_over)
        z_under = normal_ppf(result.fair_prob_under)
        assert abs(z_over + z_under) < 1e-6


class TestNormalDistribution:
    """Test normal_cdf and normal_ppf accuracy."""

    @pytest.mark.parametrize(
        "p", [0.001, 0.01, 0.02425, 0.1, 0.3, 0.5, 0.7, 0.9, 0.97575, 0.99, 0.999]
    )
    def test_ppf_matches_reference(self, p):
        """Test normal_ppf against the standard library quantile."""
        assert abs(normal_ppf(p) - NormalDist().inv_cdf(p)) < 1e-9

    @pytest.mark.parametrize("p", [1e-6, 0.005, 0.2, 0.45, 0.8, 0.995, 1 - 1e-6])
    def test_acklam_relative_error(self, p):
        """Test the raw rational approximation stays within its 1.15e-9 relative error."""
        exact = NormalDist().inv_cdf(p)
        assert abs(_acklam(p) - exact) <= 1.5e-9 * abs(exact) + 1e-15

    def test_cdf_known_values(self):
        """Test cdf(0) = 0.5 and cdf(1.96) ~ 0.975."""
        assert normal_cdf(0.0) == 0.5
        assert abs(normal_cdf(1.959963984540054) - 0.975) < 1e-12

    @pytest.mark.parametrize("p", [0.0, 1.0, -0.5, math.nan])
    def test_ppf_out_of_range_raises(self, p):
        """Test probabilities outside (0, 1) raise."""
        with pytest.raises(DomainError):
            normal_ppf(p)


class TestDevigDispatch:
    """Test method selection and input validation."""

    def test_only_requested_methods_run(self):
        """Test unrequested methods are absent from the result."""
        result = devig(*_probs(-110, -110), [DevigMethod.PROBIT])
        assert list(result) == [DevigMethod.PROBIT]

    def test_canonical_order_and_strings(self):
        """Test string method names are accepted and returned in canonical order."""
        result = devig(*_probs(-110, -110), ["probit", "power", "probit"])
        assert list(result) == [DevigMethod.POWER, DevigMethod.PROBIT]

    def test_normalize_methods(self):
        """Test deduplication and canonical ordering."""
        assert normalize_methods(["additive", "power", "additive"]) == (
            DevigMethod.POWER,
            DevigMethod.ADDITIVE,
        )

    def test_unknown_method_raises(self):
        """Test an unknown method name is rejected."""
        with pytest.raises(ValueError):
            devig(*_probs(-110, -110), ["shin"])

    @pytest.mark.parametrize("method", ALL_METHODS)
    def test_no_vig_rejected(self, method):
        """Test a pair without overround cannot be devigged."""
        with pytest.raises(DomainError, match="no vig"):
            devig_method(method, 0.5, 0.5)

    @pytest.mark.parametrize("method", ALL_METHODS)
    def test_out_of_range_probability_rejected(self, method):
        """Test probabilities outside (0, 1) are domain errors."""
        with pytest.raises(DomainError):
            devig_method(method, 1.0, 0.5)

    def test_devig_sharp(self):
        """Test devig of a sharp reference's prices."""
        sharp = SharpReference(over_odds=-110, under_odds=-110, source="pinnacle")
        result = devig_sharp(sharp, ALL_METHODS)
        assert list(result) == list(ALL_METHODS)
        for devigged in result.values():
            assert abs(devigged.fair_prob_over - 0.5) < 1e-6


class TestProportionalDevig:
    """Test n-way multiplicative devig."""

    def test_even_odds(self):
        """Test [-110, -110] -> [0.5, 0.5]."""
        result = proportional_devig([-110, -110])
        assert abs(result[0] - 0.5) < 1e-12
        assert abs(result[1] - 0.5) < 1e-12

    def test_three_way_market(self):
        """Test a three-way market sums to 1 and keeps its ordering."""
        result = proportional_devig([150, 200, 250])
        assert len(result) == 3
        assert abs(sum(result) - 1.0) < 1e-9
        assert result[0] > result[1] > result[2]

    def test_single_outcome_raises(self):
        """Test fewer than two prices is rejected."""
        with pytest.raises(DomainError):
            proportional_devig([-110])

    def test_no_vig_raises(self):
        """Test a fair book cannot be devigged."""
        with pytest.raises(DomainError, match="no vig"):
            proportional_devig([100, -100])
