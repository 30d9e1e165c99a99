"""Tests for consensus and blended pricing in probability space."""

import pytest

from oddsedge.errors import DomainError
from oddsedge.models import Quote, side_quotes
from oddsedge.odds.average import average_odds, blend_sharp_odds


class TestAverageOdds:
    """Test probability-space averaging of one side."""

    def test_identical_prices(self):
        """Test {-110, -110} -> -110."""
        avg = average_odds(side_quotes(Quote("A", -110), Quote("B", -110)))
        assert avg.price == -110
        assert avg.sample_size == 2

    def test_mixed_signs_not_arithmetic(self):
        """Test {+100, -120} -> about -110, never the arithmetic -10."""
        avg = average_odds(side_quotes(Quote("A", 100), Quote("B", -120)))

        assert abs(avg.mean_probability - 0.5227273) < 1e-6
        assert -111 < avg.price < -108
        assert avg.price != -10

    def test_line_is_plain_mean(self):
        """Test quoted lines are averaged and rounded to one decimal."""
        quotes = side_quotes(
            Quote("A", -110, 24.5),
            Quote("B", -110, 25.5),
            Quote("C", -110, 26.0),
        )
        assert average_odds(quotes).line == 25.3

    def test_no_lines(self):
        """Test price-only quotes give no average line."""
        assert average_odds(side_quotes(Quote("A", 120))).line is None

    def test_eligible_filter(self):
        """Test only eligible books are averaged."""
        quotes = side_quotes(Quote("A", -110), Quote("B", 300))
        avg = average_odds(quotes, ["A"])
        assert avg.price == -110
        assert avg.sample_size == 1

    def test_empty_is_none(self):
        """Test no quotes returns None."""
        assert average_odds({}) is None
        assert average_odds(side_quotes(Quote("A", -110)), ["Z"]) is None


class TestBlendSharpOdds:
    """Test weighted blending of sharp prices."""

    def test_single_price_passthrough(self):
        """Test one book returns its own price."""
        assert blend_sharp_odds([(-115, 1.0)]) == -115

    def test_equal_weights(self):
        """Test 50/50 blend of +100 and -120 -> about -110."""
        blended = blend_sharp_odds([(100, 0.5), (-120, 0.5)])
        assert -111 < blended < -108

    def test_weights_shift_blend(self):
        """Test heavier weight pulls the blend toward that price."""
        heavy_fav = blend_sharp_odds([(-200, 0.9), (150, 0.1)])
        heavy_dog = blend_sharp_odds([(-200, 0.1), (150, 0.9)])
        assert heavy_fav < -150
        assert heavy_dog > 100

    def test_empty_is_none(self):
        """Test nothing to blend returns None."""
        assert blend_sharp_odds([]) is None

    def test_zero_weights_is_none(self):
        """Test weights summing to zero return None."""
        assert blend_sharp_odds([(-110, 0.0), (-120, 0.0)]) is None

    def test_negative_weight_raises(self):
        """Test negative weights are rejected."""
        with pytest.raises(DomainError):
            blend_sharp_odds([(-110, -1.0), (-120, 2.0)])
