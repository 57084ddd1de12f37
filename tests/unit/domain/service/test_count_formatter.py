"""Unit tests for format_count."""

import pytest

from voting.config import VoteSettings
from voting.domain.service import format_count
from voting.domain.value import RoundingMode

KILO = {1000: "k"}
KILO_MEGA = {1000: "k", 1000000: "M"}


class TestDivisorSelection:
    """Tests for choosing the divisor."""

    def test_no_qualifying_divisor_returns_plain_number(self):
        """Numbers below every divisor are returned unformatted."""
        assert format_count(999, divisors=KILO) == "999"

    def test_divides_by_largest_qualifying_divisor(self):
        assert format_count(1500, divisors=KILO) == "1.5k"
        assert format_count(2_500_000, divisors=KILO_MEGA) == "2.5M"

    def test_divisor_equal_to_number_qualifies(self):
        """The boundary divisor is inclusive."""
        assert format_count(1000, divisors=KILO_MEGA) == "1.0k"

    def test_negative_numbers_keep_their_sign(self):
        """Magnitude comparison uses the absolute value."""
        assert format_count(-2500, divisors=KILO) == "-2.5k"
        assert format_count(-999, divisors=KILO) == "-999"

    def test_divisor_table_order_does_not_matter(self):
        """Unordered tables are normalized to ascending keys."""
        unordered = {1000000: "M", 1000: "k"}
        assert format_count(1_500_000, divisors=unordered) == "1.5M"
        assert format_count(1500, divisors=unordered) == "1.5k"

    def test_divisor_of_one_is_passthrough(self):
        """A qualifying divisor of 1 returns the plain number."""
        divisors = {1: "", 1000: "k"}
        assert format_count(42, divisors=divisors) == "42"

    def test_zero_and_empty_table(self):
        assert format_count(0, divisors=KILO) == "0"
        assert format_count(123456, divisors={}) == "123456"

    def test_default_divisor_table(self):
        """The configured default covers k, m, b and t."""
        divisors = VoteSettings().divisors
        assert format_count(7, divisors=divisors) == "7"
        assert format_count(1_250_000, divisors=divisors) == "1.3m"
        assert format_count(3_000_000_000, divisors=divisors) == "3.0b"
        assert format_count(4_400_000_000_000, divisors=divisors) == "4.4t"


class TestRounding:
    """Tests for precision and rounding modes."""

    def test_half_up_rounds_ties_away_from_zero(self):
        assert format_count(1250, divisors=KILO) == "1.3k"
        assert format_count(-1250, divisors=KILO) == "-1.3k"

    def test_half_even_rounds_ties_to_even(self):
        assert format_count(1250, divisors=KILO, mode=RoundingMode.HALF_EVEN) == "1.2k"
        assert format_count(1350, divisors=KILO, mode=RoundingMode.HALF_EVEN) == "1.4k"

    def test_half_down_rounds_ties_towards_zero(self):
        assert format_count(1250, divisors=KILO, mode=RoundingMode.HALF_DOWN) == "1.2k"

    def test_precision_controls_decimal_digits(self):
        assert format_count(1234, divisors=KILO, precision=2) == "1.23k"
        assert format_count(1500, divisors=KILO, precision=0) == "2k"
        assert format_count(1000, divisors=KILO, precision=3) == "1.000k"

    def test_large_quotients_are_grouped(self):
        """Quotients above 999 get thousands separators."""
        assert format_count(2_500_000, divisors=KILO) == "2,500.0k"

    def test_negative_precision_raises(self):
        with pytest.raises(ValueError, match="Precision"):
            format_count(1500, divisors=KILO, precision=-1)

    def test_precision_beyond_default_decimal_context(self):
        """Precision is not bounded by the 28 digit default context."""
        result = format_count(1500, divisors=KILO, precision=30)

        assert result == "1.5" + "0" * 29 + "k"
        assert (
            format_count(2_000_000_000_001, divisors=KILO, precision=40)
            == "2,000,000,000.001" + "0" * 37 + "k"
        )


class TestDivisorValidation:
    """Tests for rejecting invalid divisor tables."""

    @pytest.mark.parametrize("divisors", [{0: "z", 1000: "k"}, {-1000: "n"}])
    def test_non_positive_divisor_raises(self, divisors):
        with pytest.raises(ValueError, match="positive"):
            format_count(1500, divisors=divisors)
