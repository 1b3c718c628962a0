"""Unit tests for amount-in-words rendering."""

import pytest

from billgen.generator.words import MAX_AMOUNT, amount_in_words, number_to_words


class TestNumberToWords:
    @pytest.mark.parametrize(
        "number,expected",
        [
            (0, "zero"),
            (7, "seven"),
            (13, "thirteen"),
            (40, "forty"),
            (42, "forty-two"),
            (100, "one hundred"),
            (101, "one hundred one"),
            (999, "nine hundred ninety-nine"),
            (1000, "one thousand"),
            (1021, "one thousand twenty-one"),
            (4800, "four thousand eight hundred"),
            (1_000_000, "one million"),
            (2_500_017, "two million five hundred thousand seventeen"),
        ],
    )
    def test_known_values(self, number, expected):
        assert number_to_words(number) == expected

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            number_to_words(-1)

    def test_beyond_spelled_range_rejected(self):
        with pytest.raises(ValueError, match="too large"):
            number_to_words(MAX_AMOUNT)

    def test_large_scale(self):
        assert number_to_words(3_000_000_005) == "three billion five"

    def test_no_connectors(self):
        words = number_to_words(1_234_567)
        assert "," not in words
        assert " and " not in words
        assert words == "one million two hundred thirty-four thousand five hundred sixty-seven"


class TestAmountInWords:
    def test_one_hundred(self):
        assert amount_in_words(100) == "( Rs. One hundred only )"

    def test_capitalizes_first_letter_only(self):
        assert amount_in_words(2800) == "( Rs. Two thousand eight hundred only )"

    def test_zero(self):
        assert amount_in_words(0) == "( Rs. Zero only )"

    def test_fraction_is_truncated(self):
        assert amount_in_words(99.75) == "( Rs. Ninety-nine only )"

    def test_custom_currency_label(self):
        assert amount_in_words(5, currency="INR") == "( INR Five only )"
