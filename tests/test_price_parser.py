# tests/test_price_parser.py

"""Tests for price parsing, currency detection and formatting."""

import unittest

from pricescope.filters.price_parser import (
    detect_currency,
    format_reference_price,
    parse_numeric_price,
    parse_price_or_none,
)
from pricescope.models.errors import ConversionFailure


class TestParseNumericPrice(unittest.TestCase):
    """parse_numeric_price extracts the leading number."""

    def test_rupee_with_thousands(self) -> None:
        """'₹1,999' parses to 1999."""
        self.assertEqual(parse_numeric_price("₹1,999"), 1999.0)

    def test_dollar_decimal(self) -> None:
        """'$25.50' parses to 25.5."""
        self.assertEqual(parse_numeric_price("$25.50"), 25.5)

    def test_indian_grouping(self) -> None:
        """Lakh-style grouping is flattened."""
        self.assertEqual(
            parse_numeric_price("₹1,24,999.00"), 124999.0
        )

    def test_currency_word_prefix(self) -> None:
        """'Rs. 499' does not pick up the abbreviation dot."""
        self.assertEqual(parse_numeric_price("Rs. 499"), 499.0)

    def test_trailing_currency_code(self) -> None:
        """'49.99 EUR' parses to 49.99."""
        self.assertEqual(parse_numeric_price("49.99 EUR"), 49.99)

    def test_empty_raises(self) -> None:
        """Empty text raises ConversionFailure."""
        with self.assertRaises(ConversionFailure):
            parse_numeric_price("")
        with self.assertRaises(ConversionFailure):
            parse_numeric_price(None)

    def test_no_digits_raises(self) -> None:
        """Text without digits raises ConversionFailure."""
        with self.assertRaises(ConversionFailure):
            parse_numeric_price("Currently unavailable")

    def test_or_none_wrapper(self) -> None:
        """parse_price_or_none swallows ConversionFailure."""
        self.assertIsNone(parse_price_or_none("N/A"))
        self.assertEqual(parse_price_or_none("$3"), 3.0)


class TestDetectCurrency(unittest.TestCase):
    """detect_currency maps symbols to ISO codes."""

    def test_known_symbols(self) -> None:
        """Each configured marker resolves to its code."""
        cases = {
            "₹999": "INR",
            "INR 999": "INR",
            "€10": "EUR",
            "£10": "GBP",
            "¥1000": "JPY",
        }
        for text, code in cases.items():
            with self.subTest(text=text):
                self.assertEqual(detect_currency(text), code)

    def test_default_is_usd(self) -> None:
        """Unmarked or dollar prices default to USD."""
        self.assertEqual(detect_currency("$10"), "USD")
        self.assertEqual(detect_currency("10"), "USD")
        self.assertEqual(detect_currency(None), "USD")


class TestFormatReferencePrice(unittest.TestCase):
    """format_reference_price uses Indian digit grouping."""

    def test_small_amount(self) -> None:
        """Three digits or fewer have no separator."""
        self.assertEqual(format_reference_price(999), "₹999")

    def test_thousands(self) -> None:
        """1999 renders as ₹1,999."""
        self.assertEqual(format_reference_price(1999), "₹1,999")

    def test_lakhs(self) -> None:
        """Groups of two above the thousands."""
        self.assertEqual(format_reference_price(124999), "₹1,24,999")
        self.assertEqual(
            format_reference_price(12345678), "₹1,23,45,678"
        )


if __name__ == "__main__":
    unittest.main()
