# pricescope/filters/price_parser.py

"""Price-string parsing, currency detection and display formatting."""

import re

from pricescope.config.settings import Settings
from pricescope.models.errors import ConversionFailure

_NON_NUMERIC = re.compile(r"[^\d.,]")
_LEADING_NUMBER = re.compile(r"\d+(?:\.\d+)?")


def parse_numeric_price(text: str | None) -> float:
    """Extract a numeric price from a string like '₹1,999.00'.

    Everything except digits and separators is dropped, commas are
    treated as thousands separators, and the leading number is parsed.
    Raises :class:`ConversionFailure` when no number is present.
    """
    if not text:
        raise ConversionFailure("Empty price text")
    cleaned = _NON_NUMERIC.sub("", text).replace(",", "")
    # "Rs.1999" leaves a stray leading dot behind
    match = _LEADING_NUMBER.match(cleaned.lstrip("."))
    if not match:
        msg = f"No number in price text {text!r}"
        raise ConversionFailure(msg)
    return float(match.group())


def parse_price_or_none(text: str | None) -> float | None:
    """Like :func:`parse_numeric_price` but returns None on failure."""
    try:
        return parse_numeric_price(text)
    except ConversionFailure:
        return None


def detect_currency(text: str | None) -> str:
    """Infer an ISO currency code from symbols in a price string."""
    if not text:
        return Settings.DEFAULT_DETECTED_CURRENCY
    lower = text.lower()
    for marker, code in Settings.CURRENCY_MARKERS:
        if marker in lower:
            return code
    return Settings.DEFAULT_DETECTED_CURRENCY


def _group_indian(digits: str) -> str:
    """Group digits the Indian way: 12,34,567."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs: list[str] = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_reference_price(amount: int) -> str:
    """Render a reference-currency amount, e.g. 124999 -> '₹1,24,999'."""
    sign = "-" if amount < 0 else ""
    return (
        f"{sign}{Settings.REFERENCE_SYMBOL}"
        f"{_group_indian(str(abs(amount)))}"
    )
