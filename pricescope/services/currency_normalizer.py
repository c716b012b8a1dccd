# pricescope/services/currency_normalizer.py

"""Convert detected currency amounts into the reference currency."""

import asyncio
import logging
import math

from pricescope.config.settings import Settings
from pricescope.storage.rate_cache import ExchangeRateCache

logger = logging.getLogger("pricescope.currency")


def _round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


class CurrencyNormalizer:
    """Price conversion backed by an :class:`ExchangeRateCache`.

    Conversion never fails: an unknown currency falls back to an
    approximate USD rate so a rate-service outage still yields a price.
    """

    def __init__(self, cache: ExchangeRateCache | None = None) -> None:
        self.cache = cache or ExchangeRateCache()
        self.reference: str = self.cache.base

    async def rate_to_reference(self, currency: str) -> float:
        """Return how many reference units one unit of *currency* is worth."""
        upper = currency.upper()
        if upper == self.reference:
            return 1.0
        rate = await asyncio.to_thread(self.cache.get_rate, upper)
        if not rate:
            logger.warning(
                "No rate for %s, using default %.1f",
                upper,
                Settings.DEFAULT_REFERENCE_RATE,
            )
            return Settings.DEFAULT_REFERENCE_RATE
        return 1 / rate

    async def to_reference(
        self, amount: float | None, currency: str,
    ) -> int | None:
        """Convert *amount* to whole reference-currency units.

        Returns ``None`` for a missing or non-finite amount.
        """
        if amount is None or isinstance(amount, bool):
            return None
        try:
            value = float(amount)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(value):
            return None
        rate = await self.rate_to_reference(currency)
        return _round_half_up(value * rate)
