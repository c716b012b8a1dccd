# pricescope/storage/rate_cache.py

"""In-memory exchange-rate cache with TTL and fallback replacement."""

import logging
import time
from collections.abc import Callable

from curl_cffi import requests as curl_requests

from pricescope.config.settings import Settings
from pricescope.models.rate_snapshot import ExchangeRateSnapshot

logger = logging.getLogger("pricescope.rates")

RateFetcher = Callable[[str], dict[str, float]]


def fetch_latest_rates(base: str) -> dict[str, float]:
    """Download all rates keyed by *base* from the public rate service.

    Raises on network errors, non-200 status or a malformed body.
    """
    url = Settings.EXCHANGE_RATE_URL.format(base=base)
    resp = curl_requests.get(
        url,
        impersonate=Settings.IMPERSONATE_BROWSER,
        timeout=Settings.EXCHANGE_RATE_TIMEOUT,
    )
    if resp.status_code != 200:
        msg = f"Exchange-rate service returned HTTP {resp.status_code}"
        raise RuntimeError(msg)
    rates = resp.json().get("rates")
    if not isinstance(rates, dict) or not rates:
        raise RuntimeError("Exchange-rate response has no rates")
    return {
        str(code).upper(): float(value)
        for code, value in rates.items()
    }


class ExchangeRateCache:
    """Holds the current :class:`ExchangeRateSnapshot`.

    A lookup refreshes the whole snapshot when it is older than the
    TTL or lacks the requested code. A failed refresh swaps in the
    fixed fallback table without touching the timestamp, so the next
    lookup tries the network again. There is no locking: concurrent
    refreshes may overwrite each other, which is harmless for
    approximate rates.
    """

    def __init__(
        self,
        fetcher: RateFetcher | None = None,
        clock: Callable[[], float] = time.time,
        ttl: float | None = None,
        base: str | None = None,
    ) -> None:
        self._fetcher: RateFetcher = fetcher or fetch_latest_rates
        self._clock = clock
        self._ttl: float = (
            Settings.EXCHANGE_RATE_TTL if ttl is None else ttl
        )
        self.base: str = base or Settings.REFERENCE_CURRENCY
        self.snapshot = ExchangeRateSnapshot()

    def is_stale(self) -> bool:
        """Return True when the snapshot has outlived the TTL."""
        return self.snapshot.age_seconds(self._clock()) > self._ttl

    def get_rate(self, code: str) -> float | None:
        """Return foreign units per reference unit for *code*.

        Returns ``None`` if the code is unknown even after a refresh.
        """
        upper = code.upper()
        if self.is_stale() or upper not in self.snapshot.rates:
            self.refresh()
        return self.snapshot.rates.get(upper)

    def refresh(self) -> None:
        """Replace the snapshot from the rate service or the fallback."""
        try:
            rates = self._fetcher(self.base)
        except Exception as exc:
            logger.warning(
                "Exchange-rate refresh failed, using fallback "
                "table: %s",
                exc,
                exc_info=True,
            )
            self.snapshot.rates = dict(Settings.FALLBACK_RATES)
            return

        self.snapshot = ExchangeRateSnapshot(
            rates=rates,
            fetched_at_ms=int(self._clock() * 1000),
        )
        logger.info(
            "Exchange rates refreshed (%d currencies, base=%s)",
            len(rates),
            self.base,
        )
