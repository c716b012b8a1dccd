# pricescope/models/rate_snapshot.py

"""Exchange-rate snapshot model for currency normalisation."""

from dataclasses import dataclass, field


@dataclass
class ExchangeRateSnapshot:
    """Cached conversion rates plus the time they were fetched.

    Rates are foreign currency units per 1 unit of the reference
    currency. ``fetched_at_ms`` is 0 until a refresh succeeds.
    """

    rates: dict[str, float] = field(
        default_factory=lambda: dict[str, float]()
    )
    fetched_at_ms: int = 0

    def age_seconds(self, now: float) -> float:
        """Return the snapshot age relative to *now* (epoch seconds)."""
        return now - self.fetched_at_ms / 1000.0
