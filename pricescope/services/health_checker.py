# pricescope/services/health_checker.py

"""Connectivity health checker for external collaborators."""

import asyncio
import logging
import time
from dataclasses import dataclass

from curl_cffi import requests as curl_requests

from pricescope.config.settings import Settings

logger = logging.getLogger("pricescope.health")

_HEALTH_TIMEOUT = 10  # seconds per target


@dataclass
class HealthResult:
    """Result of a single connectivity probe."""

    target_id: str
    status: str  # "ok", "slow", "down", "skipped"
    latency_ms: float
    message: str


def probe_url(
    target_id: str,
    url: str,
    session: curl_requests.Session | None = None,
) -> HealthResult:
    """GET *url* once and classify the outcome."""
    client = session or curl_requests.Session(
        impersonate=Settings.IMPERSONATE_BROWSER
    )
    start = time.monotonic()
    try:
        resp = client.get(
            url,
            headers=Settings.DEFAULT_HEADERS,
            timeout=_HEALTH_TIMEOUT,
        )
        elapsed_ms = (time.monotonic() - start) * 1000

        if resp.status_code >= 400:
            return HealthResult(
                target_id=target_id,
                status="down",
                latency_ms=elapsed_ms,
                message=f"HTTP {resp.status_code}",
            )

        if elapsed_ms > 5000:
            return HealthResult(
                target_id=target_id,
                status="slow",
                latency_ms=elapsed_ms,
                message="High latency",
            )

        return HealthResult(
            target_id=target_id,
            status="ok",
            latency_ms=elapsed_ms,
            message="",
        )

    except Exception as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        return HealthResult(
            target_id=target_id,
            status="down",
            latency_ms=elapsed_ms,
            message=str(exc)[:120],
        )


class HealthChecker:
    """Probe the rate service, search service and fallback retailers."""

    def __init__(self) -> None:
        self.targets: list[tuple[str, str]] = self._build_targets()

    @staticmethod
    def _build_targets() -> list[tuple[str, str]]:
        """List (id, url) pairs worth probing with this configuration."""
        targets = [
            (
                "exchange_rates",
                Settings.EXCHANGE_RATE_URL.format(
                    base=Settings.REFERENCE_CURRENCY
                ),
            ),
        ]
        if Settings.serpapi_configured():
            targets.append(("serpapi", "https://serpapi.com/"))
        targets.extend(
            (r["id"], f"https://www.{r['domain']}/")
            for r in Settings.FALLBACK_RETAILERS
        )
        return targets

    async def check_all(self) -> list[HealthResult]:
        """Probe every target concurrently."""
        tasks = [
            asyncio.to_thread(probe_url, target_id, url)
            for target_id, url in self.targets
        ]
        results: list[HealthResult] = list(
            await asyncio.gather(*tasks)
        )
        if not Settings.GEMINI_API_KEY:
            results.append(
                HealthResult(
                    target_id="gemini",
                    status="skipped",
                    latency_ms=0.0,
                    message="GEMINI_API_KEY not set",
                )
            )
        for r in results:
            logger.info(
                "Health check %s: %s (%.0fms) %s",
                r.target_id,
                r.status,
                r.latency_ms,
                r.message,
            )
        return results
