# pricescope/scrapers/static_fetcher.py

"""Plain HTTP page fetch with browser impersonation."""

import logging
from typing import Any

import cloudscraper  # type: ignore[import-untyped]
from curl_cffi import requests as curl_requests

from pricescope.config.settings import Settings
from pricescope.models.errors import FetchFailure


class StaticFetcher:
    """Fetch raw HTML without executing JavaScript.

    curl_cffi impersonates a real Chrome TLS fingerprint; when that is
    refused or served a challenge page, cloudscraper gets one try.
    Any status below 400 counts as retrievable.
    """

    # Cloudflare challenge page markers (checked before keyword scan)
    _CF_CHALLENGE_MARKERS: list[str] = [
        "challenges.cloudflare.com",
        "cdn-cgi/challenge-platform",
        "just a moment",
        "cf-turnstile",
        "cf_chl_opt",
    ]

    def __init__(self) -> None:
        self.logger = logging.getLogger("pricescope.fetch.static")
        self.settings = Settings()
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._request_timeout: int = (
            self.settings.STATIC_FETCH_TIMEOUT
        )

    def _is_challenge_page(self, text: str) -> bool:
        """Check for Cloudflare challenge pages and CAPTCHA indicators."""
        lower = text.lower()

        for marker in self._CF_CHALLENGE_MARKERS:
            if marker in lower:
                self.logger.warning(
                    "Cloudflare challenge detected (marker: '%s')",
                    marker,
                )
                return True

        # Skip the keyword scan on pages with real content to
        # avoid false positives from review text and footers
        has_body_content = (
            "<body" in lower and len(text) > 5000
        )
        if not has_body_content:
            for keyword in self.settings.CAPTCHA_KEYWORDS:
                if keyword in lower:
                    self.logger.warning(
                        "CAPTCHA keyword '%s' detected", keyword,
                    )
                    return True
        return False

    def _fetch_curl(self, url: str) -> str | None:
        """GET via curl_cffi; return the body or None on failure."""
        try:
            resp = self.session.get(
                url,
                headers=self.settings.DEFAULT_HEADERS,
                timeout=self._request_timeout,
                allow_redirects=True,
                max_redirects=self.settings.STATIC_MAX_REDIRECTS,
            )
        except Exception as exc:
            self.logger.warning(
                "Request error for %s: %s", url, exc, exc_info=True,
            )
            return None

        if resp.status_code >= 400:
            self.logger.warning(
                "HTTP %d for %s", resp.status_code, url,
            )
            return None
        text = resp.text
        if self._is_challenge_page(text):
            return None
        return text

    def _fetch_cloudscraper(self, url: str) -> str | None:
        """GET via cloudscraper (JS challenge solver)."""
        try:
            _cs: Any = cloudscraper
            scraper: Any = _cs.create_scraper()
            resp: Any = scraper.get(
                url,
                headers=self.settings.DEFAULT_HEADERS,
                timeout=self._request_timeout,
            )
        except Exception as exc:
            self.logger.error(
                "cloudscraper fallback also failed: %s",
                exc,
                exc_info=True,
            )
            return None

        if resp.status_code >= 400:
            self.logger.warning(
                "cloudscraper got HTTP %d for %s",
                resp.status_code,
                url,
            )
            return None
        text = str(resp.text)
        if self._is_challenge_page(text):
            return None
        return text

    def fetch(self, url: str) -> str:
        """Return the page HTML or raise :class:`FetchFailure`."""
        html = self._fetch_curl(url)
        if html is not None:
            return html

        self.logger.info(
            "curl_cffi failed for %s, falling back to cloudscraper",
            url,
        )
        html = self._fetch_cloudscraper(url)
        if html is not None:
            return html

        msg = f"Static fetch failed for {url}"
        raise FetchFailure(msg)
