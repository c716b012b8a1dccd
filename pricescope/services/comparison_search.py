# pricescope/services/comparison_search.py

"""Find comparable listings for a product across retailers."""

import asyncio
import logging
from typing import Any
from urllib.parse import quote

from curl_cffi import requests as curl_requests

from pricescope.config.settings import Settings
from pricescope.filters.price_parser import (
    detect_currency,
    format_reference_price,
    parse_price_or_none,
)
from pricescope.filters.slug_extractor import website_name
from pricescope.models.errors import SearchServiceFailure
from pricescope.models.product import ComparisonEntry, ComparisonResult
from pricescope.services.currency_normalizer import CurrencyNormalizer

logger = logging.getLogger("pricescope.search")


def _describe_listing(item: dict[str, Any]) -> list[str]:
    """Build the optional seller/rating/delivery notes for a listing."""
    notes: list[str] = []
    if item.get("source"):
        notes.append(f"Sold by: {item['source']}")
    if item.get("rating"):
        notes.append(
            f"Rating: {item['rating']}/5 "
            f"({item.get('reviews') or 0} reviews)"
        )
    if item.get("delivery"):
        notes.append(f"Delivery: {item['delivery']}")
    return notes


class ComparisonSearch:
    """Shopping-search client with a static retailer fallback."""

    def __init__(
        self,
        normalizer: CurrencyNormalizer | None = None,
        api_key: str | None = None,
    ) -> None:
        self.normalizer = normalizer or CurrencyNormalizer()
        self.api_key: str | None = (
            Settings.SERPAPI_KEY if api_key is None else api_key
        )
        self.settings = Settings()
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )

    @property
    def has_service_key(self) -> bool:
        """Return True when a usable search-service key is configured."""
        return bool(self.api_key) and (
            self.api_key != self.settings.SERPAPI_PLACEHOLDER_KEY
        )

    # ── Primary path ─────────────────────────────────────

    def _query_service(self, product_name: str) -> list[dict[str, Any]]:
        """Call the shopping-search API and return its raw results."""
        params = {
            "engine": self.settings.SEARCH_ENGINE,
            "q": product_name,
            "api_key": self.api_key,
            "gl": self.settings.SEARCH_COUNTRY,
            "hl": self.settings.SEARCH_LANGUAGE,
            "num": self.settings.SEARCH_RESULT_COUNT,
        }
        try:
            resp = self.session.get(
                self.settings.SERPAPI_URL,
                params=params,
                timeout=self.settings.SEARCH_TIMEOUT,
            )
        except Exception as exc:
            msg = f"Search request failed: {exc}"
            raise SearchServiceFailure(msg) from exc

        if resp.status_code != 200:
            msg = f"Search service returned HTTP {resp.status_code}"
            raise SearchServiceFailure(msg)
        try:
            data = resp.json()
        except ValueError as exc:
            raise SearchServiceFailure("Malformed search response") from exc
        if not isinstance(data, dict):
            raise SearchServiceFailure("Malformed search response")

        results = data.get("shopping_results") or []
        logger.info(
            "Search service returned %d results for '%s'",
            len(results),
            product_name,
        )
        return [r for r in results if isinstance(r, dict)]

    async def _to_entry(
        self, item: dict[str, Any], product_name: str,
    ) -> ComparisonEntry:
        """Normalise one search result into a comparison entry."""
        raw_price = item.get("price")
        price_str = str(raw_price) if raw_price is not None else None
        explicit = item.get("currency")
        currency = (
            explicit
            if isinstance(explicit, str) and explicit
            else detect_currency(price_str)
        )
        price = await self.normalizer.to_reference(
            parse_price_or_none(price_str), currency
        )
        url = str(item.get("link") or item.get("product_link") or "#")
        return ComparisonEntry(
            name=str(item.get("title") or product_name),
            price=price,
            price_text=(
                format_reference_price(price)
                if price
                else (price_str or "N/A")
            ),
            original_price=price_str,
            description=_describe_listing(item),
            image=str(item.get("thumbnail") or ""),
            url=url,
            website_name=str(item.get("source") or website_name(url)),
        )

    # ── Fallback path ────────────────────────────────────

    def fallback(self, product_name: str) -> ComparisonResult:
        """One priceless link per known retailer's search page."""
        encoded = quote(product_name, safe="!~*'()")
        entries = [
            ComparisonEntry(
                name=product_name,
                price=None,
                price_text="Check website",
                description=[
                    f"Search results from {retailer['label']}",
                    "Click the link to view current pricing in "
                    f"{self.settings.REFERENCE_SYMBOL}",
                    "Prices may vary by seller",
                ],
                url=(
                    f"https://www.{retailer['domain']}/"
                    f"{retailer['search_path']}{encoded}"
                ),
                website_name=retailer["label"],
            )
            for retailer in self.settings.FALLBACK_RETAILERS
        ]
        return ComparisonResult(
            query=product_name, products=entries, fallback=True,
        )

    # ── Entry point ──────────────────────────────────────

    async def search(self, product_name: str) -> ComparisonResult:
        """Return up to the configured number of comparable listings."""
        if not self.has_service_key:
            logger.info("No search-service key; using retailer fallback")
            return self.fallback(product_name)

        try:
            results = await asyncio.to_thread(
                self._query_service, product_name
            )
            top = results[: self.settings.COMPARISON_LIMIT]
            entries = await asyncio.gather(
                *(self._to_entry(item, product_name) for item in top)
            )
        except Exception as exc:
            logger.error(
                "Search service error for '%s': %s",
                product_name,
                exc,
                exc_info=True,
            )
            return self.fallback(product_name)

        return ComparisonResult(query=product_name, products=list(entries))
