# pricescope/services/extraction_pipeline.py

"""Scrape pipeline: fetch, reduce, extract, validate and convert.

Every recoverable failure ends in the BLOCKED state, whose payload is
built from the URL alone. Only unexpected errors escape ``run``; the
API boundary hands those to :meth:`ExtractionPipeline.recover`.
"""

import logging
from enum import Enum

from pricescope.config.logging_config import scrape_context
from pricescope.config.settings import Settings
from pricescope.filters.page_metadata import find_product_image
from pricescope.filters.price_parser import (
    detect_currency,
    format_reference_price,
    parse_numeric_price,
)
from pricescope.filters.product_validator import ProductValidator
from pricescope.filters.slug_extractor import (
    product_name_from_url,
    website_name,
)
from pricescope.filters.text_reducer import reduce_html
from pricescope.models.errors import (
    ConversionFailure,
    ExtractionFailure,
    ExtractionInvalid,
    FetchFailure,
    ReductionTooShort,
)
from pricescope.models.product import NormalizedProduct, ProductExtraction
from pricescope.scrapers.fetch_orchestrator import FetchOrchestrator
from pricescope.services.currency_normalizer import CurrencyNormalizer
from pricescope.services.structured_extractor import (
    GeminiProvider,
    StructuredExtractor,
)

logger = logging.getLogger("pricescope.pipeline")

_BLOCKED_MESSAGE = (
    "⛔ {site} has blocked access to this page. We've extracted the "
    "product name from the URL and will search for similar products."
)
_RECOVERED_MESSAGE = (
    "⛔ {site} has blocked access to this page. Showing similar "
    "products based on the URL."
)


class PipelineState(str, Enum):
    """Stages of a single scrape."""

    FETCHING = "fetching"
    REDUCING = "reducing"
    EXTRACTING = "extracting"
    VALIDATING = "validating"
    CONVERTING = "converting"
    DONE = "done"
    BLOCKED = "blocked"


def _default_extractor() -> StructuredExtractor:
    """Build a Gemini-backed extractor, or a provider-less one."""
    if not Settings.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY not set; extraction disabled")
        return StructuredExtractor(provider=None)
    return StructuredExtractor(GeminiProvider(Settings.GEMINI_API_KEY))


class ExtractionPipeline:
    """Turns a product URL into a :class:`NormalizedProduct`."""

    def __init__(
        self,
        fetcher: FetchOrchestrator,
        extractor: StructuredExtractor | None = None,
        normalizer: CurrencyNormalizer | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.extractor = extractor or _default_extractor()
        self.normalizer = normalizer or CurrencyNormalizer()

    # ── Stages ───────────────────────────────────────────

    async def _fetch(self, url: str) -> str:
        """FETCHING: get HTML long enough to hold a product page."""
        html = await self.fetcher.fetch_html(url)
        if not html or len(html) < Settings.MIN_HTML_LENGTH:
            msg = f"fetch returned {len(html or '')} chars"
            raise FetchFailure(msg)
        return html

    @staticmethod
    def _reduce(html: str) -> str:
        """REDUCING: strip markup; too little text means a bot wall."""
        text = reduce_html(html)
        logger.info("Reduced page to %d chars", len(text))
        if len(text) < Settings.MIN_REDUCED_LENGTH:
            raise ReductionTooShort("bot-check / CAPTCHA detected")
        return text

    async def _convert(
        self,
        url: str,
        html: str,
        extraction: ProductExtraction,
    ) -> NormalizedProduct:
        """CONVERTING: parse the price and normalise its currency."""
        try:
            amount: float | None = parse_numeric_price(
                extraction.price_text
            )
        except ConversionFailure as exc:
            logger.info("Price not parseable, leaving null: %s", exc)
            amount = None

        currency = (
            extraction.currency or detect_currency(extraction.price_text)
        ).upper()
        price = await self.normalizer.to_reference(amount, currency)

        return NormalizedProduct(
            name=extraction.name,
            search_query=extraction.name,
            price=price,
            price_text=(
                format_reference_price(price)
                if price
                else extraction.price_text
            ),
            original_price=extraction.price_text,
            currency=currency,
            description=extraction.description[
                : Settings.MAX_DESCRIPTION_POINTS
            ],
            image=extraction.image or find_product_image(html),
            url=url,
            website_name=website_name(url),
        )

    # ── Blocked-path recovery ────────────────────────────

    @staticmethod
    def blocked(url: str, reason: str) -> NormalizedProduct:
        """Build the BLOCKED payload from the URL slug."""
        slug_name = product_name_from_url(url)
        site = website_name(url)
        logger.warning(
            "Blocked/failed (%s). Slug extracted: %r", reason, slug_name,
        )
        return NormalizedProduct.blocked_result(
            url=url,
            website_name=site,
            slug_name=slug_name,
            message=_BLOCKED_MESSAGE.format(site=site),
        )

    @staticmethod
    def recover(url: str) -> NormalizedProduct | None:
        """Downgrade an unexpected failure to BLOCKED when possible.

        Returns ``None`` when the URL carries no usable product name.
        """
        slug_name = product_name_from_url(url)
        if not slug_name:
            return None
        site = website_name(url)
        return NormalizedProduct.blocked_result(
            url=url,
            website_name=site,
            slug_name=slug_name,
            message=_RECOVERED_MESSAGE.format(site=site),
        )

    # ── Entry point ──────────────────────────────────────

    async def run(self, url: str) -> NormalizedProduct:
        """Scrape *url*, ending in DONE or BLOCKED."""
        with scrape_context(url):
            return await self._run(url)

    async def _run(self, url: str) -> NormalizedProduct:
        state = PipelineState.FETCHING
        logger.info("Scraping %s [%s]", url, self.fetcher.mode)
        try:
            html = await self._fetch(url)

            state = PipelineState.REDUCING
            text = self._reduce(html)

            state = PipelineState.EXTRACTING
            extraction = await self.extractor.extract(text, url)
            logger.info(
                "Extracted %r at %r",
                extraction.name,
                extraction.price_text,
            )

            state = PipelineState.VALIDATING
            ProductValidator.validate(extraction)

            state = PipelineState.CONVERTING
            product = await self._convert(url, html, extraction)
        except (
            FetchFailure,
            ReductionTooShort,
            ExtractionFailure,
            ExtractionInvalid,
        ) as exc:
            logger.info("Pipeline %s -> %s", state.value, PipelineState.BLOCKED.value)
            return self.blocked(url, f"{state.value}: {exc}")

        logger.info("Pipeline %s -> %s", state.value, PipelineState.DONE.value)
        return product
