# pricescope/api/server.py

"""HTTP API exposing the scrape pipeline and comparison search."""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from pricescope.config.settings import Settings
from pricescope.filters.price_ranker import annotate_price_extremes
from pricescope.models.errors import BadRequest
from pricescope.scrapers.fetch_orchestrator import FetchOrchestrator
from pricescope.services.comparison_search import ComparisonSearch
from pricescope.services.currency_normalizer import CurrencyNormalizer
from pricescope.services.extraction_pipeline import ExtractionPipeline
from pricescope.storage.rate_cache import ExchangeRateCache

logger = logging.getLogger("pricescope.api")


class ScrapeRequest(BaseModel):
    """Body of ``POST /scrape``."""

    url: str | None = None


class SearchRequest(BaseModel):
    """Body of ``POST /search``."""

    productName: str | None = None


def _require(value: str | None, message: str) -> str:
    """Return a non-blank field value or raise BadRequest."""
    if value is None or not value.strip():
        raise BadRequest(message)
    return value.strip()


def create_app(
    pipeline: ExtractionPipeline | None = None,
    comparison: ComparisonSearch | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Both services share one exchange-rate cache unless injected.
    """
    normalizer = CurrencyNormalizer(ExchangeRateCache())
    if pipeline is None:
        render_enabled = not Settings.is_hosted_environment()
        pipeline = ExtractionPipeline(
            fetcher=FetchOrchestrator(render_enabled=render_enabled),
            normalizer=normalizer,
        )
    if comparison is None:
        comparison = ComparisonSearch(normalizer=normalizer)
    scraper: ExtractionPipeline = pipeline
    searcher: ComparisonSearch = comparison

    app = FastAPI(
        title="PriceScope API",
        description="Extract a product from any store page and compare prices.",
        version="1.0.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.pipeline = scraper
    app.state.comparison = searcher

    @app.exception_handler(BadRequest)
    async def bad_request_handler(
        request: Request, exc: BadRequest,
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def validation_handler(
        request: Request, exc: RequestValidationError,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request body"},
        )

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "environment": (
                "hosted" if Settings.is_hosted_environment() else "local"
            ),
            "fetchMode": scraper.fetcher.mode,
            "gemini": bool(Settings.GEMINI_API_KEY),
            "serpapi": searcher.has_service_key,
        }

    @app.post("/scrape", response_model=None)
    async def scrape(body: ScrapeRequest) -> JSONResponse:
        url = _require(body.url, "URL is required")
        try:
            product = await scraper.run(url)
        except Exception as exc:
            logger.error("Scrape error for %s: %s", url, exc, exc_info=True)
            recovered = scraper.recover(url)
            if recovered is None:
                return JSONResponse(
                    status_code=500,
                    content={
                        "error": f"Failed to extract product data: {exc}"
                    },
                )
            return JSONResponse(content=recovered.to_dict())
        return JSONResponse(content=product.to_dict())

    @app.post("/search", response_model=None)
    async def search(body: SearchRequest) -> JSONResponse:
        name = _require(body.productName, "Product name is required")
        result = await searcher.search(name)
        annotate_price_extremes(result.products)
        return JSONResponse(content=result.to_dict())

    logger.info(
        "API ready (fetch=%s, gemini=%s, serpapi=%s)",
        scraper.fetcher.mode,
        "on" if Settings.GEMINI_API_KEY else "off",
        "on" if searcher.has_service_key else "off",
    )
    return app
