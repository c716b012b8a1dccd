# pricescope/services/structured_extractor.py

"""AI-assisted structured product extraction from reduced page text."""

import asyncio
import json
import logging
import re
from typing import Any, Protocol

from google import genai

from pricescope.config.settings import Settings
from pricescope.models.errors import ExtractionFailure, ParseError
from pricescope.models.product import ProductExtraction

logger = logging.getLogger("pricescope.extractor")

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)```")
_BARE_OBJECT = re.compile(r"\{[\s\S]*\}")

_PROMPT_TEMPLATE = """You are a product data extractor for an e-commerce price comparison tool.
From the text below (scraped from {url}), extract the following:
1. Product name - the main product title being sold
2. Current selling price - the actual price with currency symbol (look for ₹, $, €, £, ¥)
3. Three short feature/description bullet points about the product

IMPORTANT:
- Indian storefront prices are usually shown as ₹X,XXX or ₹X,XX,XXX
- Look for words like "price", "deal price", "M.R.P", "offer price"
- Description points should be factual product features (RAM, storage, camera, etc.)
- If you see multiple prices, pick the lowest current selling price

Respond ONLY with valid JSON, no markdown, no explanation:
{{
  "name": "full product name here",
  "priceText": "price with currency symbol e.g. ₹24,999",
  "currency": "INR",
  "description": ["feature 1", "feature 2", "feature 3"],
  "image": ""
}}

Text to analyze:
{text}"""


class TextCompletionProvider(Protocol):
    """Anything that can turn a prompt into text with a named model."""

    async def complete(self, model: str, prompt: str) -> str:
        """Return the model's raw text response."""
        ...


class GeminiProvider:
    """Text completion through the Google Gen AI async client."""

    def __init__(
        self,
        api_key: str,
        client: genai.Client | None = None,
    ) -> None:
        self._client = client or genai.Client(api_key=api_key)

    async def complete(self, model: str, prompt: str) -> str:
        """Send *prompt* to *model* and return the response text."""
        response = await self._client.aio.models.generate_content(
            model=model,
            contents=prompt,
        )
        return response.text or ""


def build_prompt(text: str, url: str) -> str:
    """Fill the extraction prompt for one page."""
    return _PROMPT_TEMPLATE.format(url=url, text=text)


def parse_json_response(text: str) -> dict[str, Any]:
    """Pull the JSON object out of a free-form model response.

    A fenced ```json block wins; otherwise the outermost ``{...}`` span
    is used. Raises :class:`ParseError` when neither parses.
    """
    fenced = _FENCED_JSON.search(text)
    if fenced:
        candidate = fenced.group(1)
    else:
        bare = _BARE_OBJECT.search(text)
        if not bare:
            raise ParseError("No JSON in response")
        candidate = bare.group(0)

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON in response: {exc}"
        raise ParseError(msg) from exc
    if not isinstance(data, dict):
        raise ParseError("Response JSON is not an object")
    return data


class StructuredExtractor:
    """Try each model in priority order until one yields valid JSON."""

    def __init__(
        self,
        provider: TextCompletionProvider | None,
        models: list[str] | None = None,
        timeout: float | None = None,
    ) -> None:
        self.provider = provider
        self.models: list[str] = list(
            models if models is not None else Settings.GEMINI_MODELS
        )
        self.timeout: float = (
            Settings.EXTRACTION_TIMEOUT if timeout is None else timeout
        )

    async def _extract_with(
        self,
        provider: TextCompletionProvider,
        model: str,
        prompt: str,
    ) -> ProductExtraction:
        """Run one model and parse its answer."""
        text = await asyncio.wait_for(
            provider.complete(model, prompt),
            timeout=self.timeout,
        )
        logger.info("Model %s responded (%d chars)", model, len(text))
        return ProductExtraction.from_dict(parse_json_response(text))

    async def extract(
        self, reduced_text: str, source_url: str,
    ) -> ProductExtraction:
        """Return the product fields found in *reduced_text*.

        Raises :class:`ExtractionFailure` once every model has failed,
        carrying the last underlying error.
        """
        provider = self.provider
        if provider is None:
            raise ExtractionFailure("No text-completion provider configured")

        prompt = build_prompt(reduced_text, source_url)
        last_error: Exception | None = None
        for model in self.models:
            try:
                return await self._extract_with(provider, model, prompt)
            except Exception as exc:
                logger.warning("Model %s failed: %s", model, exc)
                last_error = exc

        msg = f"All models failed. Last error: {last_error}"
        raise ExtractionFailure(msg, last_error=last_error)
