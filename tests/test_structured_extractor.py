# tests/test_structured_extractor.py

"""Tests for model-response parsing and the multi-model fallback."""

import asyncio
import unittest
from unittest.mock import AsyncMock, MagicMock

from pricescope.models.errors import ExtractionFailure, ParseError
from pricescope.services.structured_extractor import (
    GeminiProvider,
    StructuredExtractor,
    build_prompt,
    parse_json_response,
)

_GOOD_JSON = (
    '{"name": "Galaxy S24", "priceText": "₹74,999", "currency": "INR",'
    ' "description": ["8GB RAM", "256GB", "50MP", "extra"], "image": ""}'
)


class _FakeProvider:
    """Returns queued responses per model; exceptions are raised."""

    def __init__(self, responses: dict[str, object]) -> None:
        self.responses = responses
        self.calls: list[str] = []

    async def complete(self, model: str, prompt: str) -> str:
        self.calls.append(model)
        result = self.responses[model]
        if isinstance(result, Exception):
            raise result
        return str(result)


class TestParseJsonResponse(unittest.TestCase):
    """parse_json_response tolerates chatty model output."""

    def test_fenced_block(self) -> None:
        """A ```json fenced block is preferred."""
        text = f"Sure! Here it is:\n```json\n{_GOOD_JSON}\n```\nThanks"
        self.assertEqual(parse_json_response(text)["name"], "Galaxy S24")

    def test_bare_object(self) -> None:
        """A bare object inside prose is found."""
        text = f"Result: {_GOOD_JSON} -- done"
        self.assertEqual(parse_json_response(text)["priceText"], "₹74,999")

    def test_no_json(self) -> None:
        """Text without braces raises ParseError."""
        with self.assertRaises(ParseError):
            parse_json_response("I could not find a product.")

    def test_invalid_json(self) -> None:
        """Broken JSON raises ParseError."""
        with self.assertRaises(ParseError):
            parse_json_response('{"name": "x",}')

    def test_non_object_fenced(self) -> None:
        """A fenced array is rejected."""
        with self.assertRaises(ParseError):
            parse_json_response('```json\n["a", "b"]\n```')


class TestBuildPrompt(unittest.TestCase):
    """build_prompt embeds the page URL and text."""

    def test_contains_inputs(self) -> None:
        """URL and text appear; the JSON template keeps single braces."""
        prompt = build_prompt("PAGE TEXT", "https://shop.example/p")
        self.assertIn("PAGE TEXT", prompt)
        self.assertIn("https://shop.example/p", prompt)
        self.assertIn('"priceText"', prompt)
        self.assertNotIn("{{", prompt)


class TestStructuredExtractor(unittest.IsolatedAsyncioTestCase):
    """StructuredExtractor model fallback."""

    async def test_first_model_success(self) -> None:
        """The first model's answer is used and capped at 3 points."""
        provider = _FakeProvider({"m1": _GOOD_JSON, "m2": _GOOD_JSON})
        extractor = StructuredExtractor(provider, models=["m1", "m2"])

        result = await extractor.extract("text", "https://x.example/p")

        self.assertEqual(result.name, "Galaxy S24")
        self.assertEqual(result.currency, "INR")
        self.assertEqual(result.description, ["8GB RAM", "256GB", "50MP"])
        self.assertEqual(provider.calls, ["m1"])

    async def test_falls_through_to_next_model(self) -> None:
        """Errors and unparseable answers move to the next model."""
        provider = _FakeProvider({
            "m1": RuntimeError("quota"),
            "m2": "no json here",
            "m3": _GOOD_JSON,
        })
        extractor = StructuredExtractor(provider, models=["m1", "m2", "m3"])

        result = await extractor.extract("text", "https://x.example/p")

        self.assertEqual(result.name, "Galaxy S24")
        self.assertEqual(provider.calls, ["m1", "m2", "m3"])

    async def test_all_models_fail(self) -> None:
        """ExtractionFailure carries the last error."""
        last = ValueError("bad model")
        provider = _FakeProvider({"m1": RuntimeError("first"), "m2": last})
        extractor = StructuredExtractor(provider, models=["m1", "m2"])

        with self.assertRaises(ExtractionFailure) as ctx:
            await extractor.extract("text", "https://x.example/p")

        self.assertIs(ctx.exception.last_error, last)
        self.assertIn("bad model", str(ctx.exception))

    async def test_timeout_counts_as_failure(self) -> None:
        """A slow model is abandoned after the timeout."""

        class _Slow:
            async def complete(self, model: str, prompt: str) -> str:
                await asyncio.sleep(10)
                return _GOOD_JSON

        extractor = StructuredExtractor(_Slow(), models=["m1"], timeout=0.01)
        with self.assertRaises(ExtractionFailure):
            await extractor.extract("text", "https://x.example/p")

    async def test_no_provider(self) -> None:
        """Without a provider extraction fails immediately."""
        extractor = StructuredExtractor(provider=None, models=["m1"])
        with self.assertRaises(ExtractionFailure) as ctx:
            await extractor.extract("text", "https://x.example/p")
        self.assertIsNone(ctx.exception.last_error)

    async def test_provider_removed_after_construction(self) -> None:
        """Clearing the provider later is reported as ExtractionFailure."""
        provider = _FakeProvider({"m1": _GOOD_JSON})
        extractor = StructuredExtractor(provider, models=["m1"])
        extractor.provider = None
        with self.assertRaises(ExtractionFailure):
            await extractor.extract("text", "https://x.example/p")
        self.assertEqual(provider.calls, [])


class TestGeminiProvider(unittest.IsolatedAsyncioTestCase):
    """GeminiProvider delegates to the async Gen AI client."""

    async def test_complete(self) -> None:
        """The model name and prompt are forwarded; text is returned."""
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(
            return_value=MagicMock(text=_GOOD_JSON)
        )
        provider = GeminiProvider("key", client=client)

        text = await provider.complete("gemini-2.0-flash", "prompt")

        self.assertEqual(text, _GOOD_JSON)
        client.aio.models.generate_content.assert_awaited_once_with(
            model="gemini-2.0-flash", contents="prompt",
        )

    async def test_empty_text(self) -> None:
        """A response without text yields an empty string."""
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(
            return_value=MagicMock(text=None)
        )
        provider = GeminiProvider("key", client=client)
        self.assertEqual(await provider.complete("m", "p"), "")


if __name__ == "__main__":
    unittest.main()
