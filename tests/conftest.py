# tests/conftest.py

"""Shared pytest fixtures for all PriceScope tests."""

from collections.abc import Generator
from unittest.mock import patch

import pytest

from pricescope.config.settings import Settings


@pytest.fixture(autouse=True)
def no_api_keys() -> Generator[None, None, None]:
    """Blank external API keys so no test reaches a real service."""
    with patch.object(Settings, "GEMINI_API_KEY", None), patch.object(
        Settings, "SERPAPI_KEY", None
    ):
        yield
