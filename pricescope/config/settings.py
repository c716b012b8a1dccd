# pricescope/config/settings.py

"""Central configuration for the PriceScope service."""

import os
from collections.abc import Mapping
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the PriceScope service."""

    # --- Server ---
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3000"))

    # --- Static fetch ---
    STATIC_FETCH_TIMEOUT: int = 20      # Seconds before a GET times out
    STATIC_MAX_REDIRECTS: int = 5
    MIN_HTML_LENGTH: int = 500          # Shorter pages count as blocked

    # --- Rendered fetch ---
    RENDER_NAVIGATION_TIMEOUT_MS: int = 30_000
    RENDER_SETTLE_DELAY_MS: int = 3_000
    RENDER_TOTAL_TIMEOUT: float = 60.0  # Hard cap on one browser session
    CONSENT_CLICK_TIMEOUT_MS: int = 1_000
    BLOCKED_RESOURCE_TYPES: list[str] = ["image", "font", "media"]
    CONSENT_SELECTORS: list[str] = [
        "#sp-cc-accept",
        '.a-button-input[aria-labelledby="a-autoid-0-announce"]',
    ]
    BROWSER_ARGS: list[str] = [
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--disable-gpu",
        "--window-size=1280,800",
        "--disable-blink-features=AutomationControlled",
    ]

    # --- Text reduction ---
    MAX_REDUCED_CHARS: int = 8000       # Keeps prompts inside token limits
    MIN_REDUCED_LENGTH: int = 200       # Shorter text is a bot wall

    # --- Bot-wall detection ---
    CAPTCHA_KEYWORDS: list[str] = [
        "captcha",
        "verify you are human",
        "unusual traffic",
        "automated requests",
    ]

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/131.0.0.0 Safari/537.36"
    )
    DEFAULT_HEADERS: dict[str, str] = {
        "User-Agent": USER_AGENT,
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "Cache-Control": "max-age=0",
        "sec-ch-ua": (
            '"Google Chrome";v="131", '
            '"Chromium";v="131", '
            '"Not_A Brand";v="24"'
        ),
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": '"Windows"',
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "none",
        "sec-fetch-user": "?1",
        "Upgrade-Insecure-Requests": "1",
        "DNT": "1",
    }

    # --- AI extraction ---
    GEMINI_API_KEY: str | None = os.getenv("GEMINI_API_KEY")
    GEMINI_MODELS: list[str] = [
        "gemini-2.0-flash",
        "gemini-2.0-flash-001",
        "gemini-2.5-flash",
    ]
    EXTRACTION_TIMEOUT: float = 30.0    # Seconds per model call
    MAX_DESCRIPTION_POINTS: int = 3

    # --- Currency ---
    REFERENCE_CURRENCY: str = "INR"
    REFERENCE_SYMBOL: str = "₹"
    EXCHANGE_RATE_URL: str = (
        "https://api.exchangerate-api.com/v4/latest/{base}"
    )
    EXCHANGE_RATE_TIMEOUT: int = 5
    EXCHANGE_RATE_TTL: float = 30 * 60.0
    # Foreign units per 1 INR, used when the rate service is down
    FALLBACK_RATES: dict[str, float] = {
        "USD": 0.012,
        "EUR": 0.011,
        "GBP": 0.0095,
        "JPY": 1.8,
        "INR": 1.0,
    }
    DEFAULT_REFERENCE_RATE: float = 83.0  # Approximate USD -> INR
    CURRENCY_MARKERS: list[tuple[str, str]] = [
        ("₹", "INR"),
        ("inr", "INR"),
        ("€", "EUR"),
        ("£", "GBP"),
        ("¥", "JPY"),
    ]
    DEFAULT_DETECTED_CURRENCY: str = "USD"

    # --- Comparison search ---
    SERPAPI_KEY: str | None = os.getenv("SERPAPI_KEY")
    SERPAPI_PLACEHOLDER_KEY: str = "your_serpapi_key_here"
    SERPAPI_URL: str = "https://serpapi.com/search"
    SEARCH_ENGINE: str = "google_shopping"
    SEARCH_COUNTRY: str = "in"
    SEARCH_LANGUAGE: str = "en"
    SEARCH_RESULT_COUNT: int = 6
    SEARCH_TIMEOUT: int = 12
    COMPARISON_LIMIT: int = 3

    # --- Blocked-path recovery ---
    SLUG_BOILERPLATE: list[str] = [
        "dp", "p", "product", "products", "item", "items", "pd",
    ]
    BLOCKED_PLACEHOLDER_NAME: str = "Product"

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Environment ---
    HOSTED_ENV_MARKERS: list[str] = ["RENDER", "RAILWAY_ENVIRONMENT"]

    # --- Fallback retailers (registry for the no-search-key path) ---
    FALLBACK_RETAILERS: list[dict[str, str]] = [
        {
            "id": "amazon_in",
            "label": "Amazon India",
            "domain": "amazon.in",
            "search_path": "s?k=",
        },
        {
            "id": "flipkart",
            "label": "Flipkart",
            "domain": "flipkart.com",
            "search_path": "search?q=",
        },
        {
            "id": "myntra",
            "label": "Myntra",
            "domain": "myntra.com",
            "search_path": "search?rawQuery=",
        },
    ]

    @classmethod
    def is_hosted_environment(
        cls, environ: Mapping[str, str] | None = None,
    ) -> bool:
        """Return True when running on a hosted platform.

        Hosted platforms cannot launch a headless browser, so the
        rendered fetch strategy is disabled there.
        """
        env = os.environ if environ is None else environ
        if any(env.get(marker) for marker in cls.HOSTED_ENV_MARKERS):
            return True
        return env.get("PRICESCOPE_ENV", "").lower() == "production"

    @classmethod
    def serpapi_configured(cls) -> bool:
        """Return True when a usable SerpAPI key is set."""
        key = cls.SERPAPI_KEY
        return bool(key) and key != cls.SERPAPI_PLACEHOLDER_KEY
