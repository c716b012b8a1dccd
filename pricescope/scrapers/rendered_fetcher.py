# pricescope/scrapers/rendered_fetcher.py

"""Headless-browser page fetch for JavaScript-rendered product pages."""

import asyncio
import logging

from playwright.async_api import (
    Browser,
    Page,
    Playwright,
    Route,
    async_playwright,
)

from pricescope.config.settings import Settings
from pricescope.models.errors import FetchFailure

# Hide the usual automation giveaways before any page script runs
_STEALTH_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3] });
"""


class RenderedFetcher:
    """Render a page in a fresh, isolated Chromium and return its DOM.

    Each call launches its own browser and always closes it, whether
    navigation succeeds, raises or times out.
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger("pricescope.fetch.rendered")
        self.settings = Settings()

    def _extra_headers(self) -> dict[str, str]:
        """Browser-like headers minus the ones Chromium sets itself."""
        return {
            key: value
            for key, value in self.settings.DEFAULT_HEADERS.items()
            if key not in ("User-Agent", "Cache-Control", "DNT")
        }

    async def _block_heavy_resources(self, route: Route) -> None:
        """Abort image, font and media requests; let the rest through."""
        if route.request.resource_type in self.settings.BLOCKED_RESOURCE_TYPES:
            await route.abort()
        else:
            await route.continue_()

    async def _dismiss_consent(self, page: Page) -> None:
        """Click known cookie/location banners; failures are ignored."""
        for selector in self.settings.CONSENT_SELECTORS:
            try:
                await page.click(
                    selector,
                    timeout=self.settings.CONSENT_CLICK_TIMEOUT_MS,
                )
                self.logger.debug("Dismissed consent dialog %s", selector)
            except Exception as exc:
                self.logger.debug(
                    "Consent selector %s not clickable: %s",
                    selector,
                    exc,
                )

    async def _launch(self, playwright: Playwright) -> Browser:
        """Start a sandbox-hardened headless Chromium."""
        return await playwright.chromium.launch(
            headless=True,
            args=self.settings.BROWSER_ARGS,
        )

    async def _render(self, url: str) -> str:
        """Navigate, settle and return the rendered document."""
        async with async_playwright() as playwright:
            browser = await self._launch(playwright)
            try:
                context = await browser.new_context(
                    user_agent=self.settings.USER_AGENT,
                    extra_http_headers=self._extra_headers(),
                    viewport={"width": 1280, "height": 800},
                    locale="en-US",
                )
                await context.add_init_script(_STEALTH_SCRIPT)
                page = await context.new_page()
                await page.route("**/*", self._block_heavy_resources)

                await page.goto(
                    url,
                    wait_until="networkidle",
                    timeout=self.settings.RENDER_NAVIGATION_TIMEOUT_MS,
                )
                # Prices on some storefronts arrive after network idle
                await page.wait_for_timeout(
                    self.settings.RENDER_SETTLE_DELAY_MS
                )
                await self._dismiss_consent(page)
                return await page.content()
            finally:
                await browser.close()
                self.logger.debug("Browser closed for %s", url)

    async def fetch(self, url: str) -> str:
        """Return rendered HTML or raise :class:`FetchFailure`."""
        try:
            html = await asyncio.wait_for(
                self._render(url),
                timeout=self.settings.RENDER_TOTAL_TIMEOUT,
            )
        except Exception as exc:
            msg = f"Rendered fetch failed for {url}: {exc}"
            raise FetchFailure(msg) from exc
        self.logger.info("Rendered fetch got %d chars from %s", len(html), url)
        return html
