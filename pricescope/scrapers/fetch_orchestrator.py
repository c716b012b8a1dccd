# pricescope/scrapers/fetch_orchestrator.py

"""Choose and sequence the page-fetch strategies."""

import asyncio
import logging

from pricescope.models.errors import FetchFailure
from pricescope.scrapers.rendered_fetcher import RenderedFetcher
from pricescope.scrapers.static_fetcher import StaticFetcher

logger = logging.getLogger("pricescope.fetch")


class FetchOrchestrator:
    """Fetch raw HTML, rendered first when rendering is enabled.

    ``render_enabled`` is decided by the caller (the server or CLI),
    normally from :meth:`Settings.is_hosted_environment`. With it off
    only the static strategy runs.
    """

    def __init__(
        self,
        render_enabled: bool,
        static_fetcher: StaticFetcher | None = None,
        rendered_fetcher: RenderedFetcher | None = None,
    ) -> None:
        self.render_enabled = render_enabled
        self.static_fetcher = static_fetcher or StaticFetcher()
        self.rendered_fetcher = rendered_fetcher
        if self.render_enabled and self.rendered_fetcher is None:
            self.rendered_fetcher = RenderedFetcher()

    @property
    def mode(self) -> str:
        """Human-readable strategy label for logs and health output."""
        return "rendered+static" if self.render_enabled else "static"

    async def fetch_html(self, url: str) -> str:
        """Return the page HTML or raise :class:`FetchFailure`."""
        if self.render_enabled and self.rendered_fetcher is not None:
            try:
                return await self.rendered_fetcher.fetch(url)
            except Exception as exc:
                logger.warning(
                    "Rendered fetch failed, trying static: %s", exc,
                )

        try:
            html: str = await asyncio.to_thread(
                self.static_fetcher.fetch, url
            )
        except FetchFailure:
            raise
        except Exception as exc:
            msg = f"Static fetch failed for {url}: {exc}"
            raise FetchFailure(msg) from exc
        logger.info("Static fetch got %d chars from %s", len(html), url)
        return html
