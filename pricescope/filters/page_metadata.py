# pricescope/filters/page_metadata.py

"""Read social-preview metadata from raw product HTML."""

import logging

from bs4 import BeautifulSoup

logger = logging.getLogger("pricescope.filters")

_IMAGE_META: list[tuple[str, str]] = [
    ("property", "og:image"),
    ("name", "og:image"),
    ("name", "twitter:image"),
    ("property", "twitter:image"),
]


def find_product_image(html: str | None) -> str:
    """Return the page's preview image URL, or '' if none is declared."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "lxml")
    for attr, value in _IMAGE_META:
        tag = soup.find("meta", attrs={attr: value})
        content = tag.get("content") if tag else None
        if isinstance(content, str) and content.strip():
            return content.strip()

    link = soup.find("link", rel="image_src")
    href = link.get("href") if link else None
    if isinstance(href, str) and href.strip():
        return href.strip()
    logger.debug("No preview image metadata found")
    return ""
