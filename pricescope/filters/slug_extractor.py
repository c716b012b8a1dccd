# pricescope/filters/slug_extractor.py

"""Derive product and website names from a URL alone."""

import logging
import re
from urllib.parse import urlparse

from pricescope.config.settings import Settings

logger = logging.getLogger("pricescope.filters")

_ALPHA_RUN = re.compile(r"[a-zA-Z]{3,}")
_SEPARATORS = re.compile(r"[-_+]")
_HEX_ID = re.compile(r"\b[a-f0-9]{8,}\b", re.IGNORECASE)
_LONG_NUMBER = re.compile(r"\b\d{4,}\b")
# Upper-case SKU/ASIN-style tokens such as B08XYZ1234
_ALNUM_ID = re.compile(r"\b(?=[A-Z0-9]*\d)(?=[A-Z0-9]*[A-Z])[A-Z0-9]{8,}\b")
_SPACES = re.compile(r"\s+")
_WORD_START = re.compile(r"\b\w")


def _best_segment(path: str) -> str:
    """Pick the longest path segment that looks like a product slug."""
    boilerplate = set(Settings.SLUG_BOILERPLATE)
    best = ""
    for segment in (s for s in path.split("/") if s):
        if len(segment) <= len(best):
            continue
        if not _ALPHA_RUN.search(segment):
            continue
        if segment.lower() in boilerplate:
            continue
        best = segment
    return best


def product_name_from_url(url: str) -> str | None:
    """Turn a product URL slug into a title-cased product name.

    Returns ``None`` when no path segment qualifies or the cleaned
    name is too short to be useful.
    """
    try:
        path = urlparse(url).path
    except ValueError:
        logger.debug("Unparseable URL for slug extraction: %s", url)
        return None

    slug = _best_segment(path)
    if not slug:
        return None

    name = _SEPARATORS.sub(" ", slug)
    name = _HEX_ID.sub("", name)
    name = _ALNUM_ID.sub("", name)
    name = _LONG_NUMBER.sub("", name)
    name = _SPACES.sub(" ", name).strip()
    name = _WORD_START.sub(lambda m: m.group().upper(), name)

    return name if len(name) > 3 else None


def website_name(url: str) -> str:
    """Return a display name for the site, e.g. 'Amazon' for amazon.in."""
    try:
        hostname = urlparse(url).hostname or ""
    except ValueError:
        return "Website"
    hostname = hostname.removeprefix("www.")
    first = hostname.split(".")[0]
    if not first:
        return "Website"
    return first[0].upper() + first[1:]
