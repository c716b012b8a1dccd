# pricescope/filters/text_reducer.py

"""Reduce an HTML document to dense, human-readable text.

This is a best-effort regex pass, not a parser: unbalanced or broken
markup is tolerated and never raises. The output is capped so it fits
the extraction prompt.
"""

import re

from pricescope.config.settings import Settings

_STRIPPED_ELEMENTS: tuple[str, ...] = (
    "script",
    "style",
    "nav",
    "footer",
    "header",
    "aside",
    "iframe",
    "svg",
)

_ELEMENT_PATTERNS: list[re.Pattern[str]] = [
    re.compile(rf"<{tag}[\s\S]*?</{tag}>", re.IGNORECASE)
    for tag in _STRIPPED_ELEMENTS
]
_COMMENT = re.compile(r"<!--[\s\S]*?-->")
_TAG = re.compile(r"<[^>]+>")
_WHITESPACE_RUN = re.compile(r"\s{2,}")

_ENTITIES: list[tuple[str, str]] = [
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
]


def reduce_html(html: str | None, limit: int | None = None) -> str:
    """Strip boilerplate elements and markup, returning plain text."""
    if not html:
        return ""
    max_chars = Settings.MAX_REDUCED_CHARS if limit is None else limit

    text = html
    for pattern in _ELEMENT_PATTERNS:
        text = pattern.sub("", text)
    text = _COMMENT.sub("", text)
    text = _TAG.sub(" ", text)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    text = _WHITESPACE_RUN.sub(" ", text).strip()

    return text[:max_chars]
