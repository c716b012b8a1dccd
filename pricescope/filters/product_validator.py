# pricescope/filters/product_validator.py

"""Extraction validation: reject placeholder or missing product names."""

import logging

from pricescope.models.errors import ExtractionInvalid
from pricescope.models.product import ProductExtraction

logger = logging.getLogger("pricescope.filters")

_MIN_NAME_LENGTH = 3


class ProductValidator:
    """Decide whether an AI extraction identifies a real product."""

    @staticmethod
    def is_placeholder_name(name: str | None) -> bool:
        """Return True for empty, 'unknown' or too-short names."""
        if not name:
            return True
        if "unknown" in name.lower():
            return True
        return len(name.strip()) < _MIN_NAME_LENGTH

    @classmethod
    def validate(cls, extraction: ProductExtraction) -> ProductExtraction:
        """Return the extraction unchanged or raise ExtractionInvalid."""
        if cls.is_placeholder_name(extraction.name):
            logger.debug(
                "Rejected extraction with placeholder name %r",
                extraction.name,
            )
            raise ExtractionInvalid(
                "product name not found in page content"
            )
        return extraction
