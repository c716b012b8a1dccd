# pricescope/models/product.py

"""Product data models for inter-module data flow."""

from dataclasses import dataclass, field
from typing import Any

from pricescope.config.settings import Settings
from pricescope.models.errors import ParseError


@dataclass
class ProductExtraction:
    """Structured product fields returned by the AI extractor."""

    name: str
    price_text: str = ""
    currency: str = ""
    description: list[str] = field(
        default_factory=lambda: list[str]()
    )
    image: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "ProductExtraction":
        """Build an extraction from the model's parsed JSON object."""
        if not isinstance(data, dict):
            msg = f"Expected a JSON object, got {type(data).__name__}"
            raise ParseError(msg)
        raw_description = data.get("description") or []
        if isinstance(raw_description, str):
            raw_description = [raw_description]
        description = [
            str(point)
            for point in raw_description
            if point
        ][: Settings.MAX_DESCRIPTION_POINTS]
        return cls(
            name=str(data.get("name") or ""),
            price_text=str(data.get("priceText") or ""),
            currency=str(data.get("currency") or ""),
            description=description,
            image=str(data.get("image") or ""),
        )


@dataclass
class NormalizedProduct:
    """The scrape result returned to callers.

    A blocked result never carries a price or description.
    """

    name: str
    url: str
    website_name: str
    price: int | None = None
    price_text: str | None = None
    original_price: str | None = None
    currency: str | None = None
    description: list[str] = field(
        default_factory=lambda: list[str]()
    )
    image: str = ""
    blocked: bool = False
    blocker_message: str | None = None
    search_query: str | None = None

    @classmethod
    def blocked_result(
        cls,
        url: str,
        website_name: str,
        slug_name: str | None,
        message: str,
    ) -> "NormalizedProduct":
        """Build a blocked result from a URL-derived product name."""
        return cls(
            name=slug_name or Settings.BLOCKED_PLACEHOLDER_NAME,
            url=url,
            website_name=website_name,
            blocked=True,
            blocker_message=message,
            search_query=slug_name,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the camelCase JSON shape used by the API."""
        data: dict[str, Any] = {
            "blocked": self.blocked,
            "name": self.name,
            "searchQuery": self.search_query,
            "price": self.price,
            "priceText": self.price_text,
            "description": list(self.description),
            "image": self.image,
            "url": self.url,
            "websiteName": self.website_name,
        }
        if self.blocked:
            data["blockerMessage"] = self.blocker_message
        else:
            data["originalPrice"] = self.original_price
            data["currency"] = self.currency
        return data


@dataclass
class ComparisonEntry:
    """A single comparable listing from another retailer."""

    name: str
    url: str
    website_name: str
    price: int | None = None
    price_text: str = ""
    original_price: str | None = None
    description: list[str] = field(
        default_factory=lambda: list[str]()
    )
    image: str = ""
    is_lowest: bool = False
    is_highest: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the camelCase JSON shape used by the API."""
        data: dict[str, Any] = {
            "name": self.name,
            "price": self.price,
            "priceText": self.price_text,
            "description": list(self.description),
            "image": self.image,
            "url": self.url,
            "websiteName": self.website_name,
            "isLowest": self.is_lowest,
            "isHighest": self.is_highest,
        }
        if self.original_price is not None:
            data["originalPrice"] = self.original_price
        return data


@dataclass
class ComparisonResult:
    """Container for a completed comparison search."""

    query: str
    products: list[ComparisonEntry] = field(
        default_factory=lambda: list[ComparisonEntry]()
    )
    fallback: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the ``/search`` response body."""
        data: dict[str, Any] = {
            "products": [p.to_dict() for p in self.products],
        }
        if self.fallback:
            data["fallback"] = True
        return data
