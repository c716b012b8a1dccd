# pricescope/models/errors.py

"""Error taxonomy for the scrape pipeline and comparison search."""


class PriceScopeError(Exception):
    """Base class for all PriceScope domain errors."""


class FetchFailure(PriceScopeError):
    """The page could not be retrieved (network, timeout, bot block)."""


class ReductionTooShort(PriceScopeError):
    """Reduced page text is too short to hold a product (CAPTCHA wall)."""


class ParseError(PriceScopeError):
    """A model response did not contain a usable JSON object."""


class ExtractionFailure(PriceScopeError):
    """Every configured AI model failed to extract the product."""

    def __init__(
        self,
        message: str,
        last_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.last_error = last_error


class ExtractionInvalid(PriceScopeError):
    """The extracted product name is missing or a placeholder."""


class ConversionFailure(PriceScopeError):
    """A price string could not be parsed into a number."""


class SearchServiceFailure(PriceScopeError):
    """The shopping-search service call failed or returned garbage."""


class BadRequest(PriceScopeError):
    """A required request field is missing."""
