# pricescope/filters/price_ranker.py

"""Mark the cheapest and dearest listings in a comparison."""

from pricescope.models.product import ComparisonEntry


def annotate_price_extremes(
    entries: list[ComparisonEntry],
) -> list[ComparisonEntry]:
    """Flag lowest/highest priced entries in place and return them.

    Every entry tied at the minimum is marked lowest. Highest is only
    marked when prices differ. Entries without a price are skipped.
    """
    prices = [e.price for e in entries if e.price is not None]
    for entry in entries:
        entry.is_lowest = False
        entry.is_highest = False
    if not prices:
        return entries

    min_price = min(prices)
    max_price = max(prices)
    for entry in entries:
        if entry.price is None:
            continue
        entry.is_lowest = entry.price == min_price
        entry.is_highest = (
            entry.price == max_price and min_price != max_price
        )
    return entries
