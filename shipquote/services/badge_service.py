"""
Badge assignment for quote lists.

Marks the cheapest and the fastest offers. Every quote tied on the minimum
gets the badge, and one quote may carry both.
"""
from typing import List

from shipquote.modules.shipping.carriers.base import Quote


def assign_badges(quotes: List[Quote]) -> List[Quote]:
    """
    Set is_cheapest / is_fastest on every quote.

    Flags are assigned (not OR-ed), so running twice gives the same result.
    Only the badge flags are touched; order and other fields are kept.
    """
    if not quotes:
        return quotes

    min_price = min(q.price for q in quotes)
    min_days = min(q.estimated_days for q in quotes)

    for quote in quotes:
        quote.is_cheapest = quote.price == min_price
        quote.is_fastest = quote.estimated_days == min_days

    return quotes


class BadgeService:
    """Service wrapper so the badge step can be swapped out in tests."""

    def assign_badges(self, quotes: List[Quote]) -> List[Quote]:
        return assign_badges(quotes)
