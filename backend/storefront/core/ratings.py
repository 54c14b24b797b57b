"""Ratings — pure aggregation of review scores into a product rating.

Invariants:
    - No reviews -> 0.00
    - Average rounded half-up to 2 places, same rule as money in cart_view
"""

from decimal import Decimal, ROUND_HALF_UP

MIN_RATING = 1
MAX_RATING = 5

_HUNDREDTH = Decimal("0.01")


def average_rating(ratings: list[int]) -> Decimal:
    if not ratings:
        return Decimal("0.00")
    mean = Decimal(sum(ratings)) / len(ratings)
    return mean.quantize(_HUNDREDTH, rounding=ROUND_HALF_UP)
