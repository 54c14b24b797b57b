"""Ratings — average of review scores.

Tests cover:
    - No reviews is 0.00
    - Averages round half-up to 2 places
"""

from decimal import Decimal

import pytest

from storefront.core.ratings import average_rating


def test_no_reviews_is_zero():
    assert average_rating([]) == Decimal("0.00")


@pytest.mark.parametrize("ratings, expected", [
    ([5], "5.00"),
    ([4, 5], "4.50"),
    ([5, 4, 4], "4.33"),
    ([5, 5, 4], "4.67"),
    ([1, 2, 2, 2, 2, 2, 2, 2], "1.88"),
])
def test_average_rounds_half_up(ratings, expected):
    assert average_rating(ratings) == Decimal(expected)


def test_exact_half_rounds_up():
    # 1.125 average
    assert average_rating([1, 1, 1, 1, 1, 1, 1, 2]) == Decimal("1.13")
