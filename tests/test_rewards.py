from decimal import Decimal

import pytest

from models.product import ProductCondition
from services.rewards import calculate_sustainability_score, purchase_eco_points


def test_score_for_deep_discount_good_condition_long_description():
    score = calculate_sustainability_score(
        price=400,
        original_price=1000,
        condition="Good",
        description="x" * 150,
    )
    assert score == 85


def test_base_score_without_bonuses():
    assert calculate_sustainability_score(30, None, ProductCondition.FAIR, "short") == 50


@pytest.mark.parametrize("condition,expected", [
    (ProductCondition.NEW, 65),
    (ProductCondition.LIKE_NEW, 65),
    (ProductCondition.GOOD, 60),
    (ProductCondition.FAIR, 50),
    (ProductCondition.POOR, 50),
])
def test_condition_bonus(condition, expected):
    assert calculate_sustainability_score(10, None, condition, None) == expected


def test_discount_bonus_needs_price_strictly_below_half():
    assert calculate_sustainability_score(Decimal("50.00"), Decimal("100.00"), "Poor", None) == 50
    assert calculate_sustainability_score(Decimal("49.99"), Decimal("100.00"), "Poor", None) == 70


def test_description_bonus_needs_more_than_100_characters():
    assert calculate_sustainability_score(10, None, "Poor", "x" * 100) == 50
    assert calculate_sustainability_score(10, None, "Poor", "x" * 101) == 55


def test_maximum_score():
    assert calculate_sustainability_score(1, 100, "New", "x" * 500) == 90


def test_purchase_points_are_ten_percent_floored():
    assert purchase_eco_points(Decimal("400.00")) == 40
    assert purchase_eco_points(Decimal("111.00")) == 11
    assert purchase_eco_points(9.99) == 0
    assert purchase_eco_points(511) == 51
