"""
Eco points and sustainability scoring.

All credits go through ``credit_eco_points`` which issues a single atomic
``eco_points = eco_points + n`` UPDATE and leaves committing to the caller,
so a credit always lands in the same transaction as the event that earned it.
"""
import math
from decimal import Decimal
from typing import Optional, Union
import logging

from sqlalchemy.orm import Session

from models.user import User
from models.product import ProductCondition

logger = logging.getLogger(__name__)

SIGNUP_ECO_POINTS = 100
LISTING_ECO_POINTS = 10
PURCHASE_POINTS_RATE = Decimal("0.10")

BASE_SUSTAINABILITY_SCORE = 50
DEEP_DISCOUNT_BONUS = 20
DEEP_DISCOUNT_RATIO = Decimal("0.5")
LONG_DESCRIPTION_BONUS = 5
LONG_DESCRIPTION_LENGTH = 100

CONDITION_BONUS = {
    ProductCondition.NEW.value: 15,
    ProductCondition.LIKE_NEW.value: 15,
    ProductCondition.GOOD.value: 10,
}

Number = Union[int, float, Decimal]


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def calculate_sustainability_score(
    price: Number,
    original_price: Optional[Number],
    condition: Union[ProductCondition, str],
    description: Optional[str]
) -> int:
    """Score a listing 0-100 from discount depth, condition and description length."""
    score = BASE_SUSTAINABILITY_SCORE

    if original_price and _to_decimal(price) < _to_decimal(original_price) * DEEP_DISCOUNT_RATIO:
        score += DEEP_DISCOUNT_BONUS

    condition_value = condition.value if isinstance(condition, ProductCondition) else condition
    score += CONDITION_BONUS.get(condition_value, 0)

    if description and len(description) > LONG_DESCRIPTION_LENGTH:
        score += LONG_DESCRIPTION_BONUS

    return max(0, min(100, score))


def purchase_eco_points(amount: Number) -> int:
    """Points earned for spending ``amount``: 10%, floored."""
    return int(math.floor(_to_decimal(amount) * PURCHASE_POINTS_RATE))


def credit_eco_points(db: Session, user_id: int, points: int) -> None:
    """Add ``points`` to a user's balance. Does not commit."""
    if points <= 0:
        return

    db.query(User).filter(User.id == user_id).update(
        {User.eco_points: User.eco_points + points},
        synchronize_session=False
    )
    logger.info(f"Credited {points} eco points to user {user_id}")
