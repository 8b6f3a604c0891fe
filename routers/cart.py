from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from database.connection import get_db
from routers.auth import get_current_user
from schemas.user import UserResponse
from schemas.cart import CartItemCreate, CartItemUpdate
from services.cart import get_cart, add_to_cart, update_cart_item, remove_from_cart
from core.exceptions import BaseCustomException, InternalError
from core.response import success_response

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("/cart")
def get_my_cart(
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get the current user's cart with totals"""
    try:
        return success_response(data=get_cart(db, current_user.id))

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Get cart error: {str(e)}")
        raise InternalError("Failed to fetch cart") from e

@router.post("/cart")
def add_item_to_cart(
    item: CartItemCreate,
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        cart_item = add_to_cart(db, current_user.id, item.product_id, item.quantity)
        return success_response(
            data={"cart_id": cart_item.id, "quantity": cart_item.quantity},
            message="Item added to cart successfully"
        )

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Add to cart error: {str(e)}")
        raise InternalError("Failed to add item to cart") from e

@router.put("/cart/{cart_id}")
def update_cart_quantity(
    cart_id: int,
    update: CartItemUpdate,
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        cart_item = update_cart_item(db, cart_id, current_user.id, update.quantity)
        return success_response(
            data={"cart_id": cart_item.id, "quantity": cart_item.quantity},
            message="Cart updated successfully"
        )

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Update cart error: {str(e)}")
        raise InternalError("Failed to update cart") from e

@router.delete("/cart/{cart_id}")
def remove_cart_item(
    cart_id: int,
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        remove_from_cart(db, cart_id, current_user.id)
        return success_response(message="Item removed from cart")

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Remove from cart error: {str(e)}")
        raise InternalError("Failed to remove item from cart") from e
