from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging

from database.connection import get_db
from routers.auth import get_current_user
from schemas.user import UserResponse
from schemas.order import CreateOrderRequest
from services.order import place_order, get_purchases, get_sales
from core.exceptions import BaseCustomException, InternalError
from core.response import success_response

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("/orders", status_code=status.HTTP_201_CREATED)
def create_order(
    order_request: CreateOrderRequest,
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Check out a list of products; one order is created per item."""
    try:
        result = place_order(
            db=db,
            buyer_id=current_user.id,
            items=order_request.items,
            shipping_address=order_request.shipping_address
        )
        return success_response(data=result, message="Order created successfully")

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Create order error: {str(e)}")
        raise InternalError("Failed to create order") from e

@router.get("/orders")
def get_my_orders(
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get the current user's purchase history"""
    try:
        return success_response(data={"orders": get_purchases(db, current_user.id)})

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Get orders error: {str(e)}")
        raise InternalError("Failed to fetch orders") from e

@router.get("/sales")
def get_my_sales(
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get the current user's sales as a seller"""
    try:
        return success_response(data={"sales": get_sales(db, current_user.id)})

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Get sales error: {str(e)}")
        raise InternalError("Failed to fetch sales") from e
