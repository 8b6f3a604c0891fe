from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging

from database.connection import get_db
from routers.auth import get_current_user
from schemas.user import UserResponse
from schemas.cart import WishlistItemCreate
from services.cart import get_wishlist, add_to_wishlist, remove_from_wishlist
from core.exceptions import BaseCustomException, InternalError
from core.response import success_response

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("/wishlist")
def get_my_wishlist(
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return success_response(data={"items": get_wishlist(db, current_user.id)})

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Get wishlist error: {str(e)}")
        raise InternalError("Failed to fetch wishlist") from e

@router.post("/wishlist", status_code=status.HTTP_201_CREATED)
def add_item_to_wishlist(
    item: WishlistItemCreate,
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        wishlist_item = add_to_wishlist(db, current_user.id, item.product_id)
        return success_response(
            data={"wishlist_id": wishlist_item.id},
            message="Item added to wishlist successfully"
        )

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Add to wishlist error: {str(e)}")
        raise InternalError("Failed to add item to wishlist") from e

@router.delete("/wishlist/{product_id}")
def remove_wishlist_item(
    product_id: int,
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        remove_from_wishlist(db, current_user.id, product_id)
        return success_response(message="Item removed from wishlist")

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Remove from wishlist error: {str(e)}")
        raise InternalError("Failed to remove item from wishlist") from e
