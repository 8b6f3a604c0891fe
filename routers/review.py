from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging

from database.connection import get_db
from routers.auth import get_current_user
from schemas.user import UserResponse
from schemas.review import ReviewCreate
from services.review import ReviewService
from core.exceptions import BaseCustomException, InternalError
from core.response import success_response

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("/reviews", status_code=status.HTTP_201_CREATED)
def create_review(
    review_data: ReviewCreate,
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Rate a purchased product"""
    try:
        review = ReviewService.create_review(db=db, reviewer_id=current_user.id, review_data=review_data)
        return success_response(
            data={"review": ReviewService.serialize(review, current_user.username)},
            message="Review submitted successfully"
        )

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Create review error: {str(e)}")
        raise InternalError("Failed to submit review") from e

@router.get("/{user_id}/reviews")
def get_seller_reviews(user_id: int, db: Session = Depends(get_db)):
    """Get reviews a seller received (public)"""
    try:
        return success_response(data=ReviewService.get_seller_reviews(db=db, seller_id=user_id))

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Get reviews for user {user_id} error: {str(e)}")
        raise InternalError("Failed to fetch reviews") from e
