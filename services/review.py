from typing import Any, Dict
from sqlalchemy.orm import Session
from sqlalchemy import func, desc, and_
from sqlalchemy.exc import IntegrityError
import logging

from models.review import Review
from models.product import Product
from models.order import Order
from models.user import User
from schemas.review import ReviewCreate
from core.exceptions import (
    ResourceNotFoundError,
    BusinessLogicError,
    AuthorizationError,
    ConflictError
)

logger = logging.getLogger(__name__)


class ReviewService:

    @staticmethod
    def create_review(db: Session, reviewer_id: int, review_data: ReviewCreate) -> Review:
        """Rate a product the reviewer bought; the seller is taken from the product"""

        product = db.query(Product).filter(Product.id == review_data.product_id).first()
        if not product:
            raise ResourceNotFoundError("Product", message="Product not found")

        if product.seller_id == reviewer_id:
            raise BusinessLogicError("You cannot review your own product")

        if not ReviewService._check_verified_purchase(db, reviewer_id, product.id):
            raise AuthorizationError("You can only review products you have purchased")

        existing_review = db.query(Review).filter(
            and_(Review.reviewer_id == reviewer_id, Review.product_id == product.id)
        ).first()
        if existing_review:
            raise ConflictError("You have already reviewed this product")

        try:
            review = Review(
                reviewer_id=reviewer_id,
                product_id=product.id,
                seller_id=product.seller_id,
                rating=review_data.rating,
                comment=review_data.comment
            )
            db.add(review)
            db.commit()
            db.refresh(review)

            logger.info(f"Review {review.id} created for product {product.id} by user {reviewer_id}")
            return review

        except IntegrityError:
            db.rollback()
            raise ConflictError("You have already reviewed this product")
        except Exception as e:
            db.rollback()
            logger.error(f"Error creating review: {str(e)}")
            raise

    @staticmethod
    def get_seller_reviews(db: Session, seller_id: int) -> Dict[str, Any]:
        """Reviews a seller received, newest first, plus their average"""

        seller = db.query(User).filter(User.id == seller_id).first()
        if not seller:
            raise ResourceNotFoundError("User", message="User not found")

        rows = (
            db.query(Review, User.username, Product.title)
            .join(User, Review.reviewer_id == User.id)
            .join(Product, Review.product_id == Product.id)
            .filter(Review.seller_id == seller_id)
            .order_by(desc(Review.created_at), desc(Review.id))
            .all()
        )

        average, total = db.query(
            func.avg(Review.rating),
            func.count(Review.id)
        ).filter(Review.seller_id == seller_id).one()

        return {
            "reviews": [
                ReviewService.serialize(review, reviewer_username, product_title)
                for review, reviewer_username, product_title in rows
            ],
            "summary": {
                "averageRating": round(float(average), 1) if average else 0.0,
                "totalReviews": total or 0
            }
        }

    @staticmethod
    def serialize(review: Review, reviewer_username: str = None, product_title: str = None) -> Dict[str, Any]:
        return {
            "id": review.id,
            "reviewer_id": review.reviewer_id,
            "reviewer_username": reviewer_username,
            "product_id": review.product_id,
            "product_title": product_title,
            "seller_id": review.seller_id,
            "rating": review.rating,
            "comment": review.comment,
            "created_at": review.created_at.isoformat() if review.created_at else None,
        }

    @staticmethod
    def _check_verified_purchase(db: Session, reviewer_id: int, product_id: int) -> bool:
        """Check if the reviewer has an order for this product"""
        order = db.query(Order).filter(
            and_(Order.buyer_id == reviewer_id, Order.product_id == product_id)
        ).first()
        return order is not None
