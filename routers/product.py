from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import Optional
import logging

from database.connection import get_db
from core.response import success_response, pagination_meta
from core.exceptions import BaseCustomException, InternalError
from services.product import (
    ProductFilters,
    list_products,
    get_product_detail,
    create_product,
    update_product,
    delete_product,
    get_products_by_seller,
    get_categories,
    serialize_product,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    MAX_PAGE
)
from schemas.product import ProductCreate, ProductUpdate, SortOption
from schemas.user import UserResponse
from models.product import ProductCondition
from routers.auth import get_current_user, get_current_user_optional

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("")
def get_products(
    page: int = Query(1, ge=1, le=MAX_PAGE, description="Page must be a positive integer"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Limit must be between 1 and 50"),
    category: Optional[int] = Query(None, ge=1, description="Category must be a valid ID"),
    search: Optional[str] = Query(None, min_length=1, max_length=100),
    min_price: Optional[float] = Query(None, ge=0, alias="minPrice"),
    max_price: Optional[float] = Query(None, ge=0, alias="maxPrice"),
    condition: Optional[ProductCondition] = Query(None),
    sort_by: SortOption = Query(SortOption.NEWEST, alias="sortBy"),
    current_user: Optional[UserResponse] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    """Browse available products with filters, sorting and pagination (public)"""
    filters = ProductFilters(
        page=page,
        limit=limit,
        category_id=category,
        search=search,
        min_price=min_price,
        max_price=max_price,
        condition=condition.value if condition else None,
        sort_by=sort_by
    )

    try:
        result = list_products(db, filters, viewer_id=current_user.id if current_user else None)

        return success_response(data={
            "products": result["products"],
            "pagination": pagination_meta(page, limit, result["total"])
        })

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Error getting products: {str(e)}")
        raise InternalError("Failed to fetch products") from e

@router.get("/meta/categories")
def list_categories(db: Session = Depends(get_db)):
    """Get the category reference list"""
    try:
        return success_response(data={"categories": get_categories(db)})

    except Exception as e:
        logger.error(f"Error getting categories: {str(e)}")
        raise InternalError("Failed to fetch categories") from e

@router.get("/user/my-listings")
def get_my_listings(
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get current user's listings that are not deleted"""
    try:
        return success_response(data={"products": get_products_by_seller(db, current_user.id)})

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Error getting user listings: {str(e)}")
        raise InternalError("Failed to fetch your listings") from e

@router.get("/{product_id}")
def get_product(
    product_id: int,
    current_user: Optional[UserResponse] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    """Get a specific available product with related listings (public)"""
    try:
        detail = get_product_detail(db, product_id, viewer_id=current_user.id if current_user else None)
        return success_response(data=detail)

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Error getting product {product_id}: {str(e)}")
        raise InternalError("Failed to fetch product") from e

@router.post("", status_code=status.HTTP_201_CREATED)
def create_user_product(
    product_data: ProductCreate,
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new listing"""
    try:
        product = create_product(db=db, product_data=product_data, seller_id=current_user.id)
        logger.info(f"Product created: {product.id} by {current_user.email}")

        return success_response(
            data={"product": serialize_product(product)},
            message="Product created successfully"
        )

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during product creation: {str(e)}")
        raise InternalError("Failed to create product") from e

@router.put("/{product_id}")
def update_user_product(
    product_id: int,
    product_data: ProductUpdate,
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update a listing (only by the seller)"""
    try:
        product = update_product(
            db=db,
            product_id=product_id,
            product_data=product_data,
            seller_id=current_user.id
        )

        return success_response(
            data={"product": serialize_product(product)},
            message="Product updated successfully"
        )

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Error updating product: {str(e)}")
        raise InternalError("Failed to update product") from e

@router.delete("/{product_id}")
def delete_user_product(
    product_id: int,
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a listing (only by the seller)"""
    try:
        delete_product(db=db, product_id=product_id, seller_id=current_user.id)
        return success_response(message="Product deleted successfully")

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Error deleting product: {str(e)}")
        raise InternalError("Failed to delete product") from e
