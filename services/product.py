from dataclasses import dataclass
from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy import and_, or_, desc, asc, func
from models.product import Product, ProductStatus
from models.category import Category
from models.user import User
from models.cart import CartItem, WishlistItem
from schemas.product import ProductCreate, ProductUpdate, SortOption
from services.rewards import calculate_sustainability_score, credit_eco_points, LISTING_ECO_POINTS
from core.exceptions import (
    ResourceNotFoundError,
    AuthorizationError,
    ValidationError,
    BusinessLogicError,
    ConflictError
)
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 50
# Keeps (page - 1) * limit inside a 64-bit SQLite INTEGER
MAX_PAGE = 10 ** 9
RELATED_PRODUCTS_LIMIT = 4

# Fields a seller may change after listing
UPDATABLE_FIELDS = (
    'title', 'description', 'price', 'original_price',
    'category_id', 'condition', 'image_url', 'additional_images', 'location'
)

# Updating any of these re-derives the sustainability score
SCORE_TRIGGER_FIELDS = ('price', 'category_id')

SORT_ORDERS = {
    SortOption.PRICE_ASC: (asc(Product.price), asc(Product.id)),
    SortOption.PRICE_DESC: (desc(Product.price), desc(Product.id)),
    SortOption.NEWEST: (desc(Product.created_at), desc(Product.id)),
    SortOption.OLDEST: (asc(Product.created_at), asc(Product.id)),
    SortOption.POPULAR: (desc(Product.view_count), desc(Product.id)),
}


@dataclass
class ProductFilters:
    """Optional listing filters; only the supplied ones become predicates."""
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    category_id: Optional[int] = None
    search: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    condition: Optional[str] = None
    sort_by: SortOption = SortOption.NEWEST

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def build_conditions(filters: ProductFilters) -> list:
    """Predicate list shared by the page query and the count query."""
    conditions = [Product.status == ProductStatus.AVAILABLE.value]

    if filters.category_id is not None:
        conditions.append(Product.category_id == filters.category_id)

    if filters.search:
        pattern = f"%{filters.search}%"
        conditions.append(or_(Product.title.ilike(pattern), Product.description.ilike(pattern)))

    if filters.min_price is not None:
        conditions.append(Product.price >= filters.min_price)

    if filters.max_price is not None:
        conditions.append(Product.price <= filters.max_price)

    if filters.condition:
        conditions.append(Product.condition == filters.condition)

    return conditions


def _money(value) -> Optional[float]:
    return float(value) if value is not None else None


def _product_summary(product: Product) -> Dict[str, Any]:
    return {
        "id": product.id,
        "title": product.title,
        "description": product.description,
        "price": _money(product.price),
        "original_price": _money(product.original_price),
        "condition": product.condition,
        "image_url": product.image_url,
        "view_count": product.view_count,
        "sustainability_score": product.sustainability_score,
        "location": product.location,
        "created_at": product.created_at.isoformat() if product.created_at else None,
    }


def serialize_product(product: Product) -> Dict[str, Any]:
    """Full product row with category and seller names, as returned after writes."""
    data = _product_summary(product)
    data.update({
        "category_id": product.category_id,
        "additional_images": product.additional_images or [],
        "seller_id": product.seller_id,
        "status": product.status,
        "updated_at": product.updated_at.isoformat() if product.updated_at else None,
        "category_name": product.category.name if product.category else None,
        "category_icon": product.category.icon if product.category else None,
        "seller_username": product.seller.username if product.seller else None,
    })
    return data


def _require_category(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise ValidationError(
            message="Invalid category",
            errors=[{"field": "category_id", "message": "Invalid category", "type": "value_error"}]
        )
    return category


def list_products(db: Session, filters: ProductFilters, viewer_id: Optional[int] = None) -> Dict[str, Any]:
    """Get one page of available products plus exact pagination totals"""
    conditions = build_conditions(filters)

    query = (
        db.query(
            Product,
            Category.name.label("category_name"),
            Category.icon.label("category_icon"),
            User.username.label("seller_username"),
            User.avatar_url.label("seller_avatar"),
            WishlistItem.id.label("wishlist_id"),
        )
        .outerjoin(Category, Product.category_id == Category.id)
        .outerjoin(User, Product.seller_id == User.id)
        .outerjoin(
            WishlistItem,
            and_(WishlistItem.product_id == Product.id, WishlistItem.user_id == viewer_id)
        )
        .filter(*conditions)
        .order_by(*SORT_ORDERS.get(filters.sort_by, SORT_ORDERS[SortOption.NEWEST]))
        .limit(filters.limit)
        .offset(filters.offset)
    )

    total = db.query(func.count(Product.id)).filter(*conditions).scalar() or 0

    products = []
    for product, category_name, category_icon, seller_username, seller_avatar, wishlist_id in query.all():
        row = _product_summary(product)
        row.update({
            "category_name": category_name,
            "category_icon": category_icon,
            "seller_username": seller_username,
            "seller_avatar": seller_avatar,
            "is_wishlisted": wishlist_id is not None,
        })
        products.append(row)

    return {"products": products, "total": total}


def get_product_detail(db: Session, product_id: int, viewer_id: Optional[int] = None) -> Dict[str, Any]:
    """Fetch an available product, count the view and collect same-category siblings."""
    row = (
        db.query(
            Product,
            Category.name,
            Category.icon,
            User.username,
            User.full_name,
            User.avatar_url,
            User.eco_points,
            WishlistItem.id,
            CartItem.id,
        )
        .outerjoin(Category, Product.category_id == Category.id)
        .outerjoin(User, Product.seller_id == User.id)
        .outerjoin(
            WishlistItem,
            and_(WishlistItem.product_id == Product.id, WishlistItem.user_id == viewer_id)
        )
        .outerjoin(
            CartItem,
            and_(CartItem.product_id == Product.id, CartItem.user_id == viewer_id)
        )
        .filter(Product.id == product_id, Product.status == ProductStatus.AVAILABLE.value)
        .first()
    )

    if not row:
        raise ResourceNotFoundError("Product", message="Product not found")

    product, category_name, category_icon, seller_username, seller_name, seller_avatar, seller_eco_points, wishlist_id, cart_id = row

    view_count = product.view_count
    if viewer_id is None or viewer_id != product.seller_id:
        try:
            db.query(Product).filter(Product.id == product_id).update(
                {Product.view_count: Product.view_count + 1},
                synchronize_session=False
            )
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Error counting view for product {product_id}: {str(e)}")
            raise
        view_count += 1

    data = _product_summary(product)
    data.update({
        "view_count": view_count,
        "category_id": product.category_id,
        "additional_images": product.additional_images or [],
        "updated_at": product.updated_at.isoformat() if product.updated_at else None,
        "category_name": category_name,
        "category_icon": category_icon,
        "seller_id": product.seller_id,
        "seller_username": seller_username,
        "seller_name": seller_name,
        "seller_avatar": seller_avatar,
        "seller_eco_points": seller_eco_points,
        "is_wishlisted": wishlist_id is not None,
        "is_in_cart": cart_id is not None,
    })

    return {"product": data, "relatedProducts": get_related_products(db, product)}


def get_related_products(db: Session, product: Product) -> List[Dict[str, Any]]:
    """Up to four other available products from the same category, newest first"""
    if product.category_id is None:
        return []

    rows = (
        db.query(Product, Category.name)
        .outerjoin(Category, Product.category_id == Category.id)
        .filter(
            Product.category_id == product.category_id,
            Product.id != product.id,
            Product.status == ProductStatus.AVAILABLE.value
        )
        .order_by(desc(Product.created_at), desc(Product.id))
        .limit(RELATED_PRODUCTS_LIMIT)
        .all()
    )

    return [
        {
            "id": related.id,
            "title": related.title,
            "price": _money(related.price),
            "image_url": related.image_url,
            "condition": related.condition,
            "category_name": category_name,
        }
        for related, category_name in rows
    ]


def create_product(db: Session, product_data: ProductCreate, seller_id: int) -> Product:
    """Create a new listing and credit the seller's listing points"""
    _require_category(db, product_data.category_id)

    try:
        score = calculate_sustainability_score(
            price=product_data.price,
            original_price=product_data.original_price,
            condition=product_data.condition,
            description=product_data.description
        )

        product = Product(
            seller_id=seller_id,
            title=product_data.title,
            description=product_data.description or "",
            price=product_data.price,
            original_price=product_data.original_price or None,
            category_id=product_data.category_id,
            condition=product_data.condition.value,
            image_url=product_data.image_url or "",
            additional_images=product_data.additional_images or [],
            location=product_data.location or "",
            sustainability_score=score
        )

        db.add(product)
        credit_eco_points(db, seller_id, LISTING_ECO_POINTS)
        db.commit()
        db.refresh(product)

        logger.info(f"Product created: {product.title} (score {score}) by seller {seller_id}")
        return product

    except Exception as e:
        db.rollback()
        logger.error(f"Error creating product: {str(e)}")
        raise


def get_owned_product(db: Session, product_id: int, user_id: int) -> Product:
    """Load a product of any status and make sure ``user_id`` is its seller."""
    product = db.query(Product).filter(Product.id == product_id).first()

    if not product:
        raise ResourceNotFoundError("Product", message="Product not found")

    if product.seller_id != user_id:
        raise AuthorizationError("Access denied - you do not own this resource")

    return product


def update_product(db: Session, product_id: int, product_data: ProductUpdate, seller_id: int) -> Product:
    """Update a listing (only by the seller)"""
    product = get_owned_product(db, product_id, seller_id)

    changes = {
        field: value for field, value in product_data.changes().items()
        if field in UPDATABLE_FIELDS
    }
    if not changes:
        raise BusinessLogicError("No fields to update")

    if 'category_id' in changes:
        _require_category(db, changes['category_id'])

    try:
        for field, value in changes.items():
            if field == 'condition':
                value = value.value
            setattr(product, field, value)

        if any(field in changes for field in SCORE_TRIGGER_FIELDS):
            product.sustainability_score = calculate_sustainability_score(
                price=product.price,
                original_price=product.original_price,
                condition=product.condition,
                description=product.description
            )

        product.updated_at = datetime.utcnow()
        db.commit()
        db.refresh(product)

        logger.info(f"Product updated: {product.id} ({', '.join(changes)}) by seller {seller_id}")
        return product

    except Exception as e:
        db.rollback()
        logger.error(f"Error updating product: {str(e)}")
        raise


def delete_product(db: Session, product_id: int, seller_id: int) -> None:
    """Soft delete: the row stays, its status becomes 'deleted'"""
    product = get_owned_product(db, product_id, seller_id)

    if not product.is_available:
        raise ConflictError(f"Product is already {product.status}")

    try:
        product.status = ProductStatus.DELETED.value
        product.updated_at = datetime.utcnow()
        db.commit()

        logger.info(f"Product deleted: {product.id} by seller {seller_id}")

    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting product: {str(e)}")
        raise


def get_products_by_seller(db: Session, seller_id: int) -> List[Dict[str, Any]]:
    """Seller's non-deleted listings with how many users wishlisted each"""
    rows = (
        db.query(Product, Category.name, func.count(WishlistItem.id))
        .outerjoin(Category, Product.category_id == Category.id)
        .outerjoin(WishlistItem, WishlistItem.product_id == Product.id)
        .filter(
            Product.seller_id == seller_id,
            Product.status != ProductStatus.DELETED.value
        )
        .group_by(Product.id, Category.name)
        .order_by(desc(Product.created_at), desc(Product.id))
        .all()
    )

    return [
        {
            "id": product.id,
            "title": product.title,
            "price": _money(product.price),
            "condition": product.condition,
            "image_url": product.image_url,
            "view_count": product.view_count,
            "status": product.status,
            "created_at": product.created_at.isoformat() if product.created_at else None,
            "category_name": category_name,
            "wishlist_count": wishlist_count,
        }
        for product, category_name, wishlist_count in rows
    ]


def get_categories(db: Session) -> List[Dict[str, Any]]:
    categories = db.query(Category).order_by(Category.name).all()
    return [
        {
            "id": category.id,
            "name": category.name,
            "description": category.description,
            "icon": category.icon,
        }
        for category in categories
    ]
