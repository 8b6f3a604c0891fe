from sqlalchemy.orm import Session
from sqlalchemy import and_, desc
from sqlalchemy.exc import IntegrityError
from models.product import Product, ProductStatus
from models.category import Category
from models.user import User
from models.cart import CartItem, WishlistItem, MAX_CART_QUANTITY
from core.exceptions import ResourceNotFoundError, BusinessLogicError, ConflictError
from typing import Any, Dict, List
import logging

logger = logging.getLogger(__name__)


def _get_product(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise ResourceNotFoundError("Product", message="Product not found")
    return product


# Cart

def get_cart(db: Session, user_id: int) -> Dict[str, Any]:
    """Cart lines whose product is still available, with totals.

    Lines pointing at sold or deleted products stay in the table until the
    user removes them; they are only left out of this view.
    """
    rows = (
        db.query(CartItem, Product, User.username, Category.name)
        .join(Product, CartItem.product_id == Product.id)
        .join(User, Product.seller_id == User.id)
        .outerjoin(Category, Product.category_id == Category.id)
        .filter(
            CartItem.user_id == user_id,
            Product.status == ProductStatus.AVAILABLE.value
        )
        .order_by(desc(CartItem.created_at), desc(CartItem.id))
        .all()
    )

    items = []
    total_amount = 0.0
    total_items = 0
    for cart_item, product, seller_username, category_name in rows:
        price = float(product.price)
        items.append({
            "cart_id": cart_item.id,
            "quantity": cart_item.quantity,
            "id": product.id,
            "title": product.title,
            "price": price,
            "image_url": product.image_url,
            "condition": product.condition,
            "seller_id": product.seller_id,
            "seller_username": seller_username,
            "category_name": category_name,
        })
        total_amount += price * cart_item.quantity
        total_items += cart_item.quantity

    return {
        "items": items,
        "summary": {
            "totalItems": total_items,
            "totalAmount": round(total_amount, 2)
        }
    }


def add_to_cart(db: Session, user_id: int, product_id: int, quantity: int = 1) -> CartItem:
    """Add a product to the cart, merging into an existing line capped at 10"""
    product = _get_product(db, product_id)

    if not product.is_available:
        raise BusinessLogicError("Product is not available")

    if product.seller_id == user_id:
        raise BusinessLogicError("You cannot add your own product to cart")

    try:
        cart_item = db.query(CartItem).filter(
            and_(CartItem.user_id == user_id, CartItem.product_id == product_id)
        ).first()

        if cart_item:
            cart_item.quantity = min(cart_item.quantity + quantity, MAX_CART_QUANTITY)
        else:
            cart_item = CartItem(user_id=user_id, product_id=product_id, quantity=quantity)
            db.add(cart_item)

        db.commit()
        db.refresh(cart_item)

        logger.info(f"Cart updated: user {user_id} product {product_id} quantity {cart_item.quantity}")
        return cart_item

    except IntegrityError:
        db.rollback()
        logger.warning(f"Concurrent cart insert for user {user_id} product {product_id}")
        raise ConflictError("Item is already in cart")
    except Exception as e:
        db.rollback()
        logger.error(f"Error adding to cart: {str(e)}")
        raise


def _get_own_cart_item(db: Session, cart_id: int, user_id: int) -> CartItem:
    cart_item = db.query(CartItem).filter(
        and_(CartItem.id == cart_id, CartItem.user_id == user_id)
    ).first()
    if not cart_item:
        raise ResourceNotFoundError("Cart item", message="Cart item not found")
    return cart_item


def update_cart_item(db: Session, cart_id: int, user_id: int, quantity: int) -> CartItem:
    cart_item = _get_own_cart_item(db, cart_id, user_id)

    try:
        cart_item.quantity = quantity
        db.commit()
        db.refresh(cart_item)
        return cart_item

    except Exception as e:
        db.rollback()
        logger.error(f"Error updating cart item {cart_id}: {str(e)}")
        raise


def remove_from_cart(db: Session, cart_id: int, user_id: int) -> None:
    cart_item = _get_own_cart_item(db, cart_id, user_id)

    try:
        db.delete(cart_item)
        db.commit()

    except Exception as e:
        db.rollback()
        logger.error(f"Error removing cart item {cart_id}: {str(e)}")
        raise


# Wishlist

def get_wishlist(db: Session, user_id: int) -> List[Dict[str, Any]]:
    rows = (
        db.query(WishlistItem, Product, User.username, Category.name, CartItem.id)
        .join(Product, WishlistItem.product_id == Product.id)
        .join(User, Product.seller_id == User.id)
        .outerjoin(Category, Product.category_id == Category.id)
        .outerjoin(
            CartItem,
            and_(CartItem.product_id == Product.id, CartItem.user_id == WishlistItem.user_id)
        )
        .filter(
            WishlistItem.user_id == user_id,
            Product.status == ProductStatus.AVAILABLE.value
        )
        .order_by(desc(WishlistItem.created_at), desc(WishlistItem.id))
        .all()
    )

    return [
        {
            "wishlist_id": wishlist_item.id,
            "added_at": wishlist_item.created_at.isoformat() if wishlist_item.created_at else None,
            "id": product.id,
            "title": product.title,
            "price": float(product.price),
            "image_url": product.image_url,
            "condition": product.condition,
            "seller_id": product.seller_id,
            "seller_username": seller_username,
            "category_name": category_name,
            "is_in_cart": cart_id is not None,
        }
        for wishlist_item, product, seller_username, category_name, cart_id in rows
    ]


def add_to_wishlist(db: Session, user_id: int, product_id: int) -> WishlistItem:
    product = _get_product(db, product_id)

    if not product.is_available:
        raise ResourceNotFoundError("Product", message="Product not found")

    if product.seller_id == user_id:
        raise BusinessLogicError("You cannot add your own product to wishlist")

    existing = db.query(WishlistItem).filter(
        and_(WishlistItem.user_id == user_id, WishlistItem.product_id == product_id)
    ).first()
    if existing:
        raise ConflictError("Item already in wishlist")

    try:
        wishlist_item = WishlistItem(user_id=user_id, product_id=product_id)
        db.add(wishlist_item)
        db.commit()
        db.refresh(wishlist_item)
        return wishlist_item

    except IntegrityError:
        db.rollback()
        raise ConflictError("Item already in wishlist")
    except Exception as e:
        db.rollback()
        logger.error(f"Error adding to wishlist: {str(e)}")
        raise


def remove_from_wishlist(db: Session, user_id: int, product_id: int) -> None:
    try:
        deleted = db.query(WishlistItem).filter(
            and_(WishlistItem.user_id == user_id, WishlistItem.product_id == product_id)
        ).delete(synchronize_session=False)
        db.commit()

    except Exception as e:
        db.rollback()
        logger.error(f"Error removing from wishlist: {str(e)}")
        raise

    if deleted == 0:
        raise ResourceNotFoundError("Wishlist item", message="Item not found in wishlist")
