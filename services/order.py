"""
Checkout and order history.

A checkout validates every requested item before writing anything, then
applies all of its writes (order rows, product status flips, buyer points,
cart cleanup) in one transaction. Each product is claimed with a conditional
UPDATE so two checkouts racing for the same item cannot both succeed.
"""
from datetime import datetime
from decimal import Decimal
from sqlalchemy.orm import Session
from sqlalchemy import and_, desc
from models.order import Order, OrderStatus, PaymentStatus
from models.product import Product, ProductStatus
from models.user import User
from models.cart import CartItem
from schemas.order import OrderItemRequest
from services.rewards import purchase_eco_points, credit_eco_points
from core.exceptions import BaseCustomException, BusinessLogicError, ConflictError
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


def _fetch_available_product(db: Session, product_id: int) -> Optional[Product]:
    return db.query(Product).filter(
        and_(Product.id == product_id, Product.status == ProductStatus.AVAILABLE.value)
    ).first()


def _claim_product(db: Session, product_id: int) -> bool:
    """Flip a product from available to sold. False if someone else got there first."""
    changed = db.query(Product).filter(
        and_(Product.id == product_id, Product.status == ProductStatus.AVAILABLE.value)
    ).update(
        {Product.status: ProductStatus.SOLD.value, Product.updated_at: datetime.utcnow()},
        synchronize_session=False
    )
    return changed == 1


def _validate_items(db: Session, buyer_id: int, items: List[OrderItemRequest]) -> List[Dict[str, Any]]:
    product_ids = [item.product_id for item in items]
    duplicates = sorted({pid for pid in product_ids if product_ids.count(pid) > 1})
    if duplicates:
        raise BusinessLogicError(
            f"Product {', '.join(map(str, duplicates))} listed more than once",
            details={"product_ids": duplicates}
        )

    lines = []
    unavailable = []
    for item in items:
        product = _fetch_available_product(db, item.product_id)
        if not product:
            unavailable.append(item.product_id)
            continue
        lines.append({
            "product_id": product.id,
            "seller_id": product.seller_id,
            "quantity": item.quantity,
            "price": Decimal(product.price),
            "total": Decimal(product.price) * item.quantity,
        })

    if unavailable:
        noun = "Product" if len(unavailable) == 1 else "Products"
        raise BusinessLogicError(
            f"{noun} {', '.join(map(str, unavailable))} not found or not available",
            details={"product_ids": unavailable}
        )

    if any(line["seller_id"] == buyer_id for line in lines):
        raise BusinessLogicError("You cannot purchase your own product")

    return lines


def place_order(
    db: Session,
    buyer_id: int,
    items: List[OrderItemRequest],
    shipping_address: str
) -> Dict[str, Any]:
    """Check out ``items`` for ``buyer_id``: one order row per item, all or nothing."""
    lines = _validate_items(db, buyer_id, items)
    total_amount = sum((line["total"] for line in lines), Decimal("0"))

    try:
        orders = []
        for line in lines:
            order = Order(
                buyer_id=buyer_id,
                seller_id=line["seller_id"],
                product_id=line["product_id"],
                quantity=line["quantity"],
                total_amount=line["total"],
                status=OrderStatus.PENDING.value,
                payment_status=PaymentStatus.PENDING.value,
                shipping_address=shipping_address,
                eco_points_earned=purchase_eco_points(line["total"])
            )
            db.add(order)
            orders.append(order)

            if not _claim_product(db, line["product_id"]):
                raise ConflictError(
                    f"Product {line['product_id']} was just sold to another buyer",
                    details={"product_id": line["product_id"]}
                )

        eco_points = purchase_eco_points(total_amount)
        credit_eco_points(db, buyer_id, eco_points)

        db.query(CartItem).filter(
            and_(
                CartItem.user_id == buyer_id,
                CartItem.product_id.in_([line["product_id"] for line in lines])
            )
        ).delete(synchronize_session=False)

        db.commit()

    except BaseCustomException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating order for buyer {buyer_id}: {str(e)}")
        raise

    order_ids = [order.id for order in orders]
    logger.info(f"Orders {order_ids} created for buyer {buyer_id}, total {total_amount}")

    return {
        "orderIds": order_ids,
        "totalAmount": float(total_amount),
        "ecoPointsEarned": eco_points
    }


def _order_fields(order: Order, product: Product) -> Dict[str, Any]:
    return {
        "id": order.id,
        "quantity": order.quantity,
        "total_amount": float(order.total_amount),
        "status": order.status,
        "payment_status": order.payment_status,
        "created_at": order.created_at.isoformat() if order.created_at else None,
        "product_id": product.id,
        "product_title": product.title,
        "product_image": product.image_url,
    }


def get_purchases(db: Session, buyer_id: int) -> List[Dict[str, Any]]:
    """Buyer's orders, newest first, with the seller's name"""
    rows = (
        db.query(Order, Product, User.username, User.full_name)
        .join(Product, Order.product_id == Product.id)
        .join(User, Order.seller_id == User.id)
        .filter(Order.buyer_id == buyer_id)
        .order_by(desc(Order.created_at), desc(Order.id))
        .all()
    )

    purchases = []
    for order, product, seller_username, seller_name in rows:
        data = _order_fields(order, product)
        data.update({
            "eco_points_earned": order.eco_points_earned,
            "seller_username": seller_username,
            "seller_name": seller_name,
        })
        purchases.append(data)
    return purchases


def get_sales(db: Session, seller_id: int) -> List[Dict[str, Any]]:
    """Seller's orders, newest first, with the buyer's name"""
    rows = (
        db.query(Order, Product, User.username, User.full_name)
        .join(Product, Order.product_id == Product.id)
        .join(User, Order.buyer_id == User.id)
        .filter(Order.seller_id == seller_id)
        .order_by(desc(Order.created_at), desc(Order.id))
        .all()
    )

    sales = []
    for order, product, buyer_username, buyer_name in rows:
        data = _order_fields(order, product)
        data.update({
            "buyer_username": buyer_username,
            "buyer_name": buyer_name,
        })
        sales.append(data)
    return sales
