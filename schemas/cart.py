from pydantic import BaseModel, Field

from models.cart import MAX_CART_QUANTITY

class CartItemCreate(BaseModel):
    product_id: int = Field(..., ge=1, description="Valid product ID required")
    quantity: int = Field(1, ge=1, le=MAX_CART_QUANTITY, description="Quantity must be between 1 and 10")

class CartItemUpdate(BaseModel):
    quantity: int = Field(..., ge=1, le=MAX_CART_QUANTITY, description="Quantity must be between 1 and 10")

class WishlistItemCreate(BaseModel):
    product_id: int = Field(..., ge=1, description="Valid product ID required")
