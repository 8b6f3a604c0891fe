from pydantic import BaseModel, Field, field_validator
from typing import List

from models.cart import MAX_CART_QUANTITY

class OrderItemRequest(BaseModel):
    product_id: int = Field(..., ge=1)
    quantity: int = Field(..., ge=1, le=MAX_CART_QUANTITY)

class CreateOrderRequest(BaseModel):
    items: List[OrderItemRequest] = Field(..., min_length=1, description="Items array is required")
    shipping_address: str

    @field_validator('shipping_address')
    @classmethod
    def validate_shipping_address(cls, v):
        if not v or not v.strip():
            raise ValueError('Shipping address is required')
        return v.strip()
