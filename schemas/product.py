from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from decimal import Decimal
import enum

from models.product import ProductCondition

class SortOption(str, enum.Enum):
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    NEWEST = "newest"
    OLDEST = "oldest"
    POPULAR = "popular"

class ProductBase(BaseModel):
    title: str = Field(..., min_length=3, max_length=255, description="Listing title")
    description: Optional[str] = Field(None, max_length=2000)
    price: Decimal = Field(..., gt=0, description="Price must be greater than 0")
    original_price: Optional[Decimal] = Field(None, ge=0, description="Original retail price")
    category_id: int = Field(..., ge=1, description="Valid category is required")
    condition: ProductCondition
    image_url: Optional[str] = Field(None, max_length=500)
    additional_images: Optional[List[str]] = None
    location: Optional[str] = Field(None, max_length=255)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if len(v.strip()) < 3:
            raise ValueError('Title must be 3-255 characters')
        return v.strip()

class ProductCreate(ProductBase):
    pass

class ProductUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    price: Optional[Decimal] = Field(None, gt=0)
    original_price: Optional[Decimal] = Field(None, ge=0)
    category_id: Optional[int] = Field(None, ge=1)
    condition: Optional[ProductCondition] = None
    image_url: Optional[str] = Field(None, max_length=500)
    additional_images: Optional[List[str]] = None
    location: Optional[str] = Field(None, max_length=255)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if v is not None and len(v.strip()) < 3:
            raise ValueError('Title must be 3-255 characters')
        return v.strip() if v else v

    def changes(self) -> dict:
        """Fields the client actually supplied with a value"""
        return self.model_dump(exclude_unset=True, exclude_none=True)
