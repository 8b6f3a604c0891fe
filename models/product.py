import enum
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric, Integer, Text, JSON
from sqlalchemy.orm import relationship
from database.base import Base

class ProductCondition(str, enum.Enum):
    NEW = "New"
    LIKE_NEW = "Like New"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"

class ProductStatus(str, enum.Enum):
    AVAILABLE = "available"
    SOLD = "sold"
    DELETED = "deleted"

class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True, default="")
    price = Column(Numeric(10, 2), nullable=False)
    original_price = Column(Numeric(10, 2), nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)
    # Stored as the plain value ("Like New"), not the enum member name
    condition = Column(String(50), nullable=False, default=ProductCondition.GOOD.value)
    image_url = Column(String(500), nullable=True, default="")
    additional_images = Column(JSON, nullable=True)
    seller_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=ProductStatus.AVAILABLE.value, index=True)
    view_count = Column(Integer, nullable=False, default=0)
    sustainability_score = Column(Integer, nullable=False, default=0)
    location = Column(String(255), nullable=True, default="")
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    seller = relationship("User", back_populates="products")
    category = relationship("Category", back_populates="products")

    @property
    def is_available(self) -> bool:
        return self.status == ProductStatus.AVAILABLE.value

    def __repr__(self):
        return f"<Product(id={self.id}, title={self.title}, status={self.status})>"
