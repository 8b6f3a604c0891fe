from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text
from sqlalchemy.orm import relationship
from database.base import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    username = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)
    avatar_url = Column(String(500), nullable=True)
    eco_points = Column(Integer, nullable=False, default=0)
    onboarded = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    products = relationship("Product", back_populates="seller", passive_deletes=True)
    cart_items = relationship("CartItem", back_populates="user", passive_deletes=True)
    wishlist_items = relationship("WishlistItem", back_populates="user", passive_deletes=True)
    purchases = relationship("Order", back_populates="buyer", foreign_keys="Order.buyer_id", passive_deletes=True)
    sales = relationship("Order", back_populates="seller", foreign_keys="Order.seller_id", passive_deletes=True)

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username})>"
