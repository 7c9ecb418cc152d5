from sqlalchemy import Column, Integer, String, Float, Numeric, Boolean, ForeignKey, DateTime, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from app.models.user import Base


class Product(Base):
    __tablename__ = "products"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    original_price = Column(Numeric(10, 2))
    description = Column(String(2000), nullable=False)
    images = Column(JSON, nullable=False, default=list)  # List of URLs
    # Ordered, unique labels; cart line items must pick one of each
    sizes = Column(JSON, nullable=False)
    colors = Column(JSON, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    featured = Column(Boolean, default=False)
    bestseller = Column(Boolean, default=False)
    is_new = Column(Boolean, default=False)
    rating = Column(Float, default=0.0)
    reviews = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = relationship("Category", back_populates="products", lazy="joined")
