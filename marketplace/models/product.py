"""
SQLAlchemy Product model
"""
from decimal import Decimal

from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String, Text
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from marketplace.database import Base

PRODUCT_STATUSES = ('draft', 'active', 'inactive', 'out_of_stock', 'discontinued')


class Product(Base):
    """Product database model"""
    
    __tablename__ = "products"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=True)
    sku = Column(String(100), nullable=False, unique=True)
    image_url = Column(String(500), nullable=True)  # Primary image
    image_alt = Column(String(255), nullable=True)
    
    # Price
    price_original = Column(Numeric(10, 2), nullable=False)
    price_discounted = Column(Numeric(10, 2), nullable=True)
    currency = Column(String(3), nullable=False, default='USD')
    
    # Inventory
    quantity = Column(Integer, nullable=False, default=0)
    low_stock_threshold = Column(Integer, nullable=False, default=10)
    track_quantity = Column(Boolean, nullable=False, default=True)
    allow_backorder = Column(Boolean, nullable=False, default=False)
    
    status = Column(String(20), nullable=False, default='draft', index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    
    # Aggregates recomputed from reviews
    rating_average = Column(Numeric(2, 1), nullable=False, default=0)
    rating_count = Column(Integer, nullable=False, default=0)
    
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    vendor = relationship("Vendor", back_populates="products")
    
    # Constraints
    __table_args__ = (
        CheckConstraint('price_original >= 0', name='check_price_non_negative'),
        CheckConstraint('quantity >= 0', name='check_quantity_non_negative'),
        CheckConstraint(f"status IN {PRODUCT_STATUSES}", name='check_product_status_valid'),
    )
    
    @property
    def current_price(self) -> Decimal:
        """Discounted price when set and positive, otherwise the original price"""
        if self.price_discounted is not None and self.price_discounted > 0:
            return Decimal(str(self.price_discounted))
        return Decimal(str(self.price_original))
    
    @property
    def primary_image(self):
        if not self.image_url:
            return None
        return {"url": self.image_url, "alt": self.image_alt}
    
    @property
    def stock_status(self) -> str:
        if not self.track_quantity:
            return 'in_stock'
        if self.quantity == 0:
            return 'out_of_stock'
        if self.quantity <= self.low_stock_threshold:
            return 'low_stock'
        return 'in_stock'
    
    def is_available(self, requested_quantity: int = 1) -> bool:
        """Check whether the requested quantity can be fulfilled"""
        if not self.is_active or self.status != 'active':
            return False
        if not self.track_quantity:
            return True
        if self.allow_backorder:
            return True
        return self.quantity >= requested_quantity
    
    def __repr__(self):
        return f"<Product(id={self.id}, sku='{self.sku}', vendor_id={self.vendor_id}, quantity={self.quantity})>"
