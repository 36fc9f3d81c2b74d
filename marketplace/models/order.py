"""
SQLAlchemy Order models
"""
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint, Column, DateTime, ForeignKey, Integer, JSON, Numeric, String
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from marketplace.database import Base

ORDER_STATUSES = ('pending', 'confirmed', 'processing', 'shipped', 'delivered', 'cancelled')
CANCELLABLE_STATUSES = ('pending', 'confirmed', 'processing')
ACTIVE_STATUSES = ('pending', 'confirmed', 'processing', 'shipped')
PAYMENT_METHODS = ('stripe', 'paypal', 'cod')
PAYMENT_STATUSES = ('pending', 'processing', 'completed', 'failed', 'refunded', 'partially_refunded')


class Order(Base):
    """One vendor's share of a checkout"""
    
    __tablename__ = "orders"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_number = Column(String(50), nullable=False, unique=True, index=True)
    # Plain ids, no foreign keys: orders outlive products and vendors
    customer_id = Column(Integer, nullable=False, index=True)
    vendor_id = Column(Integer, nullable=False, index=True)
    
    # Pricing, fixed at creation
    subtotal = Column(Numeric(10, 2), nullable=False)
    tax = Column(Numeric(10, 2), nullable=False, default=0)
    shipping = Column(Numeric(10, 2), nullable=False, default=0)
    discount = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False)
    
    shipping_address = Column(JSON, nullable=False)
    billing_address = Column(JSON, nullable=True)
    
    # Payment
    payment_method = Column(String(20), nullable=False)
    payment_status = Column(String(30), nullable=False, default='pending')
    payment_amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default='USD')
    
    status = Column(String(20), nullable=False, default='pending', index=True)
    
    # Tracking
    tracking_number = Column(String(100), nullable=True, index=True)
    carrier = Column(String(100), nullable=True)
    shipped_at = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)
    
    # Cancellation
    cancellation_reason = Column(String(500), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by = Column(Integer, nullable=True)
    
    # Commission
    commission_rate = Column(Numeric(5, 2), nullable=False, default=0)
    commission_amount = Column(Numeric(10, 2), nullable=False, default=0)
    
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    items = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id"
    )
    status_history = relationship(
        "OrderStatusEntry", back_populates="order", cascade="all, delete-orphan", order_by="OrderStatusEntry.id"
    )
    
    # Constraints
    __table_args__ = (
        CheckConstraint('subtotal >= 0', name='check_subtotal_non_negative'),
        CheckConstraint('total >= 0', name='check_total_non_negative'),
        CheckConstraint(f"status IN {ORDER_STATUSES}", name='check_order_status_valid'),
        CheckConstraint(f"payment_method IN {PAYMENT_METHODS}", name='check_payment_method_valid'),
        CheckConstraint(f"payment_status IN {PAYMENT_STATUSES}", name='check_payment_status_valid'),
    )
    
    def can_be_cancelled(self) -> bool:
        return self.status in CANCELLABLE_STATUSES
    
    def record_status(self, new_status: str, message: str = None, actor_id: int = None) -> "OrderStatusEntry":
        """
        Move the order to new_status and append the change to its history
        
        Any status may follow any other; only cancellation through
        OrderService.cancel_order checks the cancellable window.
        """
        now = datetime.now(timezone.utc)
        self.status = new_status
        
        if new_status == 'shipped':
            self.shipped_at = now
        elif new_status == 'delivered':
            self.delivered_at = now
        elif new_status == 'cancelled':
            self.cancelled_at = now
            if actor_id is not None:
                self.cancelled_by = actor_id
        
        entry = OrderStatusEntry(
            status=new_status,
            message=message or f"Order status updated to {new_status}",
            actor_id=actor_id,
            timestamp=now
        )
        self.status_history.append(entry)
        return entry
    
    def __repr__(self):
        return f"<Order(id={self.id}, order_number='{self.order_number}', vendor_id={self.vendor_id}, status='{self.status}')>"


class OrderItem(Base):
    """Snapshot of a product line taken when the order was placed"""
    
    __tablename__ = "order_items"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    image_url = Column(String(500), nullable=True)
    image_alt = Column(String(255), nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    variant_name = Column(String(100), nullable=True)
    variant_value = Column(String(100), nullable=True)
    sku = Column(String(100), nullable=True)
    subtotal = Column(Numeric(10, 2), nullable=False)
    
    order = relationship("Order", back_populates="items")
    
    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_item_quantity_positive'),
        CheckConstraint('price >= 0', name='check_item_price_non_negative'),
    )
    
    def __repr__(self):
        return f"<OrderItem(id={self.id}, product_id={self.product_id}, quantity={self.quantity})>"


class OrderStatusEntry(Base):
    """Append-only status history of an order"""
    
    __tablename__ = "order_status_history"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False)
    message = Column(String(500), nullable=True)
    actor_id = Column(Integer, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    
    order = relationship("Order", back_populates="status_history")
