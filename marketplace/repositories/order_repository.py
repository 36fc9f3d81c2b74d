"""
Order Repository - Data Access Layer
"""
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from marketplace.models.order import ACTIVE_STATUSES, Order, OrderItem


class OrderRepository:
    """Repository for Order persistence"""
    
    def __init__(self, db: Session):
        self.db = db
    
    def get_by_id(self, order_id: int, for_update: bool = False) -> Optional[Order]:
        """Get order by ID, optionally locking the row until commit"""
        query = self.db.query(Order).filter(Order.id == order_id)
        if for_update:
            query = query.with_for_update()
        return query.first()
    
    def _filtered(self, status: Optional[str] = None, **criteria):
        query = self.db.query(Order).filter_by(**criteria)
        if status:
            query = query.filter(Order.status == status)
        return query
    
    def list_by_customer(
        self, customer_id: int, status: Optional[str] = None, skip: int = 0, limit: int = 10
    ) -> List[Order]:
        """Get a customer's orders, newest first"""
        return self._filtered(status, customer_id=customer_id).order_by(
            desc(Order.created_at), desc(Order.id)
        ).offset(skip).limit(limit).all()
    
    def count_by_customer(self, customer_id: int, status: Optional[str] = None) -> int:
        return self._filtered(status, customer_id=customer_id).count()
    
    def list_by_vendor(
        self, vendor_id: int, status: Optional[str] = None, skip: int = 0, limit: int = 10
    ) -> List[Order]:
        """Get a vendor's orders, newest first"""
        return self._filtered(status, vendor_id=vendor_id).order_by(
            desc(Order.created_at), desc(Order.id)
        ).offset(skip).limit(limit).all()
    
    def count_by_vendor(self, vendor_id: int, status: Optional[str] = None) -> int:
        return self._filtered(status, vendor_id=vendor_id).count()
    
    def add(self, order: Order) -> Order:
        """
        Stage a new order with its items and history
        
        Flushes so the order gets its ID; the caller owns the commit.
        """
        self.db.add(order)
        self.db.flush()
        return order
    
    def count_active_for_product(self, product_id: int) -> int:
        """Count orders still in flight (not delivered or cancelled) that contain a product"""
        return self.db.query(Order).join(Order.items).filter(
            OrderItem.product_id == product_id,
            Order.status.in_(ACTIVE_STATUSES)
        ).distinct().count()
