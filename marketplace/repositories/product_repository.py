"""
Product Repository - Data Access Layer
"""
from typing import Dict, Iterable, List, Optional

from sqlalchemy import case, or_, update
from sqlalchemy.orm import Session

from marketplace.models.product import Product


class ProductRepository:
    """Repository for Product persistence and stock movements"""
    
    def __init__(self, db: Session):
        self.db = db
    
    def get_by_id(self, product_id: int) -> Optional[Product]:
        """Get product by ID"""
        return self.db.query(Product).filter(Product.id == product_id).first()
    
    def get_by_ids(self, product_ids: Iterable[int]) -> Dict[int, Product]:
        """Load several products at once, keyed by ID"""
        ids = set(product_ids)
        if not ids:
            return {}
        products = self.db.query(Product).filter(Product.id.in_(ids)).all()
        return {product.id: product for product in products}
    
    def get_by_sku(self, sku: str) -> Optional[Product]:
        return self.db.query(Product).filter(Product.sku == sku).first()
    
    def _active_query(self, vendor_id: Optional[int] = None):
        query = self.db.query(Product).filter(
            Product.is_active.is_(True),
            Product.status == 'active'
        )
        if vendor_id is not None:
            query = query.filter(Product.vendor_id == vendor_id)
        return query
    
    def list_active(self, skip: int = 0, limit: int = 10, vendor_id: Optional[int] = None) -> List[Product]:
        """Get active products with pagination, newest first"""
        return self._active_query(vendor_id).order_by(
            Product.created_at.desc(), Product.id.desc()
        ).offset(skip).limit(limit).all()
    
    def count_active(self, vendor_id: Optional[int] = None) -> int:
        return self._active_query(vendor_id).count()
    
    def add(self, product: Product) -> Product:
        """Stage a new product and assign its ID"""
        self.db.add(product)
        self.db.flush()
        return product
    
    def delete(self, product: Product) -> None:
        """Remove a product row; orders keep their line-item snapshots"""
        self.db.delete(product)
        self.db.flush()
    
    def reserve_stock(self, product_id: int, quantity: int) -> bool:
        """
        Atomically take quantity units out of stock
        
        A single conditional UPDATE: tracked products without backorder are
        only decremented when enough stock remains, everything else is
        decremented and clamped at zero. Concurrent reservations serialise
        on the row, so stock can never be oversold.
        
        Args:
            product_id: Product ID
            quantity: Units to reserve
        
        Returns:
            True if the row was updated, False if the product is missing
            or has insufficient stock
        """
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .where(or_(
                Product.track_quantity.is_(False),
                Product.allow_backorder.is_(True),
                Product.quantity >= quantity
            ))
            .values(quantity=case(
                (Product.quantity >= quantity, Product.quantity - quantity),
                else_=0
            ))
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1
    
    def restore_stock(self, product_id: int, quantity: int) -> bool:
        """
        Put quantity units back into stock
        
        Returns:
            True if the product still exists and was updated
        """
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(quantity=Product.quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1
