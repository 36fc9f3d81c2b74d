"""
Review Repository - Data Access Layer
"""
from typing import List, Optional, Tuple

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from marketplace.models.review import Review


class ReviewRepository:
    """Repository for Review persistence and rating aggregates"""
    
    def __init__(self, db: Session):
        self.db = db
    
    def get_by_id(self, review_id: int) -> Optional[Review]:
        return self.db.query(Review).filter(Review.id == review_id).first()
    
    def get_by_order_and_product(self, order_id: int, product_id: int) -> Optional[Review]:
        return self.db.query(Review).filter(
            Review.order_id == order_id,
            Review.product_id == product_id
        ).first()
    
    def list_for_product(self, product_id: int, skip: int = 0, limit: int = 10) -> List[Review]:
        return self.db.query(Review).filter(Review.product_id == product_id).order_by(
            desc(Review.created_at), desc(Review.id)
        ).offset(skip).limit(limit).all()
    
    def count_for_product(self, product_id: int) -> int:
        return self.db.query(Review).filter(Review.product_id == product_id).count()
    
    def add(self, review: Review) -> Review:
        self.db.add(review)
        self.db.flush()
        return review
    
    def delete(self, review: Review) -> None:
        self.db.delete(review)
        self.db.flush()
    
    def _stats(self, *criteria) -> Tuple[Optional[float], int]:
        average, count = self.db.query(
            func.avg(Review.rating), func.count(Review.id)
        ).filter(*criteria).one()
        return (float(average) if average is not None else None), count
    
    def rating_stats_for_product(self, product_id: int) -> Tuple[Optional[float], int]:
        """Mean rating (None when unreviewed) and review count for a product"""
        return self._stats(Review.product_id == product_id)
    
    def rating_stats_for_vendor(self, vendor_id: int) -> Tuple[Optional[float], int]:
        """Mean rating (None when unreviewed) and review count across a vendor's products"""
        return self._stats(Review.vendor_id == vendor_id)
    
    def rating_distribution(self, product_id: int) -> List[Tuple[int, int]]:
        """(rating, count) pairs for a product, highest rating first"""
        rows = self.db.query(Review.rating, func.count(Review.id)).filter(
            Review.product_id == product_id
        ).group_by(Review.rating).order_by(desc(Review.rating)).all()
        return [(rating, count) for rating, count in rows]
