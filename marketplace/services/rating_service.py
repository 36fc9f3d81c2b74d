"""
Rating recompute for products and vendors
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy.orm import Session

from marketplace.models.product import Product
from marketplace.models.review import Review
from marketplace.models.vendor import Vendor
from marketplace.repositories.product_repository import ProductRepository
from marketplace.repositories.review_repository import ReviewRepository
from marketplace.repositories.vendor_repository import VendorRepository

logger = logging.getLogger(__name__)


def round_rating(average: Optional[float]) -> Decimal:
    """Round a mean rating to one decimal, half up; no reviews means 0"""
    if average is None:
        return Decimal("0.0")
    return Decimal(str(average)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


class RatingService:
    """
    Keeps rating.average / rating.count in step with the reviews table
    
    Called explicitly by ReviewService after every review write, inside the
    same transaction. Callers own the commit.
    """
    
    def __init__(self, db: Session):
        self.review_repository = ReviewRepository(db)
        self.product_repository = ProductRepository(db)
        self.vendor_repository = VendorRepository(db)
    
    def recompute_product(self, product_id: int) -> Optional[Product]:
        product = self.product_repository.get_by_id(product_id)
        if product is None:
            logger.warning("Cannot recompute rating, product %s not found", product_id)
            return None
        
        average, count = self.review_repository.rating_stats_for_product(product_id)
        product.rating_average = round_rating(average)
        product.rating_count = count
        return product
    
    def recompute_vendor(self, vendor_id: int) -> Optional[Vendor]:
        vendor = self.vendor_repository.get_by_id(vendor_id)
        if vendor is None:
            logger.warning("Cannot recompute rating, vendor %s not found", vendor_id)
            return None
        
        average, count = self.review_repository.rating_stats_for_vendor(vendor_id)
        vendor.rating_average = round_rating(average)
        vendor.rating_count = count
        return vendor
    
    def recompute_for_review(self, review: Review) -> None:
        """Refresh the product and vendor a review belongs to"""
        self.recompute_product(review.product_id)
        self.recompute_vendor(review.vendor_id)
