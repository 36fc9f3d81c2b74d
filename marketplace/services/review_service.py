"""
Review Service - Business Logic Layer
"""
import logging

from sqlalchemy.orm import Session

from marketplace.database import unit_of_work
from marketplace.exceptions import (
    AuthorizationError,
    ConflictError,
    ProductNotFoundError,
    ReviewNotFoundError,
    ValidationError
)
from marketplace.models.review import Review
from marketplace.repositories.order_repository import OrderRepository
from marketplace.repositories.product_repository import ProductRepository
from marketplace.repositories.review_repository import ReviewRepository
from marketplace.schemas.common import total_pages
from marketplace.schemas.review import (
    RatingBucket,
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewStats,
    ReviewUpdate
)
from marketplace.security import Principal
from marketplace.services.rating_service import RatingService, round_rating

logger = logging.getLogger(__name__)


class ReviewService:
    """Service layer for verified-purchase reviews"""
    
    def __init__(self, db: Session):
        self.db = db
        self.repository = ReviewRepository(db)
        self.order_repository = OrderRepository(db)
        self.product_repository = ProductRepository(db)
        self.rating_service = RatingService(db)
    
    def create_review(self, principal: Principal, review_data: ReviewCreate) -> ReviewResponse:
        """
        Review a product from one of the caller's delivered orders
        
        Raises:
            ValidationError: If the order is not the caller's, not delivered,
                or does not contain the product
            ConflictError: If this order/product pair was already reviewed
            ProductNotFoundError: If the product no longer exists
        """
        order = self.order_repository.get_by_id(review_data.order)
        if order is None or order.customer_id != principal.id or order.status != 'delivered':
            raise ValidationError("Order not found or not eligible for review")
        
        if not any(item.product_id == review_data.product for item in order.items):
            raise ValidationError("Product not found in this order")
        
        if self.repository.get_by_order_and_product(review_data.order, review_data.product):
            raise ConflictError("Review already exists for this product in this order")
        
        product = self.product_repository.get_by_id(review_data.product)
        if product is None:
            raise ProductNotFoundError("Product not found")
        
        with unit_of_work(self.db):
            review = self.repository.add(Review(
                product_id=product.id,
                vendor_id=product.vendor_id,
                customer_id=principal.id,
                order_id=order.id,
                rating=review_data.rating,
                title=review_data.title,
                comment=review_data.comment,
                is_verified_purchase=True
            ))
            self.rating_service.recompute_for_review(review)
        
        logger.info(
            "Review created",
            extra={'extra_fields': {'review_id': review.id, 'product_id': product.id}}
        )
        return ReviewResponse.from_model(review)
    
    def update_review(self, review_id: int, principal: Principal, review_data: ReviewUpdate) -> ReviewResponse:
        """
        Edit rating, title or comment of the caller's own review
        
        A rating change refreshes the product and vendor averages in the
        same transaction.
        
        Raises:
            ReviewNotFoundError: If the review does not exist
            AuthorizationError: If the caller did not write the review
        """
        review = self.repository.get_by_id(review_id)
        if review is None:
            raise ReviewNotFoundError("Review not found")
        
        if review.customer_id != principal.id:
            raise AuthorizationError("Not authorized to update this review")
        
        with unit_of_work(self.db):
            for field in ('rating', 'title', 'comment'):
                value = getattr(review_data, field)
                if value is not None:
                    setattr(review, field, value)
            self.db.flush()
            self.rating_service.recompute_for_review(review)
        
        logger.info("Review updated", extra={'extra_fields': {'review_id': review.id}})
        return ReviewResponse.from_model(review)
    
    def delete_review(self, review_id: int, principal: Principal) -> None:
        """Remove a review (author or admin) and refresh the affected ratings"""
        review = self.repository.get_by_id(review_id)
        if review is None:
            raise ReviewNotFoundError("Review not found")
        
        if review.customer_id != principal.id and not principal.is_admin:
            raise AuthorizationError("Not authorized to delete this review")
        
        with unit_of_work(self.db):
            self.repository.delete(review)
            self.rating_service.recompute_for_review(review)
        
        logger.info("Review deleted", extra={'extra_fields': {'review_id': review_id}})
    
    def list_product_reviews(self, product_id: int, page: int = 1, limit: int = 10) -> ReviewListResponse:
        """Get a page of a product's reviews with rating statistics"""
        skip = (page - 1) * limit
        reviews = self.repository.list_for_product(product_id, skip=skip, limit=limit)
        total = self.repository.count_for_product(product_id)
        average, count = self.repository.rating_stats_for_product(product_id)
        
        stats = ReviewStats(
            total_reviews=count,
            average_rating=float(round_rating(average)),
            rating_distribution=[
                RatingBucket(rating=rating, count=bucket_count)
                for rating, bucket_count in self.repository.rating_distribution(product_id)
            ]
        )
        
        return ReviewListResponse(
            count=len(reviews),
            total=total,
            total_pages=total_pages(total, limit),
            current_page=page,
            reviews=[ReviewResponse.from_model(r) for r in reviews],
            stats=stats
        )
