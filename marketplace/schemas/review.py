"""
Pydantic schemas for review request/response validation
"""
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from marketplace.schemas.common import CamelModel


class ReviewCreate(CamelModel):
    product: int = Field(..., gt=0, description="Product ID")
    order: int = Field(..., gt=0, description="Order ID")
    rating: int = Field(..., ge=1, le=5, description="Rating must be between 1 and 5")
    comment: str = Field(..., min_length=1, max_length=1000)
    title: Optional[str] = Field(None, max_length=200)


class ReviewUpdate(CamelModel):
    """Schema for editing a review (all fields optional)"""
    rating: Optional[int] = Field(None, ge=1, le=5, description="Rating must be between 1 and 5")
    comment: Optional[str] = Field(None, min_length=1, max_length=1000)
    title: Optional[str] = Field(None, max_length=200)


class ReviewResponse(CamelModel):
    id: int
    product: int
    vendor: int
    customer: int
    order: int
    rating: int
    title: Optional[str] = None
    comment: str
    is_verified_purchase: bool
    created_at: datetime
    
    @classmethod
    def from_model(cls, review) -> "ReviewResponse":
        return cls(
            id=review.id,
            product=review.product_id,
            vendor=review.vendor_id,
            customer=review.customer_id,
            order=review.order_id,
            rating=review.rating,
            title=review.title,
            comment=review.comment,
            is_verified_purchase=review.is_verified_purchase,
            created_at=review.created_at
        )


class RatingBucket(CamelModel):
    rating: int
    count: int


class ReviewStats(CamelModel):
    total_reviews: int = 0
    average_rating: float = 0.0
    rating_distribution: List[RatingBucket] = []


class ReviewDetailResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
    review: ReviewResponse


class ReviewListResponse(CamelModel):
    success: bool = True
    count: int
    total: int
    total_pages: int
    current_page: int
    reviews: List[ReviewResponse]
    stats: ReviewStats
