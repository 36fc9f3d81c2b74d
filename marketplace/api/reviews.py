"""
Review API endpoints
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from marketplace.api.deps import get_current_principal
from marketplace.config import settings
from marketplace.database import get_db
from marketplace.schemas.review import ReviewCreate, ReviewDetailResponse, ReviewListResponse, ReviewUpdate
from marketplace.security import Principal
from marketplace.services.review_service import ReviewService

router = APIRouter(prefix="/reviews", tags=["reviews"])


def get_review_service(db: Session = Depends(get_db)) -> ReviewService:
    return ReviewService(db)


@router.get("/product/{product_id}", response_model=ReviewListResponse, summary="Get product reviews")
def get_product_reviews(
    product_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    service: ReviewService = Depends(get_review_service)
):
    return service.list_product_reviews(product_id, page=page, limit=limit)


@router.post("", response_model=ReviewDetailResponse, status_code=status.HTTP_201_CREATED, summary="Create review")
def create_review(
    review_data: ReviewCreate,
    principal: Principal = Depends(get_current_principal),
    service: ReviewService = Depends(get_review_service)
):
    """
    Review a product from a delivered order
    
    Recomputes the product's and vendor's rating.
    """
    review = service.create_review(principal, review_data)
    return ReviewDetailResponse(message="Review created successfully", review=review)


@router.put("/{review_id}", response_model=ReviewDetailResponse, summary="Update review")
def update_review(
    review_id: int,
    review_data: ReviewUpdate,
    principal: Principal = Depends(get_current_principal),
    service: ReviewService = Depends(get_review_service)
):
    """Edit the caller's own review; ratings are recomputed"""
    review = service.update_review(review_id, principal, review_data)
    return ReviewDetailResponse(message="Review updated successfully", review=review)


@router.delete("/{review_id}", summary="Delete review")
def delete_review(
    review_id: int,
    principal: Principal = Depends(get_current_principal),
    service: ReviewService = Depends(get_review_service)
):
    service.delete_review(review_id, principal)
    return {"success": True, "message": "Review deleted successfully"}
