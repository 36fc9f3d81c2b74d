"""
Product API endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from marketplace.api.deps import require_roles
from marketplace.config import settings
from marketplace.database import get_db
from marketplace.schemas.product import (
    AvailabilityResponse,
    ProductCreate,
    ProductDetailResponse,
    ProductListResponse,
    ProductUpdate
)
from marketplace.security import Principal
from marketplace.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    """Dependency to get ProductService instance"""
    return ProductService(db)


@router.get("", response_model=ProductListResponse, summary="Get active products")
def get_products(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    vendor: Optional[int] = Query(None, description="Filter by vendor ID"),
    service: ProductService = Depends(get_product_service)
):
    """Retrieve active products with pagination"""
    return service.get_all_products(page=page, limit=limit, vendor_id=vendor)


@router.get("/{product_id}", response_model=ProductDetailResponse, summary="Get product by ID")
def get_product(
    product_id: int,
    service: ProductService = Depends(get_product_service)
):
    return ProductDetailResponse(product=service.get_product(product_id))


@router.post("", response_model=ProductDetailResponse, status_code=status.HTTP_201_CREATED, summary="Create product")
def create_product(
    product_data: ProductCreate,
    principal: Principal = Depends(require_roles("vendor")),
    service: ProductService = Depends(get_product_service)
):
    """Create a product in the caller's (approved) vendor catalog"""
    return ProductDetailResponse(product=service.create_product(principal, product_data))


@router.put("/{product_id}", response_model=ProductDetailResponse, summary="Update product")
def update_product(
    product_id: int,
    product_data: ProductUpdate,
    principal: Principal = Depends(require_roles("vendor", "admin")),
    service: ProductService = Depends(get_product_service)
):
    """
    Update an existing product
    
    All fields are optional. Only provided fields will be updated.
    """
    return ProductDetailResponse(product=service.update_product(product_id, principal, product_data))


@router.delete("/{product_id}", summary="Delete product")
def delete_product(
    product_id: int,
    principal: Principal = Depends(require_roles("vendor", "admin")),
    service: ProductService = Depends(get_product_service)
):
    """
    Delete a product (owning vendor or admin)
    
    Vendors cannot delete products that are part of active orders.
    Placed orders keep their line-item snapshots.
    """
    service.delete_product(product_id, principal)
    return {"success": True, "message": "Product deleted successfully"}


@router.get("/{product_id}/availability", response_model=AvailabilityResponse, summary="Check availability")
def check_availability(
    product_id: int,
    quantity: int = Query(1, ge=1, description="Required quantity"),
    service: ProductService = Depends(get_product_service)
):
    """Check whether a quantity of the product can be ordered"""
    return service.check_availability(product_id, quantity)
