"""
Schemas package
"""
from marketplace.schemas.common import ErrorResponse
from marketplace.schemas.order import (
    OrderCreate,
    OrderStatusUpdate,
    OrderCancel,
    OrderResponse,
    OrderCreateResponse,
    OrderDetailResponse,
    OrderListResponse,
    OrderEvent
)
from marketplace.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
    AvailabilityResponse
)
from marketplace.schemas.vendor import VendorCreate, VendorStatusUpdate, VendorResponse
from marketplace.schemas.review import ReviewCreate, ReviewUpdate, ReviewResponse, ReviewListResponse

__all__ = [
    "ErrorResponse",
    "OrderCreate",
    "OrderStatusUpdate",
    "OrderCancel",
    "OrderResponse",
    "OrderCreateResponse",
    "OrderDetailResponse",
    "OrderListResponse",
    "OrderEvent",
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "ProductListResponse",
    "AvailabilityResponse",
    "VendorCreate",
    "VendorStatusUpdate",
    "VendorResponse",
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewResponse",
    "ReviewListResponse"
]
