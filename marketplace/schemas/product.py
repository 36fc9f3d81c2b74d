"""
Pydantic schemas for product request/response validation
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from marketplace.schemas.common import CamelModel

ProductStatus = Literal['draft', 'active', 'inactive', 'out_of_stock', 'discontinued']


class ProductImage(CamelModel):
    url: str = Field(..., max_length=500)
    alt: Optional[str] = Field(None, max_length=255)


class Price(CamelModel):
    original: float = Field(..., ge=0, description="Original price")
    discounted: Optional[float] = Field(None, ge=0, description="Discounted price")
    currency: str = Field("USD", min_length=3, max_length=3)


class Inventory(CamelModel):
    quantity: int = Field(..., ge=0, description="Stock quantity (must be non-negative)")
    low_stock_threshold: int = Field(10, ge=0)
    track_quantity: bool = True
    allow_backorder: bool = False


class ProductCreate(CamelModel):
    """Schema for creating a new product"""
    name: str = Field(..., min_length=1, max_length=200, description="Product name")
    description: Optional[str] = Field(None, max_length=2000)
    sku: str = Field(..., min_length=1, max_length=100)
    image: Optional[ProductImage] = None
    price: Price
    inventory: Inventory
    status: ProductStatus = 'active'
    
    @field_validator('sku')
    @classmethod
    def normalize_sku(cls, value: str) -> str:
        return value.strip().upper()


class ProductUpdate(CamelModel):
    """Schema for updating a product (all fields optional)"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    image: Optional[ProductImage] = None
    price: Optional[Price] = None
    inventory: Optional[Inventory] = None
    status: Optional[ProductStatus] = None
    is_active: Optional[bool] = None


class Rating(CamelModel):
    average: float
    count: int


class ProductResponse(CamelModel):
    """Schema for product response"""
    id: int
    vendor: int
    name: str
    description: Optional[str] = None
    sku: str
    image: Optional[ProductImage] = None
    price: Price
    current_price: float
    inventory: Inventory
    stock_status: str
    status: ProductStatus
    is_active: bool
    rating: Rating
    created_at: datetime
    updated_at: datetime
    
    @classmethod
    def from_model(cls, product) -> "ProductResponse":
        return cls(
            id=product.id,
            vendor=product.vendor_id,
            name=product.name,
            description=product.description,
            sku=product.sku,
            image=ProductImage(**product.primary_image) if product.primary_image else None,
            price=Price(
                original=float(product.price_original),
                discounted=float(product.price_discounted) if product.price_discounted is not None else None,
                currency=product.currency
            ),
            current_price=float(product.current_price),
            inventory=Inventory(
                quantity=product.quantity,
                low_stock_threshold=product.low_stock_threshold,
                track_quantity=product.track_quantity,
                allow_backorder=product.allow_backorder
            ),
            stock_status=product.stock_status,
            status=product.status,
            is_active=product.is_active,
            rating=Rating(average=float(product.rating_average), count=product.rating_count),
            created_at=product.created_at,
            updated_at=product.updated_at
        )


class ProductDetailResponse(CamelModel):
    success: bool = True
    product: ProductResponse


class ProductListResponse(CamelModel):
    """Schema for a page of products"""
    success: bool = True
    count: int
    total: int
    total_pages: int
    current_page: int
    products: List[ProductResponse]


class AvailabilityResponse(CamelModel):
    """Schema for availability check"""
    success: bool = True
    product: int
    requested_quantity: int
    available: bool
    stock_status: str
    quantity: int
