"""
Pydantic schemas for order request/response validation
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from marketplace.schemas.common import CamelModel

OrderStatus = Literal['pending', 'confirmed', 'processing', 'shipped', 'delivered', 'cancelled']
PaymentMethod = Literal['stripe', 'paypal', 'cod']


class Variant(CamelModel):
    """Selected product variant, e.g. Color / Red"""
    name: Optional[str] = Field(None, max_length=100)
    value: Optional[str] = Field(None, max_length=100)


class OrderItemCreate(CamelModel):
    """Schema for one requested cart line"""
    product: int = Field(..., gt=0, description="Product ID")
    quantity: int = Field(..., gt=0, description="Quantity to order")
    variant: Optional[Variant] = None


class Address(CamelModel):
    """Shipping address"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)
    
    first_name: str = Field(..., min_length=1, description="First name is required")
    last_name: str = Field(..., min_length=1, description="Last name is required")
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    street: str = Field(..., min_length=1, description="Street address is required")
    city: str = Field(..., min_length=1, description="City is required")
    state: str = Field(..., min_length=1, description="State is required")
    zip_code: str = Field(..., min_length=1, description="Zip code is required")
    country: str = "United States"


class BillingAddress(CamelModel):
    """Billing address, every field optional"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)
    
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    same_as_shipping: bool = True


class PaymentCreate(CamelModel):
    method: PaymentMethod = Field(..., description="Payment method")


class OrderCreate(CamelModel):
    """Schema for placing a (possibly multi-vendor) checkout"""
    items: List[OrderItemCreate] = Field(..., min_length=1, description="Order must contain at least one item")
    shipping_address: Address
    billing_address: Optional[BillingAddress] = None
    payment: PaymentCreate


class OrderStatusUpdate(CamelModel):
    """Schema for updating order status"""
    status: OrderStatus = Field(..., description="Order status")
    message: Optional[str] = Field(None, min_length=1, max_length=500)
    tracking_number: Optional[str] = Field(None, max_length=100)
    carrier: Optional[str] = Field(None, max_length=100)


class OrderCancel(CamelModel):
    """Schema for cancelling an order"""
    reason: Optional[str] = Field(None, min_length=1, max_length=500)


class ImageSnapshot(CamelModel):
    url: Optional[str] = None
    alt: Optional[str] = None


class OrderItemResponse(CamelModel):
    product: int
    name: str
    image: Optional[ImageSnapshot] = None
    price: float
    quantity: int
    variant: Optional[Variant] = None
    sku: Optional[str] = None
    subtotal: float


class Pricing(CamelModel):
    subtotal: float
    tax: float
    shipping: float
    discount: float = 0.0
    total: float


class PaymentResponse(CamelModel):
    method: str
    status: str
    amount: float
    currency: str


class StatusHistoryEntry(CamelModel):
    status: str
    message: Optional[str] = None
    actor: Optional[int] = None
    timestamp: datetime


class Cancellation(CamelModel):
    reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[int] = None


class Tracking(CamelModel):
    tracking_number: Optional[str] = None
    carrier: Optional[str] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None


class Commission(CamelModel):
    rate: float
    amount: float


class OrderResponse(CamelModel):
    """Schema for order response"""
    id: int
    order_number: str
    customer: int
    vendor: int
    items: List[OrderItemResponse]
    pricing: Pricing
    shipping_address: Dict[str, Any]
    billing_address: Optional[Dict[str, Any]] = None
    payment: PaymentResponse
    status: OrderStatus
    status_history: List[StatusHistoryEntry]
    cancellation: Optional[Cancellation] = None
    tracking: Tracking
    commission: Commission
    created_at: datetime
    updated_at: datetime
    
    @classmethod
    def from_model(cls, order) -> "OrderResponse":
        """Build the nested wire representation from an Order row"""
        items = []
        for item in order.items:
            items.append(OrderItemResponse(
                product=item.product_id,
                name=item.name,
                image=ImageSnapshot(url=item.image_url, alt=item.image_alt) if item.image_url else None,
                price=float(item.price),
                quantity=item.quantity,
                variant=Variant(name=item.variant_name, value=item.variant_value)
                if item.variant_name or item.variant_value else None,
                sku=item.sku,
                subtotal=float(item.subtotal)
            ))
        
        cancellation = None
        if order.cancellation_reason or order.cancelled_at:
            cancellation = Cancellation(
                reason=order.cancellation_reason,
                cancelled_at=order.cancelled_at,
                cancelled_by=order.cancelled_by
            )
        
        return cls(
            id=order.id,
            order_number=order.order_number,
            customer=order.customer_id,
            vendor=order.vendor_id,
            items=items,
            pricing=Pricing(
                subtotal=float(order.subtotal),
                tax=float(order.tax),
                shipping=float(order.shipping),
                discount=float(order.discount or 0),
                total=float(order.total)
            ),
            shipping_address=order.shipping_address,
            billing_address=order.billing_address,
            payment=PaymentResponse(
                method=order.payment_method,
                status=order.payment_status,
                amount=float(order.payment_amount),
                currency=order.currency
            ),
            status=order.status,
            status_history=[
                StatusHistoryEntry(
                    status=entry.status,
                    message=entry.message,
                    actor=entry.actor_id,
                    timestamp=entry.timestamp
                )
                for entry in order.status_history
            ],
            cancellation=cancellation,
            tracking=Tracking(
                tracking_number=order.tracking_number,
                carrier=order.carrier,
                shipped_at=order.shipped_at,
                delivered_at=order.delivered_at
            ),
            commission=Commission(
                rate=float(order.commission_rate),
                amount=float(order.commission_amount)
            ),
            created_at=order.created_at,
            updated_at=order.updated_at
        )


class OrderCreateResponse(CamelModel):
    success: bool = True
    message: str = "Orders created successfully"
    orders: List[OrderResponse]


class OrderDetailResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
    order: OrderResponse


class OrderListResponse(CamelModel):
    """Schema for a page of orders"""
    success: bool = True
    count: int
    total: int
    total_pages: int
    current_page: int
    orders: List[OrderResponse]


class OrderEvent(BaseModel):
    """Envelope for order events published to RabbitMQ"""
    event_type: str
    event_id: str
    event_version: str = "1.0"
    timestamp: str
    source: str
    data: dict
