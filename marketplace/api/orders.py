"""
Order API endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from marketplace.api.deps import get_current_principal, get_order_service, require_roles
from marketplace.config import settings
from marketplace.schemas.order import (
    OrderCancel,
    OrderCreate,
    OrderCreateResponse,
    OrderDetailResponse,
    OrderListResponse,
    OrderStatus,
    OrderStatusUpdate
)
from marketplace.security import Principal
from marketplace.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderCreateResponse, status_code=status.HTTP_201_CREATED, summary="Create orders")
def create_order(
    order_data: OrderCreate,
    principal: Principal = Depends(get_current_principal),
    service: OrderService = Depends(get_order_service)
):
    """
    Check out a cart
    
    Items from different vendors are split into one order per vendor.
    The whole checkout succeeds or fails as a unit.
    
    - **items**: List of {product, quantity, variant?} (at least one)
    - **shippingAddress**: Shipping address (required)
    - **billingAddress**: Billing address (defaults to shipping address)
    - **payment.method**: stripe, paypal or cod
    """
    orders = service.create_orders(principal, order_data)
    return OrderCreateResponse(orders=orders)


@router.get("/my-orders", response_model=OrderListResponse, summary="Get my orders")
def get_my_orders(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Orders per page"),
    status: Optional[OrderStatus] = Query(None, description="Filter by status"),
    principal: Principal = Depends(get_current_principal),
    service: OrderService = Depends(get_order_service)
):
    """Retrieve the caller's orders, newest first"""
    return service.list_customer_orders(principal, page=page, limit=limit, status=status)


@router.get("/vendor-orders", response_model=OrderListResponse, summary="Get vendor orders")
def get_vendor_orders(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Orders per page"),
    status: Optional[OrderStatus] = Query(None, description="Filter by status"),
    principal: Principal = Depends(require_roles("vendor")),
    service: OrderService = Depends(get_order_service)
):
    """Retrieve orders placed with the caller's vendor account"""
    return service.list_vendor_orders(principal, page=page, limit=limit, status=status)


@router.get("/{order_id}", response_model=OrderDetailResponse, summary="Get order by ID")
def get_order(
    order_id: int,
    principal: Principal = Depends(get_current_principal),
    service: OrderService = Depends(get_order_service)
):
    """
    Retrieve a specific order
    
    Visible to the ordering customer, the fulfilling vendor and admins.
    """
    return OrderDetailResponse(order=service.get_order(order_id, principal))


@router.put("/{order_id}/status", response_model=OrderDetailResponse, summary="Update order status")
def update_order_status(
    order_id: int,
    status_data: OrderStatusUpdate,
    principal: Principal = Depends(require_roles("vendor", "admin")),
    service: OrderService = Depends(get_order_service)
):
    """
    Update order status (vendor owning the order, or admin)
    
    - **status**: pending, confirmed, processing, shipped, delivered, cancelled
    - **message**: Optional history message
    - **trackingNumber** / **carrier**: Optional tracking info
    """
    order = service.update_status(order_id, principal, status_data)
    return OrderDetailResponse(message="Order status updated successfully", order=order)


@router.put("/{order_id}/cancel", response_model=OrderDetailResponse, summary="Cancel order")
def cancel_order(
    order_id: int,
    cancel_data: Optional[OrderCancel] = None,
    principal: Principal = Depends(get_current_principal),
    service: OrderService = Depends(get_order_service)
):
    """
    Cancel an order (ordering customer, or admin) and restore its stock
    
    Only pending, confirmed and processing orders can be cancelled.
    """
    reason = cancel_data.reason if cancel_data else None
    order = service.cancel_order(order_id, principal, reason)
    return OrderDetailResponse(message="Order cancelled successfully", order=order)
