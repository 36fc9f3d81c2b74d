"""
Order Service - Business Logic Layer
"""
import logging
import time
import uuid
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from marketplace.config import settings
from marketplace.database import unit_of_work
from marketplace.exceptions import (
    AuthorizationError,
    InsufficientAvailabilityError,
    InvalidTransitionError,
    OrderNotFoundError,
    VendorNotFoundError
)
from marketplace.models.order import Order, OrderItem
from marketplace.publishers.event_publisher import EventPublisher
from marketplace.repositories.order_repository import OrderRepository
from marketplace.repositories.product_repository import ProductRepository
from marketplace.repositories.vendor_repository import VendorRepository
from marketplace.schemas.common import total_pages
from marketplace.schemas.order import (
    OrderCreate,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate
)
from marketplace.security import Principal
from marketplace.services.cart import VendorGroup, partition_cart, resolve_cart
from marketplace.services.pricing import calculate_pricing, to_money

logger = logging.getLogger(__name__)


def generate_order_number() -> str:
    """Order number in the form ORD-<epoch millis>-<6 hex chars>"""
    return f"ORD-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6].upper()}"


class OrderService:
    """Service layer for order business logic"""

    def __init__(self, db: Session, event_publisher: Optional[EventPublisher] = None):
        self.db = db
        self.repository = OrderRepository(db)
        self.product_repository = ProductRepository(db)
        self.vendor_repository = VendorRepository(db)
        self.event_publisher = event_publisher or EventPublisher()

    def create_orders(self, principal: Principal, order_data: OrderCreate) -> List[OrderResponse]:
        """
        Check out a cart, creating one order per vendor

        Steps:
        1. Load every referenced product
        2. Reject the whole cart if any product is missing or unavailable
        3. Partition the cart by vendor, first-seen vendor first
        4. Price each vendor group and snapshot its line items
        5. Persist all orders and reserve stock in a single transaction
        6. Publish an OrderCreated event per order

        Args:
            principal: Customer placing the order
            order_data: Cart, addresses and payment method

        Returns:
            Created orders in vendor-group order

        Raises:
            ProductNotFoundError: If a product does not exist
            InsufficientAvailabilityError: If any line cannot be fulfilled;
                nothing is persisted and no stock moves
        """
        products = self.product_repository.get_by_ids(item.product for item in order_data.items)
        lines = resolve_cart(order_data.items, products)
        groups = partition_cart(lines)

        shipping_address = order_data.shipping_address.model_dump(by_alias=True)
        if order_data.billing_address is not None:
            billing_address = order_data.billing_address.model_dump(by_alias=True, exclude_none=True)
        else:
            billing_address = dict(shipping_address, sameAsShipping=True)

        orders = []
        with unit_of_work(self.db):
            for group in groups:
                order = self._build_order(
                    principal.id, group, shipping_address, billing_address, order_data.payment.method
                )
                self.repository.add(order)

                for line in group.lines:
                    if not self.product_repository.reserve_stock(line.product.id, line.quantity):
                        logger.warning(
                            "Stock reservation failed, rolling back checkout",
                            extra={'extra_fields': {
                                'product_id': line.product.id,
                                'quantity': line.quantity,
                                'customer_id': principal.id
                            }}
                        )
                        raise InsufficientAvailabilityError(
                            f"Product {line.product.name} is not available in requested quantity"
                        )
                orders.append(order)

        logger.info(
            "Checkout completed",
            extra={'extra_fields': {
                'customer_id': principal.id,
                'orders': [order.order_number for order in orders]
            }}
        )

        responses = [OrderResponse.from_model(order) for order in orders]
        for order in orders:
            self.event_publisher.publish_order_created(self._event_data(order))
        return responses

    def _build_order(
        self,
        customer_id: int,
        group: VendorGroup,
        shipping_address: Dict,
        billing_address: Dict,
        payment_method: str
    ) -> Order:
        pricing = calculate_pricing(group.subtotal)

        vendor = self.vendor_repository.get_by_id(group.vendor_id)
        commission_rate = Decimal(str(
            vendor.commission_rate if vendor is not None else settings.DEFAULT_COMMISSION_RATE
        ))

        order = Order(
            order_number=generate_order_number(),
            customer_id=customer_id,
            vendor_id=group.vendor_id,
            subtotal=pricing.subtotal,
            tax=pricing.tax,
            shipping=pricing.shipping,
            discount=Decimal("0.00"),
            total=pricing.total,
            shipping_address=shipping_address,
            billing_address=billing_address,
            payment_method=payment_method,
            payment_status='pending',
            payment_amount=pricing.total,
            currency=settings.CURRENCY,
            commission_rate=commission_rate,
            commission_amount=to_money(pricing.total * commission_rate / 100)
        )

        for line in group.lines:
            image = line.product.primary_image or {}
            order.items.append(OrderItem(
                product_id=line.product.id,
                name=line.product.name,
                image_url=image.get("url"),
                image_alt=image.get("alt"),
                price=line.unit_price,
                quantity=line.quantity,
                variant_name=line.variant.name if line.variant else None,
                variant_value=line.variant.value if line.variant else None,
                sku=line.product.sku,
                subtotal=to_money(line.subtotal)
            ))

        order.record_status('pending', 'Order placed', customer_id)
        return order

    def get_order(self, order_id: int, principal: Principal) -> OrderResponse:
        """
        Get a single order

        Visible to the customer who placed it, the vendor fulfilling it and admins.
        """
        order = self._get_or_404(order_id)

        if order.customer_id != principal.id and not principal.is_admin:
            if not self._is_order_vendor(order, principal):
                raise AuthorizationError("Not authorized to access this order")

        return OrderResponse.from_model(order)

    def list_customer_orders(
        self, principal: Principal, page: int = 1, limit: int = 10, status: Optional[str] = None
    ) -> OrderListResponse:
        """Get the caller's orders with pagination"""
        skip = (page - 1) * limit
        orders = self.repository.list_by_customer(principal.id, status=status, skip=skip, limit=limit)
        total = self.repository.count_by_customer(principal.id, status=status)

        return OrderListResponse(
            count=len(orders),
            total=total,
            total_pages=total_pages(total, limit),
            current_page=page,
            orders=[OrderResponse.from_model(o) for o in orders]
        )

    def list_vendor_orders(
        self, principal: Principal, page: int = 1, limit: int = 10, status: Optional[str] = None
    ) -> OrderListResponse:
        """Get orders placed with the caller's vendor account"""
        vendor = self.vendor_repository.get_by_user(principal.id)
        if vendor is None:
            raise VendorNotFoundError("Vendor profile not found")

        skip = (page - 1) * limit
        orders = self.repository.list_by_vendor(vendor.id, status=status, skip=skip, limit=limit)
        total = self.repository.count_by_vendor(vendor.id, status=status)

        return OrderListResponse(
            count=len(orders),
            total=total,
            total_pages=total_pages(total, limit),
            current_page=page,
            orders=[OrderResponse.from_model(o) for o in orders]
        )

    def update_status(self, order_id: int, principal: Principal, status_data: OrderStatusUpdate) -> OrderResponse:
        """
        Move an order to a new status

        Allowed to the vendor owning the order and to admins. Any status may
        follow any other here; stock is only restored by cancel_order.

        Raises:
            OrderNotFoundError: If the order does not exist
            AuthorizationError: If the caller neither owns the order as vendor nor is admin
        """
        order = self._get_or_404(order_id, for_update=True)

        if not principal.is_admin and not self._is_order_vendor(order, principal):
            raise AuthorizationError("Not authorized to update this order")

        old_status = order.status
        with unit_of_work(self.db):
            order.record_status(status_data.status, status_data.message, principal.id)
            if status_data.tracking_number:
                order.tracking_number = status_data.tracking_number
            if status_data.carrier:
                order.carrier = status_data.carrier

        logger.info(
            "Order status updated",
            extra={'extra_fields': {
                'order_id': order.id,
                'old_status': old_status,
                'new_status': order.status,
                'actor_id': principal.id
            }}
        )

        response = OrderResponse.from_model(order)
        self.event_publisher.publish_order_status_changed(
            dict(self._event_data(order), old_status=old_status, new_status=order.status)
        )
        return response

    def cancel_order(self, order_id: int, principal: Principal, reason: Optional[str] = None) -> OrderResponse:
        """
        Cancel an order and put its items back in stock

        Allowed to the customer who placed the order and to admins, and
        only while the order is pending, confirmed or processing.

        Raises:
            OrderNotFoundError: If the order does not exist
            AuthorizationError: If the caller is neither the customer nor admin
            InvalidTransitionError: If the order has shipped, been delivered
                or is already cancelled
        """
        order = self._get_or_404(order_id, for_update=True)

        if order.customer_id != principal.id and not principal.is_admin:
            raise AuthorizationError("Not authorized to cancel this order")

        if not order.can_be_cancelled():
            raise InvalidTransitionError("Order cannot be cancelled at this stage")

        old_status = order.status
        with unit_of_work(self.db):
            order.cancellation_reason = reason or 'Cancelled by customer'
            order.record_status('cancelled', 'Order cancelled', principal.id)

            for item in order.items:
                if not self.product_repository.restore_stock(item.product_id, item.quantity):
                    logger.warning(
                        "Product no longer exists, stock not restored",
                        extra={'extra_fields': {'order_id': order.id, 'product_id': item.product_id}}
                    )

        logger.info(
            "Order cancelled",
            extra={'extra_fields': {'order_id': order.id, 'old_status': old_status, 'actor_id': principal.id}}
        )

        response = OrderResponse.from_model(order)
        self.event_publisher.publish_order_cancelled(
            dict(self._event_data(order), old_status=old_status, reason=order.cancellation_reason)
        )
        return response

    def _get_or_404(self, order_id: int, for_update: bool = False) -> Order:
        order = self.repository.get_by_id(order_id, for_update=for_update)
        if order is None:
            raise OrderNotFoundError("Order not found")
        return order

    def _is_order_vendor(self, order: Order, principal: Principal) -> bool:
        if principal.role != 'vendor':
            return False
        vendor = self.vendor_repository.get_by_user(principal.id)
        return vendor is not None and vendor.id == order.vendor_id

    @staticmethod
    def _event_data(order: Order) -> Dict:
        return {
            'order_id': order.id,
            'order_number': order.order_number,
            'customer_id': order.customer_id,
            'vendor_id': order.vendor_id,
            'customer_email': (order.shipping_address or {}).get('email'),
            'status': order.status,
            'total': float(order.total),
            'items': [
                {
                    'product_id': item.product_id,
                    'name': item.name,
                    'quantity': item.quantity,
                    'price': float(item.price)
                }
                for item in order.items
            ]
        }
