"""
Models package
"""
from marketplace.models.vendor import Vendor
from marketplace.models.product import Product
from marketplace.models.order import Order, OrderItem, OrderStatusEntry
from marketplace.models.review import Review

__all__ = ["Vendor", "Product", "Order", "OrderItem", "OrderStatusEntry", "Review"]
