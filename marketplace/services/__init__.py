"""
Services package
"""
from marketplace.services.order_service import OrderService
from marketplace.services.product_service import ProductService
from marketplace.services.vendor_service import VendorService
from marketplace.services.review_service import ReviewService
from marketplace.services.rating_service import RatingService
from marketplace.services.notification_service import NotificationService

__all__ = [
    "OrderService",
    "ProductService",
    "VendorService",
    "ReviewService",
    "RatingService",
    "NotificationService"
]
