"""
Repositories package
"""
from marketplace.repositories.product_repository import ProductRepository
from marketplace.repositories.vendor_repository import VendorRepository
from marketplace.repositories.order_repository import OrderRepository
from marketplace.repositories.review_repository import ReviewRepository

__all__ = ["ProductRepository", "VendorRepository", "OrderRepository", "ReviewRepository"]
