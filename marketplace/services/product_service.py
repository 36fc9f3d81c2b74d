"""
Product Service - Business Logic Layer
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from marketplace.database import unit_of_work
from marketplace.exceptions import (
    AuthorizationError,
    ConflictError,
    ProductNotFoundError,
    StateError,
    VendorNotFoundError
)
from marketplace.models.product import Product
from marketplace.repositories.order_repository import OrderRepository
from marketplace.repositories.product_repository import ProductRepository
from marketplace.repositories.vendor_repository import VendorRepository
from marketplace.schemas.common import total_pages
from marketplace.schemas.product import (
    AvailabilityResponse,
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate
)
from marketplace.security import Principal

logger = logging.getLogger(__name__)


class ProductService:
    """Service layer for the vendor catalog"""
    
    def __init__(self, db: Session):
        self.db = db
        self.repository = ProductRepository(db)
        self.vendor_repository = VendorRepository(db)
        self.order_repository = OrderRepository(db)
    
    def get_all_products(self, page: int = 1, limit: int = 10, vendor_id: Optional[int] = None) -> ProductListResponse:
        """Get active products with pagination"""
        skip = (page - 1) * limit
        products = self.repository.list_active(skip=skip, limit=limit, vendor_id=vendor_id)
        total = self.repository.count_active(vendor_id=vendor_id)
        
        return ProductListResponse(
            count=len(products),
            total=total,
            total_pages=total_pages(total, limit),
            current_page=page,
            products=[ProductResponse.from_model(p) for p in products]
        )
    
    def get_product(self, product_id: int) -> ProductResponse:
        return ProductResponse.from_model(self._get_or_404(product_id))
    
    def create_product(self, principal: Principal, product_data: ProductCreate) -> ProductResponse:
        """
        Add a product to the caller's catalog
        
        Raises:
            VendorNotFoundError: If the caller has no vendor profile
            AuthorizationError: If the vendor is not approved
            ConflictError: If the SKU is taken
        """
        vendor = self.vendor_repository.get_by_user(principal.id)
        if vendor is None:
            raise VendorNotFoundError("Vendor profile not found")
        if not vendor.is_approved:
            raise AuthorizationError("Vendor account is not approved")
        
        if self.repository.get_by_sku(product_data.sku):
            raise ConflictError(f"Product with SKU {product_data.sku} already exists")
        
        product = Product(
            vendor_id=vendor.id,
            name=product_data.name,
            description=product_data.description,
            sku=product_data.sku,
            status=product_data.status
        )
        self._apply(product, product_data)
        
        with unit_of_work(self.db):
            self.repository.add(product)
        
        logger.info("Product created", extra={'extra_fields': {'product_id': product.id, 'vendor_id': vendor.id}})
        return ProductResponse.from_model(product)
    
    def update_product(self, product_id: int, principal: Principal, product_data: ProductUpdate) -> ProductResponse:
        """Update a product (owning vendor or admin); only provided fields change"""
        product = self._get_or_404(product_id)
        
        if not principal.is_admin:
            vendor = self.vendor_repository.get_by_user(principal.id)
            if vendor is None or vendor.id != product.vendor_id:
                raise AuthorizationError("Not authorized to update this product")
        
        with unit_of_work(self.db):
            for field in ('name', 'description', 'status', 'is_active'):
                value = getattr(product_data, field)
                if value is not None:
                    setattr(product, field, value)
            self._apply(product, product_data)
        
        return ProductResponse.from_model(product)
    
    def delete_product(self, product_id: int, principal: Principal) -> None:
        """
        Delete a product (owning vendor or admin)
        
        Orders reference products by ID only, so placed orders and their
        line-item snapshots are untouched. Vendors cannot delete a product
        that is still part of an order in flight; admins can.
        
        Raises:
            ProductNotFoundError: If the product does not exist
            AuthorizationError: If the caller neither owns the product nor is admin
            StateError: If a vendor deletes a product with active orders
        """
        product = self._get_or_404(product_id)
        
        if not principal.is_admin:
            vendor = self.vendor_repository.get_by_user(principal.id)
            if vendor is None or vendor.id != product.vendor_id:
                raise AuthorizationError("Not authorized to delete this product")
            if self.order_repository.count_active_for_product(product.id):
                raise StateError("Cannot delete product with active orders")
        
        with unit_of_work(self.db):
            self.repository.delete(product)
        
        logger.info(
            "Product deleted",
            extra={'extra_fields': {'product_id': product_id, 'actor_id': principal.id}}
        )
    
    def check_availability(self, product_id: int, quantity: int = 1) -> AvailabilityResponse:
        """Check whether a quantity of a product can be ordered"""
        product = self._get_or_404(product_id)
        return AvailabilityResponse(
            product=product.id,
            requested_quantity=quantity,
            available=product.is_available(quantity),
            stock_status=product.stock_status,
            quantity=product.quantity
        )
    
    def _get_or_404(self, product_id: int) -> Product:
        product = self.repository.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(f"Product {product_id} not found")
        return product
    
    @staticmethod
    def _apply(product: Product, product_data) -> None:
        """Copy the nested image / price / inventory blocks onto the row"""
        if product_data.image is not None:
            product.image_url = product_data.image.url
            product.image_alt = product_data.image.alt
        if product_data.price is not None:
            product.price_original = product_data.price.original
            product.price_discounted = product_data.price.discounted
            product.currency = product_data.price.currency
        if product_data.inventory is not None:
            product.quantity = product_data.inventory.quantity
            product.low_stock_threshold = product_data.inventory.low_stock_threshold
            product.track_quantity = product_data.inventory.track_quantity
            product.allow_backorder = product_data.inventory.allow_backorder
