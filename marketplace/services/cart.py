"""
Cart resolution and per-vendor partitioning
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Sequence

from marketplace.exceptions import InsufficientAvailabilityError, ProductNotFoundError
from marketplace.models.product import Product
from marketplace.schemas.order import OrderItemCreate, Variant


@dataclass
class CartLine:
    """A requested item bound to its product and priced at this instant"""
    product: Product
    quantity: int
    unit_price: Decimal
    variant: Optional[Variant] = None
    
    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass
class VendorGroup:
    """The lines of a cart that belong to one vendor"""
    vendor_id: int
    lines: List[CartLine] = field(default_factory=list)
    
    @property
    def subtotal(self) -> Decimal:
        return sum((line.subtotal for line in self.lines), Decimal("0"))


def resolve_cart(items: Sequence[OrderItemCreate], products: Mapping[int, Product]) -> List[CartLine]:
    """
    Bind each requested item to its product
    
    Every item is checked before anything is written, so one bad line
    rejects the whole cart.
    
    Raises:
        ProductNotFoundError: If a product ID does not resolve
        InsufficientAvailabilityError: If a product cannot supply the quantity
    """
    lines = []
    for item in items:
        product = products.get(item.product)
        if product is None:
            raise ProductNotFoundError(f"Product {item.product} not found")
        if not product.is_available(item.quantity):
            raise InsufficientAvailabilityError(
                f"Product {product.name} is not available in requested quantity"
            )
        lines.append(CartLine(
            product=product,
            quantity=item.quantity,
            unit_price=product.current_price,
            variant=item.variant
        ))
    return lines


def partition_cart(lines: Sequence[CartLine]) -> List[VendorGroup]:
    """Group cart lines by vendor, vendors in first-seen order"""
    groups: Dict[int, VendorGroup] = {}
    for line in lines:
        vendor_id = line.product.vendor_id
        if vendor_id not in groups:
            groups[vendor_id] = VendorGroup(vendor_id=vendor_id)
        groups[vendor_id].lines.append(line)
    return list(groups.values())
