"""
Order pricing

Flat-rate tax and a free-shipping threshold, computed once per vendor
order in Decimal and rounded to cents.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from marketplace.config import settings

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Quantize a number to cents, rounding half up"""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class OrderPricing:
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal


def calculate_pricing(
    subtotal,
    tax_rate=None,
    free_shipping_threshold=None,
    shipping_fee=None
) -> OrderPricing:
    """
    Price one vendor order
    
    tax = subtotal * tax_rate, shipping is free once subtotal reaches the
    threshold, total = subtotal + tax + shipping.
    """
    tax_rate = Decimal(str(settings.TAX_RATE if tax_rate is None else tax_rate))
    threshold = Decimal(str(
        settings.FREE_SHIPPING_THRESHOLD if free_shipping_threshold is None else free_shipping_threshold
    ))
    fee = Decimal(str(settings.SHIPPING_FEE if shipping_fee is None else shipping_fee))
    
    subtotal = to_money(subtotal)
    tax = to_money(subtotal * tax_rate)
    shipping = Decimal("0.00") if subtotal >= threshold else to_money(fee)
    return OrderPricing(
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        total=subtotal + tax + shipping
    )
