"""Category discount policy.

Discounts are informational: they are reported alongside products and are
never subtracted from invoice totals.
"""

from decimal import Decimal

from storemgr.pricing import round_cents
from storemgr.products import Product, ProductCategory, profile_for


def discount_rate(category: ProductCategory) -> Decimal:
    return profile_for(category).discount_rate


def discount_for(product: Product) -> Decimal:
    """Discount amount for a product: base price times its category rate."""
    return round_cents(product.base_price * discount_rate(product.category))
