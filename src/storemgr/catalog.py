"""Product catalog: the only owner and mutator of product stock."""

from __future__ import annotations

import logging
from decimal import ROUND_FLOOR, Decimal
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from storemgr.exceptions import ProductNotFoundError, StoreError
from storemgr.products import Product

logger = logging.getLogger(__name__)

AUTO_RESTOCK_RATIO = Decimal("0.2")


def auto_restock_units(total_available: int) -> int:
    """Units added when a product sells out: floor(20% of capacity)."""
    return int((AUTO_RESTOCK_RATIO * total_available).to_integral_value(rounding=ROUND_FLOOR))


class ProductCatalog:
    """In-memory product catalog keyed by product id, in registration order."""

    def __init__(self) -> None:
        self._products: Dict[str, Product] = {}

    def __len__(self) -> int:
        return len(self._products)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._products

    def __iter__(self) -> Iterator[Product]:
        return iter(self._products.values())

    def products(self) -> List[Product]:
        return list(self._products.values())

    def register(self, product: Product) -> Product:
        """Store a product. A reused id replaces the earlier product."""
        if product.id in self._products:
            logger.warning("Product id %s re-registered; replacing existing entry", product.id)
        self._products[product.id] = product
        logger.info(
            "Registered product %s (%s) stock=%d/%d",
            product.id,
            product.category.value,
            product.current_stock,
            product.total_available,
        )
        return product

    def lookup(self, product_id: str) -> Optional[Product]:
        return self._products.get(product_id)

    def restock(self, product_id: str, amount: int) -> Product:
        product = self._require(product_id)
        product.restock(amount)
        logger.info(
            "Restocked %s by %d (stock=%d/%d)",
            product_id,
            amount,
            product.current_stock,
            product.total_available,
        )
        return product

    def record_sale(self, product_id: str, quantity: int) -> Product:
        """Apply a sale, then auto-restock if the product sold out."""
        product = self._require(product_id)
        product.record_sale(quantity)
        if product.current_stock <= 0:
            units = auto_restock_units(product.total_available)
            product.replenish(units)
            logger.info(
                "Auto-restocked %s with %d units (capacity %d)",
                product_id,
                units,
                product.total_available,
            )
        return product

    def record_sales(self, lines: Iterable[Tuple[str, int]]) -> None:
        """Apply several sales together; on failure every applied line is undone."""
        applied: List[Tuple[Product, int, int]] = []
        try:
            for product_id, quantity in lines:
                product = self._require(product_id)
                applied.append((product, product.current_stock, product.sales_count))
                self.record_sale(product_id, quantity)
        except StoreError:
            for product, stock, sold in reversed(applied):
                product.current_stock = stock
                product.sales_count = sold
            logger.warning("Sale rolled back after %d line(s)", len(applied))
            raise

    def _require(self, product_id: str) -> Product:
        product = self._products.get(product_id)
        if product is None:
            raise ProductNotFoundError(
                f"Unknown product: {product_id}", details={"product_id": product_id}
            )
        return product
