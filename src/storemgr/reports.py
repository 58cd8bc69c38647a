"""Read-only sales reporting over the catalog."""

from dataclasses import dataclass
from typing import List

from storemgr.catalog import ProductCatalog
from storemgr.products import Product


@dataclass(frozen=True)
class TopSeller:
    product: Product
    sales_count: int


class SalesReport:
    def __init__(self, catalog: ProductCatalog) -> None:
        self.catalog = catalog

    def top_sellers(self, n: int) -> List[TopSeller]:
        """Products with the most units sold, highest first.

        Equal sales counts keep catalog registration order (stable sort).
        """
        if n <= 0:
            return []
        ranked = sorted(self.catalog, key=lambda p: p.sales_count, reverse=True)
        return [TopSeller(product=p, sales_count=p.sales_count) for p in ranked[:n]]
