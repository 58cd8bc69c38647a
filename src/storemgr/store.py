"""Store context: the explicit container threaded through every operation."""

from __future__ import annotations

import logging
import threading
from typing import List, Mapping, Optional, Tuple, Union

from storemgr.catalog import ProductCatalog
from storemgr.config import StoreConfig
from storemgr.customers import Customer, CustomerDirectory
from storemgr.exceptions import CustomerNotFoundError
from storemgr.ledger import Purchase, PurchaseLedger
from storemgr.pricing import MoneyLike
from storemgr.products import Product, ProductCategory
from storemgr.reports import SalesReport, TopSeller
from storemgr.sales import SaleResult, SaleTransactionProcessor

logger = logging.getLogger(__name__)

SAMPLE_PRODUCTS = (
    dict(
        id="E1",
        name="Laptop",
        category=ProductCategory.ELECTRONICS,
        base_price="1200.00",
        total_available=100,
        initial_stock=50,
        attributes={"warranty": "2 Years"},
    ),
    dict(
        id="C1",
        name="T-Shirt",
        category=ProductCategory.CLOTHING,
        base_price="25.00",
        total_available=200,
        initial_stock=100,
        attributes={"size": "XL"},
    ),
)


class StoreContext:
    """Owns catalog, customers and ledger for one store.

    Every public operation runs under a single re-entrant lock, so callers on
    several threads (the HTTP API) see each multi-step operation atomically.
    """

    def __init__(
        self,
        config: Optional[StoreConfig] = None,
        *,
        catalog: Optional[ProductCatalog] = None,
        directory: Optional[CustomerDirectory] = None,
        ledger: Optional[PurchaseLedger] = None,
        seed: Optional[bool] = None,
    ) -> None:
        self.config = config or StoreConfig()
        self.catalog = catalog if catalog is not None else ProductCatalog()
        self.directory = directory if directory is not None else CustomerDirectory()
        self.ledger = ledger if ledger is not None else PurchaseLedger()
        self.processor = SaleTransactionProcessor(self.catalog, self.ledger)
        self.report = SalesReport(self.catalog)
        self.lock = threading.RLock()

        if self.config.seed_sample_data if seed is None else seed:
            self.seed_sample_data()

    def seed_sample_data(self) -> None:
        for sample in SAMPLE_PRODUCTS:
            self.register_product(**sample)  # type: ignore[arg-type]
        logger.info("Seeded %d sample products", len(SAMPLE_PRODUCTS))

    def register_product(
        self,
        *,
        id: str,
        name: str,
        category: Union[ProductCategory, str],
        base_price: MoneyLike,
        total_available: int,
        initial_stock: int,
        attributes: Optional[Mapping[str, str]] = None,
    ) -> Product:
        product = Product.create(
            id=id,
            name=name,
            category=category,
            base_price=base_price,
            total_available=total_available,
            initial_stock=initial_stock,
            attributes=attributes,
        )
        with self.lock:
            return self.catalog.register(product)

    def get_product(self, product_id: str) -> Optional[Product]:
        with self.lock:
            return self.catalog.lookup(product_id)

    def list_products(self) -> List[Product]:
        with self.lock:
            return self.catalog.products()

    def restock(self, product_id: str, amount: int) -> Product:
        with self.lock:
            return self.catalog.restock(product_id, amount)

    def find_or_create_customer(self, name: str, contact: str) -> Customer:
        with self.lock:
            return self.directory.find_or_create(name, contact)

    def get_customer(self, contact: str) -> Optional[Customer]:
        with self.lock:
            return self.directory.get_by_contact(contact)

    def process_sale(
        self,
        contact: str,
        cart: Mapping[str, int],
        *,
        name: Optional[str] = None,
    ) -> SaleResult:
        """Sell a cart to the customer identified by contact.

        With a name, an unknown contact is created first; without one, an
        unknown contact raises CustomerNotFoundError.
        """
        with self.lock:
            if name is not None:
                customer = self.directory.find_or_create(name, contact)
            else:
                customer = self._require_customer(contact)
            return self.processor.process(customer, dict(cart))

    def customer_history(self, contact: str) -> Tuple[Purchase, ...]:
        with self.lock:
            return self._require_customer(contact).history

    def get_invoice(self, invoice_id: str) -> Optional[Purchase]:
        with self.lock:
            return self.ledger.get(invoice_id)

    def top_sellers(self, n: Optional[int] = None) -> List[TopSeller]:
        with self.lock:
            return self.report.top_sellers(self.config.top_sellers_limit if n is None else n)

    def _require_customer(self, contact: str) -> Customer:
        customer = self.directory.get_by_contact(contact)
        if customer is None:
            raise CustomerNotFoundError(
                f"No customer found with contact {contact}",
                details={"contact": contact},
            )
        return customer
