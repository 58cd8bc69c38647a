"""Plain-data snapshots of store state.

The store never depends on this module; the CLI uses it to keep state in a
JSON file between commands.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from storemgr.catalog import ProductCatalog
from storemgr.config import StoreConfig
from storemgr.customers import CustomerDirectory
from storemgr.exceptions import ValidationError
from storemgr.ledger import InvoiceLine, Purchase, PurchaseLedger
from storemgr.products import Product, ProductCategory
from storemgr.store import StoreContext

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


class ProductSnapshot(BaseModel):
    id: str
    name: str
    category: ProductCategory
    base_price: Decimal
    total_available: int
    current_stock: int
    sales_count: int = 0
    attributes: Dict[str, str] = Field(default_factory=dict)


class InvoiceLineSnapshot(BaseModel):
    product_id: str
    unit_price: Decimal
    quantity: int


class PurchaseSnapshot(BaseModel):
    invoice_id: str
    created_at: datetime
    lines: List[InvoiceLineSnapshot]
    subtotal: Decimal
    total_with_tax: Decimal


class CustomerSnapshot(BaseModel):
    name: str
    contact: str
    purchases: List[PurchaseSnapshot] = Field(default_factory=list)


class StoreSnapshot(BaseModel):
    """Complete store state as plain data."""

    version: int = SNAPSHOT_VERSION
    products: List[ProductSnapshot] = Field(default_factory=list)
    customers: List[CustomerSnapshot] = Field(default_factory=list)


def export_snapshot(store: StoreContext) -> StoreSnapshot:
    """Capture catalog and customer histories."""
    with store.lock:
        products = [
            ProductSnapshot(
                id=p.id,
                name=p.name,
                category=p.category,
                base_price=p.base_price,
                total_available=p.total_available,
                current_stock=p.current_stock,
                sales_count=p.sales_count,
                attributes=dict(p.attributes),
            )
            for p in store.catalog
        ]
        customers = [
            CustomerSnapshot(
                name=c.name,
                contact=c.contact,
                purchases=[
                    PurchaseSnapshot(
                        invoice_id=purchase.invoice_id,
                        created_at=purchase.created_at,
                        lines=[
                            InvoiceLineSnapshot(
                                product_id=line.product_id,
                                unit_price=line.unit_price,
                                quantity=line.quantity,
                            )
                            for line in purchase.lines
                        ],
                        subtotal=purchase.subtotal,
                        total_with_tax=purchase.total_with_tax,
                    )
                    for purchase in c.history
                ],
            )
            for c in store.directory
        ]
    return StoreSnapshot(products=products, customers=customers)


def restore_snapshot(
    snapshot: StoreSnapshot, config: Optional[StoreConfig] = None
) -> StoreContext:
    """Rebuild a store from a snapshot. Sample data is never re-seeded."""
    if snapshot.version != SNAPSHOT_VERSION:
        raise ValidationError(
            f"Unsupported snapshot version: {snapshot.version}",
            details={"version": snapshot.version},
        )

    catalog = ProductCatalog()
    for item in snapshot.products:
        catalog.register(
            Product(
                id=item.id,
                name=item.name,
                category=item.category,
                base_price=item.base_price,
                total_available=item.total_available,
                current_stock=item.current_stock,
                attributes=item.attributes,
                sales_count=item.sales_count,
            )
        )

    directory = CustomerDirectory()
    ledger = PurchaseLedger()
    for entry in snapshot.customers:
        customer = directory.find_or_create(entry.name, entry.contact)
        for saved in entry.purchases:
            lines = []
            for line in saved.lines:
                product = catalog.lookup(line.product_id)
                if product is None:
                    raise ValidationError(
                        f"Invoice {saved.invoice_id} references unknown product "
                        f"{line.product_id}",
                        details={"invoice_id": saved.invoice_id},
                    )
                lines.append(
                    InvoiceLine(
                        product=product,
                        product_id=line.product_id,
                        unit_price=line.unit_price,
                        quantity=line.quantity,
                    )
                )
            purchase = Purchase(
                invoice_id=saved.invoice_id,
                created_at=saved.created_at,
                customer=customer,
                lines=tuple(lines),
                subtotal=saved.subtotal,
                total_with_tax=saved.total_with_tax,
            )
            ledger.adopt(purchase)
            customer.add_purchase(purchase)

    return StoreContext(
        config,
        catalog=catalog,
        directory=directory,
        ledger=ledger,
        seed=False,
    )


def save_snapshot(path: Path, snapshot: StoreSnapshot) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")
    tmp_path.replace(path)
    logger.debug("Saved snapshot to %s", path)


def load_snapshot(path: Path) -> StoreSnapshot:
    return StoreSnapshot.model_validate_json(path.read_text(encoding="utf-8"))
