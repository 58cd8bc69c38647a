"""Invoices (purchases) and the ledger that issues them."""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from types import MappingProxyType
from typing import Callable, Dict, Iterable, Mapping, Optional, Tuple

from storemgr.customers import Customer
from storemgr.exceptions import InvariantViolationError
from storemgr.pricing import compute_invoice_totals
from storemgr.products import Product

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvoiceLine:
    """One invoice line with the unit price captured at invoice time."""

    product: Product = field(compare=False, repr=False)
    product_id: str
    unit_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class Purchase:
    """Immutable record of a completed sale."""

    invoice_id: str
    created_at: datetime
    customer: Customer = field(compare=False, repr=False)
    lines: Tuple[InvoiceLine, ...]
    subtotal: Decimal
    total_with_tax: Decimal

    @property
    def items(self) -> Mapping[Product, int]:
        """Read-only ordered view of product -> quantity."""
        return MappingProxyType({line.product: line.quantity for line in self.lines})

    @property
    def tax(self) -> Decimal:
        return self.total_with_tax - self.subtotal


class InvoiceIdGenerator:
    """Monotonic invoice ids: INV-<utc timestamp>-<sequence>."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def __call__(self, now: datetime) -> str:
        with self._lock:
            seq = next(self._counter)
        return f"INV-{now.strftime('%Y%m%d%H%M%S')}-{seq:06d}"

    def advance_past(self, invoice_id: str) -> None:
        """Continue numbering after a restored invoice id."""
        try:
            seq = int(invoice_id.rsplit("-", 1)[-1])
        except ValueError:
            return
        with self._lock:
            current = next(self._counter)
            self._counter = itertools.count(max(current, seq + 1))


# Shared by every ledger in the process so ids stay unique across stores.
_process_invoice_ids = InvoiceIdGenerator()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PurchaseLedger:
    """Builds immutable purchases and keeps every issued invoice id unique."""

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = _utcnow,
        id_generator: Optional[Callable[[datetime], str]] = None,
    ) -> None:
        self._clock = clock
        self._id_generator = id_generator or _process_invoice_ids
        self._invoices: Dict[str, Purchase] = {}

    def __len__(self) -> int:
        return len(self._invoices)

    def create_invoice(
        self, customer: Customer, line_items: Iterable[Tuple[Product, int]]
    ) -> Purchase:
        """Draft and record a purchase in one step. Does not touch stock."""
        purchase = self.draft_invoice(customer, line_items)
        self.record(purchase)
        return purchase

    def draft_invoice(
        self, customer: Customer, line_items: Iterable[Tuple[Product, int]]
    ) -> Purchase:
        """Build a purchase priced at each product's current base price.

        Nothing is stored until record() is called.
        """
        lines = tuple(
            InvoiceLine(
                product=product,
                product_id=product.id,
                unit_price=product.base_price,
                quantity=quantity,
            )
            for product, quantity in line_items
        )
        totals = compute_invoice_totals(
            (line.unit_price, line.quantity) for line in lines
        )
        now = self._clock()
        return Purchase(
            invoice_id=self._id_generator(now),
            created_at=now,
            customer=customer,
            lines=lines,
            subtotal=totals.subtotal,
            total_with_tax=totals.total_with_tax,
        )

    def record(self, purchase: Purchase) -> None:
        self._store(purchase)
        logger.debug(
            "Issued invoice %s for %s: subtotal=%s total=%s",
            purchase.invoice_id,
            purchase.customer.contact,
            purchase.subtotal,
            purchase.total_with_tax,
        )

    def adopt(self, purchase: Purchase) -> None:
        """Register a purchase built elsewhere (e.g. restored from a snapshot)."""
        self._store(purchase)
        if isinstance(self._id_generator, InvoiceIdGenerator):
            self._id_generator.advance_past(purchase.invoice_id)

    def get(self, invoice_id: str) -> Optional[Purchase]:
        return self._invoices.get(invoice_id)

    def _store(self, purchase: Purchase) -> None:
        if purchase.invoice_id in self._invoices:
            raise InvariantViolationError(
                f"Duplicate invoice id: {purchase.invoice_id}",
                details={"invoice_id": purchase.invoice_id},
            )
        self._invoices[purchase.invoice_id] = purchase
