"""Sale transaction orchestration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional, Tuple

from storemgr.catalog import ProductCatalog
from storemgr.customers import Customer
from storemgr.ledger import Purchase, PurchaseLedger
from storemgr.products import Product

logger = logging.getLogger(__name__)


class LineOutcome(str, Enum):
    """What happened to one cart line."""

    FULFILLED = "fulfilled"
    SKIPPED_NOT_FOUND = "skipped_not_found"
    SKIPPED_INSUFFICIENT_STOCK = "skipped_insufficient_stock"


@dataclass(frozen=True)
class LineResult:
    product_id: str
    quantity: int
    outcome: LineOutcome


@dataclass(frozen=True)
class SaleResult:
    """Outcome of one sale attempt: the invoice (if any) and per-line results."""

    purchase: Optional[Purchase]
    lines: Tuple[LineResult, ...]

    @property
    def is_noop(self) -> bool:
        return self.purchase is None

    @property
    def skipped(self) -> Tuple[LineResult, ...]:
        return tuple(r for r in self.lines if r.outcome is not LineOutcome.FULFILLED)

    @property
    def status(self) -> str:
        if self.purchase is None:
            return "no_op"
        return "partial" if self.skipped else "completed"


class SaleTransactionProcessor:
    """
    Applies a cart against the catalog.

    Lines for unknown products or quantities above current stock are dropped
    without raising. The remaining lines are invoiced and applied together;
    when none remain, nothing is mutated and no invoice is produced.
    """

    def __init__(self, catalog: ProductCatalog, ledger: PurchaseLedger) -> None:
        self.catalog = catalog
        self.ledger = ledger

    def process(self, customer: Customer, cart: Mapping[str, int]) -> SaleResult:
        results: List[LineResult] = []
        valid: List[Tuple[Product, int]] = []

        for product_id, quantity in cart.items():
            product = self.catalog.lookup(product_id)
            if product is None:
                outcome = LineOutcome.SKIPPED_NOT_FOUND
            elif quantity > product.current_stock:
                outcome = LineOutcome.SKIPPED_INSUFFICIENT_STOCK
            else:
                outcome = LineOutcome.FULFILLED
                valid.append((product, quantity))

            if outcome is not LineOutcome.FULFILLED:
                logger.debug(
                    "Skipping cart line %s x%s for %s: %s",
                    product_id,
                    quantity,
                    customer.contact,
                    outcome.value,
                )
            results.append(LineResult(product_id=product_id, quantity=quantity, outcome=outcome))

        if not valid:
            logger.info("No fulfillable lines for %s; sale skipped", customer.contact)
            return SaleResult(purchase=None, lines=tuple(results))

        purchase = self.ledger.draft_invoice(customer, valid)
        self.catalog.record_sales((product.id, quantity) for product, quantity in valid)
        self.ledger.record(purchase)
        customer.add_purchase(purchase)

        logger.info(
            "Sale %s for %s: %d line(s), total=%s",
            purchase.invoice_id,
            customer.contact,
            len(purchase.lines),
            purchase.total_with_tax,
        )
        return SaleResult(purchase=purchase, lines=tuple(results))
