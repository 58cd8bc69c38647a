"""Customers and the directory that owns them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Tuple

if TYPE_CHECKING:
    from storemgr.ledger import Purchase

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Customer:
    """A buyer keyed by contact, with an append-only purchase history."""

    name: str
    contact: str
    _purchases: List["Purchase"] = field(default_factory=list, repr=False)

    @property
    def history(self) -> Tuple["Purchase", ...]:
        """Purchases in the order they were made."""
        return tuple(self._purchases)

    def add_purchase(self, purchase: "Purchase") -> None:
        self._purchases.append(purchase)


class CustomerDirectory:
    """Find-or-create registry of customers keyed by contact."""

    def __init__(self) -> None:
        self._customers: Dict[str, Customer] = {}

    def __len__(self) -> int:
        return len(self._customers)

    def __iter__(self) -> Iterator[Customer]:
        return iter(self._customers.values())

    def find_or_create(self, name: str, contact: str) -> Customer:
        """Return the customer for contact, creating it on first reference.

        The name is fixed at creation; later calls never rename the record.
        """
        customer = self._customers.get(contact)
        if customer is None:
            customer = Customer(name=name, contact=contact)
            self._customers[contact] = customer
            logger.info("Created customer %s", contact)
        return customer

    def get_by_contact(self, contact: str) -> Optional[Customer]:
        return self._customers.get(contact)
