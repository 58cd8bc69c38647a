"""Money helpers and invoice total formulas."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Tuple, Union

VAT_RATE = Decimal("0.15")
CENT = Decimal("0.01")

MoneyLike = Union[Decimal, int, float, str]


@dataclass(frozen=True)
class InvoiceTotals:
    """Computed totals for one invoice."""

    subtotal: Decimal
    tax: Decimal
    total_with_tax: Decimal


def to_money(value: MoneyLike) -> Decimal:
    """Convert a price-like value to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"not a money amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError("money amount must be finite")
    return amount


def round_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def compute_invoice_totals(lines: Iterable[Tuple[Decimal, int]]) -> InvoiceTotals:
    """Compute subtotal and VAT-inclusive total from (unit_price, quantity) pairs."""
    subtotal = sum((to_money(price) * qty for price, qty in lines), Decimal("0"))
    total = subtotal * (1 + VAT_RATE)
    return InvoiceTotals(
        subtotal=round_cents(subtotal),
        tax=round_cents(total - subtotal),
        total_with_tax=round_cents(total),
    )
