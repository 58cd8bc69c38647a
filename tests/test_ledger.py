"""Tests for invoice construction and totals."""

from dataclasses import FrozenInstanceError
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from storemgr.customers import Customer
from storemgr.exceptions import InvariantViolationError
from storemgr.ledger import InvoiceIdGenerator, PurchaseLedger
from storemgr.pricing import compute_invoice_totals

FIXED_NOW = datetime(2026, 3, 1, 12, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def ledger() -> PurchaseLedger:
    return PurchaseLedger(clock=lambda: FIXED_NOW)


@pytest.fixture
def customer() -> Customer:
    return Customer(name="Alice", contact="a@x.com")


def test_invoice_total_includes_fifteen_percent_vat(ledger, customer, make_product):
    product_a = make_product("A", price="10")
    product_b = make_product("B", price="5")

    purchase = ledger.create_invoice(customer, [(product_a, 2), (product_b, 1)])

    assert purchase.subtotal == Decimal("25.00")
    assert purchase.total_with_tax == Decimal("28.75")
    assert purchase.tax == Decimal("3.75")


def test_invoice_lines_keep_order_and_quantities(ledger, customer, make_product):
    product_b = make_product("B")
    product_a = make_product("A")

    purchase = ledger.create_invoice(customer, [(product_b, 3), (product_a, 1)])

    assert [line.product_id for line in purchase.lines] == ["B", "A"]
    assert list(purchase.items.items()) == [(product_b, 3), (product_a, 1)]
    assert purchase.customer is customer
    assert purchase.created_at == FIXED_NOW


def test_invoice_does_not_touch_stock(ledger, customer, make_product):
    product = make_product(stock=5)
    ledger.create_invoice(customer, [(product, 2)])
    assert product.current_stock == 5
    assert product.sales_count == 0


def test_purchase_is_immutable(ledger, customer, make_product):
    purchase = ledger.create_invoice(customer, [(make_product(), 1)])
    with pytest.raises(FrozenInstanceError):
        purchase.total_with_tax = Decimal("0")  # type: ignore[misc]
    with pytest.raises(TypeError):
        purchase.items[make_product()] = 4  # type: ignore[index]


def test_later_price_change_does_not_alter_invoice(ledger, customer, make_product):
    product = make_product(price="10.00")
    purchase = ledger.create_invoice(customer, [(product, 2)])

    product.base_price = Decimal("99.00")

    assert purchase.lines[0].unit_price == Decimal("10.00")
    assert purchase.lines[0].line_total == Decimal("20.00")
    assert purchase.total_with_tax == Decimal("23.00")


def test_invoice_ids_are_unique_under_rapid_calls(ledger, customer, make_product):
    product = make_product()
    ids = {ledger.create_invoice(customer, [(product, 1)]).invoice_id for _ in range(500)}
    assert len(ids) == 500
    assert len(ledger) == 500


def test_invoice_id_format():
    generator = InvoiceIdGenerator()
    assert generator(FIXED_NOW) == "INV-20260301123000-000001"
    assert generator(FIXED_NOW) == "INV-20260301123000-000002"


def test_get_returns_issued_invoice(ledger, customer, make_product):
    purchase = ledger.create_invoice(customer, [(make_product(), 1)])
    assert ledger.get(purchase.invoice_id) is purchase
    assert ledger.get("INV-missing") is None


def test_duplicate_invoice_id_is_an_invariant_violation(customer, make_product):
    ledger = PurchaseLedger(clock=lambda: FIXED_NOW, id_generator=lambda now: "INV-FIXED")
    ledger.create_invoice(customer, [(make_product(), 1)])
    with pytest.raises(InvariantViolationError):
        ledger.create_invoice(customer, [(make_product(), 1)])


def test_adopt_advances_generator_past_restored_ids(customer, make_product):
    ledger = PurchaseLedger(clock=lambda: FIXED_NOW, id_generator=InvoiceIdGenerator())
    first = ledger.create_invoice(customer, [(make_product(), 1)])

    restored = PurchaseLedger(clock=lambda: FIXED_NOW, id_generator=InvoiceIdGenerator())
    restored.adopt(first)
    second = restored.create_invoice(customer, [(make_product(), 1)])

    assert first.invoice_id.endswith("-000001")
    assert second.invoice_id.endswith("-000002")


def test_compute_invoice_totals_rounds_half_up():
    totals = compute_invoice_totals([(Decimal("0.03"), 1)])
    assert totals.subtotal == Decimal("0.03")
    # 0.03 * 1.15 = 0.0345
    assert totals.total_with_tax == Decimal("0.03")

    totals = compute_invoice_totals([(Decimal("0.10"), 1)])
    # 0.10 * 1.15 = 0.115
    assert totals.total_with_tax == Decimal("0.12")


def test_compute_invoice_totals_empty():
    totals = compute_invoice_totals([])
    assert totals.subtotal == Decimal("0.00")
    assert totals.total_with_tax == Decimal("0.00")


def test_ledgers_share_one_invoice_sequence(customer, make_product):
    first = PurchaseLedger(clock=lambda: FIXED_NOW)
    second = PurchaseLedger(clock=lambda: FIXED_NOW)

    a = first.create_invoice(customer, [(make_product(), 1)])
    b = second.create_invoice(customer, [(make_product(), 1)])

    assert a.invoice_id != b.invoice_id


def test_draft_invoice_is_not_recorded(ledger, customer, make_product):
    purchase = ledger.draft_invoice(customer, [(make_product(), 1)])
    assert len(ledger) == 0
    assert ledger.get(purchase.invoice_id) is None

    ledger.record(purchase)
    assert ledger.get(purchase.invoice_id) is purchase
