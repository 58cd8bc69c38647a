"""Tests for the customer directory and the best sellers report."""

from storemgr.customers import CustomerDirectory
from storemgr.reports import SalesReport


def test_find_or_create_returns_same_customer():
    directory = CustomerDirectory()
    first = directory.find_or_create("Alice", "a@x.com")
    second = directory.find_or_create("Alice", "a@x.com")
    assert first is second
    assert len(directory) == 1


def test_find_or_create_never_renames():
    directory = CustomerDirectory()
    directory.find_or_create("Alice", "a@x.com")
    customer = directory.find_or_create("Alicia", "a@x.com")
    assert customer.name == "Alice"


def test_get_by_contact_missing_returns_none():
    assert CustomerDirectory().get_by_contact("nobody") is None


def test_customers_are_keyed_by_contact():
    directory = CustomerDirectory()
    directory.find_or_create("Alice", "a@x.com")
    directory.find_or_create("Alice", "alice@y.com")
    assert [c.contact for c in directory] == ["a@x.com", "alice@y.com"]


def _sell(catalog, product_id, quantity):
    catalog.record_sale(product_id, quantity)


def test_top_sellers_sorted_by_sales_count(catalog, make_product):
    for product_id in ("A", "B", "C", "D"):
        catalog.register(make_product(product_id, total=100, stock=100))
    _sell(catalog, "A", 1)
    _sell(catalog, "B", 5)
    _sell(catalog, "C", 3)
    _sell(catalog, "D", 4)

    ranked = SalesReport(catalog).top_sellers(3)

    assert [(e.product.id, e.sales_count) for e in ranked] == [("B", 5), ("D", 4), ("C", 3)]


def test_top_sellers_ties_keep_catalog_order(catalog, make_product):
    for product_id in ("X", "Y", "Z"):
        catalog.register(make_product(product_id, total=100, stock=100))
    _sell(catalog, "Z", 2)
    _sell(catalog, "Y", 2)
    _sell(catalog, "X", 1)

    ranked = SalesReport(catalog).top_sellers(3)

    assert [e.product.id for e in ranked] == ["Y", "Z", "X"]


def test_top_sellers_handles_small_and_zero_n(catalog, make_product):
    catalog.register(make_product("A"))
    report = SalesReport(catalog)
    assert report.top_sellers(0) == []
    assert [e.product.id for e in report.top_sellers(10)] == ["A"]


def test_top_sellers_does_not_mutate(catalog, make_product):
    catalog.register(make_product("A", stock=5))
    SalesReport(catalog).top_sellers(3)
    assert catalog.lookup("A").current_stock == 5
