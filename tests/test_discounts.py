"""Tests for the category discount policy."""

from decimal import Decimal

from storemgr.discounts import discount_for, discount_rate
from storemgr.products import ProductCategory


def test_electronics_discount_is_fifteen_percent(make_product):
    product = make_product(category=ProductCategory.ELECTRONICS, price="100")
    assert discount_for(product) == Decimal("15")


def test_clothing_discount_is_ten_percent(make_product):
    product = make_product(category=ProductCategory.CLOTHING, price="100")
    assert discount_for(product) == Decimal("10")


def test_discount_rounds_to_cents(make_product):
    product = make_product(category=ProductCategory.ELECTRONICS, price="19.99")
    assert discount_for(product) == Decimal("3.00")


def test_discount_rate_lookup():
    assert discount_rate(ProductCategory.CLOTHING) == Decimal("0.10")


def test_discount_does_not_change_price(make_product):
    product = make_product(price="100")
    discount_for(product)
    assert product.base_price == Decimal("100")
