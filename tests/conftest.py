"""Shared test fixtures."""

from collections.abc import Generator
from pathlib import Path
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

from storemgr.api import create_app
from storemgr.catalog import ProductCatalog
from storemgr.config import StoreConfig
from storemgr.products import Product, ProductCategory
from storemgr.store import StoreContext


@pytest.fixture
def store_config(tmp_path: Path) -> StoreConfig:
    """Provide a test-owned config: no sample data, no rate limiting."""
    return StoreConfig(
        _env_file=None,
        seed_sample_data=False,
        rate_limit_enabled=False,
        state_file=tmp_path / "state.json",
    )


@pytest.fixture
def make_product() -> Callable[..., Product]:
    """Factory for valid products with overridable fields."""

    def _make(
        product_id: str = "P1",
        *,
        category: ProductCategory = ProductCategory.ELECTRONICS,
        price: str = "10.00",
        total: int = 10,
        stock: int = 5,
        name: str = "",
    ) -> Product:
        attributes = (
            {"warranty": "1 Year"}
            if category is ProductCategory.ELECTRONICS
            else {"size": "M"}
        )
        return Product.create(
            id=product_id,
            name=name or f"Product {product_id}",
            category=category,
            base_price=price,
            total_available=total,
            initial_stock=stock,
            attributes=attributes,
        )

    return _make


@pytest.fixture
def catalog() -> ProductCatalog:
    return ProductCatalog()


@pytest.fixture
def store(store_config: StoreConfig) -> StoreContext:
    return StoreContext(store_config)


@pytest.fixture
def api_test_app(store_config: StoreConfig) -> Any:
    """Create a fresh FastAPI app bound to the test config."""
    return create_app(store_config)


@pytest.fixture
def api_test_client(api_test_app: Any) -> Generator[TestClient, None, None]:
    """Create a TestClient; entering it runs the app lifespan."""
    with TestClient(api_test_app) as client:
        yield client
