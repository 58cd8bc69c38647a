"""FastAPI application exposing store operations."""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from storemgr.config import StoreConfig, get_config
from storemgr.dependencies import AppResources, get_app_config, get_store
from storemgr.exceptions import InvoiceNotFoundError, ProductNotFoundError, StoreError
from storemgr.models import (
    CustomerRequest,
    CustomerView,
    InvoiceView,
    ProductCreateRequest,
    ProductView,
    RestockRequest,
    SaleRequest,
    SaleResponse,
    TopSellerView,
)
from storemgr.store import StoreContext

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def create_app(config: Optional[StoreConfig] = None) -> FastAPI:
    """Build the API app. The store is created once, at startup."""
    app_config = config or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.storemgr_resources = AppResources(
            config=app_config,
            store=StoreContext(app_config),
        )
        logger.info("Store initialized (currency=%s)", app_config.currency)
        yield
        app.state.storemgr_resources = None

    app = FastAPI(
        title="Store Management Service",
        description="Catalog, sales and invoice ledger for a retail store",
        version=API_VERSION,
        lifespan=lifespan,
    )

    app.state.limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[app_config.rate_limit],
        enabled=app_config.rate_limit_enabled,
    )
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StoreError, store_error_handler)  # type: ignore[arg-type]

    _register_routes(app)
    return app


def _register_routes(app: FastAPI) -> None:
    # Store-backed handlers are sync so FastAPI runs them in its threadpool;
    # each holds the store lock until its response view is built.

    @app.get("/health")
    async def health_check() -> Dict[str, Any]:
        """Health check endpoint for container orchestration."""
        return {
            "status": "healthy",
            "service": "store-management",
            "version": API_VERSION,
        }

    @app.get("/products", response_model=List[ProductView])
    def list_products(store: StoreContext = Depends(get_store)) -> List[ProductView]:
        with store.lock:
            return [ProductView.from_product(p) for p in store.list_products()]

    @app.post(
        "/products",
        response_model=ProductView,
        status_code=status.HTTP_201_CREATED,
        responses={400: {"description": "Invalid product parameters"}},
    )
    def register_product(
        payload: ProductCreateRequest,
        store: StoreContext = Depends(get_store),
    ) -> ProductView:
        with store.lock:
            product = store.register_product(
                id=payload.id,
                name=payload.name,
                category=payload.category,
                base_price=payload.base_price,
                total_available=payload.total_available,
                initial_stock=payload.initial_stock,
                attributes=payload.attributes,
            )
            return ProductView.from_product(product)

    @app.get(
        "/products/{product_id}",
        response_model=ProductView,
        responses={404: {"description": "Unknown product"}},
    )
    def get_product(product_id: str, store: StoreContext = Depends(get_store)) -> ProductView:
        with store.lock:
            product = store.get_product(product_id)
            if product is None:
                raise ProductNotFoundError(
                    f"Unknown product: {product_id}", details={"product_id": product_id}
                )
            return ProductView.from_product(product)

    @app.post(
        "/products/{product_id}/restock",
        response_model=ProductView,
        responses={
            400: {"description": "Invalid restock amount"},
            404: {"description": "Unknown product"},
        },
    )
    def restock_product(
        product_id: str,
        payload: RestockRequest,
        store: StoreContext = Depends(get_store),
    ) -> ProductView:
        with store.lock:
            return ProductView.from_product(store.restock(product_id, payload.amount))

    @app.post("/customers", response_model=CustomerView)
    def find_or_create_customer(
        payload: CustomerRequest, store: StoreContext = Depends(get_store)
    ) -> CustomerView:
        with store.lock:
            customer = store.find_or_create_customer(payload.name, payload.contact)
            return CustomerView(
                name=customer.name,
                contact=customer.contact,
                purchase_count=len(customer.history),
            )

    @app.get(
        "/customers/{contact}/purchases",
        response_model=List[InvoiceView],
        responses={404: {"description": "Unknown customer"}},
    )
    def customer_history(
        contact: str,
        store: StoreContext = Depends(get_store),
        config: StoreConfig = Depends(get_app_config),
    ) -> List[InvoiceView]:
        with store.lock:
            history = store.customer_history(contact)
            return [InvoiceView.from_purchase(p, config.currency) for p in history]

    @app.post(
        "/sales",
        response_model=SaleResponse,
        responses={404: {"description": "Unknown customer and no name given"}},
    )
    def process_sale(
        payload: SaleRequest,
        store: StoreContext = Depends(get_store),
        config: StoreConfig = Depends(get_app_config),
    ) -> SaleResponse:
        """Process a cart. Unfulfillable lines are reported, not rejected."""
        with store.lock:
            result = store.process_sale(payload.contact, payload.cart, name=payload.name)
            return SaleResponse.from_result(result, config.currency)

    @app.get(
        "/invoices/{invoice_id}",
        response_model=InvoiceView,
        responses={404: {"description": "Unknown invoice"}},
    )
    def get_invoice(
        invoice_id: str,
        store: StoreContext = Depends(get_store),
        config: StoreConfig = Depends(get_app_config),
    ) -> InvoiceView:
        with store.lock:
            purchase = store.get_invoice(invoice_id)
            if purchase is None:
                raise InvoiceNotFoundError(
                    f"Unknown invoice: {invoice_id}", details={"invoice_id": invoice_id}
                )
            return InvoiceView.from_purchase(purchase, config.currency)

    @app.get("/reports/top-sellers", response_model=List[TopSellerView])
    def top_sellers(
        n: Optional[int] = Query(None, ge=0, le=100),
        store: StoreContext = Depends(get_store),
    ) -> List[TopSellerView]:
        with store.lock:
            return [TopSellerView.from_entry(e) for e in store.top_sellers(n)]


def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Rate limit exceeded handler."""
    return JSONResponse(
        status_code=429,
        content={"detail": "Rate limit exceeded. Please try again later."},
    )


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    """Map store errors to stable API error payload."""
    if exc.status_code >= 500:
        logger.error("Internal store error on %s: %s", request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.code,
                "message": exc.message,
                "details": exc.details,
            }
        },
    )


def main() -> None:
    """Run API server."""
    import uvicorn

    config = get_config()
    uvicorn.run(
        "storemgr.api:create_app",
        factory=True,
        host=config.api_host,
        port=config.api_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
