"""Pydantic request/response models for the HTTP API."""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, PositiveInt

from storemgr.discounts import discount_for
from storemgr.ledger import Purchase
from storemgr.products import Product, ProductCategory
from storemgr.reports import TopSeller
from storemgr.sales import LineOutcome, SaleResult


class ProductCreateRequest(BaseModel):
    """Registration payload for a new product."""

    id: str = Field(..., min_length=1, description="Unique product id")
    name: str = Field(..., min_length=1)
    category: ProductCategory
    base_price: Decimal = Field(..., description="Unit price, must be positive")
    total_available: int = Field(..., description="Stock capacity")
    initial_stock: int
    attributes: Dict[str, str] = Field(
        default_factory=dict,
        description="Category attributes (warranty for Electronics, size for Clothing)",
    )


class RestockRequest(BaseModel):
    amount: int


class ProductView(BaseModel):
    id: str
    name: str
    category: ProductCategory
    base_price: Decimal
    discount: Decimal
    total_available: int
    current_stock: int
    sales_count: int
    attributes: Dict[str, str]
    details: str

    @classmethod
    def from_product(cls, product: Product) -> "ProductView":
        return cls(
            id=product.id,
            name=product.name,
            category=product.category,
            base_price=product.base_price,
            discount=discount_for(product),
            total_available=product.total_available,
            current_stock=product.current_stock,
            sales_count=product.sales_count,
            attributes=dict(product.attributes),
            details=product.details,
        )


class CustomerRequest(BaseModel):
    name: str = Field(..., min_length=1)
    contact: str = Field(..., min_length=1)


class CustomerView(BaseModel):
    name: str
    contact: str
    purchase_count: int


class InvoiceLineView(BaseModel):
    product_id: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class InvoiceView(BaseModel):
    invoice_id: str
    created_at: datetime
    customer_name: str
    customer_contact: str
    currency: str
    lines: List[InvoiceLineView]
    subtotal: Decimal
    tax: Decimal
    total_with_tax: Decimal

    @classmethod
    def from_purchase(cls, purchase: Purchase, currency: str) -> "InvoiceView":
        return cls(
            invoice_id=purchase.invoice_id,
            created_at=purchase.created_at,
            customer_name=purchase.customer.name,
            customer_contact=purchase.customer.contact,
            currency=currency,
            lines=[
                InvoiceLineView(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    line_total=line.line_total,
                )
                for line in purchase.lines
            ],
            subtotal=purchase.subtotal,
            tax=purchase.tax,
            total_with_tax=purchase.total_with_tax,
        )


class SaleRequest(BaseModel):
    """Cart submission. A name creates the customer on first sale."""

    contact: str = Field(..., min_length=1)
    name: Optional[str] = None
    cart: Dict[str, PositiveInt] = Field(
        default_factory=dict, description="product id -> requested quantity"
    )


class SaleLineView(BaseModel):
    product_id: str
    quantity: int
    outcome: LineOutcome


class SaleResponse(BaseModel):
    status: Literal["completed", "partial", "no_op"]
    lines: List[SaleLineView]
    invoice: Optional[InvoiceView] = None

    @classmethod
    def from_result(cls, result: SaleResult, currency: str) -> "SaleResponse":
        return cls(
            status=result.status,  # type: ignore[arg-type]
            lines=[
                SaleLineView(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    outcome=line.outcome,
                )
                for line in result.lines
            ],
            invoice=(
                InvoiceView.from_purchase(result.purchase, currency)
                if result.purchase is not None
                else None
            ),
        )


class TopSellerView(BaseModel):
    product_id: str
    name: str
    details: str
    sales_count: int

    @classmethod
    def from_entry(cls, entry: TopSeller) -> "TopSellerView":
        return cls(
            product_id=entry.product.id,
            name=entry.product.name,
            details=entry.product.details,
            sales_count=entry.sales_count,
        )
