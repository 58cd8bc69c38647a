"""Product entity and the category capability table."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, Mapping, Optional, Union

from storemgr.exceptions import InsufficientStockError, InvariantViolationError, ValidationError
from storemgr.pricing import MoneyLike, to_money


class ProductCategory(str, Enum):
    """Closed set of product categories."""

    ELECTRONICS = "Electronics"
    CLOTHING = "Clothing"

    @classmethod
    def parse(cls, value: str) -> "ProductCategory":
        """Case-insensitive lookup by category name."""
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        raise ValidationError(
            f"Unknown product category: {value}",
            details={"allowed": [m.value for m in cls]},
        )


@dataclass(frozen=True)
class CategoryProfile:
    """Per-category capabilities: discount rate and the detail attribute."""

    discount_rate: Decimal
    attribute: str
    attribute_label: str

    def format_details(self, product: "Product") -> str:
        return (
            f"[{product.category.value}] {product.name} | "
            f"{self.attribute_label}: {product.attributes.get(self.attribute, '')} | "
            f"Stock: {product.current_stock}/{product.total_available}"
        )


CATEGORY_PROFILES: Dict[ProductCategory, CategoryProfile] = {
    ProductCategory.ELECTRONICS: CategoryProfile(
        discount_rate=Decimal("0.15"),
        attribute="warranty",
        attribute_label="Warranty",
    ),
    ProductCategory.CLOTHING: CategoryProfile(
        discount_rate=Decimal("0.10"),
        attribute="size",
        attribute_label="Size",
    ),
}


def profile_for(category: ProductCategory) -> CategoryProfile:
    return CATEGORY_PROFILES[category]


@dataclass(eq=False)
class Product:
    """
    A sellable product with bounded stock.

    Invariant: 0 <= current_stock <= total_available after every mutation.
    Products compare and hash by identity so they can key invoice line maps.
    Only ProductCatalog should call the mutating methods.
    """

    id: str
    name: str
    category: ProductCategory
    base_price: Decimal
    total_available: int
    current_stock: int
    attributes: Mapping[str, str] = field(default_factory=dict)
    sales_count: int = 0

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise ValidationError("Product id must not be empty")
        if not isinstance(self.category, ProductCategory):
            self.category = ProductCategory.parse(str(self.category))
        try:
            self.base_price = to_money(self.base_price)
        except ValueError as exc:
            raise ValidationError(str(exc), details={"product_id": self.id}) from exc
        if self.base_price <= 0:
            raise ValidationError(
                "Base price must be positive", details={"product_id": self.id}
            )
        if self.total_available < 0:
            raise ValidationError(
                "Total available cannot be negative", details={"product_id": self.id}
            )
        if self.current_stock < 0:
            raise ValidationError(
                "Initial stock cannot be negative", details={"product_id": self.id}
            )
        if self.current_stock > self.total_available:
            raise ValidationError(
                "Initial stock exceeds total available",
                details={
                    "product_id": self.id,
                    "initial_stock": self.current_stock,
                    "total_available": self.total_available,
                },
            )
        if self.sales_count < 0:
            raise ValidationError(
                "Sales count cannot be negative", details={"product_id": self.id}
            )

        attribute = profile_for(self.category).attribute
        attributes = dict(self.attributes)
        if not str(attributes.get(attribute, "")).strip():
            raise ValidationError(
                f"{self.category.value} products require '{attribute}'",
                details={"product_id": self.id, "attribute": attribute},
            )
        self.attributes = attributes

    @classmethod
    def create(
        cls,
        *,
        id: str,
        name: str,
        category: Union[ProductCategory, str],
        base_price: MoneyLike,
        total_available: int,
        initial_stock: int,
        attributes: Optional[Mapping[str, str]] = None,
    ) -> "Product":
        """Build a product from registration parameters."""
        if not isinstance(category, ProductCategory):
            category = ProductCategory.parse(category)
        return cls(
            id=id,
            name=name,
            category=category,
            base_price=base_price,  # type: ignore[arg-type]
            total_available=total_available,
            current_stock=initial_stock,
            attributes=dict(attributes or {}),
        )

    @property
    def profile(self) -> CategoryProfile:
        return profile_for(self.category)

    @property
    def details(self) -> str:
        return self.profile.format_details(self)

    def restock(self, amount: int) -> None:
        if amount <= 0 or self.current_stock + amount > self.total_available:
            raise ValidationError(
                "Invalid restock amount",
                details={
                    "product_id": self.id,
                    "amount": amount,
                    "current_stock": self.current_stock,
                    "total_available": self.total_available,
                },
            )
        self.current_stock += amount

    def record_sale(self, quantity: int) -> None:
        if quantity < 0:
            raise ValidationError(
                "Sale quantity cannot be negative",
                details={"product_id": self.id, "quantity": quantity},
            )
        if quantity > self.current_stock:
            raise InsufficientStockError(
                "Insufficient stock",
                details={
                    "product_id": self.id,
                    "requested": quantity,
                    "current_stock": self.current_stock,
                },
            )
        self.current_stock -= quantity
        self.sales_count += quantity
        self._check_stock()

    def replenish(self, units: int) -> None:
        """Add stock without restock validation (policy-driven, trusted)."""
        self.current_stock += units
        self._check_stock()

    def _check_stock(self) -> None:
        if not 0 <= self.current_stock <= self.total_available:
            raise InvariantViolationError(
                "Stock out of bounds",
                details={
                    "product_id": self.id,
                    "current_stock": self.current_stock,
                    "total_available": self.total_available,
                },
            )
