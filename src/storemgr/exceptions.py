"""Error taxonomy for store operations."""

from typing import Any, Dict, Optional


class StoreError(Exception):
    """Error that maps to a stable API error payload."""

    default_code = "STORE_ERROR"
    default_status = 400

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code or self.default_code
        self.message = message
        self.status_code = status_code or self.default_status
        self.details = details or {}


class ValidationError(StoreError):
    """Invalid construction or restock parameters. State is left untouched."""

    default_code = "VALIDATION_ERROR"
    default_status = 400


class InsufficientStockError(StoreError):
    """Sale quantity exceeds current stock."""

    default_code = "INSUFFICIENT_STOCK"
    default_status = 409


class ProductNotFoundError(StoreError):
    default_code = "PRODUCT_NOT_FOUND"
    default_status = 404


class CustomerNotFoundError(StoreError):
    default_code = "CUSTOMER_NOT_FOUND"
    default_status = 404


class InvoiceNotFoundError(StoreError):
    default_code = "INVOICE_NOT_FOUND"
    default_status = 404


class InvariantViolationError(StoreError):
    """Internal invariant broken (duplicate invoice id, stock out of bounds)."""

    default_code = "INVARIANT_VIOLATION"
    default_status = 500
