# src/retail_sales/domain/exceptions/sales.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Sales domain exceptions.

Purpose:
    Field-attributed error taxonomy for the discount calculator, the sale
    aggregate, the validation rule sets, and the sales use cases.

Layer:
    domain/exceptions

Notes:
    - Every error carries a stable ``code``.
    - Input errors name the offending ``field``.
    - ``ValidationFailed`` carries every violated rule, never just the first.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from retail_sales.domain.entities.validation import RuleViolation
from retail_sales.domain.exceptions.base import DomainError


class InvalidInput(DomainError):
    """Raised when a required field is empty, missing, or malformed.

    Attributes:
        field:
            Name of the offending input field.
    """

    code = "INVALID_INPUT"

    def __init__(
        self,
        message: str,
        *,
        field: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: Human-readable description of the problem.
            field: Name of the offending input field.
            details: Optional structured diagnostic payload.
        """
        super().__init__(message, details={"field": field, **(details or {})})
        self.field = field


class EmptySaleId(InvalidInput):
    """Raised when a sale item is created without an owning sale id."""

    code = "EMPTY_SALE_ID"

    def __init__(self) -> None:
        """Initialize the error with its fixed message and field."""
        super().__init__("Sale ID cannot be empty.", field="sale_id")


class MissingProduct(InvalidInput):
    """Raised when a sale item is created without a product."""

    code = "MISSING_PRODUCT"

    def __init__(self) -> None:
        """Initialize the error with its fixed message and field."""
        super().__init__("Product cannot be null.", field="product")


class InactiveEntity(InvalidInput):
    """Raised when a sale references an inactive customer or branch."""

    code = "INACTIVE_ENTITY"


class ProductUnavailable(InvalidInput):
    """Raised when an inactive product is added to a sale."""

    code = "PRODUCT_UNAVAILABLE"


class DuplicateSaleNumber(InvalidInput):
    """Raised when a sale number is already taken."""

    code = "DUPLICATE_SALE_NUMBER"


class InvalidQuantity(InvalidInput):
    """Raised when a quantity is not a positive integer within limits."""

    code = "INVALID_QUANTITY"

    def __init__(
        self,
        message: str,
        *,
        field: str = "quantity",
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: Human-readable description of the problem.
            field: Name of the offending field (defaults to ``quantity``).
            details: Optional structured diagnostic payload.
        """
        super().__init__(message, field=field, details=details)


class QuantityLimitExceeded(InvalidQuantity):
    """Raised when a single line asks for more than the per-product limit."""

    code = "QUANTITY_LIMIT_EXCEEDED"


class ProductQuantityCapExceeded(QuantityLimitExceeded):
    """Raised when the summed quantity of one product in a sale exceeds the limit.

    Attributes:
        product_id:
            Identifier of the product whose cap would be exceeded.
        existing_quantity:
            Units of the product already held by non-cancelled items.
        requested_quantity:
            Units the rejected operation asked for.
    """

    code = "PRODUCT_QUANTITY_CAP_EXCEEDED"

    def __init__(
        self,
        *,
        product_id: Any,
        existing_quantity: int,
        requested_quantity: int,
        limit: int,
    ) -> None:
        """Initialize the error.

        Args:
            product_id: Identifier of the product.
            existing_quantity: Units already held by non-cancelled items.
            requested_quantity: Units requested by the rejected operation.
            limit: The per-product cap that would be exceeded.
        """
        super().__init__(
            f"Cannot sell more than {limit} units of the same product in a single sale.",
            details={
                "product_id": str(product_id),
                "existing_quantity": existing_quantity,
                "requested_quantity": requested_quantity,
                "limit": limit,
            },
        )
        self.product_id = product_id
        self.existing_quantity = existing_quantity
        self.requested_quantity = requested_quantity


class DistinctProductLimitExceeded(InvalidInput):
    """Raised when a sale would hold more distinct active products than allowed."""

    code = "DISTINCT_PRODUCT_LIMIT_EXCEEDED"

    def __init__(self, *, limit: int) -> None:
        """Initialize the error.

        Args:
            limit: The maximum number of distinct active products per sale.
        """
        super().__init__(
            f"Cannot add more than {limit} different products to a single sale.",
            field="items",
            details={"limit": limit},
        )
        self.limit = limit


class InvalidPrice(InvalidInput):
    """Raised when a unit price is not positive or exceeds the price cap."""

    code = "INVALID_PRICE"

    def __init__(
        self,
        message: str,
        *,
        field: str = "unit_price",
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: Human-readable description of the problem.
            field: Name of the offending field (defaults to ``unit_price``).
            details: Optional structured diagnostic payload.
        """
        super().__init__(message, field=field, details=details)


class TerminalStateError(DomainError):
    """Raised when an operation targets an entity in a terminal state."""

    code = "TERMINAL_STATE"


class ItemCancelled(TerminalStateError):
    """Raised when a cancelled sale item is mutated."""

    code = "ITEM_CANCELLED"


class SaleAlreadyCancelled(TerminalStateError):
    """Raised when a cancelled sale is mutated or cancelled again."""

    code = "SALE_ALREADY_CANCELLED"


class EntityNotFound(DomainError):
    """Raised when a sale, item, product, customer, or branch cannot be found."""

    code = "NOT_FOUND"


class InsufficientStock(DomainError):
    """Raised when a product does not hold enough stock for a request."""

    code = "INSUFFICIENT_STOCK"


class ValidationFailed(DomainError):
    """Raised when one or more validation rules are violated.

    Attributes:
        violations:
            Every violated rule, each tagged with its field and message.
    """

    code = "VALIDATION_FAILED"

    def __init__(self, violations: Iterable[RuleViolation], message: str = "") -> None:
        """Initialize the error.

        Args:
            violations: Violated rules, in evaluation order.
            message: Optional summary; defaults to a count of the violations.
        """
        collected = tuple(violations)
        summary = message or f"Validation failed with {len(collected)} violation(s)."
        super().__init__(
            summary,
            details={
                "violations": [
                    {"field": v.field, "message": v.message, "rule_id": v.rule_id}
                    for v in collected
                ]
            },
        )
        self.violations: tuple[RuleViolation, ...] = collected

    @property
    def fields(self) -> tuple[str, ...]:
        """Return the offending field names in evaluation order."""
        return tuple(v.field for v in self.violations)


__all__ = [
    "DistinctProductLimitExceeded",
    "DuplicateSaleNumber",
    "EmptySaleId",
    "EntityNotFound",
    "InactiveEntity",
    "InsufficientStock",
    "InvalidInput",
    "InvalidPrice",
    "InvalidQuantity",
    "ItemCancelled",
    "MissingProduct",
    "ProductQuantityCapExceeded",
    "ProductUnavailable",
    "QuantityLimitExceeded",
    "SaleAlreadyCancelled",
    "TerminalStateError",
    "ValidationFailed",
]
