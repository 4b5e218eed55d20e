# src/retail_sales/domain/entities/parties.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Collaborator entities referenced by sales.

Purpose:
    Model the customer, branch, and product records that a sale references.
    Their lifecycle is managed elsewhere; the sales domain only reads their
    identity and active flags and adjusts product stock.

Layer:
    domain/entities
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from retail_sales.domain.exceptions.sales import (
    InsufficientStock,
    InvalidInput,
    InvalidQuantity,
)

__all__ = ["Branch", "Customer", "Product"]


@dataclass(frozen=True, slots=True)
class Customer:
    """Customer a sale is made to.

    Attributes:
        id:
            Stable customer identifier.
        name:
            Display name.
        is_active:
            False when the customer may no longer buy.
    """

    id: UUID
    name: str
    is_active: bool = True

    def __post_init__(self) -> None:
        """Enforce basic invariants for customers."""
        if not self.name.strip():
            raise InvalidInput("Customer name is required.", field="customer.name")


@dataclass(frozen=True, slots=True)
class Branch:
    """Branch (store) a sale is made at.

    Attributes:
        id:
            Stable branch identifier.
        name:
            Display name.
        is_active:
            False when the branch no longer trades.
    """

    id: UUID
    name: str
    is_active: bool = True

    def __post_init__(self) -> None:
        """Enforce basic invariants for branches."""
        if not self.name.strip():
            raise InvalidInput("Branch name is required.", field="branch.name")


class Product:
    """Product sold through sale items.

    Product is shared between sales, so it is a mutable entity rather than a
    value object: stock moves as items are added and cancelled.

    Attributes:
        id:
            Stable product identifier.
        name:
            Display name.
        price:
            Current unit price.
        stock_quantity:
            Units currently in stock.
        is_active:
            False when the product is withdrawn from sale.
    """

    __slots__ = ("id", "is_active", "name", "price", "stock_quantity")

    def __init__(
        self,
        *,
        id: UUID,  # noqa: A002
        name: str,
        price: Decimal,
        stock_quantity: int = 0,
        is_active: bool = True,
    ) -> None:
        """Initialize a product.

        Args:
            id: Stable product identifier.
            name: Display name.
            price: Current unit price.
            stock_quantity: Units currently in stock (non-negative).
            is_active: Whether the product may be sold.
        """
        if stock_quantity < 0:
            raise InvalidQuantity(
                "Stock quantity cannot be negative.", field="product.stock_quantity"
            )
        self.id = id
        self.name = name
        self.price = Decimal(price)
        self.stock_quantity = stock_quantity
        self.is_active = is_active

    def __repr__(self) -> str:
        return (
            f"Product(id={self.id!s}, name={self.name!r}, price={self.price}, "
            f"stock_quantity={self.stock_quantity}, is_active={self.is_active})"
        )

    def has_stock(self, quantity: int) -> bool:
        """Return True when at least ``quantity`` units are in stock."""
        return self.stock_quantity >= quantity

    def is_available_for_sale(self) -> bool:
        """Return True when the product is active and has stock."""
        return self.is_active and self.stock_quantity > 0

    def remove_stock(self, quantity: int) -> None:
        """Take ``quantity`` units out of stock.

        Raises:
            InvalidQuantity: If ``quantity`` is not positive.
            InsufficientStock: If fewer than ``quantity`` units are in stock.
        """
        if quantity <= 0:
            raise InvalidQuantity("Quantity must be greater than zero.")
        if not self.has_stock(quantity):
            raise InsufficientStock(
                f"Insufficient stock for product {self.name}.",
                details={
                    "product_id": str(self.id),
                    "available": self.stock_quantity,
                    "requested": quantity,
                },
            )
        self.stock_quantity -= quantity

    def add_stock(self, quantity: int) -> None:
        """Return ``quantity`` units to stock.

        Raises:
            InvalidQuantity: If ``quantity`` is not positive.
        """
        if quantity <= 0:
            raise InvalidQuantity("Quantity must be greater than zero.")
        self.stock_quantity += quantity
