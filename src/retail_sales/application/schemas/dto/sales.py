# src/retail_sales/application/schemas/dto/sales.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Application DTOs for sale workflows.

Purpose:
    Commands accepted by the sales use cases and the read-only views they
    return. Views are built from the aggregate by mapping functions; entities
    never expose DTOs themselves.

Layer:
    application/schemas/dto

Notes:
    Commands only carry shape (types, unknown fields rejected). Business
    checks such as quantity limits live in the command rule sets so that
    every violation is reported with its field.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from retail_sales.application.schemas.dto.base import BaseDTO
from retail_sales.domain.entities.sale import Sale
from retail_sales.domain.entities.sale_item import SaleItem
from retail_sales.domain.enums.sales import SaleStatus

# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


class SaleItemRequest(BaseDTO):
    """One initial line of a new sale."""

    product_id: UUID
    quantity: int
    unit_price: Decimal | None = None


class CreateSaleCommand(BaseDTO):
    """Open a new sale.

    Attributes:
        customer_id: Customer the sale is made to.
        branch_id: Branch the sale is made at.
        sale_number: Optional explicit number; generated when omitted.
        sale_date: Optional business date; defaults to now.
        items: Optional initial lines, added in the same transaction.
    """

    customer_id: UUID
    branch_id: UUID
    sale_number: str | None = None
    sale_date: datetime | None = None
    items: tuple[SaleItemRequest, ...] = ()


class AddSaleItemCommand(BaseDTO):
    """Add a product line to a sale."""

    sale_id: UUID
    product_id: UUID
    quantity: int
    unit_price: Decimal | None = None


class UpdateSaleItemQuantityCommand(BaseDTO):
    """Change the quantity of an existing line."""

    sale_id: UUID
    item_id: UUID
    quantity: int


class RemoveSaleItemCommand(BaseDTO):
    """Cancel one line of a sale and return its units to stock."""

    sale_id: UUID
    item_id: UUID
    reason: str | None = None


class CancelSaleCommand(BaseDTO):
    """Cancel a whole sale."""

    sale_id: UUID
    reason: str | None = None


class GetSaleQuery(BaseDTO):
    """Fetch one sale by id."""

    sale_id: UUID


# --------------------------------------------------------------------------- #
# Views
# --------------------------------------------------------------------------- #


class SaleItemDTO(BaseDTO):
    """Read-only view of a sale line."""

    id: UUID
    product_id: UUID
    product_name: str | None
    quantity: int
    unit_price: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    total_price: Decimal
    is_cancelled: bool
    created_at: datetime
    updated_at: datetime


class SaleDTO(BaseDTO):
    """Read-only view of a sale and its lines."""

    id: UUID
    sale_number: str
    customer_id: UUID | None
    customer_name: str | None
    branch_id: UUID | None
    branch_name: str | None
    sale_date: datetime
    status: SaleStatus
    is_cancelled: bool
    subtotal: Decimal
    total_discount: Decimal
    total_amount: Decimal
    active_item_count: int
    items: tuple[SaleItemDTO, ...]
    created_at: datetime
    updated_at: datetime


class AddSaleItemResultDTO(BaseDTO):
    """Outcome of adding a line."""

    sale: SaleDTO
    item: SaleItemDTO


class UpdateSaleItemQuantityResultDTO(BaseDTO):
    """Outcome of changing a line quantity."""

    sale: SaleDTO
    item: SaleItemDTO
    previous_quantity: int


class RemoveSaleItemResultDTO(BaseDTO):
    """Outcome of cancelling a line."""

    sale: SaleDTO
    item: SaleItemDTO
    restocked_quantity: int


class CancelSaleResultDTO(BaseDTO):
    """Outcome of cancelling a sale, with its pre-cancellation figures."""

    sale: SaleDTO
    original_total_amount: Decimal
    original_item_count: int
    cancellation_reason: str | None


# --------------------------------------------------------------------------- #
# Mapping
# --------------------------------------------------------------------------- #


def sale_item_to_dto(item: SaleItem) -> SaleItemDTO:
    """Map a sale line to its view."""
    return SaleItemDTO(
        id=item.id,
        product_id=item.product_id,
        product_name=item.product_name,
        quantity=item.quantity,
        unit_price=item.unit_price,
        discount_percent=item.discount_percent,
        discount_amount=item.get_discount_amount(),
        total_price=item.total_price,
        is_cancelled=item.is_cancelled,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def sale_to_dto(sale: Sale) -> SaleDTO:
    """Map a sale aggregate to its view."""
    customer = sale.customer
    branch = sale.branch
    return SaleDTO(
        id=sale.id,
        sale_number=sale.sale_number,
        customer_id=customer.id if customer is not None else None,
        customer_name=customer.name if customer is not None else None,
        branch_id=branch.id if branch is not None else None,
        branch_name=branch.name if branch is not None else None,
        sale_date=sale.sale_date,
        status=sale.status,
        is_cancelled=sale.is_cancelled,
        subtotal=sale.get_subtotal(),
        total_discount=sale.get_total_discount(),
        total_amount=sale.total_amount,
        active_item_count=sale.get_active_item_count(),
        items=tuple(sale_item_to_dto(item) for item in sale.items),
        created_at=sale.created_at,
        updated_at=sale.updated_at,
    )


__all__ = [
    "AddSaleItemCommand",
    "AddSaleItemResultDTO",
    "CancelSaleCommand",
    "CancelSaleResultDTO",
    "CreateSaleCommand",
    "GetSaleQuery",
    "RemoveSaleItemCommand",
    "RemoveSaleItemResultDTO",
    "SaleDTO",
    "SaleItemDTO",
    "SaleItemRequest",
    "UpdateSaleItemQuantityCommand",
    "UpdateSaleItemQuantityResultDTO",
    "sale_item_to_dto",
    "sale_to_dto",
]
