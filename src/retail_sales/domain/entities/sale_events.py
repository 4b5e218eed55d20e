# src/retail_sales/domain/entities/sale_events.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Sale domain events and stock adjustments.

Purpose:
    Informational records emitted by the sale aggregate. Events describe what
    happened to a sale; stock adjustments describe the inventory movement the
    caller must apply to products.

Layer:
    domain/entities

Notes:
    - Events are records, not commands. Delivery is the concern of an
      application-layer gateway.
    - The aggregate buffers both kinds of record; callers drain them with
      ``Sale.pull_events()`` and ``Sale.pull_stock_adjustments()``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from retail_sales.domain.enums.sales import SaleModificationType, StockDirection

__all__ = [
    "DomainEvent",
    "SaleCancelled",
    "SaleCreated",
    "SaleItemCancelled",
    "SaleModified",
    "StockAdjustment",
]

EVENT_VERSION = "1.0"


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True, slots=True, kw_only=True)
class DomainEvent:
    """Common envelope for sale events.

    Attributes:
        event_id:
            Unique identifier of the event instance.
        occurred_on:
            UTC timestamp at which the event was recorded.
        version:
            Payload schema version.
    """

    event_id: UUID = field(default_factory=uuid4)
    occurred_on: datetime = field(default_factory=_utcnow)
    version: str = EVENT_VERSION

    def __post_init__(self) -> None:
        """Enforce envelope invariants."""
        if self.occurred_on.tzinfo is None:
            raise ValueError("DomainEvent.occurred_on must be timezone-aware.")

    @property
    def event_type(self) -> str:
        """Return the event type name used by publishers."""
        return type(self).__name__

    def payload(self) -> dict[str, Any]:
        """Return a JSON-friendly mapping of the event fields."""
        out: dict[str, Any] = {}
        for name in self.__dataclass_fields__:  # type: ignore[attr-defined]
            value = getattr(self, name)
            if isinstance(value, UUID | Decimal):
                value = str(value)
            elif isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, SaleModificationType):
                value = value.value
            elif isinstance(value, Mapping):
                value = dict(value)
            out[name] = value
        out["event_type"] = self.event_type
        return out


@dataclass(frozen=True, slots=True, kw_only=True)
class SaleCreated(DomainEvent):
    """Emitted when a sale is opened.

    Attributes:
        sale_id:
            Identifier of the new sale.
        sale_number:
            Human-readable sale number.
        customer_id:
            Customer the sale is made to.
        branch_id:
            Branch the sale is made at.
        total_amount:
            Total at creation (always zero).
        item_count:
            Number of items at creation (always zero).
        sale_date:
            Business date of the sale.
    """

    sale_id: UUID
    sale_number: str
    customer_id: UUID
    branch_id: UUID
    total_amount: Decimal
    item_count: int
    sale_date: datetime

    def __post_init__(self) -> None:
        """Enforce envelope invariants."""
        DomainEvent.__post_init__(self)


@dataclass(frozen=True, slots=True, kw_only=True)
class SaleModified(DomainEvent):
    """Emitted when the items of a sale change.

    Attributes:
        sale_id:
            Identifier of the modified sale.
        sale_number:
            Human-readable sale number.
        modification_type:
            Kind of modification.
        details:
            Short string details (product, quantities, item id).
    """

    sale_id: UUID
    sale_number: str
    modification_type: SaleModificationType
    details: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Enforce envelope invariants."""
        DomainEvent.__post_init__(self)


@dataclass(frozen=True, slots=True, kw_only=True)
class SaleCancelled(DomainEvent):
    """Emitted when a sale is cancelled, carrying its pre-cancellation state.

    Attributes:
        sale_id:
            Identifier of the cancelled sale.
        sale_number:
            Human-readable sale number.
        customer_id:
            Customer the sale was made to.
        branch_id:
            Branch the sale was made at.
        original_total_amount:
            Sale total immediately before cancellation.
        original_item_count:
            Number of active items immediately before cancellation.
        original_sale_date:
            Business date of the sale.
        cancellation_reason:
            Optional free-text reason.
    """

    sale_id: UUID
    sale_number: str
    customer_id: UUID | None
    branch_id: UUID | None
    original_total_amount: Decimal
    original_item_count: int
    original_sale_date: datetime
    cancellation_reason: str | None = None

    def __post_init__(self) -> None:
        """Enforce snapshot invariants."""
        DomainEvent.__post_init__(self)
        if self.original_item_count < 0:
            raise ValueError("SaleCancelled.original_item_count must be >= 0.")


@dataclass(frozen=True, slots=True, kw_only=True)
class SaleItemCancelled(DomainEvent):
    """Emitted when a single item of a sale is cancelled.

    Attributes:
        item_id:
            Identifier of the cancelled item.
        sale_id:
            Identifier of the owning sale.
        sale_number:
            Human-readable sale number.
        product_id:
            Product on the cancelled line.
        product_name:
            Product display name, when known.
        quantity:
            Units on the line.
        unit_price:
            Unit price on the line.
        total_price:
            Line total immediately before cancellation.
        discount_percent:
            Discount tier applied to the line.
        cancellation_reason:
            Optional free-text reason.
    """

    item_id: UUID
    sale_id: UUID
    sale_number: str
    product_id: UUID
    product_name: str | None
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    discount_percent: Decimal
    cancellation_reason: str | None = None

    def __post_init__(self) -> None:
        """Enforce envelope invariants."""
        DomainEvent.__post_init__(self)


@dataclass(frozen=True, slots=True)
class StockAdjustment:
    """Inventory movement requested by the sale aggregate.

    Attributes:
        product_id:
            Product whose stock must move.
        quantity:
            Number of units to move (always positive).
        direction:
            ``DECREASE`` when units leave stock, ``INCREASE`` when they return.
    """

    product_id: UUID
    quantity: int
    direction: StockDirection

    def __post_init__(self) -> None:
        """Enforce stock adjustment invariants."""
        if self.quantity <= 0:
            raise ValueError("StockAdjustment.quantity must be positive.")
