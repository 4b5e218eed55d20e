# src/retail_sales/domain/entities/sale_snapshot.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Read-only sale projections.

Purpose:
    Immutable views of a sale and its items. Snapshots are what the
    validation rule sets evaluate, what repositories persist, and what
    outer layers map into DTOs.

Layer:
    domain/entities

Notes:
    Snapshot constructors accept any state, including state that breaks the
    sale invariants. Judging that state is the job of the validation rules.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from retail_sales.domain.enums.sales import SaleStatus

if TYPE_CHECKING:
    from retail_sales.domain.entities.sale import Sale
    from retail_sales.domain.entities.sale_item import SaleItem

__all__ = [
    "PartyRef",
    "SaleItemSnapshot",
    "SaleSnapshot",
    "snapshot_sale",
    "snapshot_sale_item",
]


@dataclass(frozen=True, slots=True)
class PartyRef:
    """Reference to a customer or branch as captured on a sale.

    Attributes:
        id:
            Identifier of the referenced customer or branch.
        name:
            Display name at capture time.
        is_active:
            Active flag at capture time.
    """

    id: UUID
    name: str
    is_active: bool

    def __post_init__(self) -> None:
        """No-op hook; references are validated by the sale rule set."""
        return


@dataclass(frozen=True, slots=True)
class SaleItemSnapshot:
    """Immutable view of a sale item.

    Attributes:
        id:
            Item identifier.
        sale_id:
            Owning sale identifier.
        product_id:
            Product identifier.
        product_name:
            Product display name, when known.
        quantity:
            Units on the line.
        unit_price:
            Price per unit.
        discount_percent:
            Discount tier percentage.
        total_price:
            Rounded discounted line total.
        is_cancelled:
            Cancellation flag.
        created_at:
            Creation timestamp.
        updated_at:
            Last mutation timestamp.
    """

    id: UUID
    sale_id: UUID
    product_id: UUID
    product_name: str | None
    quantity: int
    unit_price: Decimal
    discount_percent: Decimal
    total_price: Decimal
    is_cancelled: bool
    created_at: datetime
    updated_at: datetime

    def __post_init__(self) -> None:
        """No-op hook; item state is judged by the sale item rule set."""
        return


@dataclass(frozen=True, slots=True)
class SaleSnapshot:
    """Immutable view of a sale and all of its items.

    Attributes:
        id:
            Sale identifier.
        sale_number:
            Human-readable sale number.
        customer:
            Customer reference, or None when missing.
        branch:
            Branch reference, or None when missing.
        sale_date:
            Business date of the sale.
        total_amount:
            Stored sale total.
        is_cancelled:
            Cancellation flag.
        items:
            Item snapshots in insertion order, cancelled ones included.
        created_at:
            Creation timestamp.
        updated_at:
            Last mutation timestamp.
    """

    id: UUID
    sale_number: str
    customer: PartyRef | None
    branch: PartyRef | None
    sale_date: datetime
    total_amount: Decimal
    is_cancelled: bool
    items: tuple[SaleItemSnapshot, ...]
    created_at: datetime
    updated_at: datetime

    def __post_init__(self) -> None:
        """Normalize ``items`` to a tuple."""
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))

    @property
    def status(self) -> SaleStatus:
        """Return the lifecycle state derived from ``is_cancelled``."""
        return SaleStatus.CANCELLED if self.is_cancelled else SaleStatus.ACTIVE

    @property
    def active_items(self) -> tuple[SaleItemSnapshot, ...]:
        """Return the items that are not cancelled."""
        return tuple(item for item in self.items if not item.is_cancelled)


def snapshot_sale_item(item: SaleItem) -> SaleItemSnapshot:
    """Project a sale item into its immutable snapshot."""
    return SaleItemSnapshot(
        id=item.id,
        sale_id=item.sale_id,
        product_id=item.product_id,
        product_name=item.product_name,
        quantity=item.quantity,
        unit_price=item.unit_price,
        discount_percent=item.discount_percent,
        total_price=item.total_price,
        is_cancelled=item.is_cancelled,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def snapshot_sale(sale: Sale) -> SaleSnapshot:
    """Project a sale and its items into an immutable snapshot."""
    customer = sale.customer
    branch = sale.branch
    return SaleSnapshot(
        id=sale.id,
        sale_number=sale.sale_number,
        customer=(
            PartyRef(id=customer.id, name=customer.name, is_active=customer.is_active)
            if customer is not None
            else None
        ),
        branch=(
            PartyRef(id=branch.id, name=branch.name, is_active=branch.is_active)
            if branch is not None
            else None
        ),
        sale_date=sale.sale_date,
        total_amount=sale.total_amount,
        is_cancelled=sale.is_cancelled,
        items=tuple(snapshot_sale_item(item) for item in sale.items),
        created_at=sale.created_at,
        updated_at=sale.updated_at,
    )
