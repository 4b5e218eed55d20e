# src/retail_sales/domain/entities/sale_item.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Sale item entity.

Purpose:
    One product line inside a sale. The line owns its quantity, unit price,
    discount tier, and rounded total, and keeps them consistent through the
    discount calculator on every mutation.

Layer:
    domain/entities

Notes:
    - Items are created and mutated only through the owning ``Sale``.
    - Fields are read-only properties; there are no setters.
    - ``from_snapshot`` rehydrates persisted state without re-checking it so
      corrupted rows can be loaded and then rejected by validation.
"""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from retail_sales.domain.entities.parties import Product
from retail_sales.domain.entities.sale_snapshot import SaleItemSnapshot
from retail_sales.domain.exceptions.sales import EmptySaleId, ItemCancelled, MissingProduct
from retail_sales.domain.services.discount_calculator import (
    calculate,
    round_money,
    to_decimal,
)

__all__ = ["SaleItem"]

_ZERO = Decimal("0.00")
_HUNDRED = Decimal("100")


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class SaleItem:
    """Product line of a sale.

    Attributes:
        id:
            Unique item identifier.
        sale_id:
            Identifier of the owning sale.
        product_id:
            Identifier of the product sold.
        product:
            Live product reference when available (None after rehydration
            without a product lookup).
        quantity:
            Units on the line, within ``[1, 20]``.
        unit_price:
            Price per unit captured when the line was created.
        discount_percent:
            Tier percentage derived from ``quantity``.
        total_price:
            Rounded discounted total; zero while cancelled.
        is_cancelled:
            True when the line is excluded from sale totals.
        created_at:
            UTC creation timestamp.
        updated_at:
            UTC timestamp of the last mutation.
    """

    __slots__ = (
        "_created_at",
        "_discount_percent",
        "_id",
        "_is_cancelled",
        "_product",
        "_product_id",
        "_product_name",
        "_quantity",
        "_sale_id",
        "_total_price",
        "_unit_price",
        "_updated_at",
    )

    def __init__(
        self,
        *,
        item_id: UUID,
        sale_id: UUID,
        product_id: UUID,
        product_name: str | None,
        product: Product | None,
        quantity: int,
        unit_price: Decimal,
        discount_percent: Decimal,
        total_price: Decimal,
        is_cancelled: bool,
        created_at: datetime,
        updated_at: datetime,
    ) -> None:
        """Assign state as given. Use ``create`` or ``from_snapshot`` instead.

        Args:
            item_id: Unique item identifier.
            sale_id: Identifier of the owning sale.
            product_id: Identifier of the product sold.
            product_name: Product display name, when known.
            product: Live product reference, when available.
            quantity: Units on the line.
            unit_price: Price per unit.
            discount_percent: Tier percentage.
            total_price: Rounded discounted total.
            is_cancelled: Cancellation flag.
            created_at: Creation timestamp.
            updated_at: Last mutation timestamp.
        """
        self._id = item_id
        self._sale_id = sale_id
        self._product_id = product_id
        self._product_name = product_name
        self._product = product
        self._quantity = quantity
        self._unit_price = unit_price
        self._discount_percent = discount_percent
        self._total_price = total_price
        self._is_cancelled = is_cancelled
        self._created_at = created_at
        self._updated_at = updated_at

    # ------------------------------------------------------------------ #
    # Factories
    # ------------------------------------------------------------------ #

    @classmethod
    def create(
        cls,
        sale_id: UUID | None,
        product: Product | None,
        quantity: int,
        unit_price: Decimal | int | str | None = None,
        *,
        item_id: UUID | None = None,
        now: datetime | None = None,
    ) -> SaleItem:
        """Create a priced line for ``product``.

        Args:
            sale_id:
                Identifier of the owning sale. Must not be empty.
            product:
                Product sold. Must not be None.
            quantity:
                Units on the line, within ``[1, 20]``.
            unit_price:
                Optional price override. Defaults to the product's price.
            item_id:
                Optional explicit identifier.
            now:
                Optional creation timestamp.

        Returns:
            SaleItem: The priced line.

        Raises:
            EmptySaleId: If ``sale_id`` is missing or the nil UUID.
            MissingProduct: If ``product`` is None.
            InvalidQuantity: If ``quantity`` is not a positive integer.
            QuantityLimitExceeded: If ``quantity`` exceeds 20.
            InvalidPrice: If the unit price is out of range.
        """
        if sale_id is None or sale_id.int == 0:
            raise EmptySaleId()
        if product is None:
            raise MissingProduct()

        price = to_decimal(product.price if unit_price is None else unit_price)
        result = calculate(quantity, price)
        stamp = now or _utcnow()
        return cls(
            item_id=item_id or uuid4(),
            sale_id=sale_id,
            product_id=product.id,
            product_name=product.name,
            product=product,
            quantity=quantity,
            unit_price=price,
            discount_percent=result.discount_percent,
            total_price=result.total_price,
            is_cancelled=False,
            created_at=stamp,
            updated_at=stamp,
        )

    @classmethod
    def from_snapshot(
        cls, snapshot: SaleItemSnapshot, *, product: Product | None = None
    ) -> SaleItem:
        """Rehydrate an item from its persisted snapshot without re-checking it."""
        return cls(
            item_id=snapshot.id,
            sale_id=snapshot.sale_id,
            product_id=snapshot.product_id,
            product_name=snapshot.product_name,
            product=product,
            quantity=snapshot.quantity,
            unit_price=snapshot.unit_price,
            discount_percent=snapshot.discount_percent,
            total_price=snapshot.total_price,
            is_cancelled=snapshot.is_cancelled,
            created_at=snapshot.created_at,
            updated_at=snapshot.updated_at,
        )

    # ------------------------------------------------------------------ #
    # Read-only state
    # ------------------------------------------------------------------ #

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def sale_id(self) -> UUID:
        return self._sale_id

    @property
    def product_id(self) -> UUID:
        return self._product_id

    @property
    def product_name(self) -> str | None:
        return self._product_name

    @property
    def product(self) -> Product | None:
        return self._product

    @property
    def quantity(self) -> int:
        return self._quantity

    @property
    def unit_price(self) -> Decimal:
        return self._unit_price

    @property
    def discount_percent(self) -> Decimal:
        return self._discount_percent

    @property
    def total_price(self) -> Decimal:
        return self._total_price

    @property
    def is_cancelled(self) -> bool:
        return self._is_cancelled

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def __repr__(self) -> str:
        return (
            f"SaleItem(id={self._id!s}, product_id={self._product_id!s}, "
            f"quantity={self._quantity}, unit_price={self._unit_price}, "
            f"discount_percent={self._discount_percent}, total_price={self._total_price}, "
            f"is_cancelled={self._is_cancelled})"
        )

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    def update_quantity(self, quantity: int) -> None:
        """Change the quantity and re-derive discount and total.

        Raises:
            ItemCancelled: If the item is cancelled.
            InvalidQuantity: If ``quantity`` is not a positive integer.
            QuantityLimitExceeded: If ``quantity`` exceeds 20.
        """
        if self._is_cancelled:
            raise ItemCancelled(
                "Cannot update quantity of a cancelled item.",
                details={"item_id": str(self._id)},
            )
        result = calculate(quantity, self._unit_price)
        self._quantity = quantity
        self._discount_percent = result.discount_percent
        self._total_price = result.total_price
        self._updated_at = _utcnow()

    def cancel(self) -> None:
        """Cancel the line. Calling it on a cancelled line does nothing."""
        if self._is_cancelled:
            return
        self._is_cancelled = True
        self._total_price = _ZERO
        self._updated_at = _utcnow()

    def reactivate(self) -> None:
        """Reinstate a cancelled line. Calling it on an active line does nothing."""
        if not self._is_cancelled:
            return
        result = calculate(self._quantity, self._unit_price)
        self._is_cancelled = False
        self._discount_percent = result.discount_percent
        self._total_price = result.total_price
        self._updated_at = _utcnow()

    # ------------------------------------------------------------------ #
    # Derived values
    # ------------------------------------------------------------------ #

    def get_subtotal(self) -> Decimal:
        """Return ``quantity * unit_price`` rounded, or zero when cancelled."""
        if self._is_cancelled:
            return _ZERO
        return round_money(Decimal(self._quantity) * self._unit_price)

    def get_discount_amount(self) -> Decimal:
        """Return the money taken off by the discount, or zero when cancelled."""
        if self._is_cancelled:
            return _ZERO
        subtotal = Decimal(self._quantity) * self._unit_price
        return round_money(subtotal * self._discount_percent / _HUNDRED)
