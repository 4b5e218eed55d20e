# src/retail_sales/domain/entities/sale.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Sale aggregate root.

Purpose:
    Own the items of one retail transaction and enforce the rules that span
    them: the per-product quantity cap, the aggregate total, and the one-way
    Active → Cancelled lifecycle.

Layer:
    domain/entities

Invariants:
    - For each product, the summed quantity of non-cancelled items is at most
      ``MAX_QUANTITY_PER_PRODUCT``.
    - Non-cancelled items reference at most ``MAX_DISTINCT_PRODUCTS_PER_SALE``
      distinct products.
    - ``total_amount`` equals the sum of ``total_price`` over non-cancelled
      items. It is re-summed from scratch after every item mutation.
    - A cancelled sale rejects every further mutation.

Notes:
    - Cancelling the sale keeps ``total_amount`` at its pre-cancellation value.
      The ``SaleCancelled`` event carries the same figures for consumers.
    - The aggregate never touches product stock. It records
      ``StockAdjustment`` entries that callers drain and apply.
    - A rejected mutation leaves the aggregate unchanged.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from retail_sales.domain.constants import (
    MAX_DISTINCT_PRODUCTS_PER_SALE,
    MAX_QUANTITY_PER_PRODUCT,
    SALE_NUMBER_MAX_LENGTH,
    SALE_NUMBER_MIN_LENGTH,
)
from retail_sales.domain.entities.parties import Branch, Customer, Product
from retail_sales.domain.entities.sale_events import (
    DomainEvent,
    SaleCancelled,
    SaleCreated,
    SaleItemCancelled,
    SaleModified,
    StockAdjustment,
)
from retail_sales.domain.entities.sale_item import SaleItem
from retail_sales.domain.entities.sale_snapshot import SaleSnapshot
from retail_sales.domain.enums.sales import SaleModificationType, SaleStatus, StockDirection
from retail_sales.domain.exceptions.sales import (
    DistinctProductLimitExceeded,
    EntityNotFound,
    InactiveEntity,
    InvalidInput,
    ItemCancelled,
    MissingProduct,
    ProductQuantityCapExceeded,
    ProductUnavailable,
    SaleAlreadyCancelled,
)
from retail_sales.domain.services.discount_calculator import validate_quantity_limits

__all__ = ["Sale"]

_ZERO = Decimal("0.00")


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class Sale:
    """Aggregate root for one retail transaction.

    Attributes:
        id:
            Unique sale identifier.
        sale_number:
            Human-readable, unique sale number.
        customer:
            Customer the sale is made to.
        branch:
            Branch the sale is made at.
        sale_date:
            Business date of the sale.
        items:
            Items in insertion order, cancelled ones included.
        total_amount:
            Sum of the totals of non-cancelled items.
        is_cancelled:
            True once the sale has been cancelled.
        created_at:
            UTC creation timestamp.
        updated_at:
            UTC timestamp of the last mutation.
    """

    __slots__ = (
        "_adjustments",
        "_branch",
        "_created_at",
        "_customer",
        "_events",
        "_id",
        "_is_cancelled",
        "_items",
        "_sale_date",
        "_sale_number",
        "_total_amount",
        "_updated_at",
    )

    def __init__(
        self,
        *,
        sale_id: UUID,
        sale_number: str,
        customer: Customer | None,
        branch: Branch | None,
        sale_date: datetime,
        items: list[SaleItem],
        total_amount: Decimal,
        is_cancelled: bool,
        created_at: datetime,
        updated_at: datetime,
    ) -> None:
        """Assign state as given. Use ``create`` or ``from_snapshot`` instead.

        Args:
            sale_id: Unique sale identifier.
            sale_number: Human-readable sale number.
            customer: Customer reference.
            branch: Branch reference.
            sale_date: Business date.
            items: Owned items.
            total_amount: Stored total.
            is_cancelled: Cancellation flag.
            created_at: Creation timestamp.
            updated_at: Last mutation timestamp.
        """
        self._id = sale_id
        self._sale_number = sale_number
        self._customer = customer
        self._branch = branch
        self._sale_date = sale_date
        self._items = items
        self._total_amount = total_amount
        self._is_cancelled = is_cancelled
        self._created_at = created_at
        self._updated_at = updated_at
        self._events: list[DomainEvent] = []
        self._adjustments: list[StockAdjustment] = []

    # ------------------------------------------------------------------ #
    # Factories
    # ------------------------------------------------------------------ #

    @classmethod
    def create(
        cls,
        customer: Customer | None,
        branch: Branch | None,
        sale_number: str,
        sale_date: datetime | None = None,
        *,
        sale_id: UUID | None = None,
        now: datetime | None = None,
    ) -> Sale:
        """Open an empty sale for an active customer at an active branch.

        Uniqueness of ``sale_number`` is checked by the caller against
        persistence.

        Raises:
            InvalidInput: If the customer, branch, or sale number is missing,
                or the sale number length is out of bounds.
            InactiveEntity: If the customer or branch is inactive.
        """
        if customer is None:
            raise InvalidInput("Customer is required.", field="customer")
        if branch is None:
            raise InvalidInput("Branch is required.", field="branch")
        if not customer.is_active:
            raise InactiveEntity(
                "Cannot create sale for inactive customer.", field="customer"
            )
        if not branch.is_active:
            raise InactiveEntity("Cannot create sale for inactive branch.", field="branch")

        number = (sale_number or "").strip()
        if not number:
            raise InvalidInput("Sale number is required.", field="sale_number")
        if len(number) < SALE_NUMBER_MIN_LENGTH:
            raise InvalidInput(
                f"Sale number must be at least {SALE_NUMBER_MIN_LENGTH} characters long.",
                field="sale_number",
            )
        if len(number) > SALE_NUMBER_MAX_LENGTH:
            raise InvalidInput(
                f"Sale number cannot be longer than {SALE_NUMBER_MAX_LENGTH} characters.",
                field="sale_number",
            )

        stamp = now or _utcnow()
        sale = cls(
            sale_id=sale_id or uuid4(),
            sale_number=number,
            customer=customer,
            branch=branch,
            sale_date=sale_date or stamp,
            items=[],
            total_amount=_ZERO,
            is_cancelled=False,
            created_at=stamp,
            updated_at=stamp,
        )
        sale._events.append(
            SaleCreated(
                sale_id=sale._id,
                sale_number=sale._sale_number,
                customer_id=customer.id,
                branch_id=branch.id,
                total_amount=_ZERO,
                item_count=0,
                sale_date=sale._sale_date,
            )
        )
        return sale

    @classmethod
    def from_snapshot(
        cls,
        snapshot: SaleSnapshot,
        *,
        products: Mapping[UUID, Product] | None = None,
    ) -> Sale:
        """Rehydrate a sale from its persisted snapshot without re-checking it.

        Args:
            snapshot:
                Persisted sale state.
            products:
                Optional product lookup used to restore live product
                references on items.
        """
        lookup = products or {}
        customer = (
            Customer(
                id=snapshot.customer.id,
                name=snapshot.customer.name,
                is_active=snapshot.customer.is_active,
            )
            if snapshot.customer is not None
            else None
        )
        branch = (
            Branch(
                id=snapshot.branch.id,
                name=snapshot.branch.name,
                is_active=snapshot.branch.is_active,
            )
            if snapshot.branch is not None
            else None
        )
        return cls(
            sale_id=snapshot.id,
            sale_number=snapshot.sale_number,
            customer=customer,
            branch=branch,
            sale_date=snapshot.sale_date,
            items=[
                SaleItem.from_snapshot(item, product=lookup.get(item.product_id))
                for item in snapshot.items
            ],
            total_amount=snapshot.total_amount,
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
    def sale_number(self) -> str:
        return self._sale_number

    @property
    def customer(self) -> Customer | None:
        return self._customer

    @property
    def branch(self) -> Branch | None:
        return self._branch

    @property
    def sale_date(self) -> datetime:
        return self._sale_date

    @property
    def items(self) -> tuple[SaleItem, ...]:
        return tuple(self._items)

    @property
    def total_amount(self) -> Decimal:
        return self._total_amount

    @property
    def is_cancelled(self) -> bool:
        return self._is_cancelled

    @property
    def status(self) -> SaleStatus:
        return SaleStatus.CANCELLED if self._is_cancelled else SaleStatus.ACTIVE

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def __repr__(self) -> str:
        return (
            f"Sale(id={self._id!s}, sale_number={self._sale_number!r}, "
            f"items={len(self._items)}, total_amount={self._total_amount}, "
            f"is_cancelled={self._is_cancelled})"
        )

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def active_items(self) -> Iterator[SaleItem]:
        """Yield the items that are not cancelled."""
        return (item for item in self._items if not item.is_cancelled)

    def find_item(self, item_id: UUID) -> SaleItem:
        """Return the item with ``item_id``.

        Raises:
            EntityNotFound: If the sale has no such item.
        """
        for item in self._items:
            if item.id == item_id:
                return item
        raise EntityNotFound(
            f"Sale item {item_id} not found in sale {self._sale_number}.",
            details={"sale_id": str(self._id), "item_id": str(item_id)},
        )

    def quantity_of(self, product_id: UUID, *, excluding: UUID | None = None) -> int:
        """Return the summed quantity of non-cancelled items for ``product_id``.

        Args:
            product_id: Product to sum.
            excluding: Optional item id left out of the sum.
        """
        return sum(
            item.quantity
            for item in self.active_items()
            if item.product_id == product_id and item.id != excluding
        )

    def get_active_item_count(self) -> int:
        """Return the number of non-cancelled items."""
        return sum(1 for _ in self.active_items())

    def has_items(self) -> bool:
        """Return True when at least one item is not cancelled."""
        return any(True for _ in self.active_items())

    def get_subtotal(self) -> Decimal:
        """Return the undiscounted subtotal, or zero for a cancelled sale."""
        if self._is_cancelled:
            return _ZERO
        return sum((item.get_subtotal() for item in self._items), _ZERO)

    def get_total_discount(self) -> Decimal:
        """Return the money taken off by discounts, or zero for a cancelled sale."""
        if self._is_cancelled:
            return _ZERO
        return sum((item.get_discount_amount() for item in self._items), _ZERO)

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    def add_item(
        self,
        product: Product | None,
        quantity: int,
        unit_price: Decimal | int | str | None = None,
        *,
        now: datetime | None = None,
    ) -> SaleItem:
        """Add a line for ``product`` after checking the per-product cap.

        ``now`` optionally stamps the new line, as in ``create``.

        Returns:
            SaleItem: The new line.

        Raises:
            SaleAlreadyCancelled: If the sale is cancelled.
            MissingProduct: If ``product`` is None.
            ProductUnavailable: If the product is inactive.
            InvalidQuantity: If ``quantity`` is not a positive integer.
            ProductQuantityCapExceeded: If existing plus requested units of
                the product would exceed the cap.
            DistinctProductLimitExceeded: If the product is new to the sale and
                the sale already holds the maximum number of distinct products.
            InvalidPrice: If the unit price is out of range.
        """
        self._ensure_active()
        if product is None:
            raise MissingProduct()
        if not product.is_active:
            raise ProductUnavailable(
                f"Product {product.name} is not available for sale.",
                field="product",
                details={"product_id": str(product.id)},
            )
        validate_quantity_limits(quantity)
        self._check_product_cap(product.id, quantity)
        self._check_distinct_products(product.id)

        item = SaleItem.create(self._id, product, quantity, unit_price, now=now)
        self._items.append(item)
        self._recalculate_total()
        self._adjustments.append(
            StockAdjustment(product.id, quantity, StockDirection.DECREASE)
        )
        self._record_modified(
            SaleModificationType.ITEM_ADDED,
            item_id=str(item.id),
            product_id=str(product.id),
            quantity=str(quantity),
        )
        return item

    def update_item_quantity(self, item_id: UUID, quantity: int) -> StockAdjustment | None:
        """Change the quantity of an item after re-checking the per-product cap.

        Returns:
            StockAdjustment | None: The stock movement implied by the change,
            or None when the quantity is unchanged.

        Raises:
            SaleAlreadyCancelled: If the sale is cancelled.
            EntityNotFound: If the sale has no such item.
            ItemCancelled: If the item is cancelled.
            InvalidQuantity: If ``quantity`` is not a positive integer.
            ProductQuantityCapExceeded: If the other items plus ``quantity``
                would exceed the cap.
        """
        self._ensure_active()
        item = self.find_item(item_id)
        if item.is_cancelled:
            raise ItemCancelled(
                "Cannot update quantity of a cancelled item.",
                details={"item_id": str(item_id)},
            )
        validate_quantity_limits(quantity)
        self._check_product_cap(item.product_id, quantity, excluding=item.id)

        previous = item.quantity
        item.update_quantity(quantity)
        self._recalculate_total()
        self._record_modified(
            SaleModificationType.ITEM_QUANTITY_UPDATED,
            item_id=str(item.id),
            product_id=str(item.product_id),
            old_quantity=str(previous),
            new_quantity=str(quantity),
        )

        delta = quantity - previous
        if delta == 0:
            return None
        direction = StockDirection.DECREASE if delta > 0 else StockDirection.INCREASE
        adjustment = StockAdjustment(item.product_id, abs(delta), direction)
        self._adjustments.append(adjustment)
        return adjustment

    def remove_item(self, item_id: UUID, reason: str | None = None) -> StockAdjustment:
        """Cancel an item and return the restock it implies.

        Returns:
            StockAdjustment: The units to return to the product's stock.

        Raises:
            SaleAlreadyCancelled: If the sale is cancelled.
            EntityNotFound: If the sale has no such item.
            ItemCancelled: If the item is already cancelled.
        """
        self._ensure_active()
        item = self.find_item(item_id)
        if item.is_cancelled:
            raise ItemCancelled(
                "Sale item is already cancelled.", details={"item_id": str(item_id)}
            )

        total_before = item.total_price
        item.cancel()
        self._recalculate_total()

        adjustment = StockAdjustment(item.product_id, item.quantity, StockDirection.INCREASE)
        self._adjustments.append(adjustment)
        self._events.append(
            SaleItemCancelled(
                item_id=item.id,
                sale_id=self._id,
                sale_number=self._sale_number,
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total_price=total_before,
                discount_percent=item.discount_percent,
                cancellation_reason=reason,
            )
        )
        self._record_modified(
            SaleModificationType.ITEM_REMOVED,
            item_id=str(item.id),
            product_id=str(item.product_id),
            quantity=str(item.quantity),
        )
        return adjustment

    def reactivate_item(self, item_id: UUID) -> StockAdjustment | None:
        """Reinstate a cancelled item after re-checking the per-product cap.

        Returns:
            StockAdjustment | None: The units to take out of stock again, or
            None when the item was already active.

        Raises:
            SaleAlreadyCancelled: If the sale is cancelled.
            EntityNotFound: If the sale has no such item.
            ProductQuantityCapExceeded: If reinstating would exceed the cap.
            DistinctProductLimitExceeded: If reinstating would exceed the
                distinct product limit.
        """
        self._ensure_active()
        item = self.find_item(item_id)
        if not item.is_cancelled:
            return None
        self._check_product_cap(item.product_id, item.quantity)
        self._check_distinct_products(item.product_id)

        item.reactivate()
        self._recalculate_total()
        adjustment = StockAdjustment(item.product_id, item.quantity, StockDirection.DECREASE)
        self._adjustments.append(adjustment)
        self._record_modified(
            SaleModificationType.ITEM_REACTIVATED,
            item_id=str(item.id),
            product_id=str(item.product_id),
            quantity=str(item.quantity),
        )
        return adjustment

    def cancel(self, reason: str | None = None) -> SaleCancelled:
        """Cancel the sale. The transition is terminal.

        Every active item's units are queued for restock. The returned event
        carries the pre-cancellation total and active item count.

        Raises:
            SaleAlreadyCancelled: If the sale is already cancelled.
        """
        self._ensure_active()
        active = list(self.active_items())
        customer_id = self._customer.id if self._customer is not None else None
        branch_id = self._branch.id if self._branch is not None else None

        event = SaleCancelled(
            sale_id=self._id,
            sale_number=self._sale_number,
            customer_id=customer_id,
            branch_id=branch_id,
            original_total_amount=self._total_amount,
            original_item_count=len(active),
            original_sale_date=self._sale_date,
            cancellation_reason=reason,
        )
        self._is_cancelled = True
        self._updated_at = _utcnow()
        for item in active:
            self._adjustments.append(
                StockAdjustment(item.product_id, item.quantity, StockDirection.INCREASE)
            )
        self._events.append(event)
        return event

    # ------------------------------------------------------------------ #
    # Buffered records
    # ------------------------------------------------------------------ #

    def pull_events(self) -> list[DomainEvent]:
        """Return and clear the buffered domain events."""
        events, self._events = self._events, []
        return events

    def pull_stock_adjustments(self) -> list[StockAdjustment]:
        """Return and clear the buffered stock adjustments."""
        adjustments, self._adjustments = self._adjustments, []
        return adjustments

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _ensure_active(self) -> None:
        if self._is_cancelled:
            raise SaleAlreadyCancelled(
                f"Sale {self._sale_number} is cancelled.",
                details={"sale_id": str(self._id)},
            )

    def _check_product_cap(
        self, product_id: UUID, quantity: int, *, excluding: UUID | None = None
    ) -> None:
        existing = self.quantity_of(product_id, excluding=excluding)
        if existing + quantity > MAX_QUANTITY_PER_PRODUCT:
            raise ProductQuantityCapExceeded(
                product_id=product_id,
                existing_quantity=existing,
                requested_quantity=quantity,
                limit=MAX_QUANTITY_PER_PRODUCT,
            )

    def _check_distinct_products(self, product_id: UUID) -> None:
        held = {item.product_id for item in self.active_items()}
        if product_id not in held and len(held) >= MAX_DISTINCT_PRODUCTS_PER_SALE:
            raise DistinctProductLimitExceeded(limit=MAX_DISTINCT_PRODUCTS_PER_SALE)

    def _recalculate_total(self) -> None:
        self._total_amount = sum(
            (item.total_price for item in self.active_items()), _ZERO
        )
        self._updated_at = _utcnow()

    def _record_modified(self, kind: SaleModificationType, **details: str) -> None:
        self._events.append(
            SaleModified(
                sale_id=self._id,
                sale_number=self._sale_number,
                modification_type=kind,
                details=details,
            )
        )
