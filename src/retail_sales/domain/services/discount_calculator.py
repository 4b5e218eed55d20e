# src/retail_sales/domain/services/discount_calculator.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Quantity-tiered discount calculator.

Purpose:
    Map a line quantity and unit price to the discount percentage and the
    rounded line total.

Tiers (inclusive lower bounds):
    * quantity < 4         → 0%
    * 4 <= quantity < 10   → 10%
    * 10 <= quantity <= 20 → 20%
    * quantity > 20        → rejected, never clamped

Rounding:
    Totals are quantized to 0.01 with ``ROUND_HALF_UP``, which rounds
    midpoints away from zero (31.005 → 31.01).

Layer:
    domain/services

Notes:
    Pure and deterministic. No logging or I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Final

from retail_sales.domain.constants import (
    HIGH_TIER_DISCOUNT_PERCENT,
    HIGH_TIER_DISCOUNT_QUANTITY,
    LOW_TIER_DISCOUNT_PERCENT,
    MAX_QUANTITY_PER_PRODUCT,
    MAX_UNIT_PRICE,
    MIN_DISCOUNT_QUANTITY,
    MONEY_QUANTUM,
    NO_DISCOUNT_PERCENT,
)
from retail_sales.domain.exceptions.sales import (
    InvalidPrice,
    InvalidQuantity,
    QuantityLimitExceeded,
)

_HUNDRED: Final[Decimal] = Decimal("100")


@dataclass(frozen=True, slots=True)
class DiscountResult:
    """Outcome of a discount calculation."""

    discount_percent: Decimal
    total_price: Decimal


def round_money(value: Decimal) -> Decimal:
    """Quantize ``value`` to two decimals, rounding half away from zero."""
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def to_decimal(value: Decimal | int | str | float, *, field: str = "unit_price") -> Decimal:
    """Coerce a price-like value into a finite ``Decimal``.

    Floats go through ``str`` so ``10.335`` stays ``10.335`` rather than the
    nearest binary approximation.

    Raises:
        InvalidPrice: If the value is not a finite number.
    """
    if isinstance(value, bool):
        raise InvalidPrice("Unit price must be a number.", field=field)
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidPrice("Unit price must be a number.", field=field) from exc
    if not result.is_finite():
        raise InvalidPrice("Unit price must be a number.", field=field)
    return result


def discount_percent_for(quantity: int) -> Decimal:
    """Return the tier percentage for ``quantity`` without validating it.

    Quantities above the per-product limit map to the top tier; callers that
    need a hard rejection use :func:`validate_quantity_limits` first.
    """
    if quantity >= HIGH_TIER_DISCOUNT_QUANTITY:
        return HIGH_TIER_DISCOUNT_PERCENT
    if quantity >= MIN_DISCOUNT_QUANTITY:
        return LOW_TIER_DISCOUNT_PERCENT
    return NO_DISCOUNT_PERCENT


def is_eligible_for_discount(quantity: int) -> bool:
    """Return True when ``quantity`` falls into a discounted tier."""
    return MIN_DISCOUNT_QUANTITY <= quantity <= MAX_QUANTITY_PER_PRODUCT


def validate_quantity_limits(quantity: int, *, field: str = "quantity") -> None:
    """Reject quantities outside ``[1, MAX_QUANTITY_PER_PRODUCT]``.

    Raises:
        InvalidQuantity: If ``quantity`` is not a positive integer.
        QuantityLimitExceeded: If ``quantity`` is above the per-product limit.
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantity("Quantity must be an integer.", field=field)
    if quantity <= 0:
        raise InvalidQuantity("Quantity must be greater than zero.", field=field)
    if quantity > MAX_QUANTITY_PER_PRODUCT:
        raise QuantityLimitExceeded(
            f"Cannot sell more than {MAX_QUANTITY_PER_PRODUCT} units of the same product.",
            field=field,
            details={"quantity": quantity, "limit": MAX_QUANTITY_PER_PRODUCT},
        )


def validate_unit_price(unit_price: Decimal, *, field: str = "unit_price") -> None:
    """Reject prices that are not positive or exceed ``MAX_UNIT_PRICE``.

    Raises:
        InvalidPrice: If the price is out of range.
    """
    if unit_price <= 0:
        raise InvalidPrice("Unit price must be greater than zero.", field=field)
    if unit_price > MAX_UNIT_PRICE:
        raise InvalidPrice("Unit price cannot exceed 1,000,000.", field=field)


def line_total(quantity: int, unit_price: Decimal, discount_percent: Decimal) -> Decimal:
    """Apply ``discount_percent`` to ``quantity * unit_price`` and round."""
    subtotal = Decimal(quantity) * unit_price
    return round_money(subtotal * (_HUNDRED - discount_percent) / _HUNDRED)


def calculate(quantity: int, unit_price: Decimal | int | str) -> DiscountResult:
    """Compute the discount percentage and rounded total for one line.

    Args:
        quantity:
            Units on the line, an integer in ``[1, 20]``.
        unit_price:
            Price per unit, ``0 < price <= 1,000,000``.

    Returns:
        DiscountResult: The tier percentage and the rounded line total.

    Raises:
        InvalidQuantity: If ``quantity`` is not a positive integer.
        QuantityLimitExceeded: If ``quantity`` exceeds the per-product limit.
        InvalidPrice: If ``unit_price`` is out of range.
    """
    validate_quantity_limits(quantity)
    price = to_decimal(unit_price)
    validate_unit_price(price)

    percent = discount_percent_for(quantity)
    return DiscountResult(
        discount_percent=percent,
        total_price=line_total(quantity, price, percent),
    )


__all__ = [
    "DiscountResult",
    "calculate",
    "discount_percent_for",
    "is_eligible_for_discount",
    "line_total",
    "round_money",
    "to_decimal",
    "validate_quantity_limits",
    "validate_unit_price",
]
