# src/retail_sales/domain/constants.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Business constants for the sales domain.

Purpose:
    Centralize the numeric limits and discount tiers used by the discount
    calculator, the sale aggregate, and the validation rule sets.

Layer:
    domain
"""

from __future__ import annotations

from decimal import Decimal
from typing import Final

# Maximum number of units of one product, per line and summed across a sale.
MAX_QUANTITY_PER_PRODUCT: Final[int] = 20

# Maximum number of distinct products held by the active items of one sale.
MAX_DISTINCT_PRODUCTS_PER_SALE: Final[int] = 20

# Upper bound for any unit price (inclusive).
MAX_UNIT_PRICE: Final[Decimal] = Decimal("1000000")

# Tier thresholds (inclusive lower bounds).
MIN_DISCOUNT_QUANTITY: Final[int] = 4
HIGH_TIER_DISCOUNT_QUANTITY: Final[int] = 10

NO_DISCOUNT_PERCENT: Final[Decimal] = Decimal("0")
LOW_TIER_DISCOUNT_PERCENT: Final[Decimal] = Decimal("10")
HIGH_TIER_DISCOUNT_PERCENT: Final[Decimal] = Decimal("20")

# Monetary values are kept with two decimal places.
MONEY_QUANTUM: Final[Decimal] = Decimal("0.01")

# Sale number length bounds.
SALE_NUMBER_MIN_LENGTH: Final[int] = 5
SALE_NUMBER_MAX_LENGTH: Final[int] = 50

# Sale date window relative to "now".
SALE_DATE_MAX_YEARS_IN_PAST: Final[int] = 10
SALE_DATE_MAX_DAYS_IN_FUTURE: Final[int] = 1

DEFAULT_SALE_NUMBER_PREFIX: Final[str] = "SAL"

__all__ = [
    "DEFAULT_SALE_NUMBER_PREFIX",
    "HIGH_TIER_DISCOUNT_PERCENT",
    "HIGH_TIER_DISCOUNT_QUANTITY",
    "LOW_TIER_DISCOUNT_PERCENT",
    "MAX_DISTINCT_PRODUCTS_PER_SALE",
    "MAX_QUANTITY_PER_PRODUCT",
    "MAX_UNIT_PRICE",
    "MIN_DISCOUNT_QUANTITY",
    "MONEY_QUANTUM",
    "NO_DISCOUNT_PERCENT",
    "SALE_DATE_MAX_DAYS_IN_FUTURE",
    "SALE_DATE_MAX_YEARS_IN_PAST",
    "SALE_NUMBER_MAX_LENGTH",
    "SALE_NUMBER_MIN_LENGTH",
]
