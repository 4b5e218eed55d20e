# src/retail_sales/domain/enums/sales.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Sales-specific enums.

Purpose:
    Define the sale lifecycle states, stock adjustment directions, and the
    modification kinds carried by ``SaleModified`` events.

Layer:
    domain/enums

Notes:
    - Pure domain types:
        * No logging.
        * No HTTP or transport concerns.
        * No persistence or gateways.
"""

from __future__ import annotations

from enum import Enum


class SaleStatus(str, Enum):
    """Lifecycle state of a sale. ``CANCELLED`` is terminal."""

    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"


class StockDirection(str, Enum):
    """Direction of an inventory adjustment requested by the aggregate."""

    DECREASE = "DECREASE"
    INCREASE = "INCREASE"


class SaleModificationType(str, Enum):
    """Kinds of modification reported by ``SaleModified`` events."""

    ITEM_ADDED = "ITEM_ADDED"
    ITEM_QUANTITY_UPDATED = "ITEM_QUANTITY_UPDATED"
    ITEM_REMOVED = "ITEM_REMOVED"
    ITEM_REACTIVATED = "ITEM_REACTIVATED"


__all__ = ["SaleModificationType", "SaleStatus", "StockDirection"]
