# src/retail_sales/domain/interfaces/repositories/sales_repository.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Sale repository interface.

Purpose:
    Define load and save operations for the sale aggregate.

Layer:
    domain/interfaces/repositories

Notes:
    Implementations persist the full aggregate (sale plus items) as one unit
    and rehydrate it through ``Sale.from_snapshot`` so that loaded state is
    never silently repaired. Verification of loaded state is the caller's
    decision.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from retail_sales.domain.entities.sale import Sale


class SaleRepository(Protocol):
    """Protocol for repositories storing sale aggregates."""

    async def get_by_id(self, sale_id: UUID) -> Sale | None:
        """Return the sale with ``sale_id`` or None when it does not exist."""

    async def exists_sale_number(self, sale_number: str) -> bool:
        """Return True when a sale already uses ``sale_number``."""

    async def add(self, sale: Sale) -> None:
        """Persist a new sale with all of its items."""

    async def update(self, sale: Sale) -> None:
        """Persist the current state of an existing sale and its items."""
