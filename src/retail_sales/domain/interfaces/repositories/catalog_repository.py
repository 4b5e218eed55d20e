# src/retail_sales/domain/interfaces/repositories/catalog_repository.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Product, customer, and branch repository interfaces.

Purpose:
    Read access to the collaborators a sale references, plus the product
    update needed to persist stock movements.

Layer:
    domain/interfaces/repositories
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from retail_sales.domain.entities.parties import Branch, Customer, Product


class ProductRepository(Protocol):
    """Protocol for repositories storing products."""

    async def get_by_id(self, product_id: UUID) -> Product | None:
        """Return the product with ``product_id`` or None when missing."""

    async def update(self, product: Product) -> None:
        """Persist the product's current stock and flags."""


class CustomerRepository(Protocol):
    """Protocol for read access to customers."""

    async def get_by_id(self, customer_id: UUID) -> Customer | None:
        """Return the customer with ``customer_id`` or None when missing."""


class BranchRepository(Protocol):
    """Protocol for read access to branches."""

    async def get_by_id(self, branch_id: UUID) -> Branch | None:
        """Return the branch with ``branch_id`` or None when missing."""
