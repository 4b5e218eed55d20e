# src/retail_sales/application/services/sale_workflow.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Shared orchestration steps for sale use cases.

Purpose:
    Resolve repositories from a unit of work, load and verify sale
    aggregates, apply the stock adjustments an aggregate recorded, and hand
    drained events to the publisher.

Layer:
    application/services

Notes:
    - Orchestration only: no commit or rollback here. Callers own the
      transaction through ``run_in_uow``.
    - Repositories are resolved by their domain protocol keys.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, MutableMapping, Sequence
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from retail_sales.domain.entities.parties import Product
from retail_sales.domain.entities.sale import Sale
from retail_sales.domain.entities.sale_events import DomainEvent, StockAdjustment
from retail_sales.domain.entities.sale_snapshot import snapshot_sale
from retail_sales.domain.enums.sales import StockDirection
from retail_sales.domain.exceptions.sales import EntityNotFound
from retail_sales.domain.interfaces.gateways.sale_event_publisher import SaleEventPublisher
from retail_sales.domain.interfaces.repositories.catalog_repository import (
    BranchRepository,
    CustomerRepository,
    ProductRepository,
)
from retail_sales.domain.interfaces.repositories.sales_repository import SaleRepository
from retail_sales.domain.services.sale_validation import ensure_valid, validate_sale

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SalesRepositories:
    """Repositories resolved from one unit of work.

    Attributes:
        sales: Sale aggregate repository.
        products: Product repository.
        customers: Customer repository.
        branches: Branch repository.
    """

    sales: SaleRepository
    products: ProductRepository
    customers: CustomerRepository
    branches: BranchRepository


def get_repositories(tx: Any) -> SalesRepositories:
    """Resolve every sales-related repository from the active unit of work."""
    return SalesRepositories(
        sales=tx.get_repository(SaleRepository),
        products=tx.get_repository(ProductRepository),
        customers=tx.get_repository(CustomerRepository),
        branches=tx.get_repository(BranchRepository),
    )


def verify_sale(sale: Sale) -> None:
    """Re-run every sale and item rule against ``sale``.

    Raises:
        ValidationFailed: If the aggregate violates any rule.
    """
    report = validate_sale(snapshot_sale(sale))
    if not report.is_valid:
        logger.error(
            "sales.integrity.violation",
            extra={
                "sale_id": str(sale.id),
                "sale_number": sale.sale_number,
                "violations": [
                    {"field": v.field, "rule_id": v.rule_id} for v in report.violations
                ],
            },
        )
    ensure_valid(report)


async def load_sale(repo: SaleRepository, sale_id: UUID, *, verify: bool) -> Sale:
    """Load a sale and, when ``verify`` is set, check its persisted state.

    Raises:
        EntityNotFound: If the sale does not exist.
        ValidationFailed: If ``verify`` is set and the sale breaks any rule.
    """
    sale = await repo.get_by_id(sale_id)
    if sale is None:
        raise EntityNotFound(f"Sale {sale_id} not found.", details={"sale_id": str(sale_id)})
    if verify:
        verify_sale(sale)
    return sale


async def load_product(repo: ProductRepository, product_id: UUID) -> Product:
    """Load a product.

    Raises:
        EntityNotFound: If the product does not exist.
    """
    product = await repo.get_by_id(product_id)
    if product is None:
        raise EntityNotFound(
            f"Product {product_id} not found.", details={"product_id": str(product_id)}
        )
    return product


async def apply_stock_adjustments(
    repo: ProductRepository,
    adjustments: Iterable[StockAdjustment],
    *,
    known: MutableMapping[UUID, Product] | None = None,
) -> None:
    """Apply recorded stock movements to products and persist them.

    Products already loaded by the caller are reused from ``known``. A product
    that no longer exists cannot take stock back; the restock is skipped with
    a warning. A missing product on a decrease is an error.

    Raises:
        EntityNotFound: If a decrease targets a missing product.
        InsufficientStock: If a decrease exceeds the product's stock.
    """
    cache: MutableMapping[UUID, Product] = known if known is not None else {}
    touched: dict[UUID, Product] = {}

    for adjustment in adjustments:
        product = cache.get(adjustment.product_id)
        if product is None:
            product = await repo.get_by_id(adjustment.product_id)
            if product is None:
                if adjustment.direction is StockDirection.INCREASE:
                    logger.warning(
                        "sales.stock.product_missing",
                        extra={
                            "product_id": str(adjustment.product_id),
                            "quantity": adjustment.quantity,
                        },
                    )
                    continue
                raise EntityNotFound(
                    f"Product {adjustment.product_id} not found.",
                    details={"product_id": str(adjustment.product_id)},
                )
            cache[adjustment.product_id] = product

        if adjustment.direction is StockDirection.DECREASE:
            product.remove_stock(adjustment.quantity)
        else:
            product.add_stock(adjustment.quantity)
        touched[product.id] = product

    for product in touched.values():
        await repo.update(product)


async def publish_events(
    publisher: SaleEventPublisher | None, events: Sequence[DomainEvent]
) -> None:
    """Hand committed events to the publisher, if one is configured."""
    if publisher is None or not events:
        return
    await publisher.publish(events)
    logger.debug(
        "sales.events.published",
        extra={"count": len(events), "types": [e.event_type for e in events]},
    )


__all__ = [
    "SalesRepositories",
    "apply_stock_adjustments",
    "get_repositories",
    "load_product",
    "load_sale",
    "publish_events",
    "verify_sale",
]
