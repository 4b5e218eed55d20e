# src/retail_sales/application/use_cases/sales/create_sale.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Use case: open a new sale.

Purpose:
    Validate the command, resolve the customer and branch, assign a unique
    sale number, add any initial lines and take their units out of stock,
    persist everything in one transaction, and publish the events.

Layer:
    application/use_cases/sales
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Final
from uuid import UUID

from retail_sales.application.schemas.dto.sales import CreateSaleCommand, SaleDTO, sale_to_dto
from retail_sales.application.services.sale_workflow import (
    SalesRepositories,
    apply_stock_adjustments,
    get_repositories,
    load_product,
    publish_events,
)
from retail_sales.application.uow import UnitOfWork, run_in_uow
from retail_sales.application.validators.sale_commands import validate_create_sale_command
from retail_sales.domain.constants import DEFAULT_SALE_NUMBER_PREFIX
from retail_sales.domain.entities.parties import Product
from retail_sales.domain.entities.sale import Sale
from retail_sales.domain.entities.sale_events import DomainEvent
from retail_sales.domain.entities.sale_snapshot import snapshot_sale
from retail_sales.domain.exceptions.base import DomainError
from retail_sales.domain.exceptions.sales import (
    DuplicateSaleNumber,
    EntityNotFound,
    InsufficientStock,
)
from retail_sales.domain.interfaces.gateways.sale_event_publisher import SaleEventPublisher
from retail_sales.domain.services.sale_number import generate_sale_number
from retail_sales.domain.services.sale_validation import as_utc, ensure_valid, validate_sale

logger = logging.getLogger(__name__)

# Generated numbers carry a 4-digit random suffix; retry a few times on collision.
_MAX_GENERATION_ATTEMPTS: Final[int] = 5


class CreateSaleUseCase:
    """Open a sale for an active customer at an active branch.

    Initial lines in the command are added in the same transaction. When any
    line fails, nothing is stored and no stock moves.

    Args:
        uow: Unit of work resolving the sale, customer, and branch repositories.
        publisher: Optional gateway receiving ``SaleCreated`` after commit.
        sale_number_prefix: Prefix for generated sale numbers.
        rng: Optional random source for generated sale numbers.
        clock: Optional callable returning the current UTC time.

    Raises:
        ValidationFailed: If the command or the new sale violates any rule.
        EntityNotFound: If the customer or branch does not exist.
        InactiveEntity: If the customer or branch is inactive.
        DuplicateSaleNumber: If the sale number is already taken.
        ProductUnavailable: If an initial line names an inactive product.
        InsufficientStock: If a product lacks the units of its line.
    """

    def __init__(
        self,
        *,
        uow: UnitOfWork,
        publisher: SaleEventPublisher | None = None,
        sale_number_prefix: str = DEFAULT_SALE_NUMBER_PREFIX,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the use case."""
        self._uow = uow
        self._publisher = publisher
        self._prefix = sale_number_prefix
        self._rng = rng or random.Random()
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    async def execute(self, cmd: CreateSaleCommand) -> SaleDTO:
        """Create the sale.

        Args:
            cmd: Create-sale command.

        Returns:
            SaleDTO: View of the new sale.
        """
        now = as_utc(self._clock())
        logger.info(
            "sales.create.start",
            extra={
                "customer_id": str(cmd.customer_id),
                "branch_id": str(cmd.branch_id),
                "item_count": len(cmd.items),
            },
        )

        async def _work(tx: UnitOfWork) -> tuple[Sale, list[DomainEvent]]:
            repos = get_repositories(tx)
            customer = await repos.customers.get_by_id(cmd.customer_id)
            if customer is None:
                raise EntityNotFound(
                    f"Customer {cmd.customer_id} not found.",
                    details={"customer_id": str(cmd.customer_id)},
                )
            branch = await repos.branches.get_by_id(cmd.branch_id)
            if branch is None:
                raise EntityNotFound(
                    f"Branch {cmd.branch_id} not found.",
                    details={"branch_id": str(cmd.branch_id)},
                )

            number = await self._resolve_sale_number(repos, cmd.sale_number, now)
            sale_date = as_utc(cmd.sale_date) if cmd.sale_date is not None else now
            sale = Sale.create(customer, branch, number, sale_date, now=now)

            products: dict[UUID, Product] = {}
            for line in cmd.items:
                product = await load_product(repos.products, line.product_id)
                if product.is_active and not product.has_stock(line.quantity):
                    raise InsufficientStock(
                        f"Insufficient stock for product {product.name}.",
                        details={
                            "product_id": str(product.id),
                            "available": product.stock_quantity,
                            "requested": line.quantity,
                        },
                    )
                sale.add_item(product, line.quantity, line.unit_price, now=now)
                products[product.id] = product
            ensure_valid(validate_sale(snapshot_sale(sale), now=now))

            await apply_stock_adjustments(
                repos.products, sale.pull_stock_adjustments(), known=products
            )

            await repos.sales.add(sale)
            return sale, sale.pull_events()

        try:
            ensure_valid(validate_create_sale_command(cmd, now=now))
            sale, events = await run_in_uow(self._uow, _work)
        except DomainError as exc:
            logger.warning(
                "sales.create.rejected",
                extra={"code": exc.code, "reason": exc.message},
            )
            raise

        await publish_events(self._publisher, events)
        logger.info(
            "sales.create.done",
            extra={
                "sale_id": str(sale.id),
                "sale_number": sale.sale_number,
                "total_amount": str(sale.total_amount),
            },
        )
        return sale_to_dto(sale)

    async def _resolve_sale_number(
        self, repos: SalesRepositories, requested: str | None, now: datetime
    ) -> str:
        if requested is not None:
            if await repos.sales.exists_sale_number(requested):
                raise DuplicateSaleNumber(
                    f"Sale number {requested} already exists.", field="sale_number"
                )
            return requested

        for _ in range(_MAX_GENERATION_ATTEMPTS):
            candidate = generate_sale_number(self._prefix, now, self._rng)
            if not await repos.sales.exists_sale_number(candidate):
                return candidate
        raise DuplicateSaleNumber(
            "Could not generate a unique sale number.",
            field="sale_number",
            details={"attempts": _MAX_GENERATION_ATTEMPTS},
        )


__all__ = ["CreateSaleUseCase"]
