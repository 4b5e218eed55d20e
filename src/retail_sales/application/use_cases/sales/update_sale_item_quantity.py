# src/retail_sales/application/use_cases/sales/update_sale_item_quantity.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Use case: change the quantity of a sale line.

Purpose:
    Validate the command, let the aggregate re-check the per-product cap and
    re-derive the discount tier, then move the quantity delta in or out of
    stock.

Layer:
    application/use_cases/sales
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from uuid import UUID

from retail_sales.application.schemas.dto.sales import (
    UpdateSaleItemQuantityCommand,
    UpdateSaleItemQuantityResultDTO,
    sale_item_to_dto,
    sale_to_dto,
)
from retail_sales.application.services.sale_workflow import (
    apply_stock_adjustments,
    get_repositories,
    load_product,
    load_sale,
    publish_events,
)
from retail_sales.application.uow import UnitOfWork, run_in_uow
from retail_sales.application.validators.sale_commands import (
    UPDATE_SALE_ITEM_QUANTITY_RULES,
    ensure_command_valid,
)
from retail_sales.domain.entities.parties import Product
from retail_sales.domain.entities.sale import Sale
from retail_sales.domain.entities.sale_events import DomainEvent
from retail_sales.domain.entities.sale_item import SaleItem
from retail_sales.domain.exceptions.base import DomainError
from retail_sales.domain.exceptions.sales import InsufficientStock
from retail_sales.domain.interfaces.gateways.sale_event_publisher import SaleEventPublisher

logger = logging.getLogger(__name__)


class UpdateSaleItemQuantityUseCase:
    """Change the quantity of an active line.

    Args:
        uow: Unit of work resolving the sale and product repositories.
        publisher: Optional gateway receiving ``SaleModified`` after commit.
        verify_loaded: When True, the loaded sale is re-validated first.

    Raises:
        ValidationFailed: If the command or the loaded sale violates any rule.
        EntityNotFound: If the sale, line, or product does not exist.
        SaleAlreadyCancelled: If the sale is cancelled.
        ItemCancelled: If the line is cancelled.
        InsufficientStock: If an increase exceeds the product's stock.
        ProductQuantityCapExceeded: If the product's summed quantity would
            exceed the per-sale cap.
    """

    def __init__(
        self,
        *,
        uow: UnitOfWork,
        publisher: SaleEventPublisher | None = None,
        verify_loaded: bool = True,
    ) -> None:
        """Initialize the use case."""
        self._uow = uow
        self._publisher = publisher
        self._verify_loaded = verify_loaded

    async def execute(
        self, cmd: UpdateSaleItemQuantityCommand
    ) -> UpdateSaleItemQuantityResultDTO:
        """Apply the new quantity.

        Args:
            cmd: Update-quantity command.

        Returns:
            UpdateSaleItemQuantityResultDTO: The updated sale and line, with
            the quantity the line had before.
        """
        logger.info(
            "sales.update_item.start",
            extra={
                "sale_id": str(cmd.sale_id),
                "item_id": str(cmd.item_id),
                "quantity": cmd.quantity,
            },
        )

        async def _work(tx: UnitOfWork) -> tuple[Sale, SaleItem, int, list[DomainEvent]]:
            repos = get_repositories(tx)
            sale = await load_sale(repos.sales, cmd.sale_id, verify=self._verify_loaded)
            item = sale.find_item(cmd.item_id)
            previous = item.quantity

            known: dict[UUID, Product] = {}
            delta = cmd.quantity - previous
            if delta > 0 and not item.is_cancelled and not sale.is_cancelled:
                product = await load_product(repos.products, item.product_id)
                if not product.has_stock(delta):
                    raise InsufficientStock(
                        f"Insufficient stock for product {product.name}.",
                        details={
                            "product_id": str(product.id),
                            "available": product.stock_quantity,
                            "requested": delta,
                        },
                    )
                known[product.id] = product

            sale.update_item_quantity(cmd.item_id, cmd.quantity)
            await apply_stock_adjustments(
                repos.products, sale.pull_stock_adjustments(), known=known
            )
            await repos.sales.update(sale)
            return sale, item, previous, sale.pull_events()

        try:
            ensure_command_valid(
                cmd,
                UPDATE_SALE_ITEM_QUANTITY_RULES,
                subject="update_sale_item_quantity",
                now=datetime.now(tz=UTC),
            )
            sale, item, previous, events = await run_in_uow(self._uow, _work)
        except DomainError as exc:
            logger.warning(
                "sales.update_item.rejected",
                extra={"sale_id": str(cmd.sale_id), "code": exc.code, "reason": exc.message},
            )
            raise

        await publish_events(self._publisher, events)
        logger.info(
            "sales.update_item.done",
            extra={
                "sale_id": str(sale.id),
                "item_id": str(item.id),
                "previous_quantity": previous,
                "quantity": item.quantity,
                "total_amount": str(sale.total_amount),
            },
        )
        return UpdateSaleItemQuantityResultDTO(
            sale=sale_to_dto(sale),
            item=sale_item_to_dto(item),
            previous_quantity=previous,
        )


__all__ = ["UpdateSaleItemQuantityUseCase"]
