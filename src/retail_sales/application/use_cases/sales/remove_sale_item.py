# src/retail_sales/application/use_cases/sales/remove_sale_item.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Use case: cancel one line of a sale.

Purpose:
    Cancel the line through the aggregate (which drops it from the sale
    total), return its units to stock, and publish ``SaleItemCancelled``.

Layer:
    application/use_cases/sales
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from retail_sales.application.schemas.dto.sales import (
    RemoveSaleItemCommand,
    RemoveSaleItemResultDTO,
    sale_item_to_dto,
    sale_to_dto,
)
from retail_sales.application.services.sale_workflow import (
    apply_stock_adjustments,
    get_repositories,
    load_sale,
    publish_events,
)
from retail_sales.application.uow import UnitOfWork, run_in_uow
from retail_sales.application.validators.sale_commands import (
    REMOVE_SALE_ITEM_RULES,
    ensure_command_valid,
)
from retail_sales.domain.entities.sale import Sale
from retail_sales.domain.entities.sale_events import DomainEvent, StockAdjustment
from retail_sales.domain.exceptions.base import DomainError
from retail_sales.domain.interfaces.gateways.sale_event_publisher import SaleEventPublisher

logger = logging.getLogger(__name__)


class RemoveSaleItemUseCase:
    """Cancel a line and restock its units.

    Args:
        uow: Unit of work resolving the sale and product repositories.
        publisher: Optional gateway receiving the item events after commit.
        verify_loaded: When True, the loaded sale is re-validated first.

    Raises:
        ValidationFailed: If the command or the loaded sale violates any rule.
        EntityNotFound: If the sale or line does not exist.
        SaleAlreadyCancelled: If the sale is cancelled.
        ItemCancelled: If the line is already cancelled.
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

    async def execute(self, cmd: RemoveSaleItemCommand) -> RemoveSaleItemResultDTO:
        """Cancel the line.

        Args:
            cmd: Remove-item command.

        Returns:
            RemoveSaleItemResultDTO: The updated sale, the cancelled line, and
            the number of units returned to stock.
        """
        logger.info(
            "sales.remove_item.start",
            extra={"sale_id": str(cmd.sale_id), "item_id": str(cmd.item_id)},
        )

        async def _work(tx: UnitOfWork) -> tuple[Sale, StockAdjustment, list[DomainEvent]]:
            repos = get_repositories(tx)
            sale = await load_sale(repos.sales, cmd.sale_id, verify=self._verify_loaded)
            restock = sale.remove_item(cmd.item_id, cmd.reason)
            await apply_stock_adjustments(repos.products, sale.pull_stock_adjustments())
            await repos.sales.update(sale)
            return sale, restock, sale.pull_events()

        try:
            ensure_command_valid(
                cmd, REMOVE_SALE_ITEM_RULES, subject="remove_sale_item", now=datetime.now(tz=UTC)
            )
            sale, restock, events = await run_in_uow(self._uow, _work)
        except DomainError as exc:
            logger.warning(
                "sales.remove_item.rejected",
                extra={"sale_id": str(cmd.sale_id), "code": exc.code, "reason": exc.message},
            )
            raise

        await publish_events(self._publisher, events)
        logger.info(
            "sales.remove_item.done",
            extra={
                "sale_id": str(sale.id),
                "item_id": str(cmd.item_id),
                "restocked_quantity": restock.quantity,
                "total_amount": str(sale.total_amount),
            },
        )
        return RemoveSaleItemResultDTO(
            sale=sale_to_dto(sale),
            item=sale_item_to_dto(sale.find_item(cmd.item_id)),
            restocked_quantity=restock.quantity,
        )


__all__ = ["RemoveSaleItemUseCase"]
