# src/retail_sales/application/use_cases/sales/cancel_sale.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Use case: cancel a sale.

Purpose:
    Move the sale to its terminal state, return the units of every active
    line to stock, and publish ``SaleCancelled`` with the pre-cancellation
    total and item count.

Layer:
    application/use_cases/sales
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from retail_sales.application.schemas.dto.sales import (
    CancelSaleCommand,
    CancelSaleResultDTO,
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
    CANCEL_SALE_RULES,
    ensure_command_valid,
)
from retail_sales.domain.entities.sale import Sale
from retail_sales.domain.entities.sale_events import DomainEvent, SaleCancelled
from retail_sales.domain.exceptions.base import DomainError
from retail_sales.domain.interfaces.gateways.sale_event_publisher import SaleEventPublisher

logger = logging.getLogger(__name__)


class CancelSaleUseCase:
    """Cancel an active sale and restock its lines.

    Args:
        uow: Unit of work resolving the sale and product repositories.
        publisher: Optional gateway receiving ``SaleCancelled`` after commit.
        verify_loaded: When True, the loaded sale is re-validated first.

    Raises:
        ValidationFailed: If the command or the loaded sale violates any rule.
        EntityNotFound: If the sale does not exist.
        SaleAlreadyCancelled: If the sale is already cancelled.
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

    async def execute(self, cmd: CancelSaleCommand) -> CancelSaleResultDTO:
        """Cancel the sale.

        Args:
            cmd: Cancel-sale command.

        Returns:
            CancelSaleResultDTO: The cancelled sale and its pre-cancellation
            figures.
        """
        logger.info("sales.cancel.start", extra={"sale_id": str(cmd.sale_id)})

        async def _work(tx: UnitOfWork) -> tuple[Sale, SaleCancelled, list[DomainEvent]]:
            repos = get_repositories(tx)
            sale = await load_sale(repos.sales, cmd.sale_id, verify=self._verify_loaded)
            cancelled = sale.cancel(cmd.reason)
            await apply_stock_adjustments(repos.products, sale.pull_stock_adjustments())
            await repos.sales.update(sale)
            return sale, cancelled, sale.pull_events()

        try:
            ensure_command_valid(
                cmd, CANCEL_SALE_RULES, subject="cancel_sale", now=datetime.now(tz=UTC)
            )
            sale, cancelled, events = await run_in_uow(self._uow, _work)
        except DomainError as exc:
            logger.warning(
                "sales.cancel.rejected",
                extra={"sale_id": str(cmd.sale_id), "code": exc.code, "reason": exc.message},
            )
            raise

        await publish_events(self._publisher, events)
        logger.info(
            "sales.cancel.done",
            extra={
                "sale_id": str(sale.id),
                "sale_number": sale.sale_number,
                "original_total_amount": str(cancelled.original_total_amount),
                "original_item_count": cancelled.original_item_count,
            },
        )
        return CancelSaleResultDTO(
            sale=sale_to_dto(sale),
            original_total_amount=cancelled.original_total_amount,
            original_item_count=cancelled.original_item_count,
            cancellation_reason=cancelled.cancellation_reason,
        )


__all__ = ["CancelSaleUseCase"]
