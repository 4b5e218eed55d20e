# src/retail_sales/application/use_cases/sales/add_sale_item.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Use case: add a product line to a sale.

Purpose:
    Validate the command, load the sale and product, check stock, let the
    aggregate enforce the per-product cap, take the units out of stock, and
    persist sale and product together.

Layer:
    application/use_cases/sales
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from retail_sales.application.schemas.dto.sales import (
    AddSaleItemCommand,
    AddSaleItemResultDTO,
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
    ADD_SALE_ITEM_RULES,
    ensure_command_valid,
)
from retail_sales.domain.entities.sale import Sale
from retail_sales.domain.entities.sale_events import DomainEvent
from retail_sales.domain.entities.sale_item import SaleItem
from retail_sales.domain.exceptions.base import DomainError
from retail_sales.domain.exceptions.sales import InsufficientStock
from retail_sales.domain.interfaces.gateways.sale_event_publisher import SaleEventPublisher

logger = logging.getLogger(__name__)


class AddSaleItemUseCase:
    """Add a line to an active sale.

    Args:
        uow: Unit of work resolving the sale and product repositories.
        publisher: Optional gateway receiving ``SaleModified`` after commit.
        verify_loaded: When True, the loaded sale is re-validated first.

    Raises:
        ValidationFailed: If the command or the loaded sale violates any rule.
        EntityNotFound: If the sale or product does not exist.
        SaleAlreadyCancelled: If the sale is cancelled.
        ProductUnavailable: If the product is inactive.
        InsufficientStock: If the product lacks the requested units.
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

    async def execute(self, cmd: AddSaleItemCommand) -> AddSaleItemResultDTO:
        """Add the line.

        Args:
            cmd: Add-item command.

        Returns:
            AddSaleItemResultDTO: The updated sale and the new line.
        """
        logger.info(
            "sales.add_item.start",
            extra={
                "sale_id": str(cmd.sale_id),
                "product_id": str(cmd.product_id),
                "quantity": cmd.quantity,
            },
        )

        async def _work(tx: UnitOfWork) -> tuple[Sale, SaleItem, list[DomainEvent]]:
            repos = get_repositories(tx)
            sale = await load_sale(repos.sales, cmd.sale_id, verify=self._verify_loaded)
            product = await load_product(repos.products, cmd.product_id)
            if product.is_active and not product.has_stock(cmd.quantity):
                raise InsufficientStock(
                    f"Insufficient stock for product {product.name}.",
                    details={
                        "product_id": str(product.id),
                        "available": product.stock_quantity,
                        "requested": cmd.quantity,
                    },
                )

            item = sale.add_item(product, cmd.quantity, cmd.unit_price)
            await apply_stock_adjustments(
                repos.products,
                sale.pull_stock_adjustments(),
                known={product.id: product},
            )
            await repos.sales.update(sale)
            return sale, item, sale.pull_events()

        try:
            ensure_command_valid(
                cmd, ADD_SALE_ITEM_RULES, subject="add_sale_item", now=datetime.now(tz=UTC)
            )
            sale, item, events = await run_in_uow(self._uow, _work)
        except DomainError as exc:
            logger.warning(
                "sales.add_item.rejected",
                extra={"sale_id": str(cmd.sale_id), "code": exc.code, "reason": exc.message},
            )
            raise

        await publish_events(self._publisher, events)
        logger.info(
            "sales.add_item.done",
            extra={
                "sale_id": str(sale.id),
                "item_id": str(item.id),
                "discount_percent": str(item.discount_percent),
                "total_amount": str(sale.total_amount),
            },
        )
        return AddSaleItemResultDTO(sale=sale_to_dto(sale), item=sale_item_to_dto(item))


__all__ = ["AddSaleItemUseCase"]
