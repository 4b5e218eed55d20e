# src/retail_sales/application/use_cases/sales/get_sale.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Use case: read one sale.

Purpose:
    Load a sale by id and, when configured, verify its persisted state against
    every sale and item rule before returning it.

Layer:
    application/use_cases/sales
"""

from __future__ import annotations

import logging

from retail_sales.application.schemas.dto.sales import GetSaleQuery, SaleDTO, sale_to_dto
from retail_sales.application.services.sale_workflow import get_repositories, load_sale
from retail_sales.application.uow import UnitOfWork

logger = logging.getLogger(__name__)


class GetSaleUseCase:
    """Read a sale.

    Args:
        uow: Unit of work resolving the sale repository.
        verify_loaded: When True, the loaded sale is re-validated.

    Raises:
        EntityNotFound: If the sale does not exist.
        ValidationFailed: If ``verify_loaded`` is set and the persisted sale
            violates any rule.
    """

    def __init__(self, *, uow: UnitOfWork, verify_loaded: bool = True) -> None:
        """Initialize the use case."""
        self._uow = uow
        self._verify_loaded = verify_loaded

    async def execute(self, query: GetSaleQuery) -> SaleDTO:
        """Execute the read.

        Args:
            query: Sale lookup.

        Returns:
            SaleDTO: View of the sale.
        """
        async with self._uow as tx:
            repos = get_repositories(tx)
            sale = await load_sale(repos.sales, query.sale_id, verify=self._verify_loaded)

        logger.debug(
            "sales.get.done",
            extra={"sale_id": str(sale.id), "items": len(sale.items)},
        )
        return sale_to_dto(sale)


__all__ = ["GetSaleUseCase"]
