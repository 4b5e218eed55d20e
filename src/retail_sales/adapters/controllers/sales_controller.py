# src/retail_sales/adapters/controllers/sales_controller.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Sales Controller.

Summary:
    Thin adapter coordinating the sale use cases. Each call runs under its
    own log correlation id, is timed, and is counted by outcome; validation
    failures additionally count one violation per offending field. Errors are
    always re-raised unchanged.

Layer:
    adapters/controllers
"""

from __future__ import annotations

import re
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from retail_sales.adapters.controllers.base import BaseController
from retail_sales.application.schemas.dto.sales import (
    AddSaleItemCommand,
    AddSaleItemResultDTO,
    CancelSaleCommand,
    CancelSaleResultDTO,
    CreateSaleCommand,
    GetSaleQuery,
    RemoveSaleItemCommand,
    RemoveSaleItemResultDTO,
    SaleDTO,
    UpdateSaleItemQuantityCommand,
    UpdateSaleItemQuantityResultDTO,
)
from retail_sales.application.use_cases.sales.add_sale_item import AddSaleItemUseCase
from retail_sales.application.use_cases.sales.cancel_sale import CancelSaleUseCase
from retail_sales.application.use_cases.sales.create_sale import CreateSaleUseCase
from retail_sales.application.use_cases.sales.get_sale import GetSaleUseCase
from retail_sales.application.use_cases.sales.remove_sale_item import RemoveSaleItemUseCase
from retail_sales.application.use_cases.sales.update_sale_item_quantity import (
    UpdateSaleItemQuantityUseCase,
)
from retail_sales.domain.exceptions.base import DomainError
from retail_sales.domain.exceptions.sales import ValidationFailed
from retail_sales.infrastructure.logging.logger import bind_correlation_id
from retail_sales.infrastructure.observability.metrics import (
    get_sales_command_duration_seconds,
    get_sales_commands_total,
    get_sales_rule_violations_total,
)

T = TypeVar("T")

OUTCOME_SUCCESS = "success"
OUTCOME_UNEXPECTED = "UNEXPECTED_ERROR"

_ITEM_INDEX_RE = re.compile(r"^items\[\d+\]\.")


def metric_field(field: str) -> str:
    """Collapse per-line field paths so label cardinality stays bounded.

    ``items[3].quantity`` becomes ``items.quantity``.
    """
    return _ITEM_INDEX_RE.sub("items.", field)


class SalesController(BaseController):
    """Controller orchestrating the sale lifecycle."""

    __slots__ = (
        "_add_item",
        "_cancel",
        "_create",
        "_get",
        "_metrics_enabled",
        "_remove_item",
        "_update_item",
    )

    def __init__(
        self,
        *,
        create_sale: CreateSaleUseCase,
        add_sale_item: AddSaleItemUseCase,
        update_sale_item_quantity: UpdateSaleItemQuantityUseCase,
        remove_sale_item: RemoveSaleItemUseCase,
        cancel_sale: CancelSaleUseCase,
        get_sale: GetSaleUseCase,
        metrics_enabled: bool = True,
    ) -> None:
        """Initialize the controller.

        Args:
            create_sale: Use case opening sales.
            add_sale_item: Use case adding lines.
            update_sale_item_quantity: Use case changing line quantities.
            remove_sale_item: Use case cancelling lines.
            cancel_sale: Use case cancelling sales.
            get_sale: Use case reading sales.
            metrics_enabled: Record Prometheus metrics for each call.
        """
        self._create = create_sale
        self._add_item = add_sale_item
        self._update_item = update_sale_item_quantity
        self._remove_item = remove_sale_item
        self._cancel = cancel_sale
        self._get = get_sale
        self._metrics_enabled = metrics_enabled

    async def create_sale(self, cmd: CreateSaleCommand) -> SaleDTO:
        """Open a sale."""
        return await self._observe("create_sale", lambda: self._create.execute(cmd))

    async def add_item(self, cmd: AddSaleItemCommand) -> AddSaleItemResultDTO:
        """Add a product line to a sale."""
        return await self._observe("add_sale_item", lambda: self._add_item.execute(cmd))

    async def update_item_quantity(
        self, cmd: UpdateSaleItemQuantityCommand
    ) -> UpdateSaleItemQuantityResultDTO:
        """Change the quantity of a line."""
        return await self._observe(
            "update_sale_item_quantity", lambda: self._update_item.execute(cmd)
        )

    async def remove_item(self, cmd: RemoveSaleItemCommand) -> RemoveSaleItemResultDTO:
        """Cancel a line."""
        return await self._observe("remove_sale_item", lambda: self._remove_item.execute(cmd))

    async def cancel_sale(self, cmd: CancelSaleCommand) -> CancelSaleResultDTO:
        """Cancel a sale."""
        return await self._observe("cancel_sale", lambda: self._cancel.execute(cmd))

    async def get_sale(self, query: GetSaleQuery) -> SaleDTO:
        """Read a sale."""
        return await self._observe("get_sale", lambda: self._get.execute(query))

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    async def _observe(self, command: str, call: Callable[[], Awaitable[T]]) -> T:
        """Run ``call`` and record its outcome and latency.

        Args:
            command: Metric label for the command.
            call: Zero-argument coroutine factory invoking the use case.

        Returns:
            Whatever the use case returns.

        Raises:
            Exception: Any error from the use case, re-raised unchanged.
        """
        started = time.perf_counter()
        outcome = OUTCOME_SUCCESS
        try:
            with bind_correlation_id():
                return await call()
        except ValidationFailed as exc:
            outcome = exc.code
            if self._metrics_enabled:
                violations = get_sales_rule_violations_total()
                for violation in exc.violations:
                    violations.labels(field=metric_field(violation.field)).inc()
            raise
        except DomainError as exc:
            outcome = exc.code
            raise
        except Exception:
            outcome = OUTCOME_UNEXPECTED
            raise
        finally:
            if self._metrics_enabled:
                get_sales_commands_total().labels(command=command, outcome=outcome).inc()
                get_sales_command_duration_seconds().labels(command=command).observe(
                    time.perf_counter() - started
                )


__all__ = ["SalesController", "metric_field"]
