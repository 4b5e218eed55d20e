# src/retail_sales/dependencies/sales.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Dependency wiring for the sales workflows (use cases, controller).

Overview:
    Composition root for hosts embedding the sales core. Given a unit of work
    (which resolves the repositories) and an optional event publisher, it
    builds every sale use case and the controller that fronts them, applying
    the values from :class:`~retail_sales.config.settings.Settings`.

Layer:
    dependencies

Design:
    * Settings are resolved through this module's ``get_settings`` shim so
      tests can monkeypatch it without touching the global settings cache.
    * When no publisher is given, events go to the structured log through
      :class:`LoggingSaleEventPublisher`.
"""

from __future__ import annotations

from dataclasses import dataclass

from retail_sales.adapters.controllers.sales_controller import SalesController
from retail_sales.adapters.gateways.logging_event_publisher import LoggingSaleEventPublisher
from retail_sales.application.uow import UnitOfWork
from retail_sales.application.use_cases.sales.add_sale_item import AddSaleItemUseCase
from retail_sales.application.use_cases.sales.cancel_sale import CancelSaleUseCase
from retail_sales.application.use_cases.sales.create_sale import CreateSaleUseCase
from retail_sales.application.use_cases.sales.get_sale import GetSaleUseCase
from retail_sales.application.use_cases.sales.remove_sale_item import RemoveSaleItemUseCase
from retail_sales.application.use_cases.sales.update_sale_item_quantity import (
    UpdateSaleItemQuantityUseCase,
)
from retail_sales.config.settings import Settings
from retail_sales.domain.interfaces.gateways.sale_event_publisher import SaleEventPublisher
from retail_sales.infrastructure.logging.logger import configure_root_logging, get_json_logger

logger = get_json_logger(__name__)


def get_settings() -> Settings:
    """Shim for tests to patch settings resolution in this module."""
    from retail_sales.config.settings import get_settings as core_get_settings

    return core_get_settings()


@dataclass(frozen=True, slots=True)
class SalesUseCases:
    """Every sale use case bound to one unit of work."""

    create_sale: CreateSaleUseCase
    add_sale_item: AddSaleItemUseCase
    update_sale_item_quantity: UpdateSaleItemQuantityUseCase
    remove_sale_item: RemoveSaleItemUseCase
    cancel_sale: CancelSaleUseCase
    get_sale: GetSaleUseCase


def build_sales_use_cases(
    uow: UnitOfWork,
    *,
    publisher: SaleEventPublisher | None = None,
    settings: Settings | None = None,
) -> SalesUseCases:
    """Construct the sale use cases.

    Args:
        uow: Unit of work resolving the sale, product, customer and branch
            repositories.
        publisher: Event gateway; defaults to :class:`LoggingSaleEventPublisher`.
        settings: Explicit settings; defaults to :func:`get_settings`.

    Returns:
        SalesUseCases: Use cases sharing ``uow`` and ``publisher``.
    """
    cfg = settings or get_settings()
    pub = publisher if publisher is not None else LoggingSaleEventPublisher()
    verify = cfg.verify_loaded_sales
    return SalesUseCases(
        create_sale=CreateSaleUseCase(
            uow=uow, publisher=pub, sale_number_prefix=cfg.sale_number_prefix
        ),
        add_sale_item=AddSaleItemUseCase(uow=uow, publisher=pub, verify_loaded=verify),
        update_sale_item_quantity=UpdateSaleItemQuantityUseCase(
            uow=uow, publisher=pub, verify_loaded=verify
        ),
        remove_sale_item=RemoveSaleItemUseCase(uow=uow, publisher=pub, verify_loaded=verify),
        cancel_sale=CancelSaleUseCase(uow=uow, publisher=pub, verify_loaded=verify),
        get_sale=GetSaleUseCase(uow=uow, verify_loaded=verify),
    )


def build_sales_controller(
    uow: UnitOfWork,
    *,
    publisher: SaleEventPublisher | None = None,
    settings: Settings | None = None,
) -> SalesController:
    """Configure logging and construct the sales controller.

    Args:
        uow: Unit of work shared by every use case.
        publisher: Event gateway; defaults to :class:`LoggingSaleEventPublisher`.
        settings: Explicit settings; defaults to :func:`get_settings`.

    Returns:
        SalesController: Controller fronting every sale use case.
    """
    cfg = settings or get_settings()
    configure_root_logging(cfg.log_level)
    use_cases = build_sales_use_cases(uow, publisher=publisher, settings=cfg)
    logger.info(
        "sales.controller.built",
        extra={
            "environment": cfg.environment.value,
            "metrics_enabled": cfg.metrics_enabled,
            "verify_loaded_sales": cfg.verify_loaded_sales,
        },
    )
    return SalesController(
        create_sale=use_cases.create_sale,
        add_sale_item=use_cases.add_sale_item,
        update_sale_item_quantity=use_cases.update_sale_item_quantity,
        remove_sale_item=use_cases.remove_sale_item,
        cancel_sale=use_cases.cancel_sale,
        get_sale=use_cases.get_sale,
        metrics_enabled=cfg.metrics_enabled,
    )


__all__ = [
    "SalesUseCases",
    "build_sales_controller",
    "build_sales_use_cases",
    "get_settings",
]
