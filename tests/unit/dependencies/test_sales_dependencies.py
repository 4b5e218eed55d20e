# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
from prometheus_client import CollectorRegistry

from retail_sales.adapters.controllers.sales_controller import SalesController
from retail_sales.adapters.gateways.logging_event_publisher import LoggingSaleEventPublisher
from retail_sales.application.schemas.dto.sales import CreateSaleCommand
from retail_sales.config.settings import Settings
from retail_sales.dependencies import sales as deps
from retail_sales.domain.entities.parties import Branch, Customer
from tests.fakes import InMemoryUnitOfWork, RecordingPublisher

pytestmark = pytest.mark.anyio


@pytest.fixture(autouse=True)
def _restore_root_level() -> Iterator[None]:
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)


def _settings(**overrides: object) -> Settings:
    return Settings.model_validate(
        {"SALE_NUMBER_PREFIX": "POS", "VERIFY_LOADED_SALES": False, **overrides}
    )


def test_use_cases_share_uow_and_default_publisher(uow: InMemoryUnitOfWork) -> None:
    use_cases = deps.build_sales_use_cases(uow, settings=_settings())

    assert use_cases.create_sale._prefix == "POS"
    assert use_cases.add_sale_item._verify_loaded is False
    assert use_cases.get_sale._verify_loaded is False
    assert isinstance(use_cases.cancel_sale._publisher, LoggingSaleEventPublisher)
    assert use_cases.remove_sale_item._uow is uow


def test_settings_default_to_the_module_shim(
    monkeypatch: pytest.MonkeyPatch, uow: InMemoryUnitOfWork
) -> None:
    monkeypatch.setattr(deps, "get_settings", lambda: _settings(SALE_NUMBER_PREFIX="SHIM"))
    assert deps.build_sales_use_cases(uow).create_sale._prefix == "SHIM"


async def test_controller_is_wired_end_to_end(
    fresh_registry: CollectorRegistry,
    uow: InMemoryUnitOfWork,
    publisher: RecordingPublisher,
    customer: Customer,
    branch: Branch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.INFO):
        controller = deps.build_sales_controller(
            uow, publisher=publisher, settings=_settings(LOG_LEVEL="debug")
        )
    assert isinstance(controller, SalesController)
    assert any(r.getMessage() == "sales.controller.built" for r in caplog.records)

    sale = await controller.create_sale(
        CreateSaleCommand(customer_id=customer.id, branch_id=branch.id)
    )

    assert sale.sale_number.startswith("POS")
    assert publisher.event_types == ["SaleCreated"]
    assert (
        fresh_registry.get_sample_value(
            "retail_sales_commands_total", {"command": "create_sale", "outcome": "success"}
        )
        == 1.0
    )
