from __future__ import annotations

import logging
from datetime import UTC, datetime
from decimal import Decimal
from uuid import uuid4

import pytest

from retail_sales.adapters.gateways.logging_event_publisher import LoggingSaleEventPublisher
from retail_sales.domain.entities.sale_events import SaleCreated, SaleModified
from retail_sales.domain.enums.sales import SaleModificationType

pytestmark = pytest.mark.anyio


def _events() -> list[SaleCreated | SaleModified]:
    sale_id = uuid4()
    return [
        SaleCreated(
            sale_id=sale_id,
            sale_number="SAL-0001",
            customer_id=uuid4(),
            branch_id=uuid4(),
            total_amount=Decimal("0"),
            item_count=0,
            sale_date=datetime(2026, 1, 1, tzinfo=UTC),
        ),
        SaleModified(
            sale_id=sale_id,
            sale_number="SAL-0001",
            modification_type=SaleModificationType.ITEM_ADDED,
        ),
    ]


async def test_each_event_becomes_one_log_line(caplog: pytest.LogCaptureFixture) -> None:
    publisher = LoggingSaleEventPublisher()

    with caplog.at_level(logging.INFO):
        await publisher.publish(_events())

    lines = [r for r in caplog.records if r.getMessage() == "sales.event"]
    assert [getattr(r, "event_type", None) for r in lines] == ["SaleCreated", "SaleModified"]
    assert getattr(lines[0], "event")["sale_number"] == "SAL-0001"


async def test_custom_logger_and_level(caplog: pytest.LogCaptureFixture) -> None:
    target = logging.getLogger("test.sales.events")
    publisher = LoggingSaleEventPublisher(target, level=logging.DEBUG)

    with caplog.at_level(logging.DEBUG, logger="test.sales.events"):
        await publisher.publish(_events()[:1])

    (record,) = [r for r in caplog.records if r.name == "test.sales.events"]
    assert record.levelno == logging.DEBUG
