from __future__ import annotations

import random
import re
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from retail_sales.application.schemas.dto.sales import CreateSaleCommand, SaleItemRequest
from retail_sales.application.use_cases.sales.create_sale import CreateSaleUseCase
from retail_sales.domain.entities.parties import Branch, Customer, Product
from retail_sales.domain.enums.sales import SaleStatus
from retail_sales.domain.exceptions.sales import (
    DuplicateSaleNumber,
    EntityNotFound,
    InactiveEntity,
    InsufficientStock,
    ProductUnavailable,
    ValidationFailed,
)
from tests.fakes import InMemorySalesStore, InMemoryUnitOfWork, RecordingPublisher

pytestmark = pytest.mark.anyio

NOW = datetime(2026, 3, 1, 9, 30, tzinfo=UTC)


def _use_case(
    uow: InMemoryUnitOfWork, publisher: RecordingPublisher | None = None, seed: int = 3
) -> CreateSaleUseCase:
    return CreateSaleUseCase(
        uow=uow,
        publisher=publisher,
        sale_number_prefix="POS",
        rng=random.Random(seed),
        clock=lambda: NOW,
    )


async def test_creates_empty_sale_with_generated_number(
    store: InMemorySalesStore,
    uow: InMemoryUnitOfWork,
    publisher: RecordingPublisher,
    customer: Customer,
    branch: Branch,
) -> None:
    dto = await _use_case(uow, publisher).execute(
        CreateSaleCommand(customer_id=customer.id, branch_id=branch.id)
    )

    assert re.fullmatch(r"POS20260301093000\d{4}", dto.sale_number)
    assert dto.status is SaleStatus.ACTIVE
    assert dto.total_amount == Decimal("0.00")
    assert dto.items == ()
    assert dto.sale_date == NOW
    assert dto.customer_name == "Ada Buyer"
    assert store.sales[dto.id].sale_number == dto.sale_number
    assert uow.commits == 1
    assert publisher.event_types == ["SaleCreated"]


async def test_same_seed_generates_same_number(
    customer: Customer, branch: Branch
) -> None:
    numbers = []
    for _ in range(2):
        s = InMemorySalesStore()
        s.customers[customer.id] = customer
        s.branches[branch.id] = branch
        dto = await _use_case(InMemoryUnitOfWork(s), seed=11).execute(
            CreateSaleCommand(customer_id=customer.id, branch_id=branch.id)
        )
        numbers.append(dto.sale_number)
    assert numbers[0] == numbers[1]


async def test_explicit_number_and_date_are_kept(
    uow: InMemoryUnitOfWork, customer: Customer, branch: Branch
) -> None:
    sale_date = NOW - timedelta(days=3)
    dto = await _use_case(uow).execute(
        CreateSaleCommand(
            customer_id=customer.id,
            branch_id=branch.id,
            sale_number="SAL-2026-0001",
            sale_date=sale_date,
        )
    )
    assert dto.sale_number == "SAL-2026-0001"
    assert dto.sale_date == sale_date


async def test_duplicate_number_is_rejected(
    store: InMemorySalesStore,
    uow: InMemoryUnitOfWork,
    publisher: RecordingPublisher,
    customer: Customer,
    branch: Branch,
) -> None:
    cmd = CreateSaleCommand(customer_id=customer.id, branch_id=branch.id, sale_number="SAL-0009")
    await _use_case(uow).execute(cmd)

    with pytest.raises(DuplicateSaleNumber) as ei:
        await _use_case(uow, publisher).execute(cmd)

    assert ei.value.field == "sale_number"
    assert len(store.sales) == 1
    assert uow.rollbacks == 1
    assert publisher.batches == []


async def test_missing_customer_or_branch(
    uow: InMemoryUnitOfWork, customer: Customer, branch: Branch
) -> None:
    with pytest.raises(EntityNotFound):
        await _use_case(uow).execute(
            CreateSaleCommand(customer_id=uuid4(), branch_id=branch.id)
        )
    with pytest.raises(EntityNotFound):
        await _use_case(uow).execute(
            CreateSaleCommand(customer_id=customer.id, branch_id=uuid4())
        )


async def test_inactive_customer_is_rejected(
    store: InMemorySalesStore, uow: InMemoryUnitOfWork, branch: Branch
) -> None:
    dormant = Customer(id=uuid4(), name="Dormant", is_active=False)
    store.customers[dormant.id] = dormant

    with pytest.raises(InactiveEntity) as ei:
        await _use_case(uow).execute(
            CreateSaleCommand(customer_id=dormant.id, branch_id=branch.id)
        )
    assert ei.value.message == "Cannot create sale for inactive customer."
    assert store.sales == {}


async def test_invalid_command_fails_before_touching_storage(
    uow: InMemoryUnitOfWork, customer: Customer
) -> None:
    cmd = CreateSaleCommand(
        customer_id=customer.id,
        branch_id=uuid4(),
        sale_number="X",
        sale_date=NOW + timedelta(days=5),
    )

    with pytest.raises(ValidationFailed) as ei:
        await _use_case(uow).execute(cmd)

    assert ei.value.fields == ("sale_number", "sale_date")
    assert uow.commits == 0
    assert uow.rollbacks == 0


@pytest.fixture
def gadget(store: InMemorySalesStore) -> Product:
    item = Product(id=uuid4(), name="Gadget", price=Decimal("25.00"), stock_quantity=12)
    store.put_product(item)
    return item


async def test_initial_lines_are_priced_and_take_stock(
    store: InMemorySalesStore,
    uow: InMemoryUnitOfWork,
    publisher: RecordingPublisher,
    customer: Customer,
    branch: Branch,
    product: Product,
    gadget: Product,
) -> None:
    dto = await _use_case(uow, publisher).execute(
        CreateSaleCommand(
            customer_id=customer.id,
            branch_id=branch.id,
            items=[
                SaleItemRequest(product_id=product.id, quantity=10),
                SaleItemRequest(product_id=gadget.id, quantity=2, unit_price=Decimal("20.00")),
            ],
        )
    )

    assert [i.total_price for i in dto.items] == [Decimal("80.00"), Decimal("40.00")]
    assert dto.total_amount == Decimal("120.00")
    assert dto.items[0].created_at == NOW
    assert store.stock_of(product.id) == 90
    assert store.stock_of(gadget.id) == 10
    assert len(store.sales[dto.id].items) == 2
    assert uow.commits == 1
    assert publisher.event_types == ["SaleCreated", "SaleModified", "SaleModified"]


async def test_failing_line_rolls_back_the_whole_sale(
    store: InMemorySalesStore,
    uow: InMemoryUnitOfWork,
    publisher: RecordingPublisher,
    customer: Customer,
    branch: Branch,
    product: Product,
    gadget: Product,
) -> None:
    with pytest.raises(InsufficientStock) as ei:
        await _use_case(uow, publisher).execute(
            CreateSaleCommand(
                customer_id=customer.id,
                branch_id=branch.id,
                items=[
                    SaleItemRequest(product_id=product.id, quantity=5),
                    SaleItemRequest(product_id=gadget.id, quantity=13),
                ],
            )
        )

    assert ei.value.details["available"] == 12
    assert store.sales == {}
    assert store.stock_of(product.id) == 100
    assert store.stock_of(gadget.id) == 12
    assert uow.commits == 0
    assert uow.rollbacks == 1
    assert publisher.batches == []


async def test_inactive_or_unknown_line_product_stores_nothing(
    store: InMemorySalesStore,
    uow: InMemoryUnitOfWork,
    customer: Customer,
    branch: Branch,
    product: Product,
) -> None:
    retired = Product(
        id=uuid4(), name="Retired", price=Decimal("5.00"), stock_quantity=50, is_active=False
    )
    store.put_product(retired)

    with pytest.raises(ProductUnavailable):
        await _use_case(uow).execute(
            CreateSaleCommand(
                customer_id=customer.id,
                branch_id=branch.id,
                items=[
                    SaleItemRequest(product_id=product.id, quantity=1),
                    SaleItemRequest(product_id=retired.id, quantity=1),
                ],
            )
        )
    with pytest.raises(EntityNotFound):
        await _use_case(uow).execute(
            CreateSaleCommand(
                customer_id=customer.id,
                branch_id=branch.id,
                items=[SaleItemRequest(product_id=uuid4(), quantity=1)],
            )
        )

    assert store.sales == {}
    assert store.stock_of(product.id) == 100


async def test_duplicate_line_products_are_rejected_before_storage(
    uow: InMemoryUnitOfWork, customer: Customer, branch: Branch, product: Product
) -> None:
    line = SaleItemRequest(product_id=product.id, quantity=2)

    with pytest.raises(ValidationFailed) as ei:
        await _use_case(uow).execute(
            CreateSaleCommand(customer_id=customer.id, branch_id=branch.id, items=[line, line])
        )

    assert ei.value.fields == ("items",)
    assert uow.rollbacks == 0
