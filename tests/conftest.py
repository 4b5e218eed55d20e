# tests/conftest.py
from __future__ import annotations

from collections.abc import Iterator
from decimal import Decimal
from uuid import uuid4

import prometheus_client as prom
import pytest
from prometheus_client import CollectorRegistry

from retail_sales.domain.entities.parties import Branch, Customer, Product
from retail_sales.domain.entities.sale import Sale
from tests.fakes import InMemorySalesStore, InMemoryUnitOfWork, RecordingPublisher


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Force pytest-anyio to use asyncio (not trio)."""
    return "asyncio"


@pytest.fixture
def fresh_registry(monkeypatch: pytest.MonkeyPatch) -> Iterator[CollectorRegistry]:
    """Swap the default Prometheus registry for an empty one."""
    registry = CollectorRegistry()
    monkeypatch.setattr(prom, "REGISTRY", registry)
    yield registry


@pytest.fixture
def customer() -> Customer:
    return Customer(id=uuid4(), name="Ada Buyer")


@pytest.fixture
def branch() -> Branch:
    return Branch(id=uuid4(), name="Downtown")


@pytest.fixture
def product() -> Product:
    return Product(id=uuid4(), name="Widget", price=Decimal("10.00"), stock_quantity=100)


@pytest.fixture
def store(customer: Customer, branch: Branch, product: Product) -> InMemorySalesStore:
    s = InMemorySalesStore()
    s.customers[customer.id] = customer
    s.branches[branch.id] = branch
    s.put_product(product)
    return s


@pytest.fixture
def uow(store: InMemorySalesStore) -> InMemoryUnitOfWork:
    return InMemoryUnitOfWork(store)


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def open_sale(
    store: InMemorySalesStore, customer: Customer, branch: Branch, product: Product
) -> Sale:
    """Persist an active sale holding one line of 4 widgets (stock 96 left)."""
    sale = Sale.create(customer, branch, "SAL-0001")
    sale.add_item(product, 4)
    sale.pull_events()
    sale.pull_stock_adjustments()
    store.put_sale(sale)
    store.products[product.id].stock_quantity -= 4
    return sale
