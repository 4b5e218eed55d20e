# tests/fakes.py
"""In-memory test doubles for the sales workflows.

The unit of work stages every change: repositories work on copies of the
committed state, ``commit`` publishes them, ``rollback`` drops them. Sales are
stored as snapshots and rehydrated with ``Sale.from_snapshot`` so tests can
seed corrupted persisted state.
"""

from __future__ import annotations

from collections.abc import Sequence
from types import TracebackType
from typing import Any
from uuid import UUID

from retail_sales.domain.entities.parties import Branch, Customer, Product
from retail_sales.domain.entities.sale import Sale
from retail_sales.domain.entities.sale_events import DomainEvent
from retail_sales.domain.entities.sale_snapshot import SaleSnapshot, snapshot_sale
from retail_sales.domain.interfaces.repositories.catalog_repository import (
    BranchRepository,
    CustomerRepository,
    ProductRepository,
)
from retail_sales.domain.interfaces.repositories.sales_repository import SaleRepository


def copy_product(product: Product) -> Product:
    return Product(
        id=product.id,
        name=product.name,
        price=product.price,
        stock_quantity=product.stock_quantity,
        is_active=product.is_active,
    )


class InMemorySalesStore:
    """Committed state shared by every unit of work."""

    def __init__(self) -> None:
        self.sales: dict[UUID, SaleSnapshot] = {}
        self.products: dict[UUID, Product] = {}
        self.customers: dict[UUID, Customer] = {}
        self.branches: dict[UUID, Branch] = {}

    def put_product(self, product: Product) -> None:
        self.products[product.id] = copy_product(product)

    def put_sale(self, sale: Sale | SaleSnapshot) -> None:
        snap = sale if isinstance(sale, SaleSnapshot) else snapshot_sale(sale)
        self.sales[snap.id] = snap

    def stock_of(self, product_id: UUID) -> int:
        return self.products[product_id].stock_quantity


class InMemorySaleRepository:
    def __init__(self, sales: dict[UUID, SaleSnapshot], products: dict[UUID, Product]) -> None:
        self._sales = sales
        self._products = products

    async def get_by_id(self, sale_id: UUID) -> Sale | None:
        snap = self._sales.get(sale_id)
        if snap is None:
            return None
        return Sale.from_snapshot(snap, products=self._products)

    async def exists_sale_number(self, sale_number: str) -> bool:
        return any(s.sale_number == sale_number for s in self._sales.values())

    async def add(self, sale: Sale) -> None:
        if sale.id in self._sales:
            raise KeyError(f"sale {sale.id} already stored")
        self._sales[sale.id] = snapshot_sale(sale)

    async def update(self, sale: Sale) -> None:
        if sale.id not in self._sales:
            raise KeyError(f"sale {sale.id} not stored")
        self._sales[sale.id] = snapshot_sale(sale)


class InMemoryProductRepository:
    def __init__(self, products: dict[UUID, Product]) -> None:
        self._products = products
        self.updated: list[UUID] = []

    async def get_by_id(self, product_id: UUID) -> Product | None:
        return self._products.get(product_id)

    async def update(self, product: Product) -> None:
        self._products[product.id] = product
        self.updated.append(product.id)


class InMemoryPartyRepository:
    def __init__(self, rows: dict[UUID, Any]) -> None:
        self._rows = rows

    async def get_by_id(self, entity_id: UUID) -> Any:
        return self._rows.get(entity_id)


class InMemoryUnitOfWork:
    """Unit of work over an ``InMemorySalesStore`` with staged changes."""

    def __init__(self, store: InMemorySalesStore) -> None:
        self.store = store
        self.commits = 0
        self.rollbacks = 0
        self._repos: dict[type[Any], Any] = {}
        self._staged_sales: dict[UUID, SaleSnapshot] = {}
        self._staged_products: dict[UUID, Product] = {}

    async def __aenter__(self) -> InMemoryUnitOfWork:
        self._staged_sales = dict(self.store.sales)
        self._staged_products = {k: copy_product(v) for k, v in self.store.products.items()}
        self._repos = {
            SaleRepository: InMemorySaleRepository(self._staged_sales, self._staged_products),
            ProductRepository: InMemoryProductRepository(self._staged_products),
            CustomerRepository: InMemoryPartyRepository(self.store.customers),
            BranchRepository: InMemoryPartyRepository(self.store.branches),
        }
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._repos = {}
        return None

    async def commit(self) -> None:
        self.store.sales = dict(self._staged_sales)
        self.store.products = {k: copy_product(v) for k, v in self._staged_products.items()}
        self.commits += 1

    async def rollback(self) -> None:
        self._staged_sales = dict(self.store.sales)
        self._staged_products = {}
        self.rollbacks += 1

    def get_repository(self, repo_type: type[Any]) -> Any:
        try:
            return self._repos[repo_type]
        except KeyError:
            raise KeyError(f"No repository registered for {repo_type!r}") from None


class RecordingPublisher:
    """Publisher collecting every event it is handed."""

    def __init__(self, *, fail: bool = False) -> None:
        self.batches: list[list[DomainEvent]] = []
        self._fail = fail

    @property
    def events(self) -> list[DomainEvent]:
        return [e for batch in self.batches for e in batch]

    @property
    def event_types(self) -> list[str]:
        return [e.event_type for e in self.events]

    async def publish(self, events: Sequence[DomainEvent]) -> None:
        if self._fail:
            raise RuntimeError("publisher down")
        self.batches.append(list(events))
