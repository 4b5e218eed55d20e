# src/retail_sales/application/uow.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Unit of Work (Application Layer).

Purpose:
    Define the transactional boundary used by the sales use cases. One unit of
    work spans the sale aggregate and every product whose stock the operation
    moves, so that stock and sale changes are committed together or not at
    all.

Layer:
    application

Notes:
    Infrastructure-agnostic: only a Protocol and a helper live here. Concrete
    implementations belong to outer layers (and to the test fakes).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from types import TracebackType
from typing import Any, Protocol, TypeVar, runtime_checkable

TResult = TypeVar("TResult")


@runtime_checkable
class UnitOfWork(Protocol, AbstractAsyncContextManager["UnitOfWork"]):
    """Transactional scope shared by the repositories a use case touches."""

    async def __aenter__(self) -> UnitOfWork:
        """Enter the transactional scope and return the active unit of work."""
        raise NotImplementedError

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool | None:
        """Exit the transactional scope."""
        raise NotImplementedError

    async def commit(self) -> None:
        """Commit every pending change."""
        raise NotImplementedError

    async def rollback(self) -> None:
        """Discard every pending change."""
        raise NotImplementedError

    def get_repository(self, repo_type: type[Any]) -> Any:
        """Return the repository registered for ``repo_type``.

        Args:
            repo_type:
                Repository protocol used as the lookup key, e.g.
                ``SaleRepository`` or ``ProductRepository``.
        """
        raise NotImplementedError


async def run_in_uow(  # noqa: UP047
    uow: UnitOfWork,
    fn: Callable[[UnitOfWork], Awaitable[TResult]],
) -> TResult:
    """Run ``fn`` inside ``uow``, committing on success and rolling back on error.

    Args:
        uow: Unit of work providing the transactional boundary.
        fn: Coroutine function receiving the active unit of work.

    Returns:
        TResult: Whatever ``fn`` returned.

    Raises:
        Exception: Any exception raised by ``fn`` is re-raised after rollback.
    """
    async with uow as tx:
        try:
            result = await fn(tx)
        except Exception:
            await tx.rollback()
            raise
        else:
            await tx.commit()
            return result


__all__ = ["UnitOfWork", "run_in_uow"]
