# src/retail_sales/domain/interfaces/gateways/sale_event_publisher.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Sale event publisher gateway interface.

Purpose:
    Define the outbound port through which use cases hand sale domain events
    to downstream consumers (message bus, cache invalidation, audit log).
    Implementations live in the adapters layer.

Layer:
    domain/interfaces/gateways
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from retail_sales.domain.entities.sale_events import DomainEvent


class SaleEventPublisher(Protocol):
    """Protocol for adapters that deliver sale domain events."""

    async def publish(self, events: Sequence[DomainEvent]) -> None:
        """Publish events in the order they were recorded.

        Args:
            events:
                Events drained from a sale after its changes were committed.
        """
