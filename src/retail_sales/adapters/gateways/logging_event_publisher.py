# src/retail_sales/adapters/gateways/logging_event_publisher.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Adapter Gateway: sale events → structured log lines.

Default ``SaleEventPublisher`` for deployments without a message bus. Each
event is written as one JSON log line carrying its payload, which keeps the
event stream auditable through the log pipeline.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from retail_sales.domain.entities.sale_events import DomainEvent
from retail_sales.domain.interfaces.gateways.sale_event_publisher import SaleEventPublisher
from retail_sales.infrastructure.logging.logger import get_json_logger


class LoggingSaleEventPublisher(SaleEventPublisher):
    """Publish sale events as log records."""

    def __init__(self, logger: logging.Logger | None = None, *, level: int = logging.INFO) -> None:
        """Initialize the publisher.

        Args:
            logger: Target logger; defaults to this module's JSON logger.
            level: Log level used for every event line.
        """
        self._logger = logger or get_json_logger(__name__)
        self._level = level

    async def publish(self, events: Sequence[DomainEvent]) -> None:
        """Log each event in order."""
        for event in events:
            self._logger.log(
                self._level,
                "sales.event",
                extra={"event_type": event.event_type, "event": event.payload()},
            )


__all__ = ["LoggingSaleEventPublisher"]
