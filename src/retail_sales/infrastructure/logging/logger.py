# src/retail_sales/infrastructure/logging/logger.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Structured JSON logging utilities.

This module exposes an idempotent root configurator and a per-module logger
factory that produce one JSON object per log line.

Features:
    * Stable keys: ``ts``, ``level``, ``logger``, ``message``.
    * ``request_id`` taken from the record or the ``REQUEST_ID`` environment
      variable.
    * ``correlation_id`` taken from the record or from the id bound with
      :func:`bind_correlation_id`, so every line of one command shares it.
    * Fields passed through ``extra={...}`` are merged into the payload, so
      use-case events such as ``sales.add_item.rejected`` keep their context.

Typical usage:
    configure_root_logging()
    log = get_json_logger(__name__)
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any, Final
from uuid import uuid4

__all__ = [
    "bind_correlation_id",
    "configure_root_logging",
    "get_correlation_id",
    "get_json_logger",
]

_REQUEST_ID_ENV_KEY: Final[str] = "REQUEST_ID"

_CORRELATION_ID_CTX: ContextVar[str | None] = ContextVar(
    "retail_sales_correlation_id", default=None
)

# Attributes every LogRecord carries; anything else came from ``extra=``.
_RESERVED_ATTRS: Final[frozenset[str]] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


def get_correlation_id() -> str | None:
    """Return the correlation id bound to the current context, if any."""
    return _CORRELATION_ID_CTX.get(None)


@contextmanager
def bind_correlation_id(correlation_id: str | None = None) -> Iterator[str]:
    """Bind a correlation id to the current context for the duration of the block.

    An explicit ``correlation_id`` wins over one bound by an outer caller. A
    fresh id is generated when neither exists. The previous binding is
    restored on exit.

    Args:
        correlation_id: Optional id to bind.

    Yields:
        The bound correlation id.
    """
    value = correlation_id or get_correlation_id() or uuid4().hex
    token = _CORRELATION_ID_CTX.set(value)
    try:
        yield value
    finally:
        _CORRELATION_ID_CTX.reset(token)


class _JsonFormatter(logging.Formatter):
    """JSON log formatter emitting stable keys and merged extras."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a JSON object.

        Args:
            record: Logging record.

        Returns:
            JSON-encoded log line.
        """
        payload: dict[str, Any] = {
            "ts": datetime.now(tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        rid = getattr(record, "request_id", None) or os.getenv(_REQUEST_ID_ENV_KEY)
        if rid:
            payload["request_id"] = rid

        cid = getattr(record, "correlation_id", None) or get_correlation_id()
        if cid:
            payload["correlation_id"] = cid

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            if exc_type is not None:
                payload["exc_type"] = exc_type.__name__
            if exc_value is not None:
                payload["exc_message"] = str(exc_value)

        for key, value in vars(record).items():
            if key in _RESERVED_ATTRS or key in payload:
                continue
            payload[key] = value

        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)


def configure_root_logging(level: str | int | None = None) -> None:
    """Initialize the root logger with a JSON stream handler (idempotent).

    Args:
        level: Logging level or level name. If ``None``, use env ``LOG_LEVEL`` or ``INFO``.
    """
    root = logging.getLogger()

    env_level = os.getenv("LOG_LEVEL")
    resolved: int | str = (
        level if level is not None else (env_level.upper() if env_level else "INFO")
    )
    root.setLevel(resolved)

    if root.handlers:
        # Already configured; keep a single handler on repeated calls.
        return

    handler = logging.StreamHandler()
    handler.setFormatter(_JsonFormatter())
    root.addHandler(handler)


def get_json_logger(name: str) -> logging.Logger:
    """Return a module-specific logger backed by the JSON root handler.

    This does *not* configure the root logger. Call
    :func:`configure_root_logging` once at startup.

    Args:
        name: Logger name, typically ``__name__`` of the caller.

    Returns:
        Configured logger.
    """
    logger = logging.getLogger(name)
    logger.propagate = True
    return logger
