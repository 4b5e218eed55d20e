# src/retail_sales/infrastructure/observability/metrics.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Prometheus metrics for sale commands (registry-aware, hot-reload safe).

Accessors return a collector bound to the **current**
``prometheus_client.REGISTRY``:

    * Safe under hot reload and tests that swap the default registry.
    * No duplicate-registration errors.
    * The cache resets automatically when the active registry changes.

Collectors:
    * ``retail_sales_commands_total{command,outcome}``: one increment per
      command; ``outcome`` is ``success`` or the failing error code.
    * ``retail_sales_rule_violations_total{field}``: one increment per
      violated validation rule.
    * ``retail_sales_command_duration_seconds{command}``: command latency.

Example:
    get_sales_commands_total().labels(command="add_sale_item", outcome="success").inc()
"""

from __future__ import annotations

import logging
import threading
from contextlib import suppress
from typing import Final

import prometheus_client as prom
from prometheus_client import Counter, Histogram

_log = logging.getLogger(__name__)

# Command latency buckets (seconds).
_BUCKETS: Final[tuple[float, ...]] = (
    0.001,
    0.005,
    0.010,
    0.025,
    0.050,
    0.100,
    0.250,
    0.500,
    1.000,
    2.500,
)

_registry_id: int | None = None
_hist_cache: dict[str, Histogram] = {}
_counter_cache: dict[str, Counter] = {}
_lock = threading.RLock()


# ---------------------------------------------------------------------------
# Registry-handling primitives


def _active_registry_id() -> int:
    """Return an identifier for the current default registry."""
    return id(prom.REGISTRY)


def _ensure_registry() -> None:
    """Reset caches if the active registry changed."""
    global _registry_id
    with _lock:
        rid = _active_registry_id()
        if _registry_id is None or _registry_id != rid:
            _hist_cache.clear()
            _counter_cache.clear()
            _registry_id = rid


def _lookup_existing(
    name: str, kind: type[Counter] | type[Histogram]
) -> Counter | Histogram | None:
    """Return a collector of type ``kind`` already registered under ``name``.

    Args:
        name: Collector name.
        kind: Expected collector class.

    Returns:
        The registered collector, or None when absent or of another type.
    """
    with _lock, suppress(Exception):
        mapping = getattr(prom.REGISTRY, "_names_to_collectors", None)
        if isinstance(mapping, dict):
            col = mapping.get(name)
            if isinstance(col, kind):
                return col
    return None


# ---------------------------------------------------------------------------
# Get-or-create helpers


def _get_or_create_counter(
    name: str,
    help_text: str,
    *,
    labelnames: tuple[str, ...] = (),
) -> Counter:
    """Get or create a registry-bound ``Counter`` with stable identity.

    Args:
        name: Metric name (snake_case).
        help_text: Human-readable description.
        labelnames: Label names.

    Returns:
        Counter: Bound to ``prom.REGISTRY``.
    """
    _ensure_registry()
    with _lock:
        cached = _counter_cache.get(name)
        if isinstance(cached, Counter):
            return cached

        existing = _lookup_existing(name, Counter)
        if isinstance(existing, Counter):
            _counter_cache[name] = existing
            return existing

        try:
            c = Counter(name, help_text, labelnames, registry=prom.REGISTRY)
            _counter_cache[name] = c
            return c
        except ValueError as exc:
            if "Duplicated timeseries" in str(exc):
                again = _lookup_existing(name, Counter)
                if isinstance(again, Counter):
                    _counter_cache[name] = again
                    return again
            _log.exception("Failed to register Prometheus counter %s", name)
            raise


def _get_or_create_hist(
    name: str,
    help_text: str,
    *,
    buckets: tuple[float, ...] = _BUCKETS,
    labelnames: tuple[str, ...] = (),
) -> Histogram:
    """Get or create a registry-bound ``Histogram`` with stable identity.

    Args:
        name: Metric name (snake_case).
        help_text: Human-readable description.
        buckets: Histogram buckets in seconds.
        labelnames: Label names.

    Returns:
        Histogram: Bound to ``prom.REGISTRY``.
    """
    _ensure_registry()
    with _lock:
        cached = _hist_cache.get(name)
        if isinstance(cached, Histogram):
            return cached

        existing = _lookup_existing(name, Histogram)
        if isinstance(existing, Histogram):
            _hist_cache[name] = existing
            return existing

        try:
            h = Histogram(name, help_text, labelnames, buckets=buckets, registry=prom.REGISTRY)
            _hist_cache[name] = h
            return h
        except ValueError as exc:
            if "Duplicated timeseries" in str(exc):
                again = _lookup_existing(name, Histogram)
                if isinstance(again, Histogram):
                    _hist_cache[name] = again
                    return again
            _log.exception("Failed to register Prometheus histogram %s", name)
            raise


# ---------------------------------------------------------------------------
# Sales accessors


def get_sales_commands_total() -> Counter:
    """Return the counter of executed sale commands.

    Labels:
        command: Command name (e.g. ``add_sale_item``).
        outcome: ``success`` or the error code of the failure.
    """
    return _get_or_create_counter(
        name="retail_sales_commands_total",
        help_text="Sale commands executed, by command and outcome.",
        labelnames=("command", "outcome"),
    )


def get_sales_rule_violations_total() -> Counter:
    """Return the counter of violated validation rules.

    Labels:
        field: Offending field name, with item indexes stripped.
    """
    return _get_or_create_counter(
        name="retail_sales_rule_violations_total",
        help_text="Validation rule violations, by field.",
        labelnames=("field",),
    )


def get_sales_command_duration_seconds() -> Histogram:
    """Return the histogram of sale command latency.

    Labels:
        command: Command name.
    """
    return _get_or_create_hist(
        name="retail_sales_command_duration_seconds",
        help_text="Latency (seconds) of sale commands.",
        labelnames=("command",),
    )


__all__ = [
    "get_sales_command_duration_seconds",
    "get_sales_commands_total",
    "get_sales_rule_violations_total",
]
