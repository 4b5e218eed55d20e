# src/retail_sales/adapters/controllers/base.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Base Controller.

Summary:
    Canonical base for adapter controllers. Controllers are thin coordinators
    over use cases; they own cross-cutting concerns such as metrics but no
    business rules.

Layer:
    adapters/controllers
"""

from __future__ import annotations


class BaseController:
    """Marker base for adapter controllers."""

    __slots__ = ()
