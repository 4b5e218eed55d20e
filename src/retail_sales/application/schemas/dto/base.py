# src/retail_sales/application/schemas/dto/base.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Base DTO (Application Layer).

Purpose:
    Canonical Pydantic base for application-layer commands and results.
    Transport-agnostic.

Layer: application/schemas/dto
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BaseDTO(BaseModel):
    """Base class for application-layer DTOs.

    Notes:
        - Unknown fields are rejected (``extra='forbid'``).
        - DTOs are immutable once built.
    """

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        str_strip_whitespace=True,
        frozen=True,
    )
