# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Retail sales core: sale aggregate, discount tiers, and validation rules."""

__version__ = "0.1.0"
