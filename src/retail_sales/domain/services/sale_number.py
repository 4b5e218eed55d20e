# src/retail_sales/domain/services/sale_number.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Sale number generation.

Format:
    ``<PREFIX><YYYYMMDDHHMMSS><NNNN>`` where ``NNNN`` is a random integer in
    ``[1000, 9999]``. With the default prefix this yields 21 characters, e.g.
    ``SAL202601151030454821``.

Layer:
    domain/services
"""

from __future__ import annotations

import random
from datetime import UTC, datetime

from retail_sales.domain.constants import DEFAULT_SALE_NUMBER_PREFIX
from retail_sales.domain.services.sale_validation import as_utc

_SUFFIX_MIN = 1000
_SUFFIX_MAX = 9999


def generate_sale_number(
    prefix: str = DEFAULT_SALE_NUMBER_PREFIX,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> str:
    """Return a new human-readable sale number.

    Uniqueness is not guaranteed; callers check it against persistence.

    Args:
        prefix: Leading tag, e.g. ``SAL``.
        now: Optional timestamp (defaults to the current UTC time).
        rng: Optional random source for the numeric suffix.
    """
    moment = as_utc(now) if now is not None else datetime.now(tz=UTC)
    source = rng or random.Random()
    suffix = source.randint(_SUFFIX_MIN, _SUFFIX_MAX)
    return f"{prefix}{moment:%Y%m%d%H%M%S}{suffix}"


__all__ = ["generate_sale_number"]
