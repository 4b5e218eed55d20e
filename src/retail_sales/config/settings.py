# src/retail_sales/config/settings.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Retail Sales Configuration (Pydantic Settings, v2)

Summary:
    Typed, validated configuration for the sales core. Only the composition
    root (``retail_sales.dependencies``) reads it; use cases and controllers
    receive the resolved values through their constructors.

Design:
    - Pydantic v2 BaseSettings with ``extra='forbid'`` to catch unknown env.
    - Environment enumeration for coarse behavior toggles (includes TEST).
    - Singleton accessor ``get_settings()`` with LRU cache.
    - Business limits (20-unit cap, price cap, tier thresholds) are domain
      constants, not settings.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_SALE_NUMBER_PREFIX_RE = re.compile(r"^[A-Z0-9]{1,10}$")


class Environment(str, Enum):
    """Logical deployment environment."""

    DEVELOPMENT = "development"
    TEST = "test"
    CI = "ci"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Typed configuration for the sales core.

    Attributes:
        environment: Logical deployment environment.
        log_level: Root log level applied by the composition root.
        sale_number_prefix: Prefix of generated sale numbers.
        metrics_enabled: Whether the controller records Prometheus metrics.
        verify_loaded_sales: Whether sales loaded from persistence are
            re-validated before use.
    """

    # ---------------------------
    # Core environment
    # ---------------------------
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Logical deployment environment.",
        validation_alias="ENVIRONMENT",
    )

    # ---------------------------
    # Logging
    # ---------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level (DEBUG, INFO, WARNING or ERROR).",
        validation_alias="LOG_LEVEL",
    )

    # ---------------------------
    # Sales behavior
    # ---------------------------
    sale_number_prefix: str = Field(
        default="SAL",
        description="Prefix of generated sale numbers (1-10 upper-case alphanumerics).",
        validation_alias="SALE_NUMBER_PREFIX",
    )
    verify_loaded_sales: bool = Field(
        default=True,
        description="Re-validate sales loaded from persistence before mutating or returning them.",
        validation_alias="VERIFY_LOADED_SALES",
    )

    # ---------------------------
    # Observability
    # ---------------------------
    metrics_enabled: bool = Field(
        default=True,
        description="Record Prometheus counters for sale commands.",
        validation_alias="METRICS_ENABLED",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",
        case_sensitive=False,
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        """Accept log level names in any case."""
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def _validate_sale_number_prefix(self) -> Settings:
        """Validate the sale-number prefix.

        Returns:
            Settings: The validated settings instance.

        Raises:
            ValueError: If the prefix is not 1-10 upper-case alphanumerics.
        """
        if not _SALE_NUMBER_PREFIX_RE.fullmatch(self.sale_number_prefix):
            raise ValueError(
                "SALE_NUMBER_PREFIX must be 1-10 upper-case letters or digits.",
            )
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance.

    Returns:
        Settings: Validated settings.

    Raises:
        RuntimeError: If configuration is invalid.
    """
    try:
        settings = Settings()
        logger.info(
            "Settings initialized",
            extra={
                "environment": settings.environment.value,
                "log_level": settings.log_level,
                "sale_number_prefix": settings.sale_number_prefix,
                "metrics_enabled": settings.metrics_enabled,
                "verify_loaded_sales": settings.verify_loaded_sales,
            },
        )
        return settings
    except ValidationError as exc:
        logger.exception("Invalid application configuration")
        raise RuntimeError(f"Invalid configuration: {exc}") from exc


__all__ = ["Environment", "Settings", "get_settings"]
