# src/retail_sales/domain/entities/validation.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Validation result entities.

Purpose:
    Represent the outcome of evaluating a declarative rule set against a sale,
    a sale item, or an application command.

Layer:
    domain/entities
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["RuleViolation", "ValidationReport"]


@dataclass(frozen=True, slots=True)
class RuleViolation:
    """Single violated rule, attributed to a field.

    Attributes:
        field:
            Dotted name of the offending field (e.g. ``items[0].quantity``).
        message:
            Human-readable description of the violation.
        rule_id:
            Stable identifier of the rule that failed.
    """

    field: str
    message: str
    rule_id: str

    def __post_init__(self) -> None:
        """Enforce basic invariants for violation records."""
        if not self.field:
            raise ValueError("RuleViolation.field must be non-empty.")
        if not self.rule_id:
            raise ValueError("RuleViolation.rule_id must be non-empty.")


@dataclass(frozen=True, slots=True)
class ValidationReport:
    """Outcome of one validation pass.

    Attributes:
        subject:
            Short label for what was validated (``sale``, ``sale_item``, or a
            command name).
        violations:
            Every violated rule in evaluation order. Empty when valid.
    """

    subject: str
    violations: tuple[RuleViolation, ...] = ()

    def __post_init__(self) -> None:
        """Normalize violations to a tuple."""
        if not isinstance(self.violations, tuple):
            object.__setattr__(self, "violations", tuple(self.violations))

    @property
    def is_valid(self) -> bool:
        """Return True when no rule was violated."""
        return not self.violations

    @property
    def fields(self) -> tuple[str, ...]:
        """Return the offending field names in evaluation order."""
        return tuple(v.field for v in self.violations)

    def messages_for(self, field: str) -> tuple[str, ...]:
        """Return the messages recorded for ``field``."""
        return tuple(v.message for v in self.violations if v.field == field)
