# src/retail_sales/domain/services/sale_validation.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Declarative validation rule sets for sales and sale items.

Purpose:
    Re-derive every sale and sale-item invariant from an immutable snapshot
    and report all violated rules in one pass. The same evaluator serves two
    callers:

        * Use cases, to reject a command before any mutation.
        * Use cases, to verify a sale loaded from persistence.

Layer:
    domain/services

Notes:
    - Pure domain module:
        * No logging.
        * No persistence or gateways.
    - Rules are data. Each names a stable id, the field it guards, and the
      message reported when it fails. A rule may carry an ``applies`` guard so
      that dependent checks are skipped when their inputs are already invalid.
    - Entities never call this module.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Final, Generic, TypeVar

from retail_sales.domain.constants import (
    MAX_DISTINCT_PRODUCTS_PER_SALE,
    MAX_QUANTITY_PER_PRODUCT,
    MAX_UNIT_PRICE,
    SALE_DATE_MAX_DAYS_IN_FUTURE,
    SALE_DATE_MAX_YEARS_IN_PAST,
    SALE_NUMBER_MAX_LENGTH,
    SALE_NUMBER_MIN_LENGTH,
)
from retail_sales.domain.entities.sale_snapshot import SaleItemSnapshot, SaleSnapshot
from retail_sales.domain.entities.validation import RuleViolation, ValidationReport
from retail_sales.domain.exceptions.sales import ValidationFailed
from retail_sales.domain.services.discount_calculator import discount_percent_for, line_total

T = TypeVar("T")

_ZERO: Final[Decimal] = Decimal("0")
_HUNDRED: Final[Decimal] = Decimal("100")


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """Ambient inputs shared by every rule in one pass."""

    now: datetime


@dataclass(frozen=True, slots=True)
class Rule(Generic[T]):
    """Single declarative check over a subject of type ``T``.

    ``check`` returns True when the subject satisfies the rule. ``applies``
    returns False when the rule is not meaningful for the subject.
    """

    rule_id: str
    field: str
    message: str
    check: Callable[[T, ValidationContext], bool]
    applies: Callable[[T, ValidationContext], bool] | None = None


def evaluate(
    rules: Iterable[Rule[T]],
    subject: T,
    context: ValidationContext,
    *,
    prefix: str = "",
) -> list[RuleViolation]:
    """Evaluate ``rules`` against ``subject`` and collect every violation.

    Args:
        rules:
            Rules in reporting order.
        subject:
            Object under validation.
        context:
            Shared evaluation inputs.
        prefix:
            Optional prefix for violation field names (e.g. ``items[2].``).

    Returns:
        list[RuleViolation]: Violations in rule order, empty when valid.
    """
    violations: list[RuleViolation] = []
    for rule in rules:
        if rule.applies is not None and not rule.applies(subject, context):
            continue
        if not rule.check(subject, context):
            violations.append(
                RuleViolation(
                    field=f"{prefix}{rule.field}",
                    message=rule.message,
                    rule_id=rule.rule_id,
                )
            )
    return violations


def ensure_valid(report: ValidationReport) -> None:
    """Raise ``ValidationFailed`` carrying every violation when ``report`` is not valid."""
    if not report.is_valid:
        raise ValidationFailed(
            report.violations,
            message=(
                f"{report.subject} failed validation with "
                f"{len(report.violations)} violation(s)."
            ),
        )


# ---------------------------------------------------------------------- #
# Helpers
# ---------------------------------------------------------------------- #


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def years_before(moment: datetime, years: int) -> datetime:
    """Return ``moment`` shifted back by calendar ``years`` (Feb 29 → Feb 28)."""
    try:
        return moment.replace(year=moment.year - years)
    except ValueError:
        return moment.replace(year=moment.year - years, day=28)


def _quantity_in_range(item: SaleItemSnapshot) -> bool:
    return 0 < item.quantity <= MAX_QUANTITY_PER_PRODUCT


def _active(item: SaleItemSnapshot, _ctx: ValidationContext) -> bool:
    return not item.is_cancelled


def _formula_applies(item: SaleItemSnapshot, _ctx: ValidationContext) -> bool:
    return (
        not item.is_cancelled
        and _quantity_in_range(item)
        and item.unit_price > 0
        and _ZERO <= item.discount_percent <= _HUNDRED
    )


# ---------------------------------------------------------------------- #
# Sale item rules
# ---------------------------------------------------------------------- #

SALE_ITEM_RULES: Final[tuple[Rule[SaleItemSnapshot], ...]] = (
    Rule(
        rule_id="ITEM_SALE_ID_REQUIRED",
        field="sale_id",
        message="Sale ID is required.",
        check=lambda i, _: i.sale_id is not None and i.sale_id.int != 0,
    ),
    Rule(
        rule_id="ITEM_PRODUCT_REQUIRED",
        field="product_id",
        message="Product is required.",
        check=lambda i, _: i.product_id is not None and i.product_id.int != 0,
    ),
    Rule(
        rule_id="ITEM_QUANTITY_POSITIVE",
        field="quantity",
        message="Quantity must be greater than zero.",
        check=lambda i, _: i.quantity > 0,
    ),
    Rule(
        rule_id="ITEM_QUANTITY_LIMIT",
        field="quantity",
        message=f"Cannot sell more than {MAX_QUANTITY_PER_PRODUCT} units of the same product.",
        check=lambda i, _: i.quantity <= MAX_QUANTITY_PER_PRODUCT,
    ),
    Rule(
        rule_id="ITEM_UNIT_PRICE_POSITIVE",
        field="unit_price",
        message="Unit price must be greater than zero.",
        check=lambda i, _: i.unit_price > 0,
    ),
    Rule(
        rule_id="ITEM_UNIT_PRICE_LIMIT",
        field="unit_price",
        message="Unit price cannot exceed 1,000,000.",
        check=lambda i, _: i.unit_price <= MAX_UNIT_PRICE,
    ),
    Rule(
        rule_id="ITEM_DISCOUNT_NON_NEGATIVE",
        field="discount_percent",
        message="Discount percentage cannot be negative.",
        check=lambda i, _: i.discount_percent >= 0,
    ),
    Rule(
        rule_id="ITEM_DISCOUNT_LIMIT",
        field="discount_percent",
        message="Discount percentage cannot exceed 100%.",
        check=lambda i, _: i.discount_percent <= _HUNDRED,
    ),
    Rule(
        rule_id="ITEM_DISCOUNT_MATCHES_TIER",
        field="discount_percent",
        message="Discount percentage does not match the quantity rules.",
        check=lambda i, _: i.discount_percent == discount_percent_for(i.quantity),
        applies=lambda i, _: not i.is_cancelled and _quantity_in_range(i),
    ),
    Rule(
        rule_id="ITEM_TOTAL_NON_NEGATIVE",
        field="total_price",
        message="Total price cannot be negative.",
        check=lambda i, _: i.total_price >= 0,
        applies=_active,
    ),
    Rule(
        rule_id="ITEM_TOTAL_MATCHES_FORMULA",
        field="total_price",
        message="Total price does not match quantity, unit price and discount.",
        check=lambda i, _: (
            i.total_price == line_total(i.quantity, i.unit_price, i.discount_percent)
        ),
        applies=_formula_applies,
    ),
    Rule(
        rule_id="ITEM_CANCELLED_TOTAL_ZERO",
        field="total_price",
        message="Cancelled item total must be zero.",
        check=lambda i, _: i.total_price == 0,
        applies=lambda i, _: i.is_cancelled,
    ),
    Rule(
        rule_id="ITEM_CREATED_NOT_IN_FUTURE",
        field="created_at",
        message="Sale item creation date cannot be in the future.",
        check=lambda i, ctx: as_utc(i.created_at) <= ctx.now,
    ),
)


# ---------------------------------------------------------------------- #
# Sale rules
# ---------------------------------------------------------------------- #


def _has_number(sale: SaleSnapshot, _ctx: ValidationContext) -> bool:
    return bool((sale.sale_number or "").strip())


def _product_quantities(items: Sequence[SaleItemSnapshot]) -> dict[object, int]:
    totals: dict[object, int] = defaultdict(int)
    for item in items:
        if not item.is_cancelled:
            totals[item.product_id] += item.quantity
    return totals


def _active_total(sale: SaleSnapshot) -> Decimal:
    return sum((item.total_price for item in sale.items if not item.is_cancelled), _ZERO)


SALE_RULES: Final[tuple[Rule[SaleSnapshot], ...]] = (
    Rule(
        rule_id="SALE_NUMBER_REQUIRED",
        field="sale_number",
        message="Sale number is required.",
        check=_has_number,
    ),
    Rule(
        rule_id="SALE_NUMBER_MIN_LENGTH",
        field="sale_number",
        message=f"Sale number must be at least {SALE_NUMBER_MIN_LENGTH} characters long.",
        check=lambda s, _: len(s.sale_number.strip()) >= SALE_NUMBER_MIN_LENGTH,
        applies=_has_number,
    ),
    Rule(
        rule_id="SALE_NUMBER_MAX_LENGTH",
        field="sale_number",
        message=f"Sale number cannot be longer than {SALE_NUMBER_MAX_LENGTH} characters.",
        check=lambda s, _: len(s.sale_number.strip()) <= SALE_NUMBER_MAX_LENGTH,
        applies=_has_number,
    ),
    Rule(
        rule_id="SALE_CUSTOMER_REQUIRED",
        field="customer",
        message="Customer is required.",
        check=lambda s, _: s.customer is not None,
    ),
    Rule(
        rule_id="SALE_CUSTOMER_ACTIVE",
        field="customer",
        message="Cannot create sale for inactive customer.",
        check=lambda s, _: s.customer is not None and s.customer.is_active,
        applies=lambda s, _: s.customer is not None,
    ),
    Rule(
        rule_id="SALE_BRANCH_REQUIRED",
        field="branch",
        message="Branch is required.",
        check=lambda s, _: s.branch is not None,
    ),
    Rule(
        rule_id="SALE_BRANCH_ACTIVE",
        field="branch",
        message="Cannot create sale for inactive branch.",
        check=lambda s, _: s.branch is not None and s.branch.is_active,
        applies=lambda s, _: s.branch is not None,
    ),
    Rule(
        rule_id="SALE_DATE_NOT_IN_FUTURE",
        field="sale_date",
        message=f"Sale date cannot be more than {SALE_DATE_MAX_DAYS_IN_FUTURE} day in the future.",
        check=lambda s, ctx: as_utc(s.sale_date)
        <= ctx.now + timedelta(days=SALE_DATE_MAX_DAYS_IN_FUTURE),
    ),
    Rule(
        rule_id="SALE_DATE_NOT_TOO_OLD",
        field="sale_date",
        message=f"Sale date cannot be more than {SALE_DATE_MAX_YEARS_IN_PAST} years in the past.",
        check=lambda s, ctx: as_utc(s.sale_date)
        >= years_before(ctx.now, SALE_DATE_MAX_YEARS_IN_PAST),
    ),
    Rule(
        rule_id="SALE_TOTAL_NON_NEGATIVE",
        field="total_amount",
        message="Total amount cannot be negative.",
        check=lambda s, _: s.total_amount >= 0,
        applies=lambda s, _: not s.is_cancelled,
    ),
    Rule(
        rule_id="SALE_TOTAL_MATCHES_ITEMS",
        field="total_amount",
        message="Total amount does not match the sum of active item totals.",
        check=lambda s, _: s.total_amount == _active_total(s),
        applies=lambda s, _: not s.is_cancelled,
    ),
    Rule(
        rule_id="SALE_PRODUCT_QUANTITY_CAP",
        field="items",
        message=(
            f"Cannot sell more than {MAX_QUANTITY_PER_PRODUCT} units "
            "of the same product in a single sale."
        ),
        check=lambda s, _: all(
            qty <= MAX_QUANTITY_PER_PRODUCT for qty in _product_quantities(s.items).values()
        ),
    ),
    Rule(
        rule_id="SALE_DISTINCT_PRODUCT_LIMIT",
        field="items",
        message=(
            f"Cannot add more than {MAX_DISTINCT_PRODUCTS_PER_SALE} different products "
            "to a single sale."
        ),
        check=lambda s, _: len(_product_quantities(s.items)) <= MAX_DISTINCT_PRODUCTS_PER_SALE,
    ),
    Rule(
        rule_id="SALE_ITEMS_OWNED",
        field="items",
        message="Every sale item must belong to this sale.",
        check=lambda s, _: all(item.sale_id == s.id for item in s.items),
    ),
)


# ---------------------------------------------------------------------- #
# Entry points
# ---------------------------------------------------------------------- #


def _context(now: datetime | None) -> ValidationContext:
    return ValidationContext(now=as_utc(now) if now is not None else datetime.now(tz=UTC))


def validate_sale_item(
    snapshot: SaleItemSnapshot, *, now: datetime | None = None
) -> ValidationReport:
    """Validate one sale item snapshot.

    Args:
        snapshot: Item state to verify.
        now: Optional reference time for date rules.

    Returns:
        ValidationReport: Every violated item rule.
    """
    return ValidationReport(
        subject="sale_item",
        violations=tuple(evaluate(SALE_ITEM_RULES, snapshot, _context(now))),
    )


def validate_sale(snapshot: SaleSnapshot, *, now: datetime | None = None) -> ValidationReport:
    """Validate a sale snapshot and every one of its items.

    Item violations are reported with ``items[<index>].`` prefixed to their
    field names, after the sale-level violations.

    Args:
        snapshot: Sale state to verify.
        now: Optional reference time for date rules.

    Returns:
        ValidationReport: Every violated sale and item rule.
    """
    context = _context(now)
    violations = evaluate(SALE_RULES, snapshot, context)
    for index, item in enumerate(snapshot.items):
        violations.extend(evaluate(SALE_ITEM_RULES, item, context, prefix=f"items[{index}]."))
    return ValidationReport(subject="sale", violations=tuple(violations))


__all__ = [
    "SALE_ITEM_RULES",
    "SALE_RULES",
    "Rule",
    "ValidationContext",
    "as_utc",
    "ensure_valid",
    "evaluate",
    "validate_sale",
    "validate_sale_item",
    "years_before",
]
