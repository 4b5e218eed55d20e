# src/retail_sales/application/validators/sale_commands.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Command rule sets for sale workflows.

Purpose:
    Reject malformed commands before any aggregate is loaded or mutated.
    Rules are evaluated with the domain rule evaluator, so every violation
    is reported in one pass with its field and message.

Layer:
    application/validators
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Any, Final
from uuid import UUID

from retail_sales.application.schemas.dto.sales import (
    AddSaleItemCommand,
    CancelSaleCommand,
    CreateSaleCommand,
    RemoveSaleItemCommand,
    SaleItemRequest,
    UpdateSaleItemQuantityCommand,
)
from retail_sales.domain.constants import (
    MAX_DISTINCT_PRODUCTS_PER_SALE,
    MAX_QUANTITY_PER_PRODUCT,
    MAX_UNIT_PRICE,
    SALE_DATE_MAX_DAYS_IN_FUTURE,
    SALE_DATE_MAX_YEARS_IN_PAST,
    SALE_NUMBER_MAX_LENGTH,
    SALE_NUMBER_MIN_LENGTH,
)
from retail_sales.domain.entities.validation import ValidationReport
from retail_sales.domain.services.sale_validation import (
    Rule,
    ValidationContext,
    as_utc,
    ensure_valid,
    evaluate,
    years_before,
)

MAX_REASON_LENGTH: Final[int] = 500


def _present(value: UUID | None) -> bool:
    return value is not None and value.int != 0


def _sale_id_rule() -> Rule[Any]:
    return Rule(
        rule_id="CMD_SALE_ID_REQUIRED",
        field="sale_id",
        message="Sale ID is required.",
        check=lambda c, _: _present(c.sale_id),
    )


def _item_id_rule() -> Rule[Any]:
    return Rule(
        rule_id="CMD_ITEM_ID_REQUIRED",
        field="item_id",
        message="Item ID is required.",
        check=lambda c, _: _present(c.item_id),
    )


def _product_rule() -> Rule[Any]:
    return Rule(
        rule_id="CMD_PRODUCT_REQUIRED",
        field="product_id",
        message="Product is required.",
        check=lambda c, _: _present(c.product_id),
    )


def _quantity_rules() -> tuple[Rule[Any], ...]:
    return (
        Rule(
            rule_id="CMD_QUANTITY_POSITIVE",
            field="quantity",
            message="Quantity must be greater than zero.",
            check=lambda c, _: c.quantity > 0,
        ),
        Rule(
            rule_id="CMD_QUANTITY_LIMIT",
            field="quantity",
            message=(
                f"Cannot sell more than {MAX_QUANTITY_PER_PRODUCT} units "
                "of the same product in a single sale."
            ),
            check=lambda c, _: c.quantity <= MAX_QUANTITY_PER_PRODUCT,
        ),
    )


def _unit_price_rules() -> tuple[Rule[Any], ...]:
    return (
        Rule(
            rule_id="CMD_UNIT_PRICE_POSITIVE",
            field="unit_price",
            message="Unit price must be greater than zero.",
            check=lambda c, _: c.unit_price > 0,
            applies=lambda c, _: c.unit_price is not None,
        ),
        Rule(
            rule_id="CMD_UNIT_PRICE_LIMIT",
            field="unit_price",
            message="Unit price cannot exceed 1,000,000.",
            check=lambda c, _: c.unit_price <= MAX_UNIT_PRICE,
            applies=lambda c, _: c.unit_price is not None,
        ),
    )


def _reason_rule() -> Rule[Any]:
    return Rule(
        rule_id="CMD_REASON_LENGTH",
        field="reason",
        message=f"Reason cannot be longer than {MAX_REASON_LENGTH} characters.",
        check=lambda c, _: len(c.reason) <= MAX_REASON_LENGTH,
        applies=lambda c, _: c.reason is not None,
    )


CREATE_SALE_RULES: Final[tuple[Rule[CreateSaleCommand], ...]] = (
    Rule(
        rule_id="CMD_CUSTOMER_REQUIRED",
        field="customer_id",
        message="Customer is required.",
        check=lambda c, _: _present(c.customer_id),
    ),
    Rule(
        rule_id="CMD_BRANCH_REQUIRED",
        field="branch_id",
        message="Branch is required.",
        check=lambda c, _: _present(c.branch_id),
    ),
    Rule(
        rule_id="CMD_SALE_NUMBER_MIN_LENGTH",
        field="sale_number",
        message=f"Sale number must be at least {SALE_NUMBER_MIN_LENGTH} characters long.",
        check=lambda c, _: len(c.sale_number or "") >= SALE_NUMBER_MIN_LENGTH,
        applies=lambda c, _: c.sale_number is not None,
    ),
    Rule(
        rule_id="CMD_SALE_NUMBER_MAX_LENGTH",
        field="sale_number",
        message=f"Sale number cannot be longer than {SALE_NUMBER_MAX_LENGTH} characters.",
        check=lambda c, _: len(c.sale_number or "") <= SALE_NUMBER_MAX_LENGTH,
        applies=lambda c, _: c.sale_number is not None,
    ),
    Rule(
        rule_id="CMD_SALE_DATE_NOT_IN_FUTURE",
        field="sale_date",
        message=f"Sale date cannot be more than {SALE_DATE_MAX_DAYS_IN_FUTURE} day in the future.",
        check=lambda c, ctx: as_utc(c.sale_date)
        <= ctx.now + timedelta(days=SALE_DATE_MAX_DAYS_IN_FUTURE),
        applies=lambda c, _: c.sale_date is not None,
    ),
    Rule(
        rule_id="CMD_SALE_DATE_NOT_TOO_OLD",
        field="sale_date",
        message=f"Sale date cannot be more than {SALE_DATE_MAX_YEARS_IN_PAST} years in the past.",
        check=lambda c, ctx: as_utc(c.sale_date)
        >= years_before(ctx.now, SALE_DATE_MAX_YEARS_IN_PAST),
        applies=lambda c, _: c.sale_date is not None,
    ),
    Rule(
        rule_id="CMD_ITEMS_LIMIT",
        field="items",
        message=f"Sale cannot contain more than {MAX_DISTINCT_PRODUCTS_PER_SALE} items.",
        check=lambda c, _: len(c.items) <= MAX_DISTINCT_PRODUCTS_PER_SALE,
    ),
    Rule(
        rule_id="CMD_ITEMS_UNIQUE_PRODUCTS",
        field="items",
        message="Cannot have duplicate products in the same sale. Adjust quantities instead.",
        check=lambda c, _: len({line.product_id for line in c.items}) == len(c.items),
    ),
)

SALE_ITEM_REQUEST_RULES: Final[tuple[Rule[SaleItemRequest], ...]] = (
    _product_rule(),
    *_quantity_rules(),
    *_unit_price_rules(),
)

ADD_SALE_ITEM_RULES: Final[tuple[Rule[AddSaleItemCommand], ...]] = (
    _sale_id_rule(),
    _product_rule(),
    *_quantity_rules(),
    *_unit_price_rules(),
)

UPDATE_SALE_ITEM_QUANTITY_RULES: Final[tuple[Rule[UpdateSaleItemQuantityCommand], ...]] = (
    _sale_id_rule(),
    _item_id_rule(),
    *_quantity_rules(),
)

REMOVE_SALE_ITEM_RULES: Final[tuple[Rule[RemoveSaleItemCommand], ...]] = (
    _sale_id_rule(),
    _item_id_rule(),
    _reason_rule(),
)

CANCEL_SALE_RULES: Final[tuple[Rule[CancelSaleCommand], ...]] = (
    _sale_id_rule(),
    _reason_rule(),
)


def validate_command(
    command: Any,
    rules: Sequence[Rule[Any]],
    *,
    subject: str,
    now: datetime,
) -> ValidationReport:
    """Evaluate ``rules`` against ``command`` and report every violation.

    Args:
        command: Command DTO under validation.
        rules: Rule set matching the command type.
        subject: Label for the report (usually the command name).
        now: Reference time for date rules.

    Returns:
        ValidationReport: Every violated rule.
    """
    context = ValidationContext(now=as_utc(now))
    return ValidationReport(subject=subject, violations=tuple(evaluate(rules, command, context)))


def validate_create_sale_command(cmd: CreateSaleCommand, *, now: datetime) -> ValidationReport:
    """Validate a create-sale command and each of its initial lines.

    Line violations follow the command-level ones, with ``items[<index>].``
    prefixed to their field names.
    """
    context = ValidationContext(now=as_utc(now))
    violations = evaluate(CREATE_SALE_RULES, cmd, context)
    for index, line in enumerate(cmd.items):
        violations.extend(
            evaluate(SALE_ITEM_REQUEST_RULES, line, context, prefix=f"items[{index}].")
        )
    return ValidationReport(subject="create_sale", violations=tuple(violations))


def ensure_command_valid(
    command: Any,
    rules: Sequence[Rule[Any]],
    *,
    subject: str,
    now: datetime,
) -> None:
    """Raise ``ValidationFailed`` when ``command`` violates any rule in ``rules``."""
    ensure_valid(validate_command(command, rules, subject=subject, now=now))


__all__ = [
    "ADD_SALE_ITEM_RULES",
    "CANCEL_SALE_RULES",
    "CREATE_SALE_RULES",
    "MAX_REASON_LENGTH",
    "REMOVE_SALE_ITEM_RULES",
    "SALE_ITEM_REQUEST_RULES",
    "UPDATE_SALE_ITEM_QUANTITY_RULES",
    "ensure_command_valid",
    "validate_command",
    "validate_create_sale_command",
]
