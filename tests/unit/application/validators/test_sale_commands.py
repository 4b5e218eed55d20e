from __future__ import annotations

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

import pytest

from retail_sales.application.schemas.dto.sales import (
    AddSaleItemCommand,
    CancelSaleCommand,
    CreateSaleCommand,
    RemoveSaleItemCommand,
    SaleItemRequest,
    UpdateSaleItemQuantityCommand,
)
from retail_sales.application.validators.sale_commands import (
    ADD_SALE_ITEM_RULES,
    CANCEL_SALE_RULES,
    CREATE_SALE_RULES,
    MAX_REASON_LENGTH,
    REMOVE_SALE_ITEM_RULES,
    UPDATE_SALE_ITEM_QUANTITY_RULES,
    ensure_command_valid,
    validate_command,
    validate_create_sale_command,
)
from retail_sales.domain.exceptions.sales import ValidationFailed

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=UTC)
NIL = UUID(int=0)


def _ids(command: object, rules: tuple[Any, ...], subject: str = "cmd") -> list[str]:
    report = validate_command(command, rules, subject=subject, now=NOW)
    return [v.rule_id for v in report.violations]


def test_valid_create_command_passes() -> None:
    cmd = CreateSaleCommand(customer_id=uuid4(), branch_id=uuid4(), sale_number="SAL-0001")
    assert _ids(cmd, CREATE_SALE_RULES) == []


def test_create_command_reports_every_violation() -> None:
    cmd = CreateSaleCommand(
        customer_id=NIL,
        branch_id=NIL,
        sale_number="S1",
        sale_date=NOW + timedelta(days=2),
    )
    assert _ids(cmd, CREATE_SALE_RULES) == [
        "CMD_CUSTOMER_REQUIRED",
        "CMD_BRANCH_REQUIRED",
        "CMD_SALE_NUMBER_MIN_LENGTH",
        "CMD_SALE_DATE_NOT_IN_FUTURE",
    ]


def test_create_command_rejects_long_number_and_old_date() -> None:
    cmd = CreateSaleCommand(
        customer_id=uuid4(),
        branch_id=uuid4(),
        sale_number="N" * 51,
        sale_date=NOW - timedelta(days=366 * 11),
    )
    assert _ids(cmd, CREATE_SALE_RULES) == [
        "CMD_SALE_NUMBER_MAX_LENGTH",
        "CMD_SALE_DATE_NOT_TOO_OLD",
    ]


def test_create_command_strips_sale_number_whitespace() -> None:
    cmd = CreateSaleCommand(customer_id=uuid4(), branch_id=uuid4(), sale_number="  SAL-1  ")
    assert cmd.sale_number == "SAL-1"
    assert _ids(cmd, CREATE_SALE_RULES) == []


def test_create_command_lines_are_checked_one_by_one() -> None:
    repeated = uuid4()
    cmd = CreateSaleCommand(
        customer_id=uuid4(),
        branch_id=uuid4(),
        items=[
            {"product_id": repeated, "quantity": 4},
            {"product_id": NIL, "quantity": 21},
            {"product_id": repeated, "quantity": 0, "unit_price": Decimal("0")},
        ],
    )

    report = validate_create_sale_command(cmd, now=NOW)

    assert [v.rule_id for v in report.violations] == [
        "CMD_ITEMS_UNIQUE_PRODUCTS",
        "CMD_PRODUCT_REQUIRED",
        "CMD_QUANTITY_LIMIT",
        "CMD_QUANTITY_POSITIVE",
        "CMD_UNIT_PRICE_POSITIVE",
    ]
    assert report.fields == (
        "items",
        "items[1].product_id",
        "items[1].quantity",
        "items[2].quantity",
        "items[2].unit_price",
    )
    assert report.subject == "create_sale"


def test_create_command_caps_the_number_of_lines() -> None:
    lines = [SaleItemRequest(product_id=uuid4(), quantity=1) for _ in range(21)]
    cmd = CreateSaleCommand(customer_id=uuid4(), branch_id=uuid4(), items=lines)

    assert _ids(cmd, CREATE_SALE_RULES) == ["CMD_ITEMS_LIMIT"]
    assert validate_create_sale_command(
        cmd.model_copy(update={"items": tuple(lines[:20])}), now=NOW
    ).is_valid


def test_add_item_command_rules() -> None:
    ok = AddSaleItemCommand(sale_id=uuid4(), product_id=uuid4(), quantity=20)
    bad = AddSaleItemCommand(
        sale_id=NIL, product_id=NIL, quantity=21, unit_price=Decimal("1000000.01")
    )
    zero = AddSaleItemCommand(
        sale_id=uuid4(), product_id=uuid4(), quantity=0, unit_price=Decimal("0")
    )

    assert _ids(ok, ADD_SALE_ITEM_RULES) == []
    assert _ids(bad, ADD_SALE_ITEM_RULES) == [
        "CMD_SALE_ID_REQUIRED",
        "CMD_PRODUCT_REQUIRED",
        "CMD_QUANTITY_LIMIT",
        "CMD_UNIT_PRICE_LIMIT",
    ]
    assert _ids(zero, ADD_SALE_ITEM_RULES) == ["CMD_QUANTITY_POSITIVE", "CMD_UNIT_PRICE_POSITIVE"]


def test_add_item_command_accepts_price_at_cap() -> None:
    cmd = AddSaleItemCommand(
        sale_id=uuid4(), product_id=uuid4(), quantity=1, unit_price=Decimal("1000000")
    )
    assert _ids(cmd, ADD_SALE_ITEM_RULES) == []


def test_update_command_rules() -> None:
    cmd = UpdateSaleItemQuantityCommand(sale_id=uuid4(), item_id=NIL, quantity=-2)
    assert _ids(cmd, UPDATE_SALE_ITEM_QUANTITY_RULES) == [
        "CMD_ITEM_ID_REQUIRED",
        "CMD_QUANTITY_POSITIVE",
    ]


@pytest.mark.parametrize(
    "command_factory",
    [
        lambda reason: RemoveSaleItemCommand(sale_id=uuid4(), item_id=uuid4(), reason=reason),
        lambda reason: CancelSaleCommand(sale_id=uuid4(), reason=reason),
    ],
    ids=["remove", "cancel"],
)
def test_reason_length_is_bounded(command_factory) -> None:  # type: ignore[no-untyped-def]
    rules = (
        REMOVE_SALE_ITEM_RULES
        if isinstance(command_factory(None), RemoveSaleItemCommand)
        else CANCEL_SALE_RULES
    )
    assert _ids(command_factory(None), rules) == []
    assert _ids(command_factory("x" * MAX_REASON_LENGTH), rules) == []
    assert _ids(command_factory("x" * (MAX_REASON_LENGTH + 1)), rules) == ["CMD_REASON_LENGTH"]


def test_ensure_command_valid_raises_validation_failed() -> None:
    cmd = CancelSaleCommand(sale_id=NIL)
    with pytest.raises(ValidationFailed) as ei:
        ensure_command_valid(cmd, CANCEL_SALE_RULES, subject="cancel_sale", now=NOW)
    assert ei.value.fields == ("sale_id",)
    assert ei.value.violations[0].message == "Sale ID is required."
    assert ei.value.message.startswith("cancel_sale failed validation")
