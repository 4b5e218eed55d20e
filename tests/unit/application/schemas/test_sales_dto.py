from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from retail_sales.application.schemas.dto.sales import (
    CancelSaleCommand,
    GetSaleQuery,
    sale_to_dto,
)
from retail_sales.domain.entities.parties import Branch, Customer, Product
from retail_sales.domain.entities.sale import Sale
from retail_sales.domain.enums.sales import SaleStatus


def test_sale_view_carries_derived_figures() -> None:
    product = Product(id=uuid4(), name="Widget", price=Decimal("10.00"), stock_quantity=50)
    sale = Sale.create(Customer(id=uuid4(), name="Ada"), Branch(id=uuid4(), name="Main"), "SAL-01")
    line = sale.add_item(product, 4)
    sale.add_item(product, 1)
    sale.remove_item(line.id)

    dto = sale_to_dto(sale)

    assert dto.status is SaleStatus.ACTIVE
    assert dto.customer_name == "Ada"
    assert dto.branch_name == "Main"
    assert dto.active_item_count == 1
    assert dto.total_amount == Decimal("10.00")
    assert dto.subtotal == Decimal("10.00")
    assert dto.total_discount == Decimal("0.00")
    assert [i.is_cancelled for i in dto.items] == [True, False]
    assert dto.items[0].discount_percent == Decimal("10")
    assert dto.items[0].total_price == Decimal("0")


def test_commands_reject_unknown_fields_and_are_frozen() -> None:
    with pytest.raises(ValidationError):
        GetSaleQuery(sale_id=uuid4(), extra="nope")  # type: ignore[call-arg]

    cmd = CancelSaleCommand(sale_id=uuid4(), reason="  duplicate  ")
    assert cmd.reason == "duplicate"
    with pytest.raises(ValidationError):
        cmd.reason = "other"  # type: ignore[misc]
