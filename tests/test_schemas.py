from datetime import date

import pytest
from pydantic import ValidationError

from inventory_planner.schemas import MonthProjection, PurchaseOrderLine, SkuRecord, TransitRecord


def test_malformed_optional_fields_fall_back_to_defaults():
    sku = SkuRecord.model_validate(
        {
            "id": 123,
            "stock_actual": "1,200",
            "forecasts": "not a list",
            "purchase_orders": None,
            "objetivo_mensual_gmv": None,
        }
    )

    assert sku.id == "123"
    assert sku.stock_actual == 1200.0
    assert sku.forecasts == []
    assert sku.purchase_orders == []
    assert sku.objetivo_mensual_gmv == 0.0


def test_forecasts_are_cleaned_and_capped_at_five_months():
    sku = SkuRecord.model_validate({"id": "A", "forecasts": ["10", None, "x", 4, 5, 6, 7]})

    assert sku.forecasts == [10.0, 0.0, 0.0, 4.0, 5.0]


def test_negative_or_garbage_stock_becomes_zero():
    assert SkuRecord.model_validate({"id": "A", "stock_actual": -5}).stock_actual == 0.0
    assert SkuRecord.model_validate({"id": "A", "stock_actual": "n/a"}).stock_actual == 0.0


def test_sku_alias_and_extra_fields_are_kept():
    sku = SkuRecord.model_validate({"sku": " A-1 ", "supplier_code": "S9"})

    assert sku.id == "A-1"
    assert sku.model_dump()["supplier_code"] == "S9"


@pytest.mark.parametrize("raw", [{}, {"id": None}, {"id": "   "}])
def test_sku_without_id_is_rejected(raw):
    with pytest.raises(ValidationError):
        SkuRecord.model_validate(raw)


def test_purchase_orders_keep_only_records_and_tolerate_bad_dates():
    sku = SkuRecord.model_validate(
        {
            "id": "A",
            "purchase_orders": [
                {"quantity": "1,000", "date_of_arrival": "2025-02-01"},
                {"quantity": 5, "date_of_arrival": "soon"},
                "junk",
                7,
            ],
        }
    )

    assert sku.purchase_orders == [
        TransitRecord(quantity=1000.0, date_of_arrival=date(2025, 2, 1)),
        TransitRecord(quantity=5.0, date_of_arrival=None),
    ]


def test_transit_quantity_is_never_negative():
    assert TransitRecord.model_validate({"quantity": -10}).quantity == 0.0


def test_month_projection_dumps_days_in_month_alias():
    projection = MonthProjection(count=10, days_in_month=31)

    assert projection.model_dump(by_alias=True) == {"count": 10, "daysInMonth": 31}
    assert MonthProjection.model_validate({"count": 1, "daysInMonth": 2}).days_in_month == 2


def test_purchase_order_line_amount_and_status():
    line = PurchaseOrderLine.model_validate(
        {"sku": 1001, "cantidad_a_comprar": "1,000", "precio_unitario": "2.5", "status": "DONE"}
    )

    assert line.sku == "1001"
    assert line.amount == 2500.0
    assert line.is_done
    assert not PurchaseOrderLine(sku="X").is_done


@pytest.mark.parametrize("raw", [{}, {"sku": None}, {"sku": "  "}])
def test_purchase_order_line_without_sku_is_rejected(raw):
    with pytest.raises(ValidationError):
        PurchaseOrderLine.model_validate({"cantidad_a_comprar": 1, **raw})
