"""
Purchase-order prioritization: pending purchase-order lines grouped by
supplier, enriched with each SKU's stock and transit situation, and ranked by
amount, quantity or out-of-stock risk.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from pydantic import ValidationError

from . import settings
from .aggregation import sort_records
from .exceptions import ConfigurationError
from .projection import days_of_stock_today
from .schemas import MonthDetail, PurchaseOrderLine, SkuRecord, SupplierItem, SupplierSummary
from .transit import next_arrival, total_in_transit

logger = logging.getLogger(__name__)


def _validated_lines(lines: Iterable[PurchaseOrderLine | Mapping]) -> list[PurchaseOrderLine]:
    validated = []
    for raw in lines:
        if isinstance(raw, PurchaseOrderLine):
            validated.append(raw)
            continue
        try:
            validated.append(PurchaseOrderLine.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"⚠️ Skipping purchase-order line: {e.error_count()} validation error(s).")
    return validated


def _new_item(line: PurchaseOrderLine, sku: SkuRecord | None, today: date) -> SupplierItem:
    fields = line.model_dump()
    if sku is None:
        return SupplierItem.model_validate(fields)

    return SupplierItem.model_validate(
        {
            **fields,
            "sku_name": sku.sku_name or "N/A",
            "category": sku.category or "N/A",
            "stock_actual": sku.stock_actual,
            "total_in_transit": total_in_transit(sku.purchase_orders),
            "next_arrival": next_arrival(sku.purchase_orders, today),
        }
    )


def _is_at_risk(sku: SkuRecord | None, days_in_current_month: int) -> bool:
    if sku is None or not sku.forecasts:
        return False
    days = days_of_stock_today(sku.stock_actual, sku.forecasts[0], days_in_current_month)
    return days < settings.SUPPLIER_RISK_DAYS


def build_supplier_summaries(
    lines: Iterable[PurchaseOrderLine | Mapping],
    skus: Iterable[SkuRecord],
    month_details: Sequence[MonthDetail],
    today: date,
) -> list[SupplierSummary]:
    """
    Groups purchase-order lines by supplier.

    - Lines without a positive quantity are dropped.
    - A SKU ordered twice from the same supplier becomes one item with the
      quantities added up.
    - risk_score counts the items whose stock lasts less than
      SUPPLIER_RISK_DAYS at the current month's forecast.
    """
    sku_map = {sku.id: sku for sku in skus}
    if not sku_map or not month_details:
        return []
    days_in_current_month = month_details[0].days_in_month

    suppliers: dict[str, dict] = {}
    for line in _validated_lines(lines):
        if line.cantidad_a_comprar <= 0:
            continue

        name = line.proveedor or "Sin Proveedor"
        supplier = suppliers.setdefault(name, {"owner": line.owner, "items": {}})
        items = supplier["items"]

        if line.sku in items:
            existing = items[line.sku]
            items[line.sku] = existing.model_copy(
                update={"cantidad_a_comprar": existing.cantidad_a_comprar + line.cantidad_a_comprar}
            )
        else:
            items[line.sku] = _new_item(line, sku_map.get(line.sku), today)

    summaries = []
    for name, supplier in suppliers.items():
        items = list(supplier["items"].values())
        summaries.append(
            SupplierSummary(
                name=name,
                owner=supplier["owner"],
                items=items,
                total_amount=sum(item.amount for item in items),
                total_items=sum(item.cantidad_a_comprar for item in items),
                risk_score=sum(
                    1 for item in items if _is_at_risk(sku_map.get(item.sku), days_in_current_month)
                ),
            )
        )
    return summaries


def progress_percentage(items: Sequence[PurchaseOrderLine]) -> float:
    """Share of the supplier's amount already marked DONE."""
    if not items:
        return 0.0

    total = sum(item.amount for item in items)
    if total == 0:
        return 100.0

    done = sum(item.amount for item in items if item.is_done)
    return done / total * 100


def calculate_progress(items: Iterable[SupplierItem], group_by: str) -> list[dict]:
    """
    Amount-weighted DONE percentage per owner or category, highest first.
    Returns [{"label": ..., "value": pct}, ...].
    """
    progress: dict[str, dict[str, float]] = {}
    for item in items:
        label = getattr(item, group_by, None) or f"Sin {group_by}"
        bucket = progress.setdefault(label, {"total": 0.0, "done": 0.0})
        bucket["total"] += item.amount
        if item.is_done:
            bucket["done"] += item.amount

    rows = [
        {"label": label, "value": (b["done"] / b["total"] * 100) if b["total"] > 0 else 0.0}
        for label, b in progress.items()
    ]
    return sort_records(rows, "value", "descending")


def filter_suppliers(
    summaries: Iterable[SupplierSummary],
    suppliers: Sequence[str] = (),
    owners: Sequence[str] = (),
) -> list[SupplierSummary]:
    return [
        s
        for s in summaries
        if (not suppliers or s.name in suppliers) and (not owners or s.owner in owners)
    ]


def sort_suppliers(summaries: Iterable[SupplierSummary], sort_by: str = "total_amount") -> list[SupplierSummary]:
    if sort_by not in settings.SUPPLIER_SORT_OPTIONS:
        raise ConfigurationError(f"Unknown supplier sort: {sort_by!r}")
    return sort_records(summaries, sort_by, "descending")


def sorted_items(summary: SupplierSummary) -> list[SupplierItem]:
    """Items of a supplier, largest amount first."""
    return sorted(summary.items, key=lambda item: item.amount, reverse=True)
