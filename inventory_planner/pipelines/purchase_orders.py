import logging
from datetime import date
from typing import Any, Optional
import pandas as pd

from inventory_planner import settings, utils
from inventory_planner.forecasting import validate_skus
from inventory_planner.periods import get_month_details
from inventory_planner.pipeline import DataPipeline
from inventory_planner.purchase_orders import (
    build_supplier_summaries,
    calculate_progress,
    filter_suppliers,
    progress_percentage,
    sort_suppliers,
    sorted_items,
)
from inventory_planner.schemas import SupplierSummary

logger = logging.getLogger(__name__)


class PurchaseOrderPipeline(DataPipeline):
    def __init__(
        self,
        sort_by: str = "total_amount",
        suppliers: tuple[str, ...] = (),
        owners: tuple[str, ...] = (),
        today: Optional[date] = None,
        test_mode: bool = False,
    ):
        super().__init__(
            "purchase_orders", sources=["skus", "purchase_orders"], today=today, test_mode=test_mode
        )
        self.sort_by = sort_by
        self.suppliers = suppliers
        self.owners = owners

    def extract(self) -> dict[str, Any]:
        logger.info("--- Loading Snapshots ---")
        skus_path = self.find_snapshot("skus", settings.SKUS_FILENAME_PREFIX)
        po_path = self.find_snapshot("purchase_orders", settings.PURCHASE_ORDERS_FILENAME_PREFIX)
        return {
            "skus": utils.load_json_records(skus_path),
            "purchase_orders": utils.load_json_records(po_path),
        }

    def transform(self, raw_data: dict[str, Any]) -> list[SupplierSummary]:
        logger.info("\n--- Prioritizing Purchase Orders ---")
        skus = validate_skus(raw_data["skus"])
        summaries = build_supplier_summaries(
            raw_data["purchase_orders"], skus, get_month_details(self.today), self.today
        )
        summaries = filter_suppliers(summaries, self.suppliers, self.owners)
        summaries = sort_suppliers(summaries, self.sort_by)

        at_risk = sum(s.risk_score for s in summaries)
        logger.info(f"✅ {len(summaries)} supplier(s), {at_risk} item(s) with low stock.")
        return summaries

    def to_outputs(self, result: list[SupplierSummary]) -> tuple[pd.DataFrame, list[dict[str, Any]]]:
        rows = []
        records = []
        for summary in result:
            progress = progress_percentage(summary.items)
            for item in sorted_items(summary):
                rows.append(
                    {
                        "Proveedor": summary.name,
                        "Comprador": summary.owner,
                        "SKU": item.sku,
                        "Nombre": item.sku_name,
                        "Stock Actual": item.stock_actual,
                        "Cant. Tránsito": item.total_in_transit,
                        "Próx. Arribo": item.next_arrival.strftime("%d/%m/%Y") if item.next_arrival else "N/A",
                        "Cantidad": item.cantidad_a_comprar,
                        "Precio Unit.": item.precio_unitario,
                        "Monto Total": item.amount,
                        "Hecho": item.is_done,
                    }
                )
            record = summary.model_dump(mode="json")
            record["progress"] = progress
            records.append(record)

        all_items = [item for summary in result for item in summary.items]
        if records:
            records.append(
                {
                    "name": "_summary",
                    "progress_by_owner": calculate_progress(all_items, "owner"),
                    "progress_by_category": calculate_progress(all_items, "category"),
                }
            )
        return pd.DataFrame(rows), records
