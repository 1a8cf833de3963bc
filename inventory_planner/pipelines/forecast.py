import logging
import math
from datetime import date
from typing import Any, Optional
import pandas as pd

from inventory_planner import settings, utils
from inventory_planner.aggregation import (
    ForecastViewState,
    SkuGroup,
    build_forecast_view,
    coverage_percentage,
    coverage_status,
    stock_status,
)
from inventory_planner.forecasting import compute_projections
from inventory_planner.periods import get_month_details
from inventory_planner.pipeline import DataPipeline
from inventory_planner.schemas import ProjectedSku

logger = logging.getLogger(__name__)


class ForecastPipeline(DataPipeline):
    def __init__(
        self,
        view: Optional[ForecastViewState] = None,
        today: Optional[date] = None,
        test_mode: bool = False,
    ):
        super().__init__("forecast", sources=["skus"], today=today, test_mode=test_mode)
        self.view = view or ForecastViewState()
        self.month_details = get_month_details(self.today)

    def extract(self) -> dict[str, Any]:
        logger.info("--- Loading SKU Snapshot ---")
        path = self.find_snapshot("skus", settings.SKUS_FILENAME_PREFIX)
        return {"skus": utils.load_json_records(path)}

    def transform(self, raw_data: dict[str, Any]) -> list[ProjectedSku]:
        logger.info("\n--- Projecting Days of Stock ---")
        labels = ", ".join(d.month_name for d in self.month_details)
        logger.info(f"Window: {labels}")

        projected = compute_projections(raw_data["skus"], self.month_details, self.today)
        logger.info(f"✅ Projected {len(projected)} of {len(raw_data['skus'])} SKUs.")
        return projected

    def _sku_row(self, sku: ProjectedSku) -> dict[str, Any]:
        row = {
            "SKU": sku.id,
            "Nombre": sku.sku_name,
            "Marca": sku.brand,
            "Owner": sku.owner,
            "Categoría": sku.category,
            "Obj. GMV": sku.objetivo_mensual_gmv,
            "Stock Actual": sku.stock_actual,
            "Días Stock Hoy": round(sku.dias_stock_hoy) if math.isfinite(sku.dias_stock_hoy) else "∞",
            "Estado": stock_status(sku.dias_stock_hoy),
        }
        for detail, projection in zip(self.month_details, sku.projections):
            status = coverage_status(coverage_percentage(projection))
            row[f"Días Stock {detail.month_name}"] = f"{projection.count}/{projection.days_in_month} ({status})"
        return row

    def to_outputs(self, result: list[ProjectedSku]) -> tuple[pd.DataFrame, list[dict[str, Any]]]:
        rows = build_forecast_view(result, self.view)

        if rows and isinstance(rows[0], SkuGroup):
            table = pd.DataFrame(
                [
                    {
                        self.view.group_by: group.group_name,
                        "Obj. GMV Total": group.objetivo_mensual_gmv,
                        "Stock Actual Total": group.stock_actual,
                        "# SKUs": len(group.items),
                    }
                    for group in rows
                ]
            )
        else:
            table = pd.DataFrame([self._sku_row(sku) for sku in rows])

        records = [sku.model_dump(mode="json", by_alias=True) for sku in result]
        return table, records
