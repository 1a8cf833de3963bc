import calendar
import logging
from datetime import date
from typing import Any, Optional
import pandas as pd

from inventory_planner import settings, utils
from inventory_planner.performance import build_performance_report, group_performance, join_sales
from inventory_planner.pipeline import DataPipeline

logger = logging.getLogger(__name__)


def month_bounds(day: date, months_back: int = 0) -> tuple[date, date]:
    """First and last day of the month `months_back` months before `day`."""
    year, month0 = divmod(day.year * 12 + day.month - 1 - months_back, 12)
    last = calendar.monthrange(year, month0 + 1)[1]
    return date(year, month0 + 1, 1), date(year, month0 + 1, last)


class PerformancePipeline(DataPipeline):
    """
    Compares the current month's sales against the previous month by default.
    """

    def __init__(
        self,
        primary: Optional[tuple[date, date]] = None,
        comparison: Optional[tuple[date, date]] = None,
        group_by: str = "sku",
        channels: tuple[str, ...] = (),
        brands: tuple[str, ...] = (),
        categories: tuple[str, ...] = (),
        today: Optional[date] = None,
        test_mode: bool = False,
    ):
        super().__init__(
            "performance", sources=["sales", "products", "stock"], today=today, test_mode=test_mode
        )
        self.primary = primary or month_bounds(self.today)
        self.comparison = comparison or month_bounds(self.today, months_back=1)
        self.group_by = group_by
        self.channels = channels
        self.brands = brands
        self.categories = categories

    def extract(self) -> dict[str, Any]:
        logger.info("--- Loading Sales, Catalog and Stock ---")
        return {
            "sales": utils.load_csv(self.find_snapshot("sales", settings.SALES_FILENAME_PREFIX)),
            "products": utils.load_csv(self.find_snapshot("products", settings.PRODUCTS_FILENAME_PREFIX)),
            "stock": utils.load_csv(self.find_snapshot("stock", settings.STOCK_FILENAME_PREFIX)),
        }

    def transform(self, raw_data: dict[str, Any]) -> dict | None:
        logger.info("\n--- Calculating Sales Performance ---")
        joined = join_sales(raw_data["sales"], raw_data["products"], raw_data["stock"])
        if joined.empty:
            logger.warning("⚠️ No confirmed sales matched the product catalog.")
            return None

        report = build_performance_report(
            joined, self.primary, self.comparison, self.channels, self.brands, self.categories
        )
        logger.info(
            f"Primary {self.primary[0]}..{self.primary[1]} vs "
            f"comparison {self.comparison[0]}..{self.comparison[1]}: {len(report['skus'])} SKUs."
        )
        for name, kpi in report["kpis"].items():
            logger.info(f"  {name}: {kpi['value']:.2f} (change {kpi['change']:.1f})")
        return report

    def to_outputs(self, result: dict) -> tuple[pd.DataFrame, list[dict[str, Any]]]:
        table = group_performance(result["skus"], self.group_by)
        records = table.to_dict("records")
        records.append({"sku": "_kpis", **result["kpis"]})
        return table, records
