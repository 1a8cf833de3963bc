import logging
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Any, Optional
import pandas as pd

from inventory_planner import settings, data_handler, utils
from inventory_planner.exceptions import DataLoadError

logger = logging.getLogger(__name__)


class DataPipeline(ABC):
    """
    Abstract base class for the planning reports (Forecast, Purchase Orders, Performance).
    Follows an Extract -> Transform -> Load (ETL) pattern.
    """

    def __init__(
        self,
        report_type: str,
        sources: Optional[list[str]] = None,
        today: Optional[date] = None,
        test_mode: bool = False,
    ):
        self.report_type = report_type
        self.sources = sources or []
        self.today = today or date.today()
        self.test_mode = test_mode
        # Status summary tracks the snapshot date of each source
        self.status_summary: dict[str, Optional[date]] = {src: None for src in self.sources}

    def run(self) -> Any:
        """
        Orchestrates the pipeline execution. Returns the transformed result,
        or None when there was nothing to report.
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()} REPORT")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        try:
            raw_data = self.extract()
        except DataLoadError as e:
            logger.error(f"❌ Extraction failed for {self.report_type}: {e}")
            return None

        if not raw_data:
            logger.warning(f"⚠️ No data extracted for {self.report_type}.")
            return None

        # --- 2. TRANSFORM ---
        result = self.transform(raw_data)
        if result is None:
            logger.error(f"❌ Transformation failed for {self.report_type}.")
            return None

        # --- 3. LOAD ---
        table, records = self.to_outputs(result)
        self.load(table, records)

        logger.info(f"✅ {self.report_type.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return result

    def find_snapshot(self, source: str, prefix: str) -> Path:
        """Latest '<prefix>YYYY-MM-DD' file of a source; records its date in the status summary."""
        found = utils.find_latest_report(settings.INPUT_DIR, prefix)
        if not found:
            raise DataLoadError(f"No '{prefix}*' snapshot found in {settings.INPUT_DIR}")

        path, snapshot_date = found
        self.status_summary[source] = snapshot_date
        logger.info(f"  > Found '{source}': {path.name} ({snapshot_date})")
        return path

    @abstractmethod
    def extract(self) -> dict[str, Any]:
        """
        Loads the snapshots the report needs, keyed by source name.
        Raises DataLoadError when a required snapshot is missing.
        """
        pass

    @abstractmethod
    def transform(self, raw_data: dict[str, Any]) -> Any:
        """Validates the snapshots and runs the report's calculations."""
        pass

    @abstractmethod
    def to_outputs(self, result: Any) -> tuple[pd.DataFrame, list[dict[str, Any]]]:
        """Flat table for the CSV and JSON-ready records for the JSON file and webhook."""
        pass

    def load(self, table: pd.DataFrame, records: list[dict[str, Any]]):
        """
        Saves the report to disk and posts it to the webhook.
        """
        if self.sources:
            logger.info("\n--- Snapshot Summary ---")
            for src in self.sources:
                date_val = self.status_summary.get(src)
                logger.info(f"{src}: {date_val.isoformat() if date_val else 'No data'}")

        if records:
            data_handler.save_outputs(table, records, f"{self.report_type}_report")
        else:
            logger.warning("No data to save to disk.")

        if not self.test_mode:
            data_handler.post_to_webhook(
                records=records,
                metadata=self.status_summary,
                report_type=self.report_type,
            )
        else:
            logger.info("🧪 Test Mode: Skipping webhook post.")
