import json
import math
import logging
from datetime import date
from typing import Any, Optional
import pandas as pd
import requests

from . import settings
from . import utils

logger = logging.getLogger(__name__)


def json_safe(value: Any) -> Any:
    """Replaces NaN and infinities (e.g. unbounded days of stock) with None, recursively."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]
    return value


def save_outputs(table: pd.DataFrame, records: list[dict[str, Any]], report_name: str) -> dict[str, Any]:
    """
    Saves a report as a dated CSV (the flat table) and, when enabled, a dated
    JSON file (the full nested records). Returns the written paths.
    """
    settings.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    date_suffix = utils.get_date_suffix_for_filename()
    written = {}

    csv_path = settings.OUTPUT_DIR / f"{report_name}_{date_suffix}.csv"
    table.to_csv(csv_path, index=False)
    written["csv"] = csv_path
    logger.info(f"✅ Report saved to: {csv_path}")

    if settings.SAVE_JSON_OUTPUT:
        json_path = settings.OUTPUT_DIR / f"{report_name}_{date_suffix}.json"
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(json_safe(records), f, indent=2, default=str)
        written["json"] = json_path
        logger.info(f"✅ JSON output saved to: {json_path}")
    else:
        logger.info("Skipping JSON file save as per configuration.")

    return written


def post_to_webhook(
    records: list[dict[str, Any]],
    metadata: dict[str, Optional[date]],
    report_type: str,
) -> bool:
    """
    Posts the report records and the snapshot dates to the webhook.
    Returns True when the webhook accepted the payload.
    """
    if not settings.WEBHOOK_URL:
        logger.warning("⚠️ WEBHOOK_URL not set. Skipping webhook post.")
        return False

    logger.info(f"🚀 Posting {report_type} report to webhook.")

    payload = {
        "reportType": report_type,
        "reportData": json_safe(records),
        "statusSummary": {
            source: dt.isoformat() if dt else None for source, dt in metadata.items()
        },
    }

    try:
        response = requests.post(settings.WEBHOOK_URL, json=payload, timeout=15)
        response.raise_for_status()
        logger.info("✅ Report successfully posted to webhook.")
        return True
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error posting to webhook: {e}")
        return False
