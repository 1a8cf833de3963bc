import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime
from pydantic import ValidationError

from . import settings
from .projection import project_sku
from .schemas import MonthDetail, ProjectedSku, SkuRecord
from .utils import parse_iso_date

logger = logging.getLogger(__name__)


def _sku_label(raw) -> str:
    if isinstance(raw, SkuRecord):
        return raw.id
    if isinstance(raw, Mapping):
        return str(raw.get("id") or raw.get("sku") or "<no id>")
    return repr(raw)


def compute_projections(
    skus: Iterable[SkuRecord | Mapping],
    month_details: Sequence[MonthDetail],
    today: date | datetime | None = None,
) -> list[ProjectedSku]:
    """
    Projects every SKU of a snapshot.

    Raw mappings are validated here, one SKU at a time. A SKU that fails
    validation or projection is logged and left out; the rest of the batch
    still computes. An empty snapshot or window gives an empty result.
    """
    today = parse_iso_date(today) if today is not None else date.today()
    window = list(month_details)[: settings.PROJECTION_MONTHS]
    if not window:
        return []

    results = []
    failed = 0
    for raw in skus:
        try:
            sku = raw if isinstance(raw, SkuRecord) else SkuRecord.model_validate(raw)
            results.append(project_sku(sku, window, today))
        except ValidationError as e:
            failed += 1
            logger.warning(f"⚠️ Skipping SKU {_sku_label(raw)}: invalid record ({e.error_count()} error(s)).")
        except Exception:
            failed += 1
            logger.exception(f"⚠️ Skipping SKU {_sku_label(raw)}: projection failed.")

    if failed:
        logger.warning(f"{failed} SKU(s) excluded from the projection.")
    return results


def validate_skus(skus: Iterable[SkuRecord | Mapping]) -> list[SkuRecord]:
    """Validates raw SKU records, logging and dropping the ones that don't fit the schema."""
    validated = []
    for raw in skus:
        if isinstance(raw, SkuRecord):
            validated.append(raw)
            continue
        try:
            validated.append(SkuRecord.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"⚠️ Skipping SKU {_sku_label(raw)}: invalid record ({e.error_count()} error(s)).")
    return validated


def has_stockout_risk(projected: ProjectedSku) -> bool:
    """True when any projected month runs out of stock before it ends."""
    return any(p.count < p.days_in_month for p in projected.projections)
