import math
from collections.abc import Iterable, Sequence
from typing import Any, Literal
from pydantic import BaseModel, ConfigDict, Field

from . import settings
from .exceptions import ConfigurationError
from .forecasting import has_stockout_risk
from .schemas import MonthProjection, ProjectedSku, SkuRecord

SortDirection = Literal["ascending", "descending"]


class ForecastViewState(BaseModel):
    """
    Filters, sorting and grouping applied to the projected SKUs.
    Immutable: changing the view means building a new state.
    """

    model_config = ConfigDict(frozen=True)

    categories: tuple[str, ...] = ()
    brands: tuple[str, ...] = ()
    owners: tuple[str, ...] = ()
    oos_only: bool = False
    search_term: str = ""
    sort_key: str = "objetivo_mensual_gmv"
    sort_direction: SortDirection = "descending"
    group_by: str = "sku"

    def with_sort(self, key: str) -> "ForecastViewState":
        """Sorts by `key`, flipping to descending when it's already the ascending key."""
        if self.sort_key == key and self.sort_direction == "ascending":
            direction = "descending"
        else:
            direction = "ascending"
        return self.model_copy(update={"sort_key": key, "sort_direction": direction})


class SkuGroup(BaseModel):
    """Projected SKUs sharing a brand, category or owner."""

    group_name: str
    items: list[ProjectedSku] = Field(default_factory=list)
    stock_actual: float = 0.0
    objetivo_mensual_gmv: float = 0.0


def _value(record, key: str) -> Any:
    if isinstance(record, dict):
        return record.get(key)
    return getattr(record, key, None)


def sort_records(records: Iterable, key: str, direction: SortDirection = "descending") -> list:
    """
    Stable sort of records (models or dicts) on one field. Missing values sort
    lowest; equal values keep their input order in both directions.
    """
    if direction not in ("ascending", "descending"):
        raise ConfigurationError(f"Unknown sort direction: {direction!r}")

    def sort_key(record):
        value = _value(record, key)
        if value is None:
            return (False, 0)
        return (True, value)

    return sorted(records, key=sort_key, reverse=direction == "descending")


def filter_options(skus: Iterable[SkuRecord]) -> dict[str, list[str]]:
    """Sorted distinct categories, brands and owners available for filtering."""
    categories, brands, owners = set(), set(), set()
    for sku in skus:
        if sku.category:
            categories.add(sku.category)
        if sku.brand:
            brands.add(sku.brand)
        if sku.owner:
            owners.add(sku.owner)
    return {
        "categories": sorted(categories),
        "brands": sorted(brands),
        "owners": sorted(owners),
    }


def filter_skus(projected: Iterable[ProjectedSku], state: ForecastViewState) -> list[ProjectedSku]:
    term = state.search_term.lower()
    filtered = []
    for sku in projected:
        if state.categories and sku.category not in state.categories:
            continue
        if state.brands and sku.brand not in state.brands:
            continue
        if state.owners and sku.owner not in state.owners:
            continue
        if state.oos_only and not has_stockout_risk(sku):
            continue
        if term and term not in sku.id.lower() and term not in (sku.sku_name or "").lower():
            continue
        filtered.append(sku)
    return filtered


def group_skus(projected: Sequence[ProjectedSku], group_by: str) -> list[ProjectedSku] | list[SkuGroup]:
    """
    Rolls projected SKUs up by brand, category or owner, summing stock and
    target GMV. Groups come out by target GMV, largest first, ties in
    first-seen order. Grouping by 'sku' returns the SKUs unchanged.
    """
    if group_by not in settings.GROUP_BY_OPTIONS:
        raise ConfigurationError(f"Unknown grouping: {group_by!r}")
    if group_by == "sku":
        return list(projected)

    groups: dict[str, SkuGroup] = {}
    for sku in projected:
        name = getattr(sku, group_by) or f"Sin {group_by}"
        group = groups.setdefault(name, SkuGroup(group_name=name))
        group.items.append(sku)
        group.stock_actual += sku.stock_actual
        group.objetivo_mensual_gmv += sku.objetivo_mensual_gmv

    return sort_records(groups.values(), "objetivo_mensual_gmv", "descending")


def build_forecast_view(projected: Iterable[ProjectedSku], state: ForecastViewState):
    """Filter, sort, then group: the rows of the forecast table."""
    rows = filter_skus(projected, state)
    rows = sort_records(rows, state.sort_key, state.sort_direction)
    return group_skus(rows, state.group_by)


# --- Risk metrics ---


def coverage_percentage(projection: MonthProjection) -> float:
    if projection.days_in_month <= 0:
        return 100.0
    return projection.count / projection.days_in_month * 100


def stock_status(dias_stock_hoy: float) -> str:
    """Risk band of the days of stock left today."""
    if math.isnan(dias_stock_hoy):
        return "healthy"
    if dias_stock_hoy < settings.STOCK_CRITICAL_DAYS:
        return "critical"
    if dias_stock_hoy < settings.STOCK_WARNING_DAYS:
        return "warning"
    return "healthy"


def coverage_status(percentage: float) -> str:
    """Risk band of the share of a month covered by stock."""
    if percentage < settings.COVERAGE_CRITICAL_PCT:
        return "critical"
    if percentage < settings.COVERAGE_WARNING_PCT:
        return "warning"
    return "healthy"
