"""
Sales performance: revenue, units, margin, sell-through and turnover per SKU
for a primary period, compared against a second period.

Inputs are plain DataFrames:
- sales: product_id, state, net_sales, product_qty_sold, gross_margin,
  yearmonth (YYYYMM), sales_channel and optionally is_combo_sale
- products: product_id, default_code, name, brand, category and optionally cost
- stock: default_code, stock_total_disponible
"""

import math
from collections.abc import Sequence
from datetime import date
import pandas as pd

from . import settings
from .exceptions import ConfigurationError
from .utils import clean_number

SALE_STATE = "sale"

JOINED_COLUMNS = [
    "sku",
    "sku_name",
    "brand",
    "category",
    "net_sales",
    "items_sold",
    "gross_margin",
    "month",
    "channel",
    "stock_actual",
    "unit_cost",
]

METRIC_COLUMNS = ["sku", "revenue", "units", "margin_value", "stock", "sell_through", "turnover"]

Period = tuple[date | pd.Timestamp, date | pd.Timestamp]


def _numeric(series: pd.Series) -> pd.Series:
    return series.map(clean_number).astype(float)


def _empty_metrics() -> pd.DataFrame:
    frame = pd.DataFrame({column: pd.Series(dtype=float) for column in METRIC_COLUMNS})
    frame["sku"] = frame["sku"].astype(object)
    return frame


def _column(frame: pd.DataFrame, name: str, default) -> pd.Series:
    if name in frame.columns:
        return frame[name]
    return pd.Series(default, index=frame.index)


def join_sales(sales: pd.DataFrame, products: pd.DataFrame, stock: pd.DataFrame) -> pd.DataFrame:
    """
    Joins confirmed, non-combo sales to the product catalog and current stock.
    Sales whose product is missing from the catalog are dropped.
    """
    if sales.empty or products.empty:
        return pd.DataFrame(columns=JOINED_COLUMNS)

    confirmed = sales[sales["state"] == SALE_STATE].copy()
    combo = _column(confirmed, "is_combo_sale", False).fillna(False).astype(bool)
    confirmed = confirmed[~combo]
    confirmed["product_id"] = confirmed["product_id"].astype(str)

    catalog = pd.DataFrame(
        {
            "product_id": products["product_id"].astype(str),
            "sku": products["default_code"].astype(str),
            "sku_name": _column(products, "name", None),
            "brand": _column(products, "brand", None),
            "category": _column(products, "category", None),
            "unit_cost": _numeric(_column(products, "cost", 0)),
        }
    ).drop_duplicates("product_id", keep="last")

    joined = confirmed.merge(catalog, on="product_id", how="inner")

    stock_map = {}
    if not stock.empty:
        stock_frame = stock.drop_duplicates("default_code", keep="last")
        stock_map = dict(
            zip(stock_frame["default_code"].astype(str), _numeric(stock_frame["stock_total_disponible"]))
        )

    result = pd.DataFrame(
        {
            "sku": joined["sku"],
            "sku_name": joined["sku_name"],
            "brand": joined["brand"],
            "category": joined["category"],
            "net_sales": _numeric(joined["net_sales"]),
            "items_sold": _numeric(joined["product_qty_sold"]),
            "gross_margin": _numeric(joined["gross_margin"]),
            "month": pd.to_datetime(
                joined["yearmonth"].astype(str).str[:6], format="%Y%m", errors="coerce"
            ),
            "channel": joined["sales_channel"],
            "stock_actual": joined["sku"].map(stock_map).fillna(0.0),
            "unit_cost": joined["unit_cost"],
        }
    )
    return result[JOINED_COLUMNS].reset_index(drop=True)


def period_metrics(
    joined: pd.DataFrame,
    period: Period,
    channels: Sequence[str] = (),
    brands: Sequence[str] = (),
    categories: Sequence[str] = (),
) -> pd.DataFrame:
    """Per-SKU revenue, units, margin value, sell-through % and turnover within a period."""
    start, end = pd.Timestamp(period[0]).normalize(), pd.Timestamp(period[1]).normalize()

    mask = joined["month"].notna() & (joined["month"] >= start) & (joined["month"] <= end)
    if channels:
        mask &= joined["channel"].isin(channels)
    if brands:
        mask &= joined["brand"].isin(brands)
    if categories:
        mask &= joined["category"].isin(categories)

    subset = joined[mask]
    if subset.empty:
        return _empty_metrics()

    metrics = (
        subset.groupby("sku", sort=False)
        .agg(
            revenue=("net_sales", "sum"),
            units=("items_sold", "sum"),
            margin_value=("gross_margin", "sum"),
            stock=("stock_actual", "first"),
            unit_cost=("unit_cost", "first"),
        )
        .reset_index()
    )

    total_inventory = metrics["units"] + metrics["stock"]
    metrics["sell_through"] = (metrics["units"] / total_inventory * 100).where(total_inventory > 0, 0.0)

    avg_inventory_value = (metrics["stock"] + total_inventory) / 2 * metrics["unit_cost"]
    metrics["turnover"] = (metrics["revenue"] / avg_inventory_value).where(avg_inventory_value > 0, 0.0)

    return metrics[METRIC_COLUMNS]


def _pct_change(current: pd.Series, previous: pd.Series) -> pd.Series:
    return ((current - previous) / previous * 100).where(previous > 0, math.inf)


def _margin_pct(margin_value: pd.Series, revenue: pd.Series) -> pd.Series:
    return (margin_value / revenue * 100).where(revenue > 0, 0.0)


def global_kpis(metrics: pd.DataFrame) -> dict[str, float]:
    """Totals over every SKU; margin and sell-through are weighted, not averaged."""
    if metrics.empty:
        return {"total_revenue": 0.0, "total_units": 0.0, "avg_margin": 0.0, "avg_sell_through": 0.0}

    total_revenue = float(metrics["revenue"].sum())
    total_units = float(metrics["units"].sum())
    total_margin = float(metrics["margin_value"].sum())
    inventory = metrics["units"] + metrics["stock"]
    total_inventory = float(inventory.sum())

    return {
        "total_revenue": total_revenue,
        "total_units": total_units,
        "avg_margin": total_margin / total_revenue * 100 if total_revenue > 0 else 0.0,
        "avg_sell_through": (
            float((metrics["sell_through"] * inventory).sum()) / total_inventory if total_inventory > 0 else 0.0
        ),
    }


def kpi_summary(primary: pd.DataFrame, comparison: pd.DataFrame) -> dict[str, dict[str, float]]:
    """KPI values of the primary period with their change against the comparison period."""
    p, s = global_kpis(primary), global_kpis(comparison)

    def pct(key):
        return (p[key] - s[key]) / s[key] * 100 if s[key] > 0 else math.inf

    return {
        "total_revenue": {"value": p["total_revenue"], "change": pct("total_revenue")},
        "avg_margin": {"value": p["avg_margin"], "change": p["avg_margin"] - s["avg_margin"]},
        "total_units": {"value": p["total_units"], "change": pct("total_units")},
        "avg_sell_through": {
            "value": p["avg_sell_through"],
            "change": p["avg_sell_through"] - s["avg_sell_through"],
        },
    }


def build_performance_report(
    joined: pd.DataFrame,
    primary: Period,
    comparison: Period,
    channels: Sequence[str] = (),
    brands: Sequence[str] = (),
    categories: Sequence[str] = (),
) -> dict:
    """
    Compares two periods SKU by SKU.
    Returns {"skus": DataFrame, "kpis": kpi_summary(...)}. Percentage changes
    are inf when the comparison period had nothing to compare against.
    """
    p_metrics = period_metrics(joined, primary, channels, brands, categories)
    s_metrics = period_metrics(joined, comparison, channels, brands, categories)

    skus = list(dict.fromkeys([*p_metrics["sku"], *s_metrics["sku"]]))
    p = p_metrics.set_index("sku").reindex(skus).fillna(0.0)
    s = s_metrics.set_index("sku").reindex(skus).fillna(0.0)

    info = joined.drop_duplicates("sku", keep="first").set_index("sku").reindex(skus)

    report = pd.DataFrame(
        {
            "sku": skus,
            "sku_name": info["sku_name"].fillna("N/A").values,
            "brand": info["brand"].fillna("N/A").values,
            "category": info["category"].fillna("N/A").values,
            "stock_actual": info["stock_actual"].fillna(0.0).values,
            "period_revenue": p["revenue"].values,
            "period_units": p["units"].values,
            "period_margin": _margin_pct(p["margin_value"], p["revenue"]).values,
            "period_sell_through": p["sell_through"].values,
            "period_turnover": p["turnover"].values,
            "revenue_pct_change": _pct_change(p["revenue"], s["revenue"]).values,
            "units_pct_change": _pct_change(p["units"], s["units"]).values,
            "margin_pts_change": (
                _margin_pct(p["margin_value"], p["revenue"]) - _margin_pct(s["margin_value"], s["revenue"])
            ).values,
        }
    )
    return {"skus": report, "kpis": kpi_summary(p_metrics, s_metrics)}


def _finite_mean(series: pd.Series) -> float:
    finite = series[series.map(math.isfinite)]
    return float(finite.mean()) if not finite.empty else math.inf


def group_performance(report: pd.DataFrame, group_by: str) -> pd.DataFrame:
    """
    Rolls the per-SKU report up by brand, category or owner-like column.
    Margin, sell-through and turnover are recomputed from the group totals;
    percentage changes are the mean of the finite SKU values.
    """
    if group_by not in settings.GROUP_BY_OPTIONS:
        raise ConfigurationError(f"Unknown grouping: {group_by!r}")
    if group_by != "sku" and group_by not in report.columns:
        raise ConfigurationError(f"The performance report has no {group_by!r} column")
    if group_by == "sku" or report.empty:
        return report.copy()

    frame = report.copy()
    frame["group_name"] = frame[group_by].where(
        frame[group_by].notna() & (frame[group_by] != ""), f"Sin {group_by}"
    )
    frame["margin_value"] = frame["period_revenue"] * frame["period_margin"] / 100

    grouped = (
        frame.groupby("group_name", sort=False)
        .agg(
            items=("sku", "count"),
            period_revenue=("period_revenue", "sum"),
            period_units=("period_units", "sum"),
            margin_value=("margin_value", "sum"),
            stock_actual=("stock_actual", "sum"),
            revenue_pct_change=("revenue_pct_change", _finite_mean),
            units_pct_change=("units_pct_change", _finite_mean),
        )
        .reset_index()
    )

    grouped["period_margin"] = _margin_pct(grouped["margin_value"], grouped["period_revenue"])
    total_inventory = grouped["period_units"] + grouped["stock_actual"]
    grouped["period_sell_through"] = (grouped["period_units"] / total_inventory * 100).where(
        total_inventory > 0, 0.0
    )
    avg_price = (grouped["period_revenue"] / grouped["period_units"]).where(grouped["period_units"] > 0, 0.0)
    avg_inventory_value = (grouped["stock_actual"] + total_inventory) / 2 * avg_price
    grouped["period_turnover"] = (grouped["period_revenue"] / avg_inventory_value).where(
        avg_inventory_value > 0, 0.0
    )

    grouped = grouped.drop(columns=["margin_value"])
    return grouped.sort_values("period_revenue", ascending=False, kind="stable").reset_index(drop=True)
