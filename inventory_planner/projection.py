"""
Days-of-stock projection for a single SKU.

The simulation walks day by day through the projection window: each day the
balance first receives whatever transit lands that day, the day counts as
covered when the balance meets that day's demand, and then the demand is
consumed. The balance carries over from one month to the next.
"""

import math
from collections.abc import Mapping, Sequence
from datetime import date

from .schemas import MonthDetail, MonthProjection, ProjectedSku, SkuRecord
from .transit import DayKey, build_transit_schedule


def days_of_stock_today(stock: float, forecast_m0: float, days_in_month: int) -> float:
    """
    Point estimate of how many days the current stock lasts at the current
    month's daily demand. No demand means an unbounded runway (inf).
    """
    if days_in_month <= 0:
        return math.inf

    daily_demand = forecast_m0 / days_in_month
    if daily_demand > 0:
        return stock / daily_demand
    return math.inf


def _forecast_for(forecasts: Sequence[float], index: int) -> float:
    if index < len(forecasts):
        return forecasts[index] or 0.0
    return 0.0


def simulate_coverage(
    stock: float,
    month_details: Sequence[MonthDetail],
    forecasts: Sequence[float],
    transits_by_day: Mapping[DayKey, float],
    today: date,
) -> list[MonthProjection]:
    """
    Counts, month by month, the days on which the simulated stock balance
    covers that day's demand.

    The current month is simulated from today's day of month; the following
    months are simulated in full. Daily demand always spreads the monthly
    forecast over the whole month. A month without demand is fully covered
    and not walked, so transit landing in it never reaches the balance.
    """
    balance = stock
    projections = []

    for i, detail in enumerate(month_details):
        start_day = today.day if i == 0 else 1
        days_in_month = detail.days_in_month
        simulated_days = max(days_in_month - start_day + 1, 0)

        monthly_forecast = _forecast_for(forecasts, i)
        daily_sale = monthly_forecast / days_in_month if monthly_forecast > 0 else 0.0

        if daily_sale > 0:
            covered = 0
            for day in range(start_day, days_in_month + 1):
                balance += transits_by_day.get((detail.year, detail.month_index, day), 0.0)
                if balance >= daily_sale:
                    covered += 1
                balance = max(balance - daily_sale, 0.0)
        else:
            # No demand: the whole period is covered and the balance is left as is
            covered = simulated_days

        projections.append(MonthProjection(count=covered, days_in_month=simulated_days))

    return projections


def project_sku(sku: SkuRecord, month_details: Sequence[MonthDetail], today: date) -> ProjectedSku:
    """Builds the projected copy of one SKU record; the input is left untouched."""
    transits_by_day = build_transit_schedule(sku.purchase_orders, today)

    if month_details:
        dias_stock_hoy = days_of_stock_today(
            sku.stock_actual, _forecast_for(sku.forecasts, 0), month_details[0].days_in_month
        )
    else:
        dias_stock_hoy = math.inf

    projections = simulate_coverage(
        sku.stock_actual, month_details, sku.forecasts, transits_by_day, today
    )

    return ProjectedSku.model_validate(
        {
            **sku.model_dump(),
            "dias_stock_hoy": dias_stock_hoy,
            "projections": projections,
        }
    )
