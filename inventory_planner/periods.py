import calendar
from datetime import date, datetime

from . import settings
from .schemas import MonthDetail


def month_label(month_index: int) -> str:
    """Returns the column label of a zero-based month index, e.g. 8 -> 'SEPT'."""
    return settings.MONTH_LABELS[month_index]


def get_month_details(
    now: date | datetime | None = None, months: int = settings.PROJECTION_MONTHS
) -> list[MonthDetail]:
    """
    Builds the rolling window of months used by every projection, starting
    with the month of `now` (today when omitted).
    """
    if now is None:
        now = date.today()

    details = []
    for offset in range(months):
        year, month0 = divmod(now.month - 1 + offset, 12)
        year += now.year
        details.append(
            MonthDetail(
                year=year,
                month_index=month0,
                days_in_month=calendar.monthrange(year, month0 + 1)[1],
                month_name=month_label(month0),
            )
        )
    return details
