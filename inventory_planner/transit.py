from collections.abc import Iterable, Mapping
from datetime import date

from .schemas import TransitRecord
from .utils import clean_number, parse_iso_date

DayKey = tuple[int, int, int]


def day_key(day: date) -> DayKey:
    """(year, zero-based month, day of month) of a calendar date."""
    return day.year, day.month - 1, day.day


def _fields(po) -> tuple[object, object] | None:
    if isinstance(po, TransitRecord):
        return po.quantity, po.date_of_arrival
    if isinstance(po, Mapping):
        return po.get("quantity"), po.get("date_of_arrival")
    return None


def build_transit_schedule(
    purchase_orders: Iterable[TransitRecord | Mapping], today: date
) -> dict[DayKey, float]:
    """
    Buckets the incoming quantity of a SKU by arrival day.

    Orders without a usable arrival date, or arriving today or earlier, are
    left out: today's stock already reflects them.
    """
    schedule: dict[DayKey, float] = {}
    for po in purchase_orders:
        fields = _fields(po)
        if fields is None:
            continue
        quantity, arrival = fields

        eta = parse_iso_date(arrival)
        if eta is None or eta <= today:
            continue

        key = day_key(eta)
        schedule[key] = schedule.get(key, 0.0) + clean_number(quantity)
    return schedule


def total_in_transit(purchase_orders: Iterable[TransitRecord | Mapping]) -> float:
    """Sum of every transit quantity, whatever its arrival date."""
    total = 0.0
    for po in purchase_orders:
        fields = _fields(po)
        if fields is not None:
            total += clean_number(fields[0])
    return total


def next_arrival(
    purchase_orders: Iterable[TransitRecord | Mapping], today: date
) -> date | None:
    """Earliest valid arrival date falling today or later."""
    upcoming = []
    for po in purchase_orders:
        fields = _fields(po)
        if fields is None:
            continue
        eta = parse_iso_date(fields[1])
        if eta is not None and eta >= today:
            upcoming.append(eta)
    return min(upcoming, default=None)
