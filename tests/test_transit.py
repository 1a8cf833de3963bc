from datetime import date

from inventory_planner.schemas import TransitRecord
from inventory_planner.transit import (
    build_transit_schedule,
    day_key,
    next_arrival,
    total_in_transit,
)


def test_day_key_uses_zero_based_month():
    assert day_key(date(2025, 12, 31)) == (2025, 11, 31)


def test_orders_arriving_the_same_day_share_one_bucket(today):
    orders = [
        {"quantity": 10, "date_of_arrival": "2025-01-10"},
        {"quantity": "20", "date_of_arrival": "2025-01-10T08:00:00"},
        {"quantity": 5, "date_of_arrival": "2025-03-01"},
    ]

    assert build_transit_schedule(orders, today) == {
        (2025, 0, 10): 30.0,
        (2025, 2, 1): 5.0,
    }


def test_only_strictly_future_valid_dates_are_scheduled(today):
    orders = [
        {"quantity": 100, "date_of_arrival": "2025-01-01"},  # today
        {"quantity": 100, "date_of_arrival": "2024-12-31"},
        {"quantity": 100, "date_of_arrival": None},
        {"quantity": 100, "date_of_arrival": ""},
        {"quantity": 100, "date_of_arrival": "31/01/2025"},
        {"quantity": 100},
        "not an order",
        None,
        {"quantity": 7, "date_of_arrival": "2025-01-02"},
    ]

    assert build_transit_schedule(orders, today) == {(2025, 0, 2): 7.0}


def test_utc_timestamps_from_js_exports_are_scheduled(today):
    orders = [{"quantity": 40, "date_of_arrival": "2025-01-10T00:00:00.000Z"}]

    assert build_transit_schedule(orders, today) == {(2025, 0, 10): 40.0}


def test_validated_records_are_scheduled(today):
    orders = [TransitRecord(quantity=12, date_of_arrival=date(2025, 2, 3))]

    assert build_transit_schedule(orders, today) == {(2025, 1, 3): 12.0}


def test_empty_orders_give_empty_schedule(today):
    assert build_transit_schedule([], today) == {}


def test_total_in_transit_ignores_dates():
    orders = [
        {"quantity": "1,000", "date_of_arrival": "2020-01-01"},
        {"quantity": 50, "date_of_arrival": None},
        "junk",
    ]

    assert total_in_transit(orders) == 1050.0


def test_next_arrival_includes_today(today):
    orders = [
        {"quantity": 1, "date_of_arrival": "2025-03-01"},
        {"quantity": 1, "date_of_arrival": "2025-01-01"},
        {"quantity": 1, "date_of_arrival": "2024-12-01"},
        {"quantity": 1, "date_of_arrival": "bad"},
    ]

    assert next_arrival(orders, today) == date(2025, 1, 1)
    assert next_arrival([], today) is None
