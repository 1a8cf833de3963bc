from datetime import date, datetime

from inventory_planner.periods import get_month_details, month_label


def test_window_has_five_consecutive_months(today):
    details = get_month_details(today)

    assert [(d.year, d.month_index) for d in details] == [
        (2025, 0),
        (2025, 1),
        (2025, 2),
        (2025, 3),
        (2025, 4),
    ]
    assert [d.days_in_month for d in details] == [31, 28, 31, 30, 31]
    assert [d.month_name for d in details] == ["ENE", "FEB", "MAR", "ABR", "MAY"]


def test_window_rolls_over_year_end():
    details = get_month_details(date(2025, 11, 15))

    assert [(d.year, d.month_index, d.month_name) for d in details] == [
        (2025, 10, "NOV"),
        (2025, 11, "DIC"),
        (2026, 0, "ENE"),
        (2026, 1, "FEB"),
        (2026, 2, "MAR"),
    ]


def test_leap_february_and_month_end_start():
    details = get_month_details(datetime(2024, 1, 31, 18, 45))

    assert details[1].year == 2024
    assert details[1].days_in_month == 29


def test_window_is_deterministic(today):
    assert get_month_details(today) == get_month_details(today)


def test_custom_window_length(today):
    assert len(get_month_details(today, months=2)) == 2


def test_month_label():
    assert month_label(8) == "SEPT"
    assert month_label(11) == "DIC"
