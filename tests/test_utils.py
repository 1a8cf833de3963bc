from datetime import date, datetime

import pandas as pd
import pytest

from inventory_planner.exceptions import DataLoadError
from inventory_planner.utils import (
    clean_number,
    find_latest_report,
    load_json_records,
    parse_iso_date,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (12, 12.0),
        (3.5, 3.5),
        ("1,234.5", 1234.5),
        ("  42", 42.0),
        ("12 units", 12.0),
        ("-7", -7.0),
        (".5", 0.5),
        ("abc", 0.0),
        ("", 0.0),
        (None, 0.0),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
        ("1e999", 0.0),
        (True, 0.0),
        ([1, 2], 0.0),
        ({"a": 1}, 0.0),
    ],
)
def test_clean_number(raw, expected):
    assert clean_number(raw) == expected


def test_clean_number_accepts_numpy_scalars():
    series = pd.Series([5, 2.5])
    assert clean_number(series.iloc[0]) == 5.0
    assert clean_number(series.iloc[1]) == 2.5


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2025-03-10", date(2025, 3, 10)),
        (" 2025-03-10 ", date(2025, 3, 10)),
        ("2025-03-10T23:30:00", date(2025, 3, 10)),
        ("2025-01-10T00:00:00.000Z", date(2025, 1, 10)),
        ("2025-01-10T23:30:00-05:00", date(2025, 1, 10)),
        ("2025-01-10 08:15:00", date(2025, 1, 10)),
        ("2025-02-30T10:00:00", None),
        (date(2025, 3, 10), date(2025, 3, 10)),
        (datetime(2025, 3, 10, 22, 0), date(2025, 3, 10)),
        ("2025-02-30", None),
        ("10/03/2025", None),
        ("not a date", None),
        ("", None),
        (None, None),
        (20250310, None),
        (pd.NaT, None),
    ],
)
def test_parse_iso_date(raw, expected):
    assert parse_iso_date(raw) == expected


def test_find_latest_report_picks_most_recent_date(tmp_path):
    for name in ["skus_2025-01-01.json", "skus_2025-02-15.json", "skus_2024-12-31.json", "skus_latest.json"]:
        (tmp_path / name).write_text("[]")
    (tmp_path / "sales_2026-01-01.csv").write_text("")

    path, found_date = find_latest_report(tmp_path, "skus_")

    assert path.name == "skus_2025-02-15.json"
    assert found_date == date(2025, 2, 15)


def test_find_latest_report_returns_none_without_match(tmp_path):
    assert find_latest_report(tmp_path, "skus_") is None


def test_load_json_records_accepts_list_and_wrapped_payloads(tmp_path):
    plain = tmp_path / "plain.json"
    plain.write_text('[{"id": "A"}]')
    wrapped = tmp_path / "wrapped.json"
    wrapped.write_text('{"records": [{"id": "B"}]}')

    assert load_json_records(plain) == [{"id": "A"}]
    assert load_json_records(wrapped) == [{"id": "B"}]


def test_load_json_records_raises_data_load_error(tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    scalar = tmp_path / "scalar.json"
    scalar.write_text("42")

    with pytest.raises(DataLoadError):
        load_json_records(tmp_path / "missing.json")
    with pytest.raises(DataLoadError):
        load_json_records(broken)
    with pytest.raises(DataLoadError):
        load_json_records(scalar)
