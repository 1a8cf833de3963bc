"""
Pytest configuration and shared fixtures for all tests.
Every test runs against a fixed calendar: today is 2025-01-01, so the
current month (January) has 31 days and is simulated from day 1.
"""

import logging
from datetime import date

import pytest

from inventory_planner import settings
from inventory_planner.periods import get_month_details
from inventory_planner.schemas import MonthProjection, ProjectedSku, SkuRecord


@pytest.fixture
def today():
    return date(2025, 1, 1)


@pytest.fixture
def month_details(today):
    return get_month_details(today)


@pytest.fixture
def make_sku():
    """Factory for validated SKU records with sensible defaults."""

    def _make(sku_id="SKU-1", **fields):
        return SkuRecord.model_validate({"id": sku_id, **fields})

    return _make


@pytest.fixture
def make_projected():
    """Factory for projected SKUs without running the simulation."""

    def _make(sku_id, dias_stock_hoy=30.0, coverage=((31, 31),), **fields):
        return ProjectedSku(
            id=sku_id,
            dias_stock_hoy=dias_stock_hoy,
            projections=[MonthProjection(count=c, days_in_month=d) for c, d in coverage],
            **fields,
        )

    return _make


@pytest.fixture
def planner_dirs(tmp_path, monkeypatch):
    """Points input, output and log directories at a temporary folder."""
    input_dir = tmp_path / "input"
    output_dir = tmp_path / "output"
    input_dir.mkdir()
    monkeypatch.setattr(settings, "INPUT_DIR", input_dir)
    monkeypatch.setattr(settings, "OUTPUT_DIR", output_dir)
    monkeypatch.setattr(settings, "LOG_DIR", tmp_path / "logs")
    monkeypatch.setattr(settings, "WEBHOOK_URL", None)
    monkeypatch.setattr(settings, "SAVE_JSON_OUTPUT", True)
    yield input_dir, output_dir

    # The CLI installs handlers on the package logger; drop them with the temp dirs
    package_logger = logging.getLogger("inventory_planner")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.NOTSET)
