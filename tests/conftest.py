from __future__ import annotations

import datetime as dt
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from billgen.core.models import BillConfig, BillRecord, CellMapping
from billgen.generator.presets import PresetStore
from billgen.main import create_app
from tests.template_helpers import build_template_workbook, workbook_bytes


@pytest.fixture()
def client() -> Iterator[TestClient]:
    app = create_app(presets=PresetStore())
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def template_bytes() -> bytes:
    return workbook_bytes(build_template_workbook())


@pytest.fixture()
def mapping() -> CellMapping:
    return CellMapping()


@pytest.fixture()
def record() -> BillRecord:
    return BillRecord(invoice_number=110, date=dt.date(2025, 5, 3), units=7, amount=2800)


@pytest.fixture()
def month_config() -> BillConfig:
    """Ten bills in May 2025, Tuesdays excluded, one bill per day."""
    return BillConfig(
        invoice_start=110,
        invoice_end=119,
        total_units=60,
        min_units_per_bill=2,
        max_units_per_bill=12,
        unit_price=400,
        start_month=5,
        start_year=2025,
        end_month=5,
        end_year=2025,
        exclude_weekdays=[2],
    )
