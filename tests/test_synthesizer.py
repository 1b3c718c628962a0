"""Unit tests for bill synthesis and configuration checks."""

import datetime as dt
import random
from collections import Counter

import pytest

from billgen.core.models import BillConfig, DateMode
from billgen.generator.errors import EmptyRangeError, ValidationError
from billgen.generator.presets import BUILTIN_PRESETS
from billgen.generator.synthesizer import (
    check_config,
    distribute_dates_across_bills,
    summarize,
    synthesize,
)


def _config(**overrides) -> BillConfig:
    fields = dict(
        invoice_start=110,
        invoice_end=238,
        total_units=645,
        min_units_per_bill=2,
        max_units_per_bill=12,
        unit_price=400,
        start_month=5,
        start_year=2025,
        end_month=5,
        end_year=2025,
        exclude_weekdays=[2],
        allow_multiple_per_day=True,
    )
    fields.update(overrides)
    return BillConfig(**fields)


class TestDistributeDatesAcrossBills:
    def test_ten_bills_three_dates(self):
        dates = [dt.date(2025, 7, 1), dt.date(2025, 7, 2), dt.date(2025, 7, 3)]
        assigned = distribute_dates_across_bills(10, dates)
        assert len(assigned) == 10
        assert set(assigned) == set(dates)
        assert assigned == sorted(assigned)
        assert max(Counter(assigned).values()) <= 4

    def test_fewer_bills_than_dates(self):
        dates = [dt.date(2025, 7, day) for day in range(1, 6)]
        assert distribute_dates_across_bills(3, dates) == dates[:3]

    def test_no_dates(self):
        with pytest.raises(ValidationError):
            distribute_dates_across_bills(3, [])


class TestSynthesize:
    def test_default_may_batch(self):
        records = synthesize(_config(), rng=random.Random(7))
        assert len(records) == 129
        assert [r.invoice_number for r in records] == list(range(110, 239))
        assert sum(r.units for r in records) == 645
        assert all(2 <= r.units <= 12 for r in records)
        assert all(r.amount == r.units * 400 for r in records)
        assert all(r.date.isoweekday() % 7 != 2 for r in records)
        assert [r.date for r in records] == sorted(r.date for r in records)

    def test_one_bill_per_day_uses_first_dates(self):
        config = _config(invoice_end=119, total_units=60, allow_multiple_per_day=False)
        records = synthesize(config, rng=random.Random(1))
        dates = [r.date for r in records]
        assert len(set(dates)) == 10
        assert dates[0] == dt.date(2025, 5, 1)
        # 6 May is a Tuesday and is skipped.
        assert dt.date(2025, 5, 6) not in dates

    def test_not_enough_dates(self):
        config = _config(allow_multiple_per_day=False)
        with pytest.raises(ValidationError, match=r"Not enough valid dates \(27\) for the number of bills \(129\)"):
            synthesize(config)

    def test_specific_dates_empty_after_filter(self):
        config = _config(
            invoice_end=112,
            total_units=10,
            date_mode=DateMode.SPECIFIC_DATES,
            specific_dates=["06-07-2025"],
            exclude_weekdays=[0],
        )
        with pytest.raises(EmptyRangeError) as exc_info:
            synthesize(config)
        assert exc_info.value.message

    def test_multiple_per_day_with_three_dates(self):
        config = _config(
            invoice_start=1,
            invoice_end=10,
            total_units=50,
            min_units_per_bill=1,
            max_units_per_bill=10,
            date_mode=DateMode.SPECIFIC_DATES,
            specific_dates=["01-07-2025", "02-07-2025", "03-07-2025"],
            exclude_weekdays=[],
        )
        records = synthesize(config, rng=random.Random(0))
        assert len(records) == 10
        assert {r.date for r in records} == {dt.date(2025, 7, d) for d in (1, 2, 3)}

    def test_invoice_start_after_end(self):
        with pytest.raises(ValidationError, match=r"Invoice start \(20\) cannot be greater than invoice end \(10\)"):
            synthesize(_config(invoice_start=20, invoice_end=10))

    def test_non_positive_invoice(self):
        with pytest.raises(ValidationError, match="greater than 0"):
            synthesize(_config(invoice_start=0))

    def test_infeasible_units(self):
        with pytest.raises(ValidationError, match="Cannot distribute"):
            synthesize(_config(total_units=100))

    def test_same_seed_same_batch(self):
        first = synthesize(_config(), rng=random.Random(99))
        second = synthesize(_config(), rng=random.Random(99))
        assert first == second

    def test_fractional_unit_price(self):
        records = synthesize(_config(unit_price=12.5), rng=random.Random(3))
        assert all(r.amount == r.units * 12.5 for r in records)

    @pytest.mark.parametrize("unit_price", [1e308, 10**310])
    def test_unrepresentable_amount(self, unit_price):
        with pytest.raises(ValidationError, match="too large"):
            synthesize(_config(unit_price=unit_price), rng=random.Random(1))

    def test_batch_total_overflow(self):
        # Each bill amount is in range but the batch total is not.
        with pytest.raises(ValidationError, match="batch total"):
            synthesize(_config(unit_price=1e304), rng=random.Random(1))

    def test_large_representable_amount(self):
        records = synthesize(_config(unit_price=10**40), rng=random.Random(1))
        assert records[0].amount == records[0].units * 10**40

    @pytest.mark.parametrize(
        "preset",
        [p for p in BUILTIN_PRESETS if p.name != "June Weekend Sales"],
        ids=lambda p: p.name,
    )
    def test_builtin_presets_generate(self, preset):
        config = preset.config
        records = synthesize(config, rng=random.Random(5))
        assert len(records) == config.invoice_end - config.invoice_start + 1
        assert sum(r.units for r in records) == config.total_units

    def test_june_weekend_preset_has_too_few_dates(self):
        # June 2025 has 21 weekdays for 50 bills at one bill per day.
        june = next(p for p in BUILTIN_PRESETS if p.name == "June Weekend Sales")
        with pytest.raises(ValidationError, match=r"Not enough valid dates \(21\)"):
            synthesize(june.config)


class TestCheckConfig:
    def test_valid_config(self):
        assert check_config(_config()) == []

    def test_collects_every_problem(self):
        config = _config(
            total_units=10,
            date_mode=DateMode.EXACT_RANGE,
            exact_start_date="10-04-2025",
            exact_end_date="01-04-2025",
        )
        errors = check_config(config)
        assert len(errors) == 2
        assert any("Minimum possible total" in e for e in errors)
        assert any("Start date cannot be after end date" in e for e in errors)

    def test_reports_not_enough_dates(self):
        errors = check_config(_config(allow_multiple_per_day=False))
        assert len(errors) == 1
        assert errors[0].startswith("Not enough valid dates (27) for the number of bills (129)")

    def test_reports_unrepresentable_amount(self):
        errors = check_config(_config(unit_price=1e308))
        assert len(errors) == 1
        assert errors[0].startswith("Unit price (1e+308) is too large")

    def test_reversed_invoices_skip_unit_check(self):
        errors = check_config(_config(invoice_start=300, invoice_end=10))
        assert len(errors) == 1
        assert "cannot be greater than invoice end" in errors[0]


class TestSummarize:
    def test_summary_figures(self):
        records = synthesize(_config(invoice_end=119, total_units=60), rng=random.Random(2))
        summary = summarize(records)
        assert summary.num_bills == 10
        assert summary.total_units == 60
        assert summary.total_amount == 60 * 400
        assert summary.average_units == 6.0
        assert summary.first_date == "01-05-2025"
        assert summary.distinct_dates == len({r.date for r in records})

    def test_empty(self):
        summary = summarize([])
        assert summary.num_bills == 0
        assert summary.first_date is None
        assert summary.average_units == 0.0
