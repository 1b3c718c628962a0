"""Bill synthesis: invoice numbers, dates and unit counts into bill records.

Key functions:
- synthesize: Validate a BillConfig and build its ordered BillRecords
- check_config: Collect every configuration problem at once (pre-flight)
- distribute_dates_across_bills: Assign dates when several bills share a day
- summarize: Aggregate figures for a generated batch
"""

from __future__ import annotations

import datetime as dt
import math
import random
from collections.abc import Sequence

from billgen.core.models import BillConfig, BillRecord, BillSummary
from billgen.generator.dates import expand_config_dates, format_date
from billgen.generator.errors import ValidationError
from billgen.generator.units import check_distribution, distribute_units
from billgen.generator.words import MAX_AMOUNT


def calculate_num_bills(invoice_start: int, invoice_end: int) -> int:
    return invoice_end - invoice_start + 1


def check_invoice_range(invoice_start: int, invoice_end: int) -> None:
    if invoice_start <= 0 or invoice_end <= 0:
        raise ValidationError("Invoice numbers must be greater than 0")
    if invoice_start > invoice_end:
        raise ValidationError(
            f"Invoice start ({invoice_start}) cannot be greater than invoice end ({invoice_end})"
        )


def bill_amount(units: int, unit_price: int | float) -> int | float:
    """Price a bill, rejecting amounts that cannot be represented.

    Raises:
        ValidationError: If the amount overflows or is too large to write in words
    """
    try:
        amount = units * unit_price
    except OverflowError:
        amount = math.inf
    _require_representable(amount, f"the amount for {units} units", unit_price)
    return amount


def _require_representable(value: int | float, what: str, unit_price: int | float) -> None:
    # Also rejects NaN and infinity.
    if not value < MAX_AMOUNT:
        raise ValidationError(f"Unit price ({unit_price}) is too large: {what} cannot be represented")


def _not_enough_dates_message(available: int, needed: int) -> str:
    return (
        f"Not enough valid dates ({available}) for the number of bills ({needed}). "
        "Consider reducing the number of bills, expanding the date range, reducing excluded "
        'weekdays, or enabling "Allow multiple invoices per day".'
    )


def distribute_dates_across_bills(num_bills: int, dates: Sequence[dt.date]) -> list[dt.date]:
    """Assign one date to each of ``num_bills`` bills, sharing dates in blocks.

    Each date takes ``ceil(num_bills / len(dates))`` consecutive bills, which
    keeps the assignment in ascending order. Any bills left over after the
    blocks are assigned round-robin.

    Raises:
        ValidationError: If ``dates`` is empty
    """
    if not dates:
        raise ValidationError("No available dates for invoice distribution")

    per_date = math.ceil(num_bills / len(dates))
    blocked = min(num_bills, per_date * len(dates))
    assigned = [dates[(index // per_date) % len(dates)] for index in range(blocked)]
    for index in range(len(assigned), num_bills):
        assigned.append(dates[index % len(dates)])
    return assigned


def synthesize(config: BillConfig, rng: random.Random | None = None) -> list[BillRecord]:
    """Build the ordered bill records for a configuration.

    Validation runs before anything is built and stops at the first
    violated constraint: invoice bounds, date availability, then unit
    distribution feasibility.

    Args:
        config: Generation parameters.
        rng: Random source for the unit distribution (seed it to reproduce a batch).

    Returns:
        ``invoice_end - invoice_start + 1`` records with sequential invoice numbers.

    Raises:
        ValidationError: Describing the violated constraint
    """
    check_invoice_range(config.invoice_start, config.invoice_end)
    num_bills = calculate_num_bills(config.invoice_start, config.invoice_end)

    dates = expand_config_dates(config)
    if config.allow_multiple_per_day:
        bill_dates = distribute_dates_across_bills(num_bills, dates)
    else:
        if len(dates) < num_bills:
            raise ValidationError(_not_enough_dates_message(len(dates), num_bills))
        bill_dates = list(dates[:num_bills])

    units = distribute_units(
        config.total_units,
        num_bills,
        config.min_units_per_bill,
        config.max_units_per_bill,
        rng=rng,
    )

    amounts = [bill_amount(count, config.unit_price) for count in units]
    try:
        total = sum(amounts)
    except OverflowError:
        total = math.inf
    _require_representable(total, "the batch total", config.unit_price)

    return [
        BillRecord(
            invoice_number=config.invoice_start + index,
            date=bill_dates[index],
            units=units[index],
            amount=amounts[index],
        )
        for index in range(num_bills)
    ]


def check_config(config: BillConfig) -> list[str]:
    """Collect every problem with a configuration without generating bills.

    Unlike :func:`synthesize`, which stops at the first failure, this checks
    the invoice range, the unit limits and the date selection independently
    so a user can fix everything in one pass.
    """
    errors: list[str] = []

    try:
        check_invoice_range(config.invoice_start, config.invoice_end)
    except ValidationError as e:
        errors.append(e.message)
    num_bills = calculate_num_bills(config.invoice_start, config.invoice_end)

    if num_bills > 0:
        try:
            check_distribution(
                config.total_units,
                num_bills,
                config.min_units_per_bill,
                config.max_units_per_bill,
            )
            bill_amount(config.total_units, config.unit_price)
        except ValidationError as e:
            errors.append(e.message)

    try:
        dates = expand_config_dates(config)
    except ValidationError as e:
        errors.append(e.message)
    else:
        if not config.allow_multiple_per_day and num_bills > 0 and len(dates) < num_bills:
            errors.append(_not_enough_dates_message(len(dates), num_bills))

    return errors


def summarize(records: Sequence[BillRecord]) -> BillSummary:
    """Compute the batch summary shown alongside generated records."""
    total_units = sum(record.units for record in records)
    dates = sorted({record.date for record in records})
    return BillSummary(
        num_bills=len(records),
        total_units=total_units,
        total_amount=sum(record.amount for record in records),
        distinct_dates=len(dates),
        first_date=format_date(dates[0]) if dates else None,
        last_date=format_date(dates[-1]) if dates else None,
        average_units=round(total_units / len(records), 2) if records else 0.0,
    )
