"""Date range expansion for bill generation.

This module turns a date-selection mode into an ordered list of calendar
dates, skipping excluded weekdays and individually excluded dates.

Key functions:
- parse_date / format_date: DD-MM-YYYY conversion with calendar validation
- expand_dates: Expand any date mode into ascending dates
- expand_config_dates: Convenience wrapper taking a BillConfig
"""

from __future__ import annotations

import calendar
import datetime as dt
import re
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from billgen.core.models import DATE_FORMAT, DateMode
from billgen.generator.errors import DateFormatError, EmptyRangeError, ValidationError

if TYPE_CHECKING:
    from billgen.core.models import BillConfig


# Day and month may be one or two digits on input; output is always padded.
_DATE_PATTERN = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")

WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def parse_date(text: str | None) -> dt.date | None:
    """Parse a DD-MM-YYYY string into a date.

    Impossible calendar dates (e.g. 31-02-2025) return None instead of
    rolling over into the next month.

    Args:
        text: Date string such as "05-07-2025" or "5-7-2025"

    Returns:
        The parsed date, or None if the string is malformed or not a real date
    """
    if not text:
        return None
    match = _DATE_PATTERN.match(text.strip())
    if not match:
        return None
    day, month, year = (int(part) for part in match.groups())
    try:
        parsed = dt.date(year, month, day)
    except ValueError:
        return None
    # Re-encoding must reproduce the same triple.
    if (parsed.day, parsed.month, parsed.year) != (day, month, year):
        return None
    return parsed


def format_date(value: dt.date) -> str:
    """Format a date in canonical DD-MM-YYYY form."""
    return value.strftime(DATE_FORMAT)


def is_valid_date_string(text: str | None) -> bool:
    return parse_date(text) is not None


def sunday_based_weekday(value: dt.date) -> int:
    """Return the weekday with 0=Sunday .. 6=Saturday."""
    return value.isoweekday() % 7


def _require_date(text: str | None, label: str) -> dt.date:
    parsed = parse_date(text)
    if parsed is None:
        raise DateFormatError(
            f"Invalid {label} '{text}'. Please use DD-MM-YYYY format with a real calendar date."
        )
    return parsed


def _parse_date_list(texts: Iterable[str], label: str) -> set[dt.date]:
    parsed: set[dt.date] = set()
    malformed: list[str] = []
    for text in texts:
        value = parse_date(text)
        if value is None:
            malformed.append(str(text))
        else:
            parsed.add(value)
    if malformed:
        raise DateFormatError(
            f"Invalid {label}: {', '.join(malformed)}. Please use DD-MM-YYYY format."
        )
    return parsed


def _iter_days(start: dt.date, end: dt.date) -> Iterator[dt.date]:
    # Offsets from start never step past end, which may be date.max.
    for offset in range((end - start).days + 1):
        yield start + dt.timedelta(days=offset)


def _month_bounds(
    start_month: int | None,
    start_year: int | None,
    end_month: int | None,
    end_year: int | None,
) -> tuple[dt.date, dt.date]:
    if None in (start_month, start_year, end_month, end_year):
        raise ValidationError(
            "Start month/year and end month/year are required for month range mode."
        )
    for month in (start_month, end_month):
        if not 1 <= month <= 12:
            raise ValidationError(f"Month must be between 1 and 12, got {month}")
    first = dt.date(start_year, start_month, 1)
    last_day = calendar.monthrange(end_year, end_month)[1]
    last = dt.date(end_year, end_month, last_day)
    if (start_year, start_month) > (end_year, end_month):
        raise ValidationError("Start date cannot be after end date")
    return first, last


def expand_dates(
    mode: DateMode | str,
    *,
    start_month: int | None = None,
    start_year: int | None = None,
    end_month: int | None = None,
    end_year: int | None = None,
    exact_start_date: str | None = None,
    exact_end_date: str | None = None,
    specific_dates: Iterable[str] = (),
    exclude_weekdays: Iterable[int] = (),
    exclude_dates: Iterable[str] = (),
) -> list[dt.date]:
    """Expand a date-selection mode into an ascending list of dates.

    Modes:
      - month-range: every day from the 1st of the start month through the
        last day of the end month
      - exact-range: every day between two DD-MM-YYYY dates (inclusive)
      - specific-dates: the given DD-MM-YYYY dates, de-duplicated and sorted

    In every mode a day is kept only if its weekday (0=Sunday .. 6=Saturday)
    is not excluded and it is not listed in ``exclude_dates``. The result is
    deterministic for identical inputs.

    Raises:
        DateFormatError: A date string is malformed or not a real date
        ValidationError: Missing parameters or start after end
        EmptyRangeError: No dates remain after exclusions
    """
    mode = DateMode(mode)
    excluded_weekdays = set(exclude_weekdays)
    excluded_dates = _parse_date_list(exclude_dates, "excluded dates")

    def keep(day: dt.date) -> bool:
        return sunday_based_weekday(day) not in excluded_weekdays and day not in excluded_dates

    if mode is DateMode.SPECIFIC_DATES:
        candidates = _parse_date_list(specific_dates, "specific dates")
        dates = sorted(day for day in candidates if keep(day))
        if not dates:
            raise EmptyRangeError(
                "No valid dates found in the specified dates after excluding weekdays"
            )
        return dates

    if mode is DateMode.EXACT_RANGE:
        if not exact_start_date or not exact_end_date:
            raise ValidationError(
                "Both start date and end date are required for exact date range mode."
            )
        first = _require_date(exact_start_date, "start date")
        last = _require_date(exact_end_date, "end date")
        if first > last:
            raise ValidationError("Start date cannot be after end date")
        dates = [day for day in _iter_days(first, last) if keep(day)]
        if not dates:
            raise EmptyRangeError(
                "No valid dates found in the specified date range after excluding weekdays"
            )
        return dates

    first, last = _month_bounds(start_month, start_year, end_month, end_year)
    dates = [day for day in _iter_days(first, last) if keep(day)]
    if not dates:
        raise EmptyRangeError(
            "No valid dates found with the given constraints. "
            "Try adjusting the date range or excluded weekdays."
        )
    return dates


def expand_config_dates(config: "BillConfig") -> list[dt.date]:
    """Expand the dates selected by a BillConfig."""
    return expand_dates(
        config.date_mode,
        start_month=config.start_month,
        start_year=config.start_year,
        end_month=config.end_month,
        end_year=config.end_year,
        exact_start_date=config.exact_start_date,
        exact_end_date=config.exact_end_date,
        specific_dates=config.specific_dates,
        exclude_weekdays=config.exclude_weekdays,
        exclude_dates=config.exclude_dates,
    )
