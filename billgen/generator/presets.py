"""Built-in and user-saved configuration presets.

User presets live in memory for the lifetime of the process only; nothing
is persisted to disk.
"""

from __future__ import annotations

import datetime as dt
import logging

from billgen.core.models import BillConfig, DateMode, Preset, PresetCreate
from billgen.generator.errors import ValidationError

logger = logging.getLogger(__name__)


def _builtin(name: str, description: str, **fields) -> Preset:
    return Preset(
        name=name,
        description=description,
        config=BillConfig(**fields),
        builtin=True,
    )


BUILTIN_PRESETS: list[Preset] = [
    _builtin(
        "Default May 2025",
        "129 bills in May 2025, excluding Tuesdays",
        invoice_start=110,
        invoice_end=238,
        total_units=645,
        min_units_per_bill=2,
        max_units_per_bill=12,
        start_month=5,
        start_year=2025,
        end_month=5,
        end_year=2025,
        exclude_weekdays=[2],
        unit_price=400,
        allow_multiple_per_day=True,
    ),
    _builtin(
        "June Weekend Sales",
        "50 bills in June 2025, excluding weekends",
        invoice_start=300,
        invoice_end=349,
        total_units=400,
        min_units_per_bill=5,
        max_units_per_bill=15,
        start_month=6,
        start_year=2025,
        end_month=6,
        end_year=2025,
        exclude_weekdays=[0, 6],
        unit_price=500,
        allow_multiple_per_day=False,
    ),
    _builtin(
        "High Volume March",
        "200 bills in March 2025, excluding Sunday only",
        invoice_start=1000,
        invoice_end=1199,
        total_units=2000,
        min_units_per_bill=8,
        max_units_per_bill=12,
        start_month=3,
        start_year=2025,
        end_month=3,
        end_year=2025,
        exclude_weekdays=[0],
        unit_price=350,
        allow_multiple_per_day=True,
    ),
    _builtin(
        "July No Restrictions",
        "100 bills in July 2025, no day restrictions",
        invoice_start=2000,
        invoice_end=2099,
        total_units=800,
        min_units_per_bill=6,
        max_units_per_bill=10,
        start_month=7,
        start_year=2025,
        end_month=7,
        end_year=2025,
        unit_price=450,
        allow_multiple_per_day=True,
    ),
    _builtin(
        "Custom Specific Dates",
        "5 bills on specific dates in July 2025",
        invoice_start=3000,
        invoice_end=3004,
        total_units=40,
        min_units_per_bill=6,
        max_units_per_bill=10,
        date_mode=DateMode.SPECIFIC_DATES,
        specific_dates=["01-07-2025", "05-07-2025", "10-07-2025", "15-07-2025", "20-07-2025"],
        unit_price=500,
        allow_multiple_per_day=False,
    ),
    _builtin(
        "Exact Date Range",
        "10 bills from March 15 to April 1, 2025",
        invoice_start=4000,
        invoice_end=4009,
        total_units=80,
        min_units_per_bill=6,
        max_units_per_bill=10,
        date_mode=DateMode.EXACT_RANGE,
        exact_start_date="15-03-2025",
        exact_end_date="01-04-2025",
        exclude_weekdays=[0],
        unit_price=450,
        allow_multiple_per_day=False,
    ),
]


class PresetStore:
    """In-memory preset registry seeded with the built-in presets.

    Built-in presets are read-only. Saving a user preset under an existing
    user preset name replaces it.
    """

    def __init__(self, builtins: list[Preset] | None = None) -> None:
        self._builtins: dict[str, Preset] = {
            preset.name: preset for preset in (BUILTIN_PRESETS if builtins is None else builtins)
        }
        self._saved: dict[str, Preset] = {}

    def list_presets(self) -> list[Preset]:
        return [*self._builtins.values(), *self._saved.values()]

    def get(self, name: str) -> Preset | None:
        return self._builtins.get(name) or self._saved.get(name)

    def save(self, request: PresetCreate) -> Preset:
        name = request.name.strip()
        if not name:
            raise ValidationError("Preset name cannot be empty")
        if name in self._builtins:
            raise ValidationError(f'"{name}" is a built-in preset and cannot be overwritten')

        preset = Preset(
            name=name,
            description=request.description.strip(),
            config=request.config.model_copy(deep=True),
            created_at=dt.datetime.now(dt.timezone.utc),
        )
        self._saved[name] = preset
        logger.info("Saved preset name=%s", name)
        return preset

    def delete(self, name: str) -> bool:
        """Delete a user preset; returns False when no such preset exists."""
        if name in self._builtins:
            raise ValidationError(f'"{name}" is a built-in preset and cannot be deleted')
        removed = self._saved.pop(name, None)
        if removed is not None:
            logger.info("Deleted preset name=%s", name)
        return removed is not None
