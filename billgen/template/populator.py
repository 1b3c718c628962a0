"""Template population: render one bill record into a copy of the template."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from billgen.core.models import BillRecord, CellMapping
from billgen.generator.words import amount_in_words
from billgen.template.engine import BaseSpreadsheetEngine, OpenpyxlEngine

logger = logging.getLogger(__name__)


@dataclass
class PopulationOutcome:
    """Result of populating one record: either workbook bytes or an error."""

    invoice_number: int
    data: bytes | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.data is not None


def mapped_values(
    mapping: CellMapping,
    record: BillRecord,
    currency: str = "Rs.",
) -> list[tuple[str, str, Any]]:
    """Return (label, address, value) for the four cells written per bill."""
    return [
        ("Invoice", mapping.invoice_cell, record.invoice_number),
        ("Date", mapping.date_cell, record.date_str),
        ("Units", mapping.units_cell, record.units),
        ("Amount Words", mapping.amount_words_cell, amount_in_words(record.amount, currency)),
    ]


def populate_workbook(
    template: bytes,
    mapping: CellMapping,
    record: BillRecord,
    engine: BaseSpreadsheetEngine | None = None,
    currency: str = "Rs.",
) -> bytes:
    """Write one bill into a fresh copy of the template and serialize it.

    Only the four mapped cells change value. Their formatting is kept, and
    the worksheet's views, print settings, visibility, merged ranges, row
    heights and column widths are captured before writing and reapplied
    afterwards. ``template`` itself is never modified.

    Raises:
        WorkbookLoadError: If the template cannot be loaded or has no worksheet
        ValueError: If a mapped address is invalid
    """
    engine = engine or OpenpyxlEngine()

    workbook = engine.load(template)
    sheet = engine.first_sheet(workbook)
    snapshot = engine.snapshot(sheet)

    for label, address, value in mapped_values(mapping, record, currency):
        try:
            engine.write_value(sheet, address, value)
        except ValueError as e:
            raise ValueError(f"{label} cell {address}: {e}") from e

    engine.restore(sheet, snapshot)
    return engine.save(workbook)


def populate_template(
    template: bytes,
    mapping: CellMapping,
    record: BillRecord,
    engine: BaseSpreadsheetEngine | None = None,
    currency: str = "Rs.",
) -> PopulationOutcome:
    """Populate one record, converting any failure into an outcome.

    Never raises, so batch callers can substitute a placeholder and carry on
    with the remaining records.
    """
    try:
        data = populate_workbook(template, mapping, record, engine=engine, currency=currency)
    except Exception as e:
        logger.warning(
            "Template population failed invoice=%d error=%s: %s",
            record.invoice_number,
            type(e).__name__,
            e,
        )
        return PopulationOutcome(invoice_number=record.invoice_number, error=str(e) or type(e).__name__)
    return PopulationOutcome(invoice_number=record.invoice_number, data=data)
