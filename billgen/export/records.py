"""Flat CSV/JSON exports of generated bill records."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Sequence

from billgen.core.models import BillExportRow, BillRecord
from billgen.generator.words import amount_in_words

CSV_HEADERS = ["Invoice No", "Date", "Units", "Amount", "Amount in Words"]


def to_export_rows(records: Sequence[BillRecord], currency: str = "Rs.") -> list[BillExportRow]:
    return [
        BillExportRow(
            invoice_number=record.invoice_number,
            date=record.date_str,
            units=record.units,
            amount=record.amount,
            amount_in_words=amount_in_words(record.amount, currency),
        )
        for record in records
    ]


def records_to_csv(records: Sequence[BillRecord], currency: str = "Rs.") -> str:
    """Render records as CSV with a header row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for row in to_export_rows(records, currency):
        writer.writerow([row.invoice_number, row.date, row.units, row.amount, row.amount_in_words])
    return buffer.getvalue()


def records_to_json(records: Sequence[BillRecord], currency: str = "Rs.") -> str:
    """Render records as a pretty-printed JSON array."""
    rows = [row.model_dump() for row in to_export_rows(records, currency)]
    return json.dumps(rows, indent=2)
