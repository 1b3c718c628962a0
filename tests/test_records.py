"""Unit tests for CSV/JSON record exports."""

import csv
import datetime as dt
import io
import json

from billgen.core.models import BillRecord
from billgen.export.records import CSV_HEADERS, records_to_csv, records_to_json


def _records() -> list[BillRecord]:
    return [
        BillRecord(invoice_number=110, date=dt.date(2025, 5, 1), units=3, amount=1200),
        BillRecord(invoice_number=111, date=dt.date(2025, 5, 2), units=5, amount=2000),
    ]


class TestRecordsToCsv:
    def test_header_and_rows(self):
        rows = list(csv.reader(io.StringIO(records_to_csv(_records()))))

        assert rows[0] == CSV_HEADERS
        assert rows[0] == ["Invoice No", "Date", "Units", "Amount", "Amount in Words"]
        assert rows[1] == ["110", "01-05-2025", "3", "1200", "( Rs. One thousand two hundred only )"]
        assert len(rows) == 3

    def test_empty_batch_has_header_only(self):
        assert records_to_csv([]) == "Invoice No,Date,Units,Amount,Amount in Words\n"


class TestRecordsToJson:
    def test_objects(self):
        data = json.loads(records_to_json(_records()))

        assert data[1] == {
            "invoice_number": 111,
            "date": "02-05-2025",
            "units": 5,
            "amount": 2000,
            "amount_in_words": "( Rs. Two thousand only )",
        }

    def test_currency_label(self):
        data = json.loads(records_to_json(_records(), currency="INR"))
        assert data[0]["amount_in_words"] == "( INR One thousand two hundred only )"
