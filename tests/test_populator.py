"""Tests for the spreadsheet engine and template population.

Each populated workbook is reloaded with openpyxl and compared against the
template: only the four mapped cells may change value, and formatting and
sheet structure must survive.
"""

from __future__ import annotations

import datetime as dt
import io
import zipfile

import openpyxl
import pytest

from billgen.core.models import BillRecord, CellMapping
from billgen.template.engine import OpenpyxlEngine, is_valid_cell_address, parse_cell_address
from billgen.template.populator import mapped_values, populate_template, populate_workbook


def _reload(data: bytes):
    return openpyxl.load_workbook(io.BytesIO(data)).worksheets[0]


def _style_fields(obj):
    # Style objects from separate loads do not compare equal as a whole.
    if hasattr(obj, "__attrs__"):
        names = tuple(obj.__attrs__) + tuple(getattr(obj, "__elements__", ()))
        return {name: _style_fields(getattr(obj, name)) for name in names}
    return obj


class TestCellAddresses:
    @pytest.mark.parametrize("address", ["A1", "I10", "d39", "XFD1048576"])
    def test_valid(self, address):
        assert is_valid_cell_address(address)

    @pytest.mark.parametrize("address", ["", "9I", "A", "10", "A1:B2", "A-1", None])
    def test_invalid(self, address):
        assert not is_valid_cell_address(address)

    def test_parse(self):
        assert parse_cell_address("I10") == (10, 9)
        assert parse_cell_address(" d39 ") == (39, 4)

    def test_out_of_bounds(self):
        with pytest.raises(ValueError, match="outside the worksheet bounds"):
            parse_cell_address("XFE1")
        with pytest.raises(ValueError, match="outside the worksheet bounds"):
            parse_cell_address("A1048577")


class TestOpenpyxlEngine:
    def test_read_cell_types(self, template_bytes):
        engine = OpenpyxlEngine()
        sheet = engine.first_sheet(engine.load(template_bytes))

        formula = engine.read_cell(sheet, "G20")
        assert formula.data_type == "formula"
        assert formula.formula == "=2+3"

        text = engine.read_cell(sheet, "i9")
        assert text.address == "I9"
        assert text.value == "DD-MM-YYYY"
        assert text.data_type == "string"

        empty = engine.read_cell(sheet, "I10")
        assert empty.value is None
        assert empty.data_type == "empty"

    def test_read_cell_reports_merged_range(self, template_bytes):
        engine = OpenpyxlEngine()
        sheet = engine.first_sheet(engine.load(template_bytes))

        state = engine.read_cell(sheet, "F39")
        assert state.merged_range == "D39:I39"

    def test_has_content(self, template_bytes):
        engine = OpenpyxlEngine()
        assert engine.has_content(engine.first_sheet(engine.load(template_bytes)))

        blank = openpyxl.Workbook()
        assert not engine.has_content(blank.active)

    def test_snapshot_restores_page_setup(self, template_bytes):
        engine = OpenpyxlEngine()
        sheet = engine.first_sheet(engine.load(template_bytes))
        paper_size = sheet.page_setup.paperSize
        snapshot = engine.snapshot(sheet)

        sheet.page_setup.orientation = "portrait"
        sheet.page_setup.paperSize = 5
        engine.restore(sheet, snapshot)

        assert sheet.page_setup.orientation == "landscape"
        assert sheet.page_setup.paperSize == paper_size
        assert snapshot.page_setup["orientation"] == "landscape"

    def test_save_uses_deflate(self, template_bytes):
        engine = OpenpyxlEngine(compression_level=6)
        data = engine.save(engine.load(template_bytes))
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            assert all(info.compress_type == zipfile.ZIP_DEFLATED for info in zf.infolist())
            assert "xl/workbook.xml" in zf.namelist()


class TestMappedValues:
    def test_values_and_order(self, mapping, record):
        values = mapped_values(mapping, record)
        assert values == [
            ("Invoice", "I10", 110),
            ("Date", "I9", "03-05-2025"),
            ("Units", "G20", 7),
            ("Amount Words", "D39", "( Rs. Two thousand eight hundred only )"),
        ]


class TestPopulateWorkbook:
    def test_writes_the_four_mapped_cells(self, template_bytes, mapping, record):
        ws = _reload(populate_workbook(template_bytes, mapping, record))

        assert ws["I10"].value == 110
        assert ws["I9"].value == "03-05-2025"
        assert ws["G20"].value == 7
        assert ws["D39"].value == "( Rs. Two thousand eight hundred only )"

    def test_other_cells_unchanged(self, template_bytes, mapping, record):
        before = _reload(template_bytes)
        after = _reload(populate_workbook(template_bytes, mapping, record))
        written = {"I10", "I9", "G20", "D39"}

        for row in before.iter_rows():
            for cell in row:
                if cell.coordinate in written:
                    continue
                assert after[cell.coordinate].value == cell.value, cell.coordinate
        # Dependent formulas are left for the spreadsheet application to recalculate.
        assert after["I20"].value == "=G20*H20"

    def test_formatting_preserved(self, template_bytes, mapping, record):
        before = _reload(template_bytes)
        after = _reload(populate_workbook(template_bytes, mapping, record))

        for ref in ("I10", "G20", "D39"):
            for style in ("font", "fill", "border", "alignment"):
                assert _style_fields(getattr(after[ref], style)) == _style_fields(
                    getattr(before[ref], style)
                ), (ref, style)
            assert after[ref].number_format == before[ref].number_format, ref
        assert after["I10"].font.b is True

    def test_sheet_structure_preserved(self, template_bytes, mapping, record):
        before = _reload(template_bytes)
        after = _reload(populate_workbook(template_bytes, mapping, record))

        assert sorted(map(str, after.merged_cells.ranges)) == sorted(map(str, before.merged_cells.ranges))
        assert after.row_dimensions[1].height == before.row_dimensions[1].height
        assert after.row_dimensions[39].height == before.row_dimensions[39].height
        assert after.column_dimensions["C"].width == before.column_dimensions["C"].width
        assert after.column_dimensions["I"].width == before.column_dimensions["I"].width
        assert after.freeze_panes == "A3"
        assert after.page_setup.orientation == "landscape"
        assert after.title == "Invoice"

    def test_write_into_merged_region_lands_on_top_left(self, template_bytes, record):
        mapping = CellMapping(amount_words_cell="F39")
        ws = _reload(populate_workbook(template_bytes, mapping, record))

        assert ws["D39"].value == "( Rs. Two thousand eight hundred only )"
        assert "D39:I39" in {str(r) for r in ws.merged_cells.ranges}

    def test_template_bytes_not_modified(self, template_bytes, mapping, record):
        original = bytes(template_bytes)
        populate_workbook(template_bytes, mapping, record)
        assert template_bytes == original

    def test_each_bill_starts_from_the_template(self, template_bytes, mapping, record):
        other = BillRecord(invoice_number=111, date=dt.date(2025, 5, 5), units=3, amount=1200)
        populate_workbook(template_bytes, mapping, record)
        ws = _reload(populate_workbook(template_bytes, mapping, other))

        assert ws["I10"].value == 111
        assert ws["G20"].value == 3

    def test_invalid_address_raises(self, template_bytes, record):
        with pytest.raises(ValueError, match="Invoice cell 9I"):
            populate_workbook(template_bytes, CellMapping(invoice_cell="9I"), record)


class TestPopulateTemplate:
    def test_success_outcome(self, template_bytes, mapping, record):
        outcome = populate_template(template_bytes, mapping, record)
        assert outcome.ok
        assert outcome.invoice_number == 110
        assert outcome.error is None

    def test_failure_becomes_outcome(self, template_bytes, record):
        outcome = populate_template(template_bytes, CellMapping(units_cell="G0"), record)
        assert not outcome.ok
        assert outcome.data is None
        assert "Units cell G0" in outcome.error

    def test_corrupt_template_becomes_outcome(self, mapping, record):
        outcome = populate_template(b"not a workbook " * 20, mapping, record)
        assert not outcome.ok
        assert "Invalid file format" in outcome.error
