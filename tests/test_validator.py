"""Unit tests for template validation."""

import openpyxl

from billgen.core.models import CellMapping
from billgen.template.validator import validate_template

from tests.template_helpers import workbook_bytes


class TestValidateTemplate:
    def test_valid_template_has_preview(self, template_bytes, mapping):
        result = validate_template(template_bytes, mapping)

        assert result.is_valid
        assert result.errors == []
        assert set(result.preview) == {"Invoice Cell", "Date Cell", "Units Cell", "Amount Words Cell"}

        assert result.preview["Invoice Cell"].current_value == "Empty"
        assert result.preview["Date Cell"].current_value == "DD-MM-YYYY"
        assert result.preview["Date Cell"].type == "string"
        assert result.preview["Units Cell"].formula == "=2+3"
        assert result.preview["Amount Words Cell"].merged_range == "D39:I39"

    def test_collects_every_bad_address(self, template_bytes):
        mapping = CellMapping(invoice_cell="9I", date_cell="I9", units_cell="G", amount_words_cell="D39")
        result = validate_template(template_bytes, mapping)

        assert not result.is_valid
        assert result.preview is None
        assert result.errors == [
            "Invalid cell address format: 9I (Invoice Cell). Use format like A1, B2, etc.",
            "Invalid cell address format: G (Units Cell). Use format like A1, B2, etc.",
        ]

    def test_out_of_bounds_cell(self, template_bytes):
        result = validate_template(template_bytes, CellMapping(units_cell="A0"))

        assert not result.is_valid
        assert result.errors[0].startswith("Cannot access cell: A0 (Units Cell).")

    def test_empty_worksheet(self, mapping):
        result = validate_template(workbook_bytes(openpyxl.Workbook()), mapping)

        assert not result.is_valid
        assert "The worksheet appears to be empty. Please use a template with some content." in result.errors

    def test_corrupt_file_stops_early(self, mapping):
        result = validate_template(b"definitely not an xlsx file " * 10, mapping)

        assert not result.is_valid
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Invalid file format")

    def test_empty_upload(self, mapping):
        result = validate_template(b"", mapping)

        assert result.errors == [
            "Empty file: The uploaded file is empty. Please select a valid Excel file."
        ]

    def test_lowercase_mapping_is_normalized(self, template_bytes):
        result = validate_template(template_bytes, CellMapping(invoice_cell=" i10 "))

        assert result.is_valid
        assert result.preview["Invoice Cell"].address == "I10"
