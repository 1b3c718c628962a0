"""Spreadsheet engine abstractions for template population.

This module defines the narrow capability surface the generator needs from
a spreadsheet library (load, inspect, write a value, snapshot/restore sheet
structure, serialize) and the openpyxl-backed implementation used by
default.
"""

from __future__ import annotations

import io
import re
import zipfile
from abc import ABC, abstractmethod
from copy import copy, deepcopy
from dataclasses import dataclass, field
from typing import Any

from openpyxl.utils.cell import coordinate_to_tuple
from openpyxl.utils.exceptions import CellCoordinatesException

from billgen.template.merged_cells import (
    get_merged_cell_value,
    get_merged_range_for_cell,
    resolve_write_target,
    restore_merged_ranges,
    snapshot_merged_ranges,
)
from billgen.template.workbook import get_first_worksheet, load_workbook_safe

CELL_ADDRESS_PATTERN = re.compile(r"^[A-Z]+\d+$", re.IGNORECASE)

# Excel 2007+ grid limits
MAX_ROW = 1_048_576
MAX_COLUMN = 16_384

_DATA_TYPE_NAMES = {
    "n": "number",
    "s": "string",
    "inlineStr": "string",
    "f": "formula",
    "b": "boolean",
    "d": "date",
    "e": "error",
}


def is_valid_cell_address(address: str | None) -> bool:
    """Check an address against the column-letters + row-digits pattern."""
    return bool(address) and CELL_ADDRESS_PATTERN.match(address.strip()) is not None


def parse_cell_address(address: str) -> tuple[int, int]:
    """Convert an A1-style address to a (row, column) tuple.

    Raises:
        ValueError: If the address is malformed or outside the worksheet grid
    """
    if not is_valid_cell_address(address):
        raise ValueError(f"Invalid cell address format: {address}")
    try:
        row, column = coordinate_to_tuple(address.strip().upper())
    except CellCoordinatesException as e:
        raise ValueError(f"Cell {address.strip().upper()} is outside the worksheet bounds") from e
    if not (1 <= row <= MAX_ROW and 1 <= column <= MAX_COLUMN):
        raise ValueError(f"Cell {address.strip().upper()} is outside the worksheet bounds")
    return row, column


@dataclass
class CellState:
    """Read-only view of one template cell."""

    address: str
    value: Any
    data_type: str
    formula: str | None = None
    merged_range: str | None = None


@dataclass
class SheetSnapshot:
    """Worksheet structure captured before cells are written."""

    views: Any = None
    auto_filter: Any = None
    page_setup: dict[str, Any] = field(default_factory=dict)
    page_margins: Any = None
    print_options: Any = None
    header_footer: Any = None
    sheet_properties: Any = None
    protection: Any = None
    sheet_state: str | None = None
    merged_ranges: list[str] = field(default_factory=list)
    row_heights: dict[int, float] = field(default_factory=dict)
    column_widths: dict[str, float] = field(default_factory=dict)


class BaseSpreadsheetEngine(ABC):
    """Abstract base class for spreadsheet backends.

    Workbook and sheet handles are opaque to callers; only the engine that
    produced them may interpret them.
    """

    @abstractmethod
    def load(self, data: bytes) -> Any:
        """Load a workbook from bytes without modifying them."""

    @abstractmethod
    def first_sheet(self, workbook: Any) -> Any:
        """Return the first worksheet or raise ``NoWorksheetError``."""

    @abstractmethod
    def has_content(self, sheet: Any) -> bool:
        """Return True if any cell in the sheet holds a value."""

    @abstractmethod
    def read_cell(self, sheet: Any, address: str) -> CellState:
        """Describe a cell without changing it."""

    @abstractmethod
    def write_value(self, sheet: Any, address: str, value: Any) -> None:
        """Replace a cell's value, keeping its formatting."""

    @abstractmethod
    def snapshot(self, sheet: Any) -> SheetSnapshot:
        """Capture worksheet-level structure."""

    @abstractmethod
    def restore(self, sheet: Any, snapshot: SheetSnapshot) -> None:
        """Reapply a previously captured structure."""

    @abstractmethod
    def save(self, workbook: Any) -> bytes:
        """Serialize a workbook to bytes."""


class OpenpyxlEngine(BaseSpreadsheetEngine):
    """Engine backed by openpyxl.

    Args:
        compression_level: DEFLATE level used to re-pack saved workbooks;
            None keeps openpyxl's own output untouched.
        max_bytes: Optional size ceiling enforced on load.
    """

    def __init__(self, compression_level: int | None = 6, max_bytes: int | None = None) -> None:
        self.compression_level = compression_level
        self.max_bytes = max_bytes

    def load(self, data: bytes) -> Any:
        return load_workbook_safe(data, max_bytes=self.max_bytes)

    def first_sheet(self, workbook: Any) -> Any:
        return get_first_worksheet(workbook)

    def has_content(self, sheet: Any) -> bool:
        return any(
            value is not None
            for row in sheet.iter_rows(values_only=True)
            for value in row
        )

    def read_cell(self, sheet: Any, address: str) -> CellState:
        row, column = parse_cell_address(address)
        merged_range = get_merged_range_for_cell(sheet, row, column)
        value = get_merged_cell_value(sheet, row, column)
        target_row, target_col = resolve_write_target(sheet, row, column)
        data_type = sheet.cell(row=target_row, column=target_col).data_type

        if value is None:
            type_name = "empty"
        else:
            type_name = _DATA_TYPE_NAMES.get(data_type, data_type)

        formula = value if data_type == "f" and isinstance(value, str) else None
        return CellState(
            address=address.strip().upper(),
            value=value,
            data_type=type_name,
            formula=formula,
            merged_range=str(merged_range) if merged_range is not None else None,
        )

    def write_value(self, sheet: Any, address: str, value: Any) -> None:
        row, column = parse_cell_address(address)
        target_row, target_col = resolve_write_target(sheet, row, column)
        cell = sheet.cell(row=target_row, column=target_col)

        font = copy(cell.font)
        border = copy(cell.border)
        fill = copy(cell.fill)
        alignment = copy(cell.alignment)
        protection = copy(cell.protection)
        number_format = cell.number_format
        hyperlink = cell.hyperlink
        comment = cell.comment

        cell.value = value

        cell.font = font
        cell.border = border
        cell.fill = fill
        cell.alignment = alignment
        cell.protection = protection
        cell.number_format = number_format
        if hyperlink is not None:
            cell.hyperlink = hyperlink
        if comment is not None:
            cell.comment = comment

    def snapshot(self, sheet: Any) -> SheetSnapshot:
        return SheetSnapshot(
            views=deepcopy(sheet.views),
            auto_filter=deepcopy(sheet.auto_filter),
            page_setup=_field_values(sheet.page_setup),
            page_margins=deepcopy(sheet.page_margins),
            print_options=deepcopy(sheet.print_options),
            header_footer=deepcopy(sheet.HeaderFooter),
            sheet_properties=deepcopy(sheet.sheet_properties),
            protection=deepcopy(sheet.protection),
            sheet_state=sheet.sheet_state,
            merged_ranges=snapshot_merged_ranges(sheet),
            row_heights={
                index: dim.height
                for index, dim in sheet.row_dimensions.items()
                if dim.height is not None
            },
            column_widths={
                letter: dim.width
                for letter, dim in sheet.column_dimensions.items()
                if dim.customWidth
            },
        )

    def restore(self, sheet: Any, snapshot: SheetSnapshot) -> None:
        sheet.views = snapshot.views
        sheet.auto_filter = snapshot.auto_filter
        for name, value in snapshot.page_setup.items():
            setattr(sheet.page_setup, name, value)
        sheet.page_margins = snapshot.page_margins
        sheet.print_options = snapshot.print_options
        sheet.HeaderFooter = snapshot.header_footer
        sheet.sheet_properties = snapshot.sheet_properties
        sheet.protection = snapshot.protection
        if snapshot.sheet_state:
            sheet.sheet_state = snapshot.sheet_state

        restore_merged_ranges(sheet, snapshot.merged_ranges)

        for index, height in snapshot.row_heights.items():
            sheet.row_dimensions[index].height = height
        for letter, width in snapshot.column_widths.items():
            sheet.column_dimensions[letter].width = width

    def save(self, workbook: Any) -> bytes:
        buffer = io.BytesIO()
        workbook.save(buffer)
        data = buffer.getvalue()
        if self.compression_level is None:
            return data
        return repack_zip(data, self.compression_level)


def repack_zip(data: bytes, compression_level: int) -> bytes:
    """Rewrite a ZIP container with DEFLATE at the given level.

    Member order, names and timestamps are preserved.
    """
    output = io.BytesIO()
    with zipfile.ZipFile(io.BytesIO(data)) as source, zipfile.ZipFile(
        output, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=compression_level
    ) as target:
        for info in source.infolist():
            target.writestr(
                info,
                source.read(info.filename),
                compress_type=zipfile.ZIP_DEFLATED,
                compresslevel=compression_level,
            )
    return output.getvalue()


def _field_values(obj: Any) -> dict[str, Any]:
    # Print settings keep a back-reference to their worksheet, so copy the
    # serialisable fields rather than the object itself.
    return {name: getattr(obj, name) for name in obj.__attrs__}
