"""Merged cell handling utilities.

openpyxl stores a merged region's value only in its top-left cell; the
other cells are read-only ``MergedCell`` placeholders. These helpers locate
the region owning a cell, redirect writes to its top-left cell, and capture
or reapply a worksheet's full merged-range list.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from openpyxl.worksheet.merge import MergedCellRange
    from openpyxl.worksheet.worksheet import Worksheet


def _cell_in_range(row: int, column: int, merged_range: "MergedCellRange") -> bool:
    """Check if a cell is within a merged range.

    Args:
        row: Row number (1-indexed)
        column: Column number (1-indexed)
        merged_range: openpyxl MergedCellRange object

    Returns:
        True if the cell is within the merged range
    """
    min_col, min_row, max_col, max_row = merged_range.bounds
    return (min_row <= row <= max_row) and (min_col <= column <= max_col)


def get_merged_range_for_cell(ws: "Worksheet", row: int, column: int) -> "MergedCellRange | None":
    """Get the merged range that contains a cell, if any.

    Args:
        ws: openpyxl Worksheet object
        row: Row number (1-indexed)
        column: Column number (1-indexed)

    Returns:
        MergedCellRange object if cell is merged, None otherwise
    """
    for merged_range in ws.merged_cells.ranges:
        if _cell_in_range(row, column, merged_range):
            return merged_range
    return None


def get_merged_cell_value(ws: "Worksheet", row: int, column: int) -> Any:
    """Get the effective value of a cell, handling merged regions.

    If the cell is part of a merged region, returns the value from the
    top-left cell of that region. Otherwise, returns the cell's own value.
    """
    merged_range = get_merged_range_for_cell(ws, row, column)
    if merged_range is not None:
        min_col, min_row, _, _ = merged_range.bounds
        return ws.cell(row=min_row, column=min_col).value
    return ws.cell(row=row, column=column).value


def resolve_write_target(ws: "Worksheet", row: int, column: int) -> tuple[int, int]:
    """Return the (row, column) that actually holds the value for a cell.

    Writes into a merged region land on its top-left cell, which is what a
    spreadsheet application displays for the whole region.
    """
    merged_range = get_merged_range_for_cell(ws, row, column)
    if merged_range is None:
        return row, column
    min_col, min_row, _, _ = merged_range.bounds
    return min_row, min_col


def snapshot_merged_ranges(ws: "Worksheet") -> list[str]:
    """Return the worksheet's merged ranges as sorted A1-style strings."""
    return sorted(str(merged_range) for merged_range in ws.merged_cells.ranges)


def restore_merged_ranges(ws: "Worksheet", ranges: list[str]) -> None:
    """Make the worksheet's merged ranges match ``ranges`` exactly.

    Ranges missing from the worksheet are re-merged and ranges not in the
    snapshot are unmerged. A worksheet that already matches is left alone.
    """
    wanted = set(ranges)
    current = set(snapshot_merged_ranges(ws))

    for extra in current - wanted:
        ws.unmerge_cells(extra)
    for missing in sorted(wanted - current):
        ws.merge_cells(missing)
