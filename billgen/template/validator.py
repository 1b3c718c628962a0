"""Template validation: check an upload and cell mapping without writing."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any

from billgen.core.models import CellMapping, CellPreview, TemplateValidationResponse
from billgen.template.engine import BaseSpreadsheetEngine, OpenpyxlEngine, is_valid_cell_address
from billgen.template.workbook import WorkbookLoadError, load_with_timeout

logger = logging.getLogger(__name__)


def _display_value(value: Any) -> str:
    if value is None:
        return "Empty"
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    return str(value)


def validate_template(
    file_bytes: bytes,
    mapping: CellMapping,
    engine: BaseSpreadsheetEngine | None = None,
    timeout: float | None = None,
) -> TemplateValidationResponse:
    """Check that a template can be loaded and every mapped cell is usable.

    File-level problems (empty, oversized, corrupt, timed out, no worksheet)
    end the check immediately. Cell problems are collected for all four
    cells so the user sees every mapping issue at once.

    Args:
        file_bytes: Raw template upload.
        mapping: Cells that will receive bill values.
        engine: Spreadsheet backend (openpyxl by default).
        timeout: Seconds allowed for loading the workbook.

    Returns:
        TemplateValidationResponse with errors and, when valid, a per-cell preview.
    """
    engine = engine or OpenpyxlEngine()

    try:
        workbook = load_with_timeout(file_bytes, timeout, loader=engine.load)
        sheet = engine.first_sheet(workbook)
    except WorkbookLoadError as e:
        return TemplateValidationResponse(is_valid=False, errors=[str(e)])

    errors: list[str] = []
    if not engine.has_content(sheet):
        errors.append("The worksheet appears to be empty. Please use a template with some content.")

    preview: dict[str, CellPreview] = {}
    for name, address in mapping.named_cells():
        if not is_valid_cell_address(address):
            errors.append(
                f"Invalid cell address format: {address} ({name}). Use format like A1, B2, etc."
            )
            continue
        try:
            state = engine.read_cell(sheet, address)
        except Exception as e:
            errors.append(f"Cannot access cell: {address} ({name}). {e}")
            continue
        preview[name] = CellPreview(
            address=state.address,
            current_value=_display_value(state.value),
            type=state.data_type,
            formula=state.formula,
            merged_range=state.merged_range,
        )

    logger.info("Validated template mapping cells=%d errors=%d", len(preview), len(errors))
    return TemplateValidationResponse(
        is_valid=not errors,
        errors=errors,
        preview=preview if not errors else None,
    )
