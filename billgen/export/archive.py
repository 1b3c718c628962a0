"""ZIP archive assembly for batch exports.

Records are processed one at a time. A record that fails is replaced by an
``Error_Invoice_<n>.txt`` placeholder and the batch carries on.
"""

from __future__ import annotations

import io
import logging
import zipfile
from collections.abc import Sequence
from dataclasses import dataclass, field

from billgen.core.models import BillRecord, CellMapping, PdfLayout
from billgen.export.pdf import render_report_pdf, render_workbook_pdf
from billgen.template.engine import BaseSpreadsheetEngine, OpenpyxlEngine
from billgen.template.populator import populate_template

logger = logging.getLogger(__name__)


@dataclass
class ArchiveResult:
    """A finished archive and how many records made it in."""

    data: bytes
    succeeded: int
    failures: dict[int, str] = field(default_factory=dict)

    @property
    def failed(self) -> int:
        return len(self.failures)


class ArchiveWriter:
    """Collects documents and error placeholders into an in-memory ZIP."""

    def __init__(self, compression_level: int = 6) -> None:
        self._buffer = io.BytesIO()
        self._zip = zipfile.ZipFile(
            self._buffer,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=compression_level,
        )
        self.succeeded = 0
        self.failures: dict[int, str] = {}

    def add_document(self, name: str, data: bytes) -> None:
        self._zip.writestr(name, data)
        self.succeeded += 1

    def add_error(self, invoice_number: int, heading: str, message: str) -> None:
        self._zip.writestr(
            f"Error_Invoice_{invoice_number}.txt",
            f"{heading} {invoice_number}:\n{message}",
        )
        self.failures[invoice_number] = message

    def close(self) -> ArchiveResult:
        self._zip.close()
        return ArchiveResult(
            data=self._buffer.getvalue(),
            succeeded=self.succeeded,
            failures=dict(self.failures),
        )


def build_excel_archive(
    template: bytes,
    mapping: CellMapping,
    records: Sequence[BillRecord],
    engine: BaseSpreadsheetEngine | None = None,
    compression_level: int = 6,
    currency: str = "Rs.",
) -> ArchiveResult:
    """Populate one workbook per record and pack them as ``Invoice_<n>.xlsx``."""
    engine = engine or OpenpyxlEngine(compression_level=compression_level)
    writer = ArchiveWriter(compression_level)

    for record in records:
        outcome = populate_template(template, mapping, record, engine=engine, currency=currency)
        if outcome.ok:
            writer.add_document(f"Invoice_{record.invoice_number}.xlsx", outcome.data)
        else:
            writer.add_error(record.invoice_number, "Error processing invoice", outcome.error or "Unknown error")

    result = writer.close()
    logger.info(
        "Built Excel archive bills=%d succeeded=%d failed=%d bytes=%d",
        len(records),
        result.succeeded,
        result.failed,
        len(result.data),
    )
    return result


def build_pdf_archive(
    records: Sequence[BillRecord],
    unit_price: int | float,
    layout: PdfLayout = PdfLayout.REPORT,
    template: bytes | None = None,
    mapping: CellMapping | None = None,
    engine: BaseSpreadsheetEngine | None = None,
    compression_level: int = 6,
    currency: str = "Rs.",
) -> ArchiveResult:
    """Render one PDF per record and pack them as ``Invoice_<n>.pdf``.

    With the template layout each record is first populated into the
    template; if that fails the report layout is used for that record.

    Raises:
        ValueError: If the template layout is requested without a template
    """
    layout = PdfLayout(layout)
    if layout is PdfLayout.TEMPLATE and template is None:
        raise ValueError("The template PDF layout requires a template workbook")
    mapping = mapping or CellMapping()
    engine = engine or OpenpyxlEngine(compression_level=compression_level)
    writer = ArchiveWriter(compression_level)

    for record in records:
        try:
            if layout is PdfLayout.TEMPLATE:
                outcome = populate_template(template, mapping, record, engine=engine, currency=currency)
                if outcome.ok:
                    pdf = render_workbook_pdf(outcome.data, mapping, record, engine=engine, currency=currency)
                else:
                    logger.info(
                        "Falling back to report layout invoice=%d", record.invoice_number
                    )
                    pdf = render_report_pdf(record, unit_price, currency)
            else:
                pdf = render_report_pdf(record, unit_price, currency)
        except Exception as e:
            logger.warning("PDF rendering failed invoice=%d: %s", record.invoice_number, e)
            writer.add_error(record.invoice_number, "Error generating PDF for invoice", str(e) or type(e).__name__)
            continue
        writer.add_document(f"Invoice_{record.invoice_number}.pdf", pdf)

    result = writer.close()
    logger.info(
        "Built PDF archive layout=%s bills=%d succeeded=%d failed=%d",
        layout.value,
        len(records),
        result.succeeded,
        result.failed,
    )
    return result
