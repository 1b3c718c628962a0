"""PDF renditions of generated bills.

Two fixed layouts are provided:
- report: a standalone invoice page built from the bill record
- template: a summary page built from the values read back out of the
  populated template workbook
"""

from __future__ import annotations

import io

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from billgen.core.models import BillRecord, CellMapping
from billgen.generator.words import amount_in_words
from billgen.template.engine import BaseSpreadsheetEngine, OpenpyxlEngine

PAGE_WIDTH, PAGE_HEIGHT = A4


def _y(top_mm: float) -> float:
    # Layout coordinates are measured from the top of the page in mm.
    return PAGE_HEIGHT - top_mm * mm


def format_amount(amount: int | float) -> str:
    if isinstance(amount, int) or float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.2f}"


def _new_canvas(buffer: io.BytesIO, invoice_number: int | str) -> canvas.Canvas:
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"Invoice {invoice_number}")
    return c


def render_report_pdf(record: BillRecord, unit_price: int | float, currency: str = "Rs.") -> bytes:
    """Render the standalone invoice page for one bill."""
    buffer = io.BytesIO()
    c = _new_canvas(buffer, record.invoice_number)

    c.setFont("Helvetica-Bold", 20)
    c.drawCentredString(105 * mm, _y(30), "INVOICE")

    c.setFont("Helvetica", 12)
    c.drawString(20 * mm, _y(60), f"Invoice No: {record.invoice_number}")
    c.drawString(20 * mm, _y(75), f"Date: {record.date_str}")
    c.drawString(20 * mm, _y(90), f"Units: {record.units}")
    c.drawString(20 * mm, _y(105), f"Unit Price: {currency} {format_amount(unit_price)}")
    c.drawString(20 * mm, _y(120), f"Total Amount: {currency} {format_amount(record.amount)}")

    c.drawString(20 * mm, _y(140), "Amount in Words:")
    words = simpleSplit(amount_in_words(record.amount, currency), "Helvetica", 12, 170 * mm)
    for index, line in enumerate(words):
        c.drawString(20 * mm, _y(155 + index * 7), line)

    c.rect(15 * mm, _y(265), 180 * mm, 250 * mm)

    c.showPage()
    c.save()
    return buffer.getvalue()


def render_workbook_pdf(
    workbook: bytes,
    mapping: CellMapping,
    record: BillRecord,
    engine: BaseSpreadsheetEngine | None = None,
    currency: str = "Rs.",
) -> bytes:
    """Render the summary page from a populated template workbook.

    Invoice number, date, units and amount in words are read back from the
    mapped cells; the total comes from the bill record since the template
    holds no amount cell.
    """
    engine = engine or OpenpyxlEngine()
    sheet = engine.first_sheet(engine.load(workbook))

    invoice = engine.read_cell(sheet, mapping.invoice_cell).value
    date = engine.read_cell(sheet, mapping.date_cell).value
    units = engine.read_cell(sheet, mapping.units_cell).value
    words = engine.read_cell(sheet, mapping.amount_words_cell).value

    buffer = io.BytesIO()
    c = _new_canvas(buffer, invoice)

    c.setFont("Helvetica-Bold", 20)
    c.drawCentredString(105 * mm, _y(30), "INVOICE")
    c.setLineWidth(0.5 * mm)
    c.line(20 * mm, _y(35), 190 * mm, _y(35))

    c.setFont("Helvetica", 12)
    c.drawString(20 * mm, _y(50), f"Invoice Number: {invoice}")
    c.drawString(20 * mm, _y(65), f"Date: {date}")
    c.drawString(20 * mm, _y(80), f"Quantity: {units} units")

    unit_price = record.amount / record.units if record.units else 0
    c.drawString(110 * mm, _y(50), f"Unit Price: {currency} {unit_price:,.2f}")
    c.drawString(110 * mm, _y(65), f"Total Amount: {currency} {format_amount(record.amount)}")

    c.setFont("Helvetica", 10)
    c.drawString(20 * mm, _y(100), "Amount in Words:")
    for index, line in enumerate(simpleSplit(str(words or ""), "Helvetica", 10, 170 * mm)):
        c.drawString(20 * mm, _y(110 + index * 5), line)

    c.setLineWidth(0.3 * mm)
    c.rect(15 * mm, _y(120), 180 * mm, 80 * mm)
    c.line(15 * mm, _y(85), 195 * mm, _y(85))

    c.setFont("Helvetica", 8)
    c.drawCentredString(105 * mm, _y(140), "This is a computer-generated invoice.")

    c.showPage()
    c.save()
    return buffer.getvalue()
