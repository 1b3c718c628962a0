"""Sample invoice template generator.

Writes an .xlsx invoice template laid out for the default cell mapping:

  I9   bill date
  I10  invoice number
  G20  units (first line item)
  D39  amount in words (merged D39:I39)

The template carries the things population must preserve: styled cells,
merged ranges, custom row heights and column widths, a formula, print
settings and a frozen header.

Usage:
  python tools/generate_sample_template.py --output ./templates/invoice.xlsx
  python tools/generate_sample_template.py --output ./invoice.xlsx --shop "Ganesh Traders" --item "Milk (1L)"
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)

THIN = Side(style="thin", color="000000")
BOX = Border(left=THIN, right=THIN, top=THIN, bottom=THIN)
HEADER_FILL = PatternFill("solid", fgColor="DDDDDD")


def build_template(shop: str, item: str, unit_price: float) -> Workbook:
    wb = Workbook()
    ws = wb.active
    ws.title = "Invoice"

    ws.merge_cells("A1:I1")
    ws["A1"] = shop
    ws["A1"].font = Font(bold=True, size=16)
    ws["A1"].alignment = Alignment(horizontal="center", vertical="center")
    ws.row_dimensions[1].height = 30

    ws.merge_cells("A2:I2")
    ws["A2"] = "TAX INVOICE"
    ws["A2"].font = Font(bold=True, size=12)
    ws["A2"].alignment = Alignment(horizontal="center")

    ws["H9"] = "Date:"
    ws["H10"] = "Invoice No:"
    for ref in ("H9", "H10"):
        ws[ref].font = Font(bold=True)
        ws[ref].alignment = Alignment(horizontal="right")
    for ref in ("I9", "I10"):
        ws[ref].border = BOX
        ws[ref].alignment = Alignment(horizontal="center")

    headers = {"B18": "S.No", "C18": "Description", "G18": "Qty", "H18": "Rate", "I18": "Amount"}
    ws.merge_cells("C18:F18")
    for ref, label in headers.items():
        ws[ref] = label
        ws[ref].font = Font(bold=True)
        ws[ref].fill = HEADER_FILL
        ws[ref].border = BOX
    ws.row_dimensions[18].height = 22

    ws.merge_cells("C20:F20")
    ws["B20"] = 1
    ws["C20"] = item
    ws["G20"] = 0
    ws["H20"] = unit_price
    ws["I20"] = "=G20*H20"
    ws["G20"].number_format = "0"
    for ref in ("H20", "I20"):
        ws[ref].number_format = "#,##0.00"
    for ref in ("B20", "C20", "G20", "H20", "I20"):
        ws[ref].border = BOX

    ws["A39"] = "Amount in words:"
    ws["A39"].font = Font(italic=True)
    ws.merge_cells("D39:I39")
    ws["D39"].font = Font(bold=True)
    ws["D39"].alignment = Alignment(horizontal="left", wrap_text=True)
    ws.row_dimensions[39].height = 28

    ws.merge_cells("G44:I44")
    ws["G44"] = "Authorised Signatory"
    ws["G44"].alignment = Alignment(horizontal="center")

    for letter, width in {"A": 4, "B": 6, "C": 14, "D": 14, "E": 10, "F": 10, "G": 8, "H": 12, "I": 16}.items():
        ws.column_dimensions[letter].width = width

    ws.freeze_panes = "A3"
    ws.page_setup.orientation = "portrait"
    ws.page_setup.paperSize = ws.PAPERSIZE_A4
    ws.print_options.horizontalCentered = True
    ws.page_margins.left = 0.5
    ws.page_margins.right = 0.5
    return wb


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="Write a sample invoice template for the default cell mapping (I10/I9/G20/D39).",
    )
    p.add_argument("--output", type=str, required=True, help="Path of the .xlsx file to write.")
    p.add_argument("--shop", type=str, default="Sample Traders", help="Shop name printed in the title row.")
    p.add_argument("--item", type=str, default="Goods", help="Line item description.")
    p.add_argument("--unit_price", type=float, default=400.0, help="Rate printed on the line item.")
    p.add_argument("--force", action="store_true", help="Overwrite the output file if it exists.")
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    out_path = Path(args.output)
    if out_path.suffix.lower() != ".xlsx":
        print(f"ERROR: output must be an .xlsx file: {out_path}", file=sys.stderr)
        return 2
    if out_path.exists() and not args.force:
        print(f"ERROR: {out_path} exists; pass --force to overwrite", file=sys.stderr)
        return 2

    out_path.parent.mkdir(parents=True, exist_ok=True)
    build_template(args.shop, args.item, args.unit_price).save(out_path)
    logger.info("Wrote template %s", out_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
