#!/usr/bin/env python3
"""Generate a bill batch from the command line.

Runs a built-in preset or a JSON BillConfig file end to end and writes the
requested outputs into a directory.

Usage:
  python scripts/generate_bills.py --preset "Default May 2025" --output_dir ./out --csv --json
  python scripts/generate_bills.py --config ./config.json --template ./invoice.xlsx --output_dir ./out --seed 7
  python scripts/generate_bills.py --list_presets
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from pydantic import ValidationError as PydanticValidationError

from billgen.core.config import settings
from billgen.core.models import BillConfig, PdfLayout
from billgen.generator.errors import ValidationError
from billgen.generator.presets import PresetStore
from billgen.generator.service import BillService, BillServiceConfig
from billgen.template.workbook import WorkbookLoadError

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Generate sequential bills and export them.")
    source = p.add_mutually_exclusive_group(required=True)
    source.add_argument("--preset", type=str, help="Name of a built-in preset.")
    source.add_argument("--config", type=str, help="Path to a BillConfig JSON file.")
    source.add_argument("--list_presets", action="store_true", help="List built-in presets and exit.")
    p.add_argument("--output_dir", type=str, default="./bills_out", help="Output directory.")
    p.add_argument("--seed", type=int, default=None, help="Seed for the unit distribution.")
    p.add_argument("--template", type=str, default=None, help="Excel template; writes invoices_excel.zip.")
    p.add_argument("--pdf", action="store_true", help="Write invoices_pdf.zip.")
    p.add_argument(
        "--pdf_layout",
        choices=[layout.value for layout in PdfLayout],
        default=PdfLayout.REPORT.value,
        help="PDF layout; 'template' requires --template.",
    )
    p.add_argument("--csv", action="store_true", help="Write bills.csv.")
    p.add_argument("--json", action="store_true", help="Write bills.json.")
    return p


def load_config(args: argparse.Namespace, store: PresetStore) -> BillConfig | None:
    if args.preset:
        preset = store.get(args.preset)
        if preset is None:
            print(f"ERROR: unknown preset: {args.preset}", file=sys.stderr)
            return None
        return preset.config
    try:
        return BillConfig.model_validate_json(Path(args.config).read_text(encoding="utf-8"))
    except (OSError, PydanticValidationError) as e:
        print(f"ERROR: cannot read config {args.config}: {e}", file=sys.stderr)
        return None


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    store = PresetStore()

    if args.list_presets:
        for preset in store.list_presets():
            print(f"{preset.name}: {preset.description}")
        return 0

    config = load_config(args, store)
    if config is None:
        return 2

    service = BillService(BillServiceConfig.from_settings(settings))
    check = service.check(config)
    if not check.is_valid:
        for error in check.errors:
            print(f"ERROR: {error}", file=sys.stderr)
        return 1

    out_dir = Path(args.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    template = Path(args.template).read_bytes() if args.template else None

    try:
        generated = service.generate(config, args.seed)
        seed = generated.seed

        if template is not None:
            _, archive = service.export_excel(template, config, seed)
            (out_dir / "invoices_excel.zip").write_bytes(archive.data)
            print(f"Excel: {archive.succeeded} ok, {archive.failed} failed")

        if args.pdf:
            layout = PdfLayout(args.pdf_layout)
            if layout is PdfLayout.TEMPLATE and template is None:
                print("ERROR: --pdf_layout template requires --template", file=sys.stderr)
                return 2
            _, archive = service.export_pdf(config, seed, layout=layout, template=template)
            (out_dir / "invoices_pdf.zip").write_bytes(archive.data)
            print(f"PDF: {archive.succeeded} ok, {archive.failed} failed")

        for fmt, wanted in (("csv", args.csv), ("json", args.json)):
            if wanted:
                _, text = service.export_records(config, fmt, seed)
                (out_dir / f"bills.{fmt}").write_text(text, encoding="utf-8")
    except (ValidationError, WorkbookLoadError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(json.dumps(generated.summary.model_dump(), indent=2))
    print(f"Seed: {seed} (pass --seed {seed} to reproduce)")
    print(f"Output written to: {out_dir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
