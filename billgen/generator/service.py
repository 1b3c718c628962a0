"""Bill generation service module.

Provides the BillService OOP facade and the BillServiceConfig dataclass,
keeping runtime options separate from app-level settings.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from billgen.core.models import (
    BillConfig,
    CellMapping,
    ConfigCheckResponse,
    GenerateResponse,
    PdfLayout,
    TemplateValidationResponse,
)
from billgen.export.archive import ArchiveResult, build_excel_archive, build_pdf_archive
from billgen.export.records import records_to_csv, records_to_json
from billgen.generator.synthesizer import check_config, summarize, synthesize
from billgen.template.engine import BaseSpreadsheetEngine, OpenpyxlEngine
from billgen.template.validator import validate_template
from billgen.template.workbook import load_with_timeout

if TYPE_CHECKING:
    from billgen.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class BillServiceConfig:
    """Configuration for the BillService.

    Mirrors the relevant application settings so the generator core never
    reads global state.
    """

    max_template_bytes: int | None = 50 * 1024 * 1024
    template_load_timeout: float | None = 30.0
    compression_level: int = 6
    currency_label: str = "Rs."

    @classmethod
    def from_settings(cls, settings: "Settings") -> "BillServiceConfig":
        return cls(
            max_template_bytes=settings.max_template_bytes,
            template_load_timeout=settings.template_load_timeout_seconds,
            compression_level=settings.zip_compression_level,
            currency_label=settings.currency_label,
        )


def draw_seed() -> int:
    return random.SystemRandom().randrange(2**32)


class BillService:
    """OOP service tying generation, validation and exports together.

    Usage:
        service = BillService(BillServiceConfig(currency_label="Rs."))
        result = service.generate(config, seed=42)
        _, archive = service.export_excel(template_bytes, config, seed=result.seed)

    Export calls take the same seed as :meth:`generate`, so a previewed batch
    can be exported unchanged.
    """

    def __init__(
        self,
        config: BillServiceConfig | None = None,
        engine: BaseSpreadsheetEngine | None = None,
    ):
        """Initialize the service.

        Args:
            config: Service configuration. Uses defaults if not provided.
            engine: Spreadsheet backend. Uses OpenpyxlEngine if not provided.
        """
        self.config = config or BillServiceConfig()
        self._engine = engine or OpenpyxlEngine(
            compression_level=self.config.compression_level,
            max_bytes=self.config.max_template_bytes,
        )

    def _check_template(self, template: bytes) -> None:
        load_with_timeout(template, self.config.template_load_timeout, loader=self._engine.load)

    def generate(self, config: BillConfig, seed: int | None = None) -> GenerateResponse:
        """Synthesize the bills for a configuration.

        Raises:
            ValidationError: If the configuration is invalid
        """
        if seed is None:
            seed = draw_seed()
        records = synthesize(config, rng=random.Random(seed))
        summary = summarize(records)
        logger.info(
            "Generated bills count=%d total_units=%d seed=%d",
            summary.num_bills,
            summary.total_units,
            seed,
        )
        return GenerateResponse(seed=seed, summary=summary, records=records)

    def check(self, config: BillConfig) -> ConfigCheckResponse:
        errors = check_config(config)
        return ConfigCheckResponse(is_valid=not errors, errors=errors)

    def validate_template(
        self,
        template: bytes,
        mapping: CellMapping,
        filename: str | None = None,
    ) -> TemplateValidationResponse:
        result = validate_template(
            template,
            mapping,
            engine=self._engine,
            timeout=self.config.template_load_timeout,
        )
        logger.info(
            "Template check filename=%s valid=%s errors=%d",
            filename,
            result.is_valid,
            len(result.errors),
        )
        return result

    def export_excel(
        self,
        template: bytes,
        config: BillConfig,
        seed: int | None = None,
    ) -> tuple[GenerateResponse, ArchiveResult]:
        """Generate bills and populate one template copy per bill.

        The template is loaded once, within the load timeout, before any bill
        is built.

        Raises:
            WorkbookLoadError: If the template cannot be loaded
            ValidationError: If the configuration is invalid
        """
        self._check_template(template)
        generated = self.generate(config, seed)
        archive = build_excel_archive(
            template,
            config.cell_mapping,
            generated.records,
            engine=self._engine,
            compression_level=self.config.compression_level,
            currency=self.config.currency_label,
        )
        return generated, archive

    def export_pdf(
        self,
        config: BillConfig,
        seed: int | None = None,
        layout: PdfLayout = PdfLayout.REPORT,
        template: bytes | None = None,
    ) -> tuple[GenerateResponse, ArchiveResult]:
        """Generate bills and render one PDF per bill.

        Raises:
            WorkbookLoadError: If a template is given but cannot be loaded
            ValidationError: If the configuration is invalid
            ValueError: If the template layout is requested without a template
        """
        if template is not None:
            self._check_template(template)
        generated = self.generate(config, seed)
        archive = build_pdf_archive(
            generated.records,
            config.unit_price,
            layout=layout,
            template=template,
            mapping=config.cell_mapping,
            engine=self._engine,
            compression_level=self.config.compression_level,
            currency=self.config.currency_label,
        )
        return generated, archive

    def export_records(
        self,
        config: BillConfig,
        fmt: Literal["csv", "json"],
        seed: int | None = None,
    ) -> tuple[GenerateResponse, str]:
        generated = self.generate(config, seed)
        if fmt == "csv":
            text = records_to_csv(generated.records, self.config.currency_label)
        else:
            text = records_to_json(generated.records, self.config.currency_label)
        return generated, text
