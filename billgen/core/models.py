"""Pydantic models for the Bill Generator API.

This module defines the configuration, record and request/response models:
- CellMapping: The four template cells that receive per-bill values
- BillConfig: User-supplied generation parameters
- BillRecord: One synthesized bill
- GenerateResponse: Generated records with a summary
- TemplateValidationResponse: Per-cell report for an uploaded template
- Preset: Named snapshot of a BillConfig
- ErrorResponse: Error response for failed requests
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, Field, field_serializer, field_validator

DATE_FORMAT = "%d-%m-%Y"


class DateMode(str, Enum):
    """How the calendar dates for a bill batch are selected."""

    MONTH_RANGE = "month-range"
    EXACT_RANGE = "exact-range"
    SPECIFIC_DATES = "specific-dates"


class PdfLayout(str, Enum):
    """Page layout used for PDF renditions."""

    REPORT = "report"
    TEMPLATE = "template"


class CellMapping(BaseModel):
    """Spreadsheet cell addresses that receive the per-bill values.

    Addresses are normalized (trimmed, upper-cased) but not rejected here;
    malformed addresses are reported per cell by template validation.
    """

    invoice_cell: str = Field(default="I10", description="Cell receiving the invoice number")
    date_cell: str = Field(default="I9", description="Cell receiving the bill date (DD-MM-YYYY)")
    units_cell: str = Field(default="G20", description="Cell receiving the unit count")
    amount_words_cell: str = Field(default="D39", description="Cell receiving the amount in words")

    @field_validator("invoice_cell", "date_cell", "units_cell", "amount_words_cell", mode="before")
    @classmethod
    def _normalize_address(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    def named_cells(self) -> list[tuple[str, str]]:
        """Return (label, address) pairs in a stable order."""
        return [
            ("Invoice Cell", self.invoice_cell),
            ("Date Cell", self.date_cell),
            ("Units Cell", self.units_cell),
            ("Amount Words Cell", self.amount_words_cell),
        ]


class BillConfig(BaseModel):
    """Parameters for one bill generation run.

    Numeric bounds are deliberately left unconstrained at the schema level so
    that the generator can report each violated constraint with a specific
    message.
    """

    invoice_start: int = Field(description="First invoice number (inclusive)")
    invoice_end: int = Field(description="Last invoice number (inclusive)")
    total_units: int = Field(description="Total units to distribute across all bills")
    min_units_per_bill: int = Field(description="Minimum units on any single bill")
    max_units_per_bill: int = Field(description="Maximum units on any single bill")
    unit_price: int | float = Field(ge=0, description="Price per unit; amount = units x unit_price")

    date_mode: DateMode = DateMode.MONTH_RANGE
    start_month: int | None = Field(default=None, ge=1, le=12)
    start_year: int | None = Field(default=None, ge=1, le=9999)
    end_month: int | None = Field(default=None, ge=1, le=12)
    end_year: int | None = Field(default=None, ge=1, le=9999)
    exact_start_date: str | None = Field(default=None, description="DD-MM-YYYY")
    exact_end_date: str | None = Field(default=None, description="DD-MM-YYYY")
    specific_dates: list[str] = Field(default_factory=list, description="DD-MM-YYYY dates")

    exclude_weekdays: list[Annotated[int, Field(ge=0, le=6)]] = Field(
        default_factory=list,
        description="Weekdays to skip (0=Sunday .. 6=Saturday)",
    )
    exclude_dates: list[str] = Field(
        default_factory=list,
        description="Individual DD-MM-YYYY dates to skip in every date mode",
    )
    allow_multiple_per_day: bool = False

    cell_mapping: CellMapping = Field(default_factory=CellMapping)


class BillRecord(BaseModel):
    """One synthesized bill."""

    invoice_number: int
    date: dt.date
    units: int
    amount: int | float

    @property
    def date_str(self) -> str:
        return self.date.strftime(DATE_FORMAT)

    @field_serializer("date")
    def _serialize_date(self, value: dt.date) -> str:
        return value.strftime(DATE_FORMAT)


class BillSummary(BaseModel):
    """Aggregate figures for a generated batch."""

    num_bills: int
    total_units: int
    total_amount: int | float
    distinct_dates: int
    first_date: str | None = None
    last_date: str | None = None
    average_units: float


class GenerateRequest(BaseModel):
    """Body for generation and record export endpoints."""

    config: BillConfig
    seed: int | None = Field(
        default=None,
        description="Seed for the unit distribution; reuse the returned seed to reproduce a batch",
    )


class GenerateResponse(BaseModel):
    """Generated bill records with a batch summary."""

    seed: int
    summary: BillSummary
    records: list[BillRecord]


class ConfigCheckResponse(BaseModel):
    """Result of a pre-flight configuration check."""

    is_valid: bool
    errors: list[str] = Field(default_factory=list)


class BillExportRow(BaseModel):
    """Flat record used by the CSV/JSON exports."""

    invoice_number: int
    date: str
    units: int
    amount: int | float
    amount_in_words: str


class CellPreview(BaseModel):
    """Current state of one mapped template cell."""

    address: str
    current_value: str
    type: str
    formula: str | None = None
    merged_range: str | None = None


class TemplateValidationResponse(BaseModel):
    """Report for an uploaded template and cell mapping.

    All problems are collected; ``preview`` is only present when the
    template is usable as-is.
    """

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    preview: dict[str, CellPreview] | None = None


class PresetCreate(BaseModel):
    """Body for saving a user preset."""

    name: str
    description: str = ""
    config: BillConfig


class Preset(BaseModel):
    """Named snapshot of a BillConfig."""

    name: str
    description: str = ""
    config: BillConfig
    builtin: bool = False
    created_at: dt.datetime | None = None


class ErrorResponse(BaseModel):
    """Error response for failed requests.

    Returned with appropriate HTTP status codes (400, 404, 422).
    """

    error: str = Field(
        description="Brief error message describing what went wrong"
    )
    detail: str | None = Field(
        default=None,
        description="Additional error details (if available)",
    )
    errors: list[str] | None = Field(
        default=None,
        description="Every problem found, when several are collected at once",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": "Invalid configuration",
                    "detail": "Invoice start (20) cannot be greater than invoice end (10)",
                    "errors": None,
                },
                {
                    "error": "Invalid template",
                    "detail": "2 problems found in the template or cell mapping",
                    "errors": [
                        "Invalid cell address format: 9I (Date Cell). Use format like A1, B2, etc.",
                        "The worksheet appears to be empty. Please use a template with some content.",
                    ],
                },
            ]
        }
    }
