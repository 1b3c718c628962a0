"""API routes for the Bill Generator.

This module defines the REST API endpoints:
- GET /health: Health check endpoint
- POST /bills/validate: Pre-flight check of a configuration
- POST /bills/generate: Generate bill records with a summary
- POST /bills/export/{csv,json,excel,pdf}: Download generated bills
- POST /templates/validate: Check an uploaded template and cell mapping
- GET/POST /presets, GET/DELETE /presets/{name}: Preset store
"""

import logging
from typing import Literal

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError as PydanticValidationError

from billgen.core.config import settings
from billgen.core.models import (
    BillConfig,
    CellMapping,
    ConfigCheckResponse,
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
    PdfLayout,
    Preset,
    PresetCreate,
    TemplateValidationResponse,
)
from billgen.export.archive import ArchiveResult
from billgen.generator.errors import ValidationError
from billgen.generator.presets import PresetStore
from billgen.generator.service import BillService, BillServiceConfig
from billgen.template.workbook import WorkbookLoadError

# Create router instance
router = APIRouter()
logger = logging.getLogger(__name__)

# Create service instance at startup using app settings.
bill_service = BillService(config=BillServiceConfig.from_settings(settings))

_ERROR_RESPONSES = {
    400: {
        "description": "Invalid configuration, template or upload",
        "model": ErrorResponse,
    },
    422: {
        "description": "Request validation error (e.g., missing required form field)",
        "model": ErrorResponse,
    },
}


def _error(error: str, detail: str | None = None, errors: list[str] | None = None, status_code: int = 400) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail, errors=errors).model_dump(),
    )


def _pydantic_messages(exc: PydanticValidationError) -> list[str]:
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()))
        messages.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return messages


def _check_xlsx_filename(file: UploadFile) -> JSONResponse | None:
    if not file.filename:
        return _error("Invalid file", "No filename provided")
    if not file.filename.lower().endswith(".xlsx"):
        extension = file.filename[file.filename.rfind(".") :] if "." in file.filename else "no extension"
        return _error("Invalid file format", f"Expected .xlsx file, got '{extension}'")
    return None


async def _read_upload(file: UploadFile) -> bytes:
    try:
        return await file.read()
    finally:
        await file.close()


def _parse_config(config_json: str) -> BillConfig:
    return BillConfig.model_validate_json(config_json)


def _zip_response(archive: ArchiveResult, filename: str, seed: int) -> Response:
    return Response(
        content=archive.data,
        media_type="application/zip",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Bills-Succeeded": str(archive.succeeded),
            "X-Bills-Failed": str(archive.failed),
            "X-Bills-Seed": str(seed),
        },
    )


@router.get(
    "/health",
    summary="Health Check",
    description="Returns the health status of the API service.",
    response_description="Health status object",
    responses={
        200: {
            "description": "Service is healthy",
            "content": {
                "application/json": {
                    "example": {"status": "ok"}
                }
            }
        }
    }
)
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        dict: Health status with "status": "ok"
    """
    return {"status": "ok"}


@router.post(
    "/bills/validate",
    response_model=ConfigCheckResponse,
    summary="Check Configuration",
    description="Report every problem with a configuration without generating bills.",
)
async def check_bill_config(config: BillConfig) -> ConfigCheckResponse:
    return bill_service.check(config)


@router.post(
    "/bills/generate",
    response_model=GenerateResponse,
    summary="Generate Bills",
    description=(
        "Generate bill records for a configuration. The returned seed can be "
        "passed to the export endpoints to reproduce the same bills."
    ),
    responses=_ERROR_RESPONSES,
)
async def generate_bills(request: GenerateRequest) -> GenerateResponse | JSONResponse:
    try:
        return bill_service.generate(request.config, request.seed)
    except ValidationError as e:
        return _error("Invalid configuration", e.message)


def _records_response(request: GenerateRequest, fmt: Literal["csv", "json"]) -> Response:
    try:
        generated, text = bill_service.export_records(request.config, fmt, request.seed)
    except ValidationError as e:
        return _error("Invalid configuration", e.message)

    media_type = "text/csv" if fmt == "csv" else "application/json"
    return Response(
        content=text,
        media_type=media_type,
        headers={
            "Content-Disposition": f'attachment; filename="bills.{fmt}"',
            "X-Bills-Seed": str(generated.seed),
        },
    )


@router.post(
    "/bills/export/csv",
    summary="Export Bills as CSV",
    response_class=Response,
    responses={200: {"content": {"text/csv": {}}}, **_ERROR_RESPONSES},
)
async def export_csv(request: GenerateRequest) -> Response:
    return _records_response(request, "csv")


@router.post(
    "/bills/export/json",
    summary="Export Bills as JSON",
    response_class=Response,
    responses={200: {"content": {"application/json": {}}}, **_ERROR_RESPONSES},
)
async def export_json(request: GenerateRequest) -> Response:
    return _records_response(request, "json")


@router.post(
    "/templates/validate",
    response_model=TemplateValidationResponse,
    summary="Validate Template",
    description=(
        "Upload an Excel (.xlsx) template and check that the four mapped cells "
        "can be written. Returns every problem found and, when valid, a preview "
        "of each mapped cell."
    ),
    responses=_ERROR_RESPONSES,
)
async def validate_template_upload(
    file: UploadFile = File(..., description="Excel template file (.xlsx format)"),
    mapping_json: str | None = Form(default=None, description="CellMapping as JSON"),
) -> TemplateValidationResponse | JSONResponse:
    invalid = _check_xlsx_filename(file)
    if invalid is not None:
        return invalid

    try:
        mapping = CellMapping.model_validate_json(mapping_json) if mapping_json else CellMapping()
    except PydanticValidationError as e:
        return _error("Invalid cell mapping", errors=_pydantic_messages(e))

    template = await _read_upload(file)
    return bill_service.validate_template(template, mapping, filename=file.filename)


@router.post(
    "/bills/export/excel",
    summary="Export Excel Bills",
    description=(
        "Populate one copy of the uploaded template per bill and download them "
        "as a ZIP archive. Bills that fail are replaced by an error text file."
    ),
    response_class=Response,
    responses={200: {"content": {"application/zip": {}}}, **_ERROR_RESPONSES},
)
async def export_excel(
    file: UploadFile = File(..., description="Excel template file (.xlsx format)"),
    config_json: str = Form(..., description="BillConfig as JSON"),
    seed: int | None = Form(default=None),
) -> Response:
    invalid = _check_xlsx_filename(file)
    if invalid is not None:
        return invalid

    try:
        config = _parse_config(config_json)
    except PydanticValidationError as e:
        return _error("Invalid configuration", errors=_pydantic_messages(e))

    template = await _read_upload(file)
    try:
        generated, archive = bill_service.export_excel(template, config, seed)
    except WorkbookLoadError as e:
        return _error(e.message, e.detail)
    except ValidationError as e:
        return _error("Invalid configuration", e.message)

    logger.info(
        "Excel export filename=%s bills=%d failed=%d",
        file.filename,
        archive.succeeded + archive.failed,
        archive.failed,
    )
    return _zip_response(archive, "invoices_excel.zip", generated.seed)


@router.post(
    "/bills/export/pdf",
    summary="Export PDF Bills",
    description=(
        "Render one PDF per bill and download them as a ZIP archive. The "
        "'template' layout requires a template upload and falls back to the "
        "'report' layout for any bill whose template population fails."
    ),
    response_class=Response,
    responses={200: {"content": {"application/zip": {}}}, **_ERROR_RESPONSES},
)
async def export_pdf(
    config_json: str = Form(..., description="BillConfig as JSON"),
    seed: int | None = Form(default=None),
    layout: PdfLayout = Form(default=PdfLayout.REPORT),
    file: UploadFile | None = File(default=None, description="Excel template (template layout only)"),
) -> Response:
    template = None
    if file is not None and file.filename:
        invalid = _check_xlsx_filename(file)
        if invalid is not None:
            return invalid
        template = await _read_upload(file)

    if layout is PdfLayout.TEMPLATE and template is None:
        return _error("Missing template", "The template layout requires a template upload")

    try:
        config = _parse_config(config_json)
    except PydanticValidationError as e:
        return _error("Invalid configuration", errors=_pydantic_messages(e))

    try:
        generated, archive = bill_service.export_pdf(config, seed, layout=layout, template=template)
    except WorkbookLoadError as e:
        return _error(e.message, e.detail)
    except ValidationError as e:
        return _error("Invalid configuration", e.message)

    return _zip_response(archive, "invoices_pdf.zip", generated.seed)


def _presets(request: Request) -> PresetStore:
    return request.app.state.presets


@router.get("/presets", response_model=list[Preset], summary="List Presets")
async def list_presets(request: Request) -> list[Preset]:
    return _presets(request).list_presets()


@router.post(
    "/presets",
    response_model=Preset,
    status_code=201,
    summary="Save Preset",
    description="Save a user preset. Built-in preset names cannot be reused.",
    responses=_ERROR_RESPONSES,
)
async def save_preset(request: Request, body: PresetCreate) -> Preset | JSONResponse:
    try:
        return _presets(request).save(body)
    except ValidationError as e:
        return _error("Invalid preset", e.message)


@router.get(
    "/presets/{name}",
    response_model=Preset,
    summary="Get Preset",
    responses={404: {"model": ErrorResponse}},
)
async def get_preset(request: Request, name: str) -> Preset | JSONResponse:
    preset = _presets(request).get(name)
    if preset is None:
        return _error("Preset not found", f"No preset named '{name}'", status_code=404)
    return preset


@router.delete(
    "/presets/{name}",
    status_code=204,
    summary="Delete Preset",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_preset(request: Request, name: str) -> Response:
    try:
        deleted = _presets(request).delete(name)
    except ValidationError as e:
        return _error("Cannot delete preset", e.message)
    if not deleted:
        return _error("Preset not found", f"No preset named '{name}'", status_code=404)
    return Response(status_code=204)
