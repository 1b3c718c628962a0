"""Bill Generator - FastAPI Application Entry Point.

This module creates and configures the FastAPI application instance,
sets up logging and CORS middleware, and includes the API routes.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from billgen.api.routes import router
from billgen.core.config import settings
from billgen.core.models import ErrorResponse
from billgen.generator.presets import PresetStore


def create_app(presets: PresetStore | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        presets: Preset store for this app instance. A fresh store seeded
            with the built-in presets is used if not provided.

    Returns:
        Configured FastAPI application instance.
    """
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Bill Generator",
        description=(
            "REST API that synthesizes sequential invoices over a date range, "
            "populates them into an Excel template and exports them as Excel, "
            "PDF, CSV or JSON."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.presets = presets or PresetStore()

    # Configure CORS middleware (allow all origins for development)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Bills-Succeeded", "X-Bills-Failed", "X-Bills-Seed"],
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(  # type: ignore[misc]
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        missing_fields: list[str] = []
        problems: list[str] = []
        for err in exc.errors():
            loc = err.get("loc") or ()
            if err.get("type") == "missing" and loc:
                missing_fields.append(str(loc[-1]))
            location = ".".join(str(part) for part in loc if part != "body")
            problems.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))

        detail = "Request body validation failed"
        if missing_fields:
            detail = f"Missing required field: {', '.join(missing_fields)}"

        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                error="Validation error",
                detail=detail,
                errors=problems or None,
            ).model_dump(),
        )

    # Include API routes
    app.include_router(router)

    return app


# Create the application instance
app = create_app()
