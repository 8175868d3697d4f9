"""
FastAPI application for BuildTrack project reports.

The persistence layer resolves a project and its materials, then posts
them here; the response is the finished PDF.

Production deployment configuration via environment variables.
"""

import logging
import os
import re
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from core.statistics import compute_stats
from reporting.errors import (
    EmptyOutputError,
    GenerationTimeoutError,
    ProjectNotFoundError,
    ReportGenerationError,
    StreamFailureError,
)
from reporting.pdf_generator import ReportGenerator
from utils.config import Config
from web.schemas import ReportRequest


logger = logging.getLogger(__name__)

# =============================================================================
# Environment Configuration
# =============================================================================

# Production mode detection
IS_PRODUCTION = os.getenv("PRODUCTION", "").lower() == "true"

# CORS configuration - only explicitly listed origins
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "").split(",") if os.getenv("ALLOWED_ORIGINS") else []
if not ALLOWED_ORIGINS and not IS_PRODUCTION:
    # Development fallback only
    ALLOWED_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]

# Error type -> HTTP status
ERROR_STATUS = (
    (ProjectNotFoundError, 404),
    (GenerationTimeoutError, 503),
    (StreamFailureError, 503),
    (EmptyOutputError, 500),
)


def error_status(error: ReportGenerationError) -> int:
    for error_type, status in ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 500


def safe_filename(value: str) -> str:
    """Keep only filename-safe characters of a project id."""
    cleaned = re.sub(r"[^A-Za-z0-9_.-]+", "_", value or "").strip("._")
    return cleaned or "project"


def pdf_response(data: bytes, filename: str) -> Response:
    return Response(
        content=data,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename={filename}",
            "Access-Control-Expose-Headers": "Content-Disposition",
        },
    )


def error_response(error: ReportGenerationError) -> JSONResponse:
    status = error_status(error)
    if status >= 500:
        logger.error("Report generation failed for project %s: %s", error.project_id, error)
    return JSONResponse(
        {
            "success": False,
            "message": str(error),
            "retryable": error.retryable,
        },
        status_code=status,
    )


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or Config.load()
    generator = ReportGenerator(config)

    app = FastAPI(
        title="BuildTrack Reports",
        description="PDF report generation for construction projects",
        version="0.1.0",
        # Production settings: disable docs/redoc for private deployment
        docs_url=None if IS_PRODUCTION else "/docs",
        redoc_url=None if IS_PRODUCTION else "/redoc",
        openapi_url=None if IS_PRODUCTION else "/openapi.json",
        debug=config.debug and not IS_PRODUCTION,
    )

    # Health checks are registered first; no dependencies, no IO.
    @app.get("/health", include_in_schema=False)
    def health():
        return {"status": "healthy"}

    if ALLOWED_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=ALLOWED_ORIGINS,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
            expose_headers=["Content-Disposition"],
        )

    @app.post("/api/projects/report")
    async def project_report(request_data: ReportRequest):
        """
        Generate the full project report PDF.

        Returns:
            - the PDF as an attachment
            - JSON error with 404 (no project), 503 (retryable) or 500
        """
        project, materials = request_data.to_records()
        try:
            data = await generator.generate_report(project, materials)
        except ReportGenerationError as e:
            return error_response(e)
        return pdf_response(data, f"project_report_{safe_filename(project.id)}.pdf")

    @app.post("/api/projects/materials-report")
    async def materials_report(request_data: ReportRequest):
        """Generate the materials list PDF (grouped by category)."""
        project, materials = request_data.to_records()
        try:
            data = await generator.generate_materials_list_report(project, materials)
        except ReportGenerationError as e:
            return error_response(e)
        return pdf_response(data, f"materials_list_{safe_filename(project.id)}.pdf")

    @app.post("/api/projects/stats")
    async def project_stats(request_data: ReportRequest):
        """Return the summary statistics used by the report, as JSON."""
        project, materials = request_data.to_records()
        if project is None:
            return error_response(ProjectNotFoundError())

        stats = compute_stats(materials)
        status = project.budget_status(stats.total)
        return {
            "project_id": project.id,
            "stats": stats.to_dict(),
            "budget": None if status is None else {
                "status": status.status,
                "difference": status.difference,
                "percentage": status.percentage,
            },
        }

    return app


# Create app instance for uvicorn
app = create_app()
