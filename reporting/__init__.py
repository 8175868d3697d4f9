"""
Reporting module for BuildTrack.

Generates paginated PDF reports for construction projects and their
materials.

Usage:
    import asyncio
    from core.models import create_sample_project
    from reporting import generate_report

    project, materials = create_sample_project()
    pdf_bytes = asyncio.run(generate_report(project, materials))

Materials list (grouped by category):
    from reporting import ReportGenerator

    generator = ReportGenerator()
    pdf_bytes = generator.generate_materials_list(project, materials)
"""

from .document import CellOp, LineOp, Page, RectOp, RenderedDocument, TextOp
from .errors import (
    EmptyOutputError,
    GenerationTimeoutError,
    LayoutOverflowError,
    ProjectNotFoundError,
    ReportGenerationError,
    StreamFailureError,
)
from .layout import LayoutCursor, PageGeometry
from .pdf_generator import GenerationJob, ReportGenerator, generate_report
from .pdf_writer import ChunkCollector, write_pdf
from .tables import ColumnSpec, TableRenderer, TableResult, fit_text, render_table

__all__ = [
    # Generator
    "ReportGenerator",
    "GenerationJob",
    "generate_report",
    # Errors
    "ReportGenerationError",
    "ProjectNotFoundError",
    "GenerationTimeoutError",
    "StreamFailureError",
    "EmptyOutputError",
    "LayoutOverflowError",
    # Layout
    "RenderedDocument",
    "Page",
    "TextOp",
    "RectOp",
    "LineOp",
    "CellOp",
    "LayoutCursor",
    "PageGeometry",
    # Tables
    "ColumnSpec",
    "TableRenderer",
    "TableResult",
    "render_table",
    "fit_text",
    # Output
    "ChunkCollector",
    "write_pdf",
]
