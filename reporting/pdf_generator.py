"""
BuildTrack - Project Report Generator

Turns a Project and its materials into a paginated PDF report.

Generation runs in two passes:
1. Layout: statistics are computed once, then each section draws onto a
   shared LayoutCursor, producing a RenderedDocument of positioned draw
   operations.
2. Finalize: once the page count is known, every page gets its footer
   ("Page X of Y"), the document is frozen and written to PDF.

Library Choice: ReportLab
- Pure Python, no browser/rendering engine required
- Deterministic output (invariant mode: same input = same PDF)
- Fine-grained control over layout via the canvas API

Output Structure (project report):
1. Cover & Summary
2. Project Details
3. Timeline (if dates are set)
4. Notes (if present)
5. Financial Analysis
6. Category Analysis
7. Detailed Materials
8. Conclusions

Every failure is terminal and typed (see reporting.errors); a partial
buffer is never returned.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence

from core.models import Material, Project
from core.statistics import compute_stats
from utils.config import Config

from .document import RenderedDocument
from .errors import (
    EmptyOutputError,
    GenerationTimeoutError,
    ProjectNotFoundError,
    ReportGenerationError,
)
from .layout import LayoutCursor, PageGeometry
from .pdf_writer import ChunkCollector, write_pdf
from .sections import (
    FORCED_PAGE_SECTIONS,
    MATERIALS_LIST_SECTIONS,
    PROJECT_REPORT_SECTIONS,
    ReportContext,
    Section,
    stamp_page_footers,
)
from .styles import get_report_styles


logger = logging.getLogger(__name__)


# =============================================================================
# Generation Job
# =============================================================================


class _JobAbandoned(ReportGenerationError):
    """Raised inside a worker whose caller has already given up."""

    default_message = "Report generation was abandoned."


class GenerationJob:
    """
    Ownership token for one in-flight generation.

    When the caller times out the job is marked abandoned; the worker stops
    at the next section or page boundary and drops its partial output.
    """

    def __init__(self, project_id: str = ""):
        self.project_id = project_id
        self._abandoned = threading.Event()

    @property
    def abandoned(self) -> bool:
        return self._abandoned.is_set()

    def abandon(self):
        self._abandoned.set()

    def checkpoint(self, *_):
        if self._abandoned.is_set():
            raise _JobAbandoned(project_id=self.project_id)


# =============================================================================
# Report Generator Class
# =============================================================================


class ReportGenerator:
    """
    Generates project report PDFs.

    Usage:
        generator = ReportGenerator()
        pdf_bytes = await generator.generate_report(project, materials)

    Each call owns its own cursor and document; one generator instance can
    serve concurrent requests.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        geometry: Optional[PageGeometry] = None,
        collector_factory: Callable[[], ChunkCollector] = ChunkCollector,
    ):
        """Initialize the report generator with styles and configuration."""
        self.config = config or Config.load()
        self.geometry = geometry or PageGeometry()
        self.styles = get_report_styles()
        self.collector_factory = collector_factory

    # -------------------------------------------------------------------------
    # Pass 1 + 2: layout
    # -------------------------------------------------------------------------

    def render(
        self,
        project: Optional[Project],
        materials: Optional[Iterable[Material]],
        generated_at: Optional[datetime] = None,
        sections: Sequence[Section] = PROJECT_REPORT_SECTIONS,
        job: Optional[GenerationJob] = None,
        title: str = "Project Report",
    ) -> RenderedDocument:
        """
        Lay out a report and stamp its footers.

        Args:
            project: Fully resolved project record.
            materials: The project's materials, in display order.
            generated_at: Timestamp printed in the report (defaults to now).
            sections: Section renderers, in document order.
            job: Optional job token checked between sections.
            title: Document title metadata.

        Returns:
            Finalized RenderedDocument.

        Raises:
            ProjectNotFoundError: If project is None.
        """
        if project is None:
            raise ProjectNotFoundError()

        ctx = self._build_context(project, materials, generated_at)
        document = RenderedDocument(
            self.geometry.width,
            self.geometry.height,
            title=f"{title} - {project.name}",
        )
        cursor = LayoutCursor(document, self.geometry)

        for section in sections:
            if job is not None:
                job.checkpoint()
            if section in FORCED_PAGE_SECTIONS:
                cursor.reset()
            drawn = section(ctx, cursor)
            logger.debug("Section %s %s", section.__name__, "drawn" if drawn else "skipped")

        stamp_page_footers(ctx, document, self.geometry)
        document.finalize()
        return document

    def render_materials_list(
        self,
        project: Optional[Project],
        materials: Optional[Iterable[Material]],
        generated_at: Optional[datetime] = None,
        job: Optional[GenerationJob] = None,
    ) -> RenderedDocument:
        """Lay out the materials list (grouped by category)."""
        return self.render(
            project,
            materials,
            generated_at=generated_at,
            sections=MATERIALS_LIST_SECTIONS,
            job=job,
            title="Materials List",
        )

    def _build_context(
        self,
        project: Project,
        materials: Optional[Iterable[Material]],
        generated_at: Optional[datetime],
    ) -> ReportContext:
        items = tuple(materials or ())
        return ReportContext(
            project=project,
            materials=items,
            stats=compute_stats(items),
            styles=self.styles,
            generated_at=generated_at or datetime.now(),
            locale=self.config.locale,
            currency=self.config.currency,
            company_name=self.config.company_name,
        )

    # -------------------------------------------------------------------------
    # Buffer collection
    # -------------------------------------------------------------------------

    def generate_to_buffer(
        self,
        project: Optional[Project],
        materials: Optional[Iterable[Material]],
        generated_at: Optional[datetime] = None,
        job: Optional[GenerationJob] = None,
    ) -> bytes:
        """Generate the project report PDF and return it as bytes."""
        document = self.render(project, materials, generated_at=generated_at, job=job)
        return self._collect(document, project, job)

    def generate_materials_list(
        self,
        project: Optional[Project],
        materials: Optional[Iterable[Material]],
        generated_at: Optional[datetime] = None,
        job: Optional[GenerationJob] = None,
    ) -> bytes:
        """Generate the materials list PDF and return it as bytes."""
        document = self.render_materials_list(project, materials, generated_at=generated_at, job=job)
        return self._collect(document, project, job)

    def _collect(
        self,
        document: RenderedDocument,
        project: Project,
        job: Optional[GenerationJob],
    ) -> bytes:
        collector = self.collector_factory()
        try:
            write_pdf(
                document,
                collector,
                author=self.config.company_name,
                subject=f"Construction project {project.id}".strip(),
                before_page=job.checkpoint if job is not None else None,
            )
        except ReportGenerationError:
            collector.discard()
            raise

        if job is not None and job.abandoned:
            collector.discard()
            raise _JobAbandoned(project_id=project.id)

        data = collector.getvalue()
        if not data:
            raise EmptyOutputError(project_id=project.id)

        logger.info(
            "Generated report for project %s: %d pages, %d bytes",
            project.id,
            document.page_count,
            len(data),
        )
        return data

    # -------------------------------------------------------------------------
    # Async API (bounded by timeout)
    # -------------------------------------------------------------------------

    async def generate_report(
        self,
        project: Optional[Project],
        materials: Optional[Iterable[Material]],
        timeout: Optional[float] = None,
        generated_at: Optional[datetime] = None,
    ) -> bytes:
        """
        Generate the project report PDF without blocking the event loop.

        Args:
            project: Fully resolved project record.
            materials: The project's complete material list.
            timeout: Seconds to wait (defaults to config.report_timeout).
            generated_at: Timestamp printed in the report.

        Returns:
            Complete PDF bytes.

        Raises:
            ProjectNotFoundError: project is None
            GenerationTimeoutError: not finished within the timeout
            StreamFailureError: writing the output failed
            EmptyOutputError: the output was empty
        """
        return await self._run_bounded(self.generate_to_buffer, project, materials,
                                       timeout, generated_at)

    async def generate_materials_list_report(
        self,
        project: Optional[Project],
        materials: Optional[Iterable[Material]],
        timeout: Optional[float] = None,
        generated_at: Optional[datetime] = None,
    ) -> bytes:
        """Async counterpart of generate_materials_list."""
        return await self._run_bounded(self.generate_materials_list, project, materials,
                                       timeout, generated_at)

    async def _run_bounded(self, build, project, materials, timeout, generated_at) -> bytes:
        if project is None:
            raise ProjectNotFoundError()

        limit = self.config.report_timeout if timeout is None else timeout
        items = list(materials or ())
        job = GenerationJob(project.id)
        logger.info("Generating report for project %s (%d materials)", project.id, len(items))

        try:
            return await asyncio.wait_for(
                asyncio.to_thread(build, project, items, generated_at, job),
                timeout=limit,
            )
        except asyncio.TimeoutError:
            job.abandon()
            logger.warning("Report for project %s timed out after %ss", project.id, limit)
            raise GenerationTimeoutError(limit, project_id=project.id) from None


# =============================================================================
# Convenience Function
# =============================================================================


async def generate_report(
    project: Optional[Project],
    materials: Optional[Iterable[Material]],
    timeout: Optional[float] = None,
) -> bytes:
    """
    Generate a project report PDF.

    This is the primary entry point for report generation.

    Example:
        from core.models import create_sample_project
        from reporting import generate_report

        project, materials = create_sample_project()
        pdf_bytes = asyncio.run(generate_report(project, materials))
    """
    generator = ReportGenerator()
    return await generator.generate_report(project, materials, timeout=timeout)
