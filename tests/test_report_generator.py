"""
Tests for the Document Assembler

Tests covering:
1. Missing project -> ProjectNotFoundError
2. Empty material list -> valid PDF with placeholder
3. Deterministic output for the same input
4. Timeout -> GenerationTimeoutError, worker abandoned
5. Stream failure and empty output are typed errors
"""

import asyncio
import time
from datetime import datetime

import pytest

from core.models import create_sample_project
from reporting import generate_report
from reporting.errors import (
    EmptyOutputError,
    GenerationTimeoutError,
    ProjectNotFoundError,
    ReportGenerationError,
    StreamFailureError,
)
from reporting.pdf_generator import GenerationJob, ReportGenerator
from reporting.pdf_writer import ChunkCollector, write_pdf
from reporting.document import RenderedDocument
from reporting.sections import NO_MATERIALS_MESSAGE
from utils.config import Config


GENERATED_AT = datetime(2024, 6, 10, 8, 0)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def config():
    return Config(report_timeout=10, locale="fr-FR", currency="MRU")


@pytest.fixture
def generator(config):
    return ReportGenerator(config)


@pytest.fixture
def sample():
    return create_sample_project()


class DiscardingCollector(ChunkCollector):
    """Accepts writes but keeps nothing."""

    def write(self, data) -> int:
        return len(data)


class BrokenCollector(ChunkCollector):
    """Fails like a full disk."""

    def write(self, data) -> int:
        raise OSError(28, "No space left on device")


# =============================================================================
# Tests
# =============================================================================


class TestProjectNotFound:
    """A missing project is rejected before any work."""

    def test_async_api(self, generator):
        with pytest.raises(ProjectNotFoundError):
            asyncio.run(generator.generate_report(None, []))

    def test_module_level_function(self):
        with pytest.raises(ProjectNotFoundError):
            asyncio.run(generate_report(None, []))

    def test_sync_api(self, generator):
        with pytest.raises(ProjectNotFoundError):
            generator.generate_to_buffer(None, [])

    def test_not_retryable(self):
        assert ProjectNotFoundError.retryable is False
        assert GenerationTimeoutError.retryable is True
        assert StreamFailureError.retryable is True


class TestOutput:
    """Successful generation."""

    def test_returns_pdf_bytes(self, generator, sample):
        project, materials = sample
        data = asyncio.run(generator.generate_report(project, materials))
        assert data.startswith(b"%PDF")
        assert data.rstrip().endswith(b"%%EOF")

    def test_empty_materials_is_not_an_error(self, generator, sample):
        project, _ = sample
        data = asyncio.run(generator.generate_report(project, []))
        assert data.startswith(b"%PDF")
        assert NO_MATERIALS_MESSAGE in generator.render(project, []).texts()

    def test_none_materials_treated_as_empty(self, generator, sample):
        project, _ = sample
        assert generator.generate_to_buffer(project, None).startswith(b"%PDF")

    def test_same_input_same_bytes(self, generator, sample):
        project, materials = sample
        first = generator.generate_to_buffer(project, materials, generated_at=GENERATED_AT)
        second = generator.generate_to_buffer(project, materials, generated_at=GENERATED_AT)
        assert first == second

    def test_same_input_same_layout(self, generator, sample):
        project, materials = sample
        first = generator.render(project, materials, generated_at=GENERATED_AT)
        second = generator.render(project, materials, generated_at=GENERATED_AT)
        assert first.texts() == second.texts()
        assert first.page_count == second.page_count

    def test_inputs_not_mutated(self, generator, sample):
        project, materials = sample
        snapshot = [m.to_dict() for m in materials]
        generator.generate_to_buffer(project, materials)
        assert [m.to_dict() for m in materials] == snapshot

    def test_materials_list(self, generator, sample):
        project, materials = sample
        data = asyncio.run(generator.generate_materials_list_report(project, materials))
        assert data.startswith(b"%PDF")

    def test_page_count_in_footer(self, generator, sample):
        project, materials = sample
        document = generator.render(project, materials, generated_at=GENERATED_AT)
        assert document.is_finalized
        assert f"Page 1 of {document.page_count}" in document.pages[0].texts()


class TestTimeout:
    """Bounded generation."""

    def test_timeout_raises_and_abandons_worker(self, generator, sample):
        project, materials = sample
        seen = {}

        def slow_build(project, materials, generated_at=None, job=None):
            seen["job"] = job
            while not job.abandoned:
                time.sleep(0.01)
            job.checkpoint()

        generator.generate_to_buffer = slow_build
        with pytest.raises(GenerationTimeoutError) as exc_info:
            asyncio.run(generator.generate_report(project, materials, timeout=0.05))

        assert exc_info.value.timeout == 0.05
        assert exc_info.value.project_id == project.id
        assert seen["job"].abandoned

    def test_default_timeout_from_config(self, config):
        assert config.report_timeout == 10
        assert Config().report_timeout == 30

    def test_abandoned_job_stops_render(self, generator, sample):
        project, materials = sample
        job = GenerationJob(project.id)
        job.abandon()
        with pytest.raises(ReportGenerationError):
            generator.generate_to_buffer(project, materials, job=job)


class TestStreamErrors:
    """Output failures are typed and never return partial data."""

    def test_write_failure_is_stream_failure(self, config, sample):
        project, materials = sample
        generator = ReportGenerator(config, collector_factory=BrokenCollector)
        with pytest.raises(StreamFailureError):
            asyncio.run(generator.generate_report(project, materials))

    def test_size_cap_is_stream_failure(self, config, sample):
        project, materials = sample
        generator = ReportGenerator(config, collector_factory=lambda: ChunkCollector(max_bytes=64))
        with pytest.raises(StreamFailureError):
            generator.generate_to_buffer(project, materials)

    def test_zero_bytes_is_empty_output(self, config, sample):
        project, materials = sample
        generator = ReportGenerator(config, collector_factory=DiscardingCollector)
        with pytest.raises(EmptyOutputError):
            asyncio.run(generator.generate_report(project, materials))

    def test_writer_requires_finalized_document(self):
        with pytest.raises(RuntimeError):
            write_pdf(RenderedDocument(100, 100), ChunkCollector())


class TestChunkCollector:
    """Buffered chunk collection."""

    def test_concatenates_chunks(self):
        collector = ChunkCollector()
        collector.write(b"%PDF")
        collector.write(b"-1.4")
        assert collector.getvalue() == b"%PDF-1.4"
        assert collector.size == 8

    def test_discard(self):
        collector = ChunkCollector()
        collector.write(b"abc")
        collector.discard()
        assert collector.getvalue() == b""
