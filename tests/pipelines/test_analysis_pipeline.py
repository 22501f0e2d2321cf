"""Tests for AnalysisPipeline and the dashboard view.

Tests cover:
- Report analysis end to end with a mocked auditor and extractor
- Deletion cascading into analysis records and section memberships
- Reset keeping reports but dropping scores
- Dashboard grouping by section and classification
"""

from unittest.mock import MagicMock, patch

import pytest

from esgenius.data_management.analysis_store import AnalysisStore
from esgenius.data_management.errors import ReportNotFoundError, StoreWriteError
from esgenius.data_management.report_store import ReportStore
from esgenius.data_management.schemas import (
    AnalysisRecord,
    Classification,
    FlaggedStatement,
    GreenwashingAnalysis,
    RiskLevel,
    Section,
    StoredReport,
)
from esgenius.data_management.section_store import SectionStore
from esgenius.data_management.storage_port import MemoryStorage
from esgenius.extraction.pdf_text import PdfExtractionResult
from esgenius.pipelines import analysis_pipeline
from esgenius.pipelines.analysis_pipeline import AnalysisPipeline, ReportTextUnavailableError
from esgenius.pipelines.dashboard import build_dashboard, load_dashboard

PDF_BYTES = b"%PDF-1.4 fake"


def _analysis(*levels: RiskLevel) -> GreenwashingAnalysis:
    return GreenwashingAnalysis(
        flagged_statements=[
            FlaggedStatement(statement=f"claim {i}", risk_level=level)
            for i, level in enumerate(levels)
        ]
    )


def _report(report_id: str) -> StoredReport:
    return StoredReport(
        id=report_id,
        file_name=f"{report_id}.pdf",
        file_path=f"/uploads/{report_id}.pdf",
        title=report_id,
    )


# ── Fixtures ──────────────────────────────────────────────────────────────


@pytest.fixture
def auditor():
    auditor = MagicMock()
    auditor.analyze.return_value = _analysis(*[RiskLevel.MAJOR] * 5)
    return auditor


@pytest.fixture
def pipeline(tmp_path, auditor) -> AnalysisPipeline:
    storage = MemoryStorage()
    return AnalysisPipeline(
        report_store=ReportStore(storage, uploads_dir=tmp_path / "uploads"),
        analysis_store=AnalysisStore(storage),
        section_store=SectionStore(storage),
        auditor=auditor,
    )


@pytest.fixture
def extracted_text():
    result = PdfExtractionResult(
        success=True, text="Page 1:\nAcme sustainability report", page_count=1, extractor="pypdfium2"
    )
    with patch.object(analysis_pipeline, "extract_pdf_text", return_value=result) as mock:
        yield mock


class TestAnalyzeReport:
    """Analysis flow."""

    @pytest.mark.asyncio
    async def test_analyze_persists_record(self, pipeline, auditor, extracted_text):
        report = await pipeline.report_store.add_report("acme.pdf", PDF_BYTES)

        outcome = await pipeline.analyze_report(report.id)

        assert outcome.record.confidence_score == 85
        assert outcome.record.classification is Classification.MAJOR
        auditor.analyze.assert_called_once_with("Page 1:\nAcme sustainability report")
        extracted_text.assert_called_once_with(PDF_BYTES)

        stored = await pipeline.analysis_store.get(report.id)
        assert stored.confidence_score == 85
        assert outcome.to_dict()["major_count"] == 5

    @pytest.mark.asyncio
    async def test_unknown_report(self, pipeline, auditor):
        with pytest.raises(ReportNotFoundError):
            await pipeline.analyze_report("missing")
        auditor.analyze.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_text(self, pipeline, auditor):
        report = await pipeline.report_store.add_report("scan.pdf", PDF_BYTES)
        empty = PdfExtractionResult(success=False, error="No extractable text found in PDF")
        with patch.object(analysis_pipeline, "extract_pdf_text", return_value=empty):
            with pytest.raises(ReportTextUnavailableError):
                await pipeline.analyze_report(report.id)
        assert await pipeline.analysis_store.get(report.id) is None

    @pytest.mark.asyncio
    async def test_failed_save_not_reported(self, tmp_path, auditor, extracted_text):
        class FailingAnalysisStorage(MemoryStorage):
            def write(self, key, value):
                if key == AnalysisStore.ANALYSIS_RESULTS_KEY:
                    raise StoreWriteError(key, "disk full")
                super().write(key, value)

        storage = FailingAnalysisStorage()
        pipeline = AnalysisPipeline(
            ReportStore(storage, uploads_dir=tmp_path),
            AnalysisStore(storage),
            SectionStore(storage),
            auditor=auditor,
        )
        report = await pipeline.report_store.add_report("acme.pdf", PDF_BYTES)

        with pytest.raises(StoreWriteError):
            await pipeline.analyze_report(report.id)
        assert await pipeline.analysis_store.get_all() == {}


class TestDeletionAndReset:
    """Derived data follows the reports."""

    @pytest.mark.asyncio
    async def test_delete_cascades(self, pipeline, extracted_text):
        report = await pipeline.report_store.add_report("acme.pdf", PDF_BYTES)
        keep = await pipeline.report_store.add_report("other.pdf", PDF_BYTES)
        section = await pipeline.section_store.create_section("Energy")
        await pipeline.section_store.add_to_section(report.id, section.id)
        await pipeline.section_store.add_to_section(keep.id, section.id)
        await pipeline.analyze_report(report.id)

        assert await pipeline.delete_report(report.id) is True

        assert await pipeline.analysis_store.get(report.id) is None
        assert (await pipeline.section_store.get_section(section.id)).reports == [keep.id]
        assert [r.id for r in await pipeline.report_store.list_reports()] == [keep.id]

    @pytest.mark.asyncio
    async def test_delete_unsectioned_unanalyzed(self, pipeline):
        report = await pipeline.report_store.add_report("acme.pdf", PDF_BYTES)
        assert await pipeline.delete_report(report.id) is True
        assert await pipeline.delete_report(report.id) is False

    @pytest.mark.asyncio
    async def test_failed_cascade_keeps_report_and_retries(
        self, tmp_path, auditor, extracted_text
    ):
        class FlakySectionStorage(MemoryStorage):
            failing = False

            def write(self, key, value):
                if self.failing and key == SectionStore.SECTIONS_KEY:
                    raise StoreWriteError(key, "disk full")
                super().write(key, value)

        storage = FlakySectionStorage()
        pipeline = AnalysisPipeline(
            ReportStore(storage, uploads_dir=tmp_path / "uploads"),
            AnalysisStore(storage),
            SectionStore(storage),
            auditor=auditor,
        )
        report = await pipeline.report_store.add_report("acme.pdf", PDF_BYTES)
        section = await pipeline.section_store.create_section("Energy")
        await pipeline.section_store.add_to_section(report.id, section.id)
        await pipeline.analyze_report(report.id)

        storage.failing = True
        with pytest.raises(StoreWriteError):
            await pipeline.delete_report(report.id)

        # Analysis cleanup ran, membership cleanup failed: report stays listed
        assert await pipeline.analysis_store.get(report.id) is None
        assert (await pipeline.section_store.get_section_for_report(report.id)).id == section.id
        assert await pipeline.report_store.get_report(report.id) is not None
        assert pipeline.report_store.resolve_path(report).exists()

        storage.failing = False
        assert await pipeline.delete_report(report.id) is True

        assert await pipeline.section_store.get_section_for_report(report.id) is None
        assert await pipeline.report_store.get_report(report.id) is None
        assert not pipeline.report_store.resolve_path(report).exists()

    @pytest.mark.asyncio
    async def test_reset_keeps_reports(self, pipeline, extracted_text):
        report = await pipeline.report_store.add_report("acme.pdf", PDF_BYTES)
        await pipeline.analyze_report(report.id)

        await pipeline.reset_analyses()

        assert await pipeline.analysis_store.get_all() == {}
        assert await pipeline.report_store.get_report(report.id) is not None

    def test_from_data_dir(self, tmp_path):
        pipeline = AnalysisPipeline.from_data_dir(tmp_path)
        assert pipeline.report_store.uploads_dir == tmp_path / "uploads"
        assert pipeline.analysis_store.storage.directory == tmp_path / "db"


class TestDashboard:
    """Grouping for display."""

    def test_build_dashboard(self):
        reports = [_report(r) for r in ("a", "b", "c", "d")]
        analyses = {
            "a": AnalysisRecord(report_id="a", confidence_score=85),
            "b": AnalysisRecord(report_id="b", confidence_score=15),
            "d": AnalysisRecord(report_id="d", confidence_score=85),
        }
        sections = [Section(id="section_1", name="Watchlist", reports=["d", "ghost"])]

        view = build_dashboard(reports, analyses, sections)

        assert [c.id for c in view.major] == ["a"]
        assert [c.id for c in view.minor] == ["b"]
        assert [c.id for c in view.not_analyzed] == ["c"]
        assert [c.id for c in view.sections[0].cards] == ["d"]
        assert view.sections[0].cards[0].classification is Classification.MAJOR
        assert view.counts() == {"sections": 1, "major": 1, "minor": 1, "not_analyzed": 1}

    def test_boundary_score_is_minor(self):
        view = build_dashboard(
            [_report("a")],
            {"a": AnalysisRecord(report_id="a", confidence_score=55)},
            [],
        )
        assert [c.id for c in view.minor] == ["a"]

    @pytest.mark.asyncio
    async def test_load_dashboard(self, pipeline, extracted_text):
        analyzed = await pipeline.report_store.add_report("acme.pdf", PDF_BYTES)
        pending = await pipeline.report_store.add_report("other.pdf", PDF_BYTES)
        await pipeline.analyze_report(analyzed.id)

        view = await load_dashboard(
            pipeline.report_store, pipeline.analysis_store, pipeline.section_store
        )
        assert [c.id for c in view.major] == [analyzed.id]
        assert [c.id for c in view.not_analyzed] == [pending.id]
        assert view.major[0].confidence_score == 85
