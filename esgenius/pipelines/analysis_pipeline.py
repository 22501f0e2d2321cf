"""Analysis pipeline bridging stored reports to persisted greenwashing scores.

This pipeline orchestrates the report-to-record flow:
1. Read the report's PDF from ReportStore
2. Extract its text (pypdfium2 / pdfplumber)
3. Run the ESG auditor (Gemini) and score its flagged statements
4. Persist the score via AnalysisStore

It also wires report deletion to the derived stores, so deleting a report
removes its analysis record and section membership.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

from esgenius.config.settings import settings
from esgenius.data_management.analysis_store import AnalysisStore
from esgenius.data_management.errors import ReportNotFoundError
from esgenius.data_management.report_store import ReportStore
from esgenius.data_management.schemas import AnalysisRecord, GreenwashingAnalysis
from esgenius.data_management.section_store import SectionStore
from esgenius.data_management.storage_port import FileStorage
from esgenius.extraction.pdf_text import extract_pdf_text


class ReportTextUnavailableError(RuntimeError):
    """No text could be extracted from a report's PDF."""


@dataclass
class AnalysisOutcome:
    """Result of analyzing one report."""

    report_id: str
    analysis: GreenwashingAnalysis
    record: AnalysisRecord
    text_length: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "report_id": self.report_id,
            "confidence_score": self.record.confidence_score,
            "classification": self.record.classification.value,
            "flagged_count": len(self.analysis.flagged_statements),
            "major_count": self.analysis.major_count,
            "minor_count": self.analysis.minor_count,
            "text_length": self.text_length,
        }


class AnalysisPipeline:
    """
    Pipeline for analyzing stored reports and keeping derived data consistent.

    Usage:
        pipeline = AnalysisPipeline.from_data_dir("data")
        outcome = await pipeline.analyze_report("1712345678901")
        print(outcome.record.classification)

    Attributes:
        report_store: Uploaded reports and metadata
        analysis_store: Per-report score and classification
        section_store: Report sections
        auditor: ESG auditor (created lazily)
    """

    def __init__(
        self,
        report_store: ReportStore,
        analysis_store: AnalysisStore,
        section_store: SectionStore,
        auditor: Optional[Any] = None,
    ):
        """
        Initialize analysis pipeline.

        Args:
            report_store: ReportStore for PDFs and metadata
            analysis_store: AnalysisStore for scores
            section_store: SectionStore for memberships
            auditor: Object exposing analyze(text) -> GreenwashingAnalysis.
                Auto-creates an ESGAuditor if None.
        """
        self.report_store = report_store
        self.analysis_store = analysis_store
        self.section_store = section_store
        self._auditor = auditor

        self.logger = logger.bind(component="AnalysisPipeline")

        self.report_store.register_deletion_hook(self.analysis_store.remove)
        self.report_store.register_deletion_hook(self.section_store.remove_from_all_sections)

    @classmethod
    def from_data_dir(
        cls,
        data_dir: Optional[str | Path] = None,
        auditor: Optional[Any] = None,
    ) -> "AnalysisPipeline":
        """Build a pipeline over the file-backed stores in a data directory."""
        if data_dir is None:
            db_dir, uploads_dir = settings.db_dir, settings.uploads_dir
        else:
            db_dir, uploads_dir = Path(data_dir) / "db", Path(data_dir) / "uploads"

        storage = FileStorage(db_dir)
        return cls(
            report_store=ReportStore(storage, uploads_dir=uploads_dir),
            analysis_store=AnalysisStore(storage),
            section_store=SectionStore(storage),
            auditor=auditor,
        )

    @property
    def auditor(self):
        """Lazy-load ESGAuditor on first access."""
        if self._auditor is None:
            from esgenius.analysis.auditor import ESGAuditor
            self._auditor = ESGAuditor()
        return self._auditor

    async def extract_report_text(self, report_id: str) -> str:
        """
        Extract the text of a stored report.

        Raises:
            ReportNotFoundError: If the report is unknown
            ReportTextUnavailableError: If no text could be extracted
        """
        pdf_bytes = await self.report_store.read_pdf(report_id)
        result = await asyncio.to_thread(extract_pdf_text, pdf_bytes)
        if not result.success:
            raise ReportTextUnavailableError(
                f"Could not extract text from report {report_id}: {result.error}"
            )
        return result.text

    async def analyze_text(self, report_id: str, text: str) -> AnalysisOutcome:
        """
        Analyze report text and persist the resulting score.

        Args:
            report_id: Report the text belongs to
            text: Report text

        Returns:
            AnalysisOutcome holding the analysis and the persisted record

        Raises:
            StoreWriteError: If the record could not be saved; nothing is
                reported as analyzed in that case
        """
        analysis = await asyncio.to_thread(self.auditor.analyze, text)
        record = await self.analysis_store.record_statements(
            report_id, analysis.flagged_statements
        )

        outcome = AnalysisOutcome(
            report_id=report_id,
            analysis=analysis,
            record=record,
            text_length=len(text),
        )
        self.logger.info("Report analysis saved", **outcome.to_dict())
        return outcome

    async def analyze_report(self, report_id: str) -> AnalysisOutcome:
        """
        Extract, analyze and score a stored report.

        Raises:
            ReportNotFoundError: If the report is unknown
            ReportTextUnavailableError: If the PDF has no extractable text
            StoreWriteError: If the record could not be saved
        """
        if await self.report_store.get_report(report_id) is None:
            raise ReportNotFoundError(report_id)

        text = await self.extract_report_text(report_id)
        return await self.analyze_text(report_id, text)

    async def delete_report(self, report_id: str) -> bool:
        """Delete a report together with its analysis record and section membership."""
        return await self.report_store.delete_report(report_id)

    async def reset_analyses(self) -> None:
        """Drop every analysis record; reports show as not analyzed until re-run."""
        await self.analysis_store.reset_all()
