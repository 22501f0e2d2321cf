"""Tests for analysis and report schemas.

Tests cover:
- AnalysisRecord classification derived from score
- Alias handling and storage shape
- GreenwashingAnalysis computed fields and counts
- StoredReport serialization
"""

import pytest
from pydantic import ValidationError

from esgenius.data_management.schemas import (
    AnalysisRecord,
    Classification,
    FlaggedStatement,
    GreenwashingAnalysis,
    RiskLevel,
    Section,
    StoredReport,
)


class TestAnalysisRecord:
    """Tests for AnalysisRecord."""

    def test_classification_from_score(self):
        assert AnalysisRecord(report_id="r1", confidence_score=56).classification is Classification.MAJOR
        assert AnalysisRecord(report_id="r1", confidence_score=55).classification is Classification.MINOR

    def test_stored_classification_ignored(self):
        record = AnalysisRecord.model_validate(
            {"reportId": "r1", "confidenceScore": 60, "classification": "Minor"}
        )
        assert record.classification is Classification.MAJOR

    def test_score_bounds(self):
        with pytest.raises(ValidationError):
            AnalysisRecord(report_id="r1", confidence_score=101)
        with pytest.raises(ValidationError):
            AnalysisRecord(report_id="r1", confidence_score=-1)

    def test_to_storage(self):
        record = AnalysisRecord(report_id="r1", confidence_score=85)
        assert record.to_storage() == {"confidenceScore": 85, "classification": "Major"}

    def test_dump_includes_classification(self):
        dumped = AnalysisRecord(report_id="r1", confidence_score=15).model_dump()
        assert dumped["classification"] is Classification.MINOR


class TestGreenwashingAnalysis:
    """Tests for GreenwashingAnalysis."""

    def test_empty(self):
        analysis = GreenwashingAnalysis()
        assert analysis.confidence_score == 0
        assert analysis.classification is Classification.MINOR

    def test_computed_from_statements(self):
        analysis = GreenwashingAnalysis(
            flagged_statements=[
                FlaggedStatement(statement="net zero by 2030", risk_level=RiskLevel.MAJOR),
                FlaggedStatement(statement="eco-friendly", risk_level=RiskLevel.MINOR),
                FlaggedStatement(statement="??", risk_level=None),
            ]
        )
        assert analysis.confidence_score == 30
        assert analysis.major_count == 1
        assert analysis.minor_count == 1

    def test_json_roundtrip_ignores_computed_fields(self):
        analysis = GreenwashingAnalysis(
            flagged_statements=[FlaggedStatement(risk_level=RiskLevel.MAJOR)] * 4
        )
        payload = analysis.model_dump_json()
        restored = GreenwashingAnalysis.model_validate_json(payload)
        assert restored.confidence_score == 70
        assert restored.classification is Classification.MAJOR


class TestStoredReport:
    """Tests for StoredReport and Section."""

    def test_to_storage_uses_aliases(self):
        report = StoredReport(
            id="1700000000000",
            file_name="1700000000000-report.pdf",
            file_path="/uploads/1700000000000-report.pdf",
            title="report",
        )
        stored = report.to_storage()
        assert stored["fileName"] == "1700000000000-report.pdf"
        assert stored["category"] == "Uncategorized"
        assert "uploadDate" in stored

        assert StoredReport.model_validate(stored).file_name == report.file_name

    def test_section_contains(self):
        section = Section(id="section_1", name="Banks", reports=["a"])
        assert section.contains("a")
        assert not section.contains("b")
