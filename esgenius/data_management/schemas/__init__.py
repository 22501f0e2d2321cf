"""Schema package for report, analysis and section data structures.

Primary exports:
- GreenwashingAnalysis: validated result of one model run over a report
- AnalysisRecord: persisted per-report score and classification
- Section: user-defined single-membership report grouping
- StoredReport: uploaded PDF metadata

Usage:
    from esgenius.data_management.schemas import AnalysisRecord
    record = AnalysisRecord(report_id="1712345678901", confidence_score=60)
    record.classification  # Classification.MAJOR
"""

from esgenius.data_management.schemas.analysis_schema import (
    AnalysisRecord,
    EsgCategory,
    FlaggedStatement,
    GreenwashingAnalysis,
    ReportProfile,
)
from esgenius.data_management.schemas.report_schema import StoredReport
from esgenius.data_management.schemas.section_schema import Section
from esgenius.scoring.greenwashing import Classification, RiskLevel

__all__ = [
    # Analysis
    "AnalysisRecord",
    "Classification",
    "EsgCategory",
    "FlaggedStatement",
    "GreenwashingAnalysis",
    "ReportProfile",
    "RiskLevel",
    # Reports
    "StoredReport",
    # Sections
    "Section",
]
