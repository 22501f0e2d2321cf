"""Schemas for greenwashing analysis output and persisted analysis records.

Two shapes live here:
- GreenwashingAnalysis: the full, validated result of one model run over a
  report (flagged statements, frameworks, report profile) with the score
  and classification recomputed locally.
- AnalysisRecord: the small per-report record the dashboard reads
  (confidence score + classification).

Classification is never stored as an independent fact. On both shapes it
is a computed field of the score, so a record can not disagree with its
own score no matter where its input came from.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from esgenius.scoring.greenwashing import (
    Classification,
    RiskLevel,
    classify_score,
    compute_score,
)


class EsgCategory(str, Enum):
    """ESG pillar a flagged statement belongs to. Informational only."""

    ENVIRONMENTAL = "Environmental"
    SOCIAL = "Social"
    GOVERNANCE = "Governance"
    OTHER = "Other"


class FlaggedStatement(BaseModel):
    """A quoted report excerpt the upstream classifier judged questionable.

    risk_level is None when the model supplied a missing or unrecognized
    level; such statements are kept for display but do not count towards
    the score.
    """

    statement: str = Field("", description="Exact quote from the report text")
    esg_category: EsgCategory = Field(
        EsgCategory.OTHER, description="Environmental, Social, Governance or Other"
    )
    reason: str = Field("", description="Model rationale for flagging")
    risk_level: Optional[RiskLevel] = Field(
        None, description="Major or Minor; None if unrecognized"
    )


class ReportProfile(BaseModel):
    """Report-level metadata the model extracts from the text."""

    company_name: str = ""
    reporting_year: str = ""
    country_or_region: str = ""
    report_type: str = ""


class GreenwashingAnalysis(BaseModel):
    """Validated result of one ESG analysis run.

    confidence_score and classification are derived from flagged_statements;
    any values the model proposed for them are discarded at intake.

    Usage:
        analysis = GreenwashingAnalysis(
            flagged_statements=[FlaggedStatement(statement="...", risk_level=RiskLevel.MAJOR)]
        )
        analysis.confidence_score  # 25
    """

    report_metadata: ReportProfile = Field(default_factory=ReportProfile)
    frameworks_claimed: list[str] = Field(default_factory=list)
    other_frameworks: list[str] = Field(default_factory=list)
    flagged_statements: list[FlaggedStatement] = Field(default_factory=list)

    @computed_field
    @property
    def confidence_score(self) -> int:
        return compute_score(self.flagged_statements)

    @computed_field
    @property
    def classification(self) -> Classification:
        return classify_score(self.confidence_score)

    @property
    def major_count(self) -> int:
        return sum(1 for s in self.flagged_statements if s.risk_level is RiskLevel.MAJOR)

    @property
    def minor_count(self) -> int:
        return sum(1 for s in self.flagged_statements if s.risk_level is RiskLevel.MINOR)


class AnalysisRecord(BaseModel):
    """Persisted per-report analysis result.

    Stored as ``{"confidenceScore": int, "classification": "Major"|"Minor"}``
    keyed by report id. A stored classification is ignored on load and
    recomputed from the score.
    """

    report_id: str = Field(..., alias="reportId", description="Report identifier")
    confidence_score: int = Field(
        ..., ge=0, le=100, alias="confidenceScore", description="Greenwashing score"
    )

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }

    @computed_field
    @property
    def classification(self) -> Classification:
        return classify_score(self.confidence_score)

    def to_storage(self) -> dict:
        """Serialize to the stored value shape (report id is the key, not a field)."""
        return {
            "confidenceScore": self.confidence_score,
            "classification": self.classification.value,
        }
