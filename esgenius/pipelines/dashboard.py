"""Dashboard view: groups reports into sections and classification buckets.

Reports that belong to a user section are shown only in that section.
Every other report lands in exactly one bucket:
- major: has an analysis record classified Major
- minor: has an analysis record classified Minor
- not_analyzed: has no analysis record

Buckets are decided from reconciled AnalysisRecords only, so the
classification shown always agrees with the displayed score.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from esgenius.data_management.analysis_store import AnalysisStore
from esgenius.data_management.report_store import ReportStore
from esgenius.data_management.schemas import (
    AnalysisRecord,
    Classification,
    Section,
    StoredReport,
)
from esgenius.data_management.section_store import SectionStore


@dataclass
class ReportCard:
    """One report as shown on the dashboard."""

    report: StoredReport
    record: Optional[AnalysisRecord] = None
    section_id: Optional[str] = None

    @property
    def id(self) -> str:
        return self.report.id

    @property
    def classification(self) -> Optional[Classification]:
        return self.record.classification if self.record else None

    @property
    def confidence_score(self) -> Optional[int]:
        return self.record.confidence_score if self.record else None


@dataclass
class SectionView:
    section: Section
    cards: List[ReportCard] = field(default_factory=list)


@dataclass
class DashboardView:
    """Grouped report cards for display."""

    sections: List[SectionView] = field(default_factory=list)
    major: List[ReportCard] = field(default_factory=list)
    minor: List[ReportCard] = field(default_factory=list)
    not_analyzed: List[ReportCard] = field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        return {
            "sections": sum(len(s.cards) for s in self.sections),
            "major": len(self.major),
            "minor": len(self.minor),
            "not_analyzed": len(self.not_analyzed),
        }


def build_dashboard(
    reports: Sequence[StoredReport],
    analyses: Mapping[str, AnalysisRecord],
    sections: Sequence[Section],
) -> DashboardView:
    """
    Group reports for the dashboard.

    Args:
        reports: All stored reports
        analyses: Analysis records keyed by report id
        sections: User sections

    Returns:
        DashboardView; section member ids with no matching report are skipped
    """
    membership: Dict[str, str] = {}
    for section in sections:
        for report_id in section.reports:
            membership.setdefault(report_id, section.id)

    view = DashboardView(sections=[SectionView(section=s) for s in sections])
    by_section = {sv.section.id: sv for sv in view.sections}

    for report in reports:
        card = ReportCard(
            report=report,
            record=analyses.get(report.id),
            section_id=membership.get(report.id),
        )
        if card.section_id is not None:
            by_section[card.section_id].cards.append(card)
        elif card.record is None:
            view.not_analyzed.append(card)
        elif card.classification is Classification.MAJOR:
            view.major.append(card)
        else:
            view.minor.append(card)

    return view


async def load_dashboard(
    report_store: ReportStore,
    analysis_store: AnalysisStore,
    section_store: SectionStore,
) -> DashboardView:
    """Read all three stores and build the dashboard view."""
    reports = await report_store.list_reports()
    analyses = await analysis_store.get_all()
    sections = await section_store.get_sections()
    return build_dashboard(reports, analyses, sections)
