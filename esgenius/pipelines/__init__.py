"""Pipeline modules wiring stores, extraction and analysis together.

Pipelines handle:
- Component initialization and wiring
- Report deletion cascading into derived stores
- Grouping stored data for display
"""

from esgenius.pipelines.analysis_pipeline import (
    AnalysisOutcome,
    AnalysisPipeline,
    ReportTextUnavailableError,
)
from esgenius.pipelines.dashboard import DashboardView, build_dashboard, load_dashboard

__all__ = [
    "AnalysisOutcome",
    "AnalysisPipeline",
    "ReportTextUnavailableError",
    "DashboardView",
    "build_dashboard",
    "load_dashboard",
]
