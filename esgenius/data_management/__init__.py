"""Data management package for ESGenius.

Provides storage adapters and schemas for:
- Analysis records (AnalysisRecord) - per-report score and classification
- Sections (Section) - single-membership report groupings
- Reports (StoredReport) - uploaded PDF metadata

Storage adapters:
- AnalysisStore: score-derived classification records
- SectionStore: section lifecycle and move-semantics membership
- ReportStore: uploaded files plus flat-file metadata, with deletion hooks

All adapters persist through a StoragePort (MemoryStorage or FileStorage).
"""

from esgenius.data_management.analysis_store import AnalysisStore
from esgenius.data_management.report_store import ReportStore
from esgenius.data_management.section_store import SectionStore
from esgenius.data_management.storage_port import FileStorage, MemoryStorage, StoragePort

__all__ = [
    "AnalysisStore",
    "ReportStore",
    "SectionStore",
    "FileStorage",
    "MemoryStorage",
    "StoragePort",
]
