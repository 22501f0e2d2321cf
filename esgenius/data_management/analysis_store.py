"""Analysis result storage with score-derived classification.

Holds one AnalysisRecord per report id in a single JSON blob:

    {
        "report_id": {"confidenceScore": 60, "classification": "Major"},
        ...
    }

The stored classification is informational only. Every record handed out
by this store is rebuilt through AnalysisRecord, whose classification is
computed from confidenceScore, so legacy or hand-edited entries with a
mismatched label are corrected on read.

Design follows the other stores of this package:
- Async API guarded by one asyncio lock (at most one writer at a time,
  reset_all runs with exclusive access)
- Reads degrade to "no records" when the blob is unreadable or corrupt
- Writes raise StoreWriteError and leave the previous blob in place
"""

import asyncio
import json
from collections.abc import Iterable
from typing import Any, Dict, Optional

from loguru import logger
from pydantic import ValidationError

from esgenius.data_management.errors import StoreReadError, StoreWriteError
from esgenius.data_management.schemas import AnalysisRecord, Classification
from esgenius.data_management.storage_port import StoragePort
from esgenius.scoring.greenwashing import compute_score


class AnalysisStore:
    """
    Storage adapter for per-report analysis records.

    Usage:
        store = AnalysisStore(FileStorage("data/db"))
        record = await store.record_statements("1712345678901", analysis.flagged_statements)
        record = await store.get("1712345678901")
        records = await store.get_all()
        await store.reset_all()
    """

    ANALYSIS_RESULTS_KEY = "esg_analysis_results"

    def __init__(self, storage: StoragePort):
        """
        Initialize analysis store.

        Args:
            storage: Durable key-value storage the blob is kept in
        """
        self.storage = storage
        self._lock = asyncio.Lock()
        self.logger = logger.bind(component="AnalysisStore")

    def _decode(self, text: Optional[str]) -> Dict[str, Any]:
        """Decode the blob. Raises StoreReadError if it is not a JSON object."""
        if text is None:
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise StoreReadError(self.ANALYSIS_RESULTS_KEY, f"corrupt JSON: {e}") from e
        if not isinstance(data, dict):
            raise StoreReadError(
                self.ANALYSIS_RESULTS_KEY,
                f"expected object, found {type(data).__name__}",
            )
        return data

    def _load_for_read(self) -> Dict[str, Any]:
        try:
            return self._decode(self.storage.read(self.ANALYSIS_RESULTS_KEY))
        except StoreReadError as e:
            self.logger.warning(f"Analysis results unavailable, treating as empty: {e}")
            return {}

    def _load_for_write(self) -> Dict[str, Any]:
        """
        Load the blob before a read-modify-write.

        Corrupt content is replaced since nothing in it is recoverable. A
        storage read failure aborts the write so an unreadable store is
        never overwritten with a partial view.
        """
        try:
            text = self.storage.read(self.ANALYSIS_RESULTS_KEY)
        except StoreReadError as e:
            raise StoreWriteError(
                self.ANALYSIS_RESULTS_KEY, f"cannot update unreadable store: {e}"
            ) from e
        try:
            return self._decode(text)
        except StoreReadError as e:
            self.logger.warning(f"Discarding corrupt analysis results: {e}")
            return {}

    def _save(self, data: Dict[str, Any]) -> None:
        self.storage.write(self.ANALYSIS_RESULTS_KEY, json.dumps(data, indent=2))

    def _to_record(self, report_id: str, value: Any) -> Optional[AnalysisRecord]:
        if not isinstance(value, dict):
            self.logger.warning("Skipping malformed analysis entry", report_id=report_id)
            return None
        try:
            return AnalysisRecord.model_validate({**value, "reportId": report_id})
        except ValidationError as e:
            self.logger.warning(
                "Skipping invalid analysis entry",
                report_id=report_id,
                errors=e.error_count(),
            )
            return None

    async def upsert(self, report_id: str, score: int) -> AnalysisRecord:
        """
        Save or replace the analysis record for a report.

        Args:
            report_id: Report identifier
            score: Greenwashing score in [0, 100]

        Returns:
            The persisted AnalysisRecord

        Raises:
            ValidationError: If score is outside [0, 100]
            StoreWriteError: If the record could not be durably committed
        """
        record = AnalysisRecord(report_id=report_id, confidence_score=score)

        async with self._lock:
            data = self._load_for_write()
            is_update = report_id in data
            data[report_id] = record.to_storage()
            self._save(data)

        action = "updated" if is_update else "created"
        self.logger.info(
            f"Analysis record {action}",
            report_id=report_id,
            confidence_score=record.confidence_score,
            classification=record.classification.value,
        )
        return record

    async def record_statements(
        self,
        report_id: str,
        statements: Iterable[Any],
    ) -> AnalysisRecord:
        """
        Score a set of flagged statements and persist the result.

        Args:
            report_id: Report identifier
            statements: FlaggedStatement models or raw mappings

        Returns:
            The persisted AnalysisRecord
        """
        return await self.upsert(report_id, compute_score(statements))

    async def get(self, report_id: str) -> Optional[AnalysisRecord]:
        """
        Get the analysis record for a report.

        Args:
            report_id: Report identifier

        Returns:
            AnalysisRecord with classification recomputed from its score,
            or None if absent, invalid, or the store is unreadable
        """
        async with self._lock:
            data = self._load_for_read()

        if report_id not in data:
            return None
        return self._to_record(report_id, data[report_id])

    async def get_all(self) -> Dict[str, AnalysisRecord]:
        """
        Get every analysis record.

        Returns:
            Mapping of report id to AnalysisRecord; invalid entries are
            skipped, and an unreadable store yields an empty mapping
        """
        async with self._lock:
            data = self._load_for_read()

        records: Dict[str, AnalysisRecord] = {}
        for report_id, value in data.items():
            record = self._to_record(report_id, value)
            if record is not None:
                records[report_id] = record
        return records

    async def remove(self, report_id: str) -> bool:
        """
        Delete the analysis record for a report.

        Args:
            report_id: Report identifier

        Returns:
            True if a record was deleted, False if none existed

        Raises:
            StoreWriteError: If the deletion could not be committed
        """
        async with self._lock:
            data = self._load_for_write()
            if report_id not in data:
                return False
            del data[report_id]
            self._save(data)

        self.logger.debug("Analysis record deleted", report_id=report_id)
        return True

    async def reset_all(self) -> None:
        """
        Delete every analysis record.

        Reports themselves are untouched; they show as not yet analyzed
        until re-analyzed.

        Raises:
            StoreWriteError: If the store could not be cleared
        """
        async with self._lock:
            self.storage.delete(self.ANALYSIS_RESULTS_KEY)

        self.logger.info("All analysis results have been reset for recalculation")

    async def get_stats(self) -> Dict[str, Any]:
        """
        Get record counts by classification.

        Returns:
            Dictionary with total, major and minor counts
        """
        records = await self.get_all()
        major = sum(
            1 for r in records.values() if r.classification is Classification.MAJOR
        )
        return {
            "total_records": len(records),
            "major_count": major,
            "minor_count": len(records) - major,
        }
