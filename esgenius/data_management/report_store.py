"""Uploaded report storage: PDF files on disk, metadata in a flat JSON file.

Layout under the data directory:

    uploads/<millis>-<original name>.pdf
    db/pdfs.json   -> {"pdfs": [StoredReport, ...]}

Deleting a report notifies registered deletion hooks (analysis records,
section memberships) so no derived data outlives the report.
"""

import asyncio
import json
import time
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional, Tuple

from loguru import logger
from pydantic import ValidationError

from esgenius.data_management.errors import (
    ReportNotFoundError,
    StoreReadError,
    StoreWriteError,
)
from esgenius.data_management.schemas import StoredReport
from esgenius.data_management.storage_port import StoragePort


DeletionHook = Callable[[str], Awaitable[Any]]


class ReportStore:
    """
    Storage adapter for uploaded PDF reports and their metadata.

    Usage:
        store = ReportStore(FileStorage("data/db"), uploads_dir="data/uploads")
        report = await store.add_report("acme-2024.pdf", pdf_bytes, category="Energy")
        reports = await store.list_reports()
        await store.delete_report(report.id)
    """

    PDFS_KEY = "pdfs"

    def __init__(self, storage: StoragePort, uploads_dir: str | Path):
        """
        Initialize report store.

        Args:
            storage: Storage holding the metadata document
            uploads_dir: Directory the PDF files are written to
        """
        self.storage = storage
        self.uploads_dir = Path(uploads_dir)
        self._lock = asyncio.Lock()
        self._deletion_hooks: List[DeletionHook] = []
        self.logger = logger.bind(component="ReportStore")

    def register_deletion_hook(self, hook: DeletionHook) -> None:
        """Register an async callback invoked with the id of each deleted report."""
        self._deletion_hooks.append(hook)

    def _decode(self, text: Optional[str]) -> Tuple[List[StoredReport], List[Any]]:
        """
        Decode the metadata document.

        Returns:
            (valid reports, raw entries that failed validation). The raw
            entries are written back untouched on every save so their
            uploaded files never lose their metadata.
        """
        if text is None:
            return [], []
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise StoreReadError(self.PDFS_KEY, f"corrupt JSON: {e}") from e
        if not isinstance(data, dict) or not isinstance(data.get("pdfs"), list):
            raise StoreReadError(self.PDFS_KEY, "expected {\"pdfs\": [...]}")

        reports: List[StoredReport] = []
        unparsed: List[Any] = []
        for raw in data["pdfs"]:
            try:
                reports.append(StoredReport.model_validate(raw))
            except ValidationError:
                self.logger.warning("Skipping invalid report entry", entry=repr(raw)[:80])
                unparsed.append(raw)
        return reports, unparsed

    def _load_for_read(self) -> List[StoredReport]:
        try:
            reports, _ = self._decode(self.storage.read(self.PDFS_KEY))
        except StoreReadError as e:
            self.logger.error(f"Error reading report metadata: {e}")
            return []
        return reports

    def _load_for_write(self) -> Tuple[List[StoredReport], List[Any]]:
        try:
            return self._decode(self.storage.read(self.PDFS_KEY))
        except StoreReadError as e:
            raise StoreWriteError(
                self.PDFS_KEY, f"cannot update unreadable report metadata: {e}"
            ) from e

    def _save(self, reports: List[StoredReport], unparsed: List[Any]) -> None:
        payload = {"pdfs": [r.to_storage() for r in reports] + unparsed}
        self.storage.write(self.PDFS_KEY, json.dumps(payload, indent=2))

    def _next_id(self, reports: List[StoredReport], unparsed: List[Any]) -> str:
        taken = {r.id for r in reports}
        taken.update(str(raw.get("id")) for raw in unparsed if isinstance(raw, dict))
        candidate = int(time.time() * 1000)
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    def resolve_path(self, report: StoredReport) -> Path:
        """Absolute location of a report's PDF file."""
        return self.uploads_dir / Path(report.file_path).name

    async def add_report(
        self,
        file_name: str,
        content: bytes,
        title: Optional[str] = None,
        category: Optional[str] = None,
        description: Optional[str] = None,
    ) -> StoredReport:
        """
        Store an uploaded PDF and record its metadata.

        Args:
            file_name: Original file name
            content: Raw PDF bytes
            title: Display title (defaults to file name without .pdf)
            category: Category (defaults to Uncategorized)
            description: Optional description

        Returns:
            The stored report metadata

        Raises:
            ValueError: If content is empty
            StoreWriteError: If the file or metadata could not be written
        """
        if not content:
            raise ValueError("No file content uploaded")

        original_name = Path(file_name).name
        async with self._lock:
            reports, unparsed = self._load_for_write()
            report_id = self._next_id(reports, unparsed)
            stored_name = f"{report_id}-{original_name}"
            target = self.uploads_dir / stored_name

            try:
                self.uploads_dir.mkdir(parents=True, exist_ok=True)
                await asyncio.to_thread(target.write_bytes, content)
            except OSError as e:
                raise StoreWriteError("uploads", f"failed to write {target}: {e}") from e

            report = StoredReport(
                id=report_id,
                file_name=original_name,
                file_path=f"/uploads/{stored_name}",
                title=title or original_name.replace(".pdf", ""),
                category=category or "Uncategorized",
                description=description or "",
            )
            reports.append(report)
            try:
                self._save(reports, unparsed)
            except StoreWriteError:
                target.unlink(missing_ok=True)
                raise

        self.logger.info(
            "Report uploaded",
            report_id=report.id,
            file_name=original_name,
            size=len(content),
        )
        return report

    async def list_reports(self) -> List[StoredReport]:
        """All reports in upload order. Unreadable metadata yields []."""
        async with self._lock:
            return self._load_for_read()

    async def get_report(self, report_id: str) -> Optional[StoredReport]:
        async with self._lock:
            reports = self._load_for_read()
        return next((r for r in reports if r.id == report_id), None)

    async def read_pdf(self, report_id: str) -> bytes:
        """
        Read the PDF bytes of a stored report.

        Raises:
            ReportNotFoundError: If the report is unknown
            StoreReadError: If the file could not be read
        """
        report = await self.get_report(report_id)
        if report is None:
            raise ReportNotFoundError(report_id)

        path = self.resolve_path(report)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise StoreReadError("uploads", f"failed to read {path}: {e}") from e

    async def delete_report(self, report_id: str) -> bool:
        """
        Delete a report: run deletion hooks, then remove its metadata and file.

        Hooks run first so that a failing hook leaves the report listed and
        the whole deletion can be retried. Hooks must therefore be
        idempotent.

        Args:
            report_id: Report identifier

        Returns:
            True if the report existed, False otherwise

        Raises:
            StoreWriteError: If a hook's cleanup or the metadata could not be
                committed; the report is kept in that case
        """
        async with self._lock:
            reports, unparsed = self._load_for_write()
            report = next((r for r in reports if r.id == report_id), None)
            if report is None:
                return False

            for hook in self._deletion_hooks:
                try:
                    await hook(report_id)
                except Exception as e:
                    self.logger.error(
                        f"Deletion cleanup failed, report kept: {e}", report_id=report_id
                    )
                    raise

            self._save([r for r in reports if r.id != report_id], unparsed)

        try:
            await asyncio.to_thread(self.resolve_path(report).unlink, missing_ok=True)
        except OSError as e:
            self.logger.warning(f"Failed to remove uploaded file: {e}", report_id=report_id)

        self.logger.info("Report deleted", report_id=report_id)
        return True
