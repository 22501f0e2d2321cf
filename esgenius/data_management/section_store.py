"""Section storage with single-membership (move) semantics.

Sections are kept as one JSON list under a single key:

    [
        {"id": "section_3f2a9c1b7d4e", "name": "Suppliers", "reports": ["1712..."]},
        ...
    ]

A report belongs to at most one section. add_to_section removes the report
from every section and appends it to the target in one write, so no
intermediate state (report in two sections, or in none) is ever persisted.
"""

import asyncio
import json
import uuid
from typing import Any, List, Optional, Tuple

from loguru import logger
from pydantic import ValidationError

from esgenius.data_management.errors import (
    SectionNotFoundError,
    StoreReadError,
    StoreWriteError,
)
from esgenius.data_management.schemas import Section
from esgenius.data_management.storage_port import StoragePort


class SectionStore:
    """
    Storage adapter for user-defined report sections.

    Usage:
        store = SectionStore(FileStorage("data/db"))
        section = await store.create_section("Suppliers")
        await store.add_to_section("1712345678901", section.id)
        await store.remove_from_all_sections("1712345678901")
    """

    SECTIONS_KEY = "esg_report_sections"

    def __init__(self, storage: StoragePort):
        self.storage = storage
        self._lock = asyncio.Lock()
        self.logger = logger.bind(component="SectionStore")

    def _decode(self, text: Optional[str]) -> Tuple[List[Section], List[Any]]:
        """Decode the section list into (valid sections, raw invalid entries)."""
        if text is None:
            return [], []
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise StoreReadError(self.SECTIONS_KEY, f"corrupt JSON: {e}") from e
        if not isinstance(data, list):
            raise StoreReadError(
                self.SECTIONS_KEY, f"expected list, found {type(data).__name__}"
            )

        sections: List[Section] = []
        unparsed: List[Any] = []
        for raw in data:
            try:
                sections.append(Section.model_validate(raw))
            except ValidationError:
                self.logger.warning("Skipping invalid section entry", entry=repr(raw)[:80])
                unparsed.append(raw)
        return sections, unparsed

    def _load_for_read(self) -> List[Section]:
        try:
            sections, _ = self._decode(self.storage.read(self.SECTIONS_KEY))
        except StoreReadError as e:
            self.logger.warning(f"Sections unavailable, treating as empty: {e}")
            return []
        return sections

    def _load_for_write(self) -> Tuple[List[Section], List[Any]]:
        """
        Load sections before a read-modify-write.

        Entries that fail validation are returned raw and written back
        unchanged by _save. Undecodable JSON is replaced.
        """
        try:
            text = self.storage.read(self.SECTIONS_KEY)
        except StoreReadError as e:
            raise StoreWriteError(
                self.SECTIONS_KEY, f"cannot update unreadable store: {e}"
            ) from e
        try:
            return self._decode(text)
        except StoreReadError as e:
            self.logger.warning(f"Discarding corrupt sections: {e}")
            return [], []

    def _save(self, sections: List[Section], unparsed: List[Any]) -> None:
        payload = [s.model_dump(mode="json") for s in sections] + unparsed
        self.storage.write(self.SECTIONS_KEY, json.dumps(payload, indent=2))

    @staticmethod
    def _find(sections: List[Section], section_id: str) -> Optional[Section]:
        return next((s for s in sections if s.id == section_id), None)

    @staticmethod
    def _strip_report(sections: List[Section], report_id: str) -> bool:
        was_member = False
        for section in sections:
            if report_id in section.reports:
                was_member = True
                section.reports = [r for r in section.reports if r != report_id]
        return was_member

    async def get_sections(self) -> List[Section]:
        """Get all sections in creation order. Unreadable store yields []."""
        async with self._lock:
            return self._load_for_read()

    async def get_section(self, section_id: str) -> Optional[Section]:
        async with self._lock:
            return self._find(self._load_for_read(), section_id)

    async def get_section_for_report(self, report_id: str) -> Optional[Section]:
        """Get the section a report belongs to, if any."""
        async with self._lock:
            sections = self._load_for_read()
        return next((s for s in sections if s.contains(report_id)), None)

    async def create_section(self, name: str) -> Section:
        """
        Create an empty section.

        Args:
            name: Display name (must not be blank)

        Returns:
            The created Section

        Raises:
            ValueError: If name is blank
            StoreWriteError: If the section could not be saved
        """
        name = name.strip()
        if not name:
            raise ValueError("Section name must not be empty")

        section = Section(id=f"section_{uuid.uuid4().hex[:12]}", name=name)
        async with self._lock:
            sections, unparsed = self._load_for_write()
            sections.append(section)
            self._save(sections, unparsed)

        self.logger.info("Section created", section_id=section.id, name=name)
        return section

    async def rename_section(self, section_id: str, name: str) -> Section:
        name = name.strip()
        if not name:
            raise ValueError("Section name must not be empty")

        async with self._lock:
            sections, unparsed = self._load_for_write()
            section = self._find(sections, section_id)
            if section is None:
                raise SectionNotFoundError(section_id)
            section.name = name
            self._save(sections, unparsed)

        return section

    async def delete_section(self, section_id: str) -> bool:
        """
        Delete a section. Its member reports become unsectioned.

        Returns:
            True if deleted, False if no such section
        """
        async with self._lock:
            sections, unparsed = self._load_for_write()
            remaining = [s for s in sections if s.id != section_id]
            if len(remaining) == len(sections):
                return False
            self._save(remaining, unparsed)

        self.logger.info("Section deleted", section_id=section_id)
        return True

    async def add_to_section(self, report_id: str, section_id: str) -> Section:
        """
        Move a report into a section.

        The report is removed from every other section and appended to the
        target (once) in a single write.

        Args:
            report_id: Report identifier
            section_id: Target section identifier

        Returns:
            The updated target Section

        Raises:
            SectionNotFoundError: If the target section does not exist
            StoreWriteError: If the membership change could not be saved
        """
        async with self._lock:
            sections, unparsed = self._load_for_write()
            target = self._find(sections, section_id)
            if target is None:
                raise SectionNotFoundError(section_id)

            self._strip_report(sections, report_id)
            target.reports.append(report_id)
            self._save(sections, unparsed)

        self.logger.debug("Report moved to section", report_id=report_id, section_id=section_id)
        return target

    async def remove_from_section(self, report_id: str, section_id: str) -> bool:
        """
        Remove a report from one section.

        Returns:
            True if the report was a member, False otherwise

        Raises:
            SectionNotFoundError: If the section does not exist
        """
        async with self._lock:
            sections, unparsed = self._load_for_write()
            section = self._find(sections, section_id)
            if section is None:
                raise SectionNotFoundError(section_id)
            if report_id not in section.reports:
                return False
            section.reports = [r for r in section.reports if r != report_id]
            self._save(sections, unparsed)

        return True

    async def remove_from_all_sections(self, report_id: str) -> bool:
        """
        Remove a report from every section. Idempotent.

        Returns:
            True if the report was in any section, False if it was in none
            (in which case nothing is written)
        """
        async with self._lock:
            sections, unparsed = self._load_for_write()
            if not self._strip_report(sections, report_id):
                return False
            self._save(sections, unparsed)

        self.logger.debug("Report moved to unsectioned reports", report_id=report_id)
        return True

    async def get_memberships(self) -> dict[str, str]:
        """Map each sectioned report id to its section id."""
        memberships: dict[str, str] = {}
        for section in await self.get_sections():
            for report_id in section.reports:
                memberships.setdefault(report_id, section.id)
        return memberships
