"""Error types raised by the storage layer.

Read failures (StoreReadError) are recovered inside the stores' read paths
by substituting an empty result. Write failures (StoreWriteError) always
propagate to the caller: a write that raised was not committed.
"""


class StoreError(Exception):
    """Base class for storage failures."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"{key}: {message}")


class StoreReadError(StoreError):
    """Stored value for a key could not be read or decoded."""


class StoreWriteError(StoreError):
    """A value could not be durably committed."""


class SectionNotFoundError(KeyError):
    """No section exists with the requested id."""

    def __init__(self, section_id: str):
        self.section_id = section_id
        super().__init__(section_id)

    def __str__(self) -> str:
        return f"Section not found: {self.section_id}"


class ReportNotFoundError(KeyError):
    """No report exists with the requested id."""

    def __init__(self, report_id: str):
        self.report_id = report_id
        super().__init__(report_id)

    def __str__(self) -> str:
        return f"Report not found: {self.report_id}"
