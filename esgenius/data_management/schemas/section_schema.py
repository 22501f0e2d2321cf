"""Schema for user-defined report sections."""

from pydantic import BaseModel, Field


class Section(BaseModel):
    """A named, single-membership grouping of reports.

    A report id appears in at most one section's ``reports`` list at a time.
    """

    id: str = Field(..., description="Section identifier, e.g. section_3f2a9c")
    name: str = Field(..., description="Display name")
    reports: list[str] = Field(default_factory=list, description="Member report ids")

    def contains(self, report_id: str) -> bool:
        return report_id in self.reports
