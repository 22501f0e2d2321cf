"""Schema for uploaded report metadata kept in the flat-file report store."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class StoredReport(BaseModel):
    """Metadata for one uploaded PDF report.

    Serialized with camelCase keys (``fileName``, ``filePath``,
    ``uploadDate``) to stay compatible with existing ``pdfs.json`` files.
    """

    id: str = Field(..., description="Report identifier (upload time in millis)")
    file_name: str = Field(..., alias="fileName", description="Original file name")
    file_path: str = Field(
        ..., alias="filePath", description="Path of the stored file under uploads/"
    )
    title: str = Field(..., description="Display title")
    category: str = Field("Uncategorized", description="Free-form category")
    description: str = Field("", description="Optional description")
    upload_date: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        alias="uploadDate",
    )
    sources: int = Field(1, ge=0, description="Number of source documents")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }

    def to_storage(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
