"""Drawing domain models - metadata records, index document, listing pages."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MetadataRecord(BaseModel):
    """Per-drawing metadata stored in the shared index."""

    id: str
    title: str
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Legacy entries may lack an offset
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class IndexDocument(BaseModel):
    """On-disk shape of metadata.json."""

    drawings: list[MetadataRecord] = Field(default_factory=list)


class DrawingSummary(MetadataRecord):
    """Metadata record with shareable links attached."""

    url: str
    markdown_link: str


class DrawingPage(BaseModel):
    """One page of a metadata index query."""

    model_config = ConfigDict(populate_by_name=True)

    drawings: list[MetadataRecord]
    total: int
    page: int
    limit: int
    total_pages: int = Field(..., serialization_alias="totalPages")
