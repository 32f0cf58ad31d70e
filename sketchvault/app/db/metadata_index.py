"""JSON-backed metadata index - one record per drawing in a shared document.

The on-disk form is {"drawings": [MetadataRecord, ...]}. In memory the records
live in an insertion-ordered dict keyed by drawing ID. Each write path reloads
the document, modifies it and persists it in full; there is no locking, so
overlapping writers are last-write-wins.
"""

import asyncio
import json
import logging
import math
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from sketchvault.app.drawings.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from sketchvault.app.drawings.errors import StorageIOError
from sketchvault.app.models.drawings import DrawingPage, IndexDocument, MetadataRecord

logger = logging.getLogger(__name__)


def read_index_document(path: Path) -> list[MetadataRecord] | None:
    """Read and strictly validate an index document.

    Returns:
        Records in storage order, or None if the file does not exist

    Raises:
        StorageIOError: If the file is unreadable, malformed, or has duplicate IDs
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as e:
        raise StorageIOError(f"Could not read metadata index {path}") from e

    try:
        document = IndexDocument.model_validate_json(raw)
    except ValidationError as e:
        raise StorageIOError(f"Metadata index {path} is corrupt: {e.error_count()} error(s)") from e

    seen: set[str] = set()
    for record in document.drawings:
        if record.id in seen:
            raise StorageIOError(
                f"Metadata index {path} has duplicate entries for {record.id}; "
                "run the rebuild-metadata script to repair it"
            )
        seen.add(record.id)

    return document.drawings


def write_index_document(path: Path, records: list[MetadataRecord]) -> None:
    """Overwrite the index document with the given records.

    Writes to a temp file in the same directory and renames it into place.
    """
    document = IndexDocument(drawings=records)
    text = json.dumps(document.model_dump(mode="json"), indent=2, ensure_ascii=False)

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class MetadataIndex:
    """Long-lived handle on the metadata index document."""

    def __init__(self, path: Path) -> None:
        """Initialize metadata index.

        Args:
            path: Location of metadata.json
        """
        self.path = path
        self._records: dict[str, MetadataRecord] = {}

    async def load(self) -> None:
        """Read the index from disk, creating an empty one if absent.

        Raises:
            StorageIOError: If the document is unreadable or corrupt
        """
        records = await asyncio.to_thread(read_index_document, self.path)

        if records is None:
            logger.info("Metadata index not found, initializing %s", self.path)
            self._records = {}
            await self.persist()
            return

        self._records = {record.id: record for record in records}

    def get(self, drawing_id: str) -> MetadataRecord | None:
        """Get the record for a drawing ID."""
        return self._records.get(drawing_id)

    def upsert(self, record: MetadataRecord) -> None:
        """Replace the record in place, or append it if new."""
        self._records[record.id] = record

    def remove(self, drawing_id: str) -> bool:
        """Remove the record for a drawing ID.

        Returns:
            True if a record was removed
        """
        return self._records.pop(drawing_id, None) is not None

    def records(self) -> list[MetadataRecord]:
        """Snapshot of all records in storage order."""
        return list(self._records.values())

    def query(
        self,
        page: int | None = 1,
        limit: int | None = DEFAULT_PAGE_SIZE,
        search: str | None = None,
    ) -> DrawingPage:
        """Sort, filter and paginate records.

        Records are sorted by updated_at descending, ties keeping storage
        order. A non-blank search keeps titles containing it case-insensitively.

        Args:
            page: 1-based page number, clamped to >= 1
            limit: Page size, clamped to [1, 100]
            search: Optional title substring

        Returns:
            Page slice with total (post-filter), page, limit and total_pages
        """
        page = max(1, page or 1)
        limit = min(MAX_PAGE_SIZE, max(1, limit or DEFAULT_PAGE_SIZE))

        drawings = sorted(self._records.values(), key=lambda r: r.updated_at, reverse=True)

        term = search.strip().lower() if search else ""
        if term:
            drawings = [d for d in drawings if term in d.title.lower()]

        total = len(drawings)
        start = (page - 1) * limit

        return DrawingPage(
            drawings=drawings[start : start + limit],
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
        )

    async def persist(self) -> None:
        """Write the in-memory records back to disk in full."""
        try:
            await asyncio.to_thread(write_index_document, self.path, self.records())
        except OSError as e:
            raise StorageIOError(f"Could not write metadata index {self.path}") from e
