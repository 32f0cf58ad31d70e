"""Drawing write operations - save, update and delete.

A save writes the content file first and the metadata index second. The two
steps are not transactional: a crash in between leaves a content file with no
metadata record, which scripts/rebuild_metadata.py repairs.
"""

import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from sketchvault.app.db.metadata_index import MetadataIndex
from sketchvault.app.drawings.constants import MAX_TITLE_LENGTH
from sketchvault.app.drawings.content import ContentStore, normalize_scene_payload
from sketchvault.app.drawings.errors import (
    DrawingNotFoundError,
    DrawingStoreError,
    InvalidIdentifierError,
    InvalidPayloadError,
)
from sketchvault.app.drawings.validation import is_valid_drawing_id, normalize_title
from sketchvault.app.models.drawings import MetadataRecord
from sketchvault.app.utils.logging import StructuredDrawingLogger
from sketchvault.app.utils.metrics import PrometheusDrawingMetrics

_metrics = PrometheusDrawingMetrics()
_log = StructuredDrawingLogger()

_ERROR_REASONS: dict[type[DrawingStoreError], str] = {
    InvalidIdentifierError: "invalid_id",
    InvalidPayloadError: "invalid_payload",
    DrawingNotFoundError: "not_found",
}


@contextmanager
def _instrumented(operation: str, drawing_id: str) -> Iterator[None]:
    """Record latency, errors and a structured log line for one operation."""
    start = time.perf_counter()
    try:
        yield
    except DrawingStoreError as e:
        latency_ms = (time.perf_counter() - start) * 1000
        reason = _ERROR_REASONS.get(type(e), "io_failure")
        _metrics.record_latency(operation, "error", latency_ms)
        _metrics.inc_error(operation, reason)
        _log.log_operation(operation, drawing_id, "error", latency_ms, error_reason=reason)
        raise

    latency_ms = (time.perf_counter() - start) * 1000
    _metrics.record_latency(operation, "success", latency_ms)
    _log.log_operation(operation, drawing_id, "success", latency_ms)


def _check_request(drawing_id: str, payload: Any, title: str | None) -> dict[str, Any]:
    """Validate ID, payload and title before any I/O."""
    if not is_valid_drawing_id(drawing_id):
        raise InvalidIdentifierError(f"Invalid drawing ID: {drawing_id!r}")

    document = normalize_scene_payload(payload)

    if title is not None and len(title.strip()) > MAX_TITLE_LENGTH:
        raise InvalidPayloadError(f"Title exceeds {MAX_TITLE_LENGTH} characters")

    return document


async def _write(
    drawing_id: str,
    document: dict[str, Any],
    title: str | None,
    content_store: ContentStore,
    metadata_index: MetadataIndex,
    now: datetime | None,
) -> MetadataRecord:
    await metadata_index.load()
    await content_store.save(drawing_id, document)

    timestamp = now or datetime.now(timezone.utc)
    safe_title = normalize_title(title, drawing_id)
    existing = metadata_index.get(drawing_id)

    if existing is not None:
        record = existing.model_copy(
            update={"title": safe_title, "updated_at": max(timestamp, existing.updated_at)}
        )
    else:
        record = MetadataRecord(
            id=drawing_id,
            title=safe_title,
            created_at=timestamp,
            updated_at=timestamp,
        )

    metadata_index.upsert(record)
    await metadata_index.persist()
    return record


async def save_drawing(
    *,
    drawing_id: str,
    payload: Any,
    title: str | None,
    content_store: ContentStore,
    metadata_index: MetadataIndex,
    now: datetime | None = None,
) -> MetadataRecord:
    """Write a drawing's content and upsert its metadata record.

    Args:
        drawing_id: Drawing ID
        payload: Scene document object or JSON string
        title: Optional title; blank falls back to 'Drawing <id prefix>'
        content_store: Content store
        metadata_index: Metadata index handle
        now: Override for the current time

    Returns:
        The resulting metadata record

    Raises:
        InvalidIdentifierError: If the ID fails validation
        InvalidPayloadError: If the payload or title is invalid
        StorageIOError: On filesystem or index failures
    """
    with _instrumented("save", drawing_id):
        document = _check_request(drawing_id, payload, title)
        return await _write(drawing_id, document, title, content_store, metadata_index, now)


async def update_drawing(
    *,
    drawing_id: str,
    payload: Any,
    title: str | None,
    content_store: ContentStore,
    metadata_index: MetadataIndex,
    now: datetime | None = None,
) -> MetadataRecord:
    """Overwrite an existing drawing.

    A title of None keeps the current title.

    Raises:
        DrawingNotFoundError: If the drawing has no content file
    """
    with _instrumented("update", drawing_id):
        document = _check_request(drawing_id, payload, title)

        if not await content_store.exists(drawing_id):
            raise DrawingNotFoundError(f"Drawing {drawing_id} not found")

        if title is None:
            await metadata_index.load()
            existing = metadata_index.get(drawing_id)
            title = existing.title if existing else None

        return await _write(drawing_id, document, title, content_store, metadata_index, now)


async def delete_drawing(
    *,
    drawing_id: str,
    content_store: ContentStore,
    metadata_index: MetadataIndex,
) -> None:
    """Delete a drawing's content file and its metadata record.

    Raises:
        InvalidIdentifierError: If the ID fails validation
        DrawingNotFoundError: If no content file exists (index untouched)
    """
    with _instrumented("delete", drawing_id):
        if not is_valid_drawing_id(drawing_id):
            raise InvalidIdentifierError(f"Invalid drawing ID: {drawing_id!r}")

        if not await content_store.exists(drawing_id):
            raise DrawingNotFoundError(f"Drawing {drawing_id} not found")

        await content_store.remove(drawing_id)

        await metadata_index.load()
        metadata_index.remove(drawing_id)
        await metadata_index.persist()
