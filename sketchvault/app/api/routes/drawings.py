"""Drawing endpoints - list, create, read, update and delete under /api/drawings."""

import logging
from typing import Annotated, Any, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, field_validator

from sketchvault.app.api.dependencies import (
    get_app_settings,
    get_content_store,
    get_metadata_index,
)
from sketchvault.app.config import Settings
from sketchvault.app.db.metadata_index import MetadataIndex
from sketchvault.app.drawings.constants import ErrorMessages
from sketchvault.app.drawings.content import ContentStore
from sketchvault.app.drawings.errors import (
    DrawingNotFoundError,
    DrawingStoreError,
    InvalidIdentifierError,
    InvalidPayloadError,
)
from sketchvault.app.drawings.links import generate_markdown_link, generate_url
from sketchvault.app.drawings.operations import delete_drawing, save_drawing, update_drawing
from sketchvault.app.drawings.validation import (
    is_valid_drawing_id,
    is_valid_scene_document,
    is_valid_title,
    new_drawing_id,
)
from sketchvault.app.models.drawings import DrawingPage, DrawingSummary, MetadataRecord

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/drawings", tags=["drawings"])


class DrawingRequest(BaseModel):
    """Request body for POST /api/drawings and PUT /api/drawings/{id}."""

    drawing: dict[str, Any] = Field(..., description="Scene document envelope")
    title: str | None = Field(None, description="Optional title, 1-200 characters")

    @field_validator("drawing")
    @classmethod
    def _check_envelope(cls, value: dict[str, Any]) -> dict[str, Any]:
        if not is_valid_scene_document(value):
            raise ValueError(ErrorMessages.INVALID_DRAWING_DATA)
        return value

    @field_validator("title")
    @classmethod
    def _check_title(cls, value: str | None) -> str | None:
        if not is_valid_title(value):
            raise ValueError(ErrorMessages.INVALID_TITLE)
        return value


class DrawingListResponse(DrawingPage):
    """Response for GET /api/drawings."""

    drawings: list[DrawingSummary]  # type: ignore[assignment]


class SaveDrawingResponse(BaseModel):
    """Response for POST and PUT."""

    drawing_id: str
    url: str
    markdown_link: str
    metadata: MetadataRecord


class GetDrawingResponse(BaseModel):
    """Response for GET /api/drawings/{id}."""

    drawing_id: str
    drawing: dict[str, Any]
    metadata: MetadataRecord | None
    url: str


class DeleteDrawingResponse(BaseModel):
    """Response for DELETE /api/drawings/{id}."""

    message: str


def _raise_http(error: DrawingStoreError) -> NoReturn:
    """Translate a store error into an HTTP error response."""
    if isinstance(error, InvalidIdentifierError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=ErrorMessages.INVALID_DRAWING_ID
        ) from error
    if isinstance(error, InvalidPayloadError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=ErrorMessages.INVALID_DRAWING_DATA
        ) from error
    if isinstance(error, DrawingNotFoundError):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=ErrorMessages.DRAWING_NOT_FOUND
        ) from error

    logger.error("Drawing store failure: %s", error, exc_info=error)
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=ErrorMessages.INTERNAL_ERROR
    ) from error


def _require_valid_id(drawing_id: str) -> None:
    if not is_valid_drawing_id(drawing_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=ErrorMessages.INVALID_DRAWING_ID
        )


def _save_response(record: MetadataRecord, settings: Settings) -> SaveDrawingResponse:
    return SaveDrawingResponse(
        drawing_id=record.id,
        url=generate_url(record.id, settings.host, settings.port),
        markdown_link=generate_markdown_link(record.title, record.id, settings.host, settings.port),
        metadata=record,
    )


@router.get("", response_model=DrawingListResponse)
async def list_drawings(
    settings: Annotated[Settings, Depends(get_app_settings)],
    metadata_index: Annotated[MetadataIndex, Depends(get_metadata_index)],
    page: Annotated[int, Query()] = 1,
    limit: Annotated[int | None, Query()] = None,
    search: Annotated[str | None, Query(max_length=200)] = None,
) -> DrawingListResponse:
    """List drawings, most recently updated first.

    Args:
        settings: App settings (page size, link host/port)
        metadata_index: Metadata index handle
        page: 1-based page number
        limit: Page size (clamped to 1-100)
        search: Case-insensitive title filter

    Returns:
        Page of drawings with shareable links
    """
    effective_limit = min(limit or settings.default_page_size, settings.max_page_size)

    try:
        await metadata_index.load()
    except DrawingStoreError as e:
        _raise_http(e)

    result = metadata_index.query(page=page, limit=effective_limit, search=search)

    summaries = [
        DrawingSummary(
            **record.model_dump(),
            url=generate_url(record.id, settings.host, settings.port),
            markdown_link=generate_markdown_link(
                record.title, record.id, settings.host, settings.port
            ),
        )
        for record in result.drawings
    ]

    return DrawingListResponse(
        drawings=summaries,
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
    )


@router.post("", response_model=SaveDrawingResponse, status_code=status.HTTP_201_CREATED)
async def create_drawing(
    request: DrawingRequest,
    settings: Annotated[Settings, Depends(get_app_settings)],
    content_store: Annotated[ContentStore, Depends(get_content_store)],
    metadata_index: Annotated[MetadataIndex, Depends(get_metadata_index)],
) -> SaveDrawingResponse:
    """Create a new drawing under a fresh UUID-v4."""
    drawing_id = new_drawing_id()

    try:
        record = await save_drawing(
            drawing_id=drawing_id,
            payload=request.drawing,
            title=request.title,
            content_store=content_store,
            metadata_index=metadata_index,
        )
    except DrawingStoreError as e:
        _raise_http(e)

    return _save_response(record, settings)


@router.get("/{drawing_id}", response_model=GetDrawingResponse)
async def get_drawing(
    drawing_id: str,
    settings: Annotated[Settings, Depends(get_app_settings)],
    content_store: Annotated[ContentStore, Depends(get_content_store)],
    metadata_index: Annotated[MetadataIndex, Depends(get_metadata_index)],
) -> GetDrawingResponse:
    """Return a drawing's scene document and metadata."""
    _require_valid_id(drawing_id)

    try:
        drawing = await content_store.load(drawing_id)
        if drawing is None:
            raise DrawingNotFoundError(f"Drawing {drawing_id} not found")

        await metadata_index.load()
    except DrawingStoreError as e:
        _raise_http(e)

    return GetDrawingResponse(
        drawing_id=drawing_id,
        drawing=drawing,
        metadata=metadata_index.get(drawing_id),
        url=generate_url(drawing_id, settings.host, settings.port),
    )


@router.put("/{drawing_id}", response_model=SaveDrawingResponse)
async def put_drawing(
    drawing_id: str,
    request: DrawingRequest,
    settings: Annotated[Settings, Depends(get_app_settings)],
    content_store: Annotated[ContentStore, Depends(get_content_store)],
    metadata_index: Annotated[MetadataIndex, Depends(get_metadata_index)],
) -> SaveDrawingResponse:
    """Overwrite an existing drawing; an omitted title keeps the current one."""
    _require_valid_id(drawing_id)

    try:
        record = await update_drawing(
            drawing_id=drawing_id,
            payload=request.drawing,
            title=request.title,
            content_store=content_store,
            metadata_index=metadata_index,
        )
    except DrawingStoreError as e:
        _raise_http(e)

    return _save_response(record, settings)


@router.delete("/{drawing_id}", response_model=DeleteDrawingResponse)
async def remove_drawing(
    drawing_id: str,
    content_store: Annotated[ContentStore, Depends(get_content_store)],
    metadata_index: Annotated[MetadataIndex, Depends(get_metadata_index)],
) -> DeleteDrawingResponse:
    """Delete a drawing file and its metadata record."""
    _require_valid_id(drawing_id)

    try:
        await delete_drawing(
            drawing_id=drawing_id,
            content_store=content_store,
            metadata_index=metadata_index,
        )
    except DrawingStoreError as e:
        _raise_http(e)

    return DeleteDrawingResponse(message=ErrorMessages.DELETED)
