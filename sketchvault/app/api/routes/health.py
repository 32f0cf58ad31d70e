"""Health check endpoints.

- /health always answers while the process is up
- /healthz checks the content root and the metadata index document
"""

import asyncio
import json
import os
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Response

from sketchvault.app.api.dependencies import get_app_settings
from sketchvault.app.config import Settings
from sketchvault.app.db.metadata_index import read_index_document
from sketchvault.app.drawings.errors import StorageIOError

router = APIRouter()


async def check_content_root(settings: Settings) -> tuple[bool, str]:
    """Check that the drawings directory exists and is writable.

    Returns:
        (is_ok, status_message)
    """
    root = settings.drawings_dir
    exists = await asyncio.to_thread(root.is_dir)
    if not exists:
        return (False, "error: missing")
    writable = await asyncio.to_thread(os.access, root, os.W_OK)
    if not writable:
        return (False, "error: not_writable")
    return (True, "ok")


async def check_metadata_index(settings: Settings) -> tuple[bool, str]:
    """Check that the metadata index parses.

    Returns:
        (is_ok, status_message)
    """
    try:
        records = await asyncio.to_thread(read_index_document, settings.metadata_path)
    except StorageIOError as e:
        return (False, f"error: {type(e.__cause__ or e).__name__}")

    if records is None:
        return (True, "not_initialized")
    return (True, "ok")


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple liveness check.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz(
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> dict[str, Any] | Response:
    """Readiness check.

    Returns:
        200 with component status if storage is usable
        503 if the content root or index is broken
    """
    root_ok, root_status = await check_content_root(settings)
    index_ok, index_status = await check_metadata_index(settings)

    response_body = {
        "status": "ok" if root_ok and index_ok else "degraded",
        "components": {
            "content_root": root_status,
            "metadata_index": index_status,
        },
    }

    if not (root_ok and index_ok):
        return Response(
            content=json.dumps(response_body),
            status_code=503,
            media_type="application/json",
        )

    return response_body
