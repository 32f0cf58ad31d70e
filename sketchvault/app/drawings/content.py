"""Content store - one scene document file per drawing ID."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from sketchvault.app.drawings.errors import (
    DrawingNotFoundError,
    InvalidIdentifierError,
    InvalidPayloadError,
    StorageIOError,
)
from sketchvault.app.drawings.validation import is_valid_drawing_id, is_valid_scene_document

logger = logging.getLogger(__name__)


def normalize_scene_payload(payload: Any) -> dict[str, Any]:
    """Parse a raw scene payload and check its envelope.

    Args:
        payload: Either a decoded object or a JSON string

    Returns:
        The scene document as a dict

    Raises:
        InvalidPayloadError: If the payload is not JSON, not an object,
            or fails the envelope check
    """
    parsed = payload
    if isinstance(payload, (str, bytes)):
        try:
            parsed = json.loads(payload)
        except ValueError as e:
            raise InvalidPayloadError("Drawing data is not valid JSON") from e

    if not isinstance(parsed, dict):
        raise InvalidPayloadError("Drawing data must be an object")

    if not is_valid_scene_document(parsed):
        raise InvalidPayloadError("Drawing data does not match the scene envelope")

    return parsed


class ContentStore:
    """Reads and writes scene documents under a single content root."""

    def __init__(self, root: Path, extension: str = ".excalidraw") -> None:
        """Initialize content store.

        Args:
            root: Content root directory
            extension: Filename extension for drawing files
        """
        self.root = root
        self.extension = extension

    def path_for(self, drawing_id: str) -> Path:
        """Derive the content file path for a drawing ID.

        Raises:
            InvalidIdentifierError: If the ID fails validation
        """
        if not is_valid_drawing_id(drawing_id):
            raise InvalidIdentifierError(f"Invalid drawing ID: {drawing_id!r}")
        return self.root / f"{drawing_id}{self.extension}"

    async def exists(self, drawing_id: str) -> bool:
        """Check whether a content file exists for the ID."""
        if not is_valid_drawing_id(drawing_id):
            return False
        return await asyncio.to_thread(self.path_for(drawing_id).is_file)

    async def load(self, drawing_id: str) -> dict[str, Any] | None:
        """Load a scene document.

        Returns:
            Parsed document, or None if the ID is invalid or the file is missing

        Raises:
            StorageIOError: On unreadable or unparsable content
        """
        if not is_valid_drawing_id(drawing_id):
            return None

        path = self.path_for(drawing_id)
        try:
            raw = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error("Error loading drawing %s: %s", drawing_id, e)
            raise StorageIOError(f"Could not read drawing {drawing_id}") from e

        try:
            document: dict[str, Any] = json.loads(raw)
        except ValueError as e:
            logger.error("Drawing %s is not valid JSON: %s", drawing_id, e)
            raise StorageIOError(f"Drawing {drawing_id} is corrupt") from e

        return document

    async def save(self, drawing_id: str, document: Any) -> dict[str, Any]:
        """Validate and write a scene document, overwriting any existing file.

        Args:
            drawing_id: Drawing ID
            document: Scene document object or JSON string

        Returns:
            The normalized document that was written

        Raises:
            InvalidIdentifierError: If the ID fails validation
            InvalidPayloadError: If the document fails the envelope check
            StorageIOError: If the write fails
        """
        path = self.path_for(drawing_id)
        normalized = normalize_scene_payload(document)
        text = json.dumps(normalized, indent=2, ensure_ascii=False)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            raise StorageIOError(f"Could not write drawing {drawing_id}") from e

        return normalized

    async def remove(self, drawing_id: str) -> None:
        """Delete a drawing's content file.

        Raises:
            InvalidIdentifierError: If the ID fails validation
            DrawingNotFoundError: If no content file exists
            StorageIOError: On any other filesystem failure
        """
        path = self.path_for(drawing_id)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError as e:
            raise DrawingNotFoundError(f"Drawing {drawing_id} not found") from e
        except OSError as e:
            raise StorageIOError(f"Could not delete drawing {drawing_id}") from e
