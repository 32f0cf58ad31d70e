"""Drawing ID, title and scene envelope validation.

Drawing IDs are interpolated directly into file paths, so every component
calls is_valid_drawing_id before touching the filesystem.
"""

import re
import uuid
from typing import Any

from sketchvault.app.drawings.constants import (
    FALLBACK_TITLE_PREFIX,
    MAX_DRAWING_ID_LENGTH,
    MAX_TITLE_LENGTH,
    MIN_TITLE_LENGTH,
    SCENE_TYPE,
)

_DRAWING_ID_RE = re.compile(r"[A-Za-z0-9_-]+")
_UUID_V4_RE = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}",
    re.IGNORECASE,
)


def is_valid_drawing_id(candidate: object) -> bool:
    """Check that a drawing ID is well-formed and safe to use as a filename."""
    if not candidate or not isinstance(candidate, str):
        return False
    if ".." in candidate or "/" in candidate or "\\" in candidate:
        return False
    if len(candidate) > MAX_DRAWING_ID_LENGTH:
        return False
    return _DRAWING_ID_RE.fullmatch(candidate) is not None


def is_canonical_drawing_id(candidate: object) -> bool:
    """Check that a drawing ID is a UUID-v4 string."""
    if not isinstance(candidate, str):
        return False
    return _UUID_V4_RE.fullmatch(candidate) is not None


def new_drawing_id() -> str:
    """Mint a fresh canonical drawing ID."""
    return str(uuid.uuid4())


def is_valid_title(title: object) -> bool:
    """Title is optional; when given it must be 1-200 characters."""
    if title is None or title == "":
        return True
    if not isinstance(title, str):
        return False
    return MIN_TITLE_LENGTH <= len(title) <= MAX_TITLE_LENGTH


def is_valid_scene_document(data: Any) -> bool:
    """Check the scene envelope without interpreting element contents."""
    if not isinstance(data, dict):
        return False

    version = data.get("version")
    return (
        data.get("type") == SCENE_TYPE
        and isinstance(version, (int, float))
        and not isinstance(version, bool)
        and isinstance(data.get("elements"), list)
        and isinstance(data.get("appState"), dict)
    )


def normalize_title(title: str | None, drawing_id: str) -> str:
    """Trim a title, falling back to 'Drawing <first 8 chars of id>' when blank."""
    trimmed = title.strip() if title else ""
    return trimmed or f"{FALLBACK_TITLE_PREFIX} {drawing_id[:8]}"
