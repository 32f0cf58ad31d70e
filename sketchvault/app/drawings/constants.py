"""Shared constants for drawings - titles, scene envelope, user-facing messages."""

MIN_TITLE_LENGTH = 1
MAX_TITLE_LENGTH = 200

MAX_DRAWING_ID_LENGTH = 100

DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 100

SCENE_TYPE = "excalidraw"
SCENE_VERSION = 2
SCENE_SOURCE = "https://excalidraw.com"

FALLBACK_TITLE_PREFIX = "Drawing"
IMPORTED_TITLE_PREFIX = "imported-"


class ErrorMessages:
    """User-facing error strings returned by the API."""

    DRAWING_NOT_FOUND = "Drawing not found"
    INVALID_DRAWING_ID = "Invalid drawing ID"
    INVALID_TITLE = "Invalid title. Title must be 1-200 characters."
    INVALID_DRAWING_DATA = "Invalid drawing data format"
    INTERNAL_ERROR = "Internal server error"
    DELETED = "Drawing deleted"
