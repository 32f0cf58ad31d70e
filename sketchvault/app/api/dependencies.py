"""Request dependencies - handles built once at startup and kept on app.state."""

from fastapi import Request

from sketchvault.app.config import Settings
from sketchvault.app.db.metadata_index import MetadataIndex
from sketchvault.app.drawings.content import ContentStore


def get_app_settings(request: Request) -> Settings:
    """Settings the app was started with."""
    settings: Settings = request.app.state.settings
    return settings


def get_content_store(request: Request) -> ContentStore:
    """Shared content store."""
    store: ContentStore = request.app.state.content_store
    return store


def get_metadata_index(request: Request) -> MetadataIndex:
    """Shared metadata index handle."""
    index: MetadataIndex = request.app.state.metadata_index
    return index
