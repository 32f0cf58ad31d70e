"""Models package - re-exports for convenience."""

from sketchvault.app.models.drawings import (
    DrawingPage,
    DrawingSummary,
    IndexDocument,
    MetadataRecord,
)

__all__ = [
    "DrawingPage",
    "DrawingSummary",
    "IndexDocument",
    "MetadataRecord",
]
