"""Error types for the drawing store."""


class DrawingStoreError(Exception):
    """Base class for drawing store failures."""

    pass


class InvalidIdentifierError(DrawingStoreError):
    """Drawing ID is malformed or unsafe to use as a filename."""

    pass


class InvalidPayloadError(DrawingStoreError):
    """Scene payload is not valid JSON or fails the envelope check."""

    pass


class DrawingNotFoundError(DrawingStoreError):
    """No content file exists for the drawing ID."""

    pass


class StorageIOError(DrawingStoreError):
    """Unexpected filesystem or parse failure."""

    pass
