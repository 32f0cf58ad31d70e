"""Typed settings configuration - single source of truth."""

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Storage
    drawings_dir: Path = Field(
        ...,
        description="Directory holding drawing files and metadata.json (DRAWINGS_DIR)",
    )
    drawing_extension: str = ".excalidraw"
    metadata_filename: str = "metadata.json"

    # Shareable links
    host: str = "127.0.0.1"
    port: int = 9876

    # Listing
    default_page_size: int = 12
    max_page_size: int = 100

    # Logging
    log_level: str = "INFO"

    @field_validator("drawings_dir", mode="before")
    @classmethod
    def _resolve_drawings_dir(cls, value: object) -> Path:
        """Expand env vars and resolve relative paths against the working directory."""
        raw = str(value).strip() if value is not None else ""
        if not raw:
            raise ValueError(
                "DRAWINGS_DIR is set but empty. "
                "Set DRAWINGS_DIR to a directory path in your .env file, e.g. DRAWINGS_DIR=./drawings"
            )

        path = Path(os.path.expandvars(raw)).expanduser()
        if not path.is_absolute():
            path = Path.cwd() / path
        return path.resolve()

    @property
    def metadata_path(self) -> Path:
        """Location of the shared metadata index document."""
        return self.drawings_dir / self.metadata_filename


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
