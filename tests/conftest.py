"""Shared pytest fixtures for all test suites."""

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from sketchvault.app.config import Settings
from sketchvault.app.db.metadata_index import MetadataIndex
from sketchvault.app.drawings.content import ContentStore
from sketchvault.app.main import create_app


def make_scene(**overrides: Any) -> dict[str, Any]:
    """Build a minimal valid scene document."""
    scene: dict[str, Any] = {
        "type": "excalidraw",
        "version": 2,
        "source": "https://excalidraw.com",
        "elements": [{"id": "rect-1", "type": "rectangle", "x": 10, "y": 20}],
        "appState": {"viewBackgroundColor": "#ffffff"},
    }
    scene.update(overrides)
    return scene


@pytest.fixture
def scene() -> dict[str, Any]:
    """A valid scene document."""
    return make_scene()


@pytest.fixture
def scene_factory() -> Callable[..., dict[str, Any]]:
    """Factory for scene documents with overridden keys."""
    return make_scene


@pytest.fixture
def drawings_dir(tmp_path: Path) -> Path:
    """Content root that does not exist yet."""
    return tmp_path / "drawings"


@pytest.fixture
def settings(drawings_dir: Path) -> Settings:
    """Settings pointing at the temporary content root."""
    return Settings(drawings_dir=drawings_dir, host="localhost", port=9876)


@pytest.fixture
def content_store(settings: Settings) -> ContentStore:
    """Content store over the temporary content root."""
    return ContentStore(settings.drawings_dir, extension=settings.drawing_extension)


@pytest.fixture
def metadata_index(settings: Settings) -> MetadataIndex:
    """Metadata index handle over the temporary content root."""
    return MetadataIndex(settings.metadata_path)


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    """Test client with the app lifespan running."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client
