"""Integration tests for /api/drawings routes."""

import json
from collections.abc import Callable
from datetime import datetime
from typing import Any

from fastapi.testclient import TestClient

from sketchvault.app.config import Settings
from sketchvault.app.drawings.validation import is_canonical_drawing_id


def create(client: TestClient, drawing: dict[str, Any], title: str | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"drawing": drawing}
    if title is not None:
        payload["title"] = title
    response = client.post("/api/drawings", json=payload)
    assert response.status_code == 201, response.text
    data: dict[str, Any] = response.json()
    return data


class TestCreateDrawing:
    """Test POST /api/drawings."""

    def test_create_returns_201_with_links(
        self, client: TestClient, scene: dict[str, Any]
    ) -> None:
        data = create(client, scene, title="Architecture")

        drawing_id = data["drawing_id"]
        assert is_canonical_drawing_id(drawing_id)
        assert data["url"] == f"http://localhost:9876/drawing/{drawing_id}"
        assert data["markdown_link"] == f"[Architecture]({data['url']})"
        assert data["metadata"]["id"] == drawing_id
        assert data["metadata"]["title"] == "Architecture"
        assert data["metadata"]["created_at"] == data["metadata"]["updated_at"]

    def test_create_writes_content_file(
        self, client: TestClient, settings: Settings, scene: dict[str, Any]
    ) -> None:
        data = create(client, scene)

        path = settings.drawings_dir / f"{data['drawing_id']}.excalidraw"
        assert json.loads(path.read_text()) == scene

    def test_create_without_title_uses_fallback(
        self, client: TestClient, scene: dict[str, Any]
    ) -> None:
        data = create(client, scene)

        assert data["metadata"]["title"] == f"Drawing {data['drawing_id'][:8]}"

    def test_invalid_envelope_returns_422(self, client: TestClient) -> None:
        response = client.post(
            "/api/drawings", json={"drawing": {"type": "svg", "version": 1}}
        )

        assert response.status_code == 422

    def test_missing_drawing_returns_422(self, client: TestClient) -> None:
        response = client.post("/api/drawings", json={"title": "No drawing"})

        assert response.status_code == 422

    def test_overlong_title_returns_422(
        self, client: TestClient, scene: dict[str, Any]
    ) -> None:
        response = client.post("/api/drawings", json={"drawing": scene, "title": "x" * 201})

        assert response.status_code == 422


class TestListDrawings:
    """Test GET /api/drawings."""

    def test_empty_list(self, client: TestClient) -> None:
        response = client.get("/api/drawings")

        assert response.status_code == 200
        data = response.json()
        assert data["drawings"] == []
        assert data["total"] == 0
        assert data["totalPages"] == 0
        assert data["page"] == 1
        assert data["limit"] == 12

    def test_list_is_newest_first_with_links(
        self, client: TestClient, scene: dict[str, Any]
    ) -> None:
        first = create(client, scene, title="First")
        second = create(client, scene, title="Second")

        data = client.get("/api/drawings").json()

        ids = [d["id"] for d in data["drawings"]]
        assert set(ids) == {first["drawing_id"], second["drawing_id"]}
        for item in data["drawings"]:
            assert item["url"].endswith(f"/drawing/{item['id']}")
            assert item["markdown_link"] == f"[{item['title']}]({item['url']})"

    def test_search_filters_and_total_reflects_filter(
        self, client: TestClient, scene: dict[str, Any]
    ) -> None:
        create(client, scene, title="Foo diagram")
        create(client, scene, title="Bar chart")
        create(client, scene, title="more FOO")

        data = client.get("/api/drawings", params={"search": "foo"}).json()

        assert data["total"] == 2
        assert {d["title"] for d in data["drawings"]} == {"Foo diagram", "more FOO"}

    def test_pagination(self, client: TestClient, scene: dict[str, Any]) -> None:
        for i in range(5):
            create(client, scene, title=f"Drawing number {i}")

        data = client.get("/api/drawings", params={"page": 3, "limit": 2}).json()

        assert data["total"] == 5
        assert data["totalPages"] == 3
        assert len(data["drawings"]) == 1

    def test_out_of_range_params_are_clamped(self, client: TestClient) -> None:
        data = client.get("/api/drawings", params={"page": 0, "limit": 1000}).json()

        assert data["page"] == 1
        assert data["limit"] == 100


class TestGetDrawing:
    """Test GET /api/drawings/{id}."""

    def test_get_returns_drawing_and_metadata(
        self, client: TestClient, scene: dict[str, Any]
    ) -> None:
        created = create(client, scene, title="Fetched")
        drawing_id = created["drawing_id"]

        response = client.get(f"/api/drawings/{drawing_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["drawing_id"] == drawing_id
        assert data["drawing"] == scene
        assert data["metadata"]["title"] == "Fetched"
        assert data["url"] == created["url"]

    def test_get_missing_returns_404(self, client: TestClient) -> None:
        response = client.get("/api/drawings/does-not-exist")

        assert response.status_code == 404
        assert response.json()["detail"] == "Drawing not found"

    def test_get_invalid_id_returns_400(self, client: TestClient) -> None:
        response = client.get("/api/drawings/bad.id")

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid drawing ID"

    def test_get_file_without_metadata_returns_null_metadata(
        self, client: TestClient, settings: Settings, scene: dict[str, Any]
    ) -> None:
        (settings.drawings_dir / "orphan-file.excalidraw").write_text(json.dumps(scene))

        data = client.get("/api/drawings/orphan-file").json()

        assert data["drawing"] == scene
        assert data["metadata"] is None


class TestUpdateDrawing:
    """Test PUT /api/drawings/{id}."""

    def test_update_preserves_created_at_and_title_when_omitted(
        self,
        client: TestClient,
        scene_factory: Callable[..., dict[str, Any]],
    ) -> None:
        created = create(client, scene_factory(), title="Original")
        drawing_id = created["drawing_id"]
        changed = scene_factory(elements=[])

        response = client.put(f"/api/drawings/{drawing_id}", json={"drawing": changed})

        assert response.status_code == 200
        data = response.json()
        assert data["metadata"]["title"] == "Original"
        assert data["metadata"]["created_at"] == created["metadata"]["created_at"]
        assert datetime.fromisoformat(data["metadata"]["updated_at"]) >= datetime.fromisoformat(
            created["metadata"]["updated_at"]
        )
        assert client.get(f"/api/drawings/{drawing_id}").json()["drawing"] == changed

    def test_update_changes_title(self, client: TestClient, scene: dict[str, Any]) -> None:
        drawing_id = create(client, scene, title="Before")["drawing_id"]

        data = client.put(
            f"/api/drawings/{drawing_id}", json={"drawing": scene, "title": "After"}
        ).json()

        assert data["metadata"]["title"] == "After"
        assert data["markdown_link"].startswith("[After](")

    def test_update_missing_returns_404(self, client: TestClient, scene: dict[str, Any]) -> None:
        response = client.put("/api/drawings/ghost", json={"drawing": scene})

        assert response.status_code == 404

    def test_update_invalid_id_returns_400(
        self, client: TestClient, scene: dict[str, Any]
    ) -> None:
        response = client.put("/api/drawings/bad.id", json={"drawing": scene})

        assert response.status_code == 400


class TestDeleteDrawing:
    """Test DELETE /api/drawings/{id}."""

    def test_delete_removes_drawing(self, client: TestClient, scene: dict[str, Any]) -> None:
        drawing_id = create(client, scene)["drawing_id"]

        response = client.delete(f"/api/drawings/{drawing_id}")

        assert response.status_code == 200
        assert response.json() == {"message": "Drawing deleted"}
        assert client.get(f"/api/drawings/{drawing_id}").status_code == 404
        assert client.get("/api/drawings").json()["total"] == 0

    def test_delete_missing_returns_404_and_keeps_index(
        self, client: TestClient, settings: Settings, scene: dict[str, Any]
    ) -> None:
        create(client, scene)
        before = settings.metadata_path.read_bytes()

        response = client.delete("/api/drawings/ghost")

        assert response.status_code == 404
        assert settings.metadata_path.read_bytes() == before


class TestCorruptIndex:
    """Test behavior when metadata.json is unreadable."""

    def test_list_returns_500(self, client: TestClient, settings: Settings) -> None:
        settings.metadata_path.write_text("{corrupt")

        response = client.get("/api/drawings")

        assert response.status_code == 500
        assert response.json()["detail"] == "Internal server error"
