"""Tests for treeview_backend.main: HTTP and WebSocket API."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest
from fastapi.testclient import TestClient

from treeview_backend.config import Settings
from treeview_backend.graph_manager import GraphManager
from treeview_backend.main import create_app

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture
def client(sample_file: Path) -> Iterator[TestClient]:
    settings = Settings(data_source=str(sample_file), title="Test graph")
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def failed_client(tmp_path: Path) -> Iterator[TestClient]:
    settings = Settings(data_source=str(tmp_path / "missing.yaml"))
    with TestClient(create_app(settings)) as test_client:
        yield test_client


class TestGraphEndpoints:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "graph": "loaded", "connections": 0}

    def test_graph(self, client: TestClient) -> None:
        body = client.get("/api/graph").json()
        assert body["status"] == "loaded"
        assert body["title"] == "Test graph"
        assert body["unreached"] == ["loner"]
        assert body["nodes"][1] == {
            "id": "left",
            "type": "customNode",
            "data": {"label": "Left child"},
            "position": {"x": 550, "y": 75},
        }
        assert body["edges"][0]["style"] == {"stroke": "#666", "strokeWidth": 1}

    def test_issues(self, client: TestClient) -> None:
        body = client.get("/api/graph/issues").json()
        assert body["summary"]["valid"] is True
        assert body["summary"]["warnings"] == 2

    def test_failed_load(self, failed_client: TestClient) -> None:
        body = failed_client.get("/api/graph").json()
        assert body["status"] == "failed"
        assert body["nodes"] == []
        assert failed_client.get("/api/health").json()["graph"] == "failed"

    def test_mutation_on_failed_load(self, failed_client: TestClient) -> None:
        response = failed_client.post("/api/edges", json={"source": "a", "target": "b"})
        assert response.status_code == 409

    def test_preloaded_manager_is_not_reloaded(self, sample_file: Path) -> None:
        manager = GraphManager()
        settings = Settings(data_source="does-not-matter.yaml")

        async def preload() -> None:
            await manager.load(sample_file)

        asyncio.run(preload())

        with TestClient(create_app(settings, manager)) as test_client:
            assert test_client.get("/api/graph").json()["status"] == "loaded"


class TestNodeEndpoints:
    def test_focus(self, client: TestClient) -> None:
        body = client.get("/api/nodes/root").json()
        assert body["node"]["data"]["label"] == "# Root"

    def test_focus_unknown(self, client: TestClient) -> None:
        assert client.get("/api/nodes/loner").status_code == 404

    def test_move(self, client: TestClient) -> None:
        response = client.patch("/api/nodes/right/position", json={"x": 1, "y": 2})
        assert response.status_code == 200
        assert response.json()["node"]["position"] == {"x": 1, "y": 2}
        nodes = client.get("/api/graph").json()["nodes"]
        assert [n["position"] for n in nodes if n["id"] == "right"] == [{"x": 1, "y": 2}]

    def test_move_unknown(self, client: TestClient) -> None:
        response = client.patch("/api/nodes/nope/position", json={"x": 1, "y": 2})
        assert response.status_code == 404

    def test_move_validates_body(self, client: TestClient) -> None:
        response = client.patch("/api/nodes/root/position", json={"x": "left"})
        assert response.status_code == 422


class TestEdgeEndpoints:
    def test_create_and_delete(self, client: TestClient) -> None:
        response = client.post("/api/edges", json={"source": "left", "target": "right", "id": "e9"})
        assert response.status_code == 200
        assert response.json()["edge"]["id"] == "e9"
        assert len(client.get("/api/graph").json()["edges"]) == 3

        assert client.delete("/api/edges/e9").json() == {"success": True}
        assert client.delete("/api/edges/e9").status_code == 404

    def test_create_with_unknown_node(self, client: TestClient) -> None:
        response = client.post("/api/edges", json={"source": "left", "target": "ghost"})
        assert response.status_code == 400
        assert "ghost" in response.json()["detail"]

    def test_new_edge_keeps_positions(self, client: TestClient) -> None:
        before = client.get("/api/graph").json()["nodes"]
        client.post("/api/edges", json={"source": "right", "target": "left"})
        assert client.get("/api/graph").json()["nodes"] == before


class TestWebSocket:
    def test_ping(self, client: TestClient) -> None:
        with client.websocket_connect("/ws") as websocket:
            websocket.send_text("ping")
            assert websocket.receive_json() == {"type": "pong"}

    def test_update_is_broadcast(self, client: TestClient) -> None:
        with client.websocket_connect("/ws") as websocket:
            # Round-trip first so the connection is registered
            websocket.send_text("ping")
            assert websocket.receive_json() == {"type": "pong"}

            client.patch("/api/nodes/left/position", json={"x": 0, "y": 0})
            assert websocket.receive_json() == {"type": "graph_updated", "status": "loaded"}

    def test_disconnect_releases_connection(self, client: TestClient) -> None:
        with client.websocket_connect("/ws") as websocket:
            websocket.send_text("ping")
            websocket.receive_json()
            assert client.get("/api/health").json()["connections"] == 1
        # The endpoint handles the close on its own task
        for _ in range(50):
            if client.get("/api/health").json()["connections"] == 0:
                break
        assert client.get("/api/health").json()["connections"] == 0


class TestIndex:
    def test_placeholder(self, client: TestClient) -> None:
        response = client.get("/")
        assert response.status_code == 200
        assert "Tree View API" in response.text

    def test_no_file_serving(self, client: TestClient) -> None:
        assert client.get("/index.html").status_code == 404
        assert client.get("/assets/..%2F..%2Fpyproject.toml").status_code == 404
