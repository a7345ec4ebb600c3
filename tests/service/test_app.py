"""Tests for the FastAPI service mode."""

from __future__ import annotations

from pathlib import Path

import pytest
import uvicorn
from fastapi.testclient import TestClient

from apimap.service import create_app, run_service

SONG = """export interface SettableProperties {
    name: string;
}
export declare class Song extends Namespace<RawSong> {
    stopAllClips(): Promise<void>;
}
"""


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


@pytest.fixture
def source(tmp_path: Path) -> Path:
    target = tmp_path / "ns"
    target.mkdir()
    (target / "song.d.ts").write_text(SONG, encoding="utf-8")
    return target


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_registry_endpoint_returns_mapping(client: TestClient, tmp_path: Path, source: Path) -> None:
    response = client.post("/registry", json={"path": str(tmp_path), "source": str(source)})

    assert response.status_code == 200
    assert response.json() == {
        "Song": {
            "gettableProperties": [],
            "settableProperties": [{"name": "name", "type": "string"}],
            "methods": [{"name": "stopAllClips", "parameters": []}],
        }
    }


def test_generate_dry_run_endpoint(client: TestClient, tmp_path: Path, source: Path) -> None:
    response = client.post(
        "/generate",
        json={"path": str(tmp_path), "source": str(source), "format": "json", "dry_run": True},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "preview"
    assert data["classes"] == 1
    assert data["changed"] is True
    assert data["dry_run"] is True
    assert not Path(data["output_path"]).exists()


def test_generate_writes_then_reports_unchanged(client: TestClient, tmp_path: Path, source: Path) -> None:
    payload = {"path": str(tmp_path), "source": str(source), "output": "map.py"}

    first = client.post("/generate", json=payload).json()
    second = client.post("/generate", json=payload).json()

    assert first["status"] == "written"
    assert (tmp_path / "map.py").exists()
    assert second["status"] == "unchanged"
    assert second["diff"] == ""


def test_missing_source_maps_to_404(client: TestClient, tmp_path: Path) -> None:
    response = client.post(
        "/registry", json={"path": str(tmp_path), "source": str(tmp_path / "missing")}
    )

    assert response.status_code == 404
    assert "Declaration root not found" in response.json()["detail"]


def test_unknown_format_maps_to_400(client: TestClient, tmp_path: Path, source: Path) -> None:
    response = client.post(
        "/generate", json={"path": str(tmp_path), "source": str(source), "format": "yaml"}
    )

    assert response.status_code == 400


def test_run_service_hands_app_to_uvicorn(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    run_service(host="0.0.0.0", port=9001)

    assert len(calls) == 1
    app, kwargs = calls[0]
    assert app.title == "apimap Service"
    assert kwargs == {"host": "0.0.0.0", "port": 9001}
