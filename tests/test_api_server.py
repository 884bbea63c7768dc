import pytest

import api_server
from models.errors import AssetUnavailableError
from repositories.asset_repository import AssetRepository
from services.asset_service import AssetService


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(api_server, "asset_service", AssetService(tmp_path, "", ""))
    api_server.app.config["TESTING"] = True
    with api_server.app.test_client() as client:
        yield client


@pytest.mark.parametrize("dni", ["", "12345", "abc12345", "1234567a"])
def test_invalid_dni_is_rejected(client, dni):
    response = client.get(f"/agv-proc?dni={dni}")
    assert response.status_code == 400
    assert "error" in response.get_json()


def test_successful_request_returns_pipeline_result(client, monkeypatch):
    calls = []

    def fake_process(dni, base_url, asset_service):
        calls.append((dni, base_url))
        return {"fields": {"dni": dni}, "urls": {"FILE": f"{base_url}public/x.png"}}

    monkeypatch.setattr(api_server, "process_dni", fake_process)
    response = client.get("/agv-proc?dni=12345678")

    assert response.status_code == 200
    assert response.get_json()["fields"] == {"dni": "12345678"}
    assert calls == [("12345678", "http://localhost/")]


def test_processing_failure_maps_to_500(client, monkeypatch):
    def failing(dni, base_url, asset_service):
        raise AssetUnavailableError("upstream down")

    monkeypatch.setattr(api_server, "process_dni", failing)
    response = client.get("/agv-proc?dni=12345678")

    assert response.status_code == 500
    assert response.get_json() == {"error": "Error processing image", "detail": "upstream down"}


def test_public_files_are_served(client, tmp_path):
    (tmp_path / "poster.png").write_bytes(b"\x89PNG fake")
    response = client.get("/public/poster.png")
    assert response.status_code == 200
    assert response.data == b"\x89PNG fake"
    assert client.get("/public/missing.png").status_code == 404


def test_status(client):
    body = client.get("/status").get_json()
    assert body["status"] == "ok"
    assert "timestamp" in body


def test_malformed_upstream_payload_returns_detail(client, monkeypatch):
    class _Upstream(AssetRepository):
        def fetch_json(self, url, params=None):
            return {"urls": "http://upstream/doc.png"}

    real_process = api_server.process_dni

    def with_fake_upstream(dni, base_url, asset_service):
        return real_process(dni, base_url, asset_service=asset_service,
                            asset_repository=_Upstream(timeout=1, session=object()))

    monkeypatch.setattr(api_server, "process_dni", with_fake_upstream)
    response = client.get("/agv-proc?dni=12345678")

    assert response.status_code == 500
    body = response.get_json()
    assert body["error"] == "Error processing image"
    assert "urls" in body["detail"]
