"""Gateway smoke tests using FastAPI TestClient."""

import logging

import pytest
from fastapi.testclient import TestClient

from raahvia.deps import get_catalog
from raahvia.main import app


def _scan_payload(code="aud_entrance"):
    return {
        "qrData": code,
        "deviceId": "raahvia-mobile",
        "platform": "android",
        "appVersion": "1.0.0",
        "timestamp": "2026-10-18T09:30:00Z",
    }


def test_root(client: TestClient):
    r = client.get("/")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ONLINE"
    assert data["success"] is True


def test_health(client: TestClient):
    r = client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ONLINE"
    assert isinstance(data["uptime"], (int, float))
    assert data["uptime"] >= 0
    assert data["memory"]["rss"].endswith("MB")
    for key in ("success", "service", "version", "environment", "timestamp"):
        assert key in data


def test_qr_scan(client: TestClient):
    r = client.post("/api/qr-scan", json=_scan_payload())
    assert r.status_code == 200
    data = r.json()
    assert data["success"] is True
    assert data["navigation"]["mapImage"] == "auditorium_map.png"
    assert data["navigation"]["stageDestination"]["totalSteps"] == 42
    assert data["scannedData"]["qrCode"] == "aud_entrance"
    assert data["scannedData"]["targetZone"] == "auditorium"
    assert data["metadata"]["source"] == "backend"
    assert data["metadata"]["backendUsed"] is True


def test_qr_scan_unknown_code_is_404_envelope(client: TestClient):
    r = client.post("/api/qr-scan", json=_scan_payload("nope"))
    assert r.status_code == 404
    data = r.json()
    assert data["success"] is False
    assert data["error"]["code"] == "NOT_FOUND"
    assert "nope" in data["error"]["message"]


def test_qr_scan_malformed_body_is_400_envelope(client: TestClient):
    r = client.post("/api/qr-scan", json={"deviceId": "x"})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"

    r = client.post("/api/qr-scan", content=b"{not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400


def test_qr_get_variant(client: TestClient):
    r = client.get("/api/qr/LIB_ENTRANCE")
    assert r.status_code == 200
    assert r.json()["navigation"]["mapImage"] == "library_map.png"


def test_destinations(client: TestClient):
    r = client.get("/api/destinations/Auditorium")
    assert r.status_code == 200
    data = r.json()
    assert data["building"] == "Auditorium"
    ids = [d["id"] for d in data["destinations"]]
    assert "aud_stage" in ids
    assert "aud_side_exit" in ids


@pytest.mark.parametrize("building", ["nowhere", "%20", "..%2F..", "aud_stage"])
def test_destinations_unknown_building(client: TestClient, building):
    r = client.get(f"/api/destinations/{building}")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "NOT_FOUND"


def test_path(client: TestClient):
    r = client.get("/api/path/aud_stage")
    assert r.status_code == 200
    data = r.json()
    svg = data["destination"]["svgPath"]
    assert data["mapImage"] == "auditorium_map.png"
    assert len(svg["points"]) == data["destination"]["totalSteps"] + 1
    assert svg["stepProgress"] == pytest.approx(svg["pixelsPerMeter"] * svg["stepCalibration"])


@pytest.mark.parametrize("dest", ["missing", "AUD_STAGE", "%00"])
def test_path_unknown_destination(client: TestClient, dest):
    r = client.get(f"/api/path/{dest}")
    assert r.status_code == 404
    assert r.json()["success"] is False


def test_unknown_route_is_404_envelope(client: TestClient):
    r = client.get("/api/does-not-exist/at/all")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "NOT_FOUND"


def test_unexpected_fault_is_500_envelope_and_isolated():
    class BrokenCatalog:
        def resolve_scan(self, qr_code):
            raise RuntimeError("boom")

    app.dependency_overrides[get_catalog] = lambda: BrokenCatalog()
    try:
        with TestClient(app, raise_server_exceptions=False) as c:
            r = c.post("/api/qr-scan", json=_scan_payload())
            assert r.status_code == 500
            assert r.json()["error"]["code"] == "INTERNAL_ERROR"
            # the process keeps serving other requests
            assert c.get("/health").status_code == 200
    finally:
        app.dependency_overrides.pop(get_catalog, None)


def test_security_headers(client: TestClient):
    r = client.get("/health")
    assert r.headers["x-content-type-options"] == "nosniff"
    assert r.headers["x-frame-options"] == "SAMEORIGIN"
    assert r.headers["referrer-policy"] == "no-referrer"

    r = client.get("/api/path/missing")
    assert r.status_code == 404
    assert r.headers["x-content-type-options"] == "nosniff"


def test_health_reports_heap_objects(client: TestClient):
    memory = client.get("/health").json()["memory"]
    assert isinstance(memory["heapObjects"], int)
    assert memory["heapObjects"] > 0


def test_access_log_covers_unhandled_faults(caplog):
    class BrokenCatalog:
        def get_path(self, destination_id):
            raise RuntimeError("boom")

    caplog.set_level(logging.INFO, logger="raahvia")
    app.dependency_overrides[get_catalog] = lambda: BrokenCatalog()
    try:
        with TestClient(app, raise_server_exceptions=False) as c:
            assert c.get("/api/path/aud_stage").status_code == 500
    finally:
        app.dependency_overrides.pop(get_catalog, None)

    lines = [rec.getMessage() for rec in caplog.records if rec.name == "raahvia"]
    assert any("GET /api/path/aud_stage -> 500" in line for line in lines)
