"""/health and section geometry endpoints."""

from __future__ import annotations


def test_health_status_200(client):
    resp = client.get("/health")
    assert resp.status_code == 200


def test_health_body(client):
    resp = client.get("/health")
    data = resp.json()
    assert data["status"] == "ok"
    assert data["version"] == "0.1.0"


def test_section_geometry(client):
    resp = client.get("/api/map/section/bsp-akaltara")
    assert resp.status_code == 200
    data = resp.json()
    assert data["type"] == "FeatureCollection"
    assert len(data["features"]) == 3


def test_unknown_section_404(client):
    assert client.get("/api/map/section/howrah").status_code == 404
