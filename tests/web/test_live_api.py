"""/api/live/* — batch ingest and feature readback."""

from __future__ import annotations


def _ids(client) -> list[str]:
    return sorted(f["id"] for f in client.get("/api/live/features").json()["features"])


def test_batch_creates_features(client, live_batch):
    resp = client.post("/api/live/batch", json=live_batch("12951", "12070", sequence=1))
    assert resp.status_code == 200
    data = resp.json()
    assert data["applied"] is True
    assert sorted(data["added"]) == ["12070", "12951"]
    assert _ids(client) == ["12070", "12951"]


def test_live_and_sim_sources_are_separate(client, live_batch):
    client.post("/api/live/batch", json=live_batch("12951"))
    sim_ids = {f["id"] for f in client.get("/api/sim/features").json()["features"]}
    assert "12951" not in sim_ids
    assert len(sim_ids) == 4


def test_missing_train_removed(client, live_batch):
    client.post("/api/live/batch", json=live_batch("A", "B", sequence=1))
    data = client.post("/api/live/batch", json=live_batch("A", sequence=2)).json()
    assert data["removed"] == ["B"]
    assert _ids(client) == ["A"]


def test_stale_batch_reported(client, live_batch):
    client.post("/api/live/batch", json=live_batch("A", sequence=5))
    data = client.post("/api/live/batch", json=live_batch("B", sequence=3)).json()
    assert data["stale"] is True
    assert data["applied"] is False
    assert _ids(client) == ["A"]


def test_held_status_exposed(client, live_batch):
    client.post("/api/live/batch", json=live_batch("A", status="HELD"))
    feat = client.get("/api/live/features").json()["features"][0]
    assert feat["properties"]["status"] == "Held"


def test_report_without_position_skipped(client, live_batch):
    batch = live_batch("A")
    batch["trains"].append({"train_no": "B", "train_name": "No fix"})
    data = client.post("/api/live/batch", json=batch).json()
    assert data["skipped"] == ["B"]
    assert _ids(client) == ["A"]


def test_malformed_batch_422(client):
    assert client.post("/api/live/batch", json={"trains": "nope"}).status_code == 422


def test_priority_exposed_for_colouring(client, live_batch):
    client.post("/api/live/batch", json=live_batch("A"))
    props = client.get("/api/live/features").json()["features"][0]["properties"]
    assert props["priority"] == "High"
    assert props["category"] == "High"


def test_simulated_features_have_no_priority(client):
    feats = client.get("/api/sim/features").json()["features"]
    assert all("priority" not in f["properties"] for f in feats)
