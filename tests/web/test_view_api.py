"""/api/view/* — viewport context switching."""

from __future__ import annotations


def test_focus_context(client, app):
    resp = client.post("/api/view/bsp_akaltara")
    assert resp.status_code == 200
    data = resp.json()
    assert data["from_context"] == "india"
    assert data["to_context"] == "bsp_akaltara"
    assert data["zoom"] == 12
    assert data["noop"] is False
    assert app.state.viewport.active.value == "bsp_akaltara"


def test_refocus_is_noop(client):
    data = client.post("/api/view/india").json()
    assert data["noop"] is True


def test_database_switch(client):
    data = client.post("/api/view/database/cg_db").json()
    assert data["to_context"] == "chhattisgarh"
    assert data["center"] == [82.0, 21.5]


def test_unknown_context_404(client):
    assert client.post("/api/view/mumbai").status_code == 404
    assert client.post("/api/view/database/mh_db").status_code == 404


def test_switch_after_completion_is_not_a_redirect(client):
    first = client.post("/api/view/chhattisgarh").json()
    done = client.post("/api/view/complete")
    second = client.post("/api/view/bsp_akaltara").json()

    assert done.status_code == 200
    assert done.json() == {"active": "chhattisgarh", "in_flight": False}
    assert first["redirected"] is False
    assert second["redirected"] is False


def test_switch_during_flight_is_a_redirect(client):
    client.post("/api/view/chhattisgarh")
    assert client.post("/api/view/bsp_akaltara").json()["redirected"] is True
