"""Shared fixtures for web tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from corridor_sim.config import Settings
from corridor_sim.web.app import create_app


@pytest.fixture
def app():
    """Application with background tasks disabled; time moves only via /api/sim/control."""
    return create_app(Settings(), autostart=False)


@pytest.fixture
def client(app):
    """FastAPI test client."""
    with TestClient(app) as c:
        yield c


def _make_live_batch(
    *train_nos: str, sequence: int | None = None, status: str = "Running"
) -> dict:
    """Build a live batch payload with one report per train number."""
    return {
        "sequence": sequence,
        "trains": [
            {
                "train_no": no,
                "train_name": "Express",
                "current_lat": 22.05,
                "current_lon": 82.3,
                "priority": "High",
                "status": status,
            }
            for no in train_nos
        ],
    }


@pytest.fixture
def live_batch():
    """Factory fixture: ``live_batch("12951", sequence=1)``."""
    return _make_live_batch
