"""FastAPI test client fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from hypolab.api.app import API_PREFIX, ROUTERS
from hypolab.api.middleware import CorrelationIdMiddleware, add_exception_handlers

if TYPE_CHECKING:
    from hypolab.config import Settings
    from hypolab.db import Database


def _create_test_app(db: Database, settings: Settings) -> FastAPI:
    """Create a FastAPI app with injected test db/settings (no lifespan)."""
    app = FastAPI(title="Hypolab Test")

    app.state.db = db
    app.state.settings = settings

    app.add_middleware(CorrelationIdMiddleware)
    add_exception_handlers(app)
    for router in ROUTERS:
        app.include_router(router, prefix=API_PREFIX)

    return app


@pytest.fixture()
def client(db: Database, settings: Settings) -> TestClient:
    app = _create_test_app(db, settings)
    return TestClient(app)


@pytest.fixture()
def idea_id(client: TestClient) -> int:
    """A SELECTED idea created through the API."""
    resp = client.post("/api/v1/ideas", json={"title": "Self-serve onboarding"})
    iid = resp.json()["id"]
    client.put(
        f"/api/v1/ideas/{iid}/ice-scores",
        json={"user_id": "alice", "impact": 8, "confidence": 6, "ease": 7},
    )
    client.post(f"/api/v1/ideas/{iid}/select")
    return iid


@pytest.fixture()
def hypothesis_id(client: TestClient, idea_id: int) -> int:
    resp = client.post(
        "/api/v1/hypotheses",
        json={
            "idea_id": idea_id,
            "title": "Guided setup raises activation",
            "description": "Most teams stall on integration setup.",
        },
    )
    return resp.json()["id"]
