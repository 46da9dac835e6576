from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

import app.main as main_module


def test_health_is_always_ok() -> None:
    response = TestClient(main_module.app).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ready_reports_database_ok(monkeypatch: pytest.MonkeyPatch) -> None:
    async def _ready() -> bool:
        return True

    monkeypatch.setattr(main_module, "_is_database_ready", _ready)

    response = TestClient(main_module.app).get("/ready")

    assert response.status_code == 200
    body = response.json()
    assert (body["status"], body["database"]) == ("ready", "ok")
    assert body["timestamp"].endswith("+00:00")


def test_ready_unavailable_database_uses_error_envelope(monkeypatch: pytest.MonkeyPatch) -> None:
    async def _not_ready() -> bool:
        return False

    monkeypatch.setattr(main_module, "_is_database_ready", _not_ready)

    response = TestClient(main_module.app).get("/ready")

    assert response.status_code == 503
    assert response.json() == {"error": {"code": "http_error", "message": "Database is not ready"}}


@pytest.mark.asyncio
async def test_database_session_failure_is_reported_as_not_ready(monkeypatch: pytest.MonkeyPatch) -> None:
    class BrokenSession:
        async def __aenter__(self):
            raise ConnectionRefusedError("database down")

        async def __aexit__(self, *exc_info) -> None:
            return None

    monkeypatch.setattr(main_module, "SessionLocal", lambda: BrokenSession())

    assert await main_module._is_database_ready() is False
