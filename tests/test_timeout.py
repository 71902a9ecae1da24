# =============================================================================
# tests/test_timeout.py - Request Timeout Middleware Tests
# =============================================================================

import asyncio
import time
from unittest.mock import patch

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.middleware import TimeoutMiddleware
from app.routers import users
from tests.conftest import USER_ID


def _app(timeout_seconds: float) -> FastAPI:
    app = FastAPI()
    app.add_middleware(TimeoutMiddleware, timeout_seconds=timeout_seconds)

    @app.get("/slow")
    async def slow():
        await asyncio.sleep(0.5)
        return {"done": True}

    return app


class TestTimeoutMiddleware:
    """Test the global per-request timeout."""

    def test_slow_request_times_out(self):
        client = TestClient(_app(timeout_seconds=0.05))

        response = client.get("/slow")

        assert response.status_code == 408
        body = response.json()
        assert body["errorCode"] == "REQUEST_TIMEOUT"
        assert body["message"] == "Request timeout"
        assert body["path"] == "/slow"

    def test_fast_request_passes(self):
        client = TestClient(_app(timeout_seconds=5))

        response = client.get("/slow")

        assert response.status_code == 200
        assert response.json() == {"done": True}


class TestBlockingHandlers:
    """Handlers calling the synchronous database layer must not stall the loop."""

    def _users_app(self, timeout_seconds: float) -> FastAPI:
        app = FastAPI()
        app.add_middleware(TimeoutMiddleware, timeout_seconds=timeout_seconds)
        app.include_router(users.router, prefix="/api/users")
        return app

    def test_hung_database_call_times_out(self, user_headers, sample_user_row):
        client = TestClient(self._users_app(timeout_seconds=0.1))

        def hang(*args, **kwargs):
            time.sleep(0.5)
            return sample_user_row

        with patch("core.services.user_service.SupabaseClient") as mock_db:
            mock_db.fetch_record.side_effect = hang
            response = client.get(f"/api/users/{USER_ID}", headers=user_headers)

        assert response.status_code == 408
        assert response.json()["errorCode"] == "REQUEST_TIMEOUT"

    def test_quick_database_call_passes(self, user_headers, sample_user_row):
        client = TestClient(self._users_app(timeout_seconds=5))

        with patch("core.services.user_service.SupabaseClient") as mock_db:
            mock_db.fetch_record.return_value = sample_user_row
            response = client.get(f"/api/users/{USER_ID}", headers=user_headers)

        assert response.status_code == 200
        assert response.json()["email"] == "ada@example.com"
