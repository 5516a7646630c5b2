"""Tests for rate limiting behaviour."""

import pytest
from fastapi.testclient import TestClient

from courtbook.dependencies import create_jwt
from courtbook.main import app
from tests.mocks.models import COURT_ID, PLAYER_ID


class TestRateLimiting:
    """Verify that rate limiting kicks in for booking endpoints."""

    @pytest.fixture()
    def limited_client(self, _test_env):
        """
        TestClient with rate limiting **enabled** (unlike the default
        `client` fixture which disables it for convenience).
        """
        from courtbook.rate_limit import limiter

        limiter.enabled = True
        # Reset in-memory state so previous tests don't pollute counts
        limiter.reset()

        with TestClient(app, raise_server_exceptions=False) as tc:
            tc.cookies.set("session", create_jwt(PLAYER_ID))
            yield tc

        limiter.enabled = False

    def test_booking_rate_limit(self, limited_client):
        """POST /api/bookings is limited to 10 requests/minute."""
        for i in range(10):
            resp = limited_client.post(
                "/api/bookings",
                json={
                    "court_id": COURT_ID,
                    "date": "2030-01-15",
                    "start_time": f"{9 + i:02d}:00",
                },
            )
            assert resp.status_code == 201, f"Request {i + 1} should succeed"

        # 11th request should be rate-limited
        resp = limited_client.post(
            "/api/bookings",
            json={"court_id": COURT_ID, "date": "2030-01-15", "start_time": "20:00"},
        )
        assert resp.status_code == 429
        assert "Rate limit exceeded" in resp.json()["detail"]

    def test_unlimited_routes_unaffected(self, limited_client):
        for _ in range(15):
            assert limited_client.get("/api/health").status_code == 200
