"""
Shared test fixtures.

Provides a FastAPI TestClient wired to:
  • a temporary SQLite database, seeded before the app starts
  • a no-op booking status updater
  • rate limiting switched off

The `client` fixture runs the full lifespan (DB init / shutdown). Requests
are anonymous until a test calls `login(user_id)`, which sets a real JWT
session cookie so identity and roles come from the database.
"""

from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from courtbook.dependencies import create_jwt
from courtbook.main import app
from tests.mocks.seed import seed_database


# ── Helpers ────────────────────────────────────────────────────────────────


class _NoopUpdater:
    """Drop-in replacement for BookingStatusUpdater that does nothing."""

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        pass


async def _seed() -> None:
    from courtbook import db

    await db.init_db()
    try:
        await seed_database()
    finally:
        await db.close_db()


# ── Fixtures ───────────────────────────────────────────────────────────────


@pytest.fixture()
def _test_env(monkeypatch, tmp_path):
    """
    Internal fixture that patches the DB path and the status updater so
    that the app lifespan runs cleanly against a seeded temp database.
    """
    # ── Temp database ─────────────────────────────────────────────────
    import courtbook.db as db_mod

    monkeypatch.setattr(db_mod, "DB_PATH", str(tmp_path / "test.db"))
    asyncio.run(_seed())

    # ── No-op status updater ──────────────────────────────────────────
    monkeypatch.setattr("courtbook.main.updater", _NoopUpdater())

    # ── Disable rate limiting in tests ────────────────────────────────
    from courtbook.rate_limit import limiter as _limiter
    monkeypatch.setattr(_limiter, "enabled", False)


@pytest.fixture()
def client(_test_env) -> TestClient:
    """
    FastAPI TestClient against the seeded temp DB.

    Uses a context manager so the lifespan runs (DB init/shutdown).
    """
    app.dependency_overrides.clear()

    with TestClient(app, raise_server_exceptions=False) as tc:
        yield tc

    app.dependency_overrides.clear()


@pytest.fixture()
def login(client: TestClient):
    """Return a callable that authenticates `client` as the given user."""

    def _login(user_id: str) -> TestClient:
        client.cookies.set("session", create_jwt(user_id))
        return client

    return _login
