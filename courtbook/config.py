"""
Courtbook settings, read once at import time from environment variables.

Every setting has a local-development default. A ``.env`` file next to
``pyproject.toml`` is loaded first when present; real environment variables
take precedence over it.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data"

load_dotenv(PROJECT_ROOT / ".env")

# ── Runtime ───────────────────────────────────────────────────────────────

ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "info").lower()
IS_PRODUCTION: bool = ENVIRONMENT == "production"

DB_PATH: str = os.getenv("DB_PATH", str(DATA_DIR / "courtbook.db"))

# ── Sessions ──────────────────────────────────────────────────────────────

_DEV_JWT_SECRET = "courtbook-dev-secret"

# Shared with the sign-in service that issues session tokens.
JWT_SECRET: str = os.getenv("JWT_SECRET", _DEV_JWT_SECRET)
JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRY_DAYS: int = int(os.getenv("JWT_EXPIRY_DAYS", "7"))

if IS_PRODUCTION and JWT_SECRET == _DEV_JWT_SECRET:
    raise RuntimeError("JWT_SECRET must be set when ENVIRONMENT=production")

# ── Time ──────────────────────────────────────────────────────────────────

# Zone for clubs without a usable timezone of their own. Callers hand it to
# the time engine explicitly.
PLATFORM_TIMEZONE: str = os.getenv("PLATFORM_TIMEZONE", "Europe/Kyiv")

# ── Bookings ──────────────────────────────────────────────────────────────

BOOKING_MIN_DURATION_MINUTES: int = int(os.getenv("BOOKING_MIN_DURATION_MINUTES", "30"))
BOOKING_MAX_DURATION_MINUTES: int = int(os.getenv("BOOKING_MAX_DURATION_MINUTES", "240"))

# Seconds between sweeps that mark finished bookings completed.
STATUS_UPDATER_INTERVAL: float = float(os.getenv("STATUS_UPDATER_INTERVAL", "300"))
