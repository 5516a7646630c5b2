"""Main FastAPI application for Courtbook."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from courtbook import db
from courtbook.config import LOG_LEVEL
from courtbook.rate_limit import limiter
from courtbook.routers import (
    admin,
    admin_clubs,
    admin_users,
    auth,
    availability,
    bookings,
    health,
    organizations,
)
from courtbook.services.access_control import MembershipConflictError
from courtbook.services.status_updater import updater
from courtbook.time_engine import InvalidFormatError

logging.basicConfig(
    level=LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    await db.init_db()
    await updater.start()
    yield
    await updater.stop()
    await db.close_db()


app = FastAPI(
    title="Courtbook API",
    description="Multi-tenant sports club court booking",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.limiter = limiter


# ── Error handlers ─────────────────────────────────────────────────────────


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"detail": f"Rate limit exceeded: {exc.detail}"},
    )


@app.exception_handler(InvalidFormatError)
async def invalid_format_handler(request: Request, exc: InvalidFormatError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc)},
    )


@app.exception_handler(MembershipConflictError)
async def membership_conflict_handler(request: Request, exc: MembershipConflictError) -> JSONResponse:
    logger.error("Refusing request from %s: %s", exc.user_id, exc)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Conflicting club roles, contact support"},
    )


# ── Routers ────────────────────────────────────────────────────────────────

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(organizations.router)
app.include_router(admin_clubs.router)
app.include_router(admin_users.router)
app.include_router(availability.router)
app.include_router(bookings.router)
