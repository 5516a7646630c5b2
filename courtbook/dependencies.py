import logging
import math
from datetime import UTC, datetime, timedelta
from typing import Annotated, Any

import jwt
from fastapi import Cookie, Depends, HTTPException, Query, Response, status

from courtbook import db
from courtbook.config import IS_PRODUCTION, JWT_ALGORITHM, JWT_EXPIRY_DAYS, JWT_SECRET
from courtbook.models import Identity, PaginationMeta

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session"


# ── Pagination ─────────────────────────────────────────────────────────────


class PaginationParams:
    """``?page=&page_size=`` query parameters, applied to in-memory lists."""

    def __init__(
        self,
        page: Annotated[int, Query(ge=1, description="Page number (1-indexed)")] = 1,
        page_size: Annotated[int, Query(ge=1, le=100, description="Items per page")] = 20,
    ):
        self.page = page
        self.page_size = page_size

    def window(self, items: list) -> list:
        start = (self.page - 1) * self.page_size
        return items[start:start + self.page_size]

    def meta(self, total: int) -> PaginationMeta:
        return PaginationMeta(
            page=self.page,
            page_size=self.page_size,
            total_items=total,
            total_pages=max(1, math.ceil(total / self.page_size)),
        )


def paginate(items: list, pagination: PaginationParams, response_cls: type):
    return response_cls(items=pagination.window(items), meta=pagination.meta(len(items)))


# ── Sessions ───────────────────────────────────────────────────────────────


def create_jwt(user_id: str) -> str:
    """Sign a session token for *user_id* with the platform secret."""
    issued = datetime.now(UTC)
    claims = {"sub": user_id, "iat": issued, "exp": issued + timedelta(days=JWT_EXPIRY_DAYS)}
    return jwt.encode(claims, JWT_SECRET, algorithm=JWT_ALGORITHM)


def create_session_cookie(response: Response, user_id: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE,
        value=create_jwt(user_id),
        httponly=True,
        samesite="lax",
        secure=IS_PRODUCTION,
        max_age=int(timedelta(days=JWT_EXPIRY_DAYS).total_seconds()),
    )


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _decode_session(token: str) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise _unauthenticated("Session expired. Please sign in again.") from None
    except jwt.PyJWTError:
        raise _unauthenticated("Invalid session. Please sign in again.") from None


async def get_current_identity(
    session: Annotated[str | None, Cookie()] = None,
) -> Identity:
    """
    Resolve the caller from the session cookie.

    The user row is read on every request, so root and blocked flags
    changed in the database apply from the caller's next request.
    """
    if not session:
        raise _unauthenticated("Authentication required.")

    user_id = _decode_session(session)["sub"]
    user = await db.get_user(user_id)
    if user is None:
        logger.info("Session for unknown user %s rejected", user_id)
        raise _unauthenticated("Invalid session. Please sign in again.")
    if user.is_blocked:
        logger.info("Blocked user %s refused", user_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is blocked.",
        )

    return Identity(user_id=user.id, is_root=user.is_root)


CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
