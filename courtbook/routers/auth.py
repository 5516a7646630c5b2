"""
Session endpoints. Sessions are JWT cookies signed with the platform secret;
sign-in itself happens upstream and hands over a token.
"""

from fastapi import APIRouter, HTTPException, Request, Response, status

from courtbook import db
from courtbook.dependencies import SESSION_COOKIE, CurrentIdentity, create_session_cookie
from courtbook.models import MessageResponse, User
from courtbook.rate_limit import ADMIN, limiter

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get(
    "/me",
    response_model=User,
    operation_id="getCurrentUser",
    summary="Get the signed-in user",
)
async def me(identity: CurrentIdentity) -> User:
    user = await db.get_user(identity.user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user


@router.post(
    "/refresh",
    response_model=MessageResponse,
    operation_id="refreshSession",
    summary="Re-issue the session cookie with a fresh expiry",
)
@limiter.limit(ADMIN)
async def refresh(request: Request, identity: CurrentIdentity, response: Response) -> MessageResponse:
    create_session_cookie(response, identity.user_id)
    return MessageResponse(message="Session refreshed")


@router.post(
    "/logout",
    response_model=MessageResponse,
    operation_id="logout",
    summary="Clear the session cookie",
)
async def logout(identity: CurrentIdentity, response: Response) -> MessageResponse:
    response.delete_cookie(SESSION_COOKIE)
    return MessageResponse(message="Logged out successfully")
