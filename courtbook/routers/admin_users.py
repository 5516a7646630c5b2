"""
User moderation endpoints. A blocked user keeps their data but every
authenticated request of theirs is refused with 403.
"""

import logging

from fastapi import APIRouter, Depends, Request

from courtbook import db
from courtbook.dependencies import CurrentIdentity
from courtbook.guards import require_user_block
from courtbook.models import User
from courtbook.rate_limit import ADMIN, limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/users", tags=["admin-users"])


async def _set_blocked(target: User, blocked: bool, identity_user_id: str) -> User:
    if target.is_blocked == blocked:
        return target
    updated = await db.set_user_flags(target.id, is_blocked=blocked)
    logger.info(
        "User %s %s by %s", target.id, "blocked" if blocked else "unblocked", identity_user_id
    )
    return updated or target


@router.post(
    "/{user_id}/block",
    response_model=User,
    operation_id="blockUser",
    summary="Block a user",
)
@limiter.limit(ADMIN)
async def block_user(
    request: Request,
    identity: CurrentIdentity,
    target: User = Depends(require_user_block),
) -> User:
    return await _set_blocked(target, True, identity.user_id)


@router.post(
    "/{user_id}/unblock",
    response_model=User,
    operation_id="unblockUser",
    summary="Unblock a user",
)
@limiter.limit(ADMIN)
async def unblock_user(
    request: Request,
    identity: CurrentIdentity,
    target: User = Depends(require_user_block),
) -> User:
    return await _set_blocked(target, False, identity.user_id)
