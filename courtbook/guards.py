"""
Authorization guards as FastAPI dependencies.

Each guard resolves the caller's admin status once per request and turns
an ``AccessDecision`` into HTTP semantics:

    no identity → 401, DENY → 403, NOT_FOUND → 404

Usage::

    @router.patch("/{club_id}")
    async def update_club(
        club: Club = Depends(require_club(ClubAction.MANAGE)),
    ):
        ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, status

from courtbook import db
from courtbook.dependencies import CurrentIdentity
from courtbook.models import AdminStatus, AdminType, Club, Organization, User
from courtbook.services.access_control import (
    AccessControl,
    AccessDecision,
    ClubAction,
    OrganizationAction,
)


def get_access_control() -> AccessControl:
    return AccessControl(db.DatabaseMembershipRepository())


AccessControlDep = Annotated[AccessControl, Depends(get_access_control)]


async def get_admin_status(
    identity: CurrentIdentity,
    access: AccessControlDep,
) -> AdminStatus:
    return await access.resolve_admin_type(identity)


CurrentAdminStatus = Annotated[AdminStatus, Depends(get_admin_status)]


async def require_admin(admin_status: CurrentAdminStatus) -> AdminStatus:
    """Any admin type at all."""
    if not admin_status.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return admin_status


def _raise_for(decision: AccessDecision, resource: str) -> None:
    if decision is AccessDecision.NOT_FOUND:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )
    if decision is AccessDecision.DENY:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"No access to this {resource.lower()}",
        )


def require_organization(action: OrganizationAction):
    """
    Factory for organization-scoped guards.

    Raises 404 if the organization does not exist, 403 if the caller may
    not perform *action* on it.
    """

    async def checker(
        org_id: str,
        identity: CurrentIdentity,
        admin_status: CurrentAdminStatus,
        access: AccessControlDep,
    ) -> Organization:
        organization = await db.get_organization(org_id)
        if organization is None:
            _raise_for(AccessDecision.NOT_FOUND, "Organization")
        decision = await access.authorize_organization(identity, admin_status, org_id, action)
        _raise_for(decision, "Organization")
        return organization

    return checker


def require_club(action: ClubAction):
    """
    Factory for club-scoped guards.

    Raises 404 if the club does not exist, 403 if the caller may not
    perform *action* on it.
    """

    async def checker(
        club_id: str,
        identity: CurrentIdentity,
        admin_status: CurrentAdminStatus,
        access: AccessControlDep,
    ) -> Club:
        decision = await access.authorize_club(identity, admin_status, club_id, action)
        _raise_for(decision, "Club")
        club = await db.get_club(club_id)
        if club is None:
            _raise_for(AccessDecision.NOT_FOUND, "Club")
        return club

    return checker


async def require_user_block(
    user_id: str,
    identity: CurrentIdentity,
    admin_status: CurrentAdminStatus,
    access: AccessControlDep,
) -> User:
    """
    Guard for blocking and unblocking *user_id*.

    Only root and organization admins get past the first check; for them
    an unknown user is 404, and a root user or one outside their
    organizations is 403.
    """
    if admin_status.admin_type not in (AdminType.ROOT_ADMIN, AdminType.ORGANIZATION_ADMIN):
        _raise_for(AccessDecision.DENY, "User")
    target = await db.get_user(user_id)
    if target is None:
        _raise_for(AccessDecision.NOT_FOUND, "User")
    _raise_for(await access.authorize_user_block(identity, admin_status, target), "User")
    return target
