"""
Admin role resolution and scoped authorization decisions.

A caller is classified into exactly one admin type, by precedence::

    root_admin > organization_admin > club_owner > club_admin > None

Only the ids belonging to the winning type are carried in
``AdminStatus.managed_ids``; lower-precedence memberships are not merged
in. The scope checks below combine that status with the resource being
touched (an organization or a club) to decide allow / deny / not found.

Decisions are computed fresh for every request. Nothing is cached across
requests, so a role change takes effect on the caller's next request.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable
from enum import Enum
from typing import Protocol

from courtbook.models import (
    AdminStatus,
    AdminType,
    ClubMembership,
    ClubRole,
    Identity,
    OrganizationMembership,
    OrganizationRole,
    User,
)

logger = logging.getLogger(__name__)


# ── Collaborators ──────────────────────────────────────────────────────────


class MembershipRepository(Protocol):
    """Read access to memberships and club ownership."""

    async def find_organization_memberships(self, user_id: str) -> list[OrganizationMembership]:
        """All organization membership rows of a user."""
        ...

    async def find_club_memberships(self, user_id: str) -> list[ClubMembership]:
        """All club membership rows of a user."""
        ...

    async def find_club_parent_organization(self, club_id: str) -> str | None:
        """Organization id owning the club, or None if the club does not exist."""
        ...


class MembershipConflictError(RuntimeError):
    """A user holds both CLUB_OWNER and CLUB_ADMIN for the same club."""

    def __init__(self, user_id: str, club_ids: Iterable[str]) -> None:
        self.user_id = user_id
        self.club_ids = sorted(club_ids)
        super().__init__(
            f"User {user_id} is both CLUB_OWNER and CLUB_ADMIN of clubs {self.club_ids}"
        )


class AccessDecision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
    NOT_FOUND = "not_found"


class OrganizationAction(str, Enum):
    ACCESS = "access"
    MANAGE = "manage"


class ClubAction(str, Enum):
    ACCESS = "access"
    MANAGE = "manage"
    MANAGE_PAYMENT_KEYS = "manage_payment_keys"
    ASSIGN_ADMINS = "assign_admins"


ROOT_STATUS = AdminStatus(admin_type=AdminType.ROOT_ADMIN)
NO_ADMIN_STATUS = AdminStatus()


def _unique(ids: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(ids))


# ── Pure decisions ─────────────────────────────────────────────────────────


def can_access_organization(
    status: AdminStatus,
    organization_id: str,
    member_organization_ids: Collection[str] = (),
) -> bool:
    """Read access: root, an admin of the organization, or any member of it."""
    if status.admin_type is AdminType.ROOT_ADMIN:
        return True
    if (
        status.admin_type is AdminType.ORGANIZATION_ADMIN
        and organization_id in status.managed_ids
    ):
        return True
    return organization_id in member_organization_ids


def can_manage_organization(status: AdminStatus, organization_id: str) -> bool:
    if status.admin_type is AdminType.ROOT_ADMIN:
        return True
    return (
        status.admin_type is AdminType.ORGANIZATION_ADMIN
        and organization_id in status.managed_ids
    )


def can_manage_club(
    status: AdminStatus,
    club_id: str,
    parent_organization_id: str | None,
) -> bool:
    """
    Write access to a club's settings and bookings.

    Organization admins reach a club through its parent organization;
    club owners and club admins only through their own managed club ids.
    """
    if status.admin_type is AdminType.ROOT_ADMIN:
        return True
    if status.admin_type is AdminType.ORGANIZATION_ADMIN:
        return parent_organization_id is not None and parent_organization_id in status.managed_ids
    if status.admin_type in (AdminType.CLUB_OWNER, AdminType.CLUB_ADMIN):
        return club_id in status.managed_ids
    return False


def can_access_club(
    status: AdminStatus,
    club_id: str,
    parent_organization_id: str | None,
    member_club_ids: Collection[str] = (),
) -> bool:
    """Read access: anyone who can manage the club, plus any club member."""
    return can_manage_club(status, club_id, parent_organization_id) or club_id in member_club_ids


def can_manage_payment_keys(status: AdminStatus, club_id: str) -> bool:
    # Organization admins and club admins never qualify.
    if status.admin_type is AdminType.ROOT_ADMIN:
        return True
    return status.admin_type is AdminType.CLUB_OWNER and club_id in status.managed_ids


def can_assign_club_admins(
    status: AdminStatus,
    club_id: str,
    parent_organization_id: str | None,
) -> bool:
    """Only root and admins of the parent organization may list or assign club admins."""
    if status.admin_type is AdminType.ROOT_ADMIN:
        return True
    return (
        status.admin_type is AdminType.ORGANIZATION_ADMIN
        and parent_organization_id is not None
        and parent_organization_id in status.managed_ids
    )


def can_block_user(status: AdminStatus, target_organization_ids: Collection[str]) -> bool:
    """
    Block or unblock another user.

    Root may do so anywhere. An organization admin only reaches users who
    belong to one of their organizations, directly or through a club.
    """
    if status.admin_type is AdminType.ROOT_ADMIN:
        return True
    return status.admin_type is AdminType.ORGANIZATION_ADMIN and any(
        org_id in status.managed_ids for org_id in target_organization_ids
    )


# ── Service ────────────────────────────────────────────────────────────────


class AccessControl:
    """Resolves admin status and answers scoped questions for one caller."""

    def __init__(self, repository: MembershipRepository) -> None:
        self._repo = repository

    async def resolve_admin_type(self, identity: Identity) -> AdminStatus:
        """
        Classify *identity* into a single admin type.

        Root callers never touch the repository. Otherwise organization
        admin rows win over club owner rows, which win over club admin rows.
        A club appearing as both owner and admin raises
        :class:`MembershipConflictError`.
        """
        if identity.is_root:
            return ROOT_STATUS

        org_memberships = await self._repo.find_organization_memberships(identity.user_id)
        org_admin_ids = _unique(
            m.organization_id
            for m in org_memberships
            if m.role is OrganizationRole.ORGANIZATION_ADMIN
        )
        if org_admin_ids:
            return AdminStatus(admin_type=AdminType.ORGANIZATION_ADMIN, managed_ids=org_admin_ids)

        club_memberships = await self._repo.find_club_memberships(identity.user_id)
        owned = _unique(m.club_id for m in club_memberships if m.role is ClubRole.CLUB_OWNER)
        administered = _unique(
            m.club_id for m in club_memberships if m.role is ClubRole.CLUB_ADMIN
        )

        conflicting = set(owned) & set(administered)
        if conflicting:
            logger.error(
                "User %s holds CLUB_OWNER and CLUB_ADMIN for %s",
                identity.user_id, sorted(conflicting),
            )
            raise MembershipConflictError(identity.user_id, conflicting)

        if owned:
            return AdminStatus(admin_type=AdminType.CLUB_OWNER, managed_ids=owned)
        if administered:
            return AdminStatus(admin_type=AdminType.CLUB_ADMIN, managed_ids=administered)
        return NO_ADMIN_STATUS

    async def authorize_organization(
        self,
        identity: Identity,
        status: AdminStatus,
        organization_id: str,
        action: OrganizationAction,
    ) -> AccessDecision:
        """
        Decide an organization-scoped action.

        The caller is responsible for establishing that the organization
        exists; this only answers allow or deny.
        """
        if action is OrganizationAction.MANAGE:
            allowed = can_manage_organization(status, organization_id)
        elif can_access_organization(status, organization_id):
            allowed = True
        else:
            memberships = await self._repo.find_organization_memberships(identity.user_id)
            allowed = can_access_organization(
                status, organization_id, {m.organization_id for m in memberships}
            )
        return AccessDecision.ALLOW if allowed else AccessDecision.DENY

    async def authorize_club(
        self,
        identity: Identity,
        status: AdminStatus,
        club_id: str,
        action: ClubAction,
    ) -> AccessDecision:
        """
        Decide a club-scoped action.

        An unknown club yields NOT_FOUND regardless of who is asking.
        """
        parent_organization_id = await self._repo.find_club_parent_organization(club_id)
        if parent_organization_id is None:
            return AccessDecision.NOT_FOUND

        if action is ClubAction.MANAGE:
            allowed = can_manage_club(status, club_id, parent_organization_id)
        elif action is ClubAction.MANAGE_PAYMENT_KEYS:
            allowed = can_manage_payment_keys(status, club_id)
        elif action is ClubAction.ASSIGN_ADMINS:
            allowed = can_assign_club_admins(status, club_id, parent_organization_id)
        elif can_manage_club(status, club_id, parent_organization_id):
            allowed = True
        else:
            memberships = await self._repo.find_club_memberships(identity.user_id)
            allowed = can_access_club(
                status, club_id, parent_organization_id, {m.club_id for m in memberships}
            )

        if not allowed:
            logger.info(
                "Denied %s on club %s for user %s (%s)",
                action.value, club_id, identity.user_id,
                status.admin_type.value if status.admin_type else "no admin role",
            )
        return AccessDecision.ALLOW if allowed else AccessDecision.DENY

    async def authorize_user_block(
        self,
        identity: Identity,
        status: AdminStatus,
        target: User,
    ) -> AccessDecision:
        """Decide whether the caller may block or unblock *target*. Root users are never eligible."""
        if target.is_root:
            allowed = False
        elif status.admin_type is AdminType.ROOT_ADMIN:
            allowed = True
        else:
            allowed = can_block_user(status, await self._target_organization_ids(target.id))

        if not allowed:
            logger.info(
                "Denied block change on user %s for user %s (%s)",
                target.id, identity.user_id,
                status.admin_type.value if status.admin_type else "no admin role",
            )
        return AccessDecision.ALLOW if allowed else AccessDecision.DENY

    async def _target_organization_ids(self, user_id: str) -> set[str]:
        org_ids = {m.organization_id for m in await self._repo.find_organization_memberships(user_id)}
        for membership in await self._repo.find_club_memberships(user_id):
            parent = await self._repo.find_club_parent_organization(membership.club_id)
            if parent is not None:
                org_ids.add(parent)
        return org_ids
