"""
Pre-built model instances for use in tests.

Import individual constants or use the factory helpers to create
custom variants:

    from tests.mocks.models import CLUB_ID, make_booking, make_identity
"""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID, uuid5

from courtbook.models import (
    Booking,
    BookingStatus,
    BusinessHours,
    Club,
    ClubMembership,
    ClubRole,
    Court,
    Identity,
    OrganizationMembership,
    OrganizationRole,
    User,
)

# ── Deterministic ids ──────────────────────────────────────────────────────
# Namespace for generating stable test ids
_TEST_NS = UUID("00000000-0000-0000-0000-000000000000")


def _uuid(name: str) -> str:
    return str(uuid5(_TEST_NS, name))


# ── Tenancy ────────────────────────────────────────────────────────────────

ORG_ID = _uuid("org-kyiv")
ORG_2_ID = _uuid("org-lviv")

CLUB_ID = _uuid("club-kyiv-central")          # ORG, Europe/Kyiv
CLUB_2_ID = _uuid("club-kyiv-no-timezone")    # ORG, no timezone of its own
CLUB_OTHER_ID = _uuid("club-new-york")        # ORG_2, America/New_York

COURT_ID = _uuid("court-1")
COURT_2_ID = _uuid("court-2")
COURT_OTHER_ID = _uuid("court-ny-1")

# ── Users ──────────────────────────────────────────────────────────────────

ROOT_ID = _uuid("user-root")
ORG_ADMIN_ID = _uuid("user-org-admin")
ORG_2_ADMIN_ID = _uuid("user-org-2-admin")
CLUB_OWNER_ID = _uuid("user-club-owner")
CLUB_ADMIN_ID = _uuid("user-club-admin")
MEMBER_ID = _uuid("user-member")
PLAYER_ID = _uuid("user-player")
BLOCKED_ID = _uuid("user-blocked")

_CREATED = datetime(2026, 1, 1, tzinfo=UTC)


# ── Factories ──────────────────────────────────────────────────────────────


def make_identity(user_id: str = PLAYER_ID, is_root: bool = False) -> Identity:
    return Identity(user_id=user_id, is_root=is_root)


def make_user(user_id: str = PLAYER_ID, is_root: bool = False, is_blocked: bool = False) -> User:
    return User(
        id=user_id,
        email=f"{user_id}@courtbook.test",
        is_root=is_root,
        is_blocked=is_blocked,
        created_at=_CREATED,
    )


def make_org_membership(
    user_id: str,
    organization_id: str = ORG_ID,
    role: OrganizationRole = OrganizationRole.ORGANIZATION_ADMIN,
    is_primary_owner: bool = False,
) -> OrganizationMembership:
    return OrganizationMembership(
        user_id=user_id,
        organization_id=organization_id,
        role=role,
        is_primary_owner=is_primary_owner,
    )


def make_club_membership(
    user_id: str,
    club_id: str = CLUB_ID,
    role: ClubRole = ClubRole.CLUB_ADMIN,
) -> ClubMembership:
    return ClubMembership(user_id=user_id, club_id=club_id, role=role)


def make_club(
    club_id: str = CLUB_ID,
    organization_id: str = ORG_ID,
    timezone: str | None = "Europe/Kyiv",
    business_hours: list[BusinessHours] | None = None,
) -> Club:
    return Club(
        id=club_id,
        organization_id=organization_id,
        name="Central Tennis Club",
        timezone=timezone,
        business_hours=business_hours or [],
        created_at=_CREATED,
    )


def make_court(
    court_id: str = COURT_ID,
    club_id: str = CLUB_ID,
    open_hour: int | None = None,
    close_hour: int | None = None,
) -> Court:
    return Court(
        id=court_id,
        club_id=club_id,
        name="Court 1",
        surface_type="hard",
        court_type="indoor",
        open_hour=open_hour,
        close_hour=close_hour,
        price_cents=40000,
    )


def make_booking(
    start: datetime,
    end: datetime,
    status: BookingStatus = BookingStatus.RESERVED,
    court_id: str = COURT_ID,
    user_id: str = PLAYER_ID,
) -> Booking:
    """Factory to create a Booking with sensible defaults."""
    return Booking(
        id=_uuid(f"booking-{court_id}-{start.isoformat()}"),
        court_id=court_id,
        club_id=CLUB_ID,
        user_id=user_id,
        start=start,
        end=end,
        status=status,
        price_cents=40000,
        created_at=_CREATED,
    )
