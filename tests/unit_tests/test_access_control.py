"""Tests for admin role resolution and scoped authorization decisions."""

import pytest

from courtbook.models import AdminStatus, AdminType, ClubRole, OrganizationRole
from courtbook.services.access_control import (
    AccessControl,
    AccessDecision,
    ClubAction,
    MembershipConflictError,
    OrganizationAction,
    can_access_club,
    can_access_organization,
    can_assign_club_admins,
    can_block_user,
    can_manage_club,
    can_manage_organization,
    can_manage_payment_keys,
)
from tests.mocks.models import (
    CLUB_2_ID,
    CLUB_ID,
    CLUB_OTHER_ID,
    ORG_2_ID,
    ORG_ID,
    make_club_membership,
    make_identity,
    make_org_membership,
    make_user,
)
from tests.mocks.repository import InMemoryMembershipRepository, UnavailableMembershipRepository

USER = "user-1"

CLUBS = {CLUB_ID: ORG_ID, CLUB_2_ID: ORG_ID, CLUB_OTHER_ID: ORG_2_ID}

ROOT = AdminStatus(admin_type=AdminType.ROOT_ADMIN)
NOBODY = AdminStatus()


def _status(admin_type: AdminType, *ids: str) -> AdminStatus:
    return AdminStatus(admin_type=admin_type, managed_ids=list(ids))


# ── Resolution ─────────────────────────────────────────────────────────────


class TestResolveAdminType:
    async def test_root_short_circuits_without_lookups(self):
        access = AccessControl(UnavailableMembershipRepository())
        status = await access.resolve_admin_type(make_identity(USER, is_root=True))
        assert status.admin_type is AdminType.ROOT_ADMIN
        assert status.managed_ids == []
        assert status.is_admin

    async def test_root_ignores_memberships(self):
        repo = InMemoryMembershipRepository(
            organization_memberships=[make_org_membership(USER, ORG_ID)],
        )
        status = await AccessControl(repo).resolve_admin_type(make_identity(USER, is_root=True))
        assert status == AdminStatus(admin_type=AdminType.ROOT_ADMIN)
        assert repo.calls == []

    async def test_org_admin_wins_over_club_admin_of_other_org(self):
        repo = InMemoryMembershipRepository(
            organization_memberships=[make_org_membership(USER, ORG_ID)],
            club_memberships=[make_club_membership(USER, CLUB_OTHER_ID, ClubRole.CLUB_ADMIN)],
            clubs=CLUBS,
        )
        status = await AccessControl(repo).resolve_admin_type(make_identity(USER))
        assert status.admin_type is AdminType.ORGANIZATION_ADMIN
        assert status.managed_ids == [ORG_ID]
        assert CLUB_OTHER_ID not in status.managed_ids
        assert "find_club_memberships" not in repo.calls

    async def test_org_member_role_is_not_admin(self):
        repo = InMemoryMembershipRepository(
            organization_memberships=[
                make_org_membership(USER, ORG_ID, OrganizationRole.MEMBER),
            ],
        )
        status = await AccessControl(repo).resolve_admin_type(make_identity(USER))
        assert status.admin_type is None
        assert status.managed_ids == []
        assert not status.is_admin

    async def test_owner_wins_over_admin_of_other_club(self):
        repo = InMemoryMembershipRepository(
            club_memberships=[
                make_club_membership(USER, CLUB_2_ID, ClubRole.CLUB_ADMIN),
                make_club_membership(USER, CLUB_ID, ClubRole.CLUB_OWNER),
            ],
        )
        status = await AccessControl(repo).resolve_admin_type(make_identity(USER))
        assert status == _status(AdminType.CLUB_OWNER, CLUB_ID)

    async def test_club_admin(self):
        repo = InMemoryMembershipRepository(
            club_memberships=[
                make_club_membership(USER, CLUB_ID, ClubRole.CLUB_ADMIN),
                make_club_membership(USER, CLUB_2_ID, ClubRole.CLUB_ADMIN),
                make_club_membership(USER, CLUB_OTHER_ID, ClubRole.MEMBER),
            ],
        )
        status = await AccessControl(repo).resolve_admin_type(make_identity(USER))
        assert status == _status(AdminType.CLUB_ADMIN, CLUB_ID, CLUB_2_ID)

    async def test_managed_ids_are_deduplicated_in_order(self):
        repo = InMemoryMembershipRepository(
            organization_memberships=[
                make_org_membership(USER, ORG_2_ID),
                make_org_membership(USER, ORG_ID),
                make_org_membership(USER, ORG_2_ID),
            ],
        )
        status = await AccessControl(repo).resolve_admin_type(make_identity(USER))
        assert status.managed_ids == [ORG_2_ID, ORG_ID]

    async def test_no_memberships(self):
        status = await AccessControl(InMemoryMembershipRepository()).resolve_admin_type(
            make_identity(USER)
        )
        assert status == NOBODY

    async def test_owner_and_admin_of_same_club_is_rejected(self):
        repo = InMemoryMembershipRepository(
            club_memberships=[
                make_club_membership(USER, CLUB_ID, ClubRole.CLUB_OWNER),
                make_club_membership(USER, CLUB_ID, ClubRole.CLUB_ADMIN),
            ],
        )
        with pytest.raises(MembershipConflictError) as exc_info:
            await AccessControl(repo).resolve_admin_type(make_identity(USER))
        assert exc_info.value.club_ids == [CLUB_ID]

    async def test_repository_errors_propagate(self):
        with pytest.raises(ConnectionError):
            await AccessControl(UnavailableMembershipRepository()).resolve_admin_type(
                make_identity(USER)
            )


# ── Pure decisions ─────────────────────────────────────────────────────────


class TestOrganizationDecisions:
    def test_root(self):
        assert can_access_organization(ROOT, ORG_ID)
        assert can_manage_organization(ROOT, ORG_ID)

    def test_org_admin_scoped_to_managed_ids(self):
        status = _status(AdminType.ORGANIZATION_ADMIN, ORG_ID)
        assert can_manage_organization(status, ORG_ID)
        assert not can_manage_organization(status, ORG_2_ID)
        assert not can_access_organization(status, ORG_2_ID)

    def test_member_reads_but_cannot_manage(self):
        assert can_access_organization(NOBODY, ORG_ID, member_organization_ids={ORG_ID})
        assert not can_manage_organization(NOBODY, ORG_ID)

    def test_club_roles_do_not_manage_organizations(self):
        assert not can_manage_organization(_status(AdminType.CLUB_OWNER, CLUB_ID), ORG_ID)
        assert not can_manage_organization(_status(AdminType.CLUB_ADMIN, ORG_ID), ORG_ID)


class TestClubDecisions:
    def test_org_admin_scoped_by_parent_organization(self):
        status = _status(AdminType.ORGANIZATION_ADMIN, "org-1")
        assert not can_manage_club(status, "club-b", "org-2")
        assert can_manage_club(status, "club-a", "org-1")

    def test_org_admin_without_known_parent(self):
        status = _status(AdminType.ORGANIZATION_ADMIN, ORG_ID)
        assert not can_manage_club(status, CLUB_ID, None)

    @pytest.mark.parametrize("admin_type", [AdminType.CLUB_OWNER, AdminType.CLUB_ADMIN])
    def test_club_roles_scoped_to_their_clubs(self, admin_type):
        status = _status(admin_type, CLUB_ID)
        assert can_manage_club(status, CLUB_ID, ORG_ID)
        assert not can_manage_club(status, CLUB_2_ID, ORG_ID)

    def test_club_admin_ids_are_not_organization_ids(self):
        # A club admin whose managed id happens to equal the parent org id.
        status = _status(AdminType.CLUB_ADMIN, ORG_ID)
        assert not can_manage_club(status, CLUB_ID, ORG_ID)

    def test_member_reads_only(self):
        assert can_access_club(NOBODY, CLUB_ID, ORG_ID, member_club_ids={CLUB_ID})
        assert not can_manage_club(NOBODY, CLUB_ID, ORG_ID)
        assert not can_access_club(NOBODY, CLUB_2_ID, ORG_ID, member_club_ids={CLUB_ID})

    def test_root(self):
        assert can_manage_club(ROOT, CLUB_OTHER_ID, ORG_2_ID)
        assert can_access_club(ROOT, CLUB_OTHER_ID, ORG_2_ID)


class TestPaymentKeyDecisions:
    @pytest.mark.parametrize("admin_type", [AdminType.ORGANIZATION_ADMIN, AdminType.CLUB_ADMIN])
    def test_denied_regardless_of_managed_ids(self, admin_type):
        status = _status(admin_type, CLUB_ID, ORG_ID)
        assert not can_manage_payment_keys(status, CLUB_ID)

    def test_owner_of_the_club(self):
        status = _status(AdminType.CLUB_OWNER, CLUB_ID)
        assert can_manage_payment_keys(status, CLUB_ID)
        assert not can_manage_payment_keys(status, CLUB_2_ID)

    def test_root_and_nobody(self):
        assert can_manage_payment_keys(ROOT, CLUB_ID)
        assert not can_manage_payment_keys(NOBODY, CLUB_ID)


class TestAssignClubAdminDecisions:
    def test_org_admin_of_parent(self):
        status = _status(AdminType.ORGANIZATION_ADMIN, ORG_ID)
        assert can_assign_club_admins(status, CLUB_ID, ORG_ID)
        assert not can_assign_club_admins(status, CLUB_OTHER_ID, ORG_2_ID)

    @pytest.mark.parametrize("admin_type", [AdminType.CLUB_OWNER, AdminType.CLUB_ADMIN])
    def test_club_roles_cannot_assign(self, admin_type):
        assert not can_assign_club_admins(_status(admin_type, CLUB_ID), CLUB_ID, ORG_ID)

    def test_root(self):
        assert can_assign_club_admins(ROOT, CLUB_ID, ORG_ID)


class TestBlockUserDecisions:
    def test_root_blocks_anyone(self):
        assert can_block_user(ROOT, ())

    def test_org_admin_needs_a_shared_organization(self):
        status = _status(AdminType.ORGANIZATION_ADMIN, ORG_ID)
        assert can_block_user(status, {ORG_2_ID, ORG_ID})
        assert not can_block_user(status, {ORG_2_ID})
        assert not can_block_user(status, ())

    @pytest.mark.parametrize("admin_type", [AdminType.CLUB_OWNER, AdminType.CLUB_ADMIN])
    def test_club_roles_cannot_block(self, admin_type):
        # managed ids are club ids, never organization ids
        assert not can_block_user(_status(admin_type, CLUB_ID, ORG_ID), {ORG_ID})

    def test_nobody(self):
        assert not can_block_user(NOBODY, {ORG_ID})


# ── Scoped service checks ──────────────────────────────────────────────────


class TestAuthorizeClub:
    async def test_unknown_club_is_not_found_even_for_root(self):
        access = AccessControl(InMemoryMembershipRepository(clubs=CLUBS))
        decision = await access.authorize_club(
            make_identity(USER, is_root=True), ROOT, "missing", ClubAction.MANAGE
        )
        assert decision is AccessDecision.NOT_FOUND

    async def test_org_admin_other_org_denied(self):
        access = AccessControl(InMemoryMembershipRepository(clubs=CLUBS))
        status = _status(AdminType.ORGANIZATION_ADMIN, ORG_ID)
        identity = make_identity(USER)
        assert await access.authorize_club(identity, status, CLUB_ID, ClubAction.MANAGE) is AccessDecision.ALLOW
        assert (
            await access.authorize_club(identity, status, CLUB_OTHER_ID, ClubAction.MANAGE)
            is AccessDecision.DENY
        )

    async def test_member_access_uses_membership_rows(self):
        repo = InMemoryMembershipRepository(
            club_memberships=[make_club_membership(USER, CLUB_ID, ClubRole.MEMBER)],
            clubs=CLUBS,
        )
        access = AccessControl(repo)
        identity = make_identity(USER)
        assert await access.authorize_club(identity, NOBODY, CLUB_ID, ClubAction.ACCESS) is AccessDecision.ALLOW
        assert await access.authorize_club(identity, NOBODY, CLUB_ID, ClubAction.MANAGE) is AccessDecision.DENY
        assert await access.authorize_club(identity, NOBODY, CLUB_2_ID, ClubAction.ACCESS) is AccessDecision.DENY

    async def test_payment_keys_and_admin_assignment(self):
        access = AccessControl(InMemoryMembershipRepository(clubs=CLUBS))
        identity = make_identity(USER)
        owner = _status(AdminType.CLUB_OWNER, CLUB_ID)
        org_admin = _status(AdminType.ORGANIZATION_ADMIN, ORG_ID)

        assert (
            await access.authorize_club(identity, owner, CLUB_ID, ClubAction.MANAGE_PAYMENT_KEYS)
            is AccessDecision.ALLOW
        )
        assert (
            await access.authorize_club(identity, org_admin, CLUB_ID, ClubAction.MANAGE_PAYMENT_KEYS)
            is AccessDecision.DENY
        )
        assert (
            await access.authorize_club(identity, org_admin, CLUB_ID, ClubAction.ASSIGN_ADMINS)
            is AccessDecision.ALLOW
        )
        assert (
            await access.authorize_club(identity, owner, CLUB_ID, ClubAction.ASSIGN_ADMINS)
            is AccessDecision.DENY
        )


class TestAuthorizeOrganization:
    async def test_member_can_read(self):
        repo = InMemoryMembershipRepository(
            organization_memberships=[make_org_membership(USER, ORG_ID, OrganizationRole.MEMBER)],
        )
        access = AccessControl(repo)
        identity = make_identity(USER)
        assert (
            await access.authorize_organization(identity, NOBODY, ORG_ID, OrganizationAction.ACCESS)
            is AccessDecision.ALLOW
        )
        assert (
            await access.authorize_organization(identity, NOBODY, ORG_ID, OrganizationAction.MANAGE)
            is AccessDecision.DENY
        )

    async def test_admin_does_not_hit_repository(self):
        repo = InMemoryMembershipRepository()
        access = AccessControl(repo)
        status = _status(AdminType.ORGANIZATION_ADMIN, ORG_ID)
        decision = await access.authorize_organization(
            make_identity(USER), status, ORG_ID, OrganizationAction.ACCESS
        )
        assert decision is AccessDecision.ALLOW
        assert repo.calls == []


class TestAuthorizeUserBlock:
    TARGET = "user-2"

    async def test_org_admin_reaches_members_through_clubs(self):
        repo = InMemoryMembershipRepository(
            club_memberships=[make_club_membership(self.TARGET, CLUB_ID, ClubRole.MEMBER)],
            clubs=CLUBS,
        )
        access = AccessControl(repo)
        identity = make_identity(USER)
        target = make_user(self.TARGET)
        assert (
            await access.authorize_user_block(identity, _status(AdminType.ORGANIZATION_ADMIN, ORG_ID), target)
            is AccessDecision.ALLOW
        )
        assert (
            await access.authorize_user_block(identity, _status(AdminType.ORGANIZATION_ADMIN, ORG_2_ID), target)
            is AccessDecision.DENY
        )

    async def test_org_admin_reaches_organization_members(self):
        repo = InMemoryMembershipRepository(
            organization_memberships=[make_org_membership(self.TARGET, ORG_ID, OrganizationRole.MEMBER)],
        )
        decision = await AccessControl(repo).authorize_user_block(
            make_identity(USER), _status(AdminType.ORGANIZATION_ADMIN, ORG_ID), make_user(self.TARGET)
        )
        assert decision is AccessDecision.ALLOW

    async def test_root_target_is_denied_even_to_root(self):
        access = AccessControl(UnavailableMembershipRepository())
        decision = await access.authorize_user_block(
            make_identity(USER, is_root=True), ROOT, make_user(self.TARGET, is_root=True)
        )
        assert decision is AccessDecision.DENY

    async def test_root_skips_membership_lookups(self):
        repo = InMemoryMembershipRepository()
        decision = await AccessControl(repo).authorize_user_block(
            make_identity(USER, is_root=True), ROOT, make_user(self.TARGET)
        )
        assert decision is AccessDecision.ALLOW
        assert repo.calls == []
