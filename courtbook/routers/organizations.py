"""
Organization admin endpoints.
"""

from fastapi import APIRouter, Depends, Request

from courtbook import db
from courtbook.dependencies import PaginationParams, paginate
from courtbook.guards import require_organization
from courtbook.models import ClubListResponse, Organization, OrganizationUpdate
from courtbook.rate_limit import ADMIN, limiter
from courtbook.services.access_control import OrganizationAction

router = APIRouter(prefix="/api/admin/organizations", tags=["organizations"])


@router.get(
    "/{org_id}",
    response_model=Organization,
    operation_id="getOrganization",
    summary="Get an organization",
)
async def get_organization(
    organization: Organization = Depends(require_organization(OrganizationAction.ACCESS)),
) -> Organization:
    return organization


@router.patch(
    "/{org_id}",
    response_model=Organization,
    operation_id="updateOrganization",
    summary="Rename an organization",
)
@limiter.limit(ADMIN)
async def update_organization(
    request: Request,
    body: OrganizationUpdate,
    organization: Organization = Depends(require_organization(OrganizationAction.MANAGE)),
) -> Organization:
    updated = await db.update_organization(organization.id, name=body.name)
    return updated or organization


@router.get(
    "/{org_id}/clubs",
    response_model=ClubListResponse,
    operation_id="listOrganizationClubs",
    summary="List the clubs of an organization",
)
async def list_organization_clubs(
    organization: Organization = Depends(require_organization(OrganizationAction.ACCESS)),
    pagination: PaginationParams = Depends(PaginationParams),
) -> ClubListResponse:
    clubs = await db.list_clubs_by_organization(organization.id)
    return paginate(clubs, pagination, ClubListResponse)
