"""
Admin session endpoints: who am I as an admin, and the timezone catalogue
used by club settings.
"""

from fastapi import APIRouter, Depends

from courtbook.guards import CurrentAdminStatus, require_admin
from courtbook.models import AdminStatus
from courtbook.time_engine import COMMON_TIMEZONES

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get(
    "/check-access",
    response_model=AdminStatus,
    operation_id="checkAdminAccess",
    summary="Resolve the caller's admin type and managed ids",
)
async def check_access(admin_status: CurrentAdminStatus) -> AdminStatus:
    return admin_status


@router.get(
    "/timezones",
    response_model=list[dict[str, str]],
    operation_id="listTimezones",
    summary="IANA timezones offered in club settings",
    dependencies=[Depends(require_admin)],
)
async def list_timezones() -> list[dict[str, str]]:
    return [tz._asdict() for tz in COMMON_TIMEZONES]
