"""
Club admin endpoints: settings, opening hours, payment keys, club admins
and the club-local booking list.
"""

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from courtbook import db
from courtbook.dependencies import PaginationParams, paginate
from courtbook.guards import require_club
from courtbook.models import (
    BookingListResponse,
    BusinessHours,
    Club,
    ClubAdmin,
    ClubAdminAssign,
    ClubRole,
    ClubUpdate,
    PaymentKeys,
    PaymentKeysUpdate,
    SpecialHours,
)
from courtbook.rate_limit import ADMIN, limiter
from courtbook.services.access_control import ClubAction
from courtbook.services.booking import club_timezone, to_booking_response
from courtbook.time_engine import get_today_in_club_timezone, is_valid_iana_timezone, local_day_bounds

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/clubs", tags=["admin-clubs"])


# ── Settings ───────────────────────────────────────────────────────────────


@router.get(
    "/{club_id}",
    response_model=Club,
    operation_id="getAdminClub",
    summary="Get club settings",
)
async def get_club(club: Club = Depends(require_club(ClubAction.ACCESS))) -> Club:
    return club


@router.patch(
    "/{club_id}",
    response_model=Club,
    operation_id="updateClub",
    summary="Update club name and/or timezone",
)
@limiter.limit(ADMIN)
async def update_club(
    request: Request,
    body: ClubUpdate,
    club: Club = Depends(require_club(ClubAction.MANAGE)),
) -> Club:
    if body.timezone is not None and not is_valid_iana_timezone(body.timezone):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid timezone {body.timezone!r}, expected an IANA identifier",
        )
    updated = await db.update_club(club.id, name=body.name, timezone_name=body.timezone)
    if body.timezone is not None and body.timezone != club.timezone:
        logger.info("Club %s timezone changed to %s", club.id, body.timezone)
    return updated or club


@router.put(
    "/{club_id}/hours",
    response_model=Club,
    operation_id="setBusinessHours",
    summary="Replace the club's weekly opening hours",
)
@limiter.limit(ADMIN)
async def set_business_hours(
    request: Request,
    body: list[BusinessHours],
    club: Club = Depends(require_club(ClubAction.MANAGE)),
) -> Club:
    days = [h.day_of_week for h in body]
    if len(days) != len(set(days)):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Each weekday may appear only once",
        )
    for h in body:
        if not h.is_closed and h.open_hour >= h.close_hour:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Opening hour must be before closing hour on day {h.day_of_week}",
            )

    await db.set_business_hours(club.id, body)
    logger.info("Weekly hours of club %s replaced (%d days)", club.id, len(body))
    return await db.get_club(club.id) or club


@router.put(
    "/{club_id}/special-hours",
    response_model=SpecialHours,
    operation_id="setSpecialHours",
    summary="Override opening hours for one club-local date",
)
@limiter.limit(ADMIN)
async def set_special_hours(
    request: Request,
    body: SpecialHours,
    club: Club = Depends(require_club(ClubAction.MANAGE)),
) -> SpecialHours:
    # Rejects impossible calendar dates such as 2030-02-30.
    local_day_bounds(body.date, club_timezone(club))
    if (
        not body.is_closed
        and body.open_hour is not None
        and body.close_hour is not None
        and body.open_hour >= body.close_hour
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Opening hour must be before closing hour",
        )

    await db.set_special_hours(club.id, body)
    logger.info("Special hours of club %s set for %s", club.id, body.date)
    return await db.get_special_hours(club.id, body.date) or body


# ── Payment keys ───────────────────────────────────────────────────────────


@router.get(
    "/{club_id}/payment-keys",
    response_model=PaymentKeys,
    operation_id="getPaymentKeys",
    summary="Get the club's payment provider keys",
)
async def get_payment_keys(
    club: Club = Depends(require_club(ClubAction.MANAGE_PAYMENT_KEYS)),
) -> PaymentKeys:
    keys = await db.get_payment_keys(club.id)
    if keys is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Club {club.id} not found",
        )
    return keys


@router.put(
    "/{club_id}/payment-keys",
    response_model=PaymentKeys,
    operation_id="updatePaymentKeys",
    summary="Update the club's payment provider keys",
)
@limiter.limit(ADMIN)
async def update_payment_keys(
    request: Request,
    body: PaymentKeysUpdate,
    club: Club = Depends(require_club(ClubAction.MANAGE_PAYMENT_KEYS)),
) -> PaymentKeys:
    keys = await db.update_payment_keys(club.id, body.model_dump(include=body.model_fields_set))
    if keys is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Club {club.id} not found",
        )
    logger.info("Payment keys updated for club %s: %s", club.id, sorted(body.model_fields_set))
    return keys


# ── Club admins ────────────────────────────────────────────────────────────


@router.get(
    "/{club_id}/admins",
    response_model=list[ClubAdmin],
    operation_id="listClubAdmins",
    summary="List the club's admins",
)
async def list_club_admins(
    club: Club = Depends(require_club(ClubAction.ASSIGN_ADMINS)),
) -> list[ClubAdmin]:
    return await db.list_club_admins(club.id)


@router.post(
    "/{club_id}/admins",
    response_model=ClubAdmin,
    status_code=status.HTTP_201_CREATED,
    operation_id="assignClubAdmin",
    summary="Make a user an admin of the club",
)
@limiter.limit(ADMIN)
async def assign_club_admin(
    request: Request,
    body: ClubAdminAssign,
    club: Club = Depends(require_club(ClubAction.ASSIGN_ADMINS)),
) -> ClubAdmin:
    user = await db.get_user(body.user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {body.user_id} not found",
        )

    memberships = await db.list_club_memberships(user.id)
    if any(m.club_id == club.id and m.role is ClubRole.CLUB_OWNER for m in memberships):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User is the owner of this club",
        )

    await db.add_club_member(club.id, user.id, ClubRole.CLUB_ADMIN)
    logger.info("User %s assigned as admin of club %s", user.id, club.id)
    return ClubAdmin(id=user.id, name=user.name, email=user.email)


@router.delete(
    "/{club_id}/admins/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    operation_id="removeClubAdmin",
    summary="Revoke a user's admin role in the club",
)
@limiter.limit(ADMIN)
async def remove_club_admin(
    request: Request,
    user_id: str,
    club: Club = Depends(require_club(ClubAction.ASSIGN_ADMINS)),
) -> Response:
    removed = await db.remove_club_admin(club.id, user_id)
    if not removed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} is not an admin of club {club.id}",
        )
    logger.info("User %s removed as admin of club %s", user_id, club.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ── Bookings ───────────────────────────────────────────────────────────────


@router.get(
    "/{club_id}/bookings",
    response_model=BookingListResponse,
    operation_id="listClubBookings",
    summary="List the club's bookings on a club-local day",
)
async def list_club_bookings(
    club: Club = Depends(require_club(ClubAction.MANAGE)),
    date: str | None = Query(
        None,
        pattern=r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$",
        description="Club-local date (YYYY-MM-DD), today if omitted",
    ),
    pagination: PaginationParams = Depends(PaginationParams),
) -> BookingListResponse:
    tz = club_timezone(club)
    day = date or get_today_in_club_timezone(tz)
    bounds = local_day_bounds(day, tz)
    bookings = await db.list_club_bookings(
        club.id, bounds.start_of_day, bounds.end_of_day + timedelta(milliseconds=1)
    )
    return paginate([to_booking_response(b, tz) for b in bookings], pagination, BookingListResponse)
