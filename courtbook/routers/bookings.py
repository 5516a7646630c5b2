"""
Booking endpoints for players.

Requests carry club-local date and time; everything stored is UTC.
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, HTTPException, Request, status

from courtbook import db
from courtbook.dependencies import CurrentIdentity
from courtbook.guards import AccessControlDep, CurrentAdminStatus
from courtbook.models import AdminStatus, Booking, BookingCreate, BookingResponse, BookingStatus, Identity
from courtbook.rate_limit import BOOKING, limiter
from courtbook.services.access_control import AccessControl, AccessDecision, ClubAction
from courtbook.services.booking import (
    BookingRuleError,
    club_timezone,
    plan_booking_window,
    resolve_business_hours,
    to_booking_response,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


async def _load_booking(
    booking_id: str,
    identity: Identity,
    admin_status: AdminStatus,
    access: AccessControl,
) -> Booking:
    """Fetch a booking the caller owns or whose club the caller manages."""
    booking = await db.get_booking(booking_id)
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Booking {booking_id} not found",
        )
    if booking.user_id == identity.user_id:
        return booking

    decision = await access.authorize_club(identity, admin_status, booking.club_id, ClubAction.MANAGE)
    if decision is not AccessDecision.ALLOW:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No access to this booking",
        )
    return booking


async def _booking_response(booking: Booking) -> BookingResponse:
    club = await db.get_club(booking.club_id)
    if club is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Club {booking.club_id} not found",
        )
    return to_booking_response(booking, club_timezone(club))


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createBooking",
    summary="Book a court at a club-local date and time",
)
@limiter.limit(BOOKING)
async def create_booking(
    request: Request,
    body: BookingCreate,
    identity: CurrentIdentity,
) -> BookingResponse:
    court = await db.get_court(body.court_id)
    if court is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Court {body.court_id} not found",
        )
    club = await db.get_club(court.club_id)
    if club is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Club {court.club_id} not found",
        )

    tz = club_timezone(club)
    special = await db.get_special_hours(club.id, body.date)
    hours = resolve_business_hours(club, body.date, court, special)
    try:
        start, end = plan_booking_window(
            body.date, body.start_time, body.duration_minutes, tz, hours, datetime.now(UTC)
        )
    except BookingRuleError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from None

    booking = await db.create_booking_if_free(
        court_id=court.id,
        club_id=club.id,
        user_id=identity.user_id,
        start=start,
        end=end,
        price_cents=court.price_cents * body.duration_minutes // 60,
    )
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="The court is already booked for this time",
        )

    logger.info(
        "Booking %s created: court %s, %s %s (%s) for user %s",
        booking.id, court.id, body.date, body.start_time, tz, identity.user_id,
    )
    return to_booking_response(booking, tz)


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    operation_id="getBooking",
    summary="Get a booking",
)
async def get_booking(
    booking_id: str,
    identity: CurrentIdentity,
    admin_status: CurrentAdminStatus,
    access: AccessControlDep,
) -> BookingResponse:
    booking = await _load_booking(booking_id, identity, admin_status, access)
    return await _booking_response(booking)


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    operation_id="cancelBooking",
    summary="Cancel a booking",
)
@limiter.limit(BOOKING)
async def cancel_booking(
    request: Request,
    booking_id: str,
    identity: CurrentIdentity,
    admin_status: CurrentAdminStatus,
    access: AccessControlDep,
) -> BookingResponse:
    booking = await _load_booking(booking_id, identity, admin_status, access)
    if booking.status in (BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.NO_SHOW):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Booking is already {booking.status.value}",
        )

    cancelled = await db.cancel_booking(booking.id)
    logger.info("Booking %s cancelled by user %s", booking.id, identity.user_id)
    return await _booking_response(cancelled or booking)
