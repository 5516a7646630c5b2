"""
Public court availability in club-local time.
"""

from datetime import UTC, datetime, timedelta

from fastapi import APIRouter, HTTPException, Query, status

from courtbook import db
from courtbook.models import CourtAvailability
from courtbook.services.booking import (
    build_court_availability,
    club_timezone,
    resolve_business_hours,
)
from courtbook.time_engine import get_day_bounds, get_today_in_club_timezone

router = APIRouter(prefix="/api/clubs/{club_id}/courts", tags=["availability"])


@router.get(
    "/{court_id}/availability",
    response_model=CourtAvailability,
    operation_id="getCourtAvailability",
    summary="Hourly availability of a court for a club-local date",
)
async def get_court_availability(
    club_id: str,
    court_id: str,
    date: str | None = Query(
        None,
        pattern=r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$",
        description="Club-local date (YYYY-MM-DD), today if omitted",
    ),
) -> CourtAvailability:
    club = await db.get_club(club_id)
    if club is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Club {club_id} not found",
        )
    court = await db.get_court(court_id)
    if court is None or court.club_id != club.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Court {court_id} not found in club {club_id}",
        )

    now = datetime.now(UTC)
    tz = club_timezone(club)
    day = date or get_today_in_club_timezone(tz, now=now)

    # The local day lies within one UTC day of the literal date's UTC bounds.
    bounds = get_day_bounds(day)
    bookings = await db.list_court_bookings(
        court.id,
        bounds.start_of_day - timedelta(days=1),
        bounds.end_of_day + timedelta(days=1),
    )

    special = await db.get_special_hours(club.id, day)
    hours = resolve_business_hours(club, day, court, special)
    return build_court_availability(court, day, tz, hours, bookings, now)
