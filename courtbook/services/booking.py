"""
Booking rules: live status, slot blocking, opening hours and the
per-court availability grid.

Everything here is pure. Callers pass in ``now`` and the club's resolved
timezone, which keeps the rules deterministic under test.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import NamedTuple

from courtbook.config import PLATFORM_TIMEZONE
from courtbook.models import (
    AvailabilitySlot,
    Booking,
    BookingResponse,
    BookingStatus,
    Club,
    Court,
    CourtAvailability,
    SpecialHours,
)
from courtbook.time_engine import (
    LocalFormat,
    add_minutes_utc,
    convert_local_to_utc,
    convert_utc_to_local,
    create_utc_date,
    do_ranges_overlap,
    format_utc_to_local,
    is_existing_local_time,
    resolve_timezone,
)

DEFAULT_OPEN_HOUR = 9
DEFAULT_CLOSE_HOUR = 22
SLOT_MINUTES = 60

_TERMINAL = frozenset({BookingStatus.CANCELLED, BookingStatus.NO_SHOW, BookingStatus.COMPLETED})

_STATUS_LABELS: dict[BookingStatus, str] = {
    BookingStatus.PENDING: "Pending",
    BookingStatus.PAID: "Paid",
    BookingStatus.RESERVED: "Reserved",
    BookingStatus.ONGOING: "Ongoing",
    BookingStatus.COMPLETED: "Completed",
    BookingStatus.CANCELLED: "Cancelled",
    BookingStatus.NO_SHOW: "No-show",
}


class BookingRuleError(ValueError):
    """A booking request breaks a scheduling rule (past, closed, out of hours)."""


def club_timezone(club: Club) -> str:
    """The IANA zone a club's wall-clock times are interpreted in."""
    return resolve_timezone(club.timezone, PLATFORM_TIMEZONE)


# ── Status ─────────────────────────────────────────────────────────────────


def get_dynamic_status(
    start: datetime,
    end: datetime,
    now: datetime | None = None,
) -> BookingStatus:
    """Reserved before start, ongoing during ``[start, end)``, completed after."""
    now = now or datetime.now(UTC)
    if now < start:
        return BookingStatus.RESERVED
    if now < end:
        return BookingStatus.ONGOING
    return BookingStatus.COMPLETED


def calculate_booking_status(
    start: datetime,
    end: datetime,
    persistent_status: BookingStatus,
    now: datetime | None = None,
) -> BookingStatus:
    """The status to display: terminal stored states win, else the live one."""
    if persistent_status in _TERMINAL:
        return persistent_status
    return get_dynamic_status(start, end, now)


def should_mark_as_completed(
    end: datetime,
    persistent_status: BookingStatus,
    now: datetime | None = None,
) -> bool:
    now = now or datetime.now(UTC)
    return now >= end and persistent_status not in _TERMINAL


def status_label(status: BookingStatus) -> str:
    return _STATUS_LABELS.get(status, status.value)


# ── Slot blocking ──────────────────────────────────────────────────────────


class SlotBlockReason(str, Enum):
    PAST_DAY = "past_day"
    PAST_HOUR = "past_hour"


class SlotBlockStatus(NamedTuple):
    is_blocked: bool
    reason: SlotBlockReason | None = None


def is_slot_blocked(slot_date: str, slot_hour: int, now_local: datetime) -> SlotBlockStatus:
    """
    Whether an hourly slot can no longer be booked.

    *now_local* is the current club-local wall-clock time. Earlier days are
    blocked, and so are earlier hours of today. The hour in progress stays
    bookable.
    """
    today = now_local.strftime(LocalFormat.DATE.value)
    if slot_date < today:
        return SlotBlockStatus(True, SlotBlockReason.PAST_DAY)
    if slot_date == today and slot_hour < now_local.hour:
        return SlotBlockStatus(True, SlotBlockReason.PAST_HOUR)
    return SlotBlockStatus(False)


# ── Opening hours ──────────────────────────────────────────────────────────


class OpeningHours(NamedTuple):
    open_hour: int
    close_hour: int
    is_closed: bool = False


CLOSED = OpeningHours(0, 0, is_closed=True)


def resolve_business_hours(
    club: Club,
    date_str: str,
    court: Court | None = None,
    special_hours: SpecialHours | None = None,
) -> OpeningHours:
    """
    Effective opening hours for a club-local date.

    Priority: a special day override, then the weekly schedule, then the
    9:00-22:00 default. Court-level hours narrow the result; if the
    intersection is empty the club hours are used as they are.
    """
    if special_hours is not None:
        if special_hours.is_closed:
            return CLOSED
        club_hours = OpeningHours(
            special_hours.open_hour if special_hours.open_hour is not None else DEFAULT_OPEN_HOUR,
            special_hours.close_hour if special_hours.close_hour is not None else DEFAULT_CLOSE_HOUR,
        )
    else:
        weekday = create_utc_date(date_str, "00:00").weekday()
        weekly = next((h for h in club.business_hours if h.day_of_week == weekday), None)
        if weekly is None:
            club_hours = OpeningHours(DEFAULT_OPEN_HOUR, DEFAULT_CLOSE_HOUR)
        elif weekly.is_closed:
            return CLOSED
        else:
            club_hours = OpeningHours(weekly.open_hour, weekly.close_hour)

    if court is None:
        return club_hours

    open_hour = club_hours.open_hour
    close_hour = club_hours.close_hour
    if court.open_hour is not None:
        open_hour = max(open_hour, court.open_hour)
    if court.close_hour is not None:
        close_hour = min(close_hour, court.close_hour)
    if open_hour >= close_hour:
        return club_hours
    return OpeningHours(open_hour, close_hour)


# ── Availability ───────────────────────────────────────────────────────────


def build_court_availability(
    court: Court,
    date_str: str,
    tz: str,
    hours: OpeningHours,
    bookings: list[Booking],
    now: datetime,
) -> CourtAvailability:
    """
    Hourly slots of one court for a club-local date.

    Each local hour is converted to its UTC interval and checked against
    the court's non-cancelled bookings with the half-open overlap rule.
    Hours that do not exist on the local clock (spring-forward) are left
    out. A wall-clock hour that repeats at fall-back is offered once, at
    its first occurrence; the second pass of that hour has no slot, since
    booking requests name wall-clock times only.
    """
    now_local = convert_utc_to_local(now, tz)
    active = [b for b in bookings if b.status is not BookingStatus.CANCELLED]

    slots: list[AvailabilitySlot] = []
    if not hours.is_closed:
        for hour in range(hours.open_hour, hours.close_hour):
            local_time = f"{hour:02d}:00"
            if not is_existing_local_time(date_str, local_time, tz):
                continue
            start = convert_local_to_utc(date_str, local_time, tz)
            end = add_minutes_utc(start, SLOT_MINUTES)
            taken = any(do_ranges_overlap(start, end, b.start, b.end) for b in active)
            block = is_slot_blocked(date_str, hour, now_local)
            slots.append(
                AvailabilitySlot(
                    local_time=local_time,
                    start=start,
                    end=end,
                    available=not taken and not block.is_blocked,
                    blocked=block.is_blocked,
                    block_reason=block.reason.value if block.reason else None,
                )
            )

    return CourtAvailability(
        court_id=court.id,
        date=date_str,
        timezone=tz,
        open_hour=hours.open_hour,
        close_hour=hours.close_hour,
        slots=slots,
    )


# ── Booking requests ───────────────────────────────────────────────────────


def plan_booking_window(
    date_str: str,
    start_time: str,
    duration_minutes: int,
    tz: str,
    hours: OpeningHours,
    now: datetime,
) -> tuple[datetime, datetime]:
    """
    Turn a club-local request into a UTC ``[start, end)`` interval.

    Raises:
        BookingRuleError: the club is closed, the wall-clock time does not
            exist, the slot lies in the past, or the booking does not fit
            inside opening hours.
        InvalidFormatError: malformed date or time.
    """
    if hours.is_closed:
        raise BookingRuleError(f"The club is closed on {date_str}")
    if not is_existing_local_time(date_str, start_time, tz):
        raise BookingRuleError(f"{date_str} {start_time} does not exist in {tz}")

    hour = int(start_time.split(":")[0])
    block = is_slot_blocked(date_str, hour, convert_utc_to_local(now, tz))
    if block.is_blocked:
        raise BookingRuleError("Cannot book a slot in the past")

    # Compared as instants: a DST switch inside the booking changes how many
    # wall-clock minutes it spans.
    start = convert_local_to_utc(date_str, start_time, tz)
    end = add_minutes_utc(start, duration_minutes)
    opens_at = _opening_instant(date_str, hours.open_hour, tz)
    closes_at = _opening_instant(date_str, hours.close_hour, tz)
    if start < opens_at or end > closes_at:
        raise BookingRuleError(
            f"Booking must fall within opening hours "
            f"{hours.open_hour:02d}:00-{hours.close_hour:02d}:00"
        )

    return start, end


def _opening_instant(date_str: str, hour: int, tz: str) -> datetime:
    """UTC instant of a whole opening-hours boundary; hour 24 is next-day midnight."""
    if hour == 24:
        next_day = create_utc_date(date_str, "00:00") + timedelta(days=1)
        return convert_local_to_utc(next_day.date().isoformat(), "00:00", tz)
    return convert_local_to_utc(date_str, f"{hour:02d}:00", tz)


def to_booking_response(booking: Booking, tz: str, now: datetime | None = None) -> BookingResponse:
    """Attach club-local rendering and the live status to a stored booking."""
    display = calculate_booking_status(booking.start, booking.end, booking.status, now)
    return BookingResponse(
        **booking.model_dump(),
        timezone=tz,
        local_date=format_utc_to_local(booking.start, tz, LocalFormat.DATE),
        local_start_time=format_utc_to_local(booking.start, tz, LocalFormat.TIME),
        local_end_time=format_utc_to_local(booking.end, tz, LocalFormat.TIME),
        display_status=display,
        status_label=status_label(display),
    )
