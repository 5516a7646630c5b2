"""
Booking time arithmetic.

Two constructions must never be confused:

* ``create_utc_date("2026-01-06", "10:00")`` takes the literal digits as an
  instant that is *already* UTC (slot grids, fixtures).
* ``convert_local_to_utc("2026-01-06", "10:00", "Europe/Kyiv")`` reads the
  digits as a wall-clock time in the club's zone and returns the matching
  UTC instant (anything a person typed in).

Conflict and availability checks compare UTC instants only, using half-open
``[start, end)`` intervals so back-to-back bookings never collide.

DST: an ambiguous wall-clock reading (clocks going back) resolves to its
first occurrence; a reading inside a spring-forward gap is shifted forward
by the length of the gap.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import UTC, date, datetime, timedelta
from enum import Enum
from typing import NamedTuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError, available_timezones

logger = logging.getLogger(__name__)

DEFAULT_CLUB_TIMEZONE = "Europe/Kyiv"

# Zone keys from the system tz database and the tzdata package. `available_timezones`
# already skips the posix/ and right/ trees.
_IANA_ZONES = frozenset(available_timezones() - {"localtime", "posixrules"})

_DATE_RE = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")
_TIME_RE = re.compile(r"([01][0-9]|2[0-3]):([0-5][0-9])")
_UTC_INSTANT_RE = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2})"
    r"T([0-9]{2}):([0-9]{2}):([0-9]{2})"
    r"(?:\.([0-9]{1,3}))?Z"
)


class InvalidFormatError(ValueError):
    """A date, time or instant literal is malformed."""


class DayBounds(NamedTuple):
    start_of_day: datetime
    end_of_day: datetime


class LocalFormat(str, Enum):
    """strftime patterns for rendering an instant in a club's zone."""

    DATE = "%Y-%m-%d"
    TIME = "%H:%M"
    DATE_TIME = "%Y-%m-%d %H:%M"


class TimezoneOption(NamedTuple):
    value: str
    label: str
    region: str


COMMON_TIMEZONES: list[TimezoneOption] = [
    TimezoneOption("Europe/Kyiv", "Kyiv (EET/EEST)", "Europe"),
    TimezoneOption("Europe/Warsaw", "Warsaw (CET/CEST)", "Europe"),
    TimezoneOption("Europe/Berlin", "Berlin (CET/CEST)", "Europe"),
    TimezoneOption("Europe/Paris", "Paris (CET/CEST)", "Europe"),
    TimezoneOption("Europe/London", "London (GMT/BST)", "Europe"),
    TimezoneOption("Europe/Madrid", "Madrid (CET/CEST)", "Europe"),
    TimezoneOption("Europe/Vilnius", "Vilnius (EET/EEST)", "Europe"),
    TimezoneOption("Europe/Istanbul", "Istanbul (TRT)", "Europe"),
    TimezoneOption("America/New_York", "New York (ET)", "North America"),
    TimezoneOption("America/Chicago", "Chicago (CT)", "North America"),
    TimezoneOption("America/Denver", "Denver (MT)", "North America"),
    TimezoneOption("America/Los_Angeles", "Los Angeles (PT)", "North America"),
    TimezoneOption("America/Toronto", "Toronto (ET)", "North America"),
    TimezoneOption("America/Sao_Paulo", "Sao Paulo (BRT)", "South America"),
    TimezoneOption("Asia/Dubai", "Dubai (GST)", "Asia"),
    TimezoneOption("Asia/Kolkata", "Kolkata (IST)", "Asia"),
    TimezoneOption("Asia/Singapore", "Singapore (SGT)", "Asia"),
    TimezoneOption("Asia/Tokyo", "Tokyo (JST)", "Asia"),
    TimezoneOption("Australia/Sydney", "Sydney (AEST/AEDT)", "Oceania"),
    TimezoneOption("UTC", "Coordinated Universal Time", "UTC"),
]


# ── Literal parsing ───────────────────────────────────────────────────────


def _parse_date(date_str: str) -> date:
    match = _DATE_RE.fullmatch(date_str) if isinstance(date_str, str) else None
    if match is None:
        raise InvalidFormatError(
            f"Invalid date format: {date_str!r}. Expected YYYY-MM-DD"
        )
    year, month, day = (int(g) for g in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        raise InvalidFormatError(f"Invalid calendar date: {date_str!r}") from None


def _parse_time(time_str: str) -> tuple[int, int]:
    match = _TIME_RE.fullmatch(time_str) if isinstance(time_str, str) else None
    if match is None:
        raise InvalidFormatError(
            f"Invalid time format: {time_str!r}. Expected HH:MM (00:00-23:59)"
        )
    return int(match.group(1)), int(match.group(2))


def _as_utc(instant: datetime) -> datetime:
    # Naive datetimes coming out of storage are UTC by convention.
    if instant.tzinfo is None:
        return instant.replace(tzinfo=UTC)
    return instant.astimezone(UTC)


# ── UTC construction and arithmetic ───────────────────────────────────────


def create_utc_date(date_str: str, time_str: str) -> datetime:
    """
    Build a UTC instant whose UTC fields are exactly the given digits.

    This is *not* a timezone conversion; see ``convert_local_to_utc``.

    Raises:
        InvalidFormatError: if either literal is malformed or the date does
            not exist on the calendar.
    """
    day = _parse_date(date_str)
    hour, minute = _parse_time(time_str)
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=UTC)


def add_minutes_utc(instant: datetime, minutes: float) -> datetime:
    """Shift an instant by a (possibly day-spanning) number of minutes."""
    if (
        isinstance(minutes, bool)
        or not isinstance(minutes, (int, float))
        or not math.isfinite(minutes)
    ):
        raise ValueError(f"minutes must be a finite number, got {minutes!r}")
    try:
        return instant + timedelta(minutes=minutes)
    except OverflowError:
        raise ValueError(f"{minutes!r} minutes leaves the supported date range") from None


def do_ranges_overlap(
    start_a: datetime,
    end_a: datetime,
    start_b: datetime,
    end_b: datetime,
) -> bool:
    """
    True when the half-open intervals ``[start_a, end_a)`` and
    ``[start_b, end_b)`` share at least one instant.

    Intervals that only touch (``end_a == start_b``) do not overlap.
    """
    return start_a < end_b and start_b < end_a


def get_day_bounds(date_str: str) -> DayBounds:
    """Midnight and 23:59:59.999 UTC of the literal date."""
    start = create_utc_date(date_str, "00:00")
    end = start + timedelta(days=1) - timedelta(milliseconds=1)
    return DayBounds(start, end)


# ── ISO-8601 instant strings ──────────────────────────────────────────────


def is_valid_utc_instant_string(value: object) -> bool:
    """
    True only for ``YYYY-MM-DDTHH:MM:SS[.f{1,3}]Z`` strings that name a real
    calendar date and time. Numeric offsets (``+02:00``) are rejected.
    """
    if not isinstance(value, str):
        return False
    match = _UTC_INSTANT_RE.fullmatch(value)
    if match is None:
        return False
    year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
    try:
        datetime(year, month, day, hour, minute, second)
    except ValueError:
        return False
    return True


def parse_utc_instant_string(value: str) -> datetime:
    """Parse a string accepted by ``is_valid_utc_instant_string``."""
    if not is_valid_utc_instant_string(value):
        raise InvalidFormatError(
            f"Invalid UTC instant: {value!r}. Expected YYYY-MM-DDTHH:MM:SS(.sss)Z"
        )
    match = _UTC_INSTANT_RE.fullmatch(value)
    year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
    millis = int((match.group(7) or "0").ljust(3, "0"))
    return datetime(
        year, month, day, hour, minute, second, millis * 1000, tzinfo=UTC
    )


def to_iso_string(instant: datetime) -> str:
    """Render as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    utc = _as_utc(instant)
    return f"{utc:%Y-%m-%dT%H:%M:%S}.{utc.microsecond // 1000:03d}Z"


# ── Timezones ─────────────────────────────────────────────────────────────


def is_valid_iana_timezone(name: object) -> bool:
    """
    True when *name* is a zone key of the tz database.

    Host aliases that happen to load (``localtime``, ``posixrules``,
    ``right/UTC``) are not zone keys and are rejected.
    """
    if not isinstance(name, str) or name not in _IANA_ZONES:
        return False
    try:
        zone = ZoneInfo(name)
        datetime.now(UTC).astimezone(zone)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return False
    return True


def resolve_timezone(
    candidate: str | None,
    default: str = DEFAULT_CLUB_TIMEZONE,
) -> str:
    """
    Return *candidate* if it is a usable IANA zone, otherwise *default*.

    Offset strings such as ``UTC+2`` are not zones and are replaced. The
    substitution is logged at DEBUG level only; it never raises.
    """
    if not is_valid_iana_timezone(default):
        logger.warning(
            "Configured default timezone %r is invalid, using %s",
            default,
            DEFAULT_CLUB_TIMEZONE,
        )
        default = DEFAULT_CLUB_TIMEZONE

    if candidate is None or candidate == "":
        return default
    if is_valid_iana_timezone(candidate):
        return candidate

    logger.debug("Invalid club timezone %r, falling back to %s", candidate, default)
    return default


def _zone(iana_timezone: str | None, default: str) -> ZoneInfo:
    return ZoneInfo(resolve_timezone(iana_timezone, default))


def convert_local_to_utc(
    local_date_str: str,
    local_time_str: str,
    iana_timezone: str | None,
    *,
    default_timezone: str = DEFAULT_CLUB_TIMEZONE,
) -> datetime:
    """
    Interpret a club-local wall-clock reading and return the UTC instant.

    >>> convert_local_to_utc("2026-01-06", "10:00", "Europe/Kyiv").isoformat()
    '2026-01-06T08:00:00+00:00'
    """
    day = _parse_date(local_date_str)
    hour, minute = _parse_time(local_time_str)
    zone = _zone(iana_timezone, default_timezone)
    local = datetime(day.year, day.month, day.day, hour, minute, tzinfo=zone)
    return local.astimezone(UTC)


def convert_utc_to_local(
    utc_instant: datetime,
    iana_timezone: str | None,
    *,
    default_timezone: str = DEFAULT_CLUB_TIMEZONE,
) -> datetime:
    """Project a UTC instant into the club's zone (aware datetime)."""
    return _as_utc(utc_instant).astimezone(_zone(iana_timezone, default_timezone))


def format_utc_to_local(
    utc_instant: datetime | str,
    iana_timezone: str | None,
    pattern: LocalFormat | str = LocalFormat.DATE_TIME,
    *,
    default_timezone: str = DEFAULT_CLUB_TIMEZONE,
) -> str:
    """
    Render a UTC instant as club-local text.

    *utc_instant* may be an aware datetime or a ``...Z`` ISO string.
    *pattern* is a ``LocalFormat`` or any strftime pattern.
    """
    if isinstance(utc_instant, str):
        utc_instant = parse_utc_instant_string(utc_instant)
    local = convert_utc_to_local(
        utc_instant, iana_timezone, default_timezone=default_timezone
    )
    fmt = pattern.value if isinstance(pattern, LocalFormat) else pattern
    return local.strftime(fmt)


def get_local_date_string(
    utc_instant: datetime | str,
    iana_timezone: str | None,
    *,
    default_timezone: str = DEFAULT_CLUB_TIMEZONE,
) -> str:
    return format_utc_to_local(
        utc_instant, iana_timezone, LocalFormat.DATE, default_timezone=default_timezone
    )


def get_local_time_string(
    utc_instant: datetime | str,
    iana_timezone: str | None,
    *,
    default_timezone: str = DEFAULT_CLUB_TIMEZONE,
) -> str:
    return format_utc_to_local(
        utc_instant, iana_timezone, LocalFormat.TIME, default_timezone=default_timezone
    )


def local_day_bounds(
    local_date_str: str,
    iana_timezone: str | None,
    *,
    default_timezone: str = DEFAULT_CLUB_TIMEZONE,
) -> DayBounds:
    """
    UTC bounds of a club-local calendar day.

    The day is 23, 24 or 25 hours long depending on DST; ``end_of_day`` is
    one millisecond before the next local midnight.
    """
    day = _parse_date(local_date_str)
    next_day = (day + timedelta(days=1)).isoformat()
    start = convert_local_to_utc(
        local_date_str, "00:00", iana_timezone, default_timezone=default_timezone
    )
    next_start = convert_local_to_utc(
        next_day, "00:00", iana_timezone, default_timezone=default_timezone
    )
    return DayBounds(start, next_start - timedelta(milliseconds=1))


def is_existing_local_time(
    local_date_str: str,
    local_time_str: str,
    iana_timezone: str | None,
    *,
    default_timezone: str = DEFAULT_CLUB_TIMEZONE,
) -> bool:
    """False for wall-clock readings skipped by a spring-forward transition."""
    day = _parse_date(local_date_str)
    hour, minute = _parse_time(local_time_str)
    zone = _zone(iana_timezone, default_timezone)
    local = datetime(day.year, day.month, day.day, hour, minute, tzinfo=zone)
    round_trip = local.astimezone(UTC).astimezone(zone)
    return round_trip.replace(tzinfo=None) == local.replace(tzinfo=None)


def is_dst(
    utc_instant: datetime,
    iana_timezone: str | None,
    *,
    default_timezone: str = DEFAULT_CLUB_TIMEZONE,
) -> bool:
    local = convert_utc_to_local(
        utc_instant, iana_timezone, default_timezone=default_timezone
    )
    return bool(local.dst())


def get_today_in_club_timezone(
    iana_timezone: str | None,
    *,
    now: datetime | None = None,
    default_timezone: str = DEFAULT_CLUB_TIMEZONE,
) -> str:
    """Today's club-local date as ``YYYY-MM-DD``."""
    return get_local_date_string(
        now or datetime.now(UTC), iana_timezone, default_timezone=default_timezone
    )
