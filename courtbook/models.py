"""Pydantic models for the Courtbook API."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from courtbook.config import BOOKING_MAX_DURATION_MINUTES, BOOKING_MIN_DURATION_MINUTES

_DATE_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$"
_TIME_PATTERN = r"^([01][0-9]|2[0-3]):[0-5][0-9]$"


# ── Roles ──────────────────────────────────────────────────────────────────


class OrganizationRole(str, Enum):
    """Role held through an organization membership row."""

    ORGANIZATION_ADMIN = "ORGANIZATION_ADMIN"
    MEMBER = "MEMBER"


class ClubRole(str, Enum):
    """Role held through a club membership row."""

    CLUB_OWNER = "CLUB_OWNER"
    CLUB_ADMIN = "CLUB_ADMIN"
    MEMBER = "MEMBER"


class AdminType(str, Enum):
    """
    Resolved administrative classification of a user.

    Ordered by precedence; a user with none of these is represented by
    ``None``.
    """

    ROOT_ADMIN = "root_admin"
    ORGANIZATION_ADMIN = "organization_admin"
    CLUB_OWNER = "club_owner"
    CLUB_ADMIN = "club_admin"


class BookingStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    RESERVED = "reserved"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"


# ── Identity & users ───────────────────────────────────────────────────────


class Identity(BaseModel):
    """Who is calling: the result of decoding a session."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., description="Authenticated user id")
    is_root: bool = Field(default=False, description="Global super-admin marker")


class User(BaseModel):
    id: str
    email: str
    name: str | None = None
    is_root: bool = False
    is_blocked: bool = False
    created_at: datetime


class OrganizationMembership(BaseModel):
    user_id: str
    organization_id: str
    role: OrganizationRole
    is_primary_owner: bool = False


class ClubMembership(BaseModel):
    user_id: str
    club_id: str
    role: ClubRole


class AdminStatus(BaseModel):
    """Per-request view of a caller's admin role and the ids it covers."""

    model_config = ConfigDict(frozen=True)

    admin_type: AdminType | None = Field(None, description="Resolved admin type")
    managed_ids: list[str] = Field(
        default_factory=list,
        description="Organization ids (organization_admin) or club ids (club roles)",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_admin(self) -> bool:
        return self.admin_type is not None


# ── Organizations & clubs ──────────────────────────────────────────────────


class Organization(BaseModel):
    id: str
    name: str
    created_at: datetime


class OrganizationUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)


class BusinessHours(BaseModel):
    """Weekly opening hours for one weekday (0=Monday, 6=Sunday)."""

    day_of_week: int = Field(..., ge=0, le=6)
    open_hour: int = Field(..., ge=0, le=24)
    close_hour: int = Field(..., ge=0, le=24)
    is_closed: bool = False


class SpecialHours(BaseModel):
    """One-off override of opening hours for a specific club-local date."""

    date: str = Field(..., pattern=_DATE_PATTERN)
    open_hour: int | None = Field(None, ge=0, le=24)
    close_hour: int | None = Field(None, ge=0, le=24)
    is_closed: bool = False
    reason: str | None = None


class Club(BaseModel):
    id: str
    organization_id: str
    name: str
    timezone: str | None = Field(None, description="IANA timezone, platform default if unset")
    business_hours: list[BusinessHours] = Field(default_factory=list)
    created_at: datetime


class ClubUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=120)
    timezone: str | None = Field(None, description="IANA timezone identifier")


class Court(BaseModel):
    id: str
    club_id: str
    name: str
    surface_type: str | None = None
    court_type: str | None = None
    open_hour: int | None = Field(None, ge=0, le=24, description="Court-level opening override")
    close_hour: int | None = Field(None, ge=0, le=24, description="Court-level closing override")
    price_cents: int = 0


class PaymentKeys(BaseModel):
    club_id: str
    club_name: str
    wayforpay_key: str | None = None
    liqpay_key: str | None = None


class PaymentKeysUpdate(BaseModel):
    wayforpay_key: str | None = None
    liqpay_key: str | None = None

    @model_validator(mode="after")
    def _at_least_one_key(self) -> PaymentKeysUpdate:
        if not self.model_fields_set & {"wayforpay_key", "liqpay_key"}:
            raise ValueError("At least one payment key must be provided")
        return self


class ClubAdminAssign(BaseModel):
    user_id: str = Field(..., min_length=1)


class ClubAdmin(BaseModel):
    id: str
    name: str | None
    email: str


# ── Bookings & availability ────────────────────────────────────────────────


class Booking(BaseModel):
    id: str
    court_id: str
    club_id: str
    user_id: str
    start: datetime = Field(..., description="UTC start (inclusive)")
    end: datetime = Field(..., description="UTC end (exclusive)")
    status: BookingStatus
    price_cents: int = 0
    created_at: datetime


class BookingCreate(BaseModel):
    """A booking request in the club's local wall-clock time."""

    court_id: str = Field(..., min_length=1)
    date: str = Field(..., pattern=_DATE_PATTERN, description="Club-local date (YYYY-MM-DD)")
    start_time: str = Field(..., pattern=_TIME_PATTERN, description="Club-local start (HH:MM)")
    duration_minutes: int = Field(
        60,
        ge=BOOKING_MIN_DURATION_MINUTES,
        le=BOOKING_MAX_DURATION_MINUTES,
    )


class BookingResponse(Booking):
    """Booking enriched with its club-local rendering and live status."""

    timezone: str
    local_date: str
    local_start_time: str
    local_end_time: str
    display_status: BookingStatus
    status_label: str


class AvailabilitySlot(BaseModel):
    local_time: str = Field(..., description="Club-local start (HH:MM)")
    start: datetime
    end: datetime
    available: bool
    blocked: bool = False
    block_reason: str | None = None


class CourtAvailability(BaseModel):
    court_id: str
    date: str
    timezone: str
    open_hour: int
    close_hour: int
    slots: list[AvailabilitySlot]


# ── Shared responses ───────────────────────────────────────────────────────


class PaginationMeta(BaseModel):
    page: int
    page_size: int
    total_items: int
    total_pages: int


class ClubListResponse(BaseModel):
    items: list[Club]
    meta: PaginationMeta


class BookingListResponse(BaseModel):
    items: list[BookingResponse]
    meta: PaginationMeta


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str = Field(..., description="ok or degraded")
    version: str
    database: str = Field(..., description="ok or unavailable")
    timestamp: datetime
