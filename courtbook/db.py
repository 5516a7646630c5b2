"""
SQLite database layer using aiosqlite.

Stores users, organizations, clubs, courts, memberships and bookings.
Tables are created automatically on first connect.

Booking instants are stored as fixed-width UTC strings
(``YYYY-MM-DDTHH:MM:SS.mmmZ``) so SQL string comparison orders them
correctly and the overlap check can run inside the database.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path
from uuid import uuid4

import aiosqlite

from courtbook.config import DB_PATH
from courtbook.models import (
    Booking,
    BookingStatus,
    BusinessHours,
    Club,
    ClubAdmin,
    ClubMembership,
    ClubRole,
    Court,
    Organization,
    OrganizationMembership,
    OrganizationRole,
    PaymentKeys,
    SpecialHours,
    User,
)
from courtbook.time_engine import parse_utc_instant_string, to_iso_string

logger = logging.getLogger(__name__)

# ── Module-level connection ───────────────────────────────────────────────

_db: aiosqlite.Connection | None = None
_write_lock: asyncio.Lock | None = None


async def init_db() -> None:
    """Open the database and create tables if they don't exist."""
    global _db, _write_lock
    db_path = Path(DB_PATH)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    _db = await aiosqlite.connect(str(db_path))
    _db.row_factory = aiosqlite.Row  # dict-like rows
    await _db.execute("PRAGMA journal_mode=WAL")
    await _db.execute("PRAGMA foreign_keys=ON")

    await _db.executescript(_SCHEMA)
    await _db.commit()
    _write_lock = asyncio.Lock()
    logger.info("Database initialized at %s", db_path)


async def close_db() -> None:
    """Close the database connection."""
    global _db, _write_lock
    if _db is not None:
        await _db.close()
        _db = None
        _write_lock = None
        logger.info("Database connection closed")


def get_db() -> aiosqlite.Connection:
    """Return the active database connection (must call init_db first)."""
    assert _db is not None, "Database not initialized, call init_db() first"
    return _db


async def ping() -> None:
    """Round-trip a trivial query; raises if the connection is unusable."""
    if _db is None:
        raise aiosqlite.OperationalError("database connection is closed")
    async with _db.execute("SELECT 1") as cur:
        await cur.fetchone()


@asynccontextmanager
async def _transaction(*, immediate: bool = False) -> AsyncIterator[aiosqlite.Connection]:
    """
    Serialize a unit of writes on the shared connection.

    With ``immediate=True`` the write lock on the database file is taken up
    front, so a check-then-insert cannot interleave with another writer.
    """
    db = get_db()
    assert _write_lock is not None
    async with _write_lock:
        if immediate:
            await db.execute("BEGIN IMMEDIATE")
        try:
            yield db
        except BaseException:
            await db.rollback()
            raise
        await db.commit()


# ── Schema ────────────────────────────────────────────────────────────────

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id              TEXT PRIMARY KEY,
    email           TEXT NOT NULL UNIQUE,
    name            TEXT,
    is_root         INTEGER NOT NULL DEFAULT 0,
    is_blocked      INTEGER NOT NULL DEFAULT 0,
    created_at      TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS organizations (
    id              TEXT PRIMARY KEY,
    name            TEXT NOT NULL,
    created_at      TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS organization_memberships (
    user_id          TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    organization_id  TEXT NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
    role             TEXT NOT NULL,   -- ORGANIZATION_ADMIN | MEMBER
    is_primary_owner INTEGER NOT NULL DEFAULT 0,
    created_at       TEXT NOT NULL,
    UNIQUE (user_id, organization_id)
);

CREATE TABLE IF NOT EXISTS clubs (
    id              TEXT PRIMARY KEY,
    organization_id TEXT NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
    name            TEXT NOT NULL,
    timezone        TEXT,             -- IANA zone, NULL = platform default
    wayforpay_key   TEXT,
    liqpay_key      TEXT,
    created_at      TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_clubs_org ON clubs(organization_id);

CREATE TABLE IF NOT EXISTS club_business_hours (
    club_id         TEXT NOT NULL REFERENCES clubs(id) ON DELETE CASCADE,
    day_of_week     INTEGER NOT NULL, -- 0 = Monday
    open_hour       INTEGER NOT NULL,
    close_hour      INTEGER NOT NULL,
    is_closed       INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (club_id, day_of_week)
);

CREATE TABLE IF NOT EXISTS club_special_hours (
    club_id         TEXT NOT NULL REFERENCES clubs(id) ON DELETE CASCADE,
    date            TEXT NOT NULL,    -- club-local YYYY-MM-DD
    open_hour       INTEGER,
    close_hour      INTEGER,
    is_closed       INTEGER NOT NULL DEFAULT 0,
    reason          TEXT,
    UNIQUE (club_id, date)
);

CREATE TABLE IF NOT EXISTS club_memberships (
    user_id         TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    club_id         TEXT NOT NULL REFERENCES clubs(id) ON DELETE CASCADE,
    role            TEXT NOT NULL,    -- CLUB_OWNER | CLUB_ADMIN | MEMBER
    created_at      TEXT NOT NULL,
    UNIQUE (user_id, club_id)
);

CREATE TABLE IF NOT EXISTS courts (
    id              TEXT PRIMARY KEY,
    club_id         TEXT NOT NULL REFERENCES clubs(id) ON DELETE CASCADE,
    name            TEXT NOT NULL,
    surface_type    TEXT,
    court_type      TEXT,
    open_hour       INTEGER,
    close_hour      INTEGER,
    price_cents     INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS bookings (
    id              TEXT PRIMARY KEY,
    court_id        TEXT NOT NULL REFERENCES courts(id) ON DELETE CASCADE,
    club_id         TEXT NOT NULL REFERENCES clubs(id) ON DELETE CASCADE,
    user_id         TEXT NOT NULL REFERENCES users(id),
    start_at        TEXT NOT NULL,    -- UTC, inclusive
    end_at          TEXT NOT NULL,    -- UTC, exclusive
    status          TEXT NOT NULL,
    price_cents     INTEGER NOT NULL DEFAULT 0,
    created_at      TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_bookings_court ON bookings(court_id, start_at);
CREATE INDEX IF NOT EXISTS idx_bookings_club ON bookings(club_id, start_at);
"""

_TERMINAL_STATUSES = (
    BookingStatus.CANCELLED.value,
    BookingStatus.COMPLETED.value,
    BookingStatus.NO_SHOW.value,
)


# ── Helpers ───────────────────────────────────────────────────────────────


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _row_to_user(row: aiosqlite.Row) -> User:
    return User(
        id=row["id"],
        email=row["email"],
        name=row["name"],
        is_root=bool(row["is_root"]),
        is_blocked=bool(row["is_blocked"]),
        created_at=row["created_at"],
    )


def _row_to_booking(row: aiosqlite.Row) -> Booking:
    return Booking(
        id=row["id"],
        court_id=row["court_id"],
        club_id=row["club_id"],
        user_id=row["user_id"],
        start=parse_utc_instant_string(row["start_at"]),
        end=parse_utc_instant_string(row["end_at"]),
        status=BookingStatus(row["status"]),
        price_cents=row["price_cents"],
        created_at=row["created_at"],
    )


def _row_to_court(row: aiosqlite.Row) -> Court:
    return Court(
        id=row["id"],
        club_id=row["club_id"],
        name=row["name"],
        surface_type=row["surface_type"],
        court_type=row["court_type"],
        open_hour=row["open_hour"],
        close_hour=row["close_hour"],
        price_cents=row["price_cents"],
    )


# ══════════════════════════════════════════════════════════════════════════
#                    USERS
# ══════════════════════════════════════════════════════════════════════════


async def create_user(
    email: str,
    *,
    name: str | None = None,
    is_root: bool = False,
    user_id: str | None = None,
) -> User:
    """Insert a new user and return it."""
    user_id = user_id or str(uuid4())
    async with _transaction() as db:
        await db.execute(
            "INSERT INTO users (id, email, name, is_root, is_blocked, created_at) "
            "VALUES (?, ?, ?, ?, 0, ?)",
            (user_id, email.lower(), name, int(is_root), _now_iso()),
        )
    return await get_user(user_id)  # type: ignore[return-value]


async def get_user(user_id: str) -> User | None:
    db = get_db()
    async with db.execute("SELECT * FROM users WHERE id = ?", (user_id,)) as cur:
        row = await cur.fetchone()
    return _row_to_user(row) if row else None


async def set_user_flags(
    user_id: str,
    *,
    is_root: bool | None = None,
    is_blocked: bool | None = None,
) -> User | None:
    """Flip the root and/or blocked flags of a user."""
    async with _transaction() as db:
        if is_root is not None:
            await db.execute(
                "UPDATE users SET is_root = ? WHERE id = ?", (int(is_root), user_id)
            )
        if is_blocked is not None:
            await db.execute(
                "UPDATE users SET is_blocked = ? WHERE id = ?", (int(is_blocked), user_id)
            )
    return await get_user(user_id)


# ══════════════════════════════════════════════════════════════════════════
#                    ORGANIZATIONS
# ══════════════════════════════════════════════════════════════════════════


async def create_organization(name: str, *, organization_id: str | None = None) -> Organization:
    organization_id = organization_id or str(uuid4())
    async with _transaction() as db:
        await db.execute(
            "INSERT INTO organizations (id, name, created_at) VALUES (?, ?, ?)",
            (organization_id, name, _now_iso()),
        )
    return await get_organization(organization_id)  # type: ignore[return-value]


async def get_organization(organization_id: str) -> Organization | None:
    db = get_db()
    async with db.execute(
        "SELECT * FROM organizations WHERE id = ?", (organization_id,)
    ) as cur:
        row = await cur.fetchone()
    if row is None:
        return None
    return Organization(id=row["id"], name=row["name"], created_at=row["created_at"])


async def update_organization(organization_id: str, *, name: str) -> Organization | None:
    async with _transaction() as db:
        await db.execute(
            "UPDATE organizations SET name = ? WHERE id = ?", (name, organization_id)
        )
    return await get_organization(organization_id)


async def add_organization_member(
    organization_id: str,
    user_id: str,
    role: OrganizationRole,
    *,
    is_primary_owner: bool = False,
) -> OrganizationMembership:
    """Insert or update the single membership row of a user in an organization."""
    async with _transaction() as db:
        await db.execute(
            """
            INSERT INTO organization_memberships
                (user_id, organization_id, role, is_primary_owner, created_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT (user_id, organization_id)
            DO UPDATE SET role = excluded.role, is_primary_owner = excluded.is_primary_owner
            """,
            (user_id, organization_id, role.value, int(is_primary_owner), _now_iso()),
        )
    return OrganizationMembership(
        user_id=user_id,
        organization_id=organization_id,
        role=role,
        is_primary_owner=is_primary_owner,
    )


async def list_organization_memberships(user_id: str) -> list[OrganizationMembership]:
    db = get_db()
    async with db.execute(
        "SELECT * FROM organization_memberships WHERE user_id = ? ORDER BY created_at",
        (user_id,),
    ) as cur:
        rows = await cur.fetchall()
    return [
        OrganizationMembership(
            user_id=r["user_id"],
            organization_id=r["organization_id"],
            role=OrganizationRole(r["role"]),
            is_primary_owner=bool(r["is_primary_owner"]),
        )
        for r in rows
    ]


# ══════════════════════════════════════════════════════════════════════════
#                    CLUBS
# ══════════════════════════════════════════════════════════════════════════


async def create_club(
    organization_id: str,
    name: str,
    *,
    timezone_name: str | None = None,
    club_id: str | None = None,
) -> Club:
    club_id = club_id or str(uuid4())
    async with _transaction() as db:
        await db.execute(
            "INSERT INTO clubs (id, organization_id, name, timezone, created_at) "
            "VALUES (?, ?, ?, ?, ?)",
            (club_id, organization_id, name, timezone_name, _now_iso()),
        )
    return await get_club(club_id)  # type: ignore[return-value]


async def _list_business_hours(club_id: str) -> list[BusinessHours]:
    db = get_db()
    async with db.execute(
        "SELECT * FROM club_business_hours WHERE club_id = ? ORDER BY day_of_week",
        (club_id,),
    ) as cur:
        rows = await cur.fetchall()
    return [
        BusinessHours(
            day_of_week=r["day_of_week"],
            open_hour=r["open_hour"],
            close_hour=r["close_hour"],
            is_closed=bool(r["is_closed"]),
        )
        for r in rows
    ]


async def get_club(club_id: str) -> Club | None:
    """Fetch a club together with its weekly schedule."""
    db = get_db()
    async with db.execute("SELECT * FROM clubs WHERE id = ?", (club_id,)) as cur:
        row = await cur.fetchone()
    if row is None:
        return None
    return Club(
        id=row["id"],
        organization_id=row["organization_id"],
        name=row["name"],
        timezone=row["timezone"],
        business_hours=await _list_business_hours(club_id),
        created_at=row["created_at"],
    )


async def get_club_organization_id(club_id: str) -> str | None:
    """Return the owning organization of a club, or None if the club is unknown."""
    db = get_db()
    async with db.execute(
        "SELECT organization_id FROM clubs WHERE id = ?", (club_id,)
    ) as cur:
        row = await cur.fetchone()
    return row["organization_id"] if row else None


async def list_clubs_by_organization(organization_id: str) -> list[Club]:
    db = get_db()
    async with db.execute(
        "SELECT id FROM clubs WHERE organization_id = ? ORDER BY name", (organization_id,)
    ) as cur:
        rows = await cur.fetchall()
    clubs = [await get_club(r["id"]) for r in rows]
    return [c for c in clubs if c is not None]


async def update_club(
    club_id: str,
    *,
    name: str | None = None,
    timezone_name: str | None = None,
) -> Club | None:
    async with _transaction() as db:
        if name is not None:
            await db.execute("UPDATE clubs SET name = ? WHERE id = ?", (name, club_id))
        if timezone_name is not None:
            await db.execute(
                "UPDATE clubs SET timezone = ? WHERE id = ?", (timezone_name, club_id)
            )
    return await get_club(club_id)


async def set_business_hours(club_id: str, hours: list[BusinessHours]) -> None:
    """Replace the weekly schedule of a club."""
    async with _transaction() as db:
        await db.execute("DELETE FROM club_business_hours WHERE club_id = ?", (club_id,))
        await db.executemany(
            "INSERT INTO club_business_hours "
            "(club_id, day_of_week, open_hour, close_hour, is_closed) VALUES (?, ?, ?, ?, ?)",
            [
                (club_id, h.day_of_week, h.open_hour, h.close_hour, int(h.is_closed))
                for h in hours
            ],
        )


async def set_special_hours(club_id: str, special: SpecialHours) -> None:
    async with _transaction() as db:
        await db.execute(
            """
            INSERT INTO club_special_hours
                (club_id, date, open_hour, close_hour, is_closed, reason)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT (club_id, date) DO UPDATE SET
                open_hour = excluded.open_hour,
                close_hour = excluded.close_hour,
                is_closed = excluded.is_closed,
                reason = excluded.reason
            """,
            (
                club_id, special.date, special.open_hour, special.close_hour,
                int(special.is_closed), special.reason,
            ),
        )


async def get_special_hours(club_id: str, date_str: str) -> SpecialHours | None:
    db = get_db()
    async with db.execute(
        "SELECT * FROM club_special_hours WHERE club_id = ? AND date = ?",
        (club_id, date_str),
    ) as cur:
        row = await cur.fetchone()
    if row is None:
        return None
    return SpecialHours(
        date=row["date"],
        open_hour=row["open_hour"],
        close_hour=row["close_hour"],
        is_closed=bool(row["is_closed"]),
        reason=row["reason"],
    )


async def get_payment_keys(club_id: str) -> PaymentKeys | None:
    db = get_db()
    async with db.execute(
        "SELECT id, name, wayforpay_key, liqpay_key FROM clubs WHERE id = ?", (club_id,)
    ) as cur:
        row = await cur.fetchone()
    if row is None:
        return None
    return PaymentKeys(
        club_id=row["id"],
        club_name=row["name"],
        wayforpay_key=row["wayforpay_key"],
        liqpay_key=row["liqpay_key"],
    )


async def update_payment_keys(club_id: str, keys: dict[str, str | None]) -> PaymentKeys | None:
    """Update only the payment key columns present in *keys*."""
    columns = [c for c in ("wayforpay_key", "liqpay_key") if c in keys]
    if columns:
        assignments = ", ".join(f"{c} = ?" for c in columns)
        async with _transaction() as db:
            await db.execute(
                f"UPDATE clubs SET {assignments} WHERE id = ?",
                (*(keys[c] for c in columns), club_id),
            )
    return await get_payment_keys(club_id)


# ══════════════════════════════════════════════════════════════════════════
#                    CLUB MEMBERSHIPS
# ══════════════════════════════════════════════════════════════════════════


async def add_club_member(club_id: str, user_id: str, role: ClubRole) -> ClubMembership:
    """Insert or update the single membership row of a user in a club."""
    async with _transaction() as db:
        await db.execute(
            """
            INSERT INTO club_memberships (user_id, club_id, role, created_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT (user_id, club_id) DO UPDATE SET role = excluded.role
            """,
            (user_id, club_id, role.value, _now_iso()),
        )
    return ClubMembership(user_id=user_id, club_id=club_id, role=role)


async def list_club_memberships(user_id: str) -> list[ClubMembership]:
    db = get_db()
    async with db.execute(
        "SELECT * FROM club_memberships WHERE user_id = ? ORDER BY created_at",
        (user_id,),
    ) as cur:
        rows = await cur.fetchall()
    return [
        ClubMembership(user_id=r["user_id"], club_id=r["club_id"], role=ClubRole(r["role"]))
        for r in rows
    ]


async def list_club_admins(club_id: str) -> list[ClubAdmin]:
    db = get_db()
    async with db.execute(
        """
        SELECT u.id, u.name, u.email FROM club_memberships m
        JOIN users u ON u.id = m.user_id
        WHERE m.club_id = ? AND m.role = ?
        ORDER BY m.created_at
        """,
        (club_id, ClubRole.CLUB_ADMIN.value),
    ) as cur:
        rows = await cur.fetchall()
    return [ClubAdmin(id=r["id"], name=r["name"], email=r["email"]) for r in rows]


async def remove_club_admin(club_id: str, user_id: str) -> bool:
    """Drop a CLUB_ADMIN row. Returns True if one was actually deleted."""
    async with _transaction() as db:
        cur = await db.execute(
            "DELETE FROM club_memberships WHERE club_id = ? AND user_id = ? AND role = ?",
            (club_id, user_id, ClubRole.CLUB_ADMIN.value),
        )
    return cur.rowcount > 0


# ══════════════════════════════════════════════════════════════════════════
#                    COURTS
# ══════════════════════════════════════════════════════════════════════════


async def create_court(
    club_id: str,
    name: str,
    *,
    surface_type: str | None = None,
    court_type: str | None = None,
    open_hour: int | None = None,
    close_hour: int | None = None,
    price_cents: int = 0,
    court_id: str | None = None,
) -> Court:
    court_id = court_id or str(uuid4())
    async with _transaction() as db:
        await db.execute(
            """
            INSERT INTO courts
                (id, club_id, name, surface_type, court_type, open_hour, close_hour, price_cents)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (court_id, club_id, name, surface_type, court_type, open_hour, close_hour, price_cents),
        )
    return await get_court(court_id)  # type: ignore[return-value]


async def get_court(court_id: str) -> Court | None:
    db = get_db()
    async with db.execute("SELECT * FROM courts WHERE id = ?", (court_id,)) as cur:
        row = await cur.fetchone()
    return _row_to_court(row) if row else None


# ══════════════════════════════════════════════════════════════════════════
#                    BOOKINGS
# ══════════════════════════════════════════════════════════════════════════


async def create_booking_if_free(
    *,
    court_id: str,
    club_id: str,
    user_id: str,
    start: datetime,
    end: datetime,
    status: BookingStatus = BookingStatus.RESERVED,
    price_cents: int = 0,
) -> Booking | None:
    """
    Insert a booking unless a non-cancelled booking on the same court
    overlaps ``[start, end)``. Returns None on conflict.

    The check and the insert run in one IMMEDIATE transaction.
    """
    booking_id = str(uuid4())
    start_iso, end_iso = to_iso_string(start), to_iso_string(end)

    async with _transaction(immediate=True) as db:
        async with db.execute(
            """
            SELECT id FROM bookings
            WHERE court_id = ? AND status != ? AND start_at < ? AND ? < end_at
            LIMIT 1
            """,
            (court_id, BookingStatus.CANCELLED.value, end_iso, start_iso),
        ) as cur:
            clash = await cur.fetchone()
        if clash is not None:
            logger.info(
                "Booking on court %s for [%s, %s) conflicts with %s",
                court_id, start_iso, end_iso, clash["id"],
            )
            return None

        await db.execute(
            """
            INSERT INTO bookings
                (id, court_id, club_id, user_id, start_at, end_at, status, price_cents, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                booking_id, court_id, club_id, user_id, start_iso, end_iso,
                status.value, price_cents, _now_iso(),
            ),
        )
    return await get_booking(booking_id)


async def get_booking(booking_id: str) -> Booking | None:
    db = get_db()
    async with db.execute("SELECT * FROM bookings WHERE id = ?", (booking_id,)) as cur:
        row = await cur.fetchone()
    return _row_to_booking(row) if row else None


async def list_court_bookings(court_id: str, start: datetime, end: datetime) -> list[Booking]:
    """Non-cancelled bookings on a court overlapping ``[start, end)``."""
    db = get_db()
    async with db.execute(
        """
        SELECT * FROM bookings
        WHERE court_id = ? AND status != ? AND start_at < ? AND ? < end_at
        ORDER BY start_at
        """,
        (court_id, BookingStatus.CANCELLED.value, to_iso_string(end), to_iso_string(start)),
    ) as cur:
        rows = await cur.fetchall()
    return [_row_to_booking(r) for r in rows]


async def list_club_bookings(club_id: str, start: datetime, end: datetime) -> list[Booking]:
    """All bookings of a club (any status) overlapping ``[start, end)``."""
    db = get_db()
    async with db.execute(
        """
        SELECT * FROM bookings
        WHERE club_id = ? AND start_at < ? AND ? < end_at
        ORDER BY start_at
        """,
        (club_id, to_iso_string(end), to_iso_string(start)),
    ) as cur:
        rows = await cur.fetchall()
    return [_row_to_booking(r) for r in rows]


async def cancel_booking(booking_id: str) -> Booking | None:
    async with _transaction() as db:
        await db.execute(
            "UPDATE bookings SET status = ? WHERE id = ?",
            (BookingStatus.CANCELLED.value, booking_id),
        )
    return await get_booking(booking_id)


async def list_ended_open_bookings(now: datetime) -> list[Booking]:
    """Bookings whose end has passed but which are not in a terminal state."""
    db = get_db()
    placeholders = ", ".join("?" for _ in _TERMINAL_STATUSES)
    async with db.execute(
        f"SELECT * FROM bookings WHERE end_at <= ? AND status NOT IN ({placeholders})",
        (to_iso_string(now), *_TERMINAL_STATUSES),
    ) as cur:
        rows = await cur.fetchall()
    return [_row_to_booking(r) for r in rows]


async def mark_bookings_completed(booking_ids: list[str]) -> int:
    """Set status=completed for the given ids. Returns the number updated."""
    if not booking_ids:
        return 0
    placeholders = ", ".join("?" for _ in booking_ids)
    async with _transaction() as db:
        cur = await db.execute(
            f"UPDATE bookings SET status = ? WHERE id IN ({placeholders})",
            (BookingStatus.COMPLETED.value, *booking_ids),
        )
    return cur.rowcount


# ══════════════════════════════════════════════════════════════════════════
#                    MEMBERSHIP REPOSITORY
# ══════════════════════════════════════════════════════════════════════════


class DatabaseMembershipRepository:
    """Read-only membership lookups backed by this module."""

    async def find_organization_memberships(self, user_id: str) -> list[OrganizationMembership]:
        return await list_organization_memberships(user_id)

    async def find_club_memberships(self, user_id: str) -> list[ClubMembership]:
        return await list_club_memberships(user_id)

    async def find_club_parent_organization(self, club_id: str) -> str | None:
        return await get_club_organization_id(club_id)
